"""
Template Routes
===============

API routes for browsing, analyzing and generating carousel templates.
"""

import logging
from typing import Optional

from fastapi import APIRouter

from ..errors import CarouselStudioError
from ..models.canvas_models import BrandKit, TemplateCategory
from ..templates.analyzer import get_template_structure_summary
from ..templates.brand_kit import generate_brand_kit_templates
from ..templates.registry import get_registry
from .errors import http_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/templates", tags=["templates"])


@router.get("")
async def list_templates(category: Optional[TemplateCategory] = None):
    """Template summaries, optionally filtered by category."""
    templates = get_registry().list_templates(category)
    return {
        "templates": [
            {
                "id": t.id,
                "name": t.name,
                "category": t.category.value,
                "description": t.description,
                "slide_count": len(t.default_slides),
                "brand_colors": t.brand_colors,
                "fonts": t.fonts,
                "is_favorite": t.is_favorite,
            }
            for t in templates
        ],
        "count": len(templates),
    }


@router.get("/categories")
async def get_categories():
    return {"categories": [c.value for c in get_registry().get_template_categories()]}


@router.post("/brand-kit")
async def generate_brand_templates(kit: BrandKit):
    """Generate and register brand templates from a brand kit."""
    try:
        templates = generate_brand_kit_templates(kit)
    except ValueError as e:
        raise http_error(e) from e

    registry = get_registry()
    for template in templates:
        registry.register(template)
    return {"template_ids": [t.id for t in templates]}


@router.get("/{template_id}")
async def get_template(template_id: str):
    try:
        template = get_registry().get_template(template_id)
    except CarouselStudioError as e:
        raise http_error(e) from e
    return template.model_dump(mode="json")


@router.get("/{template_id}/analysis")
async def analyze(template_id: str):
    """Slot analysis of a template, with a readable structure summary."""
    try:
        analysis = get_registry().analyze(template_id)
    except CarouselStudioError as e:
        raise http_error(e) from e
    return {
        **analysis.model_dump(mode="json"),
        "summary": get_template_structure_summary(analysis),
    }
