"""
AI Routes
=========

API route for filling a carousel template with AI-generated content.
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Depends

from ..canvas.editor import GENERATION
from ..canvas.state_manager import StateManager
from ..errors import CarouselStudioError
from ..models.generation_models import CarouselGenerationInput
from ..services.carousel_generator import CarouselGenerator
from ..templates.registry import get_registry
from .errors import http_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ai", tags=["ai"])

# Injected by server
state_manager: Optional[StateManager] = None
carousel_generator: Optional[CarouselGenerator] = None


class CarouselRequest(CarouselGenerationInput):
    """Generation inputs plus the template to fill (the session's template by default)."""
    template_id: Optional[str] = None


def get_state_manager() -> StateManager:
    if not state_manager:
        raise HTTPException(500, "State manager not initialized")
    return state_manager


def get_carousel_generator() -> CarouselGenerator:
    if not carousel_generator:
        raise HTTPException(500, "Carousel generator not initialized")
    return carousel_generator


@router.post("/carousel/{session_id}")
async def generate_carousel(
    session_id: str,
    request: CarouselRequest,
    sm: StateManager = Depends(get_state_manager),
    generator: CarouselGenerator = Depends(get_carousel_generator)
):
    """
    Fill a template with generated text and replace the session's slides.

    The document changes only after a complete, successful build.
    """
    editor = sm.get_editor(session_id)
    if editor is None:
        raise HTTPException(status_code=404, detail="Session not found")

    try:
        if request.template_id:
            template = get_registry().get_template(request.template_id)
        elif editor.template is not None:
            template = editor.template
        else:
            raise HTTPException(status_code=422, detail="No template selected for this session")

        generation_input = CarouselGenerationInput.model_validate(
            request.model_dump(exclude={"template_id"})
        )
        with editor.exclusive(GENERATION):
            result = await generator.generate(template, generation_input)

        editor.apply_generated(result)
        editor.template = template
    except CarouselStudioError as e:
        raise http_error(e) from e

    sm.save_session(session_id)
    logger.info(
        f"[AI-ROUTES] Session {session_id}: generated {result.filled_slots}/{result.total_slots} "
        f"content areas from {template.id}"
    )
    return {
        "success": True,
        "filled_slots": result.filled_slots,
        "total_slots": result.total_slots,
        "warnings": result.warnings,
        "quality": result.quality.model_dump() if result.quality else None,
        "state": sm.get_session(session_id),
    }
