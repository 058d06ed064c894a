"""
Template Registry
=================

Lookup of built-in and saved (brand or user) templates. Saved templates
are treated exactly like built-ins.
"""

import logging
from typing import Dict, List, Optional, Union

from ..errors import TemplateNotFound
from ..models.canvas_models import CanvasTemplate, TemplateCategory
from ..models.generation_models import TemplateAnalysis
from .analyzer import analyze_template
from .builtin_templates import builtin_templates

logger = logging.getLogger(__name__)


class TemplateRegistry:
    """Registry of carousel templates keyed by id, in registration order."""

    def __init__(self, include_builtins: bool = True):
        self._templates: Dict[str, CanvasTemplate] = {}
        if include_builtins:
            for template in builtin_templates():
                self._templates[template.id] = template

    def register(self, template: CanvasTemplate) -> None:
        """Add or replace a template (saved templates, brand kits)."""
        if template.id in self._templates:
            logger.info(f"[TEMPLATES] Replacing template {template.id}")
        self._templates[template.id] = template

    def unregister(self, template_id: str) -> None:
        if self._templates.pop(template_id, None) is None:
            raise TemplateNotFound(template_id)

    def list_templates(
        self,
        category: Optional[Union[TemplateCategory, str]] = None
    ) -> List[CanvasTemplate]:
        """All templates, optionally filtered by category."""
        if category is None:
            return list(self._templates.values())
        category = TemplateCategory(category)
        return [t for t in self._templates.values() if t.category == category]

    def get_template(self, template_id: str) -> CanvasTemplate:
        try:
            return self._templates[template_id]
        except KeyError:
            raise TemplateNotFound(template_id) from None

    def get_template_categories(self) -> List[TemplateCategory]:
        """Unique categories in first-seen order."""
        categories: List[TemplateCategory] = []
        for template in self._templates.values():
            if template.category not in categories:
                categories.append(template.category)
        return categories

    def analyze(self, template_id: str) -> TemplateAnalysis:
        return analyze_template(self.get_template(template_id))

    def __contains__(self, template_id: str) -> bool:
        return template_id in self._templates

    def __len__(self) -> int:
        return len(self._templates)


# Process-wide registry used by the module-level helpers below.
# reset_registry() restores it to built-ins only.
_registry = TemplateRegistry()


def get_registry() -> TemplateRegistry:
    return _registry


def reset_registry() -> TemplateRegistry:
    global _registry
    _registry = TemplateRegistry()
    return _registry


def list_templates(category: Optional[Union[TemplateCategory, str]] = None) -> List[CanvasTemplate]:
    return _registry.list_templates(category)


def get_template(template_id: str) -> CanvasTemplate:
    return _registry.get_template(template_id)
