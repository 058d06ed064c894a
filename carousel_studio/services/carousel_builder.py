"""
Carousel Builder
================

Builds canvas slides from AI-generated slot content. Only the text of the
resolved element changes; geometry and style stay exactly as the template
defines them.
"""

import logging
import re
from typing import Dict, List, Optional, Tuple

from ..models.canvas_models import CanvasTemplate, Slide, TextElement, clone_slide
from ..models.generation_models import (
    CarouselBuildResult, ContentQualityScore, GeneratedSlotContent, TemplateAnalysis
)

logger = logging.getLogger(__name__)

_SLOT_ID = re.compile(r"^slot-(\d+)-(.+)$")


def _content_map(generated_content: List[GeneratedSlotContent]) -> Dict[str, str]:
    # Later entries for the same slot win
    return {item.slot_id: item.content for item in generated_content}


def parse_slot_id(slot_id: str) -> Optional[Tuple[int, str]]:
    """(slide_index, element_id) encoded in a slot id, or None."""
    match = _SLOT_ID.match(slot_id)
    if not match:
        return None
    return int(match.group(1)), match.group(2)


def build_slides_from_content(
    template: CanvasTemplate,
    analysis: TemplateAnalysis,
    generated_content: List[GeneratedSlotContent]
) -> CarouselBuildResult:
    """
    Build slides from generated content.

    The template's slides are deep-cloned with fresh ids; for every slot
    with generated content, the text of its element is replaced. The
    template itself is never modified.

    Args:
        template: Template the analysis was computed from
        analysis: Slot definitions
        generated_content: Generated text per slot id

    Returns:
        CarouselBuildResult with slides and fill statistics; unknown slot ids
        are reported in warnings
    """
    content = _content_map(generated_content)
    slot_map = analysis.slot_map()
    warnings = [f"slot {slot_id} not found" for slot_id in content if slot_id not in slot_map]

    # (slide_index, element_id) -> new text
    replacements: Dict[Tuple[int, str], str] = {}
    for slot in analysis.slots:
        if slot.id in content:
            replacements[(slot.slide_index, slot.element_id)] = content[slot.id]

    slides: List[Slide] = []
    filled = 0
    for slide_index, slide in enumerate(template.default_slides):
        elements = []
        for element in slide.elements:
            key = (slide_index, element.id)
            if isinstance(element, TextElement) and key in replacements:
                element = element.model_copy(update={"text": replacements[key]})
                filled += 1
            elements.append(element)
        slides.append(clone_slide(slide.model_copy(update={"elements": elements})))

    if warnings:
        logger.warning(f"[CAROUSEL-BUILDER] {len(warnings)} unmatched slot(s): {warnings}")
    logger.info(f"[CAROUSEL-BUILDER] Filled {filled}/{analysis.total_slots} slots for {template.id}")

    return CarouselBuildResult(
        slides=slides,
        filled_slots=filled,
        total_slots=analysis.total_slots,
        warnings=warnings
    )


def merge_generated_content(
    existing_slides: List[Slide],
    new_content: List[GeneratedSlotContent],
    slots_to_update: List[str]
) -> List[Slide]:
    """
    Apply regenerated text to selected slots of already-edited slides.

    Slides and elements keep their ids; only slots listed in slots_to_update
    and present in new_content change.
    """
    allowed = set(slots_to_update)
    targets: Dict[Tuple[int, str], str] = {}
    for slot_id, text in _content_map(new_content).items():
        if slot_id not in allowed:
            continue
        parsed = parse_slot_id(slot_id)
        if parsed is None:
            logger.warning(f"[CAROUSEL-BUILDER] Ignoring malformed slot id {slot_id}")
            continue
        targets[parsed] = text

    merged: List[Slide] = []
    for slide_index, slide in enumerate(existing_slides):
        elements = []
        for element in slide.elements:
            key = (slide_index, element.id)
            if isinstance(element, TextElement) and key in targets:
                elements.append(element.model_copy(update={"text": targets[key]}, deep=True))
            else:
                elements.append(element.model_copy(deep=True))
        merged.append(slide.model_copy(update={"elements": elements}))
    return merged


def _length_score(ratio: float) -> int:
    if 0.5 <= ratio <= 0.9:
        return 100
    if 0.3 <= ratio <= 1.0:
        return 70
    if ratio > 1.0:
        return 30
    return 50


def score_content_quality(
    analysis: TemplateAnalysis,
    generated_content: List[GeneratedSlotContent]
) -> ContentQualityScore:
    """
    Heuristic quality score for generated content.

    Length fit contributes 40%; hook, CTA and required-slot completeness
    contribute 20 points each.
    """
    content = _content_map(generated_content)

    scores = [
        _length_score(len(content[slot.id]) / slot.max_length)
        for slot in analysis.slots
        if content.get(slot.id) and slot.max_length > 0
    ]
    avg_length = sum(scores) / len(scores) if scores else 0

    last_index = analysis.total_slides - 1
    has_hook = any(s.id in content for s in analysis.slots if s.slide_index == 0)
    has_cta = any(s.id in content for s in analysis.slots if s.slide_index == last_index)
    complete = all(s.id in content for s in analysis.slots if s.required)

    overall = round(avg_length * 0.4 + (20 if has_hook else 0) + (20 if has_cta else 0) + (20 if complete else 0))

    return ContentQualityScore(
        overall=overall,
        length_appropriate=round(avg_length),
        has_hook=has_hook,
        has_cta=has_cta,
        content_complete=complete
    )
