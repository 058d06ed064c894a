"""
Template Analyzer
=================

Analyzes canvas templates to extract the fillable slots used for AI
generation. Every text element of a template is a slot.
"""

import logging
import re
from typing import Dict, List, Tuple

from ..models.canvas_models import CanvasTemplate, Slide, TextElement, ImageElement
from ..models.generation_models import (
    TemplateAnalysis, TemplateSlot, SlideBreakdown, SlotType, SlidePurpose, SlotPosition
)

logger = logging.getLogger(__name__)

# Colors treated as defaults and left out of brand colors
DEFAULT_COLOR_VALUES = {"#ffffff", "#fff", "#000000", "#000", "transparent", ""}

_STANDALONE_NUMBER = re.compile(r"^\d{1,2}$")
_QUOTE_MARKS = ('"', "“", "”")
_DATA_KEYWORDS = ("%", "stats", "data")


def slot_id_for(slide_index: int, element_id: str) -> str:
    """Stable slot identifier for a text element."""
    return f"slot-{slide_index}-{element_id}"


def analyze_template(template: CanvasTemplate) -> TemplateAnalysis:
    """
    Analyze a template to extract all fillable slots.

    Args:
        template: The canvas template to analyze

    Returns:
        TemplateAnalysis with slot and slide breakdown
    """
    slides = template.default_slides
    breakdowns: List[SlideBreakdown] = []
    all_slots: List[TemplateSlot] = []

    for slide_index, slide in enumerate(slides):
        purpose = detect_slide_purpose(slide, slide_index, len(slides))
        slots = extract_slots_from_slide(slide, slide_index, purpose)

        breakdowns.append(SlideBreakdown(
            index=slide_index,
            purpose=purpose,
            element_count=len(slide.elements),
            text_element_count=len(slide.text_elements()),
            has_image=any(isinstance(e, ImageElement) for e in slide.elements),
            background_color=slide.background_color or "#ffffff",
            slots=slots
        ))
        all_slots.extend(slots)

    analysis = TemplateAnalysis(
        template_id=template.id,
        template_name=template.name,
        category=template.category.value,
        total_slides=len(slides),
        total_slots=len(all_slots),
        required_slots=sum(1 for s in all_slots if s.required),
        brand_colors=collect_brand_colors(slides),
        fonts=list(template.fonts),
        slide_breakdown=breakdowns,
        slots=all_slots
    )

    logger.debug(
        f"[TEMPLATE-ANALYZER] {template.id}: {analysis.total_slides} slides, "
        f"{analysis.total_slots} slots"
    )
    return analysis


def collect_brand_colors(slides: List[Slide]) -> List[str]:
    """Non-default background and fill colors, de-duplicated in first-seen order."""
    colors: List[str] = []
    seen = set()

    def _add(value):
        if not value:
            return
        key = value.strip().lower()
        if key in DEFAULT_COLOR_VALUES or key in seen:
            return
        seen.add(key)
        colors.append(value)

    for slide in slides:
        _add(slide.background_color)
        for element in slide.elements:
            _add(getattr(element, "fill", None))

    return colors


def detect_slide_purpose(slide: Slide, index: int, total: int) -> SlidePurpose:
    """Detect the purpose of a slide from its position and content."""
    if index == 0:
        return SlidePurpose.HOOK
    if index == total - 1:
        return SlidePurpose.CTA

    texts = slide.text_elements()

    # Numbered content slides carry a big "01"-style number
    if any(el.font_size >= 72 and _STANDALONE_NUMBER.match(el.text.strip()) for el in texts):
        return SlidePurpose.CONTENT

    if any(mark in el.text for el in texts for mark in _QUOTE_MARKS):
        return SlidePurpose.QUOTE

    if any(keyword in el.text.lower() for el in texts for keyword in _DATA_KEYWORDS):
        return SlidePurpose.DATA

    return SlidePurpose.CONTENT


def extract_slots_from_slide(
    slide: Slide,
    slide_index: int,
    purpose: SlidePurpose
) -> List[TemplateSlot]:
    """Build one slot per text element, ordered top to bottom."""
    slots = [
        analyze_text_element(element, slide_index, purpose)
        for element in slide.text_elements()
    ]
    slots.sort(key=lambda s: s.position.y)
    return slots


def analyze_text_element(
    element: TextElement,
    slide_index: int,
    purpose: SlidePurpose
) -> TemplateSlot:
    slot_type, max_length = determine_slot_type_and_length(element.font_size, purpose)

    return TemplateSlot(
        id=slot_id_for(slide_index, element.id),
        slide_index=slide_index,
        element_id=element.id,
        type=slot_type,
        max_length=max_length,
        placeholder=element.text,
        purpose=generate_slot_purpose(slot_type, purpose, slide_index),
        required=slot_type in (SlotType.TITLE, SlotType.CTA, SlotType.HEADING),
        original_font_size=element.font_size,
        position=SlotPosition(x=element.x, y=element.y)
    )


def determine_slot_type_and_length(font_size: float, purpose: SlidePurpose) -> Tuple[SlotType, int]:
    """Slot type and character limit from font size and slide purpose."""
    if purpose == SlidePurpose.CTA:
        if font_size >= 48:
            return SlotType.CTA, 80
        if font_size >= 32:
            return SlotType.BODY, 150
        return SlotType.CAPTION, 100

    if purpose in (SlidePurpose.HOOK, SlidePurpose.INTRO):
        if font_size >= 56:
            return SlotType.TITLE, 60
        if font_size >= 36:
            return SlotType.SUBTITLE, 120
        return SlotType.BODY, 200

    if font_size >= 56:
        return SlotType.HEADING, 50
    if font_size >= 40:
        return SlotType.HEADING, 80
    if font_size >= 28:
        return SlotType.BODY, 250
    return SlotType.BODY, 300


def generate_slot_purpose(slot_type: SlotType, purpose: SlidePurpose, slide_index: int) -> str:
    """Human-readable description of a slot, used as AI context."""
    n = slide_index + 1

    if purpose == SlidePurpose.HOOK:
        if slot_type == SlotType.TITLE:
            return f"Slide {n}: Main hook/headline that grabs attention and makes readers want to swipe"
        if slot_type == SlotType.SUBTITLE:
            return f"Slide {n}: Supporting text that adds context to the hook"
        return f"Slide {n}: Additional hook context"

    if purpose == SlidePurpose.CTA:
        if slot_type == SlotType.CTA:
            return f"Slide {n}: Final call-to-action that drives engagement (follow, like, comment, save)"
        return f"Slide {n}: Supporting CTA text"

    if purpose == SlidePurpose.CONTENT:
        if slot_type == SlotType.HEADING:
            return f"Slide {n}: Key point or insight heading"
        return f"Slide {n}: Detailed explanation or supporting content"

    if purpose == SlidePurpose.QUOTE:
        if slot_type in (SlotType.TITLE, SlotType.HEADING):
            return f"Slide {n}: Quote or key statement"
        return f"Slide {n}: Quote attribution or context"

    if purpose == SlidePurpose.DATA:
        if slot_type == SlotType.HEADING:
            return f"Slide {n}: Data point or statistic headline"
        return f"Slide {n}: Data explanation or context"

    return f"Slide {n}: {slot_type.value} content"


def get_template_structure_summary(analysis: TemplateAnalysis) -> str:
    """Formatted description of the template structure for prompts."""
    lines = [
        f"Template: {analysis.template_name} ({analysis.total_slides} slides)",
        "",
        "Slide Structure:"
    ]
    for slide in analysis.slide_breakdown:
        lines.append(f"\nSlide {slide.index + 1} ({slide.purpose.value}):")
        for slot in slide.slots:
            lines.append(f"  - {slot.type.value}: max {slot.max_length} chars")
            lines.append(f"    Purpose: {slot.purpose}")
    return "\n".join(lines)


def validate_slot_content(analysis: TemplateAnalysis, content: Dict[str, str]) -> Tuple[bool, List[str]]:
    """
    Check that every required slot has content.

    Returns:
        (is_valid, missing_slot_ids)
    """
    missing = [s.id for s in analysis.slots if s.required and s.id not in content]
    return len(missing) == 0, missing
