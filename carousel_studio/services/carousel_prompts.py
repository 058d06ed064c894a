"""
Carousel Prompts
================

Prompt builders and response parsing for AI carousel generation.
"""

import json
import logging
import re
from typing import Dict, List, Optional, Tuple

from ..models.generation_models import (
    CarouselGenerationInput, CarouselTone, CtaType, TemplateAnalysis, TemplateSlot
)

logger = logging.getLogger(__name__)


TONE_GUIDANCE: Dict[CarouselTone, str] = {
    CarouselTone.PROFESSIONAL: """
- Use formal but accessible language
- Include data points and statistics where relevant
- Maintain credibility with expert terminology
- Keep sentences clear and concise
- Avoid slang and casual expressions""",

    CarouselTone.CASUAL: """
- Write like you're talking to a friend
- Use conversational language and contractions
- Add personality and occasional humor
- Keep it relatable and down-to-earth
- Use "you" and "I" to create connection""",

    CarouselTone.EDUCATIONAL: """
- Break down complex concepts simply
- Use analogies and examples
- Structure content for easy learning
- Build from basic to advanced
- Include actionable takeaways""",

    CarouselTone.INSPIRATIONAL: """
- Use powerful, emotive language
- Share transformation stories
- Include motivational quotes or insights
- Create a sense of possibility
- End with an empowering message""",

    CarouselTone.STORYTELLING: """
- Create a narrative arc across slides
- Use specific details and examples
- Include conflict/challenge and resolution
- Make it personal and relatable
- Build suspense between slides""",
}

CTA_TEMPLATES: Dict[CtaType, str] = {
    CtaType.NONE: "",
    CtaType.FOLLOW: "Follow for more insights on [topic]",
    CtaType.COMMENT: "What's your experience with this? Comment below!",
    CtaType.SHARE: "Share this with someone who needs to see it",
    CtaType.LINK: "Click the link in bio to learn more",
    CtaType.DM: 'DM me "[keyword]" for [offer]',
    CtaType.SAVE: "Save this for later reference",
    CtaType.CUSTOM: "",
}

_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$")
_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")
_JSON_ARRAY = re.compile(r"\[[\s\S]*\]")


def _structure_description(analysis: TemplateAnalysis) -> str:
    lines = [f'Template: "{analysis.template_name}" with {analysis.total_slides} slides', ""]
    for slide in analysis.slide_breakdown:
        lines.append(f"Slide {slide.index + 1} ({slide.purpose.value.capitalize()}):")
        lines.append(f"  - Background: {slide.background_color}")
        lines.append(f"  - Text elements: {slide.text_element_count}")
        if slide.has_image:
            lines.append("  - Has image placeholder")
        lines.append("")
    return "\n".join(lines)


def _slot_requirements(slots: List[TemplateSlot]) -> str:
    lines = []
    for slot in slots:
        required = " [REQUIRED]" if slot.required else ""
        placeholder = slot.placeholder[:50] + ("..." if len(slot.placeholder) > 50 else "")
        lines.append(f"- {slot.id}{required}")
        lines.append(f"  Type: {slot.type.value}")
        lines.append(f"  Max characters: {slot.max_length}")
        lines.append(f"  Purpose: {slot.purpose}")
        lines.append(f'  Example/placeholder: "{placeholder}"')
        lines.append("")
    return "\n".join(lines)


def build_carousel_system_prompt(input: CarouselGenerationInput, analysis: TemplateAnalysis) -> str:
    """
    Build the system prompt for carousel generation.

    Args:
        input: User generation inputs (tone, audience, industry)
        analysis: Analysis of the template being filled

    Returns:
        System prompt describing the template, slots and output format
    """
    return f"""You are an expert LinkedIn carousel content creator with years of experience crafting viral, engaging carousel posts. Your task is to generate compelling content that perfectly fills a carousel template.

## Your Mission
Create content for a {analysis.total_slides}-slide LinkedIn carousel that will:
1. Hook readers immediately on slide 1 (stop the scroll!)
2. Deliver genuine value in the middle slides
3. End with a powerful call-to-action

## Writing Style
{TONE_GUIDANCE[input.tone]}

## Audience Context
- Target audience: {input.audience or 'LinkedIn professionals'}
- Industry/niche: {input.industry or 'general business and professional development'}

## Template Structure
{_structure_description(analysis)}

## Content Slots to Fill
{_slot_requirements(analysis.slots)}

## Critical Guidelines
1. **Character Limits**: NEVER exceed the max character limit for any slot
2. **Slide Flow**: Each slide should make readers want to swipe to the next
3. **Standalone Value**: Each slide should provide value even if viewed alone
4. **No Hashtags**: Don't include hashtags in the carousel content
5. **LinkedIn Style**: Write for LinkedIn's professional audience
6. **Swipe-Worthy**: Create micro-cliffhangers between slides

## Output Format
Return ONLY a valid JSON object with slot IDs as keys and generated content as values.
Example format:
{{
  "slot-0-element1": "Your hook title here",
  "slot-0-element2": "Compelling subtitle",
  "slot-1-element3": "First key insight"
}}

Do not include any explanation or markdown formatting - just the JSON object."""


def cta_instruction(input: CarouselGenerationInput) -> str:
    if input.cta_type is None or input.cta_type == CtaType.NONE:
        return "Create an engaging CTA that fits the content"
    if input.cta_type == CtaType.CUSTOM:
        if input.custom_cta:
            return f'Use this CTA approach: "{input.custom_cta}"'
        return "Create an engaging CTA that fits the content"
    return f"CTA style: {CTA_TEMPLATES[input.cta_type]}"


def build_carousel_user_prompt(input: CarouselGenerationInput, analysis: TemplateAnalysis) -> str:
    """User prompt with topic, key points, CTA and the slot list."""
    if input.key_points:
        key_points = "\n".join(f"{i + 1}. {point}" for i, point in enumerate(input.key_points))
    else:
        key_points = "None specified - generate based on topic"

    slot_list = [
        {"id": slot.id, "type": slot.type.value, "maxLength": slot.max_length, "slide": slot.slide_index + 1}
        for slot in analysis.slots
    ]

    prompt = f"""Generate content for a LinkedIn carousel about:

**Topic**: {input.topic}

**Key Points to Cover**:
{key_points}

**Call-to-Action**:
{cta_instruction(input)}

**Slots to Fill** ({analysis.total_slots} total):
{json.dumps(slot_list, indent=2)}
"""
    if input.additional_context:
        prompt += f"\n**Additional Context**:\n{input.additional_context}\n"

    prompt += """
Remember:
- Slide 1 must STOP THE SCROLL - make it impossible to ignore
- Each middle slide should deliver on the hook's promise
- Final slide should drive maximum engagement
- Stay within character limits for each slot
- Return ONLY the JSON object with slot content"""
    return prompt


def parse_carousel_response(response: str, expected_slots: List[TemplateSlot]) -> Optional[Dict[str, str]]:
    """
    Extract slot content from a raw model response.

    Accepts a JSON object mapping slot ids to text, or a JSON array of
    {"slotId", "content"} items, optionally wrapped in markdown code fences.

    Returns:
        slot_id -> content, or None if no usable JSON was found
    """
    cleaned = _CODE_FENCE.sub("", response.strip()).strip()

    pattern = _JSON_ARRAY if cleaned.startswith("[") else _JSON_OBJECT
    match = pattern.search(cleaned)
    if match is None:
        logger.error("[CAROUSEL-PROMPTS] No JSON found in response")
        return None

    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        logger.error(f"[CAROUSEL-PROMPTS] Failed to parse response JSON: {e}")
        return None

    content: Dict[str, str] = {}
    if isinstance(parsed, dict):
        for key, value in parsed.items():
            if isinstance(value, str):
                content[key] = value
    elif isinstance(parsed, list):
        for item in parsed:
            if not isinstance(item, dict):
                continue
            slot_id = item.get("slotId") or item.get("slot_id")
            value = item.get("content")
            if isinstance(slot_id, str) and isinstance(value, str):
                content[slot_id] = value
    else:
        logger.error("[CAROUSEL-PROMPTS] Parsed response is not an object or array")
        return None

    missing = [s.id for s in expected_slots if s.required and s.id not in content]
    if missing:
        logger.warning(f"[CAROUSEL-PROMPTS] Missing required slots: {missing}")

    return content


def validate_content(content: Dict[str, str], slots: List[TemplateSlot]) -> Tuple[bool, List[str]]:
    """
    Check content against slot constraints.

    Returns:
        (is_valid, issues)
    """
    issues: List[str] = []
    for slot in slots:
        text = content.get(slot.id)
        if not text:
            if slot.required:
                issues.append(f"Missing required content for {slot.id}")
            continue
        if len(text) > slot.max_length:
            issues.append(f"Content for {slot.id} exceeds limit ({len(text)}/{slot.max_length} chars)")
        if len(text) < 5 and slot.required:
            issues.append(f"Content for {slot.id} is too short")
    return len(issues) == 0, issues


def truncate_to_fit(content: str, max_length: int) -> str:
    """Shorten content to max_length, preferring a word boundary, ending in '...'."""
    if len(content) <= max_length:
        return content

    truncated = content[:max(0, max_length - 3)]
    last_space = truncated.rfind(" ")
    if last_space > max_length * 0.7:
        return truncated[:last_space] + "..."
    return truncated + "..."
