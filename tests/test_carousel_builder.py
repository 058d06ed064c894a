"""
Tests for building slides from generated slot content.
"""

from carousel_studio.models.canvas_models import TextElement, slide_content
from carousel_studio.models.generation_models import GeneratedSlotContent
from carousel_studio.services.carousel_builder import (
    build_slides_from_content, merge_generated_content, parse_slot_id, score_content_quality
)
from carousel_studio.templates.analyzer import analyze_template
from carousel_studio.templates.registry import get_template


def _content_for(analysis, text="Generated"):
    return [GeneratedSlotContent(slot_id=s.id, content=f"{text} {i}") for i, s in enumerate(analysis.slots)]


def _texts(slides):
    return [e.text for s in slides for e in s.elements if isinstance(e, TextElement)]


def test_outline_scenario_fills_every_slot(outline_template):
    analysis = analyze_template(outline_template)
    topic_lines = [
        "5 productivity hacks that actually work",
        "Batch similar tasks",
        "Time-block your calendar",
        "Use the two-minute rule",
        "Turn off notifications",
        "Plan tomorrow tonight",
        "Follow for more productivity tips",
    ]
    content = [GeneratedSlotContent(slot_id=s.id, content=t) for s, t in zip(analysis.slots, topic_lines)]

    result = build_slides_from_content(outline_template, analysis, content)

    assert result.filled_slots == result.total_slots == 7
    assert result.warnings == []
    assert len(result.slides) == 7
    assert _texts(result.slides) == topic_lines


def test_full_coverage_sets_exact_text_for_every_template():
    for template_id in ("professional", "minimal", "bold-impact", "creative-gradient"):
        template = get_template(template_id)
        analysis = analyze_template(template)
        content = _content_for(analysis)

        result = build_slides_from_content(template, analysis, content)

        assert result.filled_slots == result.total_slots
        by_element = {
            (i, e.id): e for i, s in enumerate(template.default_slides) for e in s.elements
        }
        built = {s.id for s in result.slides}
        assert built.isdisjoint({s.id for s in template.default_slides})
        for slot, item in zip(analysis.slots, content):
            original = by_element[(slot.slide_index, slot.element_id)]
            position = template.default_slides[slot.slide_index].elements.index(original)
            assert result.slides[slot.slide_index].elements[position].text == item.content


def test_geometry_and_style_untouched(outline_template):
    analysis = analyze_template(outline_template)
    result = build_slides_from_content(outline_template, analysis, _content_for(analysis))

    for original, built in zip(outline_template.default_slides, result.slides):
        for before, after in zip(original.elements, built.elements):
            a = before.model_dump(exclude={"id", "text"})
            b = after.model_dump(exclude={"id", "text"})
            assert a == b


def test_unknown_slot_id_is_a_warning(outline_template):
    analysis = analyze_template(outline_template)
    content = _content_for(analysis) + [GeneratedSlotContent(slot_id="slot-9-nope", content="x")]

    result = build_slides_from_content(outline_template, analysis, content)

    assert result.warnings == ["slot slot-9-nope not found"]
    assert result.filled_slots == 7


def test_missing_slots_keep_template_text(outline_template):
    analysis = analyze_template(outline_template)
    content = _content_for(analysis)[:3]

    result = build_slides_from_content(outline_template, analysis, content)

    assert result.filled_slots == 3
    assert result.total_slots == 7
    assert result.warnings == []
    assert result.slides[6].elements[1].text == "Follow for more"


def test_template_is_not_mutated(outline_template):
    before = [slide_content(s) for s in outline_template.default_slides]
    analysis = analyze_template(outline_template)
    build_slides_from_content(outline_template, analysis, _content_for(analysis))
    assert [slide_content(s) for s in outline_template.default_slides] == before


def test_accepts_camel_case_slot_ids(outline_template):
    analysis = analyze_template(outline_template)
    item = GeneratedSlotContent.model_validate({"slotId": analysis.slots[0].id, "content": "Hook"})
    result = build_slides_from_content(outline_template, analysis, [item])
    assert result.filled_slots == 1


def test_merge_updates_only_requested_slots(outline_template):
    slides = outline_template.clone_slides()
    new_content = [
        GeneratedSlotContent(slot_id=f"slot-1-{slides[1].elements[1].id}", content="Rewritten point"),
        GeneratedSlotContent(slot_id=f"slot-2-{slides[2].elements[1].id}", content="Not requested"),
    ]

    merged = merge_generated_content(slides, new_content, [new_content[0].slot_id])

    assert merged[1].elements[1].text == "Rewritten point"
    assert merged[2].elements[1].text == slides[2].elements[1].text
    assert [s.id for s in merged] == [s.id for s in slides]
    assert slides[1].elements[1].text == "First key point"


def test_parse_slot_id():
    assert parse_slot_id("slot-3-outline-4-point") == (3, "outline-4-point")
    assert parse_slot_id("title") is None


def test_quality_score(outline_template):
    analysis = analyze_template(outline_template)
    complete = score_content_quality(analysis, _content_for(analysis))
    assert complete.has_hook and complete.has_cta and complete.content_complete
    assert complete.overall >= 60

    empty = score_content_quality(analysis, [])
    assert empty.overall == 0
    assert not empty.has_hook
