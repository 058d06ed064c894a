"""
Tests for carousel prompt building and response parsing.
"""

import json

import pytest
from pydantic import ValidationError

from carousel_studio.models.generation_models import CarouselGenerationInput, CarouselTone, CtaType
from carousel_studio.services.carousel_prompts import (
    CTA_TEMPLATES, build_carousel_system_prompt, build_carousel_user_prompt, parse_carousel_response,
    truncate_to_fit, validate_content
)
from carousel_studio.templates.analyzer import analyze_template


@pytest.fixture
def analysis(outline_template):
    return analyze_template(outline_template)


def _input(**kwargs):
    data = {"topic": "5 productivity hacks for busy founders"}
    data.update(kwargs)
    return CarouselGenerationInput(**data)


def test_topic_must_have_ten_characters():
    with pytest.raises(ValidationError):
        CarouselGenerationInput(topic="too short")
    with pytest.raises(ValidationError):
        CarouselGenerationInput(topic="   short     ")


def test_blank_key_points_dropped():
    assert _input(key_points=["  one ", "", "   "]).key_points == ["one"]


def test_system_prompt_lists_slots_and_tone(analysis):
    prompt = build_carousel_system_prompt(_input(tone=CarouselTone.CASUAL, audience="Founders"), analysis)

    assert "7-slide LinkedIn carousel" in prompt
    assert "Write like you're talking to a friend" in prompt
    assert "Target audience: Founders" in prompt
    for slot in analysis.slots:
        assert f"- {slot.id} [REQUIRED]" in prompt


def test_user_prompt_includes_topic_points_and_cta(analysis):
    prompt = build_carousel_user_prompt(
        _input(key_points=["Batch tasks", "Block time"], cta_type=CtaType.SAVE),
        analysis
    )
    assert "**Topic**: 5 productivity hacks for busy founders" in prompt
    assert "1. Batch tasks\n2. Block time" in prompt
    assert CTA_TEMPLATES[CtaType.SAVE] in prompt
    assert "(7 total)" in prompt


def test_custom_cta_used_verbatim(analysis):
    prompt = build_carousel_user_prompt(_input(cta_type=CtaType.CUSTOM, custom_cta="Book a demo"), analysis)
    assert 'Use this CTA approach: "Book a demo"' in prompt


def test_parse_object_inside_code_fence(analysis):
    raw = "```json\n" + json.dumps({analysis.slots[0].id: "Hook", "other": 3}) + "\n```"
    assert parse_carousel_response(raw, analysis.slots) == {analysis.slots[0].id: "Hook"}


def test_parse_object_with_surrounding_prose(analysis):
    raw = 'Here you go: {"slot-0-outline-1-title": "Hook"} Enjoy!'
    assert parse_carousel_response(raw, analysis.slots) == {"slot-0-outline-1-title": "Hook"}


def test_parse_array_of_slot_items(analysis):
    raw = json.dumps([
        {"slotId": "slot-0-outline-1-title", "content": "Hook"},
        {"slotId": "slot-6-outline-7-cta", "content": "Follow me"},
        {"content": "no id"},
    ])
    assert parse_carousel_response(raw, analysis.slots) == {
        "slot-0-outline-1-title": "Hook",
        "slot-6-outline-7-cta": "Follow me",
    }


def test_parse_returns_none_without_json(analysis):
    assert parse_carousel_response("Sorry, I can't help with that.", analysis.slots) is None
    assert parse_carousel_response("{not json}", analysis.slots) is None


def test_validate_content_reports_issues(analysis):
    title, point = analysis.slots[0], analysis.slots[1]
    content = {title.id: "x" * (title.max_length + 1), point.id: "Hey"}

    is_valid, issues = validate_content(content, analysis.slots)

    assert not is_valid
    assert any("exceeds limit" in issue for issue in issues)
    assert any(f"Content for {point.id} is too short" == issue for issue in issues)
    assert any("Missing required content for slot-6-outline-7-cta" == issue for issue in issues)


def test_truncate_prefers_word_boundary():
    text = "Productivity is about energy management not time management"
    result = truncate_to_fit(text, 50)
    assert result == "Productivity is about energy management not..."
    assert len(result) <= 50


def test_truncate_hard_cut_without_good_boundary():
    assert truncate_to_fit("abcdefghijklmnop", 10) == "abcdefg..."
    assert truncate_to_fit("short", 10) == "short"
