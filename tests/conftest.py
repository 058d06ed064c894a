"""
Shared fixtures for Carousel Studio tests.
"""

from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from carousel_studio.api import ai_routes, canvas_routes, element_routes, export_routes
from carousel_studio.canvas.state_manager import StateManager
from carousel_studio.models.canvas_models import Slide, TextElement, ShapeElement, ShapeType
from carousel_studio.models.generation_models import (
    GeneratedSlotContent, GenerationResponse, TemplateAnalysis
)
from carousel_studio.services.carousel_generator import CarouselGenerator
from carousel_studio.services.export_service import ExportService
from carousel_studio.templates.registry import get_template, reset_registry


class FakeLLM:
    """Stands in for LLMService; returns canned slot content."""

    def __init__(self, response: Optional[GenerationResponse] = None, content: Optional[Dict[str, str]] = None):
        self.response = response
        self.content = content
        self.calls = 0

    async def generate_carousel_content(self, input, analysis: TemplateAnalysis) -> GenerationResponse:
        self.calls += 1
        if self.response is not None:
            return self.response
        if self.content is not None:
            slots = [GeneratedSlotContent(slot_id=k, content=v) for k, v in self.content.items()]
        else:
            slots = [
                GeneratedSlotContent(slot_id=slot.id, content=f"Generated text for slide {slot.slide_index + 1}")
                for slot in analysis.slots
            ]
        return GenerationResponse(success=True, slots=slots)


@pytest.fixture(autouse=True)
def fresh_registry():
    """Each test starts with only the built-in templates registered."""
    reset_registry()
    yield
    reset_registry()


@pytest.fixture
def outline_template():
    return get_template("carousel-outline")


@pytest.fixture
def sample_slides() -> List[Slide]:
    return [
        Slide(id="s1", background_color="#1e3a5f", elements=[
            ShapeElement(id="bar", shape_type=ShapeType.RECT, x=0, y=0, width=1080, height=120, fill="#3b82f6"),
            TextElement(id="title", text="Hello carousel", x=80, y=300, width=920, height=200,
                        font_size=72, fill="#ffffff", font_weight="bold"),
        ]),
        Slide(id="s2", elements=[
            TextElement(id="body", text="Second slide", x=80, y=400, width=920, height=200, font_size=32),
            ShapeElement(id="dot", shape_type=ShapeType.CIRCLE, x=800, y=800, width=120, height=120,
                         fill="#ef4444", opacity=0.5),
        ]),
        Slide(id="s3", background_color="#f8fafc", elements=[
            ShapeElement(id="rule", shape_type=ShapeType.LINE, x=100, y=500, width=880, height=0,
                         fill="#111111", stroke_width=4, rotation=15),
        ]),
    ]


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def client(tmp_path, fake_llm, monkeypatch):
    """TestClient with services injected against a temporary sessions directory."""
    from carousel_studio.server import app

    monkeypatch.setenv("CAROUSEL_SESSIONS_DIR", str(tmp_path / "startup-sessions"))

    with TestClient(app) as test_client:
        state_manager = StateManager(sessions_dir=tmp_path / "sessions")
        canvas_routes.state_manager = state_manager
        element_routes.state_manager = state_manager
        ai_routes.state_manager = state_manager
        ai_routes.carousel_generator = CarouselGenerator(llm=fake_llm)
        export_routes.state_manager = state_manager
        export_routes.export_service = ExportService()
        yield test_client


@pytest.fixture
def make_llm():
    """Factory for FakeLLM instances with custom responses."""
    return FakeLLM
