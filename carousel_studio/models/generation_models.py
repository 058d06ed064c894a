"""
Generation Models for Carousel Studio
======================================

Models for template analysis, AI slot content and carousel generation
requests/responses.
"""

from enum import Enum
from typing import List, Optional, Dict

from pydantic import BaseModel, Field, ConfigDict, field_validator

from .canvas_models import Slide


class SlotType(str, Enum):
    """Kind of content expected in a slot."""
    TITLE = "title"
    SUBTITLE = "subtitle"
    HEADING = "heading"
    BODY = "body"
    BULLET = "bullet"
    NUMBER = "number"
    CTA = "cta"
    AUTHOR = "author"
    CAPTION = "caption"


class SlidePurpose(str, Enum):
    """Role of a slide in the carousel narrative."""
    HOOK = "hook"
    CONTENT = "content"
    DATA = "data"
    QUOTE = "quote"
    CTA = "cta"
    INTRO = "intro"
    CONCLUSION = "conclusion"


class CarouselTone(str, Enum):
    PROFESSIONAL = "professional"
    CASUAL = "casual"
    EDUCATIONAL = "educational"
    INSPIRATIONAL = "inspirational"
    STORYTELLING = "storytelling"


class CtaType(str, Enum):
    NONE = "none"
    FOLLOW = "follow"
    COMMENT = "comment"
    SHARE = "share"
    LINK = "link"
    DM = "dm"
    SAVE = "save"
    CUSTOM = "custom"


class SlotPosition(BaseModel):
    x: float
    y: float


class TemplateSlot(BaseModel):
    """A fillable text element of a template."""
    id: str
    slide_index: int
    element_id: str
    type: SlotType
    max_length: int
    placeholder: str
    purpose: str
    required: bool
    original_font_size: float
    position: SlotPosition


class SlideBreakdown(BaseModel):
    """Per-slide analysis."""
    index: int
    purpose: SlidePurpose
    element_count: int
    text_element_count: int
    has_image: bool
    background_color: str
    slots: List[TemplateSlot] = Field(default_factory=list)


class TemplateAnalysis(BaseModel):
    """Derived metadata about a template. Recomputed on demand, never stored."""
    template_id: str
    template_name: str
    category: str
    total_slides: int
    total_slots: int
    required_slots: int
    brand_colors: List[str] = Field(default_factory=list)
    fonts: List[str] = Field(default_factory=list)
    slide_breakdown: List[SlideBreakdown] = Field(default_factory=list)
    slots: List[TemplateSlot] = Field(default_factory=list)

    def slot_map(self) -> Dict[str, TemplateSlot]:
        return {slot.id: slot for slot in self.slots}


class GeneratedSlotContent(BaseModel):
    """Generated text for one slot."""
    model_config = ConfigDict(populate_by_name=True)

    slot_id: str = Field(alias="slotId")
    content: str
    confidence: Optional[float] = Field(default=None, ge=0, le=1)


class ContentQualityScore(BaseModel):
    """Heuristic quality score of generated content (0-100)."""
    overall: int
    length_appropriate: int
    has_hook: bool
    has_cta: bool
    content_complete: bool


class CarouselBuildResult(BaseModel):
    """Slides built from generated content, plus fill statistics."""
    slides: List[Slide]
    filled_slots: int
    total_slots: int
    warnings: List[str] = Field(default_factory=list)
    quality: Optional[ContentQualityScore] = None


class CarouselGenerationInput(BaseModel):
    """User inputs for AI carousel generation."""
    topic: str = Field(min_length=10)
    audience: Optional[str] = None
    industry: Optional[str] = None
    key_points: List[str] = Field(default_factory=list)
    tone: CarouselTone = CarouselTone.PROFESSIONAL
    cta_type: Optional[CtaType] = None
    custom_cta: Optional[str] = None
    additional_context: Optional[str] = None

    @field_validator("topic")
    @classmethod
    def strip_topic(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 10:
            raise ValueError("Topic must be at least 10 characters")
        return v

    @field_validator("key_points")
    @classmethod
    def drop_blank_points(cls, v: List[str]) -> List[str]:
        return [p.strip() for p in v if p and p.strip()]


class GenerationResponse(BaseModel):
    """Response from the text-generation collaborator."""
    success: bool
    slots: Optional[List[GeneratedSlotContent]] = None
    error: Optional[str] = None
    model: Optional[str] = None
    generation_time_ms: Optional[float] = None

