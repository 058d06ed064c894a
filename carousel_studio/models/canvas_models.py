"""
Canvas Models for Carousel Studio
==================================

Models for carousel documents: slides, positioned elements, templates
and export options.
"""

import copy
import time
import uuid
from enum import Enum
from typing import Annotated, List, Optional, Union, Literal

from pydantic import BaseModel, Field, computed_field, model_validator


# LinkedIn carousel dimensions (square format)
CANVAS_WIDTH = 1080
CANVAS_HEIGHT = 1080

# Maximum number of slides in a carousel
MAX_SLIDES = 10

DEFAULT_BACKGROUND = "#ffffff"

DEFAULT_FONTS = [
    "Inter",
    "Playfair Display",
    "Roboto",
    "Open Sans",
    "Montserrat",
    "Lato",
    "Poppins",
    "Raleway",
]

DEFAULT_COLORS = [
    "#000000",  # Black
    "#ffffff",  # White
    "#1e3a5f",  # Navy
    "#3b82f6",  # Blue
    "#10b981",  # Green
    "#f59e0b",  # Amber
    "#ef4444",  # Red
    "#8b5cf6",  # Purple
    "#ec4899",  # Pink
    "#6b7280",  # Gray
]


def generate_id() -> str:
    """Generate a unique id for slides and elements."""
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}"


class TextAlign(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class ShapeType(str, Enum):
    RECT = "rect"
    CIRCLE = "circle"
    LINE = "line"


class TemplateCategory(str, Enum):
    PROFESSIONAL = "professional"
    CREATIVE = "creative"
    MINIMAL = "minimal"
    BOLD = "bold"


class ExportFormat(str, Enum):
    PNG = "png"
    PDF = "pdf"


class ExportQuality(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


PIXEL_RATIOS = {
    ExportQuality.LOW: 1,
    ExportQuality.MEDIUM: 2,
    ExportQuality.HIGH: 3,
}


class CanvasElementBase(BaseModel):
    """Fields shared by every element placed on a slide."""
    id: str = Field(default_factory=generate_id)
    x: float = 0
    y: float = 0
    width: float = Field(default=100, ge=0)
    height: float = Field(default=100, ge=0)
    rotation: float = 0
    opacity: float = Field(default=1.0, ge=0, le=1)
    visible: bool = True
    locked: bool = False


class TextElement(CanvasElementBase):
    """Text element. Text elements are the fillable slots of a template."""
    type: Literal["text"] = "text"
    text: str = ""
    font_size: float = Field(default=32, gt=0)
    font_family: str = "Inter"
    font_weight: str = "normal"
    font_style: Optional[str] = None
    fill: str = "#000000"
    align: TextAlign = TextAlign.LEFT
    line_height: float = 1.2
    letter_spacing: Optional[float] = None
    text_decoration: Optional[str] = None


class ShapeElement(CanvasElementBase):
    """Rectangle, circle or line."""
    type: Literal["shape"] = "shape"
    shape_type: ShapeType = ShapeType.RECT
    fill: str = "#3b82f6"
    stroke: Optional[str] = None
    stroke_width: Optional[float] = None
    corner_radius: Optional[float] = None


class ImageElement(CanvasElementBase):
    """Image element; src is a URL or a data URL."""
    type: Literal["image"] = "image"
    src: str = ""
    alt: Optional[str] = None


CanvasElement = Annotated[
    Union[TextElement, ShapeElement, ImageElement],
    Field(discriminator="type"),
]


class Slide(BaseModel):
    """Single slide in the carousel."""
    id: str = Field(default_factory=generate_id)
    background_color: str = DEFAULT_BACKGROUND
    background_image: Optional[str] = None
    elements: List[CanvasElement] = Field(default_factory=list)

    @model_validator(mode="after")
    def element_ids_unique(self) -> "Slide":
        seen = set()
        for element in self.elements:
            if element.id in seen:
                raise ValueError(f"Duplicate element id '{element.id}' in slide '{self.id}'")
            seen.add(element.id)
        return self

    def find_element(self, element_id: str) -> Optional[CanvasElementBase]:
        for element in self.elements:
            if element.id == element_id:
                return element
        return None

    def text_elements(self) -> List[TextElement]:
        return [e for e in self.elements if isinstance(e, TextElement)]


class CanvasTemplate(BaseModel):
    """
    Immutable carousel preset.

    Templates are never edited in place; callers get fresh copies through
    clone_slides().
    """
    model_config = {"frozen": True}

    id: str
    name: str
    category: TemplateCategory
    description: Optional[str] = None
    thumbnail: Optional[str] = None
    default_slides: List[Slide] = Field(min_length=1, max_length=MAX_SLIDES)
    brand_colors: List[str] = Field(default_factory=list)
    fonts: List[str] = Field(default_factory=list)
    default_tone: Optional[str] = None
    is_favorite: bool = False

    def clone_slides(self) -> List[Slide]:
        """Deep-copy the default slides with fresh slide and element ids."""
        return [clone_slide(slide) for slide in self.default_slides]


class ExportOptions(BaseModel):
    """Export options for PNG/PDF generation."""
    format: ExportFormat = ExportFormat.PDF
    quality: ExportQuality = ExportQuality.MEDIUM
    file_name: Optional[str] = None

    @computed_field
    @property
    def pixel_ratio(self) -> int:
        return PIXEL_RATIOS[self.quality]


class BrandKit(BaseModel):
    """Brand colors and fonts used to derive brand templates."""
    primary_color: str = "#1e3a5f"
    secondary_color: str = "#3b82f6"
    accent_color: str = "#f59e0b"
    background_color: str = "#ffffff"
    text_color: str = "#111827"
    font_primary: str = "Inter"
    font_secondary: Optional[str] = None


def clone_element(element: CanvasElementBase, new_id: bool = True) -> CanvasElementBase:
    """Deep-copy an element, optionally assigning a new id."""
    update = {"id": generate_id()} if new_id else {}
    return element.model_copy(update=update, deep=True)


def clone_slide(slide: Slide, new_ids: bool = True) -> Slide:
    """Deep-copy a slide. New ids are assigned to the slide and every element."""
    if not new_ids:
        return slide.model_copy(deep=True)
    return Slide(
        id=generate_id(),
        background_color=slide.background_color,
        background_image=slide.background_image,
        elements=[clone_element(e) for e in slide.elements],
    )


def clone_slides(slides: List[Slide], new_ids: bool = False) -> List[Slide]:
    return [clone_slide(s, new_ids=new_ids) for s in slides]


def slide_content(slide: Slide) -> dict:
    """Slide as a dict with ids stripped, for content comparisons."""
    data = slide.model_dump(mode="json", exclude={"id"})
    for element in data["elements"]:
        element.pop("id", None)
    return data


def create_default_slide(background_color: str = DEFAULT_BACKGROUND) -> Slide:
    return Slide(background_color=background_color)


def create_default_text_element(x: float = 100, y: float = 100) -> TextElement:
    return TextElement(
        x=x,
        y=y,
        width=400,
        height=60,
        text="Double-click to edit",
        font_size=32,
        font_family="Inter",
        fill="#000000",
    )


def create_default_shape_element(
    x: float = 100,
    y: float = 100,
    shape_type: ShapeType = ShapeType.RECT
) -> ShapeElement:
    return ShapeElement(
        x=x,
        y=y,
        width=200,
        height=200,
        shape_type=shape_type,
        fill="#3b82f6",
        stroke_width=0,
        corner_radius=0,
    )


def create_default_image_element(x: float = 100, y: float = 100, src: str = "") -> ImageElement:
    return ImageElement(x=x, y=y, width=400, height=400, src=src, alt="Image")


def element_updates_allowed(element: CanvasElementBase) -> set:
    """Field names an update request may touch for this element."""
    return set(type(element).model_fields) - {"id", "type"}


def apply_element_updates(element: CanvasElementBase, updates: dict) -> CanvasElementBase:
    """
    Return a validated copy of element with updates applied.

    Raises:
        ValueError: if updates name unknown fields or fail validation
    """
    unknown = set(updates) - element_updates_allowed(element)
    if unknown:
        raise ValueError(f"Unknown fields for {element.type} element: {sorted(unknown)}")
    data = element.model_dump()
    data.update(copy.deepcopy(updates))
    return type(element).model_validate(data)
