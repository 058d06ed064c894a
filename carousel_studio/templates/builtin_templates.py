"""
Built-in Carousel Templates
===========================

Preset slide layouts shipped with the editor. Element ids are fixed so that
slot ids stay stable across runs.
"""

from typing import List, Optional

from ..models.canvas_models import (
    CanvasTemplate, Slide, TextElement, ShapeElement, ShapeType, TemplateCategory, TextAlign
)


def _text(
    element_id: str,
    text: str,
    x: float,
    y: float,
    width: float,
    height: float,
    font_size: float,
    fill: str = "#111827",
    font_weight: str = "normal",
    align: TextAlign = TextAlign.LEFT,
    font_family: str = "Inter",
    line_height: float = 1.2,
    font_style: Optional[str] = None
) -> TextElement:
    return TextElement(
        id=element_id, text=text, x=x, y=y, width=width, height=height,
        font_size=font_size, fill=fill, font_weight=font_weight, align=align,
        font_family=font_family, line_height=line_height, font_style=font_style
    )


def _rect(
    element_id: str,
    x: float,
    y: float,
    width: float,
    height: float,
    fill: str,
    corner_radius: float = 0,
    stroke: Optional[str] = None,
    stroke_width: Optional[float] = None
) -> ShapeElement:
    return ShapeElement(
        id=element_id, shape_type=ShapeType.RECT, x=x, y=y, width=width, height=height,
        fill=fill, corner_radius=corner_radius, stroke=stroke, stroke_width=stroke_width
    )


def _circle(element_id: str, x: float, y: float, size: float, fill: str) -> ShapeElement:
    return ShapeElement(
        id=element_id, shape_type=ShapeType.CIRCLE, x=x, y=y, width=size, height=size, fill=fill
    )


# ============================================================
# CAROUSEL OUTLINE
# ============================================================

def _carousel_outline() -> CanvasTemplate:
    navy, blue, light = "#1e3a5f", "#3b82f6", "#f8fafc"
    points = [
        "First key point",
        "Second key point",
        "Third key point",
        "Fourth key point",
        "Fifth key point",
    ]

    slides: List[Slide] = [
        Slide(id="outline-1", background_color=navy, elements=[
            _rect("outline-1-bar", 80, 80, 120, 12, blue),
            _text("outline-1-title", "Your carousel headline goes here", 80, 380, 920, 320,
                  72, fill="#ffffff", font_weight="bold"),
        ]),
    ]
    for i, point in enumerate(points, start=2):
        slides.append(Slide(id=f"outline-{i}", background_color=light, elements=[
            _rect(f"outline-{i}-bar", 0, 0, 24, 1080, blue),
            _text(f"outline-{i}-point", point, 100, 360, 880, 360, 48,
                  fill=navy, font_weight="bold"),
        ]))
    slides.append(Slide(id="outline-7", background_color=navy, elements=[
        _rect("outline-7-frame", 80, 80, 920, 920, navy, corner_radius=24,
              stroke=blue, stroke_width=4),
        _text("outline-7-cta", "Follow for more", 140, 440, 800, 200, 56,
              fill="#ffffff", font_weight="bold", align=TextAlign.CENTER),
    ]))

    return CanvasTemplate(
        id="carousel-outline",
        name="Carousel Outline",
        category=TemplateCategory.PROFESSIONAL,
        description="Hook, five key points and a closing call-to-action",
        default_slides=slides,
        brand_colors=[navy, blue, light, "#ffffff"],
        fonts=["Inter"],
        default_tone="educational",
        is_favorite=True,
    )


# ============================================================
# PROFESSIONAL
# ============================================================

def _professional() -> CanvasTemplate:
    navy, gold, paper = "#0f172a", "#f59e0b", "#ffffff"

    def content(n: int) -> Slide:
        return Slide(id=f"pro-{n}", background_color=paper, elements=[
            _rect(f"pro-{n}-header", 0, 0, 1080, 140, navy),
            _text(f"pro-{n}-heading", f"Insight {n - 1}", 80, 220, 920, 140, 56,
                  fill=navy, font_weight="bold"),
            _rect(f"pro-{n}-rule", 80, 380, 160, 8, gold),
            _text(f"pro-{n}-body", "Explain the insight in two or three short sentences.",
                  80, 430, 920, 400, 32, fill="#334155", line_height=1.5),
        ])

    slides = [
        Slide(id="pro-1", background_color=navy, elements=[
            _text("pro-1-title", "The headline that stops the scroll", 80, 300, 920, 260, 72,
                  fill="#ffffff", font_weight="bold"),
            _text("pro-1-subtitle", "A subtitle that promises the payoff", 80, 600, 920, 120, 40,
                  fill="#cbd5e1"),
            _rect("pro-1-accent", 80, 260, 200, 10, gold),
        ]),
        content(2),
        content(3),
        content(4),
        Slide(id="pro-5", background_color=navy, elements=[
            _text("pro-5-cta", "Found this useful? Follow for more", 80, 380, 920, 200, 56,
                  fill="#ffffff", font_weight="bold", align=TextAlign.CENTER),
            _text("pro-5-caption", "Repost to share with your network", 80, 640, 920, 80, 28,
                  fill=gold, align=TextAlign.CENTER),
        ]),
    ]

    return CanvasTemplate(
        id="professional",
        name="Professional",
        category=TemplateCategory.PROFESSIONAL,
        description="Clean navy and gold layout for business insights",
        default_slides=slides,
        brand_colors=[navy, gold, paper],
        fonts=["Inter"],
        default_tone="professional",
    )


# ============================================================
# MINIMAL
# ============================================================

def _minimal() -> CanvasTemplate:
    ink, muted = "#111111", "#6b7280"

    slides = [
        Slide(id="min-1", background_color="#ffffff", elements=[
            _text("min-1-title", "Less, but better", 100, 400, 880, 200, 80,
                  fill=ink, font_weight="bold", font_family="Playfair Display"),
            _text("min-1-subtitle", "Swipe to see why", 100, 640, 880, 80, 36, fill=muted),
        ]),
    ]
    for n in range(2, 5):
        slides.append(Slide(id=f"min-{n}", background_color="#ffffff", elements=[
            _text(f"min-{n}-heading", "One clear idea per slide", 100, 300, 880, 160, 48,
                  fill=ink, font_weight="bold", font_family="Playfair Display"),
            _text(f"min-{n}-body", "Support it with a single sentence.", 100, 500, 880, 240, 30,
                  fill=muted, line_height=1.5),
        ]))
    slides.append(Slide(id="min-5", background_color="#ffffff", elements=[
        _rect("min-5-line", 100, 380, 120, 4, ink),
        _text("min-5-cta", "Save this for later", 100, 420, 880, 160, 56,
              fill=ink, font_weight="bold", font_family="Playfair Display"),
    ]))

    return CanvasTemplate(
        id="minimal",
        name="Minimal",
        category=TemplateCategory.MINIMAL,
        description="Black on white with generous whitespace",
        default_slides=slides,
        brand_colors=[ink, muted, "#ffffff"],
        fonts=["Playfair Display", "Inter"],
        default_tone="casual",
    )


# ============================================================
# BOLD IMPACT
# ============================================================

def _bold_impact() -> CanvasTemplate:
    dark, red, white = "#18181b", "#ef4444", "#ffffff"

    slides = [
        Slide(id="bold-1", background_color=red, elements=[
            _text("bold-1-title", "STOP doing this", 80, 340, 920, 300, 96,
                  fill=white, font_weight="900", font_family="Montserrat"),
            _text("bold-1-subtitle", "3 mistakes that cost you reach", 80, 680, 920, 100, 40,
                  fill=white),
        ]),
    ]
    for n in range(2, 5):
        slides.append(Slide(id=f"bold-{n}", background_color=dark, elements=[
            _text(f"bold-{n}-number", f"0{n - 1}", 80, 80, 300, 200, 160,
                  fill=red, font_weight="900", font_family="Montserrat"),
            _text(f"bold-{n}-heading", "Mistake heading", 80, 360, 920, 160, 56,
                  fill=white, font_weight="bold", font_family="Montserrat"),
            _text(f"bold-{n}-body", "Why it hurts and what to do instead.", 80, 560, 920, 300, 32,
                  fill="#d4d4d8", line_height=1.4),
        ]))
    slides.append(Slide(id="bold-5", background_color=red, elements=[
        _circle("bold-5-dot", 440, 180, 200, white),
        _text("bold-5-cta", "Comment YES if you agree", 80, 480, 920, 200, 64,
              fill=white, font_weight="900", align=TextAlign.CENTER, font_family="Montserrat"),
    ]))

    return CanvasTemplate(
        id="bold-impact",
        name="Bold Impact",
        category=TemplateCategory.BOLD,
        description="High-contrast numbered layout for punchy lists",
        default_slides=slides,
        brand_colors=[red, dark, white],
        fonts=["Montserrat", "Inter"],
        default_tone="inspirational",
    )


# ============================================================
# CREATIVE GRADIENT
# ============================================================

def _creative() -> CanvasTemplate:
    purple, pink, cream = "#8b5cf6", "#ec4899", "#fdf4ff"

    slides = [
        Slide(id="creative-1", background_color=purple, elements=[
            _circle("creative-1-blob", 700, -120, 500, pink),
            _text("creative-1-title", "A story worth swiping", 80, 420, 880, 240, 72,
                  fill="#ffffff", font_weight="bold", font_family="Poppins"),
        ]),
        Slide(id="creative-2", background_color=cream, elements=[
            _text("creative-2-quote", "“The quote that sets the scene”", 100, 320, 880, 300, 48,
                  fill=purple, align=TextAlign.CENTER, font_family="Poppins",
                  font_style="italic"),
            _text("creative-2-author", "Who said it", 100, 680, 880, 60, 28, fill=pink,
                  align=TextAlign.CENTER),
        ]),
        Slide(id="creative-3", background_color=cream, elements=[
            _rect("creative-3-card", 80, 200, 920, 680, "#ffffff", corner_radius=40),
            _text("creative-3-heading", "The turning point", 140, 260, 800, 140, 48,
                  fill=purple, font_weight="bold", font_family="Poppins"),
            _text("creative-3-body", "Describe the challenge and what changed.", 140, 440, 800, 360,
                  30, fill="#4b5563", line_height=1.5),
        ]),
        Slide(id="creative-4", background_color=pink, elements=[
            _text("creative-4-cta", "Share this with a friend", 80, 420, 920, 200, 56,
                  fill="#ffffff", font_weight="bold", align=TextAlign.CENTER, font_family="Poppins"),
        ]),
    ]

    return CanvasTemplate(
        id="creative-gradient",
        name="Creative Gradient",
        category=TemplateCategory.CREATIVE,
        description="Playful purple and pink storytelling layout",
        default_slides=slides,
        brand_colors=[purple, pink, cream],
        fonts=["Poppins"],
        default_tone="storytelling",
    )


def builtin_templates() -> List[CanvasTemplate]:
    """All templates shipped with the editor, in display order."""
    return [
        _carousel_outline(),
        _professional(),
        _minimal(),
        _bold_impact(),
        _creative(),
    ]
