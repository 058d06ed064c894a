"""
Brand Kit Template Generator
============================

Derives brand-styled carousel templates from a user's brand kit colors
and fonts.
"""

import logging
import re
from typing import List, Tuple

from ..models.canvas_models import (
    BrandKit, CanvasTemplate, Slide, TextElement, ShapeElement, ShapeType,
    TemplateCategory, TextAlign
)

logger = logging.getLogger(__name__)

_HEX_COLOR = re.compile(r"^#?([0-9a-fA-F]{6})$")


def _rgb(color: str) -> Tuple[int, int, int]:
    match = _HEX_COLOR.match(color.strip())
    if not match:
        raise ValueError(f"Expected a #rrggbb color, got '{color}'")
    value = match.group(1)
    return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)


def _luminance(color: str) -> float:
    """Relative luminance (WCAG) of a hex color."""
    def channel(c: int) -> float:
        c = c / 255
        return c / 12.92 if c <= 0.03928 else ((c + 0.055) / 1.055) ** 2.4

    r, g, b = _rgb(color)
    return 0.2126 * channel(r) + 0.7152 * channel(g) + 0.0722 * channel(b)


def readable_text_color(background: str) -> str:
    """White or near-black, whichever contrasts better with background."""
    return "#ffffff" if _luminance(background) < 0.4 else "#111827"


def darken(color: str, amount: float = 0.6) -> str:
    r, g, b = _rgb(color)
    return "#{:02x}{:02x}{:02x}".format(int(r * (1 - amount)), int(g * (1 - amount)), int(b * (1 - amount)))


def _text(prefix: str, suffix: str, text: str, y: float, height: float, size: float,
          fill: str, font: str, bold: bool = False,
          align: TextAlign = TextAlign.LEFT) -> TextElement:
    return TextElement(
        id=f"{prefix}-{suffix}", text=text, x=80, y=y, width=920, height=height,
        font_size=size, fill=fill, font_family=font,
        font_weight="bold" if bold else "normal", align=align
    )


def _brand_professional(kit: BrandKit) -> CanvasTemplate:
    heading_font = kit.font_primary
    body_font = kit.font_secondary or kit.font_primary
    on_primary = readable_text_color(kit.primary_color)

    slides = [
        Slide(id="bp-1", background_color=kit.primary_color, elements=[
            ShapeElement(id="bp-1-accent", shape_type=ShapeType.RECT, x=80, y=260,
                         width=200, height=10, fill=kit.accent_color),
            _text("bp-1", "title", "Your headline here", 300, 260, 72, on_primary, heading_font, bold=True),
            _text("bp-1", "subtitle", "Supporting subtitle", 600, 120, 40, on_primary, body_font),
        ]),
    ]
    for n in range(2, 5):
        slides.append(Slide(id=f"bp-{n}", background_color=kit.background_color, elements=[
            ShapeElement(id=f"bp-{n}-header", shape_type=ShapeType.RECT, x=0, y=0,
                         width=1080, height=120, fill=kit.secondary_color),
            _text(f"bp-{n}", "heading", f"Point {n - 1}", 220, 140, 56, kit.text_color, heading_font, bold=True),
            _text(f"bp-{n}", "body", "Explain the point briefly.", 420, 400, 32, kit.text_color, body_font),
        ]))
    slides.append(Slide(id="bp-5", background_color=kit.primary_color, elements=[
        _text("bp-5", "cta", "Follow for more", 400, 200, 56, on_primary, heading_font,
              bold=True, align=TextAlign.CENTER),
    ]))

    return CanvasTemplate(
        id="brand-professional",
        name="Brand Professional",
        category=TemplateCategory.PROFESSIONAL,
        description="Professional layout in your brand colors",
        default_slides=slides,
        brand_colors=[kit.primary_color, kit.secondary_color, kit.background_color,
                      kit.text_color, kit.accent_color],
        fonts=[f for f in (kit.font_primary, kit.font_secondary) if f],
    )


def _brand_bold(kit: BrandKit) -> CanvasTemplate:
    dark_bg = darken(kit.primary_color, 0.75)
    font = kit.font_primary

    slides = [
        Slide(id="bb-1", background_color=dark_bg, elements=[
            _text("bb-1", "title", "BIG BOLD CLAIM", 340, 300, 96, "#ffffff", font, bold=True),
            _text("bb-1", "subtitle", "Here is why", 680, 100, 40, kit.accent_color, font),
        ]),
    ]
    for n in range(2, 5):
        slides.append(Slide(id=f"bb-{n}", background_color=dark_bg, elements=[
            _text(f"bb-{n}", "number", f"0{n - 1}", 80, 200, 160, kit.primary_color, font, bold=True),
            _text(f"bb-{n}", "heading", "Key point", 360, 160, 56, "#ffffff", font, bold=True),
            _text(f"bb-{n}", "body", "Make it concrete.", 560, 300, 32, "#d4d4d8", font),
        ]))
    slides.append(Slide(id="bb-5", background_color=kit.primary_color, elements=[
        _text("bb-5", "cta", "Comment below", 420, 200, 64, readable_text_color(kit.primary_color),
              font, bold=True, align=TextAlign.CENTER),
    ]))

    return CanvasTemplate(
        id="brand-bold",
        name="Brand Bold",
        category=TemplateCategory.BOLD,
        description="Dark high-contrast layout with brand accents",
        default_slides=slides,
        brand_colors=[dark_bg, kit.primary_color, "#ffffff", "#d4d4d8", kit.accent_color],
        fonts=[font],
    )


def _brand_minimal(kit: BrandKit) -> CanvasTemplate:
    font = kit.font_primary
    muted = "#6b7280"

    slides = [
        Slide(id="bm-1", background_color="#ffffff", elements=[
            _text("bm-1", "title", "Simple idea", 400, 200, 80, kit.primary_color, font, bold=True),
            _text("bm-1", "subtitle", "Swipe to learn more", 640, 80, 36, muted, font),
        ]),
    ]
    for n in range(2, 5):
        slides.append(Slide(id=f"bm-{n}", background_color="#ffffff", elements=[
            ShapeElement(id=f"bm-{n}-line", shape_type=ShapeType.LINE, x=80, y=260,
                         width=120, height=0, fill=kit.primary_color, stroke_width=4),
            _text(f"bm-{n}", "heading", "One idea", 300, 160, 48, kit.text_color, font, bold=True),
            _text(f"bm-{n}", "body", "One sentence.", 500, 240, 30, muted, font),
        ]))
    slides.append(Slide(id="bm-5", background_color="#ffffff", elements=[
        _text("bm-5", "cta", "Save this post", 420, 160, 56, kit.primary_color, font, bold=True),
    ]))

    return CanvasTemplate(
        id="brand-minimal",
        name="Brand Minimal",
        category=TemplateCategory.MINIMAL,
        description="Whitespace-first layout with a single brand color",
        default_slides=slides,
        brand_colors=["#ffffff", kit.primary_color, kit.text_color, muted],
        fonts=[font],
    )


def generate_brand_kit_templates(kit: BrandKit) -> List[CanvasTemplate]:
    """
    Generate brand templates from a brand kit.

    Args:
        kit: Brand colors and fonts

    Returns:
        Brand Professional, Brand Bold and Brand Minimal templates

    Raises:
        ValueError: if a brand color is not a #rrggbb hex value
    """
    templates = [_brand_professional(kit), _brand_bold(kit), _brand_minimal(kit)]
    logger.info(f"[BRAND-KIT] Generated {len(templates)} templates for primary={kit.primary_color}")
    return templates
