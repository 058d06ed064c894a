"""
Slide Renderer
==============

Rasterizes carousel slides with Pillow. Output matches the editor stage:
array order is z-order, rotation is clockwise around the element's top-left
corner, and circles are inscribed in the element box.
"""

import base64
import io
import logging
import math
import os
from functools import lru_cache
from typing import List, Optional, Tuple
from urllib.parse import unquote_to_bytes

from PIL import Image, ImageColor, ImageDraw, ImageFont

from ..models.canvas_models import (
    CANVAS_WIDTH, CANVAS_HEIGHT, Slide, TextElement, ShapeElement, ImageElement,
    ShapeType, TextAlign, CanvasElementBase
)

logger = logging.getLogger(__name__)

GRID_COLOR = "#e5e7eb"
IMAGE_PLACEHOLDER_FILL = (229, 231, 235, 255)
IMAGE_PLACEHOLDER_OUTLINE = (156, 163, 175, 255)

BOLD_WEIGHTS = {"bold", "600", "700", "800", "900"}

# Font files tried per family; the first that exists wins
FONT_PATHS = {
    "regular": [
        "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
        "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
        "/System/Library/Fonts/Helvetica.ttc",
        "C:\\Windows\\Fonts\\arial.ttf",
    ],
    "bold": [
        "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
        "/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf",
        "/System/Library/Fonts/Helvetica.ttc",
        "C:\\Windows\\Fonts\\arialbd.ttf",
    ],
    "serif": [
        "/usr/share/fonts/truetype/dejavu/DejaVuSerif.ttf",
        "/usr/share/fonts/truetype/liberation/LiberationSerif-Regular.ttf",
        "/System/Library/Fonts/Times.ttc",
        "C:\\Windows\\Fonts\\times.ttf",
    ],
}

SERIF_FAMILIES = {"Playfair Display", "Merriweather", "Georgia", "Times New Roman"}

# Directory searched first for real family files, e.g. "Inter-Bold.ttf"
FONTS_DIR = os.getenv("CAROUSEL_FONTS_DIR", "")


@lru_cache(maxsize=128)
def get_font(family: str, size: int, bold: bool = False) -> ImageFont.ImageFont:
    """Load a font for a family at a pixel size, falling back to system fonts."""
    candidates: List[str] = []
    if FONTS_DIR:
        style = "Bold" if bold else "Regular"
        candidates.append(os.path.join(FONTS_DIR, f"{family.replace(' ', '')}-{style}.ttf"))

    if family in SERIF_FAMILIES and not bold:
        candidates.extend(FONT_PATHS["serif"])
    candidates.extend(FONT_PATHS["bold" if bold else "regular"])

    for path in candidates:
        if os.path.exists(path):
            try:
                return ImageFont.truetype(path, size)
            except OSError as e:
                logger.warning(f"[RENDERER] Failed to load font {path}: {e}")

    return ImageFont.load_default(size=size)


def parse_color(value: Optional[str]) -> Optional[Tuple[int, int, int, int]]:
    """RGBA tuple for a CSS color; None for empty/transparent."""
    if not value or value.strip().lower() in ("transparent", "none"):
        return None
    r, g, b, *alpha = ImageColor.getrgb(value.strip())
    return r, g, b, alpha[0] if alpha else 255


def decode_data_url(data_url: str) -> bytes:
    """Bytes of a data URL, base64 or percent-encoded."""
    header, sep, payload = data_url.partition(",")
    if not header.startswith("data:") or not sep:
        raise ValueError("Image source is not a data URL")
    if header.endswith(";base64"):
        return base64.b64decode(payload)
    return unquote_to_bytes(payload)


def open_data_url(data_url: str) -> Optional[Image.Image]:
    """RGBA image from a data URL, or None when Pillow cannot decode it (SVG, corrupt data)."""
    try:
        with Image.open(io.BytesIO(decode_data_url(data_url))) as source:
            return source.convert("RGBA")
    except (OSError, ValueError) as e:
        logger.warning(f"[RENDERER] Undecodable image data ({data_url[:40]}...): {e}")
        return None


def wrap_text(text: str, font: ImageFont.ImageFont, max_width: float) -> List[str]:
    """Greedy word wrap honoring explicit newlines."""
    lines: List[str] = []
    for paragraph in text.split("\n"):
        words = paragraph.split(" ")
        current = ""
        for word in words:
            candidate = f"{current} {word}" if current else word
            if current and font.getlength(candidate) > max_width:
                lines.append(current)
                current = word
            else:
                current = candidate
        lines.append(current)
    return lines


class SlideRenderer:
    """Renders slides to Pillow images at a pixel ratio."""

    def render(self, slide: Slide, pixel_ratio: float = 1.0) -> Image.Image:
        """
        Render a slide.

        Args:
            slide: Slide to rasterize
            pixel_ratio: Output pixels per canvas unit

        Returns:
            RGB image of size (1080 * pixel_ratio) square
        """
        if pixel_ratio <= 0:
            raise ValueError(f"pixel_ratio must be positive, got {pixel_ratio}")

        size = (round(CANVAS_WIDTH * pixel_ratio), round(CANVAS_HEIGHT * pixel_ratio))
        background = parse_color(slide.background_color) or (255, 255, 255, 255)
        canvas = Image.new("RGBA", size, background)

        if slide.background_image:
            self._paste_background_image(canvas, slide.background_image)

        for element in slide.elements:
            if not element.visible:
                continue
            self._render_element(canvas, element, pixel_ratio)

        return canvas.convert("RGB")

    def to_png_bytes(self, slide: Slide, pixel_ratio: float = 1.0) -> bytes:
        buffer = io.BytesIO()
        self.render(slide, pixel_ratio).save(buffer, format="PNG")
        return buffer.getvalue()

    def draw_grid(self, image: Image.Image, lines, scale: float) -> None:
        """Overlay grid lines (canvas coordinates) onto an image in place."""
        draw = ImageDraw.Draw(image)
        for (x1, y1), (x2, y2) in lines:
            draw.line([(x1 * scale, y1 * scale), (x2 * scale, y2 * scale)], fill=GRID_COLOR, width=1)

    # ============ Elements ============

    def _render_element(self, canvas: Image.Image, element: CanvasElementBase, ratio: float) -> None:
        if isinstance(element, TextElement):
            layer, pad = self._text_layer(element, ratio)
        elif isinstance(element, ShapeElement):
            layer, pad = self._shape_layer(element, ratio)
        elif isinstance(element, ImageElement):
            layer, pad = self._image_layer(element, ratio)
        else:
            raise TypeError(f"Unsupported element type: {type(element).__name__}")

        if element.opacity < 1:
            alpha = layer.getchannel("A").point(lambda a: round(a * element.opacity))
            layer.putalpha(alpha)

        self._composite(canvas, layer, element, pad, ratio)

    def _composite(
        self,
        canvas: Image.Image,
        layer: Image.Image,
        element: CanvasElementBase,
        pad: int,
        ratio: float
    ) -> None:
        """Rotate a layer around the element origin and paste it."""
        origin_x, origin_y = element.x * ratio, element.y * ratio

        if not element.rotation:
            self._paste_clipped(canvas, layer, round(origin_x - pad), round(origin_y - pad))
            return

        w, h = layer.size
        theta = math.radians(element.rotation)
        cos_t, sin_t = math.cos(theta), math.sin(theta)
        corners = [(-pad, -pad), (w - pad, -pad), (-pad, h - pad), (w - pad, h - pad)]
        rotated = [(cx * cos_t - cy * sin_t, cx * sin_t + cy * cos_t) for cx, cy in corners]
        min_x = min(p[0] for p in rotated)
        min_y = min(p[1] for p in rotated)

        turned = layer.rotate(-element.rotation, expand=True, resample=Image.BICUBIC)
        self._paste_clipped(canvas, turned, round(origin_x + min_x), round(origin_y + min_y))

    @staticmethod
    def _paste_clipped(canvas: Image.Image, layer: Image.Image, x: int, y: int) -> None:
        # alpha_composite rejects negative destinations, so crop first
        left, top = max(0, -x), max(0, -y)
        if left >= layer.width or top >= layer.height:
            return
        if left or top:
            layer = layer.crop((left, top, layer.width, layer.height))
        canvas.alpha_composite(layer, (x + left, y + top))

    def _text_layer(self, element: TextElement, ratio: float) -> Tuple[Image.Image, int]:
        font_px = max(1, round(element.font_size * ratio))
        font = get_font(element.font_family, font_px, element.font_weight in BOLD_WEIGHTS)
        width = max(1, round(element.width * ratio))
        line_px = element.font_size * element.line_height * ratio

        lines = wrap_text(element.text, font, width)
        height = max(round(element.height * ratio), math.ceil(line_px * len(lines)))
        layer = Image.new("RGBA", (width, max(1, height)), (0, 0, 0, 0))
        fill = parse_color(element.fill)
        if fill is None:
            return layer, 0

        draw = ImageDraw.Draw(layer)
        for i, line in enumerate(lines):
            line_width = font.getlength(line)
            if element.align == TextAlign.CENTER:
                x = (width - line_width) / 2
            elif element.align == TextAlign.RIGHT:
                x = width - line_width
            else:
                x = 0
            y = i * line_px
            draw.text((x, y), line, font=font, fill=fill)
            if element.text_decoration in ("underline", "line-through"):
                offset = font_px * (0.95 if element.text_decoration == "underline" else 0.55)
                thickness = max(1, round(font_px / 18))
                draw.line([(x, y + offset), (x + line_width, y + offset)], fill=fill, width=thickness)
        return layer, 0

    def _shape_layer(self, element: ShapeElement, ratio: float) -> Tuple[Image.Image, int]:
        stroke_width = round((element.stroke_width or 0) * ratio)
        fill = parse_color(element.fill)
        stroke = parse_color(element.stroke)
        w, h = element.width * ratio, element.height * ratio

        if element.shape_type == ShapeType.LINE:
            line_width = max(1, round((element.stroke_width or 2) * ratio))
            pad = line_width
            layer = Image.new("RGBA", (round(w) + 2 * pad + 1, round(h) + 2 * pad + 1), (0, 0, 0, 0))
            if fill:
                ImageDraw.Draw(layer).line([(pad, pad), (pad + w, pad + h)], fill=fill, width=line_width)
            return layer, pad

        pad = stroke_width
        layer = Image.new("RGBA", (max(1, round(w) + 2 * pad), max(1, round(h) + 2 * pad)), (0, 0, 0, 0))
        draw = ImageDraw.Draw(layer)
        outline = stroke if stroke_width else None

        if element.shape_type == ShapeType.CIRCLE:
            diameter = min(w, h)
            left = pad + (w - diameter) / 2
            top = pad + (h - diameter) / 2
            draw.ellipse([left, top, left + diameter, top + diameter],
                         fill=fill, outline=outline, width=stroke_width)
        elif element.shape_type == ShapeType.RECT:
            box = [pad, pad, pad + w, pad + h]
            radius = round((element.corner_radius or 0) * ratio)
            if radius:
                draw.rounded_rectangle(box, radius=radius, fill=fill, outline=outline, width=stroke_width)
            else:
                draw.rectangle(box, fill=fill, outline=outline, width=stroke_width)
        else:
            raise ValueError(f"Unsupported shape type: {element.shape_type}")
        return layer, pad

    def _image_layer(self, element: ImageElement, ratio: float) -> Tuple[Image.Image, int]:
        size = (max(1, round(element.width * ratio)), max(1, round(element.height * ratio)))

        if element.src.startswith("data:"):
            source = open_data_url(element.src)
            if source is not None:
                return source.resize(size, Image.LANCZOS), 0
        elif element.src:
            # Remote sources are not fetched here
            logger.info(f"[RENDERER] Image {element.id} has a non-embedded source, drawing placeholder")

        layer = Image.new("RGBA", size, IMAGE_PLACEHOLDER_FILL)
        ImageDraw.Draw(layer).rectangle(
            [0, 0, size[0] - 1, size[1] - 1], outline=IMAGE_PLACEHOLDER_OUTLINE, width=max(1, round(2 * ratio))
        )
        return layer, 0

    def _paste_background_image(self, canvas: Image.Image, src: str) -> None:
        if not src.startswith("data:"):
            logger.info("[RENDERER] Skipping non-embedded background image")
            return
        source = open_data_url(src)
        if source is None:
            return
        scale = max(canvas.width / source.width, canvas.height / source.height)
        resized = source.resize(
            (max(1, math.ceil(source.width * scale)), max(1, math.ceil(source.height * scale))),
            Image.LANCZOS
        )
        left = (resized.width - canvas.width) // 2
        top = (resized.height - canvas.height) // 2
        canvas.alpha_composite(resized.crop((left, top, left + canvas.width, top + canvas.height)))
