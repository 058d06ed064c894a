"""
Canvas Stage
============

Headless interactive stage for a single slide: responsive scaling,
hit-testing, selection, drag/resize/rotate and the grid overlay.

The stage never mutates the slide. Pointer interactions produce
ElementUpdateRequested messages that the owning editor applies.
"""

import logging
import math
from typing import Any, Callable, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from ..models.canvas_models import (
    CANVAS_WIDTH, CANVAS_HEIGHT, Slide, TextElement, ShapeElement, ImageElement, ShapeType,
    CanvasElementBase
)
from ..services.slide_renderer import SlideRenderer

logger = logging.getLogger(__name__)

GRID_SIZE = 40
MAX_FIT_SCALE = 0.9
MIN_ZOOM = 0.25
MAX_ZOOM = 2.0

# Minimum sizes after a resize, per element kind
MIN_TEXT_WIDTH = 50
MIN_TEXT_HEIGHT = 20
MIN_SHAPE_SIZE = 10
MIN_IMAGE_SIZE = 20

# Extra pick tolerance around lines, in canvas units
LINE_HIT_TOLERANCE = 5


class ElementUpdateRequested(BaseModel):
    """Intended change to one element, emitted by the stage."""
    element_id: str
    updates: Dict[str, Any] = Field(default_factory=dict)


GridLine = Tuple[Tuple[float, float], Tuple[float, float]]


def clamp_zoom(zoom: float) -> float:
    return max(MIN_ZOOM, min(MAX_ZOOM, zoom))


def compute_scale(container_width: float, container_height: float, zoom: float = 1.0) -> float:
    """On-screen scale of the fixed 1080x1080 canvas inside a container."""
    fit = min(container_width / CANVAS_WIDTH, container_height / CANVAS_HEIGHT, MAX_FIT_SCALE)
    return max(fit, 0.0) * zoom


def grid_lines(spacing: int = GRID_SIZE) -> List[GridLine]:
    """Vertical then horizontal reference lines across the logical canvas."""
    lines: List[GridLine] = []
    for x in range(0, CANVAS_WIDTH + 1, spacing):
        lines.append(((x, 0), (x, CANVAS_HEIGHT)))
    for y in range(0, CANVAS_HEIGHT + 1, spacing):
        lines.append(((0, y), (CANVAS_WIDTH, y)))
    return lines


def to_local(element: CanvasElementBase, x: float, y: float) -> Tuple[float, float]:
    """Canvas point in the element's unrotated frame (origin at its x, y)."""
    dx, dy = x - element.x, y - element.y
    if not element.rotation:
        return dx, dy
    theta = math.radians(-element.rotation)
    cos_t, sin_t = math.cos(theta), math.sin(theta)
    return dx * cos_t - dy * sin_t, dx * sin_t + dy * cos_t


def _distance_to_segment(px: float, py: float, x2: float, y2: float) -> float:
    """Distance from (px, py) to the segment (0, 0)-(x2, y2)."""
    length_sq = x2 * x2 + y2 * y2
    if length_sq == 0:
        return math.hypot(px, py)
    t = max(0.0, min(1.0, (px * x2 + py * y2) / length_sq))
    return math.hypot(px - t * x2, py - t * y2)


def contains_point(element: CanvasElementBase, x: float, y: float) -> bool:
    """Whether a canvas point falls on the element, honoring rotation."""
    lx, ly = to_local(element, x, y)

    if isinstance(element, ShapeElement):
        if element.shape_type == ShapeType.CIRCLE:
            radius = min(element.width, element.height) / 2
            return math.hypot(lx - element.width / 2, ly - element.height / 2) <= radius
        if element.shape_type == ShapeType.LINE:
            reach = (element.stroke_width or 2) / 2 + LINE_HIT_TOLERANCE
            return _distance_to_segment(lx, ly, element.width, element.height) <= reach
        return 0 <= lx <= element.width and 0 <= ly <= element.height
    if isinstance(element, (TextElement, ImageElement)):
        return 0 <= lx <= element.width and 0 <= ly <= element.height
    raise TypeError(f"Unsupported element type: {type(element).__name__}")


class Stage:
    """
    Interactive surface for one slide.

    Args:
        slide: Slide to display
        selected_element_id: Currently selected element, if any
        container_width: Available width in screen pixels
        container_height: Available height in screen pixels
        zoom: User zoom factor
        show_grid: Whether the grid overlay is visible
        on_select: Called with the new selection (element id or None)
        on_update: Called with every ElementUpdateRequested
    """

    def __init__(
        self,
        slide: Slide,
        selected_element_id: Optional[str] = None,
        container_width: float = CANVAS_WIDTH,
        container_height: float = CANVAS_HEIGHT,
        zoom: float = 1.0,
        show_grid: bool = False,
        on_select: Optional[Callable[[Optional[str]], None]] = None,
        on_update: Optional[Callable[[ElementUpdateRequested], None]] = None
    ):
        self.slide = slide
        self.selected_element_id = selected_element_id
        self.container_width = container_width
        self.container_height = container_height
        self.zoom = clamp_zoom(zoom)
        self.show_grid = show_grid
        self.on_select = on_select
        self.on_update = on_update
        self.scale = compute_scale(container_width, container_height, self.zoom)

    # ============ Viewport ============

    def resize(self, container_width: float, container_height: float) -> float:
        self.container_width = container_width
        self.container_height = container_height
        self.scale = compute_scale(container_width, container_height, self.zoom)
        return self.scale

    def set_zoom(self, zoom: float) -> float:
        self.zoom = clamp_zoom(zoom)
        self.scale = compute_scale(self.container_width, self.container_height, self.zoom)
        return self.scale

    @property
    def stage_size(self) -> Tuple[float, float]:
        """On-screen size of the stage."""
        return CANVAS_WIDTH * self.scale, CANVAS_HEIGHT * self.scale

    def screen_to_canvas(self, screen_x: float, screen_y: float) -> Tuple[float, float]:
        if self.scale <= 0:
            raise ValueError("Stage has no visible area")
        return screen_x / self.scale, screen_y / self.scale

    def canvas_to_screen(self, x: float, y: float) -> Tuple[float, float]:
        return x * self.scale, y * self.scale

    def set_slide(self, slide: Slide, selected_element_id: Optional[str] = None) -> None:
        self.slide = slide
        self.selected_element_id = selected_element_id

    def toggle_grid(self) -> bool:
        self.show_grid = not self.show_grid
        return self.show_grid

    def grid_lines(self) -> List[GridLine]:
        """Grid overlay lines; empty while the grid is hidden."""
        return grid_lines() if self.show_grid else []

    # ============ Selection ============

    def hit_test(self, x: float, y: float) -> Optional[CanvasElementBase]:
        """Topmost visible element under a canvas point (later elements are on top)."""
        for element in reversed(self.slide.elements):
            if element.visible and contains_point(element, x, y):
                return element
        return None

    def click(self, screen_x: float, screen_y: float) -> Optional[str]:
        """
        Select the element under a screen point; clicking the background
        clears the selection.

        Returns:
            The new selected element id, or None
        """
        x, y = self.screen_to_canvas(screen_x, screen_y)
        element = self.hit_test(x, y)
        self.selected_element_id = element.id if element else None
        if self.on_select:
            self.on_select(self.selected_element_id)
        return self.selected_element_id

    # ============ Drag / Transform ============

    def _element(self, element_id: str) -> Optional[CanvasElementBase]:
        element = self.slide.find_element(element_id)
        if element is None:
            logger.warning(f"[STAGE] Unknown element {element_id}")
            return None
        if element.locked:
            logger.debug(f"[STAGE] Ignoring interaction on locked element {element_id}")
            return None
        return element

    def _emit(self, element_id: str, updates: Dict[str, Any]) -> ElementUpdateRequested:
        request = ElementUpdateRequested(element_id=element_id, updates=updates)
        if self.on_update:
            self.on_update(request)
        return request

    def drag_end(self, element_id: str, x: float, y: float) -> Optional[ElementUpdateRequested]:
        """Report the final canvas position of a dragged element."""
        if self._element(element_id) is None:
            return None
        return self._emit(element_id, {"x": round(x), "y": round(y)})

    def drag_by(self, element_id: str, screen_dx: float, screen_dy: float) -> Optional[ElementUpdateRequested]:
        """Move an element by a pointer delta measured in screen pixels."""
        element = self._element(element_id)
        if element is None:
            return None
        dx, dy = self.screen_to_canvas(screen_dx, screen_dy)
        return self.drag_end(element_id, element.x + dx, element.y + dy)

    def transform_end(
        self,
        element_id: str,
        scale_x: float = 1.0,
        scale_y: float = 1.0,
        rotation: Optional[float] = None,
        x: Optional[float] = None,
        y: Optional[float] = None
    ) -> Optional[ElementUpdateRequested]:
        """
        Report a finished resize/rotate gesture.

        Args:
            element_id: Element being transformed
            scale_x: Horizontal scale applied by the handles
            scale_y: Vertical scale applied by the handles
            rotation: New absolute rotation in degrees
            x: New canvas x (top-left handle moves it)
            y: New canvas y
        """
        element = self._element(element_id)
        if element is None:
            return None

        width = element.width * scale_x
        height = element.height * scale_y

        if isinstance(element, TextElement):
            width = max(MIN_TEXT_WIDTH, width)
            height = max(MIN_TEXT_HEIGHT, height)
        elif isinstance(element, ShapeElement) and element.shape_type == ShapeType.CIRCLE:
            radius = max(MIN_SHAPE_SIZE, (width + height) / 2 / 2)
            width = height = radius * 2
        elif isinstance(element, ShapeElement):
            width = max(MIN_SHAPE_SIZE, width)
            height = max(MIN_SHAPE_SIZE, height)
        elif isinstance(element, ImageElement):
            width = max(MIN_IMAGE_SIZE, width)
            height = max(MIN_IMAGE_SIZE, height)
        else:
            raise TypeError(f"Unsupported element type: {type(element).__name__}")

        updates = {
            "x": round(element.x if x is None else x),
            "y": round(element.y if y is None else y),
            "width": round(width),
            "height": round(height),
            "rotation": round(element.rotation if rotation is None else rotation),
        }
        return self._emit(element_id, updates)

    # ============ Rendering ============

    def render(self, pixel_ratio: float = 1.0):
        """Rasterize the slide for export (no grid, no selection)."""
        return SlideRenderer().render(self.slide, pixel_ratio=pixel_ratio)

    def render_preview(self):
        """Rasterize at the current on-screen scale with the grid overlay if shown."""
        renderer = SlideRenderer()
        image = renderer.render(self.slide, pixel_ratio=max(self.scale, 0.01))
        if self.show_grid:
            renderer.draw_grid(image, self.grid_lines(), max(self.scale, 0.01))
        return image
