"""
Canvas Editor
=============

Owns one carousel document and the editing state around it: current slide,
selection, zoom, grid, undo/redo history and the in-flight generation and
export flags.

Every mutation builds the new document first and commits it only when the
whole operation succeeded, so a rejected call leaves the editor unchanged.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Tuple

from ..errors import ElementNotFound, OperationInProgress, InvalidSlideIndex
from ..models.canvas_models import (
    CANVAS_WIDTH, CANVAS_HEIGHT, MAX_SLIDES, CanvasElementBase, CanvasTemplate, ShapeType,
    ShapeElement, ImageElement, Slide, apply_element_updates, clone_slides,
    create_default_image_element, create_default_shape_element, create_default_slide,
    create_default_text_element
)
from ..models.generation_models import CarouselBuildResult
from . import slide_manager
from .stage import ElementUpdateRequested, Stage, clamp_zoom

logger = logging.getLogger(__name__)

MAX_HISTORY = 50

# Operations that may only run one at a time per document
GENERATION = "generation"
EXPORT = "export"

# (slides, current_slide_index, selected_element_id)
Snapshot = Tuple[List[Slide], int, Optional[str]]


class CanvasEditor:
    """
    Editing session for one carousel.

    Args:
        slides: Initial slides (a single empty slide by default)
        template: Template the slides came from, if any
    """

    def __init__(self, slides: Optional[List[Slide]] = None, template: Optional[CanvasTemplate] = None):
        self.slides: List[Slide] = self._checked(slides) if slides else [create_default_slide()]
        self.current_slide_index = 0
        self.selected_element_id: Optional[str] = None
        self.template = template
        self.zoom = 1.0
        self.show_grid = False
        self.is_generating = False
        self.is_exporting = False
        self._undo: List[Snapshot] = []
        self._redo: List[Snapshot] = []

    # ============ State ============

    @staticmethod
    def _checked(slides: List[Slide]) -> List[Slide]:
        if not 1 <= len(slides) <= MAX_SLIDES:
            raise ValueError(f"A carousel needs between 1 and {MAX_SLIDES} slides, got {len(slides)}")
        return list(slides)

    @property
    def current_slide(self) -> Slide:
        return self.slides[self.current_slide_index]

    @property
    def selected_element(self) -> Optional[CanvasElementBase]:
        if self.selected_element_id is None:
            return None
        return self.current_slide.find_element(self.selected_element_id)

    @property
    def can_add_slide(self) -> bool:
        return slide_manager.can_add_slide(self.slides)

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    def _snapshot(self) -> Snapshot:
        return clone_slides(self.slides), self.current_slide_index, self.selected_element_id

    def _restore(self, snapshot: Snapshot) -> None:
        self.slides, self.current_slide_index, self.selected_element_id = snapshot

    def _commit(
        self,
        slides: List[Slide],
        current_slide_index: Optional[int] = None,
        selected_element_id: Optional[str] = None
    ) -> None:
        """Record the current state in history, then install the new one."""
        self._undo.append(self._snapshot())
        if len(self._undo) > MAX_HISTORY:
            self._undo.pop(0)
        self._redo.clear()

        self.slides = slides
        if current_slide_index is not None:
            self.current_slide_index = current_slide_index
        self.selected_element_id = selected_element_id

    def _replace_slide(self, index: int, slide: Slide) -> List[Slide]:
        slides = list(self.slides)
        slides[index] = slide
        return slides

    # ============ Slide Actions ============

    def add_slide(self, slide: Optional[Slide] = None) -> int:
        """Append a slide and select it. Returns its index."""
        slides, index = slide_manager.add_slide(self.slides, slide)
        self._commit(slides, index)
        logger.info(f"[EDITOR] Added slide {index + 1}/{len(slides)}")
        return index

    def delete_slide(self, index: int) -> int:
        """Delete a slide. Returns the new current slide index."""
        slides, current = slide_manager.delete_slide(self.slides, index, self.current_slide_index)
        self._commit(slides, current)
        logger.info(f"[EDITOR] Deleted slide {index + 1}, {len(slides)} remaining")
        return current

    def duplicate_slide(self, index: int) -> int:
        """Duplicate a slide right after itself and select the copy."""
        slides, current = slide_manager.duplicate_slide(self.slides, index)
        self._commit(slides, current)
        logger.info(f"[EDITOR] Duplicated slide {index + 1}")
        return current

    def reorder_slides(self, from_index: int, to_index: int) -> int:
        """Move a slide; the moved slide becomes current."""
        slides, current = slide_manager.reorder_slides(self.slides, from_index, to_index)
        if from_index == to_index:
            return current
        self._commit(slides, current, self.selected_element_id)
        logger.info(f"[EDITOR] Moved slide {from_index + 1} to {to_index + 1}")
        return current

    def set_current_slide(self, index: int) -> None:
        slide_manager.check_index(self.slides, index)
        self.current_slide_index = index
        self.selected_element_id = None

    def update_slide_background(
        self,
        index: int,
        color: Optional[str] = None,
        image: Optional[str] = None
    ) -> None:
        """Change a slide's background color and/or background image."""
        slide_manager.check_index(self.slides, index)
        updates: Dict[str, Any] = {}
        if color is not None:
            updates["background_color"] = color
        if image is not None:
            updates["background_image"] = image or None
        if not updates:
            return
        slide = self.slides[index].model_copy(update=updates)
        self._commit(self._replace_slide(index, slide), selected_element_id=self.selected_element_id)

    def set_slides(self, slides: List[Slide]) -> None:
        """Replace the whole document and go back to the first slide."""
        self._commit(self._checked(slides), 0)
        logger.info(f"[EDITOR] Document replaced with {len(slides)} slide(s)")

    def apply_template(self, template: CanvasTemplate) -> None:
        """Replace the document with fresh copies of a template's slides."""
        slides = template.clone_slides()
        self._commit(slides, 0)
        self.template = template
        logger.info(f"[EDITOR] Applied template {template.id} ({len(slides)} slides)")

    def apply_generated(self, result: CarouselBuildResult) -> None:
        """Install the slides of a successful AI fill."""
        self.set_slides(result.slides)

    # ============ Element Actions ============

    def _insert_element(self, element: CanvasElementBase, slide_index: Optional[int] = None) -> CanvasElementBase:
        index = self.current_slide_index if slide_index is None else slide_index
        slide_manager.check_index(self.slides, index)
        slide = self.slides[index]
        updated = Slide(
            id=slide.id,
            background_color=slide.background_color,
            background_image=slide.background_image,
            elements=list(slide.elements) + [element],
        )
        self._commit(self._replace_slide(index, updated), selected_element_id=element.id)
        logger.debug(f"[EDITOR] Added {element.type} element {element.id} to slide {index + 1}")
        return element

    def add_element(self, element_type: str = "text", element: Optional[CanvasElementBase] = None) -> CanvasElementBase:
        """
        Add an element to the current slide and select it.

        Args:
            element_type: "text", "shape" or "image" default element, placed
                near the canvas center
            element: Explicit element to add instead of a default one

        Returns:
            The added element
        """
        if element is None:
            center_x = CANVAS_WIDTH / 2 - 200
            center_y = CANVAS_HEIGHT / 2 - 30
            if element_type == "text":
                element = create_default_text_element(center_x, center_y)
            elif element_type == "shape":
                element = create_default_shape_element(center_x - 100, center_y - 70)
            elif element_type == "image":
                element = create_default_image_element(center_x - 100, center_y - 100)
            else:
                raise ValueError(f"Unknown element type: {element_type}")
        return self._insert_element(element)

    def add_image_element(
        self,
        src: str,
        x: Optional[float] = None,
        y: Optional[float] = None,
        width: float = 400,
        height: float = 400,
        alt: Optional[str] = None
    ) -> ImageElement:
        """Place an image chosen from a graphics library. The source is stored, never fetched."""
        element = ImageElement(
            src=src,
            x=(CANVAS_WIDTH - width) / 2 if x is None else x,
            y=(CANVAS_HEIGHT - height) / 2 if y is None else y,
            width=width,
            height=height,
            alt=alt or "Image",
        )
        return self._insert_element(element)

    def add_shape_element(
        self,
        shape_type: ShapeType = ShapeType.RECT,
        x: Optional[float] = None,
        y: Optional[float] = None,
        width: float = 200,
        height: float = 200,
        fill: str = "#3b82f6",
        stroke: Optional[str] = None,
        stroke_width: Optional[float] = None
    ) -> ShapeElement:
        """Place a shape chosen from a graphics library."""
        shape_type = ShapeType(shape_type)
        if shape_type == ShapeType.CIRCLE:
            width = height = min(width, height)
        element = ShapeElement(
            shape_type=shape_type,
            x=(CANVAS_WIDTH - width) / 2 if x is None else x,
            y=(CANVAS_HEIGHT - height) / 2 if y is None else y,
            width=width,
            height=height,
            fill=fill,
            stroke=stroke,
            stroke_width=stroke_width,
            corner_radius=0,
        )
        return self._insert_element(element)

    def _locate(self, element_id: str, slide_index: Optional[int]) -> Tuple[int, int]:
        index = self.current_slide_index if slide_index is None else slide_index
        slide_manager.check_index(self.slides, index)
        for position, element in enumerate(self.slides[index].elements):
            if element.id == element_id:
                return index, position
        raise ElementNotFound(element_id)

    def update_element(
        self,
        element_id: str,
        updates: Dict[str, Any],
        slide_index: Optional[int] = None
    ) -> CanvasElementBase:
        """
        Apply field updates to an element.

        Raises:
            ElementNotFound: no such element on the slide
            ValueError: unknown field or invalid value
        """
        index, position = self._locate(element_id, slide_index)
        slide = self.slides[index]
        updated = apply_element_updates(slide.elements[position], updates)

        elements = list(slide.elements)
        elements[position] = updated
        new_slide = slide.model_copy(update={"elements": elements})
        self._commit(self._replace_slide(index, new_slide), selected_element_id=self.selected_element_id)
        return updated

    def apply_update_request(self, request: ElementUpdateRequested) -> CanvasElementBase:
        """Apply an update emitted by the stage to the current slide."""
        return self.update_element(request.element_id, request.updates)

    def delete_element(self, element_id: Optional[str] = None, slide_index: Optional[int] = None) -> bool:
        """
        Remove an element (the selected one by default).

        Returns:
            False when nothing was selected, True once deleted
        """
        target = element_id or self.selected_element_id
        if not target:
            return False

        index, position = self._locate(target, slide_index)
        slide = self.slides[index]
        elements = slide.elements[:position] + slide.elements[position + 1:]
        new_slide = slide.model_copy(update={"elements": elements})
        selected = None if self.selected_element_id == target else self.selected_element_id
        self._commit(self._replace_slide(index, new_slide), selected_element_id=selected)
        return True

    def select_element(self, element_id: Optional[str]) -> None:
        if element_id is not None and self.current_slide.find_element(element_id) is None:
            raise ElementNotFound(element_id)
        self.selected_element_id = element_id

    # ============ View Actions ============

    def set_zoom(self, zoom: float) -> float:
        self.zoom = clamp_zoom(zoom)
        return self.zoom

    def toggle_grid(self) -> bool:
        self.show_grid = not self.show_grid
        return self.show_grid

    def stage(self, container_width: float = CANVAS_WIDTH, container_height: float = CANVAS_HEIGHT) -> Stage:
        """
        Stage bound to the current slide, wired back into this editor.

        Each committed update is pushed back into the stage so the next
        gesture starts from the edited geometry.
        """
        stage = Stage(
            slide=self.current_slide,
            selected_element_id=self.selected_element_id,
            container_width=container_width,
            container_height=container_height,
            zoom=self.zoom,
            show_grid=self.show_grid,
            on_select=self.select_element,
        )

        def on_update(request: ElementUpdateRequested) -> None:
            self.apply_update_request(request)
            stage.set_slide(self.current_slide, self.selected_element_id)

        stage.on_update = on_update
        return stage

    # ============ History ============

    def undo(self) -> bool:
        if not self._undo:
            return False
        self._redo.append(self._snapshot())
        self._restore(self._undo.pop())
        return True

    def redo(self) -> bool:
        if not self._redo:
            return False
        self._undo.append(self._snapshot())
        self._restore(self._redo.pop())
        return True

    def reset(self) -> None:
        """Back to a single empty slide (undoable)."""
        self._commit([create_default_slide()], 0)
        self.template = None

    # ============ Long-running operations ============

    @contextmanager
    def exclusive(self, operation: str):
        """
        Mark a generation or export as in flight for the duration of the block.

        Raises:
            OperationInProgress: if a generation or export is already running
        """
        if operation not in (GENERATION, EXPORT):
            raise ValueError(f"Unknown operation: {operation}")
        if self.is_generating or self.is_exporting:
            running = GENERATION if self.is_generating else EXPORT
            logger.warning(f"[EDITOR] Refusing {operation}: {running} already in progress")
            raise OperationInProgress(running)

        flag = "is_generating" if operation == GENERATION else "is_exporting"
        setattr(self, flag, True)
        try:
            yield self
        finally:
            setattr(self, flag, False)

    # ============ Persistence ============

    def to_document(self) -> Dict[str, Any]:
        """JSON-serializable document state (history is not persisted)."""
        return {
            "slides": [slide.model_dump(mode="json") for slide in self.slides],
            "current_slide_index": self.current_slide_index,
            "selected_element_id": self.selected_element_id,
            "template_id": self.template.id if self.template else None,
            "zoom": self.zoom,
            "show_grid": self.show_grid,
        }

    @classmethod
    def from_document(cls, data: Dict[str, Any], template: Optional[CanvasTemplate] = None) -> "CanvasEditor":
        slides = [Slide.model_validate(s) for s in data.get("slides", [])]
        editor = cls(slides=slides or None, template=template)
        index = data.get("current_slide_index", 0)
        if not 0 <= index < len(editor.slides):
            raise InvalidSlideIndex(index, len(editor.slides))
        editor.current_slide_index = index
        editor.selected_element_id = data.get("selected_element_id")
        editor.zoom = clamp_zoom(data.get("zoom", 1.0))
        editor.show_grid = bool(data.get("show_grid", False))
        return editor
