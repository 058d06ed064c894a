"""
Element Routes
===============

API routes for element management on the current slide.
"""

import logging
from typing import Optional, Dict, Any, Literal

from fastapi import APIRouter, HTTPException, Depends
from pydantic import BaseModel, Field

from ..canvas.editor import CanvasEditor
from ..canvas.state_manager import StateManager
from ..errors import CarouselStudioError
from ..models.canvas_models import CanvasElement, ShapeType
from .errors import http_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/element", tags=["elements"])

# Injected by server
state_manager: Optional[StateManager] = None


class ElementRequest(BaseModel):
    """
    Request to add an element.

    Either a complete element, or a kind plus library asset details
    (image src, shape type) for a default-sized element.
    """
    element_type: Literal["text", "shape", "image"] = "text"
    element: Optional[CanvasElement] = None
    src: Optional[str] = None
    shape_type: Optional[ShapeType] = None
    x: Optional[float] = None
    y: Optional[float] = None


class ElementUpdate(BaseModel):
    """Request to update element fields."""
    updates: Dict[str, Any] = Field(default_factory=dict)
    slide_index: Optional[int] = None


class SelectRequest(BaseModel):
    element_id: Optional[str] = None


class ElementResponse(BaseModel):
    """Response for element operations."""
    element_id: str
    element_type: str
    message: str
    element: Dict[str, Any]


def get_state_manager() -> StateManager:
    if not state_manager:
        raise HTTPException(500, "State manager not initialized")
    return state_manager


def _editor(sm: StateManager, session_id: str) -> CanvasEditor:
    editor = sm.get_editor(session_id)
    if editor is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return editor


@router.post("/{session_id}")
async def add_element(
    session_id: str,
    request: ElementRequest,
    sm: StateManager = Depends(get_state_manager)
) -> ElementResponse:
    """Add element to the current slide."""
    editor = _editor(sm, session_id)

    try:
        if request.element is not None:
            element = editor.add_element(element=request.element)
        elif request.element_type == "image" and request.src:
            element = editor.add_image_element(request.src, x=request.x, y=request.y)
        elif request.element_type == "shape" and request.shape_type:
            element = editor.add_shape_element(request.shape_type, x=request.x, y=request.y)
        else:
            element = editor.add_element(request.element_type)
    except (CarouselStudioError, ValueError) as e:
        raise http_error(e) from e

    sm.save_session(session_id)
    return ElementResponse(
        element_id=element.id,
        element_type=element.type,
        message="Element added",
        element=element.model_dump(mode="json")
    )


@router.delete("/{session_id}/{element_id}")
async def remove_element(session_id: str, element_id: str, sm: StateManager = Depends(get_state_manager)):
    """Remove element from the current slide."""
    editor = _editor(sm, session_id)
    try:
        editor.delete_element(element_id)
    except CarouselStudioError as e:
        raise http_error(e) from e

    sm.save_session(session_id)
    return {"message": "Element removed", "element_id": element_id}


@router.put("/{session_id}/{element_id}")
async def update_element(
    session_id: str,
    element_id: str,
    request: ElementUpdate,
    sm: StateManager = Depends(get_state_manager)
) -> ElementResponse:
    """Update element fields (position, size, rotation, text, style)."""
    editor = _editor(sm, session_id)
    try:
        element = editor.update_element(element_id, request.updates, slide_index=request.slide_index)
    except (CarouselStudioError, ValueError) as e:
        raise http_error(e) from e

    sm.save_session(session_id)
    return ElementResponse(
        element_id=element.id,
        element_type=element.type,
        message="Element updated",
        element=element.model_dump(mode="json")
    )


@router.put("/{session_id}")
async def select_element(
    session_id: str,
    request: SelectRequest,
    sm: StateManager = Depends(get_state_manager)
):
    """Select an element on the current slide, or clear the selection."""
    editor = _editor(sm, session_id)
    try:
        editor.select_element(request.element_id)
    except CarouselStudioError as e:
        raise http_error(e) from e

    sm.save_session(session_id)
    return {"selected_element_id": editor.selected_element_id}
