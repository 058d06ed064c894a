"""
Canvas Routes
==============

API routes for carousel sessions and slide management.
"""

import io
import logging
from typing import Optional, Dict, Any

from fastapi import APIRouter, HTTPException, Depends, Response
from pydantic import BaseModel, Field

from ..canvas.editor import CanvasEditor
from ..canvas.state_manager import StateManager
from ..errors import CarouselStudioError
from ..models.canvas_models import Slide
from ..templates.registry import get_registry
from .errors import http_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/canvas", tags=["canvas"])

# Injected by server
state_manager: Optional[StateManager] = None


class CreateSessionRequest(BaseModel):
    """Request to create a session, optionally from a template."""
    session_id: Optional[str] = None
    template_id: Optional[str] = None


class AddSlideRequest(BaseModel):
    slide: Optional[Slide] = None


class ReorderRequest(BaseModel):
    from_index: int
    to_index: int


class BackgroundRequest(BaseModel):
    color: Optional[str] = None
    image: Optional[str] = None


class CurrentSlideRequest(BaseModel):
    index: int


class ApplyTemplateRequest(BaseModel):
    template_id: str


class ViewRequest(BaseModel):
    zoom: Optional[float] = None
    toggle_grid: bool = False


class PreviewParams(BaseModel):
    width: float = Field(default=800, gt=0)
    height: float = Field(default=800, gt=0)


def get_state_manager() -> StateManager:
    if not state_manager:
        raise HTTPException(500, "State manager not initialized")
    return state_manager


def _editor(sm: StateManager, session_id: str) -> CanvasEditor:
    editor = sm.get_editor(session_id)
    if editor is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return editor


def _saved(sm: StateManager, session_id: str, **extra: Any) -> Dict[str, Any]:
    sm.save_session(session_id)
    return {**extra, "state": sm.get_session(session_id)}


@router.post("/session")
async def create_session(
    request: Optional[CreateSessionRequest] = None,
    sm: StateManager = Depends(get_state_manager)
):
    """Create a new carousel session."""
    request = request or CreateSessionRequest()
    template = None
    if request.template_id:
        try:
            template = get_registry().get_template(request.template_id)
        except CarouselStudioError as e:
            raise http_error(e) from e

    session_id = sm.create_session(request.session_id, template=template)
    return {"session_id": session_id, "message": "Session created", "state": sm.get_session(session_id)}


@router.get("/state/{session_id}")
async def get_state(session_id: str, sm: StateManager = Depends(get_state_manager)):
    """Get carousel state for session."""
    session = sm.get_session(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


@router.delete("/state/{session_id}")
async def clear_canvas(session_id: str, sm: StateManager = Depends(get_state_manager)):
    """Reset the carousel to a single empty slide."""
    editor = _editor(sm, session_id)
    editor.reset()
    return _saved(sm, session_id, message="Canvas cleared")


@router.post("/{session_id}/slides")
async def add_slide(
    session_id: str,
    request: Optional[AddSlideRequest] = None,
    sm: StateManager = Depends(get_state_manager)
):
    editor = _editor(sm, session_id)
    try:
        index = editor.add_slide(request.slide if request else None)
    except CarouselStudioError as e:
        raise http_error(e) from e
    return _saved(sm, session_id, current_slide_index=index)


@router.delete("/{session_id}/slides/{index}")
async def delete_slide(session_id: str, index: int, sm: StateManager = Depends(get_state_manager)):
    editor = _editor(sm, session_id)
    try:
        current = editor.delete_slide(index)
    except CarouselStudioError as e:
        raise http_error(e) from e
    return _saved(sm, session_id, current_slide_index=current)


@router.post("/{session_id}/slides/{index}/duplicate")
async def duplicate_slide(session_id: str, index: int, sm: StateManager = Depends(get_state_manager)):
    editor = _editor(sm, session_id)
    try:
        current = editor.duplicate_slide(index)
    except CarouselStudioError as e:
        raise http_error(e) from e
    return _saved(sm, session_id, current_slide_index=current)


@router.post("/{session_id}/slides/reorder")
async def reorder_slides(
    session_id: str,
    request: ReorderRequest,
    sm: StateManager = Depends(get_state_manager)
):
    editor = _editor(sm, session_id)
    try:
        current = editor.reorder_slides(request.from_index, request.to_index)
    except CarouselStudioError as e:
        raise http_error(e) from e
    return _saved(sm, session_id, current_slide_index=current)


@router.put("/{session_id}/slides/{index}/background")
async def update_background(
    session_id: str,
    index: int,
    request: BackgroundRequest,
    sm: StateManager = Depends(get_state_manager)
):
    editor = _editor(sm, session_id)
    try:
        editor.update_slide_background(index, color=request.color, image=request.image)
    except CarouselStudioError as e:
        raise http_error(e) from e
    return _saved(sm, session_id)


@router.put("/{session_id}/current-slide")
async def set_current_slide(
    session_id: str,
    request: CurrentSlideRequest,
    sm: StateManager = Depends(get_state_manager)
):
    editor = _editor(sm, session_id)
    try:
        editor.set_current_slide(request.index)
    except CarouselStudioError as e:
        raise http_error(e) from e
    return _saved(sm, session_id, current_slide_index=request.index)


@router.post("/{session_id}/template")
async def apply_template(
    session_id: str,
    request: ApplyTemplateRequest,
    sm: StateManager = Depends(get_state_manager)
):
    """Replace the carousel with a fresh copy of a template."""
    editor = _editor(sm, session_id)
    try:
        template = get_registry().get_template(request.template_id)
    except CarouselStudioError as e:
        raise http_error(e) from e
    editor.apply_template(template)
    return _saved(sm, session_id, template_id=template.id)


@router.put("/{session_id}/view")
async def update_view(
    session_id: str,
    request: ViewRequest,
    sm: StateManager = Depends(get_state_manager)
):
    """Zoom and grid settings."""
    editor = _editor(sm, session_id)
    if request.zoom is not None:
        editor.set_zoom(request.zoom)
    if request.toggle_grid:
        editor.toggle_grid()
    return _saved(sm, session_id, zoom=editor.zoom, show_grid=editor.show_grid)


@router.post("/{session_id}/undo")
async def undo(session_id: str, sm: StateManager = Depends(get_state_manager)):
    editor = _editor(sm, session_id)
    return _saved(sm, session_id, changed=editor.undo())


@router.post("/{session_id}/redo")
async def redo(session_id: str, sm: StateManager = Depends(get_state_manager)):
    editor = _editor(sm, session_id)
    return _saved(sm, session_id, changed=editor.redo())


@router.get("/{session_id}/preview")
async def preview(
    session_id: str,
    params: PreviewParams = Depends(),
    sm: StateManager = Depends(get_state_manager)
):
    """PNG of the current slide at on-screen size, with the grid if it is shown."""
    editor = _editor(sm, session_id)
    image = editor.stage(params.width, params.height).render_preview()
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return Response(content=buffer.getvalue(), media_type="image/png")
