"""
Export Routes
=============

API route for downloading a carousel as PNG or PDF.
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Depends, Response
from starlette.concurrency import run_in_threadpool

from ..canvas.editor import EXPORT
from ..canvas.state_manager import StateManager
from ..errors import CarouselStudioError
from ..models.canvas_models import ExportFormat, ExportOptions
from ..services.export_service import ExportService, bundle_png_zip
from .errors import http_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/export", tags=["export"])

# Injected by server
state_manager: Optional[StateManager] = None
export_service: Optional[ExportService] = None


def get_state_manager() -> StateManager:
    if not state_manager:
        raise HTTPException(500, "State manager not initialized")
    return state_manager


def get_export_service() -> ExportService:
    if not export_service:
        raise HTTPException(500, "Export service not initialized")
    return export_service


@router.post("/{session_id}")
async def export_carousel(
    session_id: str,
    options: Optional[ExportOptions] = None,
    sm: StateManager = Depends(get_state_manager),
    service: ExportService = Depends(get_export_service)
):
    """
    Export every slide of the session.

    PDF exports return one document. PNG exports return a single image for a
    one-slide carousel, otherwise a zip archive of all slides.
    """
    editor = sm.get_editor(session_id)
    if editor is None:
        raise HTTPException(status_code=404, detail="Session not found")

    options = options or ExportOptions()
    slides = list(editor.slides)

    try:
        with editor.exclusive(EXPORT):
            result = await run_in_threadpool(service.export_carousel, slides, options)
    except (CarouselStudioError, ValueError) as e:
        raise http_error(e) from e

    if result.format == ExportFormat.PNG and len(result.files) > 1:
        exported = bundle_png_zip(result)
    else:
        exported = result.files[0]

    return Response(
        content=exported.data,
        media_type=exported.content_type,
        headers={
            "Content-Disposition": f'attachment; filename="{exported.file_name}"',
            "X-Page-Count": str(result.page_count),
        }
    )
