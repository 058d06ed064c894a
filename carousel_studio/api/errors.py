"""
HTTP Error Translation
======================

Maps editor exceptions to HTTPException status codes.
"""

import logging

from fastapi import HTTPException

from ..errors import (
    CarouselStudioError, CapacityExceeded, ElementNotFound, ExportFailed, GenerationFailed,
    InvalidSlideIndex, LastSlideRemoval, OperationInProgress, TemplateNotFound
)

logger = logging.getLogger(__name__)

STATUS_CODES = {
    TemplateNotFound: 404,
    ElementNotFound: 404,
    OperationInProgress: 409,
    CapacityExceeded: 422,
    InvalidSlideIndex: 422,
    LastSlideRemoval: 422,
    GenerationFailed: 502,
    ExportFailed: 500,
}


def http_error(exc: Exception) -> HTTPException:
    """HTTPException for an editor error or a rejected value."""
    if isinstance(exc, CarouselStudioError):
        status = STATUS_CODES.get(type(exc), 500)
        detail = {"error": type(exc).__name__, "message": str(exc)}
        if isinstance(exc, ExportFailed):
            detail["slide_index"] = exc.slide_index
        if isinstance(exc, GenerationFailed) and exc.upstream_error:
            detail["upstream_error"] = exc.upstream_error
    elif isinstance(exc, ValueError):
        status = 422
        detail = {"error": "InvalidValue", "message": str(exc)}
    else:
        raise TypeError(f"No HTTP mapping for {type(exc).__name__}") from exc

    if status >= 500:
        logger.error(f"[API] {detail['error']}: {detail['message']}")
    return HTTPException(status_code=status, detail=detail)
