"""
Carousel Studio Errors
======================

Exceptions raised by the editing engine. Routes translate them to HTTP errors.
"""

from typing import Optional


class CarouselStudioError(Exception):
    """Base class for editor errors."""


class TemplateNotFound(CarouselStudioError, LookupError):
    """Raised when a template id is not registered."""

    def __init__(self, template_id: str):
        self.template_id = template_id
        super().__init__(f"Template not found: {template_id}")


class GenerationFailed(CarouselStudioError):
    """Upstream content generation failed or returned a malformed payload."""

    def __init__(self, message: str, upstream_error: Optional[str] = None):
        self.upstream_error = upstream_error
        super().__init__(message)


class ExportFailed(CarouselStudioError):
    """Rasterizing or assembling a slide failed; no artifact was produced."""

    def __init__(self, slide_index: int, reason: str):
        self.slide_index = slide_index
        self.reason = reason
        super().__init__(f"Export failed on slide {slide_index + 1}: {reason}")


class CapacityExceeded(CarouselStudioError):
    """A slide add or duplicate would exceed the maximum slide count."""

    def __init__(self, max_slides: int):
        self.max_slides = max_slides
        super().__init__(f"A carousel can hold at most {max_slides} slides")


class InvalidSlideIndex(CarouselStudioError, IndexError):
    """Slide index outside the document."""

    def __init__(self, index: int, slide_count: int):
        self.index = index
        self.slide_count = slide_count
        super().__init__(f"Slide index {index} out of range for {slide_count} slide(s)")


class LastSlideRemoval(CarouselStudioError):
    """Deleting the only remaining slide."""

    def __init__(self):
        super().__init__("Cannot delete the last remaining slide")


class ElementNotFound(CarouselStudioError, LookupError):
    """Element id not present on the slide."""

    def __init__(self, element_id: str):
        self.element_id = element_id
        super().__init__(f"Element not found: {element_id}")


class OperationInProgress(CarouselStudioError):
    """A generation or export is already running for this document."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"A {operation} is already in progress")
