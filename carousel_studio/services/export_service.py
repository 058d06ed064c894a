"""
Export Service
==============

Turns a finished carousel into downloadable artifacts: one PNG per slide,
or a single multi-page PDF with one square page per slide.

Slides are rasterized by SlideRenderer. A failure on any slide aborts the
whole export with ExportFailed; partial artifacts are never returned.
"""

import io
import logging
import time
import zipfile
from datetime import date
from typing import Callable, List, Optional

from PIL import Image
from pydantic import BaseModel, Field
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from ..errors import ExportFailed
from ..models.canvas_models import CANVAS_WIDTH, CANVAS_HEIGHT, ExportFormat, ExportOptions, Slide
from .slide_renderer import SlideRenderer

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]

CONTENT_TYPES = {
    ExportFormat.PNG: "image/png",
    ExportFormat.PDF: "application/pdf",
}


class ExportedFile(BaseModel):
    file_name: str
    content_type: str
    data: bytes = Field(repr=False)


class ExportResult(BaseModel):
    """Artifacts of one export run."""
    format: ExportFormat
    files: List[ExportedFile]
    page_count: int
    export_time_ms: Optional[float] = None


def generate_filename(prefix: str, extension: str, today: Optional[date] = None) -> str:
    """Filename of the form prefix-YYYY-MM-DD.extension."""
    stamp = (today or date.today()).isoformat()
    return f"{prefix}-{stamp}.{extension}"


def _strip_extension(file_name: str) -> str:
    stem, dot, ext = file_name.rpartition(".")
    return stem if dot and ext.lower() in ("png", "pdf", "zip") else file_name


def bundle_png_zip(result: ExportResult, file_name: Optional[str] = None) -> ExportedFile:
    """
    Pack the PNG files of an export into one zip archive.

    Raises:
        ValueError: if the export is not a PNG export
    """
    if result.format != ExportFormat.PNG:
        raise ValueError("Only PNG exports can be bundled as a zip archive")

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        for exported in result.files:
            archive.writestr(exported.file_name, exported.data)

    return ExportedFile(
        file_name=file_name or generate_filename("carousel", "zip"),
        content_type="application/zip",
        data=buffer.getvalue()
    )


class ExportService:
    """
    Rasterizes slides and assembles PNG or PDF exports.

    Args:
        renderer: Slide rasterizer (a fresh SlideRenderer by default)
    """

    def __init__(self, renderer: Optional[SlideRenderer] = None):
        self.renderer = renderer or SlideRenderer()

    def export_carousel(
        self,
        slides: List[Slide],
        options: Optional[ExportOptions] = None,
        on_progress: Optional[ProgressCallback] = None
    ) -> ExportResult:
        """
        Export every slide of a carousel.

        Args:
            slides: Slides in document order
            options: Format, quality and optional file name
            on_progress: Called with slides_processed / total after each slide

        Returns:
            ExportResult with one PNG per slide or a single PDF

        Raises:
            ExportFailed: if any slide cannot be rendered or embedded
            ValueError: if slides is empty
        """
        if not slides:
            raise ValueError("No slides provided for export")

        options = options or ExportOptions()
        start_time = time.time()
        logger.info(
            f"[EXPORT] Starting {options.format.value} export: {len(slides)} slide(s), "
            f"quality={options.quality.value}, pixel_ratio={options.pixel_ratio}"
        )

        if options.format == ExportFormat.PNG:
            files = self._export_png(slides, options, on_progress)
        elif options.format == ExportFormat.PDF:
            files = self._export_pdf(slides, options, on_progress)
        else:
            raise ValueError(f"Unsupported export format: {options.format}")

        elapsed_ms = (time.time() - start_time) * 1000
        logger.info(f"[EXPORT] Completed {options.format.value} export in {elapsed_ms:.0f}ms")

        return ExportResult(
            format=options.format,
            files=files,
            page_count=len(slides),
            export_time_ms=elapsed_ms
        )

    def _render(self, slide: Slide, index: int, pixel_ratio: int) -> Image.Image:
        try:
            return self.renderer.render(slide, pixel_ratio=pixel_ratio)
        except Exception as e:
            logger.error(f"[EXPORT] Failed to render slide {index + 1} ({slide.id}): {e}", exc_info=True)
            raise ExportFailed(index, str(e)) from e

    @staticmethod
    def _report(on_progress: Optional[ProgressCallback], processed: int, total: int) -> None:
        if on_progress:
            on_progress(min(1.0, processed / total))

    def _export_png(
        self,
        slides: List[Slide],
        options: ExportOptions,
        on_progress: Optional[ProgressCallback]
    ) -> List[ExportedFile]:
        stem = _strip_extension(options.file_name) if options.file_name else None
        files: List[ExportedFile] = []

        for index, slide in enumerate(slides):
            image = self._render(slide, index, options.pixel_ratio)
            buffer = io.BytesIO()
            try:
                image.save(buffer, format="PNG")
            except (OSError, ValueError) as e:
                raise ExportFailed(index, f"PNG encoding failed: {e}") from e

            name = f"{stem}-slide-{index + 1}.png" if stem else generate_filename(f"slide-{index + 1}", "png")
            files.append(ExportedFile(
                file_name=name,
                content_type=CONTENT_TYPES[ExportFormat.PNG],
                data=buffer.getvalue()
            ))
            self._report(on_progress, index + 1, len(slides))

        return files

    def _export_pdf(
        self,
        slides: List[Slide],
        options: ExportOptions,
        on_progress: Optional[ProgressCallback]
    ) -> List[ExportedFile]:
        buffer = io.BytesIO()
        pdf = canvas.Canvas(buffer, pagesize=(CANVAS_WIDTH, CANVAS_HEIGHT))
        pdf.setTitle("LinkedIn Carousel")

        for index, slide in enumerate(slides):
            image = self._render(slide, index, options.pixel_ratio)
            try:
                pdf.setPageSize((CANVAS_WIDTH, CANVAS_HEIGHT))
                pdf.drawImage(ImageReader(image), 0, 0, width=CANVAS_WIDTH, height=CANVAS_HEIGHT)
                pdf.showPage()
            except Exception as e:
                logger.error(f"[EXPORT] Failed to embed slide {index + 1} in PDF: {e}", exc_info=True)
                raise ExportFailed(index, f"PDF embedding failed: {e}") from e
            self._report(on_progress, index + 1, len(slides))

        try:
            pdf.save()
        except Exception as e:
            logger.error(f"[EXPORT] Failed to write PDF: {e}", exc_info=True)
            raise ExportFailed(len(slides) - 1, f"PDF write failed: {e}") from e

        file_name = options.file_name or generate_filename("carousel", "pdf")
        if not file_name.lower().endswith(".pdf"):
            file_name = f"{file_name}.pdf"

        return [ExportedFile(
            file_name=file_name,
            content_type=CONTENT_TYPES[ExportFormat.PDF],
            data=buffer.getvalue()
        )]
