"""
Tests for PNG and PDF export.
"""

import io
import re
import zipfile
from datetime import date
from urllib.parse import quote

import pytest
from PIL import Image
from reportlab.pdfgen import canvas

from carousel_studio.canvas.editor import CanvasEditor
from carousel_studio.errors import ExportFailed
from carousel_studio.models.canvas_models import ExportFormat, ExportOptions, ExportQuality, Slide
from carousel_studio.services.export_service import ExportService, bundle_png_zip, generate_filename
from carousel_studio.services.slide_renderer import IMAGE_PLACEHOLDER_FILL, SlideRenderer

PDF_PAGE = re.compile(rb"/Type\s*/Page\b")


class FailingRenderer(SlideRenderer):
    """Raises on one slide id."""

    def __init__(self, failing_id):
        self.failing_id = failing_id

    def render(self, slide, pixel_ratio=1.0):
        if slide.id == self.failing_id:
            raise OSError("font file unreadable")
        return super().render(slide, pixel_ratio=pixel_ratio)


@pytest.fixture
def service():
    return ExportService()


def test_png_export_one_file_per_slide(service, sample_slides):
    result = service.export_carousel(
        sample_slides, ExportOptions(format=ExportFormat.PNG, quality=ExportQuality.MEDIUM)
    )

    assert result.page_count == 3
    assert len(result.files) == 3
    for exported in result.files:
        assert exported.content_type == "image/png"
        with Image.open(io.BytesIO(exported.data)) as image:
            assert image.size == (2160, 2160)


def test_png_names_use_requested_stem(service, sample_slides):
    result = service.export_carousel(
        sample_slides, ExportOptions(format=ExportFormat.PNG, quality=ExportQuality.LOW, file_name="launch.png")
    )
    assert [f.file_name for f in result.files] == [
        "launch-slide-1.png", "launch-slide-2.png", "launch-slide-3.png"
    ]


def test_png_default_names(service, sample_slides):
    result = service.export_carousel(sample_slides[:1], ExportOptions(format=ExportFormat.PNG, quality=ExportQuality.LOW))
    assert re.fullmatch(r"slide-1-\d{4}-\d{2}-\d{2}\.png", result.files[0].file_name)


def test_pdf_export_has_one_page_per_slide(service, sample_slides):
    result = service.export_carousel(sample_slides, ExportOptions(format=ExportFormat.PDF, quality=ExportQuality.LOW))

    assert len(result.files) == 1
    pdf = result.files[0]
    assert pdf.content_type == "application/pdf"
    assert pdf.data.startswith(b"%PDF")
    assert len(PDF_PAGE.findall(pdf.data)) == 3
    assert re.fullmatch(r"carousel-\d{4}-\d{2}-\d{2}\.pdf", pdf.file_name)


def test_pdf_file_name_gets_extension(service, sample_slides):
    result = service.export_carousel(
        sample_slides[:1], ExportOptions(format=ExportFormat.PDF, quality=ExportQuality.LOW, file_name="deck")
    )
    assert result.files[0].file_name == "deck.pdf"


@pytest.mark.parametrize("export_format", [ExportFormat.PNG, ExportFormat.PDF])
def test_progress_is_monotonic_and_completes(service, sample_slides, export_format):
    progress = []
    service.export_carousel(
        sample_slides,
        ExportOptions(format=export_format, quality=ExportQuality.LOW),
        on_progress=progress.append
    )
    assert progress == sorted(progress)
    assert progress[-1] == 1.0
    assert len(progress) == 3


@pytest.mark.parametrize("export_format", [ExportFormat.PNG, ExportFormat.PDF])
def test_failure_names_slide_and_returns_nothing(sample_slides, export_format):
    service = ExportService(renderer=FailingRenderer("s2"))
    progress = []

    with pytest.raises(ExportFailed) as exc_info:
        service.export_carousel(
            sample_slides, ExportOptions(format=export_format, quality=ExportQuality.LOW),
            on_progress=progress.append
        )

    assert exc_info.value.slide_index == 1
    assert "font file unreadable" in str(exc_info.value)
    assert progress == [pytest.approx(1 / 3)]


def test_empty_export_rejected(service):
    with pytest.raises(ValueError):
        service.export_carousel([])


def test_generate_filename():
    assert generate_filename("carousel", "pdf", today=date(2024, 3, 9)) == "carousel-2024-03-09.pdf"


def test_bundle_png_zip(service, sample_slides):
    result = service.export_carousel(sample_slides, ExportOptions(format=ExportFormat.PNG, quality=ExportQuality.LOW))
    bundle = bundle_png_zip(result, "deck.zip")

    assert bundle.file_name == "deck.zip"
    with zipfile.ZipFile(io.BytesIO(bundle.data)) as archive:
        assert archive.namelist() == [f.file_name for f in result.files]


def test_bundle_rejects_pdf(service):
    result = service.export_carousel([Slide()], ExportOptions(format=ExportFormat.PDF, quality=ExportQuality.LOW))
    with pytest.raises(ValueError):
        bundle_png_zip(result)


def test_library_icon_exports_as_placeholder(service):
    editor = CanvasEditor()
    svg = '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 24"><circle cx="12" cy="12" r="10"/></svg>'
    editor.add_image_element("data:image/svg+xml," + quote(svg), 100, 100, 80, 80)

    result = service.export_carousel(editor.slides, ExportOptions(format=ExportFormat.PNG, quality=ExportQuality.LOW))

    with Image.open(io.BytesIO(result.files[0].data)) as image:
        assert image.convert("RGB").getpixel((140, 140)) == IMAGE_PLACEHOLDER_FILL[:3]


def test_pdf_write_failure_is_typed(service, sample_slides, monkeypatch):
    def failing_save(self):
        raise OSError("disk full")

    monkeypatch.setattr(canvas.Canvas, "save", failing_save)

    with pytest.raises(ExportFailed) as exc_info:
        service.export_carousel(sample_slides, ExportOptions(format=ExportFormat.PDF, quality=ExportQuality.LOW))

    assert exc_info.value.slide_index == 2
    assert "disk full" in str(exc_info.value)
