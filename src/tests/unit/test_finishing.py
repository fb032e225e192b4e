"""Unit tests for pdf/finishing.py"""

import pytest
from PIL import Image
from pypdf import PageObject, PdfWriter

from pdf.finishing import (
    add_page_numbers,
    add_watermark,
    configure_compression,
    finalize_document,
)
from pdf.models import CompressionLevel, PageNumberOptions


def _document(pages: int, width: float = 595, height: float = 842) -> PdfWriter:
    writer = PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=width, height=height)
    return writer


def _back_cover() -> PdfWriter:
    return _document(2, width=300, height=300)


def _number_x(page) -> float:
    """Horizontal position of the first text drawn on ``page``."""
    positions = []

    def visit(text, cm, tm, font_dict, font_size):
        if text.strip():
            positions.append(tm[4] * cm[0] + cm[4])

    page.extract_text(visitor_text=visit)
    return positions[0]


@pytest.fixture
def watermark_png(tmp_path):
    path = tmp_path / "watermark.png"
    Image.new("RGBA", (40, 20), (200, 0, 0, 255)).save(path)
    return path


class TestFinalize:
    @pytest.mark.parametrize("pages", range(8))
    def test_total_is_multiple_of_four(self, pages):
        output = _document(pages)

        blanks = finalize_document(output, _back_cover(), preview_mode=False)

        assert len(output.pages) % 4 == 0
        assert 0 <= blanks <= 3
        assert len(output.pages) == pages + blanks + 2

    def test_back_cover_is_last(self):
        output = _document(3)
        finalize_document(output, _back_cover(), preview_mode=False)

        assert [round(float(p.mediabox.width)) for p in output.pages[-2:]] == [300, 300]

    def test_blanks_use_given_size(self):
        output = _document(1)
        finalize_document(output, _back_cover(), preview_mode=False, size=(400, 500))

        assert round(float(output.pages[1].mediabox.width)) == 400

    def test_preview_skips_alignment(self):
        output = _document(3)

        blanks = finalize_document(output, _back_cover(), preview_mode=True)

        assert blanks == 0
        assert len(output.pages) == 5

    def test_without_back_cover(self):
        output = _document(4)
        finalize_document(output, None, preview_mode=True)
        assert len(output.pages) == 4


class TestPageNumbers:
    def test_covers_are_not_numbered(self):
        output = _document(8)

        numbered = add_page_numbers(output, PageNumberOptions(font_size=10, margin=20))

        assert numbered == 4
        assert output.pages[0].extract_text() == ""
        assert output.pages[-1].extract_text() == ""
        assert output.pages[2].extract_text().strip() == "1"
        assert output.pages[5].extract_text().strip() == "4"

    def test_even_numbers_left_odd_numbers_right(self):
        output = _document(8)

        add_page_numbers(output, PageNumberOptions(font_size=10, margin=20))

        # content page 1 is output page 2, content page 2 is output page 3
        assert _number_x(output.pages[2]) > 500
        assert _number_x(output.pages[3]) < 100
        assert _number_x(output.pages[4]) > 500

    def test_cover_only_document(self):
        output = _document(4)
        assert add_page_numbers(output) == 0


class TestWatermark:
    def test_every_page_is_stamped(self, watermark_png):
        output = _document(3)

        assert add_watermark(output, watermark_png, scale=1.0, opacity=0.5) is True
        for page in output.pages:
            assert "/XObject" in page["/Resources"]

    def test_mixed_page_sizes(self, watermark_png):
        output = _document(2)
        output.add_blank_page(width=300, height=300)

        assert add_watermark(output, watermark_png) is True

    def test_missing_image_leaves_document_untouched(self, tmp_path):
        output = _document(2)

        assert add_watermark(output, tmp_path / "missing.png") is False
        assert "/XObject" not in output.pages[0].get("/Resources", {})

    def test_no_configured_image(self, monkeypatch):
        from config.settings import settings

        monkeypatch.setattr(settings, "watermark_path", None)
        assert add_watermark(_document(1)) is False


class TestCompression:
    @pytest.mark.parametrize("level", list(CompressionLevel))
    def test_presets_apply(self, level, pdf_factory, pdf_reader):
        output = PdfWriter(clone_from=pdf_reader(pdf_factory(3, color=("rgb", 0, 0, 1))))

        assert configure_compression(output, level) is True
        assert len(output.pages) == 3

    def test_level_accepts_string(self):
        assert configure_compression(_document(1), "medium") is True

    def test_failure_is_logged_and_ignored(self, monkeypatch, pdf_factory, pdf_reader):
        output = PdfWriter(clone_from=pdf_reader(pdf_factory(2)))

        def broken(self, *args, **kwargs):
            raise ValueError("broken stream")

        monkeypatch.setattr(PageObject, "compress_content_streams", broken)

        assert configure_compression(output, CompressionLevel.MEDIUM) is False
        assert len(output.pages) == 2
        assert "Page 1" in output.pages[0].extract_text()
