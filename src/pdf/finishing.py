"""Finalization and finishing passes for the assembled booklet.

- ``finalize_document``: pad to a multiple of four pages and append the
  deferred back cover
- ``add_page_numbers``: number the content pages, alternating margins
- ``add_watermark``: overlay a translucent image on every page
- ``configure_compression``: apply a compression preset
"""

import io
from pathlib import Path
from typing import Optional, Sequence

from PIL import Image
from pypdf import PdfReader, PdfWriter
from pypdf.errors import PyPdfError
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from config.settings import settings
from constants import BOOKLET_MULTIPLE
from core.logging import get_logger
from pdf.documents import add_blank_pages, copy_pages
from pdf.models import CompressionLevel, PageNumberOptions
from pdf.utils import page_size_with_bleed

logger = get_logger(__name__)

PAGE_NUMBER_FONT = "Helvetica"

# Pages at each end of the book that belong to the cover
COVER_PAGES_PER_SIDE = 2

# level -> (compress content streams, merge identical objects)
COMPRESSION_PRESETS = {
    CompressionLevel.LOW: (False, False),
    CompressionLevel.MEDIUM: (True, False),
    CompressionLevel.HIGH: (True, True),
}


def finalize_document(
    output: PdfWriter,
    back_cover: Optional[PdfWriter],
    preview_mode: bool,
    size: Optional[Sequence[float]] = None,
) -> int:
    """Align the page count for saddle stitching and append the back cover.

    Outside preview mode, blank full-bleed pages are added so that the
    document plus the two back-cover pages is a multiple of four. The back
    cover is appended in every mode.

    Returns:
        Number of blank pages added
    """
    blanks = 0
    if not preview_mode:
        remainder = (len(output.pages) + COVER_PAGES_PER_SIDE) % BOOKLET_MULTIPLE
        if remainder:
            blanks = add_blank_pages(
                output, BOOKLET_MULTIPLE - remainder, size or page_size_with_bleed()
            )

    if back_cover is not None:
        copy_pages(output, back_cover)

    logger.debug(
        "Finalized document: {} pages ({} alignment blanks)", len(output.pages), blanks
    )
    return blanks


def _overlay(width: float, height: float, draw) -> PdfReader:
    buffer = io.BytesIO()
    overlay = canvas.Canvas(buffer, pagesize=(width, height))
    draw(overlay)
    overlay.showPage()
    overlay.save()
    buffer.seek(0)
    return PdfReader(buffer)


def add_page_numbers(
    output: PdfWriter, options: Optional[PageNumberOptions] = None
) -> int:
    """Number every page except the front and back cover.

    Numbering starts at 1 on the first page after the front cover. Even
    numbers sit bottom-left, odd numbers bottom-right.

    Returns:
        Number of pages numbered
    """
    options = options or PageNumberOptions()
    font_size = options.font_size or settings.page_number_font_size
    margin = options.margin if options.margin is not None else settings.page_number_margin
    c, m, y, k = options.color

    pages = output.pages[COVER_PAGES_PER_SIDE:-COVER_PAGES_PER_SIDE]
    for number, page in enumerate(pages, start=1):
        width = float(page.mediabox.width)
        height = float(page.mediabox.height)
        label = str(number)
        text_width = stringWidth(label, PAGE_NUMBER_FONT, font_size)
        x = margin if number % 2 == 0 else width - margin - text_width

        def draw(pdf_canvas, label=label, x=x):
            pdf_canvas.setFont(PAGE_NUMBER_FONT, font_size)
            pdf_canvas.setFillColorCMYK(c, m, y, k)
            pdf_canvas.drawString(x, margin, label)

        page.merge_page(_overlay(width, height, draw).pages[0])

    return len(pages)


def _load_watermark(path: Path, opacity: float) -> Image.Image:
    with Image.open(path) as source:
        image = source.convert("RGBA")
    alpha = image.getchannel("A").point(lambda value: int(value * opacity))
    image.putalpha(alpha)
    return image


def add_watermark(
    output: PdfWriter,
    image_path: Optional[Path] = None,
    *,
    scale: Optional[float] = None,
    opacity: Optional[float] = None,
) -> bool:
    """Overlay the watermark image at the bottom-left of every page.

    Failures are logged and the document is left as it was.

    Returns:
        True if the watermark was applied
    """
    path = image_path or settings.watermark_path
    if path is None:
        logger.warning("No watermark image configured; skipping watermark")
        return False

    scale = scale if scale is not None else settings.watermark_scale
    opacity = opacity if opacity is not None else settings.watermark_opacity

    try:
        image = _load_watermark(Path(path), opacity)
        width, height = image.size[0] * scale, image.size[1] * scale
        reader = ImageReader(image)

        stamps: dict[tuple[float, float], PdfReader] = {}
        for page in output.pages:
            key = (float(page.mediabox.width), float(page.mediabox.height))
            if key not in stamps:
                stamps[key] = _overlay(
                    *key,
                    lambda pdf_canvas: pdf_canvas.drawImage(
                        reader, 0, 0, width=width, height=height, mask="auto"
                    ),
                )
            page.merge_page(stamps[key].pages[0])
    except (OSError, ValueError, PyPdfError) as error:
        logger.warning("Failed to add watermark from {}: {}", path, error)
        return False

    return True


def configure_compression(
    output: PdfWriter, level: CompressionLevel = CompressionLevel.LOW
) -> bool:
    """Apply a compression preset.

    ``low`` leaves streams as they are, ``medium`` compresses content
    streams, ``high`` also merges identical objects. Failures are logged and
    ignored.
    """
    compress_streams, merge_identical = COMPRESSION_PRESETS[CompressionLevel(level)]
    try:
        if compress_streams:
            for page in output.pages:
                page.compress_content_streams()
        if merge_identical:
            output.compress_identical_objects(remove_identicals=True, remove_orphans=True)
    except (ValueError, TypeError, PyPdfError) as error:
        logger.warning("Could not apply {} compression: {}", level, error)
        return False
    return True
