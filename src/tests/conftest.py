"""Shared fixtures: fragment PDFs generated on the fly with reportlab."""

import io
import sys
from datetime import date
from pathlib import Path

import pytest
from pypdf import PdfReader, PdfWriter
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from config.settings import PlannerPressSettings  # noqa: E402
from pdf.context import BuildContext  # noqa: E402
from pdf.models import BookDetails, FragmentDescriptor, Period  # noqa: E402

PLANNER_FIELDS = [
    ["xA", "xB", "xC", "xD", "xE"],
    ["xA_Date", "xB_Date", "xC_Date", "xD_Date", "xE_Date"],
]


def make_pdf(pages: int = 1, fields_per_page=None, color=None, values=None) -> bytes:
    """PDF with ``pages`` A4 pages.

    Args:
        pages: Number of pages
        fields_per_page: Optional list (one entry per page) of text field names
        color: Optional ("rgb", r, g, b) or ("cmyk", c, m, y, k) fill for a box
        values: Optional mapping of field name to prefilled value
    """
    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=A4)
    fields_per_page = fields_per_page or []
    values = values or {}

    for number in range(pages):
        if color is not None:
            kind, *components = color
            if kind == "rgb":
                pdf.setFillColorRGB(*components)
            else:
                pdf.setFillColorCMYK(*components)
            pdf.rect(72, 72, 200, 100, stroke=0, fill=1)

        pdf.drawString(72, 760, f"Page {number + 1}")
        names = fields_per_page[number] if number < len(fields_per_page) else []
        for offset, name in enumerate(names):
            pdf.acroForm.textfield(
                name=name,
                value=values.get(name, ""),
                x=72,
                y=700 - offset * 40,
                width=200,
                height=24,
                borderWidth=0,
            )
        pdf.showPage()

    pdf.save()
    return buffer.getvalue()


def read_pdf(data: bytes) -> PdfReader:
    return PdfReader(io.BytesIO(data))


@pytest.fixture
def config():
    return PlannerPressSettings(grayscale_strategy="local")


@pytest.fixture
def cover_pdf():
    return make_pdf(4, [["BOOK_TITLE", "FROM_TO"]])


@pytest.fixture
def planner_pdf():
    return make_pdf(2, PLANNER_FIELDS)


@pytest.fixture
def content_pdf():
    return make_pdf(3)


@pytest.fixture
def book():
    return BookDetails(
        title="Klasse 7b",
        period=Period(start=date(2026, 1, 1), end=date(2026, 1, 1)),
    )


@pytest.fixture
def make_context(book, config):
    """Factory for handler contexts writing into a fresh (or given) output."""

    def factory(fragment_type="default", output=None, **overrides):
        fragment = overrides.pop(
            "fragment",
            FragmentDescriptor(id=f"{fragment_type}-1", type=fragment_type, source=b""),
        )
        return BuildContext(
            book=overrides.pop("book", book),
            fragment=fragment,
            output=output if output is not None else PdfWriter(),
            settings=config,
            today=date(2026, 1, 1),
            **overrides,
        )

    return factory


@pytest.fixture
def pdf_factory():
    return make_pdf


@pytest.fixture
def pdf_reader():
    return read_pdf
