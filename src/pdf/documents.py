"""pypdf helpers shared by the fragment handlers and finishing passes."""

import io
from contextlib import ExitStack
from typing import Iterable, Mapping, Optional, Sequence, Union

from pypdf import PdfReader, PdfWriter
from pypdf.errors import PdfReadError
from pypdf.generic import NameObject

from core.logging import get_logger
from errors import PDFError
from pdf.utils import A4_HEIGHT, A4_WIDTH

logger = get_logger(__name__)

Document = Union[PdfReader, PdfWriter]


def load_document(data: bytes, resources: Optional[ExitStack] = None) -> PdfReader:
    """Open PDF bytes.

    Args:
        data: Raw PDF bytes
        resources: Build-scoped exit stack that closes the stream when the
            build finishes

    Raises:
        PDFError: If the bytes are not a readable PDF
    """
    stream = io.BytesIO(data)
    if resources is not None:
        resources.callback(stream.close)
    try:
        return PdfReader(stream)
    except (PdfReadError, ValueError) as error:
        raise PDFError(f"Could not read PDF ({len(data)} bytes): {error}") from error


def document_bytes(document: PdfWriter) -> bytes:
    buffer = io.BytesIO()
    document.write(buffer)
    return buffer.getvalue()


def page_count(data: bytes) -> int:
    """Read just enough of a PDF to count its pages."""
    return len(load_document(data).pages)


def _as_reader(source: Document) -> PdfReader:
    if isinstance(source, PdfWriter):
        return load_document(document_bytes(source))
    return source


def copy_pages(
    target: PdfWriter, source: Document, indices: Optional[Iterable[int]] = None
) -> int:
    """Append pages of ``source`` to ``target``.

    Args:
        target: Document receiving the pages
        source: Document to copy from
        indices: Page indices to copy (all pages if None)

    Returns:
        Number of pages appended
    """
    reader = _as_reader(source)
    if indices is None:
        indices = range(len(reader.pages))

    copied = 0
    for index in indices:
        target.add_page(reader.pages[index])
        copied += 1
    return copied


def add_blank_pages(target: PdfWriter, count: int, size: Sequence[float]) -> int:
    width, height = size
    for _ in range(count):
        target.add_blank_page(width=width, height=height)
    return max(count, 0)


def blank_page_pdf_bytes(width: float = A4_WIDTH, height: float = A4_HEIGHT) -> bytes:
    """Single blank page PDF, A4 by default."""
    writer = PdfWriter()
    writer.add_blank_page(width=width, height=height)
    return document_bytes(writer)


def form_field_names(document: PdfReader) -> set[str]:
    """Names of all form fields, both fully qualified and partial."""
    fields = document.get_fields() or {}
    names = set(fields)
    for value in fields.values():
        partial = value.get("/T")
        if partial:
            names.add(str(partial))
    return names


def fill_and_flatten(document: PdfReader, values: Mapping[str, str]) -> bytes:
    """Fill text fields and bake every field value into the page content.

    Fields not named in ``values`` keep their current value and are baked
    as well. Names in ``values`` that the form does not contain are ignored.
    The returned document has no interactive form left.
    """
    writer = PdfWriter(clone_from=document)

    if "/AcroForm" not in writer.root_object:
        logger.debug("Document has no form; nothing to fill")
        return document_bytes(writer)

    merged = {
        name: str(field["/V"])
        for name, field in (writer.get_fields() or {}).items()
        if field.get("/FT") == "/Tx" and field.get("/V")
    }
    merged.update(values)

    for page in writer.pages:
        if "/Annots" not in page:
            continue
        writer.update_page_form_field_values(
            page, merged, auto_regenerate=False, flatten=True
        )

    writer.remove_annotations(subtypes="/Widget")
    del writer.root_object[NameObject("/AcroForm")]
    return document_bytes(writer)
