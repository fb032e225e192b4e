"""Upload-time checks for fragment PDFs.

Run before a fragment is accepted into the module catalogue, so page-count
problems surface at upload rather than at build time.
"""

from dataclasses import dataclass
from typing import Optional

from constants import (
    COVER_PAGE_COUNT,
    COVER_TYPE,
    PLANNER_TEMPLATE_PAGES,
    PLANNER_TYPE,
    TYPE_ALIASES,
)
from core.logging import get_logger
from errors import PDFError
from pdf.documents import page_count

logger = get_logger(__name__)

BINDING_TYPE = "binding"

# Planner uploads may hold several template variants
PLANNER_MAX_PAGES = 92
CONTENT_MIN_PAGES = 1
CONTENT_MAX_PAGES = 100


@dataclass(frozen=True)
class FragmentCheck:
    valid: bool
    message: Optional[str] = None
    pages: Optional[int] = None


def validate_fragment_upload(data: bytes, fragment_type: str) -> FragmentCheck:
    """Check that an uploaded PDF has an acceptable page count for its type.

    - cover: exactly 4 pages
    - planner: 2 to 92 pages
    - binding: no pages
    - anything else: 1 to 100 pages
    """
    try:
        pages = page_count(data)
    except PDFError as error:
        logger.error("Failed to read uploaded fragment: {}", error)
        return FragmentCheck(False, "Failed to process PDF file")

    kind = fragment_type.strip().lower()
    kind = TYPE_ALIASES.get(kind, kind)
    if kind == COVER_TYPE:
        if pages != COVER_PAGE_COUNT:
            return FragmentCheck(
                False, f"A cover must have exactly {COVER_PAGE_COUNT} pages", pages
            )
    elif kind == PLANNER_TYPE:
        if not PLANNER_TEMPLATE_PAGES <= pages <= PLANNER_MAX_PAGES:
            return FragmentCheck(
                False,
                f"A planner must have between {PLANNER_TEMPLATE_PAGES} and "
                f"{PLANNER_MAX_PAGES} pages",
                pages,
            )
    elif kind == BINDING_TYPE:
        if pages >= 1:
            return FragmentCheck(False, "A binding must not contain pages", pages)
    elif not CONTENT_MIN_PAGES <= pages <= CONTENT_MAX_PAGES:
        return FragmentCheck(
            False,
            f"A document must have between {CONTENT_MIN_PAGES} and "
            f"{CONTENT_MAX_PAGES} pages",
            pages,
        )

    return FragmentCheck(True, pages=pages)
