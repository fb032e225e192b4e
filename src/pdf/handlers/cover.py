"""Cover fragment handler.

A cover has exactly four pages. Pages 0-1 are the front cover and go into
the output right away; pages 2-3 are the back cover and are returned as a
separate document that the orchestrator appends last.

Tags:
- BOOK_TITLE: the book title
- FROM_TO: the period, ``2026`` or ``2026/2027``
"""

from pypdf import PdfWriter

from constants import (
    COVER_BACK_PAGES,
    COVER_FRONT_PAGES,
    COVER_PAGE_COUNT,
    COVER_TYPE,
    PERIOD_TAG,
    TITLE_TAG,
)
from core.logging import get_logger
from errors import PageCountError
from pdf.context import BuildContext, HandlerResult
from pdf.documents import copy_pages
from pdf.handlers.base import BaseHandler, TagDefinition
from pdf.utils import format_period_label

logger = get_logger(__name__)


def _period(context: BuildContext) -> str:
    period = context.book.period
    return format_period_label(period.start, period.end)


class CoverHandler(BaseHandler):
    module_type = COVER_TYPE
    counts_from_source = False

    _tags = [
        TagDefinition(TITLE_TAG, lambda ctx: ctx.book.title, required=True),
        TagDefinition(PERIOD_TAG, _period, required=True),
    ]

    @property
    def tags(self) -> list[TagDefinition]:
        return self._tags

    def process(self, context: BuildContext, source: bytes) -> HandlerResult:
        document = self.load(context, source)
        pages = len(document.pages)
        if pages != COVER_PAGE_COUNT:
            raise PageCountError(self.module_type, COVER_PAGE_COUNT, pages)

        self.validate(document)
        filled = self.fill(document, context)
        if context.grayscale:
            filled = self.to_grayscale(context, filled)
        processed = self.load(context, filled)

        added = copy_pages(context.output, processed, COVER_FRONT_PAGES)

        back_cover = PdfWriter()
        copy_pages(back_cover, processed, COVER_BACK_PAGES)

        logger.debug(
            "Cover {}: {} front pages added, back cover deferred",
            context.fragment.id,
            added,
        )
        return HandlerResult(pages_added=added, back_cover=back_cover)

    def calculate_page_count(self, context: BuildContext, source: bytes) -> int:
        # Front and back pages together
        return COVER_PAGE_COUNT
