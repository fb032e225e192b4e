"""Weekly planner fragment handler.

The planner template is one two-page spread. It is filled and copied once per
week of the book period. Every spread must start on an odd page, so a blank
page is inserted before a spread whenever the running page count is even.

Tags (per week):
- xA..xE: Monday to Friday as ``DD.MM``
- xA_Date..xE_Date: holiday or custom label for that day, or empty
"""

from datetime import date, timedelta
from typing import Optional

from pypdf import PdfWriter

from constants import (
    DAY_TAGS,
    HOLIDAY_TAG_SUFFIX,
    LEAD_IN_DAYS,
    PLANNER_TEMPLATE_PAGES,
    PLANNER_TYPE,
    PREVIEW_WEEK_CAP,
)
from core.logging import get_logger
from errors import PageCountError
from pdf.context import BuildContext, HandlerResult
from pdf.dates import DateEntry, merge_date_entries
from pdf.documents import add_blank_pages, copy_pages, document_bytes
from pdf.handlers.base import BaseHandler, TagDefinition
from pdf.models import BookDetails
from pdf.utils import (
    add_years,
    count_weeks,
    format_date_key,
    format_day_label,
    generate_week_dates,
)

logger = get_logger(__name__)


def planner_window(
    start: Optional[date],
    end: Optional[date],
    *,
    today: Optional[date] = None,
    lead_in_days: int = LEAD_IN_DAYS,
) -> tuple[date, date]:
    """First and last day the planner covers.

    The window opens ``lead_in_days`` before the period start (today if
    unset) and closes at the period end, or one year after the window
    start when no end is given.
    """
    window_start = (start or today or date.today()) - timedelta(days=lead_in_days)
    window_end = end or add_years(window_start, 1)
    return window_start, window_end


def weeks_to_process(total_weeks: int, preview_mode: bool, week_cap: int) -> int:
    weeks = total_weeks + 1
    return min(weeks, week_cap) if preview_mode else weeks


def estimate_planner_page_count(
    period_start: Optional[date],
    period_end: Optional[date],
    *,
    preview_mode: bool,
    current_page_count: int,
    today: Optional[date] = None,
    lead_in_days: int = LEAD_IN_DAYS,
    week_cap: int = PREVIEW_WEEK_CAP,
) -> int:
    """Exact number of pages the planner will add, alignment blanks included.

    Examples:
        >>> estimate_planner_page_count(
        ...     date(2026, 1, 1), date(2026, 1, 1),
        ...     preview_mode=False, current_page_count=4)
        5
        >>> estimate_planner_page_count(
        ...     date(2026, 1, 1), date(2026, 1, 1),
        ...     preview_mode=False, current_page_count=5)
        4
    """
    start, end = planner_window(
        period_start, period_end, today=today, lead_in_days=lead_in_days
    )
    weeks = weeks_to_process(count_weeks(start, end), preview_mode, week_cap)

    added = 0
    working = current_page_count
    for _ in range(weeks):
        if working % 2 == 0:
            added += 1
            working += 1
        added += PLANNER_TEMPLATE_PAGES
        working += PLANNER_TEMPLATE_PAGES
    return added


def _day_label(index: int):
    def get_value(ctx: BuildContext) -> str:
        if index >= len(ctx.week_dates):
            return ""
        return format_day_label(ctx.week_dates[index])

    return get_value


def _date_label(index: int):
    def get_value(ctx: BuildContext) -> str:
        if index >= len(ctx.week_dates):
            return ""
        return ctx.date_labels.get(format_date_key(ctx.week_dates[index]), "")

    return get_value


class PlannerHandler(BaseHandler):
    module_type = PLANNER_TYPE
    counts_from_source = False

    _tags = [
        TagDefinition(name, _day_label(i)) for i, name in enumerate(DAY_TAGS)
    ] + [
        TagDefinition(f"{name}{HOLIDAY_TAG_SUFFIX}", _date_label(i))
        for i, name in enumerate(DAY_TAGS)
    ]

    @property
    def tags(self) -> list[TagDefinition]:
        return self._tags

    def _window(self, context: BuildContext) -> tuple[date, date]:
        period = context.book.period
        return planner_window(
            period.start,
            period.end,
            today=context.today,
            lead_in_days=context.settings.lead_in_days,
        )

    def build_date_labels(
        self, context: BuildContext, start: date, end: date
    ) -> dict[str, str]:
        """Holiday labels (when requested) overlaid with the book's custom dates."""
        book: BookDetails = context.book
        holidays: list[DateEntry] = []
        if book.add_holidays and context.holiday_client is not None:
            holidays = context.holiday_client.get_holidays(
                start=start, end=end, country=book.country, code=book.code
            )

        custom = [DateEntry(date=item.date, name=item.name) for item in book.custom_dates]
        return merge_date_entries(holidays, custom)

    def process(self, context: BuildContext, source: bytes) -> HandlerResult:
        template = self.load(context, source)
        pages = len(template.pages)
        if pages != PLANNER_TEMPLATE_PAGES:
            raise PageCountError(self.module_type, PLANNER_TEMPLATE_PAGES, pages)

        self.validate(template)

        start, end = self._window(context)
        date_labels = self.build_date_labels(context, start, end)
        weeks = weeks_to_process(
            count_weeks(start, end),
            context.preview_mode,
            context.settings.preview_week_cap,
        )

        # Spreads are built into a separate document and copied in one go so
        # grayscale conversion sees the whole planner at once.
        spreads = PdfWriter()
        working = len(context.output.pages)
        blanks = 0

        for week_index in range(weeks):
            if working % 2 == 0:
                add_blank_pages(spreads, 1, context.blank_size)
                blanks += 1
                working += 1

            week = context.for_week(
                week_index, generate_week_dates(start, week_index), date_labels
            )
            filled = self.load(context, self.fill(template, week))
            working += copy_pages(spreads, filled)

        data = document_bytes(spreads)
        if context.grayscale:
            data = self.to_grayscale(context, data)
        added = copy_pages(context.output, self.load(context, data))

        logger.debug(
            "Planner {}: {} weeks from {} to {}, {} pages ({} alignment)",
            context.fragment.id,
            weeks,
            start,
            end,
            added,
            blanks,
        )
        return HandlerResult(pages_added=added, blank_pages=blanks)

    def calculate_page_count(self, context: BuildContext, source: bytes) -> int:
        """Pages for pricing: two per week, ignoring alignment blanks."""
        start, end = self._window(context)
        return (count_weeks(start, end) + 1) * PLANNER_TEMPLATE_PAGES
