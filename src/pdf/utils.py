"""Pure utility functions for booklet assembly.

This module contains pure functions with no side effects:
- Date key formatting and normalization
- Week date generation for planner spreads
- Label formatting for planner and cover fields
- Page geometry (trim formats and print bleed)

All functions are deterministic and have no external dependencies.
"""

from datetime import date, timedelta

MM_PER_INCH = 25.4
POINTS_PER_INCH = 72

# Trim sizes in millimetres (width, height)
PAGE_FORMATS: dict[str, tuple[float, float]] = {
    "A4": (210.0, 297.0),
    "A5": (148.0, 210.0),
    "A6": (105.0, 148.0),
}

BLEED_MM = 6.0


def mm_to_pt(value: float) -> float:
    """Convert millimetres to PDF points.

    Examples:
        >>> round(mm_to_pt(25.4), 2)
        72.0
    """
    return value / MM_PER_INCH * POINTS_PER_INCH


A4_WIDTH = mm_to_pt(PAGE_FORMATS["A4"][0])
A4_HEIGHT = mm_to_pt(PAGE_FORMATS["A4"][1])
BLEEDING = mm_to_pt(BLEED_MM)


def page_size(book_format: str = "A4") -> tuple[float, float]:
    """Trim size of a book format in points.

    Raises:
        ValueError: If the format is unknown
    """
    try:
        width_mm, height_mm = PAGE_FORMATS[book_format.upper()]
    except KeyError:
        raise ValueError(
            f"Unknown book format: {book_format}. Must be one of {sorted(PAGE_FORMATS)}"
        ) from None
    return mm_to_pt(width_mm), mm_to_pt(height_mm)


def page_size_with_bleed(book_format: str = "A4") -> tuple[float, float]:
    """Trim size plus print bleed in points, used for full-bleed blank pages.

    Examples:
        >>> width, height = page_size_with_bleed("A4")
        >>> round(width, 2), round(height, 2)
        (612.28, 858.9)
    """
    width, height = page_size(book_format)
    return width + BLEEDING, height + BLEEDING


def format_date_key(day: date) -> str:
    """Format a date as a ``YYYY-MM-DD`` lookup key.

    Examples:
        >>> format_date_key(date(2026, 8, 24))
        '2026-08-24'
    """
    return f"{day.year:04d}-{day.month:02d}-{day.day:02d}"


def normalize_date(raw: str | None) -> str:
    """Extract the date portion (before ``T``) of an ISO-like string.

    Examples:
        >>> normalize_date("2026-08-24T10:20:30.000Z")
        '2026-08-24'
        >>> normalize_date(None)
        ''
    """
    if not raw:
        return ""
    return raw.split("T", 1)[0]


def snap_to_monday(day: date) -> date:
    """Move a date to the Monday of its week.

    Sundays move forward to the following Monday, every other day moves
    back to the Monday it belongs to.

    Examples:
        >>> snap_to_monday(date(2026, 1, 1))  # Thursday
        datetime.date(2025, 12, 29)
        >>> snap_to_monday(date(2026, 1, 4))  # Sunday
        datetime.date(2026, 1, 5)
    """
    weekday = day.weekday()
    if weekday == 6:
        return day + timedelta(days=1)
    return day - timedelta(days=weekday)


def generate_week_dates(start: date, week_index: int) -> list[date]:
    """Generate the Monday-to-Friday dates of a planner week.

    Args:
        start: First day of the planner window
        week_index: Zero-based week offset from ``start``

    Returns:
        Five consecutive dates, Monday first
    """
    monday = snap_to_monday(start + timedelta(weeks=week_index))
    return [monday + timedelta(days=offset) for offset in range(5)]


def format_day_label(day: date) -> str:
    """Format a weekday date for the planner header (``DD.MM``).

    Examples:
        >>> format_day_label(date(2026, 3, 9))
        '09.03'
    """
    return f"{day.day:02d}.{day.month:02d}"


def format_period_label(start: date | None, end: date | None) -> str:
    """Format the cover period: a single year, or ``start/end`` years.

    Examples:
        >>> format_period_label(date(2026, 1, 1), date(2026, 12, 31))
        '2026'
        >>> format_period_label(date(2026, 8, 1), date(2027, 7, 31))
        '2026/2027'
        >>> format_period_label(None, None)
        ''
    """
    if start is None:
        return ""
    if end is None or end.year == start.year:
        return str(start.year)
    return f"{start.year}/{end.year}"


def add_years(day: date, years: int) -> date:
    """Shift a date by whole years, clamping Feb 29 to Feb 28.

    Examples:
        >>> add_years(date(2028, 2, 29), 1)
        datetime.date(2029, 2, 28)
    """
    try:
        return day.replace(year=day.year + years)
    except ValueError:
        return day.replace(year=day.year + years, day=28)


def count_weeks(start: date, end: date) -> int:
    """Number of started weeks between two dates, in either order.

    Examples:
        >>> count_weeks(date(2025, 12, 25), date(2026, 1, 1))
        1
        >>> count_weeks(date(2026, 1, 1), date(2026, 1, 9))
        2
    """
    days = abs((end - start).days)
    return -(-days // 7)
