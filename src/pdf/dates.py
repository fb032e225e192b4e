"""Date label merging for planner pages.

Holiday entries and user-defined dates arrive as loosely formatted ISO
strings. Both sources go through the same strict normalization, then get
layered into one ``YYYY-MM-DD -> label`` map.
"""

import re
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from core.logging import get_logger
from pdf.utils import normalize_date

logger = get_logger(__name__)

_DATE_KEY = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")


@dataclass(frozen=True)
class DateEntry:
    """A dated label (holiday or custom event)."""

    date: str
    name: str


def normalize_date_key(raw: Optional[str]) -> Optional[str]:
    """Normalize an ISO-like date string to a strict ``YYYY-MM-DD`` key.

    The date portion is extracted first, then rebuilt as a calendar date;
    anything that does not survive the round trip is rejected.

    Returns:
        The key, or None for malformed or impossible dates

    Examples:
        >>> normalize_date_key("2026-08-24T10:20:30.000Z")
        '2026-08-24'
        >>> normalize_date_key("2026/08/24") is None
        True
        >>> normalize_date_key("2026-02-29") is None
        True
    """
    normalized = normalize_date(raw).strip()
    if not normalized:
        return None

    match = _DATE_KEY.match(normalized)
    if match is None:
        return None

    year, month, day = (int(part) for part in match.groups())
    try:
        parsed = date(year, month, day)
    except ValueError:
        return None

    if parsed.isoformat() != normalized:
        return None

    return normalized


def merge_date_entries(
    holidays: Iterable[DateEntry], custom_dates: Iterable[DateEntry] = ()
) -> dict[str, str]:
    """Merge holiday and custom date entries into one label map.

    Holidays are inserted first, custom dates second, each in source order.
    On a key collision the entry inserted last wins, so custom dates take
    precedence over holidays and later duplicates within one source replace
    earlier ones. Malformed dates are dropped.
    """
    merged: dict[str, str] = {}
    dropped = 0

    for source in (holidays, custom_dates):
        for entry in source:
            key = normalize_date_key(entry.date)
            if key is None:
                dropped += 1
                continue
            merged[key] = entry.name

    if dropped:
        logger.warning("Dropped {} date entries with malformed dates", dropped)

    return merged
