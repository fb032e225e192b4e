"""Public and school holiday lookup for planner labels.

Talks to an OpenHolidays-compatible service. Failures never abort a build:
the planner simply prints no holiday labels.
"""

from datetime import date
from typing import Any, Optional

from config.settings import PlannerPressSettings, settings as default_settings
from constants import PUBLIC_HOLIDAY_LABEL, SCHOOL_HOLIDAY_LABEL
from core.logging import get_logger
from errors import NetworkError
from net.network import RetryConfig, fetch_json
from pdf.dates import DateEntry
from pdf.utils import format_date_key

logger = get_logger(__name__)


def _localized_name(names: Any, language: str, fallback: str) -> str:
    for item in names or []:
        if isinstance(item, dict) and str(item.get("language", "")).upper() == language:
            text = item.get("text")
            if text:
                return str(text)
    return fallback


class HolidayClient:
    """Fetch holiday entries for a country/subdivision and date range."""

    def __init__(self, config: Optional[PlannerPressSettings] = None):
        self.config = config or default_settings
        self._retry = RetryConfig(timeout=self.config.http_timeout)

    def _query(
        self, endpoint: str, country: str, subdivision: str, start: date, end: date
    ) -> list[dict]:
        url = f"{self.config.holiday_api_base.rstrip('/')}/{endpoint}"
        params = {
            "countryIsoCode": country,
            "validFrom": format_date_key(start),
            "validTo": format_date_key(end),
            "languageIsoCode": self.config.holiday_language,
            "subdivisionCode": subdivision,
        }
        data = fetch_json(url, params=params, config=self._retry)
        if not isinstance(data, list):
            raise NetworkError(f"Unexpected {endpoint} payload: {type(data).__name__}")
        return data

    def get_holidays(
        self,
        *,
        start: date,
        end: date,
        country: Optional[str] = None,
        code: Optional[str] = None,
    ) -> list[DateEntry]:
        """Public holidays and school-holiday start/end markers.

        Returns:
            Date entries in service order, or an empty list if either
            request fails
        """
        country_code = (country or "DE").upper()
        subdivision = code or f"{country_code}-SL"
        language = self.config.holiday_language.upper()
        entries: list[DateEntry] = []

        try:
            public = self._query("PublicHolidays", country_code, subdivision, start, end)
            for day in public:
                name = _localized_name(day.get("name"), language, PUBLIC_HOLIDAY_LABEL)
                entries.append(DateEntry(date=str(day.get("startDate", "")), name=name))

            school = self._query("SchoolHolidays", country_code, subdivision, start, end)
            for day in school:
                name = _localized_name(day.get("name"), language, SCHOOL_HOLIDAY_LABEL)
                entries.append(
                    DateEntry(date=str(day.get("startDate", "")), name=f"{name} Start")
                )
                entries.append(
                    DateEntry(date=str(day.get("endDate", "")), name=f"{name} Ende")
                )
        except (NetworkError, AttributeError) as error:
            logger.warning(
                "Holiday lookup failed for {}/{}: {}", country_code, subdivision, error
            )
            return []

        logger.debug(
            "Fetched {} holiday entries for {} ({} - {})",
            len(entries),
            subdivision,
            start,
            end,
        )
        return entries
