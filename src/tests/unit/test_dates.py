"""Unit tests for pdf/dates.py"""

import pytest

from pdf.dates import DateEntry, merge_date_entries, normalize_date_key


class TestNormalizeDateKey:
    def test_timestamp_is_reduced_to_date(self):
        assert normalize_date_key("2026-08-24T10:20:30.000Z") == "2026-08-24"

    @pytest.mark.parametrize("raw", ["2026/08/24", "24-08-2026", "2026-8-24", "tomorrow"])
    def test_unsupported_formats_are_rejected(self, raw):
        assert normalize_date_key(raw) is None

    @pytest.mark.parametrize("raw", ["2026-02-29", "2026-13-01", "2026-04-31", "2026-00-10"])
    def test_impossible_calendar_dates_are_rejected(self, raw):
        assert normalize_date_key(raw) is None

    def test_leap_day_in_leap_year(self):
        assert normalize_date_key("2028-02-29") == "2028-02-29"

    @pytest.mark.parametrize("raw", [None, "", "T00:00:00.000Z"])
    def test_empty_input(self, raw):
        assert normalize_date_key(raw) is None


class TestMergeDateEntries:
    def test_custom_date_overrides_holiday(self):
        merged = merge_date_entries(
            [DateEntry("2026-12-24", "Heiligabend")],
            [DateEntry("2026-12-24T09:30:00Z", "Weihnachtsfeier")],
        )

        assert merged == {"2026-12-24": "Weihnachtsfeier"}

    def test_non_colliding_entries_are_kept(self):
        merged = merge_date_entries(
            [DateEntry("2026-05-01", "Tag der Arbeit")],
            [DateEntry("2026-05-02", "Sportfest")],
        )

        assert merged == {"2026-05-01": "Tag der Arbeit", "2026-05-02": "Sportfest"}

    def test_later_duplicate_within_one_source_wins(self):
        merged = merge_date_entries(
            [],
            [
                DateEntry("2026-10-10", "Event A"),
                DateEntry("2026-10-10T14:00:00.000Z", "Event B"),
            ],
        )

        assert merged == {"2026-10-10": "Event B"}

    def test_malformed_dates_are_dropped_from_both_sources(self):
        merged = merge_date_entries(
            [
                DateEntry("2026/12/24", "Invalid holiday format"),
                DateEntry("2026-12-24T00:00:00.000Z", "Valid holiday timestamp"),
            ],
            [
                DateEntry("24-12-2026", "Invalid custom format"),
                DateEntry("2026-12-25T13:00:00.000Z", "Valid custom timestamp"),
            ],
        )

        assert merged == {
            "2026-12-24": "Valid holiday timestamp",
            "2026-12-25": "Valid custom timestamp",
        }

    def test_no_entries(self):
        assert merge_date_entries([]) == {}
