"""Unit tests for pdf/holidays.py"""

from datetime import date

import pytest

import pdf.holidays as holidays
from config.settings import PlannerPressSettings
from errors import NetworkError
from pdf.dates import DateEntry
from pdf.holidays import HolidayClient

PUBLIC = [
    {
        "startDate": "2026-12-25",
        "endDate": "2026-12-25",
        "name": [
            {"language": "EN", "text": "Christmas Day"},
            {"language": "DE", "text": "1. Weihnachtstag"},
        ],
    },
    {"startDate": "2026-12-26", "endDate": "2026-12-26", "name": []},
]

SCHOOL = [
    {
        "startDate": "2026-12-21",
        "endDate": "2027-01-02",
        "name": [{"language": "DE", "text": "Weihnachtsferien"}],
    }
]


@pytest.fixture
def client():
    return HolidayClient(PlannerPressSettings(holiday_api_base="https://holidays.test/"))


@pytest.fixture
def service(monkeypatch):
    """Fake holiday service recording every request."""
    calls = []

    def fake_fetch_json(url, params=None, **kwargs):
        calls.append((url, params))
        return PUBLIC if url.endswith("PublicHolidays") else SCHOOL

    monkeypatch.setattr(holidays, "fetch_json", fake_fetch_json)
    return calls


def test_public_and_school_entries(client, service):
    entries = client.get_holidays(
        start=date(2026, 12, 1), end=date(2027, 1, 31), country="de", code="DE-BY"
    )

    assert entries == [
        DateEntry("2026-12-25", "1. Weihnachtstag"),
        DateEntry("2026-12-26", "Feiertag"),
        DateEntry("2026-12-21", "Weihnachtsferien Start"),
        DateEntry("2027-01-02", "Weihnachtsferien Ende"),
    ]


def test_request_parameters(client, service):
    client.get_holidays(start=date(2026, 12, 1), end=date(2027, 1, 31), code="DE-BY")

    url, params = service[0]
    assert url == "https://holidays.test/PublicHolidays"
    assert params == {
        "countryIsoCode": "DE",
        "validFrom": "2026-12-01",
        "validTo": "2027-01-31",
        "languageIsoCode": "DE",
        "subdivisionCode": "DE-BY",
    }
    assert service[1][0] == "https://holidays.test/SchoolHolidays"


def test_subdivision_defaults_to_country(client, service):
    client.get_holidays(start=date(2026, 1, 1), end=date(2026, 2, 1), country="at")

    assert service[0][1]["subdivisionCode"] == "AT-SL"


def test_service_failure_yields_no_entries(client, monkeypatch):
    def fail(url, **kwargs):
        raise NetworkError("GET failed", status_code=503)

    monkeypatch.setattr(holidays, "fetch_json", fail)

    assert client.get_holidays(start=date(2026, 1, 1), end=date(2026, 2, 1)) == []


def test_unexpected_payload_yields_no_entries(client, monkeypatch):
    monkeypatch.setattr(holidays, "fetch_json", lambda url, **kwargs: {"error": "nope"})

    assert client.get_holidays(start=date(2026, 1, 1), end=date(2026, 2, 1)) == []


def test_school_failure_discards_public_entries(client, monkeypatch):
    def fetch(url, **kwargs):
        if url.endswith("SchoolHolidays"):
            raise NetworkError("GET failed")
        return PUBLIC

    monkeypatch.setattr(holidays, "fetch_json", fetch)

    assert client.get_holidays(start=date(2026, 1, 1), end=date(2026, 2, 1)) == []
