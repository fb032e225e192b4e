"""Unit tests for pdf/validation.py"""

import pytest

from pdf.validation import validate_fragment_upload


@pytest.mark.parametrize(
    "fragment_type, pages, valid",
    [
        ("cover", 4, True),
        ("cover", 3, False),
        ("Umschlag", 4, True),
        ("planner", 2, True),
        ("planner", 1, False),
        ("wochenplaner", 12, True),
        ("notes", 1, True),
        ("notes", 100, True),
    ],
)
def test_page_count_rules(pdf_factory, fragment_type, pages, valid):
    check = validate_fragment_upload(pdf_factory(pages), fragment_type)

    assert check.valid is valid
    assert check.pages == pages


def test_cover_message(pdf_factory):
    check = validate_fragment_upload(pdf_factory(5), "cover")
    assert check.message == "A cover must have exactly 4 pages"


def test_binding_must_be_empty(pdf_factory):
    check = validate_fragment_upload(pdf_factory(1), "binding")

    assert not check.valid
    assert check.message == "A binding must not contain pages"


def test_content_upper_limit(pdf_factory):
    check = validate_fragment_upload(pdf_factory(101), "rules")

    assert not check.valid
    assert "between 1 and 100" in check.message


def test_unreadable_upload():
    check = validate_fragment_upload(b"not a pdf", "notes")

    assert check.valid is False
    assert check.message == "Failed to process PDF file"
    assert check.pages is None
