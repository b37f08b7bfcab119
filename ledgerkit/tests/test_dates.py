"""Tests for import date parsing and format detection."""

from __future__ import annotations

import pytest

from ledgerkit.importers.dates import DateParser, disambiguate_slash_format


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("2024-01-15", "2024-01-15"),
        ("2024/1/5", "2024-01-05"),
        ("15.01.2024", "2024-01-15"),
        ("15/01/2024", "2024-01-15"),
        ("03/04/2024", "2024-04-03"),
        ("01/15/2024", "2024-01-15"),
        ("15-01-2024", "2024-01-15"),
        ("15.01.24", "2024-01-15"),
        ("31.12.99", "1999-12-31"),
        ("  2024-01-15  ", "2024-01-15"),
    ],
)
def test_auto_detection(text: str, expected: str) -> None:
    result = DateParser().parse(text)

    assert result.success
    assert result.value == expected


@pytest.mark.parametrize("text", ["2024-02-30", "1899-01-01", "yesterday", "32.13.2024"])
def test_invalid_dates(text: str) -> None:
    result = DateParser().parse(text)

    assert not result.success
    assert result.error == f"Could not parse date: {text}"


def test_empty_date() -> None:
    assert DateParser().parse("   ").error == "Empty date string"


def test_preferred_format() -> None:
    parser = DateParser("MM/DD/YYYY")

    assert parser.parse("03/04/2024").value == "2024-03-04"
    mismatch = DateParser("YYYY-MM-DD").parse("15.01.2024")
    assert mismatch.error == "Date 15.01.2024 does not match format YYYY-MM-DD"


def test_detect_format() -> None:
    parser = DateParser()

    assert parser.detect_format(["15.01.2024", "16.01.2024"]) == "DD.MM.YYYY"
    assert parser.detect_format(["2024-01-01", "2024-01-02"]) == "YYYY-MM-DD"
    assert parser.detect_format([]) == "auto"
    assert parser.detect_format(["junk", "more junk", "2024-01-01"]) == "auto"


def test_disambiguate_slash_format() -> None:
    assert disambiguate_slash_format(["01/15/2024", "02/20/2024"]) == "MM/DD/YYYY"
    assert disambiguate_slash_format(["15/01/2024"]) == "DD/MM/YYYY"
    assert disambiguate_slash_format(["01/02/2024", "not a date"]) == "DD/MM/YYYY"
