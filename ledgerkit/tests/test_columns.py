"""Tests for column type detection."""

from __future__ import annotations

from ledgerkit.importers.columns import (
    ColumnDetector,
    analyze_column_content,
    has_required_columns,
    is_amount_like,
    is_date_like,
    is_reference_like,
    missing_required_columns,
)
from ledgerkit.importers.types import ColumnMapping, ParsedRow


def _rows(*rows: tuple[str, ...]) -> list[ParsedRow]:
    return [ParsedRow(cells, index + 2) for index, cells in enumerate(rows)]


def test_english_headers() -> None:
    mappings = ColumnDetector().detect_columns(("Date", "Description", "Amount"), [])

    assert [(m.index, m.type, m.confidence) for m in mappings] == [
        (0, "date", 0.95),
        (1, "description", 0.95),
        (2, "amount", 0.95),
    ]


def test_russian_headers() -> None:
    mappings = ColumnDetector().detect_columns(("Дата", "Описание", "Сумма", "Валюта"), [])

    assert [m.type for m in mappings] == ["date", "description", "amount", "currency"]


def test_header_variants() -> None:
    detector = ColumnDetector()

    assert detector.match_header("Transaction Type") == ("category", 0.95)
    assert detector.match_header("transaction_date") == ("date", 0.95)
    assert detector.match_header("Posted Date") == ("date", 0.7)
    assert detector.match_header("Something else") == ("unknown", 0.0)


def test_custom_patterns() -> None:
    detector = ColumnDetector({"amount": [r"^betrag$"]})

    assert detector.match_header("Betrag") == ("amount", 0.95)


def test_content_fallback_for_unknown_headers() -> None:
    rows = _rows(("2024-01-01", "12.50", "Coffee shop"), ("2024-01-02", "-3.00", "Grocery store"))

    mappings = ColumnDetector().detect_columns(("Col A", "Col B", "Col C"), rows)

    assert [m.type for m in mappings] == ["date", "amount", "description"]
    assert mappings[2].confidence == 0.5


def test_duplicate_types_keep_first_confident_column() -> None:
    mappings = ColumnDetector().detect_columns(("Date", "Transaction Date", "Amount"), [])

    assert [m.type for m in mappings] == ["date", "unknown", "amount"]


def test_empty_headers_are_skipped() -> None:
    mappings = ColumnDetector().detect_columns(("Date", "", "Amount"), [])

    assert [m.index for m in mappings] == [0, 2]


def test_analyze_column_content() -> None:
    assert analyze_column_content([]) == ("unknown", 0.0)
    assert analyze_column_content(["USD", "EUR"]) == ("currency", 1.0)
    assert analyze_column_content(["TX123456", "TX654321"]) == ("reference", 1.0)
    assert analyze_column_content(["Coffee shop", "Grocery store"]) == ("description", 0.5)


def test_value_checks() -> None:
    assert is_date_like("15.01.2024")
    assert not is_date_like("Coffee")
    assert is_amount_like("$1,234.56")
    assert is_amount_like("(50.00)")
    assert not is_amount_like("12abc")
    assert is_reference_like("ABC123")
    assert not is_reference_like("ABCDEF")


def test_required_columns() -> None:
    date = ColumnMapping(0, "date", "Date", 0.95)
    debit = ColumnMapping(1, "debit", "Debit", 0.95)
    description = ColumnMapping(2, "description", "Description", 0.95)

    assert missing_required_columns([date, debit]) == []
    assert missing_required_columns([description]) == ["date", "amount"]
    assert has_required_columns([date, ColumnMapping(1, "amount", "Amount", 0.95)])
    assert not has_required_columns([date])
