"""Tests for delimited-text parsing."""

from __future__ import annotations

from ledgerkit.importers.tabular import (
    TabularDataParser,
    count_delimiter_occurrences,
    detect_delimiter,
    get_cell_value,
    validate_column_consistency,
)
from ledgerkit.importers.types import ParsedRow


def test_parse_comma_separated_with_header() -> None:
    outcome = TabularDataParser().parse("Date,Description,Amount\n2024-01-15,Coffee,-4.50\n")

    assert outcome.success
    data = outcome.value
    assert data is not None
    assert data.delimiter == ","
    assert data.headers == ("Date", "Description", "Amount")
    assert data.rows == (ParsedRow(("2024-01-15", "Coffee", "-4.50"), 2),)


def test_semicolon_export_with_decimal_commas() -> None:
    outcome = TabularDataParser().parse("Дата;Описание;Сумма\n15.01.2024;Кофе;-4,50\n")

    assert outcome.value is not None
    assert outcome.value.delimiter == ";"
    assert outcome.value.rows[0].cells == ("15.01.2024", "Кофе", "-4,50")


def test_tab_separated() -> None:
    outcome = TabularDataParser().parse("Date\tAmount\n2024-01-15\t10\n2024-01-16\t11\n")

    assert outcome.value is not None
    assert outcome.value.delimiter == "\t"


def test_quoted_cells() -> None:
    content = 'Date,Description,Amount\n2024-01-15,"Coffee, large",-4.50\n2024-01-16,"He said ""hi""",1\n'

    data = TabularDataParser().parse(content).value

    assert data is not None
    assert data.rows[0].cells[1] == "Coffee, large"
    assert data.rows[1].cells[1] == 'He said "hi"'


def test_unclosed_quote_fails() -> None:
    outcome = TabularDataParser().parse('Date,Description\n2024-01-15,"Coffee\n')

    assert not outcome.success
    assert outcome.error == "Error parsing line 2: Unclosed quote"


def test_empty_content_fails() -> None:
    assert TabularDataParser().parse("  \n \n").error == "Empty content"


def test_undetectable_delimiter_fails() -> None:
    assert TabularDataParser().parse("justonecolumn\nanother\n").error == "Could not detect delimiter"


def test_without_header_row() -> None:
    data = TabularDataParser(has_header=False).parse("2024-01-15,Coffee,-4.50\n").value

    assert data is not None
    assert data.headers == ("Column1", "Column2", "Column3")
    assert data.rows[0].line_number == 1


def test_crlf_and_blank_lines() -> None:
    data = TabularDataParser().parse("a,b\r\n\r\n1,2\r\n3,4\r\n").value

    assert data is not None
    assert [row.cells for row in data.rows] == [("1", "2"), ("3", "4")]


def test_cells_are_trimmed_unless_disabled() -> None:
    content = "a,b\n 1 , 2 \n"

    trimmed = TabularDataParser().parse(content).value
    raw = TabularDataParser(trim_cells=False).parse(content).value

    assert trimmed is not None and raw is not None
    assert trimmed.rows[0].cells == ("1", "2")
    assert raw.rows[0].cells == (" 1 ", " 2 ")


def test_explicit_delimiter() -> None:
    data = TabularDataParser().parse("a|b\n1|2\n", delimiter="|").value

    assert data is not None
    assert data.rows[0].cells == ("1", "2")


def test_delimiter_counting_ignores_quoted_sections() -> None:
    assert count_delimiter_occurrences('a,"b,c",d', ",") == 2
    assert count_delimiter_occurrences('"x "","" y",z', ",") == 1


def test_detect_delimiter_prefers_consistent_counts() -> None:
    lines = ["Date;Payee;Amount", "01.01.2024;Shop, Inc;1,50", "02.01.2024;Cafe;2,00"]

    assert detect_delimiter(lines) == ";"
    assert detect_delimiter([]) is None


def test_column_consistency() -> None:
    data = TabularDataParser().parse("a,b,c\n1,2,3\n1,2\n").value

    assert data is not None
    assert validate_column_consistency(data) == ["Line 3: Expected 3 columns, got 2"]


def test_get_cell_value() -> None:
    row = ParsedRow(("x", "y"), 2)

    assert get_cell_value(row, 1) == "y"
    assert get_cell_value(row, 5) == ""
    assert get_cell_value(row, -1, "n/a") == "n/a"
