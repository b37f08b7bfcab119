"""Delimited text (CSV, TSV, semicolon, pipe) into headers and rows."""

from __future__ import annotations

import csv
from collections.abc import Sequence

from ledgerkit.importers.types import (
    DELIMITERS,
    ColumnMapping,
    Delimiter,
    ParsedRow,
    ParsedTabularData,
    ParseOutcome,
)

DELIMITER_SAMPLE_LINES = 10


def count_delimiter_occurrences(line: str, delimiter: str) -> int:
    """Count ``delimiter`` outside double-quoted sections (``""`` is an escaped quote)."""
    count = 0
    in_quotes = False
    index = 0
    while index < len(line):
        char = line[index]
        if char == '"':
            if in_quotes and line[index + 1 : index + 2] == '"':
                index += 1
            else:
                in_quotes = not in_quotes
        elif char == delimiter and not in_quotes:
            count += 1
        index += 1
    return count


def detect_delimiter(lines: Sequence[str]) -> Delimiter | None:
    """Pick the delimiter with the most consistent per-line count over the first lines.

    Score is ``consistency * uniformity * min(average, 10)``; on a tie the
    earlier delimiter in ``, \\t ; |`` wins.
    """
    sample = list(lines[:DELIMITER_SAMPLE_LINES])
    if not sample:
        return None

    best: Delimiter | None = None
    best_score = -1.0
    for delimiter in DELIMITERS:
        counts = [count_delimiter_occurrences(line, delimiter) for line in sample]
        non_zero = [count for count in counts if count > 0]
        if not non_zero:
            continue
        consistency = len(non_zero) / len(sample)
        uniformity = 1 / len(set(non_zero))
        average = sum(non_zero) / len(non_zero)
        score = consistency * uniformity * min(average, 10)
        if score > best_score:
            best, best_score = delimiter, score
    return best


def _split_line(line: str, delimiter: str) -> list[str]:
    reader = csv.reader([line], delimiter=delimiter, quotechar='"', doublequote=True, strict=True)
    cells = next(reader, [])
    return cells or [""]


class TabularDataParser:
    def __init__(
        self,
        skip_empty_rows: bool = True,
        trim_cells: bool = True,
        has_header: bool = True,
    ) -> None:
        self.skip_empty_rows = skip_empty_rows
        self.trim_cells = trim_cells
        self.has_header = has_header

    def parse(
        self,
        content: str,
        delimiter: Delimiter | None = None,
        column_mappings: Sequence[ColumnMapping] = (),
    ) -> ParseOutcome[ParsedTabularData]:
        if not content.strip():
            return ParseOutcome.fail("Empty content")

        lines = content.replace("\r\n", "\n").replace("\r", "\n").split("\n")
        if self.skip_empty_rows:
            lines = [line for line in lines if line.strip()]
        if not lines:
            return ParseOutcome.fail("No data lines found")

        chosen = delimiter or detect_delimiter(lines)
        if chosen is None:
            return ParseOutcome.fail("Could not detect delimiter")

        parsed_lines: list[list[str]] = []
        for index, line in enumerate(lines):
            try:
                cells = _split_line(line, chosen)
            except csv.Error as exc:
                reason = "Unclosed quote" if line.count('"') % 2 else f"Malformed quoting ({exc})"
                return ParseOutcome.fail(f"Error parsing line {index + 1}: {reason}")
            if self.trim_cells:
                cells = [cell.strip() for cell in cells]
            parsed_lines.append(cells)

        if self.has_header:
            headers = tuple(parsed_lines[0])
            rows = tuple(ParsedRow(tuple(cells), index + 2) for index, cells in enumerate(parsed_lines[1:]))
        else:
            width = max(len(cells) for cells in parsed_lines)
            headers = tuple(f"Column{i + 1}" for i in range(width))
            rows = tuple(ParsedRow(tuple(cells), index + 1) for index, cells in enumerate(parsed_lines))

        return ParseOutcome.ok(
            ParsedTabularData(
                headers=headers,
                rows=rows,
                delimiter=chosen,
                column_mappings=tuple(column_mappings),
            )
        )


def validate_column_consistency(data: ParsedTabularData) -> list[str]:
    expected = len(data.headers)
    return [
        f"Line {row.line_number}: Expected {expected} columns, got {len(row.cells)}"
        for row in data.rows
        if len(row.cells) != expected
    ]


def get_cell_value(row: ParsedRow, index: int, default: str = "") -> str:
    if 0 <= index < len(row.cells):
        return row.cells[index]
    return default
