"""Date cells from bank exports, normalized to ``YYYY-MM-DD``."""

from __future__ import annotations

import datetime as dt
import re
from collections.abc import Sequence
from typing import Literal

from ledgerkit.importers.types import DateFormat, ParseOutcome

# Tried in this order when the format is "auto"; the first valid parse wins.
AUTO_FORMAT_ORDER: tuple[DateFormat, ...] = (
    "YYYY-MM-DD",
    "YYYY/MM/DD",
    "DD.MM.YYYY",
    "DD/MM/YYYY",
    "DD-MM-YYYY",
    "MM/DD/YYYY",
)

MIN_YEAR = 1900
MAX_YEAR = 2100
# Two-digit years up to this value are 20xx, the rest 19xx.
TWO_DIGIT_YEAR_PIVOT = 30

_FORMAT_PATTERNS: dict[DateFormat, re.Pattern[str]] = {
    "auto": re.compile(r"^(\d{4})[-/.](\d{1,2})[-/.](\d{1,2})$"),
    "YYYY-MM-DD": re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$"),
    "YYYY/MM/DD": re.compile(r"^(\d{4})/(\d{1,2})/(\d{1,2})$"),
    "DD/MM/YYYY": re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4}|\d{2})$"),
    "MM/DD/YYYY": re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$"),
    "DD.MM.YYYY": re.compile(r"^(\d{1,2})\.(\d{1,2})\.(\d{4}|\d{2})$"),
    "DD-MM-YYYY": re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{4}|\d{2})$"),
}
_SLASH_DATE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")


def _components(text: str, date_format: DateFormat) -> tuple[int, int, int] | None:
    match = _FORMAT_PATTERNS[date_format].match(text)
    if match is None:
        return None
    first, second, third = (int(part) for part in match.groups())
    if date_format in ("auto", "YYYY-MM-DD", "YYYY/MM/DD"):
        return first, second, third
    if date_format == "MM/DD/YYYY":
        return third, first, second
    return third, second, first


def _normalize(year: int, month: int, day: int) -> ParseOutcome[str]:
    if year < 100:
        year = 2000 + year if year <= TWO_DIGIT_YEAR_PIVOT else 1900 + year
    try:
        parsed = dt.date(year, month, day)
    except ValueError as exc:
        return ParseOutcome.fail(f"Invalid date {year}-{month}-{day}: {exc}")
    return ParseOutcome.ok(parsed.isoformat())


def _in_range(iso_date: str) -> bool:
    return MIN_YEAR <= int(iso_date[:4]) <= MAX_YEAR


class DateParser:
    def __init__(self, preferred_format: DateFormat = "auto") -> None:
        self.preferred_format = preferred_format

    def parse(self, text: str) -> ParseOutcome[str]:
        trimmed = text.strip()
        if not trimmed:
            return ParseOutcome.fail("Empty date string")

        if self.preferred_format != "auto":
            return self.parse_with_format(trimmed, self.preferred_format)

        for date_format in AUTO_FORMAT_ORDER:
            result = self.parse_with_format(trimmed, date_format)
            if result.success and result.value is not None and _in_range(result.value):
                return result
        return ParseOutcome.fail(f"Could not parse date: {trimmed}")

    def parse_with_format(self, text: str, date_format: DateFormat) -> ParseOutcome[str]:
        components = _components(text, date_format)
        if components is None:
            return ParseOutcome.fail(f"Date {text} does not match format {date_format}")
        return _normalize(*components)

    def detect_format(self, samples: Sequence[str]) -> DateFormat:
        """Format that parses the most samples, or ``auto`` if none covers at least half."""
        valid = [sample.strip() for sample in samples if sample.strip()]
        if not valid:
            return "auto"

        scores = dict.fromkeys(AUTO_FORMAT_ORDER, 0)
        for sample in valid:
            for date_format in AUTO_FORMAT_ORDER:
                result = self.parse_with_format(sample, date_format)
                if result.success and result.value is not None and _in_range(result.value):
                    scores[date_format] += 1

        best_format: DateFormat = "auto"
        best_score = 0
        for date_format, score in scores.items():
            if score > best_score:
                best_format, best_score = date_format, score

        if best_score < len(valid) / 2:
            return "auto"
        return best_format


def disambiguate_slash_format(samples: Sequence[str]) -> Literal["DD/MM/YYYY", "MM/DD/YYYY"]:
    """Pick day-first or month-first from values above 12; day-first on no evidence."""
    day_first = 0
    month_first = 0
    for sample in samples:
        match = _SLASH_DATE.match(sample.strip())
        if match is None:
            continue
        first, second = int(match.group(1)), int(match.group(2))
        if first > 12:
            day_first += 1
        elif second > 12:
            month_first += 1
    return "MM/DD/YYYY" if month_first > day_first else "DD/MM/YYYY"
