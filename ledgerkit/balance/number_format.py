"""Number formats and the decimal-mark rule shared by ledger and import parsing.

Decimal-mark rule used by :func:`split_decimal`:

1. An explicit decimal mark wins; the other separator is grouping.
2. If both ``.`` and ``,`` occur, the later one is the decimal mark.
3. If a single separator kind occurs more than once, it is grouping
   (``1,000,000``).
4. If it occurs once it is the decimal mark, unless ``max_fraction_digits`` is
   given and more digits than that follow it (``1,234`` with a limit of 2 is
   one thousand two hundred thirty-four).

Whitespace and apostrophes inside a number are always grouping.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

_GROUPING_CHARS = re.compile(r"[\s']")
_DIGITS = re.compile(r"\d*")
DECIMAL_MARKS = (".", ",")


@dataclass(frozen=True)
class CommodityFormat:
    """Display and parse format declared for one commodity."""

    decimal_mark: str = "."
    group_separator: str | None = None
    symbol_before: bool | None = None
    precision: int | None = None


@dataclass(frozen=True)
class NumberFormatContext:
    """Per-commodity number formats, typically from ``commodity`` directives."""

    commodity_formats: Mapping[str, CommodityFormat] = field(default_factory=dict)
    default_commodity: str | None = None
    decimal_mark: str | None = None

    def format_for(self, commodity: str) -> CommodityFormat | None:
        fmt = self.commodity_formats.get(commodity)
        if fmt is None and not commodity and self.default_commodity:
            fmt = self.commodity_formats.get(self.default_commodity)
        return fmt

    def decimal_mark_for(self, commodity: str) -> str | None:
        fmt = self.format_for(commodity)
        if fmt is not None:
            return fmt.decimal_mark
        return self.decimal_mark


def _resolve_decimal_mark(text: str, max_fraction_digits: int | None) -> str | None:
    last_dot = text.rfind(".")
    last_comma = text.rfind(",")
    if last_dot == -1 and last_comma == -1:
        return None
    if last_dot != -1 and last_comma != -1:
        return "." if last_dot > last_comma else ","

    separator = "." if last_dot != -1 else ","
    if text.count(separator) > 1:
        return None
    trailing_digits = len(text) - text.rfind(separator) - 1
    if max_fraction_digits is not None and trailing_digits > max_fraction_digits:
        return None
    return separator


def split_decimal(
    body: str,
    decimal_mark: str | None = None,
    *,
    max_fraction_digits: int | None = None,
) -> tuple[Decimal, int] | None:
    """Parse an unsigned numeric body into ``(value, precision)``.

    Returns None when the body holds anything other than digits and separators.
    ``precision`` is the literal count of digits after the decimal mark.
    """
    text = _GROUPING_CHARS.sub("", body)
    if not text:
        return None

    mark = decimal_mark if decimal_mark in DECIMAL_MARKS else _resolve_decimal_mark(text, max_fraction_digits)

    if mark is None:
        integer_part = text.replace(".", "").replace(",", "")
        fraction = ""
    else:
        group = "," if mark == "." else "."
        if mark in text:
            head, _, fraction = text.rpartition(mark)
        else:
            head, fraction = text, ""
        integer_part = head.replace(group, "")

    if not _DIGITS.fullmatch(integer_part) or not _DIGITS.fullmatch(fraction):
        return None
    if not integer_part and not fraction:
        return None

    normalized = integer_part or "0"
    if fraction:
        normalized = f"{normalized}.{fraction}"
    return Decimal(normalized), len(fraction)


def round_to_precision(value: Decimal, precision: int) -> Decimal:
    """Round half-up to ``precision`` fraction digits; huge values are returned as-is."""
    try:
        return value.quantize(Decimal(1).scaleb(-precision), rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return value


def format_number(value: Decimal, precision: int, decimal_mark: str = ".") -> str:
    text = f"{abs(value):.{precision}f}"
    if decimal_mark != ".":
        text = text.replace(".", decimal_mark)
    return text
