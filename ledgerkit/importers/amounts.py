"""Amount cells from bank exports: parsing and journal formatting."""

from __future__ import annotations

import re
from decimal import Decimal

from ledgerkit.balance.number_format import split_decimal
from ledgerkit.importers.types import DecimalSeparatorHint

MAX_AMOUNT_LENGTH = 100
# Auto-detection treats a lone separator as decimal only with this many digits after it.
AUTO_MAX_FRACTION_DIGITS = 2

_STRIP_CHARS = re.compile(r"[$€£¥₽₴₸₹\s]")
_SYMBOL_CURRENCY = re.compile(r"^[^\w\s]$|^[$€£¥₽₴₸₹]$")

_HINT_MARKS: dict[DecimalSeparatorHint, str | None] = {
    "auto": None,
    "comma": ",",
    "period": ".",
}


def parse_amount_string(text: str, decimal_separator_hint: DecimalSeparatorHint = "auto") -> Decimal | None:
    """Parse ``-1,234.56``, ``1.234,56 €``, ``(50.00)`` and similar; None if unparseable.

    Parentheses mean negative. Without a hint, a single ``,`` or ``.`` is the
    decimal mark only when at most two digits follow it.
    """
    if len(text) > MAX_AMOUNT_LENGTH:
        return None

    cleaned = _STRIP_CHARS.sub("", text)

    negative = False
    if len(cleaned) >= 2 and cleaned.startswith("(") and cleaned.endswith(")"):
        negative = True
        cleaned = cleaned[1:-1]

    if cleaned.startswith(("-", "+")):
        if cleaned[0] == "-":
            negative = not negative
        cleaned = cleaned[1:]

    parsed = split_decimal(
        cleaned,
        _HINT_MARKS.get(decimal_separator_hint),
        max_fraction_digits=AUTO_MAX_FRACTION_DIGITS,
    )
    if parsed is None:
        return None
    value = parsed[0]
    return -value if negative else value


def format_amount(amount: Decimal, currency: str | None = None) -> str:
    """Two-decimal amount with the currency as a symbol prefix (``-$5.00``) or code suffix (``5.00 EUR``)."""
    sign = "-" if amount < 0 else ""
    number = f"{abs(amount):.2f}"
    if currency:
        if _SYMBOL_CURRENCY.match(currency):
            return f"{sign}{currency}{number}"
        return f"{sign}{number} {currency}"
    return f"{sign}{number}"
