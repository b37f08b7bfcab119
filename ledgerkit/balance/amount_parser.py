"""Parse posting amounts and posting lines from ledger text.

Supported amount forms::

    $100            100 USD          -$1,234.56       $-5
    1.000,50 EUR    10 "green apples"  1.5E3 XYZ
    10 AAPL @ $150  10 AAPL @@ $1500   $50 = $200     == $200

Nothing here raises on bad input; failures are returned as None.
"""

from __future__ import annotations

import re
import unicodedata
from decimal import Decimal

from ledgerkit.balance.number_format import NumberFormatContext, split_decimal
from ledgerkit.balance.types import ParsedPosting, ParsedPostingAmount, PostingCost, PostingType

MAX_EXPONENT = 308

_ASSERTION_ONLY = re.compile(r"^(:?={1,2}\*?)\s*(.+)$")
_ASSERTION_SUFFIX = re.compile(r"\s*:?={1,2}\*?\s*[^@]+$")
_COST_SPLIT = re.compile(r"^([^@]+?)\s*(@{1,2})\s*(.+)$")
_SIGN = re.compile(r"^([+-])\s*")
_QUOTED_COMMODITY = re.compile(r'"[^"]+"')
_PREFIX_LETTERS = re.compile(r"^([^\W\d_]+)\s*")
_SUFFIX_LETTERS = re.compile(r"\s*([^\W\d_]+)$")
_EXPONENT_MARKER = re.compile(r"^[eE]\d*$")
_SCIENTIFIC = re.compile(r"^([\d\s,.']+)[eE]([+-]?\d+)$")
_POSTING_COMMENT = re.compile(r"\s*;.*$")
_COLUMN_SEPARATOR = re.compile(r"\s{2,}|\t")
_POSTING_STATUS = re.compile(r"^[*!]\s+")


def is_currency_symbol(text: str) -> bool:
    """True for a single Unicode currency-symbol character such as ``$`` or ``€``."""
    return len(text) == 1 and unicodedata.category(text) == "Sc"


class AmountParser:
    """Parser for posting amounts, optionally aware of per-commodity decimal marks."""

    def __init__(self, format_context: NumberFormatContext | None = None) -> None:
        self.format_context = format_context

    def parse_posting_amount(self, text: str) -> ParsedPostingAmount | None:
        """Parse one amount expression, including cost and balance-assertion syntax."""
        trimmed = text.strip()
        if not trimmed:
            return None

        # The string starts with the assertion operator, so no amount precedes it.
        if _ASSERTION_ONLY.match(trimmed):
            return ParsedPostingAmount(
                value=Decimal(0),
                commodity="",
                precision=0,
                is_balance_assertion_only=True,
            )

        without_assertion = _ASSERTION_SUFFIX.sub("", trimmed, count=1).strip()

        main_text = without_assertion
        cost: PostingCost | None = None
        cost_match = _COST_SPLIT.match(without_assertion)
        if cost_match:
            main_text = cost_match.group(1).strip()
            parsed_cost = self._parse_simple_amount(cost_match.group(3).strip())
            if parsed_cost is not None:
                cost_value, cost_commodity, cost_precision = parsed_cost
                cost = PostingCost(
                    value=abs(cost_value),
                    commodity=cost_commodity,
                    is_total=cost_match.group(2) == "@@",
                    precision=cost_precision,
                )

        parsed = self._parse_simple_amount(main_text)
        if parsed is None:
            return None
        value, commodity, precision = parsed
        return ParsedPostingAmount(value=value, commodity=commodity, precision=precision, cost=cost)

    def _parse_simple_amount(self, text: str) -> tuple[Decimal, str, int] | None:
        rest = text.strip()
        if not rest:
            return None

        negative = False
        sign_match = _SIGN.match(rest)
        if sign_match:
            negative = sign_match.group(1) == "-"
            rest = rest[sign_match.end() :]

        quoted: str | None = None
        quoted_match = _QUOTED_COMMODITY.search(rest)
        if quoted_match:
            quoted = quoted_match.group(0)
            rest = rest.replace(quoted, "", 1).strip()

        commodity = ""
        if rest and is_currency_symbol(rest[0]):
            commodity = rest[0]
            rest = rest[1:].lstrip()
        else:
            prefix_match = _PREFIX_LETTERS.match(rest)
            if prefix_match and prefix_match.group(1) not in ("e", "E"):
                commodity = prefix_match.group(1)
                rest = rest[prefix_match.end() :]

        # A sign may also follow the prefix commodity: $-100
        inner_sign = _SIGN.match(rest)
        if inner_sign:
            negative = inner_sign.group(1) == "-"
            rest = rest[inner_sign.end() :]

        suffix = ""
        if rest and is_currency_symbol(rest[-1]):
            suffix = rest[-1]
            rest = rest[:-1].rstrip()
        else:
            suffix_match = _SUFFIX_LETTERS.search(rest)
            if suffix_match and not _EXPONENT_MARKER.match(suffix_match.group(1)):
                suffix = suffix_match.group(1)
                rest = rest[: suffix_match.start()]
        if suffix and not commodity:
            commodity = suffix

        if quoted:
            commodity = quoted

        number = self._parse_number(rest.strip(), commodity)
        if number is None:
            return None
        value, precision = number
        return (-value if negative else value), commodity, precision

    def _parse_number(self, text: str, commodity: str) -> tuple[Decimal, int] | None:
        if not text:
            return None

        exponent = 0
        scientific = _SCIENTIFIC.match(text)
        if scientific:
            text = scientific.group(1)
            exponent = int(scientific.group(2))
            if abs(exponent) > MAX_EXPONENT:
                return None

        decimal_mark = self.format_context.decimal_mark_for(commodity) if self.format_context else None
        parsed = split_decimal(text, decimal_mark)
        if parsed is None:
            return None
        value, precision = parsed
        if exponent:
            value = value.scaleb(exponent)
            # 1E-3 carries three fraction digits; 1.5E3 carries none.
            precision = max(0, precision - exponent)
        if not value.is_finite():
            return None
        return value, precision

    def parse_posting_line(self, line: str, line_number: int) -> ParsedPosting | None:
        """Split an indented posting line into account and amount.

        The account ends at the first run of two or more spaces or a tab;
        a trailing ``;`` comment is ignored. Lines that are not indented
        return None.
        """
        if not line.strip() or not line[0].isspace():
            return None

        body = _POSTING_COMMENT.sub("", line).strip()
        if not body:
            return None
        body = _POSTING_STATUS.sub("", body)

        parts = _COLUMN_SEPARATOR.split(body, maxsplit=1)
        raw_account = parts[0].strip()
        amount_text = parts[1].strip() if len(parts) > 1 else ""

        posting_type, account = detect_posting_type(raw_account)
        amount = self.parse_posting_amount(amount_text) if amount_text else None
        return ParsedPosting(
            raw_account=raw_account,
            account=account,
            type=posting_type,
            amount=amount,
            line_number=line_number,
            amount_text=amount_text,
        )


def detect_posting_type(raw_account: str) -> tuple[PostingType, str]:
    """Classify ``(X)`` / ``[X]`` as virtual and return the cleaned account name.

    Only a fully wrapped name is virtual; ``Assets:Cash (note)`` is real.
    """
    trimmed = raw_account.strip()
    if len(trimmed) >= 2 and trimmed.startswith("(") and trimmed.endswith(")"):
        return "unbalancedVirtual", trimmed[1:-1].strip()
    if len(trimmed) >= 2 and trimmed.startswith("[") and trimmed.endswith("]"):
        return "balancedVirtual", trimmed[1:-1].strip()
    return "real", trimmed


_default_parser = AmountParser()


def parse_posting_amount(text: str, format_context: NumberFormatContext | None = None) -> ParsedPostingAmount | None:
    parser = _default_parser if format_context is None else AmountParser(format_context)
    return parser.parse_posting_amount(text)


def parse_posting_line(
    line: str,
    line_number: int,
    format_context: NumberFormatContext | None = None,
) -> ParsedPosting | None:
    parser = _default_parser if format_context is None else AmountParser(format_context)
    return parser.parse_posting_line(line, line_number)
