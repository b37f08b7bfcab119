"""Tests for posting amount and posting line parsing."""

from __future__ import annotations

from decimal import Decimal

import pytest

from ledgerkit.balance.amount_parser import (
    AmountParser,
    detect_posting_type,
    is_currency_symbol,
    parse_posting_amount,
    parse_posting_line,
)
from ledgerkit.balance.number_format import CommodityFormat, NumberFormatContext, format_number


SIMPLE_AMOUNTS = [
    ("$100", Decimal("100"), "$", 0),
    ("100 USD", Decimal("100"), "USD", 0),
    ("-$1,234.56", Decimal("-1234.56"), "$", 2),
    ("$-5", Decimal("-5"), "$", 0),
    ("€ 12.50", Decimal("12.50"), "€", 2),
    ("12.50€", Decimal("12.50"), "€", 2),
    ("1.000,50 EUR", Decimal("1000.50"), "EUR", 2),
    ("1,000,000 JPY", Decimal("1000000"), "JPY", 0),
    ("1 000.25 RUB", Decimal("1000.25"), "RUB", 2),
    ("1.5E3 XYZ", Decimal("1500"), "XYZ", 0),
    ("1E-3 BTC", Decimal("0.001"), "BTC", 3),
    ("2.25e-1 ETH", Decimal("0.225"), "ETH", 3),
    ("-25", Decimal("-25"), "", 0),
    ("+7.5 CAD", Decimal("7.5"), "CAD", 1),
]


@pytest.mark.parametrize(("text", "value", "commodity", "precision"), SIMPLE_AMOUNTS)
def test_parse_simple_amounts(text: str, value: Decimal, commodity: str, precision: int) -> None:
    amount = parse_posting_amount(text)

    assert amount is not None
    assert amount.value == value
    assert amount.commodity == commodity
    assert amount.precision == precision
    assert amount.cost is None
    assert not amount.is_balance_assertion_only


@pytest.mark.parametrize("text", [case[0] for case in SIMPLE_AMOUNTS])
def test_reformatted_amount_parses_to_same_value(text: str) -> None:
    amount = parse_posting_amount(text)
    assert amount is not None

    sign = "-" if amount.value < 0 else ""
    reparsed = parse_posting_amount(sign + format_number(amount.value, amount.precision))

    assert reparsed is not None
    assert reparsed.value == amount.value


def test_quoted_commodity_keeps_quotes() -> None:
    amount = parse_posting_amount('10 "green apples"')

    assert amount is not None
    assert amount.value == Decimal("10")
    assert amount.commodity == '"green apples"'


def test_unit_cost() -> None:
    amount = parse_posting_amount("10 AAPL @ $150")

    assert amount is not None
    assert amount.value == Decimal("10")
    assert amount.commodity == "AAPL"
    assert amount.cost is not None
    assert amount.cost.value == Decimal("150")
    assert amount.cost.commodity == "$"
    assert amount.cost.is_total is False
    # Cost precision is the literal fraction-digit count, so "$150" has none.
    assert amount.cost.precision == 0


def test_total_cost_is_unsigned() -> None:
    amount = parse_posting_amount("-10 AAPL @@ $-1500.00")

    assert amount is not None
    assert amount.value == Decimal("-10")
    assert amount.cost is not None
    assert amount.cost.value == Decimal("1500.00")
    assert amount.cost.is_total is True
    assert amount.cost.precision == 2


def test_balance_assertion_suffix_is_ignored() -> None:
    amount = parse_posting_amount("$50 = $200")

    assert amount is not None
    assert amount.value == Decimal("50")
    assert amount.commodity == "$"
    assert not amount.is_balance_assertion_only


@pytest.mark.parametrize("text", ["= $200", "== $200", ":= 10 EUR", "=* $0"])
def test_assertion_only_amounts(text: str) -> None:
    amount = parse_posting_amount(text)

    assert amount is not None
    assert amount.is_balance_assertion_only
    assert amount.value == Decimal(0)


@pytest.mark.parametrize("text", ["", "   ", "abc", "$", "1.2.3,4,5x", "1E999 XYZ"])
def test_unparseable_amounts_return_none(text: str) -> None:
    assert parse_posting_amount(text) is None


def test_commodity_decimal_mark_from_context() -> None:
    context = NumberFormatContext(commodity_formats={"EUR": CommodityFormat(decimal_mark=",")})
    parser = AmountParser(context)

    amount = parser.parse_posting_amount("1.234 EUR")

    assert amount is not None
    assert amount.value == Decimal("1234")
    assert amount.precision == 0


def test_context_decimal_mark_applies_to_unknown_commodities() -> None:
    amount = parse_posting_amount("1,5 XAU", NumberFormatContext(decimal_mark=","))

    assert amount is not None
    assert amount.value == Decimal("1.5")


def test_parse_posting_line_with_amount_and_comment() -> None:
    posting = parse_posting_line("    Expenses:Food  $50.25  ; lunch", 3)

    assert posting is not None
    assert posting.account == "Expenses:Food"
    assert posting.type == "real"
    assert posting.line_number == 3
    assert posting.amount_text == "$50.25"
    assert posting.amount is not None
    assert posting.amount.value == Decimal("50.25")


def test_parse_posting_line_without_amount_is_inferred() -> None:
    posting = parse_posting_line("    Assets:Cash", 2)

    assert posting is not None
    assert posting.amount is None
    assert posting.is_inferred
    assert not posting.has_parse_error


def test_parse_posting_line_with_bad_amount_is_a_parse_error() -> None:
    posting = parse_posting_line("    Expenses:Food  lots", 1)

    assert posting is not None
    assert posting.amount is None
    assert posting.has_parse_error
    assert not posting.is_inferred


def test_parse_posting_line_splits_on_tab_and_strips_status() -> None:
    posting = parse_posting_line("\t* Assets:Bank Account\t-20 CAD", 5)

    assert posting is not None
    assert posting.account == "Assets:Bank Account"
    assert posting.amount is not None
    assert posting.amount.value == Decimal("-20")


def test_comment_only_amount_is_inferred() -> None:
    posting = parse_posting_line("    Assets:Cash  ; paid in cash", 0)

    assert posting is not None
    assert posting.is_inferred


def test_unindented_line_is_not_a_posting() -> None:
    assert parse_posting_line("Expenses:Food  $5", 0) is None
    assert parse_posting_line("    ", 0) is None


@pytest.mark.parametrize(
    ("raw", "posting_type", "account"),
    [
    ("(Budget:Food)", "unbalancedVirtual", "Budget:Food"),
    ("[Budget:Food]", "balancedVirtual", "Budget:Food"),
    ("Assets:Cash (note)", "real", "Assets:Cash (note)"),
    ("Expenses:Food", "real", "Expenses:Food"),
    ],
)
def test_detect_posting_type(raw: str, posting_type: str, account: str) -> None:
    assert detect_posting_type(raw) == (posting_type, account)


def test_currency_symbol_detection() -> None:
    assert is_currency_symbol("$")
    assert is_currency_symbol("₽")
    assert not is_currency_symbol("USD")
    assert not is_currency_symbol("a")
