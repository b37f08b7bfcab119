"""Per-commodity balance checking for parsed transactions."""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

from ledgerkit.balance.amount_parser import is_currency_symbol
from ledgerkit.balance.number_format import NumberFormatContext, format_number, round_to_precision
from ledgerkit.balance.types import BalanceError, BalanceResult, ParsedPosting, ParsedTransaction, PostingGroup

DEFAULT_TOLERANCE = Decimal("1e-10")


class _CommodityBalance:
    __slots__ = ("sum", "precision")

    def __init__(self, value: Decimal, precision: int) -> None:
        self.sum = value
        self.precision = precision


class TransactionBalancer:
    """Check that real and balanced-virtual postings each sum to zero per commodity.

    Unbalanced virtual postings ``(account)`` never take part. A group with one
    elided amount is treated as balanced in every commodity, since the elided
    posting absorbs the remainder.
    """

    def __init__(self, tolerance: Decimal = DEFAULT_TOLERANCE) -> None:
        self.tolerance = tolerance

    def check_balance(
        self,
        transaction: ParsedTransaction,
        format_context: NumberFormatContext | None = None,
    ) -> BalanceResult:
        if not transaction.postings:
            return BalanceResult.balanced()

        real = [p for p in transaction.postings if p.type == "real"]
        balanced_virtual = [p for p in transaction.postings if p.type == "balancedVirtual"]

        errors = self._check_group(real, "real", format_context)
        if balanced_virtual:
            errors.extend(self._check_group(balanced_virtual, "balancedVirtual", format_context))

        if not errors:
            return BalanceResult.balanced()
        return BalanceResult.unbalanced(tuple(errors))

    def _check_group(
        self,
        postings: Sequence[ParsedPosting],
        group: PostingGroup,
        format_context: NumberFormatContext | None,
    ) -> list[BalanceError]:
        errors: list[BalanceError] = []
        if not postings:
            return errors

        for posting in postings:
            if posting.has_parse_error:
                errors.append(
                    BalanceError(
                        type="parseError",
                        message=f"Could not parse amount '{posting.amount_text}' for {posting.account}",
                        posting_group=group,
                        line_number=posting.line_number,
                    )
                )
        if errors:
            return errors

        inferred_count = sum(1 for p in postings if p.is_inferred)
        if inferred_count > 1:
            errors.append(
                BalanceError(
                    type="multipleInferred",
                    message=f"Transaction has {inferred_count} postings without amounts; at most one is allowed",
                    posting_group=group,
                )
            )
            return errors

        for commodity, balance in self._sum_by_commodity(postings).items():
            rounded = round_to_precision(balance.sum, balance.precision)
            if abs(rounded) <= self.tolerance:
                continue
            if inferred_count == 1:
                continue
            display = format_difference(rounded, commodity, balance.precision, format_context)
            errors.append(
                BalanceError(
                    type="imbalanced",
                    message=f"Transaction is unbalanced in {commodity or 'no commodity'}; difference is {display}",
                    posting_group=group,
                    commodity=commodity,
                    difference=rounded,
                )
            )
        return errors

    @staticmethod
    def _sum_by_commodity(postings: Sequence[ParsedPosting]) -> dict[str, _CommodityBalance]:
        balances: dict[str, _CommodityBalance] = {}

        def add(commodity: str, value: Decimal, precision: int) -> None:
            existing = balances.get(commodity)
            if existing is None:
                balances[commodity] = _CommodityBalance(value, precision)
            else:
                existing.sum += value
                existing.precision = max(existing.precision, precision)

        for posting in postings:
            amount = posting.amount
            if amount is None or amount.is_balance_assertion_only:
                continue
            cost = amount.cost
            if cost is not None:
                total = cost.value if cost.is_total else abs(amount.value) * cost.value
                add(cost.commodity, total if amount.value >= 0 else -total, cost.precision)
            else:
                add(amount.commodity, amount.value, amount.precision)
        return balances


def format_difference(
    value: Decimal,
    commodity: str,
    precision: int,
    format_context: NumberFormatContext | None = None,
) -> str:
    """Render a signed difference, symbol-prefixed (``-$5.00``) or suffixed (``5.00 EUR``)."""
    sign = "-" if value < 0 else ""
    if not commodity:
        return f"{sign}{format_number(value, precision)}"

    fmt = format_context.commodity_formats.get(commodity) if format_context else None
    symbol_before = fmt.symbol_before if fmt is not None else None
    if symbol_before is None:
        symbol_before = is_currency_symbol(commodity)
    number = format_number(value, precision, fmt.decimal_mark if fmt is not None else ".")
    if symbol_before:
        return f"{sign}{commodity}{number}"
    return f"{sign}{number} {commodity}"


_default_balancer = TransactionBalancer()


def check_balance(transaction: ParsedTransaction, format_context: NumberFormatContext | None = None) -> BalanceResult:
    return _default_balancer.check_balance(transaction, format_context)
