"""Balance diagnostics for a whole ledger document."""

from __future__ import annotations

from dataclasses import dataclass

from ledgerkit.balance.balancer import TransactionBalancer
from ledgerkit.balance.cache import TransactionCache
from ledgerkit.balance.extractor import TransactionExtractor
from ledgerkit.balance.number_format import NumberFormatContext
from ledgerkit.balance.types import BalanceError


@dataclass(frozen=True)
class BalanceDiagnostic:
    """One balance problem, anchored to the transaction header line (zero-based)."""

    line_number: int
    date: str
    description: str
    error: BalanceError

    @property
    def message(self) -> str:
        return self.error.message


def check_document(
    content: str,
    *,
    cache: TransactionCache | None = None,
    uri: str | None = None,
    format_context: NumberFormatContext | None = None,
    balancer: TransactionBalancer | None = None,
) -> list[BalanceDiagnostic]:
    """Extract every transaction in ``content`` and report each balance error.

    When both ``cache`` and ``uri`` are given, extraction goes through the
    cache so repeated checks of an unchanged document skip reparsing.
    """
    if cache is not None and uri is not None:
        transactions = cache.get_transactions(uri, content, format_context)
    else:
        transactions = TransactionExtractor(format_context).extract_transactions(content)

    balancer = balancer or TransactionBalancer()
    diagnostics: list[BalanceDiagnostic] = []
    for transaction in transactions:
        result = balancer.check_balance(transaction, format_context)
        for error in result.errors:
            diagnostics.append(
                BalanceDiagnostic(
                    line_number=transaction.header_line_number,
                    date=transaction.date,
                    description=transaction.description,
                    error=error,
                )
            )
    return diagnostics
