"""Journal balance checking workflow."""

from ledgerkit.application.balance.check import BalanceCheckRequest, BalanceCheckResult, run_balance_check

__all__ = [
    "BalanceCheckRequest",
    "BalanceCheckResult",
    "run_balance_check",
]
