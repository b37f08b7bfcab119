"""Check every transaction in a journal for balance errors."""

from __future__ import annotations

import argparse
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from ledgerkit.balance import BalanceDiagnostic, NumberFormatContext, TransactionCache, check_document
from ledgerkit.ledger_reader import JournalAccessError, JournalNotFoundError, get_ledger_reader
from ledgerkit.runtime import get_logger, get_paths

logger = get_logger(__name__)

BalanceCheckStatus = Literal["ok", "error"]


@dataclass(frozen=True)
class BalanceCheckRequest:
    """Inputs for the balance check workflow."""

    journal_file: str | None = None
    decimal_mark: str | None = None


@dataclass(frozen=True)
class BalanceCheckResult:
    """Outcome of the balance check; ``status`` is "ok" even when diagnostics exist."""

    status: BalanceCheckStatus
    journal_path: Path | None = None
    diagnostics: tuple[BalanceDiagnostic, ...] = ()
    error: str | None = None


def parse_balance_check_request(argv: Sequence[str] | None = None) -> BalanceCheckRequest:
    """Parse CLI args into a typed request object."""
    parser = argparse.ArgumentParser(description="Check journal transactions for balance errors")
    add_balance_check_arguments(parser)
    args = parser.parse_args(argv)
    return BalanceCheckRequest(journal_file=args.journal_file, decimal_mark=args.decimal_mark)


def add_balance_check_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("journal_file", nargs="?", help="Journal to check (default: LEDGER_FILE or main.journal)")
    parser.add_argument("--decimal-mark", choices=(".", ","), help="Decimal mark for amounts without a format")


def run_balance_check(
    request: BalanceCheckRequest,
    cache: TransactionCache | None = None,
) -> BalanceCheckResult:
    """Run the balance check workflow and return a structured result."""
    journal_path = Path(request.journal_file) if request.journal_file else get_paths().journal
    try:
        content = get_ledger_reader().read_text(journal_path)
    except (JournalNotFoundError, JournalAccessError) as exc:
        return BalanceCheckResult(status="error", journal_path=journal_path, error=str(exc))

    format_context = NumberFormatContext(decimal_mark=request.decimal_mark) if request.decimal_mark else None
    diagnostics = check_document(
        content,
        cache=cache,
        uri=str(journal_path.resolve()),
        format_context=format_context,
    )
    logger.debug("Checked %s: %d diagnostic(s)", journal_path, len(diagnostics))
    return BalanceCheckResult(status="ok", journal_path=journal_path, diagnostics=tuple(diagnostics))


def format_diagnostic(path: Path, diagnostic: BalanceDiagnostic) -> str:
    """``<file>:<line>: <date> <description>: <message>`` with a one-based line."""
    return f"{path}:{diagnostic.line_number + 1}: {diagnostic.date} {diagnostic.description}: {diagnostic.message}"


def main(argv: Sequence[str] | None = None) -> int:
    request = parse_balance_check_request(argv)
    result = run_balance_check(request)
    if result.status == "error":
        assert result.error is not None
        logger.error(result.error)
        return 1

    assert result.journal_path is not None
    for diagnostic in result.diagnostics:
        print(format_diagnostic(result.journal_path, diagnostic))
    if result.diagnostics:
        print(f"{len(result.diagnostics)} balance error(s) found")
        return 1
    print("All transactions balance")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
