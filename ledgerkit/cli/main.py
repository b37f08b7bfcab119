#!/usr/bin/env python3

import argparse
import logging
import sys
from collections.abc import Sequence

from ledgerkit.runtime import set_log_level


def _print_error(error: str) -> None:
    for line in error.splitlines():
        print(line)


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        prog="ledgerkit",
        description="Plain-text accounting utilities",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  check [journal]            Report unbalanced transactions
  import <file>              Convert a CSV/TSV statement into journal entries

Environment:
  LEDGERKIT_HOME             Project root (default: current directory)
  LEDGER_FILE                Journal used by check and for payee history
  LEDGERKIT_LOG_LEVEL        DEBUG, INFO, WARNING or ERROR
""",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    from ledgerkit.application.balance.check import add_balance_check_arguments
    from ledgerkit.application.imports.tabular import add_tabular_import_arguments

    check_parser = subparsers.add_parser("check", help="Report unbalanced transactions")
    add_balance_check_arguments(check_parser)

    import_parser = subparsers.add_parser("import", help="Import a CSV/TSV statement")
    add_tabular_import_arguments(import_parser)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    if args.verbose:
        set_log_level(logging.DEBUG)

    if args.command == "check":
        from ledgerkit.application.balance.check import BalanceCheckRequest, format_diagnostic, run_balance_check

        check_result = run_balance_check(
            BalanceCheckRequest(journal_file=args.journal_file, decimal_mark=args.decimal_mark)
        )
        if check_result.status == "error":
            assert check_result.error is not None
            _print_error(check_result.error)
            return 1
        assert check_result.journal_path is not None
        for diagnostic in check_result.diagnostics:
            print(format_diagnostic(check_result.journal_path, diagnostic))
        if check_result.diagnostics:
            print(f"{len(check_result.diagnostics)} balance error(s) found")
            return 1
        print("All transactions balance")
        return 0

    if args.command == "import":
        from ledgerkit.application.imports.tabular import request_from_args, run_tabular_import

        import_result = run_tabular_import(request_from_args(args))
        if import_result.status == "error":
            assert import_result.error is not None
            _print_error(import_result.error)
            return 1
        for pattern in import_result.rejected_patterns:
            print(f"Warning: merchant pattern {pattern!r} was rejected and ignored", file=sys.stderr)
        if import_result.output_path is None and import_result.output_text is not None:
            print(import_result.output_text, end="")
        return 0

    parser.print_help()
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
