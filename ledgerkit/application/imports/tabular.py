"""Tabular (CSV/TSV) statement import workflow."""

from __future__ import annotations

import argparse
import dataclasses
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from ledgerkit.importers import (
    DATE_FORMATS,
    DECIMAL_SEPARATOR_HINTS,
    ColumnDetector,
    DateFormat,
    DecimalSeparatorHint,
    ImportOptions,
    ImportResult,
    PayeeAccountHistory,
    TabularDataParser,
    TransactionGenerator,
    validate_column_consistency,
)
from ledgerkit.ledger_reader import JournalAccessError, JournalNotFoundError, get_ledger_reader
from ledgerkit.runtime import get_logger, get_paths, load_builtin_import_rules, load_import_options

logger = get_logger(__name__)

TabularImportStatus = Literal["ok", "error"]


@dataclass(frozen=True)
class TabularImportRequest:
    """Inputs for the tabular import workflow."""

    input_file: str
    output_file: str | None = None
    journal_file: str | None = None
    use_history: bool = True
    date_format: DateFormat | None = None
    decimal_separator_hint: DecimalSeparatorHint | None = None
    config_file: str | None = None


@dataclass(frozen=True)
class TabularImportResult:
    """Outcome of the tabular import workflow."""

    status: TabularImportStatus
    output_text: str | None = None
    output_path: Path | None = None
    import_result: ImportResult | None = None
    rejected_patterns: tuple[str, ...] = ()
    error: str | None = None


def parse_tabular_import_request(argv: Sequence[str] | None = None) -> TabularImportRequest:
    """Parse CLI args into a typed request object."""
    parser = argparse.ArgumentParser(description="Import a CSV/TSV bank statement as journal entries")
    add_tabular_import_arguments(parser)
    args = parser.parse_args(argv)
    return request_from_args(args)


def add_tabular_import_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("input_file", help="CSV/TSV file to import")
    parser.add_argument("-o", "--output", dest="output_file", help="Write entries here instead of stdout")
    parser.add_argument("--journal", dest="journal_file", help="Journal used for payee history")
    parser.add_argument("--no-history", dest="use_history", action="store_false", help="Ignore journal history")
    parser.add_argument("--date-format", choices=DATE_FORMATS, help="Date format of the date column")
    parser.add_argument(
        "--decimal-separator",
        dest="decimal_separator_hint",
        choices=DECIMAL_SEPARATOR_HINTS,
        help="Decimal separator used by amount cells",
    )
    parser.add_argument("--config", dest="config_file", help="import_rules.toml override")


def request_from_args(args: argparse.Namespace) -> TabularImportRequest:
    return TabularImportRequest(
        input_file=args.input_file,
        output_file=args.output_file,
        journal_file=args.journal_file,
        use_history=args.use_history,
        date_format=args.date_format,
        decimal_separator_hint=args.decimal_separator_hint,
        config_file=args.config_file,
    )


def _resolve_options(request: TabularImportRequest) -> ImportOptions:
    options = load_import_options(request.config_file)
    overrides: dict[str, object] = {}
    if request.date_format is not None:
        overrides["date_format"] = request.date_format
    if request.decimal_separator_hint is not None:
        overrides["decimal_separator_hint"] = request.decimal_separator_hint
    if not request.use_history:
        overrides["use_journal_history"] = False
    return dataclasses.replace(options, **overrides) if overrides else options


def _load_history(request: TabularImportRequest, options: ImportOptions) -> PayeeAccountHistory | None:
    if not options.use_journal_history:
        return None
    journal = Path(request.journal_file) if request.journal_file else get_paths().journal
    try:
        return get_ledger_reader().payee_history(journal)
    except JournalNotFoundError:
        logger.info("No journal at %s; importing without payee history", journal)
    except JournalAccessError as exc:
        logger.warning("Could not load payee history: %s", exc)
    return None


def run_tabular_import(request: TabularImportRequest) -> TabularImportResult:
    """Run the tabular import workflow and return a structured result."""
    input_path = Path(request.input_file)
    try:
        content = input_path.read_text(encoding="utf-8-sig")
    except FileNotFoundError:
        return TabularImportResult(status="error", error=f"File not found: {input_path}")
    except (OSError, UnicodeDecodeError) as exc:
        return TabularImportResult(status="error", error=f"Could not read {input_path}: {exc}")

    try:
        options = _resolve_options(request)
        builtin_rules = load_builtin_import_rules()
    except (FileNotFoundError, ValueError) as exc:
        return TabularImportResult(status="error", error=str(exc))

    parsed = TabularDataParser().parse(content)
    if not parsed.success or parsed.value is None:
        return TabularImportResult(status="error", error=f"Could not parse {input_path.name}: {parsed.error}")
    data = parsed.value
    for warning in validate_column_consistency(data):
        logger.warning(warning)

    mappings = ColumnDetector().detect_columns(data.headers, data.rows)
    for mapping in mappings:
        logger.debug("Column %d %r -> %s (%.2f)", mapping.index, mapping.header_name, mapping.type, mapping.confidence)
    data = dataclasses.replace(data, column_mappings=tuple(mappings))

    history = _load_history(request, options)
    generator = TransactionGenerator(options, history, builtin_rules)
    result = generator.generate(data)
    rejected = tuple(generator.account_resolver.rejected_patterns)

    if result.fatal_errors:
        message = "\n".join(error.message for error in result.fatal_errors)
        return TabularImportResult(status="error", import_result=result, rejected_patterns=rejected, error=message)

    output_text = generator.format_all(result, input_path.name)
    stats = result.statistics
    logger.info(
        "Imported %d of %d rows: %d auto-detected, %d need review",
        stats.processed_rows,
        stats.total_rows,
        stats.auto_detected_accounts,
        stats.todo_accounts,
    )

    output_path: Path | None = None
    if request.output_file:
        output_path = Path(request.output_file)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as fout:
            fout.write(output_text)
        logger.info("Result file written to: %s", output_path)

    return TabularImportResult(
        status="ok",
        output_text=output_text,
        output_path=output_path,
        import_result=result,
        rejected_patterns=rejected,
    )


def main(argv: Sequence[str] | None = None) -> int:
    request = parse_tabular_import_request(argv)
    result = run_tabular_import(request)
    if result.status == "ok":
        if result.output_path is None and result.output_text is not None:
            print(result.output_text, end="")
        return 0
    assert result.error is not None
    for line in result.error.splitlines():
        logger.error(line)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
