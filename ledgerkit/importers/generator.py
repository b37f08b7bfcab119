"""Turn parsed tabular rows into two-posting journal entries."""

from __future__ import annotations

import datetime as dt
from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal

from ledgerkit.importers.account_resolver import AccountResolver, describe_source, needs_review
from ledgerkit.importers.amounts import format_amount, parse_amount_string
from ledgerkit.importers.columns import find_mapping, missing_required_columns
from ledgerkit.importers.dates import DateParser
from ledgerkit.importers.types import (
    DEFAULT_IMPORT_OPTIONS,
    RESOLUTION_SOURCES,
    AccountResolutionSource,
    BuiltinImportRules,
    ColumnMapping,
    ColumnType,
    ImportedTransaction,
    ImportIssue,
    ImportOptions,
    ImportResult,
    ImportStatistics,
    ImportWarning,
    ParsedRow,
    ParsedTabularData,
    PayeeAccountHistory,
)
from ledgerkit.runtime.logging import get_logger

logger = get_logger(__name__)

AMOUNT_COLUMN = 52
MIN_AMOUNT_PADDING = 4
POSTING_INDENT = "    "
MAX_LISTED_WARNINGS = 10


@dataclass(frozen=True)
class _RowOutcome:
    transaction: ImportedTransaction | None = None
    warnings: tuple[ImportWarning, ...] = ()
    error: ImportIssue | None = None


class TransactionGenerator:
    """Build journal transactions from tabular rows.

    Each row becomes one entry: the resolved account carries the amount and
    ``default_balancing_account`` balances it with an elided amount.
    """

    def __init__(
        self,
        options: ImportOptions = DEFAULT_IMPORT_OPTIONS,
        payee_history: PayeeAccountHistory | None = None,
        builtin_rules: BuiltinImportRules | None = None,
    ) -> None:
        self.options = options
        self.date_parser = DateParser(options.date_format)
        self.account_resolver = AccountResolver(options, payee_history, builtin_rules)

    def generate(self, data: ParsedTabularData) -> ImportResult:
        transactions: list[ImportedTransaction] = []
        warnings: list[ImportWarning] = []
        errors: list[ImportIssue] = []

        missing = missing_required_columns(data.column_mappings)
        if missing:
            errors.append(ImportIssue(0, f"Missing required columns: {', '.join(missing)}", fatal=True))
            return self._create_result(transactions, warnings, errors, len(data.rows))

        for row in data.rows:
            outcome = self._process_row(row, data.column_mappings)
            if outcome.transaction is not None:
                transactions.append(outcome.transaction)
                warnings.extend(outcome.warnings)
            elif outcome.error is not None:
                if outcome.error.fatal:
                    errors.append(outcome.error)
                else:
                    warnings.append(ImportWarning(outcome.error.line_number, outcome.error.message, outcome.error.field))

        return self._create_result(transactions, warnings, errors, len(data.rows))

    def _process_row(self, row: ParsedRow, mappings: Sequence[ColumnMapping]) -> _RowOutcome:
        line = row.line_number
        date_mapping = find_mapping(mappings, "date")
        if date_mapping is None:
            return _RowOutcome(error=ImportIssue(line, "No date column found", fatal=False))

        date_text = _cell(row, date_mapping.index)
        if not date_text:
            return _RowOutcome(error=ImportIssue(line, "Empty date value", fatal=False, field="date"))

        date_result = self.date_parser.parse(date_text)
        if not date_result.success or date_result.value is None:
            return _RowOutcome(error=ImportIssue(line, f"Invalid date: {date_text}", fatal=False, field="date"))

        warnings: list[ImportWarning] = []
        description = self._extract_description(row, mappings)
        if not description:
            warnings.append(ImportWarning(line, "Empty description, using placeholder", "description"))

        amount, amount_error = self._extract_amount(row, mappings)
        if amount is None:
            return _RowOutcome(error=ImportIssue(line, amount_error, fatal=False, field="amount"))

        category = self._field(row, mappings, "category")
        currency = self._field(row, mappings, "currency")
        resolution = self.account_resolver.resolve(description or "Unknown", category, amount)
        logger.debug("Line %d resolved to %s via %s", line, resolution.account, resolution.source)

        transaction = ImportedTransaction(
            date=date_result.value,
            description=description or "Unknown transaction",
            amount=amount,
            amount_formatted=format_amount(amount, currency),
            source_account=resolution,
            target_account=self.options.default_balancing_account,
            line_number=line,
            currency=currency,
            memo=self._field(row, mappings, "memo"),
            reference=self._field(row, mappings, "reference"),
        )
        return _RowOutcome(transaction=transaction, warnings=tuple(warnings))

    def _extract_description(self, row: ParsedRow, mappings: Sequence[ColumnMapping]) -> str | None:
        return self._field(row, mappings, "description") or self._field(row, mappings, "payee")

    def _extract_amount(self, row: ParsedRow, mappings: Sequence[ColumnMapping]) -> tuple[Decimal | None, str]:
        hint = self.options.decimal_separator_hint
        amount_mapping = find_mapping(mappings, "amount")
        if amount_mapping is not None:
            text = _cell(row, amount_mapping.index)
            if text:
                parsed = parse_amount_string(text, hint)
                if parsed is None:
                    return None, f"Invalid amount: {text}"
                return (-parsed if self.options.invert_amounts else parsed), ""

        debit_mapping = find_mapping(mappings, "debit")
        credit_mapping = find_mapping(mappings, "credit")
        if debit_mapping is not None or credit_mapping is not None:
            amount = Decimal(0)
            if debit_mapping is not None:
                debit = parse_amount_string(_cell(row, debit_mapping.index), hint)
                if debit is not None:
                    amount -= abs(debit)
            if credit_mapping is not None:
                credit = parse_amount_string(_cell(row, credit_mapping.index), hint)
                if credit is not None:
                    amount += abs(credit)
            if amount != 0:
                return (-amount if self.options.invert_amounts else amount), ""

        return None, "No valid amount found"

    def _field(self, row: ParsedRow, mappings: Sequence[ColumnMapping], column_type: ColumnType) -> str | None:
        mapping = find_mapping(mappings, column_type)
        if mapping is None:
            return None
        return _cell(row, mapping.index) or None

    def _create_result(
        self,
        transactions: list[ImportedTransaction],
        warnings: list[ImportWarning],
        errors: list[ImportIssue],
        total_rows: int,
    ) -> ImportResult:
        sources: dict[AccountResolutionSource, int] = dict.fromkeys(RESOLUTION_SOURCES, 0)
        auto_detected = 0
        todo = 0
        for transaction in transactions:
            sources[transaction.source_account.source] += 1
            if needs_review(transaction.source_account):
                todo += 1
            else:
                auto_detected += 1

        statistics = ImportStatistics(
            total_rows=total_rows,
            processed_rows=len(transactions),
            skipped_rows=total_rows - len(transactions),
            auto_detected_accounts=auto_detected,
            todo_accounts=todo,
            detection_sources=sources,
        )
        return ImportResult(tuple(transactions), tuple(warnings), tuple(errors), statistics)

    def format_transaction(self, transaction: ImportedTransaction, include_annotations: bool = True) -> str:
        """Render one entry with the amount right-aligned near column 52.

        Example::

            2024-01-15 (REF42) AMAZON.COM*123
                ; gift
                expenses:shopping:amazon                  -50.00  ; matched: merchant pattern
                TODO:account
        """
        if transaction.reference:
            header = f"{transaction.date} ({transaction.reference}) {transaction.description}"
        else:
            header = f"{transaction.date} {transaction.description}"
        lines = [header]
        if transaction.memo:
            lines.append(f"{POSTING_INDENT}; {transaction.memo}")

        resolution = transaction.source_account
        account_part = f"{POSTING_INDENT}{resolution.account}"
        padding = max(MIN_AMOUNT_PADDING, AMOUNT_COLUMN - len(account_part) - len(transaction.amount_formatted))
        posting = f"{account_part}{' ' * padding}{transaction.amount_formatted}"
        if include_annotations and resolution.source != "default":
            posting += f"  ; matched: {describe_source(resolution.source)}"
        lines.append(posting)
        lines.append(f"{POSTING_INDENT}{transaction.target_account}")
        return "\n".join(lines)

    def format_all(self, result: ImportResult, source_name: str | None = None) -> str:
        stats = result.statistics
        lines = [
            f"; Imported from {source_name or 'CSV'} on {dt.date.today().isoformat()}",
            f"; Rows: {stats.processed_rows} processed, {stats.skipped_rows} skipped",
            f"; Accounts: {stats.auto_detected_accounts} auto-detected, {stats.todo_accounts} need review (TODO)",
        ]
        breakdown = ", ".join(f"{source}: {count}" for source, count in stats.detection_sources.items() if count > 0)
        if breakdown:
            lines.append(f"; Detection sources: {breakdown}")
        lines.append("")

        if result.warnings:
            lines.append("; Warnings:")
            for warning in result.warnings[:MAX_LISTED_WARNINGS]:
                lines.append(f"; - Line {warning.line_number}: {warning.message}")
            if len(result.warnings) > MAX_LISTED_WARNINGS:
                lines.append(f"; - ... and {len(result.warnings) - MAX_LISTED_WARNINGS} more warnings")
            lines.append("")

        for transaction in result.transactions:
            lines.append(self.format_transaction(transaction))
            lines.append("")
        return "\n".join(lines)


def _cell(row: ParsedRow, index: int) -> str:
    if 0 <= index < len(row.cells):
        return row.cells[index].strip()
    return ""
