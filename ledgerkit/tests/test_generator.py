"""Tests for turning tabular rows into journal entries."""

from __future__ import annotations

import dataclasses
from decimal import Decimal

from ledgerkit.importers import ColumnDetector, TabularDataParser, TransactionGenerator
from ledgerkit.importers.types import (
    AccountResolution,
    BuiltinImportRules,
    ColumnMapping,
    ImportedTransaction,
    ImportOptions,
    ParsedRow,
    ParsedTabularData,
)

BANK_EXPORT = """Date,Description,Amount,Category
2024-01-15,AMAZON.COM*123,-50.00,
2024-01-16,Paycheck,2500.00,Salary
2024-01-17,Mystery,abc,
bad-date,Thing,1.00,
"""


def _prepare(content: str) -> ParsedTabularData:
    data = TabularDataParser().parse(content).value
    assert data is not None
    mappings = ColumnDetector().detect_columns(data.headers, data.rows)
    return dataclasses.replace(data, column_mappings=tuple(mappings))


def _transaction(**overrides: object) -> ImportedTransaction:
    values: dict[str, object] = {
        "date": "2024-01-15",
        "description": "Shop",
        "amount": Decimal("-1.00"),
        "amount_formatted": "-1.00",
        "source_account": AccountResolution("expenses:shopping", 0.8, "category"),
        "target_account": "TODO:account",
        "line_number": 2,
    }
    values.update(overrides)
    return ImportedTransaction(**values)  # type: ignore[arg-type]


def test_generate_from_bank_export(builtin_rules: BuiltinImportRules) -> None:
    generator = TransactionGenerator(builtin_rules=builtin_rules)

    result = generator.generate(_prepare(BANK_EXPORT))

    assert [t.description for t in result.transactions] == ["AMAZON.COM*123", "Paycheck"]
    amazon, paycheck = result.transactions
    assert amazon.amount == Decimal("-50.00")
    assert amazon.source_account.account == "expenses:shopping:amazon"
    assert amazon.target_account == "TODO:account"
    assert paycheck.source_account.account == "income:salary"
    assert [(w.line_number, w.message) for w in result.warnings] == [
        (4, "Invalid amount: abc"),
        (5, "Invalid date: bad-date"),
    ]
    assert result.errors == ()

    stats = result.statistics
    assert (stats.total_rows, stats.processed_rows, stats.skipped_rows) == (4, 2, 2)
    assert stats.auto_detected_accounts == 2
    assert stats.todo_accounts == 0
    assert stats.detection_sources["pattern"] == 1
    assert stats.detection_sources["category"] == 1


def test_missing_required_columns_is_fatal() -> None:
    data = ParsedTabularData(
        headers=("Description",),
        rows=(ParsedRow(("Coffee",), 2),),
        delimiter=",",
        column_mappings=(ColumnMapping(0, "description", "Description", 0.95),),
    )

    result = TransactionGenerator().generate(data)

    assert result.transactions == ()
    assert len(result.fatal_errors) == 1
    assert result.fatal_errors[0].message == "Missing required columns: date, amount"
    assert result.statistics.skipped_rows == 1


def test_debit_and_credit_columns() -> None:
    content = "Date,Payee,Debit,Credit\n2024-01-15,Coffee,4.50,\n2024-01-16,Refund,,10.00\n2024-01-17,Nothing,,\n"

    result = TransactionGenerator().generate(_prepare(content))

    assert [t.amount for t in result.transactions] == [Decimal("-4.50"), Decimal("10.00")]
    assert [t.source_account.account for t in result.transactions] == ["expenses:unknown", "income:unknown"]
    assert result.warnings[0].message == "No valid amount found"


def test_invert_amounts_and_currency_column() -> None:
    content = "Date,Description,Amount,Currency\n2024-01-15,Card payment,120.00,EUR\n"
    generator = TransactionGenerator(ImportOptions(invert_amounts=True))

    transaction = generator.generate(_prepare(content)).transactions[0]

    assert transaction.amount == Decimal("-120.00")
    assert transaction.currency == "EUR"
    assert transaction.amount_formatted == "-120.00 EUR"


def test_empty_description_uses_placeholder() -> None:
    content = "Date,Description,Amount\n2024-01-15,,-3.00\n"

    result = TransactionGenerator().generate(_prepare(content))

    assert result.transactions[0].description == "Unknown transaction"
    assert result.warnings[0].message == "Empty description, using placeholder"
    assert result.warnings[0].field == "description"


def test_format_transaction_aligns_amount(builtin_rules: BuiltinImportRules) -> None:
    generator = TransactionGenerator(builtin_rules=builtin_rules)
    amazon = generator.generate(_prepare(BANK_EXPORT)).transactions[0]

    lines = generator.format_transaction(amazon).split("\n")

    assert lines[0] == "2024-01-15 AMAZON.COM*123"
    assert lines[1].startswith("    expenses:shopping:amazon ")
    assert lines[1].index("-50.00") + len("-50.00") == 52
    assert lines[1].endswith("  ; matched: merchant pattern")
    assert lines[2] == "    TODO:account"
    assert "; matched" not in generator.format_transaction(amazon, include_annotations=False)


def test_format_transaction_with_reference_memo_and_long_account() -> None:
    long_account = "expenses:" + "x" * 50
    transaction = _transaction(
        reference="REF42",
        memo="gift",
        source_account=AccountResolution(long_account, 0.8, "category"),
    )

    lines = TransactionGenerator().format_transaction(transaction).split("\n")

    assert lines[0] == "2024-01-15 (REF42) Shop"
    assert lines[1] == "    ; gift"
    assert lines[2].startswith(f"    {long_account}    -1.00")


def test_format_all_header_and_warnings(builtin_rules: BuiltinImportRules) -> None:
    generator = TransactionGenerator(builtin_rules=builtin_rules)
    result = generator.generate(_prepare(BANK_EXPORT))

    output = generator.format_all(result, "bank.csv")

    lines = output.split("\n")
    assert lines[0].startswith("; Imported from bank.csv on ")
    assert lines[1] == "; Rows: 2 processed, 2 skipped"
    assert lines[2] == "; Accounts: 2 auto-detected, 0 need review (TODO)"
    assert lines[3] == "; Detection sources: category: 1, pattern: 1"
    assert "; - Line 4: Invalid amount: abc" in lines
    assert "2024-01-16 Paycheck" in lines
