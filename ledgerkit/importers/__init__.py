"""Tabular (CSV/TSV) statement import.

Pipeline:

    TabularDataParser -> ColumnDetector -> TransactionGenerator

The generator resolves each row's account with AccountResolver (journal
history, category column, merchant patterns, amount sign) and formats
two-posting journal entries:

    from ledgerkit.importers import ColumnDetector, TabularDataParser, TransactionGenerator

    parsed = TabularDataParser().parse(text)
    data = parsed.value
    mappings = ColumnDetector().detect_columns(data.headers, data.rows)
    generator = TransactionGenerator(options)
    result = generator.generate(dataclasses.replace(data, column_mappings=tuple(mappings)))
    print(generator.format_all(result, "bank.csv"))
"""

from .types import (
    DATE_FORMATS,
    DECIMAL_SEPARATOR_HINTS,
    DEFAULT_IMPORT_OPTIONS,
    AccountResolution,
    AccountResolutionSource,
    BuiltinImportRules,
    ColumnMapping,
    ColumnType,
    DateFormat,
    DecimalSeparatorHint,
    Delimiter,
    ImportedTransaction,
    ImportIssue,
    ImportOptions,
    ImportResult,
    ImportStatistics,
    ImportWarning,
    ParsedRow,
    ParsedTabularData,
    ParseOutcome,
    PayeeAccountHistory,
)
from .account_resolver import CONFIDENCE, AccountResolver, describe_source, format_with_annotation, needs_review  # noqa: I001
from .amounts import format_amount, parse_amount_string
from .columns import ColumnDetector, find_mapping, has_required_columns, missing_required_columns
from .dates import DateParser, disambiguate_slash_format
from .generator import TransactionGenerator
from .regex_safety import MAX_PATTERN_LENGTH, validate_regex_safety
from .tabular import TabularDataParser, get_cell_value, validate_column_consistency

__all__ = [
    "AccountResolution",
    "AccountResolutionSource",
    "AccountResolver",
    "BuiltinImportRules",
    "CONFIDENCE",
    "ColumnDetector",
    "ColumnMapping",
    "ColumnType",
    "DATE_FORMATS",
    "DECIMAL_SEPARATOR_HINTS",
    "DEFAULT_IMPORT_OPTIONS",
    "DateFormat",
    "DateParser",
    "DecimalSeparatorHint",
    "Delimiter",
    "ImportIssue",
    "ImportOptions",
    "ImportResult",
    "ImportStatistics",
    "ImportWarning",
    "ImportedTransaction",
    "MAX_PATTERN_LENGTH",
    "ParseOutcome",
    "ParsedRow",
    "ParsedTabularData",
    "PayeeAccountHistory",
    "TabularDataParser",
    "TransactionGenerator",
    "describe_source",
    "disambiguate_slash_format",
    "find_mapping",
    "format_amount",
    "format_with_annotation",
    "get_cell_value",
    "has_required_columns",
    "missing_required_columns",
    "needs_review",
    "parse_amount_string",
    "validate_column_consistency",
    "validate_regex_safety",
]
