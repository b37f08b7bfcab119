"""Data model for tabular (CSV/TSV) import."""

from __future__ import annotations

from collections.abc import Mapping, Set
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Generic, Literal, TypeVar

Delimiter = Literal[",", "\t", ";", "|"]
DELIMITERS: tuple[Delimiter, ...] = (",", "\t", ";", "|")

DateFormat = Literal[
    "auto",
    "YYYY-MM-DD",
    "YYYY/MM/DD",
    "DD/MM/YYYY",
    "MM/DD/YYYY",
    "DD.MM.YYYY",
    "DD-MM-YYYY",
]
DATE_FORMATS: tuple[DateFormat, ...] = (
    "auto",
    "YYYY-MM-DD",
    "YYYY/MM/DD",
    "DD/MM/YYYY",
    "MM/DD/YYYY",
    "DD.MM.YYYY",
    "DD-MM-YYYY",
)

DecimalSeparatorHint = Literal["auto", "comma", "period"]
DECIMAL_SEPARATOR_HINTS: tuple[DecimalSeparatorHint, ...] = ("auto", "comma", "period")

ColumnType = Literal[
    "date",
    "description",
    "payee",
    "amount",
    "debit",
    "credit",
    "account",
    "category",
    "memo",
    "reference",
    "balance",
    "currency",
    "unknown",
]

AccountResolutionSource = Literal["category", "history", "pattern", "sign", "default"]
RESOLUTION_SOURCES: tuple[AccountResolutionSource, ...] = ("category", "history", "pattern", "sign", "default")


T = TypeVar("T")


@dataclass(frozen=True)
class ParseOutcome(Generic[T]):
    """Success/failure result for row- and file-level parsing."""

    success: bool
    value: T | None = None
    error: str | None = None

    @classmethod
    def ok(cls, value: T) -> ParseOutcome[T]:
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, error: str) -> ParseOutcome[T]:
        return cls(success=False, error=error)


@dataclass(frozen=True)
class ImportOptions:
    """Import configuration.

    ``merchant_patterns`` maps a regex to an account and is tried in insertion
    order after the builtin patterns. ``category_mapping`` keys are compared
    case-insensitively and override builtin categories.
    """

    date_format: DateFormat = "auto"
    default_debit_account: str = "expenses:unknown"
    default_credit_account: str = "income:unknown"
    default_balancing_account: str = "TODO:account"
    invert_amounts: bool = False
    use_journal_history: bool = True
    merchant_patterns: Mapping[str, str] = field(default_factory=dict)
    category_mapping: Mapping[str, str] = field(default_factory=dict)
    decimal_separator_hint: DecimalSeparatorHint = "auto"


DEFAULT_IMPORT_OPTIONS = ImportOptions()


def pair_key(payee: str, account: str) -> str:
    """Key used by PayeeAccountHistory.pair_usage."""
    return f"{payee}::{account}"


@dataclass(frozen=True)
class PayeeAccountHistory:
    """Read-only snapshot of which accounts each payee was posted to."""

    payee_accounts: Mapping[str, Set[str]]
    pair_usage: Mapping[str, int]

    def usage(self, payee: str, account: str) -> int:
        return self.pair_usage.get(pair_key(payee, account), 0)


@dataclass(frozen=True)
class AccountResolution:
    account: str
    confidence: float
    source: AccountResolutionSource


@dataclass(frozen=True)
class ColumnMapping:
    index: int
    type: ColumnType
    header_name: str
    confidence: float


@dataclass(frozen=True)
class ParsedRow:
    cells: tuple[str, ...]
    line_number: int


@dataclass(frozen=True)
class ParsedTabularData:
    headers: tuple[str, ...]
    rows: tuple[ParsedRow, ...]
    delimiter: Delimiter
    column_mappings: tuple[ColumnMapping, ...] = ()


@dataclass(frozen=True)
class ImportedTransaction:
    """One transaction produced from one tabular row."""

    date: str
    description: str
    amount: Decimal
    amount_formatted: str
    source_account: AccountResolution
    target_account: str
    line_number: int
    currency: str | None = None
    memo: str | None = None
    reference: str | None = None


@dataclass(frozen=True)
class ImportWarning:
    line_number: int
    message: str
    field: str | None = None


@dataclass(frozen=True)
class ImportIssue:
    """Import error; ``fatal`` errors stop generation for the whole file."""

    line_number: int
    message: str
    fatal: bool
    field: str | None = None


@dataclass(frozen=True)
class ImportStatistics:
    total_rows: int
    processed_rows: int
    skipped_rows: int
    auto_detected_accounts: int
    todo_accounts: int
    detection_sources: Mapping[AccountResolutionSource, int]


@dataclass(frozen=True)
class ImportResult:
    transactions: tuple[ImportedTransaction, ...]
    warnings: tuple[ImportWarning, ...]
    errors: tuple[ImportIssue, ...]
    statistics: ImportStatistics

    @property
    def fatal_errors(self) -> tuple[ImportIssue, ...]:
        return tuple(error for error in self.errors if error.fatal)


@dataclass(frozen=True)
class BuiltinImportRules:
    """Packaged defaults: lower-cased category mapping and ordered merchant patterns."""

    category_mapping: tuple[tuple[str, str], ...] = ()
    merchant_patterns: tuple[tuple[str, str], ...] = ()
