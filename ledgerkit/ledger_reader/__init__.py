"""Centralized read access for journal files."""

from ledgerkit.ledger_reader.history import (
    JournalAccessError,
    JournalNotFoundError,
    PayeeHistoryBuilder,
    build_payee_history,
    coerce_payee_history,
    payee_from_description,
)
from ledgerkit.ledger_reader.reader import (
    JournalTransaction,
    LedgerReader,
    LoadedJournal,
    get_ledger_reader,
    reset_ledger_reader,
)

__all__ = [
    "JournalAccessError",
    "JournalNotFoundError",
    "JournalTransaction",
    "LedgerReader",
    "LoadedJournal",
    "PayeeHistoryBuilder",
    "build_payee_history",
    "coerce_payee_history",
    "get_ledger_reader",
    "payee_from_description",
    "reset_ledger_reader",
]
