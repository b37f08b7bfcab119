"""Read-only access to journal files on disk.

This module is the single place that reads journals. Beancount files are
loaded with ``beancount.loader``; ledger/hledger journals go through the
TransactionExtractor.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from beancount.core import data
from beancount.loader import load_file

from ledgerkit.balance.extractor import TransactionExtractor
from ledgerkit.importers.types import PayeeAccountHistory
from ledgerkit.ledger_reader.history import (
    JournalAccessError,
    JournalNotFoundError,
    PayeeHistoryBuilder,
    payee_from_description,
)
from ledgerkit.runtime import get_logger, get_paths

logger = get_logger(__name__)

BEANCOUNT_SUFFIXES = (".beancount", ".bean")


@dataclass(frozen=True)
class JournalTransaction:
    """Minimal transaction view shared by both journal syntaxes."""

    date: str
    payee: str
    accounts: tuple[str, ...]


@dataclass(frozen=True)
class LoadedJournal:
    """Structured result from loading a journal."""

    path: Path
    transactions: tuple[JournalTransaction, ...]
    error_count: int = 0


def is_beancount_file(path: Path) -> bool:
    return path.suffix.lower() in BEANCOUNT_SUFFIXES


class LedgerReader:
    """Read-only access to journal data."""

    def __init__(self, default_journal_path: Path | None = None) -> None:
        self.default_journal_path = default_journal_path or get_paths().journal

    def _resolve_path(self, journal_path: Path | str | None) -> Path:
        if journal_path is None:
            return self.default_journal_path
        return Path(journal_path)

    def load(self, journal_path: Path | str | None = None) -> LoadedJournal:
        """Load a journal from disk.

        Raises:
            JournalNotFoundError: If the file does not exist.
            JournalAccessError: If the file cannot be read.
        """
        path = self._resolve_path(journal_path)
        if not path.is_file():
            raise JournalNotFoundError(f"Journal file not found: {path}")

        if is_beancount_file(path):
            return self._load_beancount(path)
        return self._load_text(path)

    def _load_beancount(self, path: Path) -> LoadedJournal:
        try:
            entries, errors, _options = load_file(str(path))
        except OSError as exc:
            raise JournalAccessError(f"Could not read journal {path}: {exc}") from exc

        if errors:
            logger.warning("Beancount reported %d error(s) while loading %s", len(errors), path)

        transactions = tuple(
            JournalTransaction(
                date=entry.date.isoformat(),
                payee=entry.payee or entry.narration or "",
                accounts=tuple(posting.account for posting in entry.postings),
            )
            for entry in entries
            if isinstance(entry, data.Transaction)
        )
        return LoadedJournal(path=path, transactions=transactions, error_count=len(errors))

    def _load_text(self, path: Path) -> LoadedJournal:
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise JournalAccessError(f"Could not read journal {path}: {exc}") from exc

        transactions = tuple(
            JournalTransaction(
                date=parsed.date,
                payee=payee_from_description(parsed.description),
                accounts=tuple(posting.account for posting in parsed.postings),
            )
            for parsed in TransactionExtractor().extract_transactions(text)
        )
        return LoadedJournal(path=path, transactions=transactions)

    def read_text(self, journal_path: Path | str | None = None) -> str:
        """Return the raw journal text.

        Raises:
            JournalNotFoundError: If the file does not exist.
            JournalAccessError: If the file cannot be read.
        """
        path = self._resolve_path(journal_path)
        if not path.is_file():
            raise JournalNotFoundError(f"Journal file not found: {path}")
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise JournalAccessError(f"Could not read journal {path}: {exc}") from exc

    def payee_history(self, journal_path: Path | str | None = None) -> PayeeAccountHistory:
        """Payee to account history for every transaction in the journal."""
        loaded = self.load(journal_path)
        builder = PayeeHistoryBuilder()
        for transaction in loaded.transactions:
            builder.add(payee_from_description(transaction.payee), transaction.accounts)
        history = builder.build()
        logger.debug("Loaded history for %d payees from %s", len(history.payee_accounts), loaded.path)
        return history


_reader: LedgerReader | None = None


def get_ledger_reader() -> LedgerReader:
    """Return a singleton ledger reader instance."""
    global _reader
    if _reader is None:
        _reader = LedgerReader()
    return _reader


def reset_ledger_reader() -> None:
    global _reader
    _reader = None
