"""Per-document transaction cache with diff-based reparse decisions.

Create one TransactionCache per editing session and pass it to the code that
needs it; there is no module-level instance.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Literal

from ledgerkit.balance.extractor import TransactionExtractor, normalize_newlines
from ledgerkit.balance.number_format import NumberFormatContext
from ledgerkit.balance.types import ParsedTransaction
from ledgerkit.runtime.logging import get_logger

logger = get_logger(__name__)

CacheStrategy = Literal["full", "unchanged", "incremental"]

# A full reparse is forced past these thresholds.
MAX_LINE_DELTA = 50
AFFECTED_RATIO = 0.7


@dataclass(frozen=True)
class LineRange:
    start: int
    end: int


@dataclass(frozen=True)
class CachedTransaction:
    transaction: ParsedTransaction
    start_line: int
    end_line: int
    content_hash: str


@dataclass(frozen=True)
class CachedDocument:
    """Snapshot for one document; replaced as a unit, never mutated."""

    content_lines: tuple[str, ...]
    transactions: tuple[CachedTransaction, ...]
    parsed_transactions: list[ParsedTransaction]
    format_context: NumberFormatContext | None = None


def find_transaction_end_line(transaction: ParsedTransaction, lines: tuple[str, ...]) -> int:
    """Last line of the transaction block: indented, non-blank lines after the last posting."""
    if not transaction.postings:
        return transaction.header_line_number
    end_line = max(posting.line_number for posting in transaction.postings)
    for index in range(end_line + 1, len(lines)):
        line = lines[index]
        if not line.strip() or not line[:1].isspace():
            break
        end_line = index
    return end_line


def block_hash(lines: tuple[str, ...]) -> str:
    return hashlib.sha256("\n".join(lines).encode("utf-8")).hexdigest()


def detect_changed_line_ranges(old_lines: tuple[str, ...], new_lines: tuple[str, ...]) -> list[LineRange]:
    """Position-aligned diff; the shorter side is padded with empty strings."""
    changes: list[LineRange] = []
    max_len = max(len(old_lines), len(new_lines))
    change_start = -1
    for index in range(max_len):
        old_line = old_lines[index] if index < len(old_lines) else ""
        new_line = new_lines[index] if index < len(new_lines) else ""
        if old_line != new_line:
            if change_start == -1:
                change_start = index
        elif change_start != -1:
            changes.append(LineRange(change_start, index - 1))
            change_start = -1
    if change_start != -1:
        changes.append(LineRange(change_start, max_len - 1))
    return changes


def find_affected_transactions(
    cached_transactions: tuple[CachedTransaction, ...],
    changed_ranges: list[LineRange],
) -> set[int]:
    """Indexes of transactions overlapping a change or located after one."""
    affected: set[int] = set()
    for index, cached in enumerate(cached_transactions):
        for changed in changed_ranges:
            overlaps = cached.start_line <= changed.end and cached.end_line >= changed.start
            if overlaps or changed.end < cached.start_line:
                affected.add(index)
                break
    return affected


class TransactionCache:
    """Cache of parsed transactions keyed by document URI.

    Identical content returns the very same list object. Any change re-runs
    the extractor over the whole document; the diff only decides whether the
    change counts as incremental, which is recorded in ``last_strategy``.
    """

    def __init__(self) -> None:
        self._documents: dict[str, CachedDocument] = {}
        self.last_strategy: CacheStrategy | None = None

    def __len__(self) -> int:
        return len(self._documents)

    def __contains__(self, uri: object) -> bool:
        return uri in self._documents

    def get_transactions(
        self,
        uri: str,
        content: str,
        format_context: NumberFormatContext | None = None,
    ) -> list[ParsedTransaction]:
        new_lines = tuple(normalize_newlines(content).split("\n"))
        cached = self._documents.get(uri)

        if cached is None:
            return self._full_parse(uri, new_lines, format_context)

        if cached.format_context != format_context:
            logger.debug("Full reparse of %s: number format context changed", uri)
            return self._full_parse(uri, new_lines, format_context)

        if cached.content_lines == new_lines:
            self.last_strategy = "unchanged"
            return cached.parsed_transactions

        changed_ranges = detect_changed_line_ranges(cached.content_lines, new_lines)
        line_delta = abs(len(new_lines) - len(cached.content_lines))
        if len(changed_ranges) > len(cached.transactions) / 2 or line_delta > MAX_LINE_DELTA:
            logger.debug(
                "Full reparse of %s: %d changed ranges, line delta %d",
                uri,
                len(changed_ranges),
                line_delta,
            )
            return self._full_parse(uri, new_lines, format_context)

        affected = find_affected_transactions(cached.transactions, changed_ranges)
        if len(affected) >= len(cached.transactions) * AFFECTED_RATIO:
            logger.debug("Full reparse of %s: %d of %d transactions affected", uri, len(affected), len(cached.transactions))
            return self._full_parse(uri, new_lines, format_context)

        logger.debug("Incremental reparse of %s: %d transactions affected", uri, len(affected))
        self._store(uri, new_lines, format_context)
        self.last_strategy = "incremental"
        return self._documents[uri].parsed_transactions

    def invalidate(self, uri: str) -> None:
        self._documents.pop(uri, None)

    def clear(self) -> None:
        self._documents.clear()

    def _full_parse(
        self,
        uri: str,
        lines: tuple[str, ...],
        format_context: NumberFormatContext | None,
    ) -> list[ParsedTransaction]:
        self._store(uri, lines, format_context)
        self.last_strategy = "full"
        return self._documents[uri].parsed_transactions

    def _store(self, uri: str, lines: tuple[str, ...], format_context: NumberFormatContext | None) -> None:
        transactions = TransactionExtractor(format_context).extract_transactions("\n".join(lines))
        cached_transactions = []
        for transaction in transactions:
            start_line = transaction.header_line_number
            end_line = find_transaction_end_line(transaction, lines)
            cached_transactions.append(
                CachedTransaction(
                    transaction=transaction,
                    start_line=start_line,
                    end_line=end_line,
                    content_hash=block_hash(lines[start_line : end_line + 1]),
                )
            )
        self._documents[uri] = CachedDocument(
            content_lines=lines,
            transactions=tuple(cached_transactions),
            parsed_transactions=transactions,
            format_context=format_context,
        )
