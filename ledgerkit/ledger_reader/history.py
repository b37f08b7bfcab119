"""Payee to account history used by the import account resolver."""

from __future__ import annotations

import math
import unicodedata
from collections.abc import Iterable, Mapping
from numbers import Real
from typing import Any

from ledgerkit.importers.types import PayeeAccountHistory, pair_key


class JournalNotFoundError(FileNotFoundError):
    """The journal file does not exist."""


class JournalAccessError(OSError):
    """The journal file exists but could not be read or parsed."""


def payee_from_description(description: str) -> str:
    """Payee part of a ``payee | note`` description, NFC-normalized."""
    payee = description.split("|", 1)[0].strip()
    return unicodedata.normalize("NFC", payee)


class PayeeHistoryBuilder:
    """Accumulate payee/account usage, then freeze it into a PayeeAccountHistory."""

    def __init__(self) -> None:
        self._payee_accounts: dict[str, set[str]] = {}
        self._pair_usage: dict[str, int] = {}

    def add(self, payee: str, accounts: Iterable[str]) -> None:
        payee = unicodedata.normalize("NFC", payee.strip())
        if not payee:
            return
        for account in accounts:
            if not account:
                continue
            self._payee_accounts.setdefault(payee, set()).add(account)
            key = pair_key(payee, account)
            self._pair_usage[key] = self._pair_usage.get(key, 0) + 1

    def build(self) -> PayeeAccountHistory:
        return PayeeAccountHistory(
            payee_accounts={payee: frozenset(accounts) for payee, accounts in self._payee_accounts.items()},
            pair_usage=dict(self._pair_usage),
        )


def build_payee_history(records: Iterable[tuple[str, Iterable[str]]]) -> PayeeAccountHistory:
    """Build history from ``(description, accounts)`` pairs, one per transaction."""
    builder = PayeeHistoryBuilder()
    for description, accounts in records:
        builder.add(payee_from_description(description), accounts)
    return builder.build()


def _valid_count(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    number = float(value)
    return math.isfinite(number) and number >= 0


def _first_present(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in raw:
            return raw[key]
    return None


def coerce_payee_history(raw: Any) -> PayeeAccountHistory | None:
    """Convert loosely typed external data (e.g. decoded JSON) into a PayeeAccountHistory.

    Accepts ``payee_accounts``/``payeeAccounts`` as ``{payee: [accounts]}`` and
    ``pair_usage``/``pairUsage`` as ``{"payee::account": count}``. Entries with
    non-string or blank payees, empty account lists, or counts that are not finite
    non-negative numbers are dropped. Returns None when nothing usable remains.
    """
    if not isinstance(raw, Mapping):
        return None

    payee_accounts: dict[str, frozenset[str]] = {}
    raw_accounts = _first_present(raw, "payee_accounts", "payeeAccounts")
    if isinstance(raw_accounts, Mapping):
        for payee, accounts in raw_accounts.items():
            if not isinstance(payee, str) or not isinstance(accounts, (list, tuple, set, frozenset)):
                continue
            payee = unicodedata.normalize("NFC", payee.strip())
            if not payee:
                continue
            names = frozenset(account for account in accounts if isinstance(account, str) and account)
            if names:
                payee_accounts[payee] = names

    pair_usage: dict[str, int] = {}
    raw_usage = _first_present(raw, "pair_usage", "pairUsage")
    if isinstance(raw_usage, Mapping):
        for key, count in raw_usage.items():
            if isinstance(key, str) and _valid_count(count):
                pair_usage[key] = int(count)

    if not payee_accounts:
        return None
    return PayeeAccountHistory(payee_accounts=payee_accounts, pair_usage=pair_usage)
