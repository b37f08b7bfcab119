"""Choose the ledger account for an imported row.

Strategies, first match wins:

1. Journal history (payee seen before)
2. Category column mapping
3. Merchant regex patterns against the description
4. Amount sign (positive income, negative expense)
5. Placeholder account
"""

from __future__ import annotations

import re
import unicodedata
from collections import OrderedDict
from collections.abc import Mapping, Set
from decimal import Decimal

from ledgerkit.importers.regex_safety import validate_regex_safety
from ledgerkit.importers.types import (
    AccountResolution,
    AccountResolutionSource,
    BuiltinImportRules,
    ImportOptions,
    PayeeAccountHistory,
)
from ledgerkit.runtime.logging import get_logger
from ledgerkit.util.fuzzy import SimpleFuzzyMatcher

logger = get_logger(__name__)

CONFIDENCE = {
    "HISTORY_EXACT": 0.95,
    "HISTORY_FUZZY": 0.85,
    "CATEGORY_EXACT": 0.8,
    "CATEGORY_PARTIAL": 0.75,
    "MERCHANT_PATTERN": 0.7,
    "AMOUNT_SIGN": 0.5,
    "DEFAULT": 0.0,
}

REVIEW_THRESHOLD = 0.7
PARTIAL_MATCH_CACHE_SIZE = 100

_SOURCE_DESCRIPTIONS: dict[AccountResolutionSource, str] = {
    "category": "category column",
    "history": "journal history",
    "pattern": "merchant pattern",
    "sign": "amount sign",
    "default": "no match found",
}

_MISSING = object()


class _LRUCache:
    """Small LRU map; ``None`` is a cacheable value."""

    def __init__(self, max_size: int) -> None:
        self.max_size = max_size
        self._data: OrderedDict[str, AccountResolution | None] = OrderedDict()

    def __contains__(self, key: str) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)

    def get(self, key: str) -> AccountResolution | None:
        value = self._data.get(key, _MISSING)
        if value is _MISSING:
            return None
        self._data.move_to_end(key)
        return value  # type: ignore[return-value]

    def set(self, key: str, value: AccountResolution | None) -> None:
        if key in self._data:
            self._data.move_to_end(key)
        elif len(self._data) >= self.max_size:
            self._data.popitem(last=False)
        self._data[key] = value

    def clear(self) -> None:
        self._data.clear()


class AccountResolver:
    """Resolve descriptions, categories and amounts to accounts.

    Builtin merchant patterns are trusted and compiled as-is. User patterns
    from ``options.merchant_patterns`` are screened with
    :func:`validate_regex_safety` first; rejected or invalid ones are logged,
    recorded in ``rejected_patterns`` and skipped.
    """

    def __init__(
        self,
        options: ImportOptions,
        payee_history: PayeeAccountHistory | None = None,
        builtin_rules: BuiltinImportRules | None = None,
    ) -> None:
        builtin_rules = builtin_rules or BuiltinImportRules()

        self.category_mapping: dict[str, str] = {}
        for category, account in builtin_rules.category_mapping:
            self.category_mapping[category.lower()] = account
        for category, account in options.category_mapping.items():
            self.category_mapping[category.lower()] = account

        self.rejected_patterns: list[str] = []
        self.merchant_patterns = self._compile_patterns(builtin_rules.merchant_patterns, options.merchant_patterns)

        self.default_debit_account = options.default_debit_account
        self.default_credit_account = options.default_credit_account
        self.default_placeholder = options.default_balancing_account

        self.payee_history = payee_history
        self.use_history = options.use_journal_history and payee_history is not None
        self._partial_match_cache = _LRUCache(PARTIAL_MATCH_CACHE_SIZE)
        self._fuzzy_matcher = SimpleFuzzyMatcher()

    def resolve(
        self,
        description: str,
        category: str | None = None,
        amount: Decimal | None = None,
    ) -> AccountResolution:
        if self.use_history and description:
            result = self._resolve_from_history(description)
            if result is not None:
                return result

        if category:
            result = self._resolve_from_category(category)
            if result is not None:
                return result

        if description:
            result = self._resolve_from_pattern(description)
            if result is not None:
                return result

        if amount is not None:
            return self._resolve_from_amount(amount)

        return AccountResolution(self.default_placeholder, CONFIDENCE["DEFAULT"], "default")

    def _resolve_from_history(self, description: str) -> AccountResolution | None:
        if self.payee_history is None:
            return None
        normalized = unicodedata.normalize("NFC", description)
        desc_lower = normalized.lower()
        payee_accounts = self.payee_history.payee_accounts

        for payee, accounts in payee_accounts.items():
            if payee.lower() == desc_lower:
                account = self._select_best_account(payee, accounts)
                return AccountResolution(account, CONFIDENCE["HISTORY_EXACT"], "history")

        if not payee_accounts:
            return None

        for payee, accounts in payee_accounts.items():
            payee_lower = payee.strip().lower()
            if not payee_lower:
                continue
            if payee_lower in desc_lower or desc_lower in payee_lower:
                account = self._select_best_account(payee, accounts)
                return AccountResolution(account, CONFIDENCE["HISTORY_FUZZY"], "history")

        candidates = [payee for payee in payee_accounts if payee.strip()]
        matches = self._fuzzy_matcher.match(normalized, candidates, max_results=1)
        if matches and matches[0].score > 0:
            payee = matches[0].item
            account = self._select_best_account(payee, payee_accounts[payee])
            return AccountResolution(account, CONFIDENCE["HISTORY_FUZZY"], "history")
        return None

    def _select_best_account(self, payee: str, accounts: Set[str]) -> str:
        """Most used account for the payee, alphabetical on ties."""
        if not accounts:
            return self.default_placeholder
        if len(accounts) == 1:
            return next(iter(accounts))
        history = self.payee_history
        return min(accounts, key=lambda account: (-(history.usage(payee, account) if history else 0), account))

    def _resolve_from_category(self, category: str) -> AccountResolution | None:
        normalized = category.lower().strip()

        direct = self.category_mapping.get(normalized)
        if direct:
            return AccountResolution(direct, CONFIDENCE["CATEGORY_EXACT"], "category")

        if normalized in self._partial_match_cache:
            return self._partial_match_cache.get(normalized)

        for key, account in self.category_mapping.items():
            if key in normalized or normalized in key:
                result = AccountResolution(account, CONFIDENCE["CATEGORY_PARTIAL"], "category")
                self._partial_match_cache.set(normalized, result)
                return result

        self._partial_match_cache.set(normalized, None)
        return None

    def _resolve_from_pattern(self, description: str) -> AccountResolution | None:
        upper = description.upper()
        for regex, account in self.merchant_patterns:
            if regex.search(upper):
                logger.debug("Description %r matched merchant pattern %r", description, regex.pattern)
                return AccountResolution(account, CONFIDENCE["MERCHANT_PATTERN"], "pattern")
        return None

    def _resolve_from_amount(self, amount: Decimal) -> AccountResolution:
        if amount > 0:
            return AccountResolution(self.default_credit_account, CONFIDENCE["AMOUNT_SIGN"], "sign")
        if amount < 0:
            return AccountResolution(self.default_debit_account, CONFIDENCE["AMOUNT_SIGN"], "sign")
        return AccountResolution(self.default_placeholder, CONFIDENCE["DEFAULT"], "default")

    def _compile_patterns(
        self,
        builtin_patterns: tuple[tuple[str, str], ...],
        user_patterns: Mapping[str, str],
    ) -> list[tuple[re.Pattern[str], str]]:
        compiled: list[tuple[re.Pattern[str], str]] = []

        for pattern, account in builtin_patterns:
            try:
                compiled.append((re.compile(pattern, re.IGNORECASE), account))
            except re.error as exc:
                logger.warning("Invalid builtin merchant pattern %r: %s", pattern, exc)

        for pattern, account in user_patterns.items():
            if not validate_regex_safety(pattern):
                logger.warning(
                    "Potentially unsafe merchant pattern %r rejected: it is too long or has nested quantifiers",
                    pattern,
                )
                self.rejected_patterns.append(pattern)
                continue
            try:
                compiled.append((re.compile(pattern, re.IGNORECASE), account))
            except re.error as exc:
                logger.warning("Invalid merchant pattern %r ignored: %s", pattern, exc)
                self.rejected_patterns.append(pattern)

        return compiled


def describe_source(source: AccountResolutionSource) -> str:
    return _SOURCE_DESCRIPTIONS[source]


def needs_review(resolution: AccountResolution) -> bool:
    """True when a human should confirm the account before the entry is trusted."""
    return (
        resolution.confidence < REVIEW_THRESHOLD
        or resolution.source == "default"
        or resolution.account.startswith("TODO:")
        or "unknown" in resolution.account
    )


def format_with_annotation(resolution: AccountResolution, include_annotation: bool = True) -> str:
    if not include_annotation or resolution.source == "default":
        return resolution.account
    return f"{resolution.account}  ; matched: {describe_source(resolution.source)}"
