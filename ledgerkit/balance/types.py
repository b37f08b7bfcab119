"""Data model for parsed ledger transactions and balance results."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Literal

PostingType = Literal["real", "unbalancedVirtual", "balancedVirtual"]
PostingGroup = Literal["real", "balancedVirtual"]
BalanceStatus = Literal["balanced", "unbalanced", "error"]
BalanceErrorType = Literal["imbalanced", "multipleInferred", "parseError"]


@dataclass(frozen=True)
class PostingCost:
    """Inline ``@``/``@@`` price. ``value`` is always non-negative."""

    value: Decimal
    commodity: str
    is_total: bool
    precision: int


@dataclass(frozen=True)
class ParsedPostingAmount:
    """One parsed posting amount.

    ``precision`` is the number of fraction digits as written, not the
    mathematical precision of ``value``. A balance-assertion-only amount has
    value 0 and never contributes to balance sums.
    """

    value: Decimal
    commodity: str
    precision: int
    cost: PostingCost | None = None
    is_balance_assertion_only: bool = False


@dataclass(frozen=True)
class ParsedPosting:
    """One posting line.

    ``amount is None`` with an empty ``amount_text`` means the amount was
    elided and is inferred. A non-empty ``amount_text`` with ``amount is None``
    means the text could not be parsed.
    """

    raw_account: str
    account: str
    type: PostingType
    amount: ParsedPostingAmount | None
    line_number: int
    amount_text: str = ""

    @property
    def is_inferred(self) -> bool:
        return self.amount is None and not self.amount_text

    @property
    def has_parse_error(self) -> bool:
        return self.amount is None and bool(self.amount_text)


@dataclass(frozen=True)
class ParsedTransaction:
    date: str
    header_line_number: int
    postings: tuple[ParsedPosting, ...]
    description: str
    status: str = ""
    code: str = ""


@dataclass(frozen=True)
class BalanceError:
    type: BalanceErrorType
    message: str
    posting_group: PostingGroup | None = None
    commodity: str | None = None
    difference: Decimal | None = None
    line_number: int | None = None


@dataclass(frozen=True)
class BalanceResult:
    """Tagged result: ``balanced``, ``unbalanced`` with errors, or ``error`` with a message."""

    status: BalanceStatus
    errors: tuple[BalanceError, ...] = ()
    message: str | None = None

    @property
    def is_balanced(self) -> bool:
        return self.status == "balanced"

    @classmethod
    def balanced(cls) -> BalanceResult:
        return cls(status="balanced")

    @classmethod
    def unbalanced(cls, errors: tuple[BalanceError, ...]) -> BalanceResult:
        return cls(status="unbalanced", errors=errors)

    @classmethod
    def failed(cls, message: str) -> BalanceResult:
        return cls(status="error", message=message)
