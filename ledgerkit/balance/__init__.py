"""Ledger text parsing and transaction balance checking."""

from ledgerkit.balance.amount_parser import AmountParser, detect_posting_type, parse_posting_amount, parse_posting_line
from ledgerkit.balance.balancer import TransactionBalancer, check_balance
from ledgerkit.balance.cache import CachedDocument, CachedTransaction, LineRange, TransactionCache
from ledgerkit.balance.diagnostics import BalanceDiagnostic, check_document
from ledgerkit.balance.extractor import KNOWN_DIRECTIVES, TransactionExtractor, extract_transactions
from ledgerkit.balance.number_format import CommodityFormat, NumberFormatContext, split_decimal
from ledgerkit.balance.types import (
    BalanceError,
    BalanceErrorType,
    BalanceResult,
    BalanceStatus,
    ParsedPosting,
    ParsedPostingAmount,
    ParsedTransaction,
    PostingCost,
    PostingGroup,
    PostingType,
)

__all__ = [
    "AmountParser",
    "BalanceDiagnostic",
    "BalanceError",
    "BalanceErrorType",
    "BalanceResult",
    "BalanceStatus",
    "CachedDocument",
    "CachedTransaction",
    "CommodityFormat",
    "KNOWN_DIRECTIVES",
    "LineRange",
    "NumberFormatContext",
    "ParsedPosting",
    "ParsedPostingAmount",
    "ParsedTransaction",
    "PostingCost",
    "PostingGroup",
    "PostingType",
    "TransactionBalancer",
    "TransactionCache",
    "TransactionExtractor",
    "check_balance",
    "check_document",
    "detect_posting_type",
    "extract_transactions",
    "parse_posting_amount",
    "parse_posting_line",
    "split_decimal",
]
