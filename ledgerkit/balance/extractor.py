"""Scan ledger text into ParsedTransaction records."""

from __future__ import annotations

import re

from ledgerkit.balance.amount_parser import AmountParser
from ledgerkit.balance.number_format import NumberFormatContext
from ledgerkit.balance.types import ParsedPosting, ParsedTransaction

KNOWN_DIRECTIVES = (
    "account ",
    "commodity ",
    "payee ",
    "tag ",
    "alias ",
    "include ",
    "decimal-mark ",
    "default commodity ",
    "Y ",
    "P ",
    "apply account",
    "end apply account",
    "comment",
    "end comment",
)

_HEADER_DATE = re.compile(r"^\d{4}[-/.]\d{1,2}[-/.]\d{1,2}")
_HEADER_COMMENT = re.compile(r"[;#]")


def normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def is_transaction_header(trimmed: str) -> bool:
    return bool(_HEADER_DATE.match(trimmed))


def parse_transaction_header(trimmed: str) -> tuple[str, str, str, str]:
    """Split a header line into ``(date, status, code, description)``."""
    parts = trimmed.split()
    date = parts[0] if parts else ""
    index = 1
    status = ""
    if len(parts) > index and parts[index] in ("*", "!"):
        status = parts[index]
        index += 1
    code = ""
    if len(parts) > index and parts[index].startswith("(") and parts[index].endswith(")"):
        code = parts[index][1:-1]
        index += 1
    description = _HEADER_COMMENT.split(" ".join(parts[index:]), maxsplit=1)[0].strip()
    return date, status, code, description


class _OpenTransaction:
    def __init__(self, line_number: int, header: tuple[str, str, str, str]) -> None:
        self.line_number = line_number
        self.date, self.status, self.code, self.description = header
        self.postings: list[ParsedPosting] = []

    def finish(self) -> ParsedTransaction:
        return ParsedTransaction(
            date=self.date,
            header_line_number=self.line_number,
            postings=tuple(self.postings),
            description=self.description,
            status=self.status,
            code=self.code,
        )


class TransactionExtractor:
    """Single-pass line classifier producing one ParsedTransaction per block.

    Periodic (``~``) and auto-posting (``=``) rules, directives and
    ``comment``/``end comment`` blocks close the open transaction and are not
    modelled. Line numbers are zero-based indexes into the text.
    """

    def __init__(self, format_context: NumberFormatContext | None = None) -> None:
        self.amount_parser = AmountParser(format_context)

    def extract_transactions(self, text: str) -> list[ParsedTransaction]:
        lines = normalize_newlines(text).split("\n")
        transactions: list[ParsedTransaction] = []
        current: _OpenTransaction | None = None
        in_comment_block = False

        def flush() -> None:
            nonlocal current
            if current is not None and current.postings:
                transactions.append(current.finish())
            current = None

        for index, line in enumerate(lines):
            trimmed = line.strip()

            if in_comment_block:
                if not line[:1].isspace() and trimmed.startswith("end comment"):
                    in_comment_block = False
                continue

            if not trimmed:
                flush()
                continue

            if trimmed.startswith((";", "#")):
                continue

            indented = line[:1].isspace()

            if not indented and trimmed.startswith(("~", "=")):
                flush()
                continue

            if not indented and trimmed.startswith(KNOWN_DIRECTIVES):
                flush()
                in_comment_block = trimmed == "comment"
                continue

            if is_transaction_header(trimmed):
                flush()
                current = _OpenTransaction(index, parse_transaction_header(trimmed))
                continue

            if current is not None and indented:
                posting = self.amount_parser.parse_posting_line(line, index)
                if posting is not None:
                    current.postings.append(posting)

        flush()
        return transactions


def extract_transactions(text: str, format_context: NumberFormatContext | None = None) -> list[ParsedTransaction]:
    return TransactionExtractor(format_context).extract_transactions(text)
