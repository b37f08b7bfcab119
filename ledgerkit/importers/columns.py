"""Column type detection for tabular imports.

Headers are matched against English and Russian patterns first; columns
with an unrecognized header fall back to sampling their values.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence

from ledgerkit.importers.types import ColumnMapping, ColumnType, ParsedRow

HEADER_MATCH_CONFIDENCE = 0.95
KEYWORD_MATCH_CONFIDENCE = 0.7
HEADER_TRUST_THRESHOLD = 0.8
TEXT_FALLBACK_CONFIDENCE = 0.5
CONTENT_SAMPLE_ROWS = 20

_SEP = r"[\s_-]?"

DEFAULT_HEADER_PATTERNS: dict[ColumnType, tuple[str, ...]] = {
    "date": (
        r"^date$",
        rf"^transaction{_SEP}date$",
        rf"^posting{_SEP}date$",
        rf"^value{_SEP}date$",
        rf"^effective{_SEP}date$",
        rf"^book{_SEP}date$",
        rf"^trans{_SEP}date$",
        r"^дата$",
        rf"^дата{_SEP}операции$",
        rf"^дата{_SEP}транзакции$",
    ),
    "description": (
        r"^description$",
        r"^desc$",
        r"^narrative$",
        r"^details$",
        r"^particulars$",
        r"^text$",
        rf"^transaction{_SEP}description$",
        rf"^trans{_SEP}desc$",
        r"^описание$",
        r"^назначение$",
        r"^детали$",
        r"^комментарий$",
    ),
    "payee": (
        r"^payee$",
        r"^merchant$",
        r"^vendor$",
        r"^recipient$",
        r"^beneficiary$",
        r"^counterparty$",
        r"^name$",
        r"^получатель$",
        r"^плательщик$",
        r"^контрагент$",
        rf"^торговая{_SEP}точка$",
    ),
    "amount": (
        r"^amount$",
        r"^sum$",
        r"^value$",
        r"^total$",
        rf"^transaction{_SEP}amount$",
        rf"^trans{_SEP}amount$",
        r"^сумма$",
        rf"^сумма{_SEP}операции$",
        rf"^сумма{_SEP}транзакции$",
    ),
    "debit": (
        r"^debit$",
        r"^dr$",
        r"^withdrawal$",
        r"^out$",
        r"^expense$",
        rf"^debit{_SEP}amount$",
        rf"^money{_SEP}out$",
        r"^дебет$",
        r"^расход$",
        r"^списание$",
        r"^снятие$",
    ),
    "credit": (
        r"^credit$",
        r"^cr$",
        r"^deposit$",
        r"^in$",
        r"^income$",
        rf"^credit{_SEP}amount$",
        rf"^money{_SEP}in$",
        r"^кредит$",
        r"^приход$",
        r"^поступление$",
        r"^зачисление$",
    ),
    "account": (
        r"^account$",
        rf"^account{_SEP}name$",
        rf"^account{_SEP}number$",
        r"^acct$",
        r"^счет$",
        r"^счёт$",
        rf"^номер{_SEP}счета$",
    ),
    "category": (
        r"^category$",
        r"^type$",
        rf"^transaction{_SEP}type$",
        rf"^trans{_SEP}type$",
        r"^classification$",
        r"^tag$",
        r"^label$",
        r"^категория$",
        r"^тип$",
        rf"^тип{_SEP}операции$",
        r"^MCC$",
    ),
    "memo": (
        r"^memo$",
        r"^note$",
        r"^notes$",
        r"^comment$",
        r"^comments$",
        r"^remark$",
        r"^remarks$",
        r"^примечание$",
        r"^заметка$",
    ),
    "reference": (
        r"^reference$",
        r"^ref$",
        r"^id$",
        rf"^transaction{_SEP}id$",
        rf"^trans{_SEP}id$",
        rf"^check{_SEP}number$",
        rf"^check{_SEP}#$",
        rf"^chk{_SEP}#$",
        rf"^номер{_SEP}транзакции$",
        r"^референс$",
        rf"^номер{_SEP}документа$",
    ),
    "balance": (
        r"^balance$",
        rf"^running{_SEP}balance$",
        rf"^available{_SEP}balance$",
        rf"^ending{_SEP}balance$",
        r"^баланс$",
        r"^остаток$",
    ),
    "currency": (
        r"^currency$",
        r"^curr$",
        r"^ccy$",
        r"^валюта$",
    ),
}

# Substring fallbacks, checked in order after the exact patterns.
HEADER_KEYWORDS: tuple[tuple[str, ColumnType], ...] = (
    ("date", "date"),
    ("время", "date"),
    ("time", "date"),
    ("desc", "description"),
    ("narr", "description"),
    ("amount", "amount"),
    ("sum", "amount"),
    ("сумма", "amount"),
    ("debit", "debit"),
    ("дебет", "debit"),
    ("credit", "credit"),
    ("кредит", "credit"),
    ("categ", "category"),
    ("категор", "category"),
    ("type", "category"),
    ("тип", "category"),
    ("memo", "memo"),
    ("note", "memo"),
    ("ref", "reference"),
    ("balance", "balance"),
    ("баланс", "balance"),
    ("currency", "currency"),
    ("валют", "currency"),
    ("payee", "payee"),
    ("merchant", "payee"),
    ("vendor", "payee"),
)

CURRENCY_CODES = frozenset(
    {
        "USD", "EUR", "GBP", "JPY", "CNY", "RUB", "UAH", "KZT", "BYN",
        "CAD", "AUD", "CHF", "SEK", "NOK", "DKK", "PLN", "CZK", "HUF",
        "TRY", "BRL", "MXN", "INR", "KRW", "SGD", "HKD", "NZD", "ZAR",
    }
)  # fmt: skip

_CONTENT_TYPES: tuple[ColumnType, ...] = ("date", "amount", "currency", "reference")

_DATE_LIKE = (
    re.compile(r"^\d{4}[-/]\d{1,2}[-/]\d{1,2}$"),
    re.compile(r"^\d{1,2}[-/.]\d{1,2}[-/.]\d{2,4}$"),
)
_AMOUNT_LIKE = (
    re.compile(r"^-?[\d,]+\.\d{1,2}$"),
    re.compile(r"^-?[\d.]+,\d{1,2}$"),
    re.compile(r"^-?[\d\s]+[.,]\d{1,2}$"),
    re.compile(r"^-?\d+$"),
    re.compile(r"^\(-?[\d,.]+\)$"),
)
_AMOUNT_STRIP = re.compile(r"[$€£¥₽₴₸₹\s]")
_CURRENCY_CODE = re.compile(r"^[A-Z]{3}$")
_REFERENCE_LIKE = re.compile(r"^[A-Za-z0-9]{6,}$")
_TEXT_LIKE = re.compile(r"[a-zA-Zа-яА-Я]{3,}")


def is_date_like(value: str) -> bool:
    text = value.strip()
    return any(pattern.match(text) for pattern in _DATE_LIKE)


def is_amount_like(value: str) -> bool:
    cleaned = _AMOUNT_STRIP.sub("", value)
    return any(pattern.match(cleaned) for pattern in _AMOUNT_LIKE)


def is_currency_code(value: str) -> bool:
    text = value.strip().upper()
    return text in CURRENCY_CODES or bool(_CURRENCY_CODE.match(text))


def is_reference_like(value: str) -> bool:
    text = value.strip()
    return bool(_REFERENCE_LIKE.match(text)) and any(char.isdigit() for char in text)


_CONTENT_CHECKS = {
    "date": is_date_like,
    "amount": is_amount_like,
    "currency": is_currency_code,
    "reference": is_reference_like,
}


class ColumnDetector:
    def __init__(self, custom_patterns: Mapping[ColumnType, Sequence[str]] | None = None) -> None:
        merged: dict[ColumnType, list[str]] = {key: list(value) for key, value in DEFAULT_HEADER_PATTERNS.items()}
        for column_type, patterns in (custom_patterns or {}).items():
            merged.setdefault(column_type, []).extend(patterns)
        self.patterns: dict[ColumnType, tuple[re.Pattern[str], ...]] = {
            column_type: tuple(re.compile(pattern, re.IGNORECASE) for pattern in patterns)
            for column_type, patterns in merged.items()
        }

    def detect_columns(self, headers: Sequence[str], sample_rows: Sequence[ParsedRow]) -> list[ColumnMapping]:
        """Map each non-empty header to a column type, one column per type."""
        mappings: list[ColumnMapping] = []
        for index, header in enumerate(headers):
            if not header.strip():
                continue

            column_type, confidence = self.match_header(header)
            if confidence < HEADER_TRUST_THRESHOLD:
                values = [
                    row.cells[index]
                    for row in sample_rows[:CONTENT_SAMPLE_ROWS]
                    if index < len(row.cells) and row.cells[index].strip()
                ]
                content_type, content_confidence = analyze_column_content(values)
                if content_confidence > confidence:
                    column_type, confidence = content_type, content_confidence

            mappings.append(ColumnMapping(index, column_type, header, confidence))
        return resolve_conflicts(mappings)

    def match_header(self, header: str) -> tuple[ColumnType, float]:
        normalized = header.strip()
        for column_type, patterns in self.patterns.items():
            if any(pattern.search(normalized) for pattern in patterns):
                return column_type, HEADER_MATCH_CONFIDENCE

        lowered = normalized.lower()
        for keyword, column_type in HEADER_KEYWORDS:
            if keyword in lowered:
                return column_type, KEYWORD_MATCH_CONFIDENCE
        return "unknown", 0.0


def analyze_column_content(values: Sequence[str]) -> tuple[ColumnType, float]:
    """Guess a column type from sample values; ``(type, share of values matching)``."""
    if not values:
        return "unknown", 0.0

    best_type: ColumnType = "unknown"
    best_count = 0
    for column_type in _CONTENT_TYPES:
        check = _CONTENT_CHECKS[column_type]
        count = sum(1 for value in values if check(value))
        if count > best_count:
            best_type, best_count = column_type, count

    confidence = best_count / len(values)
    if best_type == "unknown":
        text_count = sum(1 for value in values if _TEXT_LIKE.search(value) and not is_amount_like(value))
        if text_count / len(values) > 0.5:
            return "description", TEXT_FALLBACK_CONFIDENCE
    return best_type, confidence


def resolve_conflicts(mappings: Sequence[ColumnMapping]) -> list[ColumnMapping]:
    """Keep the most confident column per type; the others become ``unknown``."""
    resolved: list[ColumnMapping] = []
    assigned: dict[ColumnType, ColumnMapping] = {}
    for mapping in mappings:
        if mapping.type == "unknown":
            resolved.append(mapping)
            continue
        existing = assigned.get(mapping.type)
        if existing is None or mapping.confidence > existing.confidence:
            if existing is not None:
                position = next(i for i, m in enumerate(resolved) if m.index == existing.index)
                resolved[position] = ColumnMapping(existing.index, "unknown", existing.header_name, 0.0)
            assigned[mapping.type] = mapping
            resolved.append(mapping)
        else:
            resolved.append(ColumnMapping(mapping.index, "unknown", mapping.header_name, 0.0))
    return resolved


def find_mapping(mappings: Sequence[ColumnMapping], column_type: ColumnType) -> ColumnMapping | None:
    return next((mapping for mapping in mappings if mapping.type == column_type), None)


def missing_required_columns(mappings: Sequence[ColumnMapping]) -> list[ColumnType]:
    required: list[ColumnType] = ["date"]
    if not any(mapping.type in ("debit", "credit") for mapping in mappings):
        required.append("amount")
    return [column_type for column_type in required if find_mapping(mappings, column_type) is None]


def has_required_columns(mappings: Sequence[ColumnMapping]) -> bool:
    return not missing_required_columns(mappings)
