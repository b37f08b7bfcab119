"""Runtime loaders for import options and builtin import rules."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

from ledgerkit.importers.types import (
    DATE_FORMATS,
    DECIMAL_SEPARATOR_HINTS,
    DEFAULT_IMPORT_OPTIONS,
    BuiltinImportRules,
    ImportOptions,
)
from ledgerkit.runtime.logging import get_logger
from ledgerkit.runtime.paths import get_paths

logger = get_logger(__name__)


def _load_toml(path: Path) -> dict[str, Any]:
    try:
        import tomllib
    except ImportError:
        import tomli as tomllib  # type: ignore[no-redef]

    with open(path, "rb") as f:
        data = tomllib.load(f)
    return data if isinstance(data, dict) else {}


def _pattern_pairs(raw: Any, source: Path) -> list[tuple[str, str]]:
    """Read ``[[merchant_patterns]]`` tables, keeping file order."""
    pairs: list[tuple[str, str]] = []
    if raw is None:
        return pairs
    if isinstance(raw, dict):
        raw = [{"pattern": key, "account": value} for key, value in raw.items()]
    if not isinstance(raw, list):
        raise ValueError(f"merchant_patterns must be an array of tables in {source}")
    for rule in raw:
        if not isinstance(rule, dict):
            continue
        pattern = str(rule.get("pattern", "")).strip()
        account = str(rule.get("account", "")).strip()
        if pattern and account:
            pairs.append((pattern, account))
    return pairs


def _category_pairs(raw: Any, source: Path) -> list[tuple[str, str]]:
    if raw is None:
        return []
    if not isinstance(raw, dict):
        raise ValueError(f"category_mapping must be a table in {source}")
    pairs: list[tuple[str, str]] = []
    for category, account in raw.items():
        category_text = str(category).strip()
        account_text = str(account).strip()
        if category_text and account_text:
            pairs.append((category_text.lower(), account_text))
    return pairs


@lru_cache(maxsize=4)
def load_builtin_import_rules(rules_path: str | None = None) -> BuiltinImportRules:
    """
    Load the builtin category mapping and merchant patterns.

    Args:
        rules_path: Optional TOML path override. If None, uses the packaged rules.

    Returns:
        BuiltinImportRules with entries in file order.
    """
    path = Path(rules_path) if rules_path is not None else get_paths().default_import_rules
    if not path.exists():
        raise FileNotFoundError(f"Builtin import rules file not found: {path}")

    config = _load_toml(path)
    rules = BuiltinImportRules(
        category_mapping=tuple(_category_pairs(config.get("category_mapping"), path)),
        merchant_patterns=tuple(_pattern_pairs(config.get("merchant_patterns"), path)),
    )
    logger.debug(
        "Loaded %d builtin categories and %d builtin merchant patterns from %s",
        len(rules.category_mapping),
        len(rules.merchant_patterns),
        path,
    )
    return rules


@lru_cache(maxsize=4)
def load_import_options(config_path: str | None = None) -> ImportOptions:
    """
    Load import options from import_rules.toml.

    A missing file yields the default options. Example file::

        [import]
        date_format = "DD.MM.YYYY"
        default_balancing_account = "assets:bank:checking"
        decimal_separator_hint = "comma"

        [[merchant_patterns]]
        pattern = "ACME CORP|ACMECORP"
        account = "expenses:office"

        [category_mapping]
        "home improvement" = "expenses:home"

    Args:
        config_path: Optional TOML path override. If None, uses the project path.

    Raises:
        ValueError: If an option has an unsupported value.
    """
    path = Path(config_path) if config_path is not None else get_paths().import_rules
    if not path.exists():
        logger.debug("Import rules file not found at %s, using defaults", path)
        return DEFAULT_IMPORT_OPTIONS

    config = _load_toml(path)
    section = config.get("import", {})
    if not isinstance(section, dict):
        raise ValueError(f"[import] must be a table in {path}")

    date_format = section.get("date_format", DEFAULT_IMPORT_OPTIONS.date_format)
    if date_format not in DATE_FORMATS:
        raise ValueError(f"Unsupported date_format {date_format!r} in {path}; expected one of {', '.join(DATE_FORMATS)}")

    hint = section.get("decimal_separator_hint", DEFAULT_IMPORT_OPTIONS.decimal_separator_hint)
    if hint not in DECIMAL_SEPARATOR_HINTS:
        raise ValueError(
            f"Unsupported decimal_separator_hint {hint!r} in {path}; "
            f"expected one of {', '.join(DECIMAL_SEPARATOR_HINTS)}"
        )

    return ImportOptions(
        date_format=date_format,
        default_debit_account=str(section.get("default_debit_account", DEFAULT_IMPORT_OPTIONS.default_debit_account)),
        default_credit_account=str(
            section.get("default_credit_account", DEFAULT_IMPORT_OPTIONS.default_credit_account)
        ),
        default_balancing_account=str(
            section.get("default_balancing_account", DEFAULT_IMPORT_OPTIONS.default_balancing_account)
        ),
        invert_amounts=bool(section.get("invert_amounts", DEFAULT_IMPORT_OPTIONS.invert_amounts)),
        use_journal_history=bool(section.get("use_journal_history", DEFAULT_IMPORT_OPTIONS.use_journal_history)),
        merchant_patterns=dict(_pattern_pairs(config.get("merchant_patterns"), path)),
        category_mapping=dict(_category_pairs(config.get("category_mapping"), path)),
        decimal_separator_hint=hint,
    )
