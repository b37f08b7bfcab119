"""Shared pytest fixtures for ledgerkit tests."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from ledgerkit.importers.types import BuiltinImportRules
from ledgerkit.ledger_reader import reset_ledger_reader
from ledgerkit.runtime import load_builtin_import_rules, load_import_options, reset_paths


@pytest.fixture(autouse=True)
def _fresh_runtime_state() -> Iterator[None]:
    """Drop cached paths, loaders and the reader singleton around every test."""
    reset_paths()
    reset_ledger_reader()
    load_import_options.cache_clear()
    load_builtin_import_rules.cache_clear()
    yield
    reset_paths()
    reset_ledger_reader()
    load_import_options.cache_clear()
    load_builtin_import_rules.cache_clear()


@pytest.fixture
def builtin_rules() -> BuiltinImportRules:
    return load_builtin_import_rules()
