"""Tests for runtime path resolution and logger naming."""

from __future__ import annotations

import logging
from pathlib import Path

from _pytest.monkeypatch import MonkeyPatch

from ledgerkit.runtime import ProjectPaths, get_logger, get_paths, reset_paths, set_log_level


def test_paths_under_root(tmp_path: Path) -> None:
    paths = ProjectPaths(root=tmp_path)

    assert paths.root == tmp_path.resolve()
    assert paths.config == tmp_path.resolve() / "config"
    assert paths.import_rules == tmp_path.resolve() / "config" / "import_rules.toml"
    assert paths.default_import_rules.name == "default_import_rules.toml"
    assert paths.default_import_rules.exists()


def test_journal_probing(tmp_path: Path, monkeypatch: MonkeyPatch) -> None:
    monkeypatch.delenv("LEDGER_FILE", raising=False)
    paths = ProjectPaths(root=tmp_path)

    assert paths.journal == tmp_path.resolve() / "main.journal"

    (tmp_path / "main.beancount").write_text("", encoding="utf-8")
    assert paths.journal == tmp_path.resolve() / "main.beancount"


def test_ledger_file_env_wins(tmp_path: Path, monkeypatch: MonkeyPatch) -> None:
    (tmp_path / "main.journal").write_text("", encoding="utf-8")
    monkeypatch.setenv("LEDGER_FILE", str(tmp_path / "other.ledger"))

    assert ProjectPaths(root=tmp_path).journal == tmp_path / "other.ledger"


def test_singleton_reads_ledgerkit_home(tmp_path: Path, monkeypatch: MonkeyPatch) -> None:
    monkeypatch.setenv("LEDGERKIT_HOME", str(tmp_path))

    paths = get_paths()

    assert paths.root == tmp_path.resolve()
    assert get_paths() is paths
    reset_paths()
    assert get_paths() is not paths


def test_logger_names_live_under_namespace() -> None:
    assert get_logger("ledgerkit.balance.cache").name == "ledgerkit.balance.cache"
    assert get_logger("ledgerkit").name == "ledgerkit"
    assert get_logger("scratch").name == "ledgerkit.scratch"


def test_set_log_level() -> None:
    root = logging.getLogger("ledgerkit")
    previous = root.level
    try:
        set_log_level(logging.DEBUG)
        assert root.level == logging.DEBUG
    finally:
        set_log_level(previous)
