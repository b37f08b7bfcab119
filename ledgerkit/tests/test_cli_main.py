"""Tests for the unified CLI entry point."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
from _pytest.monkeypatch import MonkeyPatch

from ledgerkit.application.balance import check as balance_check
from ledgerkit.application.imports import tabular as tabular_import
from ledgerkit.cli import main as unified_cli

BALANCED_JOURNAL = "2024-01-01 Groceries\n    expenses:food  $50\n    assets:cash\n"


@pytest.fixture(autouse=True)
def _project_home(tmp_path: Path, monkeypatch: MonkeyPatch) -> None:
    monkeypatch.setenv("LEDGERKIT_HOME", str(tmp_path))
    monkeypatch.delenv("LEDGER_FILE", raising=False)


def test_no_command_prints_help(capsys: pytest.CaptureFixture[str]) -> None:
    assert unified_cli.main([]) == 1
    assert "usage: ledgerkit" in capsys.readouterr().out


def test_check_balanced_journal(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    journal = tmp_path / "main.journal"
    journal.write_text(BALANCED_JOURNAL, encoding="utf-8")

    assert unified_cli.main(["check", str(journal)]) == 0
    assert capsys.readouterr().out.strip() == "All transactions balance"


def test_check_unbalanced_journal(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    journal = tmp_path / "main.journal"
    journal.write_text(BALANCED_JOURNAL.replace("assets:cash", "assets:cash  $-40"), encoding="utf-8")

    assert unified_cli.main(["check"]) == 1
    out = capsys.readouterr().out
    assert f"{journal.resolve()}:1: 2024-01-01 Groceries" in out
    assert out.strip().endswith("1 balance error(s) found")


def test_check_missing_journal(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert unified_cli.main(["check", str(tmp_path / "absent.journal")]) == 1
    assert "Journal file not found" in capsys.readouterr().out


def test_import_prints_entries(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    csv_path = tmp_path / "statement.csv"
    csv_path.write_text("Date,Description,Amount\n2024-01-15,STARBUCKS 123,-4.50\n", encoding="utf-8")

    assert unified_cli.main(["import", str(csv_path), "--no-history"]) == 0
    assert "2024-01-15 STARBUCKS 123" in capsys.readouterr().out


def test_import_missing_file(capsys: pytest.CaptureFixture[str]) -> None:
    assert unified_cli.main(["import", "missing.csv"]) == 1
    assert capsys.readouterr().out.strip() == "File not found: missing.csv"


def test_import_handoff_does_not_mutate_sys_argv(
    monkeypatch: MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    captured_request: tabular_import.TabularImportRequest | None = None

    def fake_run(request: tabular_import.TabularImportRequest) -> tabular_import.TabularImportResult:
        nonlocal captured_request
        captured_request = request
        return tabular_import.TabularImportResult(status="ok", output_text="", rejected_patterns=("(a+)+",))

    sentinel_argv = ["sentinel", "keep-this"]
    monkeypatch.setattr(sys, "argv", sentinel_argv)
    monkeypatch.setattr(tabular_import, "run_tabular_import", fake_run)

    exit_code = unified_cli.main(["import", "statement.csv", "--no-history", "--date-format", "DD.MM.YYYY"])

    assert exit_code == 0
    assert sys.argv == sentinel_argv
    assert captured_request == tabular_import.TabularImportRequest(
        input_file="statement.csv",
        use_history=False,
        date_format="DD.MM.YYYY",
    )
    assert "merchant pattern '(a+)+' was rejected" in capsys.readouterr().err


def test_workflow_main_entry_points(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    journal = tmp_path / "main.journal"
    journal.write_text(BALANCED_JOURNAL, encoding="utf-8")
    csv_path = tmp_path / "statement.csv"
    csv_path.write_text("Date,Description,Amount\n2024-01-15,Shop,-1.00\n", encoding="utf-8")

    assert balance_check.main([str(journal)]) == 0
    assert tabular_import.main([str(csv_path), "--no-history"]) == 0
    out = capsys.readouterr().out
    assert "All transactions balance" in out
    assert "2024-01-15 Shop" in out
