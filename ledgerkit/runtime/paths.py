"""Centralized path management for ledgerkit.

This module provides a single source of truth for the configuration and
journal locations used by the CLI and the import workflow.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

# Journal names probed under the project root, in order, when LEDGER_FILE is unset.
DEFAULT_JOURNAL_NAMES = ("main.journal", "main.beancount", "main.ledger")


def _get_project_root() -> Path:
    """Determine the project root directory."""
    env_home = os.environ.get("LEDGERKIT_HOME", "").strip()
    if env_home:
        return Path(env_home).expanduser()
    return Path.cwd()


@dataclass
class ProjectPaths:
    """Container for all project-related paths.

    All paths are computed relative to the project root, which is taken from
    LEDGERKIT_HOME when set and the current working directory otherwise.
    """

    root: Path = field(default_factory=_get_project_root)

    def __post_init__(self) -> None:
        self.root = self.root.resolve()

    # --- Configuration paths ---
    @property
    def config(self) -> Path:
        """Configuration directory (config/)."""
        return self.root / "config"

    @property
    def import_rules(self) -> Path:
        """Import options, merchant patterns and category mapping TOML file."""
        return self.config / "import_rules.toml"

    @property
    def default_import_rules(self) -> Path:
        """Packaged builtin category mapping and merchant patterns."""
        return Path(__file__).resolve().parents[1] / "importers" / "rules" / "default_import_rules.toml"

    # --- Journal paths ---
    @property
    def journal(self) -> Path:
        """Main journal file.

        Resolution order: LEDGER_FILE environment variable, then the first
        existing file among DEFAULT_JOURNAL_NAMES under the root. When none
        exists the first default name is returned so callers get a stable path
        for their "not found" message.
        """
        env_file = os.environ.get("LEDGER_FILE", "").strip()
        if env_file:
            return Path(env_file).expanduser()
        for name in DEFAULT_JOURNAL_NAMES:
            candidate = self.root / name
            if candidate.exists():
                return candidate
        return self.root / DEFAULT_JOURNAL_NAMES[0]


_paths: ProjectPaths | None = None


def get_paths() -> ProjectPaths:
    """Get the singleton ProjectPaths instance.

    Returns:
        The global ProjectPaths instance.
    """
    global _paths
    if _paths is None:
        _paths = ProjectPaths()
    return _paths


def reset_paths() -> None:
    """Drop the singleton so the next get_paths() re-reads the environment."""
    global _paths
    _paths = None
