"""Runtime infrastructure for ledgerkit.

This package provides process/runtime services including:
- Logging setup via get_logger()
- Path resolution via get_paths(), ProjectPaths
- TOML configuration via load_import_options(), load_builtin_import_rules()

Usage:
    from ledgerkit.runtime import get_logger, get_paths

    logger = get_logger(__name__)
    paths = get_paths()
    print(paths.root, paths.journal)
"""

from ledgerkit.runtime.logging import (
    DEFAULT_LOG_LEVEL,
    LOG_FORMAT,
    LOG_FORMAT_DEBUG,
    configure_logging,
    get_logger,
    set_log_level,
)
from ledgerkit.runtime.paths import (
    ProjectPaths,
    get_paths,
    reset_paths,
)
from ledgerkit.runtime.import_rules import (  # noqa: I001 - must follow logging/paths
    BuiltinImportRules,
    load_builtin_import_rules,
    load_import_options,
)

__all__ = [
    # Logging
    "get_logger",
    "configure_logging",
    "set_log_level",
    "DEFAULT_LOG_LEVEL",
    "LOG_FORMAT",
    "LOG_FORMAT_DEBUG",
    # Paths
    "get_paths",
    "reset_paths",
    "ProjectPaths",
    # Rules
    "BuiltinImportRules",
    "load_builtin_import_rules",
    "load_import_options",
]
