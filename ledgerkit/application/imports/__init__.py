"""Statement import workflows."""

from ledgerkit.application.imports.tabular import TabularImportRequest, TabularImportResult, run_tabular_import

__all__ = [
    "TabularImportRequest",
    "TabularImportResult",
    "run_tabular_import",
]
