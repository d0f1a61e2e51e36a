"""
Scan History Package

History store, aggregate statistics and CSV export.
"""

from .store import (
    DEFAULT_HISTORY_SLOT,
    HistoryStatistics,
    ScanHistoryStore,
    compliance_rate,
)
from .export import CSV_HEADERS, export_history_csv, export_filename

__all__ = [
    "DEFAULT_HISTORY_SLOT",
    "HistoryStatistics",
    "ScanHistoryStore",
    "compliance_rate",
    "CSV_HEADERS",
    "export_history_csv",
    "export_filename",
]
