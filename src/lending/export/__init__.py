"""Export functionality for library snapshots."""

from .json_export import (
    EXPORT_VERSION,
    JSONExporter,
    JSONExportResult,
    load_snapshot_json,
    snapshot_to_json,
)

__all__ = [
    "EXPORT_VERSION",
    "JSONExporter",
    "JSONExportResult",
    "load_snapshot_json",
    "snapshot_to_json",
]
