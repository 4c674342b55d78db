"""JSON export functionality.

Writes library snapshots to the JSON interchange format and reads them back.
Field names follow the entity aliases (``authorID``, ``loanDate``, ...) and
dates are written as ``YYYY-MM-DD``.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from ..config import get_config
from ..exceptions import SnapshotDecodeError
from ..model.snapshot import LibraryData, reassemble

logger = logging.getLogger(__name__)

EXPORT_VERSION = "1.0"


@dataclass
class JSONExportResult:
    """Result of a JSON export operation."""

    success: bool
    file_path: Optional[Path] = None
    counts: dict[str, int] = field(default_factory=dict)
    error: Optional[str] = None


def snapshot_to_json(data: LibraryData, indent: Optional[int] = 2) -> str:
    """Serialize a snapshot to a JSON document.

    Args:
        data: Snapshot to serialize
        indent: Indentation; ``None`` or 0 for compact output

    Returns:
        JSON text
    """
    export_data = {
        "version": EXPORT_VERSION,
        "exported_at": datetime.now().isoformat(),
        "library": data.to_dict(),
    }
    return json.dumps(export_data, indent=indent or None, ensure_ascii=False)


def load_snapshot_json(text: str, assemble: bool = True) -> LibraryData:
    """Parse a JSON document into a snapshot.

    Accepts either an export document (with a ``library`` key) or a bare
    library object.

    Args:
        text: JSON text
        assemble: Rebuild derived fields from the foreign keys. Pass False to
            get the records exactly as written, e.g. for integrity checking.

    Raises:
        SnapshotDecodeError: If the text is not valid JSON or a record is invalid
        ReferentialIntegrityError: If ids are duplicated or references dangle
            (only when assembling)
    """
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise SnapshotDecodeError(f"Invalid JSON: {e}") from e

    library = _extract_library(payload)

    try:
        data = LibraryData.from_dict(library)
    except ValidationError as e:
        raise SnapshotDecodeError(f"Invalid library data: {e}") from e

    if not assemble:
        return data
    return reassemble(data)


def _extract_library(payload: Any) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise SnapshotDecodeError("Expected a JSON object at the top level")

    if "library" in payload:
        version = payload.get("version")
        if version != EXPORT_VERSION:
            logger.warning("Unexpected export version %r, reading anyway", version)
        library = payload["library"]
    elif "authors" in payload or "books" in payload:
        library = payload
    else:
        raise SnapshotDecodeError("Invalid export: missing library data")

    if not isinstance(library, dict):
        raise SnapshotDecodeError("Invalid export: library must be an object")
    return library


class JSONExporter:
    """Exports snapshots to JSON files and loads them back."""

    def __init__(self, indent: Optional[int] = None):
        """Initialize exporter.

        Args:
            indent: JSON indentation (defaults to configuration)
        """
        self.indent = indent if indent is not None else get_config().json_indent

    def export(self, data: LibraryData, output_path: Path) -> JSONExportResult:
        """Export a snapshot to a JSON file.

        Args:
            data: Snapshot to export
            output_path: Path for output file

        Returns:
            JSONExportResult with success status
        """
        try:
            text = snapshot_to_json(data, indent=self.indent)
            with open(output_path, "w", encoding="utf-8") as f:
                f.write(text)
        except OSError as e:
            logger.error("Export to %s failed: %s", output_path, e)
            return JSONExportResult(success=False, error=str(e))

        logger.info("Exported snapshot to %s", output_path)
        return JSONExportResult(
            success=True,
            file_path=output_path,
            counts=data.counts,
        )

    def load(self, input_path: Path, assemble: bool = True) -> LibraryData:
        """Load a snapshot from a JSON file.

        Args:
            input_path: File to read
            assemble: Rebuild derived fields (see ``load_snapshot_json``)

        Raises:
            SnapshotDecodeError: If the file cannot be read or decoded
            ReferentialIntegrityError: If references do not resolve
        """
        try:
            with open(input_path, encoding="utf-8") as f:
                text = f.read()
        except OSError as e:
            raise SnapshotDecodeError(f"Cannot read {input_path}: {e}") from e

        data = load_snapshot_json(text, assemble=assemble)
        logger.info("Loaded snapshot from %s: %s", input_path, data.counts)
        return data
