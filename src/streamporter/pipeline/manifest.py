"""
manifest.py

Reads a Spotlightr "all videos" CSV export into SourceRecords.

The export is produced by a spreadsheet tool and is not always tidy:
rows may be ragged, quoted fields may contain newlines and the file
may start with a UTF-8 BOM. Blank rows are dropped.
"""

from __future__ import annotations

import csv
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from streamporter.errors import ManifestNotFound, ManifestUnreadable
from streamporter.logger import get_logger

logger = get_logger(__name__)

# Spotlightr writes this instead of a URL when the original upload was removed.
UNAVAILABLE_SENTINEL = "DELETED"


@dataclass(frozen=True)
class ManifestColumns:
    """Header names of the migratable fields in the export."""

    name: str = "video"
    source_url: str = "original file URL"
    group_id: str = "project"
    external_id: str = "id"
    auxiliary_url: str = "URL"


@dataclass(frozen=True)
class SourceRecord:
    external_id: str
    name: str
    group_id: str
    source_url: str
    auxiliary_url: str = ""

    @property
    def is_available(self) -> bool:
        return bool(self.source_url) and self.source_url != UNAVAILABLE_SENTINEL

    @classmethod
    def from_row(
        cls, row: Mapping[str, Optional[str]], columns: ManifestColumns
    ) -> SourceRecord:
        def _get(key: str) -> str:
            return (row.get(key) or "").strip()

        return cls(
            external_id=_get(columns.external_id),
            name=_get(columns.name),
            group_id=_get(columns.group_id),
            source_url=_get(columns.source_url),
            auxiliary_url=_get(columns.auxiliary_url),
        )


def read_manifest_rows(path: Path) -> List[Dict[str, str]]:
    """
    Parse the CSV into row mappings keyed by header name.

    Raises:
        ManifestNotFound: If the file does not exist
        ManifestUnreadable: If the file cannot be read or parsed
    """
    if not path.exists():
        raise ManifestNotFound(f"CSV file not found: {path}")

    rows: List[Dict[str, str]] = []
    try:
        with path.open("r", encoding="utf-8-sig", newline="") as f:
            reader = csv.DictReader(f)
            if not reader.fieldnames:
                raise ManifestUnreadable(f"CSV file has no header row: {path}")

            for raw in reader:
                # Surplus cells of ragged rows land under the None key.
                row = {k: (v or "") for k, v in raw.items() if k is not None}
                if not any(v.strip() for v in row.values()):
                    continue
                rows.append(row)
    except (OSError, UnicodeDecodeError, csv.Error) as e:
        raise ManifestUnreadable(f"Cannot read CSV file {path}: {e}") from e

    return rows


def load_manifest(
    path: Path, columns: ManifestColumns = ManifestColumns()
) -> List[SourceRecord]:
    rows = read_manifest_rows(path)

    missing = [
        col
        for col in (columns.external_id, columns.name, columns.source_url)
        if rows and col not in rows[0]
    ]
    if missing:
        logger.warning(f"CSV is missing expected columns: {', '.join(missing)}")

    return [SourceRecord.from_row(row, columns) for row in rows]
