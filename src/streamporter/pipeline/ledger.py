"""
ledger.py

Durable record of per-video migration outcomes (migration-results.json).

Responsibilities:
- Load previous results so a re-run skips videos already migrated
- Upsert one entry per Spotlightr id as each upload resolves
- Rewrite the whole file atomically after every change

Does NOT:
- Track caption uploads
- Lock the file (two concurrent runs on one ledger are unsupported)

On-disk format is a JSON array keyed with the camelCase field names
(spotlightrId, cloudflareUid, ...) that existing results files use.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from streamporter.errors import CorruptLedger, LedgerUnavailable
from streamporter.logger import get_logger
from streamporter.pipeline.manifest import SourceRecord
from streamporter.utils import ConflictPolicy, collapse_by_key, read_json, write_json

logger = get_logger(__name__)

# Stored when the host accepted a video without reporting its uid.
UNKNOWN_REMOTE_ID = "unknown"


def utc_now_iso() -> str:
    return (
        datetime.now(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


class Outcome(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class LedgerEntry:
    external_id: str
    name: str
    group_id: str
    source_url: str
    outcome: Outcome
    completed_at: str
    remote_id: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.outcome is Outcome.SUCCESS

    @property
    def has_remote_id(self) -> bool:
        """True when captions can be attached: a real uid, not the placeholder."""
        return self.succeeded and self.remote_id not in (None, "", UNKNOWN_REMOTE_ID)

    @classmethod
    def success(
        cls, record: SourceRecord, remote_id: str, completed_at: Optional[str] = None
    ) -> LedgerEntry:
        return cls(
            external_id=record.external_id,
            name=record.name,
            group_id=record.group_id,
            source_url=record.source_url,
            outcome=Outcome.SUCCESS,
            completed_at=completed_at or utc_now_iso(),
            remote_id=remote_id,
        )

    @classmethod
    def failure(
        cls, record: SourceRecord, message: str, completed_at: Optional[str] = None
    ) -> LedgerEntry:
        return cls(
            external_id=record.external_id,
            name=record.name,
            group_id=record.group_id,
            source_url=record.source_url,
            outcome=Outcome.FAILURE,
            completed_at=completed_at or utc_now_iso(),
            error_message=message,
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "spotlightrId": self.external_id,
            "name": self.name,
            "projectId": self.group_id,
            "sourceUrl": self.source_url,
        }
        if self.succeeded:
            data["cloudflareUid"] = self.remote_id
            data["success"] = True
        else:
            data["success"] = False
            data["error"] = self.error_message
        data["timestamp"] = self.completed_at
        return data

    @classmethod
    def from_dict(cls, data: Any, position: int = 0) -> LedgerEntry:
        if not isinstance(data, dict):
            raise CorruptLedger(f"Ledger entry #{position} is not an object")

        external_id = data.get("spotlightrId")
        if isinstance(external_id, int):
            external_id = str(external_id)
        if not isinstance(external_id, str) or not external_id:
            raise CorruptLedger(f"Ledger entry #{position} has no spotlightrId")

        success = data.get("success")
        if not isinstance(success, bool):
            raise CorruptLedger(
                f"Ledger entry #{position} ({external_id}) has no boolean 'success'"
            )

        def _text(key: str) -> str:
            value = data.get(key)
            return "" if value is None else str(value)

        return cls(
            external_id=external_id,
            name=_text("name"),
            group_id=_text("projectId"),
            source_url=_text("sourceUrl"),
            outcome=Outcome.SUCCESS if success else Outcome.FAILURE,
            completed_at=_text("timestamp"),
            remote_id=(
                (_text("cloudflareUid") or UNKNOWN_REMOTE_ID) if success else None
            ),
            error_message=None if success else (_text("error") or "Unknown error"),
        )


class Ledger:
    """
    In-memory view of migration results, persisted after every mutation.

    Entries are keyed by Spotlightr id. Recording an id that already
    exists replaces the old entry at its original position, so a retried
    failure never leaves a duplicate behind.
    """

    def __init__(
        self,
        path: Path,
        conflict_policy: ConflictPolicy = ConflictPolicy.LAST_WRITE_WINS,
    ):
        self.path = Path(path)
        self.conflict_policy = conflict_policy
        self._entries: Dict[str, LedgerEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    # ------------------------------------------------------------------
    # Load / persist
    # ------------------------------------------------------------------

    def load(self) -> List[LedgerEntry]:
        """
        Read persisted results. A missing file is an empty ledger.

        Raises:
            CorruptLedger: If the file is not a JSON array of entries
            LedgerUnavailable: If the file exists but cannot be read
        """
        if not self.path.exists():
            self._entries = {}
            return []

        try:
            data = read_json(self.path)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise CorruptLedger(f"Cannot parse {self.path}: {e}") from e
        except OSError as e:
            raise LedgerUnavailable(f"Cannot read {self.path}: {e}") from e

        if not isinstance(data, list):
            raise CorruptLedger(f"{self.path} does not contain a JSON array")

        entries = [LedgerEntry.from_dict(item, i) for i, item in enumerate(data)]
        self._entries = collapse_by_key(
            entries, lambda e: e.external_id, self.conflict_policy
        )

        duplicates = len(entries) - len(self._entries)
        if duplicates:
            logger.debug(
                f"Collapsed {duplicates} duplicate ledger entries "
                f"({self.conflict_policy.value})"
            )
        return self.entries()

    def _write(self, entries: Dict[str, LedgerEntry]) -> None:
        try:
            write_json(self.path, [e.to_dict() for e in entries.values()])
        except OSError as e:
            raise LedgerUnavailable(f"Cannot write {self.path}: {e}") from e

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, external_id: str) -> Optional[LedgerEntry]:
        return self._entries.get(external_id)

    def is_completed(self, external_id: str) -> bool:
        entry = self.get(external_id)
        return entry is not None and entry.succeeded

    def entries(self) -> List[LedgerEntry]:
        return list(self._entries.values())

    def successful_entries(self) -> List[LedgerEntry]:
        return [e for e in self._entries.values() if e.succeeded]

    def failed_entries(self) -> List[LedgerEntry]:
        return [e for e in self._entries.values() if not e.succeeded]

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def record(self, entry: LedgerEntry) -> None:
        """
        Upsert the entry and durably rewrite the ledger file.

        The in-memory view only changes once the file has been replaced,
        so a failed write leaves both at the previous state.

        Raises:
            LedgerUnavailable: If the file cannot be written
        """
        entries = dict(self._entries)
        entries[entry.external_id] = entry
        self._write(entries)
        self._entries = entries
