from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional
import time


class RunStatus(str, Enum):
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CONFIG_ERROR = "config_error"


@dataclass
class MigrationSummary:
    """Tally of one migration run. Every manifest record lands in one bucket."""

    total: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped_done: int = 0
    skipped_ineligible: int = 0
    planned: int = 0

    @property
    def eligible(self) -> int:
        return self.total - self.skipped_ineligible

    def as_dict(self) -> dict:
        return {
            "succeeded": self.succeeded,
            "skipped_done": self.skipped_done,
            "skipped_ineligible": self.skipped_ineligible,
            "failed": self.failed,
            "planned": self.planned,
            "total": self.total,
        }


@dataclass
class CaptionSummary:
    total_files: int = 0
    succeeded: int = 0
    failed: int = 0
    planned: int = 0
    unmatched: int = 0


@dataclass
class RunMetadata:
    run_id: str
    command: str
    started_at: float = field(default_factory=time.time)
    finished_at: Optional[float] = None
    status: RunStatus = RunStatus.RUNNING

    def finish(self, status: RunStatus) -> None:
        self.status = status
        self.finished_at = time.time()

    @property
    def runtime_seconds(self) -> float:
        end = self.finished_at or time.time()
        return round(end - self.started_at, 2)
