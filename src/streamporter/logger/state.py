from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass
class LoggingState:
    """What init_logging() last configured. One run per process."""

    initialized: bool = False
    command: Optional[str] = None
    run_id: Optional[str] = None
    log_file_path: Optional[Path] = None


STATE = LoggingState()


def reset_state() -> None:
    STATE.initialized = False
    STATE.command = None
    STATE.run_id = None
    STATE.log_file_path = None
