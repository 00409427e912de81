from __future__ import annotations

from pathlib import Path
from typing import List


def enforce_retention(log_dir: Path, keep: int, pattern: str = "*.log") -> List[Path]:
    """
    Delete all but the newest `keep` run logs in log_dir.

    keep <= 0 disables pruning. Returns the files actually removed.
    """
    if keep <= 0 or not log_dir.is_dir():
        return []

    logs = sorted(
        (p for p in log_dir.glob(pattern) if p.is_file()),
        key=lambda p: p.stat().st_mtime,
        reverse=True,
    )

    removed: List[Path] = []
    for old in logs[keep:]:
        try:
            old.unlink()
        except OSError:
            continue
        removed.append(old)
    return removed
