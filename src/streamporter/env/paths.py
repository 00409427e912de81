from __future__ import annotations

import os
from pathlib import Path

# ---------------------------------------------------------------------
# Base directories (override-friendly)
# ---------------------------------------------------------------------


def _resolve_dir(env_var: str, default: Path) -> Path:
    """
    Resolve a directory path from an environment variable or default.
    Ensures the directory exists.
    """
    raw = os.environ.get(env_var)
    path = Path(raw).expanduser().resolve() if raw else default.resolve()
    path.mkdir(parents=True, exist_ok=True)
    return path


def logs_dir() -> Path:
    """Root directory for run logs (relative to the working directory)."""
    return _resolve_dir("STREAMPORTER_LOGS_DIR", Path.cwd() / "logs")


# ---------------------------------------------------------------------
# Log layout helpers
# ---------------------------------------------------------------------


def module_logs_dir(command: str) -> Path:
    """
    Log directory for a CLI command (e.g. migrate, captions).
    """
    path = logs_dir() / command
    path.mkdir(parents=True, exist_ok=True)
    return path
