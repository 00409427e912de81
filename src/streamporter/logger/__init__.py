from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Optional

from streamporter.env import get_logging_env, module_logs_dir
from .console import build_console_handler
from .file import build_file_handler, repoint_file_handler
from .retention import enforce_retention
from .state import STATE


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def _level_to_int(level: str | int) -> int:
    if isinstance(level, int):
        return level
    lvl = logging.getLevelName(str(level).upper())
    return lvl if isinstance(lvl, int) else logging.INFO


def _ensure_run_id() -> str:
    run_id = os.environ.get("STREAMPORTER_RUN_ID")
    if not run_id:
        run_id = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
        os.environ["STREAMPORTER_RUN_ID"] = run_id
    return run_id


def _target_path(command: str) -> Path:
    run_id = _ensure_run_id()
    return module_logs_dir(command) / f"{command}-{run_id}.log"


def _squelch_noisy_loggers() -> None:
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)


def init_logging(command: Optional[str] = None) -> Path:
    """
    Initialize logging for the entire process.

    - Handlers are attached ONLY to the root logger.
    - Named loggers inherit via propagation.
    - Safe to call multiple times; file handler is repointed, not stacked.

    Returns the path of the run log file.
    """
    env = get_logging_env()
    _squelch_noisy_loggers()

    root = logging.getLogger()
    command = command or os.environ.get("STREAMPORTER_COMMAND") or "streamporter"
    logfile = _target_path(command)

    # Base level from env, but verbose forces DEBUG everywhere.
    root_level = logging.DEBUG if env.verbose else _level_to_int(env.log_level)

    if STATE.initialized and STATE.log_file_path == logfile:
        root.setLevel(root_level)
        return logfile

    pruned = enforce_retention(logfile.parent, int(env.log_retention))

    existing_file: logging.FileHandler | None = None
    for h in list(root.handlers):
        if isinstance(h, logging.FileHandler):
            existing_file = h
            break

    root.handlers.clear()
    root.setLevel(root_level)

    if existing_file is not None:
        repoint_file_handler(existing_file, logfile)
        root.addHandler(existing_file)
    else:
        root.addHandler(build_file_handler(logfile))

    if not env.quiet:
        root.addHandler(build_console_handler(root_level))

    STATE.initialized = True
    STATE.command = command
    STATE.run_id = os.environ.get("STREAMPORTER_RUN_ID")
    STATE.log_file_path = logfile

    if pruned:
        get_logger("streamporter.logger").debug(
            f"Pruned {len(pruned)} old {command} logs (keeping {env.log_retention})"
        )
    return logfile


__all__ = ["get_logger", "init_logging"]
