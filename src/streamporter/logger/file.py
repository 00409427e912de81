from __future__ import annotations

import logging
import os
from pathlib import Path

# Millisecond timestamps line up with the ledger's "timestamp" field.
FILE_FORMAT = "%(asctime)s.%(msecs)03d | %(levelname)-7s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _formatter() -> logging.Formatter:
    return logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT)


def build_file_handler(logfile: Path) -> logging.FileHandler:
    """Append-mode handler for one run log; records every level the root lets through."""
    logfile.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(logfile, mode="a", encoding="utf-8")
    handler.setLevel(logging.NOTSET)
    handler.setFormatter(_formatter())
    return handler


def repoint_file_handler(handler: logging.FileHandler, new_logfile: Path) -> None:
    """Switch an existing handler to another run log, keeping its formatter."""
    target = os.fspath(new_logfile)
    if handler.baseFilename == target:
        return

    new_logfile.parent.mkdir(parents=True, exist_ok=True)

    handler.acquire()
    try:
        handler.close()
        handler.baseFilename = target
        handler.stream = handler._open()
    finally:
        handler.release()
