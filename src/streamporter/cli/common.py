from __future__ import annotations

import argparse
import logging
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence

from rich.console import Console
from rich.table import Table

from streamporter.pipeline.run_state import RunMetadata, RunStatus

# ----------------------------
# Exit codes
# ----------------------------

EXIT_OK = 0
EXIT_CONFIG = 10
EXIT_INPUT = 20

STATUS_MARKER = "RUN_STATUS="


def dispatch_subparser_help(
    parser: argparse.ArgumentParser, path: Optional[List[str]]
) -> int:
    """`<cmd> help [sub ...]` prints the help of that subtree and exits 0."""
    if path:
        try:
            parser.parse_args([*path, "--help"])
        except SystemExit:
            pass
    else:
        parser.print_help()
    return EXIT_OK


# ----------------------------
# Run status
# ----------------------------


def finish_run(log: logging.Logger, run: RunMetadata, status: RunStatus) -> None:
    """Stamp the machine-readable status line every run log ends with."""
    run.finish(status)
    log.info(f"Runtime: {run.runtime_seconds}s")
    log.info(f"{STATUS_MARKER}{status.value}")


def infer_run_status(path: Path) -> str:
    """Status from the last RUN_STATUS= line; "running" if the run never finished."""
    try:
        lines = path.read_text(encoding="utf-8", errors="replace").splitlines()
    except OSError:
        return "unknown"

    for line in reversed(lines):
        _, marker, value = line.partition(STATUS_MARKER)
        if marker:
            return value.strip() or "unknown"
    return RunStatus.RUNNING.value


# ----------------------------
# Run log files
# ----------------------------


@dataclass(frozen=True)
class RunLogFile:
    """One file under logs/<command>/, named <command>-<run id>.log."""

    path: Path

    @property
    def name(self) -> str:
        return self.path.stem

    @property
    def command(self) -> str:
        return self.path.parent.name

    @property
    def status(self) -> str:
        return infer_run_status(self.path)

    @property
    def modified(self) -> datetime:
        return datetime.fromtimestamp(self.path.stat().st_mtime)

    @property
    def size(self) -> int:
        return self.path.stat().st_size


def list_run_logs(root: Path, command: Optional[str] = None) -> List[RunLogFile]:
    """Newest first."""
    base = root / command if command else root
    if not base.is_dir():
        return []

    found = [RunLogFile(p) for p in base.rglob("*.log") if p.is_file()]
    return sorted(found, key=lambda f: f.path.stat().st_mtime, reverse=True)


def find_run_log(
    root: Path, name: str, command: Optional[str] = None
) -> Optional[RunLogFile]:
    stem = name[: -len(".log")] if name.endswith(".log") else name
    for log_file in list_run_logs(root, command):
        if log_file.name == stem:
            return log_file
    return None


def tail_lines(path: Path, count: int) -> List[str]:
    with path.open("r", encoding="utf-8", errors="replace") as f:
        if count <= 0:
            return [line.rstrip("\n") for line in f]
        return [line.rstrip("\n") for line in deque(f, maxlen=count)]


# ----------------------------
# CLI output helpers
# ----------------------------


def print_table(headers: Sequence[str], rows: Sequence[Sequence[object]]) -> None:
    console = Console()
    if not rows:
        console.print("(no results)")
        return

    table = Table(show_edge=False, header_style="bold")
    for header in headers:
        table.add_column(header, overflow="fold")
    for row in rows:
        table.add_row(*("" if cell is None else str(cell) for cell in row))
    console.print(table)
