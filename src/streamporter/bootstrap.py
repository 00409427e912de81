from __future__ import annotations

"""bootstrap.py

Process bootstrap for Streamporter.

This module is intentionally tiny and side-effectful.

Rules:
1) Only bootstrap is allowed to *mutate* os.environ for shared run context.
2) Call bootstrap_base_env() exactly once at the true entrypoint.
3) Call bootstrap_run_context() after argparse parsing, before init_logging().

Core components never read os.environ; CLI handlers resolve Settings once
and pass plain values down.
"""

import os
from datetime import datetime
from pathlib import Path

from streamporter.env import load_env_file


def bootstrap_base_env(env_file: str | Path = ".env") -> None:
    load_env_file(Path(env_file))

    os.environ.setdefault(
        "STREAMPORTER_RUN_ID",
        datetime.now().strftime("%Y-%m-%d_%H-%M-%S"),
    )


def bootstrap_run_context(
    *,
    command: str,
    verbose: bool | None = None,
    quiet: bool | None = None,
) -> None:
    """Establish run-scoped context used by logging."""

    os.environ["STREAMPORTER_COMMAND"] = command

    if verbose is not None:
        os.environ["STREAMPORTER_VERBOSE"] = "1" if verbose else "0"
    if quiet is not None:
        os.environ["STREAMPORTER_QUIET"] = "1" if quiet else "0"


def current_run_id() -> str:
    return os.environ.get("STREAMPORTER_RUN_ID") or datetime.now().strftime(
        "%Y-%m-%d_%H-%M-%S"
    )
