from __future__ import annotations

import logging
import sys

from rich.console import Console
from rich.logging import RichHandler


def build_console_handler(level: int = logging.INFO) -> logging.Handler:
    # Bound to the current sys.stdout so re-initialising picks up redirection.
    console = Console(file=sys.stdout, soft_wrap=True)

    handler = RichHandler(
        console=console,
        level=level,
        show_level=True,
        show_time=False,
        show_path=False,
        # Progress lines carry literal brackets ("[3/40]", "[OK]").
        markup=False,
    )

    # RichHandler renders the level column; the formatter must not repeat it.
    handler.setFormatter(logging.Formatter("%(message)s"))
    return handler
