"""
utils.py

Shared helpers.

This module provides:
- JSON file I/O (atomic writes)
- Name normalization used for caption matching
- Duplicate-key resolution shared by the ledger and the matcher
"""

from __future__ import annotations

import json
import os
import re
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, TypeVar

T = TypeVar("T")

# ============================================================
# File I/O Helpers
# ============================================================


def read_json(path: Path) -> Any:
    """
    Read and parse a JSON file.

    Raises:
        FileNotFoundError: If file doesn't exist
        json.JSONDecodeError: If file is not valid JSON
    """
    if not path.exists():
        raise FileNotFoundError(f"JSON file not found: {path}")

    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def write_json(
    path: Path, data: Any, atomic: bool = True, sort_keys: bool = False
) -> None:
    """
    Write data to a JSON file.

    With atomic=True the payload goes to a sibling temp file which is
    flushed to disk and renamed over the target, so readers only ever
    see the previous or the new content.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    if not atomic:
        with path.open("w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False, sort_keys=sort_keys)
        return

    tmp_path = path.with_suffix(path.suffix + ".tmp")
    try:
        with tmp_path.open("w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False, sort_keys=sort_keys)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink()


# ============================================================
# Normalization
# ============================================================

KNOWN_EXTENSIONS = ("mp4", "m4v", "mov", "mkv", "webm", "srt", "vtt")

_EXTENSION_RE = re.compile(
    r"\.(?:" + "|".join(KNOWN_EXTENSIONS) + r")$", re.IGNORECASE
)
_WHITESPACE_RE = re.compile(r"\s+")


def normalize_name(name: str) -> str:
    """
    Convert a video or caption file name into a matching key.

    Comparison stays case-sensitive; only formatting noise is removed.

    Examples:
        "My Video_.mp4"        -> "My Video"
        "  Intro   Part 1.srt" -> "Intro Part 1"
        "Lesson 3..SRT"        -> "Lesson 3"
    """
    key = name
    while True:
        previous = key
        key = _EXTENSION_RE.sub("", key)
        key = _WHITESPACE_RE.sub(" ", key).strip()
        key = key.rstrip("_.").strip()
        if key == previous:
            return key


# ============================================================
# Duplicate keys
# ============================================================


class ConflictPolicy(str, Enum):
    """How to resolve several items sharing one key."""

    FIRST_SEEN_WINS = "first_seen_wins"
    LAST_WRITE_WINS = "last_write_wins"


def collapse_by_key(
    items: Iterable[T],
    key: Callable[[T], str],
    policy: ConflictPolicy,
) -> Dict[str, T]:
    """
    Index items by key, resolving duplicates with the given policy.

    The resulting order is the order in which each key was first seen,
    whichever item ends up winning.
    """
    out: Dict[str, T] = {}
    for item in items:
        k = key(item)
        if k in out and policy is ConflictPolicy.FIRST_SEEN_WINS:
            continue
        out[k] = item
    return out
