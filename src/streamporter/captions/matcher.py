"""
matcher.py

Pairs local caption files with migrated videos by normalized name.

Spotlightr ids never appear in caption file names, so the only shared
signal is the video title. Both sides go through normalize_name() and
are compared exactly (case-sensitive). When several migrated videos
normalize to the same key, the first one in ledger order wins and the
rest are shadowed. Entries whose uid was never reported cannot carry
captions and are left out of the index.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Sequence

from streamporter.errors import CaptionDirectoryNotFound
from streamporter.pipeline.ledger import LedgerEntry
from streamporter.utils import ConflictPolicy, collapse_by_key, normalize_name

CAPTION_EXTENSIONS = (".srt",)


@dataclass(frozen=True)
class CaptionMatch:
    local_file_name: str
    entry: LedgerEntry

    @property
    def remote_id(self) -> str:
        return self.entry.remote_id or ""

    @property
    def video_name(self) -> str:
        return self.entry.name


@dataclass(frozen=True)
class MatchResult:
    matched: List[CaptionMatch] = field(default_factory=list)
    unmatched: List[str] = field(default_factory=list)


def list_caption_files(
    directory: Path, extensions: Sequence[str] = CAPTION_EXTENSIONS
) -> List[str]:
    """
    Names of caption files directly inside directory, sorted.

    Raises:
        CaptionDirectoryNotFound: If directory does not exist
    """
    if not directory.is_dir():
        raise CaptionDirectoryNotFound(f"Caption folder not found: {directory}/")

    wanted = tuple(ext.lower() for ext in extensions)
    return sorted(
        p.name
        for p in directory.iterdir()
        if p.is_file() and p.name.lower().endswith(wanted)
    )


def build_name_index(
    entries: Iterable[LedgerEntry],
    conflict_policy: ConflictPolicy = ConflictPolicy.FIRST_SEEN_WINS,
) -> Dict[str, LedgerEntry]:
    usable = [e for e in entries if e.has_remote_id]
    return collapse_by_key(usable, lambda e: normalize_name(e.name), conflict_policy)


def match_captions(
    files: Sequence[str],
    successes: Sequence[LedgerEntry],
    conflict_policy: ConflictPolicy = ConflictPolicy.FIRST_SEEN_WINS,
) -> MatchResult:
    index = build_name_index(successes, conflict_policy)

    result = MatchResult()
    for name in files:
        entry = index.get(normalize_name(name))
        if entry is None:
            result.unmatched.append(name)
        else:
            result.matched.append(CaptionMatch(local_file_name=name, entry=entry))
    return result
