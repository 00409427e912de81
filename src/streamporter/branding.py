"""
Console decoration shared by the pipeline commands.

Everything here returns plain strings that go through the logger, so the
same banners and symbols land in the console and in the run log file.
"""

from __future__ import annotations

BANNER_WIDTH = 58


def HEADER(title: str, *, width: int = BANNER_WIDTH) -> str:
    """Boxed title printed once at the start of a run."""
    inner = max(width, len(title) + 6)
    return "\n".join(
        [
            "",
            "╔" + "═" * inner + "╗",
            "║" + f"   {title}".ljust(inner) + "║",
            "╚" + "═" * inner + "╝",
        ]
    )


def SECTION_END(*, width: int = BANNER_WIDTH, fill: str = "═") -> str:
    return "\n" + fill * (width + 2)


MIGRATE_TITLE = "Spotlightr -> Cloudflare Stream Migration Tool"
CAPTIONS_TITLE = "Cloudflare Stream - Caption Upload Tool"


class SYMBOLS:
    # Outcomes
    OK = "✅"
    FAIL = "❌"
    WARN = "⚠️"
    UNMATCHED = "❓"
    SKIPPED = "⏭"

    # Progress
    RUNNING = "🚀"
    DRY_RUN = "🏃"
    VIDEO = "🎬"
    CAPTION = "💬"
    LANGUAGE = "🌐"

    # Files
    FILE = "📂"
    FOLDER = "📁"
    SAVE = "💾"
    SUMMARY = "📊"
