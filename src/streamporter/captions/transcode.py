"""
SRT -> WebVTT conversion (Cloudflare Stream only accepts WebVTT captions).
"""

from __future__ import annotations

import re
from pathlib import PurePath

VTT_HEADER = "WEBVTT"

_TIMESTAMP_RE = re.compile(r"(\d{2}:\d{2}:\d{2}),(\d{3})")


def srt_to_vtt(srt_text: str) -> str:
    """
    Convert SRT content to WebVTT.

    - Normalizes CRLF / CR line endings to LF
    - Rewrites 00:00:08,667 as 00:00:08.667
    - Prepends the WEBVTT header and a blank line
    - Ends with exactly one newline

    Anything that does not look like SRT passes through unchanged apart
    from the steps above.
    """
    text = srt_text.replace("\r\n", "\n").replace("\r", "\n")
    text = _TIMESTAMP_RE.sub(r"\1.\2", text)
    return f"{VTT_HEADER}\n\n{text.strip()}\n"


def vtt_filename(name: str) -> str:
    """lesson 1.srt -> lesson 1.vtt"""
    path = PurePath(name)
    if path.suffix.lower() == ".srt":
        return path.with_suffix(".vtt").name
    return f"{path.name}.vtt"
