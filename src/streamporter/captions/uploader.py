"""
uploader.py

Sequential caption upload for matched caption files.

Every outcome goes to a plain-text run log (caption-upload.log) for the
operator to audit afterwards. The log is rewritten on every real run and
never read back. Caption uploads are not tracked for resumability: each
run re-uploads every match.
"""

from __future__ import annotations

import json
import time
import traceback
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional

from streamporter.branding import SYMBOLS
from streamporter.captions.matcher import CaptionMatch, MatchResult
from streamporter.captions.transcode import srt_to_vtt, vtt_filename
from streamporter.logger import get_logger
from streamporter.pipeline.run_state import CaptionSummary
from streamporter.providers.base import OutcomeKind, RemoteOutcome

logger = get_logger("streamporter.captions")

UploadCaption = Callable[[str, str, str, str], RemoteOutcome]


def _dump(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


class CaptionRunLog:
    """Append-only text log for one caption upload run."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def start(self, language: str) -> None:
        stamp = datetime.now(timezone.utc).isoformat(timespec="seconds")
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            f"=== Caption Upload Log - {stamp} ===\n", encoding="utf-8"
        )
        self.write(f"Language: {language}", "")

    def write(self, *lines: str) -> None:
        with self.path.open("a", encoding="utf-8") as f:
            for line in lines:
                f.write(line + "\n")

    # ------------------------------------------------------------------
    # Outcome blocks
    # ------------------------------------------------------------------

    def ok(self, match: CaptionMatch) -> None:
        self.write(f"[OK] {match.local_file_name} -> {match.remote_id}")

    def rejected(self, match: CaptionMatch, path: Path, outcome: RemoteOutcome) -> None:
        payload = outcome.payload or {}
        self.write(
            f"[FAIL] {match.local_file_name} -> {match.remote_id}",
            f"  Video name : {match.video_name}",
            f"  SRT path   : {path}",
            f"  Error      : {outcome.message}",
            f"  Errors     : {_dump(payload.get('errors'))}",
            f"  Messages   : {_dump(payload.get('messages'))}",
            f"  Full resp  : {_dump(payload)}",
            "",
        )

    def error(self, match: CaptionMatch, outcome: RemoteOutcome) -> None:
        self.write(
            f"[ERROR] {match.local_file_name} -> {match.remote_id}",
            f"  Video name : {match.video_name}",
            f"  Exception  : {outcome.message}",
            f"  Stack      : {outcome.traceback or '(none)'}",
            "",
        )

    def summary(self, summary: CaptionSummary, result: MatchResult) -> None:
        self.write(
            "--- Summary ---",
            f"Success   : {summary.succeeded}",
            f"Failed    : {summary.failed}",
            f"Unmatched : {summary.unmatched}",
            *(f"  - {name}" for name in result.unmatched),
            "",
        )


class CaptionUploader:
    def __init__(
        self,
        upload: UploadCaption,
        caption_dir: Path,
        *,
        language: str,
        delay_ms: int = 2000,
        run_log: Optional[CaptionRunLog] = None,
        dry_run: bool = False,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.upload = upload
        self.caption_dir = Path(caption_dir)
        self.language = language
        self.delay_ms = delay_ms
        self.run_log = None if dry_run else run_log
        self.dry_run = dry_run
        self._sleep = sleep

    def run(self, result: MatchResult, total_files: int) -> CaptionSummary:
        summary = CaptionSummary(
            total_files=total_files, unmatched=len(result.unmatched)
        )

        total = len(result.matched)
        for index, match in enumerate(result.matched, start=1):
            progress = f"[{index}/{total}]"

            if self.dry_run:
                logger.info(f'{progress} Would upload: "{match.local_file_name}"')
                logger.info(f'         -> Video: "{match.video_name}"')
                summary.planned += 1
                continue

            logger.info(
                f'{progress} {SYMBOLS.CAPTION} Uploading: "{match.local_file_name}"'
            )
            logger.info(f'         -> Video: "{match.video_name}" ({match.remote_id})')

            if self.upload_one(match):
                summary.succeeded += 1
            else:
                summary.failed += 1

            if index < total:
                self._sleep(self.delay_ms / 1000.0)

        if self.run_log is not None:
            self.run_log.summary(summary, result)
        return summary

    def upload_one(self, match: CaptionMatch) -> bool:
        path = self.caption_dir / match.local_file_name
        outcome = self._upload(match, path)

        if outcome.ok:
            logger.info(f"         {SYMBOLS.OK} Caption uploaded successfully")
            if self.run_log is not None:
                self.run_log.ok(match)
            return True

        if outcome.kind is OutcomeKind.REJECTED:
            logger.error(f"         {SYMBOLS.FAIL} Failed: {outcome.message}")
            if self.run_log is not None:
                self.run_log.rejected(match, path, outcome)
        else:
            logger.error(f"         {SYMBOLS.FAIL} Error: {outcome.message}")
            if self.run_log is not None:
                self.run_log.error(match, outcome)
        return False

    def _upload(self, match: CaptionMatch, path: Path) -> RemoteOutcome:
        try:
            vtt_text = srt_to_vtt(path.read_text(encoding="utf-8-sig"))
            return self.upload(
                match.remote_id,
                vtt_text,
                self.language,
                vtt_filename(match.local_file_name),
            )
        except Exception as e:
            return RemoteOutcome.fault(
                str(e) or type(e).__name__, traceback=traceback.format_exc()
            )
