from __future__ import annotations

import argparse

from streamporter.bootstrap import current_run_id
from streamporter.branding import CAPTIONS_TITLE, HEADER, SECTION_END, SYMBOLS
from streamporter.captions.matcher import MatchResult, list_caption_files, match_captions
from streamporter.captions.uploader import CaptionRunLog, CaptionUploader
from streamporter.cli.cli_migrate import build_client
from streamporter.cli.common import EXIT_CONFIG, EXIT_INPUT, EXIT_OK, finish_run
from streamporter.env import Settings, load_settings
from streamporter.errors import (
    CaptionDirectoryNotFound,
    ConfigurationError,
    CorruptLedger,
    LedgerUnavailable,
)
from streamporter.logger import get_logger
from streamporter.pipeline.ledger import Ledger
from streamporter.pipeline.run_state import CaptionSummary, RunMetadata, RunStatus

log = get_logger("streamporter.cli.captions")


# ------------------------------------------------------------
# Parser
# ------------------------------------------------------------


def build_captions_parser(subparsers: argparse._SubParsersAction) -> None:
    p = subparsers.add_parser(
        "captions", help="Match local .srt files to migrated videos and upload them"
    )
    p.add_argument("--lang", help="Caption language tag (default: $CAPTION_LANGUAGE or he)")
    p.add_argument("--dir", help="Folder holding .srt files (default: caption)")
    p.add_argument("--results", help="Ledger file (default: migration-results.json)")
    p.add_argument("--log-file", help="Upload log (default: caption-upload.log)")
    p.add_argument("--delay-ms", type=int, help="Pause between uploads")
    p.add_argument(
        "--dry-run",
        action="store_true",
        help="Preview matches without uploading",
    )
    p.add_argument("--verbose", action="store_true")
    p.add_argument("--quiet", action="store_true")


# ------------------------------------------------------------
# Helpers
# ------------------------------------------------------------


def log_match_report(result: MatchResult, settings: Settings) -> None:
    log.info(f"{SYMBOLS.OK} Matched: {len(result.matched)}")
    log.info(f"{SYMBOLS.UNMATCHED} Unmatched: {len(result.unmatched)}")

    if result.unmatched:
        log.warning(f"{SYMBOLS.WARN} Unmatched SRT files (no matching video found):")
        for name in result.unmatched:
            log.warning(f"     - {name}")
        log.warning(
            f"   Rename these files to match the video names in {settings.results_file}"
        )


def log_caption_summary(summary: CaptionSummary, settings: Settings) -> None:
    log.info(SECTION_END())
    log.info(f"{SYMBOLS.SUMMARY} Caption Upload Summary:")
    if settings.dry_run:
        log.info(f"   Would upload:  {summary.planned}")
    log.info(f"   {SYMBOLS.OK} Success:     {summary.succeeded}")
    log.info(f"   {SYMBOLS.FAIL} Failed:      {summary.failed}")
    log.info(f"   {SYMBOLS.UNMATCHED} Unmatched:   {summary.unmatched}")
    log.info(f"   {SYMBOLS.FOLDER} Total SRT:   {summary.total_files}")
    log.info(SECTION_END())


# ------------------------------------------------------------
# Handler
# ------------------------------------------------------------


def handle_captions(args: argparse.Namespace) -> int:
    settings = load_settings(
        language=args.lang,
        captions_dir=args.dir,
        results_file=args.results,
        caption_log_file=args.log_file,
        delay_ms=args.delay_ms,
        dry_run=bool(args.dry_run),
    )
    run = RunMetadata(run_id=current_run_id(), command="captions")

    log.info(HEADER(CAPTIONS_TITLE))
    if settings.dry_run:
        log.info(f"{SYMBOLS.DRY_RUN} DRY RUN MODE - no API calls will be made")
    log.info(f"{SYMBOLS.LANGUAGE} Language: {settings.language}")

    try:
        if not settings.dry_run:
            settings.require_credentials()

        if not settings.results_file.exists():
            log.error(
                f"{SYMBOLS.FAIL} {settings.results_file} not found. "
                "Run the video migration first (streamporter migrate)."
            )
            finish_run(log, run, RunStatus.FAILED)
            return EXIT_INPUT

        ledger = Ledger(settings.results_file)
        ledger.load()
        successes = ledger.successful_entries()
        log.info(
            f"{SYMBOLS.FILE} Loaded {len(successes)} migrated videos "
            f"from {settings.results_file}"
        )

        files = list_caption_files(settings.captions_dir)
        log.info(
            f"{SYMBOLS.FOLDER} Found {len(files)} SRT files in {settings.captions_dir}/"
        )
    except ConfigurationError as e:
        log.error(f"{SYMBOLS.FAIL} {e}")
        finish_run(log, run, RunStatus.CONFIG_ERROR)
        return EXIT_CONFIG
    except CaptionDirectoryNotFound as e:
        log.error(f"{SYMBOLS.FAIL} {e}")
        log.error("   Create it and place your .srt files inside.")
        finish_run(log, run, RunStatus.FAILED)
        return EXIT_INPUT
    except (CorruptLedger, LedgerUnavailable) as e:
        log.error(f"{SYMBOLS.FAIL} {e}")
        finish_run(log, run, RunStatus.FAILED)
        return EXIT_INPUT

    result = match_captions(files, successes)
    log_match_report(result, settings)

    if not result.matched:
        log.info("Nothing to upload. Exiting.")
        finish_run(log, run, RunStatus.COMPLETED)
        return EXIT_OK

    run_log = None
    if not settings.dry_run:
        run_log = CaptionRunLog(settings.caption_log_file)
        run_log.start(settings.language)

    uploader = CaptionUploader(
        build_client(settings).upload_caption,
        settings.captions_dir,
        language=settings.language,
        delay_ms=settings.delay_ms,
        run_log=run_log,
        dry_run=settings.dry_run,
    )
    summary = uploader.run(result, total_files=len(files))

    log_caption_summary(summary, settings)
    if run_log is not None:
        log.info(f"{SYMBOLS.FILE} Log saved to {run_log.path}")
    finish_run(log, run, RunStatus.COMPLETED)
    return EXIT_OK
