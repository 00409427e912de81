from __future__ import annotations

import argparse
from pathlib import Path

from streamporter.bootstrap import current_run_id
from streamporter.branding import HEADER, MIGRATE_TITLE, SECTION_END, SYMBOLS
from streamporter.cli.common import EXIT_CONFIG, EXIT_INPUT, EXIT_OK, finish_run
from streamporter.env import Settings, load_settings
from streamporter.errors import (
    ConfigurationError,
    CorruptLedger,
    LedgerUnavailable,
    ManifestError,
)
from streamporter.logger import get_logger
from streamporter.pipeline.ledger import Ledger
from streamporter.pipeline.manifest import load_manifest
from streamporter.pipeline.migrate import MigrationEngine, MigrationOptions
from streamporter.pipeline.run_state import MigrationSummary, RunMetadata, RunStatus
from streamporter.providers.cloudflare import StreamClient

log = get_logger("streamporter.cli.migrate")


# ------------------------------------------------------------
# Parser
# ------------------------------------------------------------


def build_migrate_parser(subparsers: argparse._SubParsersAction) -> None:
    p = subparsers.add_parser(
        "migrate", help="Copy videos from a Spotlightr CSV export to Cloudflare Stream"
    )
    p.add_argument("--csv", help="Spotlightr CSV export (default: $CSV_FILE)")
    p.add_argument("--project", help="Only migrate videos of this Spotlightr project")
    p.add_argument("--results", help="Ledger file (default: migration-results.json)")
    p.add_argument("--delay-ms", type=int, help="Pause between uploads")
    p.add_argument(
        "--dry-run",
        action="store_true",
        help="Preview what would be migrated without making API calls",
    )
    p.add_argument(
        "--reset-ledger",
        action="store_true",
        help="Move an unreadable ledger aside and start from an empty one",
    )
    p.add_argument("--verbose", action="store_true")
    p.add_argument("--quiet", action="store_true")


# ------------------------------------------------------------
# Helpers
# ------------------------------------------------------------


def open_ledger(path: Path, *, reset: bool, dry_run: bool) -> Ledger:
    """
    Load the ledger. A corrupt ledger aborts the run unless reset is
    requested, in which case the file is moved aside (never in dry-run).

    Raises:
        CorruptLedger: If the file is unreadable and reset is not requested
        LedgerUnavailable: If the file cannot be read or moved aside
    """
    ledger = Ledger(path)
    try:
        ledger.load()
    except CorruptLedger:
        if not reset:
            raise
        if dry_run:
            log.warning(f"{SYMBOLS.WARN} Ignoring unreadable ledger {path} (dry run)")
            return Ledger(path)

        aside = path.with_name(f"{path.name}.corrupt-{current_run_id()}")
        try:
            path.replace(aside)
        except OSError as e:
            raise LedgerUnavailable(f"Cannot move {path} aside: {e}") from e
        log.warning(f"{SYMBOLS.WARN} Unreadable ledger moved to {aside}")
        ledger = Ledger(path)
    return ledger


def build_client(settings: Settings) -> StreamClient:
    return StreamClient(
        api_token=settings.api_token,
        account_id=settings.account_id,
        api_base=settings.api_base,
        timeout=settings.request_timeout,
        max_retries=settings.max_retries,
    )


def log_migration_summary(summary: MigrationSummary, settings: Settings) -> None:
    log.info(SECTION_END())
    log.info(f"{SYMBOLS.SUMMARY} Migration Summary:")
    if settings.dry_run:
        log.info(f"   Would upload:      {summary.planned}")
    log.info(f"   {SYMBOLS.OK} Success:         {summary.succeeded}")
    log.info(f"   {SYMBOLS.SKIPPED} Already done:    {summary.skipped_done}")
    log.info(f"   {SYMBOLS.SKIPPED} Ineligible:      {summary.skipped_ineligible}")
    log.info(f"   {SYMBOLS.FAIL} Failed:          {summary.failed}")
    log.info(f"   {SYMBOLS.FOLDER} Total:           {summary.total}")
    if not settings.dry_run:
        log.info(f"{SYMBOLS.SAVE} Results saved to {settings.results_file}")
    log.info(SECTION_END())


# ------------------------------------------------------------
# Handler
# ------------------------------------------------------------


def handle_migrate(args: argparse.Namespace) -> int:
    settings = load_settings(
        csv_file=args.csv,
        group_filter=args.project,
        results_file=args.results,
        delay_ms=args.delay_ms,
        dry_run=bool(args.dry_run),
    )
    run = RunMetadata(run_id=current_run_id(), command="migrate")

    log.info(HEADER(MIGRATE_TITLE))
    if settings.dry_run:
        log.info(f"{SYMBOLS.DRY_RUN} DRY RUN MODE - no API calls will be made")
    if settings.group_filter:
        log.info(f"Project filter: {settings.group_filter}")

    try:
        if not settings.dry_run:
            settings.require_credentials()

        log.info(f"{SYMBOLS.FILE} Reading CSV: {settings.csv_file}")
        records = load_manifest(settings.csv_file)
        log.info(f"   Found {len(records)} total records")

        ledger = open_ledger(
            settings.results_file,
            reset=bool(args.reset_ledger),
            dry_run=settings.dry_run,
        )
        log.info(
            f"{SYMBOLS.FILE} Ledger: {settings.results_file} "
            f"({len(ledger.successful_entries())} already migrated)"
        )
    except ConfigurationError as e:
        log.error(f"{SYMBOLS.FAIL} {e}")
        finish_run(log, run, RunStatus.CONFIG_ERROR)
        return EXIT_CONFIG
    except (ManifestError, CorruptLedger, LedgerUnavailable) as e:
        log.error(f"{SYMBOLS.FAIL} {e}")
        finish_run(log, run, RunStatus.FAILED)
        return EXIT_INPUT

    engine = MigrationEngine(
        ledger,
        build_client(settings).copy_from_url,
        MigrationOptions(
            delay_ms=settings.delay_ms,
            group_filter=settings.group_filter,
            dry_run=settings.dry_run,
        ),
    )
    try:
        summary = engine.run(records)
    except LedgerUnavailable as e:
        log.error(f"{SYMBOLS.FAIL} {e}")
        log.error("   Results recorded so far are kept; re-run to resume.")
        finish_run(log, run, RunStatus.FAILED)
        return EXIT_INPUT

    log_migration_summary(summary, settings)
    finish_run(log, run, RunStatus.COMPLETED)
    return EXIT_OK
