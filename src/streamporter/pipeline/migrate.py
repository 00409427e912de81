"""
migrate.py

Resumable, strictly sequential video migration.

For every manifest record, in order:
1. Eligibility: a Spotlightr id, a source URL that is not DELETED, and a
   project matching the optional filter. Ineligible records are counted,
   never written to the ledger.
2. Dedup: ids the ledger already marks successful are skipped.
3. Dry-run: report what would be uploaded; no remote call, no ledger write.
4. Submit, then record the outcome in the ledger before moving on.
   A failed item is recorded and the run continues.
5. Sleep delay_ms between two submissions; skipped items cost no delay.

Exactly one remote call is in flight at any time. Killing the process
loses at most the in-flight item; the next run resumes from the ledger.
"""

from __future__ import annotations

import time
import traceback
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence

from streamporter.branding import SYMBOLS
from streamporter.logger import get_logger
from streamporter.pipeline.ledger import (
    UNKNOWN_REMOTE_ID,
    Ledger,
    LedgerEntry,
    utc_now_iso,
)
from streamporter.pipeline.manifest import SourceRecord
from streamporter.pipeline.run_state import MigrationSummary
from streamporter.providers.base import RemoteOutcome

logger = get_logger("streamporter.migrate")

Submit = Callable[[SourceRecord], RemoteOutcome]


@dataclass(frozen=True)
class MigrationOptions:
    delay_ms: int = 2000
    group_filter: Optional[str] = None
    dry_run: bool = False


class SkipReason(str, Enum):
    MISSING_ID = "missing_id"
    SOURCE_UNAVAILABLE = "source_unavailable"
    GROUP_FILTERED = "group_filtered"


def check_eligibility(
    record: SourceRecord, group_filter: Optional[str] = None
) -> Optional[SkipReason]:
    """Return why a record cannot be migrated, or None if it can."""
    if not record.is_available:
        return SkipReason.SOURCE_UNAVAILABLE
    if group_filter and record.group_id != group_filter:
        return SkipReason.GROUP_FILTERED
    if not record.external_id:
        return SkipReason.MISSING_ID
    return None


class MigrationEngine:
    def __init__(
        self,
        ledger: Ledger,
        submit: Submit,
        options: MigrationOptions = MigrationOptions(),
        *,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], str] = utc_now_iso,
    ):
        self.ledger = ledger
        self.submit = submit
        self.options = options
        self._sleep = sleep
        self._clock = clock

    # ------------------------------------------------------------------
    # Filtering
    # ------------------------------------------------------------------

    def select_eligible(
        self, records: Sequence[SourceRecord], summary: MigrationSummary
    ) -> List[SourceRecord]:
        eligible: List[SourceRecord] = []
        for record in records:
            reason = check_eligibility(record, self.options.group_filter)
            if reason is None:
                eligible.append(record)
                continue

            summary.skipped_ineligible += 1
            if reason is SkipReason.SOURCE_UNAVAILABLE:
                logger.info(
                    f'{SYMBOLS.SKIPPED} Skipping "{record.name}" - original file deleted'
                )
            elif reason is SkipReason.MISSING_ID:
                logger.warning(
                    f'{SYMBOLS.WARN} Skipping "{record.name}" - no Spotlightr id'
                )
            else:
                logger.debug(
                    f'Skipping "{record.name}" - project {record.group_id!r} filtered out'
                )
        return eligible

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------

    def run(self, records: Sequence[SourceRecord]) -> MigrationSummary:
        summary = MigrationSummary(total=len(records))
        eligible = self.select_eligible(records, summary)

        logger.info(f"{SYMBOLS.VIDEO} {len(eligible)} videos ready for migration")
        if not eligible:
            logger.info("Nothing to migrate.")
            return summary

        total = len(eligible)
        submitted = 0
        for index, record in enumerate(eligible, start=1):
            progress = f"[{index}/{total}]"
            previous = self.ledger.get(record.external_id)

            if self.ledger.is_completed(record.external_id):
                logger.info(
                    f'{progress} "{record.name}" - already migrated '
                    f"({previous.remote_id})"
                )
                summary.skipped_done += 1
                continue

            if self.options.dry_run:
                logger.info(f'{progress} Would upload: "{record.name}"')
                logger.info(f"         URL: {record.source_url}")
                summary.planned += 1
                continue

            # Pause between two submissions only, never before the first.
            if submitted:
                self._sleep(self.options.delay_ms / 1000.0)
            submitted += 1

            logger.info(f'{progress} {SYMBOLS.RUNNING} Uploading: "{record.name}"')
            if previous is not None:
                logger.info(f"         Retrying after: {previous.error_message}")
            entry = self.migrate_one(record)

            if entry.succeeded:
                summary.succeeded += 1
                logger.info(
                    f"         {SYMBOLS.OK} Success - Cloudflare UID: {entry.remote_id}"
                )
            else:
                summary.failed += 1
                logger.error(f"         {SYMBOLS.FAIL} Failed: {entry.error_message}")

        return summary

    def migrate_one(self, record: SourceRecord) -> LedgerEntry:
        """
        Submit one record and durably record its outcome.

        Remote failures come back as failed entries. A LedgerUnavailable
        from the write propagates: without a durable ledger the run stops.
        """
        outcome = self._submit(record)

        if outcome.ok:
            entry = LedgerEntry.success(
                record,
                outcome.remote_id or UNKNOWN_REMOTE_ID,
                completed_at=self._clock(),
            )
        else:
            entry = LedgerEntry.failure(
                record, outcome.message, completed_at=self._clock()
            )

        self.ledger.record(entry)
        return entry

    def _submit(self, record: SourceRecord) -> RemoteOutcome:
        try:
            return self.submit(record)
        except Exception as e:
            logger.debug(f"submit raised for {record.external_id}", exc_info=True)
            return RemoteOutcome.fault(
                str(e) or type(e).__name__, traceback=traceback.format_exc()
            )
