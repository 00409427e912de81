import logging
import os

import pytest

from streamporter.pipeline.ledger import LedgerEntry, Outcome
from streamporter.pipeline.manifest import SourceRecord

_ENV_KEYS = [
    "CLOUDFLARE_API_TOKEN",
    "CLOUDFLARE_ACCOUNT_ID",
    "CLOUDFLARE_API_BASE",
    "CSV_FILE",
    "RESULTS_FILE",
    "CAPTIONS_DIR",
    "CAPTION_LOG_FILE",
    "CAPTION_LANGUAGE",
    "DELAY_MS",
    "REQUEST_TIMEOUT",
    "MAX_RETRIES",
    "LOG_LEVEL",
    "LOG_RETENTION",
]


def _reset_logging():
    from streamporter.logger.state import reset_state

    reset_state()

    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()


@pytest.fixture(autouse=True)
def clean_env_and_logging(monkeypatch, tmp_path):
    """
    Ensure tests don't leak env, run context, or logger state.
    """
    for k in _ENV_KEYS:
        monkeypatch.delenv(k, raising=False)

    # bootstrap writes run context straight into os.environ
    for k in [k for k in os.environ if k.startswith("STREAMPORTER_")]:
        monkeypatch.delenv(k)

    monkeypatch.setenv("STREAMPORTER_LOGS_DIR", str(tmp_path / "logs"))
    _reset_logging()

    yield

    for k in [k for k in os.environ if k.startswith("STREAMPORTER_")]:
        os.environ.pop(k, None)
    _reset_logging()


def make_record(external_id, name=None, url=None, project="10"):
    return SourceRecord(
        external_id=external_id,
        name=name if name is not None else f"Video {external_id}",
        group_id=project,
        source_url=url if url is not None else f"http://x/{external_id}.mp4",
    )


def make_entry(external_id, name=None, success=True, remote_id=None, project="10"):
    return LedgerEntry(
        external_id=external_id,
        name=name if name is not None else f"Video {external_id}",
        group_id=project,
        source_url=f"http://x/{external_id}.mp4",
        outcome=Outcome.SUCCESS if success else Outcome.FAILURE,
        completed_at="2024-05-01T10:00:00.000Z",
        remote_id=(remote_id or f"uid-{external_id}") if success else None,
        error_message=None if success else "Boom",
    )
