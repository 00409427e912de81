"""
cloudflare.py

Cloudflare Stream API client.

Responsibilities:
- Bearer-token session management
- "Copy from URL" video ingestion
- Caption upload (multipart, text/vtt)
- Retry with exponential backoff on HTTP 429
- HTTP / payload -> RemoteOutcome translation

Does NOT:
- Decide what to migrate or persist anything
- Raise for per-item failures (they come back as RemoteOutcome values)
"""

from __future__ import annotations

import time
from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional

import requests

from streamporter.env import DEFAULT_API_BASE
from streamporter.logger import get_logger
from streamporter.pipeline.ledger import UNKNOWN_REMOTE_ID
from streamporter.pipeline.manifest import SourceRecord
from streamporter.providers.base import RemoteOutcome, VideoHost

logger = get_logger(__name__)

UNKNOWN_UID = UNKNOWN_REMOTE_ID


# ============================================================
# Response helpers
# ============================================================


def is_rate_limited(response: requests.Response) -> bool:
    return response.status_code == 429


def _error_messages(data: Dict[str, Any]) -> List[str]:
    messages: List[str] = []
    for err in data.get("errors") or []:
        if isinstance(err, dict) and err.get("message"):
            messages.append(str(err["message"]))
        elif isinstance(err, str) and err:
            messages.append(err)
    return messages


def parse_response(response: requests.Response) -> RemoteOutcome:
    """
    Translate a Cloudflare v4 API envelope into a RemoteOutcome.

    {"success": true, "result": {"uid": ...}}          -> SUCCESS
    {"success": false, "errors": [{"message": ...}]}   -> REJECTED
    anything that is not a JSON object                 -> TRANSPORT_FAULT
    """
    try:
        data = response.json()
    except ValueError:
        return RemoteOutcome.fault(
            f"HTTP {response.status_code}: response body is not JSON"
        )

    if not isinstance(data, dict):
        return RemoteOutcome.fault(
            f"HTTP {response.status_code}: unexpected response payload"
        )

    if data.get("success"):
        result = data.get("result")
        uid = result.get("uid") if isinstance(result, dict) else None
        return RemoteOutcome.success(remote_id=uid or None, payload=data)

    messages = _error_messages(data)
    if not messages and response.status_code >= 400:
        messages = [f"HTTP {response.status_code}"]
    return RemoteOutcome.rejected(messages, payload=data)


# ============================================================
# Client
# ============================================================


class StreamClient(VideoHost):
    name = "cloudflare"

    def __init__(
        self,
        *,
        api_token: str,
        account_id: str,
        api_base: str = DEFAULT_API_BASE,
        timeout: float = 60.0,
        max_retries: int = 3,
        backoff_base_sec: float = 2.0,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.account_id = account_id
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff_base_sec = backoff_base_sec
        self._sleep = sleep

        self.session = session or requests.Session()
        self.session.headers["Authorization"] = f"Bearer {api_token}"

        logger.debug(f"Initialized StreamClient for account {account_id}")

    # ------------------------------------------------------------------
    # Endpoints
    # ------------------------------------------------------------------

    @property
    def copy_url(self) -> str:
        return f"{self.api_base}/accounts/{self.account_id}/stream/copy"

    def caption_url(self, remote_id: str, language: str) -> str:
        return (
            f"{self.api_base}/accounts/{self.account_id}"
            f"/stream/{remote_id}/captions/{language}"
        )

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def copy_from_url(self, record: SourceRecord) -> RemoteOutcome:
        body = {
            "url": record.source_url,
            "meta": {
                "name": record.name,
                "spotlightrId": record.external_id,
                "spotlightrProject": record.group_id,
            },
        }
        outcome = self._send(
            "POST", self.copy_url, f"copy {record.external_id}", json=body
        )
        if outcome.ok and not outcome.remote_id:
            outcome = replace(outcome, remote_id=UNKNOWN_UID)
        return outcome

    def upload_caption(
        self, remote_id: str, vtt_text: str, language: str, filename: str
    ) -> RemoteOutcome:
        files = {"file": (filename, vtt_text.encode("utf-8"), "text/vtt")}
        return self._send(
            "PUT",
            self.caption_url(remote_id, language),
            f"caption {remote_id}/{language}",
            files=files,
        )

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _send(self, method: str, url: str, name: str, **kwargs: Any) -> RemoteOutcome:
        try:
            response = self._request_with_retry(method, url, name, **kwargs)
        except requests.RequestException as e:
            logger.debug(f"{name} transport failure: {e!r}")
            return RemoteOutcome.fault(f"{type(e).__name__}: {e}")

        return parse_response(response)

    def _request_with_retry(
        self, method: str, url: str, name: str, **kwargs: Any
    ) -> requests.Response:
        attempt = 0
        while True:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)

            if not is_rate_limited(response) or attempt >= self.max_retries:
                return response

            sleep_time = self.backoff_base_sec * (2**attempt)
            attempt += 1
            logger.warning(
                f"{name} rate limited (attempt {attempt}/{self.max_retries}), "
                f"retrying in {sleep_time}s"
            )
            self._sleep(sleep_time)
