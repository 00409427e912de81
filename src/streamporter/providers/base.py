from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple

from streamporter.pipeline.manifest import SourceRecord


class OutcomeKind(str, Enum):
    SUCCESS = "success"
    REJECTED = "rejected"  # well-formed error response from the API
    TRANSPORT_FAULT = "transport_fault"  # no usable response at all


@dataclass(frozen=True)
class RemoteOutcome:
    """Result of a single remote call. Remote calls never raise for item failures."""

    kind: OutcomeKind
    remote_id: Optional[str] = None
    errors: Tuple[str, ...] = ()
    payload: Optional[Dict[str, Any]] = None
    traceback: Optional[str] = None

    @classmethod
    def success(
        cls, remote_id: Optional[str] = None, payload: Optional[Dict[str, Any]] = None
    ) -> RemoteOutcome:
        return cls(kind=OutcomeKind.SUCCESS, remote_id=remote_id, payload=payload)

    @classmethod
    def rejected(
        cls, errors: Sequence[str], payload: Optional[Dict[str, Any]] = None
    ) -> RemoteOutcome:
        return cls(kind=OutcomeKind.REJECTED, errors=tuple(errors), payload=payload)

    @classmethod
    def fault(cls, message: str, traceback: Optional[str] = None) -> RemoteOutcome:
        return cls(
            kind=OutcomeKind.TRANSPORT_FAULT, errors=(message,), traceback=traceback
        )

    @property
    def ok(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS

    @property
    def message(self) -> str:
        return ", ".join(self.errors) or "Unknown error"


class VideoHost(ABC):
    """
    Destination platform interface (Cloudflare Stream today).
    """

    name: str

    @abstractmethod
    def copy_from_url(self, record: SourceRecord) -> RemoteOutcome:
        """Ask the host to ingest the video at record.source_url."""
        raise NotImplementedError

    @abstractmethod
    def upload_caption(
        self, remote_id: str, vtt_text: str, language: str, filename: str
    ) -> RemoteOutcome:
        """Attach a WebVTT caption track to an already-ingested video."""
        raise NotImplementedError
