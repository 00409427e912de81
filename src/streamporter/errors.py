from __future__ import annotations


class StreamporterError(Exception):
    """Base error for fatal, run-level failures."""


class ConfigurationError(StreamporterError):
    """Required credential or identifier is missing."""


class ManifestError(StreamporterError):
    """Base error for manifest input problems."""


class ManifestNotFound(ManifestError):
    """The manifest CSV does not exist."""


class ManifestUnreadable(ManifestError):
    """The manifest CSV exists but cannot be read or decoded."""


class CaptionDirectoryNotFound(StreamporterError):
    """The local caption folder does not exist."""


class CorruptLedger(StreamporterError):
    """Persisted migration results cannot be parsed."""


class LedgerUnavailable(StreamporterError):
    """The results file cannot be read or written (permissions, disk, not a file)."""
