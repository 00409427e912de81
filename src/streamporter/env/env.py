from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping, Optional

from dotenv import load_dotenv

from streamporter.errors import ConfigurationError

# ------------------------------------------------------------
# Defaults
# ------------------------------------------------------------

DEFAULT_API_BASE = "https://api.cloudflare.com/client/v4"
DEFAULT_CSV_FILE = "Dashboard_Projects_All_Videos_Spotlightr.csv"
DEFAULT_RESULTS_FILE = "migration-results.json"
DEFAULT_CAPTIONS_DIR = "caption"
DEFAULT_CAPTION_LOG_FILE = "caption-upload.log"
DEFAULT_LANGUAGE = "he"
DEFAULT_DELAY_MS = 2000

# ------------------------------------------------------------
# dotenv (bootstrap owns usage)
# ------------------------------------------------------------


def load_env_file(path: Path) -> bool:
    """Load a .env file without overriding variables already set."""
    if not path.exists():
        return False
    return load_dotenv(path, override=False)


# ------------------------------------------------------------
# Helpers
# ------------------------------------------------------------


def _as_bool(v: str) -> bool:
    return v.strip().lower() in {"1", "true", "yes", "on"}


def _as_int(v: str, default: int) -> int:
    try:
        return int(v)
    except Exception:
        return default


def _as_float(v: str, default: float) -> float:
    try:
        return float(v)
    except Exception:
        return default


# ------------------------------------------------------------
# Logging environment (SAFE ANYWHERE)
# ------------------------------------------------------------


@dataclass(frozen=True)
class LoggingEnvironment:
    log_level: str
    log_retention: int
    verbose: bool
    quiet: bool


def get_logging_env() -> LoggingEnvironment:
    return LoggingEnvironment(
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
        log_retention=_as_int(os.environ.get("LOG_RETENTION", "30"), 30),
        verbose=_as_bool(os.environ.get("STREAMPORTER_VERBOSE", "0")),
        quiet=_as_bool(os.environ.get("STREAMPORTER_QUIET", "0")),
    )


# ------------------------------------------------------------
# Runtime settings (resolved once at the CLI boundary)
# ------------------------------------------------------------


@dataclass(frozen=True)
class Settings:
    api_token: str
    account_id: str
    api_base: str
    csv_file: Path
    results_file: Path
    captions_dir: Path
    caption_log_file: Path
    language: str
    delay_ms: int
    request_timeout: float
    max_retries: int
    group_filter: Optional[str] = None
    dry_run: bool = False

    def require_credentials(self) -> None:
        missing = [
            name
            for name, value in (
                ("CLOUDFLARE_API_TOKEN", self.api_token),
                ("CLOUDFLARE_ACCOUNT_ID", self.account_id),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(
                f"Missing {' or '.join(missing)} (set it in .env or the environment)"
            )

    def as_dict(self) -> dict:
        return {
            "Cloudflare": {
                "api_base": self.api_base,
                "account_id": self.account_id or "(unset)",
                "api_token": "(set)" if self.api_token else "(unset)",
                "request_timeout": self.request_timeout,
                "max_retries": self.max_retries,
            },
            "Files": {
                "csv_file": str(self.csv_file),
                "results_file": str(self.results_file),
                "captions_dir": str(self.captions_dir),
                "caption_log_file": str(self.caption_log_file),
            },
            "Behavior": {
                "delay_ms": self.delay_ms,
                "group_filter": self.group_filter or "(all)",
                "language": self.language,
                "dry_run": self.dry_run,
            },
        }


def load_settings(
    environ: Optional[Mapping[str, str]] = None, **overrides: Any
) -> Settings:
    """
    Build Settings from environment variables.

    Keyword overrides (typically CLI flags) win over the environment;
    None values are ignored so unset flags fall through.
    """
    env = os.environ if environ is None else environ

    settings = Settings(
        api_token=env.get("CLOUDFLARE_API_TOKEN", "").strip(),
        account_id=env.get("CLOUDFLARE_ACCOUNT_ID", "").strip(),
        api_base=env.get("CLOUDFLARE_API_BASE", DEFAULT_API_BASE).rstrip("/"),
        csv_file=Path(env.get("CSV_FILE", DEFAULT_CSV_FILE)),
        results_file=Path(env.get("RESULTS_FILE", DEFAULT_RESULTS_FILE)),
        captions_dir=Path(env.get("CAPTIONS_DIR", DEFAULT_CAPTIONS_DIR)),
        caption_log_file=Path(env.get("CAPTION_LOG_FILE", DEFAULT_CAPTION_LOG_FILE)),
        language=env.get("CAPTION_LANGUAGE", DEFAULT_LANGUAGE),
        delay_ms=max(0, _as_int(env.get("DELAY_MS", ""), DEFAULT_DELAY_MS)),
        request_timeout=_as_float(env.get("REQUEST_TIMEOUT", ""), 60.0),
        max_retries=max(0, _as_int(env.get("MAX_RETRIES", ""), 3)),
    )

    changes = {k: v for k, v in overrides.items() if v is not None}
    for key in ("csv_file", "results_file", "captions_dir", "caption_log_file"):
        if key in changes:
            changes[key] = Path(changes[key])
    if "delay_ms" in changes:
        changes["delay_ms"] = max(0, int(changes["delay_ms"]))

    return replace(settings, **changes)
