from pathlib import Path

import pytest

from streamporter.env import load_settings
from streamporter.errors import ConfigurationError


def test_defaults():
    s = load_settings({})

    assert s.api_base == "https://api.cloudflare.com/client/v4"
    assert s.csv_file == Path("Dashboard_Projects_All_Videos_Spotlightr.csv")
    assert s.results_file == Path("migration-results.json")
    assert s.captions_dir == Path("caption")
    assert s.caption_log_file == Path("caption-upload.log")
    assert s.language == "he"
    assert s.delay_ms == 2000
    assert s.request_timeout == 60.0
    assert s.max_retries == 3
    assert s.group_filter is None
    assert s.dry_run is False


def test_environment_values():
    s = load_settings(
        {
            "CLOUDFLARE_API_TOKEN": " tok ",
            "CLOUDFLARE_ACCOUNT_ID": "acct",
            "CLOUDFLARE_API_BASE": "https://cf.test/v4/",
            "DELAY_MS": "500",
            "CAPTION_LANGUAGE": "en",
            "MAX_RETRIES": "not a number",
        }
    )

    assert s.api_token == "tok"
    assert s.api_base == "https://cf.test/v4"
    assert s.delay_ms == 500
    assert s.language == "en"
    assert s.max_retries == 3


def test_reads_os_environ_by_default(monkeypatch):
    monkeypatch.setenv("RESULTS_FILE", "out/results.json")

    assert load_settings().results_file == Path("out/results.json")


def test_overrides_win_and_none_is_ignored():
    s = load_settings(
        {"DELAY_MS": "500", "CSV_FILE": "env.csv"},
        delay_ms=0,
        csv_file=None,
        results_file="custom.json",
        group_filter="7",
        dry_run=True,
    )

    assert s.delay_ms == 0
    assert s.csv_file == Path("env.csv")
    assert s.results_file == Path("custom.json")
    assert s.group_filter == "7"
    assert s.dry_run is True


def test_negative_delay_is_clamped():
    assert load_settings({"DELAY_MS": "-5"}).delay_ms == 0


def test_require_credentials():
    with pytest.raises(ConfigurationError) as exc:
        load_settings({}).require_credentials()
    assert "CLOUDFLARE_API_TOKEN" in str(exc.value)
    assert "CLOUDFLARE_ACCOUNT_ID" in str(exc.value)

    load_settings(
        {"CLOUDFLARE_API_TOKEN": "t", "CLOUDFLARE_ACCOUNT_ID": "a"}
    ).require_credentials()


def test_as_dict_masks_token():
    dumped = load_settings({"CLOUDFLARE_API_TOKEN": "secret"}).as_dict()

    assert dumped["Cloudflare"]["api_token"] == "(set)"
    assert "secret" not in repr(dumped)
