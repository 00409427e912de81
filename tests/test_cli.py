import json

import pytest

from conftest import make_entry
from streamporter.main import main
from streamporter.pipeline.ledger import Ledger
from streamporter.providers.base import RemoteOutcome

CSV = (
    "id,video,project,original file URL,URL\n"
    "1,Welcome,7,https://cdn/welcome.mp4,\n"
    "2,Gone,7,DELETED,\n"
    "3,Outro,8,https://cdn/outro.mp4,\n"
)


class FakeClient:
    def __init__(self):
        self.copied = []
        self.captions = []

    def copy_from_url(self, record):
        self.copied.append(record.external_id)
        return RemoteOutcome.success(remote_id=f"cf-{record.external_id}")

    def upload_caption(self, remote_id, vtt_text, language, filename):
        self.captions.append((remote_id, language, filename))
        return RemoteOutcome.success()


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "export.csv").write_text(CSV, encoding="utf-8")
    return tmp_path


@pytest.fixture
def credentials(monkeypatch):
    monkeypatch.setenv("CLOUDFLARE_API_TOKEN", "tok")
    monkeypatch.setenv("CLOUDFLARE_ACCOUNT_ID", "acct")


@pytest.fixture
def fake_client(monkeypatch):
    client = FakeClient()
    monkeypatch.setattr(
        "streamporter.cli.cli_migrate.build_client", lambda settings: client
    )
    monkeypatch.setattr(
        "streamporter.cli.cli_captions.build_client", lambda settings: client
    )
    return client


def test_migrate_help_exits_zero(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["migrate", "--help"])
    assert exc.value.code == 0
    assert "--dry-run" in capsys.readouterr().out


def test_help_command(capsys):
    assert main(["help"]) == 0
    assert "migrate" in capsys.readouterr().out


def test_migrate_dry_run_needs_no_credentials(workdir, fake_client):
    code = main(["migrate", "--csv", "export.csv", "--dry-run", "--quiet"])

    assert code == 0
    assert fake_client.copied == []
    assert not (workdir / "migration-results.json").exists()


def test_migrate_without_credentials_is_config_error(workdir, fake_client):
    assert main(["migrate", "--csv", "export.csv", "--quiet"]) == 10
    assert fake_client.copied == []


def test_migrate_missing_csv_is_input_error(workdir, credentials, fake_client):
    assert main(["migrate", "--csv", "missing.csv", "--quiet"]) == 20


def test_migrate_corrupt_ledger_is_input_error(workdir, credentials, fake_client):
    (workdir / "migration-results.json").write_text("{oops", encoding="utf-8")

    assert main(["migrate", "--csv", "export.csv", "--quiet"]) == 20
    assert fake_client.copied == []


def test_migrate_reset_ledger_moves_corrupt_file_aside(
    workdir, credentials, fake_client, monkeypatch
):
    monkeypatch.setenv("STREAMPORTER_RUN_ID", "r1")
    (workdir / "migration-results.json").write_text("{oops", encoding="utf-8")

    code = main(
        ["migrate", "--csv", "export.csv", "--delay-ms", "0", "--reset-ledger", "--quiet"]
    )

    assert code == 0
    assert (workdir / "migration-results.json.corrupt-r1").read_text() == "{oops"
    assert fake_client.copied == ["1", "3"]


def test_migrate_full_run_and_resume(workdir, credentials, fake_client):
    args = ["migrate", "--csv", "export.csv", "--delay-ms", "0", "--quiet"]

    assert main(args) == 0
    assert fake_client.copied == ["1", "3"]

    data = json.loads((workdir / "migration-results.json").read_text("utf-8"))
    assert [(d["spotlightrId"], d["cloudflareUid"]) for d in data] == [
        ("1", "cf-1"),
        ("3", "cf-3"),
    ]

    fake_client.copied.clear()
    assert main(args) == 0
    assert fake_client.copied == []


def test_migrate_project_filter(workdir, credentials, fake_client):
    code = main(
        ["migrate", "--csv", "export.csv", "--project", "8", "--delay-ms", "0", "--quiet"]
    )

    assert code == 0
    assert fake_client.copied == ["3"]


def test_migrate_writes_run_log_with_status(workdir, credentials, fake_client, monkeypatch):
    monkeypatch.setenv("STREAMPORTER_RUN_ID", "r2")

    main(["migrate", "--csv", "export.csv", "--delay-ms", "0", "--quiet"])

    log_path = workdir / "logs" / "migrate" / "migrate-r2.log"
    text = log_path.read_text(encoding="utf-8")
    assert "RUN_STATUS=completed" in text


def test_migrate_results_path_is_a_folder(workdir, fake_client, monkeypatch):
    monkeypatch.setenv("STREAMPORTER_RUN_ID", "r3")
    (workdir / "results").mkdir()

    code = main(
        ["migrate", "--dry-run", "--quiet", "--csv", "export.csv", "--results", "results"]
    )

    assert code == 20
    text = (workdir / "logs" / "migrate" / "migrate-r3.log").read_text("utf-8")
    assert "RUN_STATUS=failed" in text


def test_migrate_ledger_write_failure_is_input_error(
    workdir, credentials, fake_client, monkeypatch
):
    monkeypatch.setenv("STREAMPORTER_RUN_ID", "r4")

    def _broken_replace(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr("streamporter.utils.os.replace", _broken_replace)

    code = main(["migrate", "--csv", "export.csv", "--delay-ms", "0", "--quiet"])

    assert code == 20
    assert fake_client.copied == ["1"]
    assert not (workdir / "migration-results.json").exists()
    text = (workdir / "logs" / "migrate" / "migrate-r4.log").read_text("utf-8")
    assert "RUN_STATUS=failed" in text


def _seed_captions(workdir):
    ledger = Ledger(workdir / "migration-results.json")
    ledger.record(make_entry("1", name="Welcome"))
    ledger.record(make_entry("2", name="Outro"))
    caption_dir = workdir / "caption"
    caption_dir.mkdir()
    (caption_dir / "Welcome.srt").write_text(
        "1\n00:00:01,000 --> 00:00:02,000\nHi\n", encoding="utf-8"
    )
    (caption_dir / "Unknown.srt").write_text("1\n", encoding="utf-8")


def test_captions_dry_run(workdir, fake_client):
    _seed_captions(workdir)

    assert main(["captions", "--dry-run", "--quiet"]) == 0
    assert fake_client.captions == []
    assert not (workdir / "caption-upload.log").exists()


def test_captions_upload(workdir, credentials, fake_client):
    _seed_captions(workdir)

    code = main(["captions", "--lang", "en", "--delay-ms", "0", "--quiet"])

    assert code == 0
    assert fake_client.captions == [("uid-1", "en", "Welcome.vtt")]
    log_text = (workdir / "caption-upload.log").read_text(encoding="utf-8")
    assert "[OK] Welcome.srt -> uid-1" in log_text
    assert "  - Unknown.srt" in log_text


def test_captions_without_ledger(workdir, credentials, fake_client):
    (workdir / "caption").mkdir()

    assert main(["captions", "--quiet"]) == 20


def test_captions_without_folder(workdir, credentials, fake_client):
    Ledger(workdir / "migration-results.json").record(make_entry("1"))

    assert main(["captions", "--quiet"]) == 20


def test_captions_results_path_is_a_folder(
    workdir, credentials, fake_client, monkeypatch
):
    monkeypatch.setenv("STREAMPORTER_RUN_ID", "r5")
    (workdir / "caption").mkdir()
    (workdir / "results").mkdir()

    assert main(["captions", "--results", "results", "--quiet"]) == 20
    text = (workdir / "logs" / "captions" / "captions-r5.log").read_text("utf-8")
    assert "RUN_STATUS=failed" in text


def test_ledger_stats(workdir, capsys):
    ledger = Ledger(workdir / "migration-results.json")
    ledger.record(make_entry("1"))
    ledger.record(make_entry("2", success=False))

    assert main(["ledger", "stats"]) == 0

    out = capsys.readouterr().out
    assert "Migrated:  1" in out
    assert "Failed:    1" in out


def test_ledger_list_failed(workdir, capsys):
    ledger = Ledger(workdir / "migration-results.json")
    ledger.record(make_entry("1"))
    ledger.record(make_entry("2", success=False))

    assert main(["ledger", "list", "--failed"]) == 0

    out = capsys.readouterr().out
    assert "Boom" in out
    assert "uid-1" not in out


def test_env_dump_hides_token(workdir, credentials, capsys):
    assert main(["env", "dump"]) == 0

    out = capsys.readouterr().out
    assert "(set)" in out
    assert "tok" not in out.replace("api_token", "")


def test_logs_list_shows_runs(workdir, credentials, fake_client, capsys, monkeypatch):
    monkeypatch.setenv("STREAMPORTER_RUN_ID", "r3")
    main(["migrate", "--csv", "export.csv", "--delay-ms", "0", "--quiet"])
    capsys.readouterr()

    assert main(["logs", "list", "--cmd", "migrate"]) == 0

    out = capsys.readouterr().out
    assert "migrate-r3" in out
    assert "completed" in out
