from conftest import make_entry
from streamporter.captions.matcher import CaptionMatch, MatchResult
from streamporter.captions.uploader import CaptionRunLog, CaptionUploader
from streamporter.providers.base import RemoteOutcome

SRT = "1\r\n00:00:01,000 --> 00:00:02,500\r\nShalom\r\n"


class FakeUpload:
    def __init__(self, outcomes=None):
        self.outcomes = outcomes or {}
        self.calls = []

    def __call__(self, remote_id, vtt_text, language, filename):
        self.calls.append((remote_id, vtt_text, language, filename))
        answer = self.outcomes.get(remote_id)
        if isinstance(answer, Exception):
            raise answer
        return answer or RemoteOutcome.success(payload={"success": True})


def _match(file_name, external_id, name=None):
    return CaptionMatch(file_name, make_entry(external_id, name=name))


def _setup(tmp_path, *names):
    caption_dir = tmp_path / "caption"
    caption_dir.mkdir()
    for n in names:
        (caption_dir / n).write_text(SRT, encoding="utf-8")
    return caption_dir


def test_upload_converts_to_vtt(tmp_path):
    caption_dir = _setup(tmp_path, "Intro.srt")
    upload = FakeUpload()
    uploader = CaptionUploader(upload, caption_dir, language="he", delay_ms=0)

    summary = uploader.run(MatchResult(matched=[_match("Intro.srt", "1")]), 1)

    assert summary.succeeded == 1
    remote_id, vtt, language, filename = upload.calls[0]
    assert remote_id == "uid-1"
    assert language == "he"
    assert filename == "Intro.vtt"
    assert vtt == "WEBVTT\n\n1\n00:00:01.000 --> 00:00:02.500\nShalom\n"


def test_run_log_blocks(tmp_path):
    caption_dir = _setup(tmp_path, "a.srt", "b.srt", "c.srt")
    upload = FakeUpload(
        {
            "uid-2": RemoteOutcome.rejected(
                ["Invalid caption"],
                payload={"success": False, "errors": [{"message": "Invalid caption"}]},
            ),
            "uid-3": RuntimeError("connection reset"),
        }
    )
    run_log = CaptionRunLog(tmp_path / "caption-upload.log")
    run_log.start("he")
    uploader = CaptionUploader(
        upload, caption_dir, language="he", delay_ms=0, run_log=run_log
    )
    result = MatchResult(
        matched=[_match("a.srt", "1"), _match("b.srt", "2"), _match("c.srt", "3")],
        unmatched=["orphan.srt"],
    )

    summary = uploader.run(result, total_files=4)

    assert (summary.succeeded, summary.failed, summary.unmatched) == (1, 2, 1)

    text = run_log.path.read_text(encoding="utf-8")
    assert text.startswith("=== Caption Upload Log - ")
    assert "Language: he" in text
    assert "[OK] a.srt -> uid-1" in text
    assert "[FAIL] b.srt -> uid-2" in text
    assert "Invalid caption" in text
    assert "[ERROR] c.srt -> uid-3" in text
    assert "connection reset" in text
    assert "RuntimeError" in text
    assert "--- Summary ---" in text
    assert "Unmatched : 1" in text
    assert "  - orphan.srt" in text


def test_missing_file_counts_as_failure(tmp_path):
    caption_dir = _setup(tmp_path)
    upload = FakeUpload()
    uploader = CaptionUploader(upload, caption_dir, language="he", delay_ms=0)

    summary = uploader.run(MatchResult(matched=[_match("gone.srt", "1")]), 1)

    assert summary.failed == 1
    assert upload.calls == []


def test_dry_run_makes_no_calls_and_writes_no_log(tmp_path):
    caption_dir = _setup(tmp_path, "a.srt")
    upload = FakeUpload()
    run_log = CaptionRunLog(tmp_path / "caption-upload.log")
    uploader = CaptionUploader(
        upload, caption_dir, language="he", run_log=run_log, dry_run=True
    )

    summary = uploader.run(MatchResult(matched=[_match("a.srt", "1")]), 1)

    assert upload.calls == []
    assert summary.planned == 1
    assert not run_log.path.exists()


def test_sleeps_between_uploads(tmp_path):
    caption_dir = _setup(tmp_path, "a.srt", "b.srt")
    sleeps = []
    uploader = CaptionUploader(
        FakeUpload(), caption_dir, language="en", delay_ms=250, sleep=sleeps.append
    )

    uploader.run(MatchResult(matched=[_match("a.srt", "1"), _match("b.srt", "2")]), 2)

    assert sleeps == [0.25]


def test_bom_is_stripped(tmp_path):
    caption_dir = tmp_path / "caption"
    caption_dir.mkdir()
    (caption_dir / "a.srt").write_text("\ufeff" + SRT, encoding="utf-8")
    upload = FakeUpload()

    CaptionUploader(upload, caption_dir, language="he", delay_ms=0).run(
        MatchResult(matched=[_match("a.srt", "1")]), 1
    )

    assert upload.calls[0][1].startswith("WEBVTT\n\n1\n")
