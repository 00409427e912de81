import logging
import os
import time

from streamporter.logger import get_logger, init_logging
from streamporter.logger.retention import enforce_retention


def test_init_logging_writes_under_command_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("STREAMPORTER_RUN_ID", "2024-05-01_10-00-00")

    path = init_logging("migrate")
    get_logger("streamporter.test").info("hello log")

    for h in logging.getLogger().handlers:
        h.flush()

    assert path == tmp_path / "logs" / "migrate" / "migrate-2024-05-01_10-00-00.log"
    assert "hello log" in path.read_text(encoding="utf-8")


def test_init_logging_is_idempotent(monkeypatch):
    monkeypatch.setenv("STREAMPORTER_RUN_ID", "r1")

    first = init_logging("captions")
    second = init_logging("captions")

    file_handlers = [
        h for h in logging.getLogger().handlers if isinstance(h, logging.FileHandler)
    ]
    assert first == second
    assert len(file_handlers) == 1


def test_repoints_file_handler_for_new_command(monkeypatch):
    monkeypatch.setenv("STREAMPORTER_RUN_ID", "r1")

    init_logging("migrate")
    second = init_logging("captions")

    file_handlers = [
        h for h in logging.getLogger().handlers if isinstance(h, logging.FileHandler)
    ]
    assert len(file_handlers) == 1
    assert file_handlers[0].baseFilename == str(second)


def test_quiet_has_no_console_handler(monkeypatch):
    monkeypatch.setenv("STREAMPORTER_QUIET", "1")

    init_logging("migrate")

    handlers = logging.getLogger().handlers
    assert all(isinstance(h, logging.FileHandler) for h in handlers)


def test_verbose_forces_debug(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    monkeypatch.setenv("STREAMPORTER_VERBOSE", "1")

    init_logging("migrate")

    assert logging.getLogger().level == logging.DEBUG


def test_retention_keeps_newest(tmp_path):
    now = time.time()
    for i in range(5):
        p = tmp_path / f"run-{i}.log"
        p.write_text("x", encoding="utf-8")
        os.utime(p, (now - (5 - i) * 60, now - (5 - i) * 60))
    (tmp_path / "notes.txt").write_text("keep", encoding="utf-8")

    removed = enforce_retention(tmp_path, keep=2)

    assert sorted(p.name for p in removed) == ["run-0.log", "run-1.log", "run-2.log"]
    assert sorted(p.name for p in tmp_path.iterdir()) == [
        "notes.txt",
        "run-3.log",
        "run-4.log",
    ]


def test_retention_zero_keeps_everything(tmp_path):
    for i in range(3):
        (tmp_path / f"run-{i}.log").write_text("x", encoding="utf-8")

    enforce_retention(tmp_path, keep=0)

    assert len(list(tmp_path.glob("*.log"))) == 3
