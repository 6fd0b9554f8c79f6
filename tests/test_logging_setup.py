"""Tests for the JSONL logging bootstrap."""

import json
import logging

from bundle_downloader.logging_setup import JsonlHandler
from bundle_downloader.logging_setup import init_json_logging


def _read_lines(path):
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]


def test_writes_one_json_object_per_record(tmp_path):
    log_file = tmp_path / "logs" / "out.jsonl"
    init_json_logging(log_file, "debug")

    logger = logging.getLogger("bundle_downloader.test")
    logger.debug("cache miss", extra={"bundle": "forest"})
    logger.info("synced %d sources", 2)

    records = _read_lines(log_file)
    assert [r["message"] for r in records] == ["cache miss", "synced 2 sources"]
    assert records[0]["lvl"] == "DEBUG"
    assert records[0]["logger"] == "bundle_downloader.test"
    assert records[0]["bundle"] == "forest"
    assert records[1]["schema"]["name"] == "bundle_downloader.log"


def test_reinitializing_replaces_handler(tmp_path):
    init_json_logging(tmp_path / "a.jsonl")
    init_json_logging(tmp_path / "b.jsonl")

    handlers = [h for h in logging.getLogger().handlers if isinstance(h, JsonlHandler)]
    assert len(handlers) == 1
    assert handlers[0].path == tmp_path / "b.jsonl"


def test_exception_text_is_recorded(tmp_path):
    log_file = tmp_path / "out.jsonl"
    init_json_logging(log_file)

    try:
        raise ValueError("bad listing")
    except ValueError:
        logging.getLogger("bundle_downloader.test").exception("sync failed")

    record = _read_lines(log_file)[0]
    assert record["lvl"] == "ERROR"
    assert "ValueError: bad listing" in record["exc"]
