from __future__ import annotations

import io
import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from storeops_client_sdk.telemetry import TelemetryLogger, build_event, list_fetch_event


def test_build_event_rejects_unknown_category() -> None:
    with pytest.raises(ValueError):
        build_event(category="metrics", name="x", module="products", action="load")


@pytest.mark.parametrize("key", ["search", "email", "Authorization"])
def test_build_event_rejects_sensitive_context(key: str) -> None:
    with pytest.raises(ValueError):
        build_event(category="navigation", name="x", module="products", action="load", context={key: "v"})


def test_list_fetch_event_maps_outcomes() -> None:
    hit = list_fetch_event(module="products", outcome="cache_hit", page=2, scope_id="store-1")
    failed = list_fetch_event(
        module="sales",
        outcome="failed",
        page=1,
        scope_id="store-1",
        duration_ms=40,
        error_code="SERVER_ERROR",
    )

    assert (hit.category, hit.success, hit.action) == ("cache", True, "products_list.load")
    assert (failed.category, failed.success, failed.error_code) == ("api_call_result", False, "SERVER_ERROR")
    assert failed.context == {"page": 1, "scope_id": "store-1"}

    with pytest.raises(ValueError):
        list_fetch_event(module="products", outcome="maybe", page=1, scope_id=None)


def test_disabled_logger_writes_nothing(tmp_path: Path) -> None:
    log_file = tmp_path / "events.jsonl"
    logger = TelemetryLogger(app_name="storeops", enabled=False, log_file=log_file)

    assert logger.emit(list_fetch_event(module="products", outcome="settled", page=1, scope_id="s")) is False
    assert not log_file.exists()


def test_enabled_logger_writes_jsonl_and_stdout(tmp_path: Path) -> None:
    log_file = tmp_path / "nested" / "events.jsonl"
    stream = io.StringIO()
    logger = TelemetryLogger(
        app_name="storeops",
        enabled=True,
        log_file=log_file,
        stdout_sink=True,
        stdout_stream=stream,
        keep_last=1,
    )
    stamp = datetime(2026, 1, 2, tzinfo=timezone.utc)

    logger.emit(build_event(category="navigation", name="page_change", module="products", action="next", now=stamp))
    logger.emit(build_event(category="cache", name="hit", module="products", action="load", now=stamp))

    lines = log_file.read_text(encoding="utf-8").splitlines()
    assert [json.loads(line)["category"] for line in lines] == ["navigation", "cache"]
    assert json.loads(lines[0])["timestamp_utc"] == "2026-01-02T00:00:00+00:00"
    assert json.loads(lines[0])["app_name"] == "storeops"
    assert stream.getvalue().count("\n") == 2
    assert [event["name"] for event in logger.emitted] == ["hit"]


def test_enabled_flag_defaults_to_environment(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("STOREOPS_TELEMETRY_ENABLED", "yes")
    assert TelemetryLogger(app_name="a", log_file=tmp_path / "a.jsonl").enabled is True

    monkeypatch.setenv("STOREOPS_TELEMETRY_ENABLED", "0")
    assert TelemetryLogger(app_name="a", log_file=tmp_path / "a.jsonl").enabled is False
