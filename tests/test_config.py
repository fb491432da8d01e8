import json
import logging
from pathlib import Path

import httpx

from timewarden.config import MIN_POLL_INTERVAL_MS, load_config
from timewarden.gateway import DEFAULT_BACKEND_URL, RemoteCallError
from timewarden.logging_setup import JsonFormatter, configure_logging, remote_error_fields


def test_defaults_when_environment_empty():
    cfg = load_config({})
    assert cfg.backend_url == DEFAULT_BACKEND_URL
    assert cfg.poll_interval_ms == 1000
    assert cfg.request_timeout == 5.0
    assert cfg.log_level == logging.INFO
    gw = cfg.gateway_config()
    assert gw.base_url == DEFAULT_BACKEND_URL and gw.timeout == 5.0


def test_environment_overrides(tmp_path: Path):
    cfg = load_config(
        {
            "TIMEWARDEN_BACKEND_URL": "http://localhost:9999",
            "TIMEWARDEN_TIMEOUT": "2.5",
            "TIMEWARDEN_POLL_MS": "500",
            "TIMEWARDEN_DATA_DIR": str(tmp_path),
            "TIMEWARDEN_LOG_LEVEL": "debug",
        }
    )
    assert cfg.backend_url == "http://localhost:9999"
    assert cfg.request_timeout == 2.5
    assert cfg.poll_interval_ms == 500
    assert cfg.data_dir == tmp_path
    assert cfg.log_level == logging.DEBUG


def test_bad_values_fall_back():
    cfg = load_config(
        {
            "TIMEWARDEN_TIMEOUT": "soon",
            "TIMEWARDEN_POLL_MS": "5",
            "TIMEWARDEN_LOG_LEVEL": "chatty",
        }
    )
    assert cfg.request_timeout == 5.0
    assert cfg.poll_interval_ms == MIN_POLL_INTERVAL_MS
    assert cfg.log_level == logging.INFO
    assert load_config({"TIMEWARDEN_POLL_MS": "often"}).poll_interval_ms == 1000


def test_json_formatter_includes_extra_fields():
    record = logging.LogRecord("timewarden.test", logging.WARNING, __file__, 1, "poll %s", ("failed",), None)
    record._json_view = "dashboard"
    payload = json.loads(JsonFormatter().format(record))
    assert payload["msg"] == "poll failed"
    assert payload["level"] == "WARNING"
    assert payload["view"] == "dashboard"
    assert payload["ts"].endswith("Z")


def test_remote_error_fields_name_call_and_cause():
    err = RemoteCallError("get_idle_seconds", httpx.ConnectError("refused"))
    assert remote_error_fields(err) == {"_json_call": "get_idle_seconds", "_json_cause": "ConnectError"}
    assert remote_error_fields(RemoteCallError("toggle_schedule", "HTTP 500"))["_json_cause"] == "HTTP 500"
    assert remote_error_fields(ValueError("x")) == {"_json_error": "ValueError"}


def test_configure_logging_writes_json_lines_and_replaces_own_handlers(tmp_path: Path):
    root = logging.getLogger()
    before = list(root.handlers)
    saved_level = root.level
    try:
        configure_logging(tmp_path, logging.INFO, backend_url="http://127.0.0.1:7420")
        logfile = configure_logging(tmp_path, logging.INFO)
        added = [h for h in root.handlers if h not in before]
        assert len(added) == 2
        logging.getLogger("timewarden.test").warning("poll failed", extra={"_json_call": "get_current_app"})
        for h in added:
            h.flush()
        lines = [json.loads(line) for line in logfile.read_text(encoding="utf-8").splitlines()]
        assert lines[0]["backend"] == "http://127.0.0.1:7420"
        assert lines[-1]["call"] == "get_current_app"
        assert lines[-1]["level"] == "WARNING"
    finally:
        for h in [h for h in root.handlers if h not in before]:
            root.removeHandler(h)
            h.close()
        root.setLevel(saved_level)
