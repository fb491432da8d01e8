from __future__ import annotations

"""Central logging configuration: rotating JSON-lines file plus a terse console.

Structured fields travel as ``_json_<name>`` attributes on the record
(``extra={"_json_view": ...}``). Failed backend calls add their call name and
cause type through ``remote_error_fields`` so the file log can be filtered by
call without parsing messages.
"""

import json
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from datetime import datetime, timezone
from typing import Any, Dict

from .gateway import RemoteCallError

LOG_DIR_NAME = "logs"
LOG_FILE_BASENAME = "timewarden.log"
MAX_LOG_BYTES = 512_000
LOG_BACKUPS = 5

_HANDLER_TAG = "_timewarden_handler"


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        payload: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).replace(tzinfo=None).isoformat() + "Z",
            "level": record.levelname,
            "msg": record.getMessage(),
            "logger": record.name,
        }
        # Remote jobs log from pool threads
        if record.threadName and record.threadName != "MainThread":
            payload["thread"] = record.threadName
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        for k, v in record.__dict__.items():
            if k.startswith("_json_"):
                payload[k[6:]] = v
        return json.dumps(payload, ensure_ascii=False, default=str)


def remote_error_fields(err: BaseException) -> Dict[str, str]:
    if not isinstance(err, RemoteCallError):
        return {"_json_error": type(err).__name__}
    cause = err.cause if isinstance(err.cause, BaseException) else None
    return {"_json_call": err.call, "_json_cause": type(cause).__name__ if cause else str(err.cause)}


def configure_logging(base_dir: Path, level: int = logging.INFO, backend_url: str | None = None) -> Path:
    log_dir = base_dir / LOG_DIR_NAME
    log_dir.mkdir(parents=True, exist_ok=True)
    logfile = log_dir / LOG_FILE_BASENAME
    root = logging.getLogger()
    root.setLevel(level)
    # Replace only our own handlers when called twice
    for old in [h for h in root.handlers if getattr(h, _HANDLER_TAG, False)]:
        root.removeHandler(old)
        old.close()
    handler = RotatingFileHandler(logfile, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS, encoding="utf-8")
    handler.setFormatter(JsonFormatter())
    ch = logging.StreamHandler()
    ch.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    for h in (handler, ch):
        setattr(h, _HANDLER_TAG, True)
        root.addHandler(h)
    # Per-tick request lines from httpx would drown the log at 1 Hz
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger(__name__).info(
        "logging initialised", extra={"_json_phase": "startup", "_json_backend": backend_url}
    )
    return logfile


__all__ = ["configure_logging", "JsonFormatter", "remote_error_fields"]
