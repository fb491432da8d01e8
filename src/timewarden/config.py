from __future__ import annotations

"""Runtime configuration read from ``TIMEWARDEN_*`` environment variables."""

from dataclasses import dataclass
import logging
import os
from pathlib import Path
from typing import Mapping, Optional

from .gateway import DEFAULT_BACKEND_URL, GatewayConfig
from .status_poller import DEFAULT_INTERVAL_MS

MIN_POLL_INTERVAL_MS = 100


@dataclass(slots=True)
class AppConfig:
    backend_url: str = DEFAULT_BACKEND_URL
    request_timeout: float = 5.0
    poll_interval_ms: int = DEFAULT_INTERVAL_MS
    data_dir: Path = Path.home() / ".timewarden"
    log_level: int = logging.INFO

    def gateway_config(self) -> GatewayConfig:
        return GatewayConfig(base_url=self.backend_url, timeout=self.request_timeout)


def load_config(environ: Optional[Mapping[str, str]] = None) -> AppConfig:
    env = os.environ if environ is None else environ
    defaults = AppConfig()
    timeout = _float(env.get("TIMEWARDEN_TIMEOUT"), defaults.request_timeout)
    poll_ms = _int(env.get("TIMEWARDEN_POLL_MS"), defaults.poll_interval_ms)
    level_name = env.get("TIMEWARDEN_LOG_LEVEL", "").strip().upper()
    level = logging.getLevelName(level_name) if level_name else defaults.log_level
    data_dir = env.get("TIMEWARDEN_DATA_DIR")
    return AppConfig(
        backend_url=env.get("TIMEWARDEN_BACKEND_URL") or defaults.backend_url,
        request_timeout=timeout if timeout > 0 else defaults.request_timeout,
        poll_interval_ms=max(MIN_POLL_INTERVAL_MS, poll_ms),
        data_dir=Path(data_dir).expanduser() if data_dir else defaults.data_dir,
        log_level=level if isinstance(level, int) else defaults.log_level,
    )


def _int(raw: str | None, fallback: int) -> int:
    try:
        return int(raw) if raw is not None else fallback
    except ValueError:
        return fallback


def _float(raw: str | None, fallback: float) -> float:
    try:
        return float(raw) if raw is not None else fallback
    except ValueError:
        return fallback


__all__ = ["AppConfig", "load_config"]
