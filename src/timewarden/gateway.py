from __future__ import annotations

"""HTTP gateway to the Timewarden backend.

One method per backend call. Each either returns a typed result or raises
``RemoteCallError`` wrapping the original cause. There are no retries and no
caching here; callers decide what a failure means for their state.

Wire format: ``POST {base_url}/invoke/{call}`` with a JSON object of named
arguments; the JSON response body is the result. Tests mock HTTP transport.
"""

from dataclasses import dataclass
import logging
from typing import Any, Optional

import httpx

from .models import AppUsage, Schedule, Session

logger = logging.getLogger(__name__)

DEFAULT_BACKEND_URL = "http://127.0.0.1:7420"


class RemoteCallError(Exception):
    def __init__(self, call: str, cause: BaseException | str):
        self.call = call
        self.cause = cause
        super().__init__(f"{call} failed: {cause}")


@dataclass(slots=True)
class GatewayConfig:
    base_url: str = DEFAULT_BACKEND_URL
    timeout: float = 5.0


class RemoteGateway:
    def __init__(self, config: GatewayConfig | None = None, transport: httpx.BaseTransport | None = None):
        self._config = config or GatewayConfig()
        self._client = httpx.Client(
            base_url=self._config.base_url.rstrip("/"),
            timeout=self._config.timeout,
            transport=transport,
        )

    def close(self):  # pragma: no cover simple
        self._client.close()

    # Transport ------------------------------------------------------------
    def _invoke(self, call: str, args: dict[str, Any] | None = None) -> Any:
        try:
            resp = self._client.post(f"/invoke/{call}", json=args or {})
        except httpx.HTTPError as e:
            raise RemoteCallError(call, e) from e
        if resp.status_code >= 400:
            raise RemoteCallError(call, f"HTTP {resp.status_code}: {resp.text[:200]}")
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise RemoteCallError(call, e) from e

    def _decode(self, call: str, args: dict[str, Any] | None, decoder):
        data = self._invoke(call, args)
        try:
            return decoder(data)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning("malformed %s response: %r", call, data)
            raise RemoteCallError(call, e) from e

    # Live status ----------------------------------------------------------
    def get_current_app(self) -> Optional[str]:
        def decode(data):
            if data is not None and not isinstance(data, str):
                raise TypeError(f"expected string or null, got {type(data).__name__}")
            return data or None

        return self._decode("get_current_app", None, decode)

    def get_idle_seconds(self) -> int:
        def decode(data):
            if isinstance(data, bool) or not isinstance(data, (int, float)) or data < 0:
                raise ValueError(f"invalid idle seconds: {data!r}")
            return int(data)

        return self._decode("get_idle_seconds", None, decode)

    # Usage ----------------------------------------------------------------
    def get_today_sessions(self) -> list[Session]:
        return self._decode(
            "get_today_sessions", None, lambda data: [Session.from_dict(s) for s in _as_list(data)]
        )

    def get_app_totals_today(self) -> list[AppUsage]:
        def decode(data):
            totals = []
            for item in _as_list(data):
                name, seconds = item
                totals.append(AppUsage(name=str(name), seconds=int(seconds)))
            return totals

        return self._decode("get_app_totals_today", None, decode)

    # Schedules ------------------------------------------------------------
    def get_all_schedules(self) -> list[Schedule]:
        return self._decode(
            "get_all_schedules", None, lambda data: [Schedule.from_dict(s) for s in _as_list(data)]
        )

    def create_schedule(self, schedule: Schedule) -> None:
        payload = schedule.to_dict()
        payload.pop("id", None)
        self._invoke("create_schedule", {"schedule": payload})

    def update_schedule(self, schedule: Schedule) -> None:
        assert schedule.id is not None, "Schedule must have id to update"
        self._invoke("update_schedule", {"schedule": schedule.to_dict()})

    def delete_schedule(self, schedule_id: int) -> None:
        self._invoke("delete_schedule", {"id": schedule_id})

    def toggle_schedule(self, schedule_id: int, enabled: bool) -> None:
        self._invoke("toggle_schedule", {"id": schedule_id, "enabled": enabled})


def _as_list(data: Any) -> list:
    if not isinstance(data, list):
        raise TypeError(f"expected list, got {type(data).__name__}")
    return data


__all__ = ["RemoteGateway", "GatewayConfig", "RemoteCallError", "DEFAULT_BACKEND_URL"]
