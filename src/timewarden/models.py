from __future__ import annotations

"""Dataclass models for schedules, sessions and the polled snapshots."""

import re
from dataclasses import dataclass, field
from typing import Any, Optional

DAYS_OF_WEEK = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
IDLE_THRESHOLD_SECS = 300

_APP_SUFFIX_RE = re.compile(r"\.(exe|app|bat|cmd|sh)$", re.IGNORECASE)


@dataclass(slots=True)
class Schedule:
    id: Optional[int]
    name: str
    start_time: str  # HH:MM:SS
    end_time: str  # HH:MM:SS
    days: list[str] = field(default_factory=list)
    expected_apps: list[str] = field(default_factory=list)
    check_interval_secs: int = 5
    grace_period_secs: int = 30
    enabled: bool = True

    @property
    def is_draft(self) -> bool:
        return self.id is None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "days": list(self.days),
            "expected_apps": list(self.expected_apps),
            "check_interval_secs": self.check_interval_secs,
            "grace_period_secs": self.grace_period_secs,
            "enabled": self.enabled,
        }
        if self.id is not None:
            data["id"] = self.id
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Schedule":
        raw_id = data.get("id")
        return cls(
            id=int(raw_id) if raw_id is not None else None,
            name=str(data["name"]),
            start_time=str(data["start_time"]),
            end_time=str(data["end_time"]),
            days=[str(d) for d in data.get("days", [])],
            expected_apps=[str(a) for a in data.get("expected_apps", [])],
            check_interval_secs=int(data.get("check_interval_secs", 5)),
            grace_period_secs=int(data.get("grace_period_secs", 30)),
            enabled=bool(data.get("enabled", True)),
        )


@dataclass(slots=True, frozen=True)
class Session:
    id: int
    app_id: str
    start_time: str
    app_name: Optional[str] = None
    end_time: Optional[str] = None
    duration_seconds: Optional[int] = None
    is_idle: bool = False

    @property
    def display_name(self) -> str:
        return clean_app_name(self.app_name or self.app_id)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Session":
        duration = data.get("duration_seconds")
        return cls(
            id=int(data["id"]),
            app_id=str(data["app_id"]),
            start_time=str(data["start_time"]),
            app_name=data.get("app_name"),
            end_time=data.get("end_time"),
            duration_seconds=int(duration) if duration is not None else None,
            is_idle=bool(data.get("is_idle", False)),
        )


@dataclass(slots=True, frozen=True)
class AppUsage:
    name: str
    seconds: int

    @property
    def display_name(self) -> str:
        return clean_app_name(self.name)


@dataclass(slots=True, frozen=True)
class StatusSnapshot:
    current_app: Optional[str] = None
    idle_seconds: int = 0

    @property
    def is_idle(self) -> bool:
        return self.idle_seconds > IDLE_THRESHOLD_SECS

    @property
    def label(self) -> str:
        if not self.current_app:
            return "Inactive"
        if self.is_idle:
            return "Idle"
        return f"Tracking: {clean_app_name(self.current_app)}"


@dataclass(slots=True, frozen=True)
class UsageSnapshot:
    """Today's sessions (most recent first) and per-app totals as ranked by the backend."""

    sessions: tuple[Session, ...] = ()
    app_totals: tuple[AppUsage, ...] = ()
    total_seconds: int = 0

    @classmethod
    def build(cls, sessions: list[Session], app_totals: list[AppUsage]) -> "UsageSnapshot":
        return cls(
            sessions=tuple(reversed(sessions)),
            app_totals=tuple(app_totals),
            total_seconds=sum(u.seconds for u in app_totals),
        )

    @property
    def top_app(self) -> Optional[AppUsage]:
        return self.app_totals[0] if self.app_totals else None

    def top_apps(self, limit: int = 5) -> tuple[AppUsage, ...]:
        return tuple(self.app_totals[:limit])

    def recent_sessions(self, limit: int = 10) -> tuple[Session, ...]:
        return self.sessions[:limit]


def clean_app_name(name: str) -> str:
    return _APP_SUFFIX_RE.sub("", name)


def format_duration(seconds: int) -> str:
    h = seconds // 3600
    m = (seconds % 3600) // 60
    if h > 0:
        return f"{h}h {m}m"
    return f"{m}m"


def format_session_duration(seconds: int) -> str:
    h = seconds // 3600
    m = (seconds % 3600) // 60
    s = seconds % 60
    if h > 0:
        return f"{h}h {m}m {s}s"
    if m > 0:
        return f"{m}m {s}s"
    return f"{s}s"


__all__ = [
    "DAYS_OF_WEEK",
    "IDLE_THRESHOLD_SECS",
    "Schedule",
    "Session",
    "AppUsage",
    "StatusSnapshot",
    "UsageSnapshot",
    "clean_app_name",
    "format_duration",
    "format_session_duration",
]
