from __future__ import annotations

"""Pure editing helpers for schedule drafts.

Every function returns a new ``Schedule`` and leaves its argument untouched.
Malformed input is passed through or ignored rather than rejected; the editor
dialog and the store decide what to do with the result.
"""

from dataclasses import replace
from typing import Any

from .models import DAYS_OF_WEEK, Schedule

CHECK_INTERVAL_RANGE = (1, 60)
GRACE_PERIOD_RANGE = (0, 300)
DEFAULT_CHECK_INTERVAL = 5
DEFAULT_GRACE_PERIOD = 30


def new_draft(name: str = "") -> Schedule:
    return Schedule(
        id=None,
        name=name,
        start_time="09:00:00",
        end_time="17:00:00",
        days=list(DAYS_OF_WEEK[:5]),
        expected_apps=[],
        check_interval_secs=DEFAULT_CHECK_INTERVAL,
        grace_period_secs=DEFAULT_GRACE_PERIOD,
        enabled=True,
    )


def normalize_time(raw: str) -> str:
    """Expand ``HH:MM`` to ``HH:MM:SS``; anything else is returned as-is."""
    if len(raw) == 5:
        return f"{raw}:00"
    return raw


def sort_days(days: list[str]) -> list[str]:
    # Unknown tokens sort last, in their original relative order
    order = {d: i for i, d in enumerate(DAYS_OF_WEEK)}
    return sorted(days, key=lambda d: order.get(d, len(DAYS_OF_WEEK)))


def toggle_day(schedule: Schedule, day: str) -> Schedule:
    if day in schedule.days:
        days = [d for d in schedule.days if d != day]
    else:
        days = [*schedule.days, day]
    return replace(schedule, days=sort_days(days))


def add_app(schedule: Schedule, keyword: str) -> Schedule:
    keyword = keyword.strip()
    if not keyword:
        return schedule
    return replace(schedule, expected_apps=[*schedule.expected_apps, keyword])


def remove_app(schedule: Schedule, index: int) -> Schedule:
    if not (0 <= index < len(schedule.expected_apps)):
        return schedule
    apps = [a for i, a in enumerate(schedule.expected_apps) if i != index]
    return replace(schedule, expected_apps=apps)


def parse_seconds(raw: Any, fallback: int) -> int:
    """Parse user input as whole seconds; zero, blank or non-numeric yields ``fallback``."""
    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError):
        return fallback
    return value or fallback


def _clamp(value: int, bounds: tuple[int, int]) -> int:
    lo, hi = bounds
    return max(lo, min(hi, value))


def normalize_schedule(schedule: Schedule) -> Schedule:
    """Canonical form sent to the backend on create/update."""
    return replace(
        schedule,
        name=schedule.name.strip(),
        start_time=normalize_time(schedule.start_time),
        end_time=normalize_time(schedule.end_time),
        days=sort_days(list(dict.fromkeys(schedule.days))),
        expected_apps=list(schedule.expected_apps),
        check_interval_secs=_clamp(
            parse_seconds(schedule.check_interval_secs, DEFAULT_CHECK_INTERVAL), CHECK_INTERVAL_RANGE
        ),
        grace_period_secs=_clamp(parse_seconds(schedule.grace_period_secs, 0), GRACE_PERIOD_RANGE),
    )


__all__ = [
    "CHECK_INTERVAL_RANGE",
    "GRACE_PERIOD_RANGE",
    "new_draft",
    "normalize_time",
    "sort_days",
    "toggle_day",
    "add_app",
    "remove_app",
    "parse_seconds",
    "normalize_schedule",
]
