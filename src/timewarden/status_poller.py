from __future__ import annotations

"""Status poller keeping live status and today's usage fresh.

Design:
 - A QTimer fires every ``interval_ms`` (1 s by default) while a view is active,
   plus one immediate fetch on every activation.
 - Each tick runs one job on the invoker: current app + idle seconds, and on the
   dashboard also today's sessions + per-app totals. Snapshots are published only
   once every fetch of the tick succeeded; any failure abandons the whole tick and
   the previous snapshots stand.
 - At most one tick is in flight. A timer fire while one is outstanding is skipped.
 - Each activation bumps a generation counter; results belonging to an older
   generation are dropped, so switching views never applies stale data.
"""

from functools import partial
import logging
from typing import Optional

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from .gateway import RemoteCallError, RemoteGateway
from .logging_setup import remote_error_fields
from .models import AppUsage, StatusSnapshot, UsageSnapshot

logger = logging.getLogger(__name__)

DASHBOARD_VIEW = "dashboard"
SCHEDULER_VIEW = "scheduler"
DEFAULT_INTERVAL_MS = 1000


class StatusPoller(QObject):
    status_changed = pyqtSignal(object)  # StatusSnapshot
    usage_changed = pyqtSignal(object)  # UsageSnapshot
    poll_failed = pyqtSignal(str)
    active_changed = pyqtSignal(bool)

    def __init__(self, gateway: RemoteGateway, invoker, interval_ms: int = DEFAULT_INTERVAL_MS) -> None:
        super().__init__()
        self._gateway = gateway
        self._invoker = invoker
        self._timer = QTimer(self)
        self._timer.setInterval(interval_ms)
        self._timer.timeout.connect(self.poll_now)

        self._view: Optional[str] = None
        self._generation = 0
        self._in_flight = False
        self._skipped_ticks = 0
        self._status = StatusSnapshot()
        self._usage = UsageSnapshot()

    # --- Read-only state -----------------------------------------------
    @property
    def status(self) -> StatusSnapshot:
        return self._status

    @property
    def usage(self) -> UsageSnapshot:
        return self._usage

    @property
    def view(self) -> Optional[str]:
        return self._view

    @property
    def is_active(self) -> bool:
        return self._view is not None

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def skipped_ticks(self) -> int:
        return self._skipped_ticks

    @property
    def total_active_seconds(self) -> int:
        return self._usage.total_seconds

    @property
    def top_app(self) -> Optional[AppUsage]:
        return self._usage.top_app

    # --- Lifecycle ------------------------------------------------------
    def activate(self, view: str = DASHBOARD_VIEW) -> None:
        """Start (or restart) polling for ``view`` with one immediate fetch."""
        self._timer.stop()
        self._generation += 1
        self._in_flight = False
        was_active = self.is_active
        self._view = view
        logger.info("poller activated", extra={"_json_view": view})
        if not was_active:
            self.active_changed.emit(True)
        self._timer.start()
        self.poll_now()

    def deactivate(self) -> None:
        if not self.is_active:
            return
        self._timer.stop()
        self._generation += 1
        self._in_flight = False
        self._view = None
        logger.info("poller deactivated")
        self.active_changed.emit(False)

    # --- Polling --------------------------------------------------------
    def poll_now(self) -> bool:
        """Issue one fetch; returns False when skipped."""
        if not self.is_active:
            return False
        if self._in_flight:
            self._skipped_ticks += 1
            logger.debug("tick skipped; previous fetch still in flight")
            return False
        self._in_flight = True
        generation = self._generation
        with_usage = self._view == DASHBOARD_VIEW
        self._invoker.submit(
            partial(self._fetch, with_usage),
            partial(self._on_fetched, generation),
            partial(self._on_failed, generation),
        )
        return True

    def _fetch(self, with_usage: bool) -> tuple[StatusSnapshot, Optional[UsageSnapshot]]:
        # Runs on the invoker's worker; must not touch poller state
        status = StatusSnapshot(
            current_app=self._gateway.get_current_app(),
            idle_seconds=self._gateway.get_idle_seconds(),
        )
        if not with_usage:
            return status, None
        sessions = self._gateway.get_today_sessions()
        totals = self._gateway.get_app_totals_today()
        return status, UsageSnapshot.build(sessions, totals)

    def _on_fetched(self, generation: int, result: tuple[StatusSnapshot, Optional[UsageSnapshot]]) -> None:
        if generation != self._generation:
            return
        self._in_flight = False
        status, usage = result
        self._status = status
        self.status_changed.emit(status)
        if usage is not None:
            self._usage = usage
            self.usage_changed.emit(usage)

    def _on_failed(self, generation: int, error: RemoteCallError) -> None:
        if generation != self._generation:
            return
        self._in_flight = False
        logger.warning("status poll failed: %s", error, extra={**remote_error_fields(error), "_json_view": self._view})
        self.poll_failed.emit(str(error))


__all__ = ["StatusPoller", "DASHBOARD_VIEW", "SCHEDULER_VIEW", "DEFAULT_INTERVAL_MS"]
