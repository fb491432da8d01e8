from __future__ import annotations

"""ScheduleStore holds the local schedule collection with change signals.

Mutations go through the backend; the local list is only touched as follows:
 - refresh replaces it wholesale with the backend's list.
 - toggle is applied optimistically and rolled back if the call fails.
 - delete removes the entry only after the backend confirms.
 - create/update never touch it directly; a successful save triggers a refresh
   so ids are always assigned by the backend.
"""

from dataclasses import replace
from functools import partial
import logging
from typing import Callable, Dict, List, Optional

from PyQt6.QtCore import QObject, pyqtSignal

from .gateway import RemoteCallError, RemoteGateway
from .logging_setup import remote_error_fields
from .models import Schedule
from .schedules import normalize_schedule

logger = logging.getLogger(__name__)

DoneCallback = Callable[[bool], None]
ConfirmCallback = Callable[[Schedule], bool]


class ScheduleStore(QObject):
    changed = pyqtSignal()
    loading_changed = pyqtSignal(bool)
    error = pyqtSignal(str)  # transient failures (toast)
    alert = pyqtSignal(str)  # failed save/delete (modal)

    def __init__(self, gateway: RemoteGateway, invoker, *, rollback_failed_toggle: bool = True):
        super().__init__()
        self._gateway = gateway
        self._invoker = invoker
        self._rollback_failed_toggle = rollback_failed_toggle
        self._schedules: List[Schedule] = []
        self._loading = False
        self._refresh_seq = 0
        # Last backend-confirmed enabled flag and outstanding toggle count per id
        self._confirmed: Dict[int, bool] = {}
        self._pending_toggles: Dict[int, int] = {}

    # --- Access ---------------------------------------------------------
    def schedules(self) -> List[Schedule]:
        return [replace(s, days=list(s.days), expected_apps=list(s.expected_apps)) for s in self._schedules]

    def get(self, schedule_id: int) -> Optional[Schedule]:
        s = self._find(schedule_id)
        return replace(s, days=list(s.days), expected_apps=list(s.expected_apps)) if s else None

    @property
    def is_loading(self) -> bool:
        return self._loading

    def _find(self, schedule_id: int) -> Optional[Schedule]:
        return next((s for s in self._schedules if s.id == schedule_id), None)

    def _set_loading(self, loading: bool) -> None:
        if loading != self._loading:
            self._loading = loading
            self.loading_changed.emit(loading)

    # --- Loading --------------------------------------------------------
    def refresh(self, on_done: DoneCallback | None = None) -> None:
        self._refresh_seq += 1
        seq = self._refresh_seq
        self._set_loading(True)
        self._invoker.submit(
            self._gateway.get_all_schedules,
            partial(self._on_refreshed, seq, on_done),
            partial(self._on_refresh_failed, seq, on_done),
        )

    def _on_refreshed(self, seq: int, on_done: DoneCallback | None, schedules: List[Schedule]) -> None:
        if seq != self._refresh_seq:
            logger.debug("discarding stale schedule list (seq %s < %s)", seq, self._refresh_seq)
            _notify(on_done, True)
            return
        self._schedules = list(schedules)
        self._confirmed = {s.id: s.enabled for s in self._schedules if s.id is not None}
        self._set_loading(False)
        self.changed.emit()
        _notify(on_done, True)

    def _on_refresh_failed(self, seq: int, on_done: DoneCallback | None, err: RemoteCallError) -> None:
        logger.warning("failed to fetch schedules: %s", err, extra=remote_error_fields(err))
        if seq == self._refresh_seq:
            self._set_loading(False)
            self.error.emit("Failed to load schedules")
        _notify(on_done, False)

    # --- Mutations ------------------------------------------------------
    def save(self, schedule: Schedule, on_done: DoneCallback | None = None) -> Optional[str]:
        """Create a draft or update a persisted schedule. Returns the call used, or None if rejected."""
        if not schedule.name.strip():
            self.error.emit("Name required")
            _notify(on_done, False)
            return None
        final = normalize_schedule(schedule)
        if final.id is not None:
            call, job = "update", partial(self._gateway.update_schedule, final)
        else:
            call, job = "create", partial(self._gateway.create_schedule, final)
        self._invoker.submit(
            job,
            partial(self._on_saved, call, on_done),
            partial(self._on_save_failed, call, on_done),
        )
        return call

    def _on_saved(self, call: str, on_done: DoneCallback | None, _result) -> None:
        logger.info("schedule saved", extra={"_json_call": call})
        _notify(on_done, True)
        self.refresh()

    def _on_save_failed(self, call: str, on_done: DoneCallback | None, err: RemoteCallError) -> None:
        logger.error("failed to %s schedule: %s", call, err, extra=remote_error_fields(err))
        self.alert.emit("Failed to save schedule. Check logs for details.")
        _notify(on_done, False)

    def delete(
        self,
        schedule_id: int,
        confirm: ConfirmCallback,
        on_done: DoneCallback | None = None,
    ) -> bool:
        """Delete after ``confirm`` approves the target.

        ``confirm`` is always asked before any remote call; returns False when
        the id is unknown or the user declined.
        """
        target = self._find(schedule_id)
        if target is None:
            return False
        if not confirm(target):
            return False
        self._invoker.submit(
            partial(self._gateway.delete_schedule, schedule_id),
            partial(self._on_deleted, schedule_id, on_done),
            partial(self._on_delete_failed, schedule_id, on_done),
        )
        return True

    def _on_deleted(self, schedule_id: int, on_done: DoneCallback | None, _result) -> None:
        before = len(self._schedules)
        self._schedules = [s for s in self._schedules if s.id != schedule_id]
        self._confirmed.pop(schedule_id, None)
        if len(self._schedules) != before:
            self.changed.emit()
        _notify(on_done, True)

    def _on_delete_failed(self, schedule_id: int, on_done: DoneCallback | None, err: RemoteCallError) -> None:
        logger.error("failed to delete schedule %s: %s", schedule_id, err, extra=remote_error_fields(err))
        self.alert.emit("Failed to delete schedule")
        _notify(on_done, False)

    def toggle(self, schedule_id: int, enabled: bool, on_done: DoneCallback | None = None) -> bool:
        target = self._find(schedule_id)
        if target is None:
            return False
        self._confirmed.setdefault(schedule_id, target.enabled)
        self._pending_toggles[schedule_id] = self._pending_toggles.get(schedule_id, 0) + 1
        target.enabled = enabled
        self.changed.emit()
        self._invoker.submit(
            partial(self._gateway.toggle_schedule, schedule_id, enabled),
            partial(self._on_toggled, schedule_id, enabled, on_done),
            partial(self._on_toggle_failed, schedule_id, on_done),
        )
        return True

    def _settle_toggle(self, schedule_id: int) -> bool:
        """Drop one outstanding toggle for ``schedule_id``; True once none are left."""
        left = self._pending_toggles.get(schedule_id, 1) - 1
        if left > 0:
            self._pending_toggles[schedule_id] = left
            return False
        self._pending_toggles.pop(schedule_id, None)
        return True

    def _on_toggled(self, schedule_id: int, enabled: bool, on_done: DoneCallback | None, _result) -> None:
        self._confirmed[schedule_id] = enabled
        self._settle_toggle(schedule_id)
        _notify(on_done, True)

    def _on_toggle_failed(self, schedule_id: int, on_done: DoneCallback | None, err: RemoteCallError) -> None:
        logger.error("failed to toggle schedule %s: %s", schedule_id, err, extra=remote_error_fields(err))
        idle = self._settle_toggle(schedule_id)
        if self._rollback_failed_toggle and idle:
            # Restore the backend's last known value, not the one seen when this toggle started
            target = self._find(schedule_id)
            confirmed = self._confirmed.get(schedule_id)
            if target is not None and confirmed is not None and target.enabled != confirmed:
                target.enabled = confirmed
                self.changed.emit()
        self.error.emit("Failed to toggle schedule")
        _notify(on_done, False)


def _notify(on_done: DoneCallback | None, ok: bool) -> None:
    if on_done is not None:
        on_done(ok)


__all__ = ["ScheduleStore"]
