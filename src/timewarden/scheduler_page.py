from __future__ import annotations

"""Scheduler page: list, toggle, edit and delete schedules."""

from PyQt6.QtCore import Qt, QTime
from PyQt6.QtGui import QKeySequence, QShortcut
from PyQt6.QtWidgets import (
    QWidget,
    QVBoxLayout,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QTableWidget,
    QTableWidgetItem,
    QCheckBox,
    QDialog,
    QFormLayout,
    QLineEdit,
    QTimeEdit,
    QSpinBox,
    QListWidget,
    QDialogButtonBox,
    QMessageBox,
)

from .models import DAYS_OF_WEEK, Schedule
from .schedule_store import ScheduleStore
from .schedules import (
    CHECK_INTERVAL_RANGE,
    GRACE_PERIOD_RANGE,
    add_app,
    new_draft,
    normalize_time,
    remove_app,
    toggle_day,
)
from .toast import ERROR, INFO, show_toast


class ScheduleDialog(QDialog):  # pragma: no cover UI heavy
    def __init__(self, parent: QWidget, schedule: Schedule | None = None):
        super().__init__(parent)
        self.setWindowTitle("Edit Schedule" if schedule else "New Schedule")
        self._draft = schedule or new_draft()

        self.name_edit = QLineEdit(self._draft.name)
        self.name_edit.setPlaceholderText("e.g., Work Hours")
        self.start_edit = QTimeEdit(QTime.fromString(self._draft.start_time[:5], "HH:mm"))
        self.end_edit = QTimeEdit(QTime.fromString(self._draft.end_time[:5], "HH:mm"))
        for w in (self.start_edit, self.end_edit):
            w.setDisplayFormat("HH:mm")

        days_row = QHBoxLayout()
        self.day_buttons: dict[str, QPushButton] = {}
        for day in DAYS_OF_WEEK:
            btn = QPushButton(day[:1])
            btn.setToolTip(day)
            btn.setCheckable(True)
            btn.setChecked(day in self._draft.days)
            btn.setFixedWidth(32)
            btn.clicked.connect(lambda _checked, d=day: self._toggle_day(d))
            self.day_buttons[day] = btn
            days_row.addWidget(btn)
        days_row.addStretch(1)

        self.app_edit = QLineEdit()
        self.app_edit.setPlaceholderText("Add app title keyword...")
        self.btn_add_app = QPushButton("Add")
        self.btn_remove_app = QPushButton("Remove")
        app_row = QHBoxLayout()
        app_row.addWidget(self.app_edit)
        app_row.addWidget(self.btn_add_app)
        app_row.addWidget(self.btn_remove_app)
        self.app_list = QListWidget()
        self.app_hint = QLabel("No apps specified - all apps will be considered compliant.")
        self.app_hint.setStyleSheet("color: #d97706;")

        self.interval_spin = QSpinBox()
        self.interval_spin.setRange(*CHECK_INTERVAL_RANGE)
        self.interval_spin.setValue(self._draft.check_interval_secs)
        self.grace_spin = QSpinBox()
        self.grace_spin.setRange(*GRACE_PERIOD_RANGE)
        self.grace_spin.setValue(self._draft.grace_period_secs)

        form = QFormLayout()
        form.addRow("Schedule Name", self.name_edit)
        form.addRow("Start Time", self.start_edit)
        form.addRow("End Time", self.end_edit)
        form.addRow("Active Days", days_row)
        form.addRow("Expected Apps (Keywords)", app_row)
        form.addRow("", self.app_list)
        form.addRow("", self.app_hint)
        form.addRow("Check Interval (s)", self.interval_spin)
        form.addRow("Grace Period (s)", self.grace_spin)

        buttons = QDialogButtonBox(QDialogButtonBox.StandardButton.Save | QDialogButtonBox.StandardButton.Cancel)
        buttons.accepted.connect(self._accept)
        buttons.rejected.connect(self.reject)
        layout = QVBoxLayout(self)
        layout.addLayout(form)
        layout.addWidget(buttons)

        self.btn_add_app.clicked.connect(self._add_app)
        self.app_edit.returnPressed.connect(self._add_app)
        self.btn_remove_app.clicked.connect(self._remove_app)
        self._render_apps()

    def _toggle_day(self, day: str) -> None:
        self._draft = toggle_day(self._draft, day)
        for d, btn in self.day_buttons.items():
            btn.setChecked(d in self._draft.days)

    def _add_app(self) -> None:
        self._draft = add_app(self._draft, self.app_edit.text())
        self.app_edit.clear()
        self._render_apps()

    def _remove_app(self) -> None:
        self._draft = remove_app(self._draft, self.app_list.currentRow())
        self._render_apps()

    def _render_apps(self) -> None:
        self.app_list.clear()
        self.app_list.addItems(self._draft.expected_apps)
        self.app_hint.setVisible(not self._draft.expected_apps)

    def _accept(self) -> None:
        if not self.name_edit.text().strip():
            QMessageBox.information(self, "Name Required", "Please give the schedule a name.")
            return
        self.accept()

    def get_schedule(self) -> Schedule:
        s = self._draft
        s.name = self.name_edit.text().strip()
        s.start_time = normalize_time(self.start_edit.time().toString("HH:mm"))
        s.end_time = normalize_time(self.end_edit.time().toString("HH:mm"))
        s.check_interval_secs = self.interval_spin.value()
        s.grace_period_secs = self.grace_spin.value()
        return s


class SchedulerPage(QWidget):  # pragma: no cover UI heavy
    def __init__(self, store: ScheduleStore):
        super().__init__()
        self._store = store

        header = QLabel("Scheduler")
        font = header.font()
        font.setPointSize(20)
        header.setFont(font)
        self.loading_label = QLabel("Loading...")
        self.loading_label.hide()
        self.empty_label = QLabel("No schedules yet. Create a schedule to define when specific applications are expected.")
        self.empty_label.setWordWrap(True)

        self.table = QTableWidget(0, 5)
        self.table.setHorizontalHeaderLabels(["Enabled", "Name", "Time", "Days", "Expected Apps"])
        self.table.setSelectionBehavior(self.table.SelectionBehavior.SelectRows)
        self.table.setEditTriggers(self.table.EditTrigger.NoEditTriggers)
        self.table.verticalHeader().setVisible(False)
        self.table.horizontalHeader().setStretchLastSection(True)

        self.btn_add = QPushButton("Add Schedule")
        self.btn_edit = QPushButton("Edit")
        self.btn_delete = QPushButton("Delete")
        self.btn_refresh = QPushButton("Refresh")
        btn_row = QHBoxLayout()
        for b in (self.btn_add, self.btn_edit, self.btn_delete, self.btn_refresh):
            btn_row.addWidget(b)
        btn_row.addStretch(1)

        layout = QVBoxLayout(self)
        layout.addWidget(header)
        layout.addLayout(btn_row)
        layout.addWidget(self.loading_label)
        layout.addWidget(self.empty_label)
        layout.addWidget(self.table, 1)

        self.btn_add.clicked.connect(self._add)
        self.btn_edit.clicked.connect(self._edit)
        self.btn_delete.clicked.connect(self._delete)
        self.btn_refresh.clicked.connect(lambda: self._store.refresh())
        self.table.cellDoubleClicked.connect(lambda _r, _c: self._edit())
        # Queued: a row checkbox may trigger the rebuild that deletes it
        self._store.changed.connect(self.render, Qt.ConnectionType.QueuedConnection)
        self._store.loading_changed.connect(self.loading_label.setVisible)
        self._store.error.connect(lambda m: show_toast(self, m, ERROR))
        self._store.alert.connect(lambda m: QMessageBox.warning(self, "Scheduler", m))

        QShortcut(QKeySequence("Ctrl+N"), self, activated=self._add)
        QShortcut(QKeySequence("Delete"), self, activated=self._delete)
        self.render()

    def render(self) -> None:
        schedules = self._store.schedules()
        self.empty_label.setVisible(not schedules)
        self.table.setRowCount(len(schedules))
        for r, s in enumerate(schedules):
            cb = QCheckBox()
            cb.setChecked(s.enabled)
            cb.toggled.connect(lambda checked, sid=s.id: self._store.toggle(sid, checked))
            self.table.setCellWidget(r, 0, cb)
            name_item = QTableWidgetItem(s.name)
            name_item.setData(Qt.ItemDataRole.UserRole, s.id)
            self.table.setItem(r, 1, name_item)
            self.table.setItem(r, 2, QTableWidgetItem(f"{s.start_time[:5]} - {s.end_time[:5]}"))
            self.table.setItem(r, 3, QTableWidgetItem(", ".join(s.days)))
            self.table.setItem(r, 4, QTableWidgetItem(", ".join(s.expected_apps) or "Any app"))

    def _selected_id(self) -> int | None:
        row = self.table.currentRow()
        if row < 0:
            return None
        item = self.table.item(row, 1)
        return item.data(Qt.ItemDataRole.UserRole) if item else None

    def _add(self) -> None:
        self._open_dialog(None)

    def _edit(self) -> None:
        sid = self._selected_id()
        if sid is None:
            return
        self._open_dialog(self._store.get(sid))

    def _open_dialog(self, schedule: Schedule | None) -> None:
        dlg = ScheduleDialog(self, schedule)
        if dlg.exec() != QDialog.DialogCode.Accepted:
            return
        self._store.save(dlg.get_schedule(), on_done=self._toast_on_success("Schedule saved"))

    def _delete(self) -> None:
        sid = self._selected_id()
        if sid is None:
            return
        self._store.delete(
            sid,
            confirm=self._confirm_delete,
            on_done=self._toast_on_success("Schedule deleted"),
        )

    def _confirm_delete(self, schedule: Schedule) -> bool:
        answer = QMessageBox.question(self, "Confirm", f"Are you sure you want to delete '{schedule.name}'?")
        return answer == QMessageBox.StandardButton.Yes

    def _toast_on_success(self, message: str):
        def done(ok: bool) -> None:
            if ok:
                show_toast(self, message, INFO)

        return done


__all__ = ["SchedulerPage", "ScheduleDialog"]
