from __future__ import annotations

"""Dashboard UI: live status, today's totals, top applications and recent activity."""

from datetime import datetime

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import (
    QWidget,
    QVBoxLayout,
    QHBoxLayout,
    QLabel,
    QGroupBox,
    QTableWidget,
    QTableWidgetItem,
    QListWidget,
)

from .models import StatusSnapshot, UsageSnapshot, format_duration, format_session_duration
from .status_poller import StatusPoller

TOP_APPS = 5
RECENT_SESSIONS = 10


def status_style(status: StatusSnapshot) -> str:
    if not status.current_app:
        return "color: #a1a1aa;"
    if status.is_idle:
        return "color: #f59e0b; font-weight: bold;"
    return "color: #10b981; font-weight: bold;"


def session_clock(start_time: str) -> str:
    try:
        dt = datetime.fromisoformat(start_time.replace("Z", "+00:00"))
    except ValueError:
        return start_time
    return dt.astimezone().strftime("%H:%M")


class StatusIndicator(QLabel):  # pragma: no cover UI
    def __init__(self, poller: StatusPoller):
        super().__init__()
        poller.status_changed.connect(self.show_status)
        self.show_status(poller.status)

    def show_status(self, status: StatusSnapshot) -> None:
        self.setText(status.label)
        self.setStyleSheet(status_style(status))


class _StatCard(QGroupBox):  # pragma: no cover UI
    def __init__(self, title: str):
        super().__init__(title)
        self.value = QLabel("-")
        font = self.value.font()
        font.setPointSize(18)
        self.value.setFont(font)
        self.detail = QLabel("")
        self.detail.setStyleSheet("color: #71717a;")
        layout = QVBoxLayout(self)
        layout.addWidget(self.value)
        layout.addWidget(self.detail)


class DashboardPage(QWidget):  # pragma: no cover UI heavy
    def __init__(self, poller: StatusPoller):
        super().__init__()
        self._poller = poller

        header = QLabel("Dashboard")
        font = header.font()
        font.setPointSize(20)
        header.setFont(font)
        subtitle = QLabel("Overview of your activity today")

        self.total_card = _StatCard("Total Time")
        self.total_card.detail.setText("Active screen time today")
        self.top_card = _StatCard("Most Used")
        cards = QHBoxLayout()
        cards.addWidget(self.total_card)
        cards.addWidget(self.top_card)

        self.apps_table = QTableWidget(0, 2)
        self.apps_table.setHorizontalHeaderLabels(["Application", "Time"])
        self.apps_table.setEditTriggers(self.apps_table.EditTrigger.NoEditTriggers)
        self.apps_table.verticalHeader().setVisible(False)
        self.apps_table.horizontalHeader().setStretchLastSection(True)

        self.recent_list = QListWidget()

        body = QHBoxLayout()
        apps_box = QGroupBox("Top Applications")
        QVBoxLayout(apps_box).addWidget(self.apps_table)
        recent_box = QGroupBox("Recent Activity")
        QVBoxLayout(recent_box).addWidget(self.recent_list)
        body.addWidget(apps_box, 2)
        body.addWidget(recent_box, 1)

        layout = QVBoxLayout(self)
        layout.addWidget(header)
        layout.addWidget(subtitle)
        layout.addLayout(cards)
        layout.addLayout(body, 1)

        self._poller.usage_changed.connect(self.show_usage)
        self.show_usage(self._poller.usage)

    def show_usage(self, usage: UsageSnapshot) -> None:
        self.total_card.value.setText(format_duration(usage.total_seconds))
        top = usage.top_app
        if top is None:
            self.top_card.value.setText("N/A")
            self.top_card.detail.setText("")
        else:
            self.top_card.value.setText(top.display_name)
            self.top_card.detail.setText(format_duration(top.seconds))

        top_apps = usage.top_apps(TOP_APPS)
        self.apps_table.setRowCount(len(top_apps))
        for r, app in enumerate(top_apps):
            self.apps_table.setItem(r, 0, QTableWidgetItem(app.display_name))
            item = QTableWidgetItem(format_duration(app.seconds))
            item.setTextAlignment(Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter)
            self.apps_table.setItem(r, 1, item)

        self.recent_list.clear()
        recent = usage.recent_sessions(RECENT_SESSIONS)
        if not recent:
            self.recent_list.addItem("No activity recorded today")
        for s in recent:
            marker = "idle" if s.is_idle else "active"
            self.recent_list.addItem(
                f"{session_clock(s.start_time)}  {s.display_name}  "
                f"{format_session_duration(s.duration_seconds or 0)}  ({marker})"
            )


__all__ = ["DashboardPage", "StatusIndicator", "status_style", "session_clock"]
