from __future__ import annotations

import sys
import logging
from dataclasses import dataclass
from typing import Optional

from PyQt6.QtWidgets import (
    QApplication,
    QMainWindow,
    QListWidget,
    QWidget,
    QStackedWidget,
    QHBoxLayout,
    QVBoxLayout,
    QLabel,
)

from . import __version__
from .config import AppConfig, load_config
from .dashboard import DashboardPage, StatusIndicator
from .dispatch import ThreadPoolInvoker
from .gateway import RemoteGateway
from .logging_setup import configure_logging
from .schedule_store import ScheduleStore
from .scheduler_page import SchedulerPage
from .status_poller import DASHBOARD_VIEW, SCHEDULER_VIEW, StatusPoller


APP_NAME = "Timewarden"


@dataclass(slots=True)
class AppState:
    config: AppConfig
    gateway: RemoteGateway
    invoker: ThreadPoolInvoker
    poller: StatusPoller
    schedule_store: ScheduleStore


def get_app_state(config: AppConfig | None = None) -> AppState:
    config = config or load_config()
    # Logging first
    configure_logging(config.data_dir, config.log_level, backend_url=config.backend_url)
    gateway = RemoteGateway(config.gateway_config())
    invoker = ThreadPoolInvoker()
    poller = StatusPoller(gateway, invoker, interval_ms=config.poll_interval_ms)
    store = ScheduleStore(gateway, invoker)
    logging.getLogger(__name__).info(
        "app_state_created",
        extra={"_json_backend": config.backend_url, "_json_version": __version__},
    )
    return AppState(config=config, gateway=gateway, invoker=invoker, poller=poller, schedule_store=store)


class Sidebar(QListWidget):
    PAGES = [("Dashboard", DASHBOARD_VIEW), ("Scheduler", SCHEDULER_VIEW)]

    def __init__(self) -> None:
        super().__init__()
        self.addItems([title for title, _view in self.PAGES])
        self.setFixedWidth(160)
        self.setCurrentRow(0)


class MainWindow(QMainWindow):  # pragma: no cover UI
    def __init__(self, state: AppState) -> None:  # noqa: D401
        super().__init__()
        self.state = state
        self.setWindowTitle(APP_NAME)
        self.resize(1100, 700)

        self.sidebar = Sidebar()
        self.pages = QStackedWidget()
        self.pages.addWidget(DashboardPage(state.poller))
        self.pages.addWidget(SchedulerPage(state.schedule_store))

        top_bar = QHBoxLayout()
        title = QLabel(APP_NAME)
        title.setStyleSheet("font-weight: bold; font-size: 16px;")
        top_bar.addWidget(title)
        top_bar.addStretch(1)
        top_bar.addWidget(StatusIndicator(state.poller))

        body = QHBoxLayout()
        body.addWidget(self.sidebar)
        body.addWidget(self.pages, 1)

        container = QWidget()
        container_layout = QVBoxLayout(container)
        container_layout.addLayout(top_bar)
        container_layout.addLayout(body, 1)
        self.setCentralWidget(container)

        self.sidebar.currentRowChanged.connect(self._on_page_changed)
        self._on_page_changed(0)

    def _on_page_changed(self, row: int) -> None:
        self.pages.setCurrentIndex(row)
        _title, view = Sidebar.PAGES[row]
        # Restart polling for the new view; stale ticks from the old one are dropped
        self.state.poller.activate(view)
        if view == SCHEDULER_VIEW:
            self.state.schedule_store.refresh()

    def closeEvent(self, event) -> None:
        self.state.poller.deactivate()
        self.state.gateway.close()
        super().closeEvent(event)


def run(argv: Optional[list[str]] = None) -> int:  # pragma: no cover
    if argv is None:
        argv = sys.argv
    app = QApplication(argv)
    state = get_app_state()
    window = MainWindow(state)
    window.show()
    return app.exec()


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(run())
