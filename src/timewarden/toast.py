from __future__ import annotations

"""Transient overlay messages anchored to the bottom of a page.

Two severities: ``info`` confirms a completed action, ``error`` reports a
failed background call. Errors stay up longer and a new toast replaces the
one already shown on the same parent.
"""

from PyQt6.QtCore import QTimer, Qt
from PyQt6.QtWidgets import QLabel, QWidget

INFO = "info"
ERROR = "error"

_COLORS = {
    INFO: ("rgba(39,39,42,0.9)", "#f4f4f5"),
    ERROR: ("rgba(153,27,27,0.92)", "#fef2f2"),
}
_TIMEOUTS_MS = {INFO: 2500, ERROR: 5000}


def toast_style(level: str) -> str:
    background, color = _COLORS.get(level, _COLORS[INFO])
    return f"background: {background}; color: {color}; padding: 6px 12px; border-radius: 6px;"


def toast_timeout(level: str) -> int:
    return _TIMEOUTS_MS.get(level, _TIMEOUTS_MS[INFO])


class Toast(QLabel):
    def __init__(self, parent: QWidget, message: str, level: str = INFO, timeout_ms: int | None = None):
        super().__init__(parent)
        self.level = level
        self.setObjectName("toast")
        self.setText(message)
        self.setStyleSheet(toast_style(level))
        self.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents)
        self.setAttribute(Qt.WidgetAttribute.WA_DeleteOnClose)
        self.adjustSize()
        self.move(int((parent.width() - self.width()) / 2), parent.height() - self.height() - 24)
        QTimer.singleShot(timeout_ms if timeout_ms is not None else toast_timeout(level), self.close)


def show_toast(parent: QWidget, message: str, level: str = INFO, timeout_ms: int | None = None) -> Toast:
    for old in parent.findChildren(Toast, "toast", Qt.FindChildOption.FindDirectChildrenOnly):
        old.close()
    toast = Toast(parent, message, level, timeout_ms)
    toast.show()
    return toast


__all__ = ["show_toast", "toast_style", "toast_timeout", "Toast", "INFO", "ERROR"]
