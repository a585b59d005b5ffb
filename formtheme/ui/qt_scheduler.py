"""QTimer backed scheduler for the style manager and autosave."""

from __future__ import annotations

from typing import Callable

from PySide6.QtCore import QObject, QTimer


class QtTimerHandle:
    """One single-shot timer; the timer is released once it fires or is cancelled."""

    def __init__(self, timer: QTimer, callback: Callable[[], None]) -> None:
        self._timer: QTimer | None = timer
        self._callback = callback
        timer.timeout.connect(self._fire)

    @property
    def active(self) -> bool:
        return self._timer is not None and self._timer.isActive()

    def cancel(self) -> None:
        timer, self._timer = self._timer, None
        if timer is not None:
            timer.stop()
            timer.deleteLater()

    def _fire(self) -> None:
        timer, self._timer = self._timer, None
        if timer is None:
            return
        timer.deleteLater()
        self._callback()


class QtScheduler:
    """Runs callbacks on the Qt event loop after a delay."""

    def __init__(self, parent: QObject | None = None) -> None:
        self._parent = parent

    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> QtTimerHandle:
        timer = QTimer(self._parent)
        timer.setSingleShot(True)
        timer.setInterval(max(0, round(delay_seconds * 1000)))
        handle = QtTimerHandle(timer, callback)
        timer.start()
        return handle
