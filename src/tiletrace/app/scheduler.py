"""
Qt-backed implementation of the gesture Scheduler protocol.

Each scheduled callback gets its own single-shot QTimer. Cancelling stops the
timer and marks the task, and the timeout slot checks the mark again, so a
callback can never run after cancel() returned.
"""
from __future__ import annotations

from typing import Callable, Optional

from PySide6.QtCore import QObject, QTimer


class QtScheduledTask:
    def __init__(self, timer: QTimer, callback: Callable[[], None]) -> None:
        self._timer = timer
        self._callback = callback
        self._cancelled = False
        self._fired = False
        self._timer.timeout.connect(self._fire)

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        if self._cancelled or self._fired:
            return
        self._cancelled = True
        self._timer.stop()
        self._timer.deleteLater()

    def _fire(self) -> None:
        if self._cancelled or self._fired:
            return
        # a task fires at most once
        self._fired = True
        self._timer.deleteLater()
        self._callback()


class QtScheduler:
    def __init__(self, parent: Optional[QObject] = None) -> None:
        self._parent = parent

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> QtScheduledTask:
        timer = QTimer(self._parent)
        timer.setSingleShot(True)
        timer.setInterval(max(0, int(delay_ms)))
        task = QtScheduledTask(timer, callback)
        timer.start()
        return task
