from __future__ import annotations

import logging
from typing import Callable, Optional

from PySide6.QtCore import QObject, Signal

from tiletrace.app.scheduler import QtScheduler
from tiletrace.model.geometry import ImageSize, Point2D, Rect, ViewTransform
from tiletrace.model.gestures import GestureClassifier, GestureMode, PointerEvent, ScheduledTask, Scheduler
from tiletrace.model.path import PathTracer
from tiletrace.model.viewport import Viewport

logger = logging.getLogger(__name__)


class _ObservedScheduler:
    """Wraps a scheduler so delayed callbacks also publish their changes."""
    def __init__(self, inner: Scheduler, observe: Callable[[Callable[[], None]], None]) -> None:
        self._inner = inner
        self._observe = observe

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> ScheduledTask:
        return self._inner.schedule(delay_ms, lambda: self._observe(callback))


class Store(QObject):
    """
    Central session state with signals for canvas/toolbar sync.

    Owns the Viewport, the PathTracer and the GestureClassifier. Every entry
    point runs the mutation and then emits only the signals whose state
    actually changed.
    """
    transform_changed = Signal(object)  # ViewTransform
    path_changed = Signal(object)  # PathTracer
    command_changed = Signal(str)
    gesture_changed = Signal(str)  # GestureMode value
    image_changed = Signal(object)  # ImageSize

    def __init__(self, scheduler: Optional[Scheduler] = None, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self.viewport = Viewport()
        self.tracer = PathTracer()
        inner = scheduler if scheduler is not None else QtScheduler(self)
        self.gestures = GestureClassifier(
            viewport=self.viewport,
            tracer=self.tracer,
            scheduler=_ObservedScheduler(inner, self._observe),
        )

        self._last_transform: ViewTransform = self.viewport.transform
        self._last_revision: int = self.tracer.revision
        self._last_command: str = self.tracer.command
        self._last_mode: GestureMode = self.gestures.mode

    # ---- read access ----

    @property
    def transform(self) -> ViewTransform:
        return self.viewport.transform

    @property
    def image_size(self) -> ImageSize:
        return self.viewport.image_size

    @property
    def command(self) -> str:
        return self.tracer.command

    # ---- entry points ----

    def dispatch(self, event: PointerEvent) -> None:
        self._observe(lambda: self.gestures.handle(event))

    def resize(self, container: Rect) -> None:
        self._observe(lambda: self.viewport.resize(container))

    def zoom_to(self, level: str) -> None:
        self._observe(lambda: self.viewport.zoom_to(level))

    def zoom_by(self, factor: float, anchor_screen: Point2D) -> None:
        self._observe(lambda: self.viewport.zoom_by(factor, anchor_screen))

    def set_image_size(self, size: ImageSize) -> None:
        def apply() -> None:
            self.gestures.reset()
            self.tracer.clear()
            self.tracer.image_size = size
            self.viewport.set_image_size(size)
            logger.debug("Session reset for %dx%d map", size.width, size.height)

        self._observe(apply)
        self.image_changed.emit(size)

    def clear_path(self) -> None:
        def apply() -> None:
            self.gestures.reset()
            self.tracer.clear()

        self._observe(apply)

    # ---- change detection ----

    def _observe(self, mutation: Callable[[], None]) -> None:
        mutation()

        transform = self.viewport.transform
        if transform != self._last_transform:
            self._last_transform = transform
            self.transform_changed.emit(transform)

        if self.tracer.revision != self._last_revision:
            self._last_revision = self.tracer.revision
            self.path_changed.emit(self.tracer)
            command = self.tracer.command
            if command != self._last_command:
                self._last_command = command
                self.command_changed.emit(command)

        mode = self.gestures.mode
        if mode != self._last_mode:
            self._last_mode = mode
            self.gesture_changed.emit(mode.value)
