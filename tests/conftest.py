"""Shared fixtures: a manual-clock scheduler and a ready-made viewer session."""
from __future__ import annotations

from typing import Callable

import pytest

from tiletrace.model.geometry import ImageSize, Point2D, Rect
from tiletrace.model.gestures import GestureClassifier, MouseButton, PointerEvent, PointerEventKind, PointerType
from tiletrace.model.path import PathTracer
from tiletrace.model.viewport import Viewport


class FakeTask:
    def __init__(self, due: int, callback: Callable[[], None]) -> None:
        self.due = due
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """Runs callbacks only when advance() moves the clock past their due time."""
    def __init__(self) -> None:
        self.now = 0
        self.tasks: list[FakeTask] = []

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> FakeTask:
        task = FakeTask(self.now + delay_ms, callback)
        self.tasks.append(task)
        return task

    def advance(self, ms: int) -> None:
        self.now += ms
        for task in list(self.tasks):
            if not task.cancelled and not task.fired and task.due <= self.now:
                task.fired = True
                task.callback()

    def fire_stale(self) -> None:
        """Run every callback, cancelled or not, to simulate a late timer."""
        for task in list(self.tasks):
            task.callback()

    @property
    def pending(self) -> list[FakeTask]:
        return [t for t in self.tasks if not t.cancelled and not t.fired]


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def image_size() -> ImageSize:
    return ImageSize(640, 480)


@pytest.fixture
def viewport(image_size: ImageSize) -> Viewport:
    vp = Viewport(image_size=image_size, container=Rect(0, 0, 640, 480))
    # identity transform: screen == world
    vp.set_absolute_zoom(1.0, Point2D(0, 0), Point2D(0, 0))
    return vp


@pytest.fixture
def tracer(image_size: ImageSize) -> PathTracer:
    return PathTracer(image_size=image_size)


@pytest.fixture
def classifier(viewport: Viewport, tracer: PathTracer, scheduler: FakeScheduler) -> GestureClassifier:
    return GestureClassifier(viewport=viewport, tracer=tracer, scheduler=scheduler)


# ---- event helpers ----

def mouse(kind: PointerEventKind, x: float, y: float, ctrl: bool = False,
          button: MouseButton = MouseButton.PRIMARY) -> PointerEvent:
    return PointerEvent(kind, -1, PointerType.MOUSE, Point2D(x, y), button=button, modifier=ctrl)


def touch(kind: PointerEventKind, pid: int, x: float, y: float) -> PointerEvent:
    return PointerEvent(kind, pid, PointerType.TOUCH, Point2D(x, y))
