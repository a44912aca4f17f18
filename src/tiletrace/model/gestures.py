"""
Gesture Classifier
==================
A finite-state machine over raw pointer events that decides whether the user
is panning, pinch-zooming or drawing a path.

States (exactly one at a time):
    Idle       - no gesture.
    Candidate  - one touch is down; waiting briefly for a second finger.
    Drawing    - one pointer drives the Path Tracer.
    Panning    - mouse drag moves the view.
    Pinching   - two or more touches scale the view about their midpoint.

Every transition goes through GestureClassifier.handle() (or the candidate
timer callback, which re-validates the session before acting).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, StrEnum, auto
from typing import Callable, Optional, Protocol, Union

from tiletrace.config import PINCH_MIN_DISTANCE_PX, TOUCH_DRAW_DELAY_MS, TOUCH_MOVE_THRESHOLD_PX
from tiletrace.model.geometry import Point2D, clamp
from tiletrace.model.path import PathTracer
from tiletrace.model.viewport import Viewport

logger = logging.getLogger(__name__)

# -------------------------------------------------------------------------------
# Input events
# -------------------------------------------------------------------------------

class PointerEventKind(Enum):
    DOWN = auto()
    MOVE = auto()
    UP = auto()
    CANCEL = auto()  # also used for loss of pointer capture


class PointerType(StrEnum):
    MOUSE = "mouse"
    TOUCH = "touch"
    PEN = "pen"


class MouseButton(Enum):
    NONE = auto()
    PRIMARY = auto()
    SECONDARY = auto()
    MIDDLE = auto()


@dataclass(frozen=True)
class PointerEvent:
    kind: PointerEventKind
    pointer_id: int
    modality: PointerType
    position: Point2D
    button: MouseButton = MouseButton.NONE
    modifier: bool = False  # draw modifier (Ctrl) held


# -------------------------------------------------------------------------------
# Scheduling
# -------------------------------------------------------------------------------

class ScheduledTask(Protocol):
    @property
    def cancelled(self) -> bool: ...
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Runs a callback once after a delay on the event loop thread."""
    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> ScheduledTask: ...


# -------------------------------------------------------------------------------
# Session states
# -------------------------------------------------------------------------------

class GestureMode(StrEnum):
    IDLE = "idle"
    CANDIDATE = "candidate"
    DRAWING = "drawing"
    PANNING = "panning"
    PINCHING = "pinching"


@dataclass(frozen=True)
class Idle:
    mode = GestureMode.IDLE


@dataclass(frozen=True, eq=False)
class Candidate:
    pointer_id: int
    origin: Point2D
    task: ScheduledTask
    mode = GestureMode.CANDIDATE


@dataclass(frozen=True)
class Drawing:
    pointer_id: int
    modality: PointerType
    mode = GestureMode.DRAWING


@dataclass(frozen=True)
class Panning:
    pointer_id: int
    last: Point2D
    mode = GestureMode.PANNING


@dataclass(frozen=True)
class Pinching:
    pointer_ids: tuple[int, int]
    start_distance: float
    start_scale: float
    anchor_world: Point2D
    mode = GestureMode.PINCHING


GestureState = Union[Idle, Candidate, Drawing, Panning, Pinching]

IDLE = Idle()


@dataclass
class TrackedPointer:
    position: Point2D
    modality: PointerType


# -------------------------------------------------------------------------------
# Classifier
# -------------------------------------------------------------------------------

@dataclass
class GestureClassifier:
    viewport: Viewport
    tracer: PathTracer
    scheduler: Scheduler
    draw_delay_ms: int = TOUCH_DRAW_DELAY_MS
    move_threshold: float = TOUCH_MOVE_THRESHOLD_PX
    min_pinch_distance: float = PINCH_MIN_DISTANCE_PX

    _state: GestureState = field(default=IDLE, init=False)
    _pointers: dict[int, TrackedPointer] = field(default_factory=dict, init=False)

    @property
    def state(self) -> GestureState:
        return self._state

    @property
    def mode(self) -> GestureMode:
        return self._state.mode

    @property
    def active_pointer_ids(self) -> list[int]:
        return list(self._pointers)

    # ---- dispatch ----

    def handle(self, event: PointerEvent) -> None:
        """Single entry point for every pointer lifecycle event."""
        if event.kind is PointerEventKind.DOWN:
            self._on_down(event)
        elif event.kind is PointerEventKind.MOVE:
            self._on_move(event)
        else:
            self._on_up(event)

    def reset(self) -> None:
        """Abort whatever is in progress and forget all pointers."""
        self._abort(discard_path=True)
        self._pointers.clear()

    # ---- transitions ----

    def _set_state(self, new_state: GestureState) -> None:
        old = self._state
        if isinstance(old, Candidate) and old is not new_state:
            old.task.cancel()
        self._state = new_state
        if old.mode != new_state.mode:
            logger.debug("Gesture %s -> %s", old.mode, new_state.mode)

    def _abort(self, discard_path: bool) -> None:
        """Leave the current gesture without finalising it."""
        if isinstance(self._state, Drawing) and discard_path:
            self.tracer.clear()
        self._set_state(IDLE)

    def _touch_like_ids(self) -> list[int]:
        return [pid for pid, p in self._pointers.items() if p.modality is not PointerType.MOUSE]

    # ---- pointer down ----

    def _on_down(self, event: PointerEvent) -> None:
        if event.modality is PointerType.MOUSE:
            self._on_mouse_down(event)
        else:
            self._on_touch_down(event)

    def _on_mouse_down(self, event: PointerEvent) -> None:
        if event.button is not MouseButton.PRIMARY:
            return
        if self._touch_like_ids():
            # a mouse press supersedes any touch gesture in progress
            self._pointers = {pid: p for pid, p in self._pointers.items() if p.modality is PointerType.MOUSE}
        if not isinstance(self._state, Idle):
            self._abort(discard_path=True)

        self._pointers[event.pointer_id] = TrackedPointer(event.position, event.modality)

        if event.modifier:
            world = self.viewport.transform.screen_to_world(event.position)
            if self.tracer.start_path(world):
                self._set_state(Drawing(event.pointer_id, event.modality))
        else:
            self._set_state(Panning(event.pointer_id, event.position))

    def _on_touch_down(self, event: PointerEvent) -> None:
        if isinstance(self._state, (Panning, Drawing)) and self._modality_of_state() is PointerType.MOUSE:
            self._abort(discard_path=True)
            self._pointers = {pid: p for pid, p in self._pointers.items() if p.modality is not PointerType.MOUSE}

        self._pointers[event.pointer_id] = TrackedPointer(event.position, event.modality)
        touch_ids = self._touch_like_ids()

        if len(touch_ids) == 1:
            if isinstance(self._state, Idle):
                self._begin_candidate(event)
            return

        # Two or more touches: whatever single-finger gesture was forming is
        # abandoned in favour of the pinch.
        if isinstance(self._state, Pinching):
            return
        if isinstance(self._state, Drawing):
            logger.debug("Second touch during drawing: discarding path.")
        self._abort(discard_path=True)
        self._begin_pinch()

    def _modality_of_state(self) -> Optional[PointerType]:
        pid = getattr(self._state, "pointer_id", None)
        if pid is None or pid not in self._pointers:
            return None
        return self._pointers[pid].modality

    def _begin_candidate(self, event: PointerEvent) -> None:
        holder: dict[str, Candidate] = {}

        def on_timeout() -> None:
            self._on_candidate_timeout(holder["candidate"])

        task = self.scheduler.schedule(self.draw_delay_ms, on_timeout)
        candidate = Candidate(event.pointer_id, event.position, task)
        holder["candidate"] = candidate
        self._set_state(candidate)

    def _on_candidate_timeout(self, candidate: Candidate) -> None:
        # The session may have moved on since the timer was scheduled.
        if self._state is not candidate or candidate.task.cancelled:
            return
        if len(self._touch_like_ids()) != 1 or candidate.pointer_id not in self._pointers:
            self._set_state(IDLE)
            return
        self._commit_drawing(candidate)

    def _commit_drawing(self, candidate: Candidate) -> None:
        pointer = self._pointers[candidate.pointer_id]
        transform = self.viewport.transform
        if not self.tracer.start_path(transform.screen_to_world(candidate.origin)):
            self._set_state(IDLE)
            return
        self._set_state(Drawing(candidate.pointer_id, pointer.modality))
        self.tracer.extend_path_to_world(transform.screen_to_world(pointer.position))

    def _pinch_pair(self) -> Optional[tuple[int, int]]:
        ids = self._touch_like_ids()
        if len(ids) < 2:
            return None
        return ids[0], ids[1]

    def _begin_pinch(self) -> None:
        pair = self._pinch_pair()
        if pair is None:
            self._set_state(IDLE)
            return
        a = self._pointers[pair[0]].position
        b = self._pointers[pair[1]].position
        anchor_world = self.viewport.transform.screen_to_world(a.midpoint(b))
        self._set_state(Pinching(pair, a.distance_to(b), self.viewport.scale, anchor_world))

    # ---- pointer move ----

    def _on_move(self, event: PointerEvent) -> None:
        pointer = self._pointers.get(event.pointer_id)
        if pointer is None:
            return
        pointer.position = event.position
        state = self._state

        if isinstance(state, Pinching):
            self._update_pinch(state)
        elif isinstance(state, Panning):
            if event.pointer_id == state.pointer_id:
                delta = event.position - state.last
                self.viewport.pan_by(delta.x, delta.y)
                self._set_state(Panning(state.pointer_id, event.position))
        elif isinstance(state, Candidate):
            if event.pointer_id == state.pointer_id and event.position.distance_to(state.origin) > self.move_threshold:
                state.task.cancel()
                self._commit_drawing(state)
        elif isinstance(state, Drawing):
            if event.pointer_id != state.pointer_id:
                return
            world = self.viewport.transform.screen_to_world(event.position)
            self.tracer.extend_path_to_world(world)
            if state.modality is PointerType.MOUSE and not event.modifier:
                # modifier released mid-drag: the path is complete
                self.tracer.end_path()
                self._set_state(IDLE)

    def _update_pinch(self, state: Pinching) -> None:
        pair = self._pinch_pair()
        if pair is None:
            return
        if pair != state.pointer_ids:
            self._begin_pinch()
            return

        if state.start_distance < self.min_pinch_distance:
            return
        a = self._pointers[pair[0]].position
        b = self._pointers[pair[1]].position
        factor = a.distance_to(b) / state.start_distance
        target = clamp(state.start_scale * factor, self.viewport.zoom_min, self.viewport.zoom_max)
        self.viewport.set_absolute_zoom(target, state.anchor_world, a.midpoint(b))

    # ---- pointer up / cancel ----

    def _on_up(self, event: PointerEvent) -> None:
        if self._pointers.pop(event.pointer_id, None) is None:
            return
        state = self._state

        if isinstance(state, Pinching):
            if len(self._touch_like_ids()) < 2:
                self._set_state(IDLE)
            elif self._pinch_pair() != state.pointer_ids:
                self._begin_pinch()
        elif isinstance(state, Candidate):
            if event.pointer_id == state.pointer_id:
                self._set_state(IDLE)
        elif isinstance(state, Drawing):
            if event.pointer_id == state.pointer_id:
                self.tracer.end_path()
                self._set_state(IDLE)
        elif isinstance(state, Panning):
            if event.pointer_id == state.pointer_id:
                self._set_state(IDLE)
