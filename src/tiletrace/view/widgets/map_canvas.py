"""
Map Canvas Widget
=================
Paints the map image and the traced path, and feeds raw Qt input into the
Store as PointerEvents.

Why is this file needed?
------------------------
1. Input translation: Mouse, touch and wheel events arrive in three different
   Qt shapes. The gesture classifier only understands PointerEvent.
2. Overlay: The path markers are re-projected from the current transform on
   every paint. update() coalesces bursts of moves into one repaint.
"""
from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import QEvent, QPointF, QRectF, Qt
from PySide6.QtGui import (
    QColor, QInputDevice, QMouseEvent, QPainter, QPaintEvent, QPen, QPixmap, QResizeEvent, QTouchEvent, QWheelEvent,
    QEventPoint,
)
from PySide6.QtWidgets import QWidget

from tiletrace.app.state import Store
from tiletrace.config import TILE_SIZE, WHEEL_ZOOM_STEP
from tiletrace.model.geometry import Point2D, Rect
from tiletrace.model.gestures import GestureMode, MouseButton, PointerEvent, PointerEventKind, PointerType
from tiletrace.model.overlay import project_path

logger = logging.getLogger(__name__)

MOUSE_POINTER_ID = -1

# --- Overlay style ---
ORIGIN_FILL = QColor(0, 200, 83, 140)
STEP_FILL = QColor(255, 193, 7, 110)
MARKER_EDGE = QColor(0, 0, 0, 160)
BACKGROUND = QColor("#202124")

_BUTTONS = {
    Qt.MouseButton.LeftButton: MouseButton.PRIMARY,
    Qt.MouseButton.RightButton: MouseButton.SECONDARY,
    Qt.MouseButton.MiddleButton: MouseButton.MIDDLE,
}

_CURSORS = {
    GestureMode.IDLE: Qt.CursorShape.OpenHandCursor,
    GestureMode.CANDIDATE: Qt.CursorShape.ArrowCursor,
    GestureMode.DRAWING: Qt.CursorShape.CrossCursor,
    GestureMode.PANNING: Qt.CursorShape.ClosedHandCursor,
    GestureMode.PINCHING: Qt.CursorShape.SizeAllCursor,
}


def _point(pos: QPointF) -> Point2D:
    return Point2D(pos.x(), pos.y())


def is_touchscreen(device: Optional[QInputDevice]) -> bool:
    """Only direct-manipulation touch devices report canvas positions."""
    return device is not None and device.type() == QInputDevice.DeviceType.TouchScreen


class MapCanvas(QWidget):
    def __init__(self, store: Store, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.store = store
        self._pixmap: Optional[QPixmap] = None
        self._touch_ids: set[int] = set()

        self.setAttribute(Qt.WidgetAttribute.WA_AcceptTouchEvents, True)
        self.setAttribute(Qt.WidgetAttribute.WA_OpaquePaintEvent, True)
        self.setContextMenuPolicy(Qt.ContextMenuPolicy.PreventContextMenu)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.setMouseTracking(False)
        self.setMinimumSize(200, 150)
        self.setCursor(_CURSORS[GestureMode.IDLE])

        self.store.transform_changed.connect(self._schedule_repaint)
        self.store.path_changed.connect(self._schedule_repaint)
        self.store.gesture_changed.connect(self._on_gesture_changed)

    # ------------------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------------------

    def set_pixmap(self, pixmap: Optional[QPixmap]) -> None:
        self._pixmap = pixmap
        self._schedule_repaint()

    def container_rect(self) -> Rect:
        return Rect(0.0, 0.0, float(self.width()), float(self.height()))

    # ------------------------------------------------------------------------------
    # Qt event handlers
    # ------------------------------------------------------------------------------

    def resizeEvent(self, event: QResizeEvent) -> None:
        super().resizeEvent(event)
        self.store.resize(self.container_rect())

    def paintEvent(self, event: QPaintEvent) -> None:
        painter = QPainter(self)
        try:
            painter.fillRect(self.rect(), BACKGROUND)
            if self._pixmap is None or self._pixmap.isNull():
                painter.setPen(QColor("#9aa0a6"))
                painter.drawText(self.rect(), Qt.AlignmentFlag.AlignCenter, "File > Open map… to load an image")
                return

            transform = self.store.transform

            painter.save()
            painter.translate(transform.pan.x, transform.pan.y)
            painter.scale(transform.scale, transform.scale)
            # keep tiles crisp when zoomed in
            painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform, transform.scale < 1.0)
            painter.drawPixmap(0, 0, self._pixmap)
            painter.restore()

            self._paint_overlay(painter)
        finally:
            painter.end()

    def _paint_overlay(self, painter: QPainter) -> None:
        markers = project_path(self.store.tracer.cells, self.store.transform, TILE_SIZE)
        if not markers:
            return
        pen = QPen(MARKER_EDGE)
        pen.setCosmetic(True)
        painter.setPen(pen)
        for marker in markers:
            r = marker.rect
            painter.setBrush(ORIGIN_FILL if marker.is_origin else STEP_FILL)
            painter.drawRect(QRectF(r.x, r.y, r.width, r.height))

    def mousePressEvent(self, event: QMouseEvent) -> None:
        self._dispatch_mouse(PointerEventKind.DOWN, event)

    def mouseMoveEvent(self, event: QMouseEvent) -> None:
        self._dispatch_mouse(PointerEventKind.MOVE, event)

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        # only the primary button ends a gesture
        if event.button() != Qt.MouseButton.LeftButton:
            event.accept()
            return
        self._dispatch_mouse(PointerEventKind.UP, event)

    def wheelEvent(self, event: QWheelEvent) -> None:
        notches = event.angleDelta().y() / 120.0
        if notches == 0:
            event.ignore()
            return
        self.store.zoom_by(WHEEL_ZOOM_STEP ** notches, _point(event.position()))
        event.accept()

    def event(self, event: QEvent) -> bool:
        etype = event.type()
        if etype in (QEvent.Type.TouchBegin, QEvent.Type.TouchUpdate, QEvent.Type.TouchEnd):
            # trackpad contacts are not positions on the canvas; Qt turns them into mouse/wheel input
            if not is_touchscreen(event.device()):
                return super().event(event)
            self._dispatch_touch(event)
            return True
        if etype == QEvent.Type.TouchCancel:
            self._cancel_touches()
            return True
        if etype == QEvent.Type.UngrabMouse:
            # loss of capture; a no-op if the button was already released
            self.store.dispatch(PointerEvent(
                PointerEventKind.CANCEL, MOUSE_POINTER_ID, PointerType.MOUSE, Point2D(0.0, 0.0)
            ))
        return super().event(event)

    # ------------------------------------------------------------------------------
    # Translation helpers
    # ------------------------------------------------------------------------------

    def _dispatch_mouse(self, kind: PointerEventKind, event: QMouseEvent) -> None:
        device = event.pointingDevice()
        modality = PointerType.MOUSE
        if device is not None and device.type() == QInputDevice.DeviceType.Stylus:
            modality = PointerType.PEN

        self.store.dispatch(PointerEvent(
            kind=kind,
            pointer_id=MOUSE_POINTER_ID,
            modality=modality,
            position=_point(event.position()),
            button=_BUTTONS.get(event.button(), MouseButton.NONE),
            modifier=bool(event.modifiers() & Qt.KeyboardModifier.ControlModifier),
        ))
        event.accept()

    def _dispatch_touch(self, event: QTouchEvent) -> None:
        for point in event.points():
            state = point.state()
            if state == QEventPoint.State.Pressed:
                kind = PointerEventKind.DOWN
                self._touch_ids.add(point.id())
            elif state == QEventPoint.State.Updated:
                kind = PointerEventKind.MOVE
            elif state == QEventPoint.State.Released:
                kind = PointerEventKind.UP
                self._touch_ids.discard(point.id())
            else:
                continue
            self.store.dispatch(PointerEvent(kind, point.id(), PointerType.TOUCH, _point(point.position())))
        event.accept()

    def _cancel_touches(self) -> None:
        logger.debug("Touch sequence cancelled (%d pointers)", len(self._touch_ids))
        for pid in sorted(self._touch_ids):
            self.store.dispatch(PointerEvent(PointerEventKind.CANCEL, pid, PointerType.TOUCH, Point2D(0.0, 0.0)))
        self._touch_ids.clear()

    # ------------------------------------------------------------------------------
    # Slots
    # ------------------------------------------------------------------------------

    def _schedule_repaint(self, *_args: object) -> None:
        self.update()

    def _on_gesture_changed(self, mode: str) -> None:
        self.setCursor(_CURSORS[GestureMode(mode)])
