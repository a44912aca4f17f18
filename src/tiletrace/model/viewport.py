"""
Viewport State
==============
Owns the scale, pan offset and zoom mode of the map view.

Why is this file needed?
------------------------
1. Single writer: Only the Viewport replaces the ViewTransform. The gesture
   classifier and the overlay read snapshots of it.
2. Zoom about a point: Zoom buttons, pinch gestures, the mouse wheel and
   resizing in absolute mode all reduce to set_absolute_zoom() with a
   different anchor.
"""
from __future__ import annotations

import logging
from typing import Optional

from tiletrace.config import ZOOM_FIT, ZOOM_MAX, ZOOM_MIN
from tiletrace.model.geometry import ImageSize, Point2D, Rect, ViewTransform, ZoomMode, clamp

logger = logging.getLogger(__name__)


class Viewport:
    def __init__(
        self,
        image_size: ImageSize = ImageSize(0, 0),
        container: Rect = Rect(0.0, 0.0, 0.0, 0.0),
        zoom_min: float = ZOOM_MIN,
        zoom_max: float = ZOOM_MAX,
    ) -> None:
        if zoom_min <= 0 or zoom_min > zoom_max:
            raise ValueError(f"Invalid zoom bounds [{zoom_min}, {zoom_max}].")
        self.zoom_min = zoom_min
        self.zoom_max = zoom_max
        self.image_size = image_size
        self.container = container
        self._transform = ViewTransform(scale=clamp(1.0, zoom_min, zoom_max))

    @property
    def transform(self) -> ViewTransform:
        """The current immutable transform snapshot."""
        return self._transform

    @property
    def scale(self) -> float:
        return self._transform.scale

    @property
    def mode(self) -> ZoomMode:
        return self._transform.mode

    def _is_ready(self) -> bool:
        return not self.image_size.is_empty and not self.container.is_empty

    # ------------------------------------------------------------------------------
    # Zoom operations
    # ------------------------------------------------------------------------------

    def fit_to_container(self, container: Optional[Rect] = None) -> ViewTransform:
        """
        Scale the image to the largest size that fits the container and center it.
        """
        if container is not None:
            self.container = container
        if not self._is_ready():
            logger.debug("fit_to_container skipped: image=%s container=%s", self.image_size, self.container)
            return self._transform

        rect = self.container
        img = self.image_size
        scale = clamp(min(rect.width / img.width, rect.height / img.height), self.zoom_min, self.zoom_max)

        # center image within rect
        drawn_w = img.width * scale
        drawn_h = img.height * scale
        pan = Point2D(rect.x + (rect.width - drawn_w) / 2, rect.y + (rect.height - drawn_h) / 2)

        self._transform = ViewTransform(scale=scale, pan=pan, mode=ZoomMode.FIT)
        return self._transform

    def set_absolute_zoom(self, target_scale: float, anchor_world: Point2D, anchor_screen: Point2D) -> ViewTransform:
        """
        Set the scale (clamped to the zoom bounds) and move the pan so that
        anchor_world is drawn at anchor_screen.
        """
        scale = clamp(target_scale, self.zoom_min, self.zoom_max)
        pan = anchor_screen - anchor_world * scale
        self._transform = ViewTransform(scale=scale, pan=pan, mode=ZoomMode.ABSOLUTE)
        return self._transform

    def zoom_to(self, level: str) -> ViewTransform:
        """
        Apply a named zoom command: "fit" or a numeric scale such as "1" or "5".

        Numeric levels keep the world point under the container center fixed.

        Raises:
            ValueError: If the level is neither "fit" nor a number.
        """
        if level == ZOOM_FIT:
            return self.fit_to_container()

        try:
            target = float(level)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Unknown zoom level {level!r}.") from e

        mid_screen = self.container.center
        mid_world = self._transform.screen_to_world(mid_screen)
        return self.set_absolute_zoom(target, mid_world, mid_screen)

    def zoom_by(self, factor: float, anchor_screen: Point2D) -> ViewTransform:
        """Multiply the current scale, keeping the point under anchor_screen fixed."""
        if factor <= 0:
            return self._transform
        anchor_world = self._transform.screen_to_world(anchor_screen)
        return self.set_absolute_zoom(self.scale * factor, anchor_world, anchor_screen)

    def pan_by(self, dx: float, dy: float) -> ViewTransform:
        t = self._transform
        self._transform = ViewTransform(scale=t.scale, pan=t.pan + Point2D(dx, dy), mode=ZoomMode.ABSOLUTE)
        return self._transform

    # ------------------------------------------------------------------------------
    # Container / image changes
    # ------------------------------------------------------------------------------

    def resize(self, container: Rect) -> ViewTransform:
        """
        React to a new container rect.

        Fit mode re-fits from scratch. Absolute mode keeps the world point that
        was under the old container center under the new center.
        """
        old_center = self.container.center
        self.container = container

        if self._transform.mode == ZoomMode.FIT:
            return self.fit_to_container()

        mid_world = self._transform.screen_to_world(old_center)
        return self.set_absolute_zoom(self.scale, mid_world, container.center)

    def set_image_size(self, size: ImageSize) -> ViewTransform:
        """Install a freshly loaded image and fit it."""
        self.image_size = size
        logger.debug("Image size set to %dx%d", size.width, size.height)
        return self.fit_to_container()
