"""
Path Tracer
===========
Turns pointer motion over the grid into an orthogonal, gap-free cell path and
the matching direction tokens.

The stepping is a greedy discretisation, not a router: from the last cell it
moves one unit at a time along the axis with the larger remaining distance,
preferring the horizontal axis on ties. The same (start, target) pair always
yields the same steps.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Optional

from tiletrace.config import TILE_SIZE
from tiletrace.model.geometry import (
    Cell, ImageSize, Point2D, cell_in_image, snap_to_image, within_image, world_to_cell,
)

logger = logging.getLogger(__name__)


class Direction(StrEnum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


_STEP_TO_DIRECTION: dict[tuple[int, int], Direction] = {
    (1, 0): Direction.RIGHT,
    (-1, 0): Direction.LEFT,
    (0, 1): Direction.DOWN,
    (0, -1): Direction.UP,
}


def direction_for_step(dx: int, dy: int) -> Direction:
    """
    Map a unit grid step to its direction token.

    Raises:
        ValueError: If (dx, dy) is not a single step along one axis.
    """
    try:
        return _STEP_TO_DIRECTION[(dx, dy)]
    except KeyError:
        raise ValueError(f"({dx}, {dy}) is not a unit orthogonal step.") from None


def _sign(v: int) -> int:
    return (v > 0) - (v < 0)


@dataclass
class PathState:
    cells: list[Cell] = field(default_factory=list)
    directions: list[Direction] = field(default_factory=list)
    active: bool = False

    @property
    def last_cell(self) -> Optional[Cell]:
        return self.cells[-1] if self.cells else None

    @property
    def is_empty(self) -> bool:
        return not self.cells


class PathTracer:
    """
    Owns the single PathState of the viewer.

    Bounds policy: a path can only start on the image, and it is only extended
    towards cells that cover part of the image. Targets off the image are
    ignored so the emitted command never walks off the map. A point exactly on
    the right or bottom edge belongs to the last row or column of tiles.
    """
    def __init__(self, image_size: ImageSize = ImageSize(0, 0), tile_size: int = TILE_SIZE) -> None:
        self.image_size = image_size
        self.tile_size = tile_size
        self.state = PathState()
        self.revision: int = 0

    # ---- read access ----

    @property
    def cells(self) -> list[Cell]:
        return list(self.state.cells)

    @property
    def directions(self) -> list[Direction]:
        return list(self.state.directions)

    @property
    def is_active(self) -> bool:
        return self.state.active

    @property
    def command(self) -> str:
        """Space-joined direction tokens, empty when there is no path."""
        return " ".join(d.value for d in self.state.directions)

    # ---- mutation ----

    def start_path(self, world_point: Point2D) -> bool:
        """
        Start a new path at the cell under world_point.

        Returns:
            False (and leaves the current path untouched) if the point is off the image.
        """
        if self.image_size.is_empty or not within_image(world_point, self.image_size):
            logger.debug("Path start at %s ignored: outside image.", world_point)
            return False

        origin = self._cell_at(world_point)
        self.state = PathState(cells=[origin], directions=[], active=True)
        self.revision += 1
        logger.debug("Path started at %s", origin)
        return True

    def extend_path_to(self, target: Cell) -> int:
        """
        Step from the last cell to target one axis-aligned unit at a time.

        Returns:
            Number of cells appended (0 when nothing changed).
        """
        last = self.state.last_cell
        if not self.state.active or last is None or target == last:
            return 0
        if not cell_in_image(target, self.image_size, self.tile_size):
            logger.debug("Path extension to %s ignored: outside image.", target)
            return 0

        cx, cy = last
        steps = 0
        while (cx, cy) != (target.col, target.row):
            rem_x = target.col - cx
            rem_y = target.row - cy

            # favour the axis with larger remaining delta, horizontal on ties
            if abs(rem_x) >= abs(rem_y):
                step_x, step_y = _sign(rem_x), 0
            else:
                step_x, step_y = 0, _sign(rem_y)

            cx += step_x
            cy += step_y
            self.state.directions.append(direction_for_step(step_x, step_y))
            self.state.cells.append(Cell(cx, cy))
            steps += 1

        self.revision += 1
        return steps

    def extend_path_to_world(self, world_point: Point2D) -> int:
        if self.image_size.is_empty or not within_image(world_point, self.image_size):
            return 0
        return self.extend_path_to(self._cell_at(world_point))

    def _cell_at(self, world_point: Point2D) -> Cell:
        return snap_to_image(world_to_cell(world_point, self.tile_size), self.image_size, self.tile_size)

    def end_path(self) -> None:
        """Stop accepting extensions. The content is kept."""
        if self.state.active:
            self.state.active = False
            self.revision += 1
            logger.debug("Path finished: %d cells", len(self.state.cells))

    def clear(self) -> None:
        if self.state.is_empty and not self.state.active:
            return
        self.state = PathState()
        self.revision += 1
