"""
Coordinate Spaces
=================
Pure conversions between the three coordinate spaces of the map viewer.

- Screen space: pixels relative to the top-left of the canvas widget.
- World space: pixels of the full-resolution map image.
- Cell space: integer (col, row) of a TILE_SIZE x TILE_SIZE grid square.

Classes:
    Point2D: Immutable 2D point / vector.
    Cell: Grid square address.
    ImageSize: Pixel extent of the loaded map image.
    Rect: Axis-aligned rectangle (container or overlay marker).
    ViewTransform: Immutable scale + pan snapshot produced by the Viewport.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import StrEnum
from typing import NamedTuple

from tiletrace.config import TILE_SIZE


@dataclass(frozen=True)
class Point2D:
    """A point (or displacement) in screen or world space."""
    x: float
    y: float

    def __add__(self, other: Point2D) -> Point2D:
        return Point2D(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Point2D) -> Point2D:
        return Point2D(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> Point2D:
        return Point2D(self.x * scalar, self.y * scalar)

    def __truediv__(self, scalar: float) -> Point2D:
        return Point2D(self.x / scalar, self.y / scalar)

    def distance_to(self, other: Point2D) -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def midpoint(self, other: Point2D) -> Point2D:
        return Point2D((self.x + other.x) / 2, (self.y + other.y) / 2)

    def isclose(self, other: Point2D, abs_tol: float = 1e-9) -> bool:
        return math.isclose(self.x, other.x, abs_tol=abs_tol) and math.isclose(self.y, other.y, abs_tol=abs_tol)


class Cell(NamedTuple):
    """One grid square, addressed from the image's top-left corner."""
    col: int
    row: int


@dataclass(frozen=True)
class ImageSize:
    width: int
    height: int

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    @property
    def origin(self) -> Point2D:
        return Point2D(self.x, self.y)

    @property
    def center(self) -> Point2D:
        return Point2D(self.x + self.width / 2, self.y + self.height / 2)

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0


class ZoomMode(StrEnum):
    """How the current scale was obtained."""
    FIT = "fit"
    ABSOLUTE = "absolute"


@dataclass(frozen=True)
class ViewTransform:
    """
    World -> screen mapping: screen = world * scale + pan.

    Instances are snapshots. The Viewport replaces its transform on every
    change, so a consumer holding a reference always sees a consistent pair of
    scale and pan.
    """
    scale: float = 1.0
    pan: Point2D = Point2D(0.0, 0.0)
    mode: ZoomMode = ZoomMode.FIT

    def __post_init__(self) -> None:
        if not math.isfinite(self.scale) or self.scale <= 0.0:
            raise ValueError(f"Scale must be a positive finite number, got {self.scale}.")

    def screen_to_world(self, point: Point2D) -> Point2D:
        return (point - self.pan) / self.scale

    def world_to_screen(self, point: Point2D) -> Point2D:
        return point * self.scale + self.pan


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def world_to_cell(point: Point2D, tile_size: int = TILE_SIZE) -> Cell:
    return Cell(math.floor(point.x / tile_size), math.floor(point.y / tile_size))


def cell_origin(cell: Cell, tile_size: int = TILE_SIZE) -> Point2D:
    """World coordinates of the top-left corner of a cell."""
    return Point2D(cell.col * tile_size, cell.row * tile_size)


def within_image(point: Point2D, size: ImageSize) -> bool:
    """True if the world point lies on the image, edges included."""
    return 0 <= point.x <= size.width and 0 <= point.y <= size.height


def grid_size(size: ImageSize, tile_size: int = TILE_SIZE) -> tuple[int, int]:
    """Number of (partial or whole) tiles across and down the image."""
    return math.ceil(size.width / tile_size), math.ceil(size.height / tile_size)


def cell_in_image(cell: Cell, size: ImageSize, tile_size: int = TILE_SIZE) -> bool:
    """True if the cell covers at least one pixel of the image."""
    cols, rows = grid_size(size, tile_size)
    return 0 <= cell.col < cols and 0 <= cell.row < rows


def snap_to_image(cell: Cell, size: ImageSize, tile_size: int = TILE_SIZE) -> Cell:
    """Clamp a cell onto the tile grid of a non-empty image."""
    cols, rows = grid_size(size, tile_size)
    return Cell(int(clamp(cell.col, 0, cols - 1)), int(clamp(cell.row, 0, rows - 1)))
