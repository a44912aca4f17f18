"""
Overlay projection: path cells -> screen rectangles for the current transform.

Stateless. The canvas calls project_path() on every paint, so markers are
always derived from the transform snapshot being painted.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, TYPE_CHECKING

import numpy as np

from tiletrace.config import TILE_SIZE
from tiletrace.model.geometry import Cell, Rect, ViewTransform

if TYPE_CHECKING:
    import numpy.typing as npt


@dataclass(frozen=True)
class OverlayMarker:
    rect: Rect
    is_origin: bool = False


def cells_to_array(cells: Sequence[Cell]) -> npt.NDArray[np.float64]:
    """(N, 2) array of (col, row)."""
    if not cells:
        return np.empty((0, 2), dtype=np.float64)
    return np.asarray(cells, dtype=np.float64).reshape(-1, 2)


def project_path(
    cells: Sequence[Cell],
    transform: ViewTransform,
    tile_size: int = TILE_SIZE,
) -> list[OverlayMarker]:
    """
    Screen-space marker for every cell of the path; the first one is the origin.
    """
    arr = cells_to_array(cells)
    if arr.shape[0] == 0:
        return []

    top_left = arr * (tile_size * transform.scale) + np.array([transform.pan.x, transform.pan.y])
    side = tile_size * transform.scale

    return [
        OverlayMarker(Rect(float(x), float(y), side, side), is_origin=(i == 0))
        for i, (x, y) in enumerate(top_left)
    ]
