"""Tests for greedy orthogonal path stepping and the direction command."""
import random

import pytest

from tiletrace.config import TILE_SIZE
from tiletrace.model.geometry import Cell, ImageSize, Point2D
from tiletrace.model.path import Direction, PathTracer, direction_for_step


def world_of(cell: Cell) -> Point2D:
    """Center of a cell in world space."""
    return Point2D((cell.col + 0.5) * TILE_SIZE, (cell.row + 0.5) * TILE_SIZE)


def assert_path_invariants(tracer: PathTracer) -> None:
    cells, directions = tracer.cells, tracer.directions
    assert len(directions) == len(cells) - 1
    for (a, b), d in zip(zip(cells, cells[1:]), directions):
        dx, dy = b.col - a.col, b.row - a.row
        assert abs(dx) + abs(dy) == 1
        assert direction_for_step(dx, dy) is d


def test_horizontal_ties_win():
    tracer = PathTracer(ImageSize(640, 480))
    assert tracer.start_path(Point2D(1, 1))

    tracer.extend_path_to(Cell(3, 1))

    assert tracer.cells == [Cell(0, 0), Cell(1, 0), Cell(2, 0), Cell(3, 0), Cell(3, 1)]
    assert tracer.directions == [Direction.RIGHT, Direction.RIGHT, Direction.RIGHT, Direction.DOWN]
    assert tracer.command == "right right right down"


def test_diagonal_alternates_starting_horizontally():
    tracer = PathTracer(ImageSize(640, 480))
    tracer.start_path(world_of(Cell(5, 5)))
    tracer.extend_path_to(Cell(3, 3))
    assert tracer.command == "left up left up"


def test_vertical_dominant_steps_vertically_first():
    tracer = PathTracer(ImageSize(640, 480))
    tracer.start_path(world_of(Cell(2, 5)))
    tracer.extend_path_to(Cell(3, 1))
    assert tracer.command == "up up up right up"
    assert tracer.cells[-1] == Cell(3, 1)


def test_start_outside_image_is_ignored_and_keeps_existing_path():
    tracer = PathTracer(ImageSize(64, 64))
    tracer.start_path(world_of(Cell(0, 0)))
    tracer.extend_path_to(Cell(1, 0))
    revision = tracer.revision

    assert not tracer.start_path(Point2D(-1, 10))
    assert not tracer.start_path(Point2D(10, 64.5))
    assert tracer.cells == [Cell(0, 0), Cell(1, 0)]
    assert tracer.revision == revision


def test_start_on_image_edge_is_accepted():
    tracer = PathTracer(ImageSize(64, 64))
    assert tracer.start_path(Point2D(64, 64))
    # the edge belongs to the last real tile
    assert tracer.cells == [Cell(3, 3)]


def test_start_on_empty_image_is_ignored():
    tracer = PathTracer()
    assert not tracer.start_path(Point2D(0, 0))
    assert tracer.cells == []


def test_start_clears_previous_path():
    tracer = PathTracer(ImageSize(640, 480))
    tracer.start_path(world_of(Cell(0, 0)))
    tracer.extend_path_to(Cell(4, 0))
    tracer.start_path(world_of(Cell(7, 7)))
    assert tracer.cells == [Cell(7, 7)]
    assert tracer.directions == []
    assert tracer.command == ""


def test_extend_without_path_or_to_same_cell_is_noop():
    tracer = PathTracer(ImageSize(640, 480))
    assert tracer.extend_path_to(Cell(2, 2)) == 0
    assert tracer.cells == []

    tracer.start_path(world_of(Cell(2, 2)))
    revision = tracer.revision
    assert tracer.extend_path_to(Cell(2, 2)) == 0
    assert tracer.revision == revision


def test_extend_to_cell_outside_image_is_ignored():
    tracer = PathTracer(ImageSize(64, 64))
    tracer.start_path(world_of(Cell(1, 1)))

    assert tracer.extend_path_to(Cell(10, 1)) == 0
    assert tracer.extend_path_to(Cell(1, -1)) == 0
    assert tracer.extend_path_to_world(Point2D(100, 20)) == 0
    assert tracer.cells == [Cell(1, 1)]

    # still extendable inside the image afterwards
    assert tracer.extend_path_to(Cell(3, 1)) == 2


def test_extend_never_steps_past_the_last_tile():
    tracer = PathTracer(ImageSize(64, 64))
    tracer.start_path(Point2D(40, 8))

    assert tracer.extend_path_to(Cell(4, 4)) == 0
    assert tracer.extend_path_to(Cell(4, 0)) == 0
    # a pointer exactly on the right edge lands on the last column
    assert tracer.extend_path_to_world(Point2D(64.0, 8)) == 1
    assert tracer.cells == [Cell(2, 0), Cell(3, 0)]
    assert tracer.command == "right"


def test_partial_edge_tile_is_reachable():
    tracer = PathTracer(ImageSize(40, 16))
    tracer.start_path(Point2D(0, 0))
    assert tracer.extend_path_to(Cell(2, 0)) == 2
    assert tracer.extend_path_to(Cell(3, 0)) == 0


def test_end_path_freezes_content():
    tracer = PathTracer(ImageSize(640, 480))
    tracer.start_path(world_of(Cell(0, 0)))
    tracer.extend_path_to(Cell(0, 2))
    tracer.end_path()

    assert not tracer.is_active
    assert tracer.extend_path_to(Cell(5, 5)) == 0
    assert tracer.command == "down down"


def test_clear_drops_everything():
    tracer = PathTracer(ImageSize(640, 480))
    tracer.start_path(world_of(Cell(0, 0)))
    tracer.extend_path_to(Cell(1, 0))
    tracer.clear()
    assert tracer.cells == [] and tracer.directions == [] and tracer.command == ""
    assert not tracer.is_active


def test_continuity_for_random_targets():
    rng = random.Random(42)
    tracer = PathTracer(ImageSize(1600, 1600))
    tracer.start_path(world_of(Cell(50, 50)))
    for _ in range(200):
        tracer.extend_path_to(Cell(rng.randrange(0, 100), rng.randrange(0, 100)))
    assert_path_invariants(tracer)


def test_same_targets_give_same_steps():
    targets = [Cell(9, 3), Cell(2, 8), Cell(2, 8), Cell(15, 0), Cell(0, 0)]

    def trace() -> tuple[list[Cell], list[Direction]]:
        tracer = PathTracer(ImageSize(640, 480))
        tracer.start_path(world_of(Cell(4, 4)))
        for target in targets:
            tracer.extend_path_to(target)
        return tracer.cells, tracer.directions

    assert trace() == trace()


@pytest.mark.parametrize("step, expected", [
    ((1, 0), Direction.RIGHT), ((-1, 0), Direction.LEFT), ((0, 1), Direction.DOWN), ((0, -1), Direction.UP),
])
def test_direction_mapping(step, expected):
    assert direction_for_step(*step) is expected


@pytest.mark.parametrize("step", [(0, 0), (1, 1), (2, 0), (0, -2)])
def test_illegal_steps_raise(step):
    with pytest.raises(ValueError):
        direction_for_step(*step)
