"""Tests for the screen / world / cell conversions."""
import itertools

import pytest

from tiletrace.model.geometry import (
    Cell, ImageSize, Point2D, Rect, ViewTransform, ZoomMode, cell_in_image, cell_origin, clamp, grid_size,
    snap_to_image, within_image, world_to_cell,
)


TRANSFORMS = [
    ViewTransform(1.0, Point2D(0, 0)),
    ViewTransform(0.1, Point2D(-35.5, 12.25), ZoomMode.ABSOLUTE),
    ViewTransform(8.0, Point2D(1e4, -3e3), ZoomMode.ABSOLUTE),
    ViewTransform(0.37, Point2D(0.001, 999.999)),
]
POINTS = [Point2D(0, 0), Point2D(123.4, -56.7), Point2D(1e5, 3.3e4), Point2D(-0.5, 0.5)]


@pytest.mark.parametrize("transform", TRANSFORMS)
def test_round_trip_screen_world_screen(transform):
    for p in POINTS:
        assert transform.world_to_screen(transform.screen_to_world(p)).isclose(p, abs_tol=1e-6)
        assert transform.screen_to_world(transform.world_to_screen(p)).isclose(p, abs_tol=1e-6)


def test_screen_to_world_formula():
    t = ViewTransform(2.0, Point2D(10, 20))
    assert t.screen_to_world(Point2D(30, 60)) == Point2D(10, 20)


@pytest.mark.parametrize("bad", [0.0, -1.0, float("nan"), float("inf")])
def test_transform_rejects_invalid_scale(bad):
    with pytest.raises(ValueError):
        ViewTransform(scale=bad)


def test_world_to_cell_floors_including_negative():
    assert world_to_cell(Point2D(0, 0)) == Cell(0, 0)
    assert world_to_cell(Point2D(15.99, 16.0)) == Cell(0, 1)
    assert world_to_cell(Point2D(-0.01, 33)) == Cell(-1, 2)
    assert world_to_cell(Point2D(10, 10), tile_size=4) == Cell(2, 2)


def test_cell_origin():
    assert cell_origin(Cell(3, 2)) == Point2D(48, 32)


def test_within_image_is_inclusive():
    size = ImageSize(100, 50)
    for x, y in itertools.product([0, 50, 100], [0, 25, 50]):
        assert within_image(Point2D(x, y), size)
    assert not within_image(Point2D(-0.001, 10), size)
    assert not within_image(Point2D(10, 50.001), size)


def test_cell_in_image_requires_a_covered_pixel():
    size = ImageSize(32, 32)
    assert cell_in_image(Cell(0, 0), size)
    assert cell_in_image(Cell(1, 1), size)
    assert not cell_in_image(Cell(2, 2), size)  # origin (32, 32) is past the last pixel
    assert not cell_in_image(Cell(2, 0), size)
    # a partial tile still counts
    assert cell_in_image(Cell(2, 0), ImageSize(33, 32))
    assert not cell_in_image(Cell(3, 0), size)
    assert not cell_in_image(Cell(-1, 0), size)


def test_snap_to_image_clamps_onto_tile_grid():
    size = ImageSize(64, 40)
    assert grid_size(size) == (4, 3)
    assert snap_to_image(Cell(4, 3), size) == Cell(3, 2)
    assert snap_to_image(Cell(-2, 1), size) == Cell(0, 1)
    assert snap_to_image(Cell(2, 1), size) == Cell(2, 1)


def test_rect_center_and_point_helpers():
    r = Rect(10, 20, 100, 40)
    assert r.center == Point2D(60, 40)
    assert Point2D(0, 0).distance_to(Point2D(3, 4)) == 5
    assert Point2D(0, 0).midpoint(Point2D(4, -2)) == Point2D(2, -1)
    assert clamp(12, 0, 10) == 10 and clamp(-1, 0, 10) == 0
    with pytest.raises(ZeroDivisionError):
        Point2D(1, 1) / 0
