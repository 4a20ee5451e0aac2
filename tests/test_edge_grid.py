"""Tests for grid edge resolution and neighbor complementarity."""

from typing import List, Optional

import pytest

from puzzle_maker import (
    Flat,
    Free,
    MirroredFrom,
    PuzzleUnit,
    PuzzleUnitUnavailableError,
    Segment,
    build_unit_grid,
    generate_puzzle_unit,
    resolve_edges,
    safe_get,
    seeded_random_bool,
    unit_size,
)
from puzzle_maker.edge_grid import empty_grid, iter_puzzle_units


def filled_grid(rows: int, columns: int) -> List[List[Optional[PuzzleUnit]]]:
    """Grid where every cell holds the same plain unit."""
    unit = generate_puzzle_unit((10, 10), Flat(), Free(), Free(), Flat(), random_bool=lambda: False)
    return [[unit] * columns for _ in range(rows)]


def assert_complementary(first: Segment, second: Segment) -> None:
    """Check that two segments are mirror images of each other."""
    assert len(first.curves) == len(second.curves) == 4
    for curve, other in zip(first.curves, second.curves):
        for (x, y), (ox, oy) in zip(curve.points, other.points):
            assert x == ox
            assert y == -oy


class TestResolveEdges:
    """Tests for the per-cell edge table."""

    @pytest.mark.parametrize(
        "row,column,expected",
        [
            (0, 0, (Flat, Free, Free, Flat)),
            (0, 2, (Flat, Free, Free, MirroredFrom)),
            (0, 4, (Flat, Flat, Free, MirroredFrom)),
            (1, 0, (MirroredFrom, Free, Free, Flat)),
            (1, 2, (MirroredFrom, Free, Free, MirroredFrom)),
            (1, 4, (MirroredFrom, Flat, Free, MirroredFrom)),
            (3, 0, (MirroredFrom, Free, Flat, Flat)),
            (3, 2, (MirroredFrom, Free, Flat, MirroredFrom)),
            (3, 4, (MirroredFrom, Flat, Flat, MirroredFrom)),
        ],
    )
    def test_edge_table(self, row: int, column: int, expected: tuple) -> None:
        """Test the edge kind chosen for every kind of cell position."""
        edges = resolve_edges(filled_grid(4, 5), row, column)
        assert tuple(type(edge) for edge in edges) == expected

    def test_mirrors_facing_segments(self) -> None:
        """Test that mirrored edges carry the neighbor's facing segments."""
        units = filled_grid(3, 3)
        top, _, _, left = resolve_edges(units, 1, 1)
        assert isinstance(top, MirroredFrom)
        assert isinstance(left, MirroredFrom)
        assert top.segment is units[0][1].bottom  # type: ignore[union-attr]
        assert left.segment is units[1][0].right  # type: ignore[union-attr]

    def test_missing_top_neighbor(self) -> None:
        """Test that a missing top neighbor raises a distinguished error."""
        units = filled_grid(3, 3)
        units[0][1] = None
        with pytest.raises(PuzzleUnitUnavailableError) as exc_info:
            resolve_edges(units, 1, 1)
        assert exc_info.value.side == "top"
        assert (exc_info.value.row, exc_info.value.column) == (0, 1)

    def test_missing_left_neighbor(self) -> None:
        """Test that a missing left neighbor raises a distinguished error."""
        units = filled_grid(3, 3)
        units[2][0] = None
        with pytest.raises(PuzzleUnitUnavailableError) as exc_info:
            resolve_edges(units, 2, 1)
        assert exc_info.value.side == "left"


class TestBuildUnitGrid:
    """Tests for row-major unit construction."""

    @pytest.mark.parametrize("rows,columns", [(2, 2), (3, 3), (4, 6), (5, 7), (6, 2)])
    def test_grid_is_complete(self, rows: int, columns: int) -> None:
        """Test that every cell receives a unit."""
        units = build_unit_grid(rows, columns, (40, 30), seeded_random_bool(1))
        assert len(units) == rows
        for cells in units:
            assert len(cells) == columns
            assert all(unit is not None for unit in cells)

    @pytest.mark.parametrize("seed", [42, 123, 456, 789, 1000])
    def test_vertical_neighbors_complement(self, seed: int) -> None:
        """Test that a cell's top edge mirrors the bottom edge of the cell above."""
        units = build_unit_grid(4, 5, (40, 30), seeded_random_bool(seed))
        for row in range(3):
            for column in range(5):
                assert_complementary(units[row + 1][column].top, units[row][column].bottom)  # type: ignore[union-attr]

    @pytest.mark.parametrize("seed", [42, 123, 456, 789, 1000])
    def test_horizontal_neighbors_complement(self, seed: int) -> None:
        """Test that a cell's left edge mirrors the right edge of the cell beside it."""
        units = build_unit_grid(4, 5, (40, 30), seeded_random_bool(seed))
        for row in range(4):
            for column in range(4):
                assert_complementary(units[row][column + 1].left, units[row][column].right)  # type: ignore[union-attr]

    def test_border_edges_are_flat(self) -> None:
        """Test that every segment on the puzzle border is flat."""
        units = build_unit_grid(3, 4, (40, 30), seeded_random_bool(5))
        for column in range(4):
            assert units[0][column].top.outer_height == 0  # type: ignore[union-attr]
            assert all(y == 0 for curve in units[2][column].bottom.curves for _, y in curve.points)  # type: ignore
        for row in range(3):
            assert all(y == 0 for curve in units[row][0].left.curves for _, y in curve.points)  # type: ignore
            assert all(y == 0 for curve in units[row][3].right.curves for _, y in curve.points)  # type: ignore

    def test_same_seed_same_grid(self) -> None:
        """Test that a seeded coin flip makes generation deterministic."""
        first = build_unit_grid(3, 3, (40, 40), seeded_random_bool(99))
        second = build_unit_grid(3, 3, (40, 40), seeded_random_bool(99))
        assert first == second

    def test_iteration_is_row_major(self) -> None:
        """Test that units are produced row by row, left to right."""
        units = empty_grid(3, 4)
        order = [(row, column) for row, column, _ in iter_puzzle_units(units, (10, 10), seeded_random_bool(0))]
        assert order == [(row, column) for row in range(3) for column in range(4)]

    def test_iteration_stores_before_yielding(self) -> None:
        """Test that each unit is in the grid when it is yielded."""
        units = empty_grid(2, 3)
        for row, column, unit in iter_puzzle_units(units, (10, 10), seeded_random_bool(0)):
            assert units[row][column] is unit


class TestHelpers:
    """Tests for small grid helpers."""

    def test_safe_get(self) -> None:
        """Test that out of range indexes return None."""
        items = [1, 2, 3]
        assert safe_get(items, 0) == 1
        assert safe_get(items, 2) == 3
        assert safe_get(items, 3) is None
        assert safe_get(items, 999_999) is None
        assert safe_get(items, -1) is None
        assert safe_get(items, -999_999) is None

    def test_unit_size(self) -> None:
        """Test that the cell size divides the image by the grid."""
        assert unit_size((350, 250), 5, 7) == pytest.approx((50, 50))
        assert unit_size((100, 90), 3, 4) == pytest.approx((25, 30))
