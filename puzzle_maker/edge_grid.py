"""Edge resolution for a grid of interlocking puzzle units.

Units are built row by row, left to right. Each shared edge is generated once
by the unit above or to the left (as a free edge on its bottom or right side)
and reused, mirrored, by the unit below or to the right.
"""

import logging
from typing import Iterator, List, Optional, Sequence, Tuple, TypeVar

from .models import EdgeKind, Flat, Free, MirroredFrom, PuzzleUnit, PuzzleUnitUnavailableError
from .unit_factory import RandomBool, Size, default_random_bool, generate_puzzle_unit

logger = logging.getLogger(__name__)

T = TypeVar("T")

UnitGrid = List[List[Optional[PuzzleUnit]]]
EdgeKinds = Tuple[EdgeKind, EdgeKind, EdgeKind, EdgeKind]


def safe_get(items: Sequence[T], index: int) -> Optional[T]:
    """Return items[index], or None when the index is out of range."""
    if 0 <= index < len(items):
        return items[index]
    return None


def unit_size(image_size: Tuple[float, float], rows: int, columns: int) -> Size:
    """Size of one grid cell for an image of the given size."""
    width, height = image_size
    return (width / columns, height / rows)


def _neighbor(units: UnitGrid, row: int, column: int, side: str) -> PuzzleUnit:
    cells = safe_get(units, row)
    unit = safe_get(cells, column) if cells is not None else None
    if unit is None:
        raise PuzzleUnitUnavailableError(row, column, side)
    return unit


def resolve_edges(units: UnitGrid, row: int, column: int) -> EdgeKinds:
    """Decide the edge kind of each side of the cell at (row, column).

    Border sides are flat. Top and left sides mirror the neighbor built
    before this cell; right and bottom sides are free and will be mirrored
    by the next cells.

    Args:
        units: Grid of units built so far.
        row: Row of the cell.
        column: Column of the cell.

    Returns:
        Tuple of (top, right, bottom, left) edge kinds.

    Raises:
        PuzzleUnitUnavailableError: If the top or left neighbor is missing.
    """
    last_row = len(units) - 1
    last_column = len(units[row]) - 1

    top: EdgeKind
    left: EdgeKind
    if row == 0:
        top = Flat()
    else:
        top = MirroredFrom(_neighbor(units, row - 1, column, "top").bottom)
    if column == 0:
        left = Flat()
    else:
        left = MirroredFrom(_neighbor(units, row, column - 1, "left").right)

    right: EdgeKind = Flat() if column == last_column else Free()
    bottom: EdgeKind = Flat() if row == last_row else Free()
    return (top, right, bottom, left)


def empty_grid(rows: int, columns: int) -> List[List[Optional[T]]]:
    """Create a rows x columns matrix filled with None."""
    return [[None] * columns for _ in range(rows)]


def iter_puzzle_units(
    units: UnitGrid,
    size: Size,
    random_bool: Optional[RandomBool] = None,
) -> Iterator[Tuple[int, int, PuzzleUnit]]:
    """Build units in row-major order, storing each one before yielding it.

    Args:
        units: Pre-sized grid that receives the units.
        size: (width, height) of every cell.
        random_bool: Coin flip used for free edges.

    Yields:
        Tuples of (row, column, unit).

    Raises:
        PuzzleUnitUnavailableError: If a neighbor lookup fails; no further
            units are built.
    """
    if random_bool is None:
        random_bool = default_random_bool

    for row, cells in enumerate(units):
        for column in range(len(cells)):
            top, right, bottom, left = resolve_edges(units, row, column)
            unit = generate_puzzle_unit(size, top, right, bottom, left, random_bool=random_bool)
            cells[column] = unit
            yield row, column, unit


def build_unit_grid(
    rows: int,
    columns: int,
    size: Size,
    random_bool: Optional[RandomBool] = None,
) -> UnitGrid:
    """Build the full grid of units.

    Args:
        rows: Number of rows.
        columns: Number of columns.
        size: (width, height) of every cell.
        random_bool: Coin flip used for free edges.

    Returns:
        rows x columns grid of units.
    """
    units: UnitGrid = empty_grid(rows, columns)
    for _ in iter_puzzle_units(units, size, random_bool):
        pass
    logger.debug("Built %dx%d unit grid", rows, columns)
    return units
