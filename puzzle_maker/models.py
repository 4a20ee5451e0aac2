"""Data models for puzzle units, elements and generation results."""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Tuple, Union

import numpy as np
from PIL import Image

Point = Tuple[float, float]
Bounds = Tuple[float, float, float, float]
ElementGrid = List[List[Optional["PuzzleElement"]]]

# Absolute tolerance used when comparing curve points.
EPSILON = 1e-6


@dataclass(frozen=True)
class BezierCurve:
    """A cubic Bezier curve that starts where the previous curve ends."""

    end: Point  # End point
    control1: Point  # Control point 1
    control2: Point  # Control point 2

    @property
    def points(self) -> Tuple[Point, Point, Point]:
        """All points of the curve in (end, control1, control2) order."""
        return (self.end, self.control1, self.control2)

    def transform(self, fn: Callable[[Point], Point]) -> "BezierCurve":
        """Apply a point function to the end point and both control points."""
        return BezierCurve(fn(self.end), fn(self.control1), fn(self.control2))

    def evaluate(self, start: Point, t: float) -> Point:
        """Evaluate the curve at parameter t (0 to 1)."""
        mt = 1 - t
        x = mt**3 * start[0] + 3 * mt**2 * t * self.control1[0] + 3 * mt * t**2 * self.control2[0] + t**3 * self.end[0]
        y = mt**3 * start[1] + 3 * mt**2 * t * self.control1[1] + 3 * mt * t**2 * self.control2[1] + t**3 * self.end[1]
        return (x, y)

    def get_points(self, start: Point, num_points: int = 20) -> np.ndarray:
        """Generate points along the curve."""
        t_values = np.linspace(0, 1, num_points)
        return np.array([self.evaluate(start, t) for t in t_values])


def _points_bounds(points: List[Point]) -> Bounds:
    xs = [p[0] for p in points]
    ys = [p[1] for p in points]
    return (min(xs), min(ys), max(xs), max(ys))


@dataclass(frozen=True)
class Segment:
    """One edge of a puzzle unit: exactly four cubic curves starting at (0, 0).

    Segments are kept in their un-rotated orientation, where the baseline runs
    along the x axis and positive y points away from the piece (a tab).
    """

    curves: Tuple[BezierCurve, ...]

    def __post_init__(self) -> None:
        if len(self.curves) != 4:
            raise ValueError(f"A segment needs exactly 4 curves, got {len(self.curves)}")

    def _map(self, fn: Callable[[Point], Point]) -> "Segment":
        return Segment(tuple(curve.transform(fn) for curve in self.curves))

    def flatten(self) -> "Segment":
        """Force every y value to 0, removing the tab."""
        return self._map(lambda p: (p[0], 0.0))

    def mirror(self) -> "Segment":
        """Negate every y value, turning a tab into a blank and vice versa."""
        return self._map(lambda p: (p[0], -p[1]))

    def scale(self, sx: float, sy: float) -> "Segment":
        """Multiply x values by sx and y values by sy."""
        return self._map(lambda p: (p[0] * sx, p[1] * sy))

    def rotate(self, ty: float) -> "Segment":
        """Rotate by -90 degrees after translating by (0, ty).

        A point (x, y) becomes (y + ty, -x). Four rotations with the same ty
        give back the original segment.
        """
        return self._map(lambda p: (p[1] + ty, -p[0]))

    def bounds(self) -> Bounds:
        """Bounding box of the segment path, control points included."""
        points: List[Point] = [(0.0, 0.0)]
        for curve in self.curves:
            points.extend(curve.points)
        return _points_bounds(points)

    @property
    def outer_height(self) -> float:
        """Height of an outward tab, 0 for flat or inward segments."""
        _, min_y, _, max_y = self.bounds()
        height = max_y - min_y
        if min_y < 0 or height == 0:
            return 0.0
        return height

    def is_close(self, other: "Segment", abs_tol: float = EPSILON) -> bool:
        """Check that every point of both segments agrees within abs_tol."""
        if len(self.curves) != len(other.curves):
            return False
        for mine, theirs in zip(self.curves, other.curves):
            for p, q in zip(mine.points, theirs.points):
                if not (math.isclose(p[0], q[0], abs_tol=abs_tol) and math.isclose(p[1], q[1], abs_tol=abs_tol)):
                    return False
        return True


@dataclass(frozen=True)
class ClosedPath:
    """A closed outline made of cubic curves.

    Outlines live in a y-up frame: the top edge of a piece has the largest y.
    Renderers flip the y axis when drawing onto image rows.
    """

    start: Point
    curves: Tuple[BezierCurve, ...]

    def bounds(self) -> Bounds:
        """Bounding box of the path, control points included."""
        points: List[Point] = [self.start]
        for curve in self.curves:
            points.extend(curve.points)
        return _points_bounds(points)

    @property
    def width(self) -> float:
        min_x, _, max_x, _ = self.bounds()
        return max_x - min_x

    @property
    def height(self) -> float:
        _, min_y, _, max_y = self.bounds()
        return max_y - min_y

    def translated(self, dx: float, dy: float) -> "ClosedPath":
        """Return the path moved by (dx, dy)."""

        def move(p: Point) -> Point:
            return (p[0] + dx, p[1] + dy)

        return ClosedPath(move(self.start), tuple(curve.transform(move) for curve in self.curves))

    def scaled(self, factor: float) -> "ClosedPath":
        """Return the path with every coordinate multiplied by factor."""

        def grow(p: Point) -> Point:
            return (p[0] * factor, p[1] * factor)

        return ClosedPath(grow(self.start), tuple(curve.transform(grow) for curve in self.curves))

    def to_polygon(self, points_per_curve: int = 20) -> List[Point]:
        """Sample the outline into a closed polygon."""
        polygon: List[Point] = []
        current = self.start
        for curve in self.curves:
            points = curve.get_points(current, points_per_curve)
            # Skip the last point of each curve, it starts the next one
            polygon.extend((float(x), float(y)) for x, y in points[:-1])
            current = curve.end
        polygon.append(polygon[0])
        return polygon


@dataclass(frozen=True)
class PuzzleUnit:
    """Geometry of a single piece.

    The four segments are never rotated so that neighbors can mirror them
    directly; the outline is built from rotated copies.
    """

    top: Segment
    right: Segment
    bottom: Segment
    left: Segment
    outline: ClosedPath

    @property
    def segments(self) -> Tuple[Segment, Segment, Segment, Segment]:
        return (self.top, self.right, self.bottom, self.left)


@dataclass(frozen=True)
class PuzzleElement:
    """A finished piece: rendered image, board position and source unit."""

    image: Image.Image
    position: Point
    puzzle_unit: PuzzleUnit


# Edge kinds used when building a unit


@dataclass(frozen=True)
class Flat:
    """Straight edge, used on the puzzle border."""


@dataclass(frozen=True)
class Free:
    """Edge whose tab direction is picked at random."""


@dataclass(frozen=True)
class MirroredFrom:
    """Edge that complements an already built neighbor segment."""

    segment: Segment


EdgeKind = Union[Flat, Free, MirroredFrom]


class PuzzleMakerError(Exception):
    """Base error for puzzle generation."""


class InvalidGridSizeError(PuzzleMakerError):
    """Raised when the grid has fewer than 2 rows or columns."""


class InvalidImageSizeError(PuzzleMakerError):
    """Raised when the rendering backend could not produce a piece image."""


class PuzzleUnitUnavailableError(PuzzleMakerError):
    """Raised when a neighbor unit needed to resolve an edge is missing."""

    def __init__(self, row: int, column: int, side: str):
        self.row = row
        self.column = column
        self.side = side
        super().__init__(f"Puzzle unit for the {side} neighbor of ({row}, {column}) is unavailable")


class GenerationOutcome(str, Enum):
    """Final outcome of a generation run."""

    SUCCESS = "success"
    INVALID_GRID_SIZE = "invalid_grid_size"
    PUZZLE_UNIT_UNAVAILABLE = "puzzle_unit_unavailable"
    INVALID_IMAGE_SIZE = "invalid_image_size"
    # A backend or the coordinator raised; the error is also set on the future
    UNEXPECTED_ERROR = "unexpected_error"


@dataclass(frozen=True)
class PuzzleResult:
    """Result of a generation run; elements are only set on success."""

    outcome: GenerationOutcome
    elements: Optional[ElementGrid] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.outcome is GenerationOutcome.SUCCESS

    def unwrap(self) -> ElementGrid:
        """Return the element grid or raise the error matching the outcome."""
        if self.ok and self.elements is not None:
            return self.elements
        if self.error is not None:
            raise self.error
        raise PuzzleMakerError(f"Puzzle generation failed: {self.outcome.value}")
