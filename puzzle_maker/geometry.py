"""Geometric logic for puzzle piece edges and outlines."""

from typing import Iterable, List

from .models import BezierCurve, ClosedPath, Segment

# Canonical tab spanning x in [0, 1] and y in [0, 1/3]. Every edge of every
# piece is derived from it by flattening, scaling, mirroring and rotating.
# The pattern is symmetric under x -> 1 - x traversed backwards, so a
# mirrored copy lines up with its neighbor without reversing curve order.
SEGMENT_PATTERN = Segment(
    (
        BezierCurve(end=(0.4, 0.0), control1=(1.0 / 9, 0.0), control2=(2.0 / 9, 0.0)),
        BezierCurve(end=(0.5, 1.0 / 3), control1=(0.4, 0.0), control2=(1.0 / 5, 1.0 / 3)),
        BezierCurve(end=(0.6, 0.0), control1=(0.8, 1.0 / 3), control2=(0.6, 0.0)),
        BezierCurve(end=(1.0, 0.0), control1=(7.0 / 9, 0.0), control2=(8.0 / 9, 0.0)),
    )
)


def rotate_times(segment: Segment, *ty_values: float) -> Segment:
    """Apply one rotation per ty value, in order."""
    for ty in ty_values:
        segment = segment.rotate(ty)
    return segment


def build_outline(rotated_segments: Iterable[Segment]) -> ClosedPath:
    """Concatenate rotated segments into a closed, origin-normalized outline.

    Args:
        rotated_segments: Segments already rotated into place, in
            top -> right -> bottom -> left order.

    Returns:
        ClosedPath whose bounding box starts at (0, 0).
    """
    curves: List[BezierCurve] = []
    for segment in rotated_segments:
        curves.extend(segment.curves)

    path = ClosedPath(start=(0.0, 0.0), curves=tuple(curves))
    min_x, min_y, _, _ = path.bounds()
    return path.translated(-min_x, -min_y)
