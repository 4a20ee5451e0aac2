"""Build a single puzzle unit from the edge kind of each side."""

import logging
import random
from typing import Callable, Optional, Tuple

from .geometry import SEGMENT_PATTERN, build_outline, rotate_times
from .models import EdgeKind, Flat, Free, MirroredFrom, PuzzleUnit, Segment

logger = logging.getLogger(__name__)

RandomBool = Callable[[], bool]
Size = Tuple[float, float]

_rng = random.Random()


def default_random_bool() -> bool:
    """Coin flip from the module's own generator."""
    return _rng.random() > 0.5


def seeded_random_bool(seed: Optional[int]) -> RandomBool:
    """Create a coin flip function backed by its own seeded generator."""
    rng = random.Random(seed)
    return lambda: rng.random() > 0.5


def build_segment(edge: EdgeKind, sx: float, sy: float, random_bool: RandomBool) -> Segment:
    """Build the un-rotated segment for one side of a unit.

    Args:
        edge: How the side should look.
        sx: Scale along the side.
        sy: Scale across the side (tab height).
        random_bool: Coin flip deciding whether a free tab points inward.

    Returns:
        The segment in its canonical, un-rotated orientation.
    """
    if isinstance(edge, MirroredFrom):
        return edge.segment.mirror()
    if isinstance(edge, Flat):
        # Flatten before scaling so no curvature survives
        return SEGMENT_PATTERN.flatten().scale(sx, sy)
    if isinstance(edge, Free):
        segment = SEGMENT_PATTERN.scale(sx, sy)
        return segment.mirror() if random_bool() else segment
    raise TypeError(f"Unsupported edge kind: {edge!r}")


def generate_puzzle_unit(
    size: Size,
    top: EdgeKind,
    right: EdgeKind,
    bottom: EdgeKind,
    left: EdgeKind,
    random_bool: Optional[RandomBool] = None,
) -> PuzzleUnit:
    """Generate a complete puzzle unit for the given cell size and edges.

    Degenerate sizes are not validated here; the caller owns that check.

    Args:
        size: (width, height) of the cell. The final outline may be larger
            because of outward tabs.
        top: Edge kind of the top side.
        right: Edge kind of the right side.
        bottom: Edge kind of the bottom side.
        left: Edge kind of the left side.
        random_bool: Coin flip used for free edges.

    Returns:
        PuzzleUnit holding the four un-rotated segments and the closed outline.
    """
    if random_bool is None:
        random_bool = default_random_bool
    width, height = size

    top_segment = build_segment(top, width, height, random_bool)
    right_segment = build_segment(right, height, height, random_bool)
    bottom_segment = build_segment(bottom, width, width, random_bool)
    left_segment = build_segment(left, height, height, random_bool)

    outline = build_outline(
        [
            top_segment,
            rotate_times(right_segment, width),
            rotate_times(bottom_segment, height, width),
            rotate_times(left_segment, height, height, height),
        ]
    )
    logger.debug("Built unit %sx%s with outline %.2fx%.2f", width, height, outline.width, outline.height)

    return PuzzleUnit(
        top=top_segment,
        right=right_segment,
        bottom=bottom_segment,
        left=left_segment,
        outline=outline,
    )
