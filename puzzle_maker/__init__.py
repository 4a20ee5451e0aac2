"""Puzzle maker - cut images into interlocking jigsaw puzzle elements.

This package provides the Bezier segment engine used for piece edges, a unit
factory and grid resolver that keep shared edges complementary, and a
concurrent pipeline that renders every piece with a pluggable backend.
"""

from .config import DEFAULT_DARK_SHADOW, DEFAULT_LIGHT_SHADOW, Settings, ShadowConfig, get_settings
from .edge_grid import build_unit_grid, iter_puzzle_units, resolve_edges, safe_get, unit_size
from .geometry import SEGMENT_PATTERN, build_outline, rotate_times
from .models import (
    EPSILON,
    BezierCurve,
    ClosedPath,
    EdgeKind,
    Flat,
    Free,
    GenerationOutcome,
    InvalidGridSizeError,
    InvalidImageSizeError,
    MirroredFrom,
    PuzzleElement,
    PuzzleMakerError,
    PuzzleResult,
    PuzzleUnit,
    PuzzleUnitUnavailableError,
    Segment,
)
from .puzzle_maker import GenerationState, PuzzleMaker, generate, placement_position
from .rendering import PillowRenderer, RenderingBackend, rasterize_path
from .unit_factory import generate_puzzle_unit, seeded_random_bool

__all__ = [
    # Models
    "EPSILON",
    "BezierCurve",
    "Segment",
    "ClosedPath",
    "PuzzleUnit",
    "PuzzleElement",
    "EdgeKind",
    "Flat",
    "Free",
    "MirroredFrom",
    "GenerationOutcome",
    "PuzzleResult",
    # Errors
    "PuzzleMakerError",
    "InvalidGridSizeError",
    "InvalidImageSizeError",
    "PuzzleUnitUnavailableError",
    # Geometry
    "SEGMENT_PATTERN",
    "build_outline",
    "rotate_times",
    # Units and grid
    "generate_puzzle_unit",
    "seeded_random_bool",
    "resolve_edges",
    "iter_puzzle_units",
    "build_unit_grid",
    "safe_get",
    "unit_size",
    # Rendering
    "RenderingBackend",
    "PillowRenderer",
    "rasterize_path",
    # Pipeline
    "GenerationState",
    "PuzzleMaker",
    "generate",
    "placement_position",
    # Configuration
    "Settings",
    "ShadowConfig",
    "DEFAULT_DARK_SHADOW",
    "DEFAULT_LIGHT_SHADOW",
    "get_settings",
]
