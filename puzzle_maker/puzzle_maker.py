"""Cut an image into interlocking jigsaw puzzle elements.

Units are built sequentially in row-major order because every unit needs its
top and left neighbors. Compositing a unit into an image is independent work
and runs on a thread pool as soon as the unit exists.
"""

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from enum import Enum
from typing import Callable, List, Optional, Tuple

from PIL import Image

from .config import ShadowConfig, settings
from .edge_grid import UnitGrid, empty_grid, iter_puzzle_units, unit_size
from .models import (
    ElementGrid,
    GenerationOutcome,
    InvalidGridSizeError,
    InvalidImageSizeError,
    PuzzleElement,
    PuzzleResult,
    PuzzleUnit,
    PuzzleUnitUnavailableError,
)
from .rendering import PillowRenderer, RenderingBackend, pixel_box
from .unit_factory import RandomBool, Size, default_random_bool, seeded_random_bool

logger = logging.getLogger(__name__)

Completion = Callable[[PuzzleResult], None]


class GenerationState(str, Enum):
    """Stages of a generation run."""

    VALIDATING = "validating"
    BUILDING_UNITS = "building_units"
    COMPOSITING = "compositing"
    JOINING = "joining"
    FINALIZING = "finalizing"


class _RunState:
    """Shared state of one run, written by many compositing tasks."""

    def __init__(self, rows: int, columns: int):
        self.elements: ElementGrid = empty_grid(rows, columns)
        self.lock = threading.Lock()
        self.image_failure = threading.Event()
        self.unit_unavailable = threading.Event()
        self.unit_error: Optional[PuzzleUnitUnavailableError] = None

    def store(self, row: int, column: int, element: PuzzleElement) -> None:
        with self.lock:
            self.elements[row][column] = element


def _completion_callback(completion: Completion) -> Callable[["Future[PuzzleResult]"], None]:
    """Adapt a completion handler to a done callback that never skips it."""

    def callback(done: "Future[PuzzleResult]") -> None:
        error = done.exception()
        if error is not None:
            completion(PuzzleResult(GenerationOutcome.UNEXPECTED_ERROR, error=error))
        else:
            completion(done.result())

    return callback


class PuzzleMaker:
    """Creates puzzle elements from a source image."""

    def __init__(
        self,
        image: Image.Image,
        num_rows: int,
        num_columns: int,
        scale: float = 1.0,
        renderer: Optional[RenderingBackend] = None,
        seed: Optional[int] = None,
        random_bool: Optional[RandomBool] = None,
        max_workers: Optional[int] = None,
    ):
        """Initialize the puzzle maker.

        Args:
            image: Source image.
            num_rows: Number of rows in the puzzle grid.
            num_columns: Number of columns in the puzzle grid.
            scale: Device scale factor of the image; its logical size is the
                pixel size divided by this value.
            renderer: Backend used to crop, clip and shade pieces.
            seed: Seed for the tab direction coin flips. Ignored when
                random_bool is given.
            random_bool: Coin flip deciding whether a free tab points inward.
            max_workers: Size of the compositing thread pool.

        Raises:
            ValueError: If scale is not positive or max_workers is below 1.
        """
        if scale <= 0:
            raise ValueError(f"scale must be positive, got {scale}")
        if max_workers is not None and max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")

        self.image = image
        self.num_rows = num_rows
        self.num_columns = num_columns
        self.scale = scale
        self.renderer: RenderingBackend = renderer or PillowRenderer(points_per_curve=settings.POINTS_PER_CURVE)
        if random_bool is not None:
            self.random_bool = random_bool
        elif seed is not None:
            self.random_bool = seeded_random_bool(seed)
        else:
            self.random_bool = default_random_bool
        self.max_workers = settings.PUZZLE_MAX_WORKERS if max_workers is None else max_workers

    @property
    def image_size(self) -> Size:
        """Logical size of the source image."""
        return (self.image.width / self.scale, self.image.height / self.scale)

    @property
    def puzzle_unit_size(self) -> Size:
        """Size of a single grid cell, tabs excluded."""
        return unit_size(self.image_size, self.num_rows, self.num_columns)

    def generate_puzzles(
        self,
        dark_shadow: Optional[ShadowConfig] = None,
        light_shadow: Optional[ShadowConfig] = None,
        completion: Optional[Completion] = None,
    ) -> "Future[PuzzleResult]":
        """Asynchronously generate the puzzle elements.

        Args:
            dark_shadow: First inner shadow pass.
            light_shadow: Second inner shadow pass.
            completion: Called exactly once with the result.

        Returns:
            Future resolving to the PuzzleResult.
        """
        future: "Future[PuzzleResult]" = Future()
        if completion is not None:
            future.add_done_callback(_completion_callback(completion))
        future.set_running_or_notify_cancel()

        logger.debug("Generation state: %s", GenerationState.VALIDATING.value)
        if self.num_rows < 2 or self.num_columns < 2:
            error = InvalidGridSizeError(f"Grid must be at least 2x2, got {self.num_rows}x{self.num_columns}")
            logger.warning("%s", error)
            future.set_result(PuzzleResult(GenerationOutcome.INVALID_GRID_SIZE, error=error))
            return future

        thread = threading.Thread(
            target=self._run,
            args=(future, dark_shadow or settings.DARK_SHADOW, light_shadow or settings.LIGHT_SHADOW),
            name="puzzle-maker",
            daemon=True,
        )
        thread.start()
        return future

    def _run(self, future: "Future[PuzzleResult]", dark_shadow: ShadowConfig, light_shadow: ShadowConfig) -> None:
        start = time.perf_counter()
        try:
            result = self._assemble(dark_shadow, light_shadow)
        except Exception as exc:
            logger.exception("Puzzle generation crashed")
            future.set_exception(exc)
            return

        logger.info(
            "Puzzles generated in %.3f second(s): %dx%d grid, outcome %s",
            time.perf_counter() - start,
            self.num_rows,
            self.num_columns,
            result.outcome.value,
        )
        future.set_result(result)

    def _assemble(self, dark_shadow: ShadowConfig, light_shadow: ShadowConfig) -> PuzzleResult:
        # Load lazily opened images once, before worker threads read them
        if self.image.width and self.image.height:
            self.image.load()
        state = _RunState(self.num_rows, self.num_columns)
        units: UnitGrid = empty_grid(self.num_rows, self.num_columns)
        size = self.puzzle_unit_size
        tasks: List["Future[None]"] = []

        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="puzzle-composite") as executor:
            logger.debug("Generation state: %s", GenerationState.BUILDING_UNITS.value)
            try:
                for row, column, unit in iter_puzzle_units(units, size, self.random_bool):
                    tasks.append(
                        executor.submit(self._composite, state, row, column, unit, size, dark_shadow, light_shadow)
                    )
            except PuzzleUnitUnavailableError as error:
                logger.error("Grid resolution aborted: %s", error)
                state.unit_error = error
                state.unit_unavailable.set()
            else:
                logger.debug("Generation state: %s", GenerationState.COMPOSITING.value)

            # Already submitted tasks are joined even after an abort
            logger.debug("Generation state: %s", GenerationState.JOINING.value)
            wait(tasks)

        logger.debug("Generation state: %s", GenerationState.FINALIZING.value)
        for task in tasks:
            # Surface unexpected task errors instead of dropping them
            task.result()

        if state.image_failure.is_set():
            return PuzzleResult(
                GenerationOutcome.INVALID_IMAGE_SIZE,
                error=InvalidImageSizeError("Could not render at least one puzzle element"),
            )
        if state.unit_unavailable.is_set():
            return PuzzleResult(GenerationOutcome.PUZZLE_UNIT_UNAVAILABLE, error=state.unit_error)
        return PuzzleResult(GenerationOutcome.SUCCESS, elements=state.elements)

    def _composite(
        self,
        state: _RunState,
        row: int,
        column: int,
        unit: PuzzleUnit,
        size: Size,
        dark_shadow: ShadowConfig,
        light_shadow: ShadowConfig,
    ) -> None:
        """Render one unit into a puzzle element and store it."""
        if state.image_failure.is_set():
            logger.debug("Skipping (%d, %d), another element already failed", row, column)
            return

        position = placement_position(unit, row, column, size)
        outline = unit.outline
        crop_rect = (
            position[0] * self.scale,
            position[1] * self.scale,
            outline.width * self.scale,
            outline.height * self.scale,
        )
        pixel_outline = outline.scaled(self.scale)

        image = self.renderer.crop(self.image, crop_rect)
        if image is None:
            self._fail(state, row, column, "crop")
            return
        left, top, right, bottom = pixel_box(crop_rect)
        if image.size != (right - left, bottom - top):
            # Outline sticks out of the source image
            logger.warning(
                "Element (%d, %d) needs %dx%d pixels, crop only has %dx%d",
                row,
                column,
                right - left,
                bottom - top,
                image.width,
                image.height,
            )
            state.image_failure.set()
            return
        image = self.renderer.clip(image, pixel_outline)
        if image is None:
            self._fail(state, row, column, "clip")
            return
        for name, shadow in (("dark shadow", dark_shadow), ("light shadow", light_shadow)):
            image = self.renderer.inner_shadow(
                image,
                pixel_outline,
                shadow.color,
                (shadow.offset[0] * self.scale, shadow.offset[1] * self.scale),
                shadow.blur_radius * self.scale,
            )
            if image is None:
                self._fail(state, row, column, name)
                return

        state.store(row, column, PuzzleElement(image=image, position=position, puzzle_unit=unit))
        logger.debug("Composited element (%d, %d) at (%.2f, %.2f)", row, column, position[0], position[1])

    @staticmethod
    def _fail(state: _RunState, row: int, column: int, step: str) -> None:
        logger.warning("Could not render element (%d, %d): %s returned nothing", row, column, step)
        state.image_failure.set()


def placement_position(unit: PuzzleUnit, row: int, column: int, size: Size) -> Tuple[float, float]:
    """Top-left position of a piece on the board.

    The visual cell position is moved up and left by the height of outward
    top and left tabs.
    """
    width, height = size
    return (column * width - unit.left.outer_height, row * height - unit.top.outer_height)


def generate(
    image: Image.Image,
    num_rows: int,
    num_columns: int,
    dark_shadow: Optional[ShadowConfig] = None,
    light_shadow: Optional[ShadowConfig] = None,
    completion: Optional[Completion] = None,
    **kwargs,
) -> "Future[PuzzleResult]":
    """Generate puzzle elements for an image.

    Extra keyword arguments are passed to PuzzleMaker.

    Returns:
        Future resolving to the PuzzleResult.
    """
    maker = PuzzleMaker(image, num_rows, num_columns, **kwargs)
    return maker.generate_puzzles(dark_shadow=dark_shadow, light_shadow=light_shadow, completion=completion)
