"""Shared fixtures for puzzle maker tests."""

from typing import Callable

import numpy as np
import pytest
from PIL import Image


def make_gradient_image(width: int, height: int) -> Image.Image:
    """Create an RGB image whose colors vary with the pixel position."""
    xs = np.linspace(0, 255, max(width, 1), dtype=np.float32)
    ys = np.linspace(0, 255, max(height, 1), dtype=np.float32)
    rgb = np.zeros((height, width, 3), dtype=np.uint8)
    rgb[..., 0] = xs[np.newaxis, :width]
    rgb[..., 1] = ys[:height, np.newaxis]
    rgb[..., 2] = 128
    return Image.fromarray(rgb)


@pytest.fixture
def gradient_image() -> Callable[[int, int], Image.Image]:
    """Factory fixture for gradient images."""
    return make_gradient_image


@pytest.fixture
def source_image() -> Image.Image:
    """A 350x250 image, a 5x7 grid of 50x50 cells."""
    return make_gradient_image(350, 250)
