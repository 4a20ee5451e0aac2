"""Rendering backend used to turn piece outlines into images.

Paths handed to a backend are in pixel units and in the y-up frame produced
by the unit factory, with the origin at the bottom-left corner of the image
being drawn. Backends flip the y axis onto image rows.
"""

from typing import List, Optional, Protocol, Tuple

import numpy as np
from PIL import Image, ImageChops, ImageDraw, ImageFilter

from .models import ClosedPath, Point

Rect = Tuple[float, float, float, float]  # x, y, width, height
RGBA = Tuple[float, float, float, float]


class RenderingBackend(Protocol):
    """Image operations needed to composite a puzzle piece.

    Every operation returns None when it cannot produce an image, for example
    for a zero-area source.
    """

    def crop(self, image: Image.Image, rect: Rect) -> Optional[Image.Image]:
        ...

    def clip(self, image: Image.Image, path: ClosedPath) -> Optional[Image.Image]:
        ...

    def inner_shadow(
        self,
        image: Image.Image,
        path: ClosedPath,
        color: RGBA,
        offset: Tuple[float, float],
        blur_radius: float,
    ) -> Optional[Image.Image]:
        ...


def _is_empty(image: Image.Image) -> bool:
    return image.width <= 0 or image.height <= 0


def pixel_box(rect: Rect) -> Tuple[int, int, int, int]:
    """Round an (x, y, width, height) rect to a (left, top, right, bottom) pixel box."""
    x, y, width, height = rect
    return (int(round(x)), int(round(y)), int(round(x + width)), int(round(y + height)))


def rasterize_path(
    path: ClosedPath,
    size: Tuple[int, int],
    points_per_curve: int = 20,
    antialias_scale: int = 4,
) -> Image.Image:
    """Create a mask for a closed path with anti-aliased edges.

    Renders at a higher resolution then downsamples.

    Args:
        path: Outline in pixel units, y-up frame.
        size: (width, height) of the mask.
        points_per_curve: Number of points sampled from each curve.
        antialias_scale: Supersampling factor.

    Returns:
        Grayscale image where white is inside the path.
    """
    width, height = size
    hi_res_mask = Image.new("L", (width * antialias_scale, height * antialias_scale), 0)
    draw = ImageDraw.Draw(hi_res_mask)

    polygon: List[Point] = [
        (x * antialias_scale, (height - y) * antialias_scale) for x, y in path.to_polygon(points_per_curve)
    ]
    if len(polygon) >= 3:
        draw.polygon(polygon, fill=255)

    return hi_res_mask.resize((width, height), Image.Resampling.LANCZOS)


class PillowRenderer:
    """Rendering backend built on Pillow."""

    def __init__(self, points_per_curve: int = 20, antialias_scale: int = 4):
        """Initialize the renderer.

        Args:
            points_per_curve: Number of points sampled from each curve when a
                path is rasterized.
            antialias_scale: Supersampling factor for masks.
        """
        self.points_per_curve = points_per_curve
        self.antialias_scale = antialias_scale

    def _mask(self, path: ClosedPath, size: Tuple[int, int]) -> Image.Image:
        return rasterize_path(path, size, self.points_per_curve, self.antialias_scale)

    def crop(self, image: Image.Image, rect: Rect) -> Optional[Image.Image]:
        """Crop the image to the part of rect that lies inside it.

        The result may be smaller than rect when rect sticks out of the image.
        """
        if _is_empty(image):
            return None

        left, top, right, bottom = pixel_box(rect)
        left = max(0, left)
        top = max(0, top)
        right = min(image.width, right)
        bottom = min(image.height, bottom)
        if right <= left or bottom <= top:
            return None

        return image.crop((left, top, right, bottom))

    def clip(self, image: Image.Image, path: ClosedPath) -> Optional[Image.Image]:
        """Make everything outside the path transparent."""
        if _is_empty(image) or len(path.curves) == 0:
            return None

        mask = self._mask(path, image.size)
        clipped = image.convert("RGBA")
        alpha = ImageChops.multiply(clipped.getchannel("A"), mask)
        clipped.putalpha(alpha)
        return clipped

    def inner_shadow(
        self,
        image: Image.Image,
        path: ClosedPath,
        color: RGBA,
        offset: Tuple[float, float],
        blur_radius: float,
    ) -> Optional[Image.Image]:
        """Draw a shadow cast inward from the path's border.

        Args:
            image: Image to draw on.
            path: Outline the shadow follows.
            color: Shadow color as RGBA floats in [0, 1].
            offset: Shadow offset (dx, dy) in the path's y-up frame.
            blur_radius: Gaussian blur radius in pixels.

        Returns:
            New RGBA image with the shadow composited, or None.
        """
        if _is_empty(image):
            return None

        mask = self._mask(path, image.size)
        dx = int(round(offset[0]))
        dy = int(round(-offset[1]))

        # Everything outside the shape casts the shadow; the canvas edge counts
        # as outside so the shift does not wrap around
        outside = Image.new("L", image.size, 255)
        outside.paste(ImageChops.invert(mask), (dx, dy))
        if blur_radius > 0:
            outside = outside.filter(ImageFilter.GaussianBlur(blur_radius))

        shadow = np.asarray(outside, dtype=np.float32) * np.asarray(mask, dtype=np.float32) / 255.0
        shadow *= color[3]
        shadow_alpha = Image.fromarray(np.clip(shadow, 0, 255).astype(np.uint8))

        r, g, b = (int(round(channel * 255)) for channel in color[:3])
        overlay = Image.new("RGBA", image.size, (r, g, b, 0))
        overlay.putalpha(shadow_alpha)

        base = image.convert("RGBA")
        shaded = Image.alpha_composite(base, overlay)
        # Keep the original transparency so the shadow never leaks outside
        shaded.putalpha(base.getchannel("A"))
        return shaded
