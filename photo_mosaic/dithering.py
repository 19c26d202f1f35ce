"""Colour quantisation with Floyd-Steinberg error diffusion.

This is an optional *pre-processing* step applied to the source image
**before** tiles are matched. The image is reduced to a small set of
representative colours (median cut) and every pixel is then snapped to
the nearest of them, with the quantisation error diffused to
neighbouring pixels in the chosen colour space. Flat regions gain a
texture of alternating colours, which the mosaic turns into a mix of
tiles instead of one repeated tile.
"""

from __future__ import annotations

import logging
import time

import numpy as np
from PIL import Image

from photo_mosaic.color_utils import CHANNEL_MAX, to_color_space

logger = logging.getLogger(__name__)

# Above this many pixels the per-pixel scan takes tens of seconds
SLOW_PIXELS = 1_000_000


def composite_over_black(pixels: np.ndarray) -> np.ndarray:
    """Flatten (H, W, 4) uint8 RGBA to (H, W, 3) RGB over a black background."""
    if pixels.shape[-1] == 3:
        return pixels
    px = pixels.astype(np.float32)
    rgb = px[..., :3] * px[..., 3:4] / CHANNEL_MAX
    return rgb.astype(np.uint8)


def reduce_colors(image: np.ndarray, num_colors: int = 256) -> np.ndarray:
    """Pick up to *num_colors* representative colours by median cut.

    Args:
        image: (H, W, 3) uint8.

    Returns:
        (K, 3) uint8 with K <= num_colors, only colours actually used.
    """
    quantized = Image.fromarray(image).quantize(
        colors=num_colors,
        method=Image.Quantize.MEDIANCUT,
        dither=Image.Dither.NONE,
    )
    table = np.array(quantized.getpalette(), dtype=np.uint8).reshape(-1, 3)
    used = np.unique(np.array(quantized))
    return table[used]


def quantize_image(
    image: np.ndarray,
    color_space: str = "oklab",
    num_colors: int = 256,
) -> np.ndarray:
    """Quantise and Floyd-Steinberg dither an image.

    Args:
        image:       (H, W, 3|4) uint8 source. Alpha is composited over black.
        color_space: ``"oklab"``, ``"lab"`` or ``"rgb"`` - where distances
                     and diffused error are measured.
        num_colors:  Size of the reduced colour set.

    Returns:
        (H, W, 3) uint8 - same dimensions, every pixel one of the reduced colours.
    """
    rgb = composite_over_black(image)
    h, w = rgb.shape[:2]
    if h * w > SLOW_PIXELS:
        logger.warning(
            "Dithering %dx%d pixels one by one will be slow; "
            "a smaller max_side shrinks the source first", w, h,
        )

    t0 = time.perf_counter()
    colors = reduce_colors(rgb, num_colors)
    colors_cs = to_color_space(colors, color_space)
    logger.info(
        "Reduced to %d colours  (%.2f s)", len(colors), time.perf_counter() - t0,
    )

    tgt = to_color_space(rgb.reshape(-1, 3), color_space).reshape(h, w, 3)
    error_below = np.zeros((w, 3), dtype=np.float64)
    chosen = np.empty((h, w), dtype=np.intp)

    t0 = time.perf_counter()
    for y in range(h):
        base = tgt[y] + error_below
        row_err = np.empty((w, 3), dtype=np.float64)
        carry = np.zeros(3, dtype=np.float64)
        for x in range(w):
            desired = base[x] + carry
            i = int(np.argmin(np.sum((colors_cs - desired) ** 2, axis=1)))
            chosen[y, x] = i
            row_err[x] = desired - colors_cs[i]
            carry = row_err[x] * 7 / 16

        # Spread the row's error downward (Floyd-Steinberg weights 3, 5, 1)
        error_below = row_err * 5 / 16
        error_below[:-1] += row_err[1:] * 3 / 16
        error_below[1:] += row_err[:-1] * 1 / 16

    logger.info("Dithered %dx%d in %s  (%.1f s)", w, h, color_space,
                time.perf_counter() - t0)
    return colors[chosen]
