"""Colour-space conversion.

The mosaic matches colours in Oklab (https://bottosson.github.io/posts/oklab/).
Channel values are fed to the Oklab transform as-is: 8-bit sRGB divided by 255
is treated as already linear. Nearest-tile results depend on this, so the
gamma decode is intentionally skipped.
"""

from __future__ import annotations

import numpy as np
from skimage.color import rgb2lab

_LMS_FROM_RGB = np.array(
    [
        [0.4122214708, 0.5363325363, 0.0514459929],
        [0.2119034982, 0.6806995451, 0.1073969566],
        [0.0883024619, 0.2817188376, 0.6299787005],
    ],
    dtype=np.float32,
)

_OKLAB_FROM_LMS = np.array(
    [
        [0.2104542553, 0.7936177850, -0.0040720468],
        [1.9779984951, -2.4285922050, 0.4505937099],
        [0.0259040371, 0.7827717662, -0.8086757660],
    ],
    dtype=np.float32,
)

CHANNEL_MAX = np.float32(255.0)


def linear_srgb_to_oklab(rgb: np.ndarray) -> np.ndarray:
    """Convert (..., 3) linear RGB in [0, 1] → (..., 3) float32 Oklab (L, a, b)."""
    rgb = np.asarray(rgb, dtype=np.float32)
    lms = rgb @ _LMS_FROM_RGB.T
    # cbrt keeps the real root for slightly negative sums
    return np.cbrt(lms) @ _OKLAB_FROM_LMS.T


def normalize_pixels(pixels: np.ndarray) -> np.ndarray:
    """Map (..., 3|4) uint8 pixels to (..., 3) float32 RGB in [0, 1].

    Pixels carrying alpha are premultiplied, i.e. composited over black.
    """
    px = np.asarray(pixels).astype(np.float32)
    rgb = px[..., :3]
    if px.shape[-1] == 4:
        rgb = rgb * (px[..., 3:4] / CHANNEL_MAX)
    return rgb / CHANNEL_MAX


def pixels_to_oklab(pixels: np.ndarray) -> np.ndarray:
    """Convert (..., 3|4) uint8 pixels to (..., 3) float32 Oklab."""
    return linear_srgb_to_oklab(normalize_pixels(pixels))


def rgb_to_lab(rgb: np.ndarray) -> np.ndarray:
    """Convert flat (N, 3) uint8 RGB → (N, 3) float64 CIELAB."""
    return rgb2lab(rgb.astype(np.float64).reshape(1, -1, 3) / 255.0).reshape(-1, 3)


def to_color_space(rgb: np.ndarray, color_space: str = "oklab") -> np.ndarray:
    """Express flat (N, 3) uint8 RGB in *color_space* as float coordinates."""
    if color_space == "oklab":
        return pixels_to_oklab(rgb).astype(np.float64)
    if color_space == "lab":
        return rgb_to_lab(rgb)
    if color_space == "rgb":
        return rgb.astype(np.float64)
    msg = f"Unknown colour space {color_space!r}"
    raise ValueError(msg)
