"""Palette tiles: size normalisation and average-colour summaries."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path

import numpy as np

from photo_mosaic.color_utils import CHANNEL_MAX, linear_srgb_to_oklab
from photo_mosaic.config import MosaicConfig
from photo_mosaic.image_io import iter_palette_files, load_rgba, resize_bilinear

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaletteTile:
    """One tile of the palette, addressed by its index in :class:`Palette`."""

    color: np.ndarray  # (3,) float32 Oklab
    pixels: np.ndarray  # (S, S, 4) uint8, composited over black
    path: Path | None = None


@dataclass
class Palette:
    """Arena of tiles stored as parallel lists.

    ``colors[i]`` is the Oklab average of ``images[i]``; the index ``i`` is
    the only identity a tile has. Nothing is removed or mutated once added.
    """

    tile_size: int
    colors: list[np.ndarray] = field(default_factory=list)
    images: list[np.ndarray] = field(default_factory=list)
    paths: list[Path | None] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.images)

    def color_matrix(self) -> np.ndarray:
        """Stack the tile colours into an (N, 3) float32 array."""
        if not self.colors:
            return np.empty((0, 3), dtype=np.float32)
        return np.stack(self.colors).astype(np.float32, copy=False)

    def add(
        self,
        color: np.ndarray,
        pixels: np.ndarray,
        path: Path | None = None,
    ) -> int:
        """Append a summarised tile and return its index."""
        s = self.tile_size
        if pixels.shape != (s, s, 4):
            msg = f"tile buffer must be {s}x{s} RGBA, got shape {pixels.shape}"
            raise ValueError(msg)
        pixels = pixels.copy()
        pixels.flags.writeable = False
        self.colors.append(np.asarray(color, dtype=np.float32).reshape(3))
        self.images.append(pixels)
        self.paths.append(path)
        return len(self.images) - 1

    def tile(self, index: int) -> PaletteTile:
        return PaletteTile(self.colors[index], self.images[index], self.paths[index])


def summarize_tile(
    image: np.ndarray,
    tile_size: int,
) -> tuple[np.ndarray, np.ndarray]:
    """Normalise a tile to *tile_size* and compute its average colour.

    Pixels that are not fully opaque are composited over black
    (``c * a / 255``) and written back truncated to integers; the average
    uses the un-truncated values.

    Args:
        image: (H, W, 4) uint8 RGBA tile.
        tile_size: Output width and height.

    Returns:
        ``(oklab, pixels)`` - (3,) float32 colour and (S, S, 4) uint8 buffer.
    """
    resized = resize_bilinear(image, tile_size, tile_size)

    px = resized.astype(np.float32)
    alpha = px[..., 3:4]
    opaque = resized[..., 3:4] == 255
    composited = np.where(opaque, px[..., :3], px[..., :3] * alpha / CHANNEL_MAX)
    resized[..., :3] = composited.astype(np.uint8)

    sums = composited.reshape(-1, 3).sum(axis=0, dtype=np.float64)
    scale = float(CHANNEL_MAX) * tile_size * tile_size
    average = (sums / scale).astype(np.float32)

    return linear_srgb_to_oklab(average), resized


def load_palette(
    palette_dir: str | Path,
    tile_size: int,
    extensions: frozenset[str] = MosaicConfig.SUPPORTED_EXTENSIONS,
) -> Palette:
    """Decode and summarise every accepted image under *palette_dir*.

    Tiles are added in walk order. Any decode or resize failure aborts.
    """
    palette = Palette(tile_size=tile_size)
    t0 = time.perf_counter()

    for path in iter_palette_files(palette_dir, extensions):
        color, pixels = summarize_tile(load_rgba(path), tile_size)
        idx = palette.add(color, pixels, path)
        logger.debug("Tile %d: %s  oklab=(%.3f, %.3f, %.3f)", idx, path, *color)

    logger.info(
        "Palette ready: %d tiles at %dx%d  (%.1f s)",
        len(palette), tile_size, tile_size, time.perf_counter() - t0,
    )
    return palette
