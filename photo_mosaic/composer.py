"""Mosaic composition: one palette tile per source pixel."""

from __future__ import annotations

import logging
import time

import numpy as np

from photo_mosaic.lookup_cache import LookupCache
from photo_mosaic.palette import Palette

logger = logging.getLogger(__name__)


def compose_mosaic(
    source: np.ndarray,
    palette: Palette,
    cache: LookupCache,
) -> np.ndarray:
    """Replace every source pixel with its nearest-coloured tile.

    Args:
        source:  (H, W, 3|4) uint8 - the (possibly dithered) source image.
        palette: Summarised tiles; ``palette.tile_size`` is S.
        cache:   Lookup cache wrapping an index built from *palette*.

    Returns:
        (H*S, W*S, 3) uint8 - opaque output raster. Block
        ``[x*S, (x+1)*S) x [y*S, (y+1)*S)`` holds the tile matched to
        source pixel (x, y).
    """
    h, w = source.shape[:2]
    s = palette.tile_size
    output = np.empty((h * s, w * s, 3), dtype=np.uint8)

    logger.info("Composing %dx%d tiles into a %dx%d raster …", w, h, w * s, h * s)
    t0 = time.perf_counter()

    for tile_y, row in enumerate(source.tolist()):
        y = tile_y * s
        for tile_x, px in enumerate(row):
            idx = cache.resolve(tuple(px))
            x = tile_x * s
            output[y:y + s, x:x + s] = palette.images[idx][..., :3]

    logger.info(
        "Mosaic composed  (%.1f s, %d distinct colours, %d cache hits)",
        time.perf_counter() - t0, cache.queries, cache.hits,
    )
    return output
