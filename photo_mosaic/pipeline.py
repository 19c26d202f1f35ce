"""End-to-end driver: palette → index → source → mosaic → file."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path

import numpy as np

from photo_mosaic.color_index import NearestColorIndex
from photo_mosaic.composer import compose_mosaic
from photo_mosaic.config import MosaicConfig
from photo_mosaic.dithering import quantize_image
from photo_mosaic.image_io import downscale, load_source, save_rgb
from photo_mosaic.lookup_cache import LookupCache
from photo_mosaic.palette import Palette, load_palette

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MosaicResult:
    """What a run produced, for reporting."""

    mosaic: np.ndarray
    output_path: Path
    num_tiles: int
    source_size: tuple[int, int]
    queries: int
    hits: int
    elapsed: float


def prepare_source(source: np.ndarray, cfg: MosaicConfig) -> np.ndarray:
    """Apply the optional downscale and dithering passes to a decoded source."""
    if cfg.max_side is not None:
        h, w = source.shape[:2]
        source = downscale(source, cfg.max_side)
        nh, nw = source.shape[:2]
        if (nw, nh) != (w, h):
            logger.info("Source downscaled %dx%d → %dx%d", w, h, nw, nh)

    if cfg.dither:
        logger.info("Quantising source (%d colours, %s) …",
                    cfg.dither_colors, cfg.color_space)
        source = quantize_image(source, cfg.color_space, cfg.dither_colors)
    return source


def build_mosaic(source: np.ndarray, palette: Palette) -> tuple[np.ndarray, LookupCache]:
    """Index *palette* and compose *source*; raises EmptyPaletteError if no tiles."""
    index = NearestColorIndex(palette.color_matrix())
    cache = LookupCache(index)
    return compose_mosaic(source, palette, cache), cache


def run(cfg: MosaicConfig) -> MosaicResult:
    """Execute one mosaic run described by *cfg*.

    The config is validated before any file is touched, and the palette
    is fully loaded and indexed before the source image is decoded.
    """
    cfg.validate()
    t_total = time.perf_counter()

    palette = load_palette(cfg.palette_dir, cfg.tile_size, cfg.SUPPORTED_EXTENSIONS)
    index = NearestColorIndex(palette.color_matrix())

    source = load_source(cfg.input_path)
    h, w = source.shape[:2]
    logger.info("Source: %s  %dx%d", cfg.input_path, w, h)
    source = prepare_source(source, cfg)

    cache = LookupCache(index)
    mosaic = compose_mosaic(source, palette, cache)

    save_rgb(mosaic, cfg.output_path)
    logger.info("Wrote %s", cfg.output_path)

    sh, sw = source.shape[:2]
    return MosaicResult(
        mosaic=mosaic,
        output_path=Path(cfg.output_path),
        num_tiles=len(palette),
        source_size=(sw, sh),
        queries=cache.queries,
        hits=cache.hits,
        elapsed=time.perf_counter() - t_total,
    )
