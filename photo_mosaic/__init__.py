"""
Photo Mosaic Generator
======================

Rebuild a source image out of small pictures. Every source pixel is
replaced by the palette tile whose average colour is nearest in Oklab:

- **Palette** tiles are resized, composited over black and summarised
- **Index** answers nearest-colour queries with a k-d tree
- **Cache** remembers the tile chosen for every distinct pixel value
- **Dithering** (optional) quantises the source with error diffusion
"""

__version__ = "1.2.0"

from photo_mosaic.color_index import NearestColorIndex
from photo_mosaic.color_utils import linear_srgb_to_oklab, pixels_to_oklab
from photo_mosaic.composer import compose_mosaic
from photo_mosaic.config import MosaicConfig
from photo_mosaic.dithering import quantize_image
from photo_mosaic.errors import (
    ConfigError,
    EmptyPaletteError,
    ImageError,
    MosaicError,
    TraversalError,
)
from photo_mosaic.lookup_cache import LookupCache
from photo_mosaic.palette import Palette, PaletteTile, load_palette, summarize_tile
from photo_mosaic.pipeline import MosaicResult, build_mosaic, run

__all__ = [
    "ConfigError",
    "EmptyPaletteError",
    "ImageError",
    "LookupCache",
    "MosaicConfig",
    "MosaicError",
    "MosaicResult",
    "NearestColorIndex",
    "Palette",
    "PaletteTile",
    "TraversalError",
    "build_mosaic",
    "compose_mosaic",
    "linear_srgb_to_oklab",
    "load_palette",
    "pixels_to_oklab",
    "quantize_image",
    "run",
    "summarize_tile",
]
