"""Centralised configuration via a frozen dataclass."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from photo_mosaic.errors import ConfigError

COLOR_SPACES = ("oklab", "lab", "rgb")


@dataclass(frozen=True)
class MosaicConfig:
    """All tuneable parameters for a mosaic run.

    Attributes:
        palette_dir:    Folder scanned (recursively) for tile images.
        tile_size:      Width and height of every tile in the output, in pixels.
        input_path:     Source image to reproduce.
        output_path:    Where the mosaic is written; format follows the suffix.
        dither:         Quantise and Floyd-Steinberg dither the source first.
        dither_colors:  Number of colours kept by the quantiser (2-256).
        color_space:    Space the ditherer diffuses error in - "oklab", "lab" or "rgb".
        max_side:       Downscale the source so its longest side is at most this
                        (None = keep the source resolution).
    """

    palette_dir: Path = field(default_factory=lambda: Path("palette"))
    tile_size: int = 16
    input_path: Path = field(default_factory=lambda: Path("input.png"))
    output_path: Path = field(default_factory=lambda: Path("output/mosaic.png"))

    # Source pre-processing
    dither: bool = True
    dither_colors: int = 256
    color_space: str = "oklab"
    max_side: int | None = None

    # Matched case-sensitively against the suffix without its dot
    SUPPORTED_EXTENSIONS: frozenset[str] = frozenset(
        {"avif", "jpeg", "jpg", "png", "webp"}
    )

    def validate_palette(self) -> None:
        """Check only what loading a palette needs: the directory and tile size."""
        if not Path(self.palette_dir).is_dir():
            msg = f"palette dir {self.palette_dir} does not point to a directory"
            raise ConfigError(msg)
        if self.tile_size < 1:
            msg = f"tile size must be positive, got {self.tile_size}"
            raise ConfigError(msg)

    def validate(self) -> None:
        """Raise :class:`ConfigError` if any parameter is unusable."""
        self.validate_palette()
        if not Path(self.input_path).is_file():
            msg = f"input {self.input_path} does not point to a file"
            raise ConfigError(msg)
        if not 2 <= self.dither_colors <= 256:
            msg = f"dither colours must be between 2 and 256, got {self.dither_colors}"
            raise ConfigError(msg)
        if self.color_space not in COLOR_SPACES:
            msg = f"unknown colour space {self.color_space!r}; choose from {COLOR_SPACES}"
            raise ConfigError(msg)
        if self.max_side is not None and self.max_side < 1:
            msg = "max side must be at least 1"
            raise ConfigError(msg)
