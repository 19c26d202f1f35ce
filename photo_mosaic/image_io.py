"""Image decoding, resampling, encoding, and palette directory walking."""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

import numpy as np
from PIL import Image

from photo_mosaic.errors import ImageError, TraversalError

# Errors Pillow raises for unreadable, unsupported, or oversized content
_PIL_ERRORS = (OSError, ValueError, SyntaxError, Image.DecompressionBombError)


def compute_target_size(
    original_width: int,
    original_height: int,
    max_side: int,
) -> tuple[int, int]:
    """Compute downscaled (w, h) preserving aspect ratio.

    The longest side becomes *max_side*; the other is scaled
    proportionally (rounded to the nearest integer, minimum 1).
    Images already within *max_side* keep their size.
    """
    if max(original_width, original_height) <= max_side:
        return original_width, original_height
    if original_width >= original_height:
        w = max_side
        h = max(1, round(original_height * max_side / original_width))
    else:
        h = max_side
        w = max(1, round(original_width * max_side / original_height))
    return w, h


_WIDE_GRAY_MODES = ("I", "I;16", "I;16B", "I;16L", "I;16N")


def _to_8bit(img: Image.Image) -> Image.Image:
    """Scale 16-bit grayscale down to 8 bits (v // 257); Pillow's convert clamps."""
    if img.mode not in _WIDE_GRAY_MODES:
        return img
    wide = np.clip(np.asarray(img, dtype=np.int64), 0, 65535)
    return Image.fromarray((wide // 257).astype(np.uint8))


def load_rgba(path: str | Path) -> np.ndarray:
    """Decode an image as (H, W, 4) uint8 RGBA."""
    try:
        with Image.open(path) as img:
            return np.array(_to_8bit(img).convert("RGBA"), dtype=np.uint8)
    except _PIL_ERRORS as exc:
        msg = f"cannot decode {path}: {exc}"
        raise ImageError(msg) from exc


def load_source(path: str | Path) -> np.ndarray:
    """Decode the source image.

    Returns:
        (H, W, 4) uint8 if the file carries transparency, else (H, W, 3).
    """
    try:
        with Image.open(path) as img:
            has_alpha = img.mode in ("RGBA", "LA", "PA") or (
                img.mode == "P" and "transparency" in img.info
            )
            mode = "RGBA" if has_alpha else "RGB"
            return np.array(_to_8bit(img).convert(mode), dtype=np.uint8)
    except _PIL_ERRORS as exc:
        msg = f"cannot decode {path}: {exc}"
        raise ImageError(msg) from exc


def resize_bilinear(pixels: np.ndarray, width: int, height: int) -> np.ndarray:
    """Resample (H, W, C) uint8 pixels to (height, width, C) with a bilinear filter."""
    if width < 1 or height < 1:
        msg = f"invalid target size {width}x{height}"
        raise ImageError(msg)
    h, w = pixels.shape[:2]
    if (w, h) == (width, height):
        return pixels.copy()
    try:
        img = Image.fromarray(pixels).resize((width, height), Image.BILINEAR)
    except _PIL_ERRORS as exc:
        msg = f"cannot resize {w}x{h} image to {width}x{height}: {exc}"
        raise ImageError(msg) from exc
    return np.array(img, dtype=np.uint8)


def downscale(pixels: np.ndarray, max_side: int) -> np.ndarray:
    """Shrink so the longest side is at most *max_side*, preserving aspect ratio."""
    h, w = pixels.shape[:2]
    tw, th = compute_target_size(w, h, max_side)
    return resize_bilinear(pixels, tw, th)


def save_rgb(pixels: np.ndarray, path: str | Path) -> None:
    """Encode an (H, W, 3) uint8 raster; the format follows the file suffix."""
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        Image.fromarray(np.ascontiguousarray(pixels[..., :3], dtype=np.uint8)).save(path)
    except _PIL_ERRORS as exc:
        msg = f"cannot write {path}: {exc}"
        raise ImageError(msg) from exc


def iter_palette_files(
    root: str | Path,
    extensions: frozenset[str],
) -> Iterator[Path]:
    """Yield image files under *root* recursively, in sorted walk order.

    Only files whose suffix (without the dot, case-sensitive) is in
    *extensions* are yielded. An unreadable entry aborts the walk.
    """

    def _raise(err: OSError) -> None:
        msg = f"cannot read {err.filename}: {err.strerror}"
        raise TraversalError(msg) from err

    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise):
        dirnames.sort()
        for name in sorted(filenames):
            path = Path(dirpath) / name
            if path.is_dir() or path.suffix[1:] not in extensions:
                continue
            yield path
