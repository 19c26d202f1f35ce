"""Exception hierarchy for a mosaic run.

Every failure is terminal for the run; the CLI turns any
:class:`MosaicError` into a single human-readable message.
"""

from __future__ import annotations


class MosaicError(Exception):
    """Base class for all mosaic failures."""


class ConfigError(MosaicError, ValueError):
    """Invalid paths or parameters, detected before any processing."""


class ImageError(MosaicError):
    """An image could not be decoded, resampled, or encoded."""


class TraversalError(MosaicError):
    """A palette directory entry could not be read."""


class EmptyPaletteError(MosaicError):
    """The palette directory yielded no usable tiles."""
