"""Per-colour memoisation of nearest-tile lookups."""

from __future__ import annotations

from typing import Protocol

import numpy as np

from photo_mosaic.color_utils import pixels_to_oklab


class ColorIndex(Protocol):
    def query(self, color: np.ndarray) -> int: ...


class LookupCache:
    """Maps raw source-pixel values to palette indices.

    Keys are the exact channel tuples (alpha included when present), so
    each distinct value costs one index query and every repeat is free.
    Entries are never evicted; the cache lives for a single run. It is a
    plain dict and must not be shared between threads.
    """

    def __init__(self, index: ColorIndex) -> None:
        self._index = index
        self._entries: dict[tuple[int, ...], int] = {}
        self.queries = 0
        self.hits = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, color: tuple[int, ...]) -> bool:
        return color in self._entries

    def resolve(self, color: tuple[int, ...]) -> int:
        """Return the palette index matched to the raw pixel *color*."""
        idx = self._entries.get(color)
        if idx is not None:
            self.hits += 1
            return idx

        oklab = pixels_to_oklab(np.array(color, dtype=np.uint8))
        idx = self._index.query(oklab)
        self.queries += 1
        self._entries[color] = idx
        return idx
