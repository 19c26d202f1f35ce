"""Static nearest-neighbour index over palette colours (scipy k-d tree)."""

from __future__ import annotations

import logging
import time

import numpy as np
from scipy.spatial import cKDTree

from photo_mosaic.errors import EmptyPaletteError

logger = logging.getLogger(__name__)


class NearestColorIndex:
    """Answers "which palette colour is closest?" under squared Euclidean distance.

    Built once from the full (N, 3) colour array and read-only afterwards,
    so one instance can be shared between threads. Query results are
    indices into the palette the colours came from.
    """

    def __init__(self, colors: np.ndarray) -> None:
        colors = np.asarray(colors, dtype=np.float64).reshape(-1, 3)
        if len(colors) == 0:
            msg = "palette is empty: no accepted tile images were found"
            raise EmptyPaletteError(msg)

        t0 = time.perf_counter()
        self._tree = cKDTree(colors)
        logger.info(
            "Colour index built over %d colours  (%.3f s)",
            len(colors), time.perf_counter() - t0,
        )

    def __len__(self) -> int:
        return self._tree.n

    def query(self, color: np.ndarray) -> int:
        """Return the index of the stored colour nearest to *color*."""
        _, idx = self._tree.query(np.asarray(color, dtype=np.float64), k=1)
        return int(idx)
