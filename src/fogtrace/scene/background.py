"""Backgrounds: colors for rays that hit nothing."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
import numpy.typing as npt


class DefaultBackground:
    """Constant background color.

    The returned hash depends only on the color, so every background ray
    of one scene carries the same signature.
    """

    def __init__(self, color: Sequence[float] = (0.0, 0.0, 0.0)) -> None:
        self.color = np.array(color, dtype=np.float64)
        self._hash = hash(tuple(float(c) for c in self.color))

    def get_color(self, direction: npt.NDArray[np.float64], color: npt.NDArray[np.float64]) -> int:
        """Write the background color into ``color`` and return its hash."""
        bands = min(len(color), len(self.color))
        color[:] = 0.0
        color[:bands] = self.color[:bands]
        return self._hash
