"""Light sources.

A light source answers, for a completed intersection, how much light it
delivers and from which direction. The direction is a zero vector for
ambient light (nothing to shadow-test); for positional lights it is the
unnormalized vector from the hit point to the light, so the light itself
sits at parameter 1 along a shadow ray.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

from fogtrace.core.ray import as_vector, zero_vector

if TYPE_CHECKING:
    from fogtrace.scene.hit_record import Intersection

Color = npt.NDArray[np.float64]
Vector = npt.NDArray[np.float64]


def _intensity(intensity: float | Sequence[float], bands: int = 3) -> Color:
    if np.isscalar(intensity):
        return np.full(bands, float(intensity), dtype=np.float64)
    return np.array(intensity, dtype=np.float64)


class AmbientLightSource:
    """Direction-less light reaching every point."""

    position = None

    def __init__(self, intensity: float | Sequence[float] = 0.1) -> None:
        self.intensity = _intensity(intensity)

    def get_intensity(self, intersection: Intersection) -> tuple[Color | None, Vector]:
        return self.intensity.copy(), zero_vector()


class PointLightSource:
    """Light emitted from a single point in space."""

    def __init__(self, position: Sequence[float], intensity: float | Sequence[float] = 1.0) -> None:
        self.position = as_vector(position)
        self.intensity = _intensity(intensity)

    def get_intensity(self, intersection: Intersection) -> tuple[Color | None, Vector]:
        direction = self.position - intersection.coord_world
        if not np.any(direction):
            return None, direction
        return self.intensity.copy(), direction
