"""Procedural recursion overrides.

A solid may carry a recursion function (``Attribute.RECURSION``) that replaces
the default Whitted lighting for hits on that solid:

    recursion(intersection, view_dir, importance) -> (hash, RayRecursion | None)

The returned ``RayRecursion`` lists a direct color contribution and any
number of additional rays to be traced. Combination rules:

- ``direct_contribution``: a single value is added to every band; a longer
  sequence is added band by band.
- ``RayContribution.coefficient``: ``None`` weights the traced color by 1,
  a single value scales every band uniformly, a longer sequence scales band
  by band.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

if TYPE_CHECKING:
    from fogtrace.scene.hit_record import Intersection

Color = npt.NDArray[np.float64]


def _add_weighted(source: Color, weight: Sequence[float] | None, target: Color) -> None:
    if weight is None or len(weight) == 0:
        target += source
    elif len(weight) == 1:
        target += source * float(weight[0])
    else:
        bands = min(len(target), len(weight))
        target[:bands] += source[:bands] * np.asarray(weight[:bands], dtype=np.float64)


@dataclass
class RayContribution:
    """One additional ray requested by a recursion function.

    Attributes:
        origin: Ray origin.
        direction: Ray direction.
        importance: Importance passed to the nested shade call.
        coefficient: Weight of the traced color (see module docstring).
    """

    origin: npt.NDArray[np.float64]
    direction: npt.NDArray[np.float64]
    importance: float = 1.0
    coefficient: Sequence[float] | None = None

    def __post_init__(self) -> None:
        self.origin = np.array(self.origin, dtype=np.float64)
        self.direction = np.array(self.direction, dtype=np.float64)
        if self.coefficient is not None and np.isscalar(self.coefficient):
            self.coefficient = [float(self.coefficient)]

    def combine(self, traced: Color, color: Color) -> None:
        """Add the traced color, weighted by the coefficient, into ``color``."""
        _add_weighted(traced, self.coefficient, color)


@dataclass
class RayRecursion:
    """Result of a recursion function.

    Attributes:
        direct_contribution: Color added without tracing.
        rays: Additional rays to trace and combine.
    """

    direct_contribution: Sequence[float] | None = None
    rays: list[RayContribution] = field(default_factory=list)

    def add_direct(self, color: Color) -> None:
        """Add the direct contribution into ``color``."""
        if self.direct_contribution is None or len(self.direct_contribution) == 0:
            return
        if len(self.direct_contribution) == 1:
            color += float(self.direct_contribution[0])
        else:
            bands = min(len(color), len(self.direct_contribution))
            color[:bands] += np.asarray(self.direct_contribution[:bands], dtype=np.float64)


RecursionFunction = Callable[
    ["Intersection", npt.NDArray[np.float64], float],
    "tuple[int, RayRecursion | None]",
]
