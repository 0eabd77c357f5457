"""Immutable scene snapshot consumed by the shader."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

import numpy as np
import numpy.typing as npt

from fogtrace.scene.hit_record import Intersection, IntersectionSequence

Vector = npt.NDArray[np.float64]


class Intersectable(Protocol):
    """Anything that can list the intersections of a ray."""

    def intersect(self, origin: Vector, direction: Vector) -> IntersectionSequence | Sequence[Intersection]:
        ...


class Background(Protocol):
    def get_color(self, direction: Vector, color: Vector) -> int:
        ...


@dataclass(frozen=True)
class Scene:
    """Everything the shader reads while rendering one frame.

    Attributes:
        intersectable: Root intersectable producing sorted intersections.
        background: Color source for rays that hit nothing.
        sources: Light sources, in evaluation order.
        camera: Camera producing primary rays (used by the renderer only).
    """

    intersectable: Intersectable
    background: Background
    sources: tuple[Any, ...] = field(default_factory=tuple)
    camera: Any = None

    def __post_init__(self) -> None:
        # Freeze the light list for the lifetime of the snapshot
        object.__setattr__(self, "sources", tuple(self.sources or ()))
