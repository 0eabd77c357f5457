"""Intersection records and ordered intersection sequences.

An ``Intersection`` is created cheaply by the root intersectable with just
the ray parameter and the solid that was hit. Geometric and material detail
(world coordinate, normal, material, reflectance model, textures, surface
color) is resolved only when ``complete()`` is called. The shader must call
``complete()`` before reading any of those fields; completion is idempotent.

An ``IntersectionSequence`` is the materialized, ascending-``t`` list of all
intersections of one ray, queried by index ("has next", "next") instead of
linked-list traversal.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING, Any

import numpy as np
import numpy.typing as npt

from fogtrace.core.ray import RAY_EPSILON, length
from fogtrace.scene.solids import Attribute

if TYPE_CHECKING:
    from fogtrace.scene.solids import Solid

Vector = npt.NDArray[np.float64]


class Intersection:
    """One ray-surface hit.

    Attributes:
        t: Ray parameter of the hit (distance in units of the ray direction).
        enter: True if the ray enters the solid at this hit.
        solid: The solid that was hit (its identity seeds the pixel hash).
        origin: Origin of the ray that produced the hit.
        direction: Direction of the ray that produced the hit.
        completed: Whether the lazy fields below have been resolved.
        coord_world: World-space hit point.
        normal: Unit outward surface normal.
        texture_coord: Surface (u, v) coordinates used by textures.
        material: The material (may be replaced by a per-call clone).
        reflectance_model: Object evaluating ``color_reflection``.
        textures: Texture operators applied in order.
        surface_color: Material color after texturing.
    """

    def __init__(
        self,
        t: float,
        solid: Solid,
        origin: Vector,
        direction: Vector,
        enter: bool = True,
    ) -> None:
        self.t = float(t)
        self.enter = enter
        self.solid = solid
        self.origin = np.array(origin, dtype=np.float64)
        self.direction = np.array(direction, dtype=np.float64)

        self.completed = False
        self.coord_world: Vector | None = None
        self.normal: Vector | None = None
        self.texture_coord: tuple[float, float] = (0.0, 0.0)
        self.material: Any = None
        self.reflectance_model: Any = None
        self.textures: list[Any] = []
        self.surface_color: Vector | None = None
        self.texture_applied = False

    def complete(self) -> None:
        """Resolve the world coordinate, normal, material and textures."""
        if self.completed:
            return
        self.coord_world = self.origin + self.t * self.direction
        self.solid.complete_intersection(self)

        self.material = self.solid.get_attribute(Attribute.MATERIAL)
        self.reflectance_model = self.solid.get_attribute(Attribute.REFLECTANCE_MODEL)
        self.textures = list(self.solid.get_attribute(Attribute.TEXTURE) or [])

        color = self.solid.get_attribute(Attribute.COLOR)
        if color is None and self.material is not None:
            color = self.material.color
        self.surface_color = np.array(color if color is not None else (0.0, 0.0, 0.0), dtype=np.float64)

        self.completed = True

    def apply_textures(self) -> list[int]:
        """Apply all textures in order and return their hash contributions."""
        self.complete()
        contributions = [int(texture.apply(self)) for texture in self.textures]
        self.texture_applied = True
        return contributions

    def is_far(self, limit: float, direction: Vector) -> bool:
        """Check whether the hit lies at or beyond ray parameter ``limit``.

        The comparison is made in world distance with a small tolerance so
        that a hit sitting exactly at ``limit`` (e.g. on the light itself)
        counts as far.
        """
        scale = length(direction)
        return self.t * scale > limit * scale - RAY_EPSILON

    def __repr__(self) -> str:
        return f"Intersection(t={self.t:.6g}, enter={self.enter}, solid={self.solid!r})"


class IntersectionSequence:
    """Ordered (ascending ``t``) intersections of a single ray."""

    def __init__(self, intersections: Iterable[Intersection] = ()) -> None:
        self._items = sorted(intersections, key=lambda i: i.t)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Intersection]:
        return iter(self._items)

    def __getitem__(self, index: int) -> Intersection:
        return self._items[index]

    def __bool__(self) -> bool:
        return bool(self._items)

    def first_index(self, direction: Vector) -> int | None:
        """Index of the first hit in front of the ray origin, or None.

        Hits closer than ``RAY_EPSILON`` (world distance) to the origin are
        treated as the surface the ray starts on and skipped.
        """
        scale = length(direction)
        for index, intersection in enumerate(self._items):
            if intersection.t * scale > RAY_EPSILON:
                return index
        return None

    def first(self, direction: Vector) -> Intersection | None:
        """The first real intersection in front of the ray origin, or None."""
        index = self.first_index(direction)
        return None if index is None else self._items[index]

    def has_next(self, index: int) -> bool:
        return index + 1 < len(self._items)

    def next(self, index: int) -> Intersection | None:
        """The intersection following ``index``, or None at the end."""
        if self.has_next(index):
            return self._items[index + 1]
        return None
