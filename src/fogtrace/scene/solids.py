"""Solids, attribute inheritance and textures.

Solids are Python-side scene objects. They own their attributes (material,
reflectance model, color, textures, recursion function) and know how to
complete an intersection geometrically (normal and texture coordinates).
Attributes missing on a solid are looked up on its parent, so a scene root
can carry defaults for every child.

Example:
    >>> root = SolidGroup()
    >>> root.set_attribute(Attribute.MATERIAL, PhongMaterial(color=(1.0, 0.7, 0.1)))
    >>> ball = Sphere(center=(0.0, 1.0, 3.0), radius=1.0)
    >>> root.add_child(ball)
    >>> ball.get_attribute(Attribute.MATERIAL) is root.get_attribute(Attribute.MATERIAL)
    True
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from enum import Enum
from typing import TYPE_CHECKING, Any

import numpy as np
import numpy.typing as npt

from fogtrace.core.ray import as_vector, normalize

if TYPE_CHECKING:
    from fogtrace.scene.hit_record import Intersection

Vector = npt.NDArray[np.float64]


class Attribute(str, Enum):
    """Names of inheritable solid attributes."""

    MATERIAL = "material"
    REFLECTANCE_MODEL = "reflectance_model"
    COLOR = "color"
    TEXTURE = "texture"
    RECURSION = "recursion"


class SolidGroup:
    """A node carrying attributes that its children inherit."""

    def __init__(self, parent: SolidGroup | None = None) -> None:
        self.parent = parent
        self.attributes: dict[Attribute, Any] = {}
        self.children: list[SolidGroup] = []

    def set_attribute(self, name: Attribute, value: Any) -> None:
        self.attributes[name] = value

    def get_attribute(self, name: Attribute) -> Any:
        """Look up an attribute on this node, then on its ancestors."""
        node: SolidGroup | None = self
        while node is not None:
            if name in node.attributes:
                return node.attributes[name]
            node = node.parent
        return None

    def add_child(self, child: SolidGroup) -> SolidGroup:
        child.parent = self
        self.children.append(child)
        return child

    def add_texture(self, texture: Any) -> None:
        """Append a texture to this node's own texture list."""
        self.attributes.setdefault(Attribute.TEXTURE, []).append(texture)


class Solid(SolidGroup):
    """Base class for intersectable solids.

    Hashing uses object identity: two solids are never equal, and the
    identity is what the shader folds into a pixel's hash.
    """

    def complete_intersection(self, intersection: Intersection) -> None:
        """Fill in ``normal`` and ``texture_coord`` for a hit on this solid."""
        raise NotImplementedError("complete_intersection() must be implemented by subclasses.")


class Sphere(Solid):
    """Sphere given by center and radius."""

    def __init__(
        self,
        center: Sequence[float] = (0.0, 0.0, 0.0),
        radius: float = 1.0,
        parent: SolidGroup | None = None,
    ) -> None:
        super().__init__(parent)
        if radius <= 0.0:
            raise ValueError(f"Sphere radius must be positive, got {radius}")
        self.center = as_vector(center)
        self.radius = float(radius)

    def complete_intersection(self, intersection: Intersection) -> None:
        local = (intersection.coord_world - self.center) / self.radius
        intersection.normal = normalize(local)
        # Spherical (longitude, latitude) mapped to [0, 1]
        u = 0.5 + math.atan2(local[2], local[0]) / (2.0 * math.pi)
        v = 0.5 + math.asin(max(-1.0, min(1.0, float(local[1])))) / math.pi
        intersection.texture_coord = (u, v)

    def __repr__(self) -> str:
        return f"Sphere(center={self.center.tolist()}, radius={self.radius})"


class Plane(Solid):
    """Infinite plane through ``point`` with the given ``normal``.

    Texture coordinates are measured along two tangent axes of the plane.
    """

    def __init__(
        self,
        point: Sequence[float] = (0.0, 0.0, 0.0),
        normal: Sequence[float] = (0.0, 1.0, 0.0),
        parent: SolidGroup | None = None,
    ) -> None:
        super().__init__(parent)
        normal_vec = as_vector(normal)
        if not np.any(normal_vec):
            raise ValueError("Plane normal must be non-zero")
        self.point = as_vector(point)
        self.normal = normalize(normal_vec)
        self.tangent, self.bitangent = _tangent_frame(self.normal)

    def complete_intersection(self, intersection: Intersection) -> None:
        intersection.normal = self.normal.copy()
        offset = intersection.coord_world - self.point
        intersection.texture_coord = (
            float(np.dot(offset, self.tangent)),
            float(np.dot(offset, self.bitangent)),
        )

    def __repr__(self) -> str:
        return f"Plane(point={self.point.tolist()}, normal={self.normal.tolist()})"


def _tangent_frame(normal: Vector) -> tuple[Vector, Vector]:
    """Build two unit tangents completing an orthonormal basis with ``normal``."""
    # Choose a vector not parallel to normal
    a = as_vector((1.0, 0.0, 0.0))
    if abs(normal[0]) > 0.9:
        a = as_vector((0.0, 0.0, 1.0))
    bitangent = normalize(np.cross(normal, a))
    tangent = np.cross(bitangent, normal)
    return tangent, bitangent


class CheckerTexture:
    """Two-color checkerboard over the surface texture coordinates.

    Cells where ``floor(u * fu) + floor(v * fv)`` is odd take ``color``;
    the others keep the surface color.
    """

    def __init__(self, fu: float, fv: float, color: Sequence[float]) -> None:
        self.fu = float(fu)
        self.fv = float(fv)
        self.color = as_vector(color)

    def apply(self, intersection: Intersection) -> int:
        """Recolor the intersection and return the cell parity as hash."""
        u, v = intersection.texture_coord
        parity = (math.floor(u * self.fu) + math.floor(v * self.fv)) & 1
        if parity:
            intersection.surface_color = self.color.copy()
        return parity
