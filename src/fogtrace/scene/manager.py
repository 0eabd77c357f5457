"""Scene manager: solids, lights and the root intersectable.

The SceneManager keeps two views of the scene in sync:

- Taichi-side primitive storage (``fogtrace.scene.intersection``) used by
  the intersection kernel;
- Python-side ``Solid`` objects (attributes, completion logic) indexed by
  primitive kind and storage index.

It acts as the root intersectable: ``intersect`` launches the kernel and
turns the raw hits into an ``IntersectionSequence`` of lazily completed
``Intersection`` records. ``snapshot`` freezes the scene for rendering.

The Taichi primitive storage is a single store per process, so only one
scene is active at a time. Creating or clearing a SceneManager claims the
store; the previous manager (and any snapshot of it) then raises
``RuntimeError`` on ``intersect`` or when adding primitives.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from fogtrace.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> scene.set_default_material(PhongMaterial(color=(1.0, 0.7, 0.1)))
    >>> scene.add_sphere((0.0, 0.0, 5.0), 1.0)
    >>> scene.add_light(AmbientLightSource(0.8))
    >>> snapshot = scene.snapshot()
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import numpy as np
import numpy.typing as npt

from fogtrace.materials.material import Material
from fogtrace.materials.phong import PhongModel
from fogtrace.scene.background import DefaultBackground
from fogtrace.scene.hit_record import Intersection, IntersectionSequence
from fogtrace.scene.intersection import (
    MAX_PLANES,
    MAX_SPHERES,
    PrimitiveKind,
    add_plane,
    add_sphere,
    claim_storage,
    get_plane_count,
    get_sphere_count,
    get_storage_owner,
    intersect_scene,
)
from fogtrace.scene.snapshot import Scene
from fogtrace.scene.solids import Attribute, Plane, Solid, SolidGroup, Sphere

logger = logging.getLogger(__name__)


class SceneManager:
    """Root of the scene graph and its intersectable.

    The root node carries default attributes (a Phong reflectance model is
    installed automatically); every added solid inherits from it.

    Attributes:
        root: Attribute node all solids inherit from.
        sources: Light sources in evaluation order.
        background: Background for rays that hit nothing.
        camera: Camera used by the renderer.
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.root = SolidGroup()
        self.root.set_attribute(Attribute.REFLECTANCE_MODEL, PhongModel())
        self.sources: list[Any] = []
        self.background: Any = DefaultBackground()
        self.camera: Any = None
        self._solids: dict[PrimitiveKind, list[Solid]] = {
            PrimitiveKind.SPHERE: [],
            PrimitiveKind.PLANE: [],
        }
        self._clear_all()

    def _clear_all(self) -> None:
        claim_storage(self)
        for solids in self._solids.values():
            solids.clear()
        self.root.children.clear()
        self.sources.clear()

    def _check_storage_owner(self) -> None:
        if get_storage_owner() is not self:
            raise RuntimeError(
                "Primitive storage belongs to another scene; "
                "only one SceneManager can be active per process"
            )

    def clear(self) -> None:
        """Remove all solids and lights (root attributes are kept)."""
        self._clear_all()

    # =========================================================================
    # Attributes
    # =========================================================================

    def set_default_material(self, material: Material) -> None:
        self.root.set_attribute(Attribute.MATERIAL, material)

    def set_default_reflectance_model(self, model: Any) -> None:
        self.root.set_attribute(Attribute.REFLECTANCE_MODEL, model)

    # =========================================================================
    # Primitive Management
    # =========================================================================

    def add_sphere(
        self,
        center: Sequence[float],
        radius: float,
        material: Material | None = None,
        **attributes: Any,
    ) -> Sphere:
        """Add a sphere.

        Args:
            center: Sphere center (x, y, z).
            radius: Sphere radius (positive).
            material: Material; inherited from the root when None.
            **attributes: Further attributes by ``Attribute`` value name
                (``color``, ``texture``, ``recursion``, ``reflectance_model``).

        Returns:
            The created Sphere solid.

        Raises:
            ValueError: If the radius is not positive.
            RuntimeError: If the maximum number of spheres is exceeded.
        """
        self._check_storage_owner()
        sphere = Sphere(center, radius)
        add_sphere(sphere.center, sphere.radius)
        return self._register(PrimitiveKind.SPHERE, sphere, material, attributes)

    def add_plane(
        self,
        point: Sequence[float],
        normal: Sequence[float],
        material: Material | None = None,
        **attributes: Any,
    ) -> Plane:
        """Add an infinite plane.

        Raises:
            ValueError: If the normal is zero.
            RuntimeError: If the maximum number of planes is exceeded.
        """
        self._check_storage_owner()
        plane = Plane(point, normal)
        add_plane(plane.point, plane.normal)
        return self._register(PrimitiveKind.PLANE, plane, material, attributes)

    def _register(
        self,
        kind: PrimitiveKind,
        solid: Solid,
        material: Material | None,
        attributes: dict[str, Any],
    ) -> Any:
        if material is not None:
            solid.set_attribute(Attribute.MATERIAL, material)
        for name, value in attributes.items():
            attribute = Attribute(name)
            if attribute is Attribute.TEXTURE and not isinstance(value, list):
                value = [value]
            solid.set_attribute(attribute, value)
        self.root.add_child(solid)
        self._solids[kind].append(solid)
        logger.debug("Added %r", solid)
        return solid

    def get_sphere_count(self) -> int:
        return get_sphere_count()

    def get_plane_count(self) -> int:
        return get_plane_count()

    def get_primitive_count(self) -> int:
        return self.get_sphere_count() + self.get_plane_count()

    def get_solid(self, kind: PrimitiveKind, index: int) -> Solid:
        return self._solids[kind][index]

    # =========================================================================
    # Lights, Background, Camera
    # =========================================================================

    def add_light(self, source: Any) -> None:
        self.sources.append(source)

    def set_background(self, background: Any) -> None:
        self.background = background

    def set_camera(self, camera: Any) -> None:
        self.camera = camera

    # =========================================================================
    # Intersectable
    # =========================================================================

    def intersect(
        self,
        origin: npt.NDArray[np.float64],
        direction: npt.NDArray[np.float64],
    ) -> IntersectionSequence:
        """All intersections of the ray with the scene, sorted by ``t``.

        Raises:
            RuntimeError: If another SceneManager has claimed the primitive
                storage since this one was built.
        """
        self._check_storage_owner()
        hits = intersect_scene(origin, direction)
        return IntersectionSequence(
            Intersection(
                t=hit.t,
                solid=self._solids[hit.kind][hit.index],
                origin=origin,
                direction=direction,
                enter=hit.enter,
            )
            for hit in hits
        )

    def snapshot(self) -> Scene:
        """Freeze the current lights, background and camera for rendering."""
        return Scene(
            intersectable=self,
            background=self.background,
            sources=tuple(self.sources),
            camera=self.camera,
        )

    # =========================================================================
    # Capacity Information
    # =========================================================================

    @staticmethod
    def get_max_spheres() -> int:
        return MAX_SPHERES

    @staticmethod
    def get_max_planes() -> int:
        return MAX_PLANES
