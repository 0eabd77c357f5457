"""Recursive Whitted-style shading with uniform fog.

``RayTracer.shade`` computes the color of one ray and a structural hash
describing which solids, textures, lights and secondary rays contributed to
it. The hash is only a cheap similarity signal for adaptive supersampling.

Per call, the shader:

1. intersects the ray with the scene (no hit -> background color);
2. resolves a fog span if the first hit is fog: the fog entry is paired with
   the next hit, the span length gives the fog opacity and shading continues
   on the hit behind the fog (a second fog hit is collapsed into the same
   span; a fog hit with nothing behind it tints the background);
3. applies textures, then either a procedural recursion override or the
   default lighting (per light source, with optional shadow rays);
4. composites the fog span over the lit color;
5. recurses for mirror reflection and refraction while the depth stays below
   ``max_level`` and the ray importance stays above ``min_importance``.

Example:
    >>> tracer = RayTracer(scene, ShaderConfig(max_level=5))
    >>> color = np.zeros(3)
    >>> signature = tracer.shade(0, 1.0, origin, direction, color)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

from fogtrace.core.fog import FogContribution
from fogtrace.core.ray import (
    distance,
    is_zero,
    normalize,
    specular_reflection,
    specular_refraction,
)
from fogtrace.core.recursion import RecursionFunction
from fogtrace.core.statistics import RayStatistics
from fogtrace.materials.material import MaterialKind
from fogtrace.materials.phong import ReflectionComponent
from fogtrace.scene.hit_record import Intersection, IntersectionSequence
from fogtrace.scene.solids import Attribute

if TYPE_CHECKING:
    from fogtrace.scene.snapshot import Scene

logger = logging.getLogger(__name__)

Color = npt.NDArray[np.float64]

# =============================================================================
# Hash Multipliers
# =============================================================================

HASH_TEXTURE = 101
HASH_LIGHT = 251
HASH_RECURSION = 347
HASH_REFLECT = 383
HASH_REFRACT = 563

_MASK64 = (1 << 64) - 1


def _wrap(value: int) -> int:
    """Wrap an integer to the signed 64-bit range."""
    value &= _MASK64
    return value - (1 << 64) if value >= 1 << 63 else value


def _is_fog(material: object) -> bool:
    return material is not None and getattr(material, "kind", MaterialKind.SOLID) == MaterialKind.FOG


@dataclass
class ShaderConfig:
    """Recursion limits and feature switches.

    Attributes:
        max_level: Maximum recursion depth (rays at depth >= max_level are not shot).
        min_importance: Secondary rays with lower importance are skipped.
        do_shadows: Shoot shadow rays toward positional lights.
        do_reflections: Shoot mirror-reflected rays.
        do_refractions: Shoot refracted rays.
        do_recursion: Honor per-solid recursion functions.
        log_rays: Log every shaded ray at DEBUG level (single-ray debugging).
    """

    max_level: int = 12
    min_importance: float = 0.05
    do_shadows: bool = True
    do_reflections: bool = True
    do_refractions: bool = True
    do_recursion: bool = True
    log_rays: bool = False


class RayTracer:
    """Recursive shader bound to one scene snapshot.

    The tracer holds no per-ray state, so ``shade`` may be called
    concurrently from several threads as long as the scene is not modified.

    Attributes:
        scene: The scene snapshot being rendered.
        config: Recursion limits and feature switches.
        statistics: Ray counters updated by every call.
    """

    def __init__(
        self,
        scene: Scene,
        config: ShaderConfig | None = None,
        statistics: RayStatistics | None = None,
    ) -> None:
        self.scene = scene
        self.config = config or ShaderConfig()
        self.statistics = statistics or RayStatistics()

    def _intersect(self, origin: npt.NDArray[np.float64], direction: npt.NDArray[np.float64]) -> IntersectionSequence:
        result = self.scene.intersectable.intersect(origin, direction)
        if isinstance(result, IntersectionSequence):
            return result
        return IntersectionSequence(result or ())

    def trace(
        self,
        origin: npt.ArrayLike,
        direction: npt.ArrayLike,
        bands: int = 3,
    ) -> tuple[Color, int]:
        """Shade a primary ray and return ``(color, hash)``.

        The inputs are copied, so the caller's direction is left untouched.
        """
        color = np.zeros(bands, dtype=np.float64)
        signature = self.shade(
            0,
            1.0,
            np.array(origin, dtype=np.float64),
            np.array(direction, dtype=np.float64),
            color,
        )
        return color, signature

    def shade(
        self,
        depth: int,
        importance: float,
        origin: npt.NDArray[np.float64],
        direction: npt.NDArray[np.float64],
        color: Color,
    ) -> int:
        """Compute the color of one ray.

        Args:
            depth: Current recursion depth (0 for primary rays).
            importance: Remaining energy weight of this ray, in (0, 1].
            origin: Ray origin.
            direction: Ray direction. Overwritten in place with the unit
                viewing vector (the reversed direction) once a hit is found.
            color: Output buffer, one value per spectral band.

        Returns:
            The ray's structural hash.
        """
        config = self.config
        bands = len(color)

        intersections = self._intersect(origin, direction)
        self.statistics.increment_rays(1, depth == 0)

        index = intersections.first_index(direction)
        if index is None:
            if config.log_rays:
                logger.debug("depth %d: no hit, background", depth)
            return self.scene.background.get_color(direction, color)

        i = intersections[index]
        i.complete()

        fog: FogContribution | None = None
        if _is_fog(i.material):
            i, fog, background_hash = self._resolve_fog(intersections, index, origin, direction, color)
            if i is None:
                return background_hash

        if config.log_rays:
            logger.debug("depth %d: hit %r at t=%.6g (fog=%s)", depth, i.solid, i.t, fog is not None)

        # Hash code for adaptive supersampling
        signature = _wrap(hash(i.solid))

        # Apply all the textures first
        for contribution in i.apply_textures():
            signature = _wrap(signature * HASH_TEXTURE + contribution)

        # Color accumulation
        color[:] = 0.0

        # Optional procedural override
        if config.do_recursion:
            recursion = i.solid.get_attribute(Attribute.RECURSION)
            if recursion is not None:
                increment, handled = self._shade_recursion(
                    recursion, i, depth, importance, direction, color
                )
                signature = _wrap(signature + increment)
                if handled:
                    return signature

        # Default (Whitted) interaction: lights [+ reflection] [+ refraction]
        direction[:] = normalize(-direction)
        view = direction
        original_material = i.material

        signature = self._shade_lights(i, view, color, signature)

        if fog is not None:
            fog.apply(color)

        depth += 1
        if (
            depth >= config.max_level
            or (not config.do_reflections and not config.do_refractions)
            or _is_fog(i.material)
            or original_material is None
        ):
            return signature

        comp = np.zeros(bands, dtype=np.float64)

        if config.do_reflections and i.reflectance_model is not None:
            r = specular_reflection(i.normal, view)
            ks = i.reflectance_model.color_reflection(
                i, view, r, ReflectionComponent.SPECULAR_REFLECTION
            )
            if ks is not None:
                ks = np.asarray(ks, dtype=np.float64)
                max_k = float(np.max(ks[:bands]))
                new_importance = importance * max_k
                if new_importance >= config.min_importance:
                    sub = self.shade(depth, new_importance, i.coord_world.copy(), r, comp)
                    signature = _wrap(signature + HASH_REFLECT * sub)
                    color += comp * _bands(ks, bands)

        if config.do_refractions:
            max_k = original_material.kt
            new_importance = importance * max_k
            if new_importance < config.min_importance:
                return signature

            r = specular_refraction(i.normal, original_material.n, view)
            if is_zero(r):
                return signature

            sub = self.shade(depth, new_importance, i.coord_world.copy(), r, comp)
            signature = _wrap(signature + HASH_REFRACT * sub)
            color += comp * max_k

        return signature

    def _resolve_fog(
        self,
        intersections: IntersectionSequence,
        index: int,
        origin: npt.NDArray[np.float64],
        direction: npt.NDArray[np.float64],
        color: Color,
    ) -> tuple[Intersection | None, FogContribution | None, int]:
        """Pair the fog hit at ``index`` with what lies behind it.

        Returns ``(working, fog, 0)`` when shading continues on ``working``,
        or ``(None, None, hash)`` when the ray ends in the background, in
        which case ``color`` already holds the fogged background.
        """
        entry = intersections[index]
        fog_material = entry.material
        exit_ = intersections.next(index)

        if exit_ is None:
            # The ray starts inside the fog and leaves it at ``entry``
            span = FogContribution.from_span(
                fog_material.color, fog_material.kt, distance(origin, entry.coord_world)
            )
            background_hash = self.scene.background.get_color(direction, color)
            span.apply(color)
            return None, None, background_hash

        exit_.complete()
        span = FogContribution.from_span(
            fog_material.color, fog_material.kt, distance(entry.coord_world, exit_.coord_world)
        )

        if not _is_fog(exit_.material):
            return exit_, span, 0

        # ``exit_`` closes the fog span; shade whatever lies behind it
        behind = intersections.next(index + 1)
        if behind is None:
            background_hash = self.scene.background.get_color(direction, color)
            span.apply(color)
            return None, None, background_hash

        behind.complete()
        return behind, span, 0

    def _shade_lights(
        self,
        i: Intersection,
        view: npt.NDArray[np.float64],
        color: Color,
        signature: int,
    ) -> int:
        bands = len(color)
        sources = self.scene.sources

        if not sources:
            # No light sources at all
            color += _bands(i.surface_color, bands)
            return signature

        if i.material is None:
            return signature

        # Apply the reflectance model for each source on a private material
        i.material = i.material.clone()
        i.material.color = i.surface_color.copy()

        for source in sources:
            intensity, light_dir = source.get_intensity(i)
            if intensity is None:
                continue

            if self.config.do_shadows and not is_zero(light_dir):
                shadow_hits = self._intersect(i.coord_world, light_dir)
                self.statistics.increment_rays(1)
                blocker = shadow_hits.first(light_dir)
                # Any hit strictly between the surface and the light kills it
                if blocker is not None and not blocker.is_far(1.0, light_dir):
                    continue

            if i.reflectance_model is None:
                continue

            reflection = i.reflectance_model.color_reflection(
                i, light_dir, view, ReflectionComponent.ALL
            )
            if reflection is not None:
                color += _bands(intensity, bands) * _bands(reflection, bands)
                signature = _wrap(signature * HASH_LIGHT + hash(source))

        return signature

    def _shade_recursion(
        self,
        recursion: RecursionFunction,
        i: Intersection,
        depth: int,
        importance: float,
        direction: npt.NDArray[np.float64],
        color: Color,
    ) -> tuple[int, bool]:
        """Run a solid's recursion function.

        Returns the hash increment and whether the function produced a
        result; without one the default lighting is used.
        """
        result_hash, rr = recursion(i, direction.copy(), importance)
        increment = _wrap(HASH_RECURSION * int(result_hash))
        if rr is None:
            return increment, False

        rr.add_direct(color)

        if rr.rays and depth + 1 < self.config.max_level:
            comp = np.zeros(len(color), dtype=np.float64)
            for ray in rr.rays:
                sub = self.shade(depth + 1, ray.importance, ray.origin.copy(), ray.direction.copy(), comp)
                increment = _wrap(increment + HASH_REFLECT * sub)
                ray.combine(comp, color)

        return increment, True


def _bands(values: npt.ArrayLike, bands: int) -> Color:
    """Broadcast ``values`` to exactly ``bands`` entries."""
    values = np.asarray(values, dtype=np.float64)
    if values.ndim == 0 or values.size == 1:
        return np.full(bands, float(values.reshape(-1)[0]), dtype=np.float64)
    if values.size >= bands:
        return values[:bands]
    return np.pad(values, (0, bands - values.size))
