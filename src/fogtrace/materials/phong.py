"""Phong reflectance model.

The reflectance model turns a material plus geometry into the fraction of
light reaching the viewer. It is called twice by the shader:

- once per light source with ``ReflectionComponent.ALL`` to evaluate direct
  illumination;
- once with ``ReflectionComponent.SPECULAR_REFLECTION`` to obtain the weight
  of the mirror-reflected ray.

Directions passed to the model point away from the surface: ``light_dir``
toward the light (a zero vector for ambient light) and ``view_dir`` toward
the viewer.
"""

from __future__ import annotations

from enum import IntFlag
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

from fogtrace.core.ray import is_zero, normalize, specular_refraction
from fogtrace.materials.material import MaterialKind, PhongMaterial

if TYPE_CHECKING:
    from fogtrace.scene.hit_record import Intersection

Color = npt.NDArray[np.float64]


class ReflectionComponent(IntFlag):
    """Selects which terms of the reflectance model are evaluated."""

    DIFFUSE = 1
    SPECULAR_REFLECTION = 2
    SPECULAR_REFRACTION = 4
    ALL = DIFFUSE | SPECULAR_REFLECTION | SPECULAR_REFRACTION


class PhongModel:
    """Phong illumination for ``PhongMaterial`` surfaces.

    Materials of any other kind (fog) have no reflectance and produce
    ``None``.
    """

    def color_reflection(
        self,
        intersection: Intersection,
        light_dir: npt.NDArray[np.float64],
        view_dir: npt.NDArray[np.float64],
        component: ReflectionComponent,
    ) -> Color | None:
        """Evaluate the reflected color for one light direction.

        Args:
            intersection: A completed intersection (normal and material set).
            light_dir: Direction toward the light; zero for ambient light.
            view_dir: Unit direction toward the viewer.
            component: Terms to include.

        Returns:
            Per-band reflectance, or None when the material has no
            reflectance (fog).
        """
        return self.color_reflection_material(
            intersection.material, intersection.normal, light_dir, view_dir, component
        )

    def color_reflection_material(
        self,
        material: object,
        normal: npt.NDArray[np.float64],
        light_dir: npt.NDArray[np.float64],
        view_dir: npt.NDArray[np.float64],
        component: ReflectionComponent,
    ) -> Color | None:
        if not isinstance(material, PhongMaterial) or material.kind != MaterialKind.SOLID:
            return None

        view_out = float(np.dot(view_dir, normal)) > 0.0

        if is_zero(light_dir):
            # Ambient light, dimmed if the viewer is inside the solid
            coef = material.ka if view_out else material.ka * material.kt
            return coef * material.color

        light_dir = normalize(light_dir)
        cos_alpha = float(np.dot(light_dir, normal))
        light_out = cos_alpha > 0.0

        r = None
        coef = 1.0
        if view_out == light_out:
            # Viewer and light on the same side
            if component & ReflectionComponent.SPECULAR_REFLECTION:
                r = (cos_alpha + cos_alpha) * normal - light_dir
                if not light_out and -cos_alpha <= material.cutoff:
                    # Total internal reflection
                    coef = 1.0 + material.kt
        else:
            # Opposite sides: light is transmitted
            if component & ReflectionComponent.SPECULAR_REFRACTION:
                r = specular_refraction(normal, material.n, light_dir)
            coef = material.kt

        diffuse = 0.0
        if component & ReflectionComponent.DIFFUSE:
            diffuse = coef * material.kd * abs(cos_alpha)

        specular = 0.0
        if r is not None and not is_zero(r):
            cos_beta = float(np.dot(r, view_dir))
            if cos_beta > 0.0:
                specular = coef * material.ks * cos_beta**material.h

        return diffuse * material.color + specular
