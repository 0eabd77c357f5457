"""Demo scene: two spheres and a fog ball over a checkered floor.

Scene layout:
    - Fog sphere of radius 2 centered at (0, 1, 3), color/transparency from
      the ``r``, ``g``, ``b`` and ``t`` parameters
    - Sphere of radius 1.2 at (1, 0.5, 3), partly inside the fog
    - Sphere of radius 1.2 at (-2, 1.5, 8), behind the fog
    - Floor plane y = -1, dark red with a white checker pattern
    - Ambient light 0.8 and a point light 1.2 at (-5, 4, -3)
    - Background (0, 0.01, 0.03)

The suggested viewpoint is at (0, 0.5, -5) looking along (0, -0.18, 1)
with a 70 degree vertical field of view (see ``VIEW_POSITION`` and
``VIEW_DIRECTION``).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from fogtrace.scene.fog_scene import create_two_spheres_and_fog_scene
    >>> scene = create_two_spheres_and_fog_scene("r=0.8 g=0.8 b=0.9 t=0.5")
"""

from __future__ import annotations

import re

from fogtrace.materials.material import PhongMaterial, UniformFog
from fogtrace.scene.background import DefaultBackground
from fogtrace.scene.lights import AmbientLightSource, PointLightSource
from fogtrace.scene.manager import SceneManager
from fogtrace.scene.solids import CheckerTexture

BACKGROUND_COLOR = (0.0, 0.01, 0.03)

VIEW_POSITION = (0.0, 0.5, -5.0)
VIEW_DIRECTION = (0.0, -0.18, 1.0)
VIEW_FOV = 70.0

DEFAULT_FOG_PARAMS = {"r": 0.5, "g": 0.5, "b": 0.5, "t": 0.6}


def parse_key_value_list(param: str | None) -> dict[str, str]:
    """Parse ``"key=value"`` pairs separated by commas, semicolons or whitespace.

    Keys are lower-cased; entries without ``=`` are ignored.

    Example:
        >>> parse_key_value_list("r=0.5, g=0.2 t=0.9")
        {'r': '0.5', 'g': '0.2', 't': '0.9'}
    """
    result: dict[str, str] = {}
    if not param:
        return result
    for token in re.split(r"[,;\s]+", param.strip()):
        key, sep, value = token.partition("=")
        if sep and key:
            result[key.strip().lower()] = value.strip()
    return result


def parse_fog_params(param: str | None) -> dict[str, float]:
    """Read fog color and transparency, falling back to the defaults.

    Raises:
        ValueError: If a value is not a number or lies outside [0, 1].
    """
    values = dict(DEFAULT_FOG_PARAMS)
    for key, raw in parse_key_value_list(param).items():
        if key not in values:
            continue
        try:
            number = float(raw)
        except ValueError as exc:
            raise ValueError(f"Fog parameter {key!r} must be a number, got {raw!r}") from exc
        if not 0.0 <= number <= 1.0:
            raise ValueError(f"Fog parameter {key!r} must be in [0, 1], got {number}")
        values[key] = number
    return values


def create_two_spheres_and_fog_scene(param: str | None = None) -> SceneManager:
    """Build the demo scene.

    Args:
        param: Optional ``"r=<> g=<> b=<> t=<>"`` string setting the fog
            color and transparency (all in [0, 1]).

    Returns:
        A populated SceneManager (call ``snapshot()`` to render it).
    """
    fog = parse_fog_params(param)

    scene = SceneManager()
    scene.set_default_material(
        PhongMaterial(color=(1.0, 0.7, 0.1), ka=0.1, kd=0.7, ks=0.3, h=128)
    )
    scene.set_background(DefaultBackground(BACKGROUND_COLOR))

    scene.add_light(AmbientLightSource(0.8))
    scene.add_light(PointLightSource((-5.0, 4.0, -3.0), 1.2))

    scene.add_sphere(
        (0.0, 1.0, 3.0),
        2.0,
        material=UniformFog(color=(fog["r"], fog["g"], fog["b"]), kt=fog["t"]),
    )
    scene.add_sphere((1.0, 0.5, 3.0), 1.2)
    scene.add_sphere((-2.0, 1.5, 8.0), 1.2)
    scene.add_plane(
        (0.0, -1.0, 0.0),
        (0.0, 1.0, 0.0),
        color=(0.3, 0.0, 0.0),
        texture=CheckerTexture(0.6, 0.6, (1.0, 1.0, 1.0)),
    )

    return scene
