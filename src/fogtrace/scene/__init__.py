"""Scene module: intersections, solids, lights and scene management.

Components:
    hit_record: Lazily completed Intersection records and ordered sequences
    solids: Attribute inheritance, Sphere and Plane solids, checker texture
    lights: Ambient and point light sources
    background: Constant-color background
    snapshot: Immutable Scene handed to the shader
    intersection: Taichi primitive storage and all-hits intersection kernel
    manager: SceneManager, the root intersectable
    fog_scene: Demo scene with two spheres and a fog ball

Scene data is organized for the two sides of the renderer:
    - Taichi fields (structure of arrays) for primitive geometry
    - Python objects for attributes, materials and completion logic
"""

from .background import DefaultBackground
from .hit_record import Intersection, IntersectionSequence
from .lights import AmbientLightSource, PointLightSource
from .snapshot import Scene
from .solids import Attribute, CheckerTexture, Plane, Solid, SolidGroup, Sphere

# Note: intersection, manager and fog_scene are NOT imported here because they
# declare Taichi fields at import time, which requires ti.init() first.

__all__ = [
    "DefaultBackground",
    "Intersection",
    "IntersectionSequence",
    "AmbientLightSource",
    "PointLightSource",
    "Scene",
    "Attribute",
    "CheckerTexture",
    "Plane",
    "Solid",
    "SolidGroup",
    "Sphere",
]
