"""Core rendering module.

Components:
    ray: NumPy vector utilities for the shader
    fog: Uniform fog compositing (optical depth -> opacity -> blend)
    statistics: Thread-safe ray counters
    recursion: Procedural recursion override results and combination rules
    shader: The recursive Whitted-style shader with fog support
    renderer: Render target and frame loop (Taichi fields)

The shader runs in Python scope because it dispatches through polymorphic
scene objects (materials, reflectance models, light sources, recursion
functions); ray-primitive intersection and the render target use Taichi.
"""

from .fog import FogContribution, blend_fog, composite_fog, fog_alpha
from .ray import (
    RAY_EPSILON,
    as_vector,
    distance,
    is_zero,
    length,
    normalize,
    specular_reflection,
    specular_refraction,
    zero_vector,
)
from .recursion import RayContribution, RayRecursion
from .statistics import RayStatistics

# Note: shader and renderer are NOT imported here. The shader depends on the
# materials package (which itself imports core.ray) and the renderer declares
# Taichi fields, which requires ti.init() to have run first.

__all__ = [
    "FogContribution",
    "blend_fog",
    "composite_fog",
    "fog_alpha",
    "RAY_EPSILON",
    "as_vector",
    "distance",
    "is_zero",
    "length",
    "normalize",
    "specular_reflection",
    "specular_refraction",
    "zero_vector",
    "RayContribution",
    "RayRecursion",
    "RayStatistics",
]
