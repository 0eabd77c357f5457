"""Geometry module: Taichi ray-primitive intersection functions.

Components:
    sphere: Both roots of the ray-sphere equation (robust quadratic)
    plane: Single root of the ray-plane equation
"""

from .plane import PlaneRoot, plane_root
from .sphere import SphereRoots, sphere_roots

__all__ = [
    "SphereRoots",
    "sphere_roots",
    "PlaneRoot",
    "plane_root",
]
