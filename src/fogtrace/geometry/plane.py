"""Infinite plane intersection.

A plane is stored as a point and a unit normal. The single root is
``t = dot(normal, point - origin) / dot(normal, direction)``; rays parallel
to the plane miss it.
"""

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3

# Rays with |dot(normal, direction)| below this are treated as parallel
PARALLEL_EPSILON = 1e-8


@ti.dataclass
class PlaneRoot:
    """Intersection of a ray with a plane.

    Attributes:
        hit: 1 if the ray is not parallel to the plane.
        t: Ray parameter of the hit (may be negative).
        enter: 1 if the ray crosses against the normal (from the front).
    """

    hit: ti.i32
    t: ti.f32
    enter: ti.i32


@ti.func
def plane_root(ray_origin: vec3, ray_direction: vec3, point: vec3, normal: vec3) -> PlaneRoot:
    """Intersect a ray's line with an infinite plane."""
    denom = tm.dot(normal, ray_direction)

    did_hit = 0
    t = 0.0
    enter = 0

    if ti.abs(denom) > PARALLEL_EPSILON:
        did_hit = 1
        t = tm.dot(normal, point - ray_origin) / denom
        enter = ti.select(denom < 0.0, 1, 0)

    return PlaneRoot(hit=did_hit, t=t, enter=enter)
