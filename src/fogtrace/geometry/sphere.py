"""Sphere roots with the robust quadratic formula.

The fog shader needs both the entry and the exit of every sphere, so unlike
a closest-hit test this module returns both roots of the ray-sphere
equation. The robust formulation from Ray Tracing Gems avoids catastrophic
cancellation when ``h^2`` is close to ``a*c``.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from fogtrace.geometry.sphere import sphere_roots
    >>> # Use sphere_roots within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class SphereRoots:
    """Both intersections of a ray with a sphere.

    Attributes:
        hit: 1 if the ray's line meets the sphere, 0 otherwise.
        t0: The smaller ray parameter (entry).
        t1: The larger ray parameter (exit).
    """

    hit: ti.i32
    t0: ti.f32
    t1: ti.f32


@ti.func
def _solve_quadratic_robust(h: ti.f32, a: ti.f32, c: ti.f32, sqrt_d: ti.f32):
    """Solve a*t^2 + 2*h*t + c = 0 given sqrt of the discriminant.

    Returns:
        Tuple of (t0, t1) where t0 <= t1.
    """
    sign_h = ti.select(h < 0.0, -1.0, 1.0)
    q = -(h + sign_h * sqrt_d)

    t0 = 0.0
    t1 = 0.0

    if ti.abs(q) < 1e-10:
        # Tangent ray through the center plane
        t0 = (-h - sqrt_d) / a
        t1 = (-h + sqrt_d) / a
    else:
        t0 = q / a
        t1 = c / q

    if t0 > t1:
        temp = t0
        t0 = t1
        t1 = temp

    return t0, t1


@ti.func
def sphere_roots(ray_origin: vec3, ray_direction: vec3, center: vec3, radius: ti.f32) -> SphereRoots:
    """Intersect a ray's line with a sphere.

    Solves ``|origin + t*direction - center|^2 = radius^2`` as
    ``a*t^2 + 2*h*t + c = 0`` with ``a = d.d``, ``h = d.oc`` and
    ``c = oc.oc - r^2``.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The ray direction (need not be normalized).
        center: Sphere center.
        radius: Sphere radius.

    Returns:
        SphereRoots; the roots may be negative (behind the origin).
    """
    oc = ray_origin - center
    a = tm.dot(ray_direction, ray_direction)
    h = tm.dot(ray_direction, oc)
    c = tm.dot(oc, oc) - radius * radius
    discriminant = h * h - a * c

    did_hit = 0
    t0 = 0.0
    t1 = 0.0

    if discriminant >= 0.0 and a > 0.0:
        did_hit = 1
        r0, r1 = _solve_quadratic_robust(h, a, c, ti.sqrt(discriminant))
        t0 = r0
        t1 = r1

    return SphereRoots(hit=did_hit, t0=t0, t1=t1)
