"""Scene-level primitive intersection in Taichi.

Primitives are stored in Taichi fields (structure-of-arrays layout). One
kernel launch tests a ray against every primitive and records *all* hits in
front of the origin (both roots of each sphere, the root of each plane) into
a hit buffer. The buffer is read back and sorted on the Python side, since
the fog shader needs the complete ordered list, not just the closest hit.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from fogtrace.scene.intersection import add_sphere, intersect_scene, clear_scene
    >>> clear_scene()
    >>> add_sphere((0.0, 0.0, 5.0), 1.0)
    0
    >>> [round(h.t, 3) for h in intersect_scene((0, 0, 0), (0, 0, 1))]
    [4.0, 6.0]
"""

import threading
from collections.abc import Sequence
from dataclasses import dataclass
from enum import IntEnum

import numpy as np
import taichi as ti
import taichi.math as tm

from fogtrace.geometry.plane import plane_root
from fogtrace.geometry.sphere import sphere_roots

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


class PrimitiveKind(IntEnum):
    """Primitive tables a hit can refer to."""

    SPHERE = 0
    PLANE = 1


@dataclass(frozen=True)
class RawHit:
    """A hit read back from the Taichi hit buffer.

    Attributes:
        t: Ray parameter.
        kind: Which primitive table ``index`` refers to.
        index: Index of the primitive within its table.
        enter: True if the ray enters the primitive at this hit.
    """

    t: float
    kind: PrimitiveKind
    index: int
    enter: bool


# Maximum number of primitives supported in the scene
MAX_SPHERES = 256
MAX_PLANES = 64
MAX_HITS = 2 * MAX_SPHERES + MAX_PLANES

# Hits closer than this to the ray origin are discarded (self-intersection)
T_MIN = 1e-3

# Primitive kinds as plain ints for use inside kernels
_KIND_SPHERE = int(PrimitiveKind.SPHERE)
_KIND_PLANE = int(PrimitiveKind.PLANE)

# Sphere storage
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())

# Plane storage
plane_points = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PLANES)
plane_normals = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PLANES)
num_planes = ti.field(dtype=ti.i32, shape=())

# Hit buffer filled by one kernel launch
hit_t = ti.field(dtype=ti.f32, shape=MAX_HITS)
hit_kind = ti.field(dtype=ti.i32, shape=MAX_HITS)
hit_index = ti.field(dtype=ti.i32, shape=MAX_HITS)
hit_enter = ti.field(dtype=ti.i32, shape=MAX_HITS)
num_hits = ti.field(dtype=ti.i32, shape=())

# The hit buffer is shared, so launches and read-backs are serialized
_hit_buffer_lock = threading.Lock()

# Whoever last claimed the primitive storage; None after a plain clear
_storage_owner: object | None = None


def clear_scene() -> None:
    """Clear all primitives from the scene.

    Resets the primitive counts to zero and releases the storage from its
    owner. The field data is overwritten when new primitives are added.
    """
    global _storage_owner
    _storage_owner = None
    num_spheres[None] = 0
    num_planes[None] = 0
    num_hits[None] = 0


def claim_storage(owner: object) -> None:
    """Clear the primitive storage and hand it to ``owner``.

    There is one primitive store per process, so only the most recent
    claimant may add primitives or map hit indices back to its own objects.
    """
    global _storage_owner
    clear_scene()
    _storage_owner = owner


def get_storage_owner() -> object | None:
    """Return the current owner of the primitive storage, if any."""
    return _storage_owner


def add_sphere(center: Sequence[float], radius: float) -> int:
    """Add a sphere to the primitive storage.

    Returns:
        The index of the added sphere.

    Raises:
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = [float(center[0]), float(center[1]), float(center[2])]
    sphere_radii[idx] = float(radius)
    num_spheres[None] = idx + 1
    return idx


def add_plane(point: Sequence[float], normal: Sequence[float]) -> int:
    """Add an infinite plane to the primitive storage.

    Args:
        point: Any point on the plane.
        normal: Unit plane normal.

    Returns:
        The index of the added plane.

    Raises:
        RuntimeError: If the maximum number of planes is exceeded.
    """
    idx = num_planes[None]
    if idx >= MAX_PLANES:
        raise RuntimeError(f"Maximum number of planes ({MAX_PLANES}) exceeded")
    plane_points[idx] = [float(point[0]), float(point[1]), float(point[2])]
    plane_normals[idx] = [float(normal[0]), float(normal[1]), float(normal[2])]
    num_planes[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    return int(num_spheres[None])


def get_plane_count() -> int:
    return int(num_planes[None])


@ti.func
def _push_hit(t: ti.f32, kind: ti.i32, index: ti.i32, enter: ti.i32):
    slot = ti.atomic_add(num_hits[None], 1)
    if slot < MAX_HITS:
        hit_t[slot] = t
        hit_kind[slot] = kind
        hit_index[slot] = index
        hit_enter[slot] = enter


@ti.kernel
def _intersect_all(origin: vec3, direction: vec3, t_min: ti.f32):
    """Record every primitive hit with t > t_min into the hit buffer."""
    num_hits[None] = 0

    for s in range(num_spheres[None]):
        roots = sphere_roots(origin, direction, sphere_centers[s], sphere_radii[s])
        if roots.hit == 1:
            if roots.t0 > t_min:
                _push_hit(roots.t0, _KIND_SPHERE, s, 1)
            if roots.t1 > t_min:
                _push_hit(roots.t1, _KIND_SPHERE, s, 0)

    for p in range(num_planes[None]):
        root = plane_root(origin, direction, plane_points[p], plane_normals[p])
        if root.hit == 1 and root.t > t_min:
            _push_hit(root.t, _KIND_PLANE, p, root.enter)


def intersect_scene(
    origin: Sequence[float],
    direction: Sequence[float],
    t_min: float = T_MIN,
) -> list[RawHit]:
    """Intersect a ray with all stored primitives.

    Args:
        origin: Ray origin.
        direction: Ray direction (need not be normalized).
        t_min: Hits at or below this ray parameter are discarded.

    Returns:
        All hits sorted by ascending ray parameter.
    """
    with _hit_buffer_lock:
        _intersect_all(
            vec3(float(origin[0]), float(origin[1]), float(origin[2])),
            vec3(float(direction[0]), float(direction[1]), float(direction[2])),
            t_min,
        )
        count = min(int(num_hits[None]), MAX_HITS)
        if count == 0:
            return []
        ts = hit_t.to_numpy()[:count]
        kinds = hit_kind.to_numpy()[:count]
        indices = hit_index.to_numpy()[:count]
        enters = hit_enter.to_numpy()[:count]

    order = np.argsort(ts, kind="stable")
    return [
        RawHit(
            t=float(ts[k]),
            kind=PrimitiveKind(int(kinds[k])),
            index=int(indices[k]),
            enter=bool(enters[k]),
        )
        for k in order
    ]
