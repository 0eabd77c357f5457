"""Unit tests for the Taichi intersection functions.

Tests cover:
- Both sphere roots from outside, from inside and on a miss
- Non-normalized ray directions
- Plane roots, crossing direction and parallel rays
"""

import pytest
import taichi as ti


def _run_sphere(origin, direction, center, radius):
    from fogtrace.geometry.sphere import sphere_roots, vec3

    hit = ti.field(dtype=ti.i32, shape=())
    t0 = ti.field(dtype=ti.f32, shape=())
    t1 = ti.field(dtype=ti.f32, shape=())

    @ti.kernel
    def test_kernel(o: vec3, d: vec3, c: vec3, r: ti.f32):
        roots = sphere_roots(o, d, c, r)
        hit[None] = roots.hit
        t0[None] = roots.t0
        t1[None] = roots.t1

    test_kernel(vec3(*origin), vec3(*direction), vec3(*center), radius)
    return hit[None], t0[None], t1[None]


def _run_plane(origin, direction, point, normal):
    from fogtrace.geometry.plane import plane_root, vec3

    hit = ti.field(dtype=ti.i32, shape=())
    t = ti.field(dtype=ti.f32, shape=())
    enter = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel(o: vec3, d: vec3, p: vec3, n: vec3):
        root = plane_root(o, d, p, n)
        hit[None] = root.hit
        t[None] = root.t
        enter[None] = root.enter

    test_kernel(vec3(*origin), vec3(*direction), vec3(*point), vec3(*normal))
    return hit[None], t[None], enter[None]


class TestSphereRoots:
    """Tests for sphere_roots."""

    def test_both_roots_from_outside(self):
        """Test entry and exit of a sphere in front of the origin."""
        hit, t0, t1 = _run_sphere((0, 0, 0), (0, 0, 1), (0, 0, 5), 1.0)
        assert hit == 1
        assert t0 == pytest.approx(4.0, abs=1e-5)
        assert t1 == pytest.approx(6.0, abs=1e-5)

    def test_origin_inside(self):
        """Test that the entry root is behind an origin inside the sphere."""
        hit, t0, t1 = _run_sphere((0, 0, 0), (0, 0, 1), (0, 0, 0), 2.0)
        assert hit == 1
        assert t0 == pytest.approx(-2.0, abs=1e-5)
        assert t1 == pytest.approx(2.0, abs=1e-5)

    def test_miss(self):
        """Test a ray passing beside the sphere."""
        hit, _, _ = _run_sphere((0, 0, 0), (0, 0, 1), (3, 0, 5), 1.0)
        assert hit == 0

    def test_unnormalized_direction(self):
        """Test that roots are in units of the given direction."""
        hit, t0, t1 = _run_sphere((0, 0, 0), (0, 0, 2), (0, 0, 5), 1.0)
        assert hit == 1
        assert t0 == pytest.approx(2.0, abs=1e-5)
        assert t1 == pytest.approx(3.0, abs=1e-5)

    def test_far_sphere_precision(self):
        """Test the robust quadratic on a small, distant sphere."""
        hit, t0, t1 = _run_sphere((0, 0, 0), (0, 0, 1), (0, 0, 1000), 0.5)
        assert hit == 1
        assert t0 == pytest.approx(999.5, rel=1e-5)
        assert t1 == pytest.approx(1000.5, rel=1e-5)


class TestPlaneRoot:
    """Tests for plane_root."""

    def test_hit_from_front(self):
        """Test a ray crossing the plane against its normal."""
        hit, t, enter = _run_plane((0, 0, 0), (0, -1, 0), (0, -1, 0), (0, 1, 0))
        assert hit == 1
        assert t == pytest.approx(1.0, abs=1e-6)
        assert enter == 1

    def test_hit_from_behind(self):
        """Test a ray crossing along the normal."""
        hit, t, enter = _run_plane((0, -2, 0), (0, 1, 0), (0, -1, 0), (0, 1, 0))
        assert hit == 1
        assert t == pytest.approx(1.0, abs=1e-6)
        assert enter == 0

    def test_parallel_ray_misses(self):
        """Test that a ray parallel to the plane never hits it."""
        hit, _, _ = _run_plane((0, 0, 0), (1, 0, 0), (0, -1, 0), (0, 1, 0))
        assert hit == 0

    def test_plane_behind_origin(self):
        """Test that roots behind the origin come back negative."""
        hit, t, _ = _run_plane((0, 0, 0), (0, 1, 0), (0, -1, 0), (0, 1, 0))
        assert hit == 1
        assert t == pytest.approx(-1.0, abs=1e-6)
