"""Unit tests for the Python-side scene objects.

Tests cover:
- Attribute inheritance through the solid hierarchy
- Sphere and Plane completion (normals, texture coordinates)
- Checker texture coloring and hash contribution
- Light sources and background
- Lazy Intersection completion and IntersectionSequence queries
- Scene snapshot immutability
"""

import dataclasses

import numpy as np
import pytest


class TestAttributeInheritance:
    """Tests for SolidGroup attribute lookup."""

    def test_child_inherits_from_root(self):
        """Test that a solid without its own material uses the root's."""
        from fogtrace.materials.material import PhongMaterial
        from fogtrace.scene.solids import Attribute, SolidGroup, Sphere

        root = SolidGroup()
        material = PhongMaterial(color=(1.0, 0.7, 0.1))
        root.set_attribute(Attribute.MATERIAL, material)
        ball = root.add_child(Sphere((0, 0, 0), 1.0))

        assert ball.get_attribute(Attribute.MATERIAL) is material

    def test_own_attribute_overrides(self):
        """Test that a solid's own attribute hides the inherited one."""
        from fogtrace.materials.material import PhongMaterial, UniformFog
        from fogtrace.scene.solids import Attribute, SolidGroup, Sphere

        root = SolidGroup()
        root.set_attribute(Attribute.MATERIAL, PhongMaterial())
        ball = root.add_child(Sphere((0, 0, 0), 1.0))
        fog = UniformFog()
        ball.set_attribute(Attribute.MATERIAL, fog)

        assert ball.get_attribute(Attribute.MATERIAL) is fog

    def test_missing_attribute_is_none(self):
        """Test lookup of an attribute set nowhere."""
        from fogtrace.scene.solids import Attribute, Sphere

        assert Sphere((0, 0, 0), 1.0).get_attribute(Attribute.RECURSION) is None

    def test_add_texture_appends(self):
        """Test that textures accumulate in order."""
        from fogtrace.scene.solids import Attribute, CheckerTexture, Plane

        plane = Plane()
        first = CheckerTexture(1, 1, (1, 1, 1))
        second = CheckerTexture(2, 2, (0, 0, 0))
        plane.add_texture(first)
        plane.add_texture(second)
        assert plane.get_attribute(Attribute.TEXTURE) == [first, second]


class TestSolids:
    """Tests for Sphere and Plane."""

    def test_invalid_sphere_radius(self):
        """Test that non-positive radii are rejected."""
        from fogtrace.scene.solids import Sphere

        with pytest.raises(ValueError, match="radius"):
            Sphere((0, 0, 0), 0.0)

    def test_invalid_plane_normal(self):
        """Test that a zero normal is rejected."""
        from fogtrace.scene.solids import Plane

        with pytest.raises(ValueError, match="normal"):
            Plane((0, 0, 0), (0, 0, 0))

    def test_plane_normal_is_normalized(self):
        """Test that the stored plane normal has unit length."""
        from fogtrace.scene.solids import Plane

        plane = Plane((0, 0, 0), (0, 3, 0))
        np.testing.assert_allclose(plane.normal, [0, 1, 0])
        assert abs(np.dot(plane.tangent, plane.normal)) < 1e-12
        assert abs(np.dot(plane.bitangent, plane.normal)) < 1e-12

    def test_sphere_completion(self):
        """Test the outward unit normal of a sphere hit."""
        from fogtrace.scene.hit_record import Intersection
        from fogtrace.scene.solids import Sphere

        sphere = Sphere((0, 0, 5), 2.0)
        i = Intersection(3.0, sphere, (0, 0, 0), (0, 0, 1))
        i.complete()
        np.testing.assert_allclose(i.coord_world, [0, 0, 3])
        np.testing.assert_allclose(i.normal, [0, 0, -1])
        u, v = i.texture_coord
        assert 0.0 <= u <= 1.0
        assert 0.0 <= v <= 1.0


class TestCheckerTexture:
    """Tests for CheckerTexture."""

    def _hit(self, u, v):
        from fogtrace.scene.hit_record import Intersection
        from fogtrace.scene.solids import Plane

        i = Intersection(1.0, Plane(), (0, 1, 0), (0, -1, 0))
        i.surface_color = np.array([0.3, 0.0, 0.0])
        i.texture_coord = (u, v)
        return i

    def test_even_cell_keeps_color(self):
        """Test that even cells leave the surface color alone."""
        from fogtrace.scene.solids import CheckerTexture

        i = self._hit(0.1, 0.1)
        assert CheckerTexture(1.0, 1.0, (1, 1, 1)).apply(i) == 0
        np.testing.assert_allclose(i.surface_color, [0.3, 0.0, 0.0])

    def test_odd_cell_takes_checker_color(self):
        """Test that odd cells are recolored and hash to 1."""
        from fogtrace.scene.solids import CheckerTexture

        i = self._hit(1.5, 0.1)
        assert CheckerTexture(1.0, 1.0, (1, 1, 1)).apply(i) == 1
        np.testing.assert_allclose(i.surface_color, [1, 1, 1])

    def test_negative_coordinates(self):
        """Test that cells continue across zero."""
        from fogtrace.scene.solids import CheckerTexture

        i = self._hit(-0.5, 0.5)
        assert CheckerTexture(1.0, 1.0, (1, 1, 1)).apply(i) == 1


class TestLightsAndBackground:
    """Tests for light sources and the background."""

    def _completed_hit(self):
        from fogtrace.scene.hit_record import Intersection
        from fogtrace.scene.solids import Plane

        i = Intersection(1.0, Plane(), (0, 1, 0), (0, -1, 0))
        i.complete()
        return i

    def test_ambient_light(self):
        """Test that ambient light has a zero direction."""
        from fogtrace.scene.lights import AmbientLightSource

        intensity, direction = AmbientLightSource(0.8).get_intensity(self._completed_hit())
        np.testing.assert_allclose(intensity, [0.8, 0.8, 0.8])
        assert not np.any(direction)

    def test_point_light_direction_is_unnormalized(self):
        """Test that the light sits at parameter 1 along the direction."""
        from fogtrace.scene.lights import PointLightSource

        i = self._completed_hit()
        intensity, direction = PointLightSource((0, 4, 0), 1.2).get_intensity(i)
        np.testing.assert_allclose(intensity, [1.2, 1.2, 1.2])
        np.testing.assert_allclose(i.coord_world + direction, [0, 4, 0])

    def test_point_light_at_hit_point(self):
        """Test that a light exactly at the hit point contributes nothing."""
        from fogtrace.scene.lights import PointLightSource

        intensity, _ = PointLightSource((0, 0, 0)).get_intensity(self._completed_hit())
        assert intensity is None

    def test_background_color_and_hash(self):
        """Test that the background writes its color with a stable hash."""
        from fogtrace.scene.background import DefaultBackground

        background = DefaultBackground((0.0, 0.01, 0.03))
        color = np.ones(3)
        h1 = background.get_color(np.array([0, 0, 1.0]), color)
        h2 = background.get_color(np.array([1.0, 0, 0]), np.zeros(3))
        np.testing.assert_allclose(color, [0.0, 0.01, 0.03])
        assert h1 == h2


class TestIntersection:
    """Tests for Intersection and IntersectionSequence."""

    def test_lazy_completion(self):
        """Test that details are resolved only on complete()."""
        from fogtrace.materials.material import PhongMaterial
        from fogtrace.scene.hit_record import Intersection
        from fogtrace.scene.solids import Attribute, Sphere

        sphere = Sphere((0, 0, 5), 1.0)
        sphere.set_attribute(Attribute.MATERIAL, PhongMaterial(color=(0.1, 0.2, 0.3)))
        i = Intersection(4.0, sphere, (0, 0, 0), (0, 0, 1))
        assert i.coord_world is None
        assert i.material is None

        i.complete()
        assert i.completed
        np.testing.assert_allclose(i.surface_color, [0.1, 0.2, 0.3])

    def test_color_attribute_overrides_material_color(self):
        """Test that the COLOR attribute sets the surface color."""
        from fogtrace.materials.material import PhongMaterial
        from fogtrace.scene.hit_record import Intersection
        from fogtrace.scene.solids import Attribute, Plane

        plane = Plane()
        plane.set_attribute(Attribute.MATERIAL, PhongMaterial(color=(1, 1, 1)))
        plane.set_attribute(Attribute.COLOR, (0.3, 0.0, 0.0))
        i = Intersection(1.0, plane, (0, 1, 0), (0, -1, 0))
        i.complete()
        np.testing.assert_allclose(i.surface_color, [0.3, 0.0, 0.0])

    def test_apply_textures_collects_hashes(self):
        """Test that texture hash contributions are returned in order."""
        from fogtrace.scene.hit_record import Intersection
        from fogtrace.scene.solids import CheckerTexture, Plane

        plane = Plane()
        plane.add_texture(CheckerTexture(1.0, 1.0, (1, 1, 1)))
        plane.add_texture(CheckerTexture(1.0, 1.0, (0, 0, 0)))
        # Hit at (1.5, 0, 0.5)
        i = Intersection(1.0, plane, (1.5, 1.0, 0.5), (0, -1, 0))
        contributions = i.apply_textures()
        assert len(contributions) == 2
        assert contributions[0] == contributions[1]
        assert i.texture_applied

    def test_is_far(self):
        """Test the shadow-ray distance check against parameter 1."""
        from fogtrace.scene.hit_record import Intersection
        from fogtrace.scene.solids import Plane

        direction = np.array([0.0, 4.0, 0.0])
        assert not Intersection(0.5, Plane(), (0, 0, 0), direction).is_far(1.0, direction)
        assert Intersection(1.0, Plane(), (0, 0, 0), direction).is_far(1.0, direction)
        assert Intersection(1.2, Plane(), (0, 0, 0), direction).is_far(1.0, direction)

    def test_sequence_sorted_and_navigable(self):
        """Test ordering, first real hit and next-hit queries."""
        from fogtrace.scene.hit_record import Intersection, IntersectionSequence
        from fogtrace.scene.solids import Plane

        solid = Plane()
        direction = np.array([0.0, 0.0, 1.0])
        seq = IntersectionSequence(
            Intersection(t, solid, (0, 0, 0), direction) for t in (3.0, 1e-9, 1.0)
        )

        assert [i.t for i in seq] == [1e-9, 1.0, 3.0]
        # The near-zero hit is the surface the ray starts on
        assert seq.first_index(direction) == 1
        assert seq.first(direction).t == 1.0
        assert seq.has_next(1)
        assert seq.next(1).t == 3.0
        assert seq.next(2) is None

    def test_empty_sequence(self):
        """Test queries on a ray without hits."""
        from fogtrace.scene.hit_record import IntersectionSequence

        seq = IntersectionSequence()
        assert not seq
        assert seq.first(np.array([0.0, 0.0, 1.0])) is None


class TestSceneSnapshot:
    """Tests for the immutable Scene."""

    def test_sources_frozen(self):
        """Test that the light list is copied into a tuple."""
        from fogtrace.scene.background import DefaultBackground
        from fogtrace.scene.lights import AmbientLightSource
        from fogtrace.scene.snapshot import Scene

        lights = [AmbientLightSource()]
        scene = Scene(intersectable=None, background=DefaultBackground(), sources=lights)
        lights.append(AmbientLightSource())

        assert isinstance(scene.sources, tuple)
        assert len(scene.sources) == 1
        with pytest.raises(dataclasses.FrozenInstanceError):
            scene.background = None
