"""Unit tests for uniform fog compositing.

Tests cover:
- Opacity as a function of transparency and optical depth
- Identity at zero depth, convergence to the fog color
- In-place blending and the deferred FogContribution
"""

import numpy as np
import pytest


class TestFogAlpha:
    """Tests for fog_alpha."""

    def test_one_unit(self):
        """Test that Kt = 0.6 over one unit gives alpha 0.4."""
        from fogtrace.core.fog import fog_alpha

        assert fog_alpha(0.6, 1.0) == pytest.approx(0.4)

    def test_five_units(self):
        """Test that Kt = 0.6 over five units gives alpha ~0.92224."""
        from fogtrace.core.fog import fog_alpha

        assert fog_alpha(0.6, 5.0) == pytest.approx(1.0 - 0.6**5)
        assert fog_alpha(0.6, 5.0) == pytest.approx(0.92224, abs=1e-5)

    def test_zero_depth(self):
        """Test that a zero-length span is fully transparent."""
        from fogtrace.core.fog import fog_alpha

        assert fog_alpha(0.3, 0.0) == 0.0

    def test_opaque_and_clear_fog(self):
        """Test the Kt extremes."""
        from fogtrace.core.fog import fog_alpha

        assert fog_alpha(0.0, 2.0) == 1.0
        assert fog_alpha(1.0, 2.0) == 0.0

    def test_doubling_depth_squares_transmittance(self):
        """Test the exponential attenuation law."""
        from fogtrace.core.fog import fog_alpha

        t1 = 1.0 - fog_alpha(0.7, 1.5)
        t2 = 1.0 - fog_alpha(0.7, 3.0)
        assert t2 == pytest.approx(t1 * t1)


class TestCompositeFog:
    """Tests for composite_fog and blend_fog."""

    def test_zero_depth_is_identity(self):
        """Test that no fog leaves the color unchanged."""
        from fogtrace.core.fog import composite_fog

        behind = np.array([0.2, 0.4, 0.6])
        np.testing.assert_allclose(composite_fog(behind, [1.0, 1.0, 1.0], 0.0, 0.5), behind)

    def test_one_unit_blend(self):
        """Test the blend of red seen through one unit of grey fog."""
        from fogtrace.core.fog import composite_fog

        result = composite_fog([1.0, 0.0, 0.0], [0.5, 0.5, 0.5], 1.0, 0.6)
        np.testing.assert_allclose(result, [0.8, 0.2, 0.2])

    def test_inputs_not_modified(self):
        """Test that composite_fog is pure."""
        from fogtrace.core.fog import composite_fog

        behind = np.array([1.0, 0.0, 0.0])
        fog = np.array([0.5, 0.5, 0.5])
        composite_fog(behind, fog, 2.0, 0.6)
        np.testing.assert_array_equal(behind, [1.0, 0.0, 0.0])
        np.testing.assert_array_equal(fog, [0.5, 0.5, 0.5])

    def test_deep_fog_converges_to_fog_color(self):
        """Test that a very long span shows only the fog."""
        from fogtrace.core.fog import composite_fog

        result = composite_fog([1.0, 0.0, 0.0], [0.1, 0.2, 0.3], 200.0, 0.5)
        np.testing.assert_allclose(result, [0.1, 0.2, 0.3], atol=1e-12)

    def test_blend_in_place(self):
        """Test in-place blending."""
        from fogtrace.core.fog import blend_fog

        color = np.array([0.0, 0.0, 0.0])
        blend_fog(color, np.array([1.0, 1.0, 1.0]), 0.25)
        np.testing.assert_allclose(color, [0.25, 0.25, 0.25])


class TestFogContribution:
    """Tests for the deferred fog contribution."""

    def test_from_span_and_apply(self):
        """Test that a stored span composites like composite_fog."""
        from fogtrace.core.fog import FogContribution, composite_fog

        span = FogContribution.from_span([0.5, 0.5, 0.5], 0.6, 2.0)
        assert span.alpha == pytest.approx(0.64)

        color = np.array([1.0, 0.5, 0.0])
        expected = composite_fog(color, [0.5, 0.5, 0.5], 2.0, 0.6)
        span.apply(color)
        np.testing.assert_allclose(color, expected)
