"""Pytest configuration for fogtrace tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import numpy as np
import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear Taichi-side scene and render target data around each test."""
    # Import here so the fields are created after ti.init()
    from fogtrace.core.renderer import clear_render_target
    from fogtrace.scene.intersection import clear_scene

    clear_scene()
    clear_render_target()
    yield
    clear_scene()
    clear_render_target()


# =============================================================================
# Python-side scene doubles for shader tests
# =============================================================================


class StubSolid:
    """Solid with a fixed normal and an attribute dict (no parent)."""

    def __init__(self, name, normal=(0.0, 0.0, -1.0), **attributes):
        from fogtrace.scene.solids import Attribute

        self.name = name
        self.normal = np.array(normal, dtype=np.float64)
        self.attributes = {Attribute(k): v for k, v in attributes.items()}

    def get_attribute(self, name):
        return self.attributes.get(name)

    def complete_intersection(self, intersection):
        intersection.normal = self.normal.copy()
        intersection.texture_coord = (0.0, 0.0)

    def __repr__(self):
        return f"StubSolid({self.name})"


class StubIntersectable:
    """Root intersectable answering from a callback.

    ``hits_for(origin, direction, call_index)`` returns a list of
    ``(t, solid)`` pairs; every call is recorded.
    """

    def __init__(self, hits_for):
        self.hits_for = hits_for
        self.calls = []

    def intersect(self, origin, direction):
        from fogtrace.scene.hit_record import Intersection, IntersectionSequence

        index = len(self.calls)
        self.calls.append((np.array(origin, dtype=np.float64), np.array(direction, dtype=np.float64)))
        return IntersectionSequence(
            Intersection(t, solid, origin, direction) for t, solid in self.hits_for(origin, direction, index)
        )


@pytest.fixture
def stub_solid():
    return StubSolid


@pytest.fixture
def stub_intersectable():
    return StubIntersectable
