"""Recursive Whitted-style ray tracer with uniform participating fog.

This package implements a recursive shading core that composites light
attenuated by uniform fog volumes while supporting reflection, refraction,
shadows, multiple light sources and procedural recursion overrides.

Subpackages:
    core: Vector utilities, fog compositor, recursive shader and frame renderer
    geometry: Taichi ray-primitive intersection functions
    materials: Phong and fog materials, Phong reflectance model
    scene: Intersections, solids, lights, background and scene management
"""

__version__ = "0.1.0"
