"""Materials module: surface and fog descriptions, reflectance models.

Components:
    material: MaterialKind tag, PhongMaterial and UniformFog value types
    phong: Phong reflectance model and ReflectionComponent flags
"""

from .material import Material, MaterialKind, PhongMaterial, UniformFog
from .phong import PhongModel, ReflectionComponent

__all__ = [
    "Material",
    "MaterialKind",
    "PhongMaterial",
    "UniformFog",
    "PhongModel",
    "ReflectionComponent",
]
