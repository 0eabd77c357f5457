"""Material descriptions: Phong surfaces and uniform fog.

Materials are plain mutable value objects. The shader clones a material
before overwriting its color with the resolved surface color, so scene
materials are never modified while rendering.

Every material carries a ``kind`` tag; the shader recognizes fog through that
tag (``MaterialKind.FOG``).

Example:
    >>> glass = PhongMaterial(color=(0.9, 0.9, 1.0), ks=0.2, kt=0.8, n=1.5)
    >>> fog = UniformFog(color=(0.5, 0.5, 0.5), kt=0.6)
    >>> fog.kind is MaterialKind.FOG
    True
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import IntEnum

import numpy as np
import numpy.typing as npt

Color = npt.NDArray[np.float64]


class MaterialKind(IntEnum):
    """Structural tag distinguishing solid surfaces from fog volumes."""

    SOLID = 0
    FOG = 1


def _as_color(values: Sequence[float] | npt.ArrayLike) -> Color:
    return np.array(values, dtype=np.float64)


def _validate_kt(kt: float) -> None:
    if not 0.0 <= kt <= 1.0:
        raise ValueError(f"Transparency kt must be in [0, 1], got {kt}")


@dataclass(eq=False)
class PhongMaterial:
    """Phong surface material.

    Attributes:
        color: Base surface color (one value per spectral band).
        ka: Ambient coefficient.
        kd: Diffuse coefficient.
        ks: Specular coefficient (also the mirror reflection weight).
        h: Specular exponent (shininess).
        kt: Transparency coefficient in [0, 1].
        n: Absolute index of refraction (>= 1).
    """

    color: Color = field(default_factory=lambda: _as_color((1.0, 1.0, 1.0)))
    ka: float = 0.2
    kd: float = 0.6
    ks: float = 0.2
    h: float = 5.0
    kt: float = 0.0
    n: float = 1.5

    kind = MaterialKind.SOLID

    def __post_init__(self) -> None:
        self.color = _as_color(self.color)
        _validate_kt(self.kt)
        if self.n < 1.0:
            raise ValueError(f"Index of refraction must be >= 1.0, got {self.n}")
        if self.h < 0.0:
            raise ValueError(f"Specular exponent must be non-negative, got {self.h}")

    @property
    def cutoff(self) -> float:
        """Cosine of the critical angle for total internal reflection."""
        if self.n <= 1.0:
            return 0.0
        return math.sqrt(1.0 - 1.0 / (self.n * self.n))

    def clone(self) -> PhongMaterial:
        """Return an independent copy (the color array is copied too)."""
        return PhongMaterial(
            color=self.color.copy(),
            ka=self.ka,
            kd=self.kd,
            ks=self.ks,
            h=self.h,
            kt=self.kt,
            n=self.n,
        )


@dataclass(eq=False)
class UniformFog:
    """Uniform participating medium.

    Fog has no reflectance: it only tints and attenuates whatever is behind
    it. Its index of refraction is fixed at 0, meaning "not refractive".

    Attributes:
        color: The fog color.
        kt: Transparency per unit of distance, in [0, 1].
    """

    color: Color = field(default_factory=lambda: _as_color((0.5, 0.5, 0.5)))
    kt: float = 0.6

    kind = MaterialKind.FOG

    def __post_init__(self) -> None:
        self.color = _as_color(self.color)
        _validate_kt(self.kt)

    @property
    def n(self) -> float:
        return 0.0

    def clone(self) -> UniformFog:
        return UniformFog(color=self.color.copy(), kt=self.kt)


# Union of the material variants understood by the shader
Material = PhongMaterial | UniformFog
