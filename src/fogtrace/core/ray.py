"""Vector utilities for the Python-side shader.

The shader runs in Python scope because it dispatches through polymorphic
scene objects, so its vector arithmetic uses float64 NumPy arrays of shape
(3,). The helpers follow the conventions of the shader: the *viewing
vector* points from the surface toward the viewer (the reversed ray
direction), and a zero vector is used to signal "no direction".

Example:
    >>> import numpy as np
    >>> normal = as_vector((0.0, 1.0, 0.0))
    >>> view = normalize(as_vector((1.0, 1.0, 0.0)))
    >>> r = specular_reflection(normal, view)  # (-0.707, 0.707, 0)
"""

import numpy as np
import numpy.typing as npt

# Python-side vector type (float64 NumPy array of shape (3,))
Vector = npt.NDArray[np.float64]

# Distance below which two points are considered coincident
RAY_EPSILON = 1.0e-5


def as_vector(values: npt.ArrayLike) -> Vector:
    """Convert a 3-sequence into a float64 NumPy vector (always a copy)."""
    return np.array(values, dtype=np.float64)


def zero_vector() -> Vector:
    """Return a new zero vector."""
    return np.zeros(3, dtype=np.float64)


def is_zero(v: Vector) -> bool:
    """Check whether all components of v are exactly zero."""
    return not np.any(v)


def length(v: Vector) -> float:
    """Euclidean length of a vector."""
    return float(np.linalg.norm(v))


def normalize(v: Vector) -> Vector:
    """Return v scaled to unit length.

    A zero vector is returned unchanged rather than producing NaNs.
    """
    norm = np.linalg.norm(v)
    if norm == 0.0:
        return v.copy()
    return v / norm


def distance(a: Vector, b: Vector) -> float:
    """Euclidean distance between two points."""
    return float(np.linalg.norm(a - b))


def specular_reflection(normal: Vector, view: Vector) -> Vector:
    """Mirror the viewing vector about the normal.

    Both vectors point away from the surface. Works for either side of the
    surface because the sign of ``dot(normal, view)`` carries through.

    Args:
        normal: Unit surface normal.
        view: Unit viewing vector (toward the viewer).

    Returns:
        The reflected direction ``2 (n . v) n - v``.
    """
    k = float(np.dot(normal, view))
    return (k + k) * normal - view


def specular_refraction(normal: Vector, n: float, view: Vector) -> Vector:
    """Compute the refracted direction using Snell's law.

    The viewing vector points away from the surface. When the viewer is on
    the side the normal points to, the ray enters the material and the
    relative index is ``1/n``; otherwise the ray leaves it, the normal is
    flipped and the relative index is ``n``.

    Args:
        normal: Surface normal (pointing outward from the solid).
        n: Absolute index of refraction of the solid.
        view: Viewing vector (toward the viewer).

    Returns:
        The unit refracted direction, or a zero vector on total internal
        reflection (or when ``n`` is not a valid index).
    """
    if n <= 0.0:
        return zero_vector()

    normal = normalize(normal)
    view = normalize(view)
    d = float(np.dot(normal, view))

    if d < 0.0:
        # Leaving the material
        d = -d
        normal = -normal
    else:
        n = 1.0 / n

    cos2 = 1.0 - n * n * (1.0 - d * d)
    if cos2 <= 0.0:
        return zero_vector()

    d = n * d - np.sqrt(cos2)
    return normal * d - view * n
