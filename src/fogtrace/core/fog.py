"""Uniform fog compositing.

Light passing through a uniform fog volume is attenuated exponentially with
the distance travelled inside it (the optical depth) and replaced by the fog's
own color:

    alpha   = 1 - Kt ** optical_depth
    blended = behind * (1 - alpha) + fog_color * alpha

A transparency ``Kt`` of 0.6 gives alpha 0.4 after one unit of fog, 0.64
after two units and ~0.92 after five. Doubling the path length squares the
transmittance.

Example:
    >>> import numpy as np
    >>> behind = np.array([1.0, 0.0, 0.0])
    >>> fog = np.array([0.5, 0.5, 0.5])
    >>> composite_fog(behind, fog, optical_depth=1.0, kt=0.6)
    array([0.8, 0.2, 0.2])
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import numpy.typing as npt

Color = npt.NDArray[np.float64]


def fog_alpha(kt: float, optical_depth: float) -> float:
    """Opacity of a fog span.

    Args:
        kt: Fog transparency per unit length, in [0, 1].
        optical_depth: Distance travelled through the fog (>= 0).

    Returns:
        The fog opacity in [0, 1]; 0 means no fog, 1 means pure fog color.
    """
    return 1.0 - kt**optical_depth


def blend_fog(color: Color, fog_color: Color, alpha: float) -> None:
    """Blend fog into a color buffer in place.

    Only the bands present in both the buffer and the fog color are blended.
    """
    bands = min(len(color), len(fog_color))
    color[:bands] = color[:bands] * (1.0 - alpha) + fog_color[:bands] * alpha


def composite_fog(
    behind_color: npt.ArrayLike,
    fog_color: npt.ArrayLike,
    optical_depth: float,
    kt: float,
) -> Color:
    """Composite a color seen through a span of uniform fog.

    Pure function: the inputs are not modified.

    Args:
        behind_color: Color of whatever lies behind the fog span.
        fog_color: The fog's own color.
        optical_depth: Distance travelled through the fog.
        kt: Fog transparency coefficient.

    Returns:
        The blended color. ``optical_depth == 0`` returns ``behind_color``.
    """
    result = np.array(behind_color, dtype=np.float64)
    blend_fog(result, np.asarray(fog_color, dtype=np.float64), fog_alpha(kt, optical_depth))
    return result


@dataclass(frozen=True)
class FogContribution:
    """A resolved fog span waiting to be composited over a shaded color.

    Attributes:
        color: The fog color.
        alpha: The fog opacity over the resolved span.
    """

    color: Color
    alpha: float

    @classmethod
    def from_span(cls, fog_color: npt.ArrayLike, kt: float, optical_depth: float) -> FogContribution:
        """Create a contribution from fog parameters and the span length."""
        return cls(
            color=np.array(fog_color, dtype=np.float64),
            alpha=fog_alpha(kt, optical_depth),
        )

    def apply(self, color: Color) -> None:
        """Composite this fog over the color buffer in place."""
        blend_fog(color, self.color, self.alpha)
