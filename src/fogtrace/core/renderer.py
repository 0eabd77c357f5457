"""Frame host: shades a grid of caller-supplied rays into a render target.

The render target is a set of Taichi fields preallocated to the maximum
supported size: the linear color of every pixel, its structural hash and a
flag marking pixels an adaptive supersampler should refine. Ray generation
(camera model, sub-pixel pattern) belongs to the caller, which passes a
``ray_for_pixel(x, y) -> (origin, direction)`` function.

Pixels whose hash differs from any 4-neighbour lie on an edge: a different
solid, texture cell, set of visible lights or secondary-ray pattern. Only
those need more samples.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from fogtrace.core.renderer import get_image_numpy, render_frame, setup_render_target
    >>> setup_render_target(160, 120)
    >>> edges = render_frame(tracer, ray_for_pixel)
    >>> image = get_image_numpy()
"""

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
import taichi as ti

if TYPE_CHECKING:
    from fogtrace.core.shader import RayTracer

logger = logging.getLogger(__name__)

RayGenerator = Callable[[int, int], tuple[npt.ArrayLike, npt.ArrayLike]]

# =============================================================================
# Render Target
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid reallocation)
MAX_IMAGE_WIDTH = 1024
MAX_IMAGE_HEIGHT = 1024

# Image dimensions (actual active size)
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Linear color buffer, indexed [x, y] with y = 0 at the top row
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Per-pixel structural hash
_hash_buffer = ti.field(dtype=ti.i64, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# 1 where the pixel's hash differs from a 4-neighbour
_edge_buffer = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Set the active image size and clear the buffers.

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the render target buffers to zero."""
    _color_buffer.fill(0.0)
    _hash_buffer.fill(0)
    _edge_buffer.fill(0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


@ti.func
def _is_finite(x: ti.f32) -> ti.i32:
    return not (ti.math.isnan(x) or ti.math.isinf(x))


@ti.kernel
def _store_frame(
    colors: ti.types.ndarray(dtype=ti.f32, ndim=3),
    hashes: ti.types.ndarray(dtype=ti.i64, ndim=2),
    width: ti.i32,
    height: ti.i32,
):
    """Copy a shaded frame (indexed [y, x]) into the render target."""
    for i, j in ti.ndrange(width, height):
        color = ti.Vector([colors[j, i, 0], colors[j, i, 1], colors[j, i, 2]])
        # NaN/Inf from malformed scene data is stored as zero
        for c in ti.static(range(3)):
            if not _is_finite(color[c]):
                color[c] = 0.0
        _color_buffer[i, j] = color
        _hash_buffer[i, j] = hashes[j, i]


@ti.kernel
def _mark_edges(width: ti.i32, height: ti.i32):
    """Flag pixels whose hash differs from a 4-neighbour."""
    for i, j in ti.ndrange(width, height):
        h = _hash_buffer[i, j]
        edge = 0
        # Nested checks keep neighbour reads inside the active image
        if i > 0:
            if _hash_buffer[i - 1, j] != h:
                edge = 1
        if i < width - 1:
            if _hash_buffer[i + 1, j] != h:
                edge = 1
        if j > 0:
            if _hash_buffer[i, j - 1] != h:
                edge = 1
        if j < height - 1:
            if _hash_buffer[i, j + 1] != h:
                edge = 1
        _edge_buffer[i, j] = edge


# =============================================================================
# Frame Loop
# =============================================================================


def render_frame(tracer: "RayTracer", ray_for_pixel: RayGenerator) -> int:
    """Shade one ray per pixel into the render target.

    Args:
        tracer: Shader bound to a scene snapshot.
        ray_for_pixel: Returns ``(origin, direction)`` for pixel (x, y),
            with y = 0 at the top row.

    Returns:
        The number of edge pixels (candidates for supersampling).

    Raises:
        RuntimeError: If the render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    colors = np.zeros((height, width, 3), dtype=np.float32)
    hashes = np.zeros((height, width), dtype=np.int64)

    logger.info("Rendering %dx%d", width, height)

    for y in range(height):
        for x in range(width):
            origin, direction = ray_for_pixel(x, y)
            color, signature = tracer.trace(origin, direction)
            colors[y, x] = color[:3]
            hashes[y, x] = signature

    _store_frame(colors, hashes, width, height)
    _mark_edges(width, height)

    edge_count = int(get_edge_mask_numpy().sum())
    primary, total = tracer.statistics.snapshot()
    logger.info(
        "Rendered %dx%d: %d edge pixels, %d primary rays, %d rays total",
        width,
        height,
        edge_count,
        primary,
        total,
    )
    return edge_count


# =============================================================================
# Read-back
# =============================================================================


def get_image_numpy() -> npt.NDArray[np.float32]:
    """Get the linear image as an array of shape (height, width, 3).

    Raises:
        RuntimeError: If the render target has not been set up.
    """
    _check_render_target_initialized()
    width, height = get_image_dimensions()
    image = _color_buffer.to_numpy()[:width, :height, :]
    # Transpose from (width, height, 3) to (height, width, 3)
    return np.ascontiguousarray(np.transpose(image, (1, 0, 2)), dtype=np.float32)


def get_hash_numpy() -> npt.NDArray[np.int64]:
    """Get the per-pixel hashes as an array of shape (height, width)."""
    _check_render_target_initialized()
    width, height = get_image_dimensions()
    return np.ascontiguousarray(_hash_buffer.to_numpy()[:width, :height].T)


def get_edge_mask_numpy() -> npt.NDArray[np.bool_]:
    """Get the edge flags as a boolean array of shape (height, width)."""
    _check_render_target_initialized()
    width, height = get_image_dimensions()
    return np.ascontiguousarray(_edge_buffer.to_numpy()[:width, :height].T.astype(bool))
