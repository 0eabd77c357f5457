#!/usr/bin/env python3
"""Render the "two spheres and fog" scene into the render target.

This script plays the role of the rendering host: it builds the demo scene,
generates one primary ray per pixel with a simple pinhole model, shades the
frame and reports how many pixels an adaptive supersampler would refine.

Usage:
    python -m examples.render_fog_scene [options]

Options:
    --width WIDTH       Image width in pixels (default: 160)
    --height HEIGHT     Image height in pixels (default: 120)
    --param PARAM       Fog parameters, e.g. "r=0.5 g=0.5 b=0.5 t=0.6"
    --max-level LEVEL   Maximum recursion depth (default: 12)
    --no-shadows        Disable shadow rays
    --no-reflections    Disable reflected rays
    --no-refractions    Disable refracted rays
    --verbose           Log renderer progress
    --quiet             Suppress the summary

Example:
    python -m examples.render_fog_scene --width 80 --height 60 --param "t=0.4"
"""

from __future__ import annotations

import argparse
import logging
import math
import sys
import time

import numpy as np
import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the two-spheres-and-fog scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--width", type=int, default=160, help="Image width in pixels (default: 160)")
    parser.add_argument("--height", type=int, default=120, help="Image height in pixels (default: 120)")
    parser.add_argument("--param", type=str, default="", help="Fog parameters (r, g, b, t)")
    parser.add_argument("--max-level", type=int, default=12, help="Maximum recursion depth (default: 12)")
    parser.add_argument("--no-shadows", action="store_true", help="Disable shadow rays")
    parser.add_argument("--no-reflections", action="store_true", help="Disable reflected rays")
    parser.add_argument("--no-refractions", action="store_true", help="Disable refracted rays")
    parser.add_argument("--verbose", action="store_true", help="Log renderer progress")
    parser.add_argument("--quiet", action="store_true", help="Suppress the summary")
    return parser.parse_args()


def make_pinhole_rays(position, forward, vfov: float, width: int, height: int):
    """Return a ray_for_pixel(x, y) function for a simple pinhole camera."""
    w = np.array(forward, dtype=np.float64)
    w /= np.linalg.norm(w)
    u = np.cross(w, (0.0, 1.0, 0.0))
    u /= np.linalg.norm(u)
    v = np.cross(u, w)
    half_height = math.tan(math.radians(vfov) / 2.0)
    half_width = half_height * width / height
    origin = np.array(position, dtype=np.float64)

    def ray_for_pixel(x: int, y: int):
        sx = (2.0 * (x + 0.5) / width - 1.0) * half_width
        sy = (1.0 - 2.0 * (y + 0.5) / height) * half_height
        direction = w + sx * u + sy * v
        return origin, direction / np.linalg.norm(direction)

    return ray_for_pixel


def render_fog_scene(args: argparse.Namespace) -> int:
    """Render the scene and print a summary. Returns the edge pixel count."""
    # Lazy imports to allow Taichi initialization first
    from fogtrace.core.renderer import get_image_numpy, render_frame, setup_render_target
    from fogtrace.core.shader import RayTracer, ShaderConfig
    from fogtrace.scene.fog_scene import (
        VIEW_DIRECTION,
        VIEW_FOV,
        VIEW_POSITION,
        create_two_spheres_and_fog_scene,
    )

    scene = create_two_spheres_and_fog_scene(args.param)
    config = ShaderConfig(
        max_level=args.max_level,
        do_shadows=not args.no_shadows,
        do_reflections=not args.no_reflections,
        do_refractions=not args.no_refractions,
    )
    tracer = RayTracer(scene.snapshot(), config)

    setup_render_target(args.width, args.height)
    rays = make_pinhole_rays(VIEW_POSITION, VIEW_DIRECTION, VIEW_FOV, args.width, args.height)

    if not args.quiet:
        print(f"Rendering {args.width}x{args.height}...")

    start_time = time.time()
    edges = render_frame(tracer, rays)
    total_time = time.time() - start_time

    if not args.quiet:
        image = get_image_numpy()
        primary, total = tracer.statistics.snapshot()
        print(f"Mean color: {image.reshape(-1, 3).mean(axis=0)}")
        print(f"Edge pixels: {edges} of {args.width * args.height}")
        print(f"Rays: {primary} primary, {total} total")
        print(f"Total time: {total_time:.2f}s")

    return edges


def main() -> int:
    """Main entry point."""
    args = parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")

    ti.init(arch=ti.cpu)

    try:
        render_fog_scene(args)
        return 0
    except (ValueError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
