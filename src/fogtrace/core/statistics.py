"""Ray statistics shared between concurrent shading calls."""

from __future__ import annotations

import threading


class RayStatistics:
    """Thread-safe ray counters.

    One instance is passed to the shader explicitly instead of living in a
    process-wide global. Several threads may shade rays against the same
    instance.

    Attributes:
        primary_rays: Number of rays shot at recursion depth 0.
        all_rays: Number of all rays, including shadow and secondary rays.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.primary_rays = 0
        self.all_rays = 0

    def increment_rays(self, count: int = 1, primary: bool = False) -> None:
        """Add ``count`` rays; they are also counted as primary if ``primary``."""
        with self._lock:
            self.all_rays += count
            if primary:
                self.primary_rays += count

    def reset(self) -> None:
        """Zero both counters."""
        with self._lock:
            self.primary_rays = 0
            self.all_rays = 0

    def snapshot(self) -> tuple[int, int]:
        """Return ``(primary_rays, all_rays)`` read under the lock."""
        with self._lock:
            return self.primary_rays, self.all_rays
