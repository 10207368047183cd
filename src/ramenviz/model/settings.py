"""
Visual Settings Snapshot
========================
The record the control panel hands to the render session.

A snapshot is immutable. Changing a slider produces a new snapshot which
replaces the old one as a whole, so a tick never sees half of an update.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
import math

from ramenviz import config


@dataclass(frozen=True)
class VisualSettings:
    intensity: float = config.DEFAULT_INTENSITY
    speed: float = config.DEFAULT_SPEED
    density: int = config.DEFAULT_DENSITY
    auto_rotate: bool = config.DEFAULT_AUTO_ROTATE
    point_size: float = config.DEFAULT_POINT_SIZE

    def __post_init__(self) -> None:
        lo, hi = config.INTENSITY_RANGE
        if not (lo <= self.intensity <= hi):
            raise ValueError(f"Intensity must be within [{lo}, {hi}], got {self.intensity}.")

        lo, hi = config.SPEED_RANGE
        if not (lo <= self.speed <= hi):
            raise ValueError(f"Speed must be within [{lo}, {hi}], got {self.speed}.")

        if isinstance(self.density, bool) or not isinstance(self.density, int) or self.density <= 0:
            raise ValueError(f"Density must be a positive integer, got {self.density!r}.")

        if not math.isfinite(self.point_size) or self.point_size <= 0:
            raise ValueError(f"Point size must be positive, got {self.point_size}.")

    def replace(self, **changes) -> VisualSettings:
        """Return a new snapshot with the given fields changed."""
        return replace(self, **changes)
