"""
Steam Particle Field
====================
A fixed-size swarm of points rising from an emission origin.

The motion law (per particle, with t the field time and age the time since
the particle was last recycled):

    pos = base + velocity * age * speed
               + (sin(2t + base_y) * 0.1, 0, cos(2t + base_y) * 0.1)

A particle that rises more than MAX_RISE above the origin, or drifts further
than MAX_DISPLACEMENT from its base, is recycled: it snaps back to its base
position and its age restarts at zero.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, TYPE_CHECKING

import numpy as np

from ramenviz import config

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FrameState:
    """What one tick hands to the render consumer."""
    positions: npt.NDArray[np.float32]
    time: float
    intensity: float
    speed: float


class ParticleField:
    def __init__(
        self,
        base_positions: npt.NDArray[np.float64],
        velocities: npt.NDArray[np.float64],
        origin: Sequence[float],
        rng: np.random.Generator,
    ) -> None:
        self.base_positions = base_positions
        self.velocities = velocities
        self.ages = np.zeros(len(base_positions), dtype=np.float64)
        self.positions = base_positions.astype(np.float32)
        self._origin = np.asarray(origin, dtype=np.float64).reshape(3)
        self._rng = rng
        self._time: float = 0.0

    @classmethod
    def create(
        cls,
        density: int,
        origin: Sequence[float] = config.DEFAULT_ORIGIN,
        rng: Optional[np.random.Generator] = None,
    ) -> ParticleField:
        """Build a field of `density` particles scattered around `origin`."""
        if density < 0:
            raise ValueError(f"Particle density cannot be negative, got {density}.")

        rng = rng if rng is not None else np.random.default_rng()
        origin_arr = np.asarray(origin, dtype=np.float64).reshape(3)

        base = _sample_base_positions(rng, density, origin_arr)
        velocities = np.column_stack([
            rng.uniform(-0.5, 0.5, density) * config.VELOCITY_SCALE_XZ,
            rng.uniform(0.0, 1.0, density) * config.VELOCITY_SCALE_Y,
            rng.uniform(-0.5, 0.5, density) * config.VELOCITY_SCALE_XZ,
        ]).reshape(density, 3)

        logger.debug(f"Created particle field with {density} particles at {origin_arr.tolist()}.")
        return cls(base, velocities, origin_arr, rng)

    # ------------------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self.base_positions)

    @property
    def time(self) -> float:
        return self._time

    @property
    def origin(self) -> npt.NDArray[np.float64]:
        return self._origin.copy()

    # ------------------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------------------

    def tick(self, dt: float, speed: float) -> None:
        """Advance the field by `dt` and recompute every rendered position."""
        self._time += dt
        if len(self) == 0:
            return

        self.ages += dt
        base = self.base_positions

        phase = self._time * config.SWIRL_FREQUENCY + base[:, 1]
        pos = base + self.velocities * (self.ages * speed)[:, None]
        pos[:, 0] += np.sin(phase) * config.SWIRL_AMPLITUDE
        pos[:, 2] += np.cos(phase) * config.SWIRL_AMPLITUDE

        # Recycle particles that left the plume
        too_high = pos[:, 1] - self._origin[1] > config.MAX_RISE
        too_far = np.linalg.norm(pos - base, axis=1) > config.MAX_DISPLACEMENT
        reset = too_high | too_far
        if np.any(reset):
            pos[reset] = base[reset]
            self.ages[reset] = 0.0

        self.positions[:] = pos

    def set_origin(self, origin: Sequence[float]) -> None:
        """Move the emitter: scatter every base position around the new origin."""
        self._origin = np.asarray(origin, dtype=np.float64).reshape(3)
        self.base_positions = _sample_base_positions(self._rng, len(self), self._origin)
        self.ages[:] = 0.0
        self.positions[:] = self.base_positions
        logger.debug(f"Particle origin moved to {self._origin.tolist()}.")


def _sample_base_positions(
    rng: np.random.Generator,
    count: int,
    origin: npt.NDArray[np.float64],
) -> npt.NDArray[np.float64]:
    offsets = np.column_stack([
        rng.uniform(-0.5, 0.5, count) * config.EMISSION_SPREAD_XZ,
        rng.uniform(0.0, 1.0, count) * config.EMISSION_SPREAD_Y,
        rng.uniform(-0.5, 0.5, count) * config.EMISSION_SPREAD_XZ,
    ]).reshape(count, 3)
    return origin + offsets
