"""Environment — ambient temperature, pressure and wind.

Pure functions of position (and tick, for wind) plus a small random
jitter term.  Every draw comes from the ``Generator`` passed in by the
caller so the whole run replays from a single seed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from watercycle.numerics import quiet

if TYPE_CHECKING:
    from numpy.random import Generator

    from watercycle.simulation.config import SimulationConfig

Vector3 = tuple[float, float, float]


def gaussian(x: float, offset: float, std: float) -> float:
    """Unnormalised bell curve centred on ``offset``."""
    with quiet():
        return float(np.exp(-((np.float64(x) - offset) ** 2) / (2.0 * std * std)))


@dataclass(frozen=True)
class Environment:
    """Climate constants for one world.

    Attributes:
        world_width: Number of grid columns.
        world_height: Number of grid rows.
        min_height: Elevation floor.
        max_height: Elevation ceiling.
        sea_level: Reference elevation for sea-level pressure.
        sea_level_temp: Temperature at sea level on the middle row.
        temp_range: Spread between coldest and warmest temperatures.
        sea_level_pressure: Reference pressure scale.
    """

    world_width: int
    world_height: int
    min_height: float = 0.0
    max_height: float = 100.0
    sea_level: float = 25.0
    sea_level_temp: float = 15.0
    temp_range: float = 50.0
    sea_level_pressure: float = 1.0

    @classmethod
    def from_config(cls, config: SimulationConfig) -> Environment:
        """Build an Environment from the simulation config."""
        return cls(
            world_width=config.world_width,
            world_height=config.world_height,
            min_height=config.min_height,
            max_height=config.max_height,
            sea_level=config.sea_level,
            sea_level_temp=config.sea_level_temp,
            temp_range=config.temp_range,
            sea_level_pressure=config.sea_level_pressure,
        )

    def _relative_height(self, z: float) -> float:
        return (z - self.min_height) / (self.max_height - self.min_height)

    def temperature(self, y: float, z: float, rng: Generator) -> float:
        """Temperature at row ``y`` and elevation ``z``.

        A blend of a latitude band peaking on the middle row (60%), a
        linear lapse with elevation (30%) and random jitter (10%),
        scaled into ``temp_range`` and shifted so that sea level on the
        middle row sits near ``sea_level_temp``.

        Args:
            y: Row coordinate (may be fractional for clouds).
            z: Elevation.
            rng: Seeded random generator (one draw).

        Returns:
            Temperature in degrees Celsius.
        """
        geo = gaussian(y, self.world_height / 2, self.world_height / 4)
        with quiet():
            height = 1.0 - np.float64(self._relative_height(z))
            blend = 0.6 * geo + 0.3 * height + 0.1 * rng.random()
            return float(
                blend * self.temp_range
                - (self.temp_range / 2 - self.sea_level_temp),
            )

    def pressure(self, z: float, rng: Generator) -> float:
        """Air pressure at elevation ``z``.

        Falls off exponentially to 1% over the full height range, with
        10% random jitter, scaled so sea level sits near
        ``sea_level_pressure``.

        Args:
            z: Elevation.
            rng: Seeded random generator (one draw).
        """
        with quiet():
            falloff = np.power(0.01, np.float64(self._relative_height(z)))
            sea = np.power(100.0, self._relative_height(self.sea_level))
            return float(
                (0.9 * falloff + 0.1 * rng.random()) * sea * self.sea_level_pressure,
            )

    def wind(self, tick: int, rng: Generator) -> Vector3:
        """Wind force shared by every cloud on ``tick``.

        Three phase-shifted sinusoids with random amplitude and a
        constant bias, so the wind slowly swings around a prevailing
        diagonal direction.

        Args:
            tick: Current simulation tick.
            rng: Seeded random generator (three draws, x then y then z).
        """
        t = 0.1 * tick
        return (
            float(rng.random() * 10.0 * np.sin(t) + 3.0),
            float(rng.random() * 10.0 * np.sin(t + 1.0) + 3.0),
            float(rng.random() * 8.0 * np.sin(t - 1.0) + 2.0),
        )
