"""Terrain generation — the initial heightmap and per-cell soil parameters.

Elevation comes from three octaves of OpenSimplex noise at decreasing
frequency.  Each cell also draws its fixed absorption, vegetation and
erosion parameters from the run's random generator.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
import structlog
from opensimplex import OpenSimplex

from watercycle.world.cell import Cell
from watercycle.world.world import World

if TYPE_CHECKING:
    from numpy.random import Generator

    from watercycle.simulation.config import SimulationConfig
    from watercycle.world.environment import Environment

logger = structlog.get_logger()

# (frequency divisor, weight) per octave; weights sum to 1.
OCTAVES: tuple[tuple[float, float], ...] = ((1.0, 0.9), (2.0, 0.09), (4.0, 0.01))

MAX_BASE_EROSION_RATE = 0.0001


@dataclass
class HeightmapNoise:
    """Layered coherent noise over a ``width`` x ``height`` grid.

    Attributes:
        width: Grid columns; x is sampled as ``x / width``.
        height: Grid rows; y is sampled as ``y / height``.
        seed: Seed of the first octave; octave ``i`` uses ``seed + i``.
    """

    width: int
    height: int
    seed: int

    def __post_init__(self) -> None:
        self._generators = [
            OpenSimplex(seed=self.seed + i) for i in range(len(OCTAVES))
        ]

    def sample(self, x: int, y: int) -> float:
        """Return the weighted noise sum at ``(x, y)``, clamped to [-1, 1]."""
        total = 0.0
        for gen, (divisor, weight) in zip(self._generators, OCTAVES, strict=True):
            value = gen.noise2(x / self.width / divisor, y / self.height / divisor)
            if np.isnan(value):
                value = 0.0
            total += value * weight
        return min(max(total, -1.0), 1.0)


def noise_to_elevation(value: float, min_height: float, max_height: float) -> float:
    """Map a noise value in [-1, 1] onto [min_height, max_height]."""
    return (value + 1.0) / 2.0 * (max_height - min_height) + min_height


def generate_terrain(
    config: SimulationConfig,
    environment: Environment,
    rng: Generator,
) -> World:
    """Build the starting World.

    Cells are created in x-major order.  For each cell the generator
    draws, in order, the absorption, vegetation-growth and erosion base
    rates, then one temperature and one pressure sample.  Cells below
    sea level start with their depth as groundwater.

    Args:
        config: Simulation configuration (size, heights, seed).
        environment: Climate model for the initial temperature/pressure.
        rng: Seeded random generator.

    Returns:
        A World whose cells carry the generated elevations.
    """
    logger.info(
        "Generating terrain",
        width=config.world_width,
        height=config.world_height,
        seed=config.seed,
    )
    noise = HeightmapNoise(config.world_width, config.world_height, config.seed)
    world = World(width=config.world_width, height=config.world_height)

    for x, y in world.iter_coords():
        elevation = noise_to_elevation(
            noise.sample(x, y),
            config.min_height,
            config.max_height,
        )
        absorption = float(rng.random())
        growth = float(rng.random())
        erosion = float(rng.random()) * MAX_BASE_EROSION_RATE
        temperature = environment.temperature(y, elevation, rng)
        pressure = environment.pressure(elevation, rng)
        world.set_cell(
            Cell(
                x=x,
                y=y,
                elevation=elevation,
                temperature=temperature,
                pressure=pressure,
                groundwater=max(config.sea_level - elevation, 0.0),
                base_absorption_rate=absorption,
                base_vegetation_growth_rate=growth,
                base_erosion_rate=erosion,
            ),
        )

    elevations = world.elevations()
    logger.info(
        "Terrain generated",
        min_elevation=round(float(elevations.min()), 3),
        max_elevation=round(float(elevations.max()), 3),
    )
    return world
