"""Cloud — a mobile parcel of water vapor.

Clouds are pushed by the wind, refuse to move into terrain, and rain
part of their mass onto the cell below each tick.  Like cells they are
immutable; ``step_cloud`` returns the next state.

The volume follows the ideal gas law at the local temperature and
pressure; denser clouds precipitate exponentially faster, capped at a
fifth of their mass per tick.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from watercycle.numerics import nan_to_zero, quiet

if TYPE_CHECKING:
    from numpy.random import Generator

    from watercycle.world.cell import Cell
    from watercycle.world.environment import Environment
    from watercycle.world.world import World

Vector3 = tuple[float, float, float]
Coord = tuple[int, int]

MOLAR_MASS_WATER = 18.02  # g/mol
GAS_CONSTANT = 0.08206  # L atm / (mol K)
KELVIN_OFFSET = 273.15
MAX_PRECIPITATION_FRACTION = 0.2
SPAWN_VOLUME_FACTOR = 10.0


@dataclass(frozen=True)
class Cloud:
    """A single cloud agent.

    Attributes:
        position: ``(x, y, z)``; x and y in grid units, z is altitude.
        velocity: Displacement applied per tick.
        mass: Water carried.
        volume: Ideal-gas volume at the last update.
    """

    position: Vector3
    velocity: Vector3
    mass: float
    volume: float = 0.0


@dataclass(frozen=True)
class CloudOutputs:
    """What a cloud leaves behind after its tick.

    Attributes:
        precipitation: Water dropped this tick.
        target: Grid coordinate under the cloud, or None if off-grid.
    """

    precipitation: float
    target: Coord | None


def nearest_tile(position: Vector3, width: int, height: int) -> Coord | None:
    """Round ``position`` to the nearest grid coordinate.

    Halves round to even.  Returns None for coordinates that are
    negative, past the grid edge, or not finite.
    """
    x = np.rint(position[0])
    y = np.rint(position[1])
    if not (np.isfinite(x) and np.isfinite(y)):
        return None
    if x < 0 or y < 0 or x >= width or y >= height:
        return None
    return (int(x), int(y))


def cloud_volume(mass: float, temperature: float, pressure: float) -> float:
    """Ideal-gas volume of ``mass`` water vapor; 0 when degenerate or negative."""
    moles = mass * 1000.0 / MOLAR_MASS_WATER
    with quiet():
        volume = (
            moles * GAS_CONSTANT * (temperature + KELVIN_OFFSET) / np.float64(pressure)
        )
    # Below absolute zero the gas law has no meaning
    return max(nan_to_zero(volume), 0.0)


def precipitation_from(mass: float, volume: float) -> float:
    """Water dropped by a cloud of the given mass and volume.

    ``10 ** (4 * density - 3) * mass``, never more than
    ``MAX_PRECIPITATION_FRACTION`` of the mass.
    """
    with quiet():
        density = nan_to_zero(np.float64(mass) / volume)
        rain = np.minimum(
            np.power(10.0, 4.0 * density - 3.0) * mass,
            MAX_PRECIPITATION_FRACTION * mass,
        )
    return nan_to_zero(rain)


def _blocked(candidate: Vector3, world: World) -> bool:
    tile = nearest_tile(candidate, world.width, world.height)
    if tile is None or not np.isfinite(candidate[2]):
        return True
    x, y = tile
    return world.cells[y][x].elevation > candidate[2]


def step_cloud(
    cloud: Cloud,
    wind: Vector3,
    world: World,
    environment: Environment,
    rng: Generator,
) -> tuple[Cloud, CloudOutputs]:
    """Advance one cloud by a tick.

    The wind accelerates the cloud, then it moves by its new velocity
    unless that would take it off the grid or below the terrain surface.
    A blocked cloud stays put but keeps the velocity it gained.  Volume
    and precipitation are computed at wherever the cloud ends up.

    Args:
        cloud: Current state.
        wind: Force applied this tick.
        world: Terrain used for collision checks.
        environment: Climate model for temperature and pressure.
        rng: Seeded random generator (two draws).

    Returns:
        The cloud's next state and its precipitation/target.
    """
    with quiet():
        acceleration = [np.float64(force) / cloud.mass for force in wind]
        velocity: Vector3 = (
            float(cloud.velocity[0] + acceleration[0]),
            float(cloud.velocity[1] + acceleration[1]),
            float(cloud.velocity[2] + acceleration[2]),
        )
    candidate: Vector3 = (
        cloud.position[0] + velocity[0],
        cloud.position[1] + velocity[1],
        cloud.position[2] + velocity[2],
    )
    position = cloud.position if _blocked(candidate, world) else candidate

    temperature = environment.temperature(position[1], position[2], rng)
    pressure = environment.pressure(position[2], rng)
    volume = cloud_volume(cloud.mass, temperature, pressure)
    precipitation = precipitation_from(cloud.mass, volume)

    next_cloud = Cloud(
        position=position,
        velocity=velocity,
        mass=cloud.mass - precipitation,
        volume=volume,
    )
    target = nearest_tile(position, world.width, world.height)
    return next_cloud, CloudOutputs(precipitation=precipitation, target=target)


def merge_clouds(a: Cloud, b: Cloud) -> Cloud:
    """Combine two clouds that share a coordinate.

    Position and velocity are averaged componentwise; mass and volume
    add.  The result does not depend on argument order.
    """
    return Cloud(
        position=(
            (a.position[0] + b.position[0]) / 2,
            (a.position[1] + b.position[1]) / 2,
            (a.position[2] + b.position[2]) / 2,
        ),
        velocity=(
            (a.velocity[0] + b.velocity[0]) / 2,
            (a.velocity[1] + b.velocity[1]) / 2,
            (a.velocity[2] + b.velocity[2]) / 2,
        ),
        mass=a.mass + b.mass,
        volume=a.volume + b.volume,
    )


def spawn_cloud(cell: Cell, vapor: float, rng: Generator) -> Cloud:
    """Create a cloud from vapor rising off ``cell``.

    It starts at the cell's surface with a random velocity in [0, 1) on
    each axis (three draws, x then y then z).
    """
    velocity: Vector3 = (
        float(rng.random()),
        float(rng.random()),
        float(rng.random()),
    )
    return Cloud(
        position=(float(cell.x), float(cell.y), cell.elevation),
        velocity=velocity,
        mass=vapor,
        volume=vapor * SPAWN_VOLUME_FACTOR,
    )
