"""Per-cell hydrology: absorption, evaporation, growth and erosion.

``step_cell`` computes a cell's next state from its current state and
the deposit routed to it last tick, and reports what leaves the cell:
runoff and sediment for the downhill neighbour, vapor for the clouds.

Each stage mixes its deterministic rate (90%) with one fresh random
draw (10%).  The four draws are taken in a fixed order (absorb,
evaporate, grow, erode) after the temperature and pressure draws.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

import numpy as np

from watercycle.numerics import finite_or_zero, quiet

if TYPE_CHECKING:
    from numpy.random import Generator

    from watercycle.hydrology.deposits import Deposit
    from watercycle.world.cell import Cell
    from watercycle.world.environment import Environment

# Antoine equation constants for water (mmHg, degrees Celsius).
ANTOINE_A = 8.14019
ANTOINE_B = 1810.94
ANTOINE_C = 244.485
EVAPORATION_COEFFICIENT = 3.44586e-5

RATE_WEIGHT = 0.9
JITTER_WEIGHT = 0.1


@dataclass(frozen=True)
class CellOutputs:
    """Material leaving a cell at the end of its tick.

    Attributes:
        runoff: Surface water sent to the downhill neighbour.
        sediment: Eroded material sent with the runoff.
        vapor: Evaporated water that becomes cloud mass.
    """

    runoff: float = 0.0
    sediment: float = 0.0
    vapor: float = 0.0


def absorption_rate(base_rate: float, groundwater: float) -> float:
    """Soil absorption slows as the soil fills: ``base ** groundwater``."""
    with quiet():
        return finite_or_zero(np.power(np.float64(base_rate), groundwater))


def evaporation_rate(temperature: float, pressure: float) -> float:
    """Evaporation from the gap between air pressure and vapor pressure.

    Vapor pressure comes from the Antoine equation.  Freezing or
    degenerate temperatures give a rate of zero.  The guard zeroes an
    infinite rate as well as NaN, so exactly 0 degrees also gives zero.
    """
    t = np.float64(temperature)
    with quiet():
        antoine = np.power(10.0, ANTOINE_A - ANTOINE_B / (ANTOINE_C + t))
        rate = (pressure - antoine) * np.sqrt(EVAPORATION_COEFFICIENT / t)
    return finite_or_zero(rate)


def vegetation_growth_rate(
    base_rate: float,
    vegetation: float,
    groundwater: float,
) -> float:
    """Growth slows as vegetation thickens and scales with available water."""
    with quiet():
        rate = np.power(np.float64(base_rate), vegetation) * groundwater
    return finite_or_zero(rate)


def erosion_rate(base_rate: float, vegetation: float, runoff: float) -> float:
    """Erosion is suppressed by vegetation that outweighs the runoff."""
    with quiet():
        rate = np.power(np.float64(base_rate), max(vegetation - runoff, 1.0))
    return finite_or_zero(rate)


def _jittered(rate: float, rng: Generator) -> float:
    return RATE_WEIGHT * rate + JITTER_WEIGHT * float(rng.random())


def step_cell(
    cell: Cell,
    deposit: Deposit,
    slope_drop: float,
    environment: Environment,
    rng: Generator,
) -> tuple[Cell, CellOutputs]:
    """Advance one cell by a tick.

    Args:
        cell: Current state.
        deposit: Precipitation, runoff and sediment routed here last tick.
        slope_drop: Elevation drop of the cell's routing direction.
        environment: Climate model and elevation bounds.
        rng: Seeded random generator (six draws).

    Returns:
        The cell's next state and the material it emits.
    """
    runoff = cell.runoff + deposit.runoff + deposit.precipitation
    groundwater = cell.groundwater
    vegetation = cell.vegetation

    temperature = environment.temperature(cell.y, cell.elevation, rng)
    pressure = environment.pressure(cell.elevation, rng)

    absorption = absorption_rate(cell.base_absorption_rate, groundwater)
    evaporation = evaporation_rate(temperature, pressure)
    growth = vegetation_growth_rate(
        cell.base_vegetation_growth_rate,
        vegetation,
        groundwater,
    )
    erosion = erosion_rate(cell.base_erosion_rate, vegetation, runoff)

    # Absorb: at most half the surface water soaks in per tick
    absorbed = min(_jittered(absorption, rng), runoff / 2)
    runoff -= absorbed
    groundwater += absorbed

    evaporated = min(_jittered(evaporation, rng), runoff)
    runoff -= evaporated

    # Plants drink first; whatever they cannot sustain evaporates
    consumed = min(groundwater, vegetation)
    groundwater -= consumed
    evaporated += max(0.0, vegetation - consumed)
    grown = min(_jittered(growth, rng), groundwater)
    vegetation = consumed if groundwater == 0 else vegetation + grown

    eroded = min(_jittered(erosion, rng), cell.elevation - environment.min_height)
    elevation = cell.elevation + deposit.sediment - eroded
    if elevation > environment.max_height:
        eroded += elevation - environment.max_height
        elevation = environment.max_height

    outgoing_runoff = runoff * max(1.0, slope_drop)
    runoff = max(runoff - outgoing_runoff, 0.0)

    next_cell = replace(
        cell,
        elevation=elevation,
        temperature=temperature,
        pressure=pressure,
        groundwater=groundwater,
        runoff=runoff,
        vegetation=vegetation,
        age=cell.age + 1,
        total_precipitation=cell.total_precipitation + deposit.precipitation,
    )
    outputs = CellOutputs(runoff=outgoing_runoff, sediment=eroded, vapor=evaporated)
    return next_cell, outputs
