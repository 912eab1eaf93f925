"""Cell — the terrain and hydrology state of one grid coordinate.

Cells are immutable value records.  The hydrology update builds the
next state with ``dataclasses.replace`` and the World swaps it in, so no
two parts of the simulation can alias and mutate the same cell.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Cell:
    """A single grid coordinate's persistent state.

    Attributes:
        x: Column position.
        y: Row position.
        elevation: Terrain height, kept within the configured bounds.
        temperature: Ambient temperature, refreshed every tick.
        pressure: Ambient pressure, refreshed every tick.
        groundwater: Water held in the soil (>= 0).
        runoff: Surface water waiting to be routed (>= 0).
        vegetation: Plant mass (>= 0).
        age: Ticks this cell has been updated.
        total_precipitation: Precipitation received over the whole run.
        base_absorption_rate: Soil absorption parameter in [0, 1).
        base_vegetation_growth_rate: Plant growth parameter in [0, 1).
        base_erosion_rate: Erodibility parameter in [0, 1e-4).
    """

    x: int
    y: int
    elevation: float
    temperature: float = 0.0
    pressure: float = 0.0
    groundwater: float = 0.0
    runoff: float = 0.0
    vegetation: float = 0.0
    age: int = 0
    total_precipitation: float = 0.0
    base_absorption_rate: float = 0.0
    base_vegetation_growth_rate: float = 0.0
    base_erosion_rate: float = 0.0
