"""SimulationEngine — the main tick loop.

Owns all top-level simulation state and advances it in the canonical
tick order:

1. Refresh the slope field (every ``slope_refresh_rate`` ticks)
2. Tick every cell: absorb, evaporate, grow, erode; route runoff and
   sediment downhill; turn vapor into clouds
3. Tick every cloud: drift with the wind, rain onto the cell below,
   merge clouds that land on the same coordinate
4. Publish this tick's deposits for the next tick and advance
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum, auto

import numpy as np
import structlog
from numpy.random import Generator
from numpy.typing import NDArray

from watercycle.clouds.cloud import Cloud, Coord, spawn_cloud, step_cloud
from watercycle.clouds.table import CloudTable
from watercycle.hydrology.cell_update import step_cell
from watercycle.hydrology.deposits import DepositField, DepositKind
from watercycle.hydrology.slope import SlopeField, compute_slope_field
from watercycle.simulation.config import SimulationConfig
from watercycle.world.environment import Environment
from watercycle.world.terrain import generate_terrain
from watercycle.world.world import World

logger = structlog.get_logger()


class Phase(Enum):
    """Where the engine is within the tick cycle."""

    INIT = auto()
    TICK_CELLS = auto()
    TICK_CLOUDS = auto()
    ADVANCE = auto()
    DONE = auto()


@dataclass(frozen=True)
class SimulationStats:
    """Aggregate snapshot of the world's water and terrain.

    Attributes:
        tick: Ticks completed.
        clouds: Live cloud count.
        cloud_mass: Water carried by clouds.
        runoff: Surface water held by cells.
        groundwater: Soil water held by cells.
        vegetation: Total plant mass.
        total_precipitation: Precipitation received by cells so far.
        water_lost: Cloud water carried off the grid edge so far.
        min_elevation: Lowest cell.
        max_elevation: Highest cell.
        mean_elevation: Average cell elevation.
    """

    tick: int
    clouds: int
    cloud_mass: float
    runoff: float
    groundwater: float
    vegetation: float
    total_precipitation: float
    water_lost: float
    min_elevation: float
    max_elevation: float
    mean_elevation: float


@dataclass
class SimulationEngine:
    """Drives the simulation forward tick by tick.

    Attributes:
        config: Loaded simulation configuration.
        environment: Climate model shared by cells and clouds.
        world: The terrain grid.
        slope_field: Routing table from the last refresh.
        deposits: Double-buffered inputs for the next tick.
        clouds: Live clouds keyed by coordinate.
        rng: Master seeded random generator.
        tick: Current tick count.
        phase: Current position in the tick cycle.
        water_lost: Cloud water carried off the grid edge so far.
    """

    config: SimulationConfig
    environment: Environment = field(init=False)
    world: World = field(init=False)
    slope_field: SlopeField = field(init=False)
    deposits: DepositField = field(init=False)
    clouds: CloudTable = field(init=False, default_factory=CloudTable)
    rng: Generator = field(init=False)
    tick: int = 0
    phase: Phase = field(init=False, default=Phase.INIT)
    water_lost: float = field(init=False, default=0.0)

    def __post_init__(self) -> None:
        """Build terrain, buffers and RNG from config."""
        self.rng = np.random.default_rng(self.config.seed)
        self.environment = Environment.from_config(self.config)
        self.world = generate_terrain(self.config, self.environment, self.rng)
        self.slope_field = SlopeField(
            width=self.config.world_width,
            height=self.config.world_height,
        )
        self.deposits = DepositField(
            width=self.config.world_width,
            height=self.config.world_height,
        )
        self.clouds = CloudTable()

    @property
    def finished(self) -> bool:
        """True once ``simulation_length`` ticks have run."""
        return self.tick >= self.config.simulation_length

    def step(self) -> None:
        """Advance the simulation by one tick.

        Raises:
            RuntimeError: If the run has already reached its length.
        """
        if self.finished:
            msg = f"simulation already finished at tick {self.tick}"
            raise RuntimeError(msg)

        if self.tick % self.config.slope_refresh_rate == 0:
            self.refresh_slope_field()

        self.phase = Phase.TICK_CELLS
        self._tick_cells()

        self.phase = Phase.TICK_CLOUDS
        self._tick_clouds()

        self.phase = Phase.ADVANCE
        self.deposits.swap()
        self.tick += 1

        interval = self.config.log_interval
        if interval and self.tick % interval == 0:
            logger.info(
                "Simulation progress",
                tick=self.tick,
                of=self.config.simulation_length,
                clouds=len(self.clouds),
                cloud_mass=round(self.clouds.total_mass(), 3),
            )

        if self.finished:
            self.phase = Phase.DONE

    def run(self, ticks: int | None = None) -> None:
        """Run the simulation forward.

        Args:
            ticks: Number of ticks to advance, capped at the ticks left
                in the run.  ``None`` runs to ``simulation_length``.
        """
        remaining = self.config.simulation_length - self.tick
        count = remaining if ticks is None else min(ticks, remaining)
        for _ in range(count):
            self.step()
        if self.finished:
            stats = self.stats()
            logger.info(
                "Simulation complete",
                ticks=stats.tick,
                clouds=stats.clouds,
                min_elevation=round(stats.min_elevation, 3),
                max_elevation=round(stats.max_elevation, 3),
            )

    def refresh_slope_field(self) -> None:
        """Recompute routing directions from current elevations."""
        self.slope_field = compute_slope_field(self.world)
        logger.debug("Slope field refreshed", tick=self.tick)

    def _tick_cells(self) -> None:
        """Update every cell and route what it emits."""
        for x, y in self.world.iter_coords():
            cell = self.world.cells[y][x]
            deposit = self.deposits.take(x, y)
            slope = self.slope_field.at(x, y)
            next_cell, outputs = step_cell(
                cell,
                deposit,
                slope.drop,
                self.environment,
                self.rng,
            )
            self.world.set_cell(next_cell)

            target = self.slope_field.target(x, y)
            if target is not None:
                tx, ty = target
                self.deposits.deposit(DepositKind.RUNOFF, tx, ty, outputs.runoff)
                self.deposits.deposit(DepositKind.SEDIMENT, tx, ty, outputs.sediment)

            # Non-positive vapor is condensation into the runoff: no cloud
            if outputs.vapor > 0:
                cloud = spawn_cloud(next_cell, outputs.vapor, self.rng)
                self.clouds.insert_or_merge((x, y), cloud)

    def _tick_clouds(self) -> None:
        """Move every cloud, drop its rain and rebuild the cloud table."""
        wind = self.environment.wind(self.tick, self.rng)
        arrivals: list[tuple[Coord, Coord, Cloud]] = []

        for source in self.clouds.snapshot():
            cloud = self.clouds.pop(source)
            next_cloud, outputs = step_cloud(
                cloud,
                wind,
                self.world,
                self.environment,
                self.rng,
            )
            if outputs.target is None:
                self.water_lost += next_cloud.mass + outputs.precipitation
                continue
            tx, ty = outputs.target
            self.deposits.deposit(
                DepositKind.PRECIPITATION,
                tx,
                ty,
                outputs.precipitation,
            )
            arrivals.append((source, outputs.target, next_cloud))

        self.clouds = CloudTable.from_arrivals(arrivals)

    def elevations(self) -> NDArray[np.float64]:
        """Current elevations indexed ``[y, x]``."""
        return self.world.elevations()

    def samples(self) -> Iterator[tuple[int, int, float]]:
        """Yield ``(x, y, elevation)`` for every coordinate."""
        return self.world.samples()

    def stats(self) -> SimulationStats:
        """Summarise the current state."""
        cells = [cell for row in self.world.cells for cell in row]
        elevations = self.elevations()
        return SimulationStats(
            tick=self.tick,
            clouds=len(self.clouds),
            cloud_mass=self.clouds.total_mass(),
            runoff=sum(c.runoff for c in cells),
            groundwater=sum(c.groundwater for c in cells),
            vegetation=sum(c.vegetation for c in cells),
            total_precipitation=sum(c.total_precipitation for c in cells),
            water_lost=self.water_lost,
            min_elevation=float(elevations.min()),
            max_elevation=float(elevations.max()),
            mean_elevation=float(elevations.mean()),
        )
