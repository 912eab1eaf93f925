"""Tests for watercycle.simulation.engine — the tick loop."""

import numpy as np
import pytest

from helpers import ConstantRng
from watercycle.clouds.cloud import Cloud
from watercycle.hydrology.deposits import DepositKind
from watercycle.hydrology.slope import ZERO_SLOPE
from watercycle.simulation.config import SimulationConfig
from watercycle.simulation.engine import Phase, SimulationEngine
from watercycle.world.cell import Cell


class TestSimulationEngine:
    """Tests for engine lifecycle."""

    def test_engine_initialises(self, small_config: SimulationConfig) -> None:
        engine = SimulationEngine(config=small_config)
        assert engine.tick == 0
        assert engine.phase is Phase.INIT
        assert engine.world.width == small_config.world_width
        assert len(engine.clouds) == 0

    def test_step_advances_tick(self, small_config: SimulationConfig) -> None:
        engine = SimulationEngine(config=small_config)
        engine.step()
        assert engine.tick == 1
        assert engine.phase is Phase.ADVANCE
        assert all(cell.age == 1 for row in engine.world.cells for cell in row)

    def test_run_to_completion(self) -> None:
        cfg = SimulationConfig(
            world_width=6,
            world_height=6,
            simulation_length=5,
            log_interval=2,
        )
        engine = SimulationEngine(config=cfg)
        engine.run()
        assert engine.tick == 5
        assert engine.finished
        assert engine.phase is Phase.DONE
        with pytest.raises(RuntimeError):
            engine.step()

    def test_run_is_capped(self, small_config: SimulationConfig) -> None:
        engine = SimulationEngine(config=small_config)
        engine.run(ticks=3)
        assert engine.tick == 3
        engine.run(ticks=1000)
        assert engine.tick == small_config.simulation_length

    def test_determinism(self, small_config: SimulationConfig) -> None:
        """Same seed must produce identical state after N ticks."""
        engine_a = SimulationEngine(config=small_config)
        engine_a.run(ticks=15)
        engine_b = SimulationEngine(config=small_config)
        engine_b.run(ticks=15)

        assert np.array_equal(engine_a.elevations(), engine_b.elevations())
        assert engine_a.world.cells == engine_b.world.cells
        assert engine_a.clouds.clouds == engine_b.clouds.clouds

    def test_slope_refresh_schedule(self) -> None:
        cfg = SimulationConfig(
            world_width=6,
            world_height=6,
            simulation_length=10,
            slope_refresh_rate=4,
            log_interval=0,
        )
        engine = SimulationEngine(config=cfg)
        engine.step()
        field_at_zero = engine.slope_field
        for _ in range(3):
            engine.step()
        assert engine.slope_field is field_at_zero
        engine.step()
        assert engine.slope_field is not field_at_zero

    def test_samples(self, small_config: SimulationConfig) -> None:
        engine = SimulationEngine(config=small_config)
        samples = list(engine.samples())
        assert len(samples) == small_config.world_width * small_config.world_height
        x, y, z = samples[0]
        assert engine.world.cell_at(x, y).elevation == z


class TestPhysicalBounds:
    """Properties that hold after every tick."""

    def test_state_stays_physical(self, small_config: SimulationConfig) -> None:
        engine = SimulationEngine(config=small_config)
        for _ in range(25):
            engine.step()
            grid = engine.elevations()
            assert np.all(grid >= small_config.min_height)
            assert np.all(grid <= small_config.max_height)
            for row in engine.world.cells:
                for cell in row:
                    assert cell.groundwater >= 0.0
                    assert cell.runoff >= 0.0
                    assert cell.vegetation >= 0.0
            for (x, y), cloud in engine.clouds:
                assert engine.world.in_bounds(x, y)
                assert cloud.mass > 0.0
                assert cloud.volume >= 0.0

    def test_cycle_moves_water(self, small_config: SimulationConfig) -> None:
        engine = SimulationEngine(config=small_config)
        engine.run(ticks=10)
        stats = engine.stats()
        assert stats.tick == 10
        assert stats.clouds == len(engine.clouds)
        assert stats.groundwater >= 0.0
        assert stats.cloud_mass == pytest.approx(engine.clouds.total_mass())
        assert stats.min_elevation <= stats.mean_elevation <= stats.max_elevation


class TestScenarios:
    def test_flat_grid_routes_nothing(self) -> None:
        """Uniform 2x2 terrain: no runoff leaves any cell, outputs are symmetric."""
        cfg = SimulationConfig(
            world_width=2,
            world_height=2,
            simulation_length=5,
            log_interval=0,
        )
        engine = SimulationEngine(config=cfg)
        for x, y in engine.world.iter_coords():
            engine.world.set_cell(
                Cell(
                    x=x,
                    y=y,
                    elevation=10.0,
                    groundwater=15.0,
                    base_absorption_rate=0.5,
                    base_vegetation_growth_rate=0.5,
                    base_erosion_rate=5e-5,
                ),
            )
        engine.rng = ConstantRng(0.5)
        engine.step()

        assert all(vec == ZERO_SLOPE for row in engine.slope_field.vectors for vec in row)
        assert engine.deposits.incoming[DepositKind.RUNOFF].sum() == 0.0
        sediment = engine.deposits.incoming[DepositKind.SEDIMENT]
        assert np.all(sediment > 0.0)
        assert np.allclose(sediment, sediment[0, 0])
        grid = engine.elevations()
        assert np.allclose(grid, grid[0, 0])
        assert len(engine.clouds) == 0

    def test_cloud_leaving_grid_is_removed(
        self,
        small_config: SimulationConfig,
    ) -> None:
        engine = SimulationEngine(config=small_config)
        stray = Cloud(
            position=(-1000.0, -1000.0, 50.0),
            velocity=(0.0, 0.0, 0.0),
            mass=1.0,
            volume=10.0,
        )
        engine.clouds.insert_or_merge((0, 0), stray)
        engine.step()
        assert (0, 0) not in engine.clouds
        assert engine.water_lost > 0.999
        assert engine.deposits.incoming[DepositKind.PRECIPITATION][0, 0] == 0.0
