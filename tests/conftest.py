"""Shared fixtures for the watercycle test suite."""

from __future__ import annotations

import numpy as np
import pytest
from numpy.random import Generator

from watercycle.simulation.config import SimulationConfig
from watercycle.world.environment import Environment


@pytest.fixture
def rng() -> Generator:
    """A deterministic random generator for reproducible tests."""
    return np.random.default_rng(seed=12345)


@pytest.fixture
def small_config() -> SimulationConfig:
    """An 8x8 world with a short run for fast tests."""
    return SimulationConfig(
        seed=777,
        world_width=8,
        world_height=8,
        simulation_length=30,
        log_interval=0,
    )


@pytest.fixture
def environment() -> Environment:
    """Default climate over a 4x4 grid."""
    return Environment(world_width=4, world_height=4)


@pytest.fixture
def cold_environment() -> Environment:
    """A climate cold enough that evaporation is always zero."""
    return Environment(world_width=1, world_height=1, sea_level_temp=-30.0)
