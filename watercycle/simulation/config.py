"""Config — load simulation parameters from YAML files.

World size, elevation bounds, climate constants and run length live in
YAML and are parsed into a typed dataclass here.  A malformed config is
rejected when the dataclass is built, before any simulation state exists.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path

import yaml


class ConfigError(ValueError):
    """Raised when a configuration value cannot drive a simulation."""


@dataclass
class SimulationConfig:
    """Top-level simulation configuration.

    Attributes:
        seed: RNG and noise seed for deterministic replay.
        world_width: Number of grid columns.
        world_height: Number of grid rows.
        min_height: Lowest possible terrain elevation.
        max_height: Highest possible terrain elevation.
        sea_level: Elevation below which cells start saturated.
        sea_level_temp: Temperature at sea level on the middle row.
        temp_range: Spread between the coldest and warmest temperatures.
        sea_level_pressure: Reference pressure at sea level.
        simulation_length: Number of ticks in a full run.
        slope_refresh_rate: Ticks between slope-field recomputations.
        log_interval: Ticks between progress log lines (0 disables).
    """

    seed: int = 1234567891
    world_width: int = 64
    world_height: int = 64

    # Elevation
    min_height: float = 0.0
    max_height: float = 100.0
    sea_level: float = 25.0

    # Climate
    sea_level_temp: float = 15.0
    temp_range: float = 50.0
    sea_level_pressure: float = 1.0

    # Run
    simulation_length: int = 1000
    slope_refresh_rate: int = 1
    log_interval: int = 100

    def __post_init__(self) -> None:
        """Fail fast on values the simulation cannot run with."""
        if self.world_width <= 0 or self.world_height <= 0:
            msg = (
                f"world size must be positive, got "
                f"{self.world_width}x{self.world_height}"
            )
            raise ConfigError(msg)
        if self.simulation_length <= 0:
            msg = f"simulation_length must be positive, got {self.simulation_length}"
            raise ConfigError(msg)
        if self.slope_refresh_rate <= 0:
            msg = f"slope_refresh_rate must be positive, got {self.slope_refresh_rate}"
            raise ConfigError(msg)
        if self.max_height <= self.min_height:
            msg = (
                f"max_height ({self.max_height}) must exceed "
                f"min_height ({self.min_height})"
            )
            raise ConfigError(msg)
        if self.log_interval < 0:
            msg = f"log_interval must be >= 0, got {self.log_interval}"
            raise ConfigError(msg)

    @classmethod
    def from_yaml(cls, path: str | Path) -> SimulationConfig:
        """Load configuration from a YAML file.

        Keys missing from the file keep their dataclass defaults.

        Args:
            path: Path to the YAML config file.

        Returns:
            A populated SimulationConfig instance.

        Raises:
            FileNotFoundError: If the config file does not exist.
            ConfigError: If the file holds unknown keys or invalid values.
        """
        path = Path(path)
        with path.open("r") as f:
            data = yaml.safe_load(f) or {}

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            msg = f"unknown config keys in {path}: {', '.join(unknown)}"
            raise ConfigError(msg)

        return cls(**data)
