"""Entry point for ``python -m watercycle``.

Loads a YAML config, builds the simulation engine and either runs it to
completion headless or opens a Pygame window to watch the terrain erode
and the clouds drift.
"""

from __future__ import annotations

import argparse
import dataclasses
import pathlib

from watercycle.simulation.config import ConfigError, SimulationConfig
from watercycle.simulation.engine import SimulationEngine

_DEFAULT_CONFIG = (
    pathlib.Path(__file__).resolve().parent.parent / "config" / "default.yaml"
)


def load_config(args: argparse.Namespace) -> SimulationConfig:
    """Read the YAML config and apply command-line overrides."""
    config = (
        SimulationConfig.from_yaml(args.config)
        if args.config.exists()
        else SimulationConfig()
    )
    overrides = {}
    if args.ticks is not None:
        overrides["simulation_length"] = args.ticks
    if args.seed is not None:
        overrides["seed"] = args.seed
    return dataclasses.replace(config, **overrides)


def main() -> None:
    """Parse CLI args, create engine, run or launch renderer."""
    parser = argparse.ArgumentParser(
        prog="watercycle",
        description="Water cycle - terrain erosion and cloud simulator",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=pathlib.Path,
        default=_DEFAULT_CONFIG,
        help="Path to YAML config file (default: config/default.yaml)",
    )
    parser.add_argument(
        "--ticks",
        type=int,
        default=None,
        help="Override simulation_length from the config",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Override the random seed from the config",
    )
    parser.add_argument(
        "--headless",
        action="store_true",
        help="Run to completion without opening a window",
    )
    parser.add_argument(
        "--cell-size",
        type=int,
        default=8,
        help="Pixel size per grid cell (default: 8)",
    )
    parser.add_argument(
        "--fps",
        type=int,
        default=30,
        help="Target frames per second (default: 30)",
    )
    parser.add_argument(
        "--speed",
        type=float,
        default=10.0,
        help="Simulation ticks per second (default: 10)",
    )
    args = parser.parse_args()

    try:
        config = load_config(args)
    except ConfigError as exc:
        parser.error(str(exc))

    engine = SimulationEngine(config=config)

    if args.headless:
        engine.run()
        return

    from watercycle.ui.pygame_client import HeightmapRenderer

    renderer = HeightmapRenderer(
        engine=engine,
        cell_size=args.cell_size,
        ticks_per_second=args.speed,
    )
    renderer.run(fps=args.fps)


if __name__ == "__main__":
    main()
