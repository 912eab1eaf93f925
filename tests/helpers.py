"""Test doubles and grid builders shared across test modules."""

from __future__ import annotations

from dataclasses import replace

from watercycle.world.world import World


class ConstantRng:
    """Stand-in for ``Generator`` whose every draw returns ``value``."""

    def __init__(self, value: float) -> None:
        self.value = value
        self.draws = 0

    def random(self) -> float:
        self.draws += 1
        return self.value


def make_world(elevations: list[list[float]], **cell_fields: float) -> World:
    """Build a World from rows of elevations indexed ``[y][x]``."""
    height = len(elevations)
    width = len(elevations[0])
    world = World(width=width, height=height)
    for y, row in enumerate(elevations):
        for x, z in enumerate(row):
            world.set_cell(replace(world.cell_at(x, y), elevation=z, **cell_fields))
    return world


class SequenceRng:
    """Stand-in for ``Generator`` that returns ``values`` in order."""

    def __init__(self, values: list[float]) -> None:
        self.values = list(values)
        self.draws = 0

    def random(self) -> float:
        value = self.values[self.draws]
        self.draws += 1
        return value
