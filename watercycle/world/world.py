"""World grid — the spatial container for the simulation.

The World owns exactly one Cell per coordinate for the lifetime of a
run.  Cells are replaced (never removed) as the hydrology update
produces their next state.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray

from watercycle.world.cell import Cell


@dataclass
class World:
    """A dense 2D grid of cells.

    Attributes:
        width: Number of columns in the grid.
        height: Number of rows in the grid.
        cells: 2D list of Cell objects indexed as ``cells[y][x]``.
    """

    width: int
    height: int
    cells: list[list[Cell]] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Initialise the grid with flat, dry cells at elevation zero."""
        self.cells = [
            [Cell(x=x, y=y, elevation=0.0) for x in range(self.width)]
            for y in range(self.height)
        ]

    def in_bounds(self, x: int, y: int) -> bool:
        """Return True if ``(x, y)`` is a grid coordinate."""
        return 0 <= x < self.width and 0 <= y < self.height

    def cell_at(self, x: int, y: int) -> Cell:
        """Return the cell at grid coordinates ``(x, y)``.

        Args:
            x: Column index.
            y: Row index.

        Raises:
            IndexError: If coordinates are out of bounds.
        """
        if not self.in_bounds(x, y):
            msg = f"({x}, {y}) out of bounds for {self.width}x{self.height}"
            raise IndexError(msg)
        return self.cells[y][x]

    def set_cell(self, cell: Cell) -> None:
        """Replace the cell stored at ``cell``'s own coordinate.

        Raises:
            IndexError: If the cell's coordinate is out of bounds.
        """
        if not self.in_bounds(cell.x, cell.y):
            msg = f"({cell.x}, {cell.y}) out of bounds for {self.width}x{self.height}"
            raise IndexError(msg)
        self.cells[cell.y][cell.x] = cell

    def iter_coords(self) -> Iterator[tuple[int, int]]:
        """Yield every coordinate, columns outermost (x-major order)."""
        for x in range(self.width):
            for y in range(self.height):
                yield x, y

    def elevations(self) -> NDArray[np.float64]:
        """Return current elevations as an array indexed ``[y, x]``."""
        return np.array(
            [[cell.elevation for cell in row] for row in self.cells],
            dtype=np.float64,
        )

    def samples(self) -> Iterator[tuple[int, int, float]]:
        """Yield ``(x, y, elevation)`` for every coordinate."""
        for x, y in self.iter_coords():
            yield x, y, self.cells[y][x].elevation
