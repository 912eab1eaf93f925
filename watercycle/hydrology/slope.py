"""Slope field — steepest-descent routing directions for every cell.

Each coordinate gets a SlopeVector pointing at the neighbour its runoff
and sediment flow to, along with the elevation drop in that direction.
The field is rebuilt on a schedule and is allowed to go stale between
rebuilds.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from watercycle.world.world import World


@dataclass(frozen=True)
class SlopeVector:
    """A routing direction plus the elevation drop along it.

    Attributes:
        dx: Column offset to the downhill neighbour (-1, 0 or 1).
        dy: Row offset to the downhill neighbour (-1, 0 or 1).
        drop: Elevation lost moving along the offset (>= 0 once stored).
    """

    dx: int
    dy: int
    drop: float

    def __neg__(self) -> SlopeVector:
        return SlopeVector(-self.dx, -self.dy, -self.drop)

    @property
    def is_zero(self) -> bool:
        """True when there is no routing direction."""
        return self.dx == 0 and self.dy == 0


ZERO_SLOPE = SlopeVector(0, 0, 0.0)


def steepest(*candidates: SlopeVector) -> SlopeVector:
    """Return the candidate with the largest drop.

    Only a strictly larger drop replaces an earlier candidate, so ties
    keep whichever came first.
    """
    best = candidates[0]
    for candidate in candidates[1:]:
        if candidate.drop > best.drop:
            best = candidate
    return best


@dataclass
class SlopeField:
    """Per-coordinate routing table.

    Attributes:
        width: Grid columns (must match World).
        height: Grid rows (must match World).
        vectors: SlopeVectors indexed as ``vectors[y][x]``.
    """

    width: int
    height: int
    vectors: list[list[SlopeVector]] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Start with every coordinate unrouted."""
        self.vectors = [[ZERO_SLOPE] * self.width for _ in range(self.height)]

    def at(self, x: int, y: int) -> SlopeVector:
        """Return the SlopeVector stored for ``(x, y)``."""
        return self.vectors[y][x]

    def target(self, x: int, y: int) -> tuple[int, int] | None:
        """Return the coordinate that ``(x, y)`` routes into.

        An unrouted cell targets itself.  ``None`` means the direction
        leads off the grid.
        """
        vec = self.vectors[y][x]
        tx, ty = x + vec.dx, y + vec.dy
        if 0 <= tx < self.width and 0 <= ty < self.height:
            return (tx, ty)
        return None


def compute_slope_field(world: World) -> SlopeField:
    """Build a SlopeField from the world's current elevations.

    Every coordinate except the last row and column contributes three
    edges (right, up, diagonal).  The edge's own cell keeps the steepest
    of its current vector, the three edges and zero; each neighbour keeps
    the steepest of its current vector, the reversed edge and zero.
    Flat or uphill-only cells stay unrouted.

    Args:
        world: The grid to derive slopes from.

    Returns:
        A complete routing table for ``world``.
    """
    field_ = SlopeField(width=world.width, height=world.height)
    v = field_.vectors
    cells = world.cells

    for x in range(world.width - 1):
        for y in range(world.height - 1):
            z = cells[y][x].elevation
            right = SlopeVector(1, 0, z - cells[y][x + 1].elevation)
            up = SlopeVector(0, 1, z - cells[y + 1][x].elevation)
            diagonal = SlopeVector(1, 1, z - cells[y + 1][x + 1].elevation)

            v[y][x] = steepest(v[y][x], right, up, diagonal, ZERO_SLOPE)
            v[y][x + 1] = steepest(v[y][x + 1], -right, ZERO_SLOPE)
            v[y + 1][x] = steepest(v[y + 1][x], -up, ZERO_SLOPE)
            v[y + 1][x + 1] = steepest(v[y + 1][x + 1], -diagonal, ZERO_SLOPE)

    return field_
