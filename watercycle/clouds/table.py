"""CloudTable — at most one cloud per grid coordinate.

Clouds are keyed by the integer coordinate they sit over.  Inserting
onto an occupied coordinate merges the two clouds in place of either.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from watercycle.clouds.cloud import Cloud, Coord, merge_clouds


@dataclass
class CloudTable:
    """Sparse mapping from grid coordinate to Cloud.

    Attributes:
        clouds: The live clouds keyed by ``(x, y)``.
    """

    clouds: dict[Coord, Cloud] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.clouds)

    def __contains__(self, coord: object) -> bool:
        return coord in self.clouds

    def __iter__(self) -> Iterator[tuple[Coord, Cloud]]:
        return iter(self.clouds.items())

    def get(self, coord: Coord) -> Cloud | None:
        """Return the cloud over ``coord``, if any."""
        return self.clouds.get(coord)

    def insert_or_merge(self, coord: Coord, cloud: Cloud) -> Cloud:
        """Place ``cloud`` at ``coord``, merging with any cloud already there.

        Returns:
            The cloud now stored at ``coord``.
        """
        existing = self.clouds.get(coord)
        stored = cloud if existing is None else merge_clouds(existing, cloud)
        self.clouds[coord] = stored
        return stored

    def pop(self, coord: Coord) -> Cloud:
        """Remove and return the cloud at ``coord``.

        Raises:
            KeyError: If no cloud sits at ``coord``.
        """
        return self.clouds.pop(coord)

    def snapshot(self) -> list[Coord]:
        """Occupied coordinates in sorted order, safe to iterate while mutating."""
        return sorted(self.clouds)

    def total_mass(self) -> float:
        """Water carried by all clouds."""
        return sum(cloud.mass for cloud in self.clouds.values())

    @classmethod
    def from_arrivals(
        cls,
        arrivals: Iterable[tuple[Coord, Coord, Cloud]],
    ) -> CloudTable:
        """Build a table from clouds that moved this tick.

        Args:
            arrivals: ``(source, target, cloud)`` triples, one per cloud
                that is still on the grid.

        Returns:
            A table where clouds sharing a target have been merged in
            order of their source coordinate, so the result does not
            depend on the order the moves were computed in.
        """
        table = cls()
        for _, target, cloud in sorted(arrivals, key=lambda a: (a[1], a[0])):
            table.insert_or_merge(target, cloud)
        return table
