"""Tests for watercycle.clouds.table — one cloud per coordinate."""

from itertools import permutations

import pytest

from watercycle.clouds.cloud import Cloud
from watercycle.clouds.table import CloudTable


def _cloud(x: float, y: float, mass: float) -> Cloud:
    return Cloud(position=(x, y, 40.0), velocity=(0.1, 0.2, 0.0), mass=mass, volume=1.0)


class TestCloudTable:
    def test_insert_into_empty(self) -> None:
        table = CloudTable()
        cloud = _cloud(1.0, 1.0, 0.5)
        assert table.insert_or_merge((1, 1), cloud) == cloud
        assert (1, 1) in table
        assert len(table) == 1

    def test_insert_merges(self) -> None:
        table = CloudTable()
        table.insert_or_merge((2, 0), _cloud(2.0, 0.0, 0.5))
        stored = table.insert_or_merge((2, 0), _cloud(2.2, 0.2, 0.25))
        assert len(table) == 1
        assert stored.mass == 0.75
        assert stored.volume == 2.0
        assert table.get((2, 0)) == stored

    def test_pop(self) -> None:
        table = CloudTable()
        table.insert_or_merge((0, 3), _cloud(0.0, 3.0, 1.0))
        assert table.pop((0, 3)).mass == 1.0
        assert len(table) == 0
        with pytest.raises(KeyError):
            table.pop((0, 3))

    def test_snapshot_is_sorted_copy(self) -> None:
        table = CloudTable()
        for coord in [(3, 1), (0, 2), (1, 0)]:
            table.insert_or_merge(coord, _cloud(*map(float, coord), 0.1))
        keys = table.snapshot()
        assert keys == [(0, 2), (1, 0), (3, 1)]
        for key in keys:
            table.pop(key)
        assert len(table) == 0

    def test_total_mass(self) -> None:
        table = CloudTable()
        table.insert_or_merge((0, 0), _cloud(0.0, 0.0, 0.5))
        table.insert_or_merge((1, 0), _cloud(1.0, 0.0, 0.25))
        assert table.total_mass() == 0.75


class TestFromArrivals:
    def test_distinct_targets(self) -> None:
        table = CloudTable.from_arrivals(
            [
                ((0, 0), (1, 1), _cloud(1.0, 1.0, 0.2)),
                ((2, 2), (3, 3), _cloud(3.0, 3.0, 0.4)),
            ],
        )
        assert sorted(coord for coord, _ in table) == [(1, 1), (3, 3)]

    def test_merge_independent_of_arrival_order(self) -> None:
        arrivals = [
            ((0, 0), (2, 2), _cloud(1.6, 2.1, 0.2)),
            ((4, 1), (2, 2), _cloud(2.4, 1.9, 0.5)),
            ((1, 3), (2, 2), _cloud(2.0, 2.4, 0.9)),
        ]
        tables = [CloudTable.from_arrivals(order) for order in permutations(arrivals)]
        first = tables[0]
        assert len(first) == 1
        assert first.get((2, 2)).mass == pytest.approx(1.6)
        for table in tables[1:]:
            assert table.clouds == first.clouds
