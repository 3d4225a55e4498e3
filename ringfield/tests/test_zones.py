"""Tests for discovery zone and corridor carving."""
from __future__ import annotations

import logging
import math

import numpy as np

from ringfield.src.generation.features import PlacementRecord, Rotation, SizeCategory
from ringfield.src.generation.zones import Clearing, ObstacleField, ZoneCarver, ZoneCategory
from ringfield.src.world.regions import RegionId, RegionIndex


def _rock(x: float, z: float) -> PlacementRecord:
    return PlacementRecord(
        position=(x, 1.0, z),
        size_category=SizeCategory.TINY,
        rotation=Rotation(0.0, 0.0, 0.0),
        scale=0.1,
    )


def _horizontal_distance(a, b):
    return math.sqrt((a[0] - b[0]) ** 2 + (a[2] - b[2]) ** 2)


def test_open_region_yields_large_separated_zones() -> None:
    index = RegionIndex()
    carver = ZoneCarver(index)
    region = RegionId(1, 0)
    zones, _ = carver.carve(region, index.region_center(region), 100.0, [])
    assert 1 <= len(zones) <= 6
    for position, zone in enumerate(zones):
        assert zone.id == f"zone_1_0_{position}"
        assert index.region_for(zone.center) == region
        assert zone.radius == 25.0
        assert zone.category in (ZoneCategory.SETTLEMENT, ZoneCategory.SCENIC)
        assert zone.accessibility == 1.0
        assert len(zone.entry_points) == 8
        assert zone.forced_entry_points == ()
        assert zone.metadata.terrain_type == "riverbed"
        assert zone.metadata.suitable_for_building
        assert zone.metadata.size_class == "large"
    for first in range(len(zones)):
        for second in range(first + 1, len(zones)):
            a, b = zones[first], zones[second]
            assert _horizontal_distance(a.center, b.center) >= a.radius + b.radius


def test_clearings_keep_threshold_distance_from_features() -> None:
    index = RegionIndex()
    carver = ZoneCarver(index)
    region = RegionId(1, 2)
    center = index.region_center(region)
    rocks = [_rock(center[0] + dx, center[2] + dz) for dx in (-30.0, 0.0, 30.0) for dz in (-30.0, 0.0, 30.0)]
    obstacles = ObstacleField(rocks)
    for clearing in carver.find_clearings(region, center, 100.0, obstacles):
        assert clearing.clearance >= 8.0
        assert clearing.radius == min(clearing.clearance, 25.0)
        assert obstacles.clearance(clearing.center) >= clearing.radius
        assert index.region_for(clearing.center) == region


def test_surrounded_zone_forces_fallback_entries(caplog) -> None:
    caplog.set_level(logging.WARNING)
    carver = ZoneCarver(RegionIndex())
    center = (100.0, 0.0, 100.0)
    rocks = [
        _rock(center[0] + math.cos(step * math.pi / 8) * 9.0, center[2] + math.sin(step * math.pi / 8) * 9.0)
        for step in range(16)
    ]
    zones = carver.build_zones(RegionId(1, 0), [Clearing(center, 9.0, 9.0)], ObstacleField(rocks))
    zone = zones[0]
    assert len(zone.entry_points) == 2
    assert zone.forced_entry_points == zone.entry_points
    assert zone.category is ZoneCategory.CACHE
    assert zone.accessibility == 0.2
    assert zone.nearby_feature_count == 16
    assert zone.metadata.size_class == "small"
    assert not zone.metadata.suitable_for_building
    assert "forcing" in caplog.text


def test_nearby_zones_are_linked_by_a_corridor() -> None:
    carver = ZoneCarver(RegionIndex())
    region = RegionId(1, 0)
    obstacles = ObstacleField([])
    zones = carver.build_zones(
        region,
        [Clearing((100.0, 0.0, 20.0), 10.0, 10.0), Clearing((130.0, 0.0, 20.0), 10.0, 10.0)],
        obstacles,
    )
    corridors = carver.build_corridors(region, zones, obstacles, np.random.default_rng(0))
    assert len(corridors) == 1
    corridor = corridors[0]
    assert corridor.id == "corridor_1_0_0"
    assert corridor.connects == ("zone_1_0_0", "zone_1_0_1")
    assert len(corridor.path) == 4
    assert corridor.path[0] == zones[0].center
    assert corridor.path[-1] == zones[1].center
    assert 4.0 <= corridor.width <= 6.0
    assert len(corridor.landmarks) <= 1
    for point in corridor.path[1:-1]:
        # //1.- Winding never exceeds the amplitude bound around the straight line.
        assert abs(point[2] - 20.0) <= 4.5 + 1e-9


def test_distant_zones_are_not_linked() -> None:
    carver = ZoneCarver(RegionIndex())
    region = RegionId(1, 0)
    obstacles = ObstacleField([])
    zones = carver.build_zones(
        region,
        [Clearing((100.0, 0.0, 20.0), 10.0, 10.0), Clearing((200.0, 0.0, 20.0), 10.0, 10.0)],
        obstacles,
    )
    assert carver.build_corridors(region, zones, obstacles, np.random.default_rng(0)) == []


def test_corridor_points_clear_obstacles() -> None:
    carver = ZoneCarver(RegionIndex())
    region = RegionId(1, 0)
    rocks = [_rock(100.0 + x, z) for x in range(6, 26, 2) for z in range(-8, 10, 2)]
    obstacles = ObstacleField(rocks)
    zones = carver.build_zones(
        region,
        [Clearing((100.0, 0.0, 0.0), 6.0, 6.0), Clearing((130.0, 0.0, 0.0), 6.0, 6.0)],
        obstacles,
    )
    for seed in range(5):
        for corridor in carver.build_corridors(region, zones, obstacles, np.random.default_rng(seed)):
            assert len(corridor.path) >= 3
            for point in corridor.path:
                assert obstacles.clearance(point) >= 5.0
