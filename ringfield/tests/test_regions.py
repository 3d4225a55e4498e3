"""Tests for mapping world positions onto ring regions."""
from __future__ import annotations

import math

import pytest

from ringfield.src.world.regions import RegionId, RegionIndex, region_key
from ringfield.src.world.rings import RingCatalog


def test_quadrants_follow_offset_signs() -> None:
    index = RegionIndex()
    assert index.region_for((10.0, 0.0, 10.0)) == RegionId(0, 0)
    assert index.region_for((10.0, 0.0, -10.0)) == RegionId(0, 1)
    assert index.region_for((-10.0, 0.0, -10.0)) == RegionId(0, 2)
    assert index.region_for((-10.0, 0.0, 10.0)) == RegionId(0, 3)
    assert index.region_for((0.0, 0.0, 0.0)) == RegionId(0, 0)


def test_every_position_lands_inside_its_ring() -> None:
    index = RegionIndex()
    catalog = index.catalog
    for x in range(-2000, 2001, 173):
        for z in range(-2000, 2001, 211):
            region = index.region_for((float(x), 0.0, float(z)))
            ring = catalog.ring_definition(region.ring)
            distance = math.hypot(x, z)
            assert ring.inner_radius <= distance < ring.outer_radius


def test_region_center_round_trips() -> None:
    index = RegionIndex()
    for ring in range(8):
        for quadrant in range(4):
            region = RegionId(ring, quadrant)
            center = index.region_center(region)
            assert index.region_for(center) == region
            distance = math.hypot(center[0], center[2])
            assert math.isclose(distance, index.catalog.ring_definition(ring).mid_radius)


def test_region_key_and_difficulty() -> None:
    index = RegionIndex()
    region = RegionId(2, 3)
    assert region.key == "r2_q3"
    assert region_key(region) == region.key
    assert index.difficulty_for(region) == 3.0


def test_region_id_validates_components() -> None:
    with pytest.raises(ValueError):
        RegionId(0, 4)
    with pytest.raises(ValueError):
        RegionId(-1, 0)


def test_active_regions_start_with_player_region() -> None:
    index = RegionIndex()
    regions = index.active_regions((25.0, 0.0, 25.0), 200.0)
    assert regions[0] == RegionId(0, 0)
    assert len(regions) == len(set(regions))
    assert regions[1:] == sorted(regions[1:])
    assert all(region.ring <= 1 for region in regions)
    assert RegionId(1, 0) in regions


def test_active_regions_filter_by_render_distance() -> None:
    index = RegionIndex()
    player = (25.0, 0.0, 25.0)
    assert index.active_regions(player, 0.0) == [RegionId(0, 0)]
    for region in index.active_regions(player, 90.0)[1:]:
        cx, _, cz = index.region_center(region)
        assert math.hypot(cx - player[0], cz - player[2]) <= 90.0


def test_transition_near_boundary_blends_toward_neighbor() -> None:
    index = RegionIndex()
    info = index.transition_info((49.0, 0.0, 0.0))
    assert info.in_transition
    assert info.from_ring == 0
    assert info.to_ring == 1
    assert 0.9 < info.blend_factor <= 1.0
    # //1.- Blending never changes which region owns the position.
    assert index.region_for((49.0, 0.0, 0.0)).ring == 0


def test_transition_inside_ring_and_hysteresis() -> None:
    index = RegionIndex()
    deep = index.transition_info((25.0, 0.0, 0.0))
    assert not deep.in_transition
    assert deep.blend_factor == 0.0
    faint = index.transition_info((61.5, 0.0, 0.0))
    assert not faint.in_transition
    assert faint.blend_factor == 0.0


def test_custom_catalog_is_used() -> None:
    catalog = RingCatalog()
    index = RegionIndex(catalog)
    index.region_for((5000.0, 0.0, 0.0))
    assert catalog.known_ring_count > 4
