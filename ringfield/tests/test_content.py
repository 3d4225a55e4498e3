"""Tests for biome-aware distribution planning."""
from __future__ import annotations

import math

import numpy as np

from ringfield.src.generation.config import WorldSeeds
from ringfield.src.generation.content import (
    FORMATION_SPECS,
    ContentDistributor,
    adjust_for_formation,
    biome_for_quadrant,
    formation_influence,
    sample_size,
)
from ringfield.src.generation.features import Formation, FormationKind, SizeCategory
from ringfield.src.generation.noise_field import NoiseField
from ringfield.src.world.regions import RegionId, RegionIndex


def _distributor(seed: int = 42) -> ContentDistributor:
    index = RegionIndex()
    return ContentDistributor(index, NoiseField(seed), WorldSeeds(world_seed=seed))


def test_biomes_follow_quadrants() -> None:
    names = [biome_for_quadrant(quadrant).name for quadrant in range(4)]
    assert names == ["ancient_riverbed", "hill_country", "broken_plains", "chaotic_terrain"]
    assert biome_for_quadrant(3).chaotic
    assert not biome_for_quadrant(0).chaotic


def test_base_counts_follow_ring_table() -> None:
    distributor = _distributor()
    assert [distributor.base_count(RegionId(ring, 0)) for ring in range(4)] == [8, 20, 45, 35]
    assert distributor.base_count(RegionId(4, 0)) == 40
    assert distributor.base_count(RegionId(30, 2)) == 105


def test_total_count_stays_near_base_count() -> None:
    distributor = _distributor()
    for quadrant in range(4):
        plan = distributor.plan(RegionId(0, quadrant))
        assert 7 <= plan.total_count <= 9
    plan = distributor.plan(RegionId(2, 1))
    assert 38 <= plan.total_count <= 52


def test_plan_is_deterministic_per_seed() -> None:
    region = RegionId(1, 2)
    assert _distributor(5).plan(region) == _distributor(5).plan(region)


def test_size_distribution_is_normalized() -> None:
    distributor = _distributor()
    for ring in range(6):
        for quadrant in range(4):
            plan = distributor.plan(RegionId(ring, quadrant))
            assert math.isclose(sum(plan.size_distribution.values()), 1.0)
            assert all(weight >= 0.0 for weight in plan.size_distribution.values())
    ring_zero = distributor.plan(RegionId(0, 1))
    assert ring_zero.size_distribution[SizeCategory.MASSIVE] == 0.0
    assert ring_zero.size_distribution[SizeCategory.TINY] > ring_zero.size_distribution[SizeCategory.LARGE]


def test_formations_respect_biome_and_geometry() -> None:
    distributor = _distributor()
    index = RegionIndex()
    for quadrant in range(4):
        region = RegionId(2, quadrant)
        center = index.region_center(region)
        plan = distributor.plan(region, center)
        assert len(plan.formations) >= max(1, plan.total_count // 15)
        assert len(plan.formations) <= max(1, plan.total_count // 15) + 1
        for formation in plan.formations:
            assert formation.kind in plan.biome.formation_kinds
            distance = math.hypot(formation.center[0] - center[0], formation.center[2] - center[2])
            assert 20.0 - 1e-9 <= distance <= 60.0 + 1e-9
            base_radius, favored = FORMATION_SPECS[formation.kind]
            assert base_radius <= formation.radius <= base_radius + 10.0
            assert 0.5 <= formation.intensity <= 1.0
            assert formation.favored_sizes == favored


def test_formation_influence_fades_with_distance() -> None:
    formation = Formation(
        kind=FormationKind.OUTCROP,
        center=(0.0, 0.0, 0.0),
        radius=10.0,
        intensity=1.0,
        favored_sizes=frozenset({SizeCategory.LARGE}),
    )
    strongest, influence = formation_influence((5.0, 0.0, 0.0), [formation])
    assert strongest is formation
    assert math.isclose(influence, 0.5)
    assert formation_influence((9.5, 0.0, 0.0), [formation]) == (None, 0.0)
    assert formation_influence((50.0, 0.0, 0.0), [formation]) == (None, 0.0)


def test_adjust_for_formation_boosts_favored_sizes() -> None:
    formation = Formation(
        kind=FormationKind.AMPHITHEATER,
        center=(0.0, 0.0, 0.0),
        radius=35.0,
        intensity=1.0,
        favored_sizes=frozenset({SizeCategory.LARGE, SizeCategory.MASSIVE}),
    )
    uniform = {category: 0.2 for category in SizeCategory.ordered()}
    adjusted = adjust_for_formation(uniform, formation, 0.5)
    assert math.isclose(sum(adjusted.values()), 1.0)
    assert math.isclose(adjusted[SizeCategory.LARGE], 2.0 * adjusted[SizeCategory.TINY])
    assert adjust_for_formation(uniform, None, 0.0) == uniform


def test_sample_size_skips_zero_weights() -> None:
    rng = np.random.default_rng(1)
    distribution = {category: 0.0 for category in SizeCategory.ordered()}
    distribution[SizeCategory.TINY] = 0.5
    distribution[SizeCategory.SMALL] = 0.5
    drawn = {sample_size(rng, distribution) for _ in range(200)}
    assert drawn == {SizeCategory.TINY, SizeCategory.SMALL}
