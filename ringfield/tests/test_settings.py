"""Tests for distribution configuration loading and validation."""
from __future__ import annotations

import json

import pytest

from ringfield.src.generation.config import WorldSeeds, load_world_seeds, mix_region_seed
from ringfield.src.generation.errors import ConfigurationError
from ringfield.src.generation.features import SizeCategory
from ringfield.src.generation.settings import (
    BaseRing,
    CorridorSettings,
    DistributionSettings,
    PlacementSettings,
    RingSettings,
    ZoneSettings,
    load_distribution_settings,
)


# //1.- Ensure configuration loader parses bundled JSON files correctly.
def test_bundled_settings_match_defaults() -> None:
    settings = load_distribution_settings()
    assert settings == DistributionSettings()
    assert settings.rings.growth_factor == 1.3
    assert settings.placement.spacing_for(SizeCategory.TINY) == 2.0
    assert settings.placement.spacing_for(SizeCategory.MASSIVE) == 8.0
    assert settings.zones.grid_resolution == 10.0
    assert settings.corridors.max_connection_distance == 50.0


def test_partial_config_directory_keeps_defaults(tmp_path) -> None:
    (tmp_path / "rings.json").write_text(json.dumps({"growth_factor": 1.5}), encoding="utf-8")
    (tmp_path / "zones.json").write_text(json.dumps({"corridors": {"min_width": 3.0}}), encoding="utf-8")
    settings = load_distribution_settings(str(tmp_path))
    assert settings.rings.growth_factor == 1.5
    assert settings.rings.base_rings == RingSettings().base_rings
    assert settings.corridors.min_width == 3.0
    assert settings.corridors.max_width == 6.0
    assert settings.placement == PlacementSettings()


def test_unknown_keys_are_rejected(tmp_path) -> None:
    (tmp_path / "noise.json").write_text(json.dumps({"densty_scale": 0.01}), encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_distribution_settings(str(tmp_path))


def test_incomplete_spacing_table_is_rejected(tmp_path) -> None:
    (tmp_path / "placement.json").write_text(json.dumps({"min_spacing": {"tiny": 2.0}}), encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_distribution_settings(str(tmp_path))


@pytest.mark.parametrize(
    "overrides",
    [
        {"rings": RingSettings(growth_factor=1.0)},
        {"rings": RingSettings(growth_factor=0.8)},
        {"rings": RingSettings(base_landmark_chance=0.5, max_landmark_chance=0.3)},
        {"rings": RingSettings(landmark_chance_step=-0.01)},
        {"rings": RingSettings(base_rings=(BaseRing(0.0, 50.0, 1.0), BaseRing(50.0, 40.0, 2.0)))},
        {"placement": PlacementSettings(min_spacing=(2.0, 0.0, 4.5, 6.0, 8.0))},
        {"placement": PlacementSettings(max_attempts=0)},
        {"zones": ZoneSettings(entry_directions=1)},
        {"corridors": CorridorSettings(min_width=7.0, max_width=6.0)},
        {"corridors": CorridorSettings(max_point_attempts=0)},
    ],
)
def test_invalid_settings_fail_fast(overrides) -> None:
    with pytest.raises(ConfigurationError):
        DistributionSettings(**overrides)


def test_world_seeds_from_mapping_and_environment(monkeypatch) -> None:
    assert load_world_seeds({"world_seed": 3}).world_seed == 3
    assert WorldSeeds.from_mapping(None) == WorldSeeds()
    monkeypatch.setenv("RINGFIELD_WORLD_SEED", "9")
    monkeypatch.setenv("RINGFIELD_NOISE_SEED", "11")
    seeds = load_world_seeds()
    assert seeds.world_seed == 9
    assert seeds.resolved_noise_seed == 11
    assert WorldSeeds(world_seed=4).resolved_noise_seed == 4


def test_region_generators_are_independent_and_reproducible() -> None:
    seeds = WorldSeeds(world_seed=42)
    first = seeds.region_generator(1, 2, 1).random(4)
    again = seeds.region_generator(1, 2, 1).random(4)
    other = seeds.region_generator(1, 3, 1).random(4)
    assert list(first) == list(again)
    assert list(first) != list(other)
    assert mix_region_seed(42, 1, 2, 1) != mix_region_seed(42, 1, 2, 2)
    assert 0 <= mix_region_seed(-5, 100, 3, 3) < 2 ** 64
