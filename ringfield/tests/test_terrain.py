"""Tests for the default terrain height collaborator."""
from __future__ import annotations

import math

from ringfield.src.terrain.sampler import TerrainSampler, estimate_slope, flat_terrain


def test_sampler_deterministic_across_instances() -> None:
    sampler_a = TerrainSampler(1337)
    sampler_b = TerrainSampler(1337)
    assert sampler_a(120.5, -42.25) == sampler_b(120.5, -42.25)
    assert sampler_a.height(120.5, -42.25) == sampler_a(120.5, -42.25)


def test_sampler_heights_are_finite_and_gentle() -> None:
    sampler = TerrainSampler(7)
    for x in range(-500, 501, 97):
        for z in range(-500, 501, 89):
            height = sampler(float(x), float(z))
            assert math.isfinite(height)
            if not sampler.is_water(float(x), float(z)):
                assert height > sampler.base_height - 9.0
            assert estimate_slope(sampler, float(x), float(z)) < math.radians(35.0)


def test_seeds_decorrelate_terrain() -> None:
    sampler_a = TerrainSampler(1)
    sampler_b = TerrainSampler(2)
    points = [(float(x), float(x) * 0.7) for x in range(0, 1000, 111)]
    assert any(sampler_a(x, z) != sampler_b(x, z) for x, z in points)


def test_estimate_slope_matches_plane_angle() -> None:
    incline = math.tan(math.radians(30.0))
    slope = estimate_slope(lambda x, z: x * incline, 10.0, 4.0)
    assert math.isclose(slope, math.radians(30.0), rel_tol=1e-9)
    assert estimate_slope(flat_terrain(3.0), 0.0, 0.0) == 0.0
    assert flat_terrain(3.0)(123.0, -7.0) == 3.0
