"""Ground height collaborators feeding the placement search."""
from .sampler import HeightFunction, TerrainSampler, estimate_slope, flat_terrain

__all__ = ["HeightFunction", "TerrainSampler", "estimate_slope", "flat_terrain"]
