"""Seed configuration for deterministic region generation."""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Dict, Optional

import numpy as np

_MASK64 = (1 << 64) - 1

# //1.- Independent random streams per region so stages never steal each other's draws.
STREAM_PLAN = 1
STREAM_PLACEMENT = 2
STREAM_ZONES = 3


# //2.- Fold the world seed and region coordinates into one 64-bit integer.
def mix_region_seed(world_seed: int, ring: int, quadrant: int, stream: int) -> int:
    value = (int(world_seed) * 0x9E3779B185EBCA87) & _MASK64
    value ^= (int(ring) << 32) & _MASK64
    value ^= (int(quadrant) << 16) & _MASK64
    value ^= int(stream) & 0xFFFF
    value = ((value ^ (value >> 31)) * 0xBF58476D1CE4E5B9) & _MASK64
    return value ^ (value >> 29)


# //3.- Dataclass encapsulating the world seed for reproducibility.
@dataclass(frozen=True)
class WorldSeeds:
    """Seeds driving every stochastic decision of region generation."""

    world_seed: int = 0
    noise_seed: Optional[int] = None

    @property
    def resolved_noise_seed(self) -> int:
        return self.world_seed if self.noise_seed is None else self.noise_seed

    # //4.- Provide helper to build seeds from a mapping when available.
    @classmethod
    def from_mapping(cls, payload: Optional[Dict[str, int]] = None) -> "WorldSeeds":
        if not payload:
            return cls()
        noise_seed = payload.get("noise_seed")
        return cls(
            world_seed=int(payload.get("world_seed", 0)),
            noise_seed=None if noise_seed is None else int(noise_seed),
        )

    # //5.- Allow overriding seeds through environment variables for integration tests.
    @classmethod
    def from_environment(cls, prefix: str = "RINGFIELD") -> "WorldSeeds":
        world = os.getenv(f"{prefix}_WORLD_SEED")
        noise = os.getenv(f"{prefix}_NOISE_SEED")
        mapping: Dict[str, int] = {}
        if world is not None:
            mapping["world_seed"] = int(world)
        if noise is not None:
            mapping["noise_seed"] = int(noise)
        return cls.from_mapping(mapping)

    # //6.- Derive a numpy generator dedicated to one region and pipeline stage.
    def region_generator(self, ring: int, quadrant: int, stream: int) -> np.random.Generator:
        return np.random.default_rng(mix_region_seed(self.world_seed, ring, quadrant, stream))


# //7.- Canonical accessor used by the demo harness and host applications.
def load_world_seeds(
    mapping: Optional[Dict[str, int]] = None,
    *,
    env_prefix: str = "RINGFIELD",
) -> WorldSeeds:
    if mapping is not None:
        return WorldSeeds.from_mapping(mapping)
    return WorldSeeds.from_environment(prefix=env_prefix)
