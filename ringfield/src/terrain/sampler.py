"""Procedural ground height sampler used as the default height callback."""
from __future__ import annotations

import math
from typing import Callable

HeightFunction = Callable[[float, float], float]


# //1.- Deterministic value noise evaluated on an integer lattice.
class _GradientNoise:
    def __init__(self, seed: int, frequency: float, amplitude: float) -> None:
        self._seed = int(seed)
        self._frequency = float(frequency)
        self._amplitude = float(amplitude)

    @property
    def amplitude(self) -> float:
        return self._amplitude

    def _hash(self, ix: int, iz: int) -> float:
        value = (self._seed * 374761393 + ix * 668265263 + iz * 2147483647) & 0xFFFFFFFF
        value ^= value >> 13
        value = (value * 1274126177) & 0xFFFFFFFF
        value ^= value >> 16
        return value / 0xFFFFFFFF

    def sample(self, x: float, z: float) -> float:
        scaled_x = x * self._frequency
        scaled_z = z * self._frequency
        ix = math.floor(scaled_x)
        iz = math.floor(scaled_z)
        fx = scaled_x - ix
        fz = scaled_z - iz
        # Smooth the lattice blend so slopes stay continuous across cells.
        fx = fx * fx * (3.0 - 2.0 * fx)
        fz = fz * fz * (3.0 - 2.0 * fz)
        x0 = self._hash(ix, iz) * (1 - fx) + self._hash(ix + 1, iz) * fx
        x1 = self._hash(ix, iz + 1) * (1 - fx) + self._hash(ix + 1, iz + 1) * fx
        value = x0 * (1 - fz) + x1 * fz
        return (value * 2.0 - 1.0) * self._amplitude


# //2.- Slope in radians from central differences of any height callback.
def estimate_slope(height_fn: HeightFunction, x: float, z: float, epsilon: float = 0.5) -> float:
    h_x1 = height_fn(x + epsilon, z)
    h_x0 = height_fn(x - epsilon, z)
    h_z1 = height_fn(x, z + epsilon)
    h_z0 = height_fn(x, z - epsilon)
    gradient_x = (h_x1 - h_x0) / (2.0 * epsilon)
    gradient_z = (h_z1 - h_z0) / (2.0 * epsilon)
    return math.atan(math.hypot(gradient_x, gradient_z))


# //3.- Constant height callback, handy for isolating placement rules in tests.
def flat_terrain(height: float = 1.0) -> HeightFunction:
    def _height(x: float, z: float) -> float:
        return height

    return _height


# //4.- Layered rolling hills with occasional lake basins below the valid height.
class TerrainSampler:
    def __init__(
        self,
        seed: int,
        *,
        base_height: float = 12.0,
        lake_depth: float = 8.0,
        lake_threshold: float = 0.6,
    ) -> None:
        self._seed = int(seed)
        self._base_height = float(base_height)
        self._lake_depth = float(lake_depth)
        self._lake_threshold = float(lake_threshold)
        self._height_layers = (
            _GradientNoise(seed * 5 + 1, 0.004, 6.0),
            _GradientNoise(seed * 7 + 2, 0.015, 2.0),
            _GradientNoise(seed * 11 + 3, 0.06, 0.4),
        )
        self._lake_noise = _GradientNoise(seed * 17 + 5, 0.003, 1.0)

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def base_height(self) -> float:
        return self._base_height

    def _lake_factor(self, x: float, z: float) -> float:
        value = self._lake_noise.sample(x, z)
        if value <= self._lake_threshold:
            return 0.0
        return (value - self._lake_threshold) / (1.0 - self._lake_threshold)

    def height(self, x: float, z: float) -> float:
        ground = self._base_height + sum(layer.sample(x, z) for layer in self._height_layers)
        return ground - self._lake_factor(x, z) * self._lake_depth

    def is_water(self, x: float, z: float) -> bool:
        return self._lake_factor(x, z) > 0.0

    def __call__(self, x: float, z: float) -> float:
        return self.height(x, z)
