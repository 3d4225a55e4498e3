"""Deterministic smooth noise helpers used throughout ringfield."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

_NORMALIZE_2D = math.sqrt(2.0)


@dataclass(frozen=True)
class NoiseConfig:
    seed: int
    frequency: float
    amplitude: float = 1.0


# -- Hash helpers ---------------------------------------------------------

def _hash2(seed: int, x: int, y: int) -> int:
    value = seed ^ (x * 374761393) ^ (y * 668265263)
    value = (value ^ (value >> 13)) * 1274126177
    value = value ^ (value >> 16)
    return value & 0xFFFFFFFF


def _gradient(seed: int, x: int, y: int) -> Tuple[float, float]:
    # Map the hash onto the unit circle so every lattice gradient has length one.
    angle = _hash2(seed, x, y) / 4294967296.0 * math.tau
    return math.cos(angle), math.sin(angle)


def _fade(t: float) -> float:
    return t * t * t * (t * (t * 6 - 15) + 10)


def _lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


# -- Noise evaluators -----------------------------------------------------

def noise2(seed: int, x: float, y: float) -> float:
    """Classic Perlin-style gradient noise in 2D, scaled to ``[-1, 1]``."""

    xi = math.floor(x)
    yi = math.floor(y)

    xf = x - xi
    yf = y - yi

    dot_vals = {}
    for dx in (0, 1):
        for dy in (0, 1):
            gx, gy = _gradient(seed, xi + dx, yi + dy)
            dot_vals[(dx, dy)] = (xf - dx) * gx + (yf - dy) * gy

    u = _fade(xf)
    v = _fade(yf)

    x1 = _lerp(dot_vals[(0, 0)], dot_vals[(1, 0)], u)
    x2 = _lerp(dot_vals[(0, 1)], dot_vals[(1, 1)], u)

    value = _lerp(x1, x2, v) * _NORMALIZE_2D
    return max(-1.0, min(1.0, value))


class NoiseLayer:
    """A seeded noise generator bound to a fixed spatial frequency."""

    def __init__(self, config: NoiseConfig) -> None:
        self._config = config

    @property
    def config(self) -> NoiseConfig:
        return self._config

    def sample(self, x: float, z: float, frequency_scale: float = 1.0) -> float:
        frequency = self._config.frequency * frequency_scale
        return noise2(self._config.seed, x * frequency, z * frequency) * self._config.amplitude
