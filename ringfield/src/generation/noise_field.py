"""Layered geological noise biasing density, direction and pose."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from ...noise import NoiseConfig, NoiseLayer
from ...vector import Vector2, _to_vector
from .settings import NoiseSettings

_MIN_DENSITY = 0.1
_MAX_DENSITY = 3.0

# //1.- Seed offsets separating the independent noise layers.
_DENSITY_OFFSET = 0
_BIAS_X_OFFSET = 100
_BIAS_Z_OFFSET = 200
_HOTSPOT_OFFSET = 300
_TRANSITION_OFFSET = 400
_POSE_OFFSET = 500

_ORGANIC_OCTAVES: Tuple[Tuple[float, float], ...] = ((0.002, 0.6), (0.008, 0.3), (0.02, 0.1))


# //2.- Ephemeral per-query description of the local geology.
@dataclass(frozen=True)
class GeologicalField:
    density_multiplier: float
    bias: Vector2
    is_hotspot: bool
    is_valley: bool
    transition_weight: float


class NoiseField:
    """Read-only field sampler; every method is a pure function of its inputs."""

    def __init__(self, seed: int, settings: Optional[NoiseSettings] = None) -> None:
        self._seed = int(seed)
        self._settings = settings or NoiseSettings()
        base = self._seed
        s = self._settings
        self._density = NoiseLayer(NoiseConfig(base + _DENSITY_OFFSET, s.density_scale))
        self._bias_x = NoiseLayer(NoiseConfig(base + _BIAS_X_OFFSET, s.bias_scale))
        self._bias_z = NoiseLayer(NoiseConfig(base + _BIAS_Z_OFFSET, s.bias_scale))
        self._hotspot = NoiseLayer(NoiseConfig(base + _HOTSPOT_OFFSET, s.hotspot_scale))
        self._transition = NoiseLayer(NoiseConfig(base + _TRANSITION_OFFSET, s.transition_scale))
        self._pose = NoiseLayer(NoiseConfig(base + _POSE_OFFSET, s.pose_scale))

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def settings(self) -> NoiseSettings:
        return self._settings

    # //3.- Extra multiplier per ring: sparse near the origin, denser outward.
    def ring_modifier(self, ring_index: int) -> float:
        modifiers = self._settings.ring_density_modifiers
        if ring_index < len(modifiers):
            return modifiers[ring_index]
        last = len(modifiers) - 1
        return min(2.0, modifiers[last] + 0.05 * (ring_index - last))

    def sample(self, position: Iterable[float], ring_index: int) -> GeologicalField:
        x, _, z = _to_vector(position)
        s = self._settings
        # //4.- Two density octaves mapped from [-1, 1] onto [0.3, 1.8].
        raw = self._density.sample(x, z) + s.density_detail_weight * self._density.sample(x, z, 3.0)
        raw = max(-1.0, min(1.0, raw))
        density = 0.3 + (raw + 1.0) * 0.75
        # //5.- Hotspots concentrate features while valleys thin them out.
        hotspot_value = self._hotspot.sample(x, z)
        is_hotspot = hotspot_value > s.hotspot_threshold
        is_valley = hotspot_value < s.valley_threshold
        if is_hotspot:
            density *= s.hotspot_boost
        elif is_valley:
            density *= s.valley_damping
        density *= self.ring_modifier(ring_index)
        density = max(_MIN_DENSITY, min(_MAX_DENSITY, density))
        bias = (
            self._bias_x.sample(x, z) * s.bias_strength,
            self._bias_z.sample(x, z) * s.bias_strength,
        )
        transition = max(0.0, min(1.0, (self._transition.sample(x, z) + 1.0) * 0.5))
        return GeologicalField(
            density_multiplier=density,
            bias=bias,
            is_hotspot=is_hotspot,
            is_valley=is_valley,
            transition_weight=transition,
        )

    # //6.- Broad organic variation used to nudge per-region feature counts.
    def organic_factor(self, position: Iterable[float]) -> float:
        x, _, z = _to_vector(position)
        value = 0.0
        for frequency, weight in _ORGANIC_OCTAVES:
            value += self._density.sample(x, z, frequency / self._settings.density_scale) * weight
        return 1.0 + 0.8 * value

    # //7.- Offset applied to uniform candidates so they drift along the bias field.
    def displacement(self, position: Iterable[float], scale: float) -> Vector2:
        x, _, z = _to_vector(position)
        strength = self._settings.bias_strength * float(scale)
        return self._bias_x.sample(x, z) * strength, self._bias_z.sample(x, z) * strength

    # //8.- Low-frequency pose noise in [-1, 1]; nearby features share similar values.
    def pose_noise(self, position: Iterable[float], axis: int) -> float:
        x, _, z = _to_vector(position)
        offset = 1000.0 * (axis + 1)
        return self._pose.sample(x + offset, z - offset)

    def pose_unit(self, position: Iterable[float], axis: int) -> float:
        return (self.pose_noise(position, axis) + 1.0) * 0.5
