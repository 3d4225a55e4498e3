"""Structured loader and validation for distribution settings.

Every tunable of the pipeline lives in one of the frozen dataclasses below.
Defaults are usable as-is; ``load_distribution_settings`` overlays the JSON
files bundled under ``ringfield/config`` (or a caller supplied directory).
Validation happens once, at construction of the bundle, and raises
``ConfigurationError`` instead of clamping.
"""
from __future__ import annotations

import json
import math
import os
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Sequence, Tuple

from ...vector import Vector3
from .errors import ConfigurationError
from .features import SizeCategory


# //1.- A hand-authored ring used before procedural growth takes over.
@dataclass(frozen=True)
class BaseRing:
    inner_radius: float
    outer_radius: float
    difficulty: float


DEFAULT_BASE_RINGS: Tuple[BaseRing, ...] = (
    BaseRing(0.0, 50.0, 1.0),
    BaseRing(50.0, 150.0, 2.0),
    BaseRing(150.0, 300.0, 3.0),
    BaseRing(300.0, 600.0, 4.0),
)


# //2.- Ring geometry, growth and transition blending.
@dataclass(frozen=True)
class RingSettings:
    base_rings: Tuple[BaseRing, ...] = DEFAULT_BASE_RINGS
    growth_factor: float = 1.3
    max_extension_iterations: int = 1000
    transition_width: float = 12.0
    world_center: Vector3 = (0.0, 0.0, 0.0)
    base_landmark_chance: float = 0.1
    landmark_chance_step: float = 0.02
    max_landmark_chance: float = 0.3


# //3.- Frequencies and thresholds for the geological noise layers.
@dataclass(frozen=True)
class NoiseSettings:
    density_scale: float = 0.003
    density_detail_weight: float = 0.3
    bias_scale: float = 0.002
    bias_strength: float = 20.0
    hotspot_scale: float = 0.001
    transition_scale: float = 0.004
    hotspot_threshold: float = 0.6
    valley_threshold: float = -0.5
    hotspot_boost: float = 2.2
    valley_damping: float = 0.2
    ring_density_modifiers: Tuple[float, ...] = (0.3, 0.8, 1.2, 1.5)
    pose_scale: float = 0.01


# //4.- Constraints and caps used while searching for feature positions.
@dataclass(frozen=True)
class PlacementSettings:
    max_attempts: int = 50
    min_distance_from_origin: float = 15.0
    min_valid_height: float = 0.1
    max_slope_degrees: float = 35.0
    slope_epsilon: float = 0.5
    min_spacing: Tuple[float, ...] = (2.0, 3.0, 4.5, 6.0, 8.0)
    count_variation: float = 0.15
    noise_displacement: float = 0.3
    default_footprint: float = 100.0

    def spacing_for(self, category: SizeCategory) -> float:
        return self.min_spacing[category.order]


# //5.- Clearing detection and zone classification thresholds.
@dataclass(frozen=True)
class ZoneSettings:
    grid_resolution: float = 10.0
    clearing_threshold: float = 8.0
    max_zone_radius: float = 25.0
    max_zones: int = 6
    settlement_distance: float = 100.0
    large_zone_radius: float = 15.0
    neighborhood: float = 12.0
    defensive_feature_count: int = 5
    cache_feature_count: int = 3
    accessibility_radius: float = 20.0
    entry_directions: int = 8
    entry_clearance: float = 4.0
    min_entry_points: int = 2
    building_clearance: float = 12.0
    gateway_inset: float = 1.5


# //6.- Corridor routing between zones.
@dataclass(frozen=True)
class CorridorSettings:
    max_connection_distance: float = 50.0
    segment_length: float = 8.0
    winding_amplitude: float = 5.0
    clearance: float = 5.0
    max_point_attempts: int = 10
    fallback_radius: float = 3.0
    min_width: float = 4.0
    max_width: float = 6.0
    landmark_offset: float = 1.5
    marker_offset: float = 1.0


# //7.- Aggregate complete settings bundle validated on construction.
@dataclass(frozen=True)
class DistributionSettings:
    rings: RingSettings = field(default_factory=RingSettings)
    noise: NoiseSettings = field(default_factory=NoiseSettings)
    placement: PlacementSettings = field(default_factory=PlacementSettings)
    zones: ZoneSettings = field(default_factory=ZoneSettings)
    corridors: CorridorSettings = field(default_factory=CorridorSettings)

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> "DistributionSettings":
        return validate_settings(self)


# -- Validation -------------------------------------------------------------

def _require(condition: bool, message: str) -> None:
    if not condition:
        raise ConfigurationError(message)


def validate_ring_settings(rings: RingSettings) -> None:
    _require(bool(rings.base_rings), "At least one base ring is required")
    _require(math.isfinite(rings.growth_factor), "Ring growth factor must be finite")
    _require(rings.growth_factor > 1.0, f"Ring growth factor must exceed 1.0, got {rings.growth_factor}")
    _require(rings.max_extension_iterations >= 1, "Ring extension cap must be at least 1")
    _require(rings.transition_width >= 0.0, "Transition width cannot be negative")
    _require(
        0.0 <= rings.base_landmark_chance <= rings.max_landmark_chance <= 1.0,
        "Landmark chances must satisfy 0 <= base_landmark_chance <= max_landmark_chance <= 1",
    )
    _require(rings.landmark_chance_step >= 0.0, "Landmark chance step cannot be negative")
    _require(rings.base_rings[0].inner_radius == 0.0, "The first base ring must start at radius 0")
    previous_outer: Optional[float] = None
    for index, ring in enumerate(rings.base_rings):
        _require(
            ring.inner_radius >= 0.0 and ring.outer_radius >= 0.0,
            f"Base ring {index} has a negative radius",
        )
        _require(
            ring.outer_radius > ring.inner_radius,
            f"Base ring {index} outer radius must exceed its inner radius",
        )
        if previous_outer is not None:
            _require(
                ring.inner_radius == previous_outer,
                f"Base ring {index} must start where ring {index - 1} ends ({previous_outer})",
            )
        previous_outer = ring.outer_radius


def _validate_noise(noise: NoiseSettings) -> None:
    for name in ("density_scale", "bias_scale", "hotspot_scale", "transition_scale", "pose_scale"):
        _require(getattr(noise, name) > 0.0, f"Noise frequency {name} must be positive")
    _require(
        noise.valley_threshold < noise.hotspot_threshold,
        "Valley threshold must be below the hotspot threshold",
    )
    _require(noise.hotspot_boost > 0.0 and noise.valley_damping > 0.0, "Density multipliers must be positive")
    _require(bool(noise.ring_density_modifiers), "Ring density modifiers cannot be empty")
    _require(all(value > 0.0 for value in noise.ring_density_modifiers), "Ring density modifiers must be positive")


def _validate_placement(placement: PlacementSettings) -> None:
    _require(placement.max_attempts >= 1, "Placement attempt cap must be at least 1")
    _require(placement.min_distance_from_origin >= 0.0, "Origin clearance cannot be negative")
    _require(
        len(placement.min_spacing) == len(SizeCategory.ordered()),
        "Minimum spacing needs one entry per size category",
    )
    _require(all(value > 0.0 for value in placement.min_spacing), "Minimum spacing must be positive")
    _require(0.0 <= placement.count_variation < 1.0, "Count variation must lie in [0, 1)")
    _require(0.0 <= placement.max_slope_degrees <= 90.0, "Maximum slope must lie in [0, 90] degrees")
    _require(placement.slope_epsilon > 0.0, "Slope sampling epsilon must be positive")
    _require(placement.default_footprint > 0.0, "Default footprint must be positive")


def _validate_zones(zones: ZoneSettings) -> None:
    _require(zones.grid_resolution > 0.0, "Clearing grid resolution must be positive")
    _require(zones.clearing_threshold > 0.0, "Clearing threshold must be positive")
    _require(zones.max_zone_radius >= zones.clearing_threshold, "Maximum zone radius must cover the threshold")
    _require(zones.max_zones >= 1, "At least one zone must be allowed")
    _require(zones.min_entry_points >= 1, "Zones need at least one entry point")
    _require(
        zones.entry_directions >= zones.min_entry_points,
        "Entry directions must be at least the minimum entry point count",
    )
    _require(zones.entry_clearance > 0.0, "Entry clearance must be positive")


def _validate_corridors(corridors: CorridorSettings) -> None:
    _require(corridors.max_connection_distance > 0.0, "Corridor connection distance must be positive")
    _require(corridors.segment_length > 0.0, "Corridor segment length must be positive")
    _require(corridors.clearance > 0.0, "Corridor clearance must be positive")
    _require(corridors.max_point_attempts >= 1, "Corridor point attempt cap must be at least 1")
    _require(corridors.winding_amplitude >= 0.0, "Corridor winding amplitude cannot be negative")
    _require(corridors.fallback_radius >= 0.0, "Corridor fallback radius cannot be negative")
    _require(
        0.0 < corridors.min_width <= corridors.max_width,
        "Corridor width range must be positive and ordered",
    )


def validate_settings(settings: DistributionSettings) -> DistributionSettings:
    validate_ring_settings(settings.rings)
    _validate_noise(settings.noise)
    _validate_placement(settings.placement)
    _validate_zones(settings.zones)
    _validate_corridors(settings.corridors)
    return settings


# -- JSON loading -----------------------------------------------------------

# //8.- Resolve the bundled configuration directory lazily.
def _default_config_directory() -> str:
    base_dir = os.path.dirname(os.path.dirname(os.path.dirname(__file__)))
    return os.path.join(base_dir, "config")


# //9.- Load a single JSON configuration file; missing files fall back to defaults.
def _read_json_config(path: str) -> dict:
    if not os.path.exists(path):
        return {}
    with open(path, "r", encoding="utf-8") as handle:
        payload = json.load(handle)
    if not isinstance(payload, dict):
        raise ConfigurationError(f"Configuration file {path} must contain a JSON object")
    return payload


# //10.- Keep only the keys a dataclass knows about, rejecting typos loudly.
def _known_fields(payload: Mapping[str, object], cls: type, source: str) -> Dict[str, object]:
    allowed = set(cls.__dataclass_fields__)  # type: ignore[attr-defined]
    unknown = sorted(set(payload) - allowed)
    if unknown:
        raise ConfigurationError(f"Unknown keys in {source}: {', '.join(unknown)}")
    return dict(payload)


def _float_tuple(values: Sequence[object]) -> Tuple[float, ...]:
    return tuple(float(value) for value in values)


def _load_ring_settings(config_dir: str) -> RingSettings:
    payload = _known_fields(_read_json_config(os.path.join(config_dir, "rings.json")), RingSettings, "rings.json")
    if "base_rings" in payload:
        payload["base_rings"] = tuple(
            BaseRing(
                inner_radius=float(entry["inner_radius"]),
                outer_radius=float(entry["outer_radius"]),
                difficulty=float(entry.get("difficulty", index + 1)),
            )
            for index, entry in enumerate(payload["base_rings"])  # type: ignore[union-attr]
        )
    if "world_center" in payload:
        center = _float_tuple(payload["world_center"])  # type: ignore[arg-type]
        if len(center) != 3:
            raise ConfigurationError("world_center requires exactly three components")
        payload["world_center"] = center
    return RingSettings(**payload)  # type: ignore[arg-type]


def _load_noise_settings(config_dir: str) -> NoiseSettings:
    payload = _known_fields(_read_json_config(os.path.join(config_dir, "noise.json")), NoiseSettings, "noise.json")
    if "ring_density_modifiers" in payload:
        payload["ring_density_modifiers"] = _float_tuple(payload["ring_density_modifiers"])  # type: ignore[arg-type]
    return NoiseSettings(**payload)  # type: ignore[arg-type]


def _load_placement_settings(config_dir: str) -> PlacementSettings:
    payload = _known_fields(
        _read_json_config(os.path.join(config_dir, "placement.json")), PlacementSettings, "placement.json"
    )
    spacing = payload.get("min_spacing")
    if isinstance(spacing, Mapping):
        missing = [category.value for category in SizeCategory.ordered() if category.value not in spacing]
        if missing:
            raise ConfigurationError(f"min_spacing is missing categories: {', '.join(missing)}")
        payload["min_spacing"] = tuple(float(spacing[category.value]) for category in SizeCategory.ordered())
    elif spacing is not None:
        payload["min_spacing"] = _float_tuple(spacing)  # type: ignore[arg-type]
    return PlacementSettings(**payload)  # type: ignore[arg-type]


def _load_zone_and_corridor_settings(config_dir: str) -> Tuple[ZoneSettings, CorridorSettings]:
    payload = _read_json_config(os.path.join(config_dir, "zones.json"))
    zone_payload = _known_fields(payload.get("zones", {}), ZoneSettings, "zones.json:zones")
    corridor_payload = _known_fields(payload.get("corridors", {}), CorridorSettings, "zones.json:corridors")
    return ZoneSettings(**zone_payload), CorridorSettings(**corridor_payload)  # type: ignore[arg-type]


# //11.- Public helper assembling the full, validated settings bundle.
def load_distribution_settings(config_dir: str | None = None) -> DistributionSettings:
    directory = config_dir or _default_config_directory()
    zones, corridors = _load_zone_and_corridor_settings(directory)
    return DistributionSettings(
        rings=_load_ring_settings(directory),
        noise=_load_noise_settings(directory),
        placement=_load_placement_settings(directory),
        zones=zones,
        corridors=corridors,
    )
