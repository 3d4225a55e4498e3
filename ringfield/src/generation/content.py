"""Biome-aware planning of feature counts, size mix and formations per region."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, Mapping, Optional, Sequence, Tuple

import numpy as np

from ...vector import Vector3, _to_vector, planar_distance, polar_offset
from ..world.regions import RegionId, RegionIndex
from .config import STREAM_PLAN, WorldSeeds
from .features import Formation, FormationKind, SizeCategory
from .noise_field import GeologicalField, NoiseField
from .settings import PlacementSettings

LOGGER = logging.getLogger(__name__)

SizeDistribution = Dict[SizeCategory, float]


# //1.- Quadrant archetype steering size preference, clustering and weathering.
@dataclass(frozen=True)
class Biome:
    name: str
    terrain_type: str
    density: float
    size_preferences: Tuple[float, float, float, float, float]
    cluster_tendency: float
    weathering: float
    formation_kinds: Tuple[FormationKind, ...]
    chaotic: bool = False

    def preference(self, category: SizeCategory) -> float:
        return self.size_preferences[category.order]


BIOMES: Tuple[Biome, ...] = (
    Biome(
        name="ancient_riverbed",
        terrain_type="riverbed",
        density=0.7,
        size_preferences=(1.5, 1.3, 1.8, 0.6, 0.3),
        cluster_tendency=0.3,
        weathering=0.8,
        formation_kinds=(FormationKind.EROSION, FormationKind.SCATTERED),
    ),
    Biome(
        name="hill_country",
        terrain_type="hills",
        density=1.4,
        size_preferences=(0.8, 1.0, 1.2, 1.6, 1.4),
        cluster_tendency=0.8,
        weathering=0.4,
        formation_kinds=(FormationKind.OUTCROP, FormationKind.AMPHITHEATER, FormationKind.LANDSLIDE),
    ),
    Biome(
        name="broken_plains",
        terrain_type="plains",
        density=0.9,
        size_preferences=(1.2, 1.4, 1.1, 1.3, 0.8),
        cluster_tendency=0.4,
        weathering=0.6,
        formation_kinds=(FormationKind.OUTCROP, FormationKind.SCATTERED, FormationKind.BATTLEFIELD),
    ),
    Biome(
        name="chaotic_terrain",
        terrain_type="broken",
        density=1.6,
        size_preferences=(1.0, 0.9, 1.3, 1.5, 1.8),
        cluster_tendency=0.7,
        weathering=0.3,
        formation_kinds=(FormationKind.LANDSLIDE, FormationKind.OUTCROP, FormationKind.AMPHITHEATER),
        chaotic=True,
    ),
)


def biome_for_quadrant(quadrant: int) -> Biome:
    return BIOMES[quadrant % len(BIOMES)]


# //2.- Base radius and favored sizes for every formation kind.
_T, _S, _M, _L, _X = (
    SizeCategory.TINY,
    SizeCategory.SMALL,
    SizeCategory.MEDIUM,
    SizeCategory.LARGE,
    SizeCategory.MASSIVE,
)
FORMATION_SPECS: Dict[FormationKind, Tuple[float, FrozenSet[SizeCategory]]] = {
    FormationKind.BATTLEFIELD: (25.0, frozenset({_M, _L})),
    FormationKind.LANDSLIDE: (30.0, frozenset({_S, _M, _X})),
    FormationKind.EROSION: (40.0, frozenset({_T, _S})),
    FormationKind.AMPHITHEATER: (35.0, frozenset({_L, _X})),
    FormationKind.OUTCROP: (20.0, frozenset({_M, _L, _X})),
    FormationKind.SCATTERED: (50.0, frozenset({_T, _S, _M})),
}

BASE_FEATURE_COUNTS: Tuple[int, ...] = (8, 20, 45, 35)
_OUTER_BASE_COUNT = 35

# //3.- Size mix per ring before biome and density reweighting.
_RING_SIZE_TABLES: Tuple[Tuple[float, float, float, float, float], ...] = (
    (0.70, 0.20, 0.08, 0.02, 0.00),
    (0.40, 0.30, 0.20, 0.08, 0.02),
    (0.25, 0.25, 0.30, 0.15, 0.05),
    (0.15, 0.15, 0.20, 0.25, 0.25),
)


# //4.- Everything the placement search needs to populate one region.
@dataclass(frozen=True)
class DistributionPlan:
    total_count: int
    size_distribution: Mapping[SizeCategory, float]
    formations: Tuple[Formation, ...]
    biome: Biome
    field: GeologicalField


def _normalize(weights: Mapping[SizeCategory, float]) -> SizeDistribution:
    total = sum(weights.values())
    if total <= 0.0:
        return {category: (1.0 if category is SizeCategory.TINY else 0.0) for category in SizeCategory.ordered()}
    return {category: weights.get(category, 0.0) / total for category in SizeCategory.ordered()}


def formation_influence(
    position: Iterable[float],
    formations: Sequence[Formation],
) -> Tuple[Optional[Formation], float]:
    """Return the formation with the strongest pull at ``position``.

    Influence fades linearly from the formation center to its radius and is
    scaled by intensity. Influences below 0.1 count as no influence.
    """

    point = _to_vector(position)
    strongest: Optional[Formation] = None
    best = 0.0
    for formation in formations:
        distance = planar_distance(point, formation.center)
        influence = max(0.0, 1.0 - distance / formation.radius) * formation.intensity
        if influence > best:
            strongest, best = formation, influence
    if best < 0.1:
        return None, 0.0
    return strongest, best


def adjust_for_formation(
    distribution: Mapping[SizeCategory, float],
    formation: Optional[Formation],
    influence: float,
) -> SizeDistribution:
    if formation is None or influence <= 0.0:
        return dict(distribution)
    boost = 1.0 + 2.0 * influence
    weights = {
        category: weight * (boost if category in formation.favored_sizes else 1.0)
        for category, weight in distribution.items()
    }
    return _normalize(weights)


def sample_size(rng: np.random.Generator, distribution: Mapping[SizeCategory, float]) -> SizeCategory:
    roll = float(rng.random())
    cumulative = 0.0
    fallback = SizeCategory.TINY
    for category in SizeCategory.ordered():
        weight = distribution.get(category, 0.0)
        if weight <= 0.0:
            continue
        fallback = category
        cumulative += weight
        if roll < cumulative:
            return category
    return fallback


class ContentDistributor:
    """Decide how many features a region gets, in which sizes and formations."""

    def __init__(
        self,
        index: RegionIndex,
        noise: NoiseField,
        seeds: Optional[WorldSeeds] = None,
        settings: Optional[PlacementSettings] = None,
    ) -> None:
        self._index = index
        self._noise = noise
        self._seeds = seeds or WorldSeeds()
        self._settings = settings or PlacementSettings()

    @property
    def noise(self) -> NoiseField:
        return self._noise

    # //5.- Non-linear base count table with density-scaled counts past the base rings.
    def base_count(self, region: RegionId) -> int:
        if region.ring < len(BASE_FEATURE_COUNTS):
            return BASE_FEATURE_COUNTS[region.ring]
        ring = self._index.catalog.ring_definition(region.ring)
        return int(round(_OUTER_BASE_COUNT * ring.content_density))

    def total_count(self, region: RegionId, biome: Biome, center: Vector3) -> int:
        base = self.base_count(region)
        organic = self._noise.organic_factor(center)
        deviation = max(-1.0, min(1.0, biome.density * organic - 1.0))
        multiplier = 1.0 + self._settings.count_variation * deviation
        return max(1, int(round(base * multiplier)))

    def size_distribution(self, ring_index: int, biome: Biome, field: GeologicalField) -> SizeDistribution:
        table = _RING_SIZE_TABLES[min(ring_index, len(_RING_SIZE_TABLES) - 1)]
        weights = {}
        for category in SizeCategory.ordered():
            density_skew = field.density_multiplier ** ((category.order - 2) * 0.25)
            weights[category] = table[category.order] * biome.preference(category) * density_skew
        return _normalize(weights)

    # //6.- Scatter formation centers around the region center in angular slots.
    def formations(
        self,
        rng: np.random.Generator,
        center: Vector3,
        biome: Biome,
        total_count: int,
    ) -> Tuple[Formation, ...]:
        count = max(1, total_count // 15) + int(rng.integers(0, 2))
        formations = []
        for slot in range(count):
            kind = biome.formation_kinds[int(rng.integers(0, len(biome.formation_kinds)))]
            angle = slot / count * 2.0 * math.pi + (float(rng.random()) - 0.5) * math.pi
            distance = 20.0 + float(rng.random()) * 40.0
            base_radius, favored = FORMATION_SPECS[kind]
            formations.append(
                Formation(
                    kind=kind,
                    center=polar_offset(center, angle, distance),
                    radius=base_radius + float(rng.random()) * 10.0,
                    intensity=0.5 + float(rng.random()) * 0.5,
                    favored_sizes=favored,
                )
            )
        return tuple(formations)

    def plan(
        self,
        region: RegionId,
        center: Optional[Iterable[float]] = None,
        *,
        rng: Optional[np.random.Generator] = None,
    ) -> DistributionPlan:
        origin = _to_vector(center) if center is not None else self._index.region_center(region)
        generator = rng if rng is not None else self._seeds.region_generator(region.ring, region.quadrant, STREAM_PLAN)
        biome = biome_for_quadrant(region.quadrant)
        field = self._noise.sample(origin, region.ring)
        total = self.total_count(region, biome, origin)
        distribution = self.size_distribution(region.ring, biome, field)
        formations = self.formations(generator, origin, biome, total)
        LOGGER.debug(
            "Planned %s: biome=%s count=%d formations=%d density=%.2f",
            region.key,
            biome.name,
            total,
            len(formations),
            field.density_multiplier,
        )
        return DistributionPlan(
            total_count=total,
            size_distribution=distribution,
            formations=formations,
            biome=biome,
            field=field,
        )
