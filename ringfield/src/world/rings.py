"""Concentric ring catalog with lazy outward growth and a generated-region cache."""
from __future__ import annotations

import bisect
import json
import logging
import math
import threading
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Set, Tuple

from ..generation.errors import RingCatalogOverflowError
from ..generation.settings import RingSettings, validate_ring_settings

LOGGER = logging.getLogger(__name__)

BIOME_STYLES = ("temperate", "wilderness", "ancient", "mystical", "primordial")


# //1.- Immutable description of one annulus around the world center.
@dataclass(frozen=True)
class RingDefinition:
    index: int
    inner_radius: float
    outer_radius: float
    difficulty: float
    biome_style: str
    content_density: float
    landmark_chance: float = 0.1

    @property
    def width(self) -> float:
        return self.outer_radius - self.inner_radius

    @property
    def mid_radius(self) -> float:
        return (self.inner_radius + self.outer_radius) * 0.5

    def contains(self, distance: float) -> bool:
        return self.inner_radius <= distance < self.outer_radius


# //2.- Thread safe record of which (ring, quadrant) pairs have been generated.
class GeneratedRegionCache:
    """Set of generated regions that can round-trip through a JSON file."""

    def __init__(self, pairs: Iterable[Tuple[int, int]] = ()) -> None:
        self._lock = threading.Lock()
        self._generated: Set[Tuple[int, int]] = {(int(ring), int(quadrant)) for ring, quadrant in pairs}

    def __len__(self) -> int:
        with self._lock:
            return len(self._generated)

    def mark(self, ring: int, quadrant: int) -> None:
        with self._lock:
            self._generated.add((int(ring), int(quadrant)))

    def is_generated(self, ring: int, quadrant: int) -> bool:
        with self._lock:
            return (int(ring), int(quadrant)) in self._generated

    def forget(self, ring: int, quadrant: int) -> None:
        with self._lock:
            self._generated.discard((int(ring), int(quadrant)))

    def to_pairs(self) -> List[Tuple[int, int]]:
        with self._lock:
            return sorted(self._generated)

    @classmethod
    def from_pairs(cls, pairs: Iterable[Iterable[int]]) -> "GeneratedRegionCache":
        normalized = []
        for entry in pairs:
            ring, quadrant = (int(value) for value in entry)
            if ring < 0 or not 0 <= quadrant <= 3:
                raise ValueError(f"Invalid generated region entry: {(ring, quadrant)}")
            normalized.append((ring, quadrant))
        return cls(normalized)

    # //3.- Persist the generated set as a JSON list of [ring, quadrant] pairs.
    def save(self, filepath: str) -> None:
        payload = [[ring, quadrant] for ring, quadrant in self.to_pairs()]
        with open(filepath, "w", encoding="utf-8") as handle:
            json.dump(payload, handle)

    @classmethod
    def load(cls, filepath: str) -> "GeneratedRegionCache":
        with open(filepath, "r", encoding="utf-8") as handle:
            payload = json.load(handle)
        if not isinstance(payload, list):
            raise ValueError(f"Generated region file {filepath} must contain a JSON list")
        return cls.from_pairs(payload)


# //4.- Append-only catalog of ring definitions that grows outward on demand.
class RingCatalog:
    """Resolve distances to ring indices, extending the catalog lazily.

    Base rings come from ``RingSettings``; every later ring starts where the
    previous one ends and reaches ``growth_factor`` times its inner radius.
    Lookups are thread safe and memoized, so ring definitions are stable once
    created. A lookup that would need more than ``max_extension_iterations``
    new rings, or a ring past the float range, raises
    ``RingCatalogOverflowError`` and leaves the catalog untouched.
    """

    def __init__(
        self,
        settings: Optional[RingSettings] = None,
        *,
        region_cache: Optional[GeneratedRegionCache] = None,
    ) -> None:
        self._settings = settings or RingSettings()
        validate_ring_settings(self._settings)
        self._lock = threading.Lock()
        self._rings: List[RingDefinition] = []
        self._outer_radii: List[float] = []
        self._cache_hits = 0
        self._cache_misses = 0
        self._region_cache = region_cache if region_cache is not None else GeneratedRegionCache()
        for index, base in enumerate(self._settings.base_rings):
            self._append(
                RingDefinition(
                    index=index,
                    inner_radius=base.inner_radius,
                    outer_radius=base.outer_radius,
                    difficulty=base.difficulty,
                    biome_style=BIOME_STYLES[0],
                    content_density=1.0,
                    landmark_chance=self._settings.base_landmark_chance,
                )
            )

    @property
    def settings(self) -> RingSettings:
        return self._settings

    @property
    def region_cache(self) -> GeneratedRegionCache:
        return self._region_cache

    @property
    def known_ring_count(self) -> int:
        with self._lock:
            return len(self._rings)

    @property
    def cache_hits(self) -> int:
        with self._lock:
            return self._cache_hits

    @property
    def cache_misses(self) -> int:
        with self._lock:
            return self._cache_misses

    def _append(self, ring: RingDefinition) -> None:
        self._rings.append(ring)
        self._outer_radii.append(ring.outer_radius)

    # //5.- Derive the ring that follows ``previous`` without storing it.
    def _next_ring(self, previous: RingDefinition) -> RingDefinition:
        settings = self._settings
        index = previous.index + 1
        inner = previous.outer_radius
        outer = inner * settings.growth_factor
        if not math.isfinite(outer):
            raise RingCatalogOverflowError(f"Ring {index} outer radius is beyond the representable range")
        difficulty = min(10.0, 4.0 + (index - 4) * 0.5)
        difficulty = max(difficulty, previous.difficulty)
        content_density = min(3.0, 1.0 + (index - 3) * 0.15)
        content_density = max(content_density, previous.content_density)
        landmark_chance = min(
            settings.max_landmark_chance,
            settings.base_landmark_chance + (index - 4) * settings.landmark_chance_step,
        )
        landmark_chance = max(landmark_chance, previous.landmark_chance)
        style = BIOME_STYLES[min(index // 4, len(BIOME_STYLES) - 1)]
        return RingDefinition(
            index=index,
            inner_radius=inner,
            outer_radius=outer,
            difficulty=difficulty,
            biome_style=style,
            content_density=content_density,
            landmark_chance=landmark_chance,
        )

    # //6.- Build missing rings on a scratch list; commit only when every one is valid.
    def _grow_locked(self, needs_more: Callable[[RingDefinition], bool], target: str) -> None:
        cap = self._settings.max_extension_iterations
        pending: List[RingDefinition] = []
        last = self._rings[-1]
        while needs_more(last):
            if len(pending) >= cap:
                raise RingCatalogOverflowError(f"{target} requires more than {cap} ring extensions")
            last = self._next_ring(last)
            pending.append(last)
        for ring in pending:
            self._append(ring)
        LOGGER.debug("Ring catalog extended to %d rings for %s", len(self._rings), target)

    # //7.- Fetch a ring definition, building any missing rings up to the index.
    def ring_definition(self, index: int) -> RingDefinition:
        if index < 0:
            raise ValueError(f"Ring index must be non-negative, got {index}")
        with self._lock:
            if index < len(self._rings):
                self._cache_hits += 1
                return self._rings[index]
            self._cache_misses += 1
            needed = index - len(self._rings) + 1
            if needed > self._settings.max_extension_iterations:
                raise RingCatalogOverflowError(
                    f"Ring {index} requires {needed} extensions, above the cap of "
                    f"{self._settings.max_extension_iterations}"
                )
            self._grow_locked(lambda last: last.index < index, f"ring {index}")
            return self._rings[index]

    # //8.- Binary search the outer radii, extending outward until the distance is covered.
    def ring_index_for_distance(self, distance: float) -> int:
        distance = float(distance)
        if math.isnan(distance) or distance < 0.0:
            raise ValueError(f"Ring lookup distance must be a non-negative number, got {distance}")
        if math.isinf(distance):
            raise RingCatalogOverflowError("Infinite distance can never be covered by the ring catalog")
        with self._lock:
            if distance < self._outer_radii[-1]:
                self._cache_hits += 1
                return bisect.bisect_right(self._outer_radii, distance)
            self._cache_misses += 1
            ratio = distance / self._outer_radii[-1]
            estimate = math.floor(math.log(ratio) / math.log(self._settings.growth_factor)) + 1
            if estimate > self._settings.max_extension_iterations:
                raise RingCatalogOverflowError(
                    f"Distance {distance} requires about {estimate} extensions, above the cap of "
                    f"{self._settings.max_extension_iterations}"
                )
            self._grow_locked(lambda last: distance >= last.outer_radius, f"distance {distance:.1f}")
            return bisect.bisect_right(self._outer_radii, distance)

    # //9.- Generated-region bookkeeping delegated to the injected cache.
    def mark_region_generated(self, ring: int, quadrant: int) -> None:
        self._region_cache.mark(ring, quadrant)

    def is_region_generated(self, ring: int, quadrant: int) -> bool:
        return self._region_cache.is_generated(ring, quadrant)

    def forget_region(self, ring: int, quadrant: int) -> None:
        self._region_cache.forget(ring, quadrant)
