"""Single entry point composing planning, placement, zones and corridors."""
from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from ...vector import Vector3, _to_vector, add, perpendicular, planar_direction, scale
from ..terrain.sampler import HeightFunction, TerrainSampler
from ..world.regions import RegionId, RegionIndex
from ..world.rings import GeneratedRegionCache, RingCatalog
from .config import STREAM_PLACEMENT, STREAM_PLAN, STREAM_ZONES, WorldSeeds
from .content import ContentDistributor
from .features import PlacementRecord, Rotation, SizeCategory
from .noise_field import NoiseField
from .placement import CancellationToken, PlacementSearch
from .settings import DistributionSettings
from .zones import Corridor, DiscoveryZone, ZoneCarver, ZoneCategory

LOGGER = logging.getLogger(__name__)

_UPRIGHT = Rotation(0.0, 0.0, 0.0)


# //1.- Everything one generate call produced for a region.
@dataclass(frozen=True)
class RegionResult:
    region: RegionId
    center: Vector3
    footprint: float
    placements: Tuple[PlacementRecord, ...]
    base_placements: Tuple[PlacementRecord, ...]
    zones: Tuple[DiscoveryZone, ...]
    corridors: Tuple[Corridor, ...]


class DistributionOrchestrator:
    """Deterministically populate regions and keep their zone and corridor data.

    The orchestrator owns one instance of every pipeline stage and a
    thread-safe store of finished results. A region is only marked generated
    and stored after its whole pipeline has completed, so a cancelled or
    failed run leaves no trace.
    """

    def __init__(
        self,
        seeds: Optional[WorldSeeds] = None,
        settings: Optional[DistributionSettings] = None,
        *,
        region_cache: Optional[GeneratedRegionCache] = None,
        height_fn: Optional[HeightFunction] = None,
    ) -> None:
        self._seeds = seeds or WorldSeeds()
        self._settings = settings or DistributionSettings()
        self._catalog = RingCatalog(self._settings.rings, region_cache=region_cache)
        self._index = RegionIndex(self._catalog)
        self._noise = NoiseField(self._seeds.resolved_noise_seed, self._settings.noise)
        self._distributor = ContentDistributor(self._index, self._noise, self._seeds, self._settings.placement)
        self._search = PlacementSearch(self._index, self._noise, self._settings.placement, self._seeds)
        self._carver = ZoneCarver(self._index, self._settings.zones, self._settings.corridors, self._seeds)
        self._height_fn = height_fn or TerrainSampler(self._seeds.world_seed)
        self._lock = threading.Lock()
        self._results: Dict[RegionId, RegionResult] = {}

    @property
    def seeds(self) -> WorldSeeds:
        return self._seeds

    @property
    def settings(self) -> DistributionSettings:
        return self._settings

    @property
    def catalog(self) -> RingCatalog:
        return self._catalog

    @property
    def index(self) -> RegionIndex:
        return self._index

    @property
    def noise(self) -> NoiseField:
        return self._noise

    @property
    def distributor(self) -> ContentDistributor:
        return self._distributor

    @property
    def search(self) -> PlacementSearch:
        return self._search

    @property
    def carver(self) -> ZoneCarver:
        return self._carver

    # //2.- Marker pairs straddling each path point plus landmark rocks.
    def _corridor_features(self, corridors: Iterable[Corridor]) -> List[PlacementRecord]:
        offset_settings = self._settings.corridors
        features: List[PlacementRecord] = []
        for corridor in corridors:
            offset = corridor.width * 0.5 + offset_settings.marker_offset
            path = corridor.path
            for position, point in enumerate(path):
                before = path[max(0, position - 1)]
                after = path[min(len(path) - 1, position + 1)]
                side = perpendicular(planar_direction(before, after))
                for sign in (1.0, -1.0):
                    features.append(
                        PlacementRecord(
                            position=add(point, scale(side, offset * sign)),
                            size_category=SizeCategory.TINY,
                            rotation=_UPRIGHT,
                            scale=SizeCategory.TINY.scale_range[1],
                            is_corridor_marker=True,
                        )
                    )
            for landmark in corridor.landmarks:
                features.append(
                    PlacementRecord(
                        position=landmark,
                        size_category=SizeCategory.LARGE,
                        rotation=_UPRIGHT,
                        scale=SizeCategory.LARGE.scale_range[0],
                        is_landmark=True,
                    )
                )
        return features

    # //3.- Medium gateway rocks just inside every zone entry point.
    def _gateway_features(self, zones: Iterable[DiscoveryZone]) -> List[PlacementRecord]:
        inset = self._settings.zones.gateway_inset
        features: List[PlacementRecord] = []
        for zone in zones:
            for entry in zone.entry_points:
                inward = planar_direction(entry, zone.center)
                features.append(
                    PlacementRecord(
                        position=add(entry, scale(inward, inset)),
                        size_category=SizeCategory.MEDIUM,
                        rotation=_UPRIGHT,
                        scale=SizeCategory.MEDIUM.scale_range[0],
                        zone_id=zone.id,
                    )
                )
        return features

    def generate(
        self,
        region: RegionId,
        center: Optional[Iterable[float]] = None,
        footprint_size: Optional[float] = None,
        *,
        height_fn: Optional[HeightFunction] = None,
        cache: Optional[GeneratedRegionCache] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> List[PlacementRecord]:
        origin = _to_vector(center) if center is not None else self._index.region_center(region)
        footprint = float(footprint_size) if footprint_size is not None else self._settings.placement.default_footprint
        if footprint <= 0.0:
            raise ValueError(f"Footprint size must be positive, got {footprint}")
        heights = height_fn or self._height_fn
        # //4.- Independent per-stage generators keep every stage reproducible.
        plan = self._distributor.plan(
            region, origin, rng=self._seeds.region_generator(region.ring, region.quadrant, STREAM_PLAN)
        )
        base = self._search.place_all(
            region,
            plan,
            origin,
            footprint,
            heights,
            rng=self._seeds.region_generator(region.ring, region.quadrant, STREAM_PLACEMENT),
            cancel=cancel,
        )
        if cancel is not None:
            cancel.raise_if_cancelled(region)
        zones, corridors = self._carver.carve(
            region,
            origin,
            footprint,
            base,
            height_fn=heights,
            rng=self._seeds.region_generator(region.ring, region.quadrant, STREAM_ZONES),
        )
        placements = list(base)
        placements.extend(self._corridor_features(corridors))
        placements.extend(self._gateway_features(zones))
        if cancel is not None:
            cancel.raise_if_cancelled(region)
        # //5.- Commit only once the whole pipeline finished.
        result = RegionResult(
            region=region,
            center=origin,
            footprint=footprint,
            placements=tuple(placements),
            base_placements=tuple(base),
            zones=tuple(zones),
            corridors=tuple(corridors),
        )
        with self._lock:
            self._results[region] = result
        self._catalog.mark_region_generated(region.ring, region.quadrant)
        if cache is not None:
            cache.mark(region.ring, region.quadrant)
        LOGGER.info(
            "Generated %s: %d/%d features, %d zones, %d corridors, %d total placements",
            region.key,
            len(base),
            plan.total_count,
            len(zones),
            len(corridors),
            len(placements),
        )
        return placements

    # //6.- Accessors for collaborators needing zone data without regenerating.
    def result(self, region: RegionId) -> Optional[RegionResult]:
        with self._lock:
            return self._results.get(region)

    def zones(self, region: RegionId) -> List[DiscoveryZone]:
        stored = self.result(region)
        return list(stored.zones) if stored is not None else []

    def corridors(self, region: RegionId) -> List[Corridor]:
        stored = self.result(region)
        return list(stored.corridors) if stored is not None else []

    # //7.- Zone lookups across every stored region, ordered by region.
    def all_zones(self) -> List[DiscoveryZone]:
        with self._lock:
            stored = [self._results[region] for region in sorted(self._results)]
        return [zone for result in stored for zone in result.zones]

    def zone(self, zone_id: str) -> Optional[DiscoveryZone]:
        for candidate in self.all_zones():
            if candidate.id == zone_id:
                return candidate
        return None

    def zones_by_category(self, category: ZoneCategory) -> List[DiscoveryZone]:
        return [candidate for candidate in self.all_zones() if candidate.category is category]

    def forget(self, region: RegionId) -> None:
        with self._lock:
            self._results.pop(region, None)
        self._catalog.forget_region(region.ring, region.quadrant)

    def is_generated(self, region: RegionId) -> bool:
        return self._catalog.is_region_generated(region.ring, region.quadrant)

    # //8.- Populate every active region that has not been generated yet.
    def generate_pending(
        self,
        player_pos: Iterable[float],
        render_distance: float,
        max_workers: Optional[int] = None,
    ) -> Dict[RegionId, List[PlacementRecord]]:
        pending = [
            region for region in self._index.active_regions(player_pos, render_distance) if not self.is_generated(region)
        ]
        if not pending:
            return {}
        if max_workers is None or max_workers <= 1:
            return {region: self.generate(region) for region in pending}
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = {region: executor.submit(self.generate, region) for region in pending}
            return {region: future.result() for region, future in futures.items()}
