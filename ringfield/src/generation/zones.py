"""Discovery zones and corridors carved out of a region's placed features."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from ...vector import (
    Vector3,
    _to_vector,
    add,
    lerp,
    perpendicular,
    planar_direction,
    planar_distance,
    point_segment_distance,
    polar_offset,
    scale,
)
from ..terrain.sampler import HeightFunction
from ..world.regions import RegionId, RegionIndex
from .config import STREAM_ZONES, WorldSeeds
from .content import biome_for_quadrant
from .features import PlacementRecord
from .settings import CorridorSettings, ZoneSettings

LOGGER = logging.getLogger(__name__)


class ZoneCategory(Enum):
    SETTLEMENT = "settlement"
    DEFENSIVE = "defensive"
    CACHE = "cache"
    SCENIC = "scenic"


@dataclass(frozen=True)
class ZoneMetadata:
    terrain_type: str
    suitable_for_building: bool
    size_class: str


# //1.- Open area found between placed features.
@dataclass(frozen=True)
class Clearing:
    center: Vector3
    radius: float
    clearance: float


@dataclass(frozen=True)
class DiscoveryZone:
    id: str
    center: Vector3
    radius: float
    category: ZoneCategory
    accessibility: float
    entry_points: Tuple[Vector3, ...]
    forced_entry_points: Tuple[Vector3, ...]
    nearby_feature_count: int
    metadata: ZoneMetadata


@dataclass(frozen=True)
class Corridor:
    id: str
    path: Tuple[Vector3, ...]
    width: float
    connects: Tuple[str, str]
    landmarks: Tuple[Vector3, ...]


# //2.- Planar obstacle set backed by a numpy array of (x, z) pairs.
class ObstacleField:
    def __init__(self, placements: Sequence[PlacementRecord]) -> None:
        self._points = np.array(
            [(record.position[0], record.position[2]) for record in placements],
            dtype=float,
        ).reshape(-1, 2)

    def __len__(self) -> int:
        return int(self._points.shape[0])

    def clearance_many(self, xs: np.ndarray, zs: np.ndarray) -> np.ndarray:
        if len(self) == 0:
            return np.full(xs.shape, np.inf)
        dx = xs[:, None] - self._points[None, :, 0]
        dz = zs[:, None] - self._points[None, :, 1]
        return np.min(np.hypot(dx, dz), axis=1)

    def clearance(self, point: Iterable[float]) -> float:
        x, _, z = _to_vector(point)
        return float(self.clearance_many(np.array([x]), np.array([z]))[0])

    def count_within(self, point: Iterable[float], radius: float) -> int:
        if len(self) == 0:
            return 0
        x, _, z = _to_vector(point)
        distances = np.hypot(self._points[:, 0] - x, self._points[:, 1] - z)
        return int(np.count_nonzero(distances <= radius))

    def segment_clearance(self, start: Vector3, end: Vector3) -> float:
        best = math.inf
        for px, pz in self._points:
            best = min(best, point_segment_distance((px, 0.0, pz), start, end))
        return best


def _grounded(point: Vector3, height_fn: Optional[HeightFunction], fallback: float = 0.0) -> Vector3:
    if height_fn is None:
        return (point[0], fallback, point[2])
    height = height_fn(point[0], point[2])
    if not math.isfinite(height):
        height = fallback
    return (point[0], float(height), point[2])


class ZoneCarver:
    """Detect clearings, classify them as zones and link them with corridors."""

    def __init__(
        self,
        index: RegionIndex,
        zone_settings: Optional[ZoneSettings] = None,
        corridor_settings: Optional[CorridorSettings] = None,
        seeds: Optional[WorldSeeds] = None,
    ) -> None:
        self._index = index
        self._zones = zone_settings or ZoneSettings()
        self._corridors = corridor_settings or CorridorSettings()
        self._seeds = seeds or WorldSeeds()

    @property
    def zone_settings(self) -> ZoneSettings:
        return self._zones

    @property
    def corridor_settings(self) -> CorridorSettings:
        return self._corridors

    # //3.- Grid sample the footprint and keep well-cleared, non-overlapping points.
    def find_clearings(
        self,
        region: RegionId,
        center: Iterable[float],
        footprint: float,
        obstacles: ObstacleField,
    ) -> List[Clearing]:
        cx, cy, cz = _to_vector(center)
        half = footprint * 0.5
        steps = np.arange(-half, half + 1e-9, self._zones.grid_resolution)
        grid_x, grid_z = np.meshgrid(cx + steps, cz + steps, indexing="ij")
        xs = grid_x.ravel()
        zs = grid_z.ravel()
        inside = np.array(
            [self._index.region_for((x, 0.0, z)) == region for x, z in zip(xs, zs)],
            dtype=bool,
        ).reshape(xs.shape)
        xs, zs = xs[inside], zs[inside]
        clearances = obstacles.clearance_many(xs, zs)
        candidates = []
        for x, z, clearance in zip(xs, zs, clearances):
            if clearance >= self._zones.clearing_threshold:
                radius = min(float(clearance), self._zones.max_zone_radius)
                candidates.append(Clearing((float(x), cy, float(z)), radius, float(clearance)))
        candidates.sort(key=lambda clearing: clearing.radius, reverse=True)
        kept: List[Clearing] = []
        for candidate in candidates:
            overlaps = any(
                planar_distance(candidate.center, other.center) < candidate.radius + other.radius for other in kept
            )
            if overlaps:
                continue
            kept.append(candidate)
            if len(kept) >= self._zones.max_zones:
                break
        return kept

    def _category(self, center: Vector3, radius: float, nearby: int) -> ZoneCategory:
        settings = self._zones
        is_large = radius >= settings.large_zone_radius
        to_origin = planar_distance(center, self._index.world_center)
        if to_origin < settings.settlement_distance and is_large:
            return ZoneCategory.SETTLEMENT
        if is_large and nearby >= settings.defensive_feature_count:
            return ZoneCategory.DEFENSIVE
        if not is_large and nearby >= settings.cache_feature_count:
            return ZoneCategory.CACHE
        return ZoneCategory.SCENIC

    @staticmethod
    def _size_class(radius: float) -> str:
        if radius < 10.0:
            return "small"
        if radius < 13.0:
            return "medium"
        return "large"

    # //4.- Radial entry points whose approach segment stays clear of obstacles.
    def _entry_points(
        self,
        zone_id: str,
        center: Vector3,
        radius: float,
        obstacles: ObstacleField,
        height_fn: Optional[HeightFunction],
    ) -> Tuple[Tuple[Vector3, ...], Tuple[Vector3, ...]]:
        settings = self._zones
        valid: List[Vector3] = []
        rejected: List[Tuple[float, Vector3]] = []
        for step in range(settings.entry_directions):
            angle = 2.0 * math.pi * step / settings.entry_directions
            point = _grounded(polar_offset(center, angle, radius * 0.8), height_fn, center[1])
            clearance = obstacles.segment_clearance(center, point)
            if clearance >= settings.entry_clearance:
                valid.append(point)
            else:
                rejected.append((clearance, point))
        forced: List[Vector3] = []
        if len(valid) < settings.min_entry_points:
            rejected.sort(key=lambda item: item[0], reverse=True)
            for _, point in rejected[: settings.min_entry_points - len(valid)]:
                forced.append(point)
            LOGGER.warning(
                "Zone %s has %d clear entries; forcing %d fallback entry points",
                zone_id,
                len(valid),
                len(forced),
            )
        return tuple(valid + forced), tuple(forced)

    def build_zones(
        self,
        region: RegionId,
        clearings: Sequence[Clearing],
        obstacles: ObstacleField,
        height_fn: Optional[HeightFunction] = None,
    ) -> List[DiscoveryZone]:
        settings = self._zones
        terrain_type = biome_for_quadrant(region.quadrant).terrain_type
        zones = []
        for position, clearing in enumerate(clearings):
            zone_id = f"zone_{region.ring}_{region.quadrant}_{position}"
            center = _grounded(clearing.center, height_fn)
            nearby = obstacles.count_within(center, clearing.radius + settings.neighborhood)
            crowding = obstacles.count_within(center, settings.accessibility_radius)
            accessibility = max(0.2, min(1.0, 1.0 - 0.1 * crowding))
            entries, forced = self._entry_points(zone_id, center, clearing.radius, obstacles, height_fn)
            zones.append(
                DiscoveryZone(
                    id=zone_id,
                    center=center,
                    radius=clearing.radius,
                    category=self._category(center, clearing.radius, nearby),
                    accessibility=accessibility,
                    entry_points=entries,
                    forced_entry_points=forced,
                    nearby_feature_count=nearby,
                    metadata=ZoneMetadata(
                        terrain_type=terrain_type,
                        suitable_for_building=clearing.clearance > settings.building_clearance,
                        size_class=self._size_class(clearing.radius),
                    ),
                )
            )
        return zones

    # //5.- Route one winding path between two zones, skipping points that cannot clear.
    def _route(
        self,
        rng: np.random.Generator,
        start: Vector3,
        end: Vector3,
        obstacles: ObstacleField,
        corridor_id: str,
    ) -> List[Vector3]:
        settings = self._corridors
        distance = planar_distance(start, end)
        segments = max(3, int(math.floor(distance / settings.segment_length)))
        side = perpendicular(planar_direction(start, end))
        amplitude = min(settings.winding_amplitude, 0.15 * distance)
        path = [start]
        for step in range(1, segments):
            base = lerp(start, end, step / segments)
            accepted: Optional[Vector3] = None
            for _ in range(settings.max_point_attempts):
                offset = (float(rng.random()) * 2.0 - 1.0) * amplitude
                candidate = add(base, scale(side, offset))
                if obstacles.clearance(candidate) >= settings.clearance:
                    accepted = candidate
                    break
            if accepted is None:
                previous = path[-1]
                for _ in range(settings.max_point_attempts):
                    angle = float(rng.random()) * 2.0 * math.pi
                    candidate = polar_offset(previous, angle, float(rng.random()) * settings.fallback_radius)
                    if obstacles.clearance(candidate) >= settings.clearance:
                        accepted = candidate
                        break
            if accepted is None:
                LOGGER.debug("Corridor %s skipped point %d of %d", corridor_id, step, segments)
                continue
            path.append(accepted)
        path.append(end)
        return path

    def _landmarks(self, rng: np.random.Generator, path: Sequence[Vector3], width: float) -> List[Vector3]:
        offset = width * 0.5 + self._corridors.landmark_offset
        landmarks = []
        index = int(rng.integers(2, 4))
        flip = 1.0
        while index <= len(path) - 2:
            side = perpendicular(planar_direction(path[index - 1], path[index + 1]))
            landmarks.append(add(path[index], scale(side, offset * flip)))
            flip = -flip
            index += int(rng.integers(2, 4))
        return landmarks

    def build_corridors(
        self,
        region: RegionId,
        zones: Sequence[DiscoveryZone],
        obstacles: ObstacleField,
        rng: np.random.Generator,
        height_fn: Optional[HeightFunction] = None,
    ) -> List[Corridor]:
        settings = self._corridors
        corridors = []
        for first in range(len(zones)):
            for second in range(first + 1, len(zones)):
                zone_a, zone_b = zones[first], zones[second]
                if planar_distance(zone_a.center, zone_b.center) > settings.max_connection_distance:
                    continue
                corridor_id = f"corridor_{region.ring}_{region.quadrant}_{len(corridors)}"
                if (
                    obstacles.clearance(zone_a.center) < settings.clearance
                    or obstacles.clearance(zone_b.center) < settings.clearance
                ):
                    LOGGER.debug("Corridor %s dropped: zone center lacks clearance", corridor_id)
                    continue
                path = self._route(rng, zone_a.center, zone_b.center, obstacles, corridor_id)
                if len(path) < 3:
                    LOGGER.debug("Corridor %s dropped with only %d points", corridor_id, len(path))
                    continue
                width = settings.min_width + float(rng.random()) * (settings.max_width - settings.min_width)
                grounded = tuple(_grounded(point, height_fn, point[1]) for point in path)
                landmarks = tuple(
                    _grounded(point, height_fn, point[1]) for point in self._landmarks(rng, grounded, width)
                )
                corridors.append(
                    Corridor(
                        id=corridor_id,
                        path=grounded,
                        width=width,
                        connects=(zone_a.id, zone_b.id),
                        landmarks=landmarks,
                    )
                )
        return corridors

    def carve(
        self,
        region: RegionId,
        center: Iterable[float],
        footprint: float,
        placements: Sequence[PlacementRecord],
        *,
        height_fn: Optional[HeightFunction] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> Tuple[List[DiscoveryZone], List[Corridor]]:
        generator = rng if rng is not None else self._seeds.region_generator(region.ring, region.quadrant, STREAM_ZONES)
        obstacles = ObstacleField(placements)
        clearings = self.find_clearings(region, center, footprint, obstacles)
        zones = self.build_zones(region, clearings, obstacles, height_fn)
        corridors = self.build_corridors(region, zones, obstacles, generator, height_fn)
        return zones, corridors
