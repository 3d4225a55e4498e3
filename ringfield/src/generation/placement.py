"""Constraint-checked placement search for the features of one region."""
from __future__ import annotations

import logging
import math
import threading
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from ...vector import Vector3, _to_vector, planar_distance, planar_length, polar_offset, subtract
from ..terrain.sampler import HeightFunction, estimate_slope
from ..world.regions import RegionId, RegionIndex
from .config import STREAM_PLACEMENT, WorldSeeds
from .content import DistributionPlan, adjust_for_formation, formation_influence, sample_size
from .errors import GenerationCancelled
from .features import Formation, FormationKind, PlacementRecord, Rotation, SizeCategory
from .noise_field import NoiseField
from .settings import PlacementSettings

LOGGER = logging.getLogger(__name__)

_LANDMARK_FORMATIONS = (FormationKind.AMPHITHEATER, FormationKind.OUTCROP)


# //1.- Cooperative cancellation flag checked between placements.
class CancellationToken:
    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, region: RegionId) -> None:
        if self._event.is_set():
            raise GenerationCancelled(f"Generation of region {region.key} was cancelled")


class PlacementSearch:
    """Sample candidate positions and keep the first one passing every rule.

    Candidates are drawn either inside a formation (with the biome's cluster
    tendency) or uniformly over the footprint square nudged by the noise bias.
    A candidate must stay inside its region, keep clear of the world center,
    respect per-size spacing, and sit on valid, gentle terrain. Rotation and
    scale come from low-frequency pose noise so neighbouring rocks look alike.
    """

    def __init__(
        self,
        index: RegionIndex,
        noise: NoiseField,
        settings: Optional[PlacementSettings] = None,
        seeds: Optional[WorldSeeds] = None,
    ) -> None:
        self._index = index
        self._noise = noise
        self._settings = settings or PlacementSettings()
        self._seeds = seeds or WorldSeeds()
        self._max_slope = math.radians(self._settings.max_slope_degrees)

    @property
    def settings(self) -> PlacementSettings:
        return self._settings

    def region_generator(self, region: RegionId) -> np.random.Generator:
        return self._seeds.region_generator(region.ring, region.quadrant, STREAM_PLACEMENT)

    # //2.- Draw one candidate position on the ground plane.
    def _candidate(
        self,
        rng: np.random.Generator,
        plan: DistributionPlan,
        center: Vector3,
        footprint: float,
    ) -> Vector3:
        if plan.formations and float(rng.random()) < plan.biome.cluster_tendency:
            formation = plan.formations[int(rng.integers(0, len(plan.formations)))]
            angle = float(rng.random()) * 2.0 * math.pi
            distance = float(rng.random()) * formation.radius * 0.8
            x, _, z = polar_offset(formation.center, angle, distance)
            return (x, 0.0, z)
        x = center[0] + (float(rng.random()) - 0.5) * footprint
        z = center[2] + (float(rng.random()) - 0.5) * footprint
        dx, dz = self._noise.displacement((x, 0.0, z), self._settings.noise_displacement)
        return (x + dx, 0.0, z + dz)

    def _violates_spacing(
        self,
        candidate: Vector3,
        category: SizeCategory,
        existing: Sequence[PlacementRecord],
    ) -> bool:
        own = self._settings.spacing_for(category)
        for placed in existing:
            required = max(own, self._settings.spacing_for(placed.size_category))
            if planar_distance(candidate, placed.position) < required:
                return True
        return False

    # //3.- Terrain must be finite, above the valid height and not too steep.
    def _ground_height(self, candidate: Vector3, height_fn: HeightFunction) -> Optional[float]:
        x, _, z = candidate
        height = height_fn(x, z)
        if not math.isfinite(height) or height < self._settings.min_valid_height:
            return None
        slope = estimate_slope(height_fn, x, z, self._settings.slope_epsilon)
        if not slope <= self._max_slope:
            return None
        return float(height)

    # //4.- Pose from position-seeded noise so nearby features lean alike.
    def _pose(self, position: Vector3, category: SizeCategory, plan: DistributionPlan) -> Tuple[Rotation, float]:
        yaw_range = math.pi if plan.biome.chaotic else math.pi * 0.5
        rotation = Rotation(
            x=self._noise.pose_noise(position, 1) * 0.15,
            y=self._noise.pose_noise(position, 0) * yaw_range,
            z=self._noise.pose_noise(position, 2) * 0.1,
        )
        low, high = category.scale_range
        base = low + self._noise.pose_unit(position, 3) * (high - low)
        weathering = 0.9 if plan.biome.weathering > 0.7 else 1.1
        variation = 0.8 + self._noise.pose_unit(position, 4) * 0.4
        return rotation, base * weathering * variation

    def _formation_tag(self, position: Vector3, formations: Sequence[Formation]) -> Optional[Formation]:
        for formation in formations:
            if planar_distance(position, formation.center) <= formation.radius:
                return formation
        return None

    def _is_landmark(
        self,
        rng: np.random.Generator,
        region: RegionId,
        position: Vector3,
        category: SizeCategory,
        formations: Sequence[Formation],
    ) -> bool:
        if category not in (SizeCategory.LARGE, SizeCategory.MASSIVE):
            return False
        inside = any(
            formation.kind in _LANDMARK_FORMATIONS
            and planar_distance(position, formation.center) <= formation.radius * 0.5
            for formation in formations
        )
        if not inside:
            return False
        return float(rng.random()) < self._index.catalog.ring_definition(region.ring).landmark_chance

    def _cluster_count(self, rng: np.random.Generator, category: SizeCategory, plan: DistributionPlan) -> int:
        cluster_range = category.cluster_range
        if cluster_range is None:
            return 0
        chance = plan.biome.cluster_tendency * plan.field.density_multiplier * 0.3
        if float(rng.random()) >= chance:
            return 0
        low, high = cluster_range
        return int(rng.integers(low, high + 1))

    def place_one(
        self,
        region: RegionId,
        plan: DistributionPlan,
        center: Iterable[float],
        footprint: float,
        existing: Sequence[PlacementRecord],
        height_fn: HeightFunction,
        rng: np.random.Generator,
    ) -> Optional[PlacementRecord]:
        origin = _to_vector(center)
        world_center = self._index.world_center
        for _ in range(self._settings.max_attempts):
            # //5.- Reject cheap geometric violations before touching the terrain.
            candidate = self._candidate(rng, plan, origin, footprint)
            if self._index.region_for(candidate) != region:
                continue
            if planar_length(subtract(candidate, world_center)) < self._settings.min_distance_from_origin:
                continue
            formation, influence = formation_influence(candidate, plan.formations)
            category = sample_size(rng, adjust_for_formation(plan.size_distribution, formation, influence))
            if self._violates_spacing(candidate, category, existing):
                continue
            height = self._ground_height(candidate, height_fn)
            if height is None:
                continue
            # //6.- Accepted: attach elevation, pose, formation tag and cluster data.
            position = (candidate[0], height, candidate[2])
            rotation, scale = self._pose(position, category, plan)
            tag = self._formation_tag(position, plan.formations)
            return PlacementRecord(
                position=position,
                size_category=category,
                rotation=rotation,
                scale=scale,
                formation_tag=tag.kind if tag is not None else None,
                is_landmark=self._is_landmark(rng, region, position, category, plan.formations),
                cluster_count=self._cluster_count(rng, category, plan),
            )
        LOGGER.debug(
            "Placement search exhausted %d attempts in %s with %d features placed",
            self._settings.max_attempts,
            region.key,
            len(existing),
        )
        return None

    def place_all(
        self,
        region: RegionId,
        plan: DistributionPlan,
        center: Iterable[float],
        footprint: float,
        height_fn: HeightFunction,
        *,
        rng: Optional[np.random.Generator] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> List[PlacementRecord]:
        generator = rng if rng is not None else self.region_generator(region)
        placements: List[PlacementRecord] = []
        for _ in range(plan.total_count):
            if cancel is not None:
                cancel.raise_if_cancelled(region)
            record = self.place_one(region, plan, center, footprint, placements, height_fn, generator)
            if record is not None:
                placements.append(record)
        return placements
