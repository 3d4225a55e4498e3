"""Metrics export for verifying generated region statistics."""
from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Dict, Optional, Sequence

from ...vector import planar_distance
from .features import PlacementRecord, SizeCategory
from .orchestrator import RegionResult
from .zones import ObstacleField


# //1.- Encapsulate per-region statistics derived from one generate call.
@dataclass(frozen=True)
class RegionMetrics:
    region_key: str
    base_count: int
    total_count: int
    size_counts: Dict[str, int]
    landmark_count: int
    corridor_marker_count: int
    gateway_count: int
    zone_categories: Dict[str, int]
    forced_entry_count: int
    corridor_count: int
    min_spacing: float
    min_corridor_clearance: float


# //2.- Closest pair distance among base placements; infinity for fewer than two.
def _min_spacing(placements: Sequence[PlacementRecord]) -> float:
    best = math.inf
    for first in range(len(placements)):
        for second in range(first + 1, len(placements)):
            best = min(best, planar_distance(placements[first].position, placements[second].position))
    return best


def collect_region_metrics(result: RegionResult) -> RegionMetrics:
    size_counts = {category.value: 0 for category in SizeCategory.ordered()}
    for record in result.base_placements:
        size_counts[record.size_category.value] += 1
    zone_categories: Dict[str, int] = {}
    for zone in result.zones:
        zone_categories[zone.category.value] = zone_categories.get(zone.category.value, 0) + 1
    obstacles = ObstacleField(result.base_placements)
    corridor_clearance = math.inf
    for corridor in result.corridors:
        for point in corridor.path:
            corridor_clearance = min(corridor_clearance, obstacles.clearance(point))
    return RegionMetrics(
        region_key=result.region.key,
        base_count=len(result.base_placements),
        total_count=len(result.placements),
        size_counts=size_counts,
        landmark_count=sum(1 for record in result.placements if record.is_landmark),
        corridor_marker_count=sum(1 for record in result.placements if record.is_corridor_marker),
        gateway_count=sum(1 for record in result.placements if record.zone_id is not None),
        zone_categories=zone_categories,
        forced_entry_count=sum(len(zone.forced_entry_points) for zone in result.zones),
        corridor_count=len(result.corridors),
        min_spacing=_min_spacing(result.base_placements),
        min_corridor_clearance=corridor_clearance,
    )


def _finite_or_none(value: float) -> Optional[float]:
    return value if math.isfinite(value) else None


# //3.- Export metrics to JSON for CI validation or dashboards.
def export_region_metrics(
    metrics: Sequence[RegionMetrics],
    *,
    filepath: str,
) -> None:
    payload = {
        "regions": [
            {
                "region": metric.region_key,
                "base_count": metric.base_count,
                "total_count": metric.total_count,
                "size_counts": metric.size_counts,
                "landmark_count": metric.landmark_count,
                "corridor_marker_count": metric.corridor_marker_count,
                "gateway_count": metric.gateway_count,
                "zone_categories": metric.zone_categories,
                "forced_entry_count": metric.forced_entry_count,
                "corridor_count": metric.corridor_count,
                "min_spacing": _finite_or_none(metric.min_spacing),
                "min_corridor_clearance": _finite_or_none(metric.min_corridor_clearance),
            }
            for metric in metrics
        ],
    }
    with open(filepath, "w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2)
