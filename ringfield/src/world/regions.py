"""Map world positions onto (ring, quadrant) regions."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from ...vector import Vector3, _to_vector
from .rings import RingCatalog

QUADRANT_COUNT = 4


# //1.- Hashable, ordered identifier of one ring slice.
@dataclass(frozen=True, order=True)
class RegionId:
    ring: int
    quadrant: int

    def __post_init__(self) -> None:
        if self.ring < 0:
            raise ValueError(f"Region ring must be non-negative, got {self.ring}")
        if not 0 <= self.quadrant < QUADRANT_COUNT:
            raise ValueError(f"Region quadrant must lie in 0..3, got {self.quadrant}")

    @property
    def key(self) -> str:
        return f"r{self.ring}_q{self.quadrant}"


# //2.- Blend description for positions near a ring boundary.
@dataclass(frozen=True)
class TransitionInfo:
    in_transition: bool
    from_ring: int
    to_ring: int
    blend_factor: float


def region_key(region: RegionId) -> str:
    return region.key


def quadrant_for_offset(dx: float, dz: float) -> int:
    if dx >= 0.0:
        return 0 if dz >= 0.0 else 1
    return 2 if dz < 0.0 else 3


def _smootherstep(t: float) -> float:
    t = max(0.0, min(1.0, t))
    return t * t * t * (t * (t * 6.0 - 15.0) + 10.0)


class RegionIndex:
    """Resolve positions to regions and enumerate regions around a player."""

    _HYSTERESIS = 0.1

    def __init__(self, catalog: Optional[RingCatalog] = None) -> None:
        self._catalog = catalog or RingCatalog()
        self._center = _to_vector(self._catalog.settings.world_center)

    @property
    def catalog(self) -> RingCatalog:
        return self._catalog

    @property
    def world_center(self) -> Vector3:
        return self._center

    def _offset(self, position: Iterable[float]) -> Tuple[float, float]:
        x, _, z = _to_vector(position)
        return x - self._center[0], z - self._center[2]

    # //3.- Ring by planar distance, quadrant by the sign of the offset.
    def region_for(self, position: Iterable[float]) -> RegionId:
        dx, dz = self._offset(position)
        ring = self._catalog.ring_index_for_distance(math.hypot(dx, dz))
        return RegionId(ring, quadrant_for_offset(dx, dz))

    # //4.- Mid-radius point at the angular middle of the quadrant.
    def region_center(self, region: RegionId) -> Vector3:
        ring = self._catalog.ring_definition(region.ring)
        angle = math.radians(45.0 - 90.0 * region.quadrant)
        radius = ring.mid_radius
        return (
            self._center[0] + math.cos(angle) * radius,
            self._center[1],
            self._center[2] + math.sin(angle) * radius,
        )

    def difficulty_for(self, region: RegionId) -> float:
        return self._catalog.ring_definition(region.ring).difficulty

    # //5.- Player region first, then neighboring ring slices inside the render distance.
    def active_regions(self, player_pos: Iterable[float], render_distance: float) -> List[RegionId]:
        if render_distance < 0.0 or math.isnan(render_distance):
            raise ValueError(f"Render distance must be non-negative, got {render_distance}")
        position = _to_vector(player_pos)
        current = self.region_for(position)
        others: List[RegionId] = []
        for ring in range(max(0, current.ring - 1), current.ring + 2):
            for quadrant in range(QUADRANT_COUNT):
                region = RegionId(ring, quadrant)
                if region == current:
                    continue
                cx, _, cz = self.region_center(region)
                if math.hypot(cx - position[0], cz - position[2]) <= render_distance:
                    others.append(region)
        return [current] + sorted(others)

    # //6.- Smoothly blend toward the neighboring ring near a boundary.
    def transition_info(self, position: Iterable[float]) -> TransitionInfo:
        dx, dz = self._offset(position)
        distance = math.hypot(dx, dz)
        index = self._catalog.ring_index_for_distance(distance)
        ring = self._catalog.ring_definition(index)
        width = self._catalog.settings.transition_width
        to_inner = distance - ring.inner_radius
        to_outer = ring.outer_radius - distance
        if index > 0 and to_inner <= to_outer:
            gap, neighbor = to_inner, index - 1
        else:
            gap, neighbor = to_outer, index + 1
        if width <= 0.0 or gap > width:
            return TransitionInfo(False, index, index, 0.0)
        blend = _smootherstep(1.0 - gap / width)
        if blend < self._HYSTERESIS:
            return TransitionInfo(False, index, index, 0.0)
        return TransitionInfo(True, index, neighbor, blend)
