"""Value types shared by the distribution pipeline."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Optional, Tuple

from ...vector import Vector3


# //1.- Ordered size tiers with their scale range and optional cluster sizing.
class SizeCategory(Enum):
    TINY = "tiny"
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    MASSIVE = "massive"

    @property
    def order(self) -> int:
        return _SIZE_ORDER[self]

    @property
    def scale_range(self) -> Tuple[float, float]:
        return _SCALE_RANGES[self]

    @property
    def cluster_range(self) -> Optional[Tuple[int, int]]:
        return _CLUSTER_RANGES.get(self)

    @property
    def is_cluster(self) -> bool:
        return self in _CLUSTER_RANGES

    @classmethod
    def ordered(cls) -> Tuple["SizeCategory", ...]:
        return (cls.TINY, cls.SMALL, cls.MEDIUM, cls.LARGE, cls.MASSIVE)

    def __lt__(self, other: "SizeCategory") -> bool:
        if not isinstance(other, SizeCategory):
            return NotImplemented
        return self.order < other.order


_SIZE_ORDER = {
    SizeCategory.TINY: 0,
    SizeCategory.SMALL: 1,
    SizeCategory.MEDIUM: 2,
    SizeCategory.LARGE: 3,
    SizeCategory.MASSIVE: 4,
}

_SCALE_RANGES = {
    SizeCategory.TINY: (0.05, 0.15),
    SizeCategory.SMALL: (0.15, 0.4),
    SizeCategory.MEDIUM: (0.4, 1.2),
    SizeCategory.LARGE: (2.0, 4.0),
    SizeCategory.MASSIVE: (4.0, 8.0),
}

_CLUSTER_RANGES = {
    SizeCategory.LARGE: (3, 5),
    SizeCategory.MASSIVE: (4, 7),
}


# //2.- Named geological clustering patterns.
class FormationKind(Enum):
    BATTLEFIELD = "battlefield"
    LANDSLIDE = "landslide"
    EROSION = "erosion"
    AMPHITHEATER = "amphitheater"
    OUTCROP = "outcrop"
    SCATTERED = "scattered"


# //3.- A formation biases where and what size features spawn around its center.
@dataclass(frozen=True)
class Formation:
    kind: FormationKind
    center: Vector3
    radius: float
    intensity: float
    favored_sizes: FrozenSet[SizeCategory]


# //4.- Euler rotation in radians applied by the instantiation layer.
@dataclass(frozen=True)
class Rotation:
    x: float
    y: float
    z: float


# //5.- Final output unit handed to content instantiation.
@dataclass(frozen=True)
class PlacementRecord:
    position: Vector3
    size_category: SizeCategory
    rotation: Rotation
    scale: float
    formation_tag: Optional[FormationKind] = None
    is_landmark: bool = False
    is_corridor_marker: bool = False
    zone_id: Optional[str] = None
    cluster_count: int = 0
