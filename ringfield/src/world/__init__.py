"""Ring and region addressing for the infinite world."""
from .rings import BIOME_STYLES, GeneratedRegionCache, RingCatalog, RingDefinition
from .regions import RegionId, RegionIndex, TransitionInfo, quadrant_for_offset, region_key

__all__ = [
    "BIOME_STYLES",
    "GeneratedRegionCache",
    "RingCatalog",
    "RingDefinition",
    "RegionId",
    "RegionIndex",
    "TransitionInfo",
    "quadrant_for_offset",
    "region_key",
]
