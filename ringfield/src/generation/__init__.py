"""Generation utilities for the ringfield distribution engine.

Only the leaf modules are re-exported here; the pipeline stages depend on
``ringfield.src.world`` and are imported from their own modules.
"""
from .config import WorldSeeds, load_world_seeds, mix_region_seed
from .errors import ConfigurationError, GenerationCancelled, RingCatalogOverflowError
from .features import Formation, FormationKind, PlacementRecord, Rotation, SizeCategory
from .noise_field import GeologicalField, NoiseField
from .settings import (
    BaseRing,
    CorridorSettings,
    DistributionSettings,
    NoiseSettings,
    PlacementSettings,
    RingSettings,
    ZoneSettings,
    load_distribution_settings,
    validate_settings,
)

__all__ = [
    "WorldSeeds",
    "load_world_seeds",
    "mix_region_seed",
    "ConfigurationError",
    "GenerationCancelled",
    "RingCatalogOverflowError",
    "Formation",
    "FormationKind",
    "PlacementRecord",
    "Rotation",
    "SizeCategory",
    "GeologicalField",
    "NoiseField",
    "BaseRing",
    "CorridorSettings",
    "DistributionSettings",
    "NoiseSettings",
    "PlacementSettings",
    "RingSettings",
    "ZoneSettings",
    "load_distribution_settings",
    "validate_settings",
]
