"""Exceptions raised by the distribution pipeline."""
from __future__ import annotations


class ConfigurationError(ValueError):
    """Settings that can never produce a valid world, detected at startup."""


class RingCatalogOverflowError(RuntimeError):
    """The ring catalog needed more extensions than its hard iteration cap."""


class GenerationCancelled(RuntimeError):
    """A region's generation was abandoned through its cancellation token."""
