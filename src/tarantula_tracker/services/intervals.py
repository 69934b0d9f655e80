"""Feeding interval lookup by species and body size."""

import logging
from dataclasses import dataclass
from typing import Protocol

from tarantula_tracker.domain.care import FeedingInterval, SpeciesProfile

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = FeedingInterval(min_days=7, max_days=14)
SMALL_SPECIES_MAX_CM = 8.0
SMALL_SPECIES_SIZE_RATIO = 0.3
LARGE_SPECIES_SIZE_RATIO = 0.4


class SpeciesRepository(Protocol):
    """Persistence interface for species reference data."""

    def get_species_profile(self, species_id: int) -> SpeciesProfile | None:
        """Return the species profile, if known."""


def estimate_current_size(profile: SpeciesProfile | None) -> float | None:
    """Guess a body length when none was recorded."""
    if profile is None or not profile.adult_size_cm:
        return None
    if profile.adult_size_cm <= SMALL_SPECIES_MAX_CM:
        return profile.adult_size_cm * SMALL_SPECIES_SIZE_RATIO
    return profile.adult_size_cm * LARGE_SPECIES_SIZE_RATIO


def match_interval(
    profile: SpeciesProfile | None, current_size_cm: float | None
) -> FeedingInterval | None:
    """Return the band interval for the size, or None without reference data.

    Bands are ordered by their upper bound and a size matches the first band
    whose upper bound it does not exceed. Sizes past the largest band fall
    back to that band.
    """
    if profile is None or not profile.size_bands:
        return None
    size = current_size_cm
    if size is None or size <= 0:
        size = estimate_current_size(profile)
    if size is None:
        return None
    bands = sorted(profile.size_bands, key=lambda band: band.max_size_cm)
    chosen = bands[-1]
    for band in bands:
        if size <= band.max_size_cm:
            chosen = band
            break
    return FeedingInterval(
        min_days=chosen.min_days,
        max_days=max(chosen.min_days, chosen.max_days),
        category=chosen.category,
    )


def lookup_interval(
    profile: SpeciesProfile | None, current_size_cm: float | None
) -> FeedingInterval:
    """Return the feeding interval, falling back to the default band."""
    return match_interval(profile, current_size_cm) or DEFAULT_INTERVAL


@dataclass
class IntervalCatalog:
    """Resolve feeding intervals from stored species data."""

    repository: SpeciesRepository

    def profile(self, species_id: int | None) -> SpeciesProfile | None:
        """Return the species profile, or None when it cannot be loaded."""
        if species_id is None:
            return None
        try:
            return self.repository.get_species_profile(species_id)
        except Exception:
            logger.exception(
                "Failed to load species profile", extra={"species_id": species_id}
            )
            return None

    def lookup(
        self, species_id: int | None, current_size_cm: float | None
    ) -> FeedingInterval:
        """Return the interval for a species and size, never raising."""
        return lookup_interval(self.profile(species_id), current_size_cm)
