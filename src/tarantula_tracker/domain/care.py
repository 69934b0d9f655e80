"""Domain models for animals, feedings and molts."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID

from tarantula_tracker.timeutils import as_utc


class LifecycleStage(Enum):
    """Molt cycle stage recorded on a subject."""

    NORMAL = "Normal"
    PRE_MOLT = "Pre-molt"
    MOLTING = "Molting"
    POST_MOLT = "Post-molt"

    @classmethod
    def parse(cls, raw: object) -> "LifecycleStage":
        """Return the stage for a stored name, defaulting to NORMAL."""
        for stage in cls:
            if stage.value == raw:
                return stage
        return cls.NORMAL


class FeedingOutcome(Enum):
    """Result of offering food."""

    ACCEPTED = "Accepted"
    REJECTED = "Rejected"
    PARTIAL = "Partial"
    PRE_MOLT = "Pre-molt"
    DEAD = "Dead"
    OVERFLOW = "Overflow"

    @classmethod
    def parse(cls, raw: object) -> "FeedingOutcome":
        """Return the outcome for a stored name, defaulting to ACCEPTED."""
        for outcome in cls:
            if outcome.value == raw:
                return outcome
        return cls.ACCEPTED

    @property
    def is_refusal(self) -> bool:
        """Return True when the animal refused the prey."""
        return self in {FeedingOutcome.REJECTED, FeedingOutcome.PRE_MOLT}

    @property
    def is_eaten(self) -> bool:
        """Return True when at least part of the prey was eaten."""
        return self in {FeedingOutcome.ACCEPTED, FeedingOutcome.PARTIAL}


@dataclass(frozen=True)
class CareSubject:
    """A single tracked tarantula."""

    id: UUID
    owner_id: UUID
    name: str
    species_id: int | None
    species_name: str | None = None
    current_size_cm: float | None = None
    stage: LifecycleStage = LifecycleStage.NORMAL
    group_id: UUID | None = None
    last_molt_at: datetime | None = None
    estimated_age_months: int | None = None
    feeding_muted_until: datetime | None = None


@dataclass(frozen=True)
class FeedingRecord:
    """Food offered to a single subject or to a communal group."""

    id: UUID
    fed_at: datetime
    outcome: FeedingOutcome = FeedingOutcome.ACCEPTED
    subject_id: UUID | None = None
    group_id: UUID | None = None
    prey_count: int = 1


@dataclass(frozen=True)
class GroupMembership:
    """Interval during which a subject belongs to a communal group."""

    subject_id: UUID
    group_id: UUID
    joined_at: datetime
    left_at: datetime | None = None

    def is_valid(self) -> bool:
        """Return False for windows that end before they start."""
        return self.left_at is None or as_utc(self.left_at) >= as_utc(self.joined_at)

    def covers(self, moment: datetime) -> bool:
        """Return True when the moment falls inside [joined_at, left_at)."""
        if not self.is_valid() or as_utc(moment) < as_utc(self.joined_at):
            return False
        return self.left_at is None or as_utc(moment) < as_utc(self.left_at)


@dataclass(frozen=True)
class MoltRecord:
    """A recorded molt."""

    id: UUID
    subject_id: UUID
    molted_at: datetime
    pre_molt_length_cm: float | None = None
    post_molt_length_cm: float | None = None
    successful: bool = True


@dataclass(frozen=True)
class SizeBand:
    """Feeding interval for a species within a body-length band."""

    category: str
    max_size_cm: float
    min_days: int
    max_days: int


@dataclass(frozen=True)
class SpeciesProfile:
    """Static reference data for a species."""

    id: int
    scientific_name: str
    common_name: str | None = None
    adult_size_cm: float | None = None
    temperament: str | None = None
    size_bands: tuple[SizeBand, ...] = ()


@dataclass(frozen=True)
class FeedingInterval:
    """Recommended number of days between feedings."""

    min_days: int
    max_days: int
    category: str | None = None

    @property
    def cadence_days(self) -> float:
        """Return the midpoint of the interval."""
        return (self.min_days + self.max_days) / 2


@dataclass(frozen=True)
class MaintenanceSchedule:
    """Recurring upkeep task for a communal group or colony."""

    group_id: UUID
    group_name: str
    task: str
    frequency_days: int
    last_performed_at: datetime | None = None
