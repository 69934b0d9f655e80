"""Domain models for feeding status."""

from dataclasses import dataclass
from enum import Enum

from tarantula_tracker.domain.care import FeedingInterval


class FeedingStatus(Enum):
    """Closed set of feeding states a subject can be in."""

    PRE_MOLT = "pre_molt"
    MOLTING = "molting"
    POST_MOLT = "post_molt"
    RECOVERING = "recovering"
    NEVER_FED = "never_fed"
    OVERDUE = "overdue"
    DUE = "due"
    RECENTLY_FED = "recently_fed"

    @property
    def needs_feeding(self) -> bool:
        """Return True for the states that should raise a feeding reminder."""
        return self in {
            FeedingStatus.NEVER_FED,
            FeedingStatus.OVERDUE,
            FeedingStatus.DUE,
        }


class FeedingBehavior(Enum):
    """Recent appetite classification."""

    STOPPED = "Stopped"
    REDUCED = "Reduced"
    NORMAL = "Normal"


@dataclass(frozen=True)
class FeedingAssessment:
    """Result of classifying a subject's feeding state."""

    days_since_feeding: float
    status: FeedingStatus
    interval: FeedingInterval


@dataclass(frozen=True)
class FeedingBehaviorSignal:
    """Recent feeding activity used as a pre-molt indicator."""

    refusals_recent: int
    feedings_recent: int
    days_since_eaten: float | None = None

    @property
    def behavior(self) -> FeedingBehavior:
        """Classify the signal into a feeding behaviour."""
        if self.refusals_recent > STOPPED_REFUSAL_THRESHOLD:
            return FeedingBehavior.STOPPED
        if self.feedings_recent < REDUCED_FEEDING_THRESHOLD:
            return FeedingBehavior.REDUCED
        return FeedingBehavior.NORMAL


STOPPED_REFUSAL_THRESHOLD = 2
REDUCED_FEEDING_THRESHOLD = 2
