"""Domain models for molt predictions."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from tarantula_tracker.domain.feeding import FeedingBehavior


class EstimationTier(Enum):
    """Which source the predicted cycle length came from."""

    EMPIRICAL = "empirical"
    HYBRID = "hybrid"
    HEURISTIC = "heuristic"


class ConfidenceLevel(Enum):
    """Four-level confidence label for a prediction."""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"
    NONE = "None"


@dataclass(frozen=True)
class MoltPrediction:
    """Estimated next molt for a subject."""

    tier: EstimationTier
    cycle_days: float
    confidence: ConfidenceLevel
    confidence_score: int
    size_indicator: str
    feeding_behavior: FeedingBehavior
    recommendation: str
    predicted_at: datetime | None = None
    days_until: int | None = None
    last_molt_at: datetime | None = None
    signs: list[str] = field(default_factory=list)
