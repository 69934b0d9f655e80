"""Domain models for notification preferences and alert payloads."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from tarantula_tracker.domain.feeding import FeedingStatus
from tarantula_tracker.domain.molts import MoltPrediction


@dataclass(frozen=True)
class NotificationPreferences:
    """Per-owner notification settings."""

    owner_id: UUID
    notifications_enabled: bool = True
    notification_time_utc: str = "12:00"
    feeding_reminder_days: int = 7
    molt_predictions_enabled: bool = True
    molt_alert_days: int = 7
    post_molt_mute_days: int = 7
    maintenance_reminders_enabled: bool = True
    paused: bool = False
    pause_end: datetime | None = None
    pause_reason: str = ""


@dataclass(frozen=True)
class FeedingAlert:
    """A subject that is due or overdue for feeding."""

    subject_name: str
    species_name: str | None
    status: FeedingStatus
    days_since_feeding: float
    min_days: int
    max_days: int


@dataclass(frozen=True)
class MoltAlert:
    """A subject expected to molt soon."""

    subject_name: str
    prediction: MoltPrediction


@dataclass(frozen=True)
class MaintenanceAlert:
    """A group upkeep task that is due or overdue."""

    group_name: str
    task: str
    days_overdue: int | None


@dataclass
class AlertPayload:
    """Everything one owner should be told on this tick."""

    owner_id: UUID
    chat_id: int | None
    generated_at: datetime
    feeding: list[FeedingAlert] = field(default_factory=list)
    molts: list[MoltAlert] = field(default_factory=list)
    maintenance: list[MaintenanceAlert] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """Return True when there is nothing to send."""
        return not (self.feeding or self.molts or self.maintenance)
