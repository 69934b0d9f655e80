"""Supabase repository for notification preferences."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from tarantula_tracker.domain.notifications import NotificationPreferences
from tarantula_tracker.services.preferences import PreferencesRepository
from tarantula_tracker.timeutils import parse_timestamp

_DEFAULTS = NotificationPreferences(owner_id=UUID(int=0))


@dataclass
class SupabasePreferencesRepository(PreferencesRepository):
    """Supabase implementation for notification preferences."""

    client: Client

    def get_preferences(self, owner_id: UUID) -> NotificationPreferences | None:
        """Return the stored preferences for an owner."""
        response = (
            self.client.table("notification_preferences")
            .select("*")
            .eq("owner_id", str(owner_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_preferences(owner_id, response.data[0])

    def create_preferences(self, preferences: NotificationPreferences) -> None:
        """Insert a preferences row."""
        self.client.table("notification_preferences").insert(
            {
                "owner_id": str(preferences.owner_id),
                "notifications_enabled": preferences.notifications_enabled,
                "notification_time_utc": preferences.notification_time_utc,
                "feeding_reminder_days": preferences.feeding_reminder_days,
                "molt_predictions_enabled": preferences.molt_predictions_enabled,
                "molt_alert_days": preferences.molt_alert_days,
                "post_molt_mute_days": preferences.post_molt_mute_days,
                "maintenance_reminders_enabled": (
                    preferences.maintenance_reminders_enabled
                ),
                "paused": preferences.paused,
                "pause_end": (
                    preferences.pause_end.isoformat() if preferences.pause_end else None
                ),
                "pause_reason": preferences.pause_reason,
            }
        ).execute()

    def set_pause(
        self,
        owner_id: UUID,
        paused: bool,
        pause_end: datetime | None,
        reason: str,
    ) -> None:
        """Update the pause fields for an owner."""
        self.client.table("notification_preferences").update(
            {
                "paused": paused,
                "pause_end": pause_end.isoformat() if pause_end else None,
                "pause_reason": reason,
                "updated_at": datetime.now(tz=UTC).isoformat(),
            }
        ).eq("owner_id", str(owner_id)).execute()


def _parse_preferences(
    owner_id: UUID, row: dict[str, object]
) -> NotificationPreferences:
    def value(key: str, default: object) -> object:
        raw = row.get(key)
        return default if raw is None else raw

    return NotificationPreferences(
        owner_id=owner_id,
        notifications_enabled=bool(
            value("notifications_enabled", _DEFAULTS.notifications_enabled)
        ),
        notification_time_utc=_time_of_day(
            value("notification_time_utc", _DEFAULTS.notification_time_utc)
        ),
        feeding_reminder_days=int(
            value("feeding_reminder_days", _DEFAULTS.feeding_reminder_days)
        ),
        molt_predictions_enabled=bool(
            value("molt_predictions_enabled", _DEFAULTS.molt_predictions_enabled)
        ),
        molt_alert_days=int(value("molt_alert_days", _DEFAULTS.molt_alert_days)),
        post_molt_mute_days=int(
            value("post_molt_mute_days", _DEFAULTS.post_molt_mute_days)
        ),
        maintenance_reminders_enabled=bool(
            value(
                "maintenance_reminders_enabled",
                _DEFAULTS.maintenance_reminders_enabled,
            )
        ),
        paused=bool(value("paused", False)),
        pause_end=parse_timestamp(row.get("pause_end")),
        pause_reason=str(value("pause_reason", "")),
    )


def _time_of_day(raw: object) -> str:
    # Postgres time columns come back as "HH:MM:SS".
    return ":".join(str(raw).split(":")[:2])
