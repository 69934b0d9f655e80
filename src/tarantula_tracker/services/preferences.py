"""Notification preferences service."""

from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Protocol
from uuid import UUID

from tarantula_tracker.domain.notifications import NotificationPreferences
from tarantula_tracker.services.eligibility import pause_expired


class PreferencesRepository(Protocol):
    """Persistence interface for notification preferences."""

    def get_preferences(self, owner_id: UUID) -> NotificationPreferences | None:
        """Return the stored preferences for an owner."""

    def create_preferences(self, preferences: NotificationPreferences) -> None:
        """Store a new preferences row."""

    def set_pause(
        self,
        owner_id: UUID,
        paused: bool,
        pause_end: datetime | None,
        reason: str,
    ) -> None:
        """Update the pause fields for an owner."""


@dataclass
class PreferencesService:
    """Service for reading and updating notification preferences."""

    repository: PreferencesRepository

    def get(self, owner_id: UUID) -> NotificationPreferences:
        """Return preferences, creating the defaults on first use."""
        existing = self.repository.get_preferences(owner_id)
        if existing is not None:
            return existing
        defaults = NotificationPreferences(owner_id=owner_id)
        self.repository.create_preferences(defaults)
        return defaults

    def pause(
        self,
        owner_id: UUID,
        now: datetime,
        days: int | None = None,
        reason: str = "",
    ) -> NotificationPreferences:
        """Pause notifications for a number of days, or indefinitely."""
        current = self.get(owner_id)
        pause_end = now + timedelta(days=days) if days else None
        self.repository.set_pause(owner_id, True, pause_end, reason)
        return replace(current, paused=True, pause_end=pause_end, pause_reason=reason)

    def resume(self, owner_id: UUID) -> NotificationPreferences:
        """Clear any pause."""
        current = self.get(owner_id)
        self.repository.set_pause(owner_id, False, None, "")
        return replace(current, paused=False, pause_end=None, pause_reason="")

    def clear_expired_pause(
        self, preferences: NotificationPreferences, now: datetime
    ) -> NotificationPreferences:
        """Persist the end of a pause whose end time has passed."""
        if not pause_expired(now, preferences):
            return preferences
        self.repository.set_pause(preferences.owner_id, False, None, "")
        return replace(preferences, paused=False, pause_end=None, pause_reason="")
