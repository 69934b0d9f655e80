"""Owner-related business logic."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Protocol
from uuid import UUID

from tarantula_tracker.domain.models import OwnerRecord

ACTIVE_OWNER_DAYS = 30


class OwnerRepository(Protocol):
    """Persistence interface for owner data."""

    def get_by_telegram_id(self, telegram_user_id: int) -> OwnerRecord | None:
        """Return the owner for a Telegram user id, if present."""

    def get_by_id(self, owner_id: UUID) -> OwnerRecord | None:
        """Return the owner with the given id, if present."""

    def create_owner(self, telegram_user_id: int, chat_id: int) -> OwnerRecord:
        """Create and return a new owner record."""

    def touch_last_active(self, owner_id: UUID, chat_id: int) -> None:
        """Update the last active timestamp and chat for the owner."""

    def list_active_owners(self, active_since: datetime) -> list[OwnerRecord]:
        """Return owners with a chat who were active since the given time."""


@dataclass
class OwnerService:
    """Application service for owner lifecycle actions."""

    repository: OwnerRepository
    active_days: int = ACTIVE_OWNER_DAYS

    def ensure_owner(self, telegram_user_id: int, chat_id: int) -> OwnerRecord:
        """Ensure an owner exists for the Telegram id and return it."""
        existing = self.repository.get_by_telegram_id(telegram_user_id)
        if existing:
            self.repository.touch_last_active(existing.id, chat_id)
            return existing
        return self.repository.create_owner(telegram_user_id, chat_id)

    def get_owner(self, owner_id: UUID) -> OwnerRecord | None:
        """Return the owner with the given id, if present."""
        return self.repository.get_by_id(owner_id)

    def list_active_owners(self, now: datetime) -> list[OwnerRecord]:
        """Return owners eligible for scheduled alerts."""
        since = now - timedelta(days=self.active_days)
        return [
            owner
            for owner in self.repository.list_active_owners(since)
            if owner.chat_id is not None
        ]
