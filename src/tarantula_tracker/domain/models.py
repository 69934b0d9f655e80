"""Domain models for the tarantula tracker."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class OwnerRecord:
    """Represents a keeper account stored in the database."""

    id: UUID
    telegram_user_id: int
    chat_id: int | None = None
    last_active_at: datetime | None = None
