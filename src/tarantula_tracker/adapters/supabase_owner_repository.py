"""Supabase-backed owner repository."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from tarantula_tracker.domain.models import OwnerRecord
from tarantula_tracker.services.owners import OwnerRepository
from tarantula_tracker.timeutils import parse_timestamp

_OWNER_COLUMNS = "id, telegram_user_id, chat_id, last_active_at"


@dataclass
class SupabaseOwnerRepository(OwnerRepository):
    """Supabase implementation for owner persistence."""

    client: Client

    def get_by_telegram_id(self, telegram_user_id: int) -> OwnerRecord | None:
        """Return the owner for a Telegram user id, if present."""
        response = (
            self.client.table("owners")
            .select(_OWNER_COLUMNS)
            .eq("telegram_user_id", telegram_user_id)
            .limit(1)
            .execute()
        )
        if response.data:
            return _parse_owner(response.data[0])
        return None

    def get_by_id(self, owner_id: UUID) -> OwnerRecord | None:
        """Return the owner with the given id, if present."""
        response = (
            self.client.table("owners")
            .select(_OWNER_COLUMNS)
            .eq("id", str(owner_id))
            .limit(1)
            .execute()
        )
        if response.data:
            return _parse_owner(response.data[0])
        return None

    def create_owner(self, telegram_user_id: int, chat_id: int) -> OwnerRecord:
        """Create a new owner row and return it."""
        response = (
            self.client.table("owners")
            .insert(
                {
                    "telegram_user_id": telegram_user_id,
                    "chat_id": chat_id,
                    "last_active_at": datetime.now(tz=UTC).isoformat(),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create owner in Supabase")
        return _parse_owner(response.data[0])

    def touch_last_active(self, owner_id: UUID, chat_id: int) -> None:
        """Update the last_active_at timestamp and chat id for an owner."""
        self.client.table("owners").update(
            {"chat_id": chat_id, "last_active_at": datetime.now(tz=UTC).isoformat()}
        ).eq("id", str(owner_id)).execute()

    def list_active_owners(self, active_since: datetime) -> list[OwnerRecord]:
        """Return active owners seen since the given time."""
        response = (
            self.client.table("owners")
            .select(_OWNER_COLUMNS)
            .eq("is_active", True)
            .gte("last_active_at", active_since.isoformat())
            .order("last_active_at", desc=True)
            .execute()
        )
        return [_parse_owner(row) for row in response.data or []]


def _parse_owner(row: dict[str, object]) -> OwnerRecord:
    chat_id = row.get("chat_id")
    return OwnerRecord(
        id=UUID(str(row["id"])),
        telegram_user_id=int(row["telegram_user_id"]),
        chat_id=int(chat_id) if chat_id is not None else None,
        last_active_at=parse_timestamp(row.get("last_active_at")),
    )
