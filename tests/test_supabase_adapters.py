"""Tests for Supabase adapter implementations."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID, uuid4

import pytest

from tarantula_tracker.adapters.supabase_care_repository import (
    SupabaseCareRepository,
)
from tarantula_tracker.adapters.supabase_owner_repository import (
    SupabaseOwnerRepository,
)
from tarantula_tracker.adapters.supabase_preferences_repository import (
    SupabasePreferencesRepository,
)
from tarantula_tracker.domain.care import FeedingOutcome, LifecycleStage


@dataclass
class FakeResponse:
    data: list[dict[str, object]] | None


@dataclass
class FakeTable:
    name: str
    response_queue: dict[str, list[list[dict[str, object]]]] = field(
        default_factory=lambda: {"select": [], "insert": [], "update": []}
    )
    last_payload: object | None = None
    last_filters: list[tuple[str, object]] = field(default_factory=list)

    def queue(self, action: str, data: list[dict[str, object]]) -> None:
        self.response_queue[action].append(data)

    def select(self, *_args) -> "FakeTable":
        self._action = "select"
        return self

    def insert(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "insert"
        self.last_payload = payload
        return self

    def update(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "update"
        self.last_payload = payload
        return self

    def eq(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    def gte(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    def limit(self, _count: int) -> "FakeTable":
        return self

    def order(self, _column: str, desc: bool = False) -> "FakeTable":
        return self

    def execute(self) -> FakeResponse:
        action = getattr(self, "_action", "select")
        queue = self.response_queue.get(action, [])
        data = queue.pop(0) if queue else []
        return FakeResponse(data=data)


@dataclass
class FakeSupabaseClient:
    tables: dict[str, FakeTable] = field(default_factory=dict)

    def table(self, name: str) -> FakeTable:
        if name not in self.tables:
            self.tables[name] = FakeTable(name=name)
        return self.tables[name]


def test_supabase_owner_repository_roundtrip() -> None:
    client = FakeSupabaseClient()
    owners_table = client.table("owners")
    owner_id = str(uuid4())
    row = {
        "id": owner_id,
        "telegram_user_id": 123,
        "chat_id": 99,
        "last_active_at": "2024-06-01T12:00:00+00:00",
    }
    owners_table.queue("insert", [row])
    owners_table.queue("select", [row])

    repository = SupabaseOwnerRepository(client)
    created = repository.create_owner(123, 99)
    fetched = repository.get_by_telegram_id(123)

    assert str(created.id) == owner_id
    assert owners_table.last_payload is not None
    assert fetched is not None
    assert fetched.chat_id == 99
    assert fetched.last_active_at == datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


def test_supabase_owner_repository_create_failure() -> None:
    repository = SupabaseOwnerRepository(FakeSupabaseClient())

    with pytest.raises(RuntimeError):
        repository.create_owner(123, 99)


def test_supabase_owner_repository_lists_active_owners() -> None:
    client = FakeSupabaseClient()
    owners_table = client.table("owners")
    owners_table.queue(
        "select",
        [
            {"id": str(uuid4()), "telegram_user_id": 1, "chat_id": 10},
            {"id": str(uuid4()), "telegram_user_id": 2, "chat_id": None},
        ],
    )
    since = datetime(2024, 5, 1, tzinfo=UTC)

    owners = SupabaseOwnerRepository(client).list_active_owners(since)

    assert [owner.chat_id for owner in owners] == [10, None]
    assert ("is_active", True) in owners_table.last_filters
    assert ("last_active_at", since.isoformat()) in owners_table.last_filters


def test_supabase_preferences_repository_fills_defaults() -> None:
    client = FakeSupabaseClient()
    table = client.table("notification_preferences")
    owner_id = uuid4()
    table.queue(
        "select",
        [
            {
                "owner_id": str(owner_id),
                "notification_time_utc": "08:30:00",
                "molt_alert_days": None,
                "paused": True,
                "pause_end": "2024-06-04T12:00:00Z",
            }
        ],
    )

    preferences = SupabasePreferencesRepository(client).get_preferences(owner_id)

    assert preferences is not None
    assert preferences.notification_time_utc == "08:30"
    assert preferences.molt_alert_days == 7
    assert preferences.notifications_enabled
    assert preferences.paused
    assert preferences.pause_end == datetime(2024, 6, 4, 12, 0, tzinfo=UTC)


def test_supabase_preferences_repository_set_pause() -> None:
    client = FakeSupabaseClient()
    owner_id = uuid4()

    SupabasePreferencesRepository(client).set_pause(owner_id, False, None, "")

    table = client.tables["notification_preferences"]
    assert isinstance(table.last_payload, dict)
    assert table.last_payload["paused"] is False
    assert table.last_payload["pause_end"] is None
    assert ("owner_id", str(owner_id)) in table.last_filters


def test_supabase_care_repository_parses_subjects() -> None:
    client = FakeSupabaseClient()
    owner_id = uuid4()
    subject_id = uuid4()
    client.table("tarantulas").queue(
        "select",
        [
            {
                "id": str(subject_id),
                "owner_id": str(owner_id),
                "name": "Rosie",
                "species_id": 4,
                "current_size_cm": "5.5",
                "molt_stage": "Pre-molt",
                "group_id": None,
                "estimated_age_months": 14,
                "species": {"scientific_name": "Grammostola rosea"},
            }
        ],
    )

    subjects = SupabaseCareRepository(client).list_subjects(owner_id)

    assert len(subjects) == 1
    subject = subjects[0]
    assert subject.id == subject_id
    assert subject.species_name == "Grammostola rosea"
    assert subject.current_size_cm == 5.5
    assert subject.stage is LifecycleStage.PRE_MOLT
    assert subject.group_id is None
    assert ("is_deceased", False) in client.tables["tarantulas"].last_filters


def test_supabase_care_repository_parses_feedings_and_memberships() -> None:
    client = FakeSupabaseClient()
    subject_id = uuid4()
    group_id = uuid4()
    client.table("feeding_events").queue(
        "select",
        [
            {
                "id": str(uuid4()),
                "tarantula_id": str(subject_id),
                "fed_at": "2024-05-30T10:00:00+00:00",
                "outcome": "Rejected",
            },
            {"id": str(uuid4()), "tarantula_id": str(subject_id), "fed_at": None},
        ],
    )
    client.table("group_memberships").queue(
        "select",
        [
            {
                "tarantula_id": str(subject_id),
                "group_id": str(group_id),
                "joined_at": "2024-01-01T00:00:00Z",
                "left_at": None,
            }
        ],
    )
    repository = SupabaseCareRepository(client)

    feedings = repository.list_direct_feedings(subject_id)
    memberships = repository.list_memberships(subject_id)

    assert len(feedings) == 1
    assert feedings[0].outcome is FeedingOutcome.REJECTED
    assert feedings[0].prey_count == 1
    assert memberships[0].group_id == group_id
    assert memberships[0].left_at is None


def test_supabase_care_repository_species_profile() -> None:
    client = FakeSupabaseClient()
    client.table("species").queue(
        "select",
        [
            {
                "id": 4,
                "scientific_name": "Grammostola rosea",
                "adult_size_cm": 14,
                "temperament": "Docile",
            }
        ],
    )
    client.table("species_feeding_bands").queue(
        "select",
        [
            {"size_category": "Sling", "max_size_cm": 3, "min_days": 4, "max_days": 7},
            {
                "size_category": "Adult",
                "max_size_cm": 20,
                "min_days": 14,
                "max_days": 28,
            },
        ],
    )

    profile = SupabaseCareRepository(client).get_species_profile(4)

    assert profile is not None
    assert profile.adult_size_cm == 14.0
    assert [band.category for band in profile.size_bands] == ["Sling", "Adult"]


def test_supabase_care_repository_missing_species() -> None:
    client = FakeSupabaseClient()

    assert SupabaseCareRepository(client).get_species_profile(99) is None
    assert "species_feeding_bands" not in client.tables


def test_supabase_care_repository_molts_and_maintenance() -> None:
    client = FakeSupabaseClient()
    subject_id = uuid4()
    owner_id = uuid4()
    client.table("molt_records").queue(
        "select",
        [
            {
                "id": str(uuid4()),
                "tarantula_id": str(subject_id),
                "molted_at": "2024-01-10T00:00:00Z",
                "post_molt_length_cm": 6.1,
            },
            {"id": str(uuid4()), "tarantula_id": str(subject_id), "molted_at": None},
        ],
    )
    client.table("group_maintenance").queue(
        "select",
        [
            {
                "group_id": str(uuid4()),
                "task": "Clean",
                "frequency_days": 14,
                "last_performed_at": None,
                "communal_groups": None,
            }
        ],
    )
    repository = SupabaseCareRepository(client)

    molts = repository.list_molt_history(subject_id)
    schedules = repository.list_maintenance_schedules(owner_id)

    assert len(molts) == 1
    assert molts[0].post_molt_length_cm == 6.1
    assert molts[0].successful
    assert schedules[0].group_name == "Unnamed group"
    assert schedules[0].frequency_days == 14
    assert isinstance(schedules[0].group_id, UUID)
