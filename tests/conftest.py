"""Shared test fixtures."""

import logging
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from uuid import UUID, uuid4

import pytest

from tarantula_tracker.adapters.telegram_client import TelegramClient
from tarantula_tracker.config import Settings
from tarantula_tracker.containers import AppContainer
from tarantula_tracker.domain.care import (
    CareSubject,
    FeedingRecord,
    GroupMembership,
    MaintenanceSchedule,
    MoltRecord,
    SpeciesProfile,
)
from tarantula_tracker.domain.models import OwnerRecord
from tarantula_tracker.domain.notifications import (
    AlertPayload,
    NotificationPreferences,
)
from tarantula_tracker.services.commands import BotCommandHandler
from tarantula_tracker.services.dispatch import TelegramAlertDispatcher
from tarantula_tracker.services.intervals import IntervalCatalog
from tarantula_tracker.services.notifications import (
    AlertDispatcher,
    CareNotificationService,
    CareRepository,
)
from tarantula_tracker.services.owners import OwnerRepository, OwnerService
from tarantula_tracker.services.preferences import (
    PreferencesRepository,
    PreferencesService,
)
from tarantula_tracker.services.scheduler import ScheduleClock

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


@dataclass
class InMemoryOwnerRepository(OwnerRepository):
    """In-memory owner repository for tests."""

    owners: dict[int, OwnerRecord] = field(default_factory=dict)
    touched: list[UUID] = field(default_factory=list)
    fail_listing: bool = False

    def get_by_telegram_id(self, telegram_user_id: int) -> OwnerRecord | None:
        return self.owners.get(telegram_user_id)

    def get_by_id(self, owner_id: UUID) -> OwnerRecord | None:
        for owner in self.owners.values():
            if owner.id == owner_id:
                return owner
        return None

    def create_owner(self, telegram_user_id: int, chat_id: int) -> OwnerRecord:
        owner = OwnerRecord(
            id=uuid4(),
            telegram_user_id=telegram_user_id,
            chat_id=chat_id,
            last_active_at=NOW,
        )
        self.owners[telegram_user_id] = owner
        return owner

    def touch_last_active(self, owner_id: UUID, chat_id: int) -> None:
        self.touched.append(owner_id)

    def list_active_owners(self, active_since: datetime) -> list[OwnerRecord]:
        if self.fail_listing:
            raise RuntimeError("storage unavailable")
        return [
            owner
            for owner in self.owners.values()
            if owner.last_active_at is not None and owner.last_active_at >= active_since
        ]

    def add(self, telegram_user_id: int, chat_id: int | None = 1) -> OwnerRecord:
        owner = OwnerRecord(
            id=uuid4(),
            telegram_user_id=telegram_user_id,
            chat_id=chat_id,
            last_active_at=NOW,
        )
        self.owners[telegram_user_id] = owner
        return owner


@dataclass
class InMemoryPreferencesRepository(PreferencesRepository):
    """In-memory preferences repository for tests."""

    preferences: dict[UUID, NotificationPreferences] = field(default_factory=dict)
    pause_updates: list[tuple[UUID, bool, datetime | None, str]] = field(
        default_factory=list
    )
    failing_owners: set[UUID] = field(default_factory=set)

    def get_preferences(self, owner_id: UUID) -> NotificationPreferences | None:
        if owner_id in self.failing_owners:
            raise RuntimeError("storage unavailable")
        return self.preferences.get(owner_id)

    def create_preferences(self, preferences: NotificationPreferences) -> None:
        self.preferences[preferences.owner_id] = preferences

    def set_pause(
        self,
        owner_id: UUID,
        paused: bool,
        pause_end: datetime | None,
        reason: str,
    ) -> None:
        self.pause_updates.append((owner_id, paused, pause_end, reason))
        current = self.preferences.get(owner_id) or NotificationPreferences(owner_id)
        self.preferences[owner_id] = replace(
            current, paused=paused, pause_end=pause_end, pause_reason=reason
        )


@dataclass
class InMemoryCareRepository(CareRepository):
    """In-memory care repository keyed by owner, subject and group ids."""

    subjects: dict[UUID, list[CareSubject]] = field(default_factory=dict)
    direct_feedings: dict[UUID, list[FeedingRecord]] = field(default_factory=dict)
    communal_feedings: dict[UUID, list[FeedingRecord]] = field(default_factory=dict)
    memberships: dict[UUID, list[GroupMembership]] = field(default_factory=dict)
    molts: dict[UUID, list[MoltRecord]] = field(default_factory=dict)
    species: dict[int, SpeciesProfile] = field(default_factory=dict)
    schedules: dict[UUID, list[MaintenanceSchedule]] = field(default_factory=dict)
    failing_subjects: set[UUID] = field(default_factory=set)
    fail_species: bool = False

    def list_subjects(self, owner_id: UUID) -> list[CareSubject]:
        return list(self.subjects.get(owner_id, []))

    def list_direct_feedings(self, subject_id: UUID) -> list[FeedingRecord]:
        if subject_id in self.failing_subjects:
            raise RuntimeError("storage unavailable")
        return list(self.direct_feedings.get(subject_id, []))

    def list_communal_feedings(self, group_id: UUID) -> list[FeedingRecord]:
        return list(self.communal_feedings.get(group_id, []))

    def list_memberships(self, subject_id: UUID) -> list[GroupMembership]:
        return list(self.memberships.get(subject_id, []))

    def list_molt_history(self, subject_id: UUID) -> list[MoltRecord]:
        return list(self.molts.get(subject_id, []))

    def get_species_profile(self, species_id: int) -> SpeciesProfile | None:
        if self.fail_species:
            raise RuntimeError("storage unavailable")
        return self.species.get(species_id)

    def list_maintenance_schedules(self, owner_id: UUID) -> list[MaintenanceSchedule]:
        return list(self.schedules.get(owner_id, []))

    def add_subject(self, owner_id: UUID, **overrides: object) -> CareSubject:
        values: dict[str, object] = {
            "id": uuid4(),
            "owner_id": owner_id,
            "name": "Rosie",
            "species_id": None,
        }
        values.update(overrides)
        subject = CareSubject(**values)  # type: ignore[arg-type]
        self.subjects.setdefault(owner_id, []).append(subject)
        return subject


@dataclass
class FakeTelegramClient(TelegramClient):
    """Fake Telegram client that records messages."""

    messages: list[tuple[int, str]] = field(default_factory=list)
    parse_modes: list[str | None] = field(default_factory=list)
    commands: list[dict[str, str]] | None = None
    menu_button: dict[str, object] | None = None
    fail_sends: bool = False

    async def send_message(
        self, chat_id: int, text: str, parse_mode: str | None = None
    ) -> None:
        if self.fail_sends:
            raise RuntimeError("telegram unavailable")
        self.messages.append((chat_id, text))
        self.parse_modes.append(parse_mode)

    async def set_my_commands(self, commands: list[dict[str, str]]) -> None:
        self.commands = commands

    async def set_chat_menu_button(
        self, menu_button: dict[str, object] | None = None
    ) -> None:
        self.menu_button = menu_button


@dataclass
class RecordingDispatcher(AlertDispatcher):
    """Dispatcher that keeps every payload it is given."""

    sent: list[tuple[OwnerRecord, AlertPayload]] = field(default_factory=list)
    fail: bool = False

    async def dispatch(self, owner: OwnerRecord, payload: AlertPayload) -> None:
        if self.fail:
            raise RuntimeError("dispatch failed")
        self.sent.append((owner, payload))


def build_notification_service(
    care_repository: InMemoryCareRepository,
    preferences_repository: InMemoryPreferencesRepository,
    dispatcher: AlertDispatcher,
) -> CareNotificationService:
    return CareNotificationService(
        care_repository=care_repository,
        preferences_service=PreferencesService(preferences_repository),
        dispatcher=dispatcher,
        interval_catalog=IntervalCatalog(care_repository),
    )


@pytest.fixture
def logs(
    caplog: pytest.LogCaptureFixture, monkeypatch: pytest.MonkeyPatch
) -> pytest.LogCaptureFixture:
    monkeypatch.setattr(logging.getLogger("tarantula_tracker"), "propagate", True)
    caplog.set_level(logging.INFO, logger="tarantula_tracker")
    return caplog


@pytest.fixture
def settings() -> Settings:
    return Settings(
        telegram_bot_token="test-token",
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
        admin_token="admin-token",
        scheduler_enabled=False,
    )


@pytest.fixture
def owner_repository() -> InMemoryOwnerRepository:
    return InMemoryOwnerRepository()


@pytest.fixture
def preferences_repository() -> InMemoryPreferencesRepository:
    return InMemoryPreferencesRepository()


@pytest.fixture
def care_repository() -> InMemoryCareRepository:
    return InMemoryCareRepository()


@pytest.fixture
def telegram_client() -> FakeTelegramClient:
    return FakeTelegramClient()


@pytest.fixture
def dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()


@pytest.fixture
def notification_service(
    care_repository: InMemoryCareRepository,
    preferences_repository: InMemoryPreferencesRepository,
    dispatcher: RecordingDispatcher,
) -> CareNotificationService:
    return build_notification_service(
        care_repository, preferences_repository, dispatcher
    )


@pytest.fixture
def container(
    settings: Settings,
    owner_repository: InMemoryOwnerRepository,
    preferences_repository: InMemoryPreferencesRepository,
    care_repository: InMemoryCareRepository,
    telegram_client: FakeTelegramClient,
) -> AppContainer:
    owner_service = OwnerService(owner_repository)
    preferences_service = PreferencesService(preferences_repository)
    notification_service = CareNotificationService(
        care_repository=care_repository,
        preferences_service=preferences_service,
        dispatcher=TelegramAlertDispatcher(telegram_client),
        interval_catalog=IntervalCatalog(care_repository),
    )
    command_handler = BotCommandHandler(
        owner_service=owner_service,
        preferences_service=preferences_service,
        notification_service=notification_service,
        telegram_client=telegram_client,
        clock=lambda: NOW,
    )

    def create_clock() -> ScheduleClock:
        return ScheduleClock(
            owner_service=owner_service,
            notification_service=notification_service,
            tick_seconds=3600,
            clock=lambda: NOW,
        )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        telegram_client=telegram_client,
        owner_service=owner_service,
        preferences_service=preferences_service,
        notification_service=notification_service,
        command_handler=command_handler,
        create_clock=create_clock,
        close_resources=close_resources,
    )
