"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from tarantula_tracker.adapters.supabase_care_repository import SupabaseCareRepository
from tarantula_tracker.adapters.supabase_owner_repository import (
    SupabaseOwnerRepository,
)
from tarantula_tracker.adapters.supabase_preferences_repository import (
    SupabasePreferencesRepository,
)
from tarantula_tracker.adapters.telegram_client import (
    HttpxTelegramClient,
    TelegramClient,
)
from tarantula_tracker.config import Settings
from tarantula_tracker.services.commands import BotCommandHandler
from tarantula_tracker.services.dispatch import TelegramAlertDispatcher
from tarantula_tracker.services.intervals import IntervalCatalog
from tarantula_tracker.services.notifications import CareNotificationService
from tarantula_tracker.services.owners import OwnerService
from tarantula_tracker.services.preferences import PreferencesService
from tarantula_tracker.services.scheduler import ScheduleClock


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    telegram_client: TelegramClient
    owner_service: OwnerService
    preferences_service: PreferencesService
    notification_service: CareNotificationService
    command_handler: BotCommandHandler
    create_clock: Callable[[], ScheduleClock]
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    owner_repository = SupabaseOwnerRepository(supabase_client)
    preferences_repository = SupabasePreferencesRepository(supabase_client)
    care_repository = SupabaseCareRepository(supabase_client)
    telegram_client = HttpxTelegramClient.create(resolved_settings.telegram_bot_token)

    owner_service = OwnerService(
        owner_repository, active_days=resolved_settings.active_owner_days
    )
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
    )

    def create_clock() -> ScheduleClock:
        return ScheduleClock(
            owner_service=owner_service,
            notification_service=notification_service,
            tick_seconds=resolved_settings.scheduler_tick_seconds,
            max_concurrency=resolved_settings.scheduler_max_concurrency,
        )

    async def close_resources() -> None:
        await telegram_client.close()

    return AppContainer(
        settings=resolved_settings,
        telegram_client=telegram_client,
        owner_service=owner_service,
        preferences_service=preferences_service,
        notification_service=notification_service,
        command_handler=command_handler,
        create_clock=create_clock,
        close_resources=close_resources,
    )
