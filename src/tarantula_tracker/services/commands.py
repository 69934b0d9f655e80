"""Command handlers for Telegram updates."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from uuid import UUID

from tarantula_tracker.adapters.telegram_client import TelegramClient
from tarantula_tracker.domain.models import OwnerRecord
from tarantula_tracker.services.formatting import format_preferences
from tarantula_tracker.services.notifications import CareNotificationService
from tarantula_tracker.services.owners import OwnerService
from tarantula_tracker.services.preferences import PreferencesService
from tarantula_tracker.telegram_commands import BotCommand

logger = logging.getLogger(__name__)

MAX_PAUSE_DAYS = 365

WELCOME_TEXT = (
    "Welcome to Tarantula Tracker! I'll send a daily summary at 12:00 UTC "
    "with feeding reminders, molt predictions and colony upkeep. "
    "Send /help to see what else I can do."
)
HELP_TEXT = "\n".join(
    [
        "Tarantula Tracker reminders:",
        "/check - run all checks now",
        "/settings - show notification settings",
        "/pause [days] [reason] - pause reminders, indefinitely without days",
        "/resume - resume reminders",
        "",
        "Molt dates are estimates based on past molts and species data. "
        "A spider running late is normal, not a sign of trouble.",
    ]
)
ALL_CLEAR_TEXT = "All your tarantulas are on schedule. Nothing needs attention."
CHECK_FAILED_TEXT = "Sorry, I couldn't run the checks right now. Please try again."
PAUSE_USAGE_TEXT = f"Usage: /pause [days between 1 and {MAX_PAUSE_DAYS}] [reason]"


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


def parse_pause_arguments(text: str) -> tuple[int | None, str] | None:
    """Parse "/pause [days] [reason]" into days and reason.

    Returns None when the days argument is present but invalid.
    """
    parts = text.split(maxsplit=2)[1:]
    if not parts:
        return None, ""
    if not parts[0].isdigit():
        return None, " ".join(parts)
    days = int(parts[0])
    if not 1 <= days <= MAX_PAUSE_DAYS:
        return None
    reason = parts[1] if len(parts) > 1 else ""
    return days, reason


@dataclass
class BotCommandHandler:
    """Handle the bot's slash commands."""

    owner_service: OwnerService
    preferences_service: PreferencesService
    notification_service: CareNotificationService
    telegram_client: TelegramClient
    clock: Callable[[], datetime] = _utc_now

    async def handle(
        self, command: BotCommand, telegram_user_id: int, chat_id: int, text: str
    ) -> None:
        """Dispatch a recognised command."""
        owner = self.owner_service.ensure_owner(telegram_user_id, chat_id)
        if command is BotCommand.START:
            self.preferences_service.get(owner.id)
            await self._reply(chat_id, WELCOME_TEXT)
        elif command is BotCommand.HELP:
            await self._reply(chat_id, HELP_TEXT)
        elif command is BotCommand.SETTINGS:
            preferences = self.preferences_service.get(owner.id)
            await self._reply(chat_id, format_preferences(preferences), "Markdown")
        elif command is BotCommand.PAUSE:
            await self._pause(owner.id, chat_id, text)
        elif command is BotCommand.RESUME:
            self.preferences_service.resume(owner.id)
            await self._reply(chat_id, "Reminders resumed.")
        elif command is BotCommand.CHECK:
            await self._check(replace(owner, chat_id=chat_id), chat_id)

    async def _pause(self, owner_id: UUID, chat_id: int, text: str) -> None:
        parsed = parse_pause_arguments(text)
        if parsed is None:
            await self._reply(chat_id, PAUSE_USAGE_TEXT)
            return
        days, reason = parsed
        preferences = self.preferences_service.pause(
            owner_id, self.clock(), days=days, reason=reason
        )
        if preferences.pause_end is None:
            await self._reply(chat_id, "Reminders paused until you send /resume.")
            return
        await self._reply(
            chat_id,
            f"Reminders paused until {preferences.pause_end:%Y-%m-%d %H:%M} UTC.",
        )

    async def _check(self, owner: OwnerRecord, chat_id: int) -> None:
        preferences = self.preferences_service.get(owner.id)
        try:
            payload = await self.notification_service.evaluate_owner(
                owner, preferences, self.clock()
            )
        except Exception:
            logger.exception("Manual check failed", extra={"owner_id": str(owner.id)})
            await self._reply(chat_id, CHECK_FAILED_TEXT)
            return
        if payload.is_empty:
            await self._reply(chat_id, ALL_CLEAR_TEXT)

    async def _reply(
        self, chat_id: int, text: str, parse_mode: str | None = None
    ) -> None:
        await self.telegram_client.send_message(
            chat_id=chat_id, text=text, parse_mode=parse_mode
        )
