"""Telegram bot command configuration."""

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class TelegramCommand:
    """Declarative bot command definition."""

    command: str
    description: str


class BotCommand(Enum):
    """Commands the bot answers to, in menu order."""

    START = TelegramCommand("start", "Register and enable care reminders")
    CHECK = TelegramCommand("check", "Run the feeding, molt and upkeep checks now")
    SETTINGS = TelegramCommand("settings", "Show notification settings")
    PAUSE = TelegramCommand("pause", "Pause reminders: /pause [days] [reason]")
    RESUME = TelegramCommand("resume", "Resume paused reminders")
    HELP = TelegramCommand("help", "How reminders work")

    @classmethod
    def match(cls, text: str | None) -> "BotCommand | None":
        """Return the command a message starts with, ignoring any @botname."""
        if not text or not text.startswith("/"):
            return None
        head = text.split(maxsplit=1)[0][1:].split("@", maxsplit=1)[0].lower()
        for entry in cls:
            if entry.value.command == head:
                return entry
        return None


def telegram_commands() -> list[dict[str, str]]:
    """Return commands formatted for Telegram API."""
    return [
        {"command": entry.value.command, "description": entry.value.description}
        for entry in BotCommand
    ]


CHAT_MENU_BUTTON: dict[str, object] = {"type": "commands"}
