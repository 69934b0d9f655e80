"""Deliver alert payloads through Telegram."""

import logging
from dataclasses import dataclass

from tarantula_tracker.adapters.telegram_client import TelegramClient
from tarantula_tracker.domain.models import OwnerRecord
from tarantula_tracker.domain.notifications import AlertPayload
from tarantula_tracker.services.formatting import render_payload

logger = logging.getLogger(__name__)


@dataclass
class TelegramAlertDispatcher:
    """Send each alert category as its own Markdown message."""

    telegram_client: TelegramClient

    async def dispatch(self, owner: OwnerRecord, payload: AlertPayload) -> None:
        """Send the rendered payload; one failed message does not stop the rest."""
        chat_id = payload.chat_id or owner.chat_id
        if chat_id is None:
            logger.warning("Owner has no chat id", extra={"owner_id": str(owner.id)})
            return
        for text in render_payload(payload):
            try:
                await self.telegram_client.send_message(
                    chat_id=chat_id, text=text, parse_mode="Markdown"
                )
            except Exception:
                logger.exception(
                    "Failed to send alert message", extra={"owner_id": str(owner.id)}
                )
