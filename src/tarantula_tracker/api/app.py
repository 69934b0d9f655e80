"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from tarantula_tracker.api.admin import router as admin_router
from tarantula_tracker.api.telegram_models import TelegramUpdate
from tarantula_tracker.app_logging import configure_logging
from tarantula_tracker.config import parse_allowed_user_ids
from tarantula_tracker.containers import AppContainer
from tarantula_tracker.telegram_commands import (
    CHAT_MENU_BUTTON,
    BotCommand,
    telegram_commands,
)

UNKNOWN_COMMAND_TEXT = "Unknown command. Send /help to see what I can do."


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)
    allowed_user_ids = parse_allowed_user_ids(
        container.settings.telegram_allowed_user_ids
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        state_container: AppContainer = app.state.container
        try:
            await state_container.telegram_client.set_my_commands(telegram_commands())
            await state_container.telegram_client.set_chat_menu_button(
                CHAT_MENU_BUTTON
            )
        except Exception:
            logger.exception("Failed to sync Telegram bot commands")
        clock = None
        if state_container.settings.scheduler_enabled:
            clock = state_container.create_clock()
            clock.start()
        app.state.clock = clock
        yield
        if clock is not None:
            await clock.stop()
        await state_container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container
    app.state.clock = None

    app.include_router(admin_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/telegram/webhook")
    async def telegram_webhook(
        update: TelegramUpdate, request: Request
    ) -> dict[str, str]:
        """Handle Telegram webhook updates."""
        state_container: AppContainer = request.app.state.container
        message = update.message
        if message is None or not message.text:
            return {"status": "ok"}
        if not _is_user_allowed(message.from_user.id, allowed_user_ids):
            await state_container.telegram_client.send_message(
                chat_id=message.chat.id,
                text="This bot is private.",
            )
            return {"status": "ok"}
        command = BotCommand.match(message.text)
        if command is None:
            if message.text.startswith("/"):
                await state_container.telegram_client.send_message(
                    chat_id=message.chat.id, text=UNKNOWN_COMMAND_TEXT
                )
            return {"status": "ok"}
        await state_container.command_handler.handle(
            command,
            telegram_user_id=message.from_user.id,
            chat_id=message.chat.id,
            text=message.text,
        )
        return {"status": "ok"}

    return app


def _is_user_allowed(user_id: int, allowed: set[int] | None) -> bool:
    """Return true when the user is allowed to interact with the bot."""
    return allowed is None or user_id in allowed
