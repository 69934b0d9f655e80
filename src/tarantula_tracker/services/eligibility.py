"""Decide whether an owner should be notified on the current tick."""

import logging
from datetime import datetime, time
from functools import lru_cache

from tarantula_tracker.domain.notifications import NotificationPreferences
from tarantula_tracker.timeutils import as_utc

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_SECONDS = 60.0
SECONDS_PER_DAY = 86400


@lru_cache(maxsize=256)
def parse_time_of_day(raw: str) -> time | None:
    """Parse an "HH:MM" string, logging a warning once per bad value."""
    try:
        return datetime.strptime(raw.strip(), "%H:%M").time()
    except ValueError:
        logger.warning("Invalid notification time %r", raw)
        return None


def pause_expired(now: datetime, preferences: NotificationPreferences) -> bool:
    """Return True when a timed pause has run out and should be cleared."""
    if not preferences.paused or preferences.pause_end is None:
        return False
    return as_utc(now) > as_utc(preferences.pause_end)


def should_notify(
    now: datetime,
    preferences: NotificationPreferences,
    window_seconds: float = DEFAULT_WINDOW_SECONDS,
) -> bool:
    """Return True when the tick falls inside the owner's alert window.

    The window should equal the caller's tick period so that exactly one
    tick per day lands inside it.

    An expired pause does not block evaluation here; persisting the cleared
    pause is left to the caller.
    """
    if not preferences.notifications_enabled:
        return False
    if preferences.paused and not pause_expired(now, preferences):
        return False
    target = parse_time_of_day(preferences.notification_time_utc)
    if target is None:
        return False
    current = as_utc(now)
    seconds_now = current.hour * 3600 + current.minute * 60 + current.second
    seconds_target = target.hour * 3600 + target.minute * 60
    elapsed = (seconds_now - seconds_target) % SECONDS_PER_DAY
    return elapsed < window_seconds
