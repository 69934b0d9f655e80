"""Helpers for timezone-aware datetimes."""

from datetime import UTC, datetime


def as_utc(moment: datetime) -> datetime:
    """Return the instant in UTC, treating naive values as UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)


def parse_timestamp(raw: object) -> datetime | None:
    """Parse an ISO-8601 timestamp from a database row."""
    if not isinstance(raw, str) or not raw:
        return None
    return as_utc(datetime.fromisoformat(raw))
