"""Helpers shared by the record schemas."""

from datetime import UTC, datetime


def as_utc(value: datetime) -> datetime:
    """Return value in UTC. Naive datetimes are taken to already be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def utcnow() -> datetime:
    return datetime.now(UTC)
