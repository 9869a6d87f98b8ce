"""Timestamp helpers shared by payload builders."""

from datetime import UTC, datetime


def utc_timestamp(moment: datetime | None = None) -> str:
    """Return an ISO-8601 UTC timestamp with millisecond precision and a ``Z`` suffix."""
    moment = moment or datetime.now(UTC)
    return moment.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def epoch_millis(moment: datetime | None = None) -> int:
    """Return milliseconds since the epoch for ``moment`` (default now)."""
    moment = moment or datetime.now(UTC)
    return int(moment.timestamp() * 1000)
