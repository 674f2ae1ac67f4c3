"""UTC datetime utilities."""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(UTC)


def to_epoch_ms(dt: datetime | None) -> int | None:
    """Datetime -> integer epoch milliseconds (None passes through).

    Collaborators (dashboards, payment channel) exchange timestamps as epoch ms.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return int(dt.timestamp() * 1000)
