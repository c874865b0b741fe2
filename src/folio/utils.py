from datetime import UTC, datetime


def now() -> datetime:
    return datetime.now(UTC)


def to_epoch(value: datetime) -> int:
    """Whole seconds since the epoch, as used in token claims."""
    return int(value.timestamp())


def from_epoch(seconds: int) -> datetime:
    return datetime.fromtimestamp(seconds, UTC)
