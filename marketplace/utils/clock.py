from datetime import datetime, timezone


def utcnow() -> datetime:
    """Naive UTC timestamp, matching what the DateTime columns store and return."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
