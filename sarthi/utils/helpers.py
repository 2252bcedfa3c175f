"""
General helper utilities
"""
from datetime import datetime, timezone


def to_utc_naive(moment: datetime) -> datetime:
    """Normalise an aware datetime to the naive-UTC form stored in the database"""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


def paginate(page: int, limit: int) -> tuple[int, int]:
    """Return (offset, limit) for a 1-based page number"""
    page = max(page, 1)
    return (page - 1) * limit, limit
