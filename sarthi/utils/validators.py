"""
Input validation utilities
"""
import re
from datetime import date
from typing import Optional, Union

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def validate_meeting_date(value: str) -> str:
    """Validate a YYYY-MM-DD calendar date string"""
    value = (value or "").strip()
    try:
        date.fromisoformat(value)
    except ValueError:
        raise ValueError("Date must be a valid YYYY-MM-DD calendar date")
    return value


def validate_meeting_time(value: str) -> str:
    """Validate a 24h HH:MM time string, zero-padding single-digit hours"""
    value = (value or "").strip()
    if re.match(r"^\d:\d\d$", value):
        value = "0" + value
    if not _TIME_RE.match(value):
        raise ValueError("Time must be in HH:MM format")
    return value


def parse_topics(topics: Optional[Union[str, list]]) -> list[str]:
    """Accept a list or a comma-separated string; drop blank entries"""
    if topics is None:
        return []
    if isinstance(topics, str):
        topics = topics.split(",")
    return [str(t).strip() for t in topics if str(t).strip()]


def validate_email(email: str) -> str:
    """Minimal email shape check, returns the lowercased address"""
    email = (email or "").strip().lower()
    if not re.match(r"^[^@\s]+@[^@\s]+\.[^@\s]+$", email):
        raise ValueError("Invalid email address")
    return email
