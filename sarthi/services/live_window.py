"""
Live-window computation for meetings.

A meeting's start is its ``date`` + ``time`` read in the reference timezone
(``Settings.TIMEZONE``). It is live during the half-open interval
``[start, start + LIVE_WINDOW_HOURS)``. The stored ``duration`` text is not
consulted. Status is derived on every read; nothing updates it on a timer.
"""
from datetime import datetime, date, time, timedelta
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

from sarthi.config import get_settings


def reference_tz() -> ZoneInfo:
    return ZoneInfo(get_settings().TIMEZONE)


def now_local() -> datetime:
    """Current time in the reference timezone"""
    return datetime.now(reference_tz())


def localize(moment: datetime) -> datetime:
    """Interpret naive datetimes as reference-zone local time"""
    tz = reference_tz()
    if moment.tzinfo is None:
        return moment.replace(tzinfo=tz)
    return moment.astimezone(tz)


def today_str(now: Optional[datetime] = None) -> str:
    """Reference-zone calendar date as YYYY-MM-DD"""
    now = localize(now) if now is not None else now_local()
    return now.date().isoformat()


def meeting_start(date_str: str, time_str: str) -> Optional[datetime]:
    """Combine the stored date and time strings; None when either is unparsable"""
    if not date_str or not time_str:
        return None
    try:
        day = date.fromisoformat(date_str)
        hours, minutes = time_str.split(":")[:2]
        clock = time(int(hours), int(minutes))
    except ValueError:
        return None
    return datetime.combine(day, clock, tzinfo=reference_tz())


def live_window(meeting) -> Optional[Tuple[datetime, datetime]]:
    start = meeting_start(meeting.date, meeting.time)
    if start is None:
        return None
    return start, start + timedelta(hours=get_settings().LIVE_WINDOW_HOURS)


def is_live(meeting, now: datetime) -> bool:
    window = live_window(meeting)
    if window is None:
        return False
    start, end = window
    return start <= localize(now) < end


def current_status(meeting, now: datetime) -> str:
    """'upcoming' before the window, 'live' inside it, 'past' after it"""
    window = live_window(meeting)
    if window is None:
        return "upcoming"
    start, end = window
    now = localize(now)
    if now < start:
        return "upcoming"
    if now < end:
        return "live"
    return "past"
