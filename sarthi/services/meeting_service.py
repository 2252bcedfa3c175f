"""
Meeting lifecycle service - create/update/delete, status transitions and
the upcoming / archived / live listings
"""
import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import select, delete, or_
from sqlalchemy.ext.asyncio import AsyncSession

from sarthi.config import get_settings
from sarthi.exceptions import ValidationError, NotFound, Forbidden, InvalidTransition
from sarthi.models.attendance import Attendance, AttendanceStatus
from sarthi.models.meeting import (
    Meeting, MeetingType, MeetingStatus, TITLE_MAX_LENGTH, DESCRIPTION_MAX_LENGTH,
)
from sarthi.services.live_window import now_local, today_str, is_live
from sarthi.utils.helpers import to_utc_naive, paginate
from sarthi.utils.validators import validate_meeting_date, validate_meeting_time, parse_topics

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "date", "time", "expert")

EDITABLE_FIELDS = {
    "title", "description", "meeting_type", "date", "time", "duration",
    "language", "topics", "expert", "join_url", "recording_url",
    "max_attendees", "is_public",
}

TRANSITIONS = {
    MeetingStatus.SCHEDULED: {MeetingStatus.LIVE, MeetingStatus.COMPLETED, MeetingStatus.CANCELLED},
    MeetingStatus.LIVE: {MeetingStatus.COMPLETED},
    MeetingStatus.COMPLETED: set(),
    MeetingStatus.CANCELLED: set(),
}


def clean_meeting_fields(data: Dict[str, Any], partial: bool = False) -> Dict[str, Any]:
    """Validate and normalise meeting fields; raises ValidationError.

    With ``partial`` only the keys present are checked (update patches).
    """
    fields = {k: v for k, v in data.items() if k in EDITABLE_FIELDS}

    if not partial:
        missing = [f for f in REQUIRED_FIELDS if not str(fields.get(f) or "").strip()]
        if missing:
            raise ValidationError("Missing required fields: title, date, time, expert")

    for key in ("title", "description", "expert", "join_url", "recording_url", "duration", "language"):
        if key in fields and fields[key] is not None:
            fields[key] = str(fields[key]).strip()

    for key in REQUIRED_FIELDS:
        if key in fields and not fields[key]:
            raise ValidationError(f"{key.capitalize()} is required")

    if len(fields.get("title") or "") > TITLE_MAX_LENGTH:
        raise ValidationError(f"Title cannot exceed {TITLE_MAX_LENGTH} characters")
    if len(fields.get("description") or "") > DESCRIPTION_MAX_LENGTH:
        raise ValidationError(f"Description cannot exceed {DESCRIPTION_MAX_LENGTH} characters")

    try:
        if "date" in fields:
            fields["date"] = validate_meeting_date(fields["date"])
        if "time" in fields:
            fields["time"] = validate_meeting_time(fields["time"])
        if "meeting_type" in fields and fields["meeting_type"] is not None:
            fields["meeting_type"] = MeetingType(fields["meeting_type"])
    except ValueError as e:
        raise ValidationError(str(e))

    if "topics" in fields:
        fields["topics"] = parse_topics(fields["topics"])

    if "max_attendees" in fields and fields["max_attendees"] is not None:
        try:
            fields["max_attendees"] = int(fields["max_attendees"])
        except (TypeError, ValueError):
            raise ValidationError("Maximum attendees must be a number")
        if fields["max_attendees"] < 1:
            raise ValidationError("Maximum attendees must be at least 1")

    return {k: v for k, v in fields.items() if v is not None}


class MeetingService:
    """Lifecycle operations over meetings.

    ``clock`` returns the current time; it defaults to the reference-zone
    wall clock and is replaced in tests.
    """

    def __init__(self, db: AsyncSession, clock: Callable[[], datetime] = now_local):
        self.db = db
        self.clock = clock
        self.settings = get_settings()

    # --- Lookups ---

    async def get_by_id(self, meeting_id: int) -> Meeting:
        result = await self.db.execute(select(Meeting).where(Meeting.id == meeting_id))
        meeting = result.scalar_one_or_none()
        if not meeting:
            raise NotFound("Meeting not found")
        return meeting

    async def get_owned(self, meeting_id: int, requester: Optional[str]) -> Meeting:
        """Fetch a meeting and require the requester to be its creator"""
        meeting = await self.get_by_id(meeting_id)
        if not requester or meeting.creator != requester:
            raise Forbidden("Access denied")
        return meeting

    # --- Mutations ---

    async def create(self, meeting_data: Dict[str, Any], creator: Optional[str]) -> Meeting:
        if not creator:
            raise ValidationError("User not authenticated")

        fields = clean_meeting_fields(meeting_data)
        now = to_utc_naive(self.clock())
        meeting = Meeting(
            **fields,
            creator=creator,
            status=MeetingStatus.SCHEDULED,
            registrations=[],
            created_at=now,
            updated_at=now,
        )
        self.db.add(meeting)
        await self.db.commit()
        await self.db.refresh(meeting)

        logger.info(f"Meeting {meeting.id} '{meeting.title}' created by {creator}")
        return meeting

    async def update(self, meeting_id: int, patch: Dict[str, Any], requester: Optional[str]) -> Meeting:
        meeting = await self.get_owned(meeting_id, requester)

        updates = clean_meeting_fields(patch, partial=True)
        new_capacity = updates.get("max_attendees")
        if new_capacity is not None and new_capacity < meeting.registration_count:
            raise ValidationError(
                f"Maximum attendees cannot be lower than current registrations ({meeting.registration_count})"
            )

        for key, value in updates.items():
            setattr(meeting, key, value)
        meeting.updated_at = to_utc_naive(self.clock())
        await self.db.commit()

        logger.info(f"Meeting {meeting.id} updated by {requester}: {sorted(updates)}")
        return meeting

    async def delete(self, meeting_id: int, requester: Optional[str]) -> None:
        """Delete a meeting together with its attendance rows and registrations"""
        meeting = await self.get_owned(meeting_id, requester)

        result = await self.db.execute(
            delete(Attendance).where(Attendance.meeting_id == meeting.id)
        )
        await self.db.delete(meeting)
        await self.db.commit()

        logger.info(f"Meeting {meeting_id} deleted by {requester} ({result.rowcount} attendance rows removed)")

    async def go_live(self, meeting_id: int, requester: Optional[str]) -> Meeting:
        return await self._transition(meeting_id, requester, MeetingStatus.LIVE)

    async def complete(self, meeting_id: int, requester: Optional[str]) -> Meeting:
        """Close a meeting; attendees still inside are marked attended"""
        meeting = await self._transition(meeting_id, requester, MeetingStatus.COMPLETED, commit=False)
        result = await self.db.execute(
            select(Attendance).where(
                Attendance.meeting_id == meeting.id,
                Attendance.status == AttendanceStatus.JOINED,
            )
        )
        for attendance in result.scalars().all():
            attendance.mark_attended()
        await self.db.commit()
        return meeting

    async def cancel(self, meeting_id: int, requester: Optional[str]) -> Meeting:
        return await self._transition(meeting_id, requester, MeetingStatus.CANCELLED)

    async def _transition(
        self,
        meeting_id: int,
        requester: Optional[str],
        target: MeetingStatus,
        commit: bool = True,
    ) -> Meeting:
        meeting = await self.get_owned(meeting_id, requester)
        if meeting.status == target:
            return meeting
        if target not in TRANSITIONS[meeting.status]:
            raise InvalidTransition(
                f"Cannot change meeting status from {meeting.status.value} to {target.value}"
            )

        meeting.status = target
        meeting.updated_at = to_utc_naive(self.clock())
        if commit:
            await self.db.commit()
        else:
            await self.db.flush()

        logger.info(f"Meeting {meeting.id} is now {target.value}")
        return meeting

    # --- Listings ---

    async def list_upcoming(
        self,
        language: Optional[str] = None,
        meeting_type: Optional[MeetingType] = None,
        page: int = 1,
        limit: Optional[int] = None,
    ) -> List[Meeting]:
        """Scheduled public meetings dated today or later, soonest first"""
        query = select(Meeting).where(
            Meeting.date >= today_str(self.clock()),
            Meeting.status == MeetingStatus.SCHEDULED,
            Meeting.is_public == True,  # noqa: E712
        )
        query = self._apply_filters(query, language, meeting_type)
        query = query.order_by(Meeting.date.asc(), Meeting.time.asc(), Meeting.id.asc())
        return await self._page(query, page, limit)

    async def list_archived(
        self,
        language: Optional[str] = None,
        meeting_type: Optional[MeetingType] = None,
        page: int = 1,
        limit: Optional[int] = None,
    ) -> List[Meeting]:
        """Public meetings dated before today or completed, newest first"""
        query = select(Meeting).where(
            or_(
                Meeting.date < today_str(self.clock()),
                Meeting.status == MeetingStatus.COMPLETED,
            ),
            Meeting.is_public == True,  # noqa: E712
        )
        query = self._apply_filters(query, language, meeting_type)
        query = query.order_by(Meeting.date.desc(), Meeting.time.desc(), Meeting.id.desc())
        return await self._page(query, page, limit)

    async def get_live(self) -> Optional[Meeting]:
        """The live meeting with the earliest start today, if any"""
        now = self.clock()
        result = await self.db.execute(
            select(Meeting)
            .where(
                Meeting.date == today_str(now),
                Meeting.status.in_([MeetingStatus.SCHEDULED, MeetingStatus.LIVE]),
                Meeting.is_public == True,  # noqa: E712
            )
            .order_by(Meeting.time.asc(), Meeting.created_at.asc(), Meeting.id.asc())
        )
        for meeting in result.scalars().all():
            if is_live(meeting, now):
                return meeting
        return None

    def _apply_filters(self, query, language: Optional[str], meeting_type: Optional[MeetingType]):
        if language:
            query = query.where(Meeting.language == language)
        if meeting_type:
            query = query.where(Meeting.meeting_type == MeetingType(meeting_type))
        return query

    async def _page(self, query, page: int, limit: Optional[int]) -> List[Meeting]:
        limit = min(limit or self.settings.DEFAULT_PAGE_SIZE, self.settings.MAX_PAGE_SIZE)
        offset, limit = paginate(page, limit)
        result = await self.db.execute(query.offset(offset).limit(limit))
        return list(result.scalars().all())
