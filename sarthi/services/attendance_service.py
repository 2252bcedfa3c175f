"""
Attendance service - join and leave a live meeting
"""
import logging
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from sarthi.exceptions import NotFound, Unregistered, NotLive, AlreadyJoined, ValidationError
from sarthi.models.attendance import Attendance, AttendanceStatus
from sarthi.services.live_window import now_local, is_live
from sarthi.services.meeting_service import MeetingService
from sarthi.utils.helpers import to_utc_naive

logger = logging.getLogger(__name__)


class AttendanceService:

    def __init__(self, db: AsyncSession, clock: Callable[[], datetime] = now_local):
        self.db = db
        self.clock = clock

    async def _find(self, meeting_id: int, identity: str) -> Optional[Attendance]:
        result = await self.db.execute(
            select(Attendance).where(
                Attendance.user_id == identity,
                Attendance.meeting_id == meeting_id,
            )
        )
        return result.scalar_one_or_none()

    async def join(
        self,
        meeting_id: int,
        identity: Optional[str],
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> tuple:
        """Record that a registered user entered the meeting.

        Returns (meeting, attendance).
        """
        if not identity:
            raise ValidationError("User not authenticated")
        identity = identity.strip().lower()

        meeting = await MeetingService(self.db, self.clock).get_by_id(meeting_id)
        if not meeting.find_registration(identity):
            raise Unregistered("You must register for this meeting before joining")

        now = self.clock()
        if not is_live(meeting, now):
            raise NotLive("Meeting is not live yet or has ended")

        if await self._find(meeting.id, identity):
            raise AlreadyJoined("You have already joined this meeting")

        attendance = Attendance(
            user_id=identity,
            meeting_id=meeting.id,
            join_time=to_utc_naive(now),
            duration=0,
            status=AttendanceStatus.JOINED,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        self.db.add(attendance)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise AlreadyJoined("You have already joined this meeting")

        logger.info(f"{identity} joined meeting {meeting.id}")
        return meeting, attendance

    async def leave(self, meeting_id: int, identity: Optional[str]) -> Attendance:
        identity = (identity or "").strip().lower()
        attendance = await self._find(meeting_id, identity) if identity else None
        if not attendance:
            raise NotFound("Attendance record not found")

        attendance.mark_left(to_utc_naive(self.clock()))
        await self.db.commit()

        logger.info(f"{identity} left meeting {meeting_id} after {attendance.duration} min")
        return attendance
