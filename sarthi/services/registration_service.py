"""
Registration service - capacity-checked sign-up, per-user registration
lookup and the creator's attendee roster
"""
import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import select, update, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from sarthi.exceptions import ValidationError, NotFound, CapacityError, DuplicateRegistration
from sarthi.models.attendance import Attendance
from sarthi.models.meeting import Meeting, Registration, ExperienceLevel
from sarthi.services.live_window import now_local
from sarthi.services.meeting_service import MeetingService
from sarthi.utils.helpers import to_utc_naive
from sarthi.utils.validators import validate_email

logger = logging.getLogger(__name__)


class RegistrationService:

    def __init__(self, db: AsyncSession, clock: Callable[[], datetime] = now_local):
        self.db = db
        self.clock = clock

    async def register(
        self,
        meeting_id: int,
        registrant: Dict[str, Any],
        user_id: Optional[int] = None,
    ) -> Registration:
        """Append a registration if the meeting has room and the email is new.

        A seat is claimed with a single conditional UPDATE on
        ``meetings.seats_taken``, so concurrent sign-ups cannot overfill the
        meeting on any backend. The unique (meeting_id, email) constraint is
        the last line for duplicates; its rollback also releases the seat.
        """
        name = str(registrant.get("name") or "").strip()
        phone = str(registrant.get("phone") or "").strip()
        if not name or not registrant.get("email") or not phone:
            raise ValidationError("Name, email, and phone are required")
        try:
            email = validate_email(registrant["email"])
            experience = ExperienceLevel(registrant.get("experience") or ExperienceLevel.BEGINNER)
        except ValueError as e:
            raise ValidationError(str(e))

        result = await self.db.execute(
            select(Meeting)
            .where(Meeting.id == meeting_id)
            .execution_options(populate_existing=True)
        )
        meeting = result.scalar_one_or_none()
        if not meeting:
            raise NotFound("Meeting not found")

        if meeting.find_registration(email):
            raise DuplicateRegistration("You are already registered for this meeting")
        if not await self._claim_seat(meeting.id):
            raise CapacityError("Meeting is full")

        registration = Registration(
            user_id=user_id,
            name=name,
            email=email,
            phone=phone,
            organization=str(registrant.get("organization") or "").strip(),
            experience=experience,
            questions=str(registrant.get("questions") or "").strip(),
            registration_date=to_utc_naive(self.clock()),
        )
        meeting.registrations.append(registration)

        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise DuplicateRegistration("You are already registered for this meeting")

        logger.info(f"{email} registered for meeting {meeting.id} ({meeting.registration_count}/{meeting.max_attendees})")
        return registration

    async def _claim_seat(self, meeting_id: int) -> bool:
        result = await self.db.execute(
            update(Meeting)
            .where(
                Meeting.id == meeting_id,
                Meeting.seats_taken < Meeting.max_attendees,
            )
            .values(seats_taken=Meeting.seats_taken + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def list_for_user(self, email: Optional[str], user_id: Optional[int] = None) -> List[Dict[str, Any]]:
        """Every meeting the identity is registered for"""
        conditions = []
        if email:
            conditions.append(Registration.email == email.strip().lower())
        if user_id is not None:
            conditions.append(Registration.user_id == user_id)
        if not conditions:
            return []

        result = await self.db.execute(
            select(Registration, Meeting.title)
            .join(Meeting, Registration.meeting_id == Meeting.id)
            .where(or_(*conditions))
            .order_by(Registration.registration_date.desc())
        )
        return [
            {
                "meeting_id": registration.meeting_id,
                "meeting_title": title,
                "registration_date": registration.registration_date,
            }
            for registration, title in result.all()
        ]

    async def get_attendees(self, meeting_id: int, requester: Optional[str]) -> List[Dict[str, Any]]:
        """Registrations joined with attendance; creator only"""
        meeting = await MeetingService(self.db, self.clock).get_owned(meeting_id, requester)

        result = await self.db.execute(
            select(Attendance).where(Attendance.meeting_id == meeting.id)
        )
        by_user = {a.user_id.lower(): a for a in result.scalars().all()}

        attendees = []
        for registration in meeting.registrations:
            attendance = by_user.get(registration.email.lower())
            attendees.append({
                "registration": registration,
                "attendance": attendance,
            })
        return attendees
