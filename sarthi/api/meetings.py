"""
Meeting (expert session) endpoints - lifecycle, registration and attendance
"""
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Callable, List, Optional, Union
from datetime import datetime
from pydantic import BaseModel, Field, field_validator

from sarthi.database import get_db
from sarthi.models.user import User
from sarthi.models.meeting import Meeting, MeetingType, MeetingStatus, ExperienceLevel
from sarthi.models.attendance import AttendanceStatus
from sarthi.api.auth import get_current_user
from sarthi.services.live_window import now_local, current_status
from sarthi.services.meeting_service import MeetingService
from sarthi.services.registration_service import RegistrationService
from sarthi.services.attendance_service import AttendanceService
from sarthi.utils.validators import validate_meeting_date, validate_meeting_time, validate_email

router = APIRouter()


# --- Pydantic Schemas ---

class MeetingCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    meeting_type: MeetingType = Field(MeetingType.QNA, alias="type")
    date: str
    time: str
    duration: str = "1h"
    language: str = "English"
    topics: Union[List[str], str, None] = None
    expert: str = Field(min_length=1)
    join_url: Optional[str] = None
    recording_url: Optional[str] = None
    max_attendees: int = Field(100, ge=1)
    is_public: bool = True

    class Config:
        str_strip_whitespace = True
        populate_by_name = True

    @field_validator("date")
    @classmethod
    def _date(cls, v: str) -> str:
        return validate_meeting_date(v)

    @field_validator("time")
    @classmethod
    def _time(cls, v: str) -> str:
        return validate_meeting_time(v)


class MeetingUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    meeting_type: Optional[MeetingType] = Field(None, alias="type")
    date: Optional[str] = None
    time: Optional[str] = None
    duration: Optional[str] = None
    language: Optional[str] = None
    topics: Union[List[str], str, None] = None
    expert: Optional[str] = Field(None, min_length=1)
    join_url: Optional[str] = None
    recording_url: Optional[str] = None
    max_attendees: Optional[int] = Field(None, ge=1)
    is_public: Optional[bool] = None

    class Config:
        str_strip_whitespace = True
        populate_by_name = True


class MeetingResponse(BaseModel):
    id: int
    title: str
    description: Optional[str]
    meeting_type: MeetingType
    date: str
    time: str
    duration: Optional[str]
    language: str
    topics: List[str]
    expert: str
    join_url: Optional[str]
    recording_url: Optional[str]
    max_attendees: int
    creator: str
    status: MeetingStatus
    is_public: bool
    created_at: Optional[datetime]
    updated_at: Optional[datetime]
    registration_count: int
    available_spots: int
    current_status: str

    class Config:
        from_attributes = True


class RegistrationCreate(BaseModel):
    name: str = Field(min_length=1)
    email: str
    phone: str = Field(min_length=1)
    organization: str = ""
    experience: ExperienceLevel = ExperienceLevel.BEGINNER
    questions: str = ""

    class Config:
        str_strip_whitespace = True

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return validate_email(v)


class RegistrationResponse(BaseModel):
    id: int
    meeting_id: int
    name: str
    email: str
    phone: str
    organization: Optional[str]
    experience: ExperienceLevel
    questions: Optional[str]
    registration_date: Optional[datetime]

    class Config:
        from_attributes = True


class RegisterResult(BaseModel):
    message: str
    registration: RegistrationResponse


class AttendanceResponse(BaseModel):
    user_id: str
    meeting_id: int
    join_time: datetime
    leave_time: Optional[datetime]
    duration: int
    status: AttendanceStatus

    class Config:
        from_attributes = True


class JoinResult(BaseModel):
    message: str
    join_url: Optional[str]
    attendance: AttendanceResponse


class LeaveResult(BaseModel):
    message: str
    attendance: AttendanceResponse


class AttendeeResponse(RegistrationResponse):
    attendance: Optional[AttendanceResponse] = None


class UserRegistrationResponse(BaseModel):
    meeting_id: int
    meeting_title: str
    registration_date: Optional[datetime]


# --- Dependencies ---

def get_clock() -> Callable[[], datetime]:
    """Reference-zone wall clock; overridden in tests"""
    return now_local


def get_meeting_service(
    db: AsyncSession = Depends(get_db),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> MeetingService:
    return MeetingService(db, clock)


def get_registration_service(
    db: AsyncSession = Depends(get_db),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> RegistrationService:
    return RegistrationService(db, clock)


def get_attendance_service(
    db: AsyncSession = Depends(get_db),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> AttendanceService:
    return AttendanceService(db, clock)


# --- Helper ---

def _build_meeting_response(m: Meeting, now: datetime) -> MeetingResponse:
    return MeetingResponse(
        id=m.id,
        title=m.title,
        description=m.description,
        meeting_type=m.meeting_type,
        date=m.date,
        time=m.time,
        duration=m.duration,
        language=m.language,
        topics=m.topics or [],
        expert=m.expert,
        join_url=m.join_url,
        recording_url=m.recording_url,
        max_attendees=m.max_attendees,
        creator=m.creator,
        status=m.status,
        is_public=m.is_public,
        created_at=m.created_at,
        updated_at=m.updated_at,
        registration_count=m.registration_count,
        available_spots=m.available_spots,
        current_status=current_status(m, now),
    )


# --- Listings ---

@router.get("/upcoming", response_model=List[MeetingResponse])
async def list_upcoming_meetings(
    language: Optional[str] = None,
    meeting_type: Optional[MeetingType] = Query(None, alias="type"),
    limit: int = Query(20, ge=1),
    page: int = Query(1, ge=1),
    service: MeetingService = Depends(get_meeting_service),
):
    """Scheduled meetings from today onwards, soonest first"""
    meetings = await service.list_upcoming(language, meeting_type, page, limit)
    now = service.clock()
    return [_build_meeting_response(m, now) for m in meetings]


@router.get("/live")
async def get_live_meeting(service: MeetingService = Depends(get_meeting_service)):
    """The meeting currently in its live window, or {}"""
    meeting = await service.get_live()
    if not meeting:
        return {}
    return _build_meeting_response(meeting, service.clock())


@router.get("/archived", response_model=List[MeetingResponse])
async def list_archived_meetings(
    language: Optional[str] = None,
    meeting_type: Optional[MeetingType] = Query(None, alias="type"),
    limit: int = Query(20, ge=1),
    page: int = Query(1, ge=1),
    service: MeetingService = Depends(get_meeting_service),
):
    """Past or completed meetings, newest first"""
    meetings = await service.list_archived(language, meeting_type, page, limit)
    now = service.clock()
    return [_build_meeting_response(m, now) for m in meetings]


@router.get("/user/registrations", response_model=List[UserRegistrationResponse])
async def list_my_registrations(
    current_user: User = Depends(get_current_user),
    service: RegistrationService = Depends(get_registration_service),
):
    """Meetings the caller has signed up for"""
    return await service.list_for_user(current_user.email, current_user.id)


@router.get("/{meeting_id}", response_model=MeetingResponse)
async def get_meeting(
    meeting_id: int,
    service: MeetingService = Depends(get_meeting_service),
):
    meeting = await service.get_by_id(meeting_id)
    return _build_meeting_response(meeting, service.clock())


# --- Lifecycle ---

@router.post("/", response_model=MeetingResponse, status_code=201)
async def create_meeting(
    data: MeetingCreate,
    current_user: User = Depends(get_current_user),
    service: MeetingService = Depends(get_meeting_service),
):
    """Create a meeting owned by the caller"""
    meeting = await service.create(data.model_dump(), creator=current_user.email)
    return _build_meeting_response(meeting, service.clock())


@router.put("/{meeting_id}", response_model=MeetingResponse)
async def update_meeting(
    meeting_id: int,
    data: MeetingUpdate,
    current_user: User = Depends(get_current_user),
    service: MeetingService = Depends(get_meeting_service),
):
    """Update a meeting (creator only)"""
    meeting = await service.update(
        meeting_id, data.model_dump(exclude_unset=True), requester=current_user.email
    )
    return _build_meeting_response(meeting, service.clock())


@router.delete("/{meeting_id}")
async def delete_meeting(
    meeting_id: int,
    current_user: User = Depends(get_current_user),
    service: MeetingService = Depends(get_meeting_service),
):
    """Delete a meeting and its attendance records (creator only)"""
    await service.delete(meeting_id, requester=current_user.email)
    return {"message": "Meeting deleted successfully"}


@router.post("/{meeting_id}/live", response_model=MeetingResponse)
async def go_live(
    meeting_id: int,
    current_user: User = Depends(get_current_user),
    service: MeetingService = Depends(get_meeting_service),
):
    meeting = await service.go_live(meeting_id, requester=current_user.email)
    return _build_meeting_response(meeting, service.clock())


@router.post("/{meeting_id}/complete", response_model=MeetingResponse)
async def complete_meeting(
    meeting_id: int,
    current_user: User = Depends(get_current_user),
    service: MeetingService = Depends(get_meeting_service),
):
    meeting = await service.complete(meeting_id, requester=current_user.email)
    return _build_meeting_response(meeting, service.clock())


@router.post("/{meeting_id}/cancel", response_model=MeetingResponse)
async def cancel_meeting(
    meeting_id: int,
    current_user: User = Depends(get_current_user),
    service: MeetingService = Depends(get_meeting_service),
):
    meeting = await service.cancel(meeting_id, requester=current_user.email)
    return _build_meeting_response(meeting, service.clock())


# --- Registration & attendance ---

@router.post("/{meeting_id}/register", response_model=RegisterResult)
async def register_for_meeting(
    meeting_id: int,
    data: RegistrationCreate,
    current_user: User = Depends(get_current_user),
    service: RegistrationService = Depends(get_registration_service),
):
    registration = await service.register(meeting_id, data.model_dump(), user_id=current_user.id)
    return RegisterResult(
        message="Registration successful",
        registration=RegistrationResponse.model_validate(registration),
    )


@router.post("/{meeting_id}/join", response_model=JoinResult)
async def join_meeting(
    meeting_id: int,
    request: Request,
    current_user: User = Depends(get_current_user),
    service: AttendanceService = Depends(get_attendance_service),
):
    meeting, attendance = await service.join(
        meeting_id,
        current_user.email,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )
    return JoinResult(
        message="Successfully joined the meeting",
        join_url=meeting.join_url,
        attendance=AttendanceResponse.model_validate(attendance),
    )


@router.post("/{meeting_id}/leave", response_model=LeaveResult)
async def leave_meeting(
    meeting_id: int,
    current_user: User = Depends(get_current_user),
    service: AttendanceService = Depends(get_attendance_service),
):
    attendance = await service.leave(meeting_id, current_user.email)
    return LeaveResult(
        message="Successfully left the meeting",
        attendance=AttendanceResponse.model_validate(attendance),
    )


@router.get("/{meeting_id}/attendees", response_model=List[AttendeeResponse])
async def list_attendees(
    meeting_id: int,
    current_user: User = Depends(get_current_user),
    service: RegistrationService = Depends(get_registration_service),
):
    """Registrations with their attendance, for the meeting's creator"""
    rows = await service.get_attendees(meeting_id, requester=current_user.email)
    return [
        AttendeeResponse(
            **RegistrationResponse.model_validate(row["registration"]).model_dump(),
            attendance=(
                AttendanceResponse.model_validate(row["attendance"]) if row["attendance"] else None
            ),
        )
        for row in rows
    ]
