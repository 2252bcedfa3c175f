"""
Meeting model - expert sessions (Q&A, webinar, workshop) and their registrations
"""
from sqlalchemy import (
    Column, Integer, String, Text, DateTime, Boolean, ForeignKey, JSON,
    UniqueConstraint, Index, Enum as SQLEnum,
)
from sqlalchemy.orm import relationship
from datetime import datetime
from enum import Enum
from sarthi.database import Base


class MeetingType(str, Enum):
    WEBINAR = "webinar"
    QNA = "qna"
    WORKSHOP = "workshop"
    OTHER = "other"


class MeetingStatus(str, Enum):
    SCHEDULED = "scheduled"
    LIVE = "live"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ExperienceLevel(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"


TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 1000


class Meeting(Base):
    __tablename__ = "meetings"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(TITLE_MAX_LENGTH), nullable=False)
    description = Column(Text, default="")
    meeting_type = Column(SQLEnum(MeetingType, native_enum=False), nullable=False, default=MeetingType.QNA)

    # Calendar date "YYYY-MM-DD" and 24h "HH:MM", both in the reference timezone
    date = Column(String(10), nullable=False)
    time = Column(String(5), nullable=False)
    duration = Column(String, default="1h")  # free text, display only

    language = Column(String, nullable=False, default="English")
    topics = Column(JSON, default=list)
    expert = Column(String, nullable=False)
    join_url = Column(String, default="")
    recording_url = Column(String, default="")
    max_attendees = Column(Integer, nullable=False, default=100)
    # claimed with a conditional UPDATE, never above max_attendees
    seats_taken = Column(Integer, nullable=False, default=0)

    creator = Column(String, nullable=False, index=True)
    status = Column(SQLEnum(MeetingStatus, native_enum=False), nullable=False, default=MeetingStatus.SCHEDULED, index=True)
    is_public = Column(Boolean, default=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    registrations = relationship(
        "Registration",
        back_populates="meeting",
        cascade="all, delete-orphan",
        order_by="Registration.id",
        lazy="selectin",
    )

    __table_args__ = (
        Index("ix_meetings_date_time", "date", "time"),
    )

    @property
    def registration_count(self) -> int:
        return len(self.registrations or [])

    @property
    def available_spots(self) -> int:
        return self.max_attendees - self.registration_count

    def find_registration(self, email: str):
        email = (email or "").strip().lower()
        for registration in self.registrations:
            if registration.email.lower() == email:
                return registration
        return None


class Registration(Base):
    """A user's signup for a meeting"""
    __tablename__ = "meeting_registrations"

    id = Column(Integer, primary_key=True, index=True)
    meeting_id = Column(Integer, ForeignKey("meetings.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False, index=True)
    phone = Column(String, nullable=False)
    organization = Column(String, default="")
    experience = Column(SQLEnum(ExperienceLevel, native_enum=False), default=ExperienceLevel.BEGINNER)
    questions = Column(Text, default="")
    registration_date = Column(DateTime, default=datetime.utcnow)

    meeting = relationship("Meeting", back_populates="registrations")

    __table_args__ = (
        UniqueConstraint("meeting_id", "email", name="uq_registration_meeting_email"),
    )
