"""
Attendance model - one join/leave record per (user, meeting)
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint, Enum as SQLEnum
from datetime import datetime
from enum import Enum
from sarthi.database import Base


class AttendanceStatus(str, Enum):
    JOINED = "joined"
    LEFT = "left"
    ATTENDED = "attended"


class Attendance(Base):
    __tablename__ = "attendance"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, nullable=False, index=True)  # attendee email
    meeting_id = Column(Integer, ForeignKey("meetings.id", ondelete="CASCADE"), nullable=False, index=True)

    join_time = Column(DateTime, nullable=False, default=datetime.utcnow)
    leave_time = Column(DateTime, nullable=True)
    duration = Column(Integer, default=0)  # minutes
    status = Column(SQLEnum(AttendanceStatus, native_enum=False), nullable=False, default=AttendanceStatus.JOINED)

    ip_address = Column(String, nullable=True)
    user_agent = Column(String, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("user_id", "meeting_id", name="uq_attendance_user_meeting"),
    )

    def mark_left(self, leave_time: datetime) -> None:
        """Close the record and recompute the whole-minute duration"""
        self.leave_time = leave_time
        self.status = AttendanceStatus.LEFT
        self.duration = minutes_between(self.join_time, leave_time)

    def mark_attended(self) -> None:
        self.status = AttendanceStatus.ATTENDED


def minutes_between(start: datetime, end: datetime) -> int:
    """Elapsed minutes rounded half-up"""
    seconds = (end - start).total_seconds()
    return int(seconds / 60 + 0.5) if seconds >= 0 else -int(-seconds / 60 + 0.5)
