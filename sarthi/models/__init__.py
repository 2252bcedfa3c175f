from sarthi.models.user import User
from sarthi.models.meeting import Meeting, Registration
from sarthi.models.attendance import Attendance
from sarthi.models.community import Community, CommunityMember, CommunityMessage

__all__ = [
    "User",
    "Meeting",
    "Registration",
    "Attendance",
    "Community",
    "CommunityMember",
    "CommunityMessage",
]
