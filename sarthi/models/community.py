"""
Community models - discussion groups with members and messages
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from sarthi.database import Base


class Community(Base):
    __tablename__ = "communities"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, unique=True)
    description = Column(Text, default="")
    owner = Column(String, nullable=False, index=True)  # owner email
    created_at = Column(DateTime, default=datetime.utcnow)

    members = relationship(
        "CommunityMember",
        back_populates="community",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    messages = relationship(
        "CommunityMessage",
        back_populates="community",
        cascade="all, delete-orphan",
        order_by="CommunityMessage.id",
        passive_deletes=True,
    )

    @property
    def member_emails(self) -> list[str]:
        return [m.user_email for m in self.members]


class CommunityMember(Base):
    __tablename__ = "community_members"

    id = Column(Integer, primary_key=True, index=True)
    community_id = Column(Integer, ForeignKey("communities.id", ondelete="CASCADE"), nullable=False, index=True)
    user_email = Column(String, nullable=False)
    joined_at = Column(DateTime, default=datetime.utcnow)

    community = relationship("Community", back_populates="members")

    __table_args__ = (
        UniqueConstraint("community_id", "user_email", name="uq_community_member"),
    )


class CommunityMessage(Base):
    __tablename__ = "community_messages"

    id = Column(Integer, primary_key=True, index=True)
    community_id = Column(Integer, ForeignKey("communities.id", ondelete="CASCADE"), nullable=False, index=True)
    user_email = Column(String, nullable=False)
    user_name = Column(String, nullable=False)
    text = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    community = relationship("Community", back_populates="messages")
