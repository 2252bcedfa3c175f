"""
User model - identities that create, register for and attend sessions
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime
from datetime import datetime
from sarthi.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    full_name = Column(String, nullable=False)
    hashed_password = Column(String, nullable=False)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
