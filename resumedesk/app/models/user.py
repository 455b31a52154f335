"""
User database model - the authenticated identity
"""
from sqlalchemy import Column, DateTime, Integer, String

from resumedesk.app.db.base import Base
from resumedesk.app.utils.clock import utcnow


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    is_active = Column(Integer, default=1)

    # Sign-up metadata, used to seed the profile on first access
    name = Column(String(255), default="")
    avatar_url = Column(String(512), default="")

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
