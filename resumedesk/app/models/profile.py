"""
Profile database model - display name and avatar, one per user
"""
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from resumedesk.app.db.base import Base
from resumedesk.app.utils.clock import utcnow


class Profile(Base):
    __tablename__ = "profiles"

    # Shares its id with the auth identity
    id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)

    name = Column(String(255), default="")
    avatar_url = Column(String(512), default="")

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    user = relationship("User", backref="profile")
