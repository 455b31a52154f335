"""
Profile Pydantic schemas
"""
from typing import Optional

from pydantic import BaseModel, Field

from resumedesk.app.models.profile import Profile
from resumedesk.app.utils.clock import isoformat_z


class ProfileOut(BaseModel):
    id: int
    name: str = ""
    avatar_url: str = ""
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class ProfileUpdate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    avatar_url: Optional[str] = None


def profile_model_to_out(profile: Profile) -> ProfileOut:
    return ProfileOut(
        id=profile.id,
        name=profile.name or "",
        avatar_url=profile.avatar_url or "",
        created_at=isoformat_z(profile.created_at),
        updated_at=isoformat_z(profile.updated_at),
    )
