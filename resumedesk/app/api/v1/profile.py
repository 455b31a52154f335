"""
Profile endpoints - GET and PATCH display name / avatar
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from resumedesk.app.core.dependencies import get_current_user, get_db
from resumedesk.app.models.user import User
from resumedesk.app.schemas.profile import ProfileOut, ProfileUpdate, profile_model_to_out
from resumedesk.app.services.profile_service import ProfileService

router = APIRouter()


@router.get("", response_model=ProfileOut)
def get_profile(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Get current user's profile. Created with defaults on first access."""
    return profile_model_to_out(ProfileService.get_or_create_profile(db, current_user))


@router.patch("", response_model=ProfileOut)
def update_profile(
    payload: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return profile_model_to_out(ProfileService.update_profile(db, current_user, payload))
