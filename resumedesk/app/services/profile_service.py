"""
Profile service - lazy creation and display-name edits
"""
from sqlalchemy.orm import Session

from resumedesk.app.models.profile import Profile
from resumedesk.app.models.user import User
from resumedesk.app.schemas.profile import ProfileUpdate


def default_display_name(user: User) -> str:
    """Sign-up name, else email local part, else 'User'."""
    if user.name:
        return user.name
    if user.email and "@" in user.email:
        return user.email.split("@")[0] or "User"
    return "User"


class ProfileService:
    @staticmethod
    def get_or_create_profile(db: Session, user: User) -> Profile:
        """Get existing profile or create a default one for user"""
        profile = db.query(Profile).filter(Profile.id == user.id).first()
        if not profile:
            profile = Profile(
                id=user.id,
                name=default_display_name(user),
                avatar_url=user.avatar_url or "",
            )
            db.add(profile)
            db.commit()
            db.refresh(profile)
        return profile

    @staticmethod
    def update_profile(db: Session, user: User, payload: ProfileUpdate) -> Profile:
        """Update display name (and avatar when given)."""
        profile = ProfileService.get_or_create_profile(db, user)
        profile.name = payload.name.strip()
        if payload.avatar_url is not None:
            profile.avatar_url = payload.avatar_url
        db.commit()
        db.refresh(profile)
        return profile
