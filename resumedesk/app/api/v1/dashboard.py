"""
Dashboard endpoint - profile plus the resume list in one round trip
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from resumedesk.app.core.dependencies import get_current_user, get_db
from resumedesk.app.core.logging_config import get_logger
from resumedesk.app.models.user import User
from resumedesk.app.schemas.dashboard import DashboardOut
from resumedesk.app.schemas.profile import profile_model_to_out
from resumedesk.app.schemas.resume import resume_model_to_out
from resumedesk.app.services.profile_service import ProfileService
from resumedesk.app.services.resume_service import list_resumes

logger = get_logger("api.dashboard")
router = APIRouter()


@router.get("", response_model=DashboardOut)
def get_dashboard(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Dashboard data for the current user. Read straight from the database on
    every call so statuses always reflect stored state.
    """
    profile = ProfileService.get_or_create_profile(db, current_user)
    resumes = list_resumes(db, current_user)
    logger.debug("Dashboard built user_id=%s resumes=%d", current_user.id, len(resumes))
    return DashboardOut(
        profile=profile_model_to_out(profile),
        resumes=[resume_model_to_out(r) for r in resumes],
    )
