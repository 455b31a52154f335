"""
Dashboard response schema
"""
from typing import List

from pydantic import BaseModel

from resumedesk.app.schemas.profile import ProfileOut
from resumedesk.app.schemas.resume import ResumeOut


class DashboardOut(BaseModel):
    profile: ProfileOut
    resumes: List[ResumeOut]
