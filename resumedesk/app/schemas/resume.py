"""
Resume and analysis Pydantic schemas
"""
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from resumedesk.app.models.resume import Resume
from resumedesk.app.utils.clock import isoformat_z

Level = Literal["Low", "Medium", "High"]


# --- Analysis worker output ---
class RewardFactor(BaseModel):
    model_config = ConfigDict(extra="allow")

    level: Level
    scenario: str = ""
    fit_duration: str = ""


class AnalysisOutput(BaseModel):
    """Structured feedback returned by the analysis worker."""
    model_config = ConfigDict(extra="allow")

    candidate_strengths: List[str] = Field(default_factory=list)
    candidate_weaknesses: List[str] = Field(default_factory=list)
    risk_factor: Level
    reward_factor: RewardFactor
    overall_fit_rating: float = Field(ge=0, le=10)
    justification: str = ""


class AnalysisRequest(BaseModel):
    """Body sent to the analysis worker webhook."""
    resume_id: int
    user_id: str
    file_url: str
    job_description: str = ""
    original_file_name: str
    file_type: str


# --- API ---
class AnalyzeIn(BaseModel):
    resume_id: Optional[int] = None


class AnalyzeOut(BaseModel):
    message: str = "Analysis completed successfully"
    analysis: dict[str, Any]
    resume_id: int


class ResumeOut(BaseModel):
    id: int
    user_id: int
    original_file_name: str
    storage_path: str
    file_url: str
    file_size: int
    file_type: str
    job_description: str = ""
    status: str
    analysis_result: Optional[dict[str, Any]] = None
    analyzed_at: Optional[str] = None
    enhanced_resume_text: Optional[str] = None
    created_at: Optional[str] = None


class UploadOut(BaseModel):
    message: str = "Resume uploaded successfully"
    resume: ResumeOut


def resume_model_to_out(resume: Resume) -> ResumeOut:
    return ResumeOut(
        id=resume.id,
        user_id=resume.user_id,
        original_file_name=resume.original_file_name,
        storage_path=resume.storage_path,
        file_url=resume.file_url,
        file_size=resume.file_size,
        file_type=resume.file_type,
        job_description=resume.job_description or "",
        status=resume.status,
        analysis_result=resume.analysis_result,
        analyzed_at=isoformat_z(resume.analyzed_at),
        enhanced_resume_text=resume.enhanced_resume_text,
        created_at=isoformat_z(resume.created_at),
    )
