"""
Resume endpoints - upload, analyze, list, view, and downloads
"""
from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import Response
from sqlalchemy.orm import Session

from resumedesk.app.core.config import STATUS_ANALYZED, settings
from resumedesk.app.core.dependencies import get_current_user, get_db
from resumedesk.app.core.errors import internal_error, not_found
from resumedesk.app.core.logging_config import get_logger
from resumedesk.app.models.user import User
from resumedesk.app.schemas.resume import AnalyzeIn, AnalyzeOut, ResumeOut, UploadOut, resume_model_to_out
from resumedesk.app.services import resume_service
from resumedesk.app.services.analysis_client import AnalysisClient
from resumedesk.app.services.analysis_service import analyze_resume
from resumedesk.app.utils.http import attachment_disposition

logger = get_logger("api.resume")
router = APIRouter()


def get_analysis_client() -> AnalysisClient:
    """Analysis worker client; overridden in tests."""
    return AnalysisClient()


@router.post("/upload-resume", response_model=UploadOut)
async def upload_resume(
    file: UploadFile | None = File(None),
    jobDescription: str = Form(""),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Upload a resume file (PDF or DOCX, max 5MB) with an optional job description.

    Stores under resumes/{user_id}/{uuid}.{ext} and creates a resume record
    with status 'uploaded'.
    """
    if file is None:
        resume_service.validate_upload(None, None, 0)

    try:
        contents = await file.read(settings.max_upload_bytes + 1)
    except Exception as e:
        logger.exception("Resume upload failed - could not read file user_id=%s", current_user.id)
        raise internal_error("Failed to read file") from e
    size = file.size if file.size is not None else len(contents)
    resume_service.validate_upload(file.filename, file.content_type, max(size, len(contents)))

    resume = resume_service.upload_resume(
        db,
        current_user,
        file_name=file.filename,
        content_type=file.content_type,
        data=contents,
        job_description=jobDescription,
    )
    return UploadOut(resume=resume_model_to_out(resume))


@router.post("/analyze-resume", response_model=AnalyzeOut)
def analyze(
    payload: AnalyzeIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    client: AnalysisClient = Depends(get_analysis_client),
):
    """
    Run the analysis worker on an uploaded resume.

    - 409 when the resume is already analyzing/analyzed
    - 503 when the worker fails (status is reset to 'uploaded')
    """
    result = analyze_resume(db, current_user, payload.resume_id, client=client)
    return AnalyzeOut(analysis=result.output, resume_id=payload.resume_id)


@router.get("/download-enhanced-resume/{resume_id}")
def download_enhanced_resume(
    resume_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Stored enhanced resume text as a plain-text attachment."""
    filename, text = resume_service.get_enhanced_resume(db, current_user, resume_id)
    return Response(
        content=text.encode("utf-8"),
        media_type="text/plain",
        headers={
            "Content-Disposition": attachment_disposition(filename),
            "Cache-Control": "no-cache",
        },
    )


@router.get("/resumes", response_model=list[ResumeOut])
def list_resumes(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Current user's resumes, newest first."""
    return [resume_model_to_out(r) for r in resume_service.list_resumes(db, current_user)]


@router.get("/resumes/{resume_id}", response_model=ResumeOut)
def get_resume(
    resume_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return resume_model_to_out(resume_service.get_resume(db, current_user, resume_id))


@router.get("/resumes/{resume_id}/analysis", response_model=ResumeOut)
def get_resume_analysis(
    resume_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Full analysis view. 404 until the resume is analyzed."""
    resume = resume_service.get_resume(db, current_user, resume_id)
    if resume.status != STATUS_ANALYZED or not resume.analysis_result:
        raise not_found("No analysis available for this resume")
    return resume_model_to_out(resume)


@router.get("/resumes/{resume_id}/file")
def get_resume_file(
    resume_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Original uploaded file, proxied through the backend."""
    resume, data = resume_service.read_original_file(db, current_user, resume_id)
    logger.info("Served original file user_id=%s resume_id=%s bytes=%d", current_user.id, resume.id, len(data))
    return Response(
        content=data,
        media_type=resume.file_type,
        headers={"Content-Disposition": attachment_disposition(resume.original_file_name)},
    )
