"""
Analysis coordinator - the resume status lifecycle.

    uploaded --claim--> analyzing --worker ok--> analyzed
                            |
                            +--worker failed--> uploaded

The claim is a single conditional UPDATE (status must still be 'uploaded'),
so two racing requests cannot both reach the worker.
"""
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from resumedesk.app.core.config import STATUS_ANALYZED, STATUS_ANALYZING, STATUS_UPLOADED
from resumedesk.app.core.errors import conflict, internal_error, service_unavailable, validation_error
from resumedesk.app.core.logging_config import get_logger
from resumedesk.app.models.resume import Resume
from resumedesk.app.models.user import User
from resumedesk.app.schemas.resume import AnalysisRequest
from resumedesk.app.services.analysis_client import AnalysisClient, AnalysisResult, AnalysisWorkerError
from resumedesk.app.services.resume_service import get_resume
from resumedesk.app.utils.clock import utcnow

logger = get_logger("services.analysis")


def _claim(db: Session, user: User, resume_id: int) -> bool:
    """uploaded -> analyzing, only if still uploaded. Returns False when another writer got there first."""
    claimed = (
        db.query(Resume)
        .filter(
            Resume.id == resume_id,
            Resume.user_id == user.id,
            Resume.status == STATUS_UPLOADED,
        )
        .update(
            {Resume.status: STATUS_ANALYZING, Resume.analysis_started_at: utcnow()},
            synchronize_session=False,
        )
    )
    db.commit()
    return claimed == 1


def _release(db: Session, user: User, resume_id: int) -> None:
    """analyzing -> uploaded after a failed worker call."""
    try:
        (
            db.query(Resume)
            .filter(
                Resume.id == resume_id,
                Resume.user_id == user.id,
                Resume.status == STATUS_ANALYZING,
            )
            .update(
                {Resume.status: STATUS_UPLOADED, Resume.analysis_started_at: None},
                synchronize_session=False,
            )
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        # The reconcile task resets it once it goes stale.
        logger.exception("Status rollback failed resume_id=%s - left in analyzing", resume_id)


def _commit_result(db: Session, resume: Resume, result: AnalysisResult) -> None:
    resume.status = STATUS_ANALYZED
    resume.analysis_result = result.analysis
    resume.analyzed_at = utcnow()
    if result.enhanced_resume_text is not None:
        resume.enhanced_resume_text = result.enhanced_resume_text
    db.commit()


def analyze_resume(
    db: Session,
    user: User,
    resume_id: int | None,
    client: AnalysisClient | None = None,
) -> AnalysisResult:
    """
    Run the analysis lifecycle for one resume.

    Raises:
        AppError(validation) - no resume id
        AppError(not_found) - missing or not owned
        AppError(conflict) - status is not 'uploaded'
        AppError(service_unavailable) - worker failed; status is back to 'uploaded'
        AppError(internal) - database failure
    """
    if not resume_id:
        raise validation_error("Resume ID is required")

    resume = get_resume(db, user, resume_id)
    if resume.status != STATUS_UPLOADED:
        logger.warning(
            "Analysis rejected user_id=%s resume_id=%s status=%s",
            user.id,
            resume.id,
            resume.status,
        )
        raise conflict(resume.status)

    try:
        claimed = _claim(db, user, resume.id)
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Error updating resume status resume_id=%s", resume.id)
        raise internal_error("Failed to update resume status") from e
    if not claimed:
        db.refresh(resume)
        logger.warning("Analysis claim lost resume_id=%s status=%s", resume.id, resume.status)
        raise conflict(resume.status)

    request = AnalysisRequest(
        resume_id=resume.id,
        user_id=str(user.id),
        file_url=resume.file_url,
        job_description=resume.job_description or "",
        original_file_name=resume.original_file_name,
        file_type=resume.file_type,
    )
    logger.info("Analysis started user_id=%s resume_id=%s", user.id, resume.id)

    try:
        result = (client or AnalysisClient()).analyze(request)
    except AnalysisWorkerError as e:
        logger.error("Analysis worker error resume_id=%s error=%s", resume.id, e)
        _release(db, user, resume.id)
        raise service_unavailable() from e

    try:
        _commit_result(db, resume, result)
    except SQLAlchemyError as e:
        db.rollback()
        # Worker already finished; the record stays in 'analyzing' until reconciled.
        logger.exception(
            "Analysis result persist failed resume_id=%s - record left in analyzing",
            resume.id,
        )
        raise internal_error() from e

    logger.info("Analysis completed user_id=%s resume_id=%s", user.id, resume.id)
    return result
