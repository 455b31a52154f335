"""
Periodic reconcile: release resumes stuck in 'analyzing'.
A record gets stuck when the worker call finished but the result could not be
stored, or when the status rollback itself failed.
Run via cron or: python -c "from resumedesk.app.tasks.reconcile import run_reconcile; print(run_reconcile())"
"""
from datetime import timedelta

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from resumedesk.app.core.config import STATUS_ANALYZING, STATUS_UPLOADED, settings
from resumedesk.app.core.logging_config import get_logger
from resumedesk.app.db import session as db_session
from resumedesk.app.models.resume import Resume
from resumedesk.app.utils.clock import utcnow

logger = get_logger("tasks.reconcile")


def release_stale_analyses(db: Session, stale_after_minutes: int | None = None) -> dict:
    """
    Reset resumes that have been 'analyzing' longer than the threshold back to 'uploaded'.
    Rows with no analysis_started_at are treated as stale.
    """
    minutes = stale_after_minutes if stale_after_minutes is not None else settings.analyzing_stale_after_minutes
    cutoff = utcnow() - timedelta(minutes=minutes)
    stale = (
        db.query(Resume)
        .filter(Resume.status == STATUS_ANALYZING)
        .filter((Resume.analysis_started_at.is_(None)) | (Resume.analysis_started_at < cutoff))
        .all()
    )
    for resume in stale:
        resume.status = STATUS_UPLOADED
        resume.analysis_started_at = None
        logger.warning("Released stale analysis resume_id=%s user_id=%s", resume.id, resume.user_id)
    resume_ids = [r.id for r in stale]
    db.commit()
    return {"released": len(resume_ids), "resume_ids": resume_ids}


def run_reconcile() -> dict:
    """Run reconcile using a new DB session."""
    db = db_session.SessionLocal()
    try:
        return release_stale_analyses(db)
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Reconcile failed")
        return {"error": str(e), "released": 0, "resume_ids": []}
    finally:
        db.close()
