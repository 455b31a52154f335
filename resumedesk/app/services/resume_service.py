"""
Resume service - upload coordinator and owner-scoped reads.
Used by the upload, dashboard, and download endpoints.
"""
import uuid
from pathlib import PurePath

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from resumedesk.app.core.config import ALLOWED_MIME_TYPES, ENHANCED_FILENAME_SUFFIX, STATUS_UPLOADED, settings
from resumedesk.app.core.errors import internal_error, not_found, validation_error
from resumedesk.app.core.logging_config import get_logger
from resumedesk.app.models.resume import Resume
from resumedesk.app.models.user import User
from resumedesk.app.services import storage_service

logger = get_logger("services.resume")


def validate_upload(file_name: str | None, content_type: str | None, size: int) -> None:
    """Reject bad input before any side effect. Raises AppError(validation)."""
    if not file_name:
        raise validation_error("No file provided")
    if content_type not in ALLOWED_MIME_TYPES:
        raise validation_error("Invalid file type. Only PDF and DOCX files are allowed.")
    if size > settings.max_upload_bytes:
        raise validation_error("File size too large. Maximum size is 5MB.")


def _unique_file_name(original_name: str, content_type: str) -> str:
    suffix = PurePath(original_name).suffix.lstrip(".").lower()
    return f"{uuid.uuid4()}.{suffix or ALLOWED_MIME_TYPES[content_type]}"


def upload_resume(
    db: Session,
    user: User,
    file_name: str | None,
    content_type: str | None,
    data: bytes,
    job_description: str | None = None,
) -> Resume:
    """
    Validate, store the file, insert a Resume with status 'uploaded'.

    One storage write and, if it succeeds, one insert. A failed insert deletes
    the stored object before the error is raised.
    """
    validate_upload(file_name, content_type, len(data))

    storage_path = storage_service.build_storage_path(user.id, _unique_file_name(file_name, content_type))
    logger.info(
        "Resume upload started user_id=%s filename=%s key=%s size_bytes=%d",
        user.id,
        file_name,
        storage_path,
        len(data),
    )

    try:
        stored = storage_service.upload_file(data, storage_path, content_type)
    except storage_service.StorageError as e:
        logger.error("Resume upload failed - storage error user_id=%s error=%s", user.id, e)
        raise internal_error("Failed to upload file to storage") from e

    resume = Resume(
        user_id=user.id,
        original_file_name=file_name,
        storage_path=stored["key"],
        file_url=stored["url"],
        file_size=len(data),
        file_type=content_type,
        job_description=job_description or "",
        status=STATUS_UPLOADED,
    )
    try:
        db.add(resume)
        db.commit()
        db.refresh(resume)
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Resume upload failed - database insert error user_id=%s key=%s", user.id, storage_path)
        if not storage_service.delete_file(storage_path):
            logger.error("Orphaned storage object after failed insert key=%s", storage_path)
        raise internal_error("Failed to save resume record") from e

    logger.info("Resume uploaded successfully user_id=%s resume_id=%s", user.id, resume.id)
    return resume


def list_resumes(db: Session, user: User) -> list[Resume]:
    """User's resumes, newest first."""
    return (
        db.query(Resume)
        .filter(Resume.user_id == user.id)
        .order_by(Resume.created_at.desc(), Resume.id.desc())
        .all()
    )


def get_resume(db: Session, user: User, resume_id: int) -> Resume:
    """Owner-scoped point lookup. Raises NotFound for missing and foreign records alike."""
    resume = db.query(Resume).filter(Resume.id == resume_id, Resume.user_id == user.id).first()
    if not resume:
        raise not_found("Resume not found")
    return resume


def enhanced_file_name(original_file_name: str) -> str:
    """'cv.final.pdf' -> 'cv.final_enhanced.txt'"""
    stem, dot, _ext = original_file_name.rpartition(".")
    base = stem if dot and stem else original_file_name
    return f"{base}{ENHANCED_FILENAME_SUFFIX}"


def get_enhanced_resume(db: Session, user: User, resume_id: int) -> tuple[str, str]:
    """Returns (filename, text) for the enhanced resume download."""
    resume = get_resume(db, user, resume_id)
    if not resume.enhanced_resume_text:
        raise not_found("Enhanced resume not available")
    return enhanced_file_name(resume.original_file_name), resume.enhanced_resume_text


def read_original_file(db: Session, user: User, resume_id: int) -> tuple[Resume, bytes]:
    resume = get_resume(db, user, resume_id)
    try:
        data = storage_service.read_file(resume.storage_path)
    except FileNotFoundError as e:
        logger.warning("Stored file missing resume_id=%s key=%s", resume.id, resume.storage_path)
        raise not_found("Resume file not found") from e
    except storage_service.StorageError as e:
        logger.error("Stored file read failed resume_id=%s error=%s", resume.id, e)
        raise internal_error("Failed to fetch resume file") from e
    return resume, data
