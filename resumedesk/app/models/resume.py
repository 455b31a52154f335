"""
Resume - one row per uploaded file, carries the analysis lifecycle
"""
from sqlalchemy import JSON, CheckConstraint, Column, DateTime, ForeignKey, Integer, String, Text

from resumedesk.app.core.config import STATUS_UPLOADED
from resumedesk.app.db.base import Base
from resumedesk.app.utils.clock import utcnow


class Resume(Base):
    __tablename__ = "resumes"
    __table_args__ = (
        CheckConstraint("status IN ('uploaded', 'analyzing', 'analyzed')", name="ck_resumes_status"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    original_file_name = Column(String(255), nullable=False)
    storage_path = Column(String(512), nullable=False)
    file_url = Column(String(1024), nullable=False)
    file_size = Column(Integer, nullable=False)
    file_type = Column(String(128), nullable=False)
    job_description = Column(Text, default="")

    status = Column(String(20), nullable=False, default=STATUS_UPLOADED, index=True)  # uploaded | analyzing | analyzed
    analysis_result = Column(JSON, nullable=True)
    analysis_started_at = Column(DateTime, nullable=True)
    analyzed_at = Column(DateTime, nullable=True)
    enhanced_resume_text = Column(Text, nullable=True)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
