"""
FastAPI application entry point
"""
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError

from resumedesk.app.api.v1 import auth, dashboard, profile, resume
from resumedesk.app.core.config import settings
from resumedesk.app.core.errors import register_exception_handlers
from resumedesk.app.core.logging_config import get_logger, setup_logging
from resumedesk.app.db.base import Base
from resumedesk.app.db import session as db_session

# Import models so they register with Base.metadata
import resumedesk.app.models  # noqa: F401

setup_logging()
logger = get_logger("main")


def init_db() -> None:
    """Create missing tables. Alembic owns schema changes after that."""
    try:
        Base.metadata.create_all(bind=db_session.engine)
    except SQLAlchemyError as e:
        logger.error("Database init failed: %s", e)


init_db()

app = FastAPI(
    title="ResumeDesk API",
    description="Resume upload and analysis API",
    version=settings.app_version,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.cors_origins.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(auth.router, prefix="/api/auth", tags=["authentication"])
app.include_router(resume.router, prefix="/api", tags=["resume"])
app.include_router(dashboard.router, prefix="/api/dashboard", tags=["dashboard"])
app.include_router(profile.router, prefix="/api/profile", tags=["profile"])

# Local storage fallback: serve uploaded files at their public URL
if not settings.storage_uses_s3:
    upload_path = Path(settings.upload_dir)
    upload_path.mkdir(parents=True, exist_ok=True)
    app.mount(f"/{settings.upload_dir.strip('/')}", StaticFiles(directory=settings.upload_dir), name="uploads")


@app.get("/")
def read_root():
    """Root endpoint"""
    return {"message": "ResumeDesk API", "version": settings.app_version}


@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
