"""
Application configuration settings.
Loads from .env file first (overrides shell env for local dev), then pydantic reads from environment.
Production: set env vars in the platform (Docker, K8s, etc.); .env is optional.

All backend-related configs and constants are centralized here.
"""
from pathlib import Path

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve .env path: resumedesk/.env (absolute path, works regardless of cwd)
_BASE_DIR = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = (_BASE_DIR / ".env").resolve()

# override=True so .env wins over stale shell values (e.g. AWS keys from elsewhere).
if _ENV_FILE.exists():
    load_dotenv(_ENV_FILE, override=True)


class Settings(BaseSettings):
    """Application settings. Source: env vars (after dotenv load)."""

    # App
    app_name: str = "ResumeDesk"
    app_version: str = "1.0.0"
    port: int = 8001
    cors_origins: str = "*"
    frontend_url: str = "http://localhost:3000"
    public_base_url: str = "http://localhost:8001"

    # Database
    database_url: str = "sqlite:///./resumedesk.db"

    # Auth
    secret_key: str = "your-secret-key-change-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    magic_link_expire_minutes: int = 15

    # Upload & storage
    upload_dir: str = "uploads/resumes"
    max_upload_bytes: int = 5 * 1024 * 1024

    # AWS S3
    aws_access_key_id: str = ""
    aws_secret_access_key: str = ""
    aws_region: str = "ap-southeast-1"
    aws_bucket_name: str = "resumedesk-files"
    s3_key_prefix: str = "resumes"

    # Analysis webhook
    analysis_webhook_url: str = "http://localhost:5678/webhook/analyze-resume"
    analysis_webhook_timeout: float = 120.0
    analysis_webhook_max_retries: int = 2
    analyzing_stale_after_minutes: int = 30

    # HTTP / network
    http_request_timeout: int = 30

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE) if _ENV_FILE.exists() else ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def storage_uses_s3(self) -> bool:
        return bool(self.aws_access_key_id and self.aws_secret_access_key)


settings = Settings()


# --- Constants (non-env, business config) ---

# Resume status lifecycle
STATUS_UPLOADED: str = "uploaded"
STATUS_ANALYZING: str = "analyzing"
STATUS_ANALYZED: str = "analyzed"
RESUME_STATUSES: tuple[str, ...] = (STATUS_UPLOADED, STATUS_ANALYZING, STATUS_ANALYZED)

# Upload: MIME type -> stored extension when the filename has none
ALLOWED_MIME_TYPES: dict[str, str] = {
    "application/pdf": "pdf",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": "docx",
}

# Enhanced resume download
ENHANCED_FILENAME_SUFFIX: str = "_enhanced.txt"
