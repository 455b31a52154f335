"""
Pytest fixtures for ResumeDesk API tests.
Uses in-memory SQLite, local-disk storage in a temp dir, and a mock analysis worker.
"""
import os
import tempfile

import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

# Set before config/session load; must override any .env values
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["AWS_ACCESS_KEY_ID"] = ""
os.environ["AWS_SECRET_ACCESS_KEY"] = ""
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="resumedesk-uploads-")

from resumedesk.app.core.config import settings
from resumedesk.app.db.base import Base
from resumedesk.main import app
from resumedesk.app.api.v1.resume import get_analysis_client
from resumedesk.app.core.dependencies import get_db
from resumedesk.app.core.security import create_access_token, get_password_hash
from resumedesk.app.models.resume import Resume
from resumedesk.app.models.user import User
from resumedesk.app.services.analysis_client import AnalysisClient

# In-memory SQLite for tests - StaticPool ensures all sessions share same DB
engine = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Patch the session module so app code outside FastAPI deps uses our test engine
import resumedesk.app.db.session as session_module
session_module.engine = engine
session_module.SessionLocal = TestingSessionLocal

WORKER_URL = "http://worker.test/webhook/analyze-resume"
PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

ANALYSIS_OUTPUT = {
    "candidate_strengths": ["Python", "Distributed systems"],
    "candidate_weaknesses": ["No Kubernetes experience"],
    "risk_factor": "Low",
    "reward_factor": {
        "level": "High",
        "scenario": "Ramps up quickly on the platform team",
        "fit_duration": "2-3 years",
    },
    "overall_fit_rating": 8,
    "justification": "Strong backend background matching the role.",
}


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(scope="function")
def db_session():
    """Create tables and a fresh DB session per test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def upload_dir(tmp_path, monkeypatch):
    """Per-test local storage root."""
    path = tmp_path / "uploads"
    path.mkdir()
    monkeypatch.setattr(settings, "upload_dir", str(path))
    return path


def stored_files(root):
    return [p for p in root.rglob("*") if p.is_file()]


def _make_user(db_session, user_id, email, name=""):
    user = User(
        id=user_id,
        email=email,
        name=name,
        hashed_password=get_password_hash("testpass123"),
        is_active=1,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def test_user(db_session):
    """Create a test user in the DB."""
    return _make_user(db_session, 1, "test@example.com", name="Test User")


@pytest.fixture
def other_user(db_session):
    return _make_user(db_session, 2, "other@example.com")


def headers_for(user):
    token = create_access_token(data={"sub": str(user.id), "email": user.email})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(test_user):
    """Bearer token for test user."""
    return headers_for(test_user)


@pytest.fixture
def client(db_session, test_user):
    """TestClient with DB and test user pre-seeded."""
    return TestClient(app)


class FakeWorker:
    """Scriptable analysis webhook behind httpx.MockTransport."""

    def __init__(self):
        self.requests = []
        self.responses = []

    def respond(self, *responses):
        """Queue responses: httpx.Response, an exception to raise, or a callable(request)."""
        self.responses.extend(responses)

    def handler(self, request):
        self.requests.append(request)
        item = self.responses.pop(0) if self.responses else httpx.Response(200, json={"output": ANALYSIS_OUTPUT, "analysis": ANALYSIS_OUTPUT})
        if isinstance(item, Exception):
            raise item
        if callable(item):
            return item(request)
        return item

    def client(self, max_retries=0):
        return AnalysisClient(
            url=WORKER_URL,
            timeout=5.0,
            max_retries=max_retries,
            http_client=httpx.Client(transport=httpx.MockTransport(self.handler)),
        )


@pytest.fixture
def worker():
    """Mock analysis worker wired into the analyze endpoint."""
    fake = FakeWorker()
    app.dependency_overrides[get_analysis_client] = lambda: fake.client()
    yield fake
    app.dependency_overrides.pop(get_analysis_client, None)


@pytest.fixture
def make_resume(db_session):
    """Insert a resume row directly."""
    def _make(user, **overrides):
        fields = dict(
            user_id=user.id,
            original_file_name="resume.pdf",
            storage_path=f"resumes/{user.id}/abc.pdf",
            file_url=f"http://localhost:8001/uploads/resumes/{user.id}/abc.pdf",
            file_size=1024,
            file_type=PDF_MIME,
            job_description="Backend engineer",
            status="uploaded",
        )
        fields.update(overrides)
        resume = Resume(**fields)
        db_session.add(resume)
        db_session.commit()
        db_session.refresh(resume)
        return resume
    return _make
