"""
ResumeDesk API client - drives the dashboard actions over HTTP.

Usage:
    client = ResumeDeskClient("http://localhost:8001")
    client.login("me@example.com", "secret123")
    resume = client.upload("cv.pdf", job_description="Backend engineer")
    client.analyze(resume["id"])
    for r in client.list_resumes():
        print(r["original_file_name"], r["status"])
"""
from __future__ import annotations

import mimetypes
from pathlib import Path
from typing import Any, Optional

import httpx

from resumedesk.app.core.config import STATUS_ANALYZED, STATUS_UPLOADED
from resumedesk.app.core.errors import AppError, ErrorKind
from resumedesk.app.utils.clock import isoformat_z, utcnow
from resumedesk.client.cache import ResumeCache

DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def error_from_response(response: httpx.Response) -> AppError:
    """Rebuild the server's AppError from its JSON envelope."""
    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}
    try:
        kind = ErrorKind(body.get("kind"))
    except ValueError:
        kind = ErrorKind.INTERNAL if response.status_code >= 500 else ErrorKind.VALIDATION
    message = body.get("error") or f"Request failed with status {response.status_code}"
    return AppError(kind, message, status=body.get("status"))


class ResumeDeskClient:
    """Synchronous client with a per-record cache of the user's resumes."""

    def __init__(
        self,
        base_url: str = "http://localhost:8001",
        token: Optional[str] = None,
        http_client: Optional[httpx.Client] = None,
        timeout: float = 180.0,
    ):
        self._http = http_client or httpx.Client(base_url=base_url, timeout=timeout)
        self._owns_http = http_client is None
        self.token = token
        self.user: Optional[dict[str, Any]] = None
        self.profile: Optional[dict[str, Any]] = None
        self.cache = ResumeCache()

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> "ResumeDeskClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # --- transport ---
    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = self._http.request(method, path, headers=self._headers(), **kwargs)
        except httpx.HTTPError as e:
            raise AppError(ErrorKind.SERVICE_UNAVAILABLE, f"Could not reach server: {e}") from e
        if response.is_error:
            raise error_from_response(response)
        return response

    # --- auth ---
    def _take_token(self, body: dict[str, Any]) -> dict[str, Any]:
        self.token = body["access_token"]
        self.user = body.get("user")
        self.cache.clear()
        return body

    def register(self, email: str, password: str, name: Optional[str] = None) -> dict[str, Any]:
        body = self._request("POST", "/api/auth/register", json={"email": email, "password": password, "name": name}).json()
        return self._take_token(body)

    def login(self, email: str, password: str) -> dict[str, Any]:
        body = self._request("POST", "/api/auth/login", json={"email": email, "password": password}).json()
        return self._take_token(body)

    def refresh(self) -> dict[str, Any]:
        return self._take_token(self._request("POST", "/api/auth/refresh").json())

    def logout(self) -> None:
        try:
            self._request("POST", "/api/auth/logout")
        finally:
            self.token = None
            self.user = None
            self.profile = None
            self.cache.clear()

    # --- reads ---
    def dashboard(self) -> dict[str, Any]:
        body = self._request("GET", "/api/dashboard").json()
        self.profile = body["profile"]
        self.cache.replace_all(body["resumes"])
        return body

    def list_resumes(self, refresh: bool = False) -> list[dict[str, Any]]:
        """Cached listing; re-fetched after any mutation or when asked."""
        if refresh or not self.cache.list_fresh:
            self.cache.replace_all(self._request("GET", "/api/resumes").json())
        return self.cache.items()

    def get_resume(self, resume_id: int, refresh: bool = False) -> dict[str, Any]:
        if not refresh and self.cache.is_fresh(resume_id):
            return self.cache.get(resume_id)
        resume = self._request("GET", f"/api/resumes/{resume_id}").json()
        self.cache.put(resume)
        return resume

    def get_analysis(self, resume_id: int) -> dict[str, Any]:
        resume = self._request("GET", f"/api/resumes/{resume_id}/analysis").json()
        self.cache.put(resume)
        return resume

    # --- mutations ---
    def update_profile(self, name: str, avatar_url: Optional[str] = None) -> dict[str, Any]:
        payload: dict[str, Any] = {"name": name}
        if avatar_url is not None:
            payload["avatar_url"] = avatar_url
        self.profile = self._request("PATCH", "/api/profile", json=payload).json()
        return self.profile

    def upload(
        self,
        file: str | Path | bytes,
        file_name: Optional[str] = None,
        content_type: Optional[str] = None,
        job_description: str = "",
    ) -> dict[str, Any]:
        """Upload a resume from a path or raw bytes. Returns the created record."""
        if isinstance(file, (str, Path)):
            path = Path(file)
            data = path.read_bytes()
            file_name = file_name or path.name
        else:
            data = file
        if not file_name:
            raise AppError(ErrorKind.VALIDATION, "No file provided")
        if content_type is None:
            content_type = DOCX_MIME if file_name.lower().endswith(".docx") else (
                mimetypes.guess_type(file_name)[0] or "application/octet-stream"
            )
        body = self._request(
            "POST",
            "/api/upload-resume",
            files={"file": (file_name, data, content_type)},
            data={"jobDescription": job_description},
        ).json()
        resume = body["resume"]
        self.cache.put(resume)
        self.cache.invalidate_list()
        return resume

    def analyze(self, resume_id: int) -> dict[str, Any]:
        """
        Trigger analysis. The cached entry shows the outcome right away:
        'analyzed' on success, back to 'uploaded' when the service failed,
        the server's status on a conflict. Errors are always re-raised.
        """
        self.cache.patch(resume_id, status="analyzing")
        try:
            body = self._request("POST", "/api/analyze-resume", json={"resume_id": resume_id}).json()
        except AppError as e:
            if e.kind == ErrorKind.CONFLICT and e.status:
                self.cache.patch(resume_id, status=e.status)
            else:
                self.cache.patch(resume_id, status=STATUS_UPLOADED)
            self.cache.invalidate(resume_id)
            raise
        self.cache.patch(
            resume_id,
            status=STATUS_ANALYZED,
            analysis_result=body["analysis"],
            analyzed_at=isoformat_z(utcnow()),
        )
        self.cache.invalidate(resume_id)
        return body

    # --- downloads ---
    def _download(self, path: str) -> tuple[str, bytes]:
        response = self._request("GET", path)
        disposition = response.headers.get("content-disposition", "")
        filename = ""
        if 'filename="' in disposition:
            filename = disposition.split('filename="', 1)[1].split('"', 1)[0]
        return filename, response.content

    def download_original(self, resume_id: int) -> tuple[str, bytes]:
        return self._download(f"/api/resumes/{resume_id}/file")

    def download_enhanced(self, resume_id: int) -> tuple[str, bytes]:
        return self._download(f"/api/download-enhanced-resume/{resume_id}")
