"""Tests for POST /api/analyze-resume and the analysis lifecycle"""
import json

import httpx
import pytest
from sqlalchemy.exc import OperationalError

from conftest import ANALYSIS_OUTPUT, WORKER_URL, headers_for
from resumedesk.app.core.errors import AppError, ErrorKind
from resumedesk.app.models.resume import Resume
from resumedesk.app.services import analysis_client, analysis_service
from resumedesk.app.utils.clock import utcnow

UNAVAILABLE = "Analysis service unavailable. Please try again later."


def _analyze(client, headers, resume_id):
    return client.post("/api/analyze-resume", headers=headers, json={"resume_id": resume_id})


def _reload(db_session, resume_id):
    db_session.expire_all()
    return db_session.query(Resume).filter(Resume.id == resume_id).one()


def test_analyze_requires_auth(client, worker):
    r = client.post("/api/analyze-resume", json={"resume_id": 1})
    assert r.status_code == 401
    assert worker.requests == []


def test_analyze_success_persists_result(client, auth_headers, db_session, test_user, make_resume, worker):
    resume = make_resume(test_user)
    stored = dict(ANALYSIS_OUTPUT, source="worker-v2")
    worker.respond(httpx.Response(200, json={"output": ANALYSIS_OUTPUT, "analysis": stored}))
    started = utcnow()

    r = _analyze(client, auth_headers, resume.id)

    assert r.status_code == 200
    body = r.json()
    assert body["message"] == "Analysis completed successfully"
    assert body["resume_id"] == resume.id
    assert body["analysis"]["overall_fit_rating"] == 8
    assert body["analysis"]["risk_factor"] == "Low"

    row = _reload(db_session, resume.id)
    assert row.status == "analyzed"
    assert row.analysis_result == stored
    assert row.analyzed_at is not None
    assert row.analyzed_at >= started


def test_analyze_sends_record_reference_to_worker(client, auth_headers, test_user, make_resume, worker):
    resume = make_resume(test_user, job_description="Backend engineer", original_file_name="cv.pdf")
    _analyze(client, auth_headers, resume.id)

    assert len(worker.requests) == 1
    sent = worker.requests[0]
    assert str(sent.url) == WORKER_URL
    assert sent.method == "POST"
    assert json.loads(sent.content) == {
        "resume_id": resume.id,
        "user_id": str(test_user.id),
        "file_url": resume.file_url,
        "job_description": "Backend engineer",
        "original_file_name": "cv.pdf",
        "file_type": "application/pdf",
    }


def test_analyze_stores_enhanced_text_when_returned(client, auth_headers, db_session, test_user, make_resume, worker):
    resume = make_resume(test_user)
    worker.respond(httpx.Response(200, json={
        "output": ANALYSIS_OUTPUT,
        "analysis": ANALYSIS_OUTPUT,
        "enhanced_resume_text": "Jane Doe\nSenior Backend Engineer",
    }))
    assert _analyze(client, auth_headers, resume.id).status_code == 200
    assert _reload(db_session, resume.id).enhanced_resume_text == "Jane Doe\nSenior Backend Engineer"


def test_analyze_falls_back_to_output_when_analysis_missing(client, auth_headers, db_session, test_user, make_resume, worker):
    resume = make_resume(test_user)
    worker.respond(httpx.Response(200, json={"output": ANALYSIS_OUTPUT}))
    assert _analyze(client, auth_headers, resume.id).status_code == 200
    assert _reload(db_session, resume.id).analysis_result == ANALYSIS_OUTPUT


def test_worker_500_rolls_back_to_uploaded(client, auth_headers, db_session, test_user, make_resume, worker):
    resume = make_resume(test_user)
    worker.respond(httpx.Response(500, json={"message": "workflow crashed"}))

    r = _analyze(client, auth_headers, resume.id)

    assert r.status_code == 503
    assert r.json() == {"error": UNAVAILABLE, "kind": "service_unavailable"}
    row = _reload(db_session, resume.id)
    assert row.status == "uploaded"
    assert row.analysis_result is None
    assert row.analyzed_at is None
    assert row.analysis_started_at is None


@pytest.mark.parametrize("failure", [
    httpx.ConnectError("connection refused"),
    httpx.ReadTimeout("worker hung"),
    httpx.RemoteProtocolError("peer closed connection"),
])
def test_transport_errors_roll_back(failure, client, auth_headers, db_session, test_user, make_resume, worker):
    resume = make_resume(test_user)
    worker.respond(failure)

    r = _analyze(client, auth_headers, resume.id)

    assert r.status_code == 503
    assert r.json()["error"] == UNAVAILABLE
    assert _reload(db_session, resume.id).status == "uploaded"


@pytest.mark.parametrize("response", [
    httpx.Response(200, text="<html>not json</html>"),
    httpx.Response(200, json=["not", "an", "object"]),
    httpx.Response(200, json={"analysis": ANALYSIS_OUTPUT}),
    httpx.Response(200, json={"output": dict(ANALYSIS_OUTPUT, risk_factor="Extreme")}),
    httpx.Response(200, json={"output": dict(ANALYSIS_OUTPUT, overall_fit_rating=11)}),
])
def test_malformed_worker_response_rolls_back(response, client, auth_headers, db_session, test_user, make_resume, worker):
    resume = make_resume(test_user)
    worker.respond(response)

    r = _analyze(client, auth_headers, resume.id)

    assert r.status_code == 503
    row = _reload(db_session, resume.id)
    assert row.status == "uploaded"
    assert row.analysis_result is None


def test_retry_after_rollback_succeeds(client, auth_headers, db_session, test_user, make_resume, worker):
    resume = make_resume(test_user)
    worker.respond(httpx.Response(502))
    assert _analyze(client, auth_headers, resume.id).status_code == 503
    assert _analyze(client, auth_headers, resume.id).status_code == 200
    assert _reload(db_session, resume.id).status == "analyzed"


def test_analyze_already_analyzed_conflicts(client, auth_headers, db_session, test_user, make_resume, worker):
    analyzed_at = utcnow()
    resume = make_resume(test_user, status="analyzed", analysis_result=ANALYSIS_OUTPUT, analyzed_at=analyzed_at)

    r = _analyze(client, auth_headers, resume.id)

    assert r.status_code == 409
    body = r.json()
    assert body["kind"] == "conflict"
    assert "analyzed" in body["error"]
    assert body["status"] == "analyzed"
    assert worker.requests == []
    row = _reload(db_session, resume.id)
    assert row.status == "analyzed"
    assert row.analysis_result == ANALYSIS_OUTPUT
    assert row.analyzed_at == analyzed_at


def test_analyze_while_analyzing_conflicts(client, auth_headers, db_session, test_user, make_resume, worker):
    resume = make_resume(test_user, status="analyzing", analysis_started_at=utcnow())

    r = _analyze(client, auth_headers, resume.id)

    assert r.status_code == 409
    assert r.json()["error"] == "Resume is already analyzing"
    assert worker.requests == []
    assert _reload(db_session, resume.id).status == "analyzing"


def test_analyze_requires_resume_id(client, auth_headers, worker):
    r = client.post("/api/analyze-resume", headers=auth_headers, json={})
    assert r.status_code == 400
    assert r.json()["error"] == "Resume ID is required"


def test_analyze_unknown_resume(client, auth_headers, worker):
    r = _analyze(client, auth_headers, 999)
    assert r.status_code == 404
    assert r.json()["error"] == "Resume not found"


def test_analyze_other_users_resume_is_not_found(client, db_session, test_user, other_user, make_resume, worker):
    resume = make_resume(other_user)
    r = _analyze(client, headers_for(test_user), resume.id)
    assert r.status_code == 404
    assert r.json()["error"] == "Resume not found"
    assert worker.requests == []
    assert _reload(db_session, resume.id).status == "uploaded"


def test_claim_is_conditional(db_session, test_user, make_resume):
    resume = make_resume(test_user)
    assert analysis_service._claim(db_session, test_user, resume.id) is True
    assert analysis_service._claim(db_session, test_user, resume.id) is False
    assert _reload(db_session, resume.id).status == "analyzing"


def test_lost_claim_raises_conflict_without_calling_worker(db_session, test_user, make_resume, worker, monkeypatch):
    resume = make_resume(test_user)
    def claim_lost(db, user, rid):
        # Another request claims the record between our read and our conditional update
        db.query(Resume).filter(Resume.id == rid).update({Resume.status: "analyzing"}, synchronize_session=False)
        db.commit()
        return False

    monkeypatch.setattr(analysis_service, "_claim", claim_lost)

    with pytest.raises(AppError) as exc:
        analysis_service.analyze_resume(db_session, test_user, resume.id, client=worker.client())

    assert exc.value.kind == ErrorKind.CONFLICT
    assert exc.value.status == "analyzing"
    assert worker.requests == []


def test_persist_failure_after_success_leaves_analyzing(db_session, test_user, make_resume, worker, monkeypatch):
    resume = make_resume(test_user)

    def broken_commit(db, resume, result):
        raise OperationalError("UPDATE", {}, Exception("database is locked"))

    monkeypatch.setattr(analysis_service, "_commit_result", broken_commit)

    with pytest.raises(AppError) as exc:
        analysis_service.analyze_resume(db_session, test_user, resume.id, client=worker.client())

    assert exc.value.kind == ErrorKind.INTERNAL
    assert len(worker.requests) == 1
    row = _reload(db_session, resume.id)
    assert row.status == "analyzing"
    assert row.analysis_result is None


def test_connect_errors_are_retried(db_session, test_user, make_resume, worker, monkeypatch):
    monkeypatch.setattr(analysis_client, "RETRY_BACKOFF_SECONDS", 0)
    resume = make_resume(test_user)
    worker.respond(httpx.ConnectError("refused"))

    result = analysis_service.analyze_resume(db_session, test_user, resume.id, client=worker.client(max_retries=2))

    assert result.output == ANALYSIS_OUTPUT
    assert len(worker.requests) == 2
    assert _reload(db_session, resume.id).status == "analyzed"


def test_read_timeouts_are_not_retried(db_session, test_user, make_resume, worker, monkeypatch):
    monkeypatch.setattr(analysis_client, "RETRY_BACKOFF_SECONDS", 0)
    resume = make_resume(test_user)
    worker.respond(httpx.ReadTimeout("slow"))

    with pytest.raises(AppError) as exc:
        analysis_service.analyze_resume(db_session, test_user, resume.id, client=worker.client(max_retries=2))

    assert exc.value.kind == ErrorKind.SERVICE_UNAVAILABLE
    assert len(worker.requests) == 1
    assert _reload(db_session, resume.id).status == "uploaded"


def test_connect_retries_are_bounded(db_session, test_user, make_resume, worker, monkeypatch):
    monkeypatch.setattr(analysis_client, "RETRY_BACKOFF_SECONDS", 0)
    resume = make_resume(test_user)
    worker.respond(*[httpx.ConnectError("refused") for _ in range(5)])

    with pytest.raises(AppError):
        analysis_service.analyze_resume(db_session, test_user, resume.id, client=worker.client(max_retries=2))

    assert len(worker.requests) == 3
    assert _reload(db_session, resume.id).status == "uploaded"
