"""
HTTP client for the analysis worker webhook.

One blocking POST per analysis. The call is not idempotent, so only attempts
that never reached the worker (connect errors) are retried.
"""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import ValidationError

from resumedesk.app.core.config import settings
from resumedesk.app.core.logging_config import get_logger
from resumedesk.app.schemas.resume import AnalysisOutput, AnalysisRequest

logger = get_logger("services.analysis_client")

RETRY_BACKOFF_SECONDS = 0.5


class AnalysisWorkerError(Exception):
    """Worker unreachable, timed out, answered non-2xx, or answered garbage."""


@dataclass
class AnalysisResult:
    output: dict[str, Any]
    analysis: dict[str, Any]
    enhanced_resume_text: str | None = None


def parse_worker_response(body: Any) -> AnalysisResult:
    """Validate a worker response body. Raises AnalysisWorkerError when it is unusable."""
    if not isinstance(body, dict):
        raise AnalysisWorkerError("Analysis worker returned a non-object body")
    raw_output = body.get("output")
    try:
        AnalysisOutput.model_validate(raw_output)
    except ValidationError as e:
        raise AnalysisWorkerError(f"Analysis worker output failed validation: {e.error_count()} error(s)") from e

    analysis = body.get("analysis")
    if analysis is None:
        analysis = raw_output
    if not isinstance(analysis, dict):
        raise AnalysisWorkerError("Analysis worker returned a non-object analysis")

    enhanced = body.get("enhanced_resume_text")
    if enhanced is None:
        enhanced = analysis.get("enhanced_resume_text")
    if enhanced is not None and not isinstance(enhanced, str):
        enhanced = None
    return AnalysisResult(output=raw_output, analysis=analysis, enhanced_resume_text=enhanced)


class AnalysisClient:
    """Thin wrapper around httpx.Client for the analysis webhook."""

    def __init__(
        self,
        url: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        http_client: httpx.Client | None = None,
    ):
        self.url = url or settings.analysis_webhook_url
        self.timeout = timeout if timeout is not None else settings.analysis_webhook_timeout
        self.max_retries = max_retries if max_retries is not None else settings.analysis_webhook_max_retries
        self._http = http_client

    def _post(self, client: httpx.Client, payload: dict) -> httpx.Response:
        attempt = 0
        while True:
            attempt += 1
            try:
                return client.post(self.url, json=payload, timeout=self.timeout)
            except (httpx.ConnectError, httpx.ConnectTimeout) as e:
                if attempt > self.max_retries:
                    raise
                logger.warning(
                    "Analysis webhook connect failed attempt=%d resume_id=%s error=%s - retrying",
                    attempt,
                    payload.get("resume_id"),
                    e,
                )
                time.sleep(RETRY_BACKOFF_SECONDS * attempt)

    def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        payload = request.model_dump()
        logger.info("Analysis webhook call started resume_id=%s url=%s", request.resume_id, self.url)
        started = time.monotonic()
        try:
            if self._http is not None:
                response = self._post(self._http, payload)
            else:
                with httpx.Client() as client:
                    response = self._post(client, payload)
        except httpx.TimeoutException as e:
            raise AnalysisWorkerError(f"Analysis webhook timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise AnalysisWorkerError(f"Analysis webhook transport error: {e}") from e

        elapsed_ms = int((time.monotonic() - started) * 1000)
        if not response.is_success:
            logger.warning(
                "Analysis webhook failed resume_id=%s status=%s elapsed_ms=%d",
                request.resume_id,
                response.status_code,
                elapsed_ms,
            )
            raise AnalysisWorkerError(f"Analysis webhook failed: {response.status_code}")
        try:
            body = response.json()
        except ValueError as e:
            raise AnalysisWorkerError("Analysis webhook returned invalid JSON") from e

        result = parse_worker_response(body)
        logger.info("Analysis webhook call succeeded resume_id=%s elapsed_ms=%d", request.resume_id, elapsed_ms)
        return result
