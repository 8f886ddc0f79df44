"""Client for the external AI analysis service (image/voice/text classification)."""

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from app.config import get_settings
from app.models import ReportCategory
from app.schemas.analysis import AnalysisRequest, AnalysisResult
from app.services.errors import AnalysisServiceError

logger = logging.getLogger(__name__)
settings = get_settings()

FALLBACK_CONFIDENCE = 0.3
TITLE_MAX_LENGTH = 60


def _title_from_text(text: str) -> str:
    """First sentence of the text, trimmed to a title-sized string."""
    first = text.strip().split(".")[0].strip()
    if not first:
        return "Civic issue report"
    if len(first) > TITLE_MAX_LENGTH:
        return first[: TITLE_MAX_LENGTH - 3].rstrip() + "..."
    return first


def fallback_result(request: AnalysisRequest) -> AnalysisResult:
    """Default pre-fill used whenever the service is unavailable."""
    text = request.text or request.voice_transcript or ""
    return AnalysisResult(
        title=_title_from_text(text),
        description=text,
        category=ReportCategory.OTHER,
        confidence=FALLBACK_CONFIDENCE,
        severity="medium",
        priority="medium",
        fallback=True,
    )


class AnalysisClient:
    """
    Thin HTTP client for the classification service.

    The service is a black box returning
    {title, description, category, confidence, severity, priority}.
    ``analyze`` never raises; it degrades to ``fallback_result``.
    """

    def __init__(
        self,
        base_url: str | None = settings.ai_analysis_url,
        timeout: float = settings.ai_analysis_timeout_seconds,
    ):
        self.base_url = base_url
        self.timeout = timeout

    async def _request(self, payload: dict[str, Any]) -> dict[str, Any]:
        if not self.base_url:
            raise AnalysisServiceError("Analysis service URL not configured")
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.base_url, json=payload)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as e:
            raise AnalysisServiceError(f"HTTP error: {e}") from e
        except (httpx.RequestError, ValueError) as e:
            raise AnalysisServiceError(f"Request failed: {e}") from e

    def _parse(self, data: dict[str, Any], request: AnalysisRequest) -> AnalysisResult:
        # Normalise values the service is known to return loosely
        if data.get("category") not in {c.value for c in ReportCategory}:
            data["category"] = ReportCategory.OTHER
        try:
            confidence = float(data.get("confidence", 0.5))
        except (TypeError, ValueError):
            confidence = 0.5
        data["confidence"] = max(0.0, min(1.0, confidence))
        if data.get("severity") not in {"low", "medium", "high", "critical"}:
            data["severity"] = "medium"
        if data.get("priority") not in {"low", "medium", "high"}:
            data["priority"] = "medium"
        data.setdefault("title", _title_from_text(request.text or ""))
        data.setdefault("description", request.text or "")

        try:
            return AnalysisResult.model_validate(data)
        except ValidationError as e:
            raise AnalysisServiceError(f"Unusable analysis payload: {e}") from e

    async def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        try:
            data = await self._request(request.model_dump(exclude_none=True))
            return self._parse(dict(data), request)
        except AnalysisServiceError as e:
            logger.warning(f"AI analysis failed, using fallback: {e}")
            return fallback_result(request)
