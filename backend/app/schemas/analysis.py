"""Schemas for the external AI analysis service."""

from typing import Literal

from pydantic import BaseModel, Field

from app.models.report import ReportCategory


class AnalysisRequest(BaseModel):
    """Input for classification: any combination of text, image and voice transcript."""

    text: str | None = None
    image_url: str | None = None
    voice_transcript: str | None = None


class AnalysisResult(BaseModel):
    """Pre-filled report fields suggested by the analysis service."""

    title: str
    description: str
    category: ReportCategory = ReportCategory.OTHER
    confidence: float = Field(0.5, ge=0, le=1)
    severity: Literal["low", "medium", "high", "critical"] = "medium"
    priority: Literal["low", "medium", "high"] = "medium"
    fallback: bool = False
