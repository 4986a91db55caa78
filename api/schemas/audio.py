"""
api/schemas/audio.py — Pydantic response schemas for the /audio endpoints.

Covers:
    /audio/analyze   — AnalysisResponse (camelCase wire keys)
    /audio/duration  — DurationResponse

Normalize and clip endpoints stream WAV bytes and need no response model.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from core.audio.types import AnalysisResult


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SegmentOut(_CamelModel):
    """One classified window of the timeline."""

    start: float = Field(..., ge=0.0)
    end: float = Field(..., ge=0.0)
    status: Literal["CLEAN", "AI_DETECTED", "COPYRIGHT_MATCH"]
    description: str
    confidence: int = Field(..., ge=0, le=100)


class CopyrightMatchOut(_CamelModel):
    """A simulated catalog hit."""

    title: str
    artist: str
    platform: Literal["Spotify", "YouTube Music"]
    match_percentage: int = Field(..., ge=0, le=100)
    segment_start: float = Field(..., ge=0.0)
    segment_end: float = Field(..., ge=0.0)


class AnalysisResponse(_CamelModel):
    """Full heuristic analysis of an uploaded track."""

    is_analyzing: bool = False
    is_complete: bool = True
    ai_probability: int = Field(..., ge=0, le=99)
    copyright_matches: list[CopyrightMatchOut] = Field(default_factory=list)
    segments: list[SegmentOut] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: AnalysisResult) -> AnalysisResponse:
        return cls.model_validate(result.to_dict())


class DurationResponse(BaseModel):
    """Decoded duration of an upload, used to bound the trimmer slider."""

    duration_sec: float = Field(..., ge=0.0)
