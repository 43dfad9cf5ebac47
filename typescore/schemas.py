"""Pydantic schemas for request and response payloads."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from typescore import config

SectionLabel = Literal["Beginning", "Middle", "End", "Total"]
SessionStatusLiteral = Literal["not_started", "in_progress", "finished"]


class SessionCreate(BaseModel):
    reference_text: Optional[str] = Field(
        None,
        max_length=config.MAX_TEXT_CHARS,
        description="Text to type; the configured reference text is used when omitted.",
    )

    @field_validator("reference_text")
    @classmethod
    def _reference_not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            raise ValueError("reference_text must contain at least one word")
        return value


class KeystrokeIn(BaseModel):
    text: str = Field(
        ..., max_length=config.MAX_TEXT_CHARS, description="Full current content of the input field after the change"
    )


class TimingOut(BaseModel):
    started_at: Optional[datetime]
    section_marks: List[Optional[datetime]]
    ended_at: Optional[datetime]


class SessionOut(BaseModel):
    public_id: str
    status: SessionStatusLiteral
    reference_text: str
    input_text: str
    word_count: int
    reference_word_count: int
    sections_available: bool
    timing: TimingOut


class ResultRowOut(BaseModel):
    section: SectionLabel
    wpm: float
    incorrect_spaces: int = Field(..., ge=0)
    missing_letters: int = Field(..., ge=0)
    typos: int = Field(..., ge=0)


class ReportOut(BaseModel):
    overall: ResultRowOut
    sections: Optional[List[ResultRowOut]] = None


class TimingIn(BaseModel):
    started_at: datetime
    section_marks: List[Optional[datetime]] = Field(default_factory=list)
    ended_at: datetime

    @field_validator("started_at", "ended_at")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)

    @field_validator("section_marks")
    @classmethod
    def _marks_as_utc(cls, value: List[Optional[datetime]]) -> List[Optional[datetime]]:
        return [m if m is None or m.tzinfo else m.replace(tzinfo=timezone.utc) for m in value]

    @model_validator(mode="after")
    def _ordered(self) -> "TimingIn":
        if self.ended_at < self.started_at:
            raise ValueError("ended_at must not be earlier than started_at")
        last = self.started_at
        gap = False
        for mark in self.section_marks:
            if mark is None:
                gap = True
                continue
            if gap:
                raise ValueError("a section mark cannot follow an unrecorded one")
            if mark < last or mark > self.ended_at:
                raise ValueError("section_marks must be non-decreasing and within the session")
            last = mark
        return self


class EvaluateIn(BaseModel):
    reference_text: str = Field(..., min_length=1, max_length=config.MAX_TEXT_CHARS)
    input_text: str = Field("", max_length=config.MAX_TEXT_CHARS)
    timing: TimingIn


class ReferenceTextOut(BaseModel):
    reference_text: str
    word_count: int
    sections_available: bool


class SubmitIn(BaseModel):
    user_info: str = Field(..., min_length=1, description="Free-form identifier of the test taker")


class SubmitOut(BaseModel):
    success: bool
    message: str
    rows: List[ResultRowOut]
    exported: bool = False


class StoredResultOut(ResultRowOut):
    user_info: str
    session_id: Optional[str]
    submitted_at: Optional[str]
