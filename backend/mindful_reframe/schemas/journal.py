"""Journal & Intake Schemas — request/response models for analysis and intake endpoints.

Invariants:
    - JournalAnalyzeIn.entry length and markup rules are checked by the domain
      (validate_journal_entry) so the message list matches the journaling UI copy
    - IntakeIn answers are stripped and non-empty
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class JournalAnalyzeIn(BaseModel):
    user_id: int | None = Field(None, ge=1)
    entry: str = Field(max_length=20_000)


class DetectedThoughtOut(BaseModel):
    thought: str
    distortion: str
    explanation: str


class JournalAnalysisOut(BaseModel):
    id: UUID | None
    summary: str
    detected_thoughts: list[DetectedThoughtOut]
    crisis_detected: bool = False


class JournalEntryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: int | None
    entry: str
    summary: str
    detected_thoughts: list[DetectedThoughtOut]
    created_at: datetime


class IntakeIn(BaseModel):
    user_id: int = Field(ge=1)
    personal_concerns: str = Field(min_length=1, max_length=2000)
    responsibility_challenges: str = Field(min_length=1, max_length=2000)
    ideal_life: str = Field(min_length=1, max_length=2000)
    sources_of_joy: str = Field(min_length=1, max_length=2000)
    core_values: str = Field(min_length=1, max_length=2000)

    @field_validator(
        "personal_concerns", "responsibility_challenges", "ideal_life",
        "sources_of_joy", "core_values",
    )
    @classmethod
    def strip_answer(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("answer cannot be empty or whitespace")
        return v


class IntakeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: int
    personal_concerns: str
    responsibility_challenges: str
    ideal_life: str
    sources_of_joy: str
    core_values: str
    created_at: datetime
