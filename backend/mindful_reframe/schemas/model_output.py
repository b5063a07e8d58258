"""Model Output Schemas — Pydantic validation of JSON returned by the language model.

Invariants:
    - Field aliases match the camelCase keys the prompts ask the model to emit
    - ReframeCompletionPayload.message is non-empty after stripping
    - Unknown keys are ignored (models sometimes add commentary fields)

Design Decisions:
    - Validation at the adapter boundary; core receives plain dataclasses
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ReframeCompletionPayload(BaseModel):
    """One reframing turn as emitted by the model."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    message: str = Field(min_length=1)
    is_complete: bool = Field(False, alias="isComplete")
    final_reframed_thought: str | None = Field(None, alias="finalReframedThought")
    next_suggestion: str | None = Field(None, alias="nextSuggestion")

    @field_validator("message")
    @classmethod
    def strip_message(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("message cannot be empty or whitespace")
        return v

    @field_validator("final_reframed_thought", "next_suggestion")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        return v or None


class DetectedThoughtPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    thought: str = Field(min_length=1)
    distortion: str = Field(min_length=1)
    explanation: str = ""


class JournalAnalysisPayload(BaseModel):
    """Journal analysis as emitted by the model."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    summary: str = Field(min_length=1)
    detected_thoughts: list[DetectedThoughtPayload] = Field(
        alias="detectedThoughts",
    )
