import logging
from typing import Any

from pydantic import BaseModel, Field, field_validator

log = logging.getLogger(__name__)


def _none_to_empty_list(value: Any) -> Any:
    return [] if value is None else value


class RawIngredient(BaseModel):
    """One ingredient as reported by the model, before normalization."""

    name: str
    category: str | None = None
    details: str | None = None


class MatchAnalysisPayload(BaseModel):
    """The structured output of the match-analysis call.

    Absent or null list fields decode as empty lists; a missing score is a
    decode failure.
    """

    match_score: float
    missing_requirements: list[str] = Field(default_factory=list)
    fit_summary: str | None = None
    improvement_tips: list[str] = Field(default_factory=list)
    company_name: str | None = None

    @field_validator("missing_requirements", "improvement_tips", mode="before")
    @classmethod
    def lists_default_empty(cls, value: Any) -> Any:
        return _none_to_empty_list(value)


class RefinementPayload(BaseModel):
    variations: list[str]


class AnswerEvaluationPayload(BaseModel):
    """The structured output of an answer-evaluation call."""

    score: float
    feedback: str
    transcription: str | None = None
