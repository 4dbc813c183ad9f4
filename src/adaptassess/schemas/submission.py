from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from .question import Question, normalize_responses


class Submission(BaseModel):
    """One participant's answers to a generated assessment."""

    participant_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("participant_id", "participantId"),
    )
    case_id: str | None = Field(default=None, validation_alias=AliasChoices("case_id", "caseId"))
    template_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("template_id", "templateId"),
    )
    threshold: float | None = Field(default=None, ge=0, le=100)
    questions: list[Question] = Field(default_factory=list)
    responses: dict[str, Any] = Field(default_factory=dict)
    assessment: dict[str, Any] | None = None
    personal_info: dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("personal_info", "personalInfo"),
    )

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @field_validator("responses", mode="before")
    @classmethod
    def _collapse_responses(cls, value: Any) -> Any:
        return normalize_responses(value)

    @model_validator(mode="after")
    def _require_questions(self) -> "Submission":
        if not self.questions and not self.assessment:
            raise ValueError("submission must include questions or an assessment")
        return self
