"""Pydantic configuration schema for CLI YAML input."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class AssessmentSettings(BaseModel):
    basic_success_threshold: float | None = Field(default=None, ge=0, le=100)
    min_correct_answers: int | None = Field(default=None, ge=0)
    enable_advanced_access: bool | None = None
    phases: list[Literal["basic", "advanced", "leadership", "character"]] | None = None
    advancement_rule: Literal["one_correct", "threshold"] | None = None
    leadership_trigger: Literal["all_complete", "any_complete"] | None = None
    basic_question_count: int | None = Field(default=None, ge=0)
    advanced_question_count: int | None = Field(default=None, ge=0)
    leadership_question_count: int | None = Field(default=None, ge=0)
    character_question_count: int | None = Field(default=None, ge=0)
    initial_question_count: int | None = Field(default=None, ge=0)
    include_personal_questions: bool | None = None
    preference_points: float | None = None
    leadership_fallback_points: list[float] | None = None
    archetypes: list[str] | None = None
    default_archetype: str | None = None
    trait_categories: list[str] | None = None
    default_threshold: float | None = Field(default=None, ge=0, le=100)
    fallback_points: dict[str, float] | None = None
    fallback_default_points: float | None = Field(default=None, ge=0)
    leadership_eligible_roles: list[str] | None = None
    role_match_min_similarity: float | None = Field(default=None, ge=0, le=100)
    domain_match_min_similarity: float | None = Field(default=None, ge=0, le=100)

    model_config = ConfigDict(extra="forbid")


class ClassificationSettings(BaseModel):
    experience_question_id: str | None = None
    location_question_id: str | None = None
    work_status_question_id: str | None = None
    home_location: str | None = None
    experienced_markers: list[str] | None = None
    entry_markers: list[str] | None = None
    home_location_markers: list[str] | None = None
    relocation_markers: list[str] | None = None
    full_availability_markers: list[str] | None = None
    partial_availability_markers: list[str] | None = None

    model_config = ConfigDict(extra="forbid")


class QuestionBankSettings(BaseModel):
    path: str | None = None


class AppConfig(BaseModel):
    assessment: AssessmentSettings = Field(default_factory=AssessmentSettings)
    classification: ClassificationSettings = Field(default_factory=ClassificationSettings)
    question_bank: QuestionBankSettings = Field(default_factory=QuestionBankSettings)

    def to_settings(self) -> dict[str, Any]:
        settings: dict[str, Any] = {}
        for section in ("assessment", "classification", "question_bank"):
            values = getattr(self, section).model_dump(exclude_none=True)
            if values:
                settings[section] = values
        return settings


def load_config(raw: Any) -> AppConfig:
    if not isinstance(raw, dict):
        raise ValueError("Config must be a mapping")
    return AppConfig.model_validate(raw)
