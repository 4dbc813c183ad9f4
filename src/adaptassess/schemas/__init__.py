"""Pydantic schema definitions for questions and responses."""

from __future__ import annotations

from .question import (
    ADVANCED_CATEGORY,
    ALL_JOB_TYPES,
    BASIC_CATEGORY,
    CHARACTER_CATEGORY,
    DIFFICULTY_RANK,
    INITIAL_CATEGORY,
    LEADERSHIP_CATEGORY,
    PERSONAL_CATEGORY,
    CategoryWeightedRule,
    LeadershipMappedRule,
    LeadershipOptionScore,
    PersonalInfoRule,
    PreferenceRule,
    Question,
    Response,
    ScalarRule,
    UnscoredRule,
    normalize_responses,
)
from .submission import Submission

__all__ = [
    "ADVANCED_CATEGORY",
    "ALL_JOB_TYPES",
    "BASIC_CATEGORY",
    "CHARACTER_CATEGORY",
    "DIFFICULTY_RANK",
    "INITIAL_CATEGORY",
    "LEADERSHIP_CATEGORY",
    "PERSONAL_CATEGORY",
    "CategoryWeightedRule",
    "LeadershipMappedRule",
    "LeadershipOptionScore",
    "PersonalInfoRule",
    "PreferenceRule",
    "Question",
    "Response",
    "ScalarRule",
    "Submission",
    "UnscoredRule",
    "normalize_responses",
]
