"""Immutable configuration shared by the selection and scoring components."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Literal

AdvancementRule = Literal["one_correct", "threshold"]
LeadershipTrigger = Literal["all_complete", "any_complete"]

DEFAULT_ARCHETYPES: tuple[str, ...] = (
    "operasyonel-yetenek",
    "teknik-leader",
    "case-odakli-yetenek",
    "gelistirici",
)

DEFAULT_LEADERSHIP_ROLES: tuple[str, ...] = (
    "frontend developer",
    "backend developer",
    "full stack developer",
    "fullstack developer",
    "software engineer",
    "lead developer",
    "tech lead",
    "engineering manager",
    "web platformu",
)


@dataclass(frozen=True)
class AssessmentConfig:
    """Thresholds, phase layout and scoring constants for one assessment run."""

    basic_success_threshold: float = 50.0
    min_correct_answers: int = 1
    enable_advanced_access: bool = True
    phases: tuple[str, ...] = ("basic", "advanced", "leadership")
    advancement_rule: AdvancementRule = "one_correct"
    leadership_trigger: LeadershipTrigger = "all_complete"

    basic_question_count: int = 2
    advanced_question_count: int = 2
    leadership_question_count: int = 5
    character_question_count: int = 5
    initial_question_count: int = 10
    include_personal_questions: bool = True

    preference_points: float = 5.0
    leadership_fallback_points: tuple[float, ...] = (18.0, 20.0, 19.0, 21.0)
    archetypes: tuple[str, ...] = DEFAULT_ARCHETYPES
    default_archetype: str = DEFAULT_ARCHETYPES[0]
    trait_categories: tuple[str, ...] = DEFAULT_ARCHETYPES
    fallback_points: dict[str, float] = field(
        default_factory=lambda: {
            "first-stage-technical": 10.0,
            "advanced-technical": 15.0,
            "leadership-scenario": 12.0,
        }
    )
    fallback_default_points: float = 10.0

    default_threshold: float = 70.0
    leadership_eligible_roles: tuple[str, ...] = DEFAULT_LEADERSHIP_ROLES
    role_match_min_similarity: float = 85.0
    domain_match_min_similarity: float = 80.0

    def __post_init__(self) -> None:
        # YAML hands us lists; keep the dataclass hashable-friendly and immutable.
        for name in (
            "phases",
            "leadership_fallback_points",
            "archetypes",
            "trait_categories",
            "leadership_eligible_roles",
        ):
            value = getattr(self, name)
            if not isinstance(value, tuple):
                object.__setattr__(self, name, tuple(value))
        if self.min_correct_answers < 0:
            raise ValueError("min_correct_answers must be non-negative")
        if self.advancement_rule not in ("one_correct", "threshold"):
            raise ValueError(f"Unknown advancement rule: {self.advancement_rule!r}")
        if self.leadership_trigger not in ("all_complete", "any_complete"):
            raise ValueError(f"Unknown leadership trigger: {self.leadership_trigger!r}")

    @classmethod
    def from_settings(cls, settings: dict[str, Any] | None) -> "AssessmentConfig":
        """Build a config from a settings mapping, ignoring unknown keys."""
        if not settings:
            return cls()
        known = {item.name for item in fields(cls)}
        return cls(**{key: value for key, value in settings.items() if key in known})

    def fallback_points_for(self, category: str) -> float:
        return float(self.fallback_points.get(category, self.fallback_default_points))

    def has_phase(self, phase: str) -> bool:
        return phase in self.phases

    def as_dict(self) -> dict[str, Any]:
        return {
            "basic_success_threshold": self.basic_success_threshold,
            "min_correct_answers": self.min_correct_answers,
            "enable_advanced_access": self.enable_advanced_access,
            "phases": list(self.phases),
            "advancement_rule": self.advancement_rule,
            "leadership_trigger": self.leadership_trigger,
        }


DEFAULT_CONFIG = AssessmentConfig()

__all__ = [
    "AdvancementRule",
    "AssessmentConfig",
    "DEFAULT_ARCHETYPES",
    "DEFAULT_CONFIG",
    "DEFAULT_LEADERSHIP_ROLES",
    "LeadershipTrigger",
]
