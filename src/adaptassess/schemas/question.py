"""Question and response schemas with ingestion-time scoring rule resolution."""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

QuestionType = Literal["single-choice", "multi-choice", "scenario", "free-text"]
QuestionCategory = Literal[
    "first-stage-technical",
    "advanced-technical",
    "leadership-scenario",
    "character-analysis",
    "initial-assessment",
    "personal",
]
Difficulty = Literal["Easy", "Medium", "Hard"]

ALL_JOB_TYPES = "All"

BASIC_CATEGORY: QuestionCategory = "first-stage-technical"
ADVANCED_CATEGORY: QuestionCategory = "advanced-technical"
LEADERSHIP_CATEGORY: QuestionCategory = "leadership-scenario"
CHARACTER_CATEGORY: QuestionCategory = "character-analysis"
INITIAL_CATEGORY: QuestionCategory = "initial-assessment"
PERSONAL_CATEGORY: QuestionCategory = "personal"

DIFFICULTY_RANK: dict[str, int] = {"Easy": 0, "Medium": 1, "Hard": 2}

_TYPE_ALIASES: dict[str, str] = {
    "radio": "single-choice",
    "mcq": "single-choice",
    "multiple-choice": "single-choice",
    "select": "single-choice",
    "checkbox": "multi-choice",
    "text": "free-text",
    "textarea": "free-text",
    "email": "free-text",
    "phone": "free-text",
}

_CATEGORY_ALIASES: dict[str, str] = {
    "leadership-scenarios": LEADERSHIP_CATEGORY,
    "ilk-teknik": BASIC_CATEGORY,
    "ileri-teknik": ADVANCED_CATEGORY,
    "kişisel": PERSONAL_CATEGORY,
    "personal-info": PERSONAL_CATEGORY,
}


class LeadershipOptionScore(BaseModel):
    """Points and criteria awarded for one leadership-scenario option."""

    points: float
    criteria: dict[str, float] = Field(default_factory=dict)
    leadership_type: str | None = Field(
        default=None,
        validation_alias=AliasChoices("leadership_type", "leadershipType"),
    )

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)


class PersonalInfoRule(BaseModel):
    """Contact or profile field; never scored."""

    kind: Literal["personal_info"] = "personal_info"

    model_config = ConfigDict(frozen=True)


class UnscoredRule(BaseModel):
    """Profile-only question without a correctness notion."""

    kind: Literal["unscored"] = "unscored"

    model_config = ConfigDict(frozen=True)


class LeadershipMappedRule(BaseModel):
    """Option index → archetype and points."""

    kind: Literal["leadership"] = "leadership"
    mapping: dict[int, str] = Field(default_factory=dict)
    scoring: dict[int, LeadershipOptionScore] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    def option(self, index: int) -> tuple[str, float] | None:
        archetype = self.mapping.get(index)
        scored = self.scoring.get(index)
        if archetype is None or scored is None:
            return None
        return archetype, float(scored.points)


class PreferenceRule(BaseModel):
    """Every option is acceptable; a fixed score builds the behavioural profile."""

    kind: Literal["preference"] = "preference"

    model_config = ConfigDict(frozen=True)


class CategoryWeightedRule(BaseModel):
    """Per-category point arrays indexed by option."""

    kind: Literal["category_weighted"] = "category_weighted"
    weights: dict[str, list[float]]

    model_config = ConfigDict(frozen=True)


class ScalarRule(BaseModel):
    """Flat point value for a correct answer."""

    kind: Literal["scalar"] = "scalar"
    points: float
    correct_indices: tuple[int, ...]

    model_config = ConfigDict(frozen=True)


ScoringRule = Annotated[
    Union[
        PersonalInfoRule,
        UnscoredRule,
        LeadershipMappedRule,
        PreferenceRule,
        CategoryWeightedRule,
        ScalarRule,
    ],
    Field(discriminator="kind"),
]


class Question(BaseModel):
    """Provider-neutral assessment question definition.

    Accepts both snake_case and the camelCase spelling used by question bank
    exports. The scoring rule is resolved once during validation and exposed
    as :attr:`rule`.
    """

    id: str
    type: QuestionType = "single-choice"
    category: QuestionCategory
    question: str = Field(default="", validation_alias=AliasChoices("question", "text"))
    job_type: str = Field(
        default=ALL_JOB_TYPES,
        validation_alias=AliasChoices("job_type", "jobType"),
    )
    domain: str | None = None
    difficulty: Difficulty = "Medium"
    options: list[str] = Field(default_factory=list)
    correct_indices: list[int] = Field(
        default_factory=list,
        validation_alias=AliasChoices("correct_indices", "correctIndices", "correct"),
    )
    points: float | dict[str, list[float]] | None = None
    leadership_mapping: dict[int, str] | None = Field(
        default=None,
        validation_alias=AliasChoices("leadership_mapping", "leadershipMapping"),
    )
    leadership_scoring: dict[int, LeadershipOptionScore] | None = Field(
        default=None,
        validation_alias=AliasChoices("leadership_scoring", "leadershipScoring"),
    )
    rule: ScoringRule | None = Field(default=None, exclude=True)

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            lowered = value.strip().lower()
            return _TYPE_ALIASES.get(lowered, lowered)
        return value

    @field_validator("category", mode="before")
    @classmethod
    def _normalize_category(cls, value: Any) -> Any:
        if isinstance(value, str):
            lowered = value.strip().lower()
            return _CATEGORY_ALIASES.get(lowered, lowered)
        return value

    @field_validator("job_type", mode="before")
    @classmethod
    def _default_job_type(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return ALL_JOB_TYPES
        return value

    @field_validator("difficulty", mode="before")
    @classmethod
    def _normalize_difficulty(cls, value: Any) -> Any:
        if value is None:
            return "Medium"
        if isinstance(value, str):
            return value.strip().capitalize()
        return value

    @field_validator("correct_indices", mode="before")
    @classmethod
    def _coerce_correct(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, int) and not isinstance(value, bool):
            return [value]
        if isinstance(value, (list, tuple, set)):
            return sorted({int(item) for item in value})
        return value

    @model_validator(mode="after")
    def _resolve_rule(self) -> "Question":
        # frozen model: bypass __setattr__ for the derived field
        object.__setattr__(self, "rule", self._build_rule())
        return self

    def _build_rule(self) -> Any:
        if self.is_personal_info:
            return PersonalInfoRule()

        if self.category == LEADERSHIP_CATEGORY:
            scoring = dict(self.leadership_scoring or {})
            mapping = dict(self.leadership_mapping or {})
            for index, option_score in scoring.items():
                if index not in mapping and option_score.leadership_type:
                    mapping[index] = option_score.leadership_type
            return LeadershipMappedRule(mapping=mapping, scoring=scoring)

        if self.is_preference:
            return PreferenceRule()

        if isinstance(self.points, dict):
            if not self.points:
                raise ValueError(f"Question {self.id!r} has an empty per-category points map")
            return CategoryWeightedRule(weights=self.points)

        if self.category == CHARACTER_CATEGORY or not self.correct_indices:
            return UnscoredRule()

        if self.points is None:
            raise ValueError(
                f"Question {self.id!r} must define scalar points or a per-category points map"
            )
        return ScalarRule(points=float(self.points), correct_indices=tuple(self.correct_indices))

    @property
    def is_personal_info(self) -> bool:
        return (
            self.category == PERSONAL_CATEGORY
            or self.type == "free-text"
            or "personal" in self.id.lower()
        )

    @property
    def is_preference(self) -> bool:
        if not self.options or not self.correct_indices:
            return False
        return set(self.correct_indices) == set(range(len(self.options)))

    @property
    def difficulty_rank(self) -> int:
        return DIFFICULTY_RANK[self.difficulty]

    @property
    def is_general(self) -> bool:
        return self.job_type == ALL_JOB_TYPES

    def option_text(self, index: int) -> str | None:
        if 0 <= index < len(self.options):
            return self.options[index]
        return None


class Response(BaseModel):
    """A single submitted answer."""

    question_id: str = Field(validation_alias=AliasChoices("question_id", "questionId"))
    answer: Any = None

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)


def normalize_responses(raw: Any) -> dict[str, Any]:
    """Collapse a response batch into a ``question_id -> answer`` mapping.

    Accepts a mapping, a list of :class:`Response` objects or a list of
    ``{"questionId": ..., "answer": ...}`` records. Entries that cannot be
    interpreted are dropped; the later of two answers to the same question wins.
    """
    if raw is None:
        return {}
    if isinstance(raw, dict):
        return {str(key): value for key, value in raw.items()}

    answers: dict[str, Any] = {}
    if not isinstance(raw, (list, tuple)):
        return answers
    for item in raw:
        if isinstance(item, Response):
            answers[item.question_id] = item.answer
            continue
        if not isinstance(item, dict):
            continue
        question_id = item.get("question_id", item.get("questionId"))
        if question_id is None:
            continue
        answers[str(question_id)] = item.get("answer")
    return answers


__all__ = [
    "ALL_JOB_TYPES",
    "ADVANCED_CATEGORY",
    "BASIC_CATEGORY",
    "CHARACTER_CATEGORY",
    "CategoryWeightedRule",
    "DIFFICULTY_RANK",
    "Difficulty",
    "INITIAL_CATEGORY",
    "LEADERSHIP_CATEGORY",
    "LeadershipMappedRule",
    "LeadershipOptionScore",
    "PERSONAL_CATEGORY",
    "PersonalInfoRule",
    "PreferenceRule",
    "Question",
    "QuestionCategory",
    "QuestionType",
    "Response",
    "ScalarRule",
    "ScoringRule",
    "UnscoredRule",
    "normalize_responses",
]
