"""Scoring of submitted answers against question definitions."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Literal, Sequence

from ..schemas import (
    CategoryWeightedRule,
    LeadershipMappedRule,
    Question,
    ScalarRule,
    normalize_responses,
)
from .config import DEFAULT_CONFIG, AssessmentConfig
from .phase_gate import PhaseScore
from .rounding import percentage_of, round_half_up

AnswerKind = Literal["index", "indices", "text", "unanswered", "malformed"]

_OPTION_LABEL = re.compile(r"Seçenek\s+([A-D])\b")
_INTEGER = re.compile(r"[+-]?\d+")


@dataclass(frozen=True, slots=True)
class ParsedAnswer:
    """Normalized view of a raw answer value."""

    kind: AnswerKind
    indices: tuple[int, ...] = ()
    text: str | None = None

    @property
    def index(self) -> int | None:
        if len(self.indices) == 1:
            return self.indices[0]
        return None

    def to_json(self) -> Any:
        if self.kind == "index":
            return self.indices[0]
        if self.kind == "indices":
            return list(self.indices)
        return self.text


UNANSWERED = ParsedAnswer("unanswered")


def parse_answer(raw: Any) -> ParsedAnswer:
    """Interpret an option index, index list, numeric string or legacy option label."""
    if raw is None:
        return UNANSWERED
    if isinstance(raw, dict):
        return parse_answer(raw.get("answer"))
    if isinstance(raw, bool):
        return ParsedAnswer("malformed", text=str(raw))
    if isinstance(raw, int):
        return ParsedAnswer("index", (raw,)) if raw >= 0 else ParsedAnswer("malformed", text=str(raw))
    if isinstance(raw, float):
        if raw.is_integer() and raw >= 0:
            return ParsedAnswer("index", (int(raw),))
        return ParsedAnswer("malformed", text=str(raw))
    if isinstance(raw, str):
        value = raw.strip()
        if not value:
            return UNANSWERED
        label = _OPTION_LABEL.search(value)
        if label:
            return ParsedAnswer("index", (ord(label.group(1)) - ord("A"),))
        if _INTEGER.fullmatch(value):
            return parse_answer(int(value))
        return ParsedAnswer("text", text=value)
    if isinstance(raw, (list, tuple)):
        if not raw:
            return UNANSWERED
        indices: set[int] = set()
        for item in raw:
            parsed = parse_answer(item)
            if parsed.kind != "index":
                return ParsedAnswer("malformed", text=str(raw))
            indices.update(parsed.indices)
        return ParsedAnswer("indices", tuple(sorted(indices)))
    return ParsedAnswer("malformed", text=repr(raw))


@dataclass(frozen=True, slots=True)
class BreakdownEntry:
    """Per-question scoring record."""

    question_id: str
    question: str
    category: str
    job_type: str
    rule: str
    answer: Any
    is_correct: bool
    points: float
    max_points: float
    skipped: bool = False
    skip_reason: str | None = None
    leadership_type: str | None = None


@dataclass(frozen=True, slots=True)
class ScoreSummary:
    """Aggregate scoring output for one response batch."""

    raw_score: float
    max_score: float
    normalized_score: int
    category_scores: dict[str, float]
    leadership_type_scores: dict[str, float]
    dominant_leadership_type: str | None
    leadership_completeness: float
    breakdown: list[BreakdownEntry] = field(default_factory=list)

    def entries_for(self, question_ids: Iterable[str]) -> list[BreakdownEntry]:
        wanted = set(question_ids)
        return [entry for entry in self.breakdown if entry.question_id in wanted]


def phase_score(entries: Sequence[BreakdownEntry], *, has_access: bool = True) -> PhaseScore:
    """Collapse breakdown entries of one phase into a :class:`PhaseScore`."""
    score = sum(entry.points for entry in entries)
    max_score = sum(entry.max_points for entry in entries)
    return PhaseScore(
        score=score,
        max_score=max_score,
        percentage=percentage_of(score, max_score),
        correct_count=sum(1 for entry in entries if entry.is_correct),
        total_count=len(entries),
        answered_count=sum(1 for entry in entries if not entry.skipped),
        has_access=has_access,
    )


@dataclass
class _Tally:
    raw_score: float = 0.0
    max_score: float = 0.0
    category_scores: dict[str, float] = field(default_factory=dict)
    leadership_type_scores: dict[str, float] = field(default_factory=dict)
    leadership_total: int = 0
    leadership_answered: int = 0

    def credit(self, bucket: str, points: float) -> None:
        self.category_scores[bucket] = self.category_scores.get(bucket, 0.0) + points

    def credit_archetype(self, archetype: str, points: float) -> None:
        self.leadership_type_scores[archetype] = (
            self.leadership_type_scores.get(archetype, 0.0) + points
        )


class ScoringEngine:
    """Score a response batch with question-type specific rules.

    The engine is total: unanswered, unparseable or out-of-range answers add
    nothing to the raw or maximum score and are recorded as skipped in the
    breakdown.
    """

    def __init__(self, *, config: AssessmentConfig | None = None) -> None:
        self._config = config or DEFAULT_CONFIG

    def score(self, responses: Any, questions: Iterable[Question | dict[str, Any]]) -> ScoreSummary:
        answers = normalize_responses(responses)
        tally = _Tally(leadership_type_scores={name: 0.0 for name in self._config.archetypes})
        breakdown: list[BreakdownEntry] = []

        for item in questions:
            question = item if isinstance(item, Question) else Question.model_validate(item)
            entry = self._score_question(question, parse_answer(answers.get(question.id)), tally)
            breakdown.append(entry)

        scored_leadership = tally.leadership_answered > 0
        completeness = (
            tally.leadership_answered / tally.leadership_total if tally.leadership_total else 1.0
        )
        return ScoreSummary(
            raw_score=tally.raw_score,
            max_score=tally.max_score,
            normalized_score=percentage_of(tally.raw_score, tally.max_score),
            category_scores=tally.category_scores,
            leadership_type_scores=tally.leadership_type_scores,
            dominant_leadership_type=(
                dominant_archetype(tally.leadership_type_scores) if scored_leadership else None
            ),
            leadership_completeness=completeness,
            breakdown=breakdown,
        )

    def _score_question(self, question: Question, answer: ParsedAnswer, tally: _Tally) -> BreakdownEntry:
        rule = question.rule
        kind = rule.kind

        if kind == "personal_info":
            return _skipped(question, answer, "personal_info")
        if kind == "unscored":
            return _skipped(question, answer, "unscored")

        if kind == "leadership":
            tally.leadership_total += 1
            return self._score_leadership(question, rule, answer, tally)

        if answer.kind == "unanswered":
            return _skipped(question, answer, "unanswered")
        if answer.kind in ("text", "malformed"):
            return _skipped(question, answer, "malformed")
        if not _indices_in_range(question, answer):
            return _skipped(question, answer, "out_of_range")

        if kind == "preference":
            points = float(self._config.preference_points)
            return self._record(question, answer, tally, points, points, is_correct=False)

        if kind == "category_weighted":
            return self._score_weighted(question, rule, answer, tally)

        return self._score_scalar(question, rule, answer, tally)

    def _score_leadership(
        self,
        question: Question,
        rule: LeadershipMappedRule,
        answer: ParsedAnswer,
        tally: _Tally,
    ) -> BreakdownEntry:
        max_points = self._leadership_max(question, rule)
        if answer.kind == "unanswered":
            return _skipped(question, answer, "unanswered")

        index = answer.index
        if index is None:
            return _skipped(question, answer, "malformed")
        points = self._leadership_value(rule, index)
        if points is None or not self._leadership_option_exists(question, rule, index):
            return _skipped(question, answer, "out_of_range")

        mapped = rule.option(index)
        archetype = mapped[0] if mapped is not None else self._config.default_archetype

        tally.leadership_answered += 1
        tally.credit_archetype(archetype, points)
        return self._record(
            question,
            answer,
            tally,
            points,
            max_points,
            is_correct=True,
            leadership_type=archetype,
        )

    def _leadership_option_exists(self, question: Question, rule: LeadershipMappedRule, index: int) -> bool:
        if question.options:
            return index < len(question.options)
        return index in rule.mapping or index < len(self._config.leadership_fallback_points)

    def _leadership_value(self, rule: LeadershipMappedRule, index: int) -> float | None:
        mapped = rule.option(index)
        if mapped is not None:
            return mapped[1]
        table = self._config.leadership_fallback_points
        if index < len(table):
            return float(table[index])
        return None

    def _leadership_max(self, question: Question, rule: LeadershipMappedRule) -> float:
        if question.options:
            candidates = range(len(question.options))
        else:
            candidates = set(rule.mapping) | set(range(len(self._config.leadership_fallback_points)))
        values = [
            value
            for value in (self._leadership_value(rule, index) for index in candidates)
            if value is not None
        ]
        return max(values, default=0.0)

    def _score_weighted(
        self,
        question: Question,
        rule: CategoryWeightedRule,
        answer: ParsedAnswer,
        tally: _Tally,
    ) -> BreakdownEntry:
        index = answer.index
        if index is None:
            return _skipped(question, answer, "malformed")
        per_category = _weights_at(rule, index)
        if not per_category:
            return _skipped(question, answer, "out_of_range")

        for category, value in per_category.items():
            tally.credit(category, value)

        points = self._aggregate_weighted(rule, per_category)
        option_count = max(len(values) for values in rule.weights.values())
        max_points = max(
            self._aggregate_weighted(rule, _weights_at(rule, option)) for option in range(option_count)
        )
        return self._record(question, answer, tally, points, max_points, is_correct=points > 0)

    def _aggregate_weighted(self, rule: CategoryWeightedRule, per_category: dict[str, float]) -> float:
        traits = self._config.trait_categories
        if traits and all(trait in rule.weights for trait in traits):
            present = [per_category[trait] for trait in traits if trait in per_category]
            if not present:
                return 0.0
            return float(round_half_up(sum(present) / len(present)))
        return float(sum(per_category.values()))

    def _score_scalar(
        self,
        question: Question,
        rule: ScalarRule,
        answer: ParsedAnswer,
        tally: _Tally,
    ) -> BreakdownEntry:
        correct = set(rule.correct_indices)
        if question.type == "multi-choice" or (answer.kind == "indices" and len(answer.indices) > 1):
            is_correct = set(answer.indices) == correct
        else:
            is_correct = answer.index in correct
        points = rule.points if is_correct else 0.0
        return self._record(question, answer, tally, points, rule.points, is_correct=is_correct)

    @staticmethod
    def _record(
        question: Question,
        answer: ParsedAnswer,
        tally: _Tally,
        points: float,
        max_points: float,
        *,
        is_correct: bool,
        leadership_type: str | None = None,
    ) -> BreakdownEntry:
        tally.raw_score += points
        tally.max_score += max_points
        tally.credit(question.category, points)
        return BreakdownEntry(
            question_id=question.id,
            question=question.question,
            category=question.category,
            job_type=question.job_type,
            rule=question.rule.kind,
            answer=answer.to_json(),
            is_correct=is_correct,
            points=points,
            max_points=max_points,
            leadership_type=leadership_type,
        )


def dominant_archetype(scores: dict[str, float]) -> str | None:
    """Highest scoring archetype; the first inserted wins ties."""
    best: str | None = None
    best_score = float("-inf")
    for name, value in scores.items():
        if value > best_score:
            best, best_score = name, value
    return best


def _weights_at(rule: CategoryWeightedRule, index: int) -> dict[str, float]:
    return {
        category: float(values[index])
        for category, values in rule.weights.items()
        if 0 <= index < len(values)
    }


def _indices_in_range(question: Question, answer: ParsedAnswer) -> bool:
    if not question.options:
        return True
    return all(0 <= index < len(question.options) for index in answer.indices)


def _skipped(
    question: Question,
    answer: ParsedAnswer,
    reason: str,
) -> BreakdownEntry:
    return BreakdownEntry(
        question_id=question.id,
        question=question.question,
        category=question.category,
        job_type=question.job_type,
        rule=question.rule.kind,
        answer=answer.to_json(),
        is_correct=False,
        points=0.0,
        max_points=0.0,
        skipped=True,
        skip_reason=reason,
    )


__all__ = [
    "BreakdownEntry",
    "ParsedAnswer",
    "ScoreSummary",
    "ScoringEngine",
    "UNANSWERED",
    "dominant_archetype",
    "parse_answer",
    "phase_score",
]
