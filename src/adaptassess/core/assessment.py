"""Assessment generation and submission scoring."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

import pendulum
import structlog
from rapidfuzz import fuzz

from ..schemas import (
    ADVANCED_CATEGORY,
    ALL_JOB_TYPES,
    BASIC_CATEGORY,
    CHARACTER_CATEGORY,
    INITIAL_CATEGORY,
    LEADERSHIP_CATEGORY,
    Question,
    normalize_responses,
)
from .classification import Classification, ClassificationEngine
from .config import DEFAULT_CONFIG, AssessmentConfig
from .phase_gate import GateState, PhaseGate, PhaseScore
from .rounding import round_half_up
from .scoring import BreakdownEntry, ScoreSummary, ScoringEngine, parse_answer, phase_score
from .selector import QuestionSelector, fallback_keys, fallback_questions

ASSESSMENT_TYPE = "adaptive-technical-assessment"


@dataclass(frozen=True, slots=True)
class JobTypeGroup:
    """Basic and advanced questions generated for one job type."""

    job_type: str
    basic_questions: list[Question]
    advanced_questions: list[Question]


@dataclass(frozen=True, slots=True)
class GeneratedAssessment:
    """Question layout handed to the candidate."""

    case_id: str
    job_type_groups: list[JobTypeGroup]
    leadership_questions: list[Question]
    character_questions: list[Question] = field(default_factory=list)
    config: dict[str, Any] = field(default_factory=dict)
    assessment_type: str = ASSESSMENT_TYPE

    def questions(self) -> list[Question]:
        ordered: list[Question] = []
        seen: set[str] = set()
        for group in self.job_type_groups:
            for question in [*group.basic_questions, *group.advanced_questions]:
                if question.id not in seen:
                    seen.add(question.id)
                    ordered.append(question)
        for question in [*self.leadership_questions, *self.character_questions]:
            if question.id not in seen:
                seen.add(question.id)
                ordered.append(question)
        return ordered

    def to_dict(self) -> dict[str, Any]:
        def dump(questions: Iterable[Question]) -> list[dict[str, Any]]:
            return [question.model_dump(mode="json") for question in questions]

        return {
            "case_id": self.case_id,
            "assessment_type": self.assessment_type,
            "job_type_groups": [
                {
                    "job_type": group.job_type,
                    "basic_questions": dump(group.basic_questions),
                    "advanced_questions": dump(group.advanced_questions),
                }
                for group in self.job_type_groups
            ],
            "leadership_questions": dump(self.leadership_questions),
            "character_questions": dump(self.character_questions),
            "config": dict(self.config),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GeneratedAssessment":
        def load(records: Iterable[Any] | None) -> list[Question]:
            return [Question.model_validate(record) for record in records or []]

        groups = [
            JobTypeGroup(
                job_type=str(group.get("job_type", group.get("jobType", ALL_JOB_TYPES))),
                basic_questions=load(group.get("basic_questions", group.get("basicQuestions"))),
                advanced_questions=load(
                    group.get("advanced_questions", group.get("advancedQuestions"))
                ),
            )
            for group in data.get("job_type_groups", data.get("jobTypeGroups")) or []
        ]
        return cls(
            case_id=str(data.get("case_id", data.get("caseId", ""))),
            job_type_groups=groups,
            leadership_questions=load(
                data.get("leadership_questions", data.get("leadershipQuestions"))
            ),
            character_questions=load(
                data.get("character_questions", data.get("characterQuestions"))
            ),
            config=dict(data.get("config") or {}),
            assessment_type=str(data.get("assessment_type", ASSESSMENT_TYPE)),
        )


@dataclass(frozen=True, slots=True)
class PhasePerformance:
    score: PhaseScore
    status: str


@dataclass(frozen=True, slots=True)
class DevelopmentPath:
    current_level: str
    estimated_timeline: str
    focus_areas: list[str]


@dataclass(frozen=True, slots=True)
class JobTypeAnalysis:
    """Phase-level view of one job type."""

    job_type: str
    gate_state: GateState
    has_advanced_access: bool
    basic: PhasePerformance
    advanced: PhasePerformance
    total_score: float
    total_max_score: float
    overall_percentage: int
    recommendations: list[str]
    development_path: DevelopmentPath
    leadership_eligible: bool


@dataclass(frozen=True, slots=True)
class PhaseReport:
    job_types: list[JobTypeAnalysis]
    leadership: PhasePerformance
    character: PhasePerformance | None
    leadership_unlocked: bool
    overall_percentage: int
    insights: list[str]
    progressive_development: dict[str, list[str]]


@dataclass(frozen=True, slots=True)
class AssessmentResult:
    """Scored submission. Callers persist it; a resubmission yields a new one."""

    raw_score: float
    max_score: float
    normalized_score: int
    threshold: float
    category_scores: dict[str, float]
    leadership_type_scores: dict[str, float]
    dominant_leadership_type: str | None
    leadership_completeness: float
    breakdown: list[BreakdownEntry]
    classification: Classification
    phase_report: PhaseReport | None = None
    participant_id: str | None = None
    case_id: str | None = None
    template_id: str | None = None
    created_at: str | None = None

    @property
    def key(self) -> tuple[str | None, str | None, str | None]:
        return (self.participant_id, self.case_id, self.template_id)


class AssessmentEngine:
    """Entry point for generating assessments and scoring submissions."""

    def __init__(
        self,
        *,
        selector: QuestionSelector,
        scoring: ScoringEngine | None = None,
        gate: PhaseGate | None = None,
        classifier: ClassificationEngine | None = None,
        config: AssessmentConfig | None = None,
    ) -> None:
        self._config = config or DEFAULT_CONFIG
        self._selector = selector
        self._scoring = scoring or ScoringEngine(config=self._config)
        self._gate = gate or PhaseGate(config=self._config)
        self._classifier = classifier or ClassificationEngine()
        self._logger = structlog.get_logger(__name__)

    def generate_assessment(
        self,
        case_id: str,
        job_types: Iterable[str],
        *,
        domain: str | None = None,
    ) -> GeneratedAssessment:
        config = self._config
        leadership: list[Question] = []
        character: list[Question] = []
        # shared phases are fetched once, not per job type
        if config.has_phase("leadership"):
            leadership = self._selector.select_questions(
                ALL_JOB_TYPES, LEADERSHIP_CATEGORY, config.leadership_question_count
            )
        if config.has_phase("character"):
            character = self._selector.select_questions(
                ALL_JOB_TYPES, CHARACTER_CATEGORY, config.character_question_count
            )

        groups: list[JobTypeGroup] = []
        unique_job_types = _unique(job_types)
        keys = fallback_keys(unique_job_types)
        for job_type in unique_job_types:
            basic = self._selector.select_questions(
                job_type,
                BASIC_CATEGORY,
                config.basic_question_count,
                domain=domain,
                fallback_key=keys[job_type],
            )
            advanced: list[Question] = []
            if config.has_phase("advanced"):
                advanced = self._selector.select_questions(
                    job_type,
                    ADVANCED_CATEGORY,
                    config.advanced_question_count,
                    domain=domain,
                    fallback_key=keys[job_type],
                )
            groups.append(
                JobTypeGroup(job_type=job_type, basic_questions=basic, advanced_questions=advanced)
            )

        assessment = GeneratedAssessment(
            case_id=case_id,
            job_type_groups=groups,
            leadership_questions=leadership,
            character_questions=character,
            config=config.as_dict(),
        )
        self._logger.info(
            "assessment.generated",
            case_id=case_id,
            job_types=[group.job_type for group in groups],
            technical_questions=sum(
                len(group.basic_questions) + len(group.advanced_questions) for group in groups
            ),
            leadership_questions=len(leadership),
            character_questions=len(character),
        )
        return assessment

    def generate_initial_assessment(
        self,
        case_id: str,
        job_types: Iterable[str],
        *,
        domain: str | None = None,
        count: int | None = None,
    ) -> list[Question]:
        """Initial application questions: general, job-type and domain specific.

        The pool is shuffled with a generator seeded by ``case_id`` so that a
        case always receives the same ordering. ``count`` bounds the pool part;
        the fixed personal-info questions are placed in front of it.
        """
        limit = max(self._config.initial_question_count if count is None else count, 0)

        pool: list[Question] = []
        seen: set[str] = set()
        for job_type in [ALL_JOB_TYPES, *_unique(job_types)]:
            for question in self._selector.pool(job_type, INITIAL_CATEGORY, domain=domain):
                if question.domain is not None and not domain:
                    continue
                if question.id not in seen:
                    seen.add(question.id)
                    pool.append(question)

        random.Random(case_id).shuffle(pool)
        selected = pool[:limit]
        if len(selected) < limit:
            selected.extend(
                fallback_questions(
                    ALL_JOB_TYPES,
                    INITIAL_CATEGORY,
                    limit - len(selected),
                    start=len(selected),
                    config=self._config,
                )
            )
        if self._config.include_personal_questions:
            return [*self._classifier.personal_questions(), *selected]
        return selected

    def score_submission(
        self,
        responses: Any,
        questions: Iterable[Question | dict[str, Any]] | None = None,
        threshold: float | None = None,
        *,
        assessment: GeneratedAssessment | None = None,
        personal_info: Mapping[str, Any] | None = None,
        participant_id: str | None = None,
        case_id: str | None = None,
        template_id: str | None = None,
    ) -> AssessmentResult:
        if questions is None:
            if assessment is None:
                raise ValueError("questions or assessment must be provided")
            question_list = assessment.questions()
        else:
            question_list = [
                item if isinstance(item, Question) else Question.model_validate(item)
                for item in questions
            ]
        answers = normalize_responses(responses)
        case_threshold = self._config.default_threshold if threshold is None else float(threshold)

        summary = self._scoring.score(answers, question_list)
        report: PhaseReport | None = None
        if assessment is not None:
            report = self.analyze_phases(assessment, summary)
            locked: set[str] = set()
            unlocked: set[str] = set()
            for group, analysis in zip(assessment.job_type_groups, report.job_types):
                target = unlocked if analysis.has_advanced_access else locked
                target.update(question.id for question in group.advanced_questions)
            # a question shared with an unlocked job type still counts
            locked -= unlocked
            if locked:
                summary = self._scoring.score(
                    answers, [question for question in question_list if question.id not in locked]
                )

        personal = personal_answers(answers, question_list)
        if personal_info:
            personal.update(personal_info)
        classification = self._classifier.classify(summary.normalized_score, case_threshold, personal)

        result = AssessmentResult(
            raw_score=summary.raw_score,
            max_score=summary.max_score,
            normalized_score=summary.normalized_score,
            threshold=case_threshold,
            category_scores=summary.category_scores,
            leadership_type_scores=summary.leadership_type_scores,
            dominant_leadership_type=summary.dominant_leadership_type,
            leadership_completeness=summary.leadership_completeness,
            breakdown=summary.breakdown,
            classification=classification,
            phase_report=report,
            participant_id=participant_id,
            case_id=case_id if case_id is not None else (assessment.case_id if assessment else None),
            template_id=template_id,
            created_at=pendulum.now("UTC").to_iso8601_string(),
        )
        self._logger.info(
            "assessment.scored",
            participant_id=participant_id,
            case_id=result.case_id,
            raw_score=summary.raw_score,
            max_score=summary.max_score,
            normalized_score=summary.normalized_score,
            threshold=case_threshold,
            classification=classification.classification,
            dominant_leadership_type=summary.dominant_leadership_type,
            skipped=sum(1 for entry in summary.breakdown if entry.skipped),
        )
        return result

    def analyze_phases(self, assessment: GeneratedAssessment, summary: ScoreSummary) -> PhaseReport:
        basics: dict[str, PhaseScore] = {}
        advanced_scores: dict[str, PhaseScore] = {}
        for group in assessment.job_type_groups:
            basic = phase_score(summary.entries_for(q.id for q in group.basic_questions))
            advanced = phase_score(summary.entries_for(q.id for q in group.advanced_questions))
            basics[group.job_type] = basic
            advanced_scores[group.job_type] = self._gate.gate_advanced(basic, advanced)

        leadership_unlocked = self._gate.leadership_unlocked(basics)
        leadership_score = phase_score(
            summary.entries_for(q.id for q in assessment.leadership_questions),
            has_access=leadership_unlocked,
        )
        leadership = PhasePerformance(leadership_score, phase_status(leadership_score))
        character: PhasePerformance | None = None
        if assessment.character_questions:
            character_score = phase_score(
                summary.entries_for(q.id for q in assessment.character_questions),
                has_access=leadership_unlocked,
            )
            character = PhasePerformance(character_score, phase_status(character_score))

        include_leadership = leadership_unlocked and bool(assessment.leadership_questions)
        analyses = [
            self._analyze_job_type(
                job_type,
                basics[job_type],
                advanced_scores[job_type],
                leadership_score if include_leadership else None,
            )
            for job_type in basics
        ]

        overall = (
            round_half_up(sum(item.overall_percentage for item in analyses) / len(analyses))
            if analyses
            else 0
        )
        return PhaseReport(
            job_types=analyses,
            leadership=leadership,
            character=character,
            leadership_unlocked=leadership_unlocked,
            overall_percentage=overall,
            insights=adaptive_insights(analyses),
            progressive_development=progressive_development(analyses),
        )

    def _analyze_job_type(
        self,
        job_type: str,
        basic: PhaseScore,
        advanced: PhaseScore,
        leadership: PhaseScore | None,
    ) -> JobTypeAnalysis:
        has_access = advanced.has_access
        counted = [basic]
        if leadership is not None:
            counted.append(leadership)
        if has_access:
            counted.append(advanced)
        overall = round_half_up(sum(score.percentage for score in counted) / len(counted))

        basic_perf = PhasePerformance(basic, phase_status(basic))
        advanced_perf = PhasePerformance(advanced, phase_status(advanced))
        total_score = basic.score + (advanced.score if has_access else 0.0)
        total_max = basic.max_score + (advanced.max_score if has_access else 0.0)

        return JobTypeAnalysis(
            job_type=job_type,
            gate_state=self._gate.state_for(basic),
            has_advanced_access=has_access,
            basic=basic_perf,
            advanced=advanced_perf,
            total_score=total_score,
            total_max_score=total_max,
            overall_percentage=overall,
            recommendations=job_type_recommendations(job_type, basic_perf, advanced_perf, leadership),
            development_path=development_path(overall, basic_perf, advanced_perf, leadership),
            leadership_eligible=self.is_leadership_eligible(job_type),
        )

    def is_leadership_eligible(self, job_type: str) -> bool:
        normalized = job_type.strip().casefold()
        if not normalized:
            return False
        for role in self._config.leadership_eligible_roles:
            candidate = role.casefold()
            if normalized in candidate or candidate in normalized:
                return True
            if fuzz.partial_ratio(normalized, candidate) >= self._config.role_match_min_similarity:
                return True
        return False


def phase_status(score: PhaseScore) -> str:
    if not score.has_access:
        return "no_access"
    if score.percentage >= 70:
        return "excellent"
    if score.percentage >= 50:
        return "good"
    if score.percentage >= 30:
        return "needs_improvement"
    return "poor"


_WEAK = {"poor", "needs_improvement"}


def job_type_recommendations(
    job_type: str,
    basic: PhasePerformance,
    advanced: PhasePerformance,
    leadership: PhaseScore | None,
) -> list[str]:
    recommendations: list[str] = []
    if basic.status in _WEAK:
        recommendations.append(f"Strengthen {job_type} fundamentals")
        recommendations.append("Review the core concepts again")
    if not advanced.score.has_access:
        recommendations.append("Consolidate the fundamentals to unlock advanced topics")
    elif advanced.status in _WEAK:
        recommendations.append(f"Practice advanced {job_type} topics")
        recommendations.append("Gain experience on complex projects")
    if leadership is not None and phase_status(leadership) in _WEAK:
        recommendations.append("Seek mentoring to develop leadership skills")
        recommendations.append("Gain team management experience")
    return recommendations


def development_path(
    overall: int,
    basic: PhasePerformance,
    advanced: PhasePerformance,
    leadership: PhaseScore | None,
) -> DevelopmentPath:
    if overall >= 80:
        level, timeline = "senior", "Ready for leadership roles"
    elif overall >= 60:
        level, timeline = "mid-level", "3-6 months to senior"
    elif overall >= 40:
        level, timeline = "junior+", "6-12 months to mid-level"
    else:
        level, timeline = "junior", "6-12 months"

    focus: list[str] = []
    if basic.status != "excellent":
        focus.append("Technical Foundations")
    if advanced.score.has_access and advanced.status != "excellent":
        focus.append("Advanced Technical Skills")
    if leadership is not None and phase_status(leadership) != "excellent":
        focus.append("Leadership & Communication")
    return DevelopmentPath(current_level=level, estimated_timeline=timeline, focus_areas=focus)


def adaptive_insights(analyses: list[JobTypeAnalysis]) -> list[str]:
    if not analyses:
        return []
    with_access = sum(1 for item in analyses if item.has_advanced_access)
    rate = round_half_up(with_access / len(analyses) * 100)
    insights = [f"{rate}% of job types unlocked advanced questions"]

    strongest = [item.job_type for item in analyses if item.overall_percentage >= 70]
    if strongest:
        insights.append(f"Strongest areas: {', '.join(strongest)}")
    weakest = [item.job_type for item in analyses if item.overall_percentage < 50]
    if weakest:
        insights.append(f"Areas needing development: {', '.join(weakest)}")
    return insights


def progressive_development(analyses: list[JobTypeAnalysis]) -> dict[str, list[str]]:
    return {
        "short_term": [
            f"Strengthen {item.job_type} fundamentals"
            for item in analyses
            if not item.has_advanced_access
        ],
        "medium_term": [
            f"Build advanced {item.job_type} skills"
            for item in analyses
            if item.has_advanced_access and item.overall_percentage < 70
        ],
        "long_term": [
            f"Prepare for {item.job_type} leadership roles"
            for item in analyses
            if item.overall_percentage >= 70
        ],
    }


def personal_answers(answers: Mapping[str, Any], questions: Iterable[Question]) -> dict[str, Any]:
    """Answers to personal-info questions, with option indices resolved to text."""
    by_id = {question.id: question for question in questions}
    personal: dict[str, Any] = {}
    for question_id, raw in answers.items():
        question = by_id.get(question_id)
        if "personal" not in question_id.lower() and not (question and question.is_personal_info):
            continue
        value = raw
        if question is not None and question.options:
            parsed = parse_answer(raw)
            if parsed.index is not None and question.option_text(parsed.index) is not None:
                value = question.option_text(parsed.index)
        personal[question_id] = value
    return personal


def _unique(values: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    ordered: list[str] = []
    for value in values:
        cleaned = str(value).strip()
        if cleaned and cleaned not in seen:
            seen.add(cleaned)
            ordered.append(cleaned)
    return ordered


__all__ = [
    "ASSESSMENT_TYPE",
    "AssessmentEngine",
    "AssessmentResult",
    "DevelopmentPath",
    "GeneratedAssessment",
    "JobTypeAnalysis",
    "JobTypeGroup",
    "PhasePerformance",
    "PhaseReport",
    "adaptive_insights",
    "development_path",
    "job_type_recommendations",
    "personal_answers",
    "phase_status",
    "progressive_development",
]
