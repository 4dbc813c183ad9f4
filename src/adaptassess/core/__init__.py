"""Core assessment engine components."""

from __future__ import annotations

# NOTE: keep imports explicit for export clarity.
from .assessment import (
    AssessmentEngine,
    AssessmentResult,
    GeneratedAssessment,
    JobTypeAnalysis,
    JobTypeGroup,
    PhaseReport,
)
from .classification import Classification, ClassificationConfig, ClassificationEngine
from .config import DEFAULT_CONFIG, AssessmentConfig
from .phase_gate import GateState, PhaseGate, PhaseScore
from .scoring import BreakdownEntry, ScoreSummary, ScoringEngine, parse_answer
from .selector import QuestionSelector, fallback_question

__all__ = [
    "AssessmentConfig",
    "AssessmentEngine",
    "AssessmentResult",
    "BreakdownEntry",
    "Classification",
    "ClassificationConfig",
    "ClassificationEngine",
    "DEFAULT_CONFIG",
    "GateState",
    "GeneratedAssessment",
    "JobTypeAnalysis",
    "JobTypeGroup",
    "PhaseGate",
    "PhaseReport",
    "PhaseScore",
    "QuestionSelector",
    "ScoreSummary",
    "ScoringEngine",
    "fallback_question",
    "parse_answer",
]
