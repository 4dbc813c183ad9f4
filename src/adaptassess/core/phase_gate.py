"""Phase gating for the adaptive technical assessment."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Mapping

from .config import DEFAULT_CONFIG, AssessmentConfig


class GateState(str, Enum):
    """Per job type progression."""

    BASIC_ONLY = "basic_only"
    ADVANCED_UNLOCKED = "advanced_unlocked"


@dataclass(frozen=True, slots=True)
class PhaseScore:
    """Score of one phase."""

    score: float = 0.0
    max_score: float = 0.0
    percentage: int = 0
    correct_count: int = 0
    total_count: int = 0
    answered_count: int = 0
    has_access: bool = True

    @property
    def completed(self) -> bool:
        return self.answered_count > 0


class PhaseGate:
    """Decide which phases a candidate may see."""

    def __init__(self, *, config: AssessmentConfig | None = None) -> None:
        self._config = config or DEFAULT_CONFIG

    def advanced_unlocked(self, basic: PhaseScore) -> bool:
        """Lenient OR gate: percentage threshold or enough correct answers."""
        if not self._config.enable_advanced_access:
            return False
        meets_percentage = basic.percentage >= self._config.basic_success_threshold
        if self._config.advancement_rule == "threshold":
            return meets_percentage
        return meets_percentage or basic.correct_count >= self._config.min_correct_answers

    def state_for(self, basic: PhaseScore) -> GateState:
        if self.advanced_unlocked(basic):
            return GateState.ADVANCED_UNLOCKED
        return GateState.BASIC_ONLY

    def leadership_unlocked(self, basic_scores: Mapping[str, PhaseScore] | Iterable[PhaseScore]) -> bool:
        """Shared leadership/character phases unlock once the Basic phases are done.

        ``all_complete`` requires every job-type group to have answered at least
        one Basic question; ``any_complete`` requires one group.
        """
        scores = list(basic_scores.values() if isinstance(basic_scores, Mapping) else basic_scores)
        if not scores:
            return False
        if self._config.leadership_trigger == "any_complete":
            return any(score.completed for score in scores)
        return all(score.completed for score in scores)

    def gate_advanced(self, basic: PhaseScore, advanced: PhaseScore) -> PhaseScore:
        """Return ``advanced`` flagged with the access decision derived from ``basic``."""
        return PhaseScore(
            score=advanced.score,
            max_score=advanced.max_score,
            percentage=advanced.percentage,
            correct_count=advanced.correct_count,
            total_count=advanced.total_count,
            answered_count=advanced.answered_count,
            has_access=self.advanced_unlocked(basic),
        )


__all__ = ["GateState", "PhaseGate", "PhaseScore"]
