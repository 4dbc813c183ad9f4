"""Question repositories consumed by the selector."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ..schemas import Question
from .memory import InMemoryQuestionRepository, QuestionBankLoader


@runtime_checkable
class QuestionRepository(Protocol):
    """Read-only source of question pools.

    Implementations return questions for a job type and category. ``All``
    selects general questions (job type ``All`` or unset).
    """

    def find_questions(
        self,
        job_type: str,
        category: str,
        order_by_difficulty: bool = True,
    ) -> list[Question]:
        """Return the questions matching ``job_type`` and ``category``."""


__all__ = ["QuestionRepository", "InMemoryQuestionRepository", "QuestionBankLoader"]
