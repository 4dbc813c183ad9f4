"""Question selection with general backfill and deterministic fallbacks."""

from __future__ import annotations

import hashlib
import re
from collections import Counter
from typing import Any, Iterable

import structlog
from rapidfuzz import fuzz

from ..schemas import (
    ADVANCED_CATEGORY,
    ALL_JOB_TYPES,
    BASIC_CATEGORY,
    LEADERSHIP_CATEGORY,
    Question,
)
from .config import DEFAULT_CONFIG, AssessmentConfig

_SLUG_PATTERN = re.compile(r"[^0-9a-z]+")

_FALLBACK_TEMPLATES: dict[str, dict[str, Any]] = {
    BASIC_CATEGORY: {
        "text": "{job_type}: basic technical question {number}",
        "options": ["Option A", "Option B", "Option C", "Option D"],
        "difficulty": "Easy",
    },
    ADVANCED_CATEGORY: {
        "text": "{job_type}: advanced technical question {number}",
        "options": ["Advanced A", "Advanced B", "Advanced C", "Advanced D"],
        "difficulty": "Hard",
    },
    LEADERSHIP_CATEGORY: {
        "text": (
            "Leadership scenario {number}: how do you respond when a conflict "
            "arises inside your team?"
        ),
        "options": [
            "Listen to both sides and look for a shared solution",
            "Ignore the conflict",
            "Back the stronger side",
            "Escalate to upper management",
        ],
        "difficulty": "Medium",
    },
}

_DEFAULT_TEMPLATE: dict[str, Any] = {
    "text": "General question {number}",
    "options": ["A", "B", "C", "D"],
    "difficulty": "Medium",
}


def slugify(value: str) -> str:
    slug = _SLUG_PATTERN.sub("-", value.strip().lower()).strip("-")
    return slug or "general"


def fallback_keys(job_types: Iterable[str]) -> dict[str, str]:
    """Fallback id fragment per job type.

    Job types whose slugs collide (``"Front End"`` and ``"front-end"``) get a
    short digest of their exact name appended so their fallback ids differ.
    """
    slugs = {job_type: slugify(job_type) for job_type in job_types}
    counts = Counter(slugs.values())
    return {
        job_type: slug if counts[slug] == 1 else f"{slug}-{_digest(job_type)}"
        for job_type, slug in slugs.items()
    }


def _digest(value: str) -> str:
    return hashlib.sha1(value.encode("utf-8")).hexdigest()[:8]


def fallback_question(
    job_type: str,
    category: str,
    index: int,
    *,
    key: str | None = None,
    config: AssessmentConfig = DEFAULT_CONFIG,
) -> Question:
    """Return the placeholder question for ``(job_type, category, index)``.

    The result depends only on its arguments, so repeated calls yield equal
    questions. The first option is always the correct one.
    """
    template = _FALLBACK_TEMPLATES.get(category, _DEFAULT_TEMPLATE)
    owner = ALL_JOB_TYPES if category == LEADERSHIP_CATEGORY else job_type
    return Question.model_validate(
        {
            "id": f"fallback-{category}-{key or slugify(job_type)}-{index + 1}",
            "type": "single-choice",
            "category": category,
            "question": template["text"].format(job_type=job_type, number=index + 1),
            "job_type": owner,
            "difficulty": template["difficulty"],
            "options": list(template["options"]),
            "correct_indices": [0],
            "points": config.fallback_points_for(category),
        }
    )


def fallback_questions(
    job_type: str,
    category: str,
    count: int,
    *,
    start: int = 0,
    key: str | None = None,
    config: AssessmentConfig = DEFAULT_CONFIG,
) -> list[Question]:
    return [
        fallback_question(job_type, category, index, key=key, config=config)
        for index in range(start, start + count)
    ]


class QuestionSelector:
    """Pick an ordered question set for a job type and category."""

    def __init__(
        self,
        repository: Any,
        *,
        config: AssessmentConfig | None = None,
    ) -> None:
        self._repository = repository
        self._config = config or DEFAULT_CONFIG
        self._logger = structlog.get_logger(__name__)

    def select_questions(
        self,
        job_type: str,
        category: str,
        count: int,
        *,
        domain: str | None = None,
        fallback_key: str | None = None,
    ) -> list[Question]:
        if count < 0:
            raise ValueError("count must be non-negative")
        if count == 0:
            return []

        selected = self._filter_domain(self._fetch(job_type, category), domain)

        if len(selected) < count and job_type != ALL_JOB_TYPES:
            general = self._filter_domain(self._fetch(ALL_JOB_TYPES, category), domain)
            selected = _dedupe([*selected, *general])

        selected = selected[:count]

        if len(selected) < count:
            missing = count - len(selected)
            self._logger.warning(
                "selector.fallback",
                job_type=job_type,
                category=category,
                requested=count,
                found=len(selected),
                synthesized=missing,
            )
            selected.extend(
                fallback_questions(
                    job_type,
                    category,
                    missing,
                    start=len(selected),
                    key=fallback_key,
                    config=self._config,
                )
            )
        return selected

    def pool(self, job_type: str, category: str, *, domain: str | None = None) -> list[Question]:
        """Repository questions for one job type, without backfill or fallbacks."""
        return self._filter_domain(self._fetch(job_type, category), domain)

    def _fetch(self, job_type: str, category: str) -> list[Question]:
        try:
            found = self._repository.find_questions(job_type, category, True)
        except Exception as exc:  # noqa: BLE001
            self._logger.warning(
                "selector.repository_failed",
                job_type=job_type,
                category=category,
                error=str(exc),
            )
            return []
        ordered = sorted(_dedupe(found or []), key=lambda question: question.difficulty_rank)
        return ordered

    def _filter_domain(self, questions: list[Question], domain: str | None) -> list[Question]:
        if not domain:
            return questions
        return [
            question
            for question in questions
            if question.domain is None
            or domain_matches(
                question.domain,
                domain,
                min_similarity=self._config.domain_match_min_similarity,
            )
        ]


def domain_matches(candidate: str, wanted: str, *, min_similarity: float) -> bool:
    left = candidate.strip().casefold()
    right = wanted.strip().casefold()
    if not left or not right:
        return False
    if left in right or right in left:
        return True
    return fuzz.partial_ratio(left, right) >= min_similarity


def _dedupe(questions: Iterable[Question]) -> list[Question]:
    seen: set[str] = set()
    unique: list[Question] = []
    for question in questions:
        if question.id in seen:
            continue
        seen.add(question.id)
        unique.append(question)
    return unique


__all__ = [
    "QuestionSelector",
    "domain_matches",
    "fallback_keys",
    "fallback_question",
    "fallback_questions",
    "slugify",
]
