"""In-memory question repository backed by a JSON question bank."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable

from pydantic import ValidationError

from ..schemas import ALL_JOB_TYPES, Question

DEFAULT_BANK_POINTS = 25


class QuestionBankLoader:
    """Load question bank exports (JSON array or JSON lines)."""

    def load(self, path: Path) -> list[Question]:
        text = path.read_text(encoding="utf-8")
        records = self._parse(text)
        questions: list[Question] = []
        errors: list[str] = []
        for idx, record in enumerate(records, start=1):
            if not isinstance(record, dict):
                errors.append(f"record {idx}: expected an object")
                continue
            try:
                questions.append(Question.model_validate(with_bank_defaults(record)))
            except ValidationError as exc:
                errors.append(f"record {idx}: {exc.error_count()} validation error(s): {exc.errors()[0]['msg']}")
        if errors:
            raise ValueError(f"Invalid question bank {path}: {errors}")
        return questions

    @staticmethod
    def _parse(text: str) -> list[Any]:
        stripped = text.strip()
        if not stripped:
            return []
        if stripped.startswith("["):
            try:
                data = json.loads(stripped)
            except json.JSONDecodeError as exc:
                raise ValueError(f"Invalid question bank JSON: {exc}") from exc
            return list(data)
        records: list[Any] = []
        for idx, line in enumerate(stripped.splitlines(), start=1):
            raw = line.strip()
            if not raw:
                continue
            try:
                records.append(json.loads(raw))
            except json.JSONDecodeError as exc:
                raise ValueError(f"line {idx}: invalid JSON ({exc})") from exc
        return records


def with_bank_defaults(record: dict[str, Any]) -> dict[str, Any]:
    """Apply the bank-level default point value to scoreable rows without one."""
    if record.get("points") is not None:
        return record
    if record.get("leadership_scoring") or record.get("leadershipScoring"):
        return record
    updated = dict(record)
    updated["points"] = DEFAULT_BANK_POINTS
    return updated


class InMemoryQuestionRepository:
    """Question repository over a materialized list of questions."""

    def __init__(self, questions: Iterable[Question] = ()) -> None:
        self._questions = list(questions)

    @classmethod
    def from_path(cls, path: str | Path | None) -> "InMemoryQuestionRepository":
        if path is None:
            return cls()
        return cls(QuestionBankLoader().load(Path(path)))

    @classmethod
    def from_records(cls, records: Iterable[dict[str, Any]]) -> "InMemoryQuestionRepository":
        return cls(Question.model_validate(with_bank_defaults(record)) for record in records)

    def __len__(self) -> int:
        return len(self._questions)

    def find_questions(
        self,
        job_type: str,
        category: str,
        order_by_difficulty: bool = True,
    ) -> list[Question]:
        wanted = job_type.strip().casefold()
        general = job_type == ALL_JOB_TYPES
        matches = [
            question
            for question in self._questions
            if question.category == category
            and (question.is_general if general else question.job_type.strip().casefold() == wanted)
        ]
        if order_by_difficulty:
            matches.sort(key=lambda question: question.difficulty_rank)
        return matches
