"""File-driven assessment generation and scoring."""

from __future__ import annotations

import json
from dataclasses import asdict
from enum import Enum
from pathlib import Path
from typing import Iterable

import pendulum
import structlog
from pydantic import ValidationError

from . import __version__
from .core import AssessmentEngine, AssessmentResult, GeneratedAssessment
from .schemas import Submission


class SubmissionLoadError(ValueError):
    """Raised when submission loading encounters invalid records."""

    def __init__(self, errors: list[str], partial: list[Submission]):
        super().__init__("Submission loading failed")
        self.errors = errors
        self.partial = partial

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"Submission loading failed: {self.errors}"


class SubmissionLoader:
    """Load submissions from JSON lines."""

    def load(self, path: Path) -> list[Submission]:
        submissions: list[Submission] = []
        errors: list[str] = []
        with path.open("r", encoding="utf-8") as handle:
            for idx, line in enumerate(handle, start=1):
                raw = line.strip()
                if not raw:
                    continue
                try:
                    record = json.loads(raw)
                except json.JSONDecodeError as exc:
                    errors.append(f"line {idx}: invalid JSON ({exc})")
                    continue
                if not isinstance(record, dict):
                    errors.append(f"line {idx}: expected an object")
                    continue
                try:
                    submissions.append(Submission.model_validate(record))
                except ValidationError as exc:
                    errors.append(f"line {idx}: {exc}")
                    continue
        if errors:
            raise SubmissionLoadError(errors, submissions)
        return submissions


class OutputWriter:
    """Persist pipeline output documents."""

    def write(self, path: Path, payload: dict | list[dict]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(payload, ensure_ascii=False, indent=2),
            encoding="utf-8",
        )


class AuditLogger:
    """Append-only audit logger writing JSON lines."""

    def __init__(self, path: Path):
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)

    def append(self, record: dict) -> None:
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record, ensure_ascii=False))
            handle.write("\n")


class AssessmentPipeline:
    """End-to-end orchestration over the assessment engine."""

    def __init__(
        self,
        *,
        engine: AssessmentEngine,
        submission_loader: SubmissionLoader | None = None,
        writer: OutputWriter | None = None,
    ) -> None:
        self._engine = engine
        self._submissions = submission_loader or SubmissionLoader()
        self._writer = writer or OutputWriter()
        self._logger = structlog.get_logger(__name__)

    def generate(
        self,
        *,
        case_id: str,
        job_types: Iterable[str],
        output_path: Path,
        domain: str | None = None,
    ) -> dict:
        assessment = self._engine.generate_assessment(case_id, job_types, domain=domain)
        serialized = assessment.to_dict()
        self._writer.write(
            output_path,
            {
                "metadata": _metadata(
                    case_id=case_id,
                    job_types=[group.job_type for group in assessment.job_type_groups],
                    question_count=len(assessment.questions()),
                ),
                "results": [serialized],
            },
        )
        return serialized

    def initial(
        self,
        *,
        case_id: str,
        job_types: Iterable[str],
        output_path: Path,
        domain: str | None = None,
        count: int | None = None,
    ) -> list[dict]:
        questions = self._engine.generate_initial_assessment(
            case_id, list(job_types), domain=domain, count=count
        )
        serialized = [question.model_dump(mode="json") for question in questions]
        self._writer.write(
            output_path,
            {
                "metadata": _metadata(case_id=case_id, domain=domain, question_count=len(serialized)),
                "results": serialized,
            },
        )
        return serialized

    def score(
        self,
        *,
        submissions_path: Path,
        output_path: Path,
        audit_logger: AuditLogger | None = None,
    ) -> list[dict]:
        load_errors: list[str] = []
        try:
            submissions = self._submissions.load(submissions_path)
        except SubmissionLoadError as exc:
            submissions = exc.partial
            load_errors.extend(exc.errors)
            self._logger.warning("submissions.partial_load", errors=exc.errors)

        results: dict[tuple, dict] = {}
        for submission in submissions:
            assessment = (
                GeneratedAssessment.from_dict(submission.assessment) if submission.assessment else None
            )
            result = self._engine.score_submission(
                submission.responses,
                submission.questions or None,
                submission.threshold,
                assessment=assessment,
                personal_info=submission.personal_info,
                participant_id=submission.participant_id,
                case_id=submission.case_id,
                template_id=submission.template_id,
            )
            # a resubmission replaces the earlier result for the same key
            if result.key in results:
                self._logger.info(
                    "pipeline.result_replaced",
                    participant_id=submission.participant_id,
                    case_id=result.case_id,
                    template_id=submission.template_id,
                )
                del results[result.key]
            results[result.key] = serialize_result(result)

            if audit_logger:
                audit_logger.append(
                    {
                        "participant_id": result.participant_id,
                        "case_id": result.case_id,
                        "template_id": result.template_id,
                        "normalized_score": result.normalized_score,
                        "threshold": result.threshold,
                        "classification": result.classification.classification,
                        "recommended_status": result.classification.recommended_status,
                        "dominant_leadership_type": result.dominant_leadership_type,
                        "leadership_completeness": result.leadership_completeness,
                        "created_at": result.created_at,
                    }
                )

        serialized_results = list(results.values())
        self._writer.write(
            output_path,
            {
                "metadata": _metadata(
                    submission_count=len(submissions),
                    result_count=len(serialized_results),
                    errors=load_errors,
                ),
                "results": serialized_results,
            },
        )
        return serialized_results


def serialize_result(result: AssessmentResult) -> dict:
    return json.loads(json.dumps(asdict(result), default=_json_default, ensure_ascii=False))


def _metadata(**fields: object) -> dict:
    metadata: dict = {
        "timestamp": pendulum.now().to_iso8601_string(),
        "app_version": __version__,
        "errors": [],
    }
    metadata.update(fields)
    return metadata


def _json_default(value):  # type: ignore[override]
    if isinstance(value, pendulum.DateTime):
        return value.to_iso8601_string()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (set, frozenset)):
        return sorted(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")
