from __future__ import annotations

import json
from pathlib import Path

import pytest

from adaptassess.container import create_container
from adaptassess.pipeline import AuditLogger, SubmissionLoadError, SubmissionLoader

QUESTIONS = [
    {
        "id": "q1",
        "category": "first-stage-technical",
        "options": ["A", "B", "C", "D"],
        "correctIndices": [2],
        "points": 10,
    },
    {
        "id": "personal-location-konya",
        "type": "radio",
        "category": "initial-assessment",
        "options": ["Evet, Konya'dayım", "Hayır, ama gelebilirim", "Hayır"],
    },
]


def submission(answer: int, **overrides) -> dict:
    record = {
        "participant_id": "P-7",
        "case_id": "CASE-7",
        "template_id": "T-7",
        "threshold": 70,
        "questions": QUESTIONS,
        "responses": {"q1": answer, "personal-location-konya": 0},
    }
    record.update(overrides)
    return record


def write_jsonl(path: Path, lines: list[str]) -> None:
    path.write_text("\n".join(lines), encoding="utf-8")


def test_pipeline_replaces_resubmissions_and_writes_audit_log(tmp_path: Path) -> None:
    submissions_path = tmp_path / "submissions.jsonl"
    output_path = tmp_path / "results.json"
    audit_path = tmp_path / "audit" / "audit.jsonl"
    write_jsonl(
        submissions_path,
        [
            json.dumps(submission(0), ensure_ascii=False),
            json.dumps(submission(2), ensure_ascii=False),
            json.dumps(submission(1, participant_id="P-8"), ensure_ascii=False),
        ],
    )

    pipeline = create_container().pipeline()
    results = pipeline.score(
        submissions_path=submissions_path,
        output_path=output_path,
        audit_logger=AuditLogger(audit_path),
    )

    assert [item["participant_id"] for item in results] == ["P-7", "P-8"]
    latest = results[0]
    assert latest["normalized_score"] == 100
    assert latest["classification"]["classification"] == "qualified"
    assert latest["classification"]["signals"]["location"] == "home"
    assert latest["phase_report"] is None
    assert results[1]["classification"]["classification"] == "ramp-ready"

    rendered = json.loads(output_path.read_text(encoding="utf-8"))
    assert rendered["metadata"]["submission_count"] == 3
    assert rendered["metadata"]["result_count"] == 2
    assert rendered["results"] == results

    audit_lines = audit_path.read_text(encoding="utf-8").strip().splitlines()
    assert len(audit_lines) == 3
    first = json.loads(audit_lines[0])
    assert first["participant_id"] == "P-7"
    assert first["normalized_score"] == 0
    assert first["recommended_status"] == "pending"


def test_pipeline_continues_after_invalid_lines(tmp_path: Path) -> None:
    submissions_path = tmp_path / "submissions.jsonl"
    output_path = tmp_path / "results.json"
    write_jsonl(
        submissions_path,
        [
            "{not json",
            json.dumps({"participant_id": "P-9", "responses": {}}),
            json.dumps(submission(2)),
        ],
    )

    results = create_container().pipeline().score(
        submissions_path=submissions_path,
        output_path=output_path,
    )

    assert len(results) == 1
    rendered = json.loads(output_path.read_text(encoding="utf-8"))
    errors = rendered["metadata"]["errors"]
    assert len(errors) == 2
    assert errors[0].startswith("line 1: invalid JSON")
    assert errors[1].startswith("line 2:")


def test_submission_loader_reports_partial_results(tmp_path: Path) -> None:
    path = tmp_path / "submissions.jsonl"
    write_jsonl(path, [json.dumps(submission(2)), "", json.dumps(["not", "an", "object"])])

    with pytest.raises(SubmissionLoadError) as excinfo:
        SubmissionLoader().load(path)

    assert len(excinfo.value.partial) == 1
    assert excinfo.value.errors == ["line 3: expected an object"]


def test_pipeline_generate_writes_metadata(tmp_path: Path) -> None:
    output_path = tmp_path / "assessment.json"

    assessment = create_container().pipeline().generate(
        case_id="CASE-8",
        job_types=["Backend"],
        output_path=output_path,
    )

    rendered = json.loads(output_path.read_text(encoding="utf-8"))
    assert rendered["metadata"]["job_types"] == ["Backend"]
    assert rendered["metadata"]["question_count"] == 9
    assert rendered["results"] == [assessment]
