from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from adaptassess.cli import app

QUESTION_BANK = [
    {
        "id": "fe-b1",
        "type": "radio",
        "category": "ilk-teknik",
        "text": "Which hook runs after render?",
        "jobType": "Frontend Developer",
        "difficulty": "Easy",
        "options": ["useEffect", "useMemo", "useRef", "useId"],
        "correct": 0,
        "points": 10,
    },
    {
        "id": "fe-b2",
        "type": "radio",
        "category": "ilk-teknik",
        "text": "What does CSS specificity decide?",
        "jobType": "Frontend Developer",
        "difficulty": "Medium",
        "options": ["Load order", "Which rule wins", "File size", "Nothing"],
        "correct": 1,
        "points": 10,
    },
    {
        "id": "fe-a1",
        "type": "radio",
        "category": "ileri-teknik",
        "text": "How do you avoid layout thrashing?",
        "jobType": "Frontend Developer",
        "difficulty": "Hard",
        "options": ["Batch reads and writes", "Use more divs", "Inline styles", "Disable CSS"],
        "correct": 0,
        "points": 15,
    },
    {
        "id": "lead-1",
        "type": "scenario",
        "category": "leadership-scenarios",
        "text": "Two engineers disagree about an architecture choice.",
        "options": ["Facilitate a decision", "Pick one yourself", "Ignore it", "Escalate"],
        "leadershipScoring": {
            "0": {"points": 20, "leadershipType": "teknik-leader"},
            "1": {"points": 15, "leadershipType": "gelistirici"},
            "2": {"points": 5, "leadershipType": "operasyonel-yetenek"},
            "3": {"points": 10, "leadershipType": "case-odakli-yetenek"},
        },
    },
    {
        "id": "init-1",
        "category": "initial-assessment",
        "text": "Do you enjoy debugging?",
        "options": ["Yes", "No"],
        "correct": 0,
        "points": 5,
    },
]


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def write_json(path: Path, payload: object) -> None:
    path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")


def test_cli_generates_and_scores_assessment(tmp_path: Path, runner: CliRunner) -> None:
    bank_path = tmp_path / "bank.json"
    assessment_path = tmp_path / "assessment.json"
    submissions_path = tmp_path / "submissions.jsonl"
    output_path = tmp_path / "results.json"
    audit_path = tmp_path / "audit.jsonl"
    write_json(bank_path, QUESTION_BANK)

    generated = runner.invoke(
        app,
        [
            "generate",
            "--case-id",
            "CASE-1",
            "--job-type",
            "Frontend Developer",
            "--questions",
            str(bank_path),
            "--output",
            str(assessment_path),
        ],
    )

    assert generated.exit_code == 0, generated.stdout
    document = json.loads(assessment_path.read_text(encoding="utf-8"))
    assert document["metadata"]["case_id"] == "CASE-1"
    assert document["metadata"]["app_version"]
    assessment = document["results"][0]
    group = assessment["job_type_groups"][0]
    assert [q["id"] for q in group["basic_questions"]] == ["fe-b1", "fe-b2"]
    assert group["advanced_questions"][0]["id"] == "fe-a1"
    assert len(assessment["leadership_questions"]) == 5

    submission = {
        "participant_id": "P-1",
        "case_id": "CASE-1",
        "template_id": "T-1",
        "threshold": 60,
        "assessment": assessment,
        "responses": [
            {"questionId": "fe-b1", "answer": 0},
            {"questionId": "fe-b2", "answer": "Seçenek B"},
            {"questionId": "fe-a1", "answer": 0},
            {"questionId": "lead-1", "answer": 0},
        ],
    }
    submissions_path.write_text(json.dumps(submission, ensure_ascii=False), encoding="utf-8")

    scored = runner.invoke(
        app,
        [
            "score",
            "--submissions",
            str(submissions_path),
            "--output",
            str(output_path),
            "--audit-log",
            str(audit_path),
        ],
    )

    assert scored.exit_code == 0, scored.stdout
    rendered = json.loads(output_path.read_text(encoding="utf-8"))
    assert rendered["metadata"]["errors"] == []
    result = rendered["results"][0]
    assert result["participant_id"] == "P-1"
    assert result["normalized_score"] == 100
    assert result["classification"]["classification"] == "qualified"
    assert result["classification"]["recommended_status"] == "accepted"
    assert result["dominant_leadership_type"] == "teknik-leader"
    assert result["phase_report"]["job_types"][0]["gate_state"] == "advanced_unlocked"
    assert result["phase_report"]["leadership_unlocked"] is True

    audit_lines = audit_path.read_text(encoding="utf-8").strip().splitlines()
    assert len(audit_lines) == 1
    assert json.loads(audit_lines[0])["classification"] == "qualified"


def test_cli_initial_assessment(tmp_path: Path, runner: CliRunner) -> None:
    bank_path = tmp_path / "bank.jsonl"
    output_path = tmp_path / "initial.json"
    bank_path.write_text(
        "\n".join(json.dumps(record, ensure_ascii=False) for record in QUESTION_BANK),
        encoding="utf-8",
    )

    result = runner.invoke(
        app,
        [
            "initial",
            "--case-id",
            "CASE-2",
            "--questions",
            str(bank_path),
            "--count",
            "3",
            "--output",
            str(output_path),
        ],
    )

    assert result.exit_code == 0, result.stdout
    rendered = json.loads(output_path.read_text(encoding="utf-8"))
    ids = [question["id"] for question in rendered["results"]]
    assert ids[:2] == ["personal-name", "personal-email"]
    assert len(ids) == 9
    assert "init-1" in ids[6:]
    assert rendered["metadata"]["question_count"] == 9


def test_cli_applies_yaml_config(tmp_path: Path, runner: CliRunner) -> None:
    config_path = tmp_path / "config.yaml"
    output_path = tmp_path / "assessment.json"
    config_path.write_text(
        "assessment:\n  phases: [basic]\n  basic_question_count: 1\n",
        encoding="utf-8",
    )

    result = runner.invoke(
        app,
        [
            "generate",
            "--case-id",
            "CASE-3",
            "--job-type",
            "QA",
            "--config",
            str(config_path),
            "--output",
            str(output_path),
        ],
    )

    assert result.exit_code == 0, result.stdout
    assessment = json.loads(output_path.read_text(encoding="utf-8"))["results"][0]
    assert assessment["leadership_questions"] == []
    group = assessment["job_type_groups"][0]
    assert [q["id"] for q in group["basic_questions"]] == ["fallback-first-stage-technical-qa-1"]
    assert group["advanced_questions"] == []


def test_cli_rejects_non_mapping_config(tmp_path: Path, runner: CliRunner) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text("- basic\n- advanced\n", encoding="utf-8")

    result = runner.invoke(
        app,
        [
            "generate",
            "--case-id",
            "CASE-4",
            "--job-type",
            "QA",
            "--config",
            str(config_path),
            "--output",
            str(tmp_path / "out.json"),
        ],
    )

    assert result.exit_code != 0
    assert not (tmp_path / "out.json").exists()
