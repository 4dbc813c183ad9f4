from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from adaptassess.config import ConfigManager
from adaptassess.container import create_container
from adaptassess.schemas.config import AppConfig, load_config


def test_create_container_with_overrides(tmp_path: Path):
    bank_path = tmp_path / "bank.json"
    bank_path.write_text(
        json.dumps(
            [
                {
                    "id": "q1",
                    "category": "first-stage-technical",
                    "jobType": "Frontend",
                    "options": ["A", "B"],
                    "correct": 1,
                }
            ]
        ),
        encoding="utf-8",
    )

    container = create_container(
        settings={
            "assessment": {"basic_success_threshold": 60, "advancement_rule": "threshold", "phases": ["basic"]},
            "classification": {"home_location": "Ankara", "home_location_markers": ["Ankara"]},
            "question_bank": {"path": str(bank_path)},
        }
    )

    gate = container.phase_gate()
    classifier = container.classifier()
    repository = container.question_repository()
    engine = container.engine()

    assert gate._config.basic_success_threshold == 60
    assert gate._config.advancement_rule == "threshold"
    assert gate._config.phases == ("basic",)
    assert classifier._config.home_location == "Ankara"
    assert classifier._config.home_location_markers == ("Ankara",)
    assert len(repository) == 1
    assert repository.find_questions("Frontend", "first-stage-technical")[0].points == pytest.approx(25)
    assert engine._config is gate._config
    assert container.selector()._config is gate._config


def test_default_container_uses_empty_bank():
    container = create_container()

    assert len(container.question_repository()) == 0
    assert container.engine()._config.basic_success_threshold == 50
    assert container.pipeline() is not container.pipeline()


def test_load_config_validation():
    data = {
        "assessment": {"basic_success_threshold": 55, "min_correct_answers": 2},
        "classification": {"home_location": "Izmir"},
    }
    app_config = load_config(data)
    assert isinstance(app_config, AppConfig)
    settings = app_config.to_settings()
    assert settings["assessment"] == {"basic_success_threshold": 55, "min_correct_answers": 2}
    assert settings["classification"] == {"home_location": "Izmir"}
    assert "question_bank" not in settings


def test_load_config_rejects_unknown_and_invalid_values():
    with pytest.raises(ValidationError):
        load_config({"assessment": {"basic_success_threshold": 120}})
    with pytest.raises(ValidationError):
        load_config({"assessment": {"unknown_knob": 1}})
    with pytest.raises(ValidationError):
        load_config({"assessment": {"advancement_rule": "majority"}})
    with pytest.raises(ValueError):
        load_config(["not", "a", "mapping"])


def test_config_manager_reads_named_yaml(tmp_path: Path):
    (tmp_path / "strict.yaml").write_text(
        "assessment:\n  advancement_rule: threshold\n", encoding="utf-8"
    )
    (tmp_path / "empty.yaml").write_text("", encoding="utf-8")
    (tmp_path / "list.yaml").write_text("- a\n- b\n", encoding="utf-8")
    manager = ConfigManager(tmp_path)

    assert manager.available() == ["empty", "list", "strict"]
    assert manager.load("strict") == {"assessment": {"advancement_rule": "threshold"}}
    assert manager.load("empty") == {}
    with pytest.raises(ValueError):
        manager.load("list")


def test_fallback_and_similarity_settings_reach_the_engine():
    settings = load_config(
        {
            "assessment": {
                "fallback_points": {"advanced-technical": 30},
                "fallback_default_points": 4,
                "role_match_min_similarity": 90,
                "domain_match_min_similarity": 70,
                "include_personal_questions": False,
            }
        }
    ).to_settings()

    config = create_container(settings=settings).engine()._config

    assert config.fallback_points_for("advanced-technical") == pytest.approx(30)
    assert config.fallback_points_for("first-stage-technical") == pytest.approx(4)
    assert config.role_match_min_similarity == pytest.approx(90)
    assert config.domain_match_min_similarity == pytest.approx(70)
    assert config.include_personal_questions is False
