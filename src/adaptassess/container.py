"""Dependency injection container for the assessment engine."""

from __future__ import annotations

from dependency_injector import containers, providers

from .core import (
    AssessmentConfig,
    AssessmentEngine,
    ClassificationConfig,
    ClassificationEngine,
    PhaseGate,
    QuestionSelector,
    ScoringEngine,
)
from .pipeline import AssessmentPipeline
from .repository import InMemoryQuestionRepository


class AssessmentContainer(containers.DeclarativeContainer):
    """Dependency-injector container definition."""

    config = providers.Configuration()

    assessment_config = providers.Singleton(AssessmentConfig)
    classification_config = providers.Singleton(ClassificationConfig)

    question_repository = providers.Singleton(
        InMemoryQuestionRepository.from_path,
        config.question_bank.path,
    )

    selector = providers.Singleton(
        QuestionSelector,
        question_repository,
        config=assessment_config,
    )
    scoring_engine = providers.Singleton(ScoringEngine, config=assessment_config)
    phase_gate = providers.Singleton(PhaseGate, config=assessment_config)
    classifier = providers.Singleton(ClassificationEngine, config=classification_config)

    engine = providers.Singleton(
        AssessmentEngine,
        selector=selector,
        scoring=scoring_engine,
        gate=phase_gate,
        classifier=classifier,
        config=assessment_config,
    )

    pipeline = providers.Factory(
        AssessmentPipeline,
        engine=engine,
    )


def create_container(*, settings: dict | None = None) -> AssessmentContainer:
    """Instantiate container with optional overrides."""

    container = AssessmentContainer()

    if not settings:
        return container

    bank_settings = settings.get("question_bank", {}) if isinstance(settings, dict) else {}
    if bank_settings:
        container.config.override({"question_bank": bank_settings})

    assessment_settings = settings.get("assessment", {}) if isinstance(settings, dict) else {}
    if assessment_settings:
        assessment_config = AssessmentConfig.from_settings(assessment_settings)
        container.assessment_config.override(providers.Object(assessment_config))

    classification_settings = (
        settings.get("classification", {}) if isinstance(settings, dict) else {}
    )
    if classification_settings:
        classification_config = ClassificationConfig(**classification_settings)
        container.classification_config.override(providers.Object(classification_config))

    return container
