from __future__ import annotations

import pytest
from structlog.testing import capture_logs

from adaptassess.core.config import AssessmentConfig
from adaptassess.core.selector import (
    QuestionSelector,
    domain_matches,
    fallback_keys,
    fallback_question,
)
from adaptassess.repository import InMemoryQuestionRepository
from adaptassess.schemas import (
    ADVANCED_CATEGORY,
    BASIC_CATEGORY,
    DIFFICULTY_RANK,
    LEADERSHIP_CATEGORY,
)


def question(qid: str, **overrides) -> dict:
    record = {
        "id": qid,
        "type": "single-choice",
        "category": BASIC_CATEGORY,
        "question": f"Question {qid}",
        "jobType": "Frontend",
        "difficulty": "Medium",
        "options": ["A", "B", "C", "D"],
        "correctIndices": [1],
        "points": 10,
    }
    record.update(overrides)
    return record


class RecordingRepository(InMemoryQuestionRepository):
    def __init__(self, questions=()):
        super().__init__(questions)
        self.calls: list[tuple[str, str]] = []

    def find_questions(self, job_type, category, order_by_difficulty=True):
        self.calls.append((job_type, category))
        return super().find_questions(job_type, category, order_by_difficulty)


class FailingRepository:
    def find_questions(self, job_type, category, order_by_difficulty=True):
        raise RuntimeError("question store unavailable")


def test_empty_pool_returns_requested_fallbacks():
    selector = QuestionSelector(InMemoryQuestionRepository())

    selected = selector.select_questions("Frontend Developer", BASIC_CATEGORY, 3)

    assert len(selected) == 3
    assert [item.id for item in selected] == [
        "fallback-first-stage-technical-frontend-developer-1",
        "fallback-first-stage-technical-frontend-developer-2",
        "fallback-first-stage-technical-frontend-developer-3",
    ]
    for item in selected:
        assert item.id
        assert len(item.options) == 4
        assert item.correct_indices == [0]
        assert item.points == pytest.approx(10)


def test_selection_orders_by_difficulty():
    repository = InMemoryQuestionRepository.from_records(
        [
            question("hard", difficulty="Hard"),
            question("easy", difficulty="Easy"),
            question("medium", difficulty="Medium"),
        ]
    )
    selector = QuestionSelector(repository)

    selected = selector.select_questions("Frontend", BASIC_CATEGORY, 3)

    assert [item.id for item in selected] == ["easy", "medium", "hard"]
    ranks = [DIFFICULTY_RANK[item.difficulty] for item in selected]
    assert ranks == sorted(ranks)


def test_general_questions_backfill_after_specific_ones():
    repository = InMemoryQuestionRepository.from_records(
        [
            question("general-hard", jobType="All", difficulty="Hard"),
            question("specific", difficulty="Hard"),
            question("general-easy", jobType=None, difficulty="Easy"),
        ]
    )
    selector = QuestionSelector(repository)

    selected = selector.select_questions("Frontend", BASIC_CATEGORY, 2)

    assert [item.id for item in selected] == ["specific", "general-easy"]


def test_specific_pool_large_enough_skips_general_query():
    repository = RecordingRepository.from_records(
        [question("one"), question("two"), question("general", jobType="All")]
    )
    selector = QuestionSelector(repository)

    selected = selector.select_questions("Frontend", BASIC_CATEGORY, 2)

    assert [item.id for item in selected] == ["one", "two"]
    assert repository.calls == [("Frontend", BASIC_CATEGORY)]


def test_short_pool_is_padded_with_fallbacks():
    repository = InMemoryQuestionRepository.from_records([question("only")])
    selector = QuestionSelector(repository)

    with capture_logs() as logs:
        selected = selector.select_questions("Frontend", BASIC_CATEGORY, 3)

    assert [item.id for item in selected] == [
        "only",
        "fallback-first-stage-technical-frontend-2",
        "fallback-first-stage-technical-frontend-3",
    ]
    fallback_events = [entry for entry in logs if entry["event"] == "selector.fallback"]
    assert fallback_events
    assert fallback_events[0]["synthesized"] == 2


@pytest.mark.parametrize("count", [0, 1, 2, 3, 6])
def test_selector_always_returns_exact_count(count: int):
    repository = InMemoryQuestionRepository.from_records(
        [question("a", difficulty="Easy"), question("b", jobType="All")]
    )
    selector = QuestionSelector(repository)

    assert len(selector.select_questions("Frontend", BASIC_CATEGORY, count)) == count


def test_zero_count_does_not_query_repository():
    repository = RecordingRepository()
    selector = QuestionSelector(repository)

    assert selector.select_questions("Frontend", BASIC_CATEGORY, 0) == []
    assert repository.calls == []


def test_negative_count_is_rejected():
    selector = QuestionSelector(InMemoryQuestionRepository())

    with pytest.raises(ValueError):
        selector.select_questions("Frontend", BASIC_CATEGORY, -1)


def test_repository_failure_falls_back_without_raising():
    selector = QuestionSelector(FailingRepository())

    with capture_logs() as logs:
        selected = selector.select_questions("Backend", ADVANCED_CATEGORY, 2)

    assert [item.id for item in selected] == [
        "fallback-advanced-technical-backend-1",
        "fallback-advanced-technical-backend-2",
    ]
    assert all(item.points == pytest.approx(15) for item in selected)
    assert any(entry["event"] == "selector.repository_failed" for entry in logs)


def test_fallback_question_is_deterministic():
    first = fallback_question("Data Engineer", ADVANCED_CATEGORY, 4)
    second = fallback_question("Data Engineer", ADVANCED_CATEGORY, 4)

    assert first == second
    assert first.id == "fallback-advanced-technical-data-engineer-5"
    assert first.rule.kind == "scalar"


def test_leadership_fallbacks_are_shared_and_use_configured_points():
    config = AssessmentConfig(
        fallback_points={"leadership-scenario": 30.0},
        fallback_default_points=7.0,
    )

    leadership = fallback_question("Frontend", LEADERSHIP_CATEGORY, 0, config=config)
    basic = fallback_question("Frontend", BASIC_CATEGORY, 0, config=config)

    assert leadership.job_type == "All"
    assert leadership.points == pytest.approx(30)
    assert leadership.rule.kind == "leadership"
    assert basic.points == pytest.approx(7)


def test_domain_filter_drops_other_domains():
    repository = InMemoryQuestionRepository.from_records(
        [
            question("fin", domain="fintech", difficulty="Easy"),
            question("health", domain="healthcare", difficulty="Easy"),
            question("plain", difficulty="Medium"),
        ]
    )
    selector = QuestionSelector(repository)

    selected = selector.select_questions("Frontend", BASIC_CATEGORY, 2, domain="FinTech")

    assert [item.id for item in selected] == ["fin", "plain"]


def test_domain_matching_is_fuzzy():
    assert domain_matches("e-commerce", "E-Commerce Platform", min_similarity=80)
    assert domain_matches("ecommerce", "e-commerce", min_similarity=80)
    assert not domain_matches("healthcare", "fintech", min_similarity=80)
    assert not domain_matches("", "fintech", min_similarity=80)


def test_fallback_keys_disambiguate_colliding_slugs():
    keys = fallback_keys(["Front End", "front-end", "Backend"])

    assert keys["Backend"] == "backend"
    assert keys["Front End"] != keys["front-end"]
    assert keys["Front End"].startswith("front-end-")
    assert fallback_keys(["front-end", "Front End"]) == {
        "front-end": keys["front-end"],
        "Front End": keys["Front End"],
    }


def test_fallback_key_overrides_the_slug():
    selector = QuestionSelector(InMemoryQuestionRepository())

    selected = selector.select_questions(
        "Front End", BASIC_CATEGORY, 1, fallback_key="front-end-x"
    )

    assert selected[0].id == "fallback-first-stage-technical-front-end-x-1"
