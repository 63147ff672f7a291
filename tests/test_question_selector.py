from types import SimpleNamespace

import numpy as np
import pytest

from app.application.exam.question_selector import (
    InMemoryQuestionCatalog,
    resolve_exam_questions,
)


def q(qid, subject_id, difficulty):
    return SimpleNamespace(id=qid, subject_id=subject_id, difficulty=difficulty, options=[])


def rule(subject_id, question_count, difficulty="mixed"):
    return SimpleNamespace(subject_id=subject_id, question_count=question_count, difficulty=difficulty)


@pytest.fixture
def catalog():
    questions = []
    qid = 1
    for subject_id in (1, 2):
        for difficulty, n in (("easy", 5), ("medium", 3), ("hard", 2)):
            for _ in range(n):
                questions.append(q(qid, subject_id, difficulty))
                qid += 1
    return InMemoryQuestionCatalog(questions)


@pytest.mark.parametrize("count,expected", [(1, 1), (3, 3), (5, 5), (8, 5)])
def test_selection_returns_min_of_requested_and_available(catalog, count, expected):
    result = resolve_exam_questions([rule(1, count, "easy")], catalog)

    assert len(result) == expected
    assert all(x.subject_id == 1 and x.difficulty == "easy" for x in result)
    assert len(set(result.question_ids)) == expected


def test_mixed_difficulty_admits_every_level(catalog):
    result = resolve_exam_questions([rule(2, 10, "mixed")], catalog)

    assert len(result) == 10
    assert {x.difficulty for x in result} == {"easy", "medium", "hard"}
    assert all(x.subject_id == 2 for x in result)


def test_specific_difficulty_only_matches_exactly(catalog):
    for _ in range(20):
        result = resolve_exam_questions([rule(1, 2, "hard")], catalog)
        assert [x.difficulty for x in result] == ["hard", "hard"]


def test_results_follow_rule_order(catalog):
    result = resolve_exam_questions([rule(2, 2, "medium"), rule(1, 3, "easy")], catalog)

    assert [x.subject_id for x in result] == [2, 2, 1, 1, 1]


def test_shortfall_is_reported_not_raised(catalog):
    result = resolve_exam_questions([rule(1, 4, "hard"), rule(2, 1, "easy"), rule(9, 3)], catalog)

    assert len(result) == 3
    assert result.requested == 8
    assert result.shortfall == 5
    assert [s.shortfall for s in result.selections] == [2, 0, 3]


def test_empty_rules_give_empty_set(catalog):
    result = resolve_exam_questions([], catalog)

    assert len(result) == 0
    assert result.shortfall == 0


def test_subset_is_drawn_from_the_whole_pool(catalog):
    # Every matching question should eventually be picked
    seen = set()
    rng = np.random.default_rng(7)
    for _ in range(200):
        seen.update(resolve_exam_questions([rule(1, 1, "easy")], catalog, rng=rng).question_ids)
    assert seen == {1, 2, 3, 4, 5}


def test_catalog_that_over_returns_is_filtered():
    class SloppyCatalog:
        def find_questions(self, subject_id, difficulty):
            return [q(1, subject_id, "easy"), q(2, 99, "easy"), q(3, subject_id, "hard")]

    result = resolve_exam_questions([rule(5, 10, "easy")], SloppyCatalog())

    assert result.question_ids == [1]
