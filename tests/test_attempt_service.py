import numpy as np
import pytest
from sqlalchemy.exc import IntegrityError

from app.application.exam.attempt_service import ExamAttemptService
from app.application.exceptions import (
    AlreadySubmitted,
    NotAuthenticated,
    NotAuthorized,
    NotFoundError,
)
from app.infrastructure.db.models import ExamAttemptModel, AttemptAnswerModel
from app.infrastructure.repositories.attempt_repository import AttemptRepository

PARTICIPANT_ID = 3
OUTSIDER_ID = 2


@pytest.fixture
def service(db, notifier):
    return ExamAttemptService(db, AttemptRepository(db), notifier=notifier, rng=np.random.default_rng(1))


@pytest.fixture
def exam(make_subject, make_question, make_course, make_exam):
    subject = make_subject()
    for i in range(4):
        make_question(subject.id, difficulty="easy", text=f"Easy {i}")
    make_question(subject.id, difficulty="hard", text="Hard")
    course = make_course(subjects=[subject.id])
    return make_exam(course.id, [{"subject_id": subject.id, "question_count": 4, "difficulty": "easy"}])


def correct_answer(question):
    return {
        "question_id": question.id,
        "selected_option_id": next(o.id for o in question.options if o.is_correct),
    }


def wrong_answer(question):
    return {
        "question_id": question.id,
        "selected_option_id": next(o.id for o in question.options if not o.is_correct),
    }


def test_start_creates_open_attempt(service, exam, db):
    attempt_id = service.start_attempt(exam.id, PARTICIPANT_ID)

    attempt = db.get(ExamAttemptModel, attempt_id)
    assert attempt.exam_id == exam.id
    assert attempt.user_id == PARTICIPANT_ID
    assert attempt.start_time is not None
    assert attempt.end_time is None
    assert attempt.answers == []


def test_start_twice_resumes_same_attempt(service, exam, db):
    first = service.start_attempt(exam.id, PARTICIPANT_ID)
    second = service.start_attempt(exam.id, PARTICIPANT_ID)

    assert first == second
    assert db.query(ExamAttemptModel).count() == 1


def test_open_attempt_reports_resume(service, exam):
    _, resumed = service.open_attempt(exam.id, PARTICIPANT_ID)
    _, resumed_again = service.open_attempt(exam.id, PARTICIPANT_ID)

    assert resumed is False
    assert resumed_again is True


def test_start_requires_identity(service, exam):
    with pytest.raises(NotAuthenticated):
        service.start_attempt(exam.id, None)


def test_start_unknown_exam(service):
    with pytest.raises(NotFoundError):
        service.start_attempt(12345, PARTICIPANT_ID)


def test_start_rejects_user_off_roster(service, exam, db):
    with pytest.raises(NotAuthorized):
        service.start_attempt(exam.id, OUTSIDER_ID)
    assert db.query(ExamAttemptModel).count() == 0


def test_storage_rejects_second_open_attempt(db, exam):
    repo = AttemptRepository(db)
    repo.create_attempt(PARTICIPANT_ID, exam.id)

    with pytest.raises(IntegrityError):
        repo.create_attempt(PARTICIPANT_ID, exam.id)
    db.rollback()


def test_losing_start_race_resumes_winner(service, exam, db, monkeypatch):
    winner = AttemptRepository(db).create_attempt(PARTICIPANT_ID, exam.id)

    # Simulate the check running before the competing insert landed
    monkeypatch.setattr(service.repo, "get_open_attempt", _none_then_real(service.repo.get_open_attempt))

    assert service.start_attempt(exam.id, PARTICIPANT_ID) == winner.id
    assert db.query(ExamAttemptModel).count() == 1


def _none_then_real(real):
    calls = {"n": 0}

    def fake(*args, **kwargs):
        calls["n"] += 1
        if calls["n"] == 1:
            return None
        return real(*args, **kwargs)

    return fake


@pytest.fixture
def large_exam(make_subject, make_question, make_course, make_exam):
    # Four of ten eligible questions are drawn per attempt
    subject = make_subject(name="Large", code="LRG")
    for i in range(10):
        make_question(subject.id, difficulty="easy", text=f"Pool {i}")
    course = make_course(subjects=[subject.id])
    return make_exam(course.id, [{"subject_id": subject.id, "question_count": 4, "difficulty": "easy"}])


def test_start_stores_drawn_question_set(service, large_exam, db):
    attempt_id = service.start_attempt(large_exam.id, PARTICIPANT_ID)

    attempt = service.get_attempt(attempt_id)
    assert len(attempt.question_ids) == 4
    assert len(set(attempt.question_ids)) == 4
    assert attempt.shortfall == 0


def test_attempt_questions_are_stable_across_calls(service, large_exam):
    attempt_id = service.start_attempt(large_exam.id, PARTICIPANT_ID)

    _, _, first = service.get_attempt_questions(attempt_id, PARTICIPANT_ID)
    _, _, second = service.get_attempt_questions(attempt_id, PARTICIPANT_ID)

    assert [q.id for q in first] == [q.id for q in second]
    assert len(first) == 4


def test_resume_serves_the_same_questions(service, large_exam):
    attempt_id = service.start_attempt(large_exam.id, PARTICIPANT_ID)
    _, _, before = service.get_attempt_questions(attempt_id)

    assert service.start_attempt(large_exam.id, PARTICIPANT_ID) == attempt_id
    _, _, after = service.get_attempt_questions(attempt_id)

    assert [q.id for q in before] == [q.id for q in after]


def test_submit_scores_three_of_four(service, exam):
    attempt_id = service.start_attempt(exam.id, PARTICIPANT_ID)
    _, _, questions = service.get_attempt_questions(attempt_id, PARTICIPANT_ID)
    assert len(questions) == 4

    answers = [correct_answer(q) for q in questions[:3]] + [wrong_answer(questions[3])]
    result = service.submit_attempt(attempt_id, answers)

    assert result.score == 75
    assert result.passed is True
    assert result.total_questions == 4


def test_answering_a_subset_is_graded_on_the_full_set(service, large_exam):
    attempt_id = service.start_attempt(large_exam.id, PARTICIPANT_ID)
    _, _, questions = service.get_attempt_questions(attempt_id)

    result = service.submit_attempt(attempt_id, [correct_answer(questions[0])])

    assert result.total_questions == 4
    assert result.correct_count == 1
    assert result.score == 25
    assert result.passed is False


def test_submit_persists_answers_and_closes(service, exam, db):
    attempt_id = service.start_attempt(exam.id, PARTICIPANT_ID)
    _, _, questions = service.get_attempt_questions(attempt_id)
    answers = [correct_answer(q) for q in questions]

    service.submit_attempt(attempt_id, answers)

    attempt = service.get_attempt(attempt_id)
    assert attempt.end_time is not None
    assert attempt.score == 100
    assert attempt.passed is True
    assert sorted(a.question_id for a in attempt.answers) == sorted(attempt.question_ids)


def test_second_submission_is_rejected_without_changes(service, exam, db):
    attempt_id = service.start_attempt(exam.id, PARTICIPANT_ID)
    _, _, questions = service.get_attempt_questions(attempt_id)
    service.submit_attempt(attempt_id, [correct_answer(q) for q in questions])

    with pytest.raises(AlreadySubmitted):
        service.submit_attempt(attempt_id, [wrong_answer(q) for q in questions])

    attempt = service.get_attempt(attempt_id)
    assert attempt.score == 100
    assert attempt.passed is True
    stored = {a.question_id: a.selected_option_id for a in attempt.answers}
    assert stored == {q.id: correct_answer(q)["selected_option_id"] for q in questions}



def test_close_is_conditional_on_open_state(db, exam):
    repo = AttemptRepository(db)
    attempt = repo.create_attempt(PARTICIPANT_ID, exam.id)

    assert repo.close_attempt(attempt.id, [], 10.0, False) is True
    assert repo.close_attempt(attempt.id, [{"question_id": 1, "selected_option_id": 1}], 90.0, True) is False

    stored = repo.get_attempt(attempt.id)
    assert stored.score == 10.0
    assert db.query(AttemptAnswerModel).count() == 0


def test_new_attempt_allowed_after_submission(service, exam, db):
    first = service.start_attempt(exam.id, PARTICIPANT_ID)
    service.submit_attempt(first, [])

    second = service.start_attempt(exam.id, PARTICIPANT_ID)

    assert second != first
    assert db.query(ExamAttemptModel).count() == 2


def test_submit_by_another_user_is_refused(service, exam):
    attempt_id = service.start_attempt(exam.id, PARTICIPANT_ID)

    with pytest.raises(NotAuthorized):
        service.submit_attempt(attempt_id, [], user_id=OUTSIDER_ID)


def test_submit_unknown_attempt(service):
    with pytest.raises(NotFoundError):
        service.submit_attempt(999, [])


def test_answers_for_questions_outside_the_drawn_set_score_nothing(service, exam, make_question):
    attempt_id = service.start_attempt(exam.id, PARTICIPANT_ID)
    stray = make_question(exam.subjects[0].subject_id, difficulty="hard", text="Not in rules")

    result = service.submit_attempt(attempt_id, [correct_answer(stray)])

    assert result.total_questions == 4
    assert result.correct_count == 0


def test_questions_added_after_start_do_not_change_the_set(service, exam, make_question):
    attempt_id = service.start_attempt(exam.id, PARTICIPANT_ID)
    make_question(exam.subjects[0].subject_id, difficulty="easy", text="Late addition")

    _, _, questions = service.get_attempt_questions(attempt_id)

    assert "Late addition" not in [q.text for q in questions]


def test_questions_of_submitted_attempt_are_not_served(service, exam):
    attempt_id = service.start_attempt(exam.id, PARTICIPANT_ID)
    service.submit_attempt(attempt_id, [])

    with pytest.raises(AlreadySubmitted):
        service.get_attempt_questions(attempt_id)



def test_exam_summary(service, exam):
    a = service.start_attempt(exam.id, PARTICIPANT_ID)
    _, _, questions = service.get_attempt_questions(a)
    service.submit_attempt(a, [correct_answer(q) for q in questions])
    service.start_attempt(exam.id, PARTICIPANT_ID)

    summary = service.exam_summary(exam.id)

    assert summary["total_attempts"] == 2
    assert summary["completed_attempts"] == 1
    assert summary["passed_attempts"] == 1
    assert summary["average_score"] == 100
    assert summary["pass_rate"] == 100


def test_lifecycle_notifies(service, exam, notifier):
    notifier.events.clear()
    attempt_id = service.start_attempt(exam.id, PARTICIPANT_ID)
    service.start_attempt(exam.id, PARTICIPANT_ID)
    service.submit_attempt(attempt_id, [])

    outcomes = [e[0] for e in notifier.events if e[1] == "attempt"]
    assert outcomes == ["created", "updated", "updated"]
