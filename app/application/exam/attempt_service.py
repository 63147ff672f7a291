import logging
from typing import Iterable, List, Optional, Tuple

import numpy as np
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.application.exam.question_selector import resolve_exam_questions
from app.application.exam.scorer import ScoreResult, score
from app.application.exceptions import (
    AlreadySubmitted,
    NotAuthenticated,
    NotAuthorized,
    NotFoundError,
)
from app.application.notifications import Notifier, default_notifier, CREATED, FAILED, UPDATED
from app.infrastructure.db.models import ExamAttemptModel, ExamModel, MCQModel
from app.infrastructure.repositories.attempt_repository import AttemptRepository
from app.infrastructure.repositories.exam_repo_impl import get_exam_by_id
from app.infrastructure.repositories.mcq_repo_impl import SqlQuestionCatalog

logger = logging.getLogger(__name__)


def _answer_pairs(answers: Iterable) -> List[dict]:
    pairs = []
    for a in answers:
        if isinstance(a, dict):
            pairs.append({"question_id": a["question_id"], "selected_option_id": a["selected_option_id"]})
        else:
            pairs.append({"question_id": a.question_id, "selected_option_id": a.selected_option_id})
    return pairs


class ExamAttemptService:
    """
    Starts, resumes and finalizes exam attempts.

    The question set is drawn once, when the attempt is created, and stored
    with it; the same set is served while the attempt is open and graded on
    submit.

    At most one open attempt exists per (user, exam). The storage layer
    enforces this with a partial unique index; losing the insert race just
    resumes the winner's attempt. Closing an attempt is a conditional
    update, so a second submission can never overwrite a result.
    """

    def __init__(
        self,
        db: Session,
        repo: AttemptRepository,
        notifier: Notifier = default_notifier,
        rng: Optional[np.random.Generator] = None,
    ):
        self.db = db
        self.repo = repo
        self.notifier = notifier
        self.rng = rng
        self.catalog = SqlQuestionCatalog(db)

    # --------------------------------------------------
    # Start / resume
    # --------------------------------------------------
    def open_attempt(self, exam_id: int, user_id: Optional[int]) -> Tuple[ExamAttemptModel, bool]:
        """Returns the open attempt and whether it already existed."""
        if user_id is None:
            raise NotAuthenticated()

        exam = get_exam_by_id(self.db, exam_id)
        if user_id not in exam.participants:
            logger.warning(f"User {user_id} is not on the roster of exam {exam_id}")
            raise NotAuthorized(f"User {user_id} is not a participant of exam {exam_id}")

        existing = self.repo.get_open_attempt(user_id, exam_id)
        if existing:
            logger.info(f"Resuming attempt {existing.id} for user {user_id} on exam {exam_id}")
            self.notifier.notify(UPDATED, "attempt", f"Continuing your existing attempt for {exam.name}.")
            return existing, True

        question_set = resolve_exam_questions(exam.subjects, self.catalog, self.rng)
        try:
            attempt = self.repo.create_attempt(
                user_id, exam_id, question_set.question_ids, question_set.requested
            )
        except IntegrityError:
            # A concurrent request created the open attempt first
            self.db.rollback()
            existing = self.repo.get_open_attempt(user_id, exam_id)
            if existing is None:
                raise
            logger.info(f"Lost start race; resuming attempt {existing.id} for user {user_id}")
            return existing, True

        logger.info(
            f"Started attempt {attempt.id} for user {user_id} on exam {exam_id} "
            f"with {len(question_set)} questions"
        )
        self.notifier.notify(CREATED, "attempt", f"{exam.name} has begun.")
        return attempt, False

    def start_attempt(self, exam_id: int, user_id: Optional[int]) -> int:
        attempt, _ = self.open_attempt(exam_id, user_id)
        return attempt.id

    # --------------------------------------------------
    # Lookup
    # --------------------------------------------------
    def get_attempt(self, attempt_id: int, user_id: Optional[int] = None) -> ExamAttemptModel:
        attempt = self.repo.get_attempt(attempt_id)
        if attempt is None:
            raise NotFoundError(f"Attempt with id {attempt_id} not found")
        if user_id is not None and attempt.user_id != user_id:
            logger.warning(f"User {user_id} tried to access attempt {attempt_id}")
            raise NotAuthorized("This attempt belongs to another user")
        return attempt

    def get_attempt_questions(
        self, attempt_id: int, user_id: Optional[int] = None
    ) -> Tuple[ExamAttemptModel, ExamModel, List[MCQModel]]:
        attempt = self.get_attempt(attempt_id, user_id)
        if not attempt.is_open:
            raise AlreadySubmitted(f"Attempt {attempt_id} has already been submitted")
        exam = get_exam_by_id(self.db, attempt.exam_id)
        return attempt, exam, self.catalog.get_questions(attempt.question_ids)

    def list_user_attempts(self, user_id: int) -> List[ExamAttemptModel]:
        return self.repo.list_for_user(user_id)

    def list_exam_attempts(self, exam_id: int) -> List[ExamAttemptModel]:
        get_exam_by_id(self.db, exam_id)
        return self.repo.list_for_exam(exam_id)

    def exam_summary(self, exam_id: int) -> dict:
        get_exam_by_id(self.db, exam_id)
        summary = self.repo.summary_for_exam(exam_id)
        completed = summary["completed_attempts"]
        summary["exam_id"] = exam_id
        summary["pass_rate"] = (summary["passed_attempts"] / completed) * 100 if completed else None
        return summary

    # --------------------------------------------------
    # Submission
    # --------------------------------------------------
    def submit_attempt(
        self,
        attempt_id: int,
        answers: Iterable,
        user_id: Optional[int] = None,
    ) -> ScoreResult:
        attempt = self.get_attempt(attempt_id, user_id)
        if not attempt.is_open:
            logger.warning(f"Attempt {attempt_id} was already submitted")
            self.notifier.notify(FAILED, "attempt", "This exam attempt has already been submitted.")
            raise AlreadySubmitted(f"Attempt {attempt_id} has already been submitted")

        exam = get_exam_by_id(self.db, attempt.exam_id)
        pairs = _answer_pairs(answers)
        # Graded on the set drawn at start, whatever the caller answered
        questions = self.catalog.get_questions(attempt.question_ids)
        result = score(pairs, questions, exam.passing_percentage)

        if not self.repo.close_attempt(attempt_id, pairs, result.score, result.passed):
            logger.warning(f"Attempt {attempt_id} was closed concurrently")
            self.notifier.notify(FAILED, "attempt", "This exam attempt has already been submitted.")
            raise AlreadySubmitted(f"Attempt {attempt_id} has already been submitted")

        logger.info(
            f"Attempt {attempt_id} submitted: {result.correct_count}/{result.total_questions} "
            f"correct, score={result.score:.2f}, passed={result.passed}"
        )
        title = "Exam Passed!" if result.passed else "Exam Completed"
        self.notifier.notify(UPDATED, "attempt", f"{title} Score: {result.score:.2f}%")
        return result
