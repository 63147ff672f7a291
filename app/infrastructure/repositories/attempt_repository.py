from typing import List, Optional, Sequence
import logging

from sqlalchemy import func, case
from sqlalchemy.orm import Session, selectinload

from app.infrastructure.db.base import utcnow
from app.infrastructure.db.models import ExamAttemptModel, AttemptAnswerModel, AttemptQuestionModel
from app.infrastructure.db.retry import retry_read

logger = logging.getLogger(__name__)


class AttemptRepository:
    def __init__(self, db: Session):
        self.db = db

    @retry_read
    def get_attempt(self, attempt_id: int) -> Optional[ExamAttemptModel]:
        return (
            self.db.query(ExamAttemptModel)
            .options(
                selectinload(ExamAttemptModel.answers),
                selectinload(ExamAttemptModel.questions),
            )
            .filter(ExamAttemptModel.id == attempt_id)
            .first()
        )

    @retry_read
    def get_open_attempt(self, user_id: int, exam_id: int) -> Optional[ExamAttemptModel]:
        return (
            self.db.query(ExamAttemptModel)
            .filter(
                ExamAttemptModel.user_id == user_id,
                ExamAttemptModel.exam_id == exam_id,
                ExamAttemptModel.end_time.is_(None),
            )
            .first()
        )

    def create_attempt(
        self,
        user_id: int,
        exam_id: int,
        question_ids: Sequence[int] = (),
        requested_questions: int = 0,
    ) -> ExamAttemptModel:
        """
        Insert a new open attempt together with the question set drawn for it.
        Raises IntegrityError when another open attempt for the same
        (user, exam) already exists.
        """
        attempt = ExamAttemptModel(
            user_id=user_id,
            exam_id=exam_id,
            start_time=utcnow(),
            requested_questions=requested_questions,
        )
        attempt.questions = [
            AttemptQuestionModel(position=position, question_id=question_id)
            for position, question_id in enumerate(question_ids)
        ]
        self.db.add(attempt)
        self.db.commit()
        self.db.refresh(attempt)
        return attempt

    def close_attempt(
        self,
        attempt_id: int,
        answers: List[dict],
        score: float,
        passed: bool,
    ) -> bool:
        """
        Close an open attempt and store its final answer set in one transaction.

        Returns False (and leaves everything untouched) if the attempt was
        already closed by the time the update ran.
        """
        closed = (
            self.db.query(ExamAttemptModel)
            .filter(
                ExamAttemptModel.id == attempt_id,
                ExamAttemptModel.end_time.is_(None),
            )
            .update(
                {
                    ExamAttemptModel.end_time: utcnow(),
                    ExamAttemptModel.score: score,
                    ExamAttemptModel.passed: passed,
                },
                synchronize_session=False,
            )
        )
        if closed != 1:
            self.db.rollback()
            return False

        self.db.query(AttemptAnswerModel).filter(
            AttemptAnswerModel.attempt_id == attempt_id
        ).delete(synchronize_session=False)
        for answer in answers:
            self.db.add(
                AttemptAnswerModel(
                    attempt_id=attempt_id,
                    question_id=answer["question_id"],
                    selected_option_id=answer["selected_option_id"],
                )
            )
        self.db.commit()
        self.db.expire_all()
        return True

    @retry_read
    def list_for_user(self, user_id: int) -> List[ExamAttemptModel]:
        return (
            self.db.query(ExamAttemptModel)
            .options(selectinload(ExamAttemptModel.answers))
            .filter(ExamAttemptModel.user_id == user_id)
            .order_by(ExamAttemptModel.start_time.desc())
            .all()
        )

    @retry_read
    def list_for_exam(self, exam_id: int) -> List[ExamAttemptModel]:
        return (
            self.db.query(ExamAttemptModel)
            .options(selectinload(ExamAttemptModel.answers))
            .filter(ExamAttemptModel.exam_id == exam_id)
            .order_by(ExamAttemptModel.start_time.desc())
            .all()
        )

    @retry_read
    def summary_for_exam(self, exam_id: int) -> dict:
        completed_case = func.sum(case((ExamAttemptModel.end_time.isnot(None), 1), else_=0))
        passed_case = func.sum(case((ExamAttemptModel.passed == True, 1), else_=0))

        row = (
            self.db.query(
                func.count(ExamAttemptModel.id).label("total_attempts"),
                func.coalesce(completed_case, 0).label("completed_attempts"),
                func.coalesce(passed_case, 0).label("passed_attempts"),
                func.avg(ExamAttemptModel.score).label("average_score"),
            )
            .filter(ExamAttemptModel.exam_id == exam_id)
            .one()
        )
        return {
            "total_attempts": int(row.total_attempts or 0),
            "completed_attempts": int(row.completed_attempts or 0),
            "passed_attempts": int(row.passed_attempts or 0),
            "average_score": float(row.average_score) if row.average_score is not None else None,
        }
