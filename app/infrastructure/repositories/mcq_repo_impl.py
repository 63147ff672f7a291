from app.infrastructure.db.models import MCQModel, OptionModel, SubjectModel
from app.infrastructure.db.retry import retry_read
from app.application.exceptions import NotFoundError, ValidationError
from app.application.notifications import Notifier, default_notifier, CREATED, UPDATED, DELETED
from sqlalchemy.orm import Session, selectinload
from typing import List, Optional
import logging
from app.presentation.schemas.mcq_schema import MCQCreate

logger = logging.getLogger(__name__)


def _validate_options(mcq_data: MCQCreate) -> None:
    if len(mcq_data.options) < 2:
        raise ValidationError("MCQ must have at least 2 options")
    if sum(o.is_correct for o in mcq_data.options) != 1:
        raise ValidationError("MCQ must have exactly 1 correct option")


def _ensure_subject(db: Session, subject_id: int) -> None:
    if not db.query(SubjectModel.id).filter(SubjectModel.id == subject_id).first():
        raise NotFoundError(f"Subject with id {subject_id} not found")


def create_mcq(
    db: Session,
    mcq_data: MCQCreate,
    user_id: int,
    notifier: Notifier = default_notifier,
) -> MCQModel:
    _validate_options(mcq_data)
    _ensure_subject(db, mcq_data.subject_id)
    try:
        logger.info(f"Creating MCQ for user {user_id} in subject {mcq_data.subject_id}")
        mcq = MCQModel(
            text=mcq_data.text,
            difficulty=mcq_data.difficulty,
            subject_id=mcq_data.subject_id,
            created_by_id=user_id,
        )
        db.add(mcq)
        db.flush()  # get mcq.id

        logger.info(f"Adding {len(mcq_data.options)} options for MCQ {mcq.id}")
        for o in mcq_data.options:
            db.add(OptionModel(text=o.text, is_correct=o.is_correct, question_id=mcq.id))

        db.commit()
        db.refresh(mcq)
        logger.info(f"Successfully committed MCQ {mcq.id} to database")
        notifier.notify(CREATED, "question", f"Question {mcq.id} has been created.")
        return mcq
    except Exception as e:
        logger.error(f"Database error during MCQ creation by user {user_id}: {e}", exc_info=True)
        db.rollback()
        raise


@retry_read
def get_mcq_by_id(db: Session, mcq_id: int) -> MCQModel:
    mcq = db.query(MCQModel).filter(MCQModel.id == mcq_id).first()
    if not mcq:
        logger.warning(f"MCQ with id {mcq_id} not found")
        raise NotFoundError(f"Question with id {mcq_id} not found")
    return mcq


@retry_read
def list_mcqs(
    db: Session,
    subject_id: Optional[int] = None,
    difficulty: Optional[str] = None,
) -> List[MCQModel]:
    query = db.query(MCQModel).options(selectinload(MCQModel.options))
    if subject_id is not None:
        query = query.filter(MCQModel.subject_id == subject_id)
    if difficulty and difficulty != "mixed":
        query = query.filter(MCQModel.difficulty == difficulty)
    mcqs = query.order_by(MCQModel.id).all()
    logger.info(f"Fetched {len(mcqs)} MCQs (subject={subject_id}, difficulty={difficulty})")
    return mcqs


@retry_read
def get_mcqs_by_ids(db: Session, mcq_ids: List[int]) -> List[MCQModel]:
    """Load questions keeping the order of ``mcq_ids``; unknown ids are skipped."""
    if not mcq_ids:
        return []
    rows = (
        db.query(MCQModel)
        .options(selectinload(MCQModel.options))
        .filter(MCQModel.id.in_(mcq_ids))
        .all()
    )
    by_id = {q.id: q for q in rows}
    return [by_id[i] for i in dict.fromkeys(mcq_ids) if i in by_id]


def update_mcq(
    db: Session,
    mcq_id: int,
    mcq_data: MCQCreate,
    notifier: Notifier = default_notifier,
) -> MCQModel:
    """Options are replaced wholesale, so their ids change on every edit."""
    _validate_options(mcq_data)
    mcq = get_mcq_by_id(db, mcq_id)
    if mcq_data.subject_id != mcq.subject_id:
        _ensure_subject(db, mcq_data.subject_id)
    try:
        mcq.text = mcq_data.text
        mcq.difficulty = mcq_data.difficulty
        mcq.subject_id = mcq_data.subject_id
        mcq.options.clear()
        db.flush()
        for o in mcq_data.options:
            mcq.options.append(OptionModel(text=o.text, is_correct=o.is_correct))
        db.commit()
        db.refresh(mcq)
        logger.info(f"Updated MCQ {mcq_id} with {len(mcq.options)} options")
        notifier.notify(UPDATED, "question", f"Question {mcq_id} has been updated.")
        return mcq
    except Exception as e:
        logger.error(f"Database error updating MCQ {mcq_id}: {e}", exc_info=True)
        db.rollback()
        raise


def delete_mcq(db: Session, mcq_id: int, notifier: Notifier = default_notifier):
    mcq = get_mcq_by_id(db, mcq_id)
    try:
        db.delete(mcq)
        db.commit()
        logger.info(f"Deleted MCQ {mcq_id}")
        notifier.notify(DELETED, "question", f"Question {mcq_id} has been deleted.")
        return {"message": f"Question {mcq_id} deleted successfully"}
    except Exception as e:
        logger.error(f"Database error deleting MCQ {mcq_id}: {e}", exc_info=True)
        db.rollback()
        raise


class SqlQuestionCatalog:
    """Question catalog backed by the database, as consumed by the selector."""

    def __init__(self, db: Session):
        self.db = db

    def find_questions(self, subject_id: int, difficulty: str) -> List[MCQModel]:
        return list_mcqs(self.db, subject_id=subject_id, difficulty=difficulty)

    def get_questions(self, question_ids: List[int]) -> List[MCQModel]:
        return get_mcqs_by_ids(self.db, question_ids)
