from sqlalchemy.orm import Session, selectinload
from app.infrastructure.db.models import (
    ExamModel,
    ExamSubjectModel,
    ExamParticipantModel,
    ExamAttemptModel,
    CourseModel,
    SubjectModel,
)
from app.infrastructure.db.retry import retry_read
from app.infrastructure.repositories.user_repository import check_users_exist
from app.application.exceptions import NotFoundError
from app.application.notifications import Notifier, default_notifier, CREATED, UPDATED, DELETED
from app.presentation.schemas.exam_schema import ExamCreate
import logging

logger = logging.getLogger(__name__)


def _check_references(db: Session, exam_data: ExamCreate) -> None:
    if not db.query(CourseModel.id).filter(CourseModel.id == exam_data.course_id).first():
        raise NotFoundError(f"Course with id {exam_data.course_id} not found")

    subject_ids = {s.subject_id for s in exam_data.subjects}
    if subject_ids:
        found = {
            row.id
            for row in db.query(SubjectModel.id).filter(SubjectModel.id.in_(subject_ids)).all()
        }
        missing = subject_ids - found
        if missing:
            raise NotFoundError(f"Subjects not found: {sorted(missing)}")

    check_users_exist(db, exam_data.participants)


def _set_rules(exam: ExamModel, exam_data: ExamCreate) -> None:
    exam.subjects = [
        ExamSubjectModel(
            subject_id=s.subject_id,
            question_count=s.question_count,
            difficulty=s.difficulty,
        )
        for s in exam_data.subjects
    ]
    exam.participant_links = [
        ExamParticipantModel(user_id=u) for u in dict.fromkeys(exam_data.participants)
    ]


def create_exam(
    db: Session,
    exam_data: ExamCreate,
    user_id: int,
    notifier: Notifier = default_notifier,
) -> ExamModel:
    _check_references(db, exam_data)
    try:
        logger.info(f"Creating exam: {exam_data.name}")
        exam = ExamModel(
            name=exam_data.name,
            description=exam_data.description or "",
            course_id=exam_data.course_id,
            duration_minutes=exam_data.duration_minutes,
            passing_percentage=exam_data.passing_percentage,
            scheduled_date=exam_data.scheduled_date,
            created_by_id=user_id,
        )
        _set_rules(exam, exam_data)
        db.add(exam)
        db.commit()
        db.refresh(exam)
        logger.info(f"Exam {exam.id} created with {len(exam.subjects)} subject rules")
        notifier.notify(CREATED, "exam", f"{exam.name} has been created.")
        return exam
    except Exception as e:
        logger.error(f"Error creating exam: {e}", exc_info=True)
        db.rollback()
        raise


@retry_read
def get_all_exams(db: Session):
    return (
        db.query(ExamModel)
        .options(selectinload(ExamModel.subjects), selectinload(ExamModel.participant_links))
        .order_by(ExamModel.scheduled_date)
        .all()
    )


@retry_read
def get_exams_for_participant(db: Session, user_id: int):
    return (
        db.query(ExamModel)
        .join(ExamParticipantModel, ExamParticipantModel.exam_id == ExamModel.id)
        .filter(ExamParticipantModel.user_id == user_id)
        .order_by(ExamModel.scheduled_date)
        .all()
    )


@retry_read
def get_exam_by_id(db: Session, exam_id: int) -> ExamModel:
    exam = db.query(ExamModel).filter(ExamModel.id == exam_id).first()
    if not exam:
        logger.warning(f"Exam with id {exam_id} not found")
        raise NotFoundError(f"Exam with id {exam_id} not found")
    return exam


def update_exam(
    db: Session,
    exam_id: int,
    exam_data: ExamCreate,
    notifier: Notifier = default_notifier,
) -> ExamModel:
    """Subject rules and roster are replaced, not merged."""
    exam = get_exam_by_id(db, exam_id)
    _check_references(db, exam_data)
    try:
        exam.name = exam_data.name
        exam.description = exam_data.description or ""
        exam.course_id = exam_data.course_id
        exam.duration_minutes = exam_data.duration_minutes
        exam.passing_percentage = exam_data.passing_percentage
        exam.scheduled_date = exam_data.scheduled_date
        exam.subjects.clear()
        exam.participant_links.clear()
        db.flush()
        _set_rules(exam, exam_data)
        db.commit()
        db.refresh(exam)
        logger.info(f"Updated exam {exam_id}")
        notifier.notify(UPDATED, "exam", f"{exam.name} has been updated.")
        return exam
    except Exception as e:
        logger.error(f"Error updating exam {exam_id}: {e}", exc_info=True)
        db.rollback()
        raise


def delete_exam(db: Session, exam_id: int, notifier: Notifier = default_notifier):
    """Deletes the exam and every attempt made at it."""
    exam = get_exam_by_id(db, exam_id)
    exam_name = exam.name
    try:
        attempts = db.query(ExamAttemptModel).filter(ExamAttemptModel.exam_id == exam_id).all()
        for attempt in attempts:
            db.delete(attempt)
        db.flush()
        db.delete(exam)
        db.commit()
        logger.info(f"Deleted exam {exam_id} and {len(attempts)} attempts")
        notifier.notify(DELETED, "exam", f"{exam_name} has been deleted.")
        return {"message": f"Exam '{exam_name}' deleted successfully", "deleted_attempts": len(attempts)}
    except Exception as e:
        logger.error(f"Error deleting exam {exam_id}: {e}", exc_info=True)
        db.rollback()
        raise
