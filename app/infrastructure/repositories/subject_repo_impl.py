from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from app.infrastructure.db.models import (
    SubjectModel,
    MCQModel,
    CourseSubjectModel,
    ExamSubjectModel,
)
from app.infrastructure.db.retry import retry_read
from app.application.exceptions import NotFoundError, ConflictError
from app.application.notifications import Notifier, default_notifier, CREATED, UPDATED, DELETED
from app.presentation.schemas.subject_schema import SubjectCreate
import logging

logger = logging.getLogger(__name__)

def create_subject(
    db: Session,
    subject_data: SubjectCreate,
    user_id: int,
    notifier: Notifier = default_notifier,
) -> SubjectModel:
    """Create a new subject"""
    try:
        subject = SubjectModel(
            name=subject_data.name,
            code=subject_data.code,
            description=subject_data.description or "",
            created_by_id=user_id,
        )
        db.add(subject)
        db.commit()
        db.refresh(subject)
        logger.info(f"Created subject: {subject.name} (ID: {subject.id})")
        notifier.notify(CREATED, "subject", f"{subject.name} has been created.")
        return subject
    except Exception as e:
        db.rollback()
        logger.error(f"Unexpected error creating subject: {e}", exc_info=True)
        raise

@retry_read
def get_all_subjects(db: Session):
    """Get all subjects"""
    subjects = db.query(SubjectModel).order_by(SubjectModel.name).all()
    logger.info(f"Retrieved {len(subjects)} subjects")
    return subjects

@retry_read
def get_subject_by_id(db: Session, subject_id: int) -> SubjectModel:
    """Get a specific subject by ID"""
    subject = db.query(SubjectModel).filter(SubjectModel.id == subject_id).first()
    if not subject:
        logger.warning(f"Subject with id {subject_id} not found")
        raise NotFoundError(f"Subject with id {subject_id} not found")
    return subject

def update_subject(
    db: Session,
    subject_id: int,
    subject_data: SubjectCreate,
    notifier: Notifier = default_notifier,
) -> SubjectModel:
    """Update a subject"""
    subject = get_subject_by_id(db, subject_id)
    try:
        subject.name = subject_data.name
        subject.code = subject_data.code
        subject.description = subject_data.description or ""
        db.commit()
        db.refresh(subject)
        logger.info(f"Updated subject: {subject.name} (ID: {subject_id})")
        notifier.notify(UPDATED, "subject", f"{subject.name} has been updated.")
        return subject
    except Exception as e:
        db.rollback()
        logger.error(f"Unexpected error updating subject {subject_id}: {e}", exc_info=True)
        raise

def delete_subject(db: Session, subject_id: int, notifier: Notifier = default_notifier):
    """
    Delete a subject together with its questions.

    Refused while any course lists the subject or any exam draws from it.
    """
    subject = get_subject_by_id(db, subject_id)
    subject_name = subject.name

    in_course = (
        db.query(CourseSubjectModel)
        .filter(CourseSubjectModel.subject_id == subject_id)
        .first()
    )
    if in_course:
        logger.warning(f"Cannot delete subject {subject_id}: used by course {in_course.course_id}")
        raise ConflictError("Cannot delete subject: it is used in one or more courses")

    in_exam = (
        db.query(ExamSubjectModel)
        .filter(ExamSubjectModel.subject_id == subject_id)
        .first()
    )
    if in_exam:
        logger.warning(f"Cannot delete subject {subject_id}: used by exam {in_exam.exam_id}")
        raise ConflictError("Cannot delete subject: it is used in one or more exams")

    try:
        for question in db.query(MCQModel).filter(MCQModel.subject_id == subject_id).all():
            db.delete(question)
        db.delete(subject)
        db.commit()
        logger.info(f"Deleted subject: {subject_name} (ID: {subject_id})")
        notifier.notify(DELETED, "subject", f"{subject_name} has been deleted.")
        return {"message": f"Subject '{subject_name}' deleted successfully"}
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Cannot delete subject {subject_id}: {e}")
        raise ConflictError("Cannot delete subject: it is still referenced")
    except Exception as e:
        db.rollback()
        logger.error(f"Unexpected error deleting subject {subject_id}: {e}", exc_info=True)
        raise
