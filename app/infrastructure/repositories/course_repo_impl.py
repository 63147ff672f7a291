from sqlalchemy.orm import Session
from app.infrastructure.db.models import (
    CourseModel,
    CourseSubjectModel,
    CourseParticipantModel,
    SubjectModel,
    ExamModel,
)
from app.infrastructure.db.retry import retry_read
from app.infrastructure.repositories.user_repository import check_users_exist
from app.application.exceptions import NotFoundError, ConflictError
from app.application.notifications import Notifier, default_notifier, CREATED, UPDATED, DELETED
from app.presentation.schemas.course_schema import CourseCreate
import logging

logger = logging.getLogger(__name__)


def _check_subjects(db: Session, subject_ids) -> None:
    if not subject_ids:
        return
    found = {
        row.id
        for row in db.query(SubjectModel.id).filter(SubjectModel.id.in_(subject_ids)).all()
    }
    missing = set(subject_ids) - found
    if missing:
        raise NotFoundError(f"Subjects not found: {sorted(missing)}")


def _set_links(course: CourseModel, course_data: CourseCreate) -> None:
    # Memberships are sets; duplicates in the payload collapse here
    course.subject_links = [
        CourseSubjectModel(subject_id=s) for s in dict.fromkeys(course_data.subjects)
    ]
    course.participant_links = [
        CourseParticipantModel(user_id=u) for u in dict.fromkeys(course_data.participants)
    ]


def create_course(
    db: Session,
    course_data: CourseCreate,
    user_id: int,
    notifier: Notifier = default_notifier,
) -> CourseModel:
    _check_subjects(db, course_data.subjects)
    check_users_exist(db, course_data.participants)
    try:
        course = CourseModel(
            name=course_data.name,
            code=course_data.code,
            description=course_data.description or "",
            created_by_id=user_id,
        )
        _set_links(course, course_data)
        db.add(course)
        db.commit()
        db.refresh(course)
        logger.info(f"Created course: {course.name} (ID: {course.id})")
        notifier.notify(CREATED, "course", f"{course.name} has been created.")
        return course
    except Exception as e:
        db.rollback()
        logger.error(f"Unexpected error creating course: {e}", exc_info=True)
        raise


@retry_read
def get_all_courses(db: Session):
    courses = db.query(CourseModel).order_by(CourseModel.name).all()
    logger.info(f"Retrieved {len(courses)} courses")
    return courses


@retry_read
def get_courses_for_participant(db: Session, user_id: int):
    return (
        db.query(CourseModel)
        .join(CourseParticipantModel, CourseParticipantModel.course_id == CourseModel.id)
        .filter(CourseParticipantModel.user_id == user_id)
        .order_by(CourseModel.name)
        .all()
    )


@retry_read
def get_course_by_id(db: Session, course_id: int) -> CourseModel:
    course = db.query(CourseModel).filter(CourseModel.id == course_id).first()
    if not course:
        logger.warning(f"Course with id {course_id} not found")
        raise NotFoundError(f"Course with id {course_id} not found")
    return course


def update_course(
    db: Session,
    course_id: int,
    course_data: CourseCreate,
    notifier: Notifier = default_notifier,
) -> CourseModel:
    course = get_course_by_id(db, course_id)
    _check_subjects(db, course_data.subjects)
    check_users_exist(db, course_data.participants)
    try:
        course.name = course_data.name
        course.code = course_data.code
        course.description = course_data.description or ""
        course.subject_links.clear()
        course.participant_links.clear()
        db.flush()
        _set_links(course, course_data)
        db.commit()
        db.refresh(course)
        logger.info(f"Updated course: {course.name} (ID: {course_id})")
        notifier.notify(UPDATED, "course", f"{course.name} has been updated.")
        return course
    except Exception as e:
        db.rollback()
        logger.error(f"Unexpected error updating course {course_id}: {e}", exc_info=True)
        raise


def delete_course(db: Session, course_id: int, notifier: Notifier = default_notifier):
    """Refused while any exam belongs to the course."""
    course = get_course_by_id(db, course_id)
    course_name = course.name

    if db.query(ExamModel.id).filter(ExamModel.course_id == course_id).first():
        logger.warning(f"Cannot delete course {course_id}: exams are associated with it")
        raise ConflictError("Cannot delete course: there are exams associated with it")

    try:
        db.delete(course)
        db.commit()
        logger.info(f"Deleted course: {course_name} (ID: {course_id})")
        notifier.notify(DELETED, "course", f"{course_name} has been deleted.")
        return {"message": f"Course '{course_name}' deleted successfully"}
    except Exception as e:
        db.rollback()
        logger.error(f"Unexpected error deleting course {course_id}: {e}", exc_info=True)
        raise
