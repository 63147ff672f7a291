from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.presentation.schemas.course_schema import CourseCreate, CourseOut
from app.presentation.dependencies import get_db, get_notifier, require, to_http
from app.application.exceptions import ExamServiceError
from app.application.notifications import Notifier
from app.application.permissions import can, MANAGE_COURSES, VIEW_CATALOG
from app.infrastructure.repositories.course_repo_impl import (
    create_course,
    get_all_courses,
    get_courses_for_participant,
    get_course_by_id,
    update_course,
    delete_course,
)
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/courses", tags=["Courses"])


@router.post("", response_model=CourseOut, status_code=201)
def add_course(
    course: CourseCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(require(MANAGE_COURSES)),
    notifier: Notifier = Depends(get_notifier),
):
    try:
        return create_course(db, course, user["user_id"], notifier=notifier)
    except ExamServiceError as e:
        raise to_http(e)


@router.get("", response_model=List[CourseOut])
def list_courses(db: Session = Depends(get_db), user: dict = Depends(require(VIEW_CATALOG))):
    # Participants only see the courses they are enrolled in
    if can(user["role"], MANAGE_COURSES):
        return get_all_courses(db)
    return get_courses_for_participant(db, user["user_id"])


@router.get("/{course_id}", response_model=CourseOut)
def get_course(
    course_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require(VIEW_CATALOG)),
):
    try:
        return get_course_by_id(db, course_id)
    except ExamServiceError as e:
        raise to_http(e)


@router.put("/{course_id}", response_model=CourseOut)
def modify_course(
    course_id: int,
    course: CourseCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(require(MANAGE_COURSES)),
    notifier: Notifier = Depends(get_notifier),
):
    try:
        return update_course(db, course_id, course, notifier=notifier)
    except ExamServiceError as e:
        raise to_http(e)


@router.delete("/{course_id}")
def remove_course(
    course_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require(MANAGE_COURSES)),
    notifier: Notifier = Depends(get_notifier),
):
    try:
        return delete_course(db, course_id, notifier=notifier)
    except ExamServiceError as e:
        logger.warning(f"Course {course_id} not deleted for user {user['user_id']}: {e}")
        raise to_http(e)
