from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.presentation.schemas.subject_schema import SubjectCreate, SubjectOut
from app.presentation.dependencies import get_db, get_notifier, require, to_http
from app.application.exceptions import ExamServiceError
from app.application.notifications import Notifier
from app.application.permissions import MANAGE_SUBJECTS, VIEW_CATALOG
from app.infrastructure.repositories.subject_repo_impl import (
    create_subject,
    get_all_subjects,
    get_subject_by_id,
    update_subject,
    delete_subject,
)
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/subjects", tags=["Subjects"])


@router.post("", response_model=SubjectOut, status_code=201)
def add_subject(
    subject: SubjectCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(require(MANAGE_SUBJECTS)),
    notifier: Notifier = Depends(get_notifier),
):
    return create_subject(db, subject, user["user_id"], notifier=notifier)


@router.get("", response_model=list[SubjectOut])
def list_subjects(db: Session = Depends(get_db), user: dict = Depends(require(VIEW_CATALOG))):
    return get_all_subjects(db)


@router.get("/{subject_id}", response_model=SubjectOut)
def get_subject(
    subject_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require(VIEW_CATALOG)),
):
    try:
        return get_subject_by_id(db, subject_id)
    except ExamServiceError as e:
        raise to_http(e)


@router.put("/{subject_id}", response_model=SubjectOut)
def modify_subject(
    subject_id: int,
    subject: SubjectCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(require(MANAGE_SUBJECTS)),
    notifier: Notifier = Depends(get_notifier),
):
    try:
        return update_subject(db, subject_id, subject, notifier=notifier)
    except ExamServiceError as e:
        raise to_http(e)


@router.delete("/{subject_id}")
def remove_subject(
    subject_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require(MANAGE_SUBJECTS)),
    notifier: Notifier = Depends(get_notifier),
):
    try:
        return delete_subject(db, subject_id, notifier=notifier)
    except ExamServiceError as e:
        logger.warning(f"Subject {subject_id} not deleted for user {user['user_id']}: {e}")
        raise to_http(e)
