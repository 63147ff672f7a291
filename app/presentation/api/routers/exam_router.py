from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from app.presentation.schemas.exam_schema import ExamCreate, ExamOut, ExamPreviewOut, ExamSummaryOut
from app.presentation.schemas.mcq_schema import MCQOut
from app.presentation.schemas.attempt_schema import AttemptOut
from app.presentation.dependencies import get_db, get_notifier, get_attempt_service, require, to_http
from app.application.exam.attempt_service import ExamAttemptService
from app.application.exam.question_selector import resolve_exam_questions
from app.application.exceptions import ExamServiceError
from app.application.notifications import Notifier
from app.application.permissions import can, MANAGE_EXAMS, VIEW_CATALOG, VIEW_RESULTS
from app.infrastructure.repositories.exam_repo_impl import (
    create_exam,
    get_all_exams,
    get_exams_for_participant,
    get_exam_by_id,
    update_exam,
    delete_exam,
)
from app.infrastructure.repositories.mcq_repo_impl import SqlQuestionCatalog
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/exams", tags=["Exams"])


@router.post("", response_model=ExamOut, status_code=status.HTTP_201_CREATED)
def add_exam(
    exam: ExamCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(require(MANAGE_EXAMS)),
    notifier: Notifier = Depends(get_notifier),
):
    try:
        logger.info(f"User {user['user_id']} is creating exam: {exam.name}")
        return create_exam(db, exam, user["user_id"], notifier=notifier)
    except ExamServiceError as e:
        logger.warning(f"Validation error: {e}")
        raise to_http(e)


@router.get("", response_model=List[ExamOut])
def list_exams(db: Session = Depends(get_db), user: dict = Depends(require(VIEW_CATALOG))):
    if can(user["role"], MANAGE_EXAMS):
        return get_all_exams(db)
    return get_exams_for_participant(db, user["user_id"])


@router.get("/{exam_id}", response_model=ExamOut)
def get_exam(
    exam_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require(VIEW_CATALOG)),
):
    try:
        exam = get_exam_by_id(db, exam_id)
    except ExamServiceError as e:
        raise to_http(e)
    if not can(user["role"], MANAGE_EXAMS) and user["user_id"] not in exam.participants:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not a participant of this exam")
    return exam


@router.put("/{exam_id}", response_model=ExamOut)
def modify_exam(
    exam_id: int,
    exam: ExamCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(require(MANAGE_EXAMS)),
    notifier: Notifier = Depends(get_notifier),
):
    try:
        return update_exam(db, exam_id, exam, notifier=notifier)
    except ExamServiceError as e:
        raise to_http(e)


@router.delete("/{exam_id}")
def remove_exam(
    exam_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require(MANAGE_EXAMS)),
    notifier: Notifier = Depends(get_notifier),
):
    try:
        return delete_exam(db, exam_id, notifier=notifier)
    except ExamServiceError as e:
        raise to_http(e)


@router.get("/{exam_id}/questions", response_model=ExamPreviewOut)
def preview_exam_questions(
    exam_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require(MANAGE_EXAMS)),
):
    """
    Draws a sample question set for the exam, correct answers included.
    Each call may return a different draw.
    """
    try:
        exam = get_exam_by_id(db, exam_id)
    except ExamServiceError as e:
        raise to_http(e)
    question_set = resolve_exam_questions(exam.subjects, SqlQuestionCatalog(db))
    return ExamPreviewOut(
        exam_id=exam.id,
        requested=question_set.requested,
        shortfall=question_set.shortfall,
        questions=[MCQOut.model_validate(q) for q in question_set.questions],
    )


@router.get("/{exam_id}/attempts", response_model=List[AttemptOut])
def list_exam_attempts(
    exam_id: int,
    user: dict = Depends(require(VIEW_RESULTS)),
    service: ExamAttemptService = Depends(get_attempt_service),
):
    try:
        return service.list_exam_attempts(exam_id)
    except ExamServiceError as e:
        raise to_http(e)


@router.get("/{exam_id}/summary", response_model=ExamSummaryOut)
def exam_summary(
    exam_id: int,
    user: dict = Depends(require(VIEW_RESULTS)),
    service: ExamAttemptService = Depends(get_attempt_service),
):
    try:
        return service.exam_summary(exam_id)
    except ExamServiceError as e:
        raise to_http(e)
