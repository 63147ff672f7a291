from typing import List, Optional
from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from sqlalchemy.orm import Session
from app.presentation.schemas.mcq_schema import MCQCreate, MCQOut
from app.presentation.schemas.bulk_mcq_schema import MCQBulkUploadMeta, BulkUploadResponse
from app.presentation.dependencies import get_db, get_notifier, require, to_http
from app.application.admin.bulk_upload_usecase import process_bulk_upload
from app.application.exceptions import ExamServiceError
from app.application.notifications import Notifier
from app.application.permissions import MANAGE_QUESTIONS
from app.infrastructure.repositories.mcq_repo_impl import (
    create_mcq,
    get_mcq_by_id,
    list_mcqs,
    update_mcq,
    delete_mcq,
)
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/mcqs", tags=["MCQs"])


@router.post("", response_model=MCQOut, status_code=201)
def add_mcq(
    mcq: MCQCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(require(MANAGE_QUESTIONS)),
    notifier: Notifier = Depends(get_notifier),
):
    try:
        logger.info(f"User {user['user_id']} creating MCQ for subject {mcq.subject_id}")
        return create_mcq(db, mcq, user["user_id"], notifier=notifier)
    except ExamServiceError as e:
        logger.warning(f"Validation error during MCQ creation by user {user['user_id']}: {e}")
        raise to_http(e)


@router.get("", response_model=List[MCQOut])
def get_mcqs(
    subject_id: Optional[int] = None,
    difficulty: Optional[str] = None,
    db: Session = Depends(get_db),
    user: dict = Depends(require(MANAGE_QUESTIONS)),
):
    return list_mcqs(db, subject_id=subject_id, difficulty=difficulty)


@router.get("/{mcq_id}", response_model=MCQOut)
def get_mcq(
    mcq_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require(MANAGE_QUESTIONS)),
):
    try:
        return get_mcq_by_id(db, mcq_id)
    except ExamServiceError as e:
        raise to_http(e)


@router.put("/{mcq_id}", response_model=MCQOut)
def modify_mcq(
    mcq_id: int,
    mcq: MCQCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(require(MANAGE_QUESTIONS)),
    notifier: Notifier = Depends(get_notifier),
):
    try:
        return update_mcq(db, mcq_id, mcq, notifier=notifier)
    except ExamServiceError as e:
        raise to_http(e)


@router.delete("/{mcq_id}")
def remove_mcq(
    mcq_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require(MANAGE_QUESTIONS)),
    notifier: Notifier = Depends(get_notifier),
):
    try:
        return delete_mcq(db, mcq_id, notifier=notifier)
    except ExamServiceError as e:
        raise to_http(e)


@router.post("/bulk-upload", response_model=BulkUploadResponse)
async def bulk_upload_mcqs(
    file: UploadFile = File(...),
    subject_id: int = Form(...),
    difficulty: str = Form("medium"),
    db: Session = Depends(get_db),
    user: dict = Depends(require(MANAGE_QUESTIONS)),
    notifier: Notifier = Depends(get_notifier),
):
    try:
        meta = MCQBulkUploadMeta(subject_id=subject_id, difficulty=difficulty)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    logger.info(f"User {user['user_id']} initiated bulk upload for subject: {meta.subject_id}")
    content = await file.read()
    try:
        return process_bulk_upload(db, content, file.filename or "", meta, user["user_id"], notifier=notifier)
    except ExamServiceError as e:
        raise to_http(e)
