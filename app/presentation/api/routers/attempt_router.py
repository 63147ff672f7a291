import logging
from fastapi import APIRouter, Depends, Response, status
from typing import List

from app.presentation.dependencies import get_current_user, get_attempt_service, require, to_http
from app.application.exam.attempt_service import ExamAttemptService
from app.application.exceptions import ExamServiceError
from app.application.permissions import can, TAKE_EXAMS, VIEW_RESULTS
from app.presentation.schemas.mcq_schema import MCQPublicOut
from app.presentation.schemas.attempt_schema import (
    AttemptOut,
    AttemptQuestionsOut,
    AttemptResultOut,
    StartAttemptResponse,
    SubmitAttemptRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/attempts", tags=["Exam Attempts"])


# --------------------------------------------------
# 1. Start / resume attempt
# --------------------------------------------------
@router.post(
    "/start/{exam_id}",
    response_model=StartAttemptResponse,
    status_code=status.HTTP_201_CREATED,
)
def start_attempt(
    exam_id: int,
    response: Response,
    current_user: dict = Depends(require(TAKE_EXAMS)),
    service: ExamAttemptService = Depends(get_attempt_service),
):
    """
    Starts a new attempt (201), or resumes the open one the user already
    has (200).
    """
    user_id = current_user.get("user_id")
    try:
        logger.info(f"User {user_id} starting attempt for exam {exam_id}")
        attempt, resumed = service.open_attempt(exam_id, user_id)
        if resumed:
            response.status_code = status.HTTP_200_OK
        return StartAttemptResponse(attempt_id=attempt.id, resumed=resumed)
    except ExamServiceError as e:
        logger.warning(f"Could not start attempt for user {user_id} on exam {exam_id}: {e}")
        raise to_http(e)


# --------------------------------------------------
# 2. Own attempts
# --------------------------------------------------
@router.get("/me", response_model=List[AttemptOut])
def my_attempts(
    current_user: dict = Depends(get_current_user),
    service: ExamAttemptService = Depends(get_attempt_service),
):
    return service.list_user_attempts(current_user["user_id"])


@router.get("/{attempt_id}", response_model=AttemptOut)
def get_attempt(
    attempt_id: int,
    current_user: dict = Depends(get_current_user),
    service: ExamAttemptService = Depends(get_attempt_service),
):
    # Result viewers may read anyone's attempt
    owner = None if can(current_user["role"], VIEW_RESULTS) else current_user["user_id"]
    try:
        return service.get_attempt(attempt_id, owner)
    except ExamServiceError as e:
        raise to_http(e)


# --------------------------------------------------
# 3. Questions for an open attempt
# --------------------------------------------------
@router.get("/{attempt_id}/questions", response_model=AttemptQuestionsOut)
def get_attempt_questions(
    attempt_id: int,
    current_user: dict = Depends(require(TAKE_EXAMS)),
    service: ExamAttemptService = Depends(get_attempt_service),
):
    """
    Returns the question set drawn when the attempt started. Correct flags
    are not exposed.
    """
    try:
        attempt, exam, questions = service.get_attempt_questions(
            attempt_id, current_user["user_id"]
        )
    except ExamServiceError as e:
        raise to_http(e)
    return AttemptQuestionsOut(
        attempt_id=attempt.id,
        exam_id=exam.id,
        duration_minutes=exam.duration_minutes,
        shortfall=attempt.shortfall,
        questions=[MCQPublicOut.model_validate(q) for q in questions],
    )


# --------------------------------------------------
# 4. Final submission
# --------------------------------------------------
@router.post("/{attempt_id}/submit", response_model=AttemptResultOut)
def submit_attempt(
    attempt_id: int,
    payload: SubmitAttemptRequest,
    current_user: dict = Depends(require(TAKE_EXAMS)),
    service: ExamAttemptService = Depends(get_attempt_service),
):
    user_id = current_user.get("user_id")
    try:
        logger.info(f"User {user_id} submitting attempt {attempt_id}")
        result = service.submit_attempt(
            attempt_id,
            payload.answers,
            user_id=user_id,
        )
    except ExamServiceError as e:
        logger.warning(f"Submission of attempt {attempt_id} rejected: {e}")
        raise to_http(e)
    return AttemptResultOut(
        attempt_id=attempt_id,
        score=result.score,
        passed=result.passed,
        correct_count=result.correct_count,
        total_questions=result.total_questions,
    )
