from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime

from app.presentation.schemas.mcq_schema import MCQPublicOut


class AnswerIn(BaseModel):
    question_id: int
    selected_option_id: int


class AnswerOut(AnswerIn):
    class Config:
        from_attributes = True


class SubmitAttemptRequest(BaseModel):
    answers: List[AnswerIn]


class StartAttemptResponse(BaseModel):
    attempt_id: int
    resumed: bool


class AttemptOut(BaseModel):
    id: int
    exam_id: int
    user_id: int
    start_time: datetime
    end_time: Optional[datetime] = None
    score: Optional[float] = None
    passed: Optional[bool] = None
    answers: List[AnswerOut] = []

    class Config:
        from_attributes = True


class AttemptQuestionsOut(BaseModel):
    attempt_id: int
    exam_id: int
    duration_minutes: int
    shortfall: int
    questions: List[MCQPublicOut]


class AttemptResultOut(BaseModel):
    attempt_id: int
    score: float
    passed: bool
    correct_count: int
    total_questions: int
