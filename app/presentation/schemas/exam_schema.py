from pydantic import BaseModel, Field
from typing import List, Literal, Optional
from datetime import datetime

from app.presentation.schemas.mcq_schema import MCQOut


class ExamSubjectIn(BaseModel):
    subject_id: int
    question_count: int = Field(gt=0)
    difficulty: Literal["easy", "medium", "hard", "mixed"] = "mixed"


class ExamSubjectOut(ExamSubjectIn):
    class Config:
        from_attributes = True


class ExamCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = ""
    course_id: int
    subjects: List[ExamSubjectIn] = []
    duration_minutes: int = Field(gt=0)
    passing_percentage: float = Field(ge=0, le=100)
    participants: List[int] = []
    scheduled_date: datetime


class ExamOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = ""
    course_id: int
    subjects: List[ExamSubjectOut]
    duration_minutes: int
    passing_percentage: float
    participants: List[int]
    scheduled_date: datetime
    created_by_id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ExamPreviewOut(BaseModel):
    exam_id: int
    requested: int
    shortfall: int
    questions: List[MCQOut]


class ExamSummaryOut(BaseModel):
    exam_id: int
    total_attempts: int
    completed_attempts: int
    passed_attempts: int
    average_score: Optional[float] = None
    pass_rate: Optional[float] = None
