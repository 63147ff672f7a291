from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


class CourseCreate(BaseModel):
    name: str = Field(min_length=1)
    code: str = Field(min_length=1)
    description: Optional[str] = ""
    subjects: List[int] = []
    participants: List[int] = []


class CourseOut(BaseModel):
    id: int
    name: str
    code: str
    description: Optional[str] = ""
    subjects: List[int]
    participants: List[int]
    created_by_id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
