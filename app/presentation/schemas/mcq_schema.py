# mcq_schema.py
from pydantic import BaseModel, Field
from typing import List, Literal, Optional
from datetime import datetime

Difficulty = Literal["easy", "medium", "hard"]

class OptionCreate(BaseModel):
    text: str = Field(min_length=1)
    is_correct: bool = False

class OptionOut(BaseModel):
    id: int
    text: str
    is_correct: bool

    class Config:
        from_attributes = True

class OptionPublicOut(BaseModel):
    id: int
    text: str

    class Config:
        from_attributes = True

class MCQCreate(BaseModel):
    text: str = Field(min_length=1)
    difficulty: Difficulty
    subject_id: int
    options: List[OptionCreate]

class MCQOut(BaseModel):
    id: int
    text: str
    difficulty: Difficulty
    subject_id: int
    created_by_id: int
    created_at: Optional[datetime] = None
    options: List[OptionOut]  # Instructors see everything

    class Config:
        from_attributes = True

class MCQPublicOut(BaseModel):
    """Question as shown to a test-taker: correct flags are hidden."""
    id: int
    text: str
    difficulty: Difficulty
    subject_id: int
    options: List[OptionPublicOut]

    class Config:
        from_attributes = True
