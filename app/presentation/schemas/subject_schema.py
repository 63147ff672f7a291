from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

# ------------------ Subject Schemas ------------------

class SubjectCreate(BaseModel):
    name: str = Field(min_length=1)
    code: str = Field(min_length=1)
    description: Optional[str] = ""

class SubjectOut(BaseModel):
    id: int
    name: str
    code: str
    description: Optional[str] = ""
    created_by_id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
