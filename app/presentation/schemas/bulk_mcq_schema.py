from pydantic import BaseModel
from typing import Literal


class MCQBulkUploadMeta(BaseModel):
    subject_id: int
    difficulty: Literal["easy", "medium", "hard"] = "medium"


class BulkUploadResponse(BaseModel):
    total_rows: int
    inserted: int
    failed: int
    errors: list[str] = []
