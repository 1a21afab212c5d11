"""Pydantic schemas for imported student lists."""
from typing import List, Optional
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from schemas import StudentEntry


class RosterResponse(BaseModel):
    """Schema for a stored student list."""
    id: int
    faculty_id: str
    source_filename: Optional[str] = None
    student_count: int
    imported_at: datetime
    students: List[StudentEntry]

    model_config = ConfigDict(from_attributes=True)


class RosterImportResponse(BaseModel):
    """Schema for import response."""
    roster_id: int
    success_count: int
    error_count: int
    errors: List[str]
    message: str
