"""Pydantic schemas shared by several routers."""
from pydantic import BaseModel, Field, field_validator

from classifier import AttendanceStatus
from policy import RoomSize, SessionState

__all__ = [
    "AttendanceStatus",
    "RoomSize",
    "SessionState",
    "StudentEntry",
    "CoordinateIn",
    "MessageResponse",
]


class StudentEntry(BaseModel):
    """Schema for one expected student (name + registration number)."""
    student_name: str = Field(..., max_length=200, description="Student name")
    registration_number: str = Field(..., max_length=64, description="Registration number")

    @field_validator("student_name")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("Student name cannot be empty")
        return v.strip()

    @field_validator("registration_number")
    @classmethod
    def validate_registration(cls, v):
        """Trim only; roster comparison is case-insensitive."""
        if not v or not v.strip():
            raise ValueError("Registration number cannot be empty")
        return v.strip()


class CoordinateIn(BaseModel):
    """A device reading: position plus reported horizontal accuracy."""
    latitude: float = Field(..., ge=-90, le=90, description="Latitude")
    longitude: float = Field(..., ge=-180, le=180, description="Longitude")
    accuracy: float = Field(0.0, ge=0, description="Accuracy in meters")


class MessageResponse(BaseModel):
    message: str
