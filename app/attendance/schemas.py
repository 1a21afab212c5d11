"""Pydantic schemas for attendance records."""
from typing import Optional, List
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, ConfigDict

from schemas import AttendanceStatus, CoordinateIn


class ExportFormat(str, Enum):
    """Attendance export file format."""
    csv = "csv"
    xlsx = "xlsx"


class CheckInRequest(CoordinateIn):
    """Schema for a student's check-in.

    Identity comes from the identity provider; accuracy is the device-reported
    accuracy of the best fix the client obtained.
    """
    student_id: str = Field(..., min_length=1, max_length=128, description="Student user id")
    student_name: str = Field(..., min_length=1, max_length=200, description="Student name")
    registration_number: str = Field(..., min_length=1, max_length=64, description="Registration number")


class OverrideRequest(BaseModel):
    """Schema for a faculty status override."""
    final_status: AttendanceStatus = Field(..., description="Status decided by faculty")


class AttendanceResponse(BaseModel):
    """Schema for attendance record response."""
    id: int
    session_code: str
    student_id: str
    student_name: str
    registration_number: str
    latitude: float
    longitude: float
    accuracy_m: float
    probe_radius_m: float
    distance_m: float
    overlap_percentage: float
    scoring_strategy: str
    status: AttendanceStatus
    final_status: AttendanceStatus
    faculty_override: bool
    created_at: datetime
    overridden_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class AttendanceListResponse(BaseModel):
    """Schema for attendance list response."""
    records: List[AttendanceResponse]
    total: int


class AttendanceStatsResponse(BaseModel):
    """Schema for per-session counters (by final status)."""
    session_code: str
    total: int = Field(..., description="Number of check-ins")
    present_count: int
    check_count: int
    proxy_count: int
    not_in_list_count: int
    override_count: int
