"""Pydantic schemas for sessions."""
from typing import List, Optional
from datetime import datetime

from pydantic import BaseModel, Field, ConfigDict

from schemas import CoordinateIn, RoomSize, SessionState, StudentEntry


class SessionCreate(CoordinateIn):
    """Schema for creating a session from the faculty's location fix."""
    faculty_id: str = Field(..., min_length=1, max_length=128, description="Faculty user id")
    faculty_name: str = Field(..., min_length=1, max_length=200, description="Faculty display name")
    room_size: RoomSize = Field(RoomSize.mid, description="Room size category")
    buffer_m: Optional[float] = Field(
        None, ge=0, description="Safety buffer in meters (defaults to the configured one)"
    )
    active_duration: int = Field(10, description="Minutes the session accepts check-ins")
    roster: List[StudentEntry] = Field(
        default_factory=list,
        description="Expected students; empty means use the faculty's latest imported list",
    )


class SessionResponse(BaseModel):
    """Schema for session response."""
    id: int
    code: str
    faculty_id: str
    faculty_name: str
    latitude: float
    longitude: float
    accuracy_m: float
    room_size: RoomSize
    buffer_m: float
    base_radius_m: float
    radius_m: float
    active_duration: int
    status: SessionState
    created_at: datetime
    expires_at: datetime
    roster_size: int
    roster: List[StudentEntry]

    model_config = ConfigDict(from_attributes=True)


class SessionListResponse(BaseModel):
    """Schema for session list response."""
    sessions: List[SessionResponse]
    total: int


class SessionStatsResponse(BaseModel):
    """Schema for session counters."""
    total: int
    active: int
    inactive: int


class ExpireResponse(BaseModel):
    expired_count: int
