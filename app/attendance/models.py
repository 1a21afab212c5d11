"""SQLAlchemy models for attendance records."""

from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, ForeignKey
from db import Base


class AttendanceRecord(Base):
    """One check-in attempt with its computed and final status."""

    __tablename__ = "attendance_records"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(
        Integer,
        ForeignKey("attendance_sessions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    session_code = Column(String(6), nullable=False, index=True)
    student_id = Column(String(128), nullable=False, index=True)
    student_name = Column(String(200), nullable=False)
    registration_number = Column(String(64), nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    accuracy_m = Column(Float, nullable=False, default=0.0)
    probe_radius_m = Column(Float, nullable=False)
    distance_m = Column(Float, nullable=False)
    overlap_percentage = Column(Float, nullable=False)
    scoring_strategy = Column(String(20), nullable=False)
    # computed once at check-in; kept for audit
    status = Column(String(20), nullable=False)
    final_status = Column(String(20), nullable=False, index=True)
    faculty_override = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)
    overridden_at = Column(DateTime(timezone=True), nullable=True)
