"""SQLAlchemy models for attendance sessions."""

from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from db import Base


class AttendanceSession(Base):
    """A time-boxed check-in window anchored to the faculty's location."""

    __tablename__ = "attendance_sessions"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(6), unique=True, nullable=False, index=True)
    faculty_id = Column(String(128), nullable=False, index=True)
    faculty_name = Column(String(200), nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    accuracy_m = Column(Float, nullable=False, default=0.0)
    room_size = Column(String(10), nullable=False)
    buffer_m = Column(Float, nullable=False)
    base_radius_m = Column(Float, nullable=False)
    radius_m = Column(Float, nullable=False)
    active_duration = Column(Integer, nullable=False)
    status = Column(String(10), nullable=False, default="active", index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=True)

    roster = relationship(
        "SessionRosterEntry",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="SessionRosterEntry.id",
        lazy="selectin",
    )


class SessionRosterEntry(Base):
    """One expected student, frozen into the session when it is created."""

    __tablename__ = "session_roster_entries"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(
        Integer,
        ForeignKey("attendance_sessions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    student_name = Column(String(200), nullable=False)
    registration_number = Column(String(64), nullable=False)

    session = relationship("AttendanceSession", back_populates="roster")
