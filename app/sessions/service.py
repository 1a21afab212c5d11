"""Business logic for attendance sessions."""
import logging
import secrets
from typing import Any, Callable, Dict, List, Optional, Tuple
from datetime import datetime

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from db import as_utc, utcnow
from geo import Circle, Coordinate
from metrics import SESSIONS_CREATED
from policy import (
    EngineConfig,
    SessionState,
    base_radius,
    effective_radius,
    expiry,
    session_state,
    validate_duration,
)
from rosters.service import RosterService
from schemas import StudentEntry
from sessions.models import AttendanceSession, SessionRosterEntry
from sessions.schemas import SessionCreate
from classifier import normalize_registration
from settings import get_engine_config, settings

logger = logging.getLogger(__name__)


def generate_session_code() -> str:
    """Random 6-digit code students type to find the session."""
    return str(100000 + secrets.randbelow(900000))


def _dedupe(students: List[StudentEntry]) -> List[StudentEntry]:
    seen = set()
    unique = []
    for s in students:
        key = normalize_registration(s.registration_number)
        if key not in seen:
            seen.add(key)
            unique.append(s)
    return unique


class SessionService:
    """Service class for session operations."""

    def __init__(
        self,
        db: Session,
        config: Optional[EngineConfig] = None,
        clock: Callable[[], datetime] = utcnow,
        code_factory: Callable[[], str] = generate_session_code,
    ):
        self.db = db
        self.config = config or get_engine_config()
        self.clock = clock
        self.code_factory = code_factory

    # ---------- lookups ----------

    def get_session_model(self, code: str) -> Optional[AttendanceSession]:
        return self.db.execute(
            select(AttendanceSession).where(AttendanceSession.code == code)
        ).scalars().first()

    def require_session(self, code: str) -> AttendanceSession:
        session = self.get_session_model(code)
        if not session:
            raise HTTPException(status_code=404, detail="Session not found")
        return session

    def state_of(self, session: AttendanceSession, now: Optional[datetime] = None) -> SessionState:
        return session_state(session.status, as_utc(session.expires_at), now or self.clock())

    def anchor_circle(self, session: AttendanceSession) -> Circle:
        return Circle(Coordinate(session.latitude, session.longitude), session.radius_m)

    def roster_numbers(self, session: AttendanceSession) -> List[str]:
        return [entry.registration_number for entry in session.roster]

    def get_session(self, code: str) -> Optional[Dict[str, Any]]:
        """Get session by its 6-digit code."""
        session = self.get_session_model(code)
        return self.to_dict(session) if session else None

    # ---------- create ----------

    def _unique_code(self) -> str:
        for _ in range(settings.session_code_attempts):
            code = self.code_factory()
            if self.get_session_model(code) is None:
                return code
        raise HTTPException(status_code=503, detail="Could not allocate a session code, try again")

    def create_session(self, data: SessionCreate) -> Dict[str, Any]:
        """Create a session anchored at the faculty's location."""
        center = Coordinate(data.latitude, data.longitude)
        duration = validate_duration(data.active_duration, self.config)
        buffer_m = self.config.default_buffer_m if data.buffer_m is None else data.buffer_m
        radius = effective_radius(data.room_size, data.accuracy, buffer_m, self.config)

        students = list(data.roster)
        if not students:
            latest = RosterService(self.db).latest_roster(data.faculty_id)
            if latest:
                students = [StudentEntry(**s) for s in latest["students"]]
        students = _dedupe(students)
        if not students:
            raise HTTPException(
                status_code=400,
                detail="Please import a student list before creating a session",
            )

        created_at = self.clock()
        session = None
        for _ in range(settings.session_code_attempts):
            code = self._unique_code()
            try:
                session = self._insert_session(
                    code, data, center, buffer_m, radius, duration, created_at, students
                )
                break
            except IntegrityError:
                # another request committed the same code after our lookup
                self.db.rollback()
                logger.warning("Session code %s taken concurrently, retrying", code)
        if session is None:
            raise HTTPException(status_code=503, detail="Could not allocate a session code, try again")

        SESSIONS_CREATED.labels(room_size=data.room_size.value).inc()
        logger.info(
            "Session %s created by %s: radius=%.1fm duration=%dmin roster=%d",
            code, data.faculty_id, radius, duration, len(students),
        )
        return self.to_dict(session)

    def _insert_session(
        self,
        code: str,
        data: SessionCreate,
        center: Coordinate,
        buffer_m: float,
        radius: float,
        duration: int,
        created_at: datetime,
        students: List[StudentEntry],
    ) -> AttendanceSession:
        try:
            session = AttendanceSession(
                code=code,
                faculty_id=data.faculty_id,
                faculty_name=data.faculty_name,
                latitude=center.latitude,
                longitude=center.longitude,
                accuracy_m=data.accuracy,
                room_size=data.room_size.value,
                buffer_m=buffer_m,
                base_radius_m=base_radius(data.room_size, self.config),
                radius_m=radius,
                active_duration=duration,
                status=SessionState.active.value,
                created_at=created_at,
                expires_at=expiry(created_at, duration),
                roster=[
                    SessionRosterEntry(
                        student_name=s.student_name,
                        registration_number=s.registration_number,
                    )
                    for s in students
                ],
            )
            self.db.add(session)
            self.db.commit()
            self.db.refresh(session)
        except IntegrityError:
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=400, detail=f"Error creating session: {str(e)}"
            )
        return session

    # ---------- listing ----------

    def list_sessions(
        self,
        faculty_id: Optional[str] = None,
        state: Optional[SessionState] = None,
    ) -> Tuple[List[Dict[str, Any]], int]:
        """Sessions newest first, optionally filtered by owner and current state."""
        query = select(AttendanceSession).order_by(
            AttendanceSession.created_at.desc(), AttendanceSession.id.desc()
        )
        if faculty_id:
            query = query.where(AttendanceSession.faculty_id == faculty_id)

        now = self.clock()
        sessions = self.db.execute(query).scalars().all()
        if state is not None:
            sessions = [s for s in sessions if self.state_of(s, now) is state]

        return [self.to_dict(s, now) for s in sessions], len(sessions)

    def session_stats(self, faculty_id: Optional[str] = None) -> Dict[str, int]:
        """Count sessions by state."""
        sessions, total = self.list_sessions(faculty_id=faculty_id)
        active = sum(1 for s in sessions if s["status"] is SessionState.active)
        return {"total": total, "active": active, "inactive": total - active}

    # ---------- lifecycle ----------

    def close_session(self, code: str) -> Dict[str, Any]:
        """End a session before its expiry."""
        session = self.require_session(code)
        if session.status != SessionState.expired.value:
            try:
                session.status = SessionState.expired.value
                session.updated_at = self.clock()
                self.db.commit()
                self.db.refresh(session)
            except Exception as e:
                self.db.rollback()
                raise HTTPException(
                    status_code=400, detail=f"Error closing session: {str(e)}"
                )
            logger.info("Session %s closed", code)
        return self.to_dict(session)

    def expire_due_sessions(self) -> int:
        """Persist ``expired`` on every open session whose expiry has passed."""
        now = self.clock()
        open_sessions = self.db.execute(
            select(AttendanceSession).where(AttendanceSession.status == SessionState.active.value)
        ).scalars().all()

        due = [s for s in open_sessions if self.state_of(s, now) is SessionState.expired]
        if not due:
            return 0
        try:
            for session in due:
                session.status = SessionState.expired.value
                session.updated_at = now
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=400, detail=f"Error expiring sessions: {str(e)}"
            )
        logger.info("Expired %d sessions", len(due))
        return len(due)

    # ---------- serialization ----------

    def to_dict(self, session: AttendanceSession, now: Optional[datetime] = None) -> Dict[str, Any]:
        roster = [
            {"student_name": e.student_name, "registration_number": e.registration_number}
            for e in session.roster
        ]
        return {
            "id": session.id,
            "code": session.code,
            "faculty_id": session.faculty_id,
            "faculty_name": session.faculty_name,
            "latitude": session.latitude,
            "longitude": session.longitude,
            "accuracy_m": session.accuracy_m,
            "room_size": session.room_size,
            "buffer_m": session.buffer_m,
            "base_radius_m": session.base_radius_m,
            "radius_m": session.radius_m,
            "active_duration": session.active_duration,
            "status": self.state_of(session, now),
            "created_at": as_utc(session.created_at),
            "expires_at": as_utc(session.expires_at),
            "roster_size": len(roster),
            "roster": roster,
        }
