"""FastAPI routes for sessions."""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from db import get_db
from schemas import SessionState
from sessions.service import SessionService
from sessions.schemas import (
    SessionCreate,
    SessionResponse,
    SessionListResponse,
    SessionStatsResponse,
    ExpireResponse,
)

router = APIRouter(prefix="/sessions", tags=["sessions"])


@router.post("", response_model=SessionResponse, status_code=201)
async def create_session(
    session_data: SessionCreate,
    db: Session = Depends(get_db),
):
    """Create a session at the faculty's current location."""
    service = SessionService(db)
    return service.create_session(session_data)


# Fixed paths BEFORE the parameterized one
@router.get("/stats", response_model=SessionStatsResponse)
async def get_session_stats(
    faculty_id: Optional[str] = Query(None, description="Only sessions of this faculty"),
    db: Session = Depends(get_db),
):
    """Count total, active and inactive sessions."""
    return SessionService(db).session_stats(faculty_id)


@router.post("/expire-due", response_model=ExpireResponse)
async def expire_due_sessions(db: Session = Depends(get_db)):
    """Persist the expired state of every session past its expiry."""
    return ExpireResponse(expired_count=SessionService(db).expire_due_sessions())


@router.get("", response_model=SessionListResponse)
async def get_sessions(
    faculty_id: Optional[str] = Query(None, description="Only sessions of this faculty"),
    state: Optional[SessionState] = Query(None, description="active or expired"),
    db: Session = Depends(get_db),
):
    """List sessions, newest first."""
    sessions, total = SessionService(db).list_sessions(faculty_id=faculty_id, state=state)
    return SessionListResponse(sessions=sessions, total=total)


@router.get("/{code}", response_model=SessionResponse)
async def get_session(code: str, db: Session = Depends(get_db)):
    """Get a session by its 6-digit code."""
    session = SessionService(db).get_session(code)
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


@router.post("/{code}/close", response_model=SessionResponse)
async def close_session(code: str, db: Session = Depends(get_db)):
    """Stop accepting check-ins now."""
    return SessionService(db).close_session(code)
