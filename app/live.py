from fastapi import APIRouter, Depends
from fastapi.encoders import jsonable_encoder
from fastapi.responses import StreamingResponse
import asyncio, json

from attendance.service import AttendanceService
from db import SessionLocal
from sessions.service import SessionService
from settings import settings

router = APIRouter()


def get_session_factory():
    return SessionLocal


def _snapshot(session_factory, code: str) -> str:
    with session_factory() as db:
        records, _ = AttendanceService(db).list_attendance(code)
    return json.dumps(jsonable_encoder(records))


async def _stream(code: str, session_factory, poll_seconds: float):
    # push the list whenever it changes, a comment otherwise
    last = None
    while True:
        payload = await asyncio.to_thread(_snapshot, session_factory, code)
        if payload != last:
            last = payload
            yield f"event: attendance\ndata: {payload}\n\n"
        else:
            yield ": keep-alive\n\n"
        await asyncio.sleep(poll_seconds)


@router.get("/stream/sessions/{code}/attendance")
async def stream_attendance(code: str, session_factory=Depends(get_session_factory)):
    with session_factory() as db:
        SessionService(db).require_session(code)
    return StreamingResponse(
        _stream(code, session_factory, settings.live_poll_seconds),
        media_type="text/event-stream",
    )
