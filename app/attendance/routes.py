"""FastAPI routes for check-ins and attendance records."""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from db import get_db
from attendance.service import AttendanceService
from attendance.schemas import (
    AttendanceListResponse,
    AttendanceResponse,
    AttendanceStatsResponse,
    CheckInRequest,
    ExportFormat,
    OverrideRequest,
)

router = APIRouter(tags=["attendance"])

EXPORT_MEDIA_TYPES = {
    ExportFormat.csv: "text/csv",
    ExportFormat.xlsx: "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


@router.post("/sessions/{code}/check-in", response_model=AttendanceResponse, status_code=201)
async def check_in(
    code: str,
    request: CheckInRequest,
    db: Session = Depends(get_db),
):
    """Mark attendance from the student's best location fix."""
    service = AttendanceService(db)
    return service.check_in(code, request)


@router.get("/sessions/{code}/attendance", response_model=AttendanceListResponse)
async def get_session_attendance(code: str, db: Session = Depends(get_db)):
    """Check-ins of a session, oldest first."""
    records, total = AttendanceService(db).list_attendance(code)
    return AttendanceListResponse(records=records, total=total)


@router.get("/sessions/{code}/attendance/stats", response_model=AttendanceStatsResponse)
async def get_attendance_stats(code: str, db: Session = Depends(get_db)):
    """Counts by final status."""
    return AttendanceService(db).attendance_stats(code)


@router.get("/sessions/{code}/attendance/export")
async def export_attendance(
    code: str,
    fmt: ExportFormat = Query(ExportFormat.csv, description="csv or xlsx"),
    db: Session = Depends(get_db),
):
    """Download the attendance sheet."""
    service = AttendanceService(db)
    content = service.export_attendance(code, fmt)
    filename = service.export_filename(code, fmt)
    return Response(
        content=content,
        media_type=EXPORT_MEDIA_TYPES[fmt],
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.patch("/attendance/{record_id}/override", response_model=AttendanceResponse)
async def override_attendance(
    record_id: int,
    request: OverrideRequest,
    db: Session = Depends(get_db),
):
    """Faculty decision on a check-in; the computed result is kept."""
    return AttendanceService(db).override_status(record_id, request.final_status)
