"""Business logic for check-ins, overrides and exports."""
import csv
import io
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple
from datetime import datetime

from fastapi import HTTPException
from openpyxl import Workbook
from openpyxl.styles import Font
from sqlalchemy import select
from sqlalchemy.orm import Session

from attendance.models import AttendanceRecord
from attendance.schemas import CheckInRequest, ExportFormat
from classifier import STATUS_LABELS, AttendanceStatus, classify, is_in_roster
from db import as_utc, utcnow
from geo import Circle, Coordinate, distance_m
from metrics import CHECKIN_REQUESTS, CHECKIN_RESULTS, OVERLAP_SCORES, STATUS_OVERRIDES
from overlap import OverlapStrategy, get_strategy
from policy import EngineConfig, SessionState, student_radius
from sessions.service import SessionService
from settings import get_engine_config

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = [
    "Student Name",
    "Registration Number",
    "Status",
    "Computed Status",
    "Timestamp",
    "Overlap Percentage",
    "Faculty Override",
]


class AttendanceService:
    """Service class for attendance operations."""

    def __init__(
        self,
        db: Session,
        config: Optional[EngineConfig] = None,
        strategy: Optional[OverlapStrategy] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.db = db
        self.config = config or get_engine_config()
        self.strategy = strategy or get_strategy(self.config.overlap_strategy)
        self.clock = clock
        self.sessions = SessionService(db, config=self.config, clock=clock)

    # ---------- check-in ----------

    def check_in(self, code: str, request: CheckInRequest) -> Dict[str, Any]:
        """Score a student's location against the session and record the attempt."""
        CHECKIN_REQUESTS.inc()

        session = self.sessions.require_session(code)
        now = self.clock()
        if self.sessions.state_of(session, now) is SessionState.expired:
            logger.warning("Check-in by %s rejected: session %s expired", request.student_id, code)
            raise HTTPException(status_code=410, detail="This session has expired")

        anchor = self.sessions.anchor_circle(session)
        probe = Circle(
            Coordinate(request.latitude, request.longitude),
            student_radius(request.accuracy, self.config),
        )
        overlap_pct = self.strategy.score(anchor, probe)
        in_roster = is_in_roster(request.registration_number, self.sessions.roster_numbers(session))
        status = classify(overlap_pct, in_roster, self.config)

        try:
            record = AttendanceRecord(
                session_id=session.id,
                session_code=session.code,
                student_id=request.student_id,
                student_name=request.student_name,
                registration_number=request.registration_number,
                latitude=request.latitude,
                longitude=request.longitude,
                accuracy_m=request.accuracy,
                probe_radius_m=probe.radius_m,
                distance_m=distance_m(anchor.center, probe.center),
                overlap_percentage=overlap_pct,
                scoring_strategy=self.strategy.name,
                status=status.value,
                final_status=status.value,
                faculty_override=False,
                created_at=now,
            )
            self.db.add(record)
            self.db.commit()
            self.db.refresh(record)
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=400, detail=f"Error marking attendance: {str(e)}"
            )

        CHECKIN_RESULTS.labels(status=status.value).inc()
        OVERLAP_SCORES.observe(overlap_pct)
        logger.info(
            "Check-in %s on session %s by %s: overlap=%s%% status=%s",
            record.id, code, request.student_id, overlap_pct, status.value,
        )
        return self.to_dict(record)

    # ---------- override ----------

    def get_record(self, record_id: int) -> Optional[AttendanceRecord]:
        return self.db.get(AttendanceRecord, record_id)

    def override_status(self, record_id: int, final_status: AttendanceStatus) -> Dict[str, Any]:
        """Replace the final status; the computed score and status stay untouched."""
        record = self.get_record(record_id)
        if not record:
            raise HTTPException(status_code=404, detail="Attendance record not found")

        try:
            record.final_status = AttendanceStatus(final_status).value
            record.faculty_override = True
            record.overridden_at = self.clock()
            self.db.commit()
            self.db.refresh(record)
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=400, detail=f"Error updating attendance status: {str(e)}"
            )

        STATUS_OVERRIDES.inc()
        logger.info(
            "Attendance %s overridden: %s -> %s", record_id, record.status, record.final_status
        )
        return self.to_dict(record)

    # ---------- queries ----------

    def list_attendance(self, code: str) -> Tuple[List[Dict[str, Any]], int]:
        """Check-ins of a session, oldest first."""
        self.sessions.require_session(code)
        records = self.db.execute(
            select(AttendanceRecord)
            .where(AttendanceRecord.session_code == code)
            .order_by(AttendanceRecord.created_at.asc(), AttendanceRecord.id.asc())
        ).scalars().all()
        return [self.to_dict(r) for r in records], len(records)

    def attendance_stats(self, code: str) -> Dict[str, Any]:
        """Count check-ins by final status."""
        records, total = self.list_attendance(code)
        counts = {status: 0 for status in AttendanceStatus}
        for r in records:
            counts[AttendanceStatus(r["final_status"])] += 1
        return {
            "session_code": code,
            "total": total,
            "present_count": counts[AttendanceStatus.present],
            "check_count": counts[AttendanceStatus.check],
            "proxy_count": counts[AttendanceStatus.proxy],
            "not_in_list_count": counts[AttendanceStatus.not_in_list],
            "override_count": sum(1 for r in records if r["faculty_override"]),
        }

    # ---------- export ----------

    def _export_rows(self, code: str) -> Tuple[List[List[str]], List[List[Any]]]:
        session = self.sessions.require_session(code)
        records, _ = self.list_attendance(code)
        header = [
            [f"Session ID: {session.code}"],
            [f"Faculty: {session.faculty_name}"],
            [f"Date: {as_utc(session.created_at).date().isoformat()}"],
            [],
        ]
        rows = [
            [
                r["student_name"],
                r["registration_number"],
                STATUS_LABELS[AttendanceStatus(r["final_status"])],
                STATUS_LABELS[AttendanceStatus(r["status"])],
                r["created_at"].isoformat(),
                f"{r['overlap_percentage']:.1f}%",
                "Yes" if r["faculty_override"] else "No",
            ]
            for r in records
        ]
        return header, rows

    def export_filename(self, code: str, fmt: ExportFormat) -> str:
        session = self.sessions.require_session(code)
        day = as_utc(session.created_at).date().isoformat()
        return f"attendance_{code}_{day}.{ExportFormat(fmt).value}"

    def export_attendance(self, code: str, fmt: ExportFormat = ExportFormat.csv) -> bytes:
        """Render the session's attendance sheet as CSV or XLSX bytes."""
        header, rows = self._export_rows(code)

        if ExportFormat(fmt) is ExportFormat.csv:
            buffer = io.StringIO()
            writer = csv.writer(buffer)
            writer.writerows(header)
            writer.writerow(EXPORT_COLUMNS)
            writer.writerows(rows)
            return buffer.getvalue().encode("utf-8-sig")

        workbook = Workbook()
        sheet = workbook.active
        sheet.title = "Attendance"
        for line in header:
            sheet.append(line)
        sheet.append(EXPORT_COLUMNS)
        for cell in sheet[sheet.max_row]:
            cell.font = Font(bold=True)
        for row in rows:
            sheet.append(row)

        out = io.BytesIO()
        workbook.save(out)
        return out.getvalue()

    @staticmethod
    def to_dict(record: AttendanceRecord) -> Dict[str, Any]:
        return {
            "id": record.id,
            "session_code": record.session_code,
            "student_id": record.student_id,
            "student_name": record.student_name,
            "registration_number": record.registration_number,
            "latitude": record.latitude,
            "longitude": record.longitude,
            "accuracy_m": record.accuracy_m,
            "probe_radius_m": record.probe_radius_m,
            "distance_m": record.distance_m,
            "overlap_percentage": record.overlap_percentage,
            "scoring_strategy": record.scoring_strategy,
            "status": record.status,
            "final_status": record.final_status,
            "faculty_override": record.faculty_override,
            "created_at": as_utc(record.created_at),
            "overridden_at": as_utc(record.overridden_at),
        }
