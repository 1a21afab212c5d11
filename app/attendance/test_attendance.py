"""Unit tests for check-in, override and export functionality."""
import csv
import io
import math
from datetime import timedelta

import pytest
from fastapi import HTTPException
from openpyxl import load_workbook

from attendance.schemas import CheckInRequest, ExportFormat, OverrideRequest
from attendance.service import AttendanceService
from classifier import AttendanceStatus
from errors import InvalidAccuracy
from geo import EARTH_RADIUS_M
from overlap import LinearOverlap
from policy import EngineConfig
from sessions.schemas import SessionCreate
from sessions.service import SessionService

M_PER_DEG = EARTH_RADIUS_M * math.pi / 180.0
CODE = "654321"


@pytest.fixture
def config():
    # anchor radius 10 m (small room + 5 m accuracy), probe radius 5 m (2 m + 3 m accuracy)
    return EngineConfig(default_buffer_m=0)


@pytest.fixture
def session(db_session, clock, config):
    service = SessionService(db_session, config=config, clock=clock, code_factory=lambda: CODE)
    return service.create_session(
        SessionCreate(
            faculty_id="fac-1",
            faculty_name="Dr. Mehta",
            latitude=0.0,
            longitude=0.0,
            accuracy=5,
            room_size="small",
            active_duration=10,
            roster=[
                {"student_name": "Asha Rao", "registration_number": "CS2023001"},
                {"student_name": "Ben Okafor", "registration_number": "CS2023002"},
            ],
        )
    )


@pytest.fixture
def service(db_session, clock, config, session):
    return AttendanceService(db_session, config=config, clock=clock)


def check_in(meters_north: float = 0.0, registration: str = "CS2023001", accuracy: float = 3, student="stu-1"):
    return CheckInRequest(
        student_id=student,
        student_name="Asha Rao",
        registration_number=registration,
        latitude=meters_north / M_PER_DEG,
        longitude=0.0,
        accuracy=accuracy,
    )


class TestCheckIn:
    """Test cases for scoring and recording a check-in."""

    def test_same_point_is_present(self, service):
        record = service.check_in(CODE, check_in(0))

        assert record["overlap_percentage"] == 100
        assert record["status"] == "present"
        assert record["final_status"] == "present"
        assert record["faculty_override"] is False
        assert record["probe_radius_m"] == 5
        assert record["scoring_strategy"] == "geometric"

    def test_far_away_is_proxy(self, service):
        record = service.check_in(CODE, check_in(50))
        assert record["overlap_percentage"] == 0
        assert record["status"] == "proxy"
        assert record["distance_m"] == pytest.approx(50)

    def test_far_away_not_in_roster(self, service):
        record = service.check_in(CODE, check_in(50, registration="ME9999"))
        assert record["status"] == "not_in_list"

    def test_edge_of_room_needs_checking(self, service):
        """Probe centered on the anchor edge: geometric score 45 -> check."""
        record = service.check_in(CODE, check_in(10))
        assert record["overlap_percentage"] == 45
        assert record["status"] == "check"

    def test_edge_of_room_with_linear_strategy(self, db_session, clock, config, session):
        """Same reading scores exactly the present threshold under the heuristic."""
        service = AttendanceService(db_session, config=config, strategy=LinearOverlap(), clock=clock)
        record = service.check_in(CODE, check_in(10))
        assert record["overlap_percentage"] == 70
        assert record["status"] == "present"
        assert record["scoring_strategy"] == "linear"

    def test_strategy_from_config(self, db_session, clock, session):
        service = AttendanceService(
            db_session, config=EngineConfig(default_buffer_m=0, overlap_strategy="linear"), clock=clock
        )
        assert isinstance(service.strategy, LinearOverlap)

    def test_registration_case_insensitive(self, service):
        record = service.check_in(CODE, check_in(0, registration="cs2023001"))
        assert record["status"] == "present"

    def test_expired_session(self, service, clock):
        clock.advance(milliseconds=601_000)
        with pytest.raises(HTTPException) as exc:
            service.check_in(CODE, check_in(0))
        assert exc.value.status_code == 410

    def test_closed_session(self, service, db_session, clock, config):
        SessionService(db_session, config=config, clock=clock).close_session(CODE)
        with pytest.raises(HTTPException) as exc:
            service.check_in(CODE, check_in(0))
        assert exc.value.status_code == 410

    def test_unknown_session(self, service):
        with pytest.raises(HTTPException) as exc:
            service.check_in("000000", check_in(0))
        assert exc.value.status_code == 404

    def test_negative_accuracy_rejected(self, service):
        request = check_in(0).model_copy(update={"accuracy": -1})
        with pytest.raises(InvalidAccuracy):
            service.check_in(CODE, request)

    def test_each_attempt_recorded(self, service):
        service.check_in(CODE, check_in(50))
        service.check_in(CODE, check_in(0))
        records, total = service.list_attendance(CODE)
        assert total == 2
        assert [r["status"] for r in records] == ["proxy", "present"]


class TestOverride:
    """Test cases for faculty overrides."""

    def test_override_keeps_computed_result(self, service, clock):
        record = service.check_in(CODE, check_in(10))
        clock.advance(minutes=2)

        updated = service.override_status(record["id"], AttendanceStatus.present)

        assert updated["final_status"] == "present"
        assert updated["faculty_override"] is True
        assert updated["overridden_at"] == clock.now
        assert updated["status"] == "check"
        assert updated["overlap_percentage"] == 45

    def test_override_unknown_record(self, service):
        with pytest.raises(HTTPException) as exc:
            service.override_status(999, AttendanceStatus.proxy)
        assert exc.value.status_code == 404

    def test_override_schema_rejects_unknown_status(self):
        with pytest.raises(ValueError):
            OverrideRequest(final_status="late")


class TestQueries:
    """Test cases for stats and exports."""

    @pytest.fixture
    def recorded(self, service):
        service.check_in(CODE, check_in(0))
        service.check_in(CODE, check_in(10, registration="CS2023002", student="stu-2"))
        proxy = service.check_in(CODE, check_in(50, registration="ME9999", student="stu-3"))
        service.override_status(proxy["id"], AttendanceStatus.proxy)
        return service

    def test_stats(self, recorded):
        stats = recorded.attendance_stats(CODE)
        assert stats == {
            "session_code": CODE,
            "total": 3,
            "present_count": 1,
            "check_count": 1,
            "proxy_count": 1,
            "not_in_list_count": 0,
            "override_count": 1,
        }

    def test_csv_export(self, recorded):
        content = recorded.export_attendance(CODE, ExportFormat.csv).decode("utf-8-sig")
        rows = list(csv.reader(io.StringIO(content)))

        assert rows[0] == [f"Session ID: {CODE}"]
        assert rows[1] == ["Faculty: Dr. Mehta"]
        assert rows[4][0] == "Student Name"
        assert rows[5][2] == "Present"
        assert rows[6][2] == "Please Check"
        assert rows[7][2:4] == ["Proxy", "Not in List"]
        assert rows[7][5:] == ["0.0%", "Yes"]

    def test_xlsx_export(self, recorded):
        workbook = load_workbook(io.BytesIO(recorded.export_attendance(CODE, ExportFormat.xlsx)))
        sheet = workbook["Attendance"]
        values = [row for row in sheet.iter_rows(values_only=True) if any(row)]

        assert values[0][0] == f"Session ID: {CODE}"
        header_idx = next(i for i, row in enumerate(values) if row[0] == "Student Name")
        assert len(values) - header_idx - 1 == 3

    def test_export_filename(self, recorded, clock):
        assert recorded.export_filename(CODE, ExportFormat.xlsx) == f"attendance_{CODE}_2024-03-04.xlsx"

    def test_export_unknown_session(self, service):
        with pytest.raises(HTTPException):
            service.export_attendance("000000")

    def test_created_at_order(self, service, clock):
        service.check_in(CODE, check_in(0, student="late"))
        clock.advance(seconds=-30)
        service.check_in(CODE, check_in(0, student="early"))
        records, _ = service.list_attendance(CODE)
        assert [r["student_id"] for r in records] == ["early", "late"]
        assert records[1]["created_at"] - records[0]["created_at"] == timedelta(seconds=30)
