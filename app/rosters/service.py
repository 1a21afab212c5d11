"""Business logic for imported student lists."""

import csv
import io
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple
from datetime import datetime

from fastapi import HTTPException, UploadFile
from openpyxl import load_workbook
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.orm import Session

from classifier import normalize_registration
from db import as_utc, utcnow
from rosters.models import RosterList, RosterListEntry
from rosters.schemas import RosterImportResponse
from schemas import StudentEntry

logger = logging.getLogger(__name__)

# normalized header -> field
HEADER_ALIASES = {
    "studentname": "student_name",
    "name": "student_name",
    "registrationnumber": "registration_number",
    "regno": "registration_number",
}
REQUIRED_FIELDS = {"student_name", "registration_number"}


def _normalize_header(header: Any) -> str:
    text = "" if header is None else str(header)
    return text.strip().lower().replace(" ", "").replace("_", "")


def map_headers(headers: Sequence[Any]) -> Dict[int, str]:
    """Map column positions to roster fields; the first matching column wins."""
    mapping: Dict[int, str] = {}
    for idx, header in enumerate(headers):
        field = HEADER_ALIASES.get(_normalize_header(header))
        if field and field not in mapping.values():
            mapping[idx] = field
    return mapping


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    # Excel stores numeric registration numbers as floats
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def _read_csv_rows(raw: bytes) -> Iterable[Sequence[Any]]:
    try:
        text_csv = raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="The CSV file must be UTF-8 encoded")
    return list(csv.reader(io.StringIO(text_csv)))


def _read_xlsx_rows(raw: bytes) -> Iterable[Sequence[Any]]:
    try:
        workbook = load_workbook(io.BytesIO(raw), read_only=True, data_only=True)
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Error parsing Excel file: {str(e)}")
    try:
        sheet = workbook.worksheets[0]
        return [list(row) for row in sheet.iter_rows(values_only=True)]
    finally:
        workbook.close()


def parse_roster_rows(rows: Iterable[Sequence[Any]]) -> Tuple[List[StudentEntry], List[str]]:
    """Validate tabular rows (header first) into unique student entries.

    Returns the accepted entries and one error message per rejected line.
    Line numbers are 1-based and count the header.
    """
    iterator = iter(rows)
    try:
        headers = next(iterator)
    except StopIteration:
        raise HTTPException(status_code=400, detail="The file is empty")

    mapping = map_headers(headers)
    missing = REQUIRED_FIELDS - set(mapping.values())
    if missing:
        raise HTTPException(
            status_code=400,
            detail=(
                "Missing columns: "
                + ", ".join(sorted(missing))
                + ". Expected 'studentName' and 'registrationNumber'"
            ),
        )

    entries: List[StudentEntry] = []
    errors: List[str] = []
    seen = set()

    for line, row in enumerate(iterator, start=2):
        values = {field: "" for field in REQUIRED_FIELDS}
        for idx, field in mapping.items():
            if idx < len(row):
                values[field] = _cell_text(row[idx])

        if not any(values.values()):
            continue  # blank line

        try:
            entry = StudentEntry(**values)
        except ValidationError as e:
            messages = "; ".join(err["msg"] for err in e.errors())
            errors.append(f"Line {line}: {messages}")
            continue

        key = normalize_registration(entry.registration_number)
        if key in seen:
            errors.append(f"Line {line}: duplicate registration number '{entry.registration_number}'")
            continue
        seen.add(key)
        entries.append(entry)

    return entries, errors


def parse_roster_file(filename: str, raw: bytes) -> Tuple[List[StudentEntry], List[str]]:
    """Parse an uploaded CSV or XLSX student list."""
    name = (filename or "").lower()
    if name.endswith(".csv"):
        rows = _read_csv_rows(raw)
    elif name.endswith(".xlsx"):
        rows = _read_xlsx_rows(raw)
    else:
        raise HTTPException(status_code=400, detail="The file must be a CSV or XLSX file")
    return parse_roster_rows(rows)


class RosterService:
    """Service class for student list operations."""

    def __init__(self, db: Session, clock: Callable[[], datetime] = utcnow):
        self.db = db
        self.clock = clock

    def save_roster(
        self,
        faculty_id: str,
        students: List[StudentEntry],
        source_filename: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Store a new list for a faculty member."""
        try:
            roster = RosterList(
                faculty_id=faculty_id,
                source_filename=source_filename,
                student_count=len(students),
                imported_at=self.clock(),
                entries=[
                    RosterListEntry(
                        student_name=s.student_name,
                        registration_number=s.registration_number,
                    )
                    for s in students
                ],
            )
            self.db.add(roster)
            self.db.commit()
            self.db.refresh(roster)
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=400, detail=f"Error saving student list: {str(e)}"
            )

        logger.info("Stored student list %s for faculty %s (%d students)", roster.id, faculty_id, len(students))
        return self._to_dict(roster)

    def latest_roster(self, faculty_id: str) -> Optional[Dict[str, Any]]:
        """Most recently imported list of a faculty member."""
        roster = self.db.execute(
            select(RosterList)
            .where(RosterList.faculty_id == faculty_id)
            .order_by(RosterList.imported_at.desc(), RosterList.id.desc())
            .limit(1)
        ).scalars().first()
        return self._to_dict(roster) if roster else None

    async def import_roster(self, faculty_id: str, upload_file: UploadFile) -> RosterImportResponse:
        """Parse an uploaded CSV/XLSX file and store it as the faculty's latest list."""
        if not upload_file or not upload_file.filename:
            raise HTTPException(status_code=400, detail="No file uploaded")

        raw = await upload_file.read()
        students, errors = parse_roster_file(upload_file.filename, raw)
        if not students:
            logger.warning("Rejected student list %r: no valid rows", upload_file.filename)
            raise HTTPException(
                status_code=400,
                detail="No valid student data found. Please ensure columns are named "
                "'studentName' and 'registrationNumber'",
            )

        roster = self.save_roster(faculty_id, students, upload_file.filename)
        return RosterImportResponse(
            roster_id=roster["id"],
            success_count=len(students),
            error_count=len(errors),
            errors=errors,
            message=f"Import finished: {len(students)} students imported, {len(errors)} errors",
        )

    @staticmethod
    def _to_dict(roster: RosterList) -> Dict[str, Any]:
        return {
            "id": roster.id,
            "faculty_id": roster.faculty_id,
            "source_filename": roster.source_filename,
            "student_count": roster.student_count,
            "imported_at": as_utc(roster.imported_at),
            "students": [
                {"student_name": e.student_name, "registration_number": e.registration_number}
                for e in roster.entries
            ],
        }
