"""FastAPI routes for imported student lists."""

from fastapi import APIRouter, Depends, HTTPException, UploadFile, File
from sqlalchemy.orm import Session

from db import get_db
from rosters.service import RosterService
from rosters.schemas import RosterImportResponse, RosterResponse

router = APIRouter(prefix="/rosters", tags=["rosters"])


@router.post("/{faculty_id}/import", response_model=RosterImportResponse, status_code=201)
async def import_roster(
    faculty_id: str,
    file: UploadFile = File(..., description="CSV or XLSX with studentName, registrationNumber"),
    db: Session = Depends(get_db),
):
    """Import a student list for later sessions."""
    service = RosterService(db)
    return await service.import_roster(faculty_id, file)


@router.get("/{faculty_id}/latest", response_model=RosterResponse)
async def get_latest_roster(faculty_id: str, db: Session = Depends(get_db)):
    """Most recent student list of a faculty member."""
    roster = RosterService(db).latest_roster(faculty_id)
    if not roster:
        raise HTTPException(status_code=404, detail="No student list imported yet")
    return roster
