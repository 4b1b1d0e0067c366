# routers/deductions.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from database import get_db
from generic_router import commit_or_409
from models import DeductionEntry
from schemas import Envelope, DeductionEntryCreate, DeductionEntryOut, StatusUpdate
from services.movement_service import get_crew
from utils.envelope import ok

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/deductions", tags=["deductions"])


@router.get("/{crew_code}/entries", response_model=Envelope[List[DeductionEntryOut]])
def list_entries(
    crew_code: str,
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None),
    db: Session = Depends(get_db),
):
    crew = get_crew(db, crew_code)
    q = db.query(DeductionEntry).filter(DeductionEntry.crew_id == crew.id)
    if month is not None:
        q = q.filter(DeductionEntry.month == month)
    if year is not None:
        q = q.filter(DeductionEntry.year == year)
    rows = q.order_by(DeductionEntry.year.desc(), DeductionEntry.month.desc(), DeductionEntry.id).all()
    return ok([DeductionEntryOut.model_validate(r) for r in rows])


@router.post("/{crew_code}/entries", response_model=Envelope[DeductionEntryOut], status_code=201)
def add_entry(crew_code: str, payload: DeductionEntryCreate, db: Session = Depends(get_db)):
    crew = get_crew(db, crew_code)
    e = DeductionEntry(crew_id=crew.id, **payload.model_dump())
    db.add(e)
    commit_or_409(db, "Add deduction")
    db.refresh(e)
    logger.info("deduction %s added for %s (%s-%02d)", e.id, crew_code, e.year, e.month)
    return ok(DeductionEntryOut.model_validate(e), "Deduction added")


@router.patch("/{crew_code}/entries/{entry_id}", response_model=Envelope[DeductionEntryOut])
def update_entry_status(crew_code: str, entry_id: int, payload: StatusUpdate, db: Session = Depends(get_db)):
    crew = get_crew(db, crew_code)
    e = db.get(DeductionEntry, entry_id)
    if not e or e.crew_id != crew.id:
        raise HTTPException(404, "Deduction entry not found")
    e.status = int(payload.status)
    commit_or_409(db, "Update deduction")
    db.refresh(e)
    logger.info("deduction %s of %s set to %s", entry_id, crew_code, payload.status.name)
    return ok(DeductionEntryOut.model_validate(e), "Deduction status updated")
