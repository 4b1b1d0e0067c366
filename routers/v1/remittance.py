# routers/remittance.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from database import get_db
from generic_router import commit_or_409
from models import RemittanceEntry
from schemas import Envelope, RemittanceEntryCreate, RemittanceEntryOut, StatusUpdate
from services.movement_service import get_crew
from utils.envelope import ok

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/remittance", tags=["remittance"])


def get_entry(db: Session, crew_code: str, entry_id: int) -> RemittanceEntry:
    crew = get_crew(db, crew_code)
    e = db.get(RemittanceEntry, entry_id)
    if not e or e.crew_id != crew.id:
        raise HTTPException(404, "Remittance entry not found")
    return e


@router.get("/{crew_code}", response_model=Envelope[List[RemittanceEntryOut]])
def list_remittances(
    crew_code: str,
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None),
    db: Session = Depends(get_db),
):
    crew = get_crew(db, crew_code)
    q = db.query(RemittanceEntry).filter(RemittanceEntry.crew_id == crew.id)
    if month is not None:
        q = q.filter(RemittanceEntry.month == month)
    if year is not None:
        q = q.filter(RemittanceEntry.year == year)
    rows = q.order_by(RemittanceEntry.year.desc(), RemittanceEntry.month.desc(), RemittanceEntry.id).all()
    return ok([RemittanceEntryOut.model_validate(r) for r in rows])


@router.post("/{crew_code}", response_model=Envelope[RemittanceEntryOut], status_code=201)
def add_remittance(crew_code: str, payload: RemittanceEntryCreate, db: Session = Depends(get_db)):
    crew = get_crew(db, crew_code)
    e = RemittanceEntry(crew_id=crew.id, **payload.model_dump())
    db.add(e)
    commit_or_409(db, "Add remittance")
    db.refresh(e)
    logger.info("remittance %s added for %s to %s", e.id, crew_code, e.allottee_name)
    return ok(RemittanceEntryOut.model_validate(e), "Remittance added")


@router.patch("/{crew_code}/{entry_id}", response_model=Envelope[RemittanceEntryOut])
def update_remittance_status(crew_code: str, entry_id: int, payload: StatusUpdate, db: Session = Depends(get_db)):
    e = get_entry(db, crew_code, entry_id)
    e.status = int(payload.status)
    commit_or_409(db, "Update remittance")
    db.refresh(e)
    return ok(RemittanceEntryOut.model_validate(e), "Remittance status updated")


@router.delete("/{crew_code}/{entry_id}", response_model=Envelope[None])
def delete_remittance(crew_code: str, entry_id: int, db: Session = Depends(get_db)):
    e = get_entry(db, crew_code, entry_id)
    db.delete(e)
    commit_or_409(db, "Delete remittance")
    logger.info("remittance %s of %s deleted", entry_id, crew_code)
    return ok(None, "Remittance deleted")
