# routers/vessels.py
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from database import get_db
from generic_router import make_crud_router
from models import Vessel, VesselType, Movement
from schemas import (
    Envelope, VesselCreate, VesselOut, VesselTypeCreate, VesselTypeUpdate, VesselTypeOut,
    OnBoardCrewOut, MovementOut,
    JoinCrewIn, PromoteCrewIn, RepatriateCrewIn, BatchRepatriateIn, BatchSignOnIn,
    BatchItemResult, BatchResult,
)
from services import movement_service as ms
from routers.v1.crew import movement_out
from utils.envelope import ok

router = APIRouter(prefix="/vessel", tags=["vessel"])


def roster_row(m: Movement) -> OnBoardCrewOut:
    c = m.crew
    return OnBoardCrewOut(
        movement_id=m.id,
        crew_id=c.id,
        crew_code=c.crew_code,
        first_name=c.first_name,
        middle_name=c.middle_name,
        last_name=c.last_name,
        rank_id=m.rank_id,
        rank=m.rank.name if m.rank else None,
        sign_on_date=m.transaction_date,
        port=m.port.name if m.port else None,
        promoted_at=m.promoted_at,
    )


def batch_result(results: List[dict]) -> BatchResult:
    items = [BatchItemResult(**r) for r in results]
    succeeded = sum(1 for r in items if r.success)
    return BatchResult(succeeded=succeeded, failed=len(items) - succeeded, results=items)


def batch_message(res: BatchResult, verb: str) -> str:
    return f"{verb}: {res.succeeded} succeeded, {res.failed} failed."


# ========== vessels ==========
@router.get("", response_model=Envelope[List[VesselOut]])
def list_vessels(active: Optional[bool] = Query(None), db: Session = Depends(get_db)):
    q = db.query(Vessel)
    if active is not None:
        q = q.filter(Vessel.is_active == active)
    return ok([VesselOut.model_validate(r) for r in q.order_by(Vessel.name.asc()).all()])


@router.post("", response_model=Envelope[VesselOut], status_code=201)
def create_vessel(payload: VesselCreate, db: Session = Depends(get_db)):
    code = payload.code.strip().upper()
    if db.query(Vessel).filter(Vessel.code == code).first():
        raise HTTPException(409, "Vessel code already exists")
    if payload.vessel_type_id is not None and not db.get(VesselType, payload.vessel_type_id):
        raise HTTPException(404, "Vessel type not found")
    v = Vessel(**{**payload.model_dump(), "code": code})
    db.add(v)
    db.commit()
    db.refresh(v)
    return ok(VesselOut.model_validate(v), "Vessel created")


# ========== vessel types ==========
def guard_type_delete(db: Session, t: VesselType):
    if db.query(Vessel).filter(Vessel.vessel_type_id == t.id).first():
        raise HTTPException(409, "Vessel type is assigned to a vessel")


type_router = make_crud_router(
    VesselType,
    prefix="vessel/type",
    create_schema=VesselTypeCreate,
    update_schema=VesselTypeUpdate,
    out_schema=VesselTypeOut,
    label="Vessel type",
    list_order_by=[VesselType.name.asc()],
    unique_together=[("code",)],
    before_delete=guard_type_delete,
    tags=["vessel"],
)


# ========== movements: batch ==========
@router.post("/crew/sign-on", response_model=Envelope[BatchResult])
def batch_sign_on(payload: BatchSignOnIn, db: Session = Depends(get_db)):
    results = ms.batch_join(
        db,
        vessel_id=payload.vessel_id,
        port_id=payload.port_id,
        sign_on_date=payload.sign_on_date,
        crew=payload.crew,
    )
    res = batch_result(results)
    return {"success": res.succeeded > 0, "data": res, "message": batch_message(res, "Sign-on completed")}


@router.post("/{vessel_id}/crew/repatriate", response_model=Envelope[BatchResult])
def batch_repatriate(vessel_id: int, payload: BatchRepatriateIn, db: Session = Depends(get_db)):
    results = ms.batch_repatriate(
        db,
        vessel_id=vessel_id,
        port_id=payload.port_id,
        sign_off_date=payload.sign_off_date,
        crew_codes=payload.crew_codes,
        country_id=payload.country_id,
    )
    res = batch_result(results)
    return {"success": res.succeeded > 0, "data": res, "message": batch_message(res, "Repatriation completed")}


# ========== roster / single movements ==========
@router.get("/{vessel_id}/crew", response_model=Envelope[List[OnBoardCrewOut]])
def list_vessel_crew(vessel_id: int, db: Session = Depends(get_db)):
    return ok([roster_row(m) for m in ms.vessel_roster(db, vessel_id)])


@router.post("/{vessel_id}/crew/{crew_code}/join", response_model=Envelope[MovementOut])
def join_crew(vessel_id: int, crew_code: str, payload: JoinCrewIn, db: Session = Depends(get_db)):
    m = ms.join_crew(
        db,
        crew_code=crew_code,
        vessel_id=vessel_id,
        port_id=payload.port_id,
        sign_on_date=payload.sign_on_date,
        rank_id=payload.rank_id,
    )
    db.refresh(m)
    return ok(movement_out(m), f"Crew {crew_code} joined {m.vessel.name}")


@router.post("/{vessel_id}/crew/{crew_code}/promote", response_model=Envelope[MovementOut])
def promote_crew(vessel_id: int, crew_code: str, payload: PromoteCrewIn, db: Session = Depends(get_db)):
    m = ms.promote_crew(
        db,
        crew_code=crew_code,
        vessel_id=vessel_id,
        rank_id=payload.rank_id,
        promotion_date=payload.promotion_date,
    )
    db.refresh(m)
    return ok(movement_out(m), f"Crew {crew_code} promoted to {m.rank.name}")


@router.post("/{vessel_id}/crew/{crew_code}/repatriate", response_model=Envelope[MovementOut])
def repatriate_crew(vessel_id: int, crew_code: str, payload: RepatriateCrewIn, db: Session = Depends(get_db)):
    m = ms.repatriate_crew(
        db,
        crew_code=crew_code,
        vessel_id=vessel_id,
        port_id=payload.port_id,
        sign_off_date=payload.sign_off_date,
        country_id=payload.country_id,
    )
    db.refresh(m)
    return ok(movement_out(m), f"Crew {crew_code} signed off {m.vessel.name}")
