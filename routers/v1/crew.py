# routers/crew.py
import base64
import binascii
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from config import settings
from database import get_db
from models import CrewMember, Rank, Movement, SIGN_ON
from schemas import (
    Envelope, CrewCreate, CrewListItem, CrewBasicOut, RankOut,
    MovementOut, EditMovementIn,
)
from services import movement_service as ms
from services.movement_export import build_movement_workbook
from utils.code_generator import next_crew_code
from utils.envelope import ok

router = APIRouter(prefix="/crew", tags=["crew"])


def crew_item(c: CrewMember) -> dict:
    return {
        "id": c.id,
        "crew_code": c.crew_code,
        "last_name": c.last_name,
        "first_name": c.first_name,
        "middle_name": c.middle_name,
        "rank_id": c.rank_id,
        "rank": c.rank.name if c.rank else None,
        "crew_status_id": c.crew_status_id,
        "current_vessel_id": c.current_vessel_id,
        "is_active": c.is_active,
    }


def movement_out(m: Movement) -> MovementOut:
    return MovementOut(
        id=m.id,
        crew_code=m.crew.crew_code,
        vessel_id=m.vessel_id,
        vessel_name=m.vessel.name if m.vessel else None,
        rank_id=m.rank_id,
        rank=m.rank.name if m.rank else None,
        transaction_type=m.transaction_type,
        transaction_date=m.transaction_date,
        port_id=m.port_id,
        port=m.port.name if m.port else None,
        sign_on_movement_id=m.sign_on_movement_id,
        promoted_at=m.promoted_at,
        is_open=m.is_open,
    )


@router.get("/list", response_model=Envelope[List[CrewListItem]])
def list_crew(
    status: Optional[int] = Query(None, description="1 = On board, 2 = Off board"),
    q: Optional[str] = Query(None, description="Search first / last name or crew code"),
    limit: int = Query(settings.crew_search_limit, ge=1, le=1000),
    db: Session = Depends(get_db),
):
    query = db.query(CrewMember).options(joinedload(CrewMember.rank))
    if status is not None:
        query = query.filter(CrewMember.crew_status_id == status)
    if q and q.strip():
        like = f"%{q.strip()}%"
        query = query.filter(or_(
            CrewMember.first_name.ilike(like),
            CrewMember.last_name.ilike(like),
            CrewMember.crew_code.ilike(like),
        ))
    rows = query.order_by(CrewMember.last_name.asc(), CrewMember.first_name.asc()).limit(limit).all()
    return ok([CrewListItem.model_validate(crew_item(c)) for c in rows])


@router.get("/rank/list", response_model=Envelope[List[RankOut]])
def list_ranks(db: Session = Depends(get_db)):
    rows = db.query(Rank).filter(Rank.is_active == True).order_by(Rank.id).all()
    return ok([RankOut.model_validate(r) for r in rows])


@router.get("/basic/{crew_code}", response_model=Envelope[CrewBasicOut])
def get_crew_basic(crew_code: str, db: Session = Depends(get_db)):
    c = ms.get_crew(db, crew_code)
    open_m = ms.find_open_movement(db, c.id)
    data = {
        **{col.key: getattr(c, col.key) for col in CrewMember.__table__.columns
           if col.key not in ("profile_image", "profile_image_content_type")},
        **crew_item(c),
        "current_vessel": c.current_vessel.name if c.current_vessel else None,
        "sign_on_date": open_m.transaction_date if open_m else None,
        "has_profile_image": c.profile_image is not None,
    }
    return ok(CrewBasicOut.model_validate(data))


@router.post("", response_model=Envelope[CrewBasicOut], status_code=201)
def create_crew(payload: CrewCreate, db: Session = Depends(get_db)):
    raw_code = (payload.crew_code or "").strip().upper()
    autogen = raw_code in ("", "AUTO", "AUTOGEN")
    crew_code = next_crew_code(db, CrewMember) if autogen else raw_code

    if db.query(CrewMember).filter(CrewMember.crew_code == crew_code).first():
        raise HTTPException(status_code=409, detail="Crew code already exists")
    ms.get_rank(db, payload.rank_id)

    data = payload.model_dump(exclude={"crew_code", "profile_image_base64", "profile_image_content_type"})
    c = CrewMember(crew_code=crew_code, **data)
    if payload.profile_image_base64:
        try:
            c.profile_image = base64.b64decode(payload.profile_image_base64, validate=True)
        except (binascii.Error, ValueError):
            raise HTTPException(400, "Profile image is not valid base64")
        c.profile_image_content_type = payload.profile_image_content_type or "image/jpeg"

    db.add(c)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(409, "Crew code already exists")
    db.refresh(c)
    return get_crew_basic(crew_code, db)


@router.get("/{crew_code}/image")
def get_crew_image(crew_code: str, db: Session = Depends(get_db)):
    c = ms.get_crew(db, crew_code)
    if c.profile_image is None:
        raise HTTPException(404, "Crew has no profile image")
    return Response(content=c.profile_image, media_type=c.profile_image_content_type or "application/octet-stream")


@router.get("/{crew_code}/movements", response_model=Envelope[List[MovementOut]])
def list_crew_movements(crew_code: str, db: Session = Depends(get_db)):
    return ok([movement_out(m) for m in ms.crew_movements(db, crew_code)])


@router.get("/{crew_code}/movements/export")
def export_crew_movements(crew_code: str, db: Session = Depends(get_db)):
    crew = ms.get_crew(db, crew_code)
    content = build_movement_workbook(crew, ms.crew_movements(db, crew_code))
    return Response(
        content=content,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f'attachment; filename="movement_{crew_code}.xlsx"'},
    )


@router.patch("/{crew_code}/movements/{movement_id}", response_model=Envelope[MovementOut])
def update_crew_movement(crew_code: str, movement_id: int, payload: EditMovementIn, db: Session = Depends(get_db)):
    m = ms.edit_movement(
        db,
        crew_code=crew_code,
        movement_id=movement_id,
        movement_date=payload.movement_date,
        rank_id=payload.rank_id,
        vessel_id=payload.vessel_id,
    )
    kind = "Sign-on" if m.transaction_type == SIGN_ON else "Sign-off"
    return ok(movement_out(m), f"{kind} movement updated")
