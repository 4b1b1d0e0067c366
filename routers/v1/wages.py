# routers/wages.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session, joinedload

from database import get_db
from generic_router import make_crud_router, get_or_404
from models import SalaryScale, WageDescription, VesselType, Rank
from schemas import (
    Envelope,
    SalaryScaleCreate, SalaryScaleUpdate, SalaryScaleOut,
    WageDescriptionCreate, WageDescriptionUpdate, WageDescriptionOut,
)
from utils.envelope import ok

SCALE_LINE = ("year", "vessel_type_id", "rank_id", "wage_id")


def scale_out(s: SalaryScale) -> SalaryScaleOut:
    return SalaryScaleOut(
        id=s.id,
        year=s.year,
        rank_id=s.rank_id,
        rank=s.rank.name if s.rank else None,
        wage_id=s.wage_id,
        wage=s.wage.wage_name if s.wage else None,
        wage_amount=s.wage_amount,
        vessel_type_id=s.vessel_type_id,
        vessel_type_name=s.vessel_type.name if s.vessel_type else None,
    )


def check_scale_refs(db: Session, data: dict):
    if data.get("rank_id") is not None:
        get_or_404(db, Rank, data["rank_id"], "Rank")
    if data.get("wage_id") is not None:
        get_or_404(db, WageDescription, data["wage_id"], "Wage description")
    if data.get("vessel_type_id") is not None:
        get_or_404(db, VesselType, data["vessel_type_id"], "Vessel type")


# /wages/scale : GET ?year= , POST , PATCH /{id} , DELETE /{id}
scale_router = make_crud_router(
    SalaryScale,
    prefix="wages/scale",
    create_schema=SalaryScaleCreate,
    update_schema=SalaryScaleUpdate,
    out_schema=SalaryScaleOut,
    label="Salary scale",
    list_order_by=[SalaryScale.year.desc(), SalaryScale.vessel_type_id, SalaryScale.rank_id, SalaryScale.wage_id],
    list_filters=["year"],
    unique_together=[SCALE_LINE],
    to_out=scale_out,
    before_create=check_scale_refs,
    before_update=lambda db, obj, data: check_scale_refs(db, data),
    tags=["wages"],
)

# /wages/description
description_router = make_crud_router(
    WageDescription,
    prefix="wages/description",
    create_schema=WageDescriptionCreate,
    update_schema=WageDescriptionUpdate,
    out_schema=WageDescriptionOut,
    label="Wage description",
    list_order_by=[WageDescription.wage_code.asc()],
    unique_together=[("wage_code",)],
    tags=["wages"],
)


router = APIRouter(prefix="/wages", tags=["wages"])


@router.get("/scale-v2", response_model=Envelope[List[SalaryScaleOut]])
def list_scale_v2(
    year: Optional[int] = Query(None),
    vessel_type_id: Optional[int] = Query(None, alias="vesselTypeId"),
    rank_id: Optional[int] = Query(None, alias="rankId"),
    wage_id: Optional[int] = Query(None, alias="wageId"),
    db: Session = Depends(get_db),
):
    q = db.query(SalaryScale).options(
        joinedload(SalaryScale.rank),
        joinedload(SalaryScale.wage),
        joinedload(SalaryScale.vessel_type),
    )
    if year is not None:
        q = q.filter(SalaryScale.year == year)
    if vessel_type_id is not None:
        q = q.filter(SalaryScale.vessel_type_id == vessel_type_id)
    if rank_id is not None:
        q = q.filter(SalaryScale.rank_id == rank_id)
    if wage_id is not None:
        q = q.filter(SalaryScale.wage_id == wage_id)
    rows = q.order_by(SalaryScale.year.desc(), SalaryScale.rank_id, SalaryScale.wage_id).all()
    return ok([scale_out(s) for s in rows])
