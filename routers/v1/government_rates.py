# routers/government_rates.py
"""
SSS and PhilHealth contribution tables behind one endpoint.

The `type` field (body) or `?type=` (query) picks the table:
    SSS        -> sss_rates
    PHILHEALTH -> philhealth_rates
"""
from typing import Annotated, List, Optional, Union

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from pydantic import Field
from sqlalchemy.orm import Session

from database import get_db
from generic_router import create_row, update_row, delete_row, get_or_404
from models import SSSRate, PhilhealthRate
from schemas import (
    Envelope, GovernmentRateType,
    SSSRateCreate, SSSRateUpdate, SSSRateOut,
    PhilhealthRateCreate, PhilhealthRateUpdate, PhilhealthRateOut,
)
from utils.envelope import ok
from utils.validators import is_salary_band_ordered

router = APIRouter(prefix="/deduction/governmentRates", tags=["government rates"])

TABLES = {
    "SSS": (SSSRate, SSSRateOut, "SSS rate"),
    "PHILHEALTH": (PhilhealthRate, PhilhealthRateOut, "PhilHealth rate"),
}

RateCreate = Annotated[Union[SSSRateCreate, PhilhealthRateCreate], Field(discriminator="type")]
RateUpdate = Annotated[Union[SSSRateUpdate, PhilhealthRateUpdate], Field(discriminator="type")]
RateOut = Union[SSSRateOut, PhilhealthRateOut]


def table_for(rate_type: str):
    try:
        return TABLES[rate_type.upper()]
    except KeyError:
        raise HTTPException(400, f"Unknown rate type {rate_type}")


@router.get("", response_model=Envelope[List[RateOut]])
def list_rates(
    type: GovernmentRateType = Query("SSS"),
    year: Optional[int] = Query(None),
    db: Session = Depends(get_db),
):
    Model, Out, _ = table_for(type)
    q = db.query(Model)
    if year is not None:
        q = q.filter(Model.year == year)
    rows = q.order_by(Model.year.desc(), Model.salary_from.asc()).all()
    return ok([Out.model_validate(r) for r in rows])


@router.post("", response_model=Envelope[RateOut], status_code=201)
def create_rate(payload: RateCreate = Body(...), db: Session = Depends(get_db)):
    Model, Out, label = table_for(payload.type)
    obj = create_row(db, Model, payload.model_dump())
    return ok(Out.model_validate(obj), f"{label} created")


@router.patch("/{rate_id}", response_model=Envelope[RateOut])
def update_rate(rate_id: int, payload: RateUpdate = Body(...), db: Session = Depends(get_db)):
    Model, Out, label = table_for(payload.type)
    obj = get_or_404(db, Model, rate_id, label)
    data = payload.model_dump(exclude_unset=True, exclude={"type"})

    # one side of the band may come from the stored row
    lo = data.get("salary_from", obj.salary_from)
    hi = data.get("salary_to", obj.salary_to)
    if lo is not None and hi is not None and not is_salary_band_ordered(lo, hi):
        raise HTTPException(422, "Salary From must be less than or equal to Salary To")

    obj = update_row(db, obj, data)
    return ok(Out.model_validate(obj), f"{label} updated")


@router.delete("/{rate_id}", response_model=Envelope[None])
def delete_rate(
    rate_id: int,
    type: GovernmentRateType = Query(...),
    db: Session = Depends(get_db),
):
    Model, _, label = table_for(type)
    delete_row(db, get_or_404(db, Model, rate_id, label))
    return ok(None, f"{label} deleted")
