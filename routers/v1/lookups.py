# routers/lookups.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_, func
from sqlalchemy.orm import Session

from database import get_db
from models import Country, Port
from schemas import Envelope, CountryOut, PortOut
from utils.envelope import ok

lookups = APIRouter(prefix="/locations", tags=["locations"])


@lookups.get("/countries", response_model=Envelope[List[CountryOut]])
def list_countries(db: Session = Depends(get_db)):
    rows = db.query(Country).order_by(func.lower(Country.name).asc()).all()
    return ok([CountryOut.model_validate(r) for r in rows])


# ports, optionally narrowed to one country or a code / name search
@lookups.get("/ports", response_model=Envelope[List[PortOut]])
def list_ports(
    country_id: Optional[int] = Query(None, alias="countryId"),
    q: str = Query("", description="Search by port code or name (ILIKE)"),
    db: Session = Depends(get_db),
):
    qry = db.query(Port)
    if country_id is not None:
        qry = qry.filter(Port.country_id == country_id)
    if q:
        like = f"%{q.strip()}%"
        qry = qry.filter(or_(Port.code.ilike(like), Port.name.ilike(like)))
    rows = qry.order_by(func.lower(Port.name).asc()).all()
    return ok([PortOut.model_validate(r) for r in rows])
