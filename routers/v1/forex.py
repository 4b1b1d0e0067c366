# routers/forex.py
import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session

from generic_router import make_crud_router
from models import ForexRate
from schemas import ForexCreate, ForexUpdate, ForexOut
from utils.timezone import is_forex_locked

logger = logging.getLogger(__name__)

MONTHS = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]


def forex_out(r: ForexRate) -> ForexOut:
    return ForexOut(
        id=r.id,
        year=r.year,
        month=r.month,
        exchange_rate=r.exchange_rate,
        is_locked=is_forex_locked(r.year, r.month),
    )


def ensure_unlocked(year: int, month: int):
    if is_forex_locked(year, month):
        logger.warning("rejected change to locked forex %s-%02d", year, month)
        raise HTTPException(409, f"Forex rate for {MONTHS[month - 1]} {year} is locked")


def guard_update(db: Session, obj: ForexRate, data: dict):
    ensure_unlocked(obj.year, obj.month)
    # moving an open row into a closed month is also refused
    ensure_unlocked(data.get("year") or obj.year, data.get("month") or obj.month)


def guard_delete(db: Session, obj: ForexRate):
    ensure_unlocked(obj.year, obj.month)


router = make_crud_router(
    ForexRate,
    prefix="wages/forex",
    create_schema=ForexCreate,
    update_schema=ForexUpdate,
    out_schema=ForexOut,
    label="Forex rate",
    list_order_by=[ForexRate.year.desc(), ForexRate.month.desc()],
    list_filters=["year"],
    unique_together=[("year", "month")],
    to_out=forex_out,
    before_update=guard_update,
    before_delete=guard_delete,
    tags=["forex"],
)
