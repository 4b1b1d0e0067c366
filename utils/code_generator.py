# utils/code_generator.py
import re
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

CREW_PREFIX = "CR"


def next_code_yearly(db: Session, model, field: str, prefix: str, width: int = 4, year: int | None = None) -> str:
    """
    Running number that restarts every year: PREFIX + YY + ####.
    e.g. CR250001, CR250002 ... CR260001
    """
    yy = (year or datetime.now().year) % 100
    base = f"{prefix}{yy:02d}"
    col = getattr(model, field)
    pat = re.compile(rf"^{re.escape(base)}(\d+)$")

    taken = db.scalars(select(col).where(col.like(f"{base}%"))).all()
    serials = [int(m.group(1)) for m in (pat.match(code or "") for code in taken) if m]
    return f"{base}{str(max(serials, default=0) + 1).zfill(width)}"


def next_crew_code(db: Session, model, year: int | None = None) -> str:
    return next_code_yearly(db, model, "crew_code", prefix=CREW_PREFIX, year=year)
