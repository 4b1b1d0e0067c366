# routers/payroll.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session, joinedload

from database import get_db
from models import PayrollHistory
from schemas import Envelope, PayrollHistoryOut
from services.movement_service import get_crew
from utils.envelope import ok

router = APIRouter(prefix="/crew", tags=["payroll"])


def payroll_out(p: PayrollHistory) -> PayrollHistoryOut:
    return PayrollHistoryOut(
        id=p.id,
        crew_id=p.crew_id,
        vessel_id=p.vessel_id,
        vessel_name=p.vessel.name if p.vessel else None,
        payroll_month=p.payroll_month,
        payroll_year=p.payroll_year,
        basic_wage=p.basic_wage,
        fixed_ot=p.fixed_ot,
        guaranteed_ot=p.guaranteed_ot,
        dollar_gross=p.dollar_gross,
        peso_gross=p.peso_gross,
        total_deduction=p.total_deduction,
        net_wage=p.net_wage,
    )


# read-only: rows are posted by the payroll run
@router.get("/{crew_code}/payrolls", response_model=Envelope[List[PayrollHistoryOut]])
def list_crew_payrolls(
    crew_code: str,
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None),
    db: Session = Depends(get_db),
):
    crew = get_crew(db, crew_code)
    q = (
        db.query(PayrollHistory)
        .options(joinedload(PayrollHistory.vessel))
        .filter(PayrollHistory.crew_id == crew.id)
    )
    if month is not None:
        q = q.filter(PayrollHistory.payroll_month == month)
    if year is not None:
        q = q.filter(PayrollHistory.payroll_year == year)
    rows = q.order_by(PayrollHistory.payroll_year.desc(), PayrollHistory.payroll_month.desc()).all()
    return ok([payroll_out(p) for p in rows])
