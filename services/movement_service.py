# services/movement_service.py
"""
Crew vessel-assignment lifecycle.

    OffBoard --join--> OnBoard --repatriate--> OffBoard --join--> ...
    OnBoard  --promote--> OnBoard (rank change only)

Every sign-on creates a Movement row (transaction_type=1). A sign-off creates a
second row (transaction_type=2) pointing back at the sign-on it closes. A crew
member is on board while one sign-on has no matching sign-off; crew_status_id
and current_vessel_id mirror that.

Functions raise MovementError (a ValueError) carrying the HTTP status the
router should answer with.
"""
import logging
from datetime import date
from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, aliased, joinedload

from models import (
    CrewMember, Movement, Port, Rank, Vessel,
    CREW_ON_BOARD, CREW_OFF_BOARD, SIGN_ON, SIGN_OFF,
)
from utils.validators import is_rank_change

logger = logging.getLogger(__name__)


class MovementError(ValueError):
    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


# ---------- lookups ----------
def get_crew(db: Session, crew_code: str) -> CrewMember:
    crew = db.query(CrewMember).filter(CrewMember.crew_code == crew_code).first()
    if not crew:
        raise MovementError(f"Crew {crew_code} not found", 404)
    return crew


def get_crew_by_id(db: Session, crew_id: int) -> CrewMember:
    crew = db.get(CrewMember, crew_id)
    if not crew:
        raise MovementError(f"Crew id {crew_id} not found", 404)
    return crew


def get_vessel(db: Session, vessel_id: int, active_only: bool = True) -> Vessel:
    vessel = db.get(Vessel, vessel_id)
    if not vessel:
        raise MovementError(f"Vessel {vessel_id} not found", 404)
    if active_only and not vessel.is_active:
        raise MovementError(f"Vessel {vessel.name} is not active", 400)
    return vessel


def get_rank(db: Session, rank_id: int) -> Rank:
    rank = db.get(Rank, rank_id)
    if not rank:
        raise MovementError(f"Rank {rank_id} not found", 404)
    return rank


def get_port(db: Session, port_id: int) -> Port:
    port = db.get(Port, port_id)
    if not port:
        raise MovementError(f"Port {port_id} not found", 404)
    return port


def open_sign_ons(db: Session):
    """Query of sign-on rows that no sign-off row points at"""
    closing = aliased(Movement)
    closed_ids = select(closing.sign_on_movement_id).where(closing.sign_on_movement_id.is_not(None))
    return (
        db.query(Movement)
        .filter(Movement.transaction_type == SIGN_ON, Movement.id.not_in(closed_ids))
    )


def find_open_movement(db: Session, crew_id: int, vessel_id: Optional[int] = None) -> Optional[Movement]:
    q = open_sign_ons(db).filter(Movement.crew_id == crew_id)
    if vessel_id is not None:
        q = q.filter(Movement.vessel_id == vessel_id)
    return q.order_by(Movement.transaction_date.desc(), Movement.id.desc()).first()


def last_sign_off(db: Session, crew_id: int) -> Optional[Movement]:
    return (
        db.query(Movement)
        .filter(Movement.crew_id == crew_id, Movement.transaction_type == SIGN_OFF)
        .order_by(Movement.transaction_date.desc(), Movement.id.desc())
        .first()
    )


def _finish(db: Session, commit: bool):
    if commit:
        db.commit()
    else:
        db.flush()


# ---------- transitions ----------
def join_crew(
    db: Session,
    *,
    crew_code: str,
    vessel_id: int,
    port_id: int,
    sign_on_date: date,
    rank_id: Optional[int] = None,
    commit: bool = True,
) -> Movement:
    """OffBoard -> OnBoard"""
    crew = get_crew(db, crew_code)
    vessel = get_vessel(db, vessel_id)
    port = get_port(db, port_id)

    if not crew.is_active:
        raise MovementError(f"Crew {crew_code} is not active", 400)
    if crew.crew_status_id != CREW_OFF_BOARD or find_open_movement(db, crew.id):
        raise MovementError(f"Crew {crew_code} is already on board", 409)

    rank_id = rank_id or crew.rank_id
    if not rank_id:
        raise MovementError(f"Crew {crew_code} has no rank; select a rank", 400)
    rank = get_rank(db, rank_id)

    previous = last_sign_off(db, crew.id)
    if previous and sign_on_date < previous.transaction_date:
        raise MovementError("Sign-on date cannot be before the last sign-off date", 400)

    m = Movement(
        crew_id=crew.id,
        vessel_id=vessel.id,
        rank_id=rank.id,
        transaction_type=SIGN_ON,
        transaction_date=sign_on_date,
        port_id=port.id,
        country_id=port.country_id,
    )
    db.add(m)
    crew.crew_status_id = CREW_ON_BOARD
    crew.current_vessel_id = vessel.id
    crew.rank_id = rank.id
    _finish(db, commit)
    logger.info("crew %s joined vessel %s as %s on %s", crew_code, vessel.code, rank.code, sign_on_date)
    return m


def promote_crew(
    db: Session,
    *,
    crew_code: str,
    vessel_id: int,
    rank_id: int,
    promotion_date: date,
    commit: bool = True,
) -> Movement:
    """OnBoard -> OnBoard with a new rank; sign-on date stays as is"""
    crew = get_crew(db, crew_code)
    vessel = get_vessel(db, vessel_id, active_only=False)

    open_m = find_open_movement(db, crew.id, vessel.id)
    if not open_m:
        raise MovementError(f"Crew {crew_code} is not on board {vessel.name}", 409)
    if not is_rank_change(rank_id, crew.rank_id):
        raise MovementError("The selected rank is the same as the current rank.", 400)
    rank = get_rank(db, rank_id)
    if promotion_date < open_m.transaction_date:
        raise MovementError("Promotion date cannot be before the sign-on date", 400)

    old_rank_id = crew.rank_id
    crew.rank_id = rank.id
    open_m.rank_id = rank.id
    open_m.promoted_at = promotion_date
    _finish(db, commit)
    logger.info("crew %s promoted rank %s -> %s on %s", crew_code, old_rank_id, rank.id, promotion_date)
    return open_m


def repatriate_crew(
    db: Session,
    *,
    crew_code: str,
    vessel_id: int,
    port_id: int,
    sign_off_date: date,
    country_id: Optional[int] = None,
    commit: bool = True,
) -> Movement:
    """OnBoard -> OffBoard; closes the open sign-on on this vessel"""
    crew = get_crew(db, crew_code)
    vessel = get_vessel(db, vessel_id, active_only=False)
    port = get_port(db, port_id)

    open_m = find_open_movement(db, crew.id, vessel.id)
    if not open_m:
        raise MovementError(f"Crew {crew_code} is not on board {vessel.name}", 409)
    if sign_off_date < open_m.transaction_date:
        raise MovementError("Sign-off date cannot be before the sign-on date", 400)

    off = Movement(
        crew_id=crew.id,
        vessel_id=vessel.id,
        rank_id=open_m.rank_id,
        transaction_type=SIGN_OFF,
        transaction_date=sign_off_date,
        port_id=port.id,
        country_id=country_id or port.country_id,
        sign_on=open_m,
    )
    db.add(off)
    crew.crew_status_id = CREW_OFF_BOARD
    crew.current_vessel_id = None
    _finish(db, commit)
    logger.info("crew %s signed off vessel %s on %s", crew_code, vessel.code, sign_off_date)
    return off


# ---------- batches ----------
def _run_item(db: Session, fn, **kwargs) -> dict:
    """One batch item inside its own savepoint; failures do not touch siblings"""
    try:
        with db.begin_nested():
            m = fn(db, commit=False, **kwargs)
        return {"success": True, "movement_id": m.id, "message": None}
    except MovementError as e:
        logger.warning("batch item %s rejected: %s", kwargs.get("crew_code"), e.message)
        return {"success": False, "movement_id": None, "message": e.message}


def batch_join(
    db: Session,
    *,
    vessel_id: int,
    port_id: int,
    sign_on_date: date,
    crew: Iterable,
) -> List[dict]:
    """
    Sign several crew on to one vessel / port / date.
    `crew` items carry crew_id and rank_id (0 = keep the crew's rank).
    Returns one result per item; items succeed or fail independently.
    """
    get_vessel(db, vessel_id)
    get_port(db, port_id)

    results = []
    for item in crew:
        crew_id, rank_id = item.crew_id, item.rank_id
        try:
            member = get_crew_by_id(db, crew_id)
        except MovementError as e:
            results.append({"crew_id": crew_id, "crew_code": None, "success": False,
                            "movement_id": None, "message": e.message})
            continue
        res = _run_item(
            db, join_crew,
            crew_code=member.crew_code,
            vessel_id=vessel_id,
            port_id=port_id,
            sign_on_date=sign_on_date,
            rank_id=rank_id or None,
        )
        results.append({"crew_id": crew_id, "crew_code": member.crew_code, **res})
    db.commit()
    return results


def batch_repatriate(
    db: Session,
    *,
    vessel_id: int,
    port_id: int,
    sign_off_date: date,
    crew_codes: Iterable[str],
    country_id: Optional[int] = None,
) -> List[dict]:
    get_vessel(db, vessel_id, active_only=False)
    get_port(db, port_id)

    results = []
    for code in crew_codes:
        res = _run_item(
            db, repatriate_crew,
            crew_code=code,
            vessel_id=vessel_id,
            port_id=port_id,
            sign_off_date=sign_off_date,
            country_id=country_id,
        )
        crew = db.query(CrewMember).filter(CrewMember.crew_code == code).first()
        results.append({"crew_id": crew.id if crew else None, "crew_code": code, **res})
    db.commit()
    return results


# ---------- edit ----------
def edit_movement(
    db: Session,
    *,
    crew_code: str,
    movement_id: int,
    movement_date: date,
    rank_id: Optional[int] = None,
    vessel_id: Optional[int] = None,
) -> Movement:
    """
    Direct correction of one movement row. movement_date replaces the date of
    the row's own transaction type (sign-on date on type 1, sign-off date on
    type 2). A vessel change is applied to the whole sign-on/sign-off pair.
    """
    crew = get_crew(db, crew_code)
    m = db.get(Movement, movement_id)
    if not m or m.crew_id != crew.id:
        raise MovementError(f"Movement {movement_id} not found for crew {crew_code}", 404)

    if m.transaction_type == SIGN_ON:
        if m.sign_off is not None and movement_date > m.sign_off.transaction_date:
            raise MovementError("Sign-on date cannot be after the sign-off date", 400)
    else:
        if m.sign_on is not None and movement_date < m.sign_on.transaction_date:
            raise MovementError("Sign-off date cannot be before the sign-on date", 400)
    m.transaction_date = movement_date

    if rank_id is not None and rank_id != m.rank_id:
        get_rank(db, rank_id)
        m.rank_id = rank_id
        if m.is_open:
            crew.rank_id = rank_id

    if vessel_id is not None and vessel_id != m.vessel_id:
        get_vessel(db, vessel_id, active_only=False)
        pair = m.sign_off if m.transaction_type == SIGN_ON else m.sign_on
        m.vessel_id = vessel_id
        if pair is not None:
            pair.vessel_id = vessel_id
        if m.is_open:
            crew.current_vessel_id = vessel_id

    db.commit()
    db.refresh(m)
    logger.info("movement %s of crew %s edited (date=%s rank=%s vessel=%s)",
                movement_id, crew_code, movement_date, rank_id, vessel_id)
    return m


# ---------- read models ----------
def vessel_roster(db: Session, vessel_id: int) -> List[Movement]:
    """Open sign-ons on a vessel, i.e. the crew currently on board"""
    get_vessel(db, vessel_id, active_only=False)
    return (
        open_sign_ons(db)
        .options(joinedload(Movement.crew), joinedload(Movement.rank), joinedload(Movement.port))
        .filter(Movement.vessel_id == vessel_id)
        .order_by(Movement.rank_id.asc(), Movement.transaction_date.asc())
        .all()
    )


def crew_movements(db: Session, crew_code: str) -> List[Movement]:
    crew = get_crew(db, crew_code)
    return (
        db.query(Movement)
        .options(joinedload(Movement.vessel), joinedload(Movement.rank), joinedload(Movement.port))
        .filter(Movement.crew_id == crew.id)
        .order_by(Movement.transaction_date.asc(), Movement.id.asc())
        .all()
    )
