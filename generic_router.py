import logging
from typing import Callable, List, Optional, Sequence, Type

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database import get_db
from schemas import Envelope
from utils.envelope import ok, sa_update_from_dict

logger = logging.getLogger(__name__)


def check_unique(db: Session, Model, data: dict, fields: Sequence[str], exclude_id: Optional[int] = None):
    """409 when another row already holds the same values for all `fields`"""
    if not fields or not all(data.get(f) is not None for f in fields):
        return
    stmt = select(Model).where(*[getattr(Model, f) == data[f] for f in fields])
    exists = db.scalars(stmt).first()
    if exists and exists.id != exclude_id:
        raise HTTPException(status_code=409, detail=f"{', '.join(fields)} already exists")


def commit_or_409(db: Session, what: str):
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning("%s rejected by database: %s", what, e.orig)
        raise HTTPException(409, f"{what} failed: duplicate or invalid reference")


def column_data(Model, data: dict) -> dict:
    cols = {c.key for c in Model.__table__.columns}
    return {k: v for k, v in data.items() if k in cols and k != "id"}


def create_row(db: Session, Model, data: dict, unique_together: Sequence[Sequence[str]] = ()):
    data = column_data(Model, data)
    for fields in unique_together:
        check_unique(db, Model, data, fields)
    obj = Model()
    sa_update_from_dict(obj, data)
    db.add(obj)
    commit_or_409(db, f"Create {Model.__tablename__}")
    db.refresh(obj)
    logger.info("created %s id=%s", Model.__tablename__, obj.id)
    return obj


def update_row(db: Session, obj, data: dict, unique_together: Sequence[Sequence[str]] = ()):
    Model = type(obj)
    data = column_data(Model, data)
    merged = {c.key: getattr(obj, c.key) for c in Model.__table__.columns}
    merged.update(data)
    for fields in unique_together:
        check_unique(db, Model, merged, fields, exclude_id=obj.id)
    sa_update_from_dict(obj, data)
    commit_or_409(db, f"Update {Model.__tablename__}")
    db.refresh(obj)
    logger.info("updated %s id=%s fields=%s", Model.__tablename__, obj.id, sorted(data))
    return obj


def delete_row(db: Session, obj):
    name, obj_id = obj.__tablename__, obj.id
    db.delete(obj)
    commit_or_409(db, f"Delete {name}")
    logger.info("deleted %s id=%s", name, obj_id)


def get_or_404(db: Session, Model, item_id: int, label: Optional[str] = None):
    obj = db.get(Model, item_id)
    if not obj:
        raise HTTPException(status_code=404, detail=f"{label or Model.__name__} not found")
    return obj


def make_crud_router(
    Model,
    prefix: str,
    create_schema: Type[BaseModel],
    update_schema: Type[BaseModel],
    out_schema: Type[BaseModel],
    label: Optional[str] = None,
    list_order_by: Optional[Sequence] = None,
    list_filters: Optional[List[str]] = None,
    unique_together: Sequence[Sequence[str]] = (),
    to_out: Optional[Callable] = None,
    before_create: Optional[Callable[[Session, dict], None]] = None,
    before_update: Optional[Callable[[Session, object, dict], None]] = None,
    before_delete: Optional[Callable[[Session, object], None]] = None,
    tags: Optional[List[str]] = None,
):
    """
    Build the list / create / edit / delete router every rate table uses:
    - GET    /{prefix}            : list (optional ?year=... filters)
    - POST   /{prefix}            : create
    - PATCH  /{prefix}/{id}       : partial update
    - DELETE /{prefix}/{id}       : delete
    """
    router = APIRouter(prefix=f"/{prefix}", tags=tags or [prefix])
    label = label or Model.__name__
    list_filters = list_filters or []
    to_out = to_out or out_schema.model_validate

    @router.get("", response_model=Envelope[List[out_schema]])
    def list_items(
        year: Optional[int] = Query(None, description="Filter by year"),
        db: Session = Depends(get_db),
    ):
        stmt = select(Model)
        if year is not None and "year" in list_filters:
            stmt = stmt.where(Model.year == year)
        if list_order_by is not None:
            stmt = stmt.order_by(*list_order_by)
        rows = db.scalars(stmt).all()
        return ok([to_out(r) for r in rows])

    @router.post("", response_model=Envelope[out_schema], status_code=status.HTTP_201_CREATED)
    def create_item(payload: create_schema, db: Session = Depends(get_db)):
        data = payload.model_dump()
        if before_create:
            before_create(db, data)
        obj = create_row(db, Model, data, unique_together)
        return ok(to_out(obj), f"{label} created")

    @router.patch("/{item_id}", response_model=Envelope[out_schema])
    def update_item(item_id: int, payload: update_schema, db: Session = Depends(get_db)):
        obj = get_or_404(db, Model, item_id, label)
        data = payload.model_dump(exclude_unset=True)
        if before_update:
            before_update(db, obj, data)
        obj = update_row(db, obj, data, unique_together)
        return ok(to_out(obj), f"{label} updated")

    @router.delete("/{item_id}", response_model=Envelope[None])
    def delete_item(item_id: int, db: Session = Depends(get_db)):
        obj = get_or_404(db, Model, item_id, label)
        if before_delete:
            before_delete(db, obj)
        delete_row(db, obj)
        return ok(None, f"{label} deleted")

    return router
