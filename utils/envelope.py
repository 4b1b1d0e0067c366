# utils/envelope.py
from typing import Any, Optional

from sqlalchemy.inspection import inspect


def ok(data: Any = None, message: Optional[str] = None) -> dict:
    return {"success": True, "data": data, "message": message}


def fail(message: str, data: Any = None) -> dict:
    return {"success": False, "data": data, "message": message}


def sa_to_dict(obj):
    """SQLAlchemy object -> dict (columns only)"""
    if obj is None:
        return None
    mapper = inspect(obj.__class__)
    return {col.key: getattr(obj, col.key) for col in mapper.column_attrs}


def sa_update_from_dict(obj, data: dict, allow_fields=None):
    """Copy values from dict onto obj (optionally only allow_fields)"""
    if allow_fields is None:
        allow_fields = data.keys()
    for k in allow_fields:
        if k in data:
            setattr(obj, k, data[k])
    return obj
