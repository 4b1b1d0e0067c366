# utils/timezone.py
from datetime import datetime
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

from config import settings

LOCAL_TZ = ZoneInfo(settings.timezone)


def local_now(now: Optional[datetime] = None) -> datetime:
    """Current time in the business timezone (Asia/Manila by default)"""
    if now is None:
        return datetime.now(tz=LOCAL_TZ)
    if now.tzinfo is None:
        # naive values are taken as UTC
        now = now.replace(tzinfo=ZoneInfo("UTC"))
    return now.astimezone(LOCAL_TZ)


def current_period(now: Optional[datetime] = None) -> Tuple[int, int]:
    n = local_now(now)
    return n.year, n.month


def is_forex_locked(year: int, month: int, now: Optional[datetime] = None) -> bool:
    """
    Forex rows for a (year, month) strictly before the current local
    (year, month) are read-only.
    """
    cur_year, cur_month = current_period(now)
    return (year, month) < (cur_year, cur_month)
