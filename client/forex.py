# client/forex.py
from datetime import datetime
from typing import Mapping, Optional

from utils.timezone import is_forex_locked

LOCKED_LABEL = "N/A"


def row_is_locked(row: Mapping, now: Optional[datetime] = None) -> bool:
    """A forex row from the API is read-only when its month has passed"""
    return is_forex_locked(int(row["year"]), int(row["month"]), now)


def action_label(row: Mapping, now: Optional[datetime] = None) -> Optional[str]:
    """'N/A' in place of the edit / delete menu on locked rows"""
    return LOCKED_LABEL if row_is_locked(row, now) else None


__all__ = ["is_forex_locked", "row_is_locked", "action_label", "LOCKED_LABEL"]
