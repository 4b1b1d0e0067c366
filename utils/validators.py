# utils/validators.py
"""
Shape checks shared by the request schemas (server side) and the client forms.

Every function returns True/False; callers decide how to report the failure.
"""
import re
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

# ASCII: \d must not match other scripts' digits (e.g. "١٢٣")
MOBILE_RE = re.compile(r"^09\d{9}$", re.ASCII)
LANDLINE_RE = re.compile(r"^\d{7,10}$", re.ASCII)
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# government ids: (min, max) length
GOV_ID_LENGTHS = {
    "sss_number": (10, 10),
    "tin_number": (9, 12),
    "philhealth_number": (12, 12),
    "hdmf_number": (12, 12),
    "passport_number": (7, 9),
    "seaman_book_number": (7, 9),
}

Number = Union[int, float, Decimal, str]


def is_valid_mobile(value: Optional[str]) -> bool:
    return bool(value) and MOBILE_RE.fullmatch(value) is not None


def is_valid_landline(value: Optional[str]) -> bool:
    return bool(value) and LANDLINE_RE.fullmatch(value) is not None


def is_valid_email(value: Optional[str]) -> bool:
    return bool(value) and EMAIL_RE.fullmatch(value) is not None


def is_length_between(value: Optional[str], min_len: int, max_len: int) -> bool:
    return value is not None and min_len <= len(value) <= max_len


def to_decimal(value: Number) -> Optional[Decimal]:
    """None when the value is not a finite number"""
    if isinstance(value, bool) or value is None:
        return None
    try:
        d = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not d.is_finite():
        return None
    return d


def is_non_negative(value: Number) -> bool:
    d = to_decimal(value)
    return d is not None and d >= 0


def is_positive(value: Number) -> bool:
    d = to_decimal(value)
    return d is not None and d > 0


def is_salary_band_ordered(salary_from: Number, salary_to: Number) -> bool:
    lo, hi = to_decimal(salary_from), to_decimal(salary_to)
    if lo is None or hi is None:
        return False
    return lo <= hi


def is_rank_change(selected_rank: Optional[int], current_rank: Optional[int]) -> bool:
    """Promotion needs a different rank than the one the crew holds now"""
    if selected_rank is None:
        return False
    return str(selected_rank) != str(current_rank)


def missing_fields(values: dict, *required: str) -> list:
    """Names of required keys that are absent, None or blank strings"""
    out = []
    for name in required:
        v = values.get(name)
        if v is None or (isinstance(v, str) and not v.strip()):
            out.append(name)
    return out
