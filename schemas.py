from __future__ import annotations

from typing import Optional, Literal, List, Generic, TypeVar
from datetime import date
from decimal import Decimal
from enum import IntEnum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from utils import validators as v

T = TypeVar("T")

# =========================
# ===== Base (Pydantic v2)
# =========================
class APIBase(BaseModel):
    """
    Base for every response schema:
    - from_attributes=True: build straight from SQLAlchemy rows
    - camelCase keys on the wire, snake_case in Python
    - Decimal -> float in JSON
    """
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
        json_encoders={Decimal: float},
    )


class RequestBase(BaseModel):
    """Request bodies accept camelCase (frontend) or snake_case"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class Envelope(BaseModel, Generic[T]):
    """{success, data, message}: the shape every endpoint returns"""
    success: bool = True
    data: Optional[T] = None
    message: Optional[str] = None


class LineItemStatus(IntEnum):
    PENDING = 0
    COMPLETED = 1
    DECLINED = 2
    ON_HOLD = 3


GovernmentRateType = Literal["SSS", "PHILHEALTH"]


# =========================================
# ================ Lookups ================
# =========================================
class RankOut(APIBase):
    id: int
    code: str
    name: str

class CountryOut(APIBase):
    id: int
    code: str
    name: str

class PortOut(APIBase):
    id: int
    code: str
    name: str
    country_id: int

class VesselTypeCreate(RequestBase):
    # admin screen posts vesselTypeCode / vesselTypeName
    code: str = Field(min_length=1, max_length=20,
                      validation_alias=AliasChoices("code", "vesselTypeCode"))
    name: str = Field(min_length=1, max_length=100,
                      validation_alias=AliasChoices("name", "vesselTypeName"))

    @field_validator("code")
    @classmethod
    def _code(cls, value: str) -> str:
        value = value.strip().upper()
        if not value:
            raise ValueError("Vessel type code is required")
        return value

class VesselTypeUpdate(RequestBase):
    code: Optional[str] = Field(default=None, min_length=1, max_length=20,
                                validation_alias=AliasChoices("code", "vesselTypeCode"))
    name: Optional[str] = Field(default=None, min_length=1, max_length=100,
                                validation_alias=AliasChoices("name", "vesselTypeName"))

    @field_validator("code")
    @classmethod
    def _code(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        value = value.strip().upper()
        if not value:
            raise ValueError("Vessel type code is required")
        return value

class VesselTypeOut(APIBase):
    id: int
    code: str
    name: str

# =========================================
# ================ Vessels ================
# =========================================
class VesselCreate(RequestBase):
    code: str = Field(min_length=1, max_length=20)
    name: str = Field(min_length=1, max_length=150)
    vessel_type_id: Optional[int] = None
    principal: Optional[str] = None
    is_active: bool = True

class VesselOut(APIBase):
    id: int
    code: str
    name: str
    vessel_type_id: Optional[int] = None
    principal: Optional[str] = None
    is_active: bool

# =========================================
# ================= Crew ==================
# =========================================
class CrewListItem(APIBase):
    id: int
    crew_code: str
    last_name: str
    first_name: str
    middle_name: Optional[str] = None
    rank_id: Optional[int] = None
    rank: Optional[str] = None
    crew_status_id: int
    current_vessel_id: Optional[int] = None
    is_active: bool

class CrewBasicOut(CrewListItem):
    birth_date: Optional[date] = None
    sex: Optional[str] = None
    mobile_number: Optional[str] = None
    landline_number: Optional[str] = None
    email: Optional[str] = None
    city: Optional[str] = None
    province: Optional[str] = None
    sss_number: Optional[str] = None
    tin_number: Optional[str] = None
    philhealth_number: Optional[str] = None
    hdmf_number: Optional[str] = None
    passport_number: Optional[str] = None
    passport_issue_date: Optional[date] = None
    passport_expiry_date: Optional[date] = None
    seaman_book_number: Optional[str] = None
    seaman_book_issue_date: Optional[date] = None
    seaman_book_expiry_date: Optional[date] = None
    current_vessel: Optional[str] = None
    sign_on_date: Optional[date] = None
    has_profile_image: bool = False


class CrewCreate(RequestBase):
    crew_code: Optional[str] = None     # empty / "AUTO" -> generated
    rank_id: int
    last_name: str = Field(min_length=2, max_length=50)
    first_name: str = Field(min_length=2, max_length=50)
    middle_name: Optional[str] = None
    sex: Optional[str] = Field(default=None, max_length=6)
    birth_date: Optional[date] = None
    mobile_number: str
    landline_number: Optional[str] = None
    email: str
    city: Optional[str] = Field(default=None, max_length=50)
    province: Optional[str] = Field(default=None, max_length=50)
    sss_number: Optional[str] = None
    tin_number: Optional[str] = None
    philhealth_number: Optional[str] = None
    hdmf_number: Optional[str] = None
    passport_number: Optional[str] = None
    passport_issue_date: Optional[date] = None
    passport_expiry_date: Optional[date] = None
    seaman_book_number: Optional[str] = None
    seaman_book_issue_date: Optional[date] = None
    seaman_book_expiry_date: Optional[date] = None
    profile_image_base64: Optional[str] = None
    profile_image_content_type: Optional[str] = Field(default=None, max_length=50)

    @field_validator("mobile_number")
    @classmethod
    def _mobile(cls, value: str) -> str:
        value = (value or "").strip()
        if not v.is_valid_mobile(value):
            raise ValueError("Mobile number must be 11 digits starting with 09")
        return value

    @field_validator("landline_number")
    @classmethod
    def _landline(cls, value: Optional[str]) -> Optional[str]:
        value = (value or "").strip()
        if not value:
            return None
        if not v.is_valid_landline(value):
            raise ValueError("Landline number must be 7 to 10 digits")
        return value

    @field_validator("email")
    @classmethod
    def _email(cls, value: str) -> str:
        value = (value or "").strip()
        if not v.is_valid_email(value):
            raise ValueError("Invalid email address")
        return value

    @field_validator("middle_name")
    @classmethod
    def _middle(cls, value: Optional[str]) -> Optional[str]:
        value = (value or "").strip()
        if not value:
            return None
        if not v.is_length_between(value, 2, 50):
            raise ValueError("Middle name must be 2 to 50 characters")
        return value

    @model_validator(mode="after")
    def _documents(self):
        for field, (lo, hi) in v.GOV_ID_LENGTHS.items():
            value = getattr(self, field)
            if value in (None, ""):
                setattr(self, field, None)
                continue
            if not v.is_length_between(value, lo, hi):
                size = f"{lo}" if lo == hi else f"{lo} to {hi}"
                raise ValueError(f"{field} must be {size} characters")
        if self.passport_issue_date and self.passport_expiry_date \
                and self.passport_expiry_date <= self.passport_issue_date:
            raise ValueError("Passport expiry must be after issue date")
        if self.seaman_book_issue_date and self.seaman_book_expiry_date \
                and self.seaman_book_expiry_date <= self.seaman_book_issue_date:
            raise ValueError("Seaman book expiry must be after issue date")
        return self

# =========================================
# =============== Movements ===============
# =========================================
class MovementOut(APIBase):
    id: int
    crew_code: str
    vessel_id: int
    vessel_name: Optional[str] = None
    rank_id: int
    rank: Optional[str] = None
    transaction_type: int
    transaction_date: date
    port_id: Optional[int] = None
    port: Optional[str] = None
    sign_on_movement_id: Optional[int] = None
    promoted_at: Optional[date] = None
    is_open: bool = False

class OnBoardCrewOut(APIBase):
    movement_id: int
    crew_id: int
    crew_code: str
    first_name: str
    middle_name: Optional[str] = None
    last_name: str
    rank_id: int
    rank: Optional[str] = None
    sign_on_date: date
    port: Optional[str] = None
    promoted_at: Optional[date] = None

class JoinCrewIn(RequestBase):
    port_id: int
    sign_on_date: date
    rank_id: Optional[int] = None   # default: crew's last known rank

class PromoteCrewIn(RequestBase):
    rank_id: int
    promotion_date: date

class RepatriateCrewIn(RequestBase):
    port_id: int
    sign_off_date: date
    country_id: Optional[int] = None

class BatchRepatriateIn(RepatriateCrewIn):
    crew_codes: List[str] = Field(min_length=1)

class BatchCrewItem(RequestBase):
    crew_id: int
    rank_id: int = 0    # 0 = keep crew's current rank

class BatchSignOnIn(RequestBase):
    crew: List[BatchCrewItem] = Field(min_length=1)
    vessel_id: int
    port_id: int
    sign_on_date: date

class BatchItemResult(APIBase):
    crew_id: Optional[int] = None
    crew_code: Optional[str] = None
    success: bool
    message: Optional[str] = None
    movement_id: Optional[int] = None

class BatchResult(APIBase):
    succeeded: int
    failed: int
    results: List[BatchItemResult]

class EditMovementIn(RequestBase):
    movement_date: date
    rank_id: Optional[int] = None
    vessel_id: Optional[int] = None

# =========================================
# ================= Wages =================
# =========================================
class WageDescriptionCreate(RequestBase):
    wage_code: str = Field(min_length=1, max_length=20)
    wage_name: str = Field(min_length=1, max_length=100)
    payable_on_board: bool = False

class WageDescriptionUpdate(RequestBase):
    wage_code: Optional[str] = Field(default=None, min_length=1, max_length=20)
    wage_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    payable_on_board: Optional[bool] = None

class WageDescriptionOut(APIBase):
    id: int
    wage_code: str
    wage_name: str
    payable_on_board: bool


class SalaryScaleCreate(RequestBase):
    year: int = Field(ge=2000, le=2100)
    vessel_type_id: int
    rank_id: int
    wage_id: int
    wage_amount: Decimal

    @field_validator("wage_amount")
    @classmethod
    def _amount(cls, value: Decimal) -> Decimal:
        if not v.is_non_negative(value):
            raise ValueError("Wage amount must be a positive number")
        return value

class SalaryScaleUpdate(RequestBase):
    # frontend sends wageRank / wageType / wageAmount
    rank_id: Optional[int] = Field(default=None, alias="wageRank")
    wage_id: Optional[int] = Field(default=None, alias="wageType")
    wage_amount: Optional[Decimal] = None

    @field_validator("wage_amount")
    @classmethod
    def _amount(cls, value: Optional[Decimal]) -> Optional[Decimal]:
        if value is not None and not v.is_non_negative(value):
            raise ValueError("Wage amount must be a positive number")
        return value

class SalaryScaleOut(APIBase):
    id: int
    year: int
    rank_id: int
    rank: Optional[str] = None
    wage_id: int
    wage: Optional[str] = None
    wage_amount: Decimal
    vessel_type_id: int
    vessel_type_name: Optional[str] = None


class ForexCreate(RequestBase):
    year: int = Field(ge=2000, le=2100)
    month: int = Field(ge=1, le=12)
    exchange_rate: Decimal

    @field_validator("exchange_rate")
    @classmethod
    def _rate(cls, value: Decimal) -> Decimal:
        if not v.is_positive(value):
            raise ValueError("Exchange rate must be greater than 0")
        return value

class ForexUpdate(RequestBase):
    year: Optional[int] = Field(default=None, ge=2000, le=2100)
    month: Optional[int] = Field(default=None, ge=1, le=12)
    exchange_rate: Optional[Decimal] = None

    @field_validator("exchange_rate")
    @classmethod
    def _rate(cls, value: Optional[Decimal]) -> Optional[Decimal]:
        if value is not None and not v.is_positive(value):
            raise ValueError("Exchange rate must be greater than 0")
        return value

class ForexOut(APIBase):
    id: int
    year: int
    month: int
    exchange_rate: Decimal
    is_locked: bool = False

# =========================================
# ========= Government deductions =========
# =========================================
class _SalaryBand(RequestBase):
    @field_validator("salary_from", "salary_to", check_fields=False)
    @classmethod
    def _non_negative(cls, value):
        if value is not None and not v.is_non_negative(value):
            raise ValueError("Salary must be a positive number")
        return value

    @model_validator(mode="after")
    def _band(self):
        lo, hi = getattr(self, "salary_from", None), getattr(self, "salary_to", None)
        if lo is not None and hi is not None and not v.is_salary_band_ordered(lo, hi):
            raise ValueError("Salary From must be less than or equal to Salary To")
        return self

class SSSRateCreate(_SalaryBand):
    type: Literal["SSS"] = "SSS"
    year: int = Field(ge=2000, le=2100)
    salary_from: Decimal
    salary_to: Decimal
    regular_ss: Decimal = Decimal("0")
    mutual_fund: Decimal = Decimal("0")
    ee_rate: Decimal = Decimal("0")
    er_rate: Decimal = Decimal("0")
    er_ss: Decimal = Decimal("0")
    er_mf: Decimal = Decimal("0")
    ec: Decimal = Decimal("0")
    ee_ss: Decimal = Decimal("0")
    ee_mf: Decimal = Decimal("0")

class SSSRateUpdate(_SalaryBand):
    type: Literal["SSS"] = "SSS"
    year: Optional[int] = Field(default=None, ge=2000, le=2100)
    salary_from: Optional[Decimal] = None
    salary_to: Optional[Decimal] = None
    regular_ss: Optional[Decimal] = None
    mutual_fund: Optional[Decimal] = None
    ee_rate: Optional[Decimal] = None
    er_rate: Optional[Decimal] = None
    er_ss: Optional[Decimal] = None
    er_mf: Optional[Decimal] = None
    ec: Optional[Decimal] = None
    ee_ss: Optional[Decimal] = None
    ee_mf: Optional[Decimal] = None

class SSSRateOut(APIBase):
    id: int
    year: int
    salary_from: Decimal
    salary_to: Decimal
    regular_ss: Decimal
    mutual_fund: Decimal
    ee_rate: Decimal
    er_rate: Decimal
    er_ss: Decimal
    er_mf: Decimal
    ec: Decimal
    ee_ss: Decimal
    ee_mf: Decimal

class PhilhealthRateCreate(_SalaryBand):
    type: Literal["PHILHEALTH"] = "PHILHEALTH"
    year: int = Field(ge=2000, le=2100)
    salary_from: Decimal
    salary_to: Decimal
    premium: Decimal = Decimal("0")
    premium_rate: Decimal = Decimal("0")

class PhilhealthRateUpdate(_SalaryBand):
    type: Literal["PHILHEALTH"] = "PHILHEALTH"
    year: Optional[int] = Field(default=None, ge=2000, le=2100)
    salary_from: Optional[Decimal] = None
    salary_to: Optional[Decimal] = None
    premium: Optional[Decimal] = None
    premium_rate: Optional[Decimal] = None

class PhilhealthRateOut(APIBase):
    id: int
    year: int
    salary_from: Decimal
    salary_to: Decimal
    premium: Decimal
    premium_rate: Decimal

# =========================================
# ===== Payroll / deductions / remittance ==
# =========================================
class PayrollHistoryOut(APIBase):
    id: int
    crew_id: int
    vessel_id: int
    vessel_name: Optional[str] = None
    payroll_month: int
    payroll_year: int
    basic_wage: Decimal
    fixed_ot: Decimal
    guaranteed_ot: Decimal
    dollar_gross: Decimal
    peso_gross: Decimal
    total_deduction: Decimal
    net_wage: Decimal

class _LineItemCreate(RequestBase):
    month: int = Field(ge=1, le=12)
    year: int = Field(ge=2000, le=2100)
    amount: Decimal
    remarks: Optional[str] = None
    status: LineItemStatus = LineItemStatus.PENDING

    @field_validator("amount")
    @classmethod
    def _amount(cls, value: Decimal) -> Decimal:
        if not v.is_positive(value):
            raise ValueError("Amount must be greater than 0")
        return value

class DeductionEntryCreate(_LineItemCreate):
    deduction_name: str = Field(min_length=1, max_length=100)

class RemittanceEntryCreate(_LineItemCreate):
    allottee_name: str = Field(min_length=1, max_length=100)

class StatusUpdate(RequestBase):
    status: LineItemStatus

class DeductionEntryOut(APIBase):
    id: int
    month: int
    year: int
    deduction_name: str
    amount: Decimal
    remarks: Optional[str] = None
    status: int

class RemittanceEntryOut(APIBase):
    id: int
    month: int
    year: int
    allottee_name: str
    amount: Decimal
    remarks: Optional[str] = None
    status: int
