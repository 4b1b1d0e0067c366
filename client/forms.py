# client/forms.py
"""
Client-side forms for the movement and rate-table screens.

Every form runs the same checks the API runs and never calls the API when
one fails. Lifecycle:

    VIEWING -> EDITING -> SUBMITTING -> VIEWING (success)
                                     -> ERROR   (failure, with message)

A submit() while SUBMITTING is refused.
"""
import enum
import logging
from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from pydantic.alias_generators import to_camel

from client.api import ApiResult, CrewApiClient
from client.forex import is_forex_locked
from schemas import LineItemStatus
from utils import validators as v

logger = logging.getLogger(__name__)

SIGN_ON = 1
SIGN_OFF = 2


class FormState(enum.Enum):
    VIEWING = "viewing"
    EDITING = "editing"
    SUBMITTING = "submitting"
    ERROR = "error"


def as_date(value) -> Optional[date]:
    if value is None or isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def pick(row: Mapping, *keys, default=None):
    for k in keys:
        if row.get(k) is not None:
            return row[k]
    return default


class BaseForm:
    required: Tuple[str, ...] = ()
    labels: Dict[str, str] = {}

    def __init__(self, api: CrewApiClient, **values):
        self.api = api
        self.values: Dict[str, Any] = dict(values)
        self.state = FormState.VIEWING
        self.message: Optional[str] = None

    def label(self, name: str) -> str:
        return self.labels.get(name) or name.replace("_", " ").capitalize()

    def edit(self, **values) -> "BaseForm":
        if self.state is FormState.SUBMITTING:
            raise RuntimeError("Form is being submitted")
        self.values.update(values)
        self.state = FormState.EDITING
        self.message = None
        return self

    def cancel(self):
        if self.state is not FormState.SUBMITTING:
            self.state = FormState.VIEWING
            self.message = None

    def validate(self) -> List[str]:
        return [f"{self.label(n)} is required" for n in v.missing_fields(self.values, *self.required)]

    def send(self) -> ApiResult:
        raise NotImplementedError

    def _fail(self, message: str, result: Optional[ApiResult] = None) -> ApiResult:
        self.state = FormState.ERROR
        self.message = message
        logger.info("%s failed: %s", type(self).__name__, message)
        return result or ApiResult(success=False, message=message)

    def submit(self) -> ApiResult:
        if self.state is FormState.SUBMITTING:
            return ApiResult(success=False, message="A submission is already in progress")

        errors = self.validate()
        if errors:
            return self._fail(errors[0])

        self.state = FormState.SUBMITTING
        try:
            result = self.send()
        except Exception:
            self.state = FormState.ERROR
            raise

        if not result.success:
            return self._fail(result.message or "Request failed", result)
        self.state = FormState.VIEWING
        self.message = result.message
        return result


# =========================================
# ============ Crew movements =============
# =========================================
class PromoteForm(BaseForm):
    required = ("rank_id", "promotion_date")
    labels = {"rank_id": "Rank"}

    def __init__(self, api, *, vessel_id: int, crew_code: str, current_rank_id: Optional[int],
                 sign_on_date=None, **values):
        super().__init__(api, **values)
        self.vessel_id = vessel_id
        self.crew_code = crew_code
        self.current_rank_id = current_rank_id
        self.sign_on_date = as_date(sign_on_date)

    def validate(self) -> List[str]:
        errors = super().validate()
        if errors:
            return errors
        if not v.is_rank_change(self.values["rank_id"], self.current_rank_id):
            return ["The selected rank is the same as the current rank."]
        if self.sign_on_date and as_date(self.values["promotion_date"]) < self.sign_on_date:
            return ["Promotion date cannot be before the sign-on date"]
        return []

    def send(self) -> ApiResult:
        return self.api.promote_crew(
            self.vessel_id, self.crew_code,
            rank_id=int(self.values["rank_id"]),
            promotion_date=as_date(self.values["promotion_date"]),
        )


class JoinForm(BaseForm):
    required = ("vessel_id", "port_id", "sign_on_date")
    labels = {"vessel_id": "Vessel", "port_id": "Port"}

    def __init__(self, api, *, crew_code: str, last_sign_off_date=None, **values):
        super().__init__(api, **values)
        self.crew_code = crew_code
        self.last_sign_off_date = as_date(last_sign_off_date)

    def validate(self) -> List[str]:
        errors = super().validate()
        if not errors and self.last_sign_off_date \
                and as_date(self.values["sign_on_date"]) < self.last_sign_off_date:
            errors.append("Sign-on date cannot be before the last sign-off date")
        return errors

    def send(self) -> ApiResult:
        return self.api.join_crew(
            int(self.values["vessel_id"]), self.crew_code,
            port_id=int(self.values["port_id"]),
            sign_on_date=as_date(self.values["sign_on_date"]),
            rank_id=self.values.get("rank_id") or None,
        )


def build_batch_join_payload(selected: Iterable[Mapping], vessel_id: int, port_id: int, sign_on_date) -> dict:
    """One {crewId, rankId} entry per selected crew; rankId 0 keeps the crew's rank"""
    return {
        "crew": [
            {
                "crewId": int(pick(c, "crewId", "crew_id", "id")),
                "rankId": int(pick(c, "rankId", "rank_id", default=0)),
            }
            for c in selected
        ],
        "vesselId": vessel_id,
        "portId": port_id,
        "signOnDate": as_date(sign_on_date),
    }


class BatchJoinForm(BaseForm):
    required = ("vessel_id", "port_id", "sign_on_date")
    labels = {"vessel_id": "Vessel", "port_id": "Port"}

    def __init__(self, api, *, selected: Sequence[Mapping] = (), **values):
        super().__init__(api, **values)
        self.selected = list(selected)

    def validate(self) -> List[str]:
        if not self.selected:
            return ["Select at least one crew member"]
        return super().validate()

    def payload(self) -> dict:
        return build_batch_join_payload(
            self.selected,
            int(self.values["vessel_id"]),
            int(self.values["port_id"]),
            self.values["sign_on_date"],
        )

    def send(self) -> ApiResult:
        return self.api.batch_sign_on(self.payload())


class RepatriateForm(BaseForm):
    """Single or batch sign-off; every selected crew must be on the same vessel"""
    required = ("port_id", "sign_off_date")
    labels = {"port_id": "Port"}

    def __init__(self, api, *, crew_members: Sequence[Mapping], **values):
        super().__init__(api, **values)
        self.crew_members = list(crew_members)

    @property
    def vessel_ids(self) -> set:
        return {pick(c, "vesselId", "vessel_id") for c in self.crew_members}

    def validate(self) -> List[str]:
        if not self.crew_members:
            return ["Select at least one crew member"]
        errors = super().validate()
        if errors:
            return errors
        if len(self.vessel_ids) > 1:
            return ["All selected crew members must belong to the same vessel."]
        sign_off = as_date(self.values["sign_off_date"])
        for c in self.crew_members:
            sign_on = as_date(pick(c, "signOnDate", "sign_on_date"))
            if sign_on and sign_off < sign_on:
                return ["Sign-off date cannot be before the sign-on date"]
        return []

    def send(self) -> ApiResult:
        vessel_id = int(next(iter(self.vessel_ids)))
        codes = [pick(c, "crewCode", "crew_code") for c in self.crew_members]
        kwargs = dict(
            port_id=int(self.values["port_id"]),
            sign_off_date=as_date(self.values["sign_off_date"]),
            country_id=self.values.get("country_id"),
        )
        if len(codes) == 1:
            return self.api.repatriate_crew(vessel_id, codes[0], **kwargs)
        return self.api.batch_repatriate(vessel_id, codes, **kwargs)


class EditMovementForm(BaseForm):
    """
    Sign-on rows edit only their sign-on date; sign-off rows only their
    sign-off date.
    """
    labels = {"sign_on_date": "Sign-on date", "sign_off_date": "Sign-off date"}

    def __init__(self, api, *, crew_code: str, movement: Mapping):
        self.movement_id = int(movement["id"])
        self.transaction_type = int(pick(movement, "transactionType", "transaction_type"))
        super().__init__(
            api,
            **{
                self.date_field: as_date(pick(movement, "transactionDate", "transaction_date")),
                "rank_id": pick(movement, "rankId", "rank_id"),
                "vessel_id": pick(movement, "vesselId", "vessel_id"),
            },
        )
        self.crew_code = crew_code

    @property
    def date_field(self) -> str:
        return "sign_on_date" if self.transaction_type == SIGN_ON else "sign_off_date"

    @property
    def locked_field(self) -> str:
        return "sign_off_date" if self.transaction_type == SIGN_ON else "sign_on_date"

    def is_editable(self, field: str) -> bool:
        return field != self.locked_field

    def validate(self) -> List[str]:
        if self.values.get(self.locked_field) is not None:
            return [f"{self.label(self.locked_field)} cannot be edited on this movement"]
        missing = v.missing_fields(self.values, self.date_field)
        return [f"{self.label(n)} is required" for n in missing]

    def send(self) -> ApiResult:
        return self.api.edit_movement(
            self.crew_code, self.movement_id,
            movement_date=as_date(self.values[self.date_field]),
            rank_id=self.values.get("rank_id"),
            vessel_id=self.values.get("vessel_id"),
        )


# =========================================
# ============== Rate tables ==============
# =========================================
class RateForm(BaseForm):
    """Create when item_id is None, edit otherwise"""
    non_negative: Tuple[str, ...] = ()
    positive: Tuple[str, ...] = ()
    salary_band = False
    extra: Dict[str, Any] = {}

    def __init__(self, api, *, item_id: Optional[int] = None, **values):
        super().__init__(api, **values)
        self.item_id = item_id

    def validate(self) -> List[str]:
        errors = super().validate() if self.item_id is None else []
        for name in self.non_negative:
            value = self.values.get(name)
            if value not in (None, "") and not v.is_non_negative(value):
                errors.append(f"{self.label(name)} must be a positive number")
        for name in self.positive:
            value = self.values.get(name)
            if value not in (None, "") and not v.is_positive(value):
                errors.append(f"{self.label(name)} must be greater than 0")
        if self.salary_band:
            lo, hi = self.values.get("salary_from"), self.values.get("salary_to")
            if lo not in (None, "") and hi not in (None, "") \
                    and v.is_non_negative(lo) and v.is_non_negative(hi) \
                    and not v.is_salary_band_ordered(lo, hi):
                errors.append("Salary From must be less than or equal to Salary To")
        return errors

    def payload(self) -> dict:
        body = {to_camel(k): val for k, val in self.values.items() if val is not None}
        return {**body, **self.extra}

    def create(self, payload: dict) -> ApiResult:
        raise NotImplementedError

    def update(self, item_id: int, payload: dict) -> ApiResult:
        raise NotImplementedError

    def send(self) -> ApiResult:
        if self.item_id is None:
            return self.create(self.payload())
        return self.update(self.item_id, self.payload())


class SalaryScaleForm(RateForm):
    required = ("year", "vessel_type_id", "rank_id", "wage_id", "wage_amount")
    non_negative = ("wage_amount",)
    labels = {"wage_amount": "Wage amount", "rank_id": "Rank", "wage_id": "Wage", "vessel_type_id": "Vessel type"}

    def payload(self) -> dict:
        if self.item_id is None:
            return super().payload()
        # edit endpoint takes wageRank / wageType / wageAmount
        body = {
            "wageRank": self.values.get("rank_id"),
            "wageType": self.values.get("wage_id"),
            "wageAmount": self.values.get("wage_amount"),
        }
        return {k: val for k, val in body.items() if val is not None}

    def create(self, payload):
        return self.api.add_salary_scale(payload)

    def update(self, item_id, payload):
        return self.api.update_salary_scale(item_id, payload)


class WageDescriptionForm(RateForm):
    required = ("wage_code", "wage_name")

    def create(self, payload):
        return self.api.add_wage_description(payload)

    def update(self, item_id, payload):
        return self.api.update_wage_description(item_id, payload)


class SSSRateForm(RateForm):
    required = ("year", "salary_from", "salary_to")
    non_negative = ("salary_from", "salary_to", "regular_ss", "mutual_fund", "ee_rate", "er_rate",
                    "er_ss", "er_mf", "ec", "ee_ss", "ee_mf")
    salary_band = True
    extra = {"type": "SSS"}

    def create(self, payload):
        return self.api.add_government_rate(payload)

    def update(self, item_id, payload):
        return self.api.update_government_rate(item_id, payload)


class PhilhealthRateForm(SSSRateForm):
    non_negative = ("salary_from", "salary_to", "premium", "premium_rate")
    extra = {"type": "PHILHEALTH"}


class ForexForm(RateForm):
    required = ("year", "month", "exchange_rate")
    positive = ("exchange_rate",)

    def __init__(self, api, *, item_id: Optional[int] = None, locked_period: Optional[Tuple[int, int]] = None,
                 **values):
        super().__init__(api, item_id=item_id, **values)
        # (year, month) of the row being edited
        self.locked_period = locked_period

    def validate(self) -> List[str]:
        if self.item_id is not None and self.locked_period and is_forex_locked(*self.locked_period):
            return ["Forex rates of past months cannot be changed"]
        errors = super().validate()
        month = self.values.get("month")
        if month not in (None, "") and not (str(month).isdigit() and 1 <= int(month) <= 12):
            errors.append("Month must be between 1 and 12")
        return errors

    def create(self, payload):
        return self.api.add_forex(payload)

    def update(self, item_id, payload):
        return self.api.update_forex(item_id, payload)


# =========================================
# ========= Deduction / remittance ========
# =========================================
class StatusEditForm(BaseForm):
    required = ("status",)
    kinds = ("deduction", "remittance")

    def __init__(self, api, *, kind: str, crew_code: str, entry_id: int, **values):
        if kind not in self.kinds:
            raise ValueError(f"kind must be one of {self.kinds}")
        super().__init__(api, **values)
        self.kind = kind
        self.crew_code = crew_code
        self.entry_id = entry_id

    def validate(self) -> List[str]:
        errors = super().validate()
        if errors:
            return errors
        try:
            LineItemStatus(int(self.values["status"]))
        except ValueError:
            return ["Invalid status"]
        return []

    def send(self) -> ApiResult:
        status = int(self.values["status"])
        if self.kind == "deduction":
            return self.api.update_deduction_status(self.crew_code, self.entry_id, status)
        return self.api.update_remittance_status(self.crew_code, self.entry_id, status)
