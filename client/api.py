"""
Crew Management API client.
Wraps every backend endpoint and folds the {success, data, message}
envelope, HTTP errors and transport errors into one ApiResult.
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Generic, List, Optional, TypeVar

import requests

from config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class ApiResult(Generic[T]):
    success: bool
    data: Optional[T] = None
    message: Optional[str] = None
    status_code: Optional[int] = None


def error_message(response: Optional[requests.Response], exc: Exception) -> str:
    """body["message"] -> body["detail"] -> str(exc)"""
    if response is not None:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            for key in ("message", "detail"):
                if body.get(key):
                    return str(body[key])
    return str(exc)


def _jsonable(value):
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items() if v is not None}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


class CrewApiClient:
    """Client for the crew management API. No retries."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
        token: Optional[str] = None,
    ):
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.request_timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json_data: Optional[Dict[str, Any]] = None,
        raw: bool = False,
    ) -> ApiResult:
        url = f"{self.base_url}{path}"
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        try:
            logger.debug("%s %s", method, url)
            response = self.session.request(
                method=method,
                url=url,
                params=params or None,
                json=_jsonable(json_data) if json_data is not None else None,
                timeout=self.timeout,
            )
            response.raise_for_status()

        except requests.exceptions.HTTPError as e:
            message = error_message(e.response, e)
            logger.error("HTTP error %s: %s %s - %s", e.response.status_code, method, url, message)
            return ApiResult(success=False, message=message, status_code=e.response.status_code)

        except requests.exceptions.RequestException as e:
            message = error_message(getattr(e, "response", None), e)
            logger.error("Request failed: %s %s - %s", method, url, message)
            return ApiResult(success=False, message=message)

        if raw:
            return ApiResult(success=True, data=response.content, status_code=response.status_code)

        try:
            body = response.json() if response.content else {}
        except ValueError as e:
            return ApiResult(success=False, message=str(e), status_code=response.status_code)

        if isinstance(body, dict) and "success" in body:
            return ApiResult(
                success=bool(body["success"]),
                data=body.get("data"),
                message=body.get("message"),
                status_code=response.status_code,
            )
        return ApiResult(success=True, data=body, status_code=response.status_code)

    # ========================================
    # Crew
    # ========================================

    def list_crew(self, status: Optional[int] = None, q: Optional[str] = None,
                  limit: Optional[int] = None) -> ApiResult[List[dict]]:
        return self._request("GET", "/crew/list", params={"status": status, "q": q, "limit": limit})

    def get_crew_basic(self, crew_code: str) -> ApiResult[dict]:
        return self._request("GET", f"/crew/basic/{crew_code}")

    def add_crew(self, payload: dict) -> ApiResult[dict]:
        return self._request("POST", "/crew", json_data=payload)

    def list_ranks(self) -> ApiResult[List[dict]]:
        return self._request("GET", "/crew/rank/list")

    def crew_movements(self, crew_code: str) -> ApiResult[List[dict]]:
        return self._request("GET", f"/crew/{crew_code}/movements")

    def export_crew_movements(self, crew_code: str) -> ApiResult[bytes]:
        return self._request("GET", f"/crew/{crew_code}/movements/export", raw=True)

    def edit_movement(self, crew_code: str, movement_id: int, movement_date: date,
                      rank_id: Optional[int] = None, vessel_id: Optional[int] = None) -> ApiResult[dict]:
        return self._request(
            "PATCH", f"/crew/{crew_code}/movements/{movement_id}",
            json_data={"movementDate": movement_date, "rankId": rank_id, "vesselId": vessel_id},
        )

    def crew_payrolls(self, crew_code: str, month: Optional[int] = None,
                      year: Optional[int] = None) -> ApiResult[List[dict]]:
        return self._request("GET", f"/crew/{crew_code}/payrolls", params={"month": month, "year": year})

    # ========================================
    # Vessels / locations
    # ========================================

    def list_vessels(self, active: Optional[bool] = None) -> ApiResult[List[dict]]:
        return self._request("GET", "/vessel", params={"active": active})

    def add_vessel(self, payload: dict) -> ApiResult[dict]:
        return self._request("POST", "/vessel", json_data=payload)

    def list_vessel_types(self) -> ApiResult[List[dict]]:
        return self._request("GET", "/vessel/type")

    def add_vessel_type(self, code: str, name: str) -> ApiResult[dict]:
        return self._request("POST", "/vessel/type", json_data={"code": code, "name": name})

    def update_vessel_type(self, type_id: int, payload: dict) -> ApiResult[dict]:
        return self._request("PATCH", f"/vessel/type/{type_id}", json_data=payload)

    def delete_vessel_type(self, type_id: int) -> ApiResult[None]:
        return self._request("DELETE", f"/vessel/type/{type_id}")

    def list_ports(self, country_id: Optional[int] = None) -> ApiResult[List[dict]]:
        return self._request("GET", "/locations/ports", params={"countryId": country_id})

    def list_countries(self) -> ApiResult[List[dict]]:
        return self._request("GET", "/locations/countries")

    # ========================================
    # Crew movements
    # ========================================

    def vessel_crew(self, vessel_id: int) -> ApiResult[List[dict]]:
        return self._request("GET", f"/vessel/{vessel_id}/crew")

    def join_crew(self, vessel_id: int, crew_code: str, port_id: int, sign_on_date: date,
                  rank_id: Optional[int] = None) -> ApiResult[dict]:
        return self._request(
            "POST", f"/vessel/{vessel_id}/crew/{crew_code}/join",
            json_data={"portId": port_id, "signOnDate": sign_on_date, "rankId": rank_id},
        )

    def batch_sign_on(self, payload: dict) -> ApiResult[dict]:
        """payload: {crew: [{crewId, rankId}], vesselId, portId, signOnDate}"""
        return self._request("POST", "/vessel/crew/sign-on", json_data=payload)

    def promote_crew(self, vessel_id: int, crew_code: str, rank_id: int,
                     promotion_date: date) -> ApiResult[dict]:
        return self._request(
            "POST", f"/vessel/{vessel_id}/crew/{crew_code}/promote",
            json_data={"rankId": rank_id, "promotionDate": promotion_date},
        )

    def repatriate_crew(self, vessel_id: int, crew_code: str, port_id: int, sign_off_date: date,
                        country_id: Optional[int] = None) -> ApiResult[dict]:
        return self._request(
            "POST", f"/vessel/{vessel_id}/crew/{crew_code}/repatriate",
            json_data={"portId": port_id, "signOffDate": sign_off_date, "countryId": country_id},
        )

    def batch_repatriate(self, vessel_id: int, crew_codes: List[str], port_id: int,
                         sign_off_date: date, country_id: Optional[int] = None) -> ApiResult[dict]:
        return self._request(
            "POST", f"/vessel/{vessel_id}/crew/repatriate",
            json_data={
                "crewCodes": list(crew_codes),
                "portId": port_id,
                "signOffDate": sign_off_date,
                "countryId": country_id,
            },
        )

    # ========================================
    # Rate tables
    # ========================================

    def list_salary_scale(self, year: Optional[int] = None, vessel_type_id: Optional[int] = None,
                          rank_id: Optional[int] = None, wage_id: Optional[int] = None) -> ApiResult[List[dict]]:
        return self._request(
            "GET", "/wages/scale-v2",
            params={"year": year, "vesselTypeId": vessel_type_id, "rankId": rank_id, "wageId": wage_id},
        )

    def add_salary_scale(self, payload: dict) -> ApiResult[dict]:
        return self._request("POST", "/wages/scale", json_data=payload)

    def update_salary_scale(self, scale_id: int, payload: dict) -> ApiResult[dict]:
        return self._request("PATCH", f"/wages/scale/{scale_id}", json_data=payload)

    def list_wage_descriptions(self) -> ApiResult[List[dict]]:
        return self._request("GET", "/wages/description")

    def add_wage_description(self, payload: dict) -> ApiResult[dict]:
        return self._request("POST", "/wages/description", json_data=payload)

    def update_wage_description(self, wage_id: int, payload: dict) -> ApiResult[dict]:
        return self._request("PATCH", f"/wages/description/{wage_id}", json_data=payload)

    def delete_wage_description(self, wage_id: int) -> ApiResult[None]:
        return self._request("DELETE", f"/wages/description/{wage_id}")

    def list_forex(self, year: Optional[int] = None) -> ApiResult[List[dict]]:
        return self._request("GET", "/wages/forex", params={"year": year})

    def add_forex(self, payload: dict) -> ApiResult[dict]:
        return self._request("POST", "/wages/forex", json_data=payload)

    def update_forex(self, forex_id: int, payload: dict) -> ApiResult[dict]:
        return self._request("PATCH", f"/wages/forex/{forex_id}", json_data=payload)

    def delete_forex(self, forex_id: int) -> ApiResult[None]:
        return self._request("DELETE", f"/wages/forex/{forex_id}")

    def list_government_rates(self, rate_type: str = "SSS", year: Optional[int] = None) -> ApiResult[List[dict]]:
        return self._request("GET", "/deduction/governmentRates", params={"type": rate_type, "year": year})

    def add_government_rate(self, payload: dict) -> ApiResult[dict]:
        return self._request("POST", "/deduction/governmentRates", json_data=payload)

    def update_government_rate(self, rate_id: int, payload: dict) -> ApiResult[dict]:
        return self._request("PATCH", f"/deduction/governmentRates/{rate_id}", json_data=payload)

    def delete_government_rate(self, rate_id: int, rate_type: str) -> ApiResult[None]:
        return self._request("DELETE", f"/deduction/governmentRates/{rate_id}", params={"type": rate_type})

    # ========================================
    # Deductions / remittance
    # ========================================

    def list_deductions(self, crew_code: str, month: Optional[int] = None,
                        year: Optional[int] = None) -> ApiResult[List[dict]]:
        return self._request("GET", f"/deductions/{crew_code}/entries", params={"month": month, "year": year})

    def add_deduction(self, crew_code: str, payload: dict) -> ApiResult[dict]:
        return self._request("POST", f"/deductions/{crew_code}/entries", json_data=payload)

    def update_deduction_status(self, crew_code: str, entry_id: int, status: int) -> ApiResult[dict]:
        return self._request("PATCH", f"/deductions/{crew_code}/entries/{entry_id}", json_data={"status": int(status)})

    def list_remittances(self, crew_code: str, month: Optional[int] = None,
                         year: Optional[int] = None) -> ApiResult[List[dict]]:
        return self._request("GET", f"/remittance/{crew_code}", params={"month": month, "year": year})

    def add_remittance(self, crew_code: str, payload: dict) -> ApiResult[dict]:
        return self._request("POST", f"/remittance/{crew_code}", json_data=payload)

    def update_remittance_status(self, crew_code: str, entry_id: int, status: int) -> ApiResult[dict]:
        return self._request("PATCH", f"/remittance/{crew_code}/{entry_id}", json_data={"status": int(status)})

    def delete_remittance(self, crew_code: str, entry_id: int) -> ApiResult[None]:
        return self._request("DELETE", f"/remittance/{crew_code}/{entry_id}")
