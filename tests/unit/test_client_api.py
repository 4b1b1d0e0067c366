"""CrewApiClient envelope handling, without a server."""

import json
from datetime import date
from decimal import Decimal

import requests

from client.api import CrewApiClient, error_message


def make_response(status=200, body=None, content=None, reason="OK"):
    r = requests.Response()
    r.status_code = status
    r.reason = reason
    r.url = "http://test/api/v1"
    if content is None:
        content = b"" if body is None else json.dumps(body).encode()
    r._content = content
    return r


class FakeSession:
    def __init__(self, response=None, error=None):
        self.headers = {}
        self.response = response
        self.error = error
        self.calls = []

    def request(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.response


def client_with(**kw):
    session = FakeSession(**kw)
    return CrewApiClient(base_url="http://test/api/v1/", timeout=5, session=session), session


def test_envelope_is_unwrapped():
    api, session = client_with(response=make_response(body={
        "success": True, "data": [{"crewCode": "CR250001"}], "message": None,
    }))
    res = api.list_crew(status=2, q="juan")

    assert res.success is True
    assert res.data == [{"crewCode": "CR250001"}]
    assert res.status_code == 200
    call = session.calls[0]
    assert call["method"] == "GET"
    assert call["url"] == "http://test/api/v1/crew/list"
    # unset params are not sent
    assert call["params"] == {"status": 2, "q": "juan"}
    assert call["timeout"] == 5


def test_dates_and_decimals_are_serialised():
    api, session = client_with(response=make_response(body={"success": True, "data": {}}))
    api.promote_crew(3, "CR250001", rank_id=2, promotion_date=date(2025, 3, 1))
    api.add_forex({"year": 2025, "month": 4, "exchangeRate": Decimal("58.25"), "note": None})

    assert session.calls[0]["json"] == {"rankId": 2, "promotionDate": "2025-03-01"}
    assert session.calls[0]["url"].endswith("/vessel/3/crew/CR250001/promote")
    assert session.calls[1]["json"] == {"year": 2025, "month": 4, "exchangeRate": 58.25}


def test_http_error_uses_envelope_message():
    api, _ = client_with(response=make_response(
        409, {"success": False, "data": None, "message": "Crew CR250001 is already on board"}, reason="Conflict",
    ))
    res = api.join_crew(1, "CR250001", port_id=1, sign_on_date=date(2025, 1, 10))

    assert res.success is False
    assert res.status_code == 409
    assert res.message == "Crew CR250001 is already on board"


def test_http_error_falls_back_to_detail():
    api, _ = client_with(response=make_response(404, {"detail": "Not Found"}, reason="Not Found"))
    res = api.get_crew_basic("NOPE")
    assert res.message == "Not Found"


def test_http_error_without_json_body_uses_exception_text():
    api, _ = client_with(response=make_response(502, content=b"<html>bad gateway</html>", reason="Bad Gateway"))
    res = api.list_vessels()
    assert res.success is False
    assert "502" in res.message
    assert res.status_code == 502


def test_transport_error():
    api, _ = client_with(error=requests.exceptions.ConnectionError("connection refused"))
    res = api.list_ranks()
    assert res.success is False
    assert res.message == "connection refused"
    assert res.status_code is None


def test_success_false_envelope_with_200():
    api, _ = client_with(response=make_response(body={
        "success": False, "data": {"succeeded": 0, "failed": 2, "results": []}, "message": "0 of 2 signed on",
    }))
    res = api.batch_sign_on({"crew": [], "vesselId": 1, "portId": 1, "signOnDate": date(2025, 2, 1)})
    assert res.success is False
    assert res.data["failed"] == 2


def test_raw_export_returns_bytes():
    api, session = client_with(response=make_response(content=b"PK\x03\x04xlsx"))
    res = api.export_crew_movements("CR250001")
    assert res.success is True
    assert res.data == b"PK\x03\x04xlsx"
    assert session.calls[0]["url"].endswith("/crew/CR250001/movements/export")


def test_delete_government_rate_sends_type():
    api, session = client_with(response=make_response(body={"success": True, "data": None}))
    api.delete_government_rate(7, "PHILHEALTH")
    assert session.calls[0]["method"] == "DELETE"
    assert session.calls[0]["params"] == {"type": "PHILHEALTH"}


def test_token_sets_bearer_header():
    session = FakeSession()
    CrewApiClient(base_url="http://test", session=session, token="abc")
    assert session.headers["Authorization"] == "Bearer abc"


def test_error_message_without_response():
    assert error_message(None, RuntimeError("boom")) == "boom"


def test_vessel_type_calls():
    api, session = client_with(response=make_response(body={"success": True, "data": {"id": 4}}))
    api.add_vessel_type("LNG", "LNG Carrier")
    api.update_vessel_type(4, {"name": "Gas Carrier"})
    api.delete_vessel_type(4)

    assert [(c["method"], c["url"]) for c in session.calls] == [
        ("POST", "http://test/api/v1/vessel/type"),
        ("PATCH", "http://test/api/v1/vessel/type/4"),
        ("DELETE", "http://test/api/v1/vessel/type/4"),
    ]
    assert session.calls[0]["json"] == {"code": "LNG", "name": "LNG Carrier"}
    assert session.calls[1]["json"] == {"name": "Gas Carrier"}
