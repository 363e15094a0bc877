from __future__ import annotations

from fastapi import FastAPI
from fastapi.testclient import TestClient
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError

from service_orders.domain_errors import DomainError, format_validation_errors, not_found
from service_orders.responses import build_domain_error_response, register_exception_handlers, success_response


def test_domain_error_payload_contains_stable_code() -> None:
    response = build_domain_error_response(
        DomainError(
            code="PROBE_ERROR",
            http_status=409,
            message="probe failed",
            details={"probe": True},
        )
    )

    assert response.status_code == 409
    body = response.body.decode("utf-8")
    assert '"success":false' in body
    assert '"error":"probe failed"' in body
    assert '"code":"PROBE_ERROR"' in body
    assert '"details":{"probe":true}' in body


def test_domain_error_payload_omits_details_when_none() -> None:
    response = build_domain_error_response(not_found("team member", 5))

    body = response.body.decode("utf-8")
    assert response.status_code == 404
    assert '"code":"TEAM_MEMBER_NOT_FOUND"' in body
    assert '"error":"Team member 5 not found"' in body
    assert '"details"' not in body


def test_success_response_drops_empty_extras() -> None:
    response = success_response({"id": 1}, status_code=201, warnings=None, message="ok")

    assert response.status_code == 201
    assert response.body.decode("utf-8") == '{"success":true,"data":{"id":1},"message":"ok"}'


def test_format_validation_errors_skips_request_location() -> None:
    errors = [
        {"loc": ("body", "service", "start_date"), "msg": "Input should be a valid date"},
        {"loc": ("query", "id"), "msg": "Field required"},
    ]

    assert format_validation_errors(errors) == (
        "service.start_date: Input should be a valid date; id: Field required"
    )


class _Payload(BaseModel):
    name: str


def _app() -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/boom")
    def _boom():
        raise DomainError(code="ROUTE_PROBLEM", http_status=409, message="route failed")

    @app.post("/validate")
    def _validate(payload: _Payload):
        return payload

    @app.get("/store")
    def _store():
        raise IntegrityError("INSERT", {}, Exception("FOREIGN KEY constraint failed"))

    @app.get("/crash")
    def _crash():
        raise RuntimeError("unexpected")

    return app


def test_exception_handlers_render_error_envelopes() -> None:
    client = TestClient(_app(), raise_server_exceptions=False)

    domain = client.get("/boom")
    assert domain.status_code == 409
    assert domain.json() == {"success": False, "error": "route failed", "code": "ROUTE_PROBLEM"}

    invalid = client.post("/validate", json={})
    assert invalid.status_code == 400
    assert invalid.json()["code"] == "VALIDATION_ERROR"
    assert invalid.json()["error"] == "name: Field required"

    store = client.get("/store")
    assert store.status_code == 500
    assert store.json() == {"success": False, "error": "FOREIGN KEY constraint failed", "code": "STORE_ERROR"}

    crash = client.get("/crash")
    assert crash.status_code == 500
    assert crash.json()["code"] == "INTERNAL_ERROR"


def test_unknown_route_uses_error_envelope() -> None:
    response = TestClient(_app()).get("/missing")

    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Not Found"}
