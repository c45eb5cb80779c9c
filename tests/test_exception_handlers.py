from __future__ import annotations

import pytest
from fastapi import FastAPI, Query
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import IntegrityError, OperationalError

from backoffice.shared.exceptions import (
    ConflictException,
    ForbiddenException,
    InvalidStateException,
    NotFoundException,
    UnauthenticatedException,
    register_exception_handlers,
)


def _build_app() -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)
    raisers = {
        "unauthenticated": UnauthenticatedException("Authentication required"),
        "forbidden": ForbiddenException("Super admin access required"),
        "not_found": NotFoundException("User not found"),
        "invalid_state": InvalidStateException("User is already suspended"),
        "conflict": ConflictException("Gift name already exists"),
        "integrity": IntegrityError("INSERT", {}, Exception("duplicate key")),
        "operational": OperationalError("SELECT 1", {}, Exception("connection refused")),
        "timeout": TimeoutError("statement timeout"),
        "crash": RuntimeError("boom"),
    }

    @app.get("/raise/{name}")
    async def raise_named(name: str) -> dict:
        raise raisers[name]

    @app.get("/typed")
    async def typed(limit: int = Query(ge=1)) -> dict:
        return {"limit": limit}

    return app


async def _get(path: str, **params):
    transport = ASGITransport(app=_build_app(), raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        return await client.get(path, params=params)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("name", "status_code", "kind"),
    [
        ("unauthenticated", 401, "unauthenticated"),
        ("forbidden", 403, "forbidden"),
        ("not_found", 404, "not_found"),
        ("invalid_state", 400, "invalid_state"),
        ("conflict", 409, "conflict"),
        ("integrity", 409, "conflict"),
        ("operational", 503, "unavailable"),
        ("timeout", 503, "unavailable"),
        ("crash", 500, "internal"),
    ],
)
async def test_errors_use_uniform_envelope(name: str, status_code: int, kind: str) -> None:
    response = await _get(f"/raise/{name}")

    assert response.status_code == status_code
    body = response.json()
    assert body["success"] is False
    assert body["error"]["kind"] == kind
    assert body["error"]["message"]


@pytest.mark.asyncio
async def test_domain_messages_are_passed_through() -> None:
    response = await _get("/raise/not_found")

    assert response.json()["error"]["message"] == "User not found"


@pytest.mark.asyncio
async def test_internal_errors_do_not_leak_details() -> None:
    response = await _get("/raise/crash")

    assert response.json()["error"]["message"] == "Internal server error"


@pytest.mark.asyncio
async def test_request_validation_maps_to_invalid_input() -> None:
    response = await _get("/typed", limit=0)

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["kind"] == "invalid_input"
    assert error["message"].startswith("query.limit")


@pytest.mark.asyncio
async def test_unknown_route_keeps_envelope() -> None:
    response = await _get("/missing")

    assert response.status_code == 404
    assert response.json()["error"]["kind"] == "not_found"
