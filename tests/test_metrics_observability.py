from __future__ import annotations

import pytest
from fastapi import Request, Response
from prometheus_client import REGISTRY

import backoffice.main as main_module
from backoffice.core.metrics import build_metrics_response, instrument_http_request, record_transition


def _make_request(path: str) -> Request:
    scope = {
        "type": "http",
        "method": "GET",
        "path": path,
        "headers": [],
        "client": ("127.0.0.1", 12345),
        "scheme": "http",
        "server": ("testserver", 80),
        "query_string": b"",
    }
    return Request(scope)


@pytest.mark.asyncio
async def test_http_metrics_instrumentation_tracks_status_and_path() -> None:
    async def _no_content(_: Request) -> Response:
        return Response(status_code=204)

    request = _make_request("/health")
    await instrument_http_request(request, _no_content)

    payload = build_metrics_response().body.decode("utf-8")
    assert "backoffice_http_requests_total" in payload
    assert 'path="/health"' in payload
    assert 'status_code="204"' in payload


def test_transition_outcomes_are_counted_per_label() -> None:
    labels = {"subject_kind": "post", "transition_kind": "hide", "outcome": "invalid_state"}
    before = REGISTRY.get_sample_value("backoffice_transitions_total", labels) or 0.0

    record_transition("post", "hide", "invalid_state")
    record_transition("post", "hide", "invalid_state")

    assert REGISTRY.get_sample_value("backoffice_transitions_total", labels) == before + 2


@pytest.mark.asyncio
async def test_metrics_endpoint_exposes_prometheus_payload() -> None:
    response = await main_module.metrics_endpoint(_make_request("/metrics"))
    payload = response.body.decode("utf-8")

    assert response.status_code == 200
    assert "backoffice_http_requests_total" in payload
    assert "backoffice_audit_write_failures_total" in payload
