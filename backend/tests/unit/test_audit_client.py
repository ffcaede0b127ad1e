"""Unit tests for fire-and-forget audit logging"""

import json

import httpx
import pytest
import respx

from app.services.audit_client import AuditClient

AUDIT_URL = "http://audit.test/api/audit"


@pytest.mark.asyncio
async def test_event_is_posted():
    client = AuditClient(base_url=AUDIT_URL, timeout=1.0)

    with respx.mock(assert_all_mocked=True) as router:
        route = router.post(f"{AUDIT_URL}/log").respond(201)
        client.log("req-1", "ORCHESTRATOR", "CREDIT_CHECK", {"decision": "APPROVED"})
        await client.drain()

    assert route.called
    body = json.loads(route.calls.last.request.content)
    assert body == {
        "request_id": "req-1",
        "service_name": "ORCHESTRATOR",
        "action": "CREDIT_CHECK",
        "details": {"decision": "APPROVED"},
    }


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "failure",
    [httpx.Response(500), httpx.ConnectError("refused")],
    ids=["server-error", "unreachable"],
)
async def test_delivery_failures_are_swallowed(failure):
    client = AuditClient(base_url=AUDIT_URL, timeout=1.0)

    with respx.mock(assert_all_mocked=True) as router:
        route = router.post(f"{AUDIT_URL}/log").mock(side_effect=[failure])
        client.log("req-1", "ORCHESTRATOR", "CREDIT_CHECK")
        await client.drain()

    assert route.called


@pytest.mark.asyncio
async def test_unconfigured_sink_drops_events():
    client = AuditClient(base_url="")

    with respx.mock(assert_all_called=False) as router:
        route = router.post(f"{AUDIT_URL}/log").respond(201)
        client.log("req-1", "ORCHESTRATOR", "CREDIT_CHECK")
        await client.drain()

    assert not route.called
    assert not router.calls
    assert not client._pending
