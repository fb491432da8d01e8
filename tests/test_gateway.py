import json

import httpx
import pytest

from timewarden.gateway import GatewayConfig, RemoteCallError, RemoteGateway
from timewarden.models import Schedule


def make_gateway(handler) -> RemoteGateway:
    return RemoteGateway(GatewayConfig(base_url="http://backend.test"), transport=httpx.MockTransport(handler))


def test_status_calls_hit_invoke_endpoints():
    seen = []

    def handler(request: httpx.Request):
        seen.append((request.method, request.url.path, json.loads(request.content)))
        if request.url.path.endswith("get_current_app"):
            return httpx.Response(200, json="code.exe")
        return httpx.Response(200, json=42)

    gw = make_gateway(handler)
    assert gw.get_current_app() == "code.exe"
    assert gw.get_idle_seconds() == 42
    assert seen == [
        ("POST", "/invoke/get_current_app", {}),
        ("POST", "/invoke/get_idle_seconds", {}),
    ]


def test_current_app_null_means_none():
    gw = make_gateway(lambda request: httpx.Response(200, json=None))
    assert gw.get_current_app() is None


def test_sessions_and_totals_are_decoded():
    def handler(request: httpx.Request):
        if request.url.path.endswith("get_today_sessions"):
            return httpx.Response(200, json=[
                {"id": 1, "app_id": "code.exe", "start_time": "2025-01-01T09:00:00Z",
                 "end_time": "2025-01-01T09:10:00Z", "duration_seconds": 600, "is_idle": False},
                {"id": 2, "app_id": "idle", "start_time": "2025-01-01T09:10:00Z", "is_idle": True},
            ])
        return httpx.Response(200, json=[["chrome.exe", 1200], ["code.app", 600]])

    gw = make_gateway(handler)
    sessions = gw.get_today_sessions()
    assert [s.id for s in sessions] == [1, 2]
    assert sessions[0].duration_seconds == 600
    assert sessions[1].end_time is None and sessions[1].is_idle
    totals = gw.get_app_totals_today()
    assert [(t.name, t.seconds) for t in totals] == [("chrome.exe", 1200), ("code.app", 600)]


def test_schedule_mutation_payloads():
    bodies = {}

    def handler(request: httpx.Request):
        bodies[request.url.path.rsplit("/", 1)[-1]] = json.loads(request.content)
        return httpx.Response(200, json=None)

    gw = make_gateway(handler)
    draft = Schedule(id=None, name="Work", start_time="09:00:00", end_time="17:00:00", days=["Mon"])
    gw.create_schedule(draft)
    gw.update_schedule(Schedule(id=7, name="Work", start_time="09:00:00", end_time="17:00:00"))
    gw.delete_schedule(7)
    gw.toggle_schedule(7, False)
    assert "id" not in bodies["create_schedule"]["schedule"]
    assert bodies["create_schedule"]["schedule"]["days"] == ["Mon"]
    assert bodies["update_schedule"]["schedule"]["id"] == 7
    assert bodies["delete_schedule"] == {"id": 7}
    assert bodies["toggle_schedule"] == {"id": 7, "enabled": False}


def test_get_all_schedules():
    payload = [{"id": 1, "name": "Work", "start_time": "09:00:00", "end_time": "17:00:00",
                "days": ["Mon", "Tue"], "expected_apps": ["Code"], "check_interval_secs": 10,
                "grace_period_secs": 60, "enabled": False}]
    gw = make_gateway(lambda request: httpx.Response(200, json=payload))
    [s] = gw.get_all_schedules()
    assert s.id == 1 and s.expected_apps == ["Code"] and s.enabled is False
    assert s.check_interval_secs == 10 and s.grace_period_secs == 60


def test_http_error_raises_remote_call_error_without_retry():
    calls = {"n": 0}

    def handler(request: httpx.Request):
        calls["n"] += 1
        return httpx.Response(500, text="Server Error")

    gw = make_gateway(handler)
    with pytest.raises(RemoteCallError) as exc:
        gw.delete_schedule(1)
    assert exc.value.call == "delete_schedule"
    assert "500" in str(exc.value)
    assert calls["n"] == 1


def test_transport_error_is_wrapped_with_cause():
    def handler(request: httpx.Request):
        raise httpx.ConnectError("connection refused", request=request)

    gw = make_gateway(handler)
    with pytest.raises(RemoteCallError) as exc:
        gw.get_idle_seconds()
    assert isinstance(exc.value.cause, httpx.ConnectError)
    assert exc.value.__cause__ is exc.value.cause


@pytest.mark.parametrize(
    "call, response",
    [
        ("get_idle_seconds", httpx.Response(200, json=-5)),
        ("get_idle_seconds", httpx.Response(200, json="soon")),
        ("get_current_app", httpx.Response(200, json=12)),
        ("get_today_sessions", httpx.Response(200, json={"id": 1})),
        ("get_app_totals_today", httpx.Response(200, json=[["only-name"]])),
        ("get_all_schedules", httpx.Response(200, json=[{"id": 1}])),
        ("get_idle_seconds", httpx.Response(200, content=b"not json")),
    ],
)
def test_malformed_responses_raise(call, response):
    gw = make_gateway(lambda request: response)
    with pytest.raises(RemoteCallError) as exc:
        getattr(gw, call)()
    assert exc.value.call == call
