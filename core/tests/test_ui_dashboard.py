from __future__ import annotations

import json
from pathlib import Path

import httpx
from fastapi.testclient import TestClient

from overlay_dashboard.app import create_app
from overlay_dashboard.config import DashboardConfig
from overlay_dashboard.sessions import SESSION_COOKIE

WEBHOOK = "https://n8n.example.test/webhook/overlay"


def _recording_transport(seen: list[httpx.Request], status: int = 200, text: str = "ok"):
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(status, text=text)

    return httpx.MockTransport(handler)


def test_root_redirects_to_dashboard(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("OVERLAY_DASHBOARD_HOME", str(tmp_path))

    with TestClient(create_app()) as client:
        r = client.get("/", follow_redirects=False)
        assert r.status_code == 302
        assert r.headers["location"] == "/ui/"


def test_dashboard_renders_empty_form_and_sets_session_cookie(
    tmp_path: Path, monkeypatch
) -> None:
    monkeypatch.setenv("OVERLAY_DASHBOARD_HOME", str(tmp_path))
    monkeypatch.setenv("N8N_WEBHOOK_URL", WEBHOOK)

    with TestClient(create_app()) as client:
        r = client.get("/ui/")
        assert r.status_code == 200
        assert SESSION_COOKIE in r.cookies
        assert "n8n Overlay Dashboard" in r.text
        assert WEBHOOK in r.text
        assert "N8N_WEBHOOK_URL" in r.text
        assert "HTTP Status: —" in r.text
        assert "(no response yet)" in r.text


def test_injected_config_wins_over_environment(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("OVERLAY_DASHBOARD_HOME", str(tmp_path))
    monkeypatch.setenv("N8N_WEBHOOK_URL", "https://ignored.example.test/hook")

    config = DashboardConfig.model_validate({"webhook": {"url": WEBHOOK}})
    seen: list[httpx.Request] = []

    with TestClient(create_app(config, transport=_recording_transport(seen))) as client:
        assert client.app.state.dashboard_config is config
        r = client.post("/ui/submit", data={"start": "1", "end": "2"})
        assert r.status_code == 200

    assert str(seen[0].url) == WEBHOOK


def test_submit_valid_range_posts_to_webhook_and_shows_result(
    tmp_path: Path, monkeypatch
) -> None:
    monkeypatch.setenv("OVERLAY_DASHBOARD_HOME", str(tmp_path))
    monkeypatch.setenv("N8N_WEBHOOK_URL", WEBHOOK)
    seen: list[httpx.Request] = []

    with TestClient(create_app(transport=_recording_transport(seen))) as client:
        client.get("/ui/")
        r = client.post("/ui/submit", data={"start": "0", "end": "16"})

        assert r.status_code == 200
        assert "Sent to n8n (Status 200)" in r.text
        assert "HTTP Status: 200" in r.text
        assert '<pre id="response-body">ok</pre>' in r.text

    assert len(seen) == 1
    assert str(seen[0].url) == WEBHOOK
    assert seen[0].headers["content-type"] == "application/json"
    assert json.loads(seen[0].content) == {"startSecond": 0, "endSecond": 16}


def test_submit_invalid_range_shows_error_without_network_call(
    tmp_path: Path, monkeypatch
) -> None:
    monkeypatch.setenv("OVERLAY_DASHBOARD_HOME", str(tmp_path))
    seen: list[httpx.Request] = []

    with TestClient(create_app(transport=_recording_transport(seen))) as client:
        r = client.post("/ui/submit", data={"start": "20", "end": "16"})
        assert r.status_code == 400
        assert "Starting second must be less than or equal to ending second." in r.text
        # Raw input is echoed back for correction.
        assert 'value="20"' in r.text

        r2 = client.post("/ui/submit", data={"start": "", "end": "5"})
        assert r2.status_code == 400
        assert "Please enter whole numbers for both fields." in r2.text

    assert seen == []


def test_submit_http_error_is_shown_not_fatal(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("OVERLAY_DASHBOARD_HOME", str(tmp_path))
    seen: list[httpx.Request] = []
    transport = _recording_transport(seen, status=500, text="workflow failed")

    with TestClient(create_app(transport=transport)) as client:
        r = client.post("/ui/submit", data={"start": "1", "end": "3"})
        assert r.status_code == 200
        assert "Request failed with status 500" in r.text
        assert "HTTP Status: 500" in r.text
        assert "workflow failed" in r.text

        # The session recovers: a later submit goes out again.
        r2 = client.post("/ui/submit", data={"start": "1", "end": "4"})
        assert r2.status_code == 200

    assert len(seen) == 2


def test_submit_transport_error_shows_message(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("OVERLAY_DASHBOARD_HOME", str(tmp_path))

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Connection refused", request=request)

    with TestClient(create_app(transport=httpx.MockTransport(handler))) as client:
        r = client.post("/ui/submit", data={"start": "0", "end": "16"})
        assert r.status_code == 200
        assert "Network error: Connection refused" in r.text
        assert "HTTP Status: —" in r.text


def test_reset_clears_inputs_and_result(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("OVERLAY_DASHBOARD_HOME", str(tmp_path))
    seen: list[httpx.Request] = []

    with TestClient(create_app(transport=_recording_transport(seen))) as client:
        client.post("/ui/submit", data={"start": "7", "end": "8"})

        r = client.post("/ui/reset", follow_redirects=False)
        assert r.status_code == 302
        assert r.headers["location"].startswith("/ui/")

        page = client.get(r.headers["location"])
        assert page.status_code == 200
        assert "Form reset" in page.text
        assert 'value="7"' not in page.text
        assert "HTTP Status: —" in page.text
        assert "(no response yet)" in page.text


def test_sessions_are_isolated_per_cookie(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("OVERLAY_DASHBOARD_HOME", str(tmp_path))
    seen: list[httpx.Request] = []

    app = create_app(transport=_recording_transport(seen))
    with TestClient(app) as alice:
        alice.post("/ui/submit", data={"start": "0", "end": "16"})

        # Shares the running app without entering its lifespan a second time.
        bob = TestClient(app)
        page = bob.get("/ui/")
        assert "HTTP Status: —" in page.text

        page = alice.get("/ui/")
        assert "HTTP Status: 200" in page.text


def test_static_assets_are_served(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("OVERLAY_DASHBOARD_HOME", str(tmp_path))

    with TestClient(create_app()) as client:
        r = client.get("/ui/static/app.js")
        assert r.status_code == 200
        assert "submit-btn" in r.text
