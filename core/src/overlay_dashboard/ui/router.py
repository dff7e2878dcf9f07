from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import httpx
from fastapi import APIRouter, Form, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from starlette.responses import Response

from overlay_dashboard.config import WEBHOOK_URL_ENV, DashboardConfig
from overlay_dashboard.form import FormSession, SubmissionInProgress
from overlay_dashboard.presenter import Flash, flash_for, present
from overlay_dashboard.sessions import SESSION_COOKIE, SessionStore

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent
TEMPLATES_DIR = BASE_DIR / "templates"
STATIC_DIR = BASE_DIR / "static"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

router = APIRouter(prefix="/ui", tags=["ui"])


def _flash_from_request(request: Request) -> Flash | None:
    msg = request.query_params.get("msg")
    if not msg:
        return None
    kind = "ok" if request.query_params.get("kind") == "ok" else "bad"
    return Flash(message=msg, kind=kind)


def _get_config(request: Request) -> DashboardConfig:
    config = getattr(request.app.state, "dashboard_config", None)
    if config is None:
        raise HTTPException(status_code=500, detail="Config not initialized")
    return config


def _get_sessions(request: Request) -> SessionStore:
    sessions = getattr(request.app.state, "sessions", None)
    if sessions is None:
        raise HTTPException(status_code=500, detail="Session store not initialized")
    return sessions


def _get_http_client(request: Request) -> httpx.AsyncClient | None:
    return getattr(request.app.state, "http_client", None)


def _session_for(request: Request) -> tuple[str, FormSession, bool]:
    return _get_sessions(request).get_or_create(request.cookies.get(SESSION_COOKIE))


def _with_session_cookie(response: Response, session_id: str, created: bool) -> Response:
    if created:
        response.set_cookie(SESSION_COOKIE, session_id, httponly=True, samesite="lax")
    return response


def _render_dashboard(
    request: Request,
    session: FormSession,
    *,
    flash: Flash | None,
    status_code: int = 200,
) -> HTMLResponse:
    config = _get_config(request)
    state = session.state
    ctx: dict[str, Any] = {
        "title": "n8n Overlay Dashboard",
        "flash": flash,
        "state": state,
        "in_flight": session.in_flight,
        "view": present(state.result),
        "webhook_url": config.webhook_url,
        "webhook_env": WEBHOOK_URL_ENV,
    }
    return templates.TemplateResponse(request, "dashboard.html", ctx, status_code=status_code)


@router.get("/", response_class=HTMLResponse)
async def ui_dashboard(request: Request) -> Response:
    session_id, session, created = _session_for(request)
    resp = _render_dashboard(request, session, flash=_flash_from_request(request))
    return _with_session_cookie(resp, session_id, created)


@router.post("/submit", response_class=HTMLResponse)
async def ui_submit(
    request: Request,
    start: str = Form(default=""),
    end: str = Form(default=""),
) -> Response:
    config = _get_config(request)
    session_id, session, created = _session_for(request)

    try:
        state = await session.submit(
            start,
            end,
            endpoint=config.webhook_url,
            client=_get_http_client(request),
        )
    except SubmissionInProgress as exc:
        logger.info("Rejected overlapping submit for session %s", session_id[:8])
        resp = _render_dashboard(
            request, session, flash=Flash(message=str(exc), kind="bad"), status_code=409
        )
        return _with_session_cookie(resp, session_id, created)

    status_code = 400 if state.phase == "invalid" else 200
    resp = _render_dashboard(request, session, flash=flash_for(state), status_code=status_code)
    return _with_session_cookie(resp, session_id, created)


@router.post("/reset")
async def ui_reset(request: Request) -> Response:
    session_id, session, created = _session_for(request)
    session.reset()
    resp = RedirectResponse(url="/ui/?msg=Form+reset&kind=ok", status_code=302)
    return _with_session_cookie(resp, session_id, created)
