from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler

import httpx
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.staticfiles import StaticFiles

from overlay_dashboard import __version__
from overlay_dashboard.api.models import fail, status_to_code
from overlay_dashboard.client import build_async_client
from overlay_dashboard.config import DashboardConfig, load_dashboard_config
from overlay_dashboard.home import DashboardPaths, ensure_dashboard_layout, resolve_dashboard_home
from overlay_dashboard.sessions import SessionStore
from overlay_dashboard.ui.router import STATIC_DIR as UI_STATIC_DIR
from overlay_dashboard.ui.router import router as ui_router

logger = logging.getLogger(__name__)


def _configure_file_logging(paths: DashboardPaths, config: DashboardConfig) -> None:
    file_handler = RotatingFileHandler(
        paths.log_path,
        maxBytes=config.logging.max_size_mb * 1024 * 1024,
        backupCount=config.logging.backup_count,
        encoding="utf-8",
    )
    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    file_handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(logging.INFO)
    # Avoid adding duplicate handlers if reloaded
    if not any(isinstance(h, RotatingFileHandler) for h in root.handlers):
        root.addHandler(file_handler)
    else:
        file_handler.close()


def create_app(
    config: DashboardConfig | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Build the dashboard app.

    `config` is injected when given; otherwise it is loaded once at startup from
    OVERLAY_DASHBOARD_HOME (plus the N8N_WEBHOOK_URL override). `transport`
    replaces the outbound httpx transport, which tests use to fake the webhook.
    """

    @asynccontextmanager
    async def _lifespan(app: FastAPI):
        home = resolve_dashboard_home()
        paths = ensure_dashboard_layout(home)
        resolved = config if config is not None else load_dashboard_config(paths)

        _configure_file_logging(paths, resolved)

        logger.info("Overlay Dashboard starting up")
        logger.info("Logs directory: %s", paths.logs_dir)
        logger.info("Webhook endpoint: %s", resolved.webhook_url)

        app.state.dashboard_home = home
        app.state.dashboard_paths = paths
        app.state.dashboard_config = resolved
        app.state.sessions = SessionStore()

        async with build_async_client(resolved, transport=transport) as http_client:
            app.state.http_client = http_client
            try:
                yield
            finally:
                app.state.http_client = None
                logger.info("Overlay Dashboard shutting down")

    app = FastAPI(title="Overlay Dashboard", version=__version__, lifespan=_lifespan)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        response = await call_next(request)
        logger.info(f"{request.method} {request.url.path} - {response.status_code}")
        return response

    @app.exception_handler(RequestValidationError)
    async def _validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content=fail(
                code="validation_error",
                message="Request validation failed",
                details=exc.errors(),
            ).model_dump(mode="json"),
        )

    @app.exception_handler(HTTPException)
    async def _http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=fail(
                code=status_to_code(exc.status_code),
                message=str(exc.detail),
            ).model_dump(mode="json"),
        )

    @app.exception_handler(StarletteHTTPException)
    async def _starlette_http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=fail(
                code=status_to_code(exc.status_code),
                message=exc.detail if isinstance(exc.detail, str) else "HTTP error",
            ).model_dump(mode="json"),
        )

    @app.exception_handler(Exception)
    async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content=fail(code="internal_error", message="Internal server error").model_dump(
                mode="json"
            ),
        )

    if UI_STATIC_DIR.is_dir():
        app.mount(
            "/ui/static",
            StaticFiles(directory=str(UI_STATIC_DIR)),
            name="ui-static",
        )
    else:
        logger.warning(
            "UI static directory is missing (%s); /ui/static will not be served",
            UI_STATIC_DIR,
        )
    app.include_router(ui_router)

    @app.get("/")
    async def root() -> RedirectResponse:
        return RedirectResponse(url="/ui/", status_code=302)

    @app.get("/healthz")
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    return app
