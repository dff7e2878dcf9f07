from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Final
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator

from overlay_dashboard.home import DashboardPaths

WEBHOOK_URL_ENV: Final[str] = "N8N_WEBHOOK_URL"
DEFAULT_WEBHOOK_URL: Final[str] = (
    "https://bushjones514.app.n8n.cloud/webhook/b9ec5bd5-506b-4f6b-b59f-e55361fe1d96"
)


class WebhookConfig(BaseModel):
    url: str = Field(
        default=DEFAULT_WEBHOOK_URL,
        description=f"Endpoint receiving the range payload; {WEBHOOK_URL_ENV} overrides it.",
    )

    @field_validator("url")
    @classmethod
    def _require_http_url(cls, value: str) -> str:
        value = value.strip()
        parsed = urlparse(value)
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            raise ValueError("webhook url must be an absolute http(s) URL")
        return value


class NetworkConfig(BaseModel):
    bind_host: str = Field(default="127.0.0.1")
    port: int = Field(default=8790, ge=1, le=65535)


class LoggingConfig(BaseModel):
    max_size_mb: int = Field(
        default=10, ge=1, description="Max size of a log file in MB before rolling."
    )
    backup_count: int = Field(default=5, ge=1, description="Number of log archives to keep.")


class DashboardConfig(BaseModel):
    version: str = Field(default="1")
    webhook: WebhookConfig = Field(default_factory=WebhookConfig)
    network: NetworkConfig = Field(default_factory=NetworkConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def webhook_url(self) -> str:
        return self.webhook.url


def _read_json(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def load_dashboard_config(
    paths: DashboardPaths, environ: dict[str, str] | None = None
) -> DashboardConfig:
    """Load config from ${OVERLAY_DASHBOARD_HOME}/config/dashboard.json.

    - If missing: returns defaults.
    - N8N_WEBHOOK_URL, when non-blank, replaces webhook.url.
    - Validation is performed by Pydantic.
    """

    config_path = paths.dashboard_config_path
    if config_path.exists():
        config = DashboardConfig.model_validate(_read_json(config_path))
    else:
        config = DashboardConfig()

    return apply_env_overrides(config, environ)


def apply_env_overrides(
    config: DashboardConfig, environ: dict[str, str] | None = None
) -> DashboardConfig:
    env = os.environ if environ is None else environ

    raw = (env.get(WEBHOOK_URL_ENV) or "").strip()
    if not raw:
        return config

    webhook = WebhookConfig(url=raw)
    return config.model_copy(update={"webhook": webhook})

