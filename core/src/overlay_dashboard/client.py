"""Outbound webhook client.

One call to `submit` performs exactly one POST. There is no retry and no
timeout beyond the httpx default; overlapping calls are the caller's concern.
"""

from __future__ import annotations

import json
import logging
from typing import Final, Literal

import httpx
from pydantic import BaseModel, ConfigDict

from overlay_dashboard.config import DashboardConfig
from overlay_dashboard.validation import ValidatedRange

logger = logging.getLogger(__name__)

JSON_HEADERS: Final[dict[str, str]] = {"Content-Type": "application/json"}

Outcome = Literal["pending", "succeeded", "http_error", "transport_error"]


class SubmissionResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    http_status: int | None = None
    response_body: str = ""
    payload_sent: ValidatedRange | None = None
    transport_failed: bool = False

    @property
    def ok(self) -> bool:
        return self.http_status is not None and 200 <= self.http_status < 300

    @property
    def outcome(self) -> Outcome:
        if self.transport_failed:
            return "transport_error"
        if self.http_status is None:
            return "pending"
        if self.ok:
            return "succeeded"
        return "http_error"


def build_async_client(
    config: DashboardConfig | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create the shared `httpx.AsyncClient` used for webhook calls.

    `transport` lets tests plug in an `httpx.MockTransport`.
    """

    config = config or DashboardConfig()
    return httpx.AsyncClient(
        follow_redirects=True,
        headers={"User-Agent": f"overlay-dashboard/{config.version}"},
        transport=transport,
    )


def describe_failure(exc: BaseException) -> str:
    text = str(exc).strip()
    return text or type(exc).__name__


async def _post(client: httpx.AsyncClient, endpoint: str, body: str) -> httpx.Response:
    return await client.post(endpoint, content=body, headers=JSON_HEADERS)


async def submit(
    range_: ValidatedRange,
    endpoint: str,
    *,
    client: httpx.AsyncClient | None = None,
) -> SubmissionResult:
    """POST `range_` as JSON to `endpoint` and capture what came back.

    Any HTTP status is recorded with its body verbatim. Transport failures
    (DNS, refused connection, timeout, bad URL) yield `http_status=None` and
    the failure text as the body. Nothing is raised for either case.
    """

    body = json.dumps(range_.to_payload())

    try:
        if client is None:
            async with build_async_client() as own_client:
                response = await _post(own_client, endpoint, body)
                text = response.text
        else:
            response = await _post(client, endpoint, body)
            text = response.text
    except (httpx.RequestError, httpx.InvalidURL) as exc:
        message = describe_failure(exc)
        logger.warning("Webhook POST to %s failed: %s", endpoint, message)
        return SubmissionResult(
            http_status=None,
            response_body=message,
            payload_sent=range_,
            transport_failed=True,
        )

    if response.is_success:
        logger.info("Webhook POST to %s - %s", endpoint, response.status_code)
    else:
        logger.warning("Webhook POST to %s - %s", endpoint, response.status_code)

    return SubmissionResult(
        http_status=response.status_code,
        response_body=text,
        payload_sent=range_,
    )
