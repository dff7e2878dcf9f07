from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Final, Literal

from overlay_dashboard.client import SubmissionResult
from overlay_dashboard.form import FormState

STATUS_PLACEHOLDER: Final[str] = "—"
RESPONSE_PLACEHOLDER: Final[str] = "(no response yet)"
EMPTY_PAYLOAD: Final[dict[str, str]] = {"startSecond": "", "endSecond": ""}


@dataclass(frozen=True)
class ResultView:
    status_line: str
    payload_json: str
    response_text: str


@dataclass(frozen=True)
class Flash:
    message: str
    kind: Literal["ok", "bad"]


def present(result: SubmissionResult | None) -> ResultView:
    if result is None:
        result = SubmissionResult()

    status_line = str(result.http_status) if result.http_status is not None else STATUS_PLACEHOLDER

    payload = result.payload_sent.to_payload() if result.payload_sent is not None else EMPTY_PAYLOAD

    return ResultView(
        status_line=status_line,
        payload_json=json.dumps(payload, indent=2),
        response_text=result.response_body or RESPONSE_PLACEHOLDER,
    )


def flash_for(state: FormState) -> Flash | None:
    """Toast for the most recent transition, if it warrants one."""

    if state.phase == "invalid" and state.error:
        return Flash(message=state.error, kind="bad")

    result = state.result
    if result is None or state.phase not in {"succeeded", "failed"}:
        return None

    if result.outcome == "transport_error":
        return Flash(message=f"Network error: {result.response_body}", kind="bad")
    if result.ok:
        return Flash(message=f"Sent to n8n (Status {result.http_status})", kind="ok")
    return Flash(message=f"Request failed with status {result.http_status}", kind="bad")
