"""Form state machine.

`transition` is pure: it takes the current `FormState` and an event and returns
the next state. `FormSession` wraps one session's state and drives the single
awaited webhook call between the `Submit` and `Settled` transitions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

import httpx
from pydantic import BaseModel, ConfigDict

from overlay_dashboard.client import SubmissionResult, describe_failure, submit
from overlay_dashboard.validation import RangeValidationError, validate


Phase = Literal["idle", "invalid", "submitting", "succeeded", "failed"]


class FormState(BaseModel):
    model_config = ConfigDict(frozen=True)

    start_raw: str = ""
    end_raw: str = ""
    phase: Phase = "idle"
    error: str | None = None
    error_kind: str | None = None
    result: SubmissionResult | None = None

    @property
    def is_submitting(self) -> bool:
        return self.phase == "submitting"


@dataclass(frozen=True)
class Edit:
    field: Literal["start", "end"]
    value: str


@dataclass(frozen=True)
class Submit:
    pass


@dataclass(frozen=True)
class Settled:
    result: SubmissionResult


@dataclass(frozen=True)
class Reset:
    pass


Event = Edit | Submit | Settled | Reset


class SubmissionInProgress(RuntimeError):
    """Raised when a session already has a webhook call outstanding."""


def _on_edit(state: FormState, event: Edit) -> FormState:
    update: dict[str, object] = {}
    if event.field == "start":
        update["start_raw"] = event.value
    else:
        update["end_raw"] = event.value

    if state.phase != "submitting":
        update.update(phase="idle", error=None, error_kind=None)
    return state.model_copy(update=update)


def _on_submit(state: FormState) -> FormState:
    if state.phase == "submitting":
        return state

    try:
        range_ = validate(state.start_raw, state.end_raw)
    except RangeValidationError as exc:
        return state.model_copy(
            update={"phase": "invalid", "error": exc.message, "error_kind": exc.kind}
        )

    return state.model_copy(
        update={
            "phase": "submitting",
            "error": None,
            "error_kind": None,
            "result": SubmissionResult(payload_sent=range_),
        }
    )


def _on_settled(state: FormState, event: Settled) -> FormState:
    if state.phase != "submitting":
        return state
    phase: Phase = "succeeded" if event.result.ok else "failed"
    return state.model_copy(update={"phase": phase, "result": event.result})


def transition(state: FormState, event: Event) -> FormState:
    if isinstance(event, Edit):
        return _on_edit(state, event)
    if isinstance(event, Submit):
        return _on_submit(state)
    if isinstance(event, Settled):
        return _on_settled(state, event)
    if isinstance(event, Reset):
        return FormState()
    raise TypeError(f"Unknown form event: {event!r}")


class FormSession:
    """Mutable holder for one browser session's `FormState`.

    The in-flight flag lives outside `FormState` so that a `Reset` during a
    webhook call cannot release it.
    """

    def __init__(self, state: FormState | None = None) -> None:
        self.state = state or FormState()
        self._in_flight = False

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def apply(self, event: Event) -> FormState:
        self.state = transition(self.state, event)
        return self.state

    def reset(self) -> FormState:
        return self.apply(Reset())

    async def submit(
        self,
        start_raw: str,
        end_raw: str,
        *,
        endpoint: str,
        client: httpx.AsyncClient | None = None,
    ) -> FormState:
        # No await between this check and setting the flag below, so the guard
        # holds on a single event loop without a lock.
        if self._in_flight:
            raise SubmissionInProgress("A submission is already in progress")

        self.apply(Edit("start", start_raw))
        self.apply(Edit("end", end_raw))
        state = self.apply(Submit())
        if not state.is_submitting:
            return state

        range_ = state.result.payload_sent if state.result is not None else None
        if range_ is None:
            return state

        self._in_flight = True
        try:
            result = await submit(range_, endpoint, client=client)
        except BaseException as exc:
            self.apply(
                Settled(
                    SubmissionResult(
                        response_body=describe_failure(exc),
                        payload_sent=range_,
                        transport_failed=True,
                    )
                )
            )
            raise
        finally:
            self._in_flight = False
        return self.apply(Settled(result))
