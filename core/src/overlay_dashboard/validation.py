from __future__ import annotations

import re
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

# An all-zero fraction ("5.0", "5.") is still a whole number.
_INTEGER_RE = re.compile(r"([+-]?[0-9]+)(?:\.0*)?")


class ValidatedRange(BaseModel):
    """A non-negative, ordered second range ready to be sent to the webhook."""

    model_config = ConfigDict(frozen=True)

    start_second: int = Field(ge=0, serialization_alias="startSecond")
    end_second: int = Field(ge=0, serialization_alias="endSecond")

    @model_validator(mode="after")
    def _check_order(self) -> ValidatedRange:
        if self.start_second > self.end_second:
            raise ValueError("start_second must be <= end_second")
        return self

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class RangeValidationError(ValueError):
    kind: ClassVar[str] = "validation_error"
    default_message: ClassVar[str] = "Invalid range."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class EmptyOrNonInteger(RangeValidationError):
    kind = "empty_or_non_integer"
    default_message = "Please enter whole numbers for both fields."


class Negative(RangeValidationError):
    kind = "negative"
    default_message = "Values must be non-negative."


class RangeInverted(RangeValidationError):
    kind = "range_inverted"
    default_message = "Starting second must be less than or equal to ending second."


def _parse_int_strict(raw: str | None) -> int | None:
    text = (raw or "").strip()
    match = _INTEGER_RE.fullmatch(text)
    if match is None:
        return None
    return int(match.group(1))


def validate(start_raw: str, end_raw: str) -> ValidatedRange:
    """Turn the two raw form fields into a ValidatedRange.

    Raises EmptyOrNonInteger, Negative or RangeInverted (checked in that order).
    """

    start = _parse_int_strict(start_raw)
    end = _parse_int_strict(end_raw)

    if start is None or end is None:
        raise EmptyOrNonInteger()
    if start < 0 or end < 0:
        raise Negative()
    if start > end:
        raise RangeInverted()

    return ValidatedRange(start_second=start, end_second=end)
