"""
Request models validated before any scheduling work happens.

Field-level rules live here rather than in the domain: id ranges, duration
increments, window length and "not in the past" checks.
"""

import re
from datetime import datetime
from typing import Any, List, Mapping, Optional

from pydantic import BaseModel, ValidationError, ValidationInfo, field_validator, model_validator

from ..domain.exceptions import ErrorKind
from ..domain.models import MAX_PARTICIPANT_NAME_LENGTH, to_utc
from ..domain.slot_finder import SLOT_QUANTUM_MINUTES
from ..limits import DEFAULT_MAX_PARTICIPANTS, MAX_WINDOW_DAYS
from .results import OperationResult

MIN_DURATION_MINUTES = 15
MAX_DURATION_MINUTES = 480
PAST_TOLERANCE_MINUTES = 5

NAME_PATTERN = re.compile(r"^[a-zA-Z\s\-'\.]+$")

_SCHEDULE_FIELD_KINDS = {
    "participant_ids": ErrorKind.INVALID_PARTICIPANTS,
    "duration_minutes": ErrorKind.INVALID_DURATION,
}


class ScheduleMeetingRequest(BaseModel):
    """Request to book the earliest free slot for a group of participants."""
    participant_ids: List[int]
    duration_minutes: int
    earliest_start: datetime
    latest_end: datetime

    @field_validator("participant_ids")
    @classmethod
    def validate_participant_ids(cls, value: List[int], info: ValidationInfo) -> List[int]:
        """Ensure participants are present, positive, unique and not too many."""
        if not value:
            raise ValueError("At least one participant is required")
        if any(pid <= 0 for pid in value):
            raise ValueError("All participant IDs must be greater than 0")
        if len(set(value)) != len(value):
            raise ValueError("Duplicate participants are not allowed")

        context = info.context or {}
        max_participants = context.get("max_participants", DEFAULT_MAX_PARTICIPANTS)
        if len(value) > max_participants:
            raise ValueError(f"Cannot have more than {max_participants} participants in a meeting")
        return value

    @field_validator("duration_minutes")
    @classmethod
    def validate_duration(cls, value: int) -> int:
        """Ensure the duration is positive, bounded and quantum aligned."""
        if value <= 0:
            raise ValueError("Duration must be greater than 0 minutes")
        if value < MIN_DURATION_MINUTES:
            raise ValueError(f"Minimum meeting duration is {MIN_DURATION_MINUTES} minutes")
        if value > MAX_DURATION_MINUTES:
            raise ValueError(f"Duration cannot exceed {MAX_DURATION_MINUTES} minutes")
        if value % SLOT_QUANTUM_MINUTES != 0:
            raise ValueError(f"Duration must be in {SLOT_QUANTUM_MINUTES}-minute increments")
        return value

    @field_validator("earliest_start", "latest_end")
    @classmethod
    def normalize_to_utc(cls, value: datetime) -> datetime:
        return to_utc(value)

    @model_validator(mode="after")
    def validate_window(self, info: ValidationInfo) -> "ScheduleMeetingRequest":
        """Ensure the window is ordered, holds the meeting and is not too long or in the past."""
        if self.earliest_start >= self.latest_end:
            raise ValueError("Earliest start time must be before latest end time")

        if self.earliest_start.add(minutes=self.duration_minutes) > self.latest_end:
            raise ValueError("The meeting duration must fit within the specified time range")

        if (self.latest_end - self.earliest_start).total_seconds() > MAX_WINDOW_DAYS * 86400:
            raise ValueError(f"Time range cannot exceed {MAX_WINDOW_DAYS} days")

        context = info.context or {}
        now = context.get("now")
        if now is not None:
            threshold = to_utc(now).subtract(minutes=PAST_TOLERANCE_MINUTES)
            if self.earliest_start <= threshold:
                raise ValueError("Earliest start time must be in the future")
        return self


class CreateParticipantRequest(BaseModel):
    """Request to register a new participant."""
    name: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Participant name is required")
        if len(value) > MAX_PARTICIPANT_NAME_LENGTH:
            raise ValueError(
                f"Participant name cannot exceed {MAX_PARTICIPANT_NAME_LENGTH} characters"
            )
        if not NAME_PATTERN.match(value):
            raise ValueError(
                "Participant name can only contain letters, spaces, hyphens, apostrophes, and periods"
            )
        return value


def parse_schedule_request(
    data: Mapping[str, Any],
    *,
    now: Optional[datetime] = None,
    max_participants: int = DEFAULT_MAX_PARTICIPANTS
) -> OperationResult[ScheduleMeetingRequest]:
    """
    Validate raw input into a ``ScheduleMeetingRequest``.

    The first failing rule decides the error kind: participant rules map to
    INVALID_PARTICIPANTS, duration rules to INVALID_DURATION and everything
    about the window to INVALID_TIME_RANGE.
    """
    context = {"max_participants": max_participants, "now": now}

    try:
        request = ScheduleMeetingRequest.model_validate(dict(data), context=context)
    except ValidationError as exc:
        error = exc.errors()[0]
        field = error["loc"][0] if error["loc"] else None
        kind = _SCHEDULE_FIELD_KINDS.get(field, ErrorKind.INVALID_TIME_RANGE)
        return OperationResult.failure(kind, _error_message(error))

    return OperationResult.success(request)


def parse_participant_request(data: Mapping[str, Any]) -> OperationResult[CreateParticipantRequest]:
    """Validate raw input into a ``CreateParticipantRequest``."""
    try:
        request = CreateParticipantRequest.model_validate(dict(data))
    except ValidationError as exc:
        return OperationResult.failure(
            ErrorKind.INVALID_PARTICIPANT_NAME,
            _error_message(exc.errors()[0])
        )
    return OperationResult.success(request)


def _error_message(error: Mapping[str, Any]) -> str:
    """Prefer the original ValueError text over pydantic's prefixed message."""
    ctx_error = (error.get("ctx") or {}).get("error")
    if ctx_error is not None:
        return str(ctx_error)
    return error["msg"]
