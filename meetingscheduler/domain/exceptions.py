"""
Domain-specific exception hierarchy and error kinds for the meeting scheduler.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Distinguishable failure kinds returned by scheduling operations."""

    INVALID_PARTICIPANTS = "invalid_participants"
    INVALID_DURATION = "invalid_duration"
    INVALID_TIME_RANGE = "invalid_time_range"
    OUTSIDE_BUSINESS_HOURS = "outside_business_hours"
    NO_AVAILABLE_SLOT = "no_available_slot"
    PARTICIPANT_NOT_FOUND = "participant_not_found"
    INVALID_PARTICIPANT_NAME = "invalid_participant_name"


class SchedulerError(Exception):
    """Base class for all application-level errors."""


class DomainValidationError(SchedulerError, ValueError):
    """Raised when an entity cannot be built because an invariant is violated."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message


class BookingValidationError(DomainValidationError):
    """Raised by Booking construction."""


class ParticipantValidationError(DomainValidationError):
    """Raised by Participant construction."""


class StorageError(SchedulerError):
    """Raised when the booking store cannot be read or written."""
