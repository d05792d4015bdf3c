"""
Domain layer - Pure business logic without external dependencies.
"""

from .conflicts import conflicts, conflicts_with_any, intervals_overlap
from .exceptions import (
    BookingValidationError,
    ErrorKind,
    ParticipantValidationError,
    SchedulerError,
    StorageError,
)
from .models import (
    BUSINESS_HOURS,
    Booking,
    BookingScheduled,
    BookingView,
    BusinessHours,
    Participant,
    TimeRange,
    to_utc,
)
from .slot_finder import SLOT_QUANTUM_MINUTES, SlotFinder, ceil_to_quantum

__all__ = [
    "BUSINESS_HOURS",
    "Booking",
    "BookingScheduled",
    "BookingValidationError",
    "BookingView",
    "BusinessHours",
    "ErrorKind",
    "Participant",
    "ParticipantValidationError",
    "SLOT_QUANTUM_MINUTES",
    "SchedulerError",
    "SlotFinder",
    "StorageError",
    "TimeRange",
    "ceil_to_quantum",
    "conflicts",
    "conflicts_with_any",
    "intervals_overlap",
    "to_utc",
]
