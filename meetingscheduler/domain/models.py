"""
Domain models for bookings, participants and business hours.
"""

import dataclasses
from dataclasses import dataclass, field
from datetime import datetime, time
from typing import Any, Dict, List, Optional, Sequence, Tuple
from uuid import UUID, uuid4

import pendulum
from pendulum import DateTime

from .conflicts import conflicts, intervals_overlap
from .exceptions import (
    BookingValidationError,
    ErrorKind,
    ParticipantValidationError,
)

REFERENCE_TIMEZONE = "UTC"
MAX_PARTICIPANT_NAME_LENGTH = 100


def to_utc(value: datetime) -> DateTime:
    """Convert any datetime to a pendulum DateTime in UTC. Naive values are read as UTC."""
    return pendulum.instance(value, tz=REFERENCE_TIMEZONE).in_timezone(REFERENCE_TIMEZONE)


@dataclass(frozen=True)
class TimeRange:
    """
    Represents an immutable time range with start and end datetime.

    Invariant: start must be before end.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start time {self.start} must be before end time {self.end}")

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((self.end - self.start).total_seconds() / 60)

    def overlaps(self, other: "TimeRange") -> bool:
        """Check if this range overlaps with another."""
        return intervals_overlap(self.start, self.end, other.start, other.end)

    def __str__(self) -> str:
        return f"{self.start.format('DD.MM.YYYY HH:mm')} - {self.end.format('HH:mm')}"


@dataclass(frozen=True)
class BusinessHours:
    """
    The daily band within which every booking must fall.

    Times are read in the reference timezone (UTC).
    """
    start_time: time = time(9, 0)
    end_time: time = time(17, 0)

    def opening_for(self, moment: DateTime) -> DateTime:
        """Opening instant on the calendar day of ``moment``."""
        return moment.set(
            hour=self.start_time.hour,
            minute=self.start_time.minute,
            second=0,
            microsecond=0
        )

    def closing_for(self, moment: DateTime) -> DateTime:
        """Closing instant on the calendar day of ``moment``."""
        return moment.set(
            hour=self.end_time.hour,
            minute=self.end_time.minute,
            second=0,
            microsecond=0
        )

    def get_range_for_day(self, moment: DateTime) -> TimeRange:
        """Business hours of the day ``moment`` falls on."""
        return TimeRange(start=self.opening_for(moment), end=self.closing_for(moment))

    def contains(self, start: DateTime, end: DateTime) -> bool:
        """
        Check that ``[start, end)`` lies inside the business hours of the day it starts on.

        A range that crosses midnight is never contained.
        """
        day = self.get_range_for_day(start)
        return day.start <= start and end <= day.end

    def is_open_at(self, moment: DateTime) -> bool:
        """Check if a meeting could start at ``moment``."""
        return self.opening_for(moment) <= moment < self.closing_for(moment)

    def next_opening(self, moment: DateTime) -> DateTime:
        """
        Earliest opening instant not before ``moment``.

        Before opening this is the same day's opening; otherwise the next day's.
        """
        opening = self.opening_for(moment)
        if moment <= opening:
            return opening
        return self.opening_for(moment.add(days=1))


BUSINESS_HOURS = BusinessHours()


@dataclass(frozen=True)
class BookingScheduled:
    """
    Event: a booking was created.

    Produced alongside the booking, never dispatched by the domain itself.
    ``booking_id`` stays ``None`` until the store assigns one.
    """
    booking_id: Optional[int]
    participant_ids: Tuple[int, ...]
    start_time: DateTime
    end_time: DateTime
    event_id: UUID = field(default_factory=uuid4)
    occurred_at: DateTime = field(default_factory=lambda: pendulum.now(REFERENCE_TIMEZONE))

    @classmethod
    def from_booking(cls, booking: "Booking") -> "BookingScheduled":
        return cls(
            booking_id=booking.id,
            participant_ids=booking.participant_ids,
            start_time=booking.start_time,
            end_time=booking.end_time
        )

    def with_booking_id(self, booking_id: int) -> "BookingScheduled":
        """Return a copy carrying the identity assigned at persistence time."""
        return dataclasses.replace(self, booking_id=booking_id)

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        return {
            "event_id": str(self.event_id),
            "event_type": self.__class__.__name__,
            "occurred_at": self.occurred_at.to_iso8601_string(),
            "booking_id": self.booking_id,
            "participant_ids": list(self.participant_ids),
            "start_time": self.start_time.to_iso8601_string(),
            "end_time": self.end_time.to_iso8601_string(),
        }


@dataclass(frozen=True)
class Booking:
    """
    A scheduled meeting between participants.

    Invariants, checked in this order on construction:
    1. start_time < end_time
    2. [start_time, end_time) lies within business hours of the start day
    3. at least one participant
    4. no duplicate participants

    ``id`` is ``None`` until the store hands back an assigned copy via ``with_id``.
    """
    participant_ids: Tuple[int, ...]
    start_time: DateTime
    end_time: DateTime
    id: Optional[int] = None

    def __post_init__(self):
        start = to_utc(self.start_time)
        end = to_utc(self.end_time)

        _validate_time_slot(start, end)
        _validate_business_hours(start, end)
        _validate_participants(self.participant_ids)

        object.__setattr__(self, "participant_ids", tuple(self.participant_ids))
        object.__setattr__(self, "start_time", start)
        object.__setattr__(self, "end_time", end)

    @classmethod
    def schedule(
        cls,
        participant_ids: Sequence[int],
        start_time: datetime,
        end_time: datetime
    ) -> Tuple["Booking", BookingScheduled]:
        """Build a booking and the event announcing it."""
        booking = cls(
            participant_ids=tuple(participant_ids) if participant_ids is not None else None,
            start_time=start_time,
            end_time=end_time
        )
        return booking, BookingScheduled.from_booking(booking)

    def with_id(self, booking_id: int) -> "Booking":
        """Return an assigned copy of this booking."""
        if self.id is not None:
            raise ValueError(f"Booking already has id {self.id}")
        return dataclasses.replace(self, id=booking_id)

    @property
    def time_range(self) -> TimeRange:
        return TimeRange(start=self.start_time, end=self.end_time)

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return self.time_range.duration_minutes()

    def has_conflict_with(self, other: Optional["Booking"]) -> bool:
        """Check whether this booking overlaps another for any shared participant."""
        return conflicts(self, other)

    def is_within_business_hours(self) -> bool:
        return BUSINESS_HOURS.contains(self.start_time, self.end_time)


def _validate_time_slot(start: DateTime, end: DateTime) -> None:
    if start >= end:
        raise BookingValidationError(
            ErrorKind.INVALID_TIME_RANGE,
            "Meeting start time must be before end time"
        )


def _validate_business_hours(start: DateTime, end: DateTime) -> None:
    if not BUSINESS_HOURS.contains(start, end):
        raise BookingValidationError(
            ErrorKind.OUTSIDE_BUSINESS_HOURS,
            "Meeting must be scheduled within business hours (09:00-17:00 UTC)"
        )


def _validate_participants(participant_ids: Optional[Sequence[int]]) -> None:
    if not participant_ids:
        raise BookingValidationError(
            ErrorKind.INVALID_PARTICIPANTS,
            "Meeting must have at least one participant"
        )

    if len(set(participant_ids)) != len(participant_ids):
        raise BookingValidationError(
            ErrorKind.INVALID_PARTICIPANTS,
            "Duplicate participants are not allowed"
        )


@dataclass(frozen=True)
class Participant:
    """A person who can take part in meetings."""
    name: str
    id: Optional[int] = None

    def __post_init__(self):
        if self.name is not None and not isinstance(self.name, str):
            raise ParticipantValidationError(
                ErrorKind.INVALID_PARTICIPANT_NAME,
                f"Participant name must be text, got {type(self.name).__name__}"
            )
        if self.name is None or not self.name.strip():
            raise ParticipantValidationError(
                ErrorKind.INVALID_PARTICIPANT_NAME,
                "Participant name cannot be empty"
            )
        if len(self.name) > MAX_PARTICIPANT_NAME_LENGTH:
            raise ParticipantValidationError(
                ErrorKind.INVALID_PARTICIPANT_NAME,
                f"Participant name cannot exceed {MAX_PARTICIPANT_NAME_LENGTH} characters"
            )

    def with_id(self, participant_id: int) -> "Participant":
        """Return an assigned copy of this participant."""
        if self.id is not None:
            raise ValueError(f"Participant already has id {self.id}")
        return dataclasses.replace(self, id=participant_id)


@dataclass
class BookingView:
    """
    A booking together with its resolved participant records, ready for display.
    """
    booking: Booking
    participants: List[Participant]

    def format_display(self) -> str:
        """
        Format the booking for display.
        Format: Weekday, DD.MM.YYYY | HH:mm – HH:mm UTC (N min) · names
        """
        start = self.booking.start_time
        end = self.booking.end_time

        weekday = start.format("dddd")
        date_str = start.format("DD.MM.YYYY")
        time_str = f"{start.format('HH:mm')} – {end.format('HH:mm')} UTC"
        duration = self.booking.duration_minutes()
        names = ", ".join(p.name for p in self.participants)

        return f"{weekday}, {date_str} | {time_str} ({duration} min) · {names}"
