"""
Application services for scheduling meetings.

The service coordinates fetching existing bookings via a store adapter and
delegates the actual slot search to the domain-level ``SlotFinder``. This keeps
the CLI thin and improves testability by allowing the storage dependency to be
replaced via a simple protocol.

Search and persist are two separate steps with no lock between them: two
concurrent requests for overlapping participants can both find the same slot
and both be stored. Callers that need isolation must serialize
``schedule_meeting`` calls themselves.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Iterable, List, Optional, Protocol, Sequence

from pendulum import DateTime

from ..domain.exceptions import BookingValidationError, ErrorKind
from ..domain.models import Booking, BookingScheduled, BookingView, Participant, to_utc
from ..domain.slot_finder import SlotFinder
from .requests import ScheduleMeetingRequest
from .results import OperationResult, SchedulingFailure

logger = logging.getLogger(__name__)

EventSink = Callable[[BookingScheduled], None]


class BookingLookupProtocol(Protocol):
    """Protocol describing the lookup capability needed by the slot search."""

    async def get_overlapping_bookings(
        self,
        participant_ids: Sequence[int],
        window_start: DateTime,
        window_end: DateTime,
    ) -> List[Booking]:
        """
        Return every booking intersecting the window that shares a participant.

        Over-fetching is fine; missing a booking breaks conflict detection.
        """


class BookingStoreProtocol(BookingLookupProtocol, Protocol):
    """Lookup plus the persistence operations used when booking."""

    async def add_booking(self, booking: Booking) -> Booking:
        """Persist and return an assigned copy of ``booking``."""

    async def get_participants(self, participant_ids: Sequence[int]) -> List[Participant]:
        """Return the known participants among ``participant_ids``."""


class MeetingSchedulerService:
    """
    Orchestrates booking lookup, slot search and persistence.

    Dependency inversion toward a protocol makes it easy to plug in the JSON
    file store or a stub in tests.
    """

    def __init__(
        self,
        store: BookingStoreProtocol,
        slot_finder: Optional[SlotFinder] = None,
        event_sinks: Iterable[EventSink] = (),
    ) -> None:
        self._store = store
        self._slot_finder = slot_finder or SlotFinder()
        self._event_sinks = list(event_sinks)

    def subscribe(self, sink: EventSink) -> None:
        """Register a callable that receives every ``BookingScheduled`` event."""
        self._event_sinks.append(sink)

    async def find_earliest_slot(
        self,
        *,
        participant_ids: Sequence[int],
        duration_minutes: int,
        earliest_start: datetime,
        latest_end: datetime,
    ) -> Optional[DateTime]:
        """
        Fetch the existing-bookings snapshot and search it for the earliest slot.
        """
        existing = await self.fetch_existing_bookings(
            participant_ids=participant_ids,
            earliest_start=earliest_start,
            latest_end=latest_end,
        )

        return self._slot_finder.find_earliest_slot(
            participant_ids=participant_ids,
            duration_minutes=duration_minutes,
            earliest_start=earliest_start,
            latest_end=latest_end,
            existing_bookings=existing,
        )

    async def fetch_existing_bookings(
        self,
        *,
        participant_ids: Sequence[int],
        earliest_start: datetime,
        latest_end: datetime,
    ) -> List[Booking]:
        """
        Fetch bookings for the whole calendar days the window touches.
        """
        if not participant_ids:
            return []

        window_start = to_utc(earliest_start).start_of("day")
        window_end = to_utc(latest_end).start_of("day").add(days=1)

        bookings = await self._store.get_overlapping_bookings(
            participant_ids=list(participant_ids),
            window_start=window_start,
            window_end=window_end,
        )

        logger.debug(
            "Retrieved %d existing bookings between %s and %s",
            len(bookings), window_start, window_end
        )
        return list(bookings)

    async def schedule_meeting(
        self,
        request: ScheduleMeetingRequest,
    ) -> OperationResult[BookingView]:
        """
        Book the earliest free slot for a validated request.

        Returns a failure value for unknown participants, an exhausted window or
        a booking that cannot be built. Store errors propagate.
        """
        participant_ids = list(request.participant_ids)
        logger.info(
            "Scheduling meeting for participants %s, duration %d minutes, window %s - %s",
            participant_ids, request.duration_minutes, request.earliest_start, request.latest_end
        )

        participants = await self._store.get_participants(participant_ids)
        found_ids = {participant.id for participant in participants}
        missing_ids = [pid for pid in participant_ids if pid not in found_ids]
        if missing_ids:
            logger.warning("Scheduling failed: missing participants %s", missing_ids)
            return OperationResult.failure(
                ErrorKind.PARTICIPANT_NOT_FOUND,
                f"The participant with id '{missing_ids[0]}' was not found"
            )

        slot = await self.find_earliest_slot(
            participant_ids=participant_ids,
            duration_minutes=request.duration_minutes,
            earliest_start=request.earliest_start,
            latest_end=request.latest_end,
        )

        if slot is None:
            logger.warning(
                "No available slot for participants %s in window %s - %s",
                participant_ids, request.earliest_start, request.latest_end
            )
            return OperationResult.failure(
                ErrorKind.NO_AVAILABLE_SLOT,
                "No available time slot found within the specified constraints"
            )

        try:
            booking, event = Booking.schedule(
                participant_ids,
                slot,
                slot.add(minutes=request.duration_minutes),
            )
        except BookingValidationError as exc:
            logger.warning("Booking creation failed for %s: %s", participant_ids, exc.message)
            return OperationResult(error=SchedulingFailure.from_exception(exc))

        saved = await self._store.add_booking(booking)
        logger.info(
            "Created booking %s for participants %s at %s - %s",
            saved.id, participant_ids, saved.start_time, saved.end_time
        )

        self._publish(event.with_booking_id(saved.id))

        by_id = {participant.id: participant for participant in participants}
        return OperationResult.success(
            BookingView(
                booking=saved,
                participants=[by_id[pid] for pid in saved.participant_ids],
            )
        )

    def _publish(self, event: BookingScheduled) -> None:
        for sink in self._event_sinks:
            sink(event)
