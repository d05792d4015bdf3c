"""
Core business logic for finding the earliest available meeting slot.

This is the heart of the application - pure domain logic without any
external dependencies (no API calls, no database, no I/O).
"""

import logging
from datetime import datetime
from typing import Optional, Sequence

from pendulum import DateTime

from .conflicts import Commitment, conflicts_with_any
from .models import BUSINESS_HOURS, BusinessHours, to_utc

logger = logging.getLogger(__name__)

SLOT_QUANTUM_MINUTES = 15


def ceil_to_quantum(moment: DateTime, quantum_minutes: int = SLOT_QUANTUM_MINUTES) -> DateTime:
    """
    Round ``moment`` up to the next quantum boundary.

    Already aligned instants are returned unchanged; minute 60 rolls over
    into the next hour (and day).

    Example (15 minutes):
    10:00 -> 10:00, 10:07 -> 10:15, 10:50 -> 11:00, 10:15:30 -> 10:30
    """
    floored = moment.set(
        minute=moment.minute - moment.minute % quantum_minutes,
        second=0,
        microsecond=0
    )
    if floored == moment:
        return floored
    return floored.add(minutes=quantum_minutes)


class SlotFinder:
    """
    Finds the earliest quantized, business-hours slot free for every participant.

    Algorithm:
    1. Round the window start up to the quantum and move it into business hours
    2. Check the candidate fits the window, else stop
    3. Accept it if it lies inside business hours and collides with no booking
    4. Otherwise step one quantum forward, jumping over closed hours
    5. Repeat from 2

    Malformed input never raises; it yields ``None`` just like an exhausted search.
    """

    def __init__(
        self,
        business_hours: BusinessHours = BUSINESS_HOURS,
        quantum_minutes: int = SLOT_QUANTUM_MINUTES
    ):
        self.business_hours = business_hours
        self.quantum_minutes = quantum_minutes

    def find_earliest_slot(
        self,
        participant_ids: Optional[Sequence[int]],
        duration_minutes: int,
        earliest_start: datetime,
        latest_end: datetime,
        existing_bookings: Sequence[Commitment] = ()
    ) -> Optional[DateTime]:
        """
        Find the start of the earliest feasible slot.

        Args:
            participant_ids: Participants who must all be free
            duration_minutes: Meeting length in minutes
            earliest_start: Start of the scheduling window
            latest_end: End of the scheduling window
            existing_bookings: Snapshot of bookings that may collide

        Returns:
            The slot start in UTC, or None when no slot exists
        """
        logger.debug(
            "Searching slot for %d participants, duration %s minutes",
            len(participant_ids or ()), duration_minutes
        )

        if not participant_ids:
            logger.warning("No slot: no participants provided")
            return None

        if duration_minutes is None or duration_minutes <= 0:
            logger.warning("No slot: invalid duration %s", duration_minutes)
            return None

        window_start = to_utc(earliest_start)
        window_end = to_utc(latest_end)

        if window_start >= window_end:
            logger.warning("No slot: invalid time range %s >= %s", window_start, window_end)
            return None

        if window_start.add(minutes=duration_minutes) >= window_end:
            logger.warning(
                "No slot: duration %d does not fit within window %s - %s",
                duration_minutes, window_start, window_end
            )
            return None

        candidate = self.first_candidate(window_start)
        slots_checked = 0

        while True:
            candidate_end = candidate.add(minutes=duration_minutes)
            if candidate_end > window_end:
                break

            slots_checked += 1

            if self._is_acceptable(candidate, candidate_end, participant_ids, existing_bookings):
                logger.info(
                    "Found slot after checking %d candidates: %s - %s",
                    slots_checked, candidate, candidate_end
                )
                return candidate

            candidate = self.next_candidate(candidate)

        logger.warning(
            "No slot found after checking %d candidates for %d participants",
            slots_checked, len(participant_ids)
        )
        return None

    def first_candidate(self, earliest_start: DateTime) -> DateTime:
        """
        First quantized start not earlier than ``earliest_start``, moved into business hours.
        """
        rounded = ceil_to_quantum(earliest_start, self.quantum_minutes)
        if self.business_hours.is_open_at(rounded):
            return rounded
        return self.business_hours.next_opening(rounded)

    def next_candidate(self, candidate: DateTime) -> DateTime:
        """Step one quantum forward, skipping closed hours."""
        advanced = candidate.add(minutes=self.quantum_minutes)
        if self.business_hours.is_open_at(advanced):
            return advanced
        return self.business_hours.next_opening(advanced)

    def _is_acceptable(
        self,
        start: DateTime,
        end: DateTime,
        participant_ids: Sequence[int],
        existing_bookings: Sequence[Commitment]
    ) -> bool:
        if not self.business_hours.contains(start, end):
            return False
        return not conflicts_with_any(start, end, participant_ids, existing_bookings)
