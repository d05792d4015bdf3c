"""
Validate -> execute -> observe, composed explicitly around the services.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Any, List, Mapping, Optional

from pendulum import DateTime

from ..domain.exceptions import ErrorKind
from ..domain.models import BookingView, Participant
from ..limits import DEFAULT_MAX_PARTICIPANTS, SLOW_REQUEST_THRESHOLD_MS
from .participants import ParticipantService
from .requests import parse_participant_request, parse_schedule_request
from .results import OperationResult
from .scheduler import MeetingSchedulerService

logger = logging.getLogger(__name__)


class SchedulingPipeline:
    """
    Runs raw requests through validation, the matching service call and timing.

    Validation failures never reach the services; every outcome is logged with
    its duration and a warning when it is slower than ``slow_request_ms``.
    """

    def __init__(
        self,
        scheduler: MeetingSchedulerService,
        participants: ParticipantService,
        *,
        max_participants: int = DEFAULT_MAX_PARTICIPANTS,
        slow_request_ms: int = SLOW_REQUEST_THRESHOLD_MS,
    ) -> None:
        self._scheduler = scheduler
        self._participants = participants
        self._max_participants = max_participants
        self._slow_request_ms = slow_request_ms

    async def schedule(
        self,
        data: Mapping[str, Any],
        *,
        now: Optional[datetime] = None,
    ) -> OperationResult[BookingView]:
        started = time.perf_counter()

        parsed = parse_schedule_request(data, now=now, max_participants=self._max_participants)
        if not parsed.is_success:
            result: OperationResult[BookingView] = OperationResult(error=parsed.error)
        else:
            result = await self._scheduler.schedule_meeting(parsed.value)

        self._observe("schedule", result, started)
        return result

    async def find(
        self,
        data: Mapping[str, Any],
        *,
        now: Optional[datetime] = None,
    ) -> OperationResult[DateTime]:
        """Validate a request and return the earliest free slot without booking it."""
        started = time.perf_counter()

        parsed = parse_schedule_request(data, now=now, max_participants=self._max_participants)
        if not parsed.is_success:
            result: OperationResult[DateTime] = OperationResult(error=parsed.error)
        else:
            request = parsed.value
            slot = await self._scheduler.find_earliest_slot(
                participant_ids=request.participant_ids,
                duration_minutes=request.duration_minutes,
                earliest_start=request.earliest_start,
                latest_end=request.latest_end,
            )
            if slot is None:
                result = OperationResult.failure(
                    ErrorKind.NO_AVAILABLE_SLOT,
                    "No available time slot found within the specified constraints"
                )
            else:
                result = OperationResult.success(slot)

        self._observe("find", result, started)
        return result

    async def create_participant(self, data: Mapping[str, Any]) -> OperationResult[Participant]:
        started = time.perf_counter()

        parsed = parse_participant_request(data)
        if not parsed.is_success:
            result: OperationResult[Participant] = OperationResult(error=parsed.error)
        else:
            result = await self._participants.create_participant(parsed.value)

        self._observe("create_participant", result, started)
        return result

    async def participant_bookings(self, participant_id: int) -> OperationResult[List[BookingView]]:
        started = time.perf_counter()
        result = await self._participants.get_participant_bookings(participant_id)
        self._observe("participant_bookings", result, started)
        return result

    def _observe(self, operation: str, result: OperationResult, started: float) -> None:
        elapsed_ms = (time.perf_counter() - started) * 1000

        if result.is_success:
            logger.debug("%s succeeded in %.1fms", operation, elapsed_ms)
        else:
            logger.warning(
                "%s failed in %.1fms: %s - %s",
                operation, elapsed_ms, result.error.kind.value, result.error.message
            )

        if elapsed_ms > self._slow_request_ms:
            logger.warning("Slow request detected: %s took %.1fms", operation, elapsed_ms)
