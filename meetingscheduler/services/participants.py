"""
Participant registration and per-participant booking queries.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Protocol, Sequence

from ..domain.exceptions import ErrorKind, ParticipantValidationError
from ..domain.models import Booking, BookingView, Participant
from .requests import CreateParticipantRequest
from .results import OperationResult, SchedulingFailure

logger = logging.getLogger(__name__)


class ParticipantStoreProtocol(Protocol):
    """Storage operations the participant service relies on."""

    async def add_participant(self, participant: Participant) -> Participant:
        """Persist and return an assigned copy of ``participant``."""

    async def get_participant(self, participant_id: int) -> Optional[Participant]:
        """Return the participant or None."""

    async def get_participants(self, participant_ids: Sequence[int]) -> List[Participant]:
        """Return the known participants among ``participant_ids``."""

    async def list_participants(self) -> List[Participant]:
        """Return all participants ordered by id."""

    async def get_participant_bookings(self, participant_id: int) -> List[Booking]:
        """Return the participant's bookings ordered by start time."""


class ParticipantService:
    """Creates participants and lists their bookings."""

    def __init__(self, store: ParticipantStoreProtocol) -> None:
        self._store = store

    async def create_participant(
        self,
        request: CreateParticipantRequest,
    ) -> OperationResult[Participant]:
        logger.info("Creating participant with name: %s", request.name)

        try:
            participant = Participant(name=request.name)
        except ParticipantValidationError as exc:
            logger.warning("Participant creation failed for %r: %s", request.name, exc.message)
            return OperationResult(error=SchedulingFailure.from_exception(exc))

        created = await self._store.add_participant(participant)
        logger.info("Created participant %s with name: %s", created.id, created.name)
        return OperationResult.success(created)

    async def list_participants(self) -> List[Participant]:
        return await self._store.list_participants()

    async def get_participant_bookings(
        self,
        participant_id: int,
    ) -> OperationResult[List[BookingView]]:
        """
        Return the participant's bookings with every co-participant resolved.

        Co-participants missing from the store are left out of the view.
        """
        participant = await self._store.get_participant(participant_id)
        if participant is None:
            return OperationResult.failure(
                ErrorKind.PARTICIPANT_NOT_FOUND,
                f"The participant with id '{participant_id}' was not found"
            )

        bookings = await self._store.get_participant_bookings(participant_id)
        if not bookings:
            return OperationResult.success([])

        all_ids = sorted({pid for booking in bookings for pid in booking.participant_ids})
        known = await self._store.get_participants(all_ids)
        by_id = {p.id: p for p in known}

        views = [
            BookingView(
                booking=booking,
                participants=[by_id[pid] for pid in booking.participant_ids if pid in by_id],
            )
            for booking in bookings
        ]
        return OperationResult.success(views)
