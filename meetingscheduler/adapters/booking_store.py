"""
Booking and participant storage: in memory, optionally backed by a JSON file.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import pendulum
from pendulum import DateTime

from ..domain.conflicts import intervals_overlap, shares_participant
from ..domain.exceptions import DomainValidationError, StorageError
from ..domain.models import Booking, Participant

logger = logging.getLogger(__name__)


class InMemoryBookingStore:
    """
    Keeps participants and bookings in process memory.

    Ids are assigned sequentially starting at 1. Stored entities are never
    mutated; ``add_*`` returns an assigned copy.
    """

    def __init__(self):
        self._participants: Dict[int, Participant] = {}
        self._bookings: List[Booking] = []
        self._next_participant_id = 1
        self._next_booking_id = 1

    async def add_participant(self, participant: Participant) -> Participant:
        assigned = participant.with_id(self._next_participant_id)
        self._next_participant_id += 1
        self._participants[assigned.id] = assigned
        self._on_change()
        return assigned

    async def get_participant(self, participant_id: int) -> Optional[Participant]:
        return self._participants.get(participant_id)

    async def get_participants(self, participant_ids: Sequence[int]) -> List[Participant]:
        return [
            self._participants[pid]
            for pid in dict.fromkeys(participant_ids)
            if pid in self._participants
        ]

    async def list_participants(self) -> List[Participant]:
        return [self._participants[pid] for pid in sorted(self._participants)]

    async def add_booking(self, booking: Booking) -> Booking:
        logger.debug(
            "Adding booking for participants %s at %s - %s",
            booking.participant_ids, booking.start_time, booking.end_time
        )
        assigned = booking.with_id(self._next_booking_id)
        self._next_booking_id += 1
        self._bookings.append(assigned)
        self._on_change()
        logger.info("Saved booking %s", assigned.id)
        return assigned

    async def get_participant_bookings(self, participant_id: int) -> List[Booking]:
        bookings = [b for b in self._bookings if participant_id in b.participant_ids]
        logger.debug("Found %d bookings for participant %s", len(bookings), participant_id)
        return sorted(bookings, key=lambda b: (b.start_time, b.id))

    async def get_overlapping_bookings(
        self,
        participant_ids: Sequence[int],
        window_start: DateTime,
        window_end: DateTime
    ) -> List[Booking]:
        """Bookings intersecting ``[window_start, window_end)`` that share a participant."""
        bookings = [
            b for b in self._bookings
            if intervals_overlap(b.start_time, b.end_time, window_start, window_end)
            and shares_participant(b.participant_ids, participant_ids)
        ]
        logger.debug(
            "Found %d potentially conflicting bookings for participants %s",
            len(bookings), list(participant_ids)
        )
        return bookings

    def _on_change(self) -> None:
        """Hook for subclasses that persist state."""


class JsonBookingStore(InMemoryBookingStore):
    """
    In-memory store that loads from and saves to a JSON file.

    The file is rewritten after every write. Layout:
    {"participants": [{"id": 1, "name": "..."}],
     "bookings": [{"id": 1, "participantIds": [1], "start": "...", "end": "..."}]}
    """

    def __init__(self, data_file: Path):
        super().__init__()
        self.data_file = Path(data_file)
        self._load()

    def _load(self) -> None:
        if not self.data_file.exists():
            return

        try:
            with open(self.data_file, "r", encoding="utf-8") as f:
                data = json.load(f) or {}
        except (OSError, json.JSONDecodeError) as exc:
            raise StorageError(f"Could not read data file {self.data_file}: {exc}") from exc

        if not isinstance(data, dict):
            raise StorageError(f"Data file {self.data_file} must contain a mapping at the root level.")

        try:
            for record in data.get("participants", []):
                participant = Participant(name=record["name"], id=int(record["id"]))
                self._participants[participant.id] = participant

            for record in data.get("bookings", []):
                self._bookings.append(
                    Booking(
                        participant_ids=tuple(record["participantIds"]),
                        start_time=pendulum.parse(record["start"]),
                        end_time=pendulum.parse(record["end"]),
                        id=int(record["id"])
                    )
                )
        except (KeyError, TypeError, ValueError, DomainValidationError) as exc:
            raise StorageError(f"Invalid record in {self.data_file}: {exc}") from exc

        self._next_participant_id = max(self._participants, default=0) + 1
        self._next_booking_id = max((b.id for b in self._bookings), default=0) + 1
        logger.debug(
            "Loaded %d participants and %d bookings from %s",
            len(self._participants), len(self._bookings), self.data_file
        )

    def _on_change(self) -> None:
        self._save()

    def _save(self) -> None:
        payload: Dict[str, Any] = {
            "participants": [
                {"id": p.id, "name": p.name}
                for p in sorted(self._participants.values(), key=lambda p: p.id)
            ],
            "bookings": [
                {
                    "id": b.id,
                    "participantIds": list(b.participant_ids),
                    "start": b.start_time.to_iso8601_string(),
                    "end": b.end_time.to_iso8601_string(),
                }
                for b in self._bookings
            ],
        }

        tmp_file = self.data_file.with_suffix(self.data_file.suffix + ".tmp")
        try:
            self.data_file.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_file, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2)
            tmp_file.replace(self.data_file)
        except OSError as exc:
            raise StorageError(f"Could not write data file {self.data_file}: {exc}") from exc
