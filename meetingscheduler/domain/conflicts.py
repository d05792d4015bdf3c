"""
Conflict detection between bookings.

Pure functions only: no I/O, no clock, no state. Two commitments conflict when
their half-open intervals overlap and they share at least one participant.
"""

from datetime import datetime
from typing import Iterable, Optional, Protocol, Sequence


class Commitment(Protocol):
    """Anything with a half-open time interval and a set of participants."""

    participant_ids: Sequence[int]
    start_time: datetime
    end_time: datetime


def intervals_overlap(
    start_a: datetime,
    end_a: datetime,
    start_b: datetime,
    end_b: datetime
) -> bool:
    """
    Check whether ``[start_a, end_a)`` and ``[start_b, end_b)`` overlap.

    Back-to-back intervals (one ends exactly when the other starts) do not overlap.
    """
    return start_a < end_b and end_a > start_b


def shares_participant(ids_a: Iterable[int], ids_b: Iterable[int]) -> bool:
    """Check whether two participant collections have at least one id in common."""
    return not set(ids_a).isdisjoint(ids_b)


def conflicts(a: Optional[Commitment], b: Optional[Commitment]) -> bool:
    """
    Decide whether two commitments collide.

    Symmetric and total: a missing commitment on either side never conflicts.
    """
    if a is None or b is None:
        return False

    if not intervals_overlap(a.start_time, a.end_time, b.start_time, b.end_time):
        return False

    return shares_participant(a.participant_ids, b.participant_ids)


def conflicts_with_any(
    start_time: datetime,
    end_time: datetime,
    participant_ids: Sequence[int],
    existing: Iterable[Optional[Commitment]]
) -> bool:
    """Check a candidate slot for the given participants against existing commitments."""
    for commitment in existing:
        if commitment is None:
            continue
        if not intervals_overlap(start_time, end_time, commitment.start_time, commitment.end_time):
            continue
        if shares_participant(participant_ids, commitment.participant_ids):
            return True
    return False
