"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .participants import ParticipantService, ParticipantStoreProtocol
from .pipeline import SchedulingPipeline
from .requests import (
    CreateParticipantRequest,
    ScheduleMeetingRequest,
    parse_participant_request,
    parse_schedule_request,
)
from .results import OperationResult, SchedulingFailure
from .scheduler import BookingLookupProtocol, BookingStoreProtocol, MeetingSchedulerService

__all__ = [
    "BookingLookupProtocol",
    "BookingStoreProtocol",
    "CreateParticipantRequest",
    "MeetingSchedulerService",
    "OperationResult",
    "ParticipantService",
    "ParticipantStoreProtocol",
    "ScheduleMeetingRequest",
    "SchedulingFailure",
    "SchedulingPipeline",
    "parse_participant_request",
    "parse_schedule_request",
]
