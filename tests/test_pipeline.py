"""
Tests for the validate -> execute -> observe pipeline.
"""

import asyncio
import logging
from types import SimpleNamespace

import pendulum

from meetingscheduler.adapters.booking_store import InMemoryBookingStore
from meetingscheduler.domain.exceptions import ErrorKind
from meetingscheduler.domain.models import Participant
from meetingscheduler.services.participants import ParticipantService
from meetingscheduler.services import pipeline as pipeline_module
from meetingscheduler.services.pipeline import SchedulingPipeline
from meetingscheduler.services.scheduler import MeetingSchedulerService


def utc(text: str):
    return pendulum.parse(text, tz="UTC")


class RecordingScheduler(MeetingSchedulerService):
    def __init__(self, store):
        super().__init__(store=store)
        self.calls = 0

    async def schedule_meeting(self, request):
        self.calls += 1
        return await super().schedule_meeting(request)


def make_pipeline(**kwargs):
    store = InMemoryBookingStore()
    scheduler = RecordingScheduler(store)
    pipeline = SchedulingPipeline(scheduler, ParticipantService(store), **kwargs)
    return store, scheduler, pipeline


def request_data(participant_ids, **overrides):
    data = {
        "participant_ids": participant_ids,
        "duration_minutes": 60,
        "earliest_start": utc("2024-06-15 09:00"),
        "latest_end": utc("2024-06-15 17:00"),
    }
    data.update(overrides)
    return data


def test_schedule_success():
    store, scheduler, pipeline = make_pipeline()
    alice = asyncio.run(store.add_participant(Participant("Alice")))

    result = asyncio.run(pipeline.schedule(request_data([alice.id])))

    assert result.is_success
    assert result.value.booking.start_time == utc("2024-06-15 09:00")
    assert scheduler.calls == 1


def test_validation_failure_skips_service():
    _, scheduler, pipeline = make_pipeline()

    result = asyncio.run(pipeline.schedule(request_data([1], duration_minutes=7)))

    assert result.error.kind == ErrorKind.INVALID_DURATION
    assert scheduler.calls == 0


def test_configured_participant_limit_applies():
    _, scheduler, pipeline = make_pipeline(max_participants=2)

    result = asyncio.run(pipeline.schedule(request_data([1, 2, 3])))

    assert result.error.kind == ErrorKind.INVALID_PARTICIPANTS
    assert scheduler.calls == 0


def test_now_is_forwarded_to_validation():
    store, scheduler, pipeline = make_pipeline()
    alice = asyncio.run(store.add_participant(Participant("Alice")))

    result = asyncio.run(
        pipeline.schedule(request_data([alice.id]), now=utc("2024-06-20 09:00"))
    )

    assert result.error.kind == ErrorKind.INVALID_TIME_RANGE
    assert scheduler.calls == 0


def test_failure_is_logged_as_warning(caplog):
    _, _, pipeline = make_pipeline()

    with caplog.at_level(logging.WARNING, logger="meetingscheduler.services.pipeline"):
        asyncio.run(pipeline.schedule(request_data([])))

    assert any(
        "schedule failed" in record.getMessage() and "invalid_participants" in record.getMessage()
        for record in caplog.records
    )


def test_slow_request_is_logged(caplog, monkeypatch):
    _, _, pipeline = make_pipeline(slow_request_ms=1000)
    ticks = iter([10.0, 12.5])
    monkeypatch.setattr(pipeline_module, "time", SimpleNamespace(perf_counter=lambda: next(ticks)))

    with caplog.at_level(logging.WARNING, logger="meetingscheduler.services.pipeline"):
        asyncio.run(pipeline.participant_bookings(99))

    assert any("Slow request detected: participant_bookings" in r.getMessage() for r in caplog.records)


def test_create_participant_validation():
    _, _, pipeline = make_pipeline()

    created = asyncio.run(pipeline.create_participant({"name": "Alice"}))
    rejected = asyncio.run(pipeline.create_participant({"name": "Al1ce"}))

    assert created.is_success
    assert created.value.id == 1
    assert rejected.error.kind == ErrorKind.INVALID_PARTICIPANT_NAME


def test_participant_bookings_not_found():
    _, _, pipeline = make_pipeline()

    result = asyncio.run(pipeline.participant_bookings(5))

    assert result.error.kind == ErrorKind.PARTICIPANT_NOT_FOUND


def test_find_returns_slot_without_booking():
    store, scheduler, pipeline = make_pipeline()
    alice = asyncio.run(store.add_participant(Participant("Alice")))

    result = asyncio.run(
        pipeline.find(request_data([alice.id], earliest_start=utc("2024-06-15 10:07")))
    )

    assert result.is_success
    assert result.value == utc("2024-06-15 10:15")
    assert asyncio.run(store.get_participant_bookings(alice.id)) == []
    assert scheduler.calls == 0


def test_find_without_free_slot():
    _, _, pipeline = make_pipeline()

    result = asyncio.run(pipeline.find(request_data([1], duration_minutes=480)))

    assert result.error.kind == ErrorKind.NO_AVAILABLE_SLOT


def test_find_validation_failure_is_logged(caplog):
    _, _, pipeline = make_pipeline()

    with caplog.at_level(logging.WARNING, logger="meetingscheduler.services.pipeline"):
        result = asyncio.run(pipeline.find(request_data([1], duration_minutes=20)))

    assert result.error.kind == ErrorKind.INVALID_DURATION
    assert any("find failed" in record.getMessage() for record in caplog.records)


def test_slow_find_is_logged(caplog, monkeypatch):
    _, _, pipeline = make_pipeline(slow_request_ms=500)
    ticks = iter([1.0, 2.0])
    monkeypatch.setattr(pipeline_module, "time", SimpleNamespace(perf_counter=lambda: next(ticks)))

    with caplog.at_level(logging.WARNING, logger="meetingscheduler.services.pipeline"):
        asyncio.run(pipeline.find(request_data([1])))

    assert any("Slow request detected: find" in r.getMessage() for r in caplog.records)
