"""
Tests for ParticipantService.
"""

import asyncio

import pendulum

from meetingscheduler.adapters.booking_store import InMemoryBookingStore
from meetingscheduler.domain.exceptions import ErrorKind
from meetingscheduler.domain.models import Booking, Participant
from meetingscheduler.services.participants import ParticipantService
from meetingscheduler.services.requests import CreateParticipantRequest


def utc(text: str):
    return pendulum.parse(text, tz="UTC")


def make_service():
    store = InMemoryBookingStore()
    return store, ParticipantService(store)


def test_create_participant_assigns_sequential_ids():
    store, service = make_service()

    first = asyncio.run(service.create_participant(CreateParticipantRequest(name="Alice")))
    second = asyncio.run(service.create_participant(CreateParticipantRequest(name="Bob")))

    assert first.is_success and second.is_success
    assert (first.value.id, first.value.name) == (1, "Alice")
    assert (second.value.id, second.value.name) == (2, "Bob")
    assert asyncio.run(store.get_participant(2)) == second.value


def test_list_participants_ordered_by_id():
    store, service = make_service()
    for name in ("Carol", "Alice", "Bob"):
        asyncio.run(service.create_participant(CreateParticipantRequest(name=name)))

    participants = asyncio.run(service.list_participants())

    assert [p.id for p in participants] == [1, 2, 3]
    assert [p.name for p in participants] == ["Carol", "Alice", "Bob"]


def test_bookings_of_unknown_participant():
    _, service = make_service()

    result = asyncio.run(service.get_participant_bookings(42))

    assert not result.is_success
    assert result.error.kind == ErrorKind.PARTICIPANT_NOT_FOUND
    assert "'42'" in result.error.message


def test_bookings_empty_for_participant_without_meetings():
    store, service = make_service()
    alice = asyncio.run(store.add_participant(Participant("Alice")))

    result = asyncio.run(service.get_participant_bookings(alice.id))

    assert result.is_success
    assert result.value == []


def test_bookings_are_chronological_with_resolved_participants():
    store, service = make_service()
    alice = asyncio.run(store.add_participant(Participant("Alice")))
    bob = asyncio.run(store.add_participant(Participant("Bob")))
    carol = asyncio.run(store.add_participant(Participant("Carol")))

    asyncio.run(store.add_booking(
        Booking([alice.id, carol.id], utc("2024-06-16 10:00"), utc("2024-06-16 11:00"))
    ))
    asyncio.run(store.add_booking(
        Booking([bob.id, alice.id], utc("2024-06-15 14:00"), utc("2024-06-15 15:00"))
    ))
    asyncio.run(store.add_booking(
        Booking([bob.id], utc("2024-06-15 09:00"), utc("2024-06-15 10:00"))
    ))

    result = asyncio.run(service.get_participant_bookings(alice.id))

    assert result.is_success
    views = result.value
    assert [v.booking.id for v in views] == [2, 1]
    assert [p.name for p in views[0].participants] == ["Bob", "Alice"]
    assert [p.name for p in views[1].participants] == ["Alice", "Carol"]
