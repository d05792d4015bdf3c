"""
Tests for request validation and error kind mapping.
"""

import pendulum
import pytest

from meetingscheduler.domain.exceptions import ErrorKind
from meetingscheduler.services.requests import (
    CreateParticipantRequest,
    ScheduleMeetingRequest,
    parse_participant_request,
    parse_schedule_request,
)


def utc(text: str):
    return pendulum.parse(text, tz="UTC")


def schedule_data(**overrides):
    data = {
        "participant_ids": [1, 2],
        "duration_minutes": 60,
        "earliest_start": utc("2024-06-15 09:00"),
        "latest_end": utc("2024-06-15 17:00"),
    }
    data.update(overrides)
    return data


class TestParseScheduleRequest:
    """Tests for parse_schedule_request."""

    def test_valid_request(self):
        result = parse_schedule_request(schedule_data())

        assert result.is_success
        request = result.value
        assert isinstance(request, ScheduleMeetingRequest)
        assert request.participant_ids == [1, 2]
        assert request.duration_minutes == 60
        assert request.earliest_start == utc("2024-06-15 09:00")

    def test_times_are_normalized_to_utc(self):
        result = parse_schedule_request(
            schedule_data(
                earliest_start="2024-06-15T11:00:00+02:00",
                latest_end="2024-06-15T19:00:00+02:00",
            )
        )

        assert result.is_success
        assert result.value.earliest_start == utc("2024-06-15 09:00")
        assert result.value.earliest_start.timezone_name == "UTC"
        assert result.value.latest_end.hour == 17

    @pytest.mark.parametrize(
        "participant_ids, message",
        [
            ([], "At least one participant is required"),
            ([1, 0], "All participant IDs must be greater than 0"),
            ([1, -4], "All participant IDs must be greater than 0"),
            ([1, 2, 1], "Duplicate participants are not allowed"),
        ],
    )
    def test_invalid_participants(self, participant_ids, message):
        result = parse_schedule_request(schedule_data(participant_ids=participant_ids))

        assert not result.is_success
        assert result.error.kind == ErrorKind.INVALID_PARTICIPANTS
        assert result.error.message == message

    def test_too_many_participants(self):
        result = parse_schedule_request(
            schedule_data(participant_ids=[1, 2, 3, 4]), max_participants=3
        )

        assert result.error.kind == ErrorKind.INVALID_PARTICIPANTS
        assert "more than 3" in result.error.message

    def test_default_participant_limit(self):
        assert parse_schedule_request(schedule_data(participant_ids=list(range(1, 51)))).is_success
        assert not parse_schedule_request(schedule_data(participant_ids=list(range(1, 52)))).is_success

    @pytest.mark.parametrize(
        "duration, message",
        [
            (0, "Duration must be greater than 0 minutes"),
            (-15, "Duration must be greater than 0 minutes"),
            (10, "Minimum meeting duration is 15 minutes"),
            (495, "Duration cannot exceed 480 minutes"),
            (50, "Duration must be in 15-minute increments"),
        ],
    )
    def test_invalid_duration(self, duration, message):
        result = parse_schedule_request(schedule_data(duration_minutes=duration))

        assert result.error.kind == ErrorKind.INVALID_DURATION
        assert result.error.message == message

    def test_inverted_window(self):
        result = parse_schedule_request(
            schedule_data(earliest_start=utc("2024-06-15 17:00"), latest_end=utc("2024-06-15 09:00"))
        )

        assert result.error.kind == ErrorKind.INVALID_TIME_RANGE
        assert result.error.message == "Earliest start time must be before latest end time"

    def test_duration_longer_than_window(self):
        result = parse_schedule_request(
            schedule_data(latest_end=utc("2024-06-15 09:30"))
        )

        assert result.error.kind == ErrorKind.INVALID_TIME_RANGE
        assert "must fit within" in result.error.message

    def test_window_longer_than_thirty_days(self):
        result = parse_schedule_request(
            schedule_data(latest_end=utc("2024-07-16 09:00"))
        )

        assert result.error.kind == ErrorKind.INVALID_TIME_RANGE
        assert "30 days" in result.error.message

    def test_unparseable_time(self):
        result = parse_schedule_request(schedule_data(earliest_start="not a date"))

        assert result.error.kind == ErrorKind.INVALID_TIME_RANGE

    def test_participant_rule_reported_before_duration_rule(self):
        result = parse_schedule_request(schedule_data(participant_ids=[], duration_minutes=0))

        assert result.error.kind == ErrorKind.INVALID_PARTICIPANTS

    def test_past_start_rejected_when_now_is_given(self):
        now = utc("2024-06-15 12:00")

        result = parse_schedule_request(schedule_data(), now=now)

        assert result.error.kind == ErrorKind.INVALID_TIME_RANGE
        assert result.error.message == "Earliest start time must be in the future"

    def test_small_clock_skew_is_tolerated(self):
        now = utc("2024-06-15 09:03")

        assert parse_schedule_request(schedule_data(), now=now).is_success

    def test_past_start_allowed_without_now(self):
        assert parse_schedule_request(schedule_data()).is_success


class TestParseParticipantRequest:
    """Tests for parse_participant_request."""

    @pytest.mark.parametrize("name", ["Alice", "Mary-Jane O'Neil", "Dr. Who"])
    def test_valid_names(self, name):
        result = parse_participant_request({"name": name})

        assert result.is_success
        assert isinstance(result.value, CreateParticipantRequest)
        assert result.value.name == name

    @pytest.mark.parametrize(
        "name, message",
        [
            ("", "Participant name is required"),
            ("   ", "Participant name is required"),
            ("A" * 101, "Participant name cannot exceed 100 characters"),
            ("R2D2", "Participant name can only contain letters, spaces, hyphens, apostrophes, and periods"),
        ],
    )
    def test_invalid_names(self, name, message):
        result = parse_participant_request({"name": name})

        assert result.error.kind == ErrorKind.INVALID_PARTICIPANT_NAME
        assert result.error.message == message

    def test_missing_name(self):
        result = parse_participant_request({})

        assert result.error.kind == ErrorKind.INVALID_PARTICIPANT_NAME
