"""Tests for wstrust.timestamps."""

import datetime
import re

from wstrust.constants import TOKEN_LIFETIME
from wstrust.timestamps import format_timestamp, generate_timestamps

FIXED_NOW = datetime.datetime(2024, 3, 1, 12, 30, 45, 678901, tzinfo=datetime.timezone.utc)

_WIRE_FORMAT = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$")


def test_format_timestamp_milliseconds():
    assert format_timestamp(FIXED_NOW) == "2024-03-01T12:30:45.678Z"


def test_format_timestamp_converts_to_utc():
    plus_two = datetime.timezone(datetime.timedelta(hours=2))
    moment = datetime.datetime(2024, 3, 1, 14, 0, 0, 5000, tzinfo=plus_two)
    assert format_timestamp(moment) == "2024-03-01T12:00:00.005Z"


def test_generate_timestamps_fixed_clock(fixed_clock):
    pair = generate_timestamps(fixed_clock)
    assert pair.created == "2024-03-01T12:30:45.678Z"
    assert pair.expires == "2024-03-01T12:35:45.678Z"


def test_expires_minus_created_is_five_minutes():
    for _ in range(20):
        pair = generate_timestamps()
        assert pair.expires_at - pair.created_at == TOKEN_LIFETIME
        assert TOKEN_LIFETIME == datetime.timedelta(minutes=5)


def test_generated_values_match_wire_format():
    pair = generate_timestamps()
    assert _WIRE_FORMAT.match(pair.created)
    assert _WIRE_FORMAT.match(pair.expires)


def test_created_is_non_decreasing(fixed_clock):
    first = generate_timestamps(fixed_clock)
    second = generate_timestamps(fixed_clock)
    assert second.created_at >= first.created_at
    assert second.created >= first.created


def test_created_truncated_to_wire_precision():
    pair = generate_timestamps(lambda: FIXED_NOW)
    assert pair.created_at.microsecond == 678000
