"""Tests for slot generation."""
import pytest

from app.core.errors import ValidationError
from app.services.slot_generator import (
    format_time_of_day,
    generate_slots,
    normalize_time_of_day,
    parse_closing_time,
    parse_time_of_day,
    slot_containing,
)


def test_working_day_in_half_hours():
    slots = generate_slots("09:00", "17:00", 30)

    assert len(slots) == 16
    assert slots[0] == "09:00"
    assert slots[-1] == "16:30"


def test_equal_bounds_give_no_slots():
    assert generate_slots("09:00", "09:00", 30) == ()


def test_inverted_hours_give_no_slots():
    assert generate_slots("21:00", "07:00", 60) == ()


def test_slots_strictly_increase_by_granularity():
    slots = generate_slots("07:00", "21:00", 45)
    minutes = [parse_time_of_day(s) for s in slots]

    assert all(b - a == 45 for a, b in zip(minutes, minutes[1:]))
    assert minutes[-1] < parse_time_of_day("21:00")


def test_last_slot_may_start_before_closing_without_fitting():
    # 09:00-10:00 every 45 minutes: 09:45 starts before closing
    assert generate_slots("09:00", "10:00", 45) == ("09:00", "09:45")


def test_carry_into_hour_field():
    assert generate_slots("09:50", "10:30", 20) == ("09:50", "10:10")


def test_repeated_calls_are_identical():
    assert generate_slots("08:00", "12:00", 60) == generate_slots("08:00", "12:00", 60)


@pytest.mark.parametrize("granularity", [0, -30])
def test_non_positive_granularity_is_rejected(granularity):
    with pytest.raises(ValidationError):
        generate_slots("09:00", "17:00", granularity)


@pytest.mark.parametrize("value", ["9am", "24:00", "12:60", "", "12"])
def test_malformed_times_are_rejected(value):
    with pytest.raises(ValidationError):
        parse_time_of_day(value)


def test_seconds_are_tolerated():
    assert parse_time_of_day("10:30:00") == 630
    assert normalize_time_of_day("9:05:59") == "09:05"


def test_format_pads_hours_and_minutes():
    assert format_time_of_day(65) == "01:05"


def test_slot_containing_floors_to_slot_start():
    assert slot_containing(parse_time_of_day("10:15"), "09:00", 30) == "10:00"
    assert slot_containing(parse_time_of_day("10:30"), "09:00", 30) == "10:30"


def test_slot_containing_respects_opening_offset():
    assert slot_containing(parse_time_of_day("10:00"), "09:15", 30) == "09:45"


def test_slot_containing_before_opening_maps_to_itself():
    assert slot_containing(parse_time_of_day("08:10"), "09:00", 30) == "08:10"


def test_midnight_closing_runs_to_end_of_day():
    slots = generate_slots("18:00", "24:00", 30)

    assert len(slots) == 12
    assert slots[-1] == "23:30"


def test_midnight_is_only_a_closing_time():
    assert parse_closing_time("24:00") == 1440
    assert parse_closing_time("24:00:00") == 1440
    with pytest.raises(ValidationError):
        generate_slots("24:00", "24:00", 30)
