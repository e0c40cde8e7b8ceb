import pytest

from clockwise.schemas.timesheet import validate_timesheet_entry


def _entry(**overrides):
    entry = {
        "entry_date": "2024-05-06",
        "start_time": "09:00",
        "end_time": "10:30",
        "activity_type": "class",
        "activity_subtype": "CS101",
        "notes": "Lecture",
    }
    entry.update(overrides)
    return entry


def test_valid_entry_has_no_errors():
    assert validate_timesheet_entry(_entry()) == {}


def test_end_before_start_is_reported_on_end_time():
    errors = validate_timesheet_entry(_entry(start_time="10:00", end_time="09:00"))
    assert errors == {"end_time": "End time must be after start time"}


def test_equal_times_are_rejected():
    assert "end_time" in validate_timesheet_entry(_entry(start_time="10:00", end_time="10:00"))


@pytest.mark.parametrize("bad", ["9:00", "24:00", "12:60", "noon", "12:00:00", "09:00\n"])
def test_time_format_is_distinct_from_ordering(bad):
    errors = validate_timesheet_entry(_entry(start_time=bad))
    assert errors["start_time"] == "Invalid time format"
    assert "end_time" not in errors


@pytest.mark.parametrize("bad", ["06/05/2024", "2024-5-6", "2023-02-29", "", "2024-05-06\n"])
def test_bad_entry_date(bad):
    assert validate_timesheet_entry(_entry(entry_date=bad))["entry_date"] == "Invalid date format"


def test_activity_type_must_be_enumerated():
    assert "activity_type" in validate_timesheet_entry(_entry(activity_type="meeting"))


def test_length_limits():
    assert validate_timesheet_entry(_entry(activity_subtype="x" * 100)) == {}
    assert "activity_subtype" in validate_timesheet_entry(_entry(activity_subtype="x" * 101))
    assert validate_timesheet_entry(_entry(notes="n" * 1000)) == {}
    assert "notes" in validate_timesheet_entry(_entry(notes="n" * 1001))
