from datetime import date
from types import SimpleNamespace

import pytest

from clockwise.core.exceptions import DataIntegrityError
from clockwise.services import reporting
from clockwise.services.directory import DirectoryMember


def entry(day, start, end, activity="class", status="approved", user_id="u1", department_id="d1"):
    return SimpleNamespace(
        id=f"{user_id}-{day}-{start}", user_id=user_id, department_id=department_id, entry_date=day,
        start_time=start, end_time=end, activity_type=activity, status=status,
    )


class FakeTimesheets:
    def __init__(self, entries):
        self._entries = entries
        self.last_args = None

    def fetch_entries(self, **kwargs):
        self.last_args = kwargs
        return [e for e in self._entries
                if kwargs.get("user_id") in (None, e.user_id)
                and (kwargs.get("user_ids") is None or e.user_id in kwargs["user_ids"])]


class FakeSettings:
    def __init__(self, targets):
        self._rows = {uid: SimpleNamespace(user_id=uid, daily_target_minutes=m) for uid, m in targets.items()}

    def get(self, user_id):
        return self._rows.get(user_id)

    def get_many(self, user_ids):
        return {uid: self._rows[uid] for uid in user_ids if uid in self._rows}


@pytest.mark.parametrize("rate, band", [
    (100.0, "Exceeded Target"),
    (99.9, "On Track"),
    (70.0, "On Track"),
    (69.9, "Behind Schedule"),
    (50.0, "Behind Schedule"),
    (49.9, "Critical"),
])
def test_completion_band(rate, band):
    assert reporting.completion_band(rate) == band


def test_working_days_skip_weekends():
    # 2024-06-10 (Mon) .. 2024-06-23 (Sun)
    assert reporting.count_working_days(date(2024, 6, 10), date(2024, 6, 23)) == 10
    assert reporting.count_working_days(date(2024, 6, 15), date(2024, 6, 16)) == 0


def test_completion_counts_submitted_and_approved_only():
    entries = [
        entry(date(2024, 6, 10), "09:00", "13:00", status="approved"),
        entry(date(2024, 6, 11), "09:00", "13:00", status="submitted"),
        entry(date(2024, 6, 12), "09:00", "17:00", status="draft"),
        entry(date(2024, 6, 13), "09:00", "17:00", status="rejected"),
    ]

    metrics = reporting.completion_metrics(entries, 480, date(2024, 6, 10), date(2024, 6, 14))

    assert metrics.actual_hours == 8
    assert metrics.expected_hours == 40
    assert metrics.completion_rate == 20
    assert metrics.status == "Critical"
    assert metrics.working_days == 5


def test_completion_with_no_expected_hours_is_zero():
    metrics = reporting.completion_metrics([], 480, date(2024, 6, 15), date(2024, 6, 16))
    assert metrics.completion_rate == 0
    assert metrics.average_hours_per_day == 0


def test_activity_breakdown_percentages_sum_to_100():
    entries = [
        entry(date(2024, 6, 10), "09:00", "10:00", activity="class"),
        entry(date(2024, 6, 10), "10:00", "10:20", activity="quiz"),
        entry(date(2024, 6, 11), "09:00", "12:00", activity="class"),
        entry(date(2024, 6, 11), "13:00", "13:07", activity="admin"),
    ]

    breakdown = reporting.activity_breakdown(entries)

    assert sum(item.percentage for item in breakdown) == pytest.approx(100.0)
    assert breakdown[0].activity_type == "class"
    assert breakdown[0].count == 2
    assert breakdown[0].hours == 4


def test_activity_breakdown_empty_state():
    assert reporting.activity_breakdown([]) == []


def test_non_positive_duration_is_a_data_integrity_error():
    broken = entry(date(2024, 6, 10), "10:00", "09:00")
    with pytest.raises(DataIntegrityError):
        reporting.total_hours([broken])
    with pytest.raises(DataIntegrityError):
        reporting.activity_breakdown([broken])


def test_period_series_buckets_by_week():
    entries = [
        entry(date(2024, 6, 10), "09:00", "10:00"),
        entry(date(2024, 6, 16), "09:00", "11:00"),
        entry(date(2024, 6, 17), "09:00", "10:30"),
    ]

    series = reporting.period_series(entries, "weekly")

    assert [p.period_start for p in series] == [date(2024, 6, 10), date(2024, 6, 17)]
    assert [p.hours for p in series] == [3, 1.5]
    assert series[0].label == "Week of 10/06/2024"


def test_summary_stats():
    entries = [
        entry(date(2024, 6, 10), "09:00", "10:00", status="approved"),
        entry(date(2024, 6, 10), "10:00", "11:00", status="submitted"),
        entry(date(2024, 6, 10), "11:00", "12:00", status="rejected"),
    ]
    stats = reporting.summary_stats(entries)
    assert (stats.total_entries, stats.total_hours, stats.approved_hours) == (3, 3, 1)
    assert (stats.pending_count, stats.rejected_count) == (1, 1)


def test_effective_daily_target():
    assert reporting.effective_daily_target(None, 480) == 480
    assert reporting.effective_daily_target(SimpleNamespace(daily_target_minutes=None), 480) == 480
    assert reporting.effective_daily_target(SimpleNamespace(daily_target_minutes=300), 480) == 300


def test_member_report_uses_the_members_own_target():
    timesheets = FakeTimesheets([entry(date(2024, 6, 10), "09:00", "14:00")])

    report = reporting.build_member_report(
        timesheets, FakeSettings({"u1": 300}), user_id="u1", period="daily",
        start=date(2024, 6, 10), end=date(2024, 6, 10), default_target_minutes=480,
    )

    assert timesheets.last_args["user_id"] == "u1"
    assert report.completion.expected_hours == 5
    assert report.completion.status == "Exceeded Target"
    assert len(report.series) == 1


def test_department_report_sums_member_targets():
    members = [
        DirectoryMember(id="u1", full_name="Bob", department_name="CS"),
        DirectoryMember(id="u2", full_name="Carol", department_name="CS"),
    ]
    timesheets = FakeTimesheets([
        entry(date(2024, 6, 10), "09:00", "13:00", user_id="u1"),
        entry(date(2024, 6, 10), "09:00", "11:00", user_id="u2"),
        entry(date(2024, 6, 10), "09:00", "11:00", user_id="stranger"),
    ])

    report = reporting.build_department_report(
        timesheets, FakeSettings({"u2": 240}), members, department_id="d1", period="daily",
        start=date(2024, 6, 10), end=date(2024, 6, 10), default_target_minutes=480,
    )

    assert report.completion.expected_hours == 12
    assert report.completion.actual_hours == 6
    assert report.completion.completion_rate == pytest.approx(50.0)
    assert [m.user_id for m in report.member_breakdown] == ["u1", "u2"]
    assert report.member_breakdown[1].completion_rate == pytest.approx(50.0)
