# clockwise/services/reporting.py
# Turns timesheet rows into the numbers behind the report cards and charts.
import logging
from collections import OrderedDict
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel

from clockwise.core.exceptions import DataIntegrityError
from clockwise.services.date_ranges import PeriodType
from clockwise.services.time_utils import calculate_duration_minutes, minutes_to_hours

logger = logging.getLogger(__name__)

# Entries that count towards a completion target.
COUNTED_STATUSES = ("submitted", "approved")


class ActivityBreakdown(BaseModel):
    activity_type: str
    hours: float
    percentage: float
    count: int


class PeriodPoint(BaseModel):
    period_start: date
    label: str
    hours: float
    count: int


class CompletionMetrics(BaseModel):
    actual_hours: float
    expected_hours: float
    completion_rate: float
    status: str
    working_days: int
    average_hours_per_day: float
    extra_hours: float


class SummaryStats(BaseModel):
    total_entries: int
    total_hours: float
    approved_hours: float
    pending_count: int
    rejected_count: int


class DepartmentTotals(BaseModel):
    department_id: Optional[str]
    total_hours: float
    entry_count: int


def entry_duration_minutes(entry) -> int:
    """
    Duration of a stored entry. A non-positive duration means the entry never
    went through validation and is reported, not clamped.
    """
    minutes = calculate_duration_minutes(entry.start_time, entry.end_time)
    if minutes <= 0:
        raise DataIntegrityError(
            f"Entry {getattr(entry, 'id', '?')} has non-positive duration "
            f"({entry.start_time}-{entry.end_time})"
        )
    return minutes


def total_minutes(entries: Iterable) -> int:
    return sum(entry_duration_minutes(e) for e in entries)


def total_hours(entries: Iterable) -> float:
    return minutes_to_hours(total_minutes(entries))


def count_working_days(start: date, end: date) -> int:
    """Monday to Friday, both bounds inclusive."""
    days = 0
    current = start
    while current <= end:
        if current.weekday() < 5:
            days += 1
        current += timedelta(days=1)
    return days


def expected_hours(daily_target_minutes: int, working_days: int) -> float:
    return minutes_to_hours(daily_target_minutes * working_days)


def completion_rate(actual: float, expected: float) -> float:
    if expected <= 0:
        return 0.0
    return actual / expected * 100


def completion_band(rate: float) -> str:
    if rate >= 100:
        return "Exceeded Target"
    if rate >= 70:
        return "On Track"
    if rate >= 50:
        return "Behind Schedule"
    return "Critical"


def completion_metrics(entries: Iterable, daily_target_minutes: int, start: date, end: date) -> CompletionMetrics:
    counted = [e for e in entries if e.status in COUNTED_STATUSES]
    actual = total_hours(counted)
    working_days = count_working_days(start, end)
    expected = expected_hours(daily_target_minutes, working_days)
    rate = completion_rate(actual, expected)
    return CompletionMetrics(
        actual_hours=actual,
        expected_hours=expected,
        completion_rate=rate,
        status=completion_band(rate),
        working_days=working_days,
        average_hours_per_day=actual / working_days if working_days else 0.0,
        extra_hours=max(actual - expected, 0.0),
    )


def activity_breakdown(entries: Iterable) -> List[ActivityBreakdown]:
    """Hours per activity type. No entries, or no hours, gives an empty list."""
    minutes: Dict[str, int] = OrderedDict()
    counts: Dict[str, int] = {}
    for entry in entries:
        activity = getattr(entry.activity_type, "value", entry.activity_type)
        minutes[activity] = minutes.get(activity, 0) + entry_duration_minutes(entry)
        counts[activity] = counts.get(activity, 0) + 1

    total = sum(minutes.values())
    if total == 0:
        return []
    breakdown = [
        ActivityBreakdown(
            activity_type=activity,
            hours=minutes_to_hours(mins),
            percentage=mins / total * 100,
            count=counts[activity],
        )
        for activity, mins in minutes.items()
    ]
    breakdown.sort(key=lambda item: item.hours, reverse=True)
    return breakdown


def _bucket_start(day: date, period: PeriodType) -> date:
    if period is PeriodType.WEEKLY:
        return day - timedelta(days=day.weekday())
    if period is PeriodType.MONTHLY:
        return day.replace(day=1)
    return day


def _bucket_label(start: date, period: PeriodType) -> str:
    if period is PeriodType.WEEKLY:
        return f"Week of {start.strftime('%d/%m/%Y')}"
    if period is PeriodType.MONTHLY:
        return start.strftime("%b %Y")
    return start.strftime("%d/%m/%Y")


def period_series(entries: Iterable, period) -> List[PeriodPoint]:
    period = PeriodType(period)
    buckets: Dict[date, List[int]] = {}
    for entry in entries:
        start = _bucket_start(entry.entry_date, period)
        bucket = buckets.setdefault(start, [0, 0])
        bucket[0] += entry_duration_minutes(entry)
        bucket[1] += 1
    return [
        PeriodPoint(
            period_start=start,
            label=_bucket_label(start, period),
            hours=minutes_to_hours(mins),
            count=count,
        )
        for start, (mins, count) in sorted(buckets.items())
    ]


def summary_stats(entries: Iterable) -> SummaryStats:
    entries = list(entries)
    return SummaryStats(
        total_entries=len(entries),
        total_hours=total_hours(entries),
        approved_hours=total_hours(e for e in entries if e.status == "approved"),
        pending_count=sum(1 for e in entries if e.status == "submitted"),
        rejected_count=sum(1 for e in entries if e.status == "rejected"),
    )


def group_by_department(entries: Iterable) -> List[DepartmentTotals]:
    grouped: Dict[Optional[str], List[int]] = OrderedDict()
    for entry in entries:
        bucket = grouped.setdefault(entry.department_id, [0, 0])
        bucket[0] += entry_duration_minutes(entry)
        bucket[1] += 1
    return [
        DepartmentTotals(department_id=dept_id, total_hours=minutes_to_hours(mins), entry_count=count)
        for dept_id, (mins, count) in grouped.items()
    ]


class MemberTotals(BaseModel):
    user_id: str
    full_name: str
    department_name: str
    total_hours: float
    expected_hours: float
    completion_rate: float
    status: str
    entry_count: int


class MemberReport(BaseModel):
    user_id: str
    period: PeriodType
    date_from: date
    date_to: date
    summary: SummaryStats
    completion: CompletionMetrics
    activity_breakdown: List[ActivityBreakdown]
    series: List[PeriodPoint]


class DepartmentReport(BaseModel):
    department_id: str
    period: PeriodType
    date_from: date
    date_to: date
    summary: SummaryStats
    completion: CompletionMetrics
    activity_breakdown: List[ActivityBreakdown]
    series: List[PeriodPoint]
    member_breakdown: List[MemberTotals]
    department_totals: List[DepartmentTotals]


def effective_daily_target(settings_row, default_minutes: int) -> int:
    if settings_row is None or settings_row.daily_target_minutes is None:
        return default_minutes
    return settings_row.daily_target_minutes


def build_member_report(timesheets, user_settings, *, user_id: str, period, start: date, end: date,
                        default_target_minutes: int) -> MemberReport:
    entries = timesheets.fetch_entries(date_from=start, date_to=end, user_id=user_id)
    target = effective_daily_target(user_settings.get(user_id), default_target_minutes)
    logger.debug("Member report for %s: %d entries between %s and %s", user_id, len(entries), start, end)
    return MemberReport(
        user_id=user_id,
        period=PeriodType(period),
        date_from=start,
        date_to=end,
        summary=summary_stats(entries),
        completion=completion_metrics(entries, target, start, end),
        activity_breakdown=activity_breakdown(entries),
        series=period_series(entries, period),
    )


def build_department_report(timesheets, user_settings, members, *, department_id: str, period, start: date,
                            end: date, default_target_minutes: int) -> DepartmentReport:
    """
    `members` is the directory of people the report covers. Expected hours are
    the sum of each member's own daily target over the working days in range.
    """
    member_ids = [m.id for m in members]
    entries = timesheets.fetch_entries(
        date_from=start, date_to=end, department_id=department_id, user_ids=member_ids
    )
    targets = user_settings.get_many(member_ids)

    by_user: Dict[str, list] = {m.id: [] for m in members}
    for entry in entries:
        by_user.setdefault(entry.user_id, []).append(entry)

    member_breakdown = []
    for member in members:
        metrics = completion_metrics(
            by_user[member.id], effective_daily_target(targets.get(member.id), default_target_minutes), start, end
        )
        member_breakdown.append(MemberTotals(
            user_id=member.id,
            full_name=member.full_name,
            department_name=member.department_name,
            total_hours=total_hours(by_user[member.id]),
            expected_hours=metrics.expected_hours,
            completion_rate=metrics.completion_rate,
            status=metrics.status,
            entry_count=len(by_user[member.id]),
        ))

    counted = [e for e in entries if e.status in COUNTED_STATUSES]
    actual = total_hours(counted)
    expected = sum(m.expected_hours for m in member_breakdown)
    working_days = count_working_days(start, end)
    rate = completion_rate(actual, expected)
    completion = CompletionMetrics(
        actual_hours=actual,
        expected_hours=expected,
        completion_rate=rate,
        status=completion_band(rate),
        working_days=working_days,
        average_hours_per_day=actual / working_days if working_days else 0.0,
        extra_hours=max(actual - expected, 0.0),
    )
    return DepartmentReport(
        department_id=department_id,
        period=PeriodType(period),
        date_from=start,
        date_to=end,
        summary=summary_stats(entries),
        completion=completion,
        activity_breakdown=activity_breakdown(entries),
        series=period_series(entries, period),
        member_breakdown=member_breakdown,
        department_totals=group_by_department(entries),
    )
