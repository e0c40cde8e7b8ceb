# clockwise/services/date_ranges.py
# Canonical from/to boundaries for dashboard filters and report periods. Weeks always start on Monday.
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Optional

from dateutil.relativedelta import relativedelta


class RangeKey(str, Enum):
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    CUSTOM = "custom"


class PeriodType(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class Preset(str, Enum):
    TODAY = "today"
    THIS_WEEK = "thisWeek"
    LAST_WEEK = "lastWeek"
    THIS_MONTH = "thisMonth"
    LAST_MONTH = "lastMonth"


@dataclass(frozen=True)
class DateRange:
    from_: datetime
    to: datetime

    @property
    def start_date(self) -> date:
        return self.from_.date()

    @property
    def end_date(self) -> date:
        return self.to.date()


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min)


def end_of_day(day: date) -> datetime:
    return datetime.combine(day, time.max)


def start_of_week(day: date) -> datetime:
    return start_of_day(day - timedelta(days=day.weekday()))


def end_of_week(day: date) -> datetime:
    return end_of_day(day + timedelta(days=6 - day.weekday()))


def start_of_month(day: date) -> datetime:
    return start_of_day(day.replace(day=1))


def end_of_month(day: date) -> datetime:
    return end_of_day(day.replace(day=1) + relativedelta(months=+1, days=-1))


def _as_date(value) -> date:
    return value.date() if isinstance(value, datetime) else value


def date_range(
    key,
    today: Optional[date] = None,
    custom_from: Optional[date] = None,
    custom_to: Optional[date] = None,
) -> DateRange:
    today = _as_date(today) if today else date.today()
    key = RangeKey(key)
    if key is RangeKey.WEEK:
        return DateRange(start_of_week(today), end_of_week(today))
    if key is RangeKey.MONTH:
        return DateRange(start_of_month(today), end_of_month(today))
    if key is RangeKey.CUSTOM and custom_from and custom_to:
        return DateRange(start_of_day(_as_date(custom_from)), end_of_day(_as_date(custom_to)))
    return DateRange(start_of_day(today), end_of_day(today))


def preset_range(preset, today: Optional[date] = None) -> DateRange:
    """Report presets. The last* presets shift today back one unit before taking the boundaries."""
    today = _as_date(today) if today else date.today()
    preset = Preset(preset)
    if preset is Preset.THIS_WEEK:
        return date_range(RangeKey.WEEK, today)
    if preset is Preset.LAST_WEEK:
        return date_range(RangeKey.WEEK, today - timedelta(weeks=1))
    if preset is Preset.THIS_MONTH:
        return date_range(RangeKey.MONTH, today)
    if preset is Preset.LAST_MONTH:
        return date_range(RangeKey.MONTH, today.replace(day=1) - relativedelta(months=1))
    return date_range(RangeKey.TODAY, today)


def period_presets(period) -> list:
    return {
        PeriodType.DAILY: [Preset.TODAY],
        PeriodType.WEEKLY: [Preset.THIS_WEEK, Preset.LAST_WEEK],
        PeriodType.MONTHLY: [Preset.THIS_MONTH, Preset.LAST_MONTH],
    }[PeriodType(period)]
