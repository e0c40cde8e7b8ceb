from datetime import date, datetime, time, timedelta

import pytest

from clockwise.services.date_ranges import PeriodType, Preset, RangeKey, date_range, period_presets, preset_range


@pytest.mark.parametrize("offset", range(7))
def test_week_is_monday_to_sunday_for_every_weekday(offset):
    today = date(2024, 6, 10) + timedelta(days=offset)  # 2024-06-10 is a Monday

    week = date_range(RangeKey.WEEK, today=today)

    assert week.from_ == datetime(2024, 6, 10, 0, 0)
    assert week.to.date() == date(2024, 6, 16)
    assert week.to.time() == time.max
    assert week.start_date.weekday() == 0
    assert week.end_date.weekday() == 6


def test_today_and_month():
    today = date(2024, 2, 14)

    assert date_range("today", today=today).start_date == today
    assert date_range("today", today=today).end_date == today
    month = date_range(RangeKey.MONTH, today=today)
    assert (month.start_date, month.end_date) == (date(2024, 2, 1), date(2024, 2, 29))


def test_month_end_in_december():
    month = date_range(RangeKey.MONTH, today=date(2023, 12, 5))
    assert month.end_date == date(2023, 12, 31)


def test_custom_uses_both_bounds():
    custom = date_range(RangeKey.CUSTOM, today=date(2024, 1, 1), custom_from=date(2023, 5, 1),
                        custom_to=date(2023, 5, 20))
    assert (custom.start_date, custom.end_date) == (date(2023, 5, 1), date(2023, 5, 20))


def test_custom_with_missing_bound_falls_back_to_today():
    custom = date_range(RangeKey.CUSTOM, today=date(2024, 1, 9), custom_from=date(2023, 5, 1))
    assert (custom.start_date, custom.end_date) == (date(2024, 1, 9), date(2024, 1, 9))


def test_presets_shift_back_one_unit():
    today = date(2024, 3, 13)  # Wednesday

    last_week = preset_range(Preset.LAST_WEEK, today=today)
    assert (last_week.start_date, last_week.end_date) == (date(2024, 3, 4), date(2024, 3, 10))

    last_month = preset_range("lastMonth", today=date(2024, 3, 31))
    assert (last_month.start_date, last_month.end_date) == (date(2024, 2, 1), date(2024, 2, 29))

    this_month = preset_range(Preset.THIS_MONTH, today=today)
    assert this_month.start_date == date(2024, 3, 1)


def test_last_month_crosses_the_year():
    last_month = preset_range(Preset.LAST_MONTH, today=date(2024, 1, 15))
    assert (last_month.start_date, last_month.end_date) == (date(2023, 12, 1), date(2023, 12, 31))


def test_period_presets():
    assert period_presets(PeriodType.WEEKLY) == [Preset.THIS_WEEK, Preset.LAST_WEEK]
    assert period_presets("daily") == [Preset.TODAY]
