# clockwise/services/time_utils.py
# Clock-time arithmetic and DD/MM/YYYY display dates.
# Validation and reporting both go through to_minutes so an entry that validates
# always has a positive duration in the reports.
import calendar
import re
from datetime import date

DISPLAY_DATE_RE = re.compile(r"(\d{1,2})/(\d{1,2})/(\d{4})")
ISO_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")


def to_minutes(clock: str) -> int:
    """Minutes since midnight for "HH:MM" or "HH:MM:SS"."""
    parts = clock.split(":")
    return int(parts[0]) * 60 + int(parts[1])


def calculate_duration_minutes(start_time: str, end_time: str) -> int:
    return to_minutes(end_time) - to_minutes(start_time)


def format_duration(minutes: int) -> str:
    hours, mins = divmod(minutes, 60)
    if hours == 0:
        return f"{mins}m"
    if mins == 0:
        return f"{hours}h"
    return f"{hours}h {mins}m"


def minutes_to_hours(minutes: float) -> float:
    return minutes / 60


def format_display_date(iso_date: str) -> str:
    if not iso_date:
        return ""
    try:
        return date.fromisoformat(iso_date).strftime("%d/%m/%Y")
    except ValueError:
        return iso_date


def parse_display_date(display_date: str) -> str:
    """DD/MM/YYYY (day and month may be one digit) to YYYY-MM-DD. ISO input passes through."""
    if not display_date:
        return ""
    match = DISPLAY_DATE_RE.fullmatch(display_date)
    if match:
        day, month, year = match.groups()
        return f"{year}-{month.zfill(2)}-{day.zfill(2)}"
    return display_date


def is_valid_display_date(date_str: str) -> bool:
    match = DISPLAY_DATE_RE.fullmatch(date_str or "")
    if not match:
        return False
    day, month, year = (int(part) for part in match.groups())
    if not 1 <= month <= 12 or not 1900 <= year <= 2100:
        return False
    return 1 <= day <= calendar.monthrange(year, month)[1]


def is_valid_iso_date(date_str: str) -> bool:
    if not ISO_DATE_RE.fullmatch(date_str or ""):
        return False
    try:
        date.fromisoformat(date_str)
    except ValueError:
        return False
    return True


def today_iso() -> str:
    return date.today().isoformat()


def today_display() -> str:
    return date.today().strftime("%d/%m/%Y")
