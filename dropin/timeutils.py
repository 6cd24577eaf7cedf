"""
Shared temporal helpers.

All calendar dates are handled as zero-padded ISO strings ("YYYY-MM-DD"),
built from local date fields (never via UTC serialization), so they can be
compared lexicographically.

Times of day are handled as minutes since midnight.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional


ANY_TIME = "Any Time"
THIS_WEEK = "this-week"

# Sentinel used by the source data for "no upper bound".
NONE_SENTINEL = "None"
UNBOUNDED_AGE = 999

WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


# ---------------------------------------------------------------------------
# Times of day
# ---------------------------------------------------------------------------


def time_to_minutes(hour: int, minute: int) -> int:
    return hour * 60 + minute


def _hhmm_to_minutes(hhmm: str) -> int:
    """
    Convert 'HH:MM' (optionally followed by AM/PM) to minutes since midnight.
    Raises ValueError for invalid formats.
    """
    parts = hhmm.strip().split()
    if not parts or len(parts) > 2:
        raise ValueError(f"Invalid time format: {hhmm!r}")

    clock = parts[0].split(":")
    if len(clock) != 2:
        raise ValueError(f"Invalid time format: {hhmm!r}")
    h = int(clock[0])
    m = int(clock[1])

    if len(parts) == 2:
        period = parts[1].upper()
        if period not in ("AM", "PM") or not (1 <= h <= 12):
            raise ValueError(f"Invalid time value: {hhmm!r}")
        if period == "PM" and h != 12:
            h += 12
        elif period == "AM" and h == 12:
            h = 0

    if not (0 <= h <= 23 and 0 <= m <= 59):
        raise ValueError(f"Invalid time value: {hhmm!r}")
    return h * 60 + m


def parse_time(text: str) -> Optional[int]:
    """
    Minutes since midnight for "HH:MM" or "h:MM AM/PM", None if unparsable.
    """
    try:
        return _hhmm_to_minutes(text)
    except ValueError:
        return None


def is_any_time(text: str) -> bool:
    return not text or text.strip().lower() == ANY_TIME.lower()


def format_hhmm(hour: int, minute: int) -> str:
    return f"{hour:02d}:{minute:02d}"


def format_time_ampm(time24: str) -> str:
    if is_any_time(time24):
        return time24
    minutes = parse_time(time24)
    if minutes is None:
        return time24
    hours, mins = divmod(minutes, 60)
    period = "PM" if hours >= 12 else "AM"
    display = 12 if hours == 0 else hours - 12 if hours > 12 else hours
    return f"{display}:{mins:02d} {period}"


def duration_minutes(start_time: str, end_time: str) -> int:
    """
    Length of a 'HH:MM'-'HH:MM' slot. Slots ending before they start are
    assumed to run past midnight. Unparsable input gives 0.
    """
    start = parse_time(start_time)
    end = parse_time(end_time)
    if start is None or end is None:
        return 0
    if end < start:
        return 24 * 60 - start + end
    return end - start


# ---------------------------------------------------------------------------
# Calendar dates
# ---------------------------------------------------------------------------


def local_iso_date(d: date) -> str:
    # Built from the Y/M/D fields directly so no timezone conversion can shift the day.
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


def today_local() -> date:
    return datetime.now().date()


def this_week_window(today: date) -> tuple[str, str]:
    """
    Inclusive 7-day window [today, today + 6] as ISO strings.
    """
    return local_iso_date(today), local_iso_date(today + timedelta(days=6))


def split_date_range(date_range: str) -> Optional[tuple[str, str]]:
    parts = (date_range or "").split(" to ")
    if len(parts) != 2:
        return None
    start, end = parts[0].strip(), parts[1].strip()
    if not start or not end:
        return None
    return start, end


def is_date_in_range(target: str, date_range: str) -> bool:
    """
    Whether ISO `target` lies within "<start> to <end>" (inclusive).

    Plain string comparison; valid because all dates are zero-padded ISO.
    Raises ValueError when the range string is malformed.
    """
    bounds = split_date_range(date_range)
    if bounds is None:
        raise ValueError(f"Invalid date range: {date_range!r}")
    start, end = bounds
    return start <= target <= end


def day_of_week(iso_date: str) -> str:
    """
    English weekday name for an ISO date, "" if unparsable.
    """
    try:
        d = datetime.strptime(iso_date, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        return ""
    return WEEKDAYS[d.weekday()]


# ---------------------------------------------------------------------------
# Defaults for a fresh search
# ---------------------------------------------------------------------------


def default_date(now: Optional[datetime] = None) -> str:
    """
    Today, or tomorrow once it is 23:00 or later.
    """
    now = now or datetime.now()
    if now.hour >= 23:
        return local_iso_date(now.date() + timedelta(days=1))
    return local_iso_date(now.date())


def default_time(now: Optional[datetime] = None) -> str:
    """
    The next half-hour slot from `now`.

    - from 23:00: "06:00" (earliest slot of tomorrow)
    - before 06:00: "Any Time"
    """
    now = now or datetime.now()
    hour, minute = now.hour, now.minute

    if hour >= 23:
        return "06:00"
    if hour < 6:
        return ANY_TIME

    if minute <= 30:
        next_hour, next_minute = hour, 30
    else:
        next_hour, next_minute = hour + 1, 0

    if next_hour >= 24 or (next_hour == 23 and next_minute > 30):
        return ANY_TIME
    return format_hhmm(next_hour, next_minute)


# ---------------------------------------------------------------------------
# Ages
# ---------------------------------------------------------------------------


def _parse_int(value: object) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        pass
    # tolerate "12.0" style numbers coming out of spreadsheets
    try:
        return int(float(text))
    except (ValueError, OverflowError):
        return None


def parse_age_min(value: object) -> int:
    """
    Lower age bound; anything unparsable means 0.
    """
    parsed = _parse_int(value)
    return 0 if parsed is None else parsed


def parse_age_max(value: object) -> int:
    """
    Upper age bound; "None" sentinel or anything unparsable means unbounded (999).
    """
    if isinstance(value, str) and value.strip() == NONE_SENTINEL:
        return UNBOUNDED_AGE
    parsed = _parse_int(value)
    return UNBOUNDED_AGE if parsed is None else parsed


def parse_int_or_none(value: object) -> Optional[int]:
    return _parse_int(value)
