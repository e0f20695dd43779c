# File: utils/dt_utils.py
"""Date and time utilities for LilLearner.

Pure Python date/time functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

Uses standard library: datetime, zoneinfo, and dateutil for month arithmetic.

Functions:
    - dt_today_local: Get today's date in local timezone
    - dt_now_local: Get current datetime in local timezone
    - dt_now_iso: Get current datetime as ISO string
    - as_local: Convert a datetime to local timezone
    - dt_parse_date: Parse date strings
    - dt_parse: Normalize datetime inputs to aware datetimes
    - local_day_key: Collapse a timestamp to its local calendar day
    - season_for_date: Season a calendar day falls in
    - week_range / month_range / season_range: Report period windows
"""

from __future__ import annotations

from datetime import UTC, date, datetime, time, timedelta
import logging
from zoneinfo import ZoneInfo

from dateutil.relativedelta import relativedelta

_LOGGER = logging.getLogger(__name__)

# ==============================================================================
# Constants (local copies to avoid circular imports)
# ==============================================================================

DEFAULT_TIME_ZONE: ZoneInfo = ZoneInfo("UTC")

SEASON_SPRING = "spring"
SEASON_SUMMER = "summer"
SEASON_FALL = "fall"
SEASON_WINTER = "winter"

# (start month, start day, end month, end day); winter ends in the next year
SEASON_WINDOWS: dict[str, tuple[int, int, int, int]] = {
    SEASON_SPRING: (3, 1, 5, 31),
    SEASON_SUMMER: (6, 1, 8, 31),
    SEASON_FALL: (9, 1, 11, 30),
    SEASON_WINTER: (12, 1, 2, 28),
}


# ==============================================================================
# Timezone Configuration
# ==============================================================================


def set_default_timezone(tz: ZoneInfo) -> None:
    """Set the default timezone for all dt_utils functions.

    Call this during integration setup to configure the user's timezone.
    """
    global DEFAULT_TIME_ZONE  # noqa: PLW0603
    DEFAULT_TIME_ZONE = tz


# ==============================================================================
# Current Date/Time Functions
# ==============================================================================


def dt_today_local(tz: ZoneInfo | None = None) -> date:
    """Return today's date in local timezone as a `datetime.date`."""
    tz_info = tz or DEFAULT_TIME_ZONE
    return datetime.now(tz_info).date()


def dt_now_local(tz: ZoneInfo | None = None) -> datetime:
    """Return the current datetime in local timezone (timezone-aware)."""
    tz_info = tz or DEFAULT_TIME_ZONE
    return datetime.now(tz_info)


def dt_now_iso(tz: ZoneInfo | None = None) -> str:
    """Return the current local datetime as an ISO 8601 string.

    Example:
        "2025-04-07T14:30:00-05:00"
    """
    return dt_now_local(tz).isoformat()


def as_local(dt_obj: datetime, tz: ZoneInfo | None = None) -> datetime:
    """Convert a datetime to local timezone.

    Naive datetimes are assumed to be UTC.
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    if dt_obj.tzinfo is None:
        dt_obj = dt_obj.replace(tzinfo=UTC)
    return dt_obj.astimezone(tz_info)


# ==============================================================================
# Parsing
# ==============================================================================


def dt_parse_date(date_input: str | date | datetime | None) -> date | None:
    """Safely parse a date string into a `datetime.date`.

    Accepts "2025-04-07", "04/07/2025", "2025/04/07", full ISO datetimes
    (the date part is used as written), and date/datetime objects.

    Returns:
        datetime.date or None if parsing fails.
    """
    if date_input is None:
        return None
    if isinstance(date_input, datetime):
        return date_input.date()
    if isinstance(date_input, date):
        return date_input
    if not isinstance(date_input, str) or not date_input:
        return None

    try:
        return date.fromisoformat(date_input[:10])
    except ValueError:
        pass

    for fmt in ("%m/%d/%Y", "%Y/%m/%d"):
        try:
            return datetime.strptime(date_input, fmt).date()
        except ValueError:
            continue

    _LOGGER.debug("Unable to parse date string: %s", date_input)
    return None


def dt_parse(
    dt_input: str | date | datetime | None,
    tz: ZoneInfo | None = None,
) -> datetime | None:
    """Normalize a timestamp input into a timezone-aware datetime.

    - Aware datetimes and ISO strings with an offset keep their instant.
    - Naive datetimes and naive ISO strings are interpreted in local time.
    - Plain dates become local midnight.

    Returns:
        Aware datetime, or None if the input cannot be parsed.
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    if dt_input is None:
        return None

    if isinstance(dt_input, datetime):
        parsed = dt_input
    elif isinstance(dt_input, date):
        return datetime.combine(dt_input, time.min, tzinfo=tz_info)
    elif isinstance(dt_input, str):
        try:
            parsed = datetime.fromisoformat(dt_input.replace("Z", "+00:00"))
        except ValueError:
            _LOGGER.debug("Unable to parse datetime string: %s", dt_input)
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz_info)
    return parsed


# ==============================================================================
# Day Keys
# ==============================================================================


def local_day_key(
    dt_input: str | date | datetime | None, tz: ZoneInfo | None = None
) -> date | None:
    """Collapse a timestamp to the local calendar day it falls on.

    Two timestamps on the same local day always return the same key, and
    the key is independent of time-of-day.
    """
    if isinstance(dt_input, date) and not isinstance(dt_input, datetime):
        return dt_input
    parsed = dt_parse(dt_input, tz)
    if parsed is None:
        return None
    return as_local(parsed, tz).date()


# ==============================================================================
# Period Ranges
# ==============================================================================


def week_range(reference: date) -> tuple[date, date]:
    """Return the Monday..Sunday week containing `reference` (inclusive)."""
    start = reference - timedelta(days=reference.weekday())
    return start, start + timedelta(days=6)


def month_range(reference: date) -> tuple[date, date]:
    """Return the first..last day of the month containing `reference`."""
    start = reference.replace(day=1)
    end = start + relativedelta(months=1) - timedelta(days=1)
    return start, end


def season_range(season: str, year: int) -> tuple[date, date]:
    """Return the inclusive window of a named season starting in `year`.

    Winter starts on Dec 1 of `year` and ends on Feb 28 of the next year.

    Raises:
        ValueError: Unknown season name.
    """
    try:
        start_month, start_day, end_month, end_day = SEASON_WINDOWS[season]
    except KeyError as err:
        raise ValueError(f"Unknown season: {season}") from err

    start = date(year, start_month, start_day)
    end_year = year + 1 if end_month < start_month else year
    return start, date(end_year, end_month, end_day)


def season_for_date(day: date) -> str:
    """Return the season name a calendar month belongs to."""
    if day.month in (3, 4, 5):
        return SEASON_SPRING
    if day.month in (6, 7, 8):
        return SEASON_SUMMER
    if day.month in (9, 10, 11):
        return SEASON_FALL
    return SEASON_WINTER
