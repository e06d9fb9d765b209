"""Conversion between floating local timestamps and Unix-epoch offsets.

A floating timestamp has no timezone: every day is exactly 86400 seconds, no
leap seconds exist, and daylight saving shifts are ignored. Dates use the
proleptic Gregorian calendar, which is what ``datetime.date`` implements, so
day counting is done through ordinals.

Python integers do not overflow, so offsets up to the end of year 4999 need
no special handling.
"""

import calendar
import re
from datetime import date

from yipcvars.types import CvarValueError, FloatingTime, UsageError

MIN_YEAR = 1970
MAX_YEAR = 4999
SECONDS_PER_DAY = 86400

_UNIX_EPOCH_ORDINAL = date(1970, 1, 1).toordinal()

_DATETIME_RE = re.compile(
    r"\A([0-9]{4})-([0-9]{2})-([0-9]{2})T([0-9]{2}):([0-9]{2}):([0-9]{2})\Z"
)


def is_leap_year(year: int) -> bool:
    return calendar.isleap(year)


def days_in_month(year: int, month: int) -> int:
    """Number of days in the given month, accounting for leap years."""
    return calendar.monthrange(year, month)[1]


def check_date(year: int, month: int, day: int) -> bool:
    """True if year-month-day names a real Gregorian calendar date."""
    if not 1 <= year <= 9999 or not 1 <= month <= 12:
        return False
    return 1 <= day <= days_in_month(year, month)


def validate_floating_time(ft: FloatingTime) -> None:
    """Range-check every field of a timestamp that is about to be encoded.

    Raises:
        UsageError: If any field is out of range or the date does not exist.
    """
    if not MIN_YEAR <= ft.year <= MAX_YEAR:
        raise UsageError(f"Year must be in range [{MIN_YEAR}, {MAX_YEAR}]")
    if not 1 <= ft.month <= 12:
        raise UsageError("Month out of range")
    if not 1 <= ft.day <= 31:
        raise UsageError("Day out of range")
    if not 0 <= ft.hour <= 23:
        raise UsageError("Hour out of range")
    if not 0 <= ft.minute <= 59:
        raise UsageError("Minute out of range")
    if not 0 <= ft.second <= 59:
        raise UsageError("Second out of range")
    if not check_date(ft.year, ft.month, ft.day):
        raise UsageError(f"Invalid date {ft.year:04d}-{ft.month:02d}-{ft.day:02d}")


def parse_floating_time(text: str) -> FloatingTime:
    """Parse a zero-padded ``yyyy-mm-ddThh:mm:ss`` literal.

    Raises:
        UsageError: If the literal is malformed or out of range.
    """
    match = _DATETIME_RE.match(text) if isinstance(text, str) else None
    if match is None:
        raise UsageError(f"Invalid datetime {text!r}, expected yyyy-mm-ddThh:mm:ss")
    ft = FloatingTime(*(int(group) for group in match.groups()))
    validate_floating_time(ft)
    return ft


def encode_epoch(ft: FloatingTime) -> int:
    """Seconds from 1970-01-01T00:00:00 to the given floating timestamp."""
    validate_floating_time(ft)
    day_offset = date(ft.year, ft.month, ft.day).toordinal() - _UNIX_EPOCH_ORDINAL
    return day_offset * SECONDS_PER_DAY + ft.hour * 3600 + ft.minute * 60 + ft.second


def decode_epoch(seconds: int) -> FloatingTime:
    """Inverse of :func:`encode_epoch`.

    Uses floor division so that negative offsets (times before 1970) land on
    the correct day with a non-negative time of day.
    """
    day_offset, time_of_day = divmod(seconds, SECONDS_PER_DAY)
    try:
        d = date.fromordinal(_UNIX_EPOCH_ORDINAL + day_offset)
    except (OverflowError, ValueError) as e:
        raise CvarValueError("epoch", f"offset {seconds} is outside the calendar range") from e
    hour, rest = divmod(time_of_day, 3600)
    minute, second = divmod(rest, 60)
    return FloatingTime(d.year, d.month, d.day, hour, minute, second)
