"""Wall-clock layer: timezone lookup, local formatting, and the local-midnight solver."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from pytz import timezone, utc
from timezonefinder import TimezoneFinder

_log = logging.getLogger(__name__)

_tf = TimezoneFinder()

FALLBACK_TIMEZONE = "UTC"
MIDNIGHT_MAX_ITERATIONS = 3
MIDNIGHT_TOLERANCE = timedelta(seconds=1)


@dataclass(frozen=True)
class WallClock:
    """Calendar fields of an instant as read in some timezone."""

    year: int
    month: int
    day: int
    hour: int
    minute: int
    second: int

    def naive(self) -> datetime:
        """The fields as a naive datetime, where calendar arithmetic is linear."""
        return datetime(self.year, self.month, self.day, self.hour, self.minute, self.second)


def as_utc(instant: datetime) -> datetime:
    """Return instant as an aware UTC datetime. Naive input is taken as UTC."""
    if instant.tzinfo is None:
        return utc.localize(instant)
    return instant.astimezone(utc)


def resolve_timezone(lat: float, lng: float) -> str:
    """IANA timezone id for a location, or "UTC" with a warning if it cannot be found."""
    try:
        tz_name = _tf.timezone_at(lat=lat, lng=lng)
    except ValueError as e:
        _log.warning("Could not determine timezone for %s, %s (%s), defaulting to UTC", lat, lng, e)
        return FALLBACK_TIMEZONE
    if tz_name is None:
        _log.warning("Could not determine timezone for %s, %s, defaulting to UTC", lat, lng)
        return FALLBACK_TIMEZONE
    return tz_name


def wall_clock(instant: datetime, tz_name: str) -> WallClock:
    """Read the calendar fields of instant in tz_name."""
    local = as_utc(instant).astimezone(timezone(tz_name))
    return WallClock(
        year=local.year,
        month=local.month,
        day=local.day,
        hour=local.hour,
        minute=local.minute,
        second=local.second,
    )


def format_local_time(
    instant: datetime | None, tz_name: str, include_seconds: bool = False
) -> str:
    """Format instant as "HH:MM" (or "HH:MM:SS") local time. Empty string for None."""
    if instant is None:
        return ""
    local = as_utc(instant).astimezone(timezone(tz_name))
    return local.strftime("%H:%M:%S" if include_seconds else "%H:%M")


def local_minutes_from_midnight(instant: datetime | None, tz_name: str) -> int:
    """Minutes elapsed on the local wall clock since 00:00. 0 for None."""
    if instant is None:
        return 0
    wc = wall_clock(instant, tz_name)
    return wc.hour * 60 + wc.minute


def local_midnight(approximate_instant: datetime, tz_name: str) -> datetime:
    """Absolute instant at which the local date of approximate_instant began.

    Starts from the local date read as if it were UTC, then repeatedly adds
    the difference between the desired and the observed wall-clock reading,
    both taken as naive datetimes. The offset is piecewise constant, so one
    step normally lands exactly; the cap keeps DST edges bounded.

    Args:
        approximate_instant: Any instant on the wanted local day.
        tz_name: IANA timezone id, trusted to be valid.

    Returns:
        Aware UTC datetime whose wall-clock reading in tz_name is 00:00:00,
        or the first instant of that date where 00:00 does not exist.
    """
    day = wall_clock(approximate_instant, tz_name)
    target = datetime(day.year, day.month, day.day)
    guess = utc.localize(target)

    for i in range(MIDNIGHT_MAX_ITERATIONS):
        correction = target - wall_clock(guess, tz_name).naive()
        if abs(correction) < MIDNIGHT_TOLERANCE:
            break
        guess = guess + correction
        _log.debug("local_midnight %s step %d: correction %s", tz_name, i, correction)

    # 00:00 skipped by a DST gap: the loop can settle just before it
    reached = wall_clock(guess, tz_name).naive()
    if reached < target:
        guess = guess + (target - reached)
        _log.debug("local_midnight %s: no 00:00, using first instant %s", tz_name, guess)

    return guess
