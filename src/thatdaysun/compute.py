"""Day computation layer: anchor a local day and sweep the Sun across it."""

from datetime import datetime, timedelta

from pytz import utc

from thatdaysun.clock import local_midnight, resolve_timezone
from thatdaysun.ephemeris import EphemerisProvider, load_ephemeris
from thatdaysun.geometry import (
    ecliptic_earth_position,
    horizon_position,
    subsolar_longitude,
    sun_times,
)
from thatdaysun.locations import nearest_locations
from thatdaysun.models import DayReport, GeoCoordinate, QueryInput, SunSample

MINUTES_PER_DAY = 24 * 60


def parse_when(when: str) -> datetime:
    """Parse "YYYY-MM-DD" or "YYYY-MM-DD HH:MM" as a UTC instant."""
    for fmt in ("%Y-%m-%d %H:%M", "%Y-%m-%d"):
        try:
            return utc.localize(datetime.strptime(when, fmt))
        except ValueError:
            continue
    raise ValueError(f"Unrecognized date: {when!r} (expected YYYY-MM-DD [HH:MM])")


def sun_path(
    midnight: datetime,
    location: GeoCoordinate,
    ephemeris: EphemerisProvider,
    step_minutes: int = 10,
) -> tuple[SunSample, ...]:
    """Sun azimuth/altitude every step_minutes across the 24 hours after midnight.

    Args:
        midnight: Absolute instant of local midnight (see clock.local_midnight).
        location: Observer.
        ephemeris: Provider for the horizon transform.
        step_minutes: Sampling interval, must be positive.

    Returns:
        Samples from minute 0 up to and including minute 1440.
    """
    if step_minutes <= 0:
        raise ValueError(f"step_minutes must be positive, got {step_minutes}")
    samples: list[SunSample] = []
    for minute in range(0, MINUTES_PER_DAY + 1, step_minutes):
        instant = midnight + timedelta(minutes=minute)
        pos = horizon_position(instant, location, ephemeris)
        samples.append(
            SunSample(minute=minute, instant=instant, az_deg=pos.az_deg, alt_deg=pos.alt_deg)
        )
    return tuple(samples)


def build_day_report(
    location: GeoCoordinate,
    when: datetime,
    ephemeris: EphemerisProvider,
    step_minutes: int = 10,
) -> DayReport:
    """Compute everything a day chart needs for the local day containing when."""
    tz_name = resolve_timezone(location.lat, location.lng)
    midnight = local_midnight(when, tz_name)
    subsolar = subsolar_longitude(midnight, ephemeris)
    return DayReport(
        location=location,
        tz_name=tz_name,
        midnight=midnight,
        sun_times=sun_times(midnight, location, ephemeris),
        samples=sun_path(midnight, location, ephemeris, step_minutes),
        earth_position=ecliptic_earth_position(midnight, ephemeris),
        subsolar_lon_deg=subsolar,
        nearest=nearest_locations(subsolar),
    )


def run(query: QueryInput, ephemeris: EphemerisProvider | None = None) -> DayReport:
    """Top-level entry point: takes a QueryInput and returns a DayReport.

    Args:
        query: User input (lat/lng, date string).
        ephemeris: Provider to use. Loads the default skyfield kernel if None.

    Returns:
        Fully computed DayReport.

    Raises:
        InvalidCoordinate: If lat/lng are out of range.
        ValueError: If the date string cannot be parsed.
    """
    location = GeoCoordinate(lat=query.lat, lng=query.lng)
    when = parse_when(query.when)
    if ephemeris is None:
        ephemeris = load_ephemeris()
    return build_day_report(location, when, ephemeris)
