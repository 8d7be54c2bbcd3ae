"""Ephemeris provider: the only place that talks to skyfield.

The geometry layer depends on the ``EphemerisProvider`` protocol, so tests can
swap in a deterministic analytic stub instead of a JPL kernel.
"""

import logging
import math
import os
from contextlib import contextmanager
from datetime import datetime
from functools import lru_cache
from pathlib import Path
from typing import Iterator, Protocol

from pytz import utc
from skyfield import almanac
from skyfield import errors as skyfield_errors
from skyfield.api import Loader, wgs84
from skyfield.earthlib import refract

from thatdaysun.clock import as_utc
from thatdaysun.models import GeoCoordinate, Vector3

_ROOT = Path(__file__).parent.parent.parent
_DEFAULT_EPHEMERIS = "de421.bsp"

_log = logging.getLogger(__name__)

RISING = 1
SETTING = -1

# Standard atmosphere used for horizon refraction
_TEMPERATURE_C = 10.0
_PRESSURE_MBAR = 1010.0


class EphemerisRangeError(Exception):
    """The ephemeris cannot resolve the requested year or instant."""


class EphemerisProvider(Protocol):
    """Celestial capabilities the geometry layer consumes."""

    def heliocentric_vector(self, body: str, instant: datetime) -> Vector3:
        """Sun-to-body vector, J2000 equatorial frame, AU."""
        ...

    def equatorial_coordinates(
        self, body: str, instant: datetime, observer: GeoCoordinate | None = None
    ) -> tuple[float, float]:
        """Apparent (RA hours, Dec degrees) of date. Geocentric if observer is None."""
        ...

    def horizontal_coordinates(
        self, instant: datetime, observer: GeoCoordinate, ra_hours: float, dec_deg: float
    ) -> tuple[float, float]:
        """(azimuth, altitude) in degrees for an of-date RA/Dec."""
        ...

    def sidereal_time(self, instant: datetime) -> float:
        """Greenwich apparent sidereal time, hours [0, 24)."""
        ...

    def rise_set_search(
        self,
        body: str,
        observer: GeoCoordinate,
        direction: int,
        start: datetime,
        limit_days: float = 1.0,
    ) -> datetime | None:
        """First rise (direction=+1) or set (-1) after start, None if none within limit."""
        ...

    def season_search(self, year: int) -> tuple[datetime, datetime, datetime, datetime]:
        """March equinox, June solstice, September equinox, December solstice."""
        ...


class SkyfieldEphemeris:
    """EphemerisProvider backed by a skyfield SPICE kernel."""

    def __init__(self, loader: Loader, filename: str = _DEFAULT_EPHEMERIS):
        self._eph = loader(filename)
        self._ts = loader.timescale()
        self._earth = self._eph["earth"]
        self._sun = self._eph["sun"]

    def _time(self, instant: datetime):
        return self._ts.from_datetime(as_utc(instant))

    def heliocentric_vector(self, body: str, instant: datetime) -> Vector3:
        with _range_guard(instant):
            x, y, z = (self._eph[body] - self._sun).at(self._time(instant)).position.au
        return Vector3(float(x), float(y), float(z))

    def equatorial_coordinates(
        self, body: str, instant: datetime, observer: GeoCoordinate | None = None
    ) -> tuple[float, float]:
        t = self._time(instant)
        origin = self._earth
        if observer is not None:
            origin = self._earth + wgs84.latlon(
                latitude_degrees=observer.lat, longitude_degrees=observer.lng
            )
        with _range_guard(instant):
            ra, dec, _ = origin.at(t).observe(self._eph[body]).apparent().radec(epoch="date")
        return float(ra.hours), float(dec.degrees)

    def horizontal_coordinates(
        self, instant: datetime, observer: GeoCoordinate, ra_hours: float, dec_deg: float
    ) -> tuple[float, float]:
        lat = math.radians(observer.lat)
        dec = math.radians(dec_deg)
        hour_angle = math.radians(
            (self.sidereal_time(instant) - ra_hours) * 15.0 + observer.lng
        )
        sin_alt = math.sin(lat) * math.sin(dec) + math.cos(lat) * math.cos(dec) * math.cos(
            hour_angle
        )
        alt = math.degrees(math.asin(max(-1.0, min(1.0, sin_alt))))
        az = math.degrees(
            math.atan2(
                -math.sin(hour_angle) * math.cos(dec),
                math.cos(lat) * math.sin(dec)
                - math.sin(lat) * math.cos(dec) * math.cos(hour_angle),
            )
        ) % 360.0
        alt = float(refract(alt, _TEMPERATURE_C, _PRESSURE_MBAR))
        return az, alt

    def sidereal_time(self, instant: datetime) -> float:
        return float(self._time(instant).gast)

    def rise_set_search(
        self,
        body: str,
        observer: GeoCoordinate,
        direction: int,
        start: datetime,
        limit_days: float = 1.0,
    ) -> datetime | None:
        ground = self._earth + wgs84.latlon(
            latitude_degrees=observer.lat, longitude_degrees=observer.lng
        )
        t0 = self._time(start)
        t1 = self._ts.tt_jd(t0.tt + limit_days)
        find = almanac.find_risings if direction == RISING else almanac.find_settings
        with _range_guard(start):
            times, crossed = find(ground, self._eph[body], t0, t1)
        for t, ok in zip(times, crossed):
            if ok:
                return t.utc_datetime().astimezone(utc)
        return None

    def season_search(self, year: int) -> tuple[datetime, datetime, datetime, datetime]:
        t0 = self._ts.utc(year, 1, 1)
        t1 = self._ts.utc(year + 1, 1, 1)
        try:
            times, events = almanac.find_discrete(t0, t1, almanac.seasons(self._eph))
        except skyfield_errors.EphemerisRangeError as e:
            raise EphemerisRangeError(f"Year {year} outside ephemeris range") from e
        found = {
            int(code): t.utc_datetime().astimezone(utc) for t, code in zip(times, events)
        }
        if sorted(found) != [0, 1, 2, 3]:
            raise EphemerisRangeError(f"Seasons not found for year {year}")
        return found[0], found[1], found[2], found[3]


@contextmanager
def _range_guard(instant: datetime) -> Iterator[None]:
    try:
        yield
    except skyfield_errors.EphemerisRangeError as e:
        raise EphemerisRangeError(f"{instant.isoformat()} outside ephemeris range") from e


def load_ephemeris(data_dir: str | None = None, filename: str | None = None) -> SkyfieldEphemeris:
    """Load (downloading if needed) the skyfield kernel.

    The environment is read on every call; only the resolved
    (data_dir, filename) pair is cached.

    Args:
        data_dir: Download directory. Defaults to $THATDAYSUN_DATA_DIR or <repo>/resources.
        filename: Kernel name. Defaults to $THATDAYSUN_EPHEMERIS or de421.bsp.

    Returns:
        A SkyfieldEphemeris, shared per (data_dir, filename).
    """
    data_dir = data_dir or os.environ.get("THATDAYSUN_DATA_DIR") or str(_ROOT / "resources")
    filename = filename or os.environ.get("THATDAYSUN_EPHEMERIS") or _DEFAULT_EPHEMERIS
    return _load_cached(data_dir, filename)


@lru_cache(maxsize=None)
def _load_cached(data_dir: str, filename: str) -> SkyfieldEphemeris:
    _log.info("Loading ephemeris %s from %s", filename, data_dir)
    return SkyfieldEphemeris(Loader(data_dir), filename)
