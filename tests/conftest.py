"""Shared fixtures: deterministic stand-ins for the skyfield ephemeris."""

import math
from datetime import datetime, timedelta

import pytest
from pytz import utc

from thatdaysun.clock import as_utc
from thatdaysun.ephemeris import RISING, EphemerisRangeError
from thatdaysun.models import GeoCoordinate, Vector3

J2000 = datetime(2000, 1, 1, 12, 0, tzinfo=utc)
OBLIQUITY = math.radians(23.4392911)

# Published equinox/solstice instants (UTC, to the minute)
KNOWN_SEASONS = {
    2024: (
        datetime(2024, 3, 20, 3, 6, tzinfo=utc),
        datetime(2024, 6, 20, 20, 51, tzinfo=utc),
        datetime(2024, 9, 22, 12, 44, tzinfo=utc),
        datetime(2024, 12, 21, 9, 21, tzinfo=utc),
    ),
    2025: (
        datetime(2025, 3, 20, 9, 1, tzinfo=utc),
        datetime(2025, 6, 21, 2, 42, tzinfo=utc),
        datetime(2025, 9, 22, 18, 19, tzinfo=utc),
        datetime(2025, 12, 21, 15, 3, tzinfo=utc),
    ),
}


def _days(instant: datetime) -> float:
    return (as_utc(instant) - J2000).total_seconds() / 86400.0


class AnalyticEphemeris:
    """Low-precision solar theory (about 0.01 degree), enough for property tests.

    Earth sits in the ecliptic plane; the equatorial vector is the ecliptic
    one tilted by the obliquity. No refraction, no parallax.
    """

    def __init__(self):
        self.season_calls = 0

    def _sun(self, instant: datetime) -> tuple[float, float]:
        n = _days(instant)
        mean_lon = 280.460 + 0.9856474 * n
        g = math.radians(357.528 + 0.9856003 * n)
        lam = mean_lon + 1.915 * math.sin(g) + 0.020 * math.sin(2 * g)
        r = 1.00014 - 0.01671 * math.cos(g) - 0.00014 * math.cos(2 * g)
        return math.radians(lam % 360.0), r

    def heliocentric_vector(self, body: str, instant: datetime) -> Vector3:
        assert body == "earth"
        lam, r = self._sun(instant)
        lon = lam + math.pi
        xe, ye = r * math.cos(lon), r * math.sin(lon)
        return Vector3(xe, ye * math.cos(OBLIQUITY), ye * math.sin(OBLIQUITY))

    def equatorial_coordinates(self, body, instant, observer=None):
        assert body == "sun"
        lam, _ = self._sun(instant)
        ra = math.atan2(math.cos(OBLIQUITY) * math.sin(lam), math.cos(lam))
        dec = math.asin(math.sin(OBLIQUITY) * math.sin(lam))
        return (math.degrees(ra) / 15.0) % 24.0, math.degrees(dec)

    def sidereal_time(self, instant: datetime) -> float:
        return (18.697374558 + 24.06570982441908 * _days(instant)) % 24.0

    def horizontal_coordinates(self, instant, observer, ra_hours, dec_deg):
        lat = math.radians(observer.lat)
        dec = math.radians(dec_deg)
        h = math.radians((self.sidereal_time(instant) - ra_hours) * 15.0 + observer.lng)
        alt = math.asin(
            math.sin(lat) * math.sin(dec) + math.cos(lat) * math.cos(dec) * math.cos(h)
        )
        az = math.atan2(
            -math.sin(h) * math.cos(dec),
            math.cos(lat) * math.sin(dec) - math.sin(lat) * math.cos(dec) * math.cos(h),
        )
        return math.degrees(az) % 360.0, math.degrees(alt)

    def _altitude(self, instant: datetime, observer: GeoCoordinate) -> float:
        ra, dec = self.equatorial_coordinates("sun", instant, observer)
        return self.horizontal_coordinates(instant, observer, ra, dec)[1] + 0.8333

    def rise_set_search(self, body, observer, direction, start, limit_days=1.0):
        step = timedelta(minutes=5)
        t0 = as_utc(start)
        a0 = self._altitude(t0, observer)
        for _ in range(int(limit_days * 24 * 12)):
            t1 = t0 + step
            a1 = self._altitude(t1, observer)
            crossed = a0 < 0 <= a1 if direction == RISING else a0 >= 0 > a1
            if crossed:
                return t0 + step * (a0 / (a0 - a1))
            t0, a0 = t1, a1
        return None

    def season_search(self, year: int):
        self.season_calls += 1
        if year not in KNOWN_SEASONS:
            raise EphemerisRangeError(f"Year {year} outside stub range")
        return KNOWN_SEASONS[year]


class FixedEphemeris:
    """Returns the same canned values for every instant and records calls."""

    def __init__(self, vector=Vector3(1.0, 0.0, 0.0), ra_hours=0.0, dec_deg=0.0, gast=0.0,
                 horizon=(180.0, 45.0)):
        self.vector = vector
        self.ra_hours = ra_hours
        self.dec_deg = dec_deg
        self.gast = gast
        self.horizon = horizon
        self.calls = []

    def heliocentric_vector(self, body, instant):
        self.calls.append(("heliocentric_vector", body, instant))
        return self.vector

    def equatorial_coordinates(self, body, instant, observer=None):
        self.calls.append(("equatorial_coordinates", body, instant, observer))
        return self.ra_hours, self.dec_deg

    def horizontal_coordinates(self, instant, observer, ra_hours, dec_deg):
        self.calls.append(("horizontal_coordinates", instant, observer, ra_hours, dec_deg))
        return self.horizon

    def sidereal_time(self, instant):
        self.calls.append(("sidereal_time", instant))
        return self.gast

    def rise_set_search(self, body, observer, direction, start, limit_days=1.0):
        self.calls.append(("rise_set_search", body, observer, direction, start))
        return None

    def season_search(self, year):
        raise EphemerisRangeError(f"Year {year} outside fixed range")


@pytest.fixture
def ephemeris():
    return AnalyticEphemeris()


@pytest.fixture
def london():
    return GeoCoordinate(lat=51.5074, lng=-0.1278)
