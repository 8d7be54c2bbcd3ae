"""Geometry layer: reduce raw ephemeris output to ecliptic vectors and longitudes."""

import math
from datetime import datetime

from thatdaysun.ephemeris import RISING, SETTING, EphemerisProvider
from thatdaysun.models import GeoCoordinate, HorizonPosition, SunTimes, Vector3

# Mean obliquity of the ecliptic, J2000
OBLIQUITY_DEG = 23.4392911


def normalize_degrees_360(angle: float) -> float:
    """Fold angle into [0, 360)."""
    while angle < 0.0:
        angle += 360.0
    while angle >= 360.0:
        angle -= 360.0
    return angle


def normalize_degrees_180(angle: float) -> float:
    """Fold angle into [-180, 180]."""
    while angle > 180.0:
        angle -= 360.0
    while angle < -180.0:
        angle += 360.0
    return angle


def ecliptic_earth_position(instant: datetime, ephemeris: EphemerisProvider) -> Vector3:
    """Heliocentric Earth position rotated so the ecliptic is the xy plane.

    The raw vector is J2000 equatorial. Rotating about x (the vernal
    equinox direction) by the obliquity brings the orbit flat: z stays
    within a few 1e-5 AU over the year.
    """
    v = ephemeris.heliocentric_vector("earth", instant)
    eps = math.radians(OBLIQUITY_DEG)
    cos_e = math.cos(eps)
    sin_e = math.sin(eps)
    return Vector3(
        x=v.x,
        y=v.y * cos_e + v.z * sin_e,
        z=-v.y * sin_e + v.z * cos_e,
    )


def heliocentric_distance(instant: datetime, ephemeris: EphemerisProvider) -> float:
    """Sun-Earth distance in AU."""
    return ephemeris.heliocentric_vector("earth", instant).length()


def heliocentric_longitude(instant: datetime, ephemeris: EphemerisProvider) -> float:
    """Angle of Earth's raw heliocentric vector in its xy plane, degrees [0, 360)."""
    v = ephemeris.heliocentric_vector("earth", instant)
    lon = math.degrees(math.atan2(v.y, v.x))
    if lon < 0.0:
        lon += 360.0
    # -tiny + 360 rounds to 360.0
    if lon >= 360.0:
        lon = 0.0
    return lon


def subsolar_longitude(instant: datetime, ephemeris: EphemerisProvider) -> float:
    """Geographic longitude of the point with the Sun at zenith, degrees [-180, 180].

    Hour angle is zero there, so longitude = RA(Sun) - GAST.
    """
    ra_hours, _ = ephemeris.equatorial_coordinates("sun", instant)
    gast = ephemeris.sidereal_time(instant)
    return normalize_degrees_180((ra_hours - gast) * 15.0)


def horizon_position(
    instant: datetime, location: GeoCoordinate, ephemeris: EphemerisProvider
) -> HorizonPosition:
    """Sun azimuth/altitude for an observer at location."""
    ra_hours, dec_deg = ephemeris.equatorial_coordinates("sun", instant, location)
    az, alt = ephemeris.horizontal_coordinates(instant, location, ra_hours, dec_deg)
    return HorizonPosition(az_deg=az, alt_deg=alt)


def earth_rotation(instant: datetime, ephemeris: EphemerisProvider) -> float:
    """Earth's rotation angle from Greenwich apparent sidereal time, radians."""
    return ephemeris.sidereal_time(instant) / 24.0 * 2.0 * math.pi


def sun_times(
    instant: datetime, location: GeoCoordinate, ephemeris: EphemerisProvider
) -> SunTimes:
    """Next sunrise and sunset within a day of instant.

    Either field is None when the Sun does not cross the horizon (polar day
    or night). That is a valid answer, not an error.
    """
    return SunTimes(
        sunrise=ephemeris.rise_set_search("sun", location, RISING, instant),
        sunset=ephemeris.rise_set_search("sun", location, SETTING, instant),
    )
