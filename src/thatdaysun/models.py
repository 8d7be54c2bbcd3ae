"""Value types passed between the compute, clock and render layers."""

import math
from dataclasses import dataclass
from datetime import datetime


class InvalidCoordinate(ValueError):
    """Latitude/longitude outside the valid range."""


@dataclass(frozen=True)
class QueryInput:
    """Raw user input. Not yet validated."""

    lat: float  # Latitude (decimal degrees)
    lng: float  # Longitude (decimal degrees)
    when: str  # "YYYY-MM-DD" or "YYYY-MM-DD HH:MM" (UTC)


@dataclass(frozen=True)
class GeoCoordinate:
    """Validated observer location."""

    lat: float  # Latitude, [-90, 90]
    lng: float  # Longitude, [-180, 180]

    def __post_init__(self) -> None:
        if not (math.isfinite(self.lat) and -90.0 <= self.lat <= 90.0):
            raise InvalidCoordinate(f"Latitude out of range: {self.lat}")
        if not (math.isfinite(self.lng) and -180.0 <= self.lng <= 180.0):
            raise InvalidCoordinate(f"Longitude out of range: {self.lng}")


@dataclass(frozen=True)
class Vector3:
    """Cartesian vector in AU."""

    x: float
    y: float
    z: float

    def length(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)


@dataclass(frozen=True)
class NamedLocation:
    """A catalog city."""

    name: str
    lat: float
    lng: float


@dataclass(frozen=True)
class HorizonPosition:
    """Sun position seen by a ground observer."""

    az_deg: float  # Azimuth (0=N, 90=E, 180=S, 270=W)
    alt_deg: float  # Altitude above the horizon (degrees, refracted)


@dataclass(frozen=True)
class SeasonEvent:
    """An equinox or solstice enriched with derived geometry."""

    name: str  # "March Equinox", "June Solstice", ...
    instant: datetime  # UTC
    distance_au: float  # Sun-Earth distance
    helio_lon_deg: float  # Heliocentric longitude of Earth, [0, 360)
    subsolar_lon_deg: float  # Geographic longitude under the Sun, [-180, 180]
    nearest: tuple[NamedLocation, ...]  # Cities closest to local solar noon


@dataclass(frozen=True)
class SeasonSet:
    """The four seasonal milestones of one year."""

    march_equinox: SeasonEvent
    june_solstice: SeasonEvent
    september_equinox: SeasonEvent
    december_solstice: SeasonEvent

    def events(self) -> tuple[SeasonEvent, ...]:
        """Events in calendar order."""
        return (
            self.march_equinox,
            self.june_solstice,
            self.september_equinox,
            self.december_solstice,
        )


@dataclass(frozen=True)
class ApsisPair:
    """Perihelion and aphelion of one year, to the nearest day."""

    perihelion: datetime
    aphelion: datetime
    perihelion_distance_au: float
    aphelion_distance_au: float


@dataclass(frozen=True)
class SunTimes:
    """Next sunrise/sunset. None means no event (polar day or night)."""

    sunrise: datetime | None
    sunset: datetime | None


@dataclass(frozen=True)
class SunSample:
    """One step of the day sweep."""

    minute: int  # Minutes after local midnight
    instant: datetime  # UTC
    az_deg: float
    alt_deg: float


@dataclass(frozen=True)
class DayReport:
    """The sole input to renderers. Fully computed state for one local day."""

    location: GeoCoordinate
    tz_name: str  # IANA timezone identifier
    midnight: datetime  # Absolute instant of local 00:00:00 (UTC)
    sun_times: SunTimes
    samples: tuple[SunSample, ...]
    earth_position: Vector3  # Ecliptic-frame heliocentric position at midnight
    subsolar_lon_deg: float  # At midnight
    nearest: tuple[NamedLocation, ...]  # Cities near solar noon at midnight
