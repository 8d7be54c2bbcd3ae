"""Yearly milestones: equinoxes, solstices, perihelion and aphelion."""

import logging
from datetime import datetime, timedelta

from pytz import utc

from thatdaysun.ephemeris import EphemerisProvider
from thatdaysun.geometry import (
    heliocentric_distance,
    heliocentric_longitude,
    subsolar_longitude,
)
from thatdaysun.locations import CITIES, nearest_locations
from thatdaysun.models import ApsisPair, NamedLocation, SeasonEvent, SeasonSet

_log = logging.getLogger(__name__)

SEASON_NAMES = ("March Equinox", "June Solstice", "September Equinox", "December Solstice")

# Apsis scan: whole-day steps either side of a fixed calendar anchor
APSIS_WINDOW_DAYS = 10
PERIHELION_ANCHOR = (1, 4)  # January 4
APHELION_ANCHOR = (7, 4)  # July 4


def _enrich(
    name: str,
    instant: datetime,
    ephemeris: EphemerisProvider,
    catalog: tuple[NamedLocation, ...],
) -> SeasonEvent:
    subsolar = subsolar_longitude(instant, ephemeris)
    return SeasonEvent(
        name=name,
        instant=instant,
        distance_au=heliocentric_distance(instant, ephemeris),
        helio_lon_deg=heliocentric_longitude(instant, ephemeris),
        subsolar_lon_deg=subsolar,
        nearest=nearest_locations(subsolar, 3, catalog),
    )


def resolve_seasons(
    year: int,
    ephemeris: EphemerisProvider,
    catalog: tuple[NamedLocation, ...] = CITIES,
) -> SeasonSet:
    """Equinoxes and solstices of year with derived geometry.

    Args:
        year: Calendar year.
        ephemeris: Provider used for the season search and the enrichment.
        catalog: Named locations to rank against the sub-solar longitude.

    Returns:
        SeasonSet in calendar order.

    Raises:
        EphemerisRangeError: If the provider cannot cover the year.
    """
    instants = ephemeris.season_search(year)
    march, june, september, december = (
        _enrich(name, instant, ephemeris, catalog)
        for name, instant in zip(SEASON_NAMES, instants)
    )
    return SeasonSet(
        march_equinox=march,
        june_solstice=june,
        september_equinox=september,
        december_solstice=december,
    )


def _scan_distance(
    center: datetime, ephemeris: EphemerisProvider, find_min: bool
) -> tuple[datetime, float]:
    best = center
    best_dist = heliocentric_distance(center, ephemeris)
    for offset in range(-APSIS_WINDOW_DAYS, APSIS_WINDOW_DAYS + 1):
        candidate = center + timedelta(days=offset)
        dist = heliocentric_distance(candidate, ephemeris)
        if (find_min and dist < best_dist) or (not find_min and dist > best_dist):
            best, best_dist = candidate, dist
    return best, best_dist


def resolve_apsis(year: int, ephemeris: EphemerisProvider) -> ApsisPair:
    """Perihelion and aphelion of year, to the nearest whole day.

    A plain 21-sample daily scan around January 4 and July 4 (00:00 UTC).
    The true apsides drift only a few days around these anchors.
    """
    perihelion, peri_dist = _scan_distance(
        utc.localize(datetime(year, *PERIHELION_ANCHOR)), ephemeris, find_min=True
    )
    aphelion, aph_dist = _scan_distance(
        utc.localize(datetime(year, *APHELION_ANCHOR)), ephemeris, find_min=False
    )
    _log.debug("apsis %d: perihelion %s, aphelion %s", year, perihelion, aphelion)
    return ApsisPair(
        perihelion=perihelion,
        aphelion=aphelion,
        perihelion_distance_au=peri_dist,
        aphelion_distance_au=aph_dist,
    )
