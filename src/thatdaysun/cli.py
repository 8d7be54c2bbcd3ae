"""
Command-line interface for yearly milestones and local-day sunlight.

Usage:
    thatdaysun seasons 2025
    thatdaysun apsis 2025
    thatdaysun day 51.5074 -0.1278 --when "2025-06-21" --chart day.png
    thatdaysun midnight America/New_York --when "2025-03-09 12:00"

Environment (or .env):
    THATDAYSUN_DATA_DIR    directory for skyfield downloads
    THATDAYSUN_EPHEMERIS   kernel file name (default de421.bsp)
"""
import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

from dotenv import load_dotenv
from pytz import UnknownTimeZoneError, utc

from thatdaysun.clock import format_local_time, local_midnight, wall_clock
from thatdaysun.compute import build_day_report, parse_when
from thatdaysun.ephemeris import EphemerisProvider, EphemerisRangeError, load_ephemeris
from thatdaysun.models import GeoCoordinate, InvalidCoordinate
from thatdaysun.seasons import resolve_apsis, resolve_seasons


def _fmt_utc(instant: datetime) -> str:
    return instant.astimezone(utc).strftime("%Y-%m-%d %H:%M:%S UTC")


def cmd_seasons(args: argparse.Namespace, ephemeris: EphemerisProvider) -> None:
    seasons = resolve_seasons(args.year, ephemeris)
    for event in seasons.events():
        cities = ", ".join(loc.name for loc in event.nearest)
        print(
            f"{event.name:<18} {_fmt_utc(event.instant)}  "
            f"r={event.distance_au:.6f} AU  "
            f"lon={event.helio_lon_deg:7.3f}°  "
            f"sub-solar={event.subsolar_lon_deg:8.3f}°  near: {cities}"
        )


def cmd_apsis(args: argparse.Namespace, ephemeris: EphemerisProvider) -> None:
    apsis = resolve_apsis(args.year, ephemeris)
    print(f"Perihelion  {_fmt_utc(apsis.perihelion)}  r={apsis.perihelion_distance_au:.6f} AU")
    print(f"Aphelion    {_fmt_utc(apsis.aphelion)}  r={apsis.aphelion_distance_au:.6f} AU")


def cmd_day(args: argparse.Namespace, ephemeris: EphemerisProvider) -> None:
    location = GeoCoordinate(lat=args.lat, lng=args.lng)
    report = build_day_report(location, parse_when(args.when), ephemeris, args.step)
    tz = report.tz_name
    print(f"Timezone        {tz}")
    print(f"Local midnight  {_fmt_utc(report.midnight)}")
    print(f"Sunrise         {format_local_time(report.sun_times.sunrise, tz) or '—'}")
    print(f"Sunset          {format_local_time(report.sun_times.sunset, tz) or '—'}")
    noon = max(report.samples, key=lambda s: s.alt_deg)
    print(
        f"Highest sun     {format_local_time(noon.instant, tz)} "
        f"alt={noon.alt_deg:.1f}° az={noon.az_deg:.1f}°"
    )
    pos = report.earth_position
    print(f"Earth (ecl, AU) x={pos.x:.6f} y={pos.y:.6f} z={pos.z:.6f}")
    if args.chart is not None:
        from thatdaysun.renderers.static import save_day_chart

        print(f"Saved: {save_day_chart(report, args.chart)}")


def cmd_midnight(args: argparse.Namespace) -> None:
    midnight = local_midnight(parse_when(args.when), args.tz)
    wc = wall_clock(midnight, args.tz)
    print(
        f"{_fmt_utc(midnight)}  ({args.tz} {wc.year:04d}-{wc.month:02d}-{wc.day:02d} "
        f"{format_local_time(midnight, args.tz, include_seconds=True)})"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="thatdaysun",
        description="Sun/Earth geometry mapped onto a local wall clock",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--data-dir", help="Directory for skyfield downloads")
    parser.add_argument("--ephemeris", help="Kernel file name, e.g. de440s.bsp")
    sub = parser.add_subparsers(dest="command", required=True)

    seasons = sub.add_parser("seasons", help="Equinoxes and solstices of a year")
    seasons.add_argument("year", type=int)

    apsis = sub.add_parser("apsis", help="Perihelion and aphelion of a year")
    apsis.add_argument("year", type=int)

    today = datetime.now(utc).strftime("%Y-%m-%d %H:%M")

    day = sub.add_parser("day", help="Sunlight over one local day")
    day.add_argument("lat", type=float)
    day.add_argument("lng", type=float)
    day.add_argument("--when", default=today, help="YYYY-MM-DD [HH:MM] (UTC)")
    day.add_argument("--step", type=int, default=10, help="Sweep step in minutes")
    day.add_argument("--chart", type=Path, help="Write a PNG chart to this path")

    midnight = sub.add_parser("midnight", help="UTC instant of local midnight")
    midnight.add_argument("tz", help="IANA timezone, e.g. Asia/Kolkata")
    midnight.add_argument("--when", default=today, help="YYYY-MM-DD [HH:MM] (UTC)")
    return parser


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "midnight":
            cmd_midnight(args)
            return 0
        ephemeris = load_ephemeris(args.data_dir, args.ephemeris)
        if args.command == "seasons":
            cmd_seasons(args, ephemeris)
        elif args.command == "apsis":
            cmd_apsis(args, ephemeris)
        else:
            cmd_day(args, ephemeris)
    except (InvalidCoordinate, EphemerisRangeError, UnknownTimeZoneError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
