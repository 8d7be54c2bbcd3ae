"""Matplotlib static PNG renderer for a local day of sunlight."""

from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.figure import Figure

from thatdaysun.clock import format_local_time, wall_clock
from thatdaysun.models import DayReport

_ROOT = Path(__file__).parent.parent.parent.parent

_BG = "#050a1a"
_DAY_COLOR = "#f5c542"
_NIGHT_COLOR = "#7ec8e3"
_HORIZON_COLOR = "#888888"


def render_day_chart(report: DayReport, chart_size: int = 10) -> Figure:
    """Render the Sun's altitude over the local day.

    Args:
        report: Fully computed day report.
        chart_size: Output image width in inches.

    Returns:
        matplotlib Figure object.
    """
    fig, ax = plt.subplots(figsize=(chart_size, chart_size / 2))
    fig.patch.set_facecolor(_BG)
    ax.set_facecolor(_BG)

    hours = np.array([s.minute for s in report.samples]) / 60.0
    alts = np.array([s.alt_deg for s in report.samples])

    ax.plot(hours, np.where(alts >= 0, alts, np.nan), color=_DAY_COLOR, linewidth=2, zorder=2)
    ax.plot(hours, np.where(alts < 0, alts, np.nan), color=_NIGHT_COLOR, linewidth=1, zorder=2)
    ax.axhline(0, color=_HORIZON_COLOR, linewidth=0.8, zorder=1)

    for instant, label in (
        (report.sun_times.sunrise, "sunrise"),
        (report.sun_times.sunset, "sunset"),
    ):
        if instant is None:
            continue
        # same axis as the samples: hours elapsed since the anchored midnight
        x = (instant - report.midnight).total_seconds() / 3600.0
        ax.axvline(x, color=_DAY_COLOR, linestyle=":", linewidth=0.8, alpha=0.7)
        ax.text(
            x,
            ax.get_ylim()[1],
            f"{label} {format_local_time(instant, report.tz_name)}",
            color="white",
            fontsize=8,
            ha="center",
            va="bottom",
        )

    loc = report.location
    ax.set_title(
        f"{loc.lat:.2f}, {loc.lng:.2f} — {report.tz_name} — {_local_date(report)}",
        color="white",
    )
    ax.set_xlim(0, 24)
    ax.set_xticks(range(0, 25, 3))
    ax.set_xlabel("hours since local midnight", color="white")
    ax.set_ylabel("altitude (°)", color="white")
    ax.tick_params(colors="white")
    for spine in ax.spines.values():
        spine.set_color(_HORIZON_COLOR)

    return fig


def _local_date(report: DayReport) -> str:
    wc = wall_clock(report.midnight, report.tz_name)
    return f"{wc.year:04d}-{wc.month:02d}-{wc.day:02d}"


def save_day_chart(report: DayReport, output_path: Path | None = None) -> Path:
    """Save a DayReport chart as a PNG file.

    Args:
        report: Fully computed day report.
        output_path: Destination path. Auto-generated under results/ if None.

    Returns:
        Path to the saved file.
    """
    if output_path is None:
        loc = report.location
        day_str = _local_date(report).replace("-", "_")
        filename = f"{loc.lat:.2f}_{loc.lng:.2f}__{day_str}.png"
        output_path = _ROOT / "results" / filename

    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig = render_day_chart(report)
    fig.savefig(output_path, facecolor=_BG)
    plt.close(fig)
    return output_path
