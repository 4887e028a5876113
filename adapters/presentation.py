"""
Display helpers: severity labels and colors, the headline card, chart series.

The core only knows SeverityLevel values; every display string lives here.
"""

from collections.abc import Sequence
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict

from core.domain.models import EnrichedReading, SeverityLevel
from core.services.aggregator import TimeWindow, filter_by_window

SEVERITY_LABELS: dict[SeverityLevel, str] = {
    SeverityLevel.LOW: "Low",
    SeverityLevel.NORMAL: "Normal",
    SeverityLevel.ELEVATED: "Elevated",
    SeverityLevel.STAGE1: "Stage 1 hypertension",
    SeverityLevel.STAGE2: "Stage 2 hypertension",
    SeverityLevel.CRISIS: "Hypertensive crisis",
}

SEVERITY_COLORS: dict[SeverityLevel, str] = {
    SeverityLevel.LOW: "#6495ED",
    SeverityLevel.NORMAL: "#2E8B57",
    SeverityLevel.ELEVATED: "#CCCC00",
    SeverityLevel.STAGE1: "#FFA500",
    SeverityLevel.STAGE2: "#FF4500",
    SeverityLevel.CRISIS: "#8B0000",
}

UNKNOWN_COLOR = "#888888"
MAP_GAUGE_MAX = 150

SortField = Literal["timestamp", "systolic", "diastolic", "heart_rate"]


def severity_label(level: SeverityLevel | str) -> str:
    """Human-readable label; unknown values are shown as-is."""
    try:
        return SEVERITY_LABELS[SeverityLevel(level)]
    except ValueError:
        return str(level)


def severity_color(level: SeverityLevel | str) -> str:
    try:
        return SEVERITY_COLORS[SeverityLevel(level)]
    except ValueError:
        return UNKNOWN_COLOR


def headline(reading: EnrichedReading | None) -> str:
    """One-line summary of the latest reading."""
    if reading is None:
        return "No readings yet."

    parts = [
        reading.timestamp.astimezone().strftime("%Y-%m-%d %H:%M"),
        f"{reading.systolic}/{reading.diastolic}",
    ]
    if reading.heart_rate is not None:
        parts.append(f"{reading.heart_rate} bpm")
    parts += [
        f"MAP {reading.mean_arterial_pressure}",
        f"PP {reading.pulse_pressure}",
        severity_label(reading.severity_level),
    ]
    if reading.orthostatic_flag:
        parts.append("Suspected orthostatic hypotension")
    return "  ".join(parts)


class SeriesPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    value: int | None


class TimeSeries(BaseModel):
    """SBP/DBP/HR line-chart data."""

    model_config = ConfigDict(frozen=True)

    systolic: list[SeriesPoint]
    diastolic: list[SeriesPoint]
    heart_rate: list[SeriesPoint]


def time_series(
    history: Sequence[EnrichedReading], window: TimeWindow, now: datetime | None = None
) -> TimeSeries:
    readings = filter_by_window(history, window, now)
    return TimeSeries(
        systolic=[SeriesPoint(timestamp=r.timestamp, value=r.systolic) for r in readings],
        diastolic=[SeriesPoint(timestamp=r.timestamp, value=r.diastolic) for r in readings],
        heart_rate=[SeriesPoint(timestamp=r.timestamp, value=r.heart_rate) for r in readings],
    )


class MapGauge(BaseModel):
    """Bullet bar for the latest mean arterial pressure."""

    model_config = ConfigDict(frozen=True)

    value: int
    maximum: int = MAP_GAUGE_MAX
    color: str


def map_gauge(reading: EnrichedReading | None) -> MapGauge | None:
    if reading is None:
        return None
    return MapGauge(
        value=reading.mean_arterial_pressure, color=severity_color(reading.severity_level)
    )


def sort_history(
    history: Sequence[EnrichedReading], field: SortField, descending: bool = False
) -> list[EnrichedReading]:
    """
    Table column sort. Returns a new list; the stored history order is untouched.

    Absent heart rates sort before any recorded value.
    """
    if field == "heart_rate":
        return sorted(
            history,
            key=lambda r: (r.heart_rate is not None, r.heart_rate or 0),
            reverse=descending,
        )
    return sorted(history, key=lambda r: getattr(r, field), reverse=descending)
