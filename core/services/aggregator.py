"""
Aggregations over reading history for summaries and charts.

Window filtering always returns chronological order. The postural pairs view
and ``latest`` work in insertion order, matching how readings were entered.
"""

from collections.abc import Sequence
from datetime import UTC, datetime, timedelta, tzinfo
from decimal import ROUND_HALF_UP, Decimal
from typing import Literal

from core.domain.models import (
    DEFAULT_CRITERIA,
    DayPart,
    DayPartAverage,
    EnrichedReading,
    OrthostaticCriteria,
    Posture,
    PosturalPair,
)
from core.services.postural import postural_drop

ALL_TIME: Literal["all"] = "all"

TimeWindow = int | Literal["all"]


def parse_time_window(value: str | int) -> TimeWindow:
    """Normalize ``7``, ``"7"`` or ``"all"`` into a TimeWindow."""
    if isinstance(value, str):
        text = value.strip().lower()
        if text == ALL_TIME:
            return ALL_TIME
        if not text.isdigit():
            raise ValueError(f"Time window must be a day count or 'all', got {value!r}")
        value = int(text)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Time window must be a whole number of days, got {value!r}")
    if value <= 0:
        raise ValueError(f"Time window must be a positive number of days, got {value!r}")
    return value


def filter_by_window(
    history: Sequence[EnrichedReading],
    window: TimeWindow,
    now: datetime | None = None,
) -> list[EnrichedReading]:
    """Readings inside the window, sorted ascending by timestamp."""
    window = parse_time_window(window)
    if window == ALL_TIME:
        selected = list(history)
    else:
        now = now or datetime.now(UTC)
        if now.tzinfo is None:
            now = now.astimezone()
        threshold = now - timedelta(days=window)
        selected = [r for r in history if threshold <= r.timestamp <= now]
    return sorted(selected, key=lambda r: r.timestamp)


def _mean(values: list[int]) -> float:
    if not values:
        return 0.0
    avg = Decimal(sum(values)) / Decimal(len(values))
    return float(avg.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def bucket_by_day_part(
    history: Sequence[EnrichedReading], tz: tzinfo | None = None
) -> dict[DayPart, DayPartAverage]:
    """
    Average systolic and diastolic pressure per time of day.

    Hours are taken in ``tz`` (the local zone by default). All four buckets
    are always present, in morning/afternoon/evening/night order; an empty
    bucket averages to 0.0.
    """
    systolic: dict[DayPart, list[int]] = {part: [] for part in DayPart}
    diastolic: dict[DayPart, list[int]] = {part: [] for part in DayPart}

    for reading in history:
        part = DayPart.for_hour(reading.timestamp.astimezone(tz).hour)
        systolic[part].append(reading.systolic)
        diastolic[part].append(reading.diastolic)

    return {
        part: DayPartAverage(
            day_part=part,
            count=len(systolic[part]),
            systolic_avg=_mean(systolic[part]),
            diastolic_avg=_mean(diastolic[part]),
        )
        for part in DayPart
    }


def latest(history: Sequence[EnrichedReading]) -> EnrichedReading | None:
    """The last appended reading (not necessarily the newest timestamp)."""
    return history[-1] if history else None


def find_postural_pairs(
    history: Sequence[EnrichedReading],
    criteria: OrthostaticCriteria = DEFAULT_CRITERIA,
) -> list[PosturalPair]:
    """
    Pair each standing reading with the lying reading appended right before it.

    Drops are recomputed per pair, so a pair's flag can disagree with the
    standing reading's stored ``orthostatic_flag`` when history was not
    appended chronologically.
    """
    pairs: list[PosturalPair] = []
    for prev, cur in zip(history, history[1:]):
        if prev.posture == Posture.LYING and cur.posture == Posture.STANDING:
            drop = postural_drop(prev, cur, criteria)
            pairs.append(PosturalPair(lying=prev, standing=cur, drop=drop))
    return pairs
