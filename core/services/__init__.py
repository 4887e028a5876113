"""
Core services for the application.

This package contains the reading analysis engine: classification, derived
values, postural-change detection, enrichment and history aggregation.
"""

from .aggregator import (
    ALL_TIME,
    TimeWindow,
    bucket_by_day_part,
    filter_by_window,
    find_postural_pairs,
    latest,
    parse_time_window,
)
from .classifier import classify
from .derived_values import mean_arterial_pressure, pulse_pressure, round_half_up
from .enrichment import enrich, to_reading
from .postural import detect_orthostatic, postural_drop

__all__ = [
    "ALL_TIME",
    "TimeWindow",
    "bucket_by_day_part",
    "classify",
    "detect_orthostatic",
    "enrich",
    "filter_by_window",
    "find_postural_pairs",
    "latest",
    "mean_arterial_pressure",
    "parse_time_window",
    "postural_drop",
    "pulse_pressure",
    "round_half_up",
    "to_reading",
]
