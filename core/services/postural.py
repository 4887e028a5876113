"""
Orthostatic (postural) hypotension detection.

A standing reading is compared against the most recently appended lying
reading. History is scanned in reverse insertion order, not by timestamp:
readings are assumed to be appended roughly in the order they were taken.
"""

from collections.abc import Sequence

import structlog

from core.domain.models import (
    DEFAULT_CRITERIA,
    OrthostaticCriteria,
    Posture,
    PosturalDrop,
    Reading,
)

logger = structlog.get_logger(__name__)


def postural_drop(
    lying: Reading, standing: Reading, criteria: OrthostaticCriteria = DEFAULT_CRITERIA
) -> PosturalDrop:
    """Pressure drop from lying to standing and whether it meets the criteria."""
    systolic_drop = lying.systolic - standing.systolic
    diastolic_drop = lying.diastolic - standing.diastolic
    return PosturalDrop(
        systolic_drop=systolic_drop,
        diastolic_drop=diastolic_drop,
        orthostatic=(
            systolic_drop >= criteria.systolic_drop or diastolic_drop >= criteria.diastolic_drop
        ),
    )


def last_lying_reading(history: Sequence[Reading]) -> Reading | None:
    """The most recently appended lying reading, if any."""
    for prev in reversed(history):
        if prev.posture == Posture.LYING:
            return prev
    return None


def detect_orthostatic(
    candidate: Reading,
    history: Sequence[Reading],
    criteria: OrthostaticCriteria = DEFAULT_CRITERIA,
) -> bool:
    """
    Flag a standing reading whose pressure dropped against the last lying reading.

    Only the first lying reading found is considered. If it falls outside the
    lookback window the pair is unrelated and the result is False; no older
    lying reading is tried.
    """
    if candidate.posture != Posture.STANDING:
        return False

    prev = last_lying_reading(history)
    if prev is None:
        return False

    interval = abs(candidate.timestamp - prev.timestamp)
    if interval > criteria.lookback:
        logger.debug(
            "orthostatic_candidate_out_of_window",
            interval_minutes=round(interval.total_seconds() / 60, 1),
            lookback_minutes=criteria.lookback_minutes,
        )
        return False

    drop = postural_drop(prev, candidate, criteria)
    logger.debug(
        "orthostatic_candidate_checked",
        systolic_drop=drop.systolic_drop,
        diastolic_drop=drop.diastolic_drop,
        orthostatic=drop.orthostatic,
    )
    return drop.orthostatic
