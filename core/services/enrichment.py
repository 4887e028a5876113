"""
Enrichment pipeline: one new reading in, one enriched reading out.

Classification, derived values and postural detection run against the
history snapshot passed in. The pipeline never appends to that history;
storing the result is the caller's job.
"""

import uuid
from collections.abc import Callable, Mapping, Sequence
from typing import Any

import structlog

from core.domain.models import DEFAULT_CRITERIA, EnrichedReading, OrthostaticCriteria, Reading
from core.services.classifier import classify
from core.services.derived_values import mean_arterial_pressure, pulse_pressure
from core.services.postural import detect_orthostatic

logger = structlog.get_logger(__name__)


def new_reading_id() -> str:
    return uuid.uuid4().hex


def to_reading(raw: Reading | Mapping[str, Any]) -> Reading:
    """
    Validate raw input into a Reading.

    Accepts a mapping in either the camelCase boundary shape or snake_case,
    or an existing Reading. Derived fields of an EnrichedReading are dropped.

    Raises:
        pydantic.ValidationError: non-numeric pressures, unparseable timestamps
            and other malformed input.
    """
    if isinstance(raw, EnrichedReading):
        return raw.base_reading()
    if isinstance(raw, Reading):
        return raw
    return Reading.model_validate(raw)


def enrich(
    raw: Reading | Mapping[str, Any],
    history: Sequence[EnrichedReading],
    *,
    criteria: OrthostaticCriteria = DEFAULT_CRITERIA,
    id_factory: Callable[[], str] = new_reading_id,
) -> EnrichedReading:
    """Derive severity, PP, MAP and the orthostatic flag for a new reading."""
    reading = to_reading(raw)

    enriched = EnrichedReading(
        **reading.model_dump(),
        id=id_factory(),
        pulse_pressure=pulse_pressure(reading.systolic, reading.diastolic),
        mean_arterial_pressure=mean_arterial_pressure(reading.systolic, reading.diastolic),
        severity_level=classify(reading.systolic, reading.diastolic),
        orthostatic_flag=detect_orthostatic(reading, history, criteria),
    )

    logger.debug(
        "reading_enriched",
        reading_id=enriched.id,
        severity_level=enriched.severity_level.value,
        orthostatic=enriched.orthostatic_flag,
        history_size=len(history),
    )
    return enriched
