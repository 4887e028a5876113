"""
Tests for the enrichment pipeline.

Enrichment is forward-only: it reads a history snapshot, never mutates it,
and yields the same derived fields for the same input and snapshot.
"""

from __future__ import annotations

from datetime import timedelta

import pytest
from pydantic import ValidationError

from core.domain.models import EnrichedReading, Posture, Reading, SeverityLevel
from core.services.enrichment import enrich, to_reading

from conftest import BASE_TIME

DERIVED = ("pulse_pressure", "mean_arterial_pressure", "severity_level", "orthostatic_flag")


def test_enrich_derives_all_fields(make_raw) -> None:
    enriched = enrich(make_raw(120, 80, heartRate="66", symptoms=["headache"]), [])

    assert isinstance(enriched, EnrichedReading)
    assert enriched.pulse_pressure == 40
    assert enriched.mean_arterial_pressure == 93
    assert enriched.severity_level is SeverityLevel.STAGE1
    assert enriched.orthostatic_flag is False
    assert enriched.heart_rate == 66
    assert enriched.symptoms == ("headache",)
    assert enriched.id


def test_enrich_flags_orthostatic_against_history(make_raw, make_history) -> None:
    history = make_history([make_raw(160, 100, BASE_TIME, "lying")])
    standing = make_raw(135, 95, BASE_TIME + timedelta(minutes=30), "standing")

    assert enrich(standing, history).orthostatic_flag is True


def test_enrich_does_not_mutate_history(make_raw, make_history) -> None:
    history = make_history([make_raw(160, 100, BASE_TIME, "lying")])
    snapshot = list(history)

    enrich(make_raw(135, 95, BASE_TIME + timedelta(minutes=30), "standing"), history)

    assert history == snapshot


def test_enrich_uses_id_factory(make_raw) -> None:
    assert enrich(make_raw(), [], id_factory=lambda: "fixed-id").id == "fixed-id"


def test_generated_ids_are_unique(make_raw) -> None:
    ids = {enrich(make_raw(), []).id for _ in range(50)}
    assert len(ids) == 50


def test_enrich_rejects_malformed_input(make_raw) -> None:
    with pytest.raises(ValidationError):
        enrich(make_raw(systolic="high"), [])  # type: ignore[arg-type]


def test_earlier_readings_are_not_recomputed(make_raw, make_history) -> None:
    """A later lying reading never changes a stored standing reading's flag."""
    history = make_history(
        [
            make_raw(135, 95, BASE_TIME, "standing"),
            make_raw(160, 100, BASE_TIME + timedelta(minutes=10), "lying"),
        ]
    )
    assert history[0].orthostatic_flag is False


def test_reenriching_base_fields_is_deterministic(make_raw, make_history) -> None:
    history = make_history(
        [
            make_raw(160, 100, BASE_TIME, "lying"),
            make_raw(135, 95, BASE_TIME + timedelta(minutes=30), "standing"),
            make_raw(185, 100, BASE_TIME + timedelta(hours=5), "sitting"),
        ]
    )
    for index, stored in enumerate(history):
        again = enrich(stored.base_reading(), history[:index])
        assert {f: getattr(again, f) for f in DERIVED} == {f: getattr(stored, f) for f in DERIVED}


def test_enriched_input_is_reduced_to_base_reading(make_raw) -> None:
    enriched = enrich(make_raw(150, 95), [])
    reading = to_reading(enriched)
    assert type(reading) is Reading
    assert reading.systolic == 150


def test_to_reading_accepts_snake_case(make_raw) -> None:
    reading = to_reading(
        {
            "timestamp": BASE_TIME,
            "systolic": 120,
            "diastolic": 80,
            "heart_rate": 70,
            "posture": "lying",
        }
    )
    assert reading.heart_rate == 70
    assert reading.posture is Posture.LYING
