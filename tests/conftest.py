"""Shared fixtures for building readings and histories."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from datetime import UTC, datetime
from typing import Any

import pytest

from core.domain.models import EnrichedReading
from core.services.enrichment import enrich

BASE_TIME = datetime(2024, 6, 10, 8, 0, tzinfo=UTC)


def raw_reading(
    systolic: int = 118,
    diastolic: int = 76,
    timestamp: datetime = BASE_TIME,
    posture: str = "sitting",
    **extra: Any,
) -> dict[str, Any]:
    """Boundary-shaped reading with sensible defaults."""
    return {
        "timestamp": timestamp.isoformat(),
        "systolic": systolic,
        "diastolic": diastolic,
        "posture": posture,
        **extra,
    }


def build_history(raws: Iterable[Mapping[str, Any]]) -> list[EnrichedReading]:
    """Enrich readings one by one, each against the history before it."""
    history: list[EnrichedReading] = []
    for raw in raws:
        history.append(enrich(raw, history))
    return history


@pytest.fixture
def make_raw() -> Callable[..., dict[str, Any]]:
    return raw_reading


@pytest.fixture
def make_history() -> Callable[[Iterable[Mapping[str, Any]]], list[EnrichedReading]]:
    return build_history
