"""
Tests for configuration management in `core/config.py`.

Covers:
- Environment parsing and debug defaults
- Logging level coercion to the expected Literal
- Orthostatic thresholds from the environment
- Time window validation
- get_config cache behavior
- AppConfig validation (debug only allowed in development)
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from core.config import (
    AnalysisConfig,
    AppConfig,
    LoggingConfig,
    StorageConfig,
    get_config,
    load_config_from_env,
)
from core.domain.models import OrthostaticCriteria


@pytest.fixture(autouse=True)
def clear_config_cache() -> Iterator[None]:
    """Ensure get_config cache is cleared before and after each test."""
    get_config.cache_clear()
    yield
    get_config.cache_clear()


def test_load_config_dev_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "development")
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.delenv("BP_DATA_FILE", raising=False)

    config = load_config_from_env()

    assert config.environment == "development"
    assert config.debug is True
    assert config.logging.format == "console"
    assert config.logging.level == "INFO"
    assert config.storage.data_file == "./bp_data.json"
    assert config.analysis.criteria() == OrthostaticCriteria()


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("dev", "development"),
        ("stage", "staging"),
        ("prod", "production"),
        ("anything", "production"),
    ],
)
def test_environment_aliases(monkeypatch: pytest.MonkeyPatch, raw: str, expected: str) -> None:
    monkeypatch.setenv("ENVIRONMENT", raw)

    config = load_config_from_env()

    assert config.environment == expected
    assert config.debug is (expected == "development")


def test_production_logs_json(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "production")
    assert load_config_from_env().logging.format == "json"


def test_log_level_coercion(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", "debug")
    assert load_config_from_env().logging.level == "DEBUG"

    monkeypatch.setenv("LOG_LEVEL", "verbose")
    assert load_config_from_env().logging.level == "INFO"


def test_orthostatic_thresholds_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ORTHOSTATIC_SYSTOLIC_DROP", "15")
    monkeypatch.setenv("ORTHOSTATIC_DIASTOLIC_DROP", "7")
    monkeypatch.setenv("ORTHOSTATIC_LOOKBACK_MINUTES", "30")

    criteria = load_config_from_env().analysis.criteria()

    assert criteria == OrthostaticCriteria(systolic_drop=15, diastolic_drop=7, lookback_minutes=30)


def test_storage_path_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BP_DATA_FILE", "/tmp/readings.json")
    assert load_config_from_env().storage.data_file == "/tmp/readings.json"


@pytest.mark.parametrize("window", ["7", "30", "ALL"])
def test_valid_default_time_window(window: str) -> None:
    assert AnalysisConfig(default_time_window=window).default_time_window == window.lower()


@pytest.mark.parametrize("window", ["0", "week", "-1"])
def test_invalid_default_time_window(window: str) -> None:
    with pytest.raises(ValueError, match="time window"):
        AnalysisConfig(default_time_window=window)


def test_non_positive_threshold_is_rejected() -> None:
    with pytest.raises(ValueError):
        AnalysisConfig(orthostatic_systolic_drop=0)


def test_get_config_cache(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "development")

    # First call populates cache
    c1 = get_config()
    c2 = get_config()
    assert c1 is c2  # same object due to lru_cache


def test_app_config_debug_only_in_dev_validation() -> None:
    with pytest.raises(ValueError, match="debug mode is only allowed"):
        AppConfig(
            environment="production",
            debug=True,
            analysis=AnalysisConfig(),
            storage=StorageConfig(),
            logging=LoggingConfig(),
        )
