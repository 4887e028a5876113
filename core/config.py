"""
Configuration management with environment variable support and validation.

Design principles:
- Environment-specific configs (dev, staging, prod)
- Validation at startup (fail fast)
- Type safety with Pydantic
"""

import os
from functools import lru_cache
from typing import Literal, cast

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator, model_validator

from core.domain.models import OrthostaticCriteria

# Load environment variables from .env file
load_dotenv()


class AnalysisConfig(BaseModel):
    """Clinical thresholds and chart defaults."""

    orthostatic_systolic_drop: int = Field(
        default=20, gt=0, description="Systolic drop (mmHg) flagging orthostatic hypotension"
    )
    orthostatic_diastolic_drop: int = Field(
        default=10, gt=0, description="Diastolic drop (mmHg) flagging orthostatic hypotension"
    )
    orthostatic_lookback_minutes: int = Field(
        default=120, gt=0, description="Max minutes between the lying and standing readings"
    )
    default_time_window: str = Field(
        default="7", description="Chart window in days, or 'all'"
    )

    @field_validator("default_time_window")
    def validate_time_window(cls, v: str) -> str:
        v = v.strip().lower()
        if v != "all" and not (v.isdigit() and int(v) > 0):
            raise ValueError("default time window must be a positive day count or 'all'")
        return v

    def criteria(self) -> OrthostaticCriteria:
        return OrthostaticCriteria(
            systolic_drop=self.orthostatic_systolic_drop,
            diastolic_drop=self.orthostatic_diastolic_drop,
            lookback_minutes=self.orthostatic_lookback_minutes,
        )


class StorageConfig(BaseModel):
    """Where the reading history is kept."""

    data_file: str = Field(default="./bp_data.json", description="Path to the JSON history file")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    format: Literal["json", "console"] = Field(default="json", description="Logging format")


class AppConfig(BaseModel):
    """Main application configuration combining all subsystems."""

    # Environment
    environment: Literal["development", "staging", "production"] = Field(
        default="development", description="Environment"
    )
    debug: bool = Field(default=False, description="Enable debug mode")

    # Component configs
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def debug_only_in_dev(self) -> "AppConfig":
        """Ensure debug mode is only allowed in development environment."""
        if self.debug and self.environment != "development":
            raise ValueError("debug mode is only allowed in development environment")
        return self


def load_config_from_env() -> AppConfig:
    """Load configuration from environment variables with validation."""

    def _env_to_literal(val: str) -> Literal["development", "staging", "production"]:
        v = val.strip().lower()
        if v in {"dev", "development"}:
            return "development"
        if v in {"stage", "staging"}:
            return "staging"
        return "production"

    def _level_to_literal(val: str) -> Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
        v = val.strip().upper()
        return cast(
            Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
            v if v in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"} else "INFO",
        )

    # Detect environment
    environment = _env_to_literal(os.getenv("ENVIRONMENT", "development"))
    debug = environment == "development"

    analysis_config = AnalysisConfig(
        orthostatic_systolic_drop=int(os.getenv("ORTHOSTATIC_SYSTOLIC_DROP", "20")),
        orthostatic_diastolic_drop=int(os.getenv("ORTHOSTATIC_DIASTOLIC_DROP", "10")),
        orthostatic_lookback_minutes=int(os.getenv("ORTHOSTATIC_LOOKBACK_MINUTES", "120")),
        default_time_window=os.getenv("DEFAULT_TIME_WINDOW", "7"),
    )

    storage_config = StorageConfig(
        data_file=os.getenv("BP_DATA_FILE", "./bp_data.json"),
    )

    logging_config = LoggingConfig(
        level=_level_to_literal(os.getenv("LOG_LEVEL", "INFO")),
        format="console" if debug else "json",
    )

    return AppConfig(
        environment=environment,
        debug=debug,
        analysis=analysis_config,
        storage=storage_config,
        logging=logging_config,
    )


@lru_cache
def get_config() -> AppConfig:
    """Get cached application configuration."""
    return load_config_from_env()


def validate_config() -> None:
    """Validate configuration at startup."""
    try:
        config = get_config()
        print(f"✅ Configuration loaded for {config.environment} environment")
    except Exception as e:
        print(f"❌ Configuration validation failed: {e}")
        raise


# Development helpers
def print_config_summary() -> None:
    """Print configuration summary for debugging."""
    config = get_config()

    print("\n🔧 CONFIGURATION SUMMARY")
    print(f"Environment: {config.environment}")
    print(f"Debug Mode: {config.debug}")
    print(f"Log Level: {config.logging.level}")

    print("\n🩺 ANALYSIS CONFIGURATION")
    print(f"Orthostatic Systolic Drop: {config.analysis.orthostatic_systolic_drop} mmHg")
    print(f"Orthostatic Diastolic Drop: {config.analysis.orthostatic_diastolic_drop} mmHg")
    print(f"Lying/Standing Lookback: {config.analysis.orthostatic_lookback_minutes}m")
    print(f"Default Time Window: {config.analysis.default_time_window}")

    print("\n💾 STORAGE CONFIGURATION")
    print(f"Data File: {config.storage.data_file}")


if __name__ == "__main__":
    # Test configuration loading
    validate_config()
    print_config_summary()
