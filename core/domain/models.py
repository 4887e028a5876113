"""
Domain models for home blood-pressure monitoring.

These models represent the core business concepts and are framework-agnostic.
They use Pydantic for validation at the boundary so the services can assume
well-formed readings.
"""

from datetime import datetime, timedelta
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator
from pydantic.alias_generators import to_camel


class Posture(str, Enum):
    """Body posture at the time of measurement."""

    LYING = "lying"
    SITTING = "sitting"
    STANDING = "standing"
    UNSPECIFIED = "unspecified"


class SeverityLevel(str, Enum):
    """Clinical severity bands, declared from least to most severe blood pressure."""

    LOW = "low"
    NORMAL = "normal"
    ELEVATED = "elevated"
    STAGE1 = "stage1"
    STAGE2 = "stage2"
    CRISIS = "crisis"

    @property
    def rank(self) -> int:
        return list(SeverityLevel).index(self)


class DayPart(str, Enum):
    """Fixed local time-of-day ranges used for averaging."""

    MORNING = "morning"  # 05:00-11:59
    AFTERNOON = "afternoon"  # 12:00-17:59
    EVENING = "evening"  # 18:00-23:59
    NIGHT = "night"  # 00:00-04:59

    @classmethod
    def for_hour(cls, hour: int) -> "DayPart":
        if 5 <= hour < 12:
            return cls.MORNING
        if 12 <= hour < 18:
            return cls.AFTERNOON
        if 18 <= hour < 24:
            return cls.EVENING
        return cls.NIGHT


def _as_aware(value: datetime) -> datetime:
    # Naive timestamps come from local-time inputs
    return value.astimezone() if value.tzinfo is None else value


class _BoundaryModel(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class Medication(_BoundaryModel):
    """A medication dose taken around the time of a reading."""

    name: str = Field(min_length=1)
    dose: str = ""
    administered_at: datetime | None = None

    @field_validator("administered_at", mode="before")
    @classmethod
    def blank_time_is_absent(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("administered_at")
    @classmethod
    def make_aware(cls, v: datetime | None) -> datetime | None:
        return None if v is None else _as_aware(v)


class Reading(_BoundaryModel):
    """A single home blood-pressure measurement as entered or imported."""

    timestamp: datetime
    systolic: PositiveInt
    diastolic: PositiveInt
    heart_rate: PositiveInt | None = None
    posture: Posture = Posture.UNSPECIFIED
    symptoms: tuple[str, ...] = ()
    medications: tuple[Medication, ...] = ()
    note: str = ""

    @field_validator("timestamp")
    @classmethod
    def make_aware(cls, v: datetime) -> datetime:
        return _as_aware(v)

    @field_validator("heart_rate", mode="before")
    @classmethod
    def blank_heart_rate_is_absent(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("posture", mode="before")
    @classmethod
    def blank_posture_is_unspecified(cls, v: Any) -> Any:
        if v is None:
            return Posture.UNSPECIFIED
        if isinstance(v, str):
            return v.strip().lower() or Posture.UNSPECIFIED
        return v

    @field_validator("symptoms")
    @classmethod
    def dedupe_symptoms(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        tags = (tag.strip() for tag in v)
        return tuple(dict.fromkeys(tag for tag in tags if tag))

    @field_validator("note", mode="before")
    @classmethod
    def missing_note_is_empty(cls, v: Any) -> Any:
        return "" if v is None else v


class EnrichedReading(Reading):
    """Reading plus the values derived once, at insertion time."""

    id: str = Field(min_length=1)
    pulse_pressure: int
    mean_arterial_pressure: int
    severity_level: SeverityLevel
    orthostatic_flag: bool = False

    def base_reading(self) -> Reading:
        """Strip the derived fields, returning the reading as it was entered."""
        return Reading.model_validate(self.model_dump(include=set(Reading.model_fields)))


class OrthostaticCriteria(BaseModel):
    """Thresholds for orthostatic (postural) hypotension."""

    model_config = ConfigDict(frozen=True)

    systolic_drop: int = Field(default=20, gt=0, description="Minimum systolic drop, mmHg")
    diastolic_drop: int = Field(default=10, gt=0, description="Minimum diastolic drop, mmHg")
    lookback_minutes: int = Field(
        default=120, gt=0, description="Maximum lying-to-standing interval"
    )

    @property
    def lookback(self) -> timedelta:
        return timedelta(minutes=self.lookback_minutes)


DEFAULT_CRITERIA = OrthostaticCriteria()


class PosturalDrop(BaseModel):
    """Pressure change between a lying and a standing reading."""

    model_config = ConfigDict(frozen=True)

    systolic_drop: int
    diastolic_drop: int
    orthostatic: bool


class PosturalPair(BaseModel):
    """Adjacent lying -> standing readings for the postural contrast view."""

    model_config = ConfigDict(frozen=True)

    lying: EnrichedReading
    standing: EnrichedReading
    drop: PosturalDrop


class DayPartAverage(BaseModel):
    """Mean pressures for one day-part bucket."""

    model_config = ConfigDict(frozen=True)

    day_part: DayPart
    count: int = Field(ge=0)
    systolic_avg: float = Field(ge=0.0)
    diastolic_avg: float = Field(ge=0.0)
