from datetime import datetime, timedelta, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from dashboard.core.exceptions import InvalidWindowError


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class Sample(BaseModel):
    """One connectivity probe as returned by the history backend."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    timestamp: datetime
    is_online: bool
    latency_ms: float = 0.0

    @field_validator("timestamp")
    @classmethod
    def _normalize_timestamp(cls, value: datetime) -> datetime:
        return _as_utc(value)


class ViewWindow(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime

    @model_validator(mode="after")
    def _check_order(self) -> "ViewWindow":
        if self.end <= self.start:
            raise ValueError("window end must be after window start")
        return self

    @property
    def hours(self) -> float:
        return (self.end - self.start).total_seconds() / 3600.0


class SampleSet(BaseModel):
    """Probe history fetched for one window, in the order it was received."""

    model_config = ConfigDict(frozen=True)

    window: ViewWindow
    samples: tuple[Sample, ...] = ()

    @property
    def latest(self) -> Sample | None:
        return self.samples[-1] if self.samples else None


class OutageInterval(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime
    is_open: bool = False  # still in progress at the evaluation instant

    @property
    def duration(self) -> timedelta:
        return self.end - self.start


class SummaryStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    outage_count: int = 0
    total_outage_duration: timedelta = timedelta(0)
    average_outage_duration: timedelta = timedelta(0)
    average_latency: float = 0.0


class CurrentStatus(BaseModel):
    state: Literal["online", "offline", "unknown"]
    latency_ms: float | None = None
    observed_at: datetime | None = None


class WindowSelection(BaseModel):
    """User-selected window: a preset length in hours, or a custom hours+minutes span."""

    preset_hours: float | None = Field(default=None, gt=0)
    hours: int = Field(default=0, ge=0)
    minutes: int = Field(default=0, ge=0)

    @property
    def is_custom(self) -> bool:
        return self.preset_hours is None

    def duration(self) -> timedelta:
        if self.preset_hours is not None:
            return timedelta(hours=self.preset_hours)
        return timedelta(hours=self.hours, minutes=self.minutes)

    def validate_length(self) -> None:
        if self.duration() <= timedelta(0):
            raise InvalidWindowError(details={"hours": self.hours, "minutes": self.minutes})

    def resolve(self, now: datetime) -> ViewWindow:
        """Window of the selected length ending at ``now``."""
        self.validate_length()
        return ViewWindow(start=now - self.duration(), end=now)


class RefreshPolicy(BaseModel):
    model_config = ConfigDict(frozen=True)

    interval_seconds: int | Literal["off"] = "off"

    @field_validator("interval_seconds")
    @classmethod
    def _positive_interval(cls, value: int | str) -> int | str:
        if value != "off" and value < 1:
            raise ValueError("interval_seconds must be a positive integer or 'off'")
        return value

    @property
    def is_off(self) -> bool:
        return self.interval_seconds == "off"

    @classmethod
    def parse(cls, raw: str) -> "RefreshPolicy":
        """Build a policy from a setting value such as ``"off"`` or ``"30"``."""
        raw = raw.strip().lower()
        if raw in ("", "off"):
            return cls()
        return cls(interval_seconds=int(raw))
