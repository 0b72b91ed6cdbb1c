"""Tunable defaults for pass scanning and periodic refresh."""

from dataclasses import dataclass
from datetime import timedelta

DEFAULT_RISE_ELEVATION_DEG = 10.0
DEFAULT_MIN_DURATION_S = 30.0
DEFAULT_STEP_S = 30.0
DEFAULT_HORIZON_DAYS = 5.0


@dataclass(frozen=True)
class ScanConfig:
    rise_elevation_deg: float = DEFAULT_RISE_ELEVATION_DEG
    min_duration_s: float = DEFAULT_MIN_DURATION_S
    step_s: float = DEFAULT_STEP_S
    horizon_days: float = DEFAULT_HORIZON_DAYS
    dark_sky_sun_altitude_deg: float = -6.0
    max_consecutive_failures: int = 3
    chunk_size: int = 240

    def __post_init__(self):
        if self.step_s <= 0:
            raise ValueError("step_s must be positive")
        if self.horizon_days <= 0:
            raise ValueError("horizon_days must be positive")
        if self.chunk_size < 1:
            raise ValueError("chunk_size must be at least 1")
        if self.max_consecutive_failures < 0:
            raise ValueError("max_consecutive_failures cannot be negative")

    @property
    def step(self) -> timedelta:
        return timedelta(seconds=self.step_s)

    @property
    def horizon(self) -> timedelta:
        return timedelta(days=self.horizon_days)

    @property
    def sample_count(self) -> int:
        """Number of samples in one scan window."""
        return int(self.horizon.total_seconds() // self.step_s)


@dataclass(frozen=True)
class PollingConfig:
    position_interval_s: float = 5.0
    live_check_interval_s: float = 5.0
    weather_interval_s: float = 1800.0
    scan_retry_s: float = 10.0
