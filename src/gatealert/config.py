"""Configuration for the railway gate alert system."""

import os
from dataclasses import dataclass, field
from typing import Optional

from .models import GeoPoint, LocationOptions, LATITUDE_DELTA, LONGITUDE_DELTA

# Default positions for the demo crossing
DEFAULT_USER_LOCATION = GeoPoint(6.8649, 79.8997)
DEFAULT_TRAIN_LOCATION = GeoPoint(6.8857354543513045, 79.88082094080386)
DEFAULT_GATE_LOCATION = GeoPoint(6.88250166633171, 79.88297447562218)
FALLBACK_TRAIN_LOCATION = GeoPoint(6.8817813289909004, 79.88294412296925)


@dataclass
class GateAlertConfig:
    # Scheduling
    refresh_interval_sec: float = 3.0

    # Alert bands (metres to the gate)
    slow_zone_m: int = 50
    close_zone_m: int = 35
    stop_zone_m: int = 20

    # Location requests
    high_accuracy: bool = True
    location_timeout_sec: float = 15.0
    location_max_age_sec: float = 10.0

    # Map presentation
    animate_duration_ms: int = 3000
    latitude_delta: float = LATITUDE_DELTA
    longitude_delta: float = LONGITUDE_DELTA

    # Platform used for the permission request ("android" is the only supported one)
    platform: str = "android"

    # Initial positions
    user_location: GeoPoint = field(default_factory=lambda: DEFAULT_USER_LOCATION)
    train_location: GeoPoint = field(default_factory=lambda: DEFAULT_TRAIN_LOCATION)
    gate_location: GeoPoint = field(default_factory=lambda: DEFAULT_GATE_LOCATION)
    fallback_train_location: GeoPoint = field(default_factory=lambda: FALLBACK_TRAIN_LOCATION)

    # Train route asset (JSON, CSV or GTFS-RT feed file)
    route_path: Optional[str] = None

    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if not self.slow_zone_m > self.close_zone_m > self.stop_zone_m >= 0:
            raise ValueError(
                "Alert bands must satisfy slow_zone_m > close_zone_m > stop_zone_m >= 0, "
                f"got {self.slow_zone_m}/{self.close_zone_m}/{self.stop_zone_m}"
            )
        if self.refresh_interval_sec <= 0:
            raise ValueError(f"refresh_interval_sec must be positive, got {self.refresh_interval_sec}")

    def location_options(self) -> LocationOptions:
        return LocationOptions(
            high_accuracy=self.high_accuracy,
            timeout_sec=self.location_timeout_sec,
            maximum_age_sec=self.location_max_age_sec,
        )

    @classmethod
    def from_env(cls, **overrides) -> "GateAlertConfig":
        """
        Build a config from GATEALERT_* environment variables.

        Keyword arguments take precedence over the environment.
        """
        values = {}
        interval = os.getenv("GATEALERT_REFRESH_INTERVAL_SEC")
        if interval:
            values["refresh_interval_sec"] = float(interval)
        platform = os.getenv("GATEALERT_PLATFORM")
        if platform:
            values["platform"] = platform.lower()
        route_path = os.getenv("GATEALERT_ROUTE_PATH")
        if route_path:
            values["route_path"] = route_path
        log_level = os.getenv("GATEALERT_LOG_LEVEL")
        if log_level:
            values["log_level"] = log_level.upper()
        values.update(overrides)
        return cls(**values)
