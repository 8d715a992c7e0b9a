"""Data models for the railway gate alert system."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

# Viewport deltas used for every tracked entity
LATITUDE_DELTA = 0.0009
LONGITUDE_DELTA = 0.0005


@dataclass(frozen=True)
class GeoPoint:
    """Immutable geographic coordinate in decimal degrees."""
    latitude: float
    longitude: float


@dataclass(frozen=True)
class MapRegion:
    """A map viewport centred on a coordinate."""
    latitude: float
    longitude: float
    latitude_delta: float = LATITUDE_DELTA
    longitude_delta: float = LONGITUDE_DELTA

    @property
    def point(self) -> GeoPoint:
        return GeoPoint(self.latitude, self.longitude)

    @classmethod
    def around(
        cls,
        point: GeoPoint,
        latitude_delta: float = LATITUDE_DELTA,
        longitude_delta: float = LONGITUDE_DELTA,
    ) -> "MapRegion":
        """Build a region centred on ``point``."""
        return cls(point.latitude, point.longitude, latitude_delta, longitude_delta)


@dataclass(frozen=True)
class Marker:
    """A labeled pin on the map."""
    coordinate: GeoPoint
    title: Optional[str] = None
    pin_color: Optional[str] = None


class AlertLevel(Enum):
    SLOWING = "slowing"
    CLOSING = "closing"
    STOPPED = "stopped"


@dataclass
class Alert:
    """A user-facing proximity alert."""
    level: AlertLevel
    message: str
    distance_m: int


class PermissionStatus(Enum):
    GRANTED = "granted"
    DENIED = "denied"
    NEVER_ASK_AGAIN = "never_ask_again"


@dataclass(frozen=True)
class LocationOptions:
    """Options for a single-shot location request."""
    high_accuracy: bool = True
    timeout_sec: float = 15.0
    maximum_age_sec: float = 10.0


@dataclass
class PositionResult:
    """Outcome of a location request: either a point or an error message."""
    point: Optional[GeoPoint] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.point is not None and self.error is None

    @classmethod
    def success(cls, point: GeoPoint) -> "PositionResult":
        return cls(point=point)

    @classmethod
    def failure(cls, message: str) -> "PositionResult":
        return cls(error=message)
