"""gatealert - Railway gate proximity alerts for a tracked user and train."""

__version__ = "0.1.0"

from .models import GeoPoint, MapRegion, Marker, Alert, AlertLevel, PositionResult
from .config import GateAlertConfig
from .geo_utils import precise_distance
from .alert_machine import ProximityAlertMachine
from .route_loader import TrainRoute, TrainRouteLoader
from .location import CoordinateSource, ReplayCoordinateSource, PermissionGate
from .coordinator import SceneCoordinator, SessionState

__all__ = [
    "SceneCoordinator",
    "SessionState",
    "ProximityAlertMachine",
    "TrainRoute",
    "TrainRouteLoader",
    "CoordinateSource",
    "ReplayCoordinateSource",
    "PermissionGate",
    "GateAlertConfig",
    "precise_distance",
    "GeoPoint",
    "MapRegion",
    "Marker",
    "Alert",
    "AlertLevel",
    "PositionResult",
]
