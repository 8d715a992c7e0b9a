"""Map presentation and alert display surfaces."""

import logging
import sys
from abc import ABC, abstractmethod
from typing import List, Optional, TextIO

from .models import Alert, AlertLevel, MapRegion, Marker

logger = logging.getLogger(__name__)


class MapPresenter(ABC):
    """Renders the scene: a viewport and a set of markers."""

    @abstractmethod
    def show_scene(self, region: MapRegion, markers: List[Marker]) -> None:
        """Draw the markers with the viewport at ``region``."""

    @abstractmethod
    def animate_to_region(self, region: MapRegion, duration_ms: int) -> None:
        """Move the viewport to ``region`` over ``duration_ms``."""


class LoggingMapPresenter(MapPresenter):
    """Presenter that records the scene through the logging module."""

    def __init__(self):
        self.region: Optional[MapRegion] = None
        self.markers: List[Marker] = []

    def show_scene(self, region: MapRegion, markers: List[Marker]) -> None:
        self.region = region
        self.markers = list(markers)
        for marker in markers:
            label = marker.title or marker.pin_color or "marker"
            logger.debug(
                f"Marker {label}: {marker.coordinate.latitude:.6f}, {marker.coordinate.longitude:.6f}"
            )

    def animate_to_region(self, region: MapRegion, duration_ms: int) -> None:
        self.region = region
        logger.debug(
            f"Animating to {region.latitude:.6f}, {region.longitude:.6f} over {duration_ms} ms"
        )


class AlertSurface(ABC):
    """Displays a user-acknowledged alert message."""

    @abstractmethod
    def show(self, alert: Alert) -> None:
        """Present ``alert`` to the user."""


class ConsoleAlertSurface(AlertSurface):
    """Prints alerts as framed blocks on a text stream."""

    WIDTH = 60

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stdout

    def show(self, alert: Alert) -> None:
        icon = "!!" if alert.level is AlertLevel.STOPPED else "!"
        print("=" * self.WIDTH, file=self.stream)
        print(f"{icon} {alert.level.value.upper()} ({alert.distance_m} m to gate)", file=self.stream)
        print("-" * self.WIDTH, file=self.stream)
        for line in alert.message.split("\n"):
            print(line.strip(), file=self.stream)
        print("=" * self.WIDTH, file=self.stream)
        self.stream.flush()
