"""Proximity alert state machine for the railway gate."""

import logging
import math
from typing import Optional

from .config import GateAlertConfig
from .models import Alert, AlertLevel

logger = logging.getLogger(__name__)

SLOWING_MESSAGE = "Train is coming slow down!\n\n 50 more meters to the railway gate."
CLOSING_MESSAGE = (
    "Train is getting close!\n\n 25 more meters to the railway gate.\n\n"
    " Sending signal to the automatic braking system...."
)
STOPPED_MESSAGE = "Vehicle stopped!"

MESSAGES = {
    AlertLevel.SLOWING: SLOWING_MESSAGE,
    AlertLevel.CLOSING: CLOSING_MESSAGE,
    AlertLevel.STOPPED: STOPPED_MESSAGE,
}


def classify_distance(distance_m: int, config: Optional[GateAlertConfig] = None) -> Optional[AlertLevel]:
    """
    Map a distance to the gate onto its alert band.

    Bands are half-open: (close, slow] is SLOWING, (stop, close] is CLOSING
    and [0, stop) is STOPPED. A distance equal to ``stop_zone_m`` or beyond
    ``slow_zone_m`` falls in no band.

    Args:
        distance_m: Non-negative distance in metres.
        config: Band edges; defaults to GateAlertConfig().

    Returns:
        The matching AlertLevel, or None.

    Raises:
        ValueError: If distance_m is negative or not finite.
    """
    config = config or GateAlertConfig()
    if not math.isfinite(distance_m) or distance_m < 0:
        raise ValueError(f"Distance must be a finite non-negative number, got {distance_m!r}")

    if config.close_zone_m < distance_m <= config.slow_zone_m:
        return AlertLevel.SLOWING
    if config.stop_zone_m < distance_m <= config.close_zone_m:
        return AlertLevel.CLOSING
    if distance_m < config.stop_zone_m:
        return AlertLevel.STOPPED
    return None


class ProximityAlertMachine:
    """
    Turns distance samples into staged alerts and a permanent stop latch.

    Every sample re-evaluates the bands, so re-entering a band fires its
    alert again. Once STOPPED has fired the machine is latched for the rest
    of the session and ignores further samples.
    """

    def __init__(self, config: Optional[GateAlertConfig] = None):
        self.config = config or GateAlertConfig()
        self._stopped = False

    @property
    def stopped(self) -> bool:
        return self._stopped

    def evaluate(self, distance_m: int) -> Optional[Alert]:
        """
        Process one distance sample.

        Args:
            distance_m: Distance from the user to the gate in whole metres.

        Returns:
            The Alert to display, or None when nothing should be shown.
        """
        if self._stopped:
            return None

        level = classify_distance(distance_m, self.config)
        if level is None:
            return None

        if level is AlertLevel.STOPPED:
            self._stopped = True
            logger.warning(f"Stop latch engaged at {distance_m} m from the gate")
        else:
            logger.info(f"{level.value} alert at {distance_m} m from the gate")

        return Alert(level=level, message=MESSAGES[level], distance_m=distance_m)
