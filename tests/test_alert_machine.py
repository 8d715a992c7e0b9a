"""Tests for the proximity alert state machine."""

import unittest
import sys
from pathlib import Path

# Add src to path so we can import gatealert
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from gatealert.alert_machine import (
    ProximityAlertMachine,
    classify_distance,
    SLOWING_MESSAGE,
    CLOSING_MESSAGE,
    STOPPED_MESSAGE,
)
from gatealert.config import GateAlertConfig
from gatealert.models import AlertLevel


class TestClassifyDistance(unittest.TestCase):
    """Test the band lookup without the latch."""

    def test_slowing_band(self):
        """Distances in (35, 50] are SLOWING."""
        for distance in (36, 40, 50):
            self.assertEqual(classify_distance(distance), AlertLevel.SLOWING)

    def test_closing_band(self):
        """Distances in (20, 35] are CLOSING."""
        for distance in (21, 30, 35):
            self.assertEqual(classify_distance(distance), AlertLevel.CLOSING)

    def test_stopped_band(self):
        """Distances below 20 are STOPPED."""
        for distance in (0, 10, 19):
            self.assertEqual(classify_distance(distance), AlertLevel.STOPPED)

    def test_no_band(self):
        """Far distances and exactly 20 m raise nothing."""
        for distance in (20, 51, 100, 5000):
            self.assertIsNone(classify_distance(distance))

    def test_custom_bands(self):
        """Band edges come from the config."""
        config = GateAlertConfig(slow_zone_m=100, close_zone_m=60, stop_zone_m=30)
        self.assertEqual(classify_distance(80, config), AlertLevel.SLOWING)
        self.assertEqual(classify_distance(45, config), AlertLevel.CLOSING)
        self.assertEqual(classify_distance(29, config), AlertLevel.STOPPED)
        self.assertIsNone(classify_distance(30, config))

    def test_rejects_out_of_contract_input(self):
        """Negative and non-finite distances are rejected."""
        for distance in (-1, float("nan"), float("inf")):
            with self.assertRaises(ValueError):
                classify_distance(distance)


class TestProximityAlertMachine(unittest.TestCase):
    """Test alert emission and the stop latch."""

    def setUp(self):
        self.machine = ProximityAlertMachine()

    def test_initial_state(self):
        self.assertFalse(self.machine.stopped)

    def test_far_distance_is_silent(self):
        """No alert and no latch beyond 50 m."""
        self.assertIsNone(self.machine.evaluate(60))
        self.assertFalse(self.machine.stopped)

    def test_boundary_at_stop_zone_is_silent(self):
        """Exactly 20 m matches no band."""
        self.assertIsNone(self.machine.evaluate(20))
        self.assertFalse(self.machine.stopped)

    def test_slowing_alert(self):
        """40 m raises the slowing alert without latching."""
        alert = self.machine.evaluate(40)
        self.assertEqual(alert.level, AlertLevel.SLOWING)
        self.assertEqual(alert.message, SLOWING_MESSAGE)
        self.assertEqual(alert.distance_m, 40)
        self.assertFalse(self.machine.stopped)

    def test_closing_alert(self):
        """30 m raises the closing alert without latching."""
        alert = self.machine.evaluate(30)
        self.assertEqual(alert.level, AlertLevel.CLOSING)
        self.assertEqual(alert.message, CLOSING_MESSAGE)
        self.assertFalse(self.machine.stopped)

    def test_stop_latches(self):
        """10 m raises the stopped alert and latches."""
        alert = self.machine.evaluate(10)
        self.assertEqual(alert.level, AlertLevel.STOPPED)
        self.assertEqual(alert.message, STOPPED_MESSAGE)
        self.assertTrue(self.machine.stopped)

    def test_latch_is_permanent(self):
        """After stopping, every later sample is ignored."""
        self.machine.evaluate(5)
        for distance in (5, 30, 40, 1000, 10):
            self.assertIsNone(self.machine.evaluate(distance))
            self.assertTrue(self.machine.stopped)

    def test_band_reentry_fires_again(self):
        """Leaving and re-entering a band repeats its alert."""
        self.assertEqual(self.machine.evaluate(45).level, AlertLevel.SLOWING)
        self.assertIsNone(self.machine.evaluate(70))
        self.assertEqual(self.machine.evaluate(45).level, AlertLevel.SLOWING)
        self.assertEqual(self.machine.evaluate(45).level, AlertLevel.SLOWING)

    def test_approach_sequence(self):
        """A steady approach escalates through every band once per sample."""
        levels = [self.machine.evaluate(d) for d in (80, 48, 33, 22, 12, 3)]
        self.assertEqual(
            [alert.level if alert else None for alert in levels],
            [None, AlertLevel.SLOWING, AlertLevel.CLOSING, AlertLevel.CLOSING, AlertLevel.STOPPED, None],
        )

    def test_messages(self):
        """Messages carry the remaining distance and braking notice."""
        self.assertIn("50 more meters", SLOWING_MESSAGE)
        self.assertIn("25 more meters", CLOSING_MESSAGE)
        self.assertIn("automatic braking", CLOSING_MESSAGE)
        self.assertEqual(STOPPED_MESSAGE, "Vehicle stopped!")


if __name__ == "__main__":
    unittest.main()
