"""Tests for coordinate sources and the permission gate."""

import asyncio
import unittest
from unittest.mock import AsyncMock
import sys
from pathlib import Path

# Add src to path so we can import gatealert
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from gatealert.location import PermissionGate, ReplayCoordinateSource, always_granted
from gatealert.models import GeoPoint, LocationOptions, PermissionStatus

POINTS = [GeoPoint(6.880, 79.880), GeoPoint(6.881, 79.881), GeoPoint(6.882, 79.882)]
NO_CACHE = LocationOptions(maximum_age_sec=0)


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class TestReplayCoordinateSource(unittest.IsolatedAsyncioTestCase):
    """Test scripted position replay."""

    async def test_replays_in_order(self):
        source = ReplayCoordinateSource(POINTS)
        results = [await source.get_current_position(NO_CACHE) for _ in POINTS]
        self.assertEqual([r.point for r in results], POINTS)
        self.assertTrue(all(r.ok for r in results))
        self.assertEqual(source.remaining, 0)

    async def test_holds_last_point_when_exhausted(self):
        source = ReplayCoordinateSource(POINTS[:1])
        await source.get_current_position(NO_CACHE)
        result = await source.get_current_position(NO_CACHE)
        self.assertEqual(result.point, POINTS[0])

    async def test_empty_script_fails(self):
        source = ReplayCoordinateSource([])
        result = await source.get_current_position(NO_CACHE)
        self.assertFalse(result.ok)
        self.assertIsNotNone(result.error)

    async def test_cached_fix_within_max_age(self):
        """A fix younger than maximum_age is reused."""
        clock = FakeClock()
        source = ReplayCoordinateSource(POINTS, clock=clock)
        options = LocationOptions(maximum_age_sec=10.0)

        first = await source.get_current_position(options)
        clock.now = 9.0
        cached = await source.get_current_position(options)
        clock.now = 20.0
        fresh = await source.get_current_position(options)

        self.assertEqual(first.point, POINTS[0])
        self.assertEqual(cached.point, POINTS[0])
        self.assertEqual(fresh.point, POINTS[1])

    async def test_clear_cache(self):
        clock = FakeClock()
        source = ReplayCoordinateSource(POINTS, clock=clock)
        options = LocationOptions(maximum_age_sec=10.0)

        await source.get_current_position(options)
        source.clear_cache()
        result = await source.get_current_position(options)
        self.assertEqual(result.point, POINTS[1])

    async def test_latency(self):
        source = ReplayCoordinateSource(POINTS, latency_sec=0.05)
        with self.assertRaises(asyncio.TimeoutError):
            await asyncio.wait_for(source.get_current_position(NO_CACHE), timeout=0.01)


class TestPermissionGate(unittest.IsolatedAsyncioTestCase):
    """Test platform-specific permission handling."""

    async def test_android_granted(self):
        gate = PermissionGate("android", always_granted())
        self.assertTrue(await gate.is_granted())

    async def test_android_denied(self):
        requester = AsyncMock(return_value=PermissionStatus.DENIED)
        gate = PermissionGate("android", requester)
        self.assertFalse(await gate.is_granted())
        requester.assert_awaited_once()

    async def test_android_never_ask_again(self):
        gate = PermissionGate("android", AsyncMock(return_value=PermissionStatus.NEVER_ASK_AGAIN))
        self.assertFalse(await gate.is_granted())

    async def test_requester_is_asked_every_time(self):
        requester = AsyncMock(return_value=PermissionStatus.GRANTED)
        gate = PermissionGate("Android", requester)
        for _ in range(3):
            await gate.is_granted()
        self.assertEqual(requester.await_count, 3)

    async def test_other_platform_denied(self):
        """Unsupported platforms are denied without calling the requester."""
        requester = AsyncMock(return_value=PermissionStatus.GRANTED)
        gate = PermissionGate("ios", requester)
        with self.assertLogs("gatealert.location", level="WARNING"):
            self.assertFalse(await gate.is_granted())
        self.assertFalse(await gate.is_granted())
        requester.assert_not_awaited()

    async def test_missing_requester_denied(self):
        gate = PermissionGate("android")
        self.assertEqual(await gate.request(), PermissionStatus.DENIED)


if __name__ == "__main__":
    unittest.main()
