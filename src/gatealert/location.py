"""Device location access: coordinate sources and the permission gate."""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Iterable, Optional, Tuple

from .models import GeoPoint, LocationOptions, PermissionStatus, PositionResult

logger = logging.getLogger(__name__)

PermissionRequester = Callable[[], Awaitable[PermissionStatus]]


class CoordinateSource(ABC):
    """
    Supplies the user's current position on demand.

    Subclasses implement ``_acquire``. The base class honours
    ``LocationOptions.maximum_age_sec`` by reusing the last fix while it is
    young enough.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._last_fix: Optional[Tuple[GeoPoint, float]] = None

    async def get_current_position(self, options: Optional[LocationOptions] = None) -> PositionResult:
        """
        Request a single position fix.

        Args:
            options: Accuracy, timeout and cache-age settings.

        Returns:
            PositionResult with either a point or an error message.
        """
        options = options or LocationOptions()
        now = self._clock()

        if self._last_fix is not None and options.maximum_age_sec > 0:
            point, fixed_at = self._last_fix
            if now - fixed_at <= options.maximum_age_sec:
                logger.debug(f"Using cached fix from {now - fixed_at:.1f}s ago")
                return PositionResult.success(point)

        result = await self._acquire(options)
        if result.ok:
            self._last_fix = (result.point, self._clock())
        return result

    def clear_cache(self) -> None:
        """Forget the last fix."""
        self._last_fix = None

    @abstractmethod
    async def _acquire(self, options: LocationOptions) -> PositionResult:
        """Obtain a fresh fix from the underlying provider."""


class ReplayCoordinateSource(CoordinateSource):
    """
    Replays a scripted list of positions, one per request.

    Once the script is exhausted the last position is repeated. An empty
    script reports a failure on every request.

    Args:
        points: Positions to replay in order.
        latency_sec: Simulated acquisition delay.
    """

    def __init__(
        self,
        points: Iterable[GeoPoint],
        latency_sec: float = 0.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__(clock=clock)
        self._points = list(points)
        self._index = 0
        self.latency_sec = latency_sec

    @property
    def remaining(self) -> int:
        return max(0, len(self._points) - self._index)

    async def _acquire(self, options: LocationOptions) -> PositionResult:
        if self.latency_sec:
            await asyncio.sleep(self.latency_sec)

        if not self._points:
            return PositionResult.failure("No location provider available.")

        point = self._points[min(self._index, len(self._points) - 1)]
        self._index += 1
        return PositionResult.success(point)


class PermissionGate:
    """
    Platform-specific location permission check.

    Only Android is supported: the requester is awaited on every check, the
    same way the runtime permission dialog is re-queried. Other platforms,
    or a gate without a requester, are always denied.

    Args:
        platform: Platform name, e.g. "android" or "ios".
        requester: Async callable returning the PermissionStatus.
    """

    SUPPORTED_PLATFORMS = ("android",)

    def __init__(self, platform: str = "android", requester: Optional[PermissionRequester] = None):
        self.platform = platform.lower()
        self._requester = requester
        self._warned = False

    async def request(self) -> PermissionStatus:
        if self.platform not in self.SUPPORTED_PLATFORMS or self._requester is None:
            if not self._warned:
                logger.warning(
                    f"Location permission unavailable on platform '{self.platform}', treating as denied"
                )
                self._warned = True
            return PermissionStatus.DENIED
        return await self._requester()

    async def is_granted(self) -> bool:
        return await self.request() is PermissionStatus.GRANTED


def always_granted() -> PermissionRequester:
    """Requester that grants every request, for simulations."""
    async def _grant() -> PermissionStatus:
        return PermissionStatus.GRANTED
    return _grant
