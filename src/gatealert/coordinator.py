"""Scene coordinator: owns the session positions and the refresh loops."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional

from .alert_machine import ProximityAlertMachine
from .config import GateAlertConfig
from .geo_utils import precise_distance
from .location import CoordinateSource, PermissionGate
from .models import Alert, MapRegion, Marker, PositionResult
from .presentation import AlertSurface, MapPresenter
from .route_loader import TrainRoute

logger = logging.getLogger(__name__)


@dataclass
class SessionState:
    """Mutable state of one monitoring session."""
    user_location: MapRegion
    train_location: MapRegion
    railway_gates: List[MapRegion]
    alert_machine: ProximityAlertMachine
    train_step: int = 0
    permission_denied: bool = False
    last_distance_m: Optional[int] = None
    alerts: List[Alert] = field(default_factory=list)

    @property
    def gate(self) -> MapRegion:
        return self.railway_gates[0]

    @property
    def stopped(self) -> bool:
        return self.alert_machine.stopped


class SceneCoordinator:
    """
    Tracks the user, the train and the railway gate for one session.

    Two loops run independently on the event loop, each every
    ``refresh_interval_sec``:

    - the user loop fetches a position fix, recenters the map and feeds the
      user-to-gate distance into the alert machine;
    - the train loop advances the train one step along its route.

    The loops share ``state`` but are not synchronised with each other, so
    no ordering between a user tick and a train tick is guaranteed. Within
    a loop, ticks never overlap.

    Usage:
        async with SceneCoordinator(config, source, gate, route, presenter, surface) as scene:
            await asyncio.sleep(60)
    """

    def __init__(
        self,
        config: Optional[GateAlertConfig] = None,
        coordinate_source: Optional[CoordinateSource] = None,
        permission_gate: Optional[PermissionGate] = None,
        route: Optional[TrainRoute] = None,
        presenter: Optional[MapPresenter] = None,
        alert_surface: Optional[AlertSurface] = None,
    ):
        self.config = config or GateAlertConfig()
        self.coordinate_source = coordinate_source
        self.permission_gate = permission_gate or PermissionGate(self.config.platform)
        self.presenter = presenter
        self.alert_surface = alert_surface

        fallback = self._region(self.config.fallback_train_location)
        self.route = (route or TrainRoute([])).with_fallback(fallback)

        self.state = SessionState(
            user_location=self._region(self.config.user_location),
            train_location=self._region(self.config.train_location),
            railway_gates=[self._region(self.config.gate_location)],
            alert_machine=ProximityAlertMachine(self.config),
        )
        self._tasks: List[asyncio.Task] = []

    def _region(self, point) -> MapRegion:
        return MapRegion.around(point, self.config.latitude_delta, self.config.longitude_delta)

    # ------------------------------------------------------------------
    # Scene
    # ------------------------------------------------------------------

    def markers(self) -> List[Marker]:
        """Markers for the user, the gate and the train."""
        return [
            Marker(self.state.user_location.point, title="You"),
            Marker(self.state.gate.point, pin_color="gold"),
            Marker(self.state.train_location.point, pin_color="green"),
        ]

    def _render(self) -> None:
        if self.presenter:
            self.presenter.show_scene(self.state.user_location, self.markers())

    # ------------------------------------------------------------------
    # Ticks
    # ------------------------------------------------------------------

    async def refresh_user_position(self) -> Optional[Alert]:
        """
        Run one user-refresh tick.

        Returns:
            The alert raised by this tick, if any.
        """
        if self.state.stopped:
            return None

        if not await self.permission_gate.is_granted():
            self.state.permission_denied = True
            return None
        self.state.permission_denied = False

        if self.coordinate_source is None:
            logger.warning("No coordinate source configured")
            return None

        result = await self._request_position()
        if not result.ok:
            logger.warning(f"Location request failed: {result.error}")
            return None

        region = self._region(result.point)
        self.state.user_location = region
        if self.presenter:
            self.presenter.animate_to_region(region, self.config.animate_duration_ms)

        distance = precise_distance(result.point, self.state.gate.point)
        self.state.last_distance_m = distance
        logger.debug(f"User is {distance} m from the railway gate")

        alert = self.state.alert_machine.evaluate(distance)
        if alert:
            self.state.alerts.append(alert)
            if self.alert_surface:
                self.alert_surface.show(alert)

        self._render()
        return alert

    async def _request_position(self) -> PositionResult:
        options = self.config.location_options()
        try:
            return await asyncio.wait_for(
                self.coordinate_source.get_current_position(options),
                timeout=options.timeout_sec,
            )
        except asyncio.TimeoutError:
            return PositionResult.failure(
                f"Location request timed out after {options.timeout_sec:g}s"
            )

    def advance_train(self) -> MapRegion:
        """Move the train to the route position for the current step."""
        region = self.route.position_at(self.state.train_step)
        self.state.train_step += 1
        self.state.train_location = region
        logger.debug(
            f"Train step {self.state.train_step}: {region.latitude:.6f}, {region.longitude:.6f}"
        )
        self._render()
        return region

    async def _advance_train_tick(self) -> None:
        self.advance_train()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return any(not task.done() for task in self._tasks)

    def start(self) -> None:
        """Start both refresh loops on the running event loop."""
        if self.is_running:
            raise RuntimeError("Session is already running")

        self._render()
        interval = self.config.refresh_interval_sec
        self._tasks = [
            asyncio.create_task(self._run_periodic("user-refresh", interval, self.refresh_user_position)),
            asyncio.create_task(self._run_periodic("train-refresh", interval, self._advance_train_tick)),
        ]
        logger.info(f"Session started, refreshing every {interval:g}s")

    async def stop(self) -> None:
        """Cancel both loops and wait for them to finish."""
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        if tasks:
            logger.info("Session stopped")

    async def run_for(self, seconds: float) -> SessionState:
        """Run a session for a fixed duration and return its final state."""
        async with self:
            await asyncio.sleep(seconds)
        return self.state

    async def __aenter__(self) -> "SceneCoordinator":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    async def _run_periodic(self, name: str, interval: float, tick: Callable[[], Awaitable]) -> None:
        """
        Call ``tick`` every ``interval`` seconds on a fixed cadence.

        The first call happens one interval after start. A tick that raises
        is logged and the loop carries on with the next one.
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time()
        while True:
            deadline += interval
            await asyncio.sleep(max(0.0, deadline - loop.time()))
            try:
                await tick()
            except Exception as e:
                logger.error(f"{name} tick failed: {e}", exc_info=True)
            # Skip missed deadlines rather than firing a burst of ticks
            now = loop.time()
            if now > deadline + interval:
                deadline = now - (now - deadline) % interval
