"""Simulate a user approaching the railway gate while a train is replayed."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add src to path so we can import gatealert
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from gatealert.config import GateAlertConfig
from gatealert.coordinator import SceneCoordinator
from gatealert.geo_utils import destination_point
from gatealert.location import PermissionGate, ReplayCoordinateSource, always_granted
from gatealert.presentation import ConsoleAlertSurface, LoggingMapPresenter
from gatealert.route_loader import TrainRoute, TrainRouteLoader

logger = logging.getLogger(__name__)

DEFAULT_ROUTE = Path(__file__).parent.parent / "data" / "train_route.json"

# Metres south of the gate at each user fix
APPROACH_DISTANCES_M = [120, 80, 60, 45, 40, 30, 25, 15, 10, 5]


def build_approach(config: GateAlertConfig) -> ReplayCoordinateSource:
    """Scripted user fixes walking north towards the gate."""
    points = [
        destination_point(config.gate_location, 180.0, distance)
        for distance in APPROACH_DISTANCES_M
    ]
    return ReplayCoordinateSource(points, latency_sec=0.05)


def load_route(path: str) -> TrainRoute:
    try:
        return TrainRouteLoader().load(path)
    except (FileNotFoundError, ValueError) as e:
        logger.warning(f"Could not load train route ({e}), using the fallback position")
        return TrainRoute([])


async def simulate(config: GateAlertConfig, route: TrainRoute, duration: float) -> None:
    presenter = LoggingMapPresenter()
    scene = SceneCoordinator(
        config,
        coordinate_source=build_approach(config),
        permission_gate=PermissionGate(config.platform, always_granted()),
        route=route,
        presenter=presenter,
        alert_surface=ConsoleAlertSurface(),
    )

    state = await scene.run_for(duration)

    print(f"\n{'='*60}")
    print("SESSION SUMMARY")
    print(f"{'='*60}")
    print(f"Train steps:     {state.train_step}")
    print(f"Last distance:   {state.last_distance_m} m")
    print(f"Alerts raised:   {len(state.alerts)}")
    for alert in state.alerts:
        print(f"  {alert.level.value:<8} at {alert.distance_m} m")
    print(f"Vehicle stopped: {'yes' if state.stopped else 'no'}")


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--route", default=None, help="Train route file (JSON, CSV or GTFS-RT)")
    parser.add_argument("--interval", type=float, default=None, help="Refresh interval in seconds")
    parser.add_argument("--duration", type=float, default=None, help="Session length in seconds")
    parser.add_argument("--platform", default=None, help="Platform for the permission request")
    args = parser.parse_args()

    # Replayed fixes are always fresh
    overrides = {"location_max_age_sec": 0.0}
    if args.interval is not None:
        overrides["refresh_interval_sec"] = args.interval
    if args.platform is not None:
        overrides["platform"] = args.platform
    config = GateAlertConfig.from_env(**overrides)

    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    route_path = args.route or config.route_path or str(DEFAULT_ROUTE)
    duration = args.duration
    if duration is None:
        duration = config.refresh_interval_sec * (len(APPROACH_DISTANCES_M) + 1)

    try:
        asyncio.run(simulate(config, load_route(route_path), duration))
    except KeyboardInterrupt:
        print("\n\nGoodbye!")


if __name__ == "__main__":
    main()
