"""Train route loading from local JSON, CSV and GTFS-Realtime files."""

import gzip
import logging
from pathlib import Path
from typing import List, Optional, Sequence

import pandas as pd

from .models import GeoPoint, MapRegion, LATITUDE_DELTA, LONGITUDE_DELTA

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("latitude", "longitude")

# Column names as written by the map front end
DELTA_COLUMNS = {"latitudeDelta": "latitude_delta", "longitudeDelta": "longitude_delta"}


class TrainRoute:
    """
    Read-only, ordered sequence of precomputed train positions.

    Positions are addressed by step number. A step past the last entry
    returns the last entry, so a replayed train comes to rest at the end
    of its route. An empty route always returns the fallback region.
    """

    def __init__(self, regions: Sequence[MapRegion], fallback: Optional[MapRegion] = None):
        self._regions = tuple(regions)
        self._fallback = fallback

    def __len__(self) -> int:
        return len(self._regions)

    def __iter__(self):
        return iter(self._regions)

    def __getitem__(self, index: int) -> MapRegion:
        return self._regions[index]

    @property
    def is_empty(self) -> bool:
        return not self._regions

    def with_fallback(self, fallback: MapRegion) -> "TrainRoute":
        return TrainRoute(self._regions, fallback)

    def position_at(self, step: int) -> MapRegion:
        """
        Get the train region for a step counter value.

        Args:
            step: Zero-based step counter.

        Returns:
            MapRegion for that step.

        Raises:
            ValueError: If step is negative, or the route is empty with no fallback.
        """
        if step < 0:
            raise ValueError(f"Step must be non-negative, got {step}")
        if not self._regions:
            if self._fallback is None:
                raise ValueError("Train route is empty and no fallback position is set")
            return self._fallback
        if step >= len(self._regions):
            return self._regions[-1]
        return self._regions[step]


class TrainRouteLoader:
    """Loads TrainRoute objects from static assets."""

    def __init__(
        self,
        latitude_delta: float = LATITUDE_DELTA,
        longitude_delta: float = LONGITUDE_DELTA,
    ):
        self.latitude_delta = latitude_delta
        self.longitude_delta = longitude_delta

    def load(self, path: str, trip_id: Optional[str] = None) -> TrainRoute:
        """
        Load a route, choosing the parser from the file extension.

        ``.json`` and ``.csv`` files are read as tables of positions; anything
        else is treated as a GTFS-Realtime feed file.
        """
        file_path = Path(path)
        if not file_path.exists():
            raise FileNotFoundError(f"Train route file not found: {path}")

        suffix = file_path.suffix.lower()
        if suffix == ".json":
            return self.load_json(path)
        if suffix == ".csv":
            return self.load_csv(path)
        return self.load_gtfs_rt(path, trip_id=trip_id)

    def load_json(self, path: str) -> TrainRoute:
        """Load a JSON array of region objects."""
        logger.info(f"Loading train route from {path}")
        try:
            frame = pd.read_json(path, orient="records")
        except ValueError as e:
            logger.error(f"Failed to parse train route {path}: {e}")
            raise
        return self.from_frame(frame)

    def load_csv(self, path: str) -> TrainRoute:
        """Load a CSV with latitude/longitude columns."""
        logger.info(f"Loading train route from {path}")
        return self.from_frame(pd.read_csv(path))

    def from_frame(self, frame: pd.DataFrame) -> TrainRoute:
        """
        Build a route from a DataFrame of positions.

        Rows keep their order. Rows with a missing coordinate are dropped,
        and missing delta columns are filled with the loader defaults.
        """
        if frame.empty:
            logger.warning("Train route is empty")
            return TrainRoute([])

        frame = frame.rename(columns=DELTA_COLUMNS)
        missing = [col for col in REQUIRED_COLUMNS if col not in frame.columns]
        if missing:
            raise ValueError(f"Train route is missing required columns: {', '.join(missing)}")

        total = len(frame)
        frame = frame.dropna(subset=list(REQUIRED_COLUMNS))
        if len(frame) < total:
            logger.warning(f"Dropped {total - len(frame)} route rows without coordinates")

        if "latitude_delta" not in frame.columns:
            frame = frame.assign(latitude_delta=self.latitude_delta)
        if "longitude_delta" not in frame.columns:
            frame = frame.assign(longitude_delta=self.longitude_delta)
        frame = frame.fillna({
            "latitude_delta": self.latitude_delta,
            "longitude_delta": self.longitude_delta,
        })

        regions = [
            MapRegion(
                latitude=float(row.latitude),
                longitude=float(row.longitude),
                latitude_delta=float(row.latitude_delta),
                longitude_delta=float(row.longitude_delta),
            )
            for row in frame.itertuples(index=False)
        ]
        logger.info(f"Loaded train route with {len(regions)} positions")
        return TrainRoute(regions)

    def load_gtfs_rt(self, path: str, trip_id: Optional[str] = None) -> TrainRoute:
        """
        Load a route from a recorded GTFS-Realtime vehicle position feed.

        Vehicle entities are ordered by their timestamp. When ``trip_id`` is
        given only that trip's positions are kept.

        Args:
            path: Path to a FeedMessage file, optionally gzip-compressed.
            trip_id: Optional trip filter.

        Returns:
            TrainRoute built from the vehicle positions.
        """
        logger.info(f"Loading train route from GTFS-RT feed {path}")
        with open(path, "rb") as f:
            raw_data = f.read()

        # Handle gzip compression
        if raw_data[:2] == b"\x1f\x8b":
            raw_data = gzip.decompress(raw_data)

        return self._parse_vehicle_positions(raw_data, trip_id)

    def _parse_vehicle_positions(self, feed_data: bytes, trip_id: Optional[str]) -> TrainRoute:
        try:
            from google.transit import gtfs_realtime_pb2
            from google.protobuf.message import DecodeError
        except ImportError:
            logger.error("google.transit.gtfs_realtime_pb2 not installed")
            raise

        feed = gtfs_realtime_pb2.FeedMessage()
        try:
            feed.ParseFromString(feed_data)
        except DecodeError as e:
            raise ValueError(f"Invalid GTFS-RT feed: {e}") from e

        samples: List[tuple] = []
        for order, entity in enumerate(feed.entity):
            if not entity.HasField("vehicle"):
                continue
            vehicle = entity.vehicle
            if not vehicle.HasField("position"):
                continue
            if trip_id and vehicle.trip.trip_id != trip_id:
                continue

            timestamp = vehicle.timestamp if vehicle.HasField("timestamp") else 0
            point = GeoPoint(vehicle.position.latitude, vehicle.position.longitude)
            samples.append((timestamp, order, point))

        samples.sort(key=lambda s: (s[0], s[1]))
        regions = [
            MapRegion.around(point, self.latitude_delta, self.longitude_delta)
            for _, _, point in samples
        ]
        logger.info(f"Loaded train route with {len(regions)} positions from GTFS-RT feed")
        return TrainRoute(regions)
