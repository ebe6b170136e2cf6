from __future__ import annotations

from collections import deque
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Final

import numpy as np

from cansatlog.telemetry.types import Sample

DEFAULT_CAPACITY: Final[int] = 60
BOUNDED_METRICS: Final[tuple[str, ...]] = ("altitude", "temperature", "speed")

Point = tuple[float, float]
SeriesPoint = tuple[int, float]


@dataclass(frozen=True)
class StoreUpdate:
    """
    Snapshot handed to the presentation side after a tick.

    Series are (tick, value) tuples, oldest first. profile_point is
    (altitude, temperature); track_point is (longitude, latitude) or None when
    the sample carried no position.
    """

    tick: int
    altitude: tuple[SeriesPoint, ...]
    temperature: tuple[SeriesPoint, ...]
    speed: tuple[SeriesPoint, ...]
    profile_point: Point
    track_point: Point | None


# ---------------------------------------- #


class TimeSeriesStore:
    """
    Rolling per-metric history for live charts.

    Altitude, temperature and speed share one tick axis and are trimmed
    together to `capacity` entries. The ground track and the
    temperature/altitude profile keep the whole session.

    Single writer. Readers only ever get copies.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity

        self._tick = 0
        self._series: dict[str, deque[SeriesPoint]] = {name: deque() for name in BOUNDED_METRICS}
        self._track: list[Point] = []
        self._profile: list[Point] = []
        self._readouts: Sample = {}
        self._last_temperature = 0.0
        self._last_speed = 0.0

    # ---------------------------------------- #

    @property
    def tick(self) -> int:
        return self._tick

    # ---------------------------------------- #

    def reset(self) -> None:
        self._tick = 0
        for dq in self._series.values():
            dq.clear()
        self._track.clear()
        self._profile.clear()
        self._readouts = {}
        self._last_temperature = 0.0
        self._last_speed = 0.0

    # ---------------------------------------- #

    def record_sample(self, sample: Sample) -> StoreUpdate | None:
        """
        Apply one completed sample.

        Every sample refreshes the readouts and the forward-fill values. Only
        a sample with an altitude advances the tick and touches the series;
        otherwise None is returned.
        """
        self._readouts.update(sample)
        if "temperature" in sample:
            self._last_temperature = sample["temperature"]
        if "speed" in sample:
            self._last_speed = sample["speed"]

        if "altitude" not in sample:
            return None

        self._tick += 1
        altitude = sample["altitude"]
        values = {
            "altitude": altitude,
            "temperature": self._last_temperature,
            "speed": self._last_speed,
        }
        for name, dq in self._series.items():
            dq.append((self._tick, values[name]))
            while len(dq) > self.capacity:
                dq.popleft()

        profile_point = (altitude, self._last_temperature)
        self._profile.append(profile_point)

        track_point: Point | None = None
        if "latitude" in sample and "longitude" in sample:
            track_point = (sample["longitude"], sample["latitude"])
            self._track.append(track_point)

        return StoreUpdate(
            tick=self._tick,
            altitude=self.series("altitude"),
            temperature=self.series("temperature"),
            speed=self.series("speed"),
            profile_point=profile_point,
            track_point=track_point,
        )

    # ---------------------------------------- #
    #  Read side (copies only)                 #
    # ---------------------------------------- #

    def series(self, name: str) -> tuple[SeriesPoint, ...]:
        if name not in self._series:
            raise KeyError(f"unknown series {name!r}")
        return tuple(self._series[name])

    def ticks(self) -> tuple[int, ...]:
        return tuple(t for t, _ in self._series["altitude"])

    def track(self) -> tuple[Point, ...]:
        return tuple(self._track)

    def profile(self) -> tuple[Point, ...]:
        return tuple(self._profile)

    def readouts(self) -> Sample:
        return Sample(**self._readouts)

    # ---------------------------------------- #

    def as_array(self, name: str) -> np.ndarray:
        """
        Return a series as an (n, 2) float array for plotting.

        `name` is a bounded metric, "track" or "profile".
        """
        points: Sequence[tuple[float, float]]
        if name == "track":
            points = self._track
        elif name == "profile":
            points = self._profile
        else:
            points = self.series(name)
        if not points:
            return np.empty((0, 2), dtype=float)
        return np.array(points, dtype=float)
