from __future__ import annotations

import enum
import logging
import random
import threading
from collections.abc import Callable
from typing import Final

from cansatlog.telemetry import protocol

logger = logging.getLogger(__name__)

START_ALTITUDE_M: Final[float] = 97.9
START_LATITUDE: Final[float] = 51.356168
START_LONGITUDE: Final[float] = 0.10259666
SATELLITES: Final[int] = 6

HOLD_TICKS: Final[int] = 2
FREEFALL_UNTIL_TICK: Final[int] = 8
FREEFALL_GAIN_KMH: Final[float] = 9.8
DECEL_STEP_KMH: Final[float] = 15.0
DECEL_FLOOR_KMH: Final[float] = 5.0
CANOPY_SPEED_KMH: Final[float] = 4.5
MAX_TICKS: Final[int] = 1000

KMH_TO_MPS: Final[float] = 1000.0 / 3600.0


class Phase(enum.Enum):
    HOLD = "hold"
    FREEFALL = "freefall"
    DECELERATION = "deceleration"


# ---------------------------------------- #


class DescentSimulator:
    """
    Synthetic CanSat that prints the same text blocks as the real hardware.

    Intended for:
    - Pipeline bring-up without hardware
    - Deterministic tests (pass a seed)

    The descent is a short hold, a freefall that gains speed every tick, then
    a canopy phase that bleeds speed off down to a slow terminal rate. Position
    drifts a little to the north-east each tick.
    """

    def __init__(self, seed: int | None = None, rng: random.Random | None = None) -> None:
        self._rng = rng if rng is not None else random.Random(seed)
        self.reset()

    # ---------------------------------------- #

    def reset(self) -> None:
        self._altitude = START_ALTITUDE_M
        self._speed = 0.0
        self._latitude = START_LATITUDE
        self._longitude = START_LONGITUDE
        self._phase = Phase.HOLD
        self._ticks = 0
        self._landed = False

    # ---------------------------------------- #

    @property
    def landed(self) -> bool:
        return self._landed

    @property
    def ticks(self) -> int:
        return self._ticks

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def altitude(self) -> float:
        return self._altitude

    # ---------------------------------------- #

    def _step(self) -> None:
        if self._phase is Phase.HOLD and self._ticks > HOLD_TICKS:
            self._phase = Phase.FREEFALL
        if self._phase is Phase.FREEFALL and self._ticks > FREEFALL_UNTIL_TICK:
            self._phase = Phase.DECELERATION

        if self._phase is Phase.FREEFALL:
            self._speed += FREEFALL_GAIN_KMH
        if self._phase is Phase.DECELERATION and self._speed > DECEL_FLOOR_KMH:
            self._speed -= DECEL_STEP_KMH
        if self._speed < 0:
            self._speed = CANOPY_SPEED_KMH

        self._altitude -= self._speed * KMH_TO_MPS
        self._latitude += self._rng.random() * 0.000010 - 0.000002
        self._longitude += self._rng.random() * 0.000010
        self._ticks += 1

    # ---------------------------------------- #

    def next_block(self) -> list[str] | None:
        """Advance one tick and return its lines, or None once landed."""
        if self._landed:
            return None

        self._step()

        temp = 20.0 - self._altitude / 100.0
        press = 1008.5 - self._altitude / 10.0
        lines = [
            protocol.SEPARATOR_SHORT,
            protocol.format_position(self._latitude, self._longitude),
            protocol.format_altitude(max(0.0, self._altitude)),
            protocol.format_speed(self._speed),
            protocol.format_sats(SATELLITES),
            protocol.SEPARATOR_LONG,
            protocol.format_temp_pressure(temp, press),
        ]

        if self._altitude <= 0 or self._ticks >= MAX_TICKS:
            self._landed = True
            logger.info("Simulated touchdown after %d ticks", self._ticks)
        return lines

    # ---------------------------------------- #

    def run(
        self,
        on_line: Callable[[str], None],
        stop: threading.Event | None = None,
        interval_s: float = 1.0,
        on_complete: Callable[[], None] | None = None,
    ) -> bool:
        """
        Emit blocks every `interval_s` until touchdown or `stop` is set.

        Returns True when the descent finished (on_complete was called), False
        when it was cancelled.
        """
        stop = stop or threading.Event()
        while not stop.is_set():
            block = self.next_block()
            if block is None:
                break
            for line in block:
                on_line(line)
            if self._landed:
                if on_complete is not None:
                    on_complete()
                return True
            if stop.wait(interval_s):
                break
        return False
