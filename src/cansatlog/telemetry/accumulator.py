from __future__ import annotations

import enum

from cansatlog.telemetry import protocol
from cansatlog.telemetry.types import Sample


class RecordState(enum.Enum):
    EMPTY = "empty"
    PARTIAL = "partial"
    READY = "ready"


# ---------------------------------------- #


class RecordAccumulator:
    """
    Collects the labelled lines of one telemetry block into a Sample.

    The CanSat prints a block over several lines and the environment
    (Temp/Pressure) line always comes last, so that line closes the record.
    Closing is unconditional: a record missing altitude or position is still
    emitted and left for the store to judge. READY is only observable from
    inside feed(); the record drops back to EMPTY before feed() returns.

    feed() raises LineParseError for a recognized line with bad numbers. The
    record is not touched in that case and the accumulator stays usable.
    """

    def __init__(self) -> None:
        self._record: Sample = {}
        self._state = RecordState.EMPTY

    # ---------------------------------------- #

    @property
    def state(self) -> RecordState:
        return self._state

    # ---------------------------------------- #

    def peek(self) -> Sample:
        """Return a copy of the record being built."""
        return Sample(**self._record)

    # ---------------------------------------- #

    def reset(self) -> None:
        self._record = {}
        self._state = RecordState.EMPTY

    # ---------------------------------------- #

    def feed(self, line: str) -> Sample | None:
        line = line.strip()
        if not line:
            return None

        parsed = protocol.classify_line(line)

        if isinstance(parsed, (protocol.Separator, protocol.Unknown)):
            return None

        if isinstance(parsed, protocol.Position):
            self._record["latitude"] = parsed.latitude
            self._record["longitude"] = parsed.longitude
        elif isinstance(parsed, protocol.Altitude):
            self._record["altitude"] = parsed.meters
        elif isinstance(parsed, protocol.Speed):
            self._record["speed"] = parsed.kmh
        elif isinstance(parsed, protocol.Sats):
            self._record["satellite_count"] = parsed.count
        elif isinstance(parsed, protocol.TempPressure):
            self._record["temperature"] = parsed.celsius
            self._record["pressure"] = parsed.hpa
            self._state = RecordState.READY
            return self._emit()

        self._state = RecordState.PARTIAL
        return None

    # ---------------------------------------- #

    def _emit(self) -> Sample:
        sample, self._record = self._record, {}
        self._state = RecordState.EMPTY
        return sample
