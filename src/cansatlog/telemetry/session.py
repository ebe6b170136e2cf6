from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Iterable, Iterator

from cansatlog.errors import LineParseError
from cansatlog.telemetry.accumulator import RecordAccumulator
from cansatlog.telemetry.events import (
    ChunkReceived,
    Connected,
    Disconnected,
    EndOfStream,
    InputEvent,
    LineReceived,
    ParseError,
    RawLine,
    SampleReady,
    SessionEvent,
    TransportFailed,
)
from cansatlog.telemetry.lines import LineReassembler
from cansatlog.telemetry.store import DEFAULT_CAPACITY, TimeSeriesStore

logger = logging.getLogger(__name__)


class Session:
    """
    One connection (or one simulator run) worth of telemetry state.

    Owns the line reassembler, the record accumulator and the time-series
    store. Everything is processed synchronously, in arrival order, by a
    single caller.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        self.lines = LineReassembler()
        self.accumulator = RecordAccumulator()
        self.store = TimeSeriesStore(capacity=capacity)
        self._open = False

    # ---------------------------------------- #

    @property
    def is_open(self) -> bool:
        return self._open

    # ---------------------------------------- #

    def open(self) -> list[SessionEvent]:
        if self._open:
            return []
        self._open = True
        logger.info("Telemetry session opened")
        return [Connected()]

    # ---------------------------------------- #

    def reset(self) -> None:
        """Drop buffered text, the half-built record and all history."""
        self.lines.reset()
        self.accumulator.reset()
        self.store.reset()

    # ---------------------------------------- #

    def handle(self, event: InputEvent) -> list[SessionEvent]:
        if isinstance(event, ChunkReceived):
            return self._handle_lines(self.lines.feed(event.text))

        if isinstance(event, LineReceived):
            return self._handle_lines([event.line])

        if isinstance(event, EndOfStream):
            rest = self.lines.flush()
            out = self._handle_lines([rest] if rest is not None else [])
            return out + self._close(None)

        if isinstance(event, TransportFailed):
            logger.error("Telemetry transport failed: %s", event.reason)
            return self._close(event.reason)

        raise TypeError(f"unsupported input event {event!r}")

    # ---------------------------------------- #

    def drain(
        self,
        inbox: "queue.Queue[InputEvent]",
        stop: threading.Event | None = None,
        poll_s: float = 0.1,
    ) -> Iterator[SessionEvent]:
        """
        Consume input events from `inbox` until the stream ends.

        Stops after EndOfStream or TransportFailed. When `stop` is set the
        events already queued are still processed, then the stream is ended
        as if EndOfStream had arrived: the pending fragment is flushed and
        Disconnected is emitted.
        """
        yield from self.open()
        while True:
            stopping = stop is not None and stop.is_set()
            try:
                event = inbox.get_nowait() if stopping else inbox.get(timeout=poll_s)
            except queue.Empty:
                if stopping:
                    yield from self.handle(EndOfStream())
                    return
                continue
            yield from self.handle(event)
            if isinstance(event, (EndOfStream, TransportFailed)):
                return

    # ---------------------------------------- #

    def _close(self, reason: str | None) -> list[SessionEvent]:
        if not self._open:
            return []
        self._open = False
        logger.info("Telemetry session closed%s", f" ({reason})" if reason else "")
        return [Disconnected(reason)]

    # ---------------------------------------- #

    def _handle_lines(self, lines: Iterable[str]) -> list[SessionEvent]:
        out: list[SessionEvent] = []
        for raw in lines:
            line = raw.strip()
            if not line:
                continue

            logger.debug("RX: %s", line)
            out.append(RawLine(line))

            try:
                sample = self.accumulator.feed(line)
            except LineParseError as e:
                logger.warning("Bad telemetry line %r (%s)", e.line, e.reason)
                out.append(ParseError(line=e.line, reason=e.reason))
                continue

            if sample is not None:
                update = self.store.record_sample(sample)
                out.append(SampleReady(sample=sample, update=update))
        return out
