from __future__ import annotations

import logging

from PySide6 import QtCore

from cansatlog.errors import TransportError
from cansatlog.telemetry.events import (
    ChunkReceived,
    Connected,
    Disconnected,
    EndOfStream,
    LineReceived,
    ParseError,
    RawLine,
    SampleReady,
    SessionEvent,
    TransportFailed,
)
from cansatlog.telemetry.reader import SerialTextReader
from cansatlog.telemetry.session import Session
from cansatlog.telemetry.simulator import DescentSimulator
from cansatlog.util.config import AppConfig, load_config

logger = logging.getLogger(__name__)


class TelemetryWorker(QtCore.QObject):
    """
    Drives one telemetry Session from a Qt timer.

    Each tick() either reads one chunk from the serial port or emits one
    simulated block, and re-emits whatever the session produced as signals.
    There is no reconnect loop; after a transport error the caller decides
    whether to start() again.
    """

    line = QtCore.Signal(str)
    sample = QtCore.Signal(object)
    parse_error = QtCore.Signal(object)
    state = QtCore.Signal(str)
    error = QtCore.Signal(str)
    info = QtCore.Signal(str)

    # ---------------------------------------- #

    def __init__(
        self,
        port: str | None = None,
        baud: int | None = None,
        simulate: bool = False,
        seed: int | None = None,
        capacity: int | None = None,
        config: AppConfig | None = None,
        parent=None,
    ):
        super().__init__(parent)

        cfg = config or load_config()

        self._port = port or cfg.serial.port or "/dev/ttyACM0"
        self._baud = baud if baud is not None else cfg.serial.baud
        self._simulate = simulate
        self._seed = seed if seed is not None else cfg.simulator.seed

        self.session = Session(capacity=capacity if capacity is not None else cfg.store.capacity)

        self._reader: SerialTextReader | None = None
        self._simulator: DescentSimulator | None = None
        self._running = False

    # ---------------------------------------- #

    @property
    def running(self) -> bool:
        return self._running

    # ---------------------------------------- #

    def set_port(self, port: str) -> None:
        self._port = port

    # ---------------------------------------- #

    def _dispatch(self, events: list[SessionEvent]) -> None:
        for evt in events:
            if isinstance(evt, RawLine):
                self.line.emit(evt.line)
            elif isinstance(evt, SampleReady):
                self.sample.emit(evt)
            elif isinstance(evt, ParseError):
                self.parse_error.emit(evt)
            elif isinstance(evt, Connected):
                self.state.emit("connected")
            elif isinstance(evt, Disconnected):
                self.state.emit("disconnected")

    # ---------------------------------------- #

    def _teardown(self, reason: str) -> None:
        self._running = False
        if self._reader is not None:
            try:
                self._reader.close()
            except TransportError as e:
                logger.warning("Ignoring close failure after read error: %s", e)
        self._reader = None
        self._dispatch(self.session.handle(TransportFailed(reason)))
        self.error.emit(reason)

    # ---------------------------------------- #

    def _finish_simulation(self) -> None:
        self._running = False
        self._simulator = None
        self.info.emit("Simulation complete: touchdown")
        self.state.emit("complete")
        self._dispatch(self.session.handle(EndOfStream()))

    # ---------------------------------------- #

    @QtCore.Slot()
    def start(self) -> None:
        if self._running:
            return

        if self._simulate:
            # A new descent starts from an empty store
            self.session.reset()
            self._simulator = DescentSimulator(seed=self._seed)
            self._running = True
            self._dispatch(self.session.open())
            self.info.emit("Generating simulated descent data")
            return

        try:
            self._reader = SerialTextReader(port=str(self._port), baud=int(self._baud))
        except TransportError as e:
            self._reader = None
            self.error.emit(f"Telemetry connect failed: {e}")
            self.state.emit("disconnected")
            return

        self._running = True
        self._dispatch(self.session.open())
        self.info.emit(f"Telemetry connected: {self._port} at {self._baud} baud")

    # ---------------------------------------- #

    @QtCore.Slot()
    def stop(self) -> None:
        was_running = self._running
        self._running = False
        self._simulator = None
        if self._reader is not None:
            try:
                self._reader.close()
            except TransportError as e:
                self.error.emit(str(e))
        self._reader = None
        self._dispatch(self.session.handle(EndOfStream()))
        if was_running and self._simulate:
            self.info.emit("Simulation stopped")

    # ---------------------------------------- #

    @QtCore.Slot()
    def reset(self) -> None:
        self.session.reset()

    # ---------------------------------------- #

    @QtCore.Slot()
    def tick(self) -> None:
        if not self._running:
            return

        if self._simulator is not None:
            block = self._simulator.next_block() or []
            for text in block:
                self._dispatch(self.session.handle(LineReceived(text)))
            if self._simulator.landed:
                self._finish_simulation()
            return

        if self._reader is None:
            return

        try:
            chunk = self._reader.read_chunk()
        except TransportError as e:
            self._teardown(f"Telemetry read error: {e}")
            return

        if chunk:
            self._dispatch(self.session.handle(ChunkReceived(chunk)))
