"""Tests for the Qt telemetry worker."""

from __future__ import annotations

import pytest

QtCore = pytest.importorskip("PySide6.QtCore")

from cansatlog.telemetry.events import ParseError, SampleReady  # noqa: E402
from cansatlog.telemetry.worker import TelemetryWorker  # noqa: E402
from cansatlog.util.config import AppConfig, SimulatorConfig, StoreConfig  # noqa: E402

from conftest import SAMPLE_TEXT  # noqa: E402


@pytest.fixture(scope="module")
def qapp():
    app = QtCore.QCoreApplication.instance() or QtCore.QCoreApplication([])
    yield app


class _Recorder:
    def __init__(self, worker: TelemetryWorker) -> None:
        self.lines: list[str] = []
        self.samples: list[SampleReady] = []
        self.parse_errors: list[ParseError] = []
        self.states: list[str] = []
        self.errors: list[str] = []
        self.infos: list[str] = []
        worker.line.connect(self.lines.append)
        worker.sample.connect(self.samples.append)
        worker.parse_error.connect(self.parse_errors.append)
        worker.state.connect(self.states.append)
        worker.error.connect(self.errors.append)
        worker.info.connect(self.infos.append)


class TestSimulation:
    def test_runs_to_touchdown(self, qapp) -> None:
        worker = TelemetryWorker(simulate=True, seed=3, config=AppConfig())
        rec = _Recorder(worker)

        worker.start()
        for _ in range(100):
            worker.tick()
            if not worker.running:
                break

        assert rec.states == ["connected", "complete", "disconnected"]
        assert len(rec.samples) == 26
        assert len(rec.lines) == 26 * 7
        assert rec.infos.count("Simulation complete: touchdown") == 1
        assert rec.errors == []
        assert worker.session.store.tick == 26

        worker.tick()
        assert len(rec.samples) == 26

    def test_restart_begins_a_fresh_descent(self, qapp) -> None:
        worker = TelemetryWorker(simulate=True, seed=1, config=AppConfig())
        rec = _Recorder(worker)

        for _ in range(2):
            worker.start()
            for _ in range(100):
                worker.tick()
                if not worker.running:
                    break

        assert len(rec.samples) == 52
        second_run = rec.samples[26:]
        assert second_run[0].update.tick == 1
        assert second_run[0].update.altitude == ((1, 97.9),)
        assert worker.session.store.tick == 26
        assert len(worker.session.store.track()) == 26
        assert rec.states == ["connected", "complete", "disconnected"] * 2

    def test_seed_comes_from_config(self, qapp) -> None:
        cfg = AppConfig(simulator=SimulatorConfig(seed=5))
        a = TelemetryWorker(simulate=True, config=cfg)
        b = TelemetryWorker(simulate=True, seed=5, config=AppConfig())
        ra, rb = _Recorder(a), _Recorder(b)
        for w in (a, b):
            w.start()
            for _ in range(5):
                w.tick()
        assert ra.lines == rb.lines

    def test_stop_midway(self, qapp) -> None:
        worker = TelemetryWorker(simulate=True, seed=3, capacity=4, config=AppConfig())
        rec = _Recorder(worker)
        worker.start()
        for _ in range(6):
            worker.tick()
        worker.stop()

        assert rec.states == ["connected", "disconnected"]
        assert "Simulation stopped" in rec.infos
        assert len(rec.samples) == 6
        assert len(worker.session.store.series("altitude")) == 4

        worker.reset()
        assert worker.session.store.tick == 0


class TestSerial:
    def test_connect_failure(self, qapp) -> None:
        worker = TelemetryWorker(port="/dev/cansatlog-no-such-port", config=AppConfig())
        rec = _Recorder(worker)
        worker.start()
        assert not worker.running
        assert rec.states == ["disconnected"]
        assert rec.errors[0].startswith("Telemetry connect failed")

    def test_reads_loopback_port(self, qapp) -> None:
        worker = TelemetryWorker(port="loop://", config=AppConfig())
        rec = _Recorder(worker)
        worker.start()
        assert rec.states == ["connected"]

        worker._reader._ser.write((SAMPLE_TEXT + "Altitude: bad m\n").encode("utf-8"))
        for _ in range(20):
            worker.tick()
            if len(rec.parse_errors) == 1:
                break
        worker.stop()

        assert len(rec.samples) == 3
        assert rec.samples[0].sample["altitude"] == 97.9
        assert rec.parse_errors[0].line == "Altitude: bad m"
        assert rec.states == ["connected", "disconnected"]



class TestCapacity:
    def test_capacity_defaults_to_config(self, qapp) -> None:
        worker = TelemetryWorker(simulate=True, config=AppConfig(store=StoreConfig(capacity=7)))
        assert worker.session.store.capacity == 7

    def test_explicit_capacity_wins(self, qapp) -> None:
        worker = TelemetryWorker(simulate=True, capacity=3, config=AppConfig(store=StoreConfig(capacity=7)))
        assert worker.session.store.capacity == 3

    def test_zero_capacity_is_rejected(self, qapp) -> None:
        with pytest.raises(ValueError):
            TelemetryWorker(simulate=True, capacity=0, config=AppConfig(store=StoreConfig(capacity=7)))
