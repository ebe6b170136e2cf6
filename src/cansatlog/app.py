# cansatlog/app.py

from __future__ import annotations

import argparse
import logging
import signal
import sys
from pathlib import Path

from PySide6 import QtCore

from cansatlog.errors import ConfigError
from cansatlog.telemetry.events import ParseError, SampleReady
from cansatlog.telemetry.reader import list_serial_ports
from cansatlog.telemetry.types import Sample
from cansatlog.telemetry.worker import TelemetryWorker
from cansatlog.util.config import load_config
from cansatlog.util.time import format_timestamp

logger = logging.getLogger(__name__)

# Serial ticks poll quickly; the reader's own timeout paces them.
SERIAL_TICK_MS = 10


def _fmt(sample: Sample, key: str, digits: int, unit: str) -> str:
    value = sample.get(key)
    if value is None:
        return f"-- {unit}"
    return f"{value:.{digits}f} {unit}"


# ---------------------------------------- #


def format_readout(sample: Sample) -> str:
    """One console line summarizing a completed sample."""
    sats = sample.get("satellite_count")
    return "  ".join(
        (
            f"alt {_fmt(sample, 'altitude', 1, 'm')}",
            f"speed {_fmt(sample, 'speed', 1, 'km/h')}",
            f"temp {_fmt(sample, 'temperature', 2, '°C')}",
            f"press {_fmt(sample, 'pressure', 1, 'hPa')}",
            f"sats {'--' if sats is None else sats}",
        )
    )


# ---------------------------------------- #


def _positive_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {text!r}") from None
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
    return value


# ---------------------------------------- #


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cansatlog",
        description="Live telemetry console for a descending CanSat",
    )
    parser.add_argument("--port", help="Serial device or pyserial URL (default from config)")
    parser.add_argument("--baud", type=_positive_int, help="Baud rate (default 115200)")
    parser.add_argument("--simulate", action="store_true", help="Run the synthetic descent instead of a port")
    parser.add_argument("--seed", type=int, help="Random seed for --simulate")
    parser.add_argument("--interval", type=float, help="Seconds between simulated blocks")
    parser.add_argument("--capacity", type=_positive_int, help="Points kept per rolling series")
    parser.add_argument("--config", help="Path to cansatlog.toml")
    parser.add_argument("--list-ports", action="store_true", help="List likely Pico ports and exit")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return parser


# ---------------------------------------- #


def main(argv: list[str] | None = None) -> int:
    """
    Console entry point.

    Responsibilities:
    - Parse flags and load cansatlog.toml
    - Create a QCoreApplication and a TelemetryWorker
    - Drive the worker from a QTimer and print what it emits
    - Quit when the session disconnects
    """
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        cfg = load_config(Path(args.config) if args.config else None)
    except ConfigError as e:
        print(f"Config error: {e}", file=sys.stderr)
        return 2

    if args.list_ports:
        for device, desc in list_serial_ports():
            print(f"{device}\t{desc}")
        return 0

    app = QtCore.QCoreApplication(sys.argv[:1])
    app.setApplicationName("CansatLog")

    worker = TelemetryWorker(
        port=args.port,
        baud=args.baud,
        simulate=args.simulate,
        seed=args.seed,
        capacity=args.capacity,
        config=cfg,
    )

    failed = False

    def on_line(text: str) -> None:
        print(f"[{format_timestamp()}] {text}")

    def on_sample(evt: SampleReady) -> None:
        print(f">>> {format_readout(evt.sample)}")

    def on_parse_error(evt: ParseError) -> None:
        print(f">>> Parse error: {evt.reason} <<<", file=sys.stderr)

    def on_error(msg: str) -> None:
        nonlocal failed
        failed = True
        print(f">>> {msg} <<<", file=sys.stderr)

    def on_state(state: str) -> None:
        logger.info("Worker state: %s", state)
        if state == "disconnected":
            app.quit()

    worker.line.connect(on_line)
    worker.sample.connect(on_sample)
    worker.parse_error.connect(on_parse_error)
    worker.info.connect(lambda msg: print(f">>> {msg} <<<"))
    worker.error.connect(on_error)
    worker.state.connect(on_state)

    # Python signal handlers only run between timer ticks
    signal.signal(signal.SIGINT, lambda *_: worker.stop())

    timer = QtCore.QTimer()
    timer.timeout.connect(worker.tick)
    if args.simulate:
        interval_s = args.interval if args.interval is not None else cfg.simulator.interval_s
        timer.start(max(1, int(interval_s * 1000)))
    else:
        timer.start(SERIAL_TICK_MS)

    QtCore.QTimer.singleShot(0, worker.start)

    rc = app.exec()
    timer.stop()
    return rc or (1 if failed else 0)


if __name__ == "__main__":
    raise SystemExit(main())
