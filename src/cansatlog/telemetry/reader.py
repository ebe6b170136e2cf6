from __future__ import annotations

import codecs
import logging
import queue
import threading

import serial
import serial.tools.list_ports

from cansatlog.errors import TransportError
from cansatlog.telemetry.events import ChunkReceived, EndOfStream, InputEvent, TransportFailed

logger = logging.getLogger(__name__)

DEFAULT_BAUD = 115200


class SerialTextReader:
    """
    Pulls decoded text from the CanSat's USB serial console.

    `port` is anything pyserial's serial_for_url accepts: a device path such
    as /dev/ttyACM0, or a URL like loop:// for tests.
    """

    def __init__(self, port: str, baud: int = DEFAULT_BAUD, timeout_s: float = 0.1) -> None:
        self.port = port
        self.baud = baud
        try:
            self._ser = serial.serial_for_url(port, baudrate=baud, timeout=timeout_s)
            # Drain anything printed before we attached
            self._ser.reset_input_buffer()
        except (serial.SerialException, OSError, ValueError) as e:
            raise TransportError(f"Could not open {port}: {e}") from e

        # The degree sign is two bytes in UTF-8 and may straddle reads.
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._closed = False
        logger.info("Opened %s at %d baud", port, baud)

    # ---------------------------------------- #
    #  Connection                              #
    # ---------------------------------------- #

    @property
    def closed(self) -> bool:
        return self._closed

    # ---------------------------------------- #

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._ser.close()
        except (serial.SerialException, OSError) as e:
            raise TransportError(f"Could not close {self.port}: {e}") from e
        logger.info("Closed %s", self.port)

    # ---------------------------------------- #

    def read_chunk(self, size: int = 512) -> str | None:
        """
        Return the next piece of decoded text, or None if the read timed out.

        Raises TransportError when the port fails or has been closed.
        """
        if self._closed:
            raise TransportError(f"{self.port} is closed")

        try:
            data = self._ser.read(size)
        except (serial.SerialException, OSError) as e:
            raise TransportError(f"Read from {self.port} failed: {e}") from e

        if not data:
            return None
        return self._decoder.decode(data) or None


# ---------------------------------------- #


def pump(reader: SerialTextReader, inbox: "queue.Queue[InputEvent]", stop: threading.Event) -> None:
    """
    Forward chunks from `reader` into `inbox` until `stop` is set.

    Meant to run on its own thread next to Session.drain(). The reader is
    closed on the way out; a read failure is queued as TransportFailed and a
    clean stop as EndOfStream, so the consumer always sees exactly one end.
    """
    try:
        while not stop.is_set():
            try:
                chunk = reader.read_chunk()
            except TransportError as e:
                inbox.put(TransportFailed(str(e)))
                return
            if chunk:
                inbox.put(ChunkReceived(chunk))
    finally:
        if not reader.closed:
            try:
                reader.close()
            except TransportError as e:
                logger.warning("Ignoring close failure: %s", e)
    inbox.put(EndOfStream())


# ---------------------------------------- #


def _is_candidate_serial_port(device: str) -> bool:
    return (
        device.startswith("/dev/ttyACM")
        or device.startswith("/dev/ttyUSB")
        or device.startswith("/dev/cu.usbmodem")
        or device.upper().startswith("COM")
    )


# ---------------------------------------- #


def _looks_like_pico(description: str, vid: int | None = None) -> bool:
    # 0x2E8A is the Raspberry Pi USB vendor id
    if vid == 0x2E8A:
        return True
    d = (description or "").lower()
    keywords = (
        "pico",
        "raspberry pi",
        "micropython",
        "board in fs mode",
        "usb serial",
    )
    return any(k in d for k in keywords)


# ---------------------------------------- #


def list_serial_ports() -> list[tuple[str, str]]:
    """
    Return likely Pico serial ports as (device, description).

    Pico-looking ports (by USB vendor id or description) sort first, then
    stable by device.
    """
    ports: list[tuple[str, str, bool]] = []
    for p in serial.tools.list_ports.comports():
        device = getattr(p, "device", "") or ""
        desc = getattr(p, "description", "") or ""
        vid = getattr(p, "vid", None)
        if _is_candidate_serial_port(device):
            ports.append((device, desc or "(unknown)", _looks_like_pico(desc, vid)))

    ports.sort(key=lambda x: (not x[2], x[0]))
    return [(device, desc) for device, desc, _ in ports]
