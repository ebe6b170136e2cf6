from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Final

from cansatlog.errors import LineParseError

LABEL_LAT: Final[str] = "Lat:"
LABEL_LON: Final[str] = "Lon:"
LABEL_ALTITUDE: Final[str] = "Altitude:"
LABEL_SPEED: Final[str] = "Speed:"
LABEL_SATS: Final[str] = "Sats:"
LABEL_TEMP: Final[str] = "Temp:"
LABEL_PRESSURE: Final[str] = "Pressure:"

UNIT_ALTITUDE: Final[str] = "m"
UNIT_SPEED: Final[str] = "km/h"
UNIT_TEMP: Final[str] = "°C"
UNIT_PRESSURE: Final[str] = "hPa"

# The CanSat prints a short rule before the GPS lines and a long one before
# the environment line.
SEPARATOR_SHORT: Final[str] = "-" * 10
SEPARATOR_LONG: Final[str] = "-" * 30


# ---------------------------------------- #
#  Line variants                           #
# ---------------------------------------- #


@dataclass(frozen=True)
class Separator:
    pass


@dataclass(frozen=True)
class Position:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class Altitude:
    meters: float


@dataclass(frozen=True)
class Speed:
    kmh: float


@dataclass(frozen=True)
class Sats:
    count: int


@dataclass(frozen=True)
class TempPressure:
    """Environment line; it is always the last line of a block."""

    celsius: float
    hpa: float


@dataclass(frozen=True)
class Unknown:
    text: str


TelemetryLine = Separator | Position | Altitude | Speed | Sats | TempPressure | Unknown


# ---------------------------------------- #


def _token_after(line: str, label: str, unit: str | None = None) -> str:
    rest = line.split(label, 1)[1].split()
    if not rest:
        return ""
    token = rest[0]
    if unit is not None and token.endswith(unit) and token != unit:
        token = token[: -len(unit)]
    return token


# ---------------------------------------- #


def _parse_float(token: str, line: str, field: str) -> float:
    try:
        value = float(token)
    except ValueError:
        raise LineParseError(line, f"bad {field} value {token!r}") from None
    if not math.isfinite(value):
        raise LineParseError(line, f"non-finite {field} value {token!r}")
    return value


# ---------------------------------------- #


def _parse_count(token: str, line: str, field: str) -> int:
    try:
        value = int(token)
    except ValueError:
        raise LineParseError(line, f"bad {field} value {token!r}") from None
    if value < 0:
        raise LineParseError(line, f"negative {field} value {token!r}")
    return value


# ---------------------------------------- #


def is_separator(line: str) -> bool:
    return bool(line) and line.strip("-") == ""


# ---------------------------------------- #


def classify_line(line: str) -> TelemetryLine:
    """
    Recognize one stripped telemetry line.

    Labels are checked in a fixed priority order and the first match wins.
    Raises LineParseError when a label matches but its number does not parse;
    nothing is partially returned in that case.
    """
    if is_separator(line):
        return Separator()

    if LABEL_LAT in line and LABEL_LON in line:
        lat = _parse_float(_token_after(line, LABEL_LAT), line, "latitude")
        lon = _parse_float(_token_after(line, LABEL_LON), line, "longitude")
        return Position(latitude=lat, longitude=lon)

    if LABEL_ALTITUDE in line:
        token = _token_after(line, LABEL_ALTITUDE, UNIT_ALTITUDE)
        return Altitude(meters=_parse_float(token, line, "altitude"))

    if LABEL_SPEED in line:
        token = _token_after(line, LABEL_SPEED, UNIT_SPEED)
        return Speed(kmh=_parse_float(token, line, "speed"))

    if LABEL_SATS in line:
        return Sats(count=_parse_count(_token_after(line, LABEL_SATS), line, "sats"))

    if LABEL_TEMP in line and LABEL_PRESSURE in line:
        temp = _parse_float(_token_after(line, LABEL_TEMP, UNIT_TEMP), line, "temperature")
        press = _parse_float(_token_after(line, LABEL_PRESSURE, UNIT_PRESSURE), line, "pressure")
        return TempPressure(celsius=temp, hpa=press)

    return Unknown(text=line)


# ---------------------------------------- #
#  Formatting (generator side)             #
# ---------------------------------------- #


def format_position(latitude: float, longitude: float) -> str:
    return f"{LABEL_LAT} {latitude:.6f} {LABEL_LON} {longitude:.8f}"


def format_altitude(meters: float) -> str:
    return f"{LABEL_ALTITUDE} {meters:.1f} {UNIT_ALTITUDE}"


def format_speed(kmh: float) -> str:
    return f"{LABEL_SPEED} {kmh:.1f} {UNIT_SPEED}"


def format_sats(count: int) -> str:
    return f"{LABEL_SATS} {count}"


def format_temp_pressure(celsius: float, hpa: float) -> str:
    return f"{LABEL_TEMP} {celsius:.4f} {UNIT_TEMP}  {LABEL_PRESSURE} {hpa:.4f} {UNIT_PRESSURE}"
