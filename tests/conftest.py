"""Shared fixtures and sample CanSat output."""

from __future__ import annotations

import pytest

from cansatlog.telemetry.session import Session
from cansatlog.telemetry.store import TimeSeriesStore

# Three blocks captured from the CanSat's serial console.
SAMPLE_TEXT = (
    "----------\r\n"
    "Lat: 51.356168 Lon: 0.10259666\r\n"
    "Altitude: 97.9 m\r\n"
    "Speed: 0.0 km/h\r\n"
    "Sats: 5\r\n"
    "------------------------------\r\n"
    "Temp: 19.947252 °C  Pressure: 1008.4271 hPa\r\n"
    "----------\r\n"
    "Lat: 51.356168 Lon: 0.10259666\r\n"
    "Altitude: 96.5 m\r\n"
    "Speed: 2.1 km/h\r\n"
    "Sats: 5\r\n"
    "------------------------------\r\n"
    "Temp: 19.957158 °C  Pressure: 1008.4944 hPa\r\n"
    "----------\n"
    "Lat: 51.356169 Lon: 0.10259668\n"
    "Altitude: 94.2 m\n"
    "Speed: 2.5 km/h\n"
    "Sats: 5\n"
    "------------------------------\n"
    "Temp: 19.947252 °C  Pressure: 1008.50352 hPa\n"
)

BLOCK_LINES = [
    "----------",
    "Lat: 51.356168 Lon: 0.10259666",
    "Altitude: 97.9 m",
    "Speed: 0.0 km/h",
    "Sats: 5",
    "------------------------------",
    "Temp: 19.947252 °C  Pressure: 1008.4271 hPa",
]

BLOCK_SAMPLE = {
    "latitude": 51.356168,
    "longitude": 0.10259666,
    "altitude": 97.9,
    "speed": 0.0,
    "satellite_count": 5,
    "temperature": 19.947252,
    "pressure": 1008.4271,
}


@pytest.fixture
def store() -> TimeSeriesStore:
    return TimeSeriesStore(capacity=5)


@pytest.fixture
def session() -> Session:
    return Session(capacity=5)
