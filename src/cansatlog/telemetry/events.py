from __future__ import annotations

from dataclasses import dataclass

from cansatlog.telemetry.store import StoreUpdate
from cansatlog.telemetry.types import Sample

# ---------------------------------------- #
#  Input side                              #
# ---------------------------------------- #


@dataclass(frozen=True)
class ChunkReceived:
    text: str


@dataclass(frozen=True)
class LineReceived:
    line: str


@dataclass(frozen=True)
class EndOfStream:
    pass


@dataclass(frozen=True)
class TransportFailed:
    reason: str


InputEvent = ChunkReceived | LineReceived | EndOfStream | TransportFailed


# ---------------------------------------- #
#  Output side                             #
# ---------------------------------------- #


@dataclass(frozen=True)
class Connected:
    pass


@dataclass(frozen=True)
class Disconnected:
    reason: str | None = None


@dataclass(frozen=True)
class RawLine:
    line: str


@dataclass(frozen=True)
class SampleReady:
    sample: Sample
    update: StoreUpdate | None


@dataclass(frozen=True)
class ParseError:
    line: str
    reason: str


SessionEvent = Connected | Disconnected | RawLine | SampleReady | ParseError
