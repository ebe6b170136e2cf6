from __future__ import annotations


class CansatlogError(Exception):
    """Base class for every error raised by cansatlog."""


# ---------------------------------------- #


class TransportError(CansatlogError):
    """The serial link could not be opened, read or closed."""


# ---------------------------------------- #


class ConfigError(CansatlogError):
    """A config file value has the wrong type or range."""


# ---------------------------------------- #


class LineParseError(CansatlogError, ValueError):
    """A recognized telemetry line carried malformed numeric text."""

    def __init__(self, line: str, reason: str) -> None:
        super().__init__(f"{reason}: {line!r}")
        self.line = line
        self.reason = reason
