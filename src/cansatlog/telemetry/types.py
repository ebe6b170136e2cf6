from typing import TypedDict


class Sample(TypedDict, total=False):
    """
    One completed telemetry record, as printed by the CanSat.

    Keys are only present when the matching line was seen in the record
    window. Altitude is meters, speed km/h, temperature degrees Celsius,
    pressure hPa, latitude/longitude decimal degrees.
    """

    altitude: float
    temperature: float
    pressure: float
    speed: float
    latitude: float
    longitude: float
    satellite_count: int

