"""NWS public forecast zone model."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Zone:
    zone_id: str
    name: str
    state: str
    observation_stations: tuple[str, ...]
