"""NWS zone forecast data models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Forecast:
    number: int
    name: str
    detailed_forecast: str
    start_time: str | None = None
    end_time: str | None = None
    short_forecast: str | None = None
    temperature: int | None = None
    temperature_unit: str | None = None
    wind_speed: str | None = None
    wind_direction: str | None = None
