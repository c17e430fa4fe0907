"""Shared test fixtures."""

import asyncio
import json
from pathlib import Path

import pytest

from weatherhub.models.common import RequestContext
from weatherhub.models.forecast import Forecast
from weatherhub.models.zone import Zone


def zone_feature(zone_id: str, stations: list[str], name: str = "", state: str = "AK") -> dict:
    return {
        "id": f"https://api.weather.gov/zones/forecast/{zone_id}",
        "type": "Feature",
        "geometry": None,
        "properties": {
            "id": zone_id,
            "type": "public",
            "name": name or f"Zone {zone_id}",
            "state": state,
            "observationStations": stations,
        },
    }


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeUpstream:
    """In-memory UpstreamClient that counts calls and can block on a gate."""

    def __init__(self):
        self.zones: tuple[Zone, ...] = (
            Zone("AKZ318", "City and Borough of Juneau", "AK", ("S1",)),
        )
        self.forecasts: dict[str, tuple[Forecast, ...]] = {}
        self.error: Exception | None = None
        self.gate: asyncio.Event | None = None
        self.zone_calls = 0
        self.forecast_calls: list[str] = []
        self.contexts: list[RequestContext | None] = []
        self.cancelled = 0

    async def fetch_zones(self) -> tuple[Zone, ...]:
        self.zone_calls += 1
        await self._wait()
        if self.error is not None:
            raise self.error
        return self.zones

    async def fetch_forecast(
        self, zone_id: str, context: RequestContext | None = None
    ) -> tuple[Forecast, ...]:
        self.forecast_calls.append(zone_id)
        self.contexts.append(context)
        await self._wait()
        if self.error is not None:
            raise self.error
        return self.forecasts.get(zone_id, ())

    async def _wait(self) -> None:
        if self.gate is None:
            return
        try:
            await self.gate.wait()
        except asyncio.CancelledError:
            self.cancelled += 1
            raise


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(now=1000.0)


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def zones_feed() -> dict:
    """Feed with a station-less zone and a duplicate of AKZ318."""
    return {
        "type": "FeatureCollection",
        "features": [
            zone_feature("AKZ318", ["S1"], name="City and Borough of Juneau"),
            zone_feature("AKZ200", [], name="Dalton Highway Summits"),
            zone_feature("WAZ558", ["KBFI", "KSEA"], name="City of Seattle", state="WA"),
            zone_feature("AKZ318", ["S1"], name="City and Borough of Juneau"),
        ],
    }


@pytest.fixture
def asset_dir(tmp_path: Path, zones_feed: dict) -> Path:
    """Write the zones feed into a temporary asset directory and return it."""
    path = tmp_path / "assets"
    path.mkdir()
    (path / "zones.json").write_text(json.dumps(zones_feed))
    return path


@pytest.fixture
def forecast_payload() -> dict:
    return {
        "type": "Feature",
        "properties": {
            "updated": "2026-10-19T09:12:00+00:00",
            "periods": [
                {"number": 1, "name": "Tonight", "detailedForecast": "Clear"},
                {
                    "number": 2,
                    "name": "Monday",
                    "detailedForecast": "Partly sunny, with a high near 48.",
                    "startTime": "2026-10-20T06:00:00-08:00",
                    "endTime": "2026-10-20T18:00:00-08:00",
                    "shortForecast": "Partly Sunny",
                    "temperature": 48,
                    "temperatureUnit": "F",
                    "windSpeed": "5 to 10 mph",
                    "windDirection": "SE",
                },
            ],
        },
    }
