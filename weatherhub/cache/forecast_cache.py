"""Read-through zone/forecast cache with absolute expiry and single-flight population."""

import itertools
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any, Protocol, TypeVar

from weatherhub.cache.single_flight import SingleFlight
from weatherhub.config.defaults import FORECAST_TTL_SECONDS, ZONES_TTL_SECONDS
from weatherhub.config.schema import CacheConfig
from weatherhub.models.cache import CacheEntry
from weatherhub.models.common import RequestContext
from weatherhub.models.forecast import Forecast
from weatherhub.models.zone import Zone
from weatherhub.telemetry.metrics import HubMetrics

logger = logging.getLogger(__name__)

ZONES_KEY = "zones"
FORECAST_KEY_PREFIX = "forecast:"

T = TypeVar("T")
Clock = Callable[[], float]


class UpstreamClient(Protocol):
    async def fetch_zones(self) -> tuple[Zone, ...]: ...

    async def fetch_forecast(
        self, zone_id: str, context: RequestContext | None = None
    ) -> tuple[Forecast, ...]: ...


def forecast_key(zone_id: str) -> str:
    return f"{FORECAST_KEY_PREFIX}{zone_id}"


class ForecastCache:
    """In-process cache in front of an UpstreamClient.

    Entries expire a fixed time after creation and are refreshed lazily on the
    next read. Concurrent misses for one key share a single upstream fetch.
    Failures are never cached.
    """

    def __init__(
        self,
        client: UpstreamClient,
        clock: Clock = time.monotonic,
        metrics: HubMetrics | None = None,
        zones_ttl: float = ZONES_TTL_SECONDS,
        forecast_ttl: float = FORECAST_TTL_SECONDS,
    ):
        self.client = client
        self.clock = clock
        self.metrics = metrics or HubMetrics()
        self.zones_ttl = zones_ttl
        self.forecast_ttl = forecast_ttl
        self._entries: dict[str, CacheEntry[Any]] = {}
        self._flights = SingleFlight()
        self._request_numbers = itertools.count(1)

    @classmethod
    def from_config(
        cls,
        config: CacheConfig,
        client: UpstreamClient,
        clock: Clock = time.monotonic,
        metrics: HubMetrics | None = None,
    ) -> "ForecastCache":
        return cls(
            client,
            clock=clock,
            metrics=metrics,
            zones_ttl=config.zones_ttl_seconds,
            forecast_ttl=config.forecast_ttl_seconds,
        )

    async def get_zones(self) -> tuple[Zone, ...]:
        logger.debug("Zones lookup with %.0fs expiration", self.zones_ttl)
        return await self._get_or_populate(
            ZONES_KEY, "zones", self.zones_ttl, self.client.fetch_zones
        )

    async def get_forecast(self, zone_id: str) -> tuple[Forecast, ...]:
        context = RequestContext(zone_id=zone_id, request_number=next(self._request_numbers))
        return await self._get_or_populate(
            forecast_key(zone_id),
            "forecast",
            self.forecast_ttl,
            lambda: self.client.fetch_forecast(zone_id, context),
        )

    def invalidate(self, key: str | None = None) -> None:
        """Drop one entry, or every entry when no key is given."""
        if key is None:
            self._entries.clear()
        else:
            self._entries.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return self._lookup(key) is not None

    def __len__(self) -> int:
        now = self.clock()
        return sum(1 for e in self._entries.values() if not e.is_expired(now))

    def entry(self, key: str) -> CacheEntry[Any] | None:
        return self._lookup(key)

    def _lookup(self, key: str) -> CacheEntry[Any] | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self.clock()):
            del self._entries[key]
            return None
        return entry

    async def _get_or_populate(
        self,
        key: str,
        entry_class: str,
        ttl: float,
        loader: Callable[[], Awaitable[T]],
    ) -> T:
        entry = self._lookup(key)
        if entry is not None:
            self.metrics.record_hit(entry_class)
            logger.debug("Cache hit for %s", key)
            return entry.value

        async def populate() -> T:
            self.metrics.record_miss(entry_class)
            value = await loader()
            now = self.clock()
            self._entries[key] = CacheEntry(value=value, created_at=now, expires_at=now + ttl)
            logger.info("Cached %s for %.0fs (cache miss)", key, ttl)
            return value

        value, shared = await self._flights.do(key, populate)
        if shared:
            logger.debug("Served %s from a shared populate", key)
        return value
