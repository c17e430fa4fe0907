"""Health checker: upstream reachability, zone feed presence, cache occupancy."""

import logging

import httpx

from weatherhub.cache.forecast_cache import ForecastCache
from weatherhub.config.defaults import DEFAULT_USER_AGENT, NWS_BASE_URL, ZONES_ASSET
from weatherhub.ingest.assets import AssetProvider
from weatherhub.models.reporting import HealthStatus

logger = logging.getLogger(__name__)


class HealthChecker:
    def __init__(
        self,
        http: httpx.AsyncClient,
        assets: AssetProvider,
        cache: ForecastCache,
        base_url: str = NWS_BASE_URL,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        self.http = http
        self.assets = assets
        self.cache = cache
        self.base_url = base_url.rstrip("/") + "/"
        self.user_agent = user_agent

    async def check(self) -> HealthStatus:
        return HealthStatus(
            upstream_reachable=await self._check_upstream(),
            zone_feed_present=self.assets.has_asset(ZONES_ASSET),
            cached_entries=len(self.cache),
        )

    async def _check_upstream(self) -> bool:
        try:
            resp = await self.http.get(
                self.base_url,
                headers={"User-Agent": self.user_agent},
                timeout=10.0,
            )
            return resp.status_code == 200
        except httpx.HTTPError as e:
            logger.warning("Upstream health check failed: %s", e)
            return False
