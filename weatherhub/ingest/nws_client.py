"""NWS zone/forecast client with retry and rate limit handling."""

import asyncio
import json
import logging
import time
from typing import Any
from urllib.parse import quote

import httpx

from weatherhub.config.defaults import DEFAULT_USER_AGENT, NWS_BASE_URL, ZONES_ASSET
from weatherhub.config.schema import UpstreamConfig
from weatherhub.errors import NotFoundError, TransientNetworkError, UnexpectedError
from weatherhub.ingest.assets import AssetProvider, DirectoryAssetProvider
from weatherhub.ingest.faults import FaultInjector
from weatherhub.models.common import RequestContext
from weatherhub.models.forecast import Forecast
from weatherhub.models.zone import Zone
from weatherhub.telemetry.metrics import HubMetrics

logger = logging.getLogger(__name__)

RETRYABLE_STATUSES = (429, 503)


class NwsClient:
    def __init__(
        self,
        http: httpx.AsyncClient | None = None,
        assets: AssetProvider | None = None,
        base_url: str = NWS_BASE_URL,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = 30.0,
        max_retries: int = 2,
        retry_base_delay: float = 1.0,
        metrics: HubMetrics | None = None,
        faults: FaultInjector | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.user_agent = user_agent
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay
        self.assets = assets or DirectoryAssetProvider()
        self.metrics = metrics or HubMetrics()
        self.faults = faults or FaultInjector()
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_config(
        cls,
        config: UpstreamConfig,
        http: httpx.AsyncClient | None = None,
        **kwargs: Any,
    ) -> "NwsClient":
        return cls(
            http=http,
            base_url=config.base_url,
            user_agent=config.user_agent,
            timeout=config.timeout_seconds,
            max_retries=config.max_retries,
            retry_base_delay=config.retry_base_delay_seconds,
            **kwargs,
        )

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def fetch_zones(self) -> tuple[Zone, ...]:
        """Load the bundled zone feed, keeping zones that have observation stations.

        A missing feed yields an empty tuple.
        """
        try:
            data = await asyncio.to_thread(self.assets.open_asset, ZONES_ASSET)
        except NotFoundError as e:
            logger.warning("Zones feed not available: %s", e)
            return ()

        try:
            raw = json.loads(data)
        except ValueError as e:
            raise UnexpectedError(f"Zones feed {ZONES_ASSET} is not valid JSON") from e

        features = raw.get("features") if isinstance(raw, dict) else None
        if not isinstance(features, list):
            logger.warning("Zones feed %s has no features list", ZONES_ASSET)
            return ()

        try:
            zones = [z for z in (_zone_from_feature(f) for f in features) if z is not None]
            filtered = tuple(dict.fromkeys(zones))
        except UnexpectedError:
            logger.exception("Malformed zone feature in %s", ZONES_ASSET)
            raise
        except (TypeError, AttributeError, ValueError) as e:
            logger.exception("Malformed zone feature in %s", ZONES_ASSET)
            raise UnexpectedError(f"Malformed zone feature in {ZONES_ASSET}: {e}") from e
        logger.info(
            "Retrieved %d zones, %d after filtering", len(features), len(filtered)
        )
        return filtered

    async def fetch_forecast(
        self, zone_id: str, context: RequestContext | None = None
    ) -> tuple[Forecast, ...]:
        """Fetch the forecast periods for one public zone.

        Raises TransientNetworkError for transport failures and non-2xx
        responses, UnexpectedError for anything else.
        """
        log = context.logger(logger) if context is not None else logger
        self.metrics.record_request()
        start = time.monotonic()
        log.info("Starting forecast request for zone %s", zone_id)

        try:
            self.faults.check("fetch_forecast")
            raw = await self._get_json(f"zones/forecast/{quote(zone_id, safe='')}/forecast")
            forecasts = _parse_forecast(raw)
        except TransientNetworkError:
            self.metrics.record_failure()
            log.error(
                "Failed HTTP request for zone %s after %.0fms",
                zone_id, _elapsed_ms(start), exc_info=True,
            )
            raise
        except UnexpectedError:
            self.metrics.record_failure()
            log.exception(
                "Unexpected error fetching forecast for zone %s after %.0fms",
                zone_id, _elapsed_ms(start),
            )
            raise
        except Exception as e:
            self.metrics.record_failure()
            log.exception(
                "Unexpected error fetching forecast for zone %s after %.0fms",
                zone_id, _elapsed_ms(start),
            )
            raise UnexpectedError(f"Forecast fetch for {zone_id} failed: {e}") from e

        self.metrics.record_duration(time.monotonic() - start)
        log.info(
            "Retrieved forecast for zone %s in %.0fms with %d periods",
            zone_id, _elapsed_ms(start), len(forecasts),
        )
        return forecasts

    async def _get_json(self, path: str) -> Any:
        """GET a JSON document. Retries on 503/429 and transport errors with exponential backoff."""
        url = f"{self.base_url}/{path}"
        headers = {"User-Agent": self.user_agent, "Accept": "application/geo+json"}

        for attempt in range(self.max_retries + 1):
            try:
                resp = await self._http.get(url, headers=headers, timeout=self.timeout)
            except httpx.RequestError as e:
                if attempt < self.max_retries:
                    delay = self.retry_base_delay * (2**attempt)
                    logger.warning(
                        "NWS request error, retrying in %.1fs: %s", delay, e
                    )
                    await asyncio.sleep(delay)
                    continue
                raise TransientNetworkError(f"Request to {url} failed: {e}") from e

            if resp.status_code in RETRYABLE_STATUSES and attempt < self.max_retries:
                delay = self.retry_base_delay * (2**attempt)
                logger.warning(
                    "NWS %s returned %d, retrying in %.1fs (attempt %d/%d)",
                    url, resp.status_code, delay, attempt + 1, self.max_retries,
                )
                await asyncio.sleep(delay)
                continue

            if not resp.is_success:
                raise TransientNetworkError(
                    f"NWS {url} returned {resp.status_code}",
                    status_code=resp.status_code,
                )

            try:
                return resp.json()
            except ValueError as e:
                raise UnexpectedError(f"Malformed JSON from {url}") from e

        raise AssertionError("retry loop exited without a result")


def _zone_from_feature(feature: Any) -> Zone | None:
    """Map a GeoJSON zone feature. Returns None for zones without stations.

    Raises UnexpectedError when the feature or its station list is malformed.
    """
    if not isinstance(feature, dict):
        raise UnexpectedError(f"Zone feature is {type(feature).__name__}, expected object")
    props = feature.get("properties") or {}
    if not isinstance(props, dict):
        raise UnexpectedError(f"Zone properties are {type(props).__name__}, expected object")
    stations = props.get("observationStations") or []
    if not isinstance(stations, list) or not all(isinstance(s, str) for s in stations):
        raise UnexpectedError(
            f"Zone {props.get('id')!r} observationStations must be a list of strings"
        )
    zone_id = props.get("id")
    if not zone_id or not stations:
        return None
    return Zone(
        zone_id=str(zone_id),
        name=props.get("name") or "",
        state=props.get("state") or "",
        observation_stations=tuple(stations),
    )


def _parse_forecast(raw: Any) -> tuple[Forecast, ...]:
    """Map ``properties.periods[]`` to Forecast records."""
    if not isinstance(raw, dict):
        raise UnexpectedError(f"Forecast payload is {type(raw).__name__}, expected object")
    periods = (raw.get("properties") or {}).get("periods")
    if periods is None:
        return ()

    try:
        return tuple(
            Forecast(
                number=int(p["number"]),
                name=p.get("name", ""),
                detailed_forecast=p.get("detailedForecast", ""),
                start_time=p.get("startTime"),
                end_time=p.get("endTime"),
                short_forecast=p.get("shortForecast"),
                temperature=_quantity(p.get("temperature")),
                temperature_unit=p.get("temperatureUnit"),
                wind_speed=_text(p.get("windSpeed")),
                wind_direction=p.get("windDirection"),
            )
            for p in periods
        )
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise UnexpectedError(f"Malformed forecast period: {e}") from e


def _quantity(value: Any) -> int | None:
    # Newer NWS payloads wrap numbers as {"unitCode": ..., "value": ...}
    if isinstance(value, dict):
        value = value.get("value")
    if value is None:
        return None
    return int(round(float(value)))


def _text(value: Any) -> str | None:
    if isinstance(value, dict):
        if value.get("value") is None:
            return None
        unit = str(value.get("unitCode", "")).rsplit(":", 1)[-1]
        return f"{value['value']} {unit}".strip()
    return value


def _elapsed_ms(start: float) -> float:
    return (time.monotonic() - start) * 1000
