"""Weather hub API: FastAPI app serving cached zones and forecasts."""

import logging
from contextlib import asynccontextmanager
from dataclasses import asdict, dataclass

import httpx
from fastapi import FastAPI, HTTPException, Request, Response
from fastapi.responses import JSONResponse

from weatherhub.cache.forecast_cache import ForecastCache
from weatherhub.config.schema import HubConfig
from weatherhub.errors import TransientNetworkError, UnexpectedError
from weatherhub.ingest.assets import AssetProvider, DirectoryAssetProvider
from weatherhub.ingest.faults import FaultInjector
from weatherhub.ingest.nws_client import NwsClient
from weatherhub.reporting.health_checker import HealthChecker
from weatherhub.telemetry.metrics import HubMetrics

logger = logging.getLogger(__name__)

PROMETHEUS_CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"


@dataclass
class HubServices:
    http: httpx.AsyncClient
    assets: AssetProvider
    metrics: HubMetrics
    client: NwsClient
    cache: ForecastCache
    health: HealthChecker


def build_services(config: HubConfig, http: httpx.AsyncClient) -> HubServices:
    """Wire the client, cache and health checker around one shared HTTP client."""
    if config.assets.directory:
        assets = DirectoryAssetProvider(config.assets.directory)
    else:
        assets = DirectoryAssetProvider()
    metrics = HubMetrics()
    faults = FaultInjector(every_n=config.faults.every_n, enabled=config.faults.enabled)
    if faults.enabled:
        logger.warning("Fault injection enabled: every %d forecast fetches will fail", faults.every_n)
    client = NwsClient.from_config(
        config.upstream, http=http, assets=assets, metrics=metrics, faults=faults
    )
    cache = ForecastCache.from_config(config.cache, client, metrics=metrics)
    health = HealthChecker(
        http, assets, cache,
        base_url=config.upstream.base_url,
        user_agent=config.upstream.user_agent,
    )
    return HubServices(
        http=http, assets=assets, metrics=metrics, client=client, cache=cache, health=health
    )


def create_app(config: HubConfig | None = None, services: HubServices | None = None) -> FastAPI:
    config = config or HubConfig()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if services is not None:
            app.state.services = services
            yield
            return
        async with httpx.AsyncClient(
            headers={"User-Agent": config.upstream.user_agent},
            timeout=config.upstream.timeout_seconds,
        ) as http:
            app.state.services = build_services(config, http)
            logger.info("Weather hub started against %s", config.upstream.base_url)
            yield

    app = FastAPI(title="Weather Hub", version="0.1.0", lifespan=lifespan)

    @app.exception_handler(UnexpectedError)
    async def unexpected_error_handler(request: Request, exc: UnexpectedError):
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    def _services(request: Request) -> HubServices:
        return request.app.state.services

    # ── Data endpoints ──────────────────────────────────────────────

    @app.get("/zones")
    async def get_zones(request: Request, response: Response):
        """All zones with at least one observation station."""
        zones = await _services(request).cache.get_zones()
        response.headers["Cache-Control"] = f"public, max-age={int(config.cache.zones_ttl_seconds)}"
        return [asdict(z) for z in zones]

    @app.get("/forecast/{zone_id}")
    async def get_forecast(zone_id: str, request: Request, response: Response):
        """Forecast periods for one zone. 404 when the upstream cannot serve it."""
        try:
            forecasts = await _services(request).cache.get_forecast(zone_id)
        except TransientNetworkError as e:
            raise HTTPException(status_code=404, detail=f"No forecast for zone {zone_id}") from e
        response.headers["Cache-Control"] = f"public, max-age={int(config.cache.forecast_ttl_seconds)}"
        return [asdict(f) for f in forecasts]

    # ── Operational endpoints ───────────────────────────────────────

    @app.get("/health")
    async def get_health(request: Request):
        status = await _services(request).health.check()
        body = {"status": "healthy" if status.healthy else "unhealthy", **asdict(status)}
        return JSONResponse(status_code=200 if status.healthy else 503, content=body)

    @app.get("/alive")
    async def get_alive():
        return {"status": "ok"}

    @app.get("/metrics")
    async def get_metrics(request: Request):
        return Response(
            content=_services(request).metrics.render(),
            media_type=PROMETHEUS_CONTENT_TYPE,
        )

    return app
