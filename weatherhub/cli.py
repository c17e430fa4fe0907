"""CLI entry point for the weather hub."""

import argparse
import asyncio
import logging

import httpx

from weatherhub.api import HubServices, build_services, create_app
from weatherhub.config.loader import get_config_value, load_config
from weatherhub.config.schema import HubConfig
from weatherhub.errors import TransientNetworkError, UnexpectedError

DEFAULT_CONFIG = "weatherhub.yaml"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="weatherhub",
        description="NWS zone and forecast lookup service",
    )
    parser.add_argument(
        "--config", default=DEFAULT_CONFIG, help="Config YAML path"
    )

    sub = parser.add_subparsers(dest="command")

    # serve
    serve_p = sub.add_parser("serve", help="Run the HTTP API")
    serve_p.add_argument("--host", help="Bind address (overrides config)")
    serve_p.add_argument("--port", type=int, help="Bind port (overrides config)")

    # zones / forecast
    sub.add_parser("zones", help="List zones with observation stations")
    forecast_p = sub.add_parser("forecast", help="Show the forecast for a zone")
    forecast_p.add_argument("zone_id", help="Zone id, e.g. AKZ318")

    # health
    sub.add_parser("health", help="Run health checks")

    # config show / config get
    config_p = sub.add_parser("config", help="Config operations")
    config_sub = config_p.add_subparsers(dest="config_command")
    config_sub.add_parser("show", help="Display current config")
    get_p = config_sub.add_parser("get", help="Display one config value")
    get_p.add_argument("key", help="Dotted key, e.g. cache.forecast_ttl_seconds")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    config = load_config(args.config)

    logging.basicConfig(
        level=config.logging.level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "serve":
        return _cmd_serve(config, args)
    elif args.command == "zones":
        return asyncio.run(_with_services(config, _cmd_zones))
    elif args.command == "forecast":
        return asyncio.run(
            _with_services(config, lambda s: _cmd_forecast(s, args.zone_id))
        )
    elif args.command == "health":
        return asyncio.run(_with_services(config, _cmd_health))
    elif args.command == "config":
        return _cmd_config(config, args)
    else:
        parser.print_help()
        return 1


async def _with_services(config: HubConfig, command) -> int:
    async with httpx.AsyncClient(timeout=config.upstream.timeout_seconds) as http:
        return await command(build_services(config, http))


def _cmd_serve(config: HubConfig, args) -> int:
    import uvicorn

    host = args.host or config.server.host
    port = args.port or config.server.port
    uvicorn.run(create_app(config), host=host, port=port)
    return 0


async def _cmd_zones(services: HubServices) -> int:
    zones = await services.cache.get_zones()
    print(f"Zones: {len(zones)}")
    for z in zones:
        print(f"  {z.zone_id} {z.state} {z.name} ({len(z.observation_stations)} stations)")
    return 0


async def _cmd_forecast(services: HubServices, zone_id: str) -> int:
    try:
        forecasts = await services.cache.get_forecast(zone_id)
    except TransientNetworkError as e:
        print(f"No forecast for {zone_id}: {e}")
        return 1
    except UnexpectedError as e:
        print(f"Error: {e}")
        return 2
    if not forecasts:
        print(f"No forecast periods for {zone_id}")
        return 0
    for f in forecasts:
        print(f"{f.number:>2}. {f.name}: {f.detailed_forecast}")
    return 0


async def _cmd_health(services: HubServices) -> int:
    status = await services.health.check()
    print(f"NWS API: {'OK' if status.upstream_reachable else 'FAIL'}")
    print(f"Zone feed: {'OK' if status.zone_feed_present else 'MISSING'}")
    print(f"Cached entries: {status.cached_entries}")
    return 0 if status.healthy else 1


def _cmd_config(config: HubConfig, args) -> int:
    if args.config_command == "show":
        print(config.model_dump_json(indent=2))
        return 0
    elif args.config_command == "get":
        try:
            print(get_config_value(config, args.key))
            return 0
        except KeyError as e:
            print(f"Error: {e}")
            return 1
    else:
        print("Use: config show | config get key")
        return 1
