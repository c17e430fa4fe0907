"""Default upstream endpoints and cache lifetimes."""

NWS_BASE_URL = "https://api.weather.gov"
DEFAULT_USER_AGENT = "weatherhub/0.1.0"

ZONES_ASSET = "zones.json"

ZONES_TTL_SECONDS = 60 * 60
FORECAST_TTL_SECONDS = 15 * 60
