"""YAML config loader with dotted-key lookup."""

from pathlib import Path
from typing import Any

import yaml

from weatherhub.config.schema import HubConfig


def load_config(path: str | Path | None) -> HubConfig:
    """Load and validate config from a YAML file.

    A missing path or an empty file yields the defaults.
    """
    if path is None:
        return HubConfig()
    path = Path(path)
    if not path.exists():
        return HubConfig()
    with open(path) as f:
        raw = yaml.safe_load(f) or {}
    return HubConfig(**raw)


def get_config_value(config: HubConfig, dotted_key: str) -> Any:
    """Get a config value by dotted key path. E.g. 'cache.forecast_ttl_seconds'."""
    obj: Any = config
    for part in dotted_key.split("."):
        if hasattr(obj, part):
            obj = getattr(obj, part)
        elif isinstance(obj, dict):
            obj = obj[part]
        else:
            raise KeyError(f"Config key not found: {dotted_key}")
    return obj
