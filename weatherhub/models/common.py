"""Common types shared across models."""

import logging
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class RequestContext:
    """Per-request logging context, passed explicitly alongside each fetch."""

    zone_id: str
    request_number: int

    def logger(self, base: logging.Logger) -> "RequestLogger":
        return RequestLogger(
            base, {"zone_id": self.zone_id, "request_number": self.request_number}
        )


class RequestLogger(logging.LoggerAdapter):
    """Prefixes messages with the zone id and request number."""

    def process(self, msg: Any, kwargs: Any) -> tuple[Any, Any]:
        extra = dict(self.extra or {})
        kwargs["extra"] = {**extra, **kwargs.get("extra", {})}
        return (
            f"[zone={extra.get('zone_id')} req={extra.get('request_number')}] {msg}",
            kwargs,
        )
