"""Operational health models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class HealthStatus:
    upstream_reachable: bool
    zone_feed_present: bool
    cached_entries: int

    @property
    def healthy(self) -> bool:
        return self.upstream_reachable and self.zone_feed_present
