"""Opt-in fault injection for failure-handling demonstrations."""

import logging

from weatherhub.errors import InjectedFaultError

logger = logging.getLogger(__name__)


class FaultInjector:
    """Raises on every ``every_n``-th call when enabled. Disabled by default."""

    def __init__(self, every_n: int = 5, enabled: bool = False):
        if every_n < 1:
            raise ValueError("every_n must be >= 1")
        self.every_n = every_n
        self.enabled = enabled
        self._calls = 0

    def check(self, operation: str) -> None:
        if not self.enabled:
            return
        self._calls += 1
        if self._calls % self.every_n == 0:
            logger.warning("Injecting fault into %s (call %d)", operation, self._calls)
            raise InjectedFaultError(f"Injected fault in {operation} (call {self._calls})")
