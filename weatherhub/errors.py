"""Error taxonomy for the zone/forecast lookup path."""


class WeatherHubError(Exception):
    """Base class for weatherhub errors."""


class NotFoundError(WeatherHubError):
    """Raised when a requested asset or zone does not exist."""


class TransientNetworkError(WeatherHubError):
    """Raised when the upstream source is unreachable or answers non-2xx."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class UnexpectedError(WeatherHubError):
    """Raised for malformed upstream data or programming faults. Never retried."""


class InjectedFaultError(UnexpectedError):
    """Raised by the opt-in fault injector."""
