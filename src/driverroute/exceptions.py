"""Custom exception hierarchy for driverroute."""

from __future__ import annotations


class RouteError(Exception):
    """Base exception for all driverroute errors."""


class RouteConfigError(RouteError):
    """Invalid or missing configuration."""


class RouteValidationError(RouteError):
    """Local input rejected before any request was made (e.g. blank vehicle id)."""


class RouteTransportError(RouteError):
    """Network-level failure (connection error, timeout, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        endpoint: str = "",
    ) -> None:
        self.endpoint = endpoint
        super().__init__(message)


class RouteBackendError(RouteError):
    """Backend answered with a non-2xx status.

    ``reason`` carries the HTTP status text (e.g. ``"Internal Server Error"``)
    which is what the driver sees in the failure message.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        reason: str = "",
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.reason = reason
        self.endpoint = endpoint
        super().__init__(message)


class StopTransitionError(RouteError):
    """A stop status transition was refused on the client side."""

    def __init__(self, message: str, *, stop_id: str = "") -> None:
        self.stop_id = stop_id
        super().__init__(message)


class InvalidTransitionError(StopTransitionError):
    """The stop is not actionable or the target status is not driver-settable."""


class StopUpdateInProgressError(StopTransitionError):
    """An update for the same stop is still in flight."""
