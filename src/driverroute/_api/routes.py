"""Route backend endpoints.

Endpoints:
  - GET   /routes/{vehicle_id}
  - GET   /routes/{vehicle_id}/progress
  - PATCH /route_stops/{stop_id}
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

from pydantic import ValidationError

from driverroute._transport import Transport
from driverroute.exceptions import RouteBackendError, RouteTransportError
from driverroute.models.command_responses import StopUpdateAck
from driverroute.models.progress import Progress
from driverroute.models.requests import StopStatusUpdate
from driverroute.models.route import Route

_logger = logging.getLogger(__name__)


def _segment(value: str) -> str:
    return quote(value, safe="")


def route_endpoint(vehicle_id: str) -> str:
    return f"/routes/{_segment(vehicle_id)}"


def progress_endpoint(vehicle_id: str) -> str:
    return f"/routes/{_segment(vehicle_id)}/progress"


def stop_endpoint(stop_id: str) -> str:
    return f"/route_stops/{_segment(stop_id)}"


async def _request(
    transport: Transport,
    method: str,
    endpoint: str,
    *,
    action: str,
    payload: Any = None,
) -> Any:
    """Run a request, prefixing failures with the driver-facing *action*."""
    try:
        return await transport.request_json(method, endpoint, payload=payload)
    except RouteBackendError as exc:
        raise RouteBackendError(
            f"Failed to {action}: {exc.reason}",
            status_code=exc.status_code,
            reason=exc.reason,
            endpoint=endpoint,
        ) from exc
    except RouteTransportError as exc:
        raise RouteTransportError(f"Failed to {action}: {exc}", endpoint=endpoint) from exc


def _expect_object(endpoint: str, decoded: Any) -> dict[str, Any]:
    if not isinstance(decoded, dict):
        raise RouteTransportError(
            f"Unexpected payload from {endpoint}: expected an object, got {type(decoded).__name__}",
            endpoint=endpoint,
        )
    return decoded


async def fetch_route(transport: Transport, vehicle_id: str) -> Route:
    """Fetch the route assigned to *vehicle_id*."""
    endpoint = route_endpoint(vehicle_id)
    decoded = _expect_object(endpoint, await _request(transport, "GET", endpoint, action="fetch route"))
    payload = dict(decoded)
    payload.setdefault("vehicle_id", vehicle_id)
    try:
        route = Route.model_validate(payload)
    except ValidationError as exc:
        raise RouteTransportError(
            f"Failed to fetch route: invalid payload ({exc.error_count()} errors)", endpoint=endpoint
        ) from exc
    _logger.debug("Fetched route vehicle=%s stops=%d", vehicle_id, len(route.stops))
    return route


async def fetch_progress(transport: Transport, vehicle_id: str) -> Progress:
    """Fetch the backend's progress snapshot for *vehicle_id*."""
    endpoint = progress_endpoint(vehicle_id)
    decoded = _expect_object(endpoint, await _request(transport, "GET", endpoint, action="fetch progress"))
    try:
        progress = Progress.model_validate(decoded)
    except ValidationError as exc:
        raise RouteTransportError(
            f"Failed to fetch progress: invalid payload ({exc.error_count()} errors)", endpoint=endpoint
        ) from exc
    _logger.debug(
        "Fetched progress vehicle=%s completed=%d total=%d",
        vehicle_id,
        progress.completed,
        progress.total_stops,
    )
    return progress


async def update_stop_status(transport: Transport, stop_id: str, update: StopStatusUpdate) -> StopUpdateAck:
    """Submit a status change for a single stop."""
    endpoint = stop_endpoint(stop_id)
    decoded = await _request(transport, "PATCH", endpoint, action="update stop", payload=update.to_payload())
    _logger.debug("Updated stop=%s status=%s", stop_id, update.status)
    return StopUpdateAck.from_response(stop_id, decoded)
