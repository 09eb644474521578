"""High-level async client for the route backend."""

from __future__ import annotations

import logging
from typing import Any

import aiohttp
from pydantic import ValidationError

from driverroute._api import routes as _routes_api
from driverroute._transport import HttpTransport, Transport
from driverroute.config import RouteConfig
from driverroute.exceptions import RouteError, RouteValidationError
from driverroute.models.command_responses import StopUpdateAck
from driverroute.models.progress import Progress
from driverroute.models.requests import StopRequest, StopStatusUpdate, VehicleRequest
from driverroute.models.route import Route

_logger = logging.getLogger(__name__)


class RouteClient:
    """Async client for the route backend.

    Usage::

        async with RouteClient(config) as client:
            route = await client.get_route("9540_0")
            progress = await client.get_progress("9540_0")
    """

    def __init__(
        self,
        config: RouteConfig | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
    ) -> None:
        self._config = config or RouteConfig()
        self._external_session = session is not None
        self._http_session = session
        self._injected_transport = transport
        self._transport: Transport | None = transport

    @property
    def config(self) -> RouteConfig:
        return self._config

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> RouteClient:
        if self._injected_transport is not None:
            return self
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        self._transport = HttpTransport(self._config, self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if self._injected_transport is not None:
            return
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._transport = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise RouteError("Client not initialized. Use 'async with RouteClient(...) as client:'")
        return self._transport

    @staticmethod
    def _vehicle(vehicle_id: str) -> VehicleRequest:
        try:
            return VehicleRequest(vehicle_id=vehicle_id)
        except ValidationError as exc:
            raise RouteValidationError("vehicle_id must be non-empty") from exc

    @staticmethod
    def _stop(stop_id: str | int) -> StopRequest:
        try:
            return StopRequest(stop_id=stop_id)
        except ValidationError as exc:
            raise RouteValidationError("stop_id must be non-empty") from exc

    # ------------------------------------------------------------------
    # Endpoints
    # ------------------------------------------------------------------

    async def get_route(self, vehicle_id: str) -> Route:
        """Fetch the route assigned to *vehicle_id*."""
        request = self._vehicle(vehicle_id)
        return await _routes_api.fetch_route(self._require_transport(), request.vehicle_id)

    async def get_progress(self, vehicle_id: str) -> Progress:
        """Fetch the backend's progress snapshot for *vehicle_id*."""
        request = self._vehicle(vehicle_id)
        return await _routes_api.fetch_progress(self._require_transport(), request.vehicle_id)

    async def update_stop_status(self, stop_id: str | int, update: StopStatusUpdate) -> StopUpdateAck:
        """Submit a status change for a stop.

        The returned acknowledgement is informational; the route must be
        fetched again to observe the new state.
        """
        request = self._stop(stop_id)
        return await _routes_api.update_stop_status(self._require_transport(), request.stop_id, update)
