from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

import pytest

from driverroute.exceptions import RouteBackendError, RouteTransportError
from driverroute.models.command_responses import StopUpdateAck
from driverroute.models.progress import Progress
from driverroute.models.requests import StopStatusUpdate
from driverroute.models.route import Route
from driverroute.progress import aggregate
from driverroute.session_store import MemorySessionStore

VEHICLE_ID = "9540_0"


def route_payload(vehicle_id: str = VEHICLE_ID) -> dict[str, Any]:
    return {
        "driver_name": "Sam Driver",
        "stops": [
            {
                "stop_id": 41,
                "stop_sequence": 1,
                "store_name": "Corner Market",
                "address": "1 Main St",
                "status": "completed",
                "actual_arrival": "2026-10-19T08:15:00Z",
            },
            {
                "stop_id": 42,
                "stop_sequence": 2,
                "store_name": "Fresh Foods",
                "address": "22 Oak Ave",
                "status": "pending",
            },
            {
                "stop_id": 43,
                "stop_sequence": 5,
                "store_name": "Night Owl",
                "address": "300 Elm Rd",
                "status": "pending",
                "notes": None,
            },
        ],
    }


@dataclass
class FakeRouteBackend:
    """In-memory stand-in for :class:`driverroute.client.RouteClient`."""

    payload: dict[str, Any] = field(default_factory=route_payload)
    calls: dict[str, int] = field(default_factory=dict)
    updates: list[tuple[str, StopStatusUpdate]] = field(default_factory=list)
    route_error: Exception | None = None
    progress_error: Exception | None = None
    update_error: Exception | None = None
    update_gate: asyncio.Event | None = None
    route_gate: asyncio.Event | None = None
    apply_updates: bool = True

    def _record(self, name: str) -> None:
        self.calls[name] = self.calls.get(name, 0) + 1

    @property
    def network_calls(self) -> int:
        return sum(self.calls.values())

    def route(self) -> Route:
        return Route.model_validate({"vehicle_id": VEHICLE_ID, **self.payload})

    async def get_route(self, vehicle_id: str) -> Route:
        self._record("get_route")
        if self.route_gate is not None:
            await self.route_gate.wait()
        if self.route_error is not None:
            raise self.route_error
        return Route.model_validate({"vehicle_id": vehicle_id, **self.payload})

    async def get_progress(self, vehicle_id: str) -> Progress:
        self._record("get_progress")
        await asyncio.sleep(0)
        if self.progress_error is not None:
            raise self.progress_error
        return aggregate(self.route())

    async def update_stop_status(self, stop_id: str, update: StopStatusUpdate) -> StopUpdateAck:
        self._record("update_stop_status")
        self.updates.append((stop_id, update))
        if self.update_gate is not None:
            await self.update_gate.wait()
        if self.update_error is not None:
            raise self.update_error
        if self.apply_updates:
            for stop in self.payload["stops"]:
                if str(stop["stop_id"]) == stop_id:
                    stop["status"] = update.status.value
        return StopUpdateAck.from_response(stop_id, {"stop_id": stop_id, "status": update.status.value})


def server_error(action: str = "update stop") -> RouteBackendError:
    return RouteBackendError(
        f"Failed to {action}: Internal Server Error",
        status_code=500,
        reason="Internal Server Error",
    )


def network_error(action: str = "fetch route") -> RouteTransportError:
    return RouteTransportError(f"Failed to {action}: Request failed: connection refused")


@pytest.fixture
def backend() -> FakeRouteBackend:
    return FakeRouteBackend()


@pytest.fixture
def store() -> MemorySessionStore:
    return MemorySessionStore()
