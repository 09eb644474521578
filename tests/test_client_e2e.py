from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer
from conftest import VEHICLE_ID, route_payload

from driverroute.client import RouteClient
from driverroute.config import RouteConfig
from driverroute.controller import SessionController
from driverroute.exceptions import RouteBackendError, RouteError, RouteTransportError, RouteValidationError
from driverroute.models.requests import StopStatusUpdate
from driverroute.models.route import Route, StopStatus
from driverroute.models.session import LoginState
from driverroute.progress import aggregate
from driverroute.session_store import MemorySessionStore


@dataclass
class RouteServer:
    """Minimal HTTP backend serving one route."""

    payload: dict[str, Any] = field(default_factory=route_payload)
    patches: list[tuple[str, dict[str, Any]]] = field(default_factory=list)
    paths: list[str] = field(default_factory=list)
    fail_updates: bool = False
    progress_body: str | None = None
    route_body: bytes | None = None

    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/api/routes/{vehicle_id}", self._route)
        app.router.add_get("/api/routes/{vehicle_id}/progress", self._progress)
        app.router.add_patch("/api/route_stops/{stop_id}", self._update)
        return app

    async def _route(self, request: web.Request) -> web.Response:
        self.paths.append(request.raw_path)
        if self.route_body is not None:
            return web.Response(body=self.route_body, content_type="application/json")
        return web.json_response({"vehicle_id": request.match_info["vehicle_id"], **self.payload})

    async def _progress(self, request: web.Request) -> web.Response:
        self.paths.append(request.raw_path)
        if self.progress_body is not None:
            return web.Response(text=self.progress_body, content_type="application/json")
        progress = aggregate(Route.model_validate(self.payload))
        return web.json_response(
            {
                "completed": progress.completed,
                "total_stops": progress.total_stops,
                "progress_percentage": progress.progress_percentage,
            }
        )

    async def _update(self, request: web.Request) -> web.Response:
        stop_id = request.match_info["stop_id"]
        body = await request.json()
        self.patches.append((stop_id, body))
        if self.fail_updates:
            return web.Response(status=500)
        for stop in self.payload["stops"]:
            if str(stop["stop_id"]) == stop_id:
                stop["status"] = body["status"]
                stop["actual_arrival"] = body["actual_arrival"]
                stop["notes"] = body["notes"]
        return web.json_response({"stop_id": stop_id, "status": body["status"]})


async def _start(backend: RouteServer) -> tuple[TestServer, RouteConfig]:
    server = TestServer(backend.app())
    await server.start_server()
    config = RouteConfig(base_url=str(server.make_url("/api")), request_timeout=5)
    return server, config


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_fetch_route_and_progress() -> None:
    backend = RouteServer()
    server, config = await _start(backend)
    try:
        async with RouteClient(config) as client:
            route = await client.get_route(VEHICLE_ID)
            progress = await client.get_progress(VEHICLE_ID)
    finally:
        await server.close()

    assert route.vehicle_id == VEHICLE_ID
    assert route.driver_name == "Sam Driver"
    assert [stop.stop_id for stop in route.ordered_stops] == ["41", "42", "43"]
    assert (progress.completed, progress.total_stops, progress.progress_percentage) == (1, 3, 33)


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_patch_body() -> None:
    backend = RouteServer()
    server, config = await _start(backend)
    try:
        async with RouteClient(config) as client:
            ack = await client.update_stop_status(43, StopStatusUpdate(status=StopStatus.SKIPPED, notes="  "))
    finally:
        await server.close()

    assert ack.stop_id == "43"
    assert ack.status is StopStatus.SKIPPED
    assert backend.patches == [("43", {"status": "skipped", "actual_arrival": None, "notes": None})]


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_server_error_reports_status_text() -> None:
    backend = RouteServer(fail_updates=True)
    server, config = await _start(backend)
    try:
        async with RouteClient(config) as client:
            with pytest.raises(RouteBackendError) as exc_info:
                await client.update_stop_status("42", StopStatusUpdate(status=StopStatus.COMPLETED))
    finally:
        await server.close()

    assert str(exc_info.value) == "Failed to update stop: Internal Server Error"
    assert exc_info.value.status_code == 500
    assert exc_info.value.endpoint == "/route_stops/42"


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_vehicle_id_is_path_quoted() -> None:
    backend = RouteServer()
    server, config = await _start(backend)
    try:
        async with RouteClient(config) as client:
            route = await client.get_route("unit 7")
    finally:
        await server.close()

    assert backend.paths == ["/api/routes/unit%207"]
    assert route.vehicle_id == "unit 7"


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_invalid_json_is_transport_error() -> None:
    backend = RouteServer(progress_body="{not json")
    server, config = await _start(backend)
    try:
        async with RouteClient(config) as client:
            with pytest.raises(RouteTransportError, match="Failed to fetch progress"):
                await client.get_progress(VEHICLE_ID)
    finally:
        await server.close()


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_undecodable_body_is_transport_error() -> None:
    backend = RouteServer(route_body=b'{"stops": []}\xff')
    server, config = await _start(backend)
    try:
        async with RouteClient(config) as client:
            with pytest.raises(RouteTransportError, match="Failed to fetch route: Invalid response body"):
                await client.get_route(VEHICLE_ID)
    finally:
        await server.close()


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_login_with_undecodable_body_stays_logged_out() -> None:
    backend = RouteServer(route_body=b'{"stops": []}\xff')
    server, config = await _start(backend)
    store = MemorySessionStore()
    try:
        async with RouteClient(config) as client:
            controller = SessionController(client, store)
            assert await controller.login(VEHICLE_ID) is False
            assert controller.state is LoginState.LOGGED_OUT
            assert controller.error is not None
            assert controller.error.startswith("Failed to fetch route")

            backend.route_body = None
            assert await controller.login(VEHICLE_ID) is True
    finally:
        await server.close()

    assert store.get() == VEHICLE_ID


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_connection_refused_is_transport_error() -> None:
    backend = RouteServer()
    server, config = await _start(backend)
    await server.close()

    async with RouteClient(config) as client:
        with pytest.raises(RouteTransportError, match="Failed to fetch route"):
            await client.get_route(VEHICLE_ID)


@pytest.mark.asyncio
async def test_client_requires_context_manager() -> None:
    client = RouteClient(RouteConfig())
    with pytest.raises(RouteError, match="not initialized"):
        await client.get_route(VEHICLE_ID)


@pytest.mark.asyncio
async def test_client_rejects_blank_ids_before_request() -> None:
    async with RouteClient(RouteConfig()) as client:
        with pytest.raises(RouteValidationError):
            await client.get_route("  ")
        with pytest.raises(RouteValidationError):
            await client.update_stop_status(" ", StopStatusUpdate(status=StopStatus.SKIPPED))


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_driver_session_over_http() -> None:
    backend = RouteServer()
    server, config = await _start(backend)
    alerts: list[str] = []

    async def alert(message: str) -> None:
        alerts.append(message)

    store = MemorySessionStore()
    try:
        async with RouteClient(config) as client:
            controller = SessionController(client, store, alert=alert)
            assert await controller.login(VEHICLE_ID) is True
            assert controller.progress is not None
            assert controller.progress.progress_percentage == 33

            controller.set_notes("42", "Left with security")
            assert await controller.transition_stop("42", StopStatus.COMPLETED) is True
            assert controller.progress.completed == 2

            backend.fail_updates = True
            assert await controller.transition_stop("43", StopStatus.SKIPPED) is False
            controller.logout()
    finally:
        await server.close()

    stop_id, body = backend.patches[0]
    assert stop_id == "42"
    assert body["status"] == "completed"
    assert body["actual_arrival"] is not None
    assert body["notes"] == "Left with security"
    assert alerts == ["Failed to update stop: Internal Server Error"]
    assert store.get() is None
    assert backend.payload["stops"][2]["status"] == "pending"
