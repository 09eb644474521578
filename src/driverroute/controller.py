"""Login/logout orchestration and in-memory route state."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Protocol

from driverroute._constants import MISSING_VEHICLE_ID_MESSAGE
from driverroute.exceptions import (
    RouteError,
    RouteValidationError,
    StopTransitionError,
    StopUpdateInProgressError,
)
from driverroute.models.command_responses import StopUpdateAck
from driverroute.models.progress import Progress
from driverroute.models.requests import StopStatusUpdate
from driverroute.models.route import Route, StopStatus
from driverroute.models.session import LoginState, VehicleSession
from driverroute.progress import resolve_progress
from driverroute.session_store import SessionStore
from driverroute.state.view import StopViewRegistry, StopViewState
from driverroute.transitions import StatusTransitionEngine

_logger = logging.getLogger(__name__)

AlertCallback = Callable[[str], Awaitable[None]]


class RouteBackend(Protocol):
    """What the controller needs from :class:`~driverroute.client.RouteClient`."""

    async def get_route(self, vehicle_id: str) -> Route:
        ...

    async def get_progress(self, vehicle_id: str) -> Progress:
        ...

    async def update_stop_status(self, stop_id: str, update: StopStatusUpdate) -> StopUpdateAck:
        ...


class SessionController:
    """Holds the driver's session, route and progress.

    State machine: ``logged_out`` → ``logging_in`` → ``logged_in``.

    A vehicle id remembered by the *store* is pre-filled on construction
    but no request is made until :meth:`login` is called.

    Parameters
    ----------
    backend
        Route backend, normally a :class:`~driverroute.client.RouteClient`.
    store
        Where the last-used vehicle id is remembered.
    alert
        Awaited with a message when a stop update fails; the UI should not
        return until the driver acknowledged it.  Without a callback the
        error propagates out of :meth:`transition_stop`.
    progress_from_backend
        Fetch progress from the backend (authoritative).  When ``False``
        progress is computed from the fetched stops.
    """

    def __init__(
        self,
        backend: RouteBackend,
        store: SessionStore,
        *,
        alert: AlertCallback | None = None,
        progress_from_backend: bool = True,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._backend = backend
        self._store = store
        self._alert = alert
        self._progress_from_backend = progress_from_backend
        self._views = StopViewRegistry()
        self._engine = StatusTransitionEngine(backend, self._views, clock=clock)

        self._state = LoginState.LOGGED_OUT
        self._active_vehicle_id: str | None = None
        self._route: Route | None = None
        self._progress: Progress | None = None
        self._error: str | None = None
        # Bumped by every login/refresh/logout; results from an older
        # generation are dropped.
        self._generation = 0

        self.vehicle_id: str = store.get() or ""
        if self.vehicle_id:
            _logger.debug("Pre-filled vehicle id %s from session store", self.vehicle_id)

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def state(self) -> LoginState:
        return self._state

    @property
    def is_logged_in(self) -> bool:
        return self._state is LoginState.LOGGED_IN

    @property
    def loading(self) -> bool:
        return self._state is LoginState.LOGGING_IN

    @property
    def session(self) -> VehicleSession | None:
        if self._active_vehicle_id is None or not self.is_logged_in:
            return None
        return VehicleSession(vehicle_id=self._active_vehicle_id, logged_in=True)

    @property
    def route(self) -> Route | None:
        return self._route

    @property
    def progress(self) -> Progress | None:
        return self._progress

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def engine(self) -> StatusTransitionEngine:
        return self._engine

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    def _next_generation(self) -> int:
        self._generation += 1
        return self._generation

    async def _fetch(self, vehicle_id: str) -> tuple[Route, Progress]:
        """Fetch route and progress together; either failure fails both."""
        if not self._progress_from_backend:
            route = await self._backend.get_route(vehicle_id)
            return route, resolve_progress(route)

        results = await asyncio.gather(
            self._backend.get_route(vehicle_id),
            self._backend.get_progress(vehicle_id),
            return_exceptions=True,
        )
        route_result, progress_result = results
        for result in results:
            if isinstance(result, BaseException):
                raise result
        assert isinstance(route_result, Route)  # noqa: S101
        assert isinstance(progress_result, Progress)  # noqa: S101
        return route_result, progress_result

    def _commit(self, route: Route, progress: Progress) -> None:
        self._route = route
        self._progress = progress
        self._views.prune(stop.stop_id for stop in route.stops)

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    def _validate_vehicle_id(self, vehicle_id: str) -> str:
        candidate = vehicle_id.strip()
        if not candidate:
            raise RouteValidationError(MISSING_VEHICLE_ID_MESSAGE)
        return candidate

    async def login(self, vehicle_id: str | None = None) -> bool:
        """Load the route for *vehicle_id* (or the pre-filled id).

        Returns ``True`` when the controller reached ``logged_in``.  On
        failure :attr:`error` holds the message and nothing is committed.
        """
        if vehicle_id is not None:
            self.vehicle_id = vehicle_id

        try:
            candidate = self._validate_vehicle_id(self.vehicle_id)
        except RouteValidationError as exc:
            self._error = str(exc)
            return False

        if self._state is LoginState.LOGGING_IN:
            _logger.debug("Login already in progress; ignoring login for %s", candidate)
            return False

        previous_state = self._state
        self._state = LoginState.LOGGING_IN
        self._error = None
        generation = self._next_generation()
        _logger.debug("Logging in vehicle=%s", candidate)

        try:
            route, progress = await self._fetch(candidate)
        except RouteError as exc:
            if generation == self._generation:
                self._error = str(exc)
                self._state = previous_state
            _logger.warning("Login failed for vehicle=%s: %s", candidate, exc)
            return False
        except BaseException:
            # Cancelled or unexpected failure: leave logging_in before propagating.
            if generation == self._generation:
                self._state = previous_state
            raise

        if generation != self._generation:
            _logger.debug("Discarding superseded login result for vehicle=%s", candidate)
            return False

        self._commit(route, progress)
        self._active_vehicle_id = candidate
        self.vehicle_id = candidate
        self._state = LoginState.LOGGED_IN
        try:
            self._store.set(candidate)
        except OSError:
            _logger.warning("Could not persist vehicle id %s", candidate, exc_info=True)
        _logger.info("Logged in vehicle=%s stops=%d", candidate, len(route.stops))
        return True

    def logout(self) -> None:
        """Forget the route and the persisted vehicle id.  Never touches the network."""
        self._next_generation()
        self._route = None
        self._progress = None
        self._error = None
        self._active_vehicle_id = None
        self._views.clear()
        self._state = LoginState.LOGGED_OUT
        try:
            self._store.clear()
        except OSError:
            _logger.warning("Could not clear persisted vehicle id", exc_info=True)
        _logger.info("Logged out")

    async def refresh(self) -> bool:
        """Re-fetch route and progress, replacing both wholesale.

        On failure the previous route and progress stay in place and
        :attr:`error` is set.
        """
        vehicle_id = self._active_vehicle_id
        if not self.is_logged_in or vehicle_id is None:
            _logger.debug("Refresh requested while not logged in")
            return False

        generation = self._next_generation()
        try:
            route, progress = await self._fetch(vehicle_id)
        except RouteError as exc:
            if generation == self._generation:
                self._error = str(exc)
            _logger.warning("Refresh failed for vehicle=%s: %s", vehicle_id, exc)
            return False

        if generation != self._generation:
            _logger.debug("Discarding superseded refresh for vehicle=%s", vehicle_id)
            return False

        self._commit(route, progress)
        self._error = None
        return True

    # ------------------------------------------------------------------
    # Stops
    # ------------------------------------------------------------------

    def view(self, stop_id: str | int) -> StopViewState:
        return self._views.get(str(stop_id))

    def is_updating(self, stop_id: str | int) -> bool:
        return self._views.is_updating(str(stop_id))

    def notes_for(self, stop_id: str | int) -> str:
        return self.view(stop_id).notes

    def set_notes(self, stop_id: str | int, text: str) -> None:
        self.view(stop_id).notes = text

    def toggle_notes(self, stop_id: str | int) -> bool:
        view = self.view(stop_id)
        view.show_notes = not view.show_notes
        return view.show_notes

    async def _report(self, exc: RouteError) -> None:
        if self._alert is None:
            raise exc
        await self._alert(str(exc))

    async def transition_stop(
        self,
        stop_id: str | int,
        new_status: StopStatus | str,
        notes: str | None = None,
    ) -> bool:
        """Complete or skip a stop, then refresh the route.

        *notes* defaults to the stop's notes draft.  Returns ``True`` when
        the backend accepted the update.  A request for a stop that is
        already updating is ignored and returns ``False``.
        """
        route = self._route
        if not self.is_logged_in or route is None:
            await self._report(RouteError("Not logged in"))
            return False

        stop = route.stop(stop_id)
        if stop is None:
            await self._report(StopTransitionError(f"Stop {stop_id} is not on this route", stop_id=str(stop_id)))
            return False

        if notes is None:
            notes = self.notes_for(stop.stop_id)

        try:
            await self._engine.transition(stop, new_status, notes)
        except StopUpdateInProgressError:
            _logger.debug("Ignoring duplicate update for stop %s", stop.stop_id)
            return False
        except RouteError as exc:
            await self._report(exc)
            return False

        await self.refresh()
        return True
