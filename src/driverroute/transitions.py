"""Stop status transitions initiated by the driver.

A stop leaves ``pending`` exactly once from this client: the driver
either completes it or skips it.  ``in_transit``, ``delayed`` and
``failed`` are set by dispatch/backend and are never offered here.

The engine never changes a :class:`~driverroute.models.Stop` locally.
After the backend accepts an update the caller must fetch the route
again; after a rejection the stop is still ``pending`` because nothing
was touched.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from types import MappingProxyType
from typing import Protocol

from driverroute.exceptions import InvalidTransitionError, RouteError, StopUpdateInProgressError
from driverroute.models.command_responses import StopUpdateAck
from driverroute.models.requests import StopStatusUpdate
from driverroute.models.route import Stop, StopStatus
from driverroute.state.view import StopViewRegistry

_logger = logging.getLogger(__name__)

DRIVER_TRANSITIONS = MappingProxyType(
    {
        StopStatus.PENDING: frozenset({StopStatus.COMPLETED, StopStatus.SKIPPED}),
    }
)


class StopUpdater(Protocol):
    async def update_stop_status(self, stop_id: str, update: StopStatusUpdate) -> StopUpdateAck:
        ...


def _utcnow() -> datetime:
    return datetime.now(UTC)


def allowed_transitions(stop: Stop) -> frozenset[StopStatus]:
    """Statuses the driver may move *stop* to."""
    return DRIVER_TRANSITIONS.get(stop.status, frozenset())


def build_update(new_status: StopStatus, notes: str | None = None, *, now: datetime | None = None) -> StopStatusUpdate:
    """Build the PATCH body for a transition.

    ``actual_arrival`` is stamped only when completing a stop.
    """
    arrival: datetime | None = None
    if new_status is StopStatus.COMPLETED:
        arrival = now if now is not None else _utcnow()
    return StopStatusUpdate(status=new_status, actual_arrival=arrival, notes=notes)


class StatusTransitionEngine:
    """Validates and submits driver-initiated stop transitions.

    Parameters
    ----------
    updater
        Anything with ``update_stop_status`` (normally a
        :class:`~driverroute.client.RouteClient`).
    views
        Per-stop view state; its ``updating`` flag is the in-flight guard.
    clock
        Source of the arrival timestamp for completed stops; defaults to
        the current UTC time.
    """

    def __init__(
        self,
        updater: StopUpdater,
        views: StopViewRegistry | None = None,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._updater = updater
        self._views = views if views is not None else StopViewRegistry()
        self._clock = clock or _utcnow

    @property
    def views(self) -> StopViewRegistry:
        return self._views

    def can_transition(self, stop: Stop, new_status: StopStatus | str) -> bool:
        target = StopStatus(str(new_status))
        return target in allowed_transitions(stop) and not self._views.is_updating(stop.stop_id)

    def _check(self, stop: Stop, target: StopStatus) -> None:
        if not stop.is_actionable:
            raise InvalidTransitionError(
                f"Stop {stop.stop_id} is {stop.status.value}; only pending stops can be updated",
                stop_id=stop.stop_id,
            )
        if target not in allowed_transitions(stop):
            raise InvalidTransitionError(
                f"Cannot set stop {stop.stop_id} to {target.value} from this client",
                stop_id=stop.stop_id,
            )
        if self._views.is_updating(stop.stop_id):
            raise StopUpdateInProgressError(
                f"Stop {stop.stop_id} is already being updated",
                stop_id=stop.stop_id,
            )

    async def transition(
        self,
        stop: Stop,
        new_status: StopStatus | str,
        notes: str | None = None,
    ) -> StopUpdateAck:
        """Submit *new_status* for *stop*.

        Raises
        ------
        InvalidTransitionError
            The stop is not pending or *new_status* is not driver-settable.
        StopUpdateInProgressError
            An update for this stop is already in flight.
        RouteError
            The backend rejected the update or could not be reached.
        """
        target = StopStatus(str(new_status))
        self._check(stop, target)

        view = self._views.get(stop.stop_id)
        update = build_update(target, notes, now=self._clock())
        view.updating = True
        try:
            ack = await self._updater.update_stop_status(stop.stop_id, update)
        except RouteError as exc:
            _logger.warning("Stop %s update to %s failed: %s", stop.stop_id, target.value, exc)
            raise
        finally:
            view.updating = False

        view.clear_draft()
        _logger.info("Stop %s marked %s", stop.stop_id, target.value)
        return ack
