"""Display metadata for stop statuses."""

from __future__ import annotations

from types import MappingProxyType

from pydantic import BaseModel, ConfigDict

from driverroute.models.route import StopStatus


class StatusDisplay(BaseModel):
    """Label, color and icon name shown for a stop status."""

    model_config = ConfigDict(frozen=True)

    label: str
    color: str
    icon: str


STATUS_DISPLAY = MappingProxyType(
    {
        StopStatus.PENDING: StatusDisplay(label="Pending", color="gray", icon="clock"),
        StopStatus.IN_TRANSIT: StatusDisplay(label="In Transit", color="blue", icon="map-pin"),
        StopStatus.COMPLETED: StatusDisplay(label="Completed", color="green", icon="check-circle"),
        StopStatus.SKIPPED: StatusDisplay(label="Skipped", color="yellow", icon="x-circle"),
        StopStatus.DELAYED: StatusDisplay(label="Delayed", color="orange", icon="alert-circle"),
        StopStatus.FAILED: StatusDisplay(label="Failed", color="red", icon="x-circle"),
    }
)


def display_for(status: StopStatus | str | None) -> StatusDisplay:
    """Return display metadata for *status*.

    Unrecognized statuses render like ``pending``.
    """
    if status is None:
        return STATUS_DISPLAY[StopStatus.PENDING]
    resolved = status if isinstance(status, StopStatus) else StopStatus(str(status))
    return STATUS_DISPLAY.get(resolved, STATUS_DISPLAY[StopStatus.PENDING])
