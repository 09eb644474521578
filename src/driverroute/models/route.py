"""Route and stop models."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, Field, field_validator

from driverroute.models._base import RouteBaseModel, RouteEnum


class StopStatus(RouteEnum):
    """Lifecycle status of a stop as reported by the backend."""

    UNKNOWN = "unknown"
    PENDING = "pending"
    IN_TRANSIT = "in_transit"
    COMPLETED = "completed"
    SKIPPED = "skipped"
    DELAYED = "delayed"
    FAILED = "failed"


class Stop(RouteBaseModel):
    """A single delivery/pickup location on a route.

    Stops are server-authoritative: after a status change the whole
    route is fetched again rather than patching an instance.
    """

    stop_id: str = Field(validation_alias=AliasChoices("stop_id", "stopId", "id"))
    sequence: int = Field(default=0, validation_alias=AliasChoices("stop_sequence", "sequence", "stopSequence"))
    """Driver-visible order, 1-based, not necessarily contiguous."""
    store_name: str = Field(default="", validation_alias=AliasChoices("store_name", "storeName"))
    address: str = Field(default="", validation_alias=AliasChoices("address",))
    status: StopStatus = Field(default=StopStatus.PENDING, validation_alias=AliasChoices("status",))
    actual_arrival: datetime | None = Field(
        default=None,
        validation_alias=AliasChoices("actual_arrival", "actualArrival"),
    )
    notes: str | None = Field(default=None, validation_alias=AliasChoices("notes",))

    @field_validator("stop_id", mode="before")
    @classmethod
    def _coerce_stop_id(cls, value: Any) -> str:
        # The backend uses integer primary keys; ids are opaque to the client.
        if isinstance(value, bool):
            raise ValueError("stop_id must be a string or integer")
        text = str(value).strip()
        if not text:
            raise ValueError("stop_id must be non-empty")
        return text

    @field_validator("status", mode="before")
    @classmethod
    def _coerce_status(cls, value: Any) -> StopStatus:
        return StopStatus(str(value))

    @property
    def is_actionable(self) -> bool:
        """Whether the driver may still act on this stop."""
        return self.status is StopStatus.PENDING


class Route(RouteBaseModel):
    """An ordered collection of stops assigned to one vehicle."""

    vehicle_id: str = Field(default="", validation_alias=AliasChoices("vehicle_id", "vehicleId"))
    driver_name: str | None = Field(default=None, validation_alias=AliasChoices("driver_name", "driverName"))
    stops: list[Stop] = Field(default_factory=list)

    @property
    def ordered_stops(self) -> list[Stop]:
        """Stops in driver-visible order (by ``sequence``, stable for ties)."""
        return sorted(self.stops, key=lambda stop: stop.sequence)

    def stop(self, stop_id: str | int) -> Stop | None:
        """Return the stop with *stop_id*, or ``None``."""
        wanted = str(stop_id)
        for candidate in self.stops:
            if candidate.stop_id == wanted:
                return candidate
        return None
