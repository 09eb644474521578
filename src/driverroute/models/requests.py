"""Pydantic request models for client entrypoints.

These models provide a consistent "validate → normalize → execute" flow.
They are used internally by :class:`driverroute.client.RouteClient`.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from driverroute.models.route import StopStatus


class VehicleRequest(BaseModel):
    """Request containing a vehicle id."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_default=True,
        str_strip_whitespace=True,
    )

    vehicle_id: str

    @field_validator("vehicle_id")
    @classmethod
    def _vehicle_id_non_empty(cls, value: str) -> str:
        vehicle_id = value.strip()
        if not vehicle_id:
            raise ValueError("vehicle_id must be non-empty")
        return vehicle_id


class StopRequest(BaseModel):
    """Request addressing a single stop."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    stop_id: str

    @field_validator("stop_id", mode="before")
    @classmethod
    def _stop_id_non_empty(cls, value: Any) -> str:
        stop_id = str(value).strip()
        if not stop_id:
            raise ValueError("stop_id must be non-empty")
        return stop_id


class StopStatusUpdate(BaseModel):
    """Body of ``PATCH /route_stops/{stop_id}``.

    ``actual_arrival`` is set only for completed stops; blank notes are
    sent as ``null``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    status: StopStatus
    actual_arrival: datetime | None = None
    notes: str | None = None

    @field_validator("notes", mode="before")
    @classmethod
    def _blank_notes_to_none(cls, value: Any) -> str | None:
        if value is None:
            return None
        text = str(value)
        return text if text.strip() else None

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready body with the backend's field names."""
        return self.model_dump(mode="json")
