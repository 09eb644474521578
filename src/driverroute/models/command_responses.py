"""Typed responses for write endpoints.

``PATCH /route_stops/{id}`` returns either the updated stop or a bare
acknowledgement.  The model keeps the raw payload for forward
compatibility; callers must still re-fetch the route since the
acknowledgement is not merged into local state.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict

from driverroute.models.route import StopStatus


class StopUpdateAck(BaseModel):
    """Acknowledgement of a stop status update."""

    model_config = ConfigDict(frozen=True)

    stop_id: str
    status: StopStatus | None
    raw: dict[str, Any]

    @classmethod
    def from_response(cls, stop_id: str, response: Any) -> StopUpdateAck:
        raw = response if isinstance(response, dict) else {}
        status_value = raw.get("status")
        status = StopStatus(str(status_value)) if status_value else None
        return cls(stop_id=stop_id, status=status, raw=raw)
