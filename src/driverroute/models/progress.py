"""Route progress model."""

from __future__ import annotations

from pydantic import AliasChoices, Field, model_validator

from driverroute.models._base import RouteBaseModel


class Progress(RouteBaseModel):
    """Aggregate completion metrics for a route.

    ``completed`` is clamped into ``0..total_stops`` and
    ``progress_percentage`` into ``0..100`` so a misbehaving backend
    cannot produce an impossible snapshot.
    """

    completed: int = Field(default=0, validation_alias=AliasChoices("completed",))
    total_stops: int = Field(default=0, validation_alias=AliasChoices("total_stops", "totalStops"))
    progress_percentage: float = Field(
        default=0,
        validation_alias=AliasChoices("progress_percentage", "progressPercentage", "percentage"),
    )

    @model_validator(mode="after")
    def _clamp(self) -> Progress:
        total = max(self.total_stops, 0)
        completed = min(max(self.completed, 0), total)
        percentage = min(max(self.progress_percentage, 0.0), 100.0)
        object.__setattr__(self, "total_stops", total)
        object.__setattr__(self, "completed", completed)
        object.__setattr__(self, "progress_percentage", percentage)
        return self
