"""Vehicle session model."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, field_validator


class LoginState(StrEnum):
    LOGGED_OUT = "logged_out"
    LOGGING_IN = "logging_in"
    LOGGED_IN = "logged_in"


class VehicleSession(BaseModel):
    """The vehicle a driver is currently working a route for."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        str_strip_whitespace=True,
    )

    vehicle_id: str
    logged_in: bool = False

    @field_validator("vehicle_id")
    @classmethod
    def _vehicle_id_non_empty(cls, value: str) -> str:
        vehicle_id = value.strip()
        if not vehicle_id:
            raise ValueError("vehicle_id must be non-empty")
        return vehicle_id
