"""Data models for route backend requests and responses."""

from driverroute.models._base import RouteBaseModel, RouteEnum
from driverroute.models.command_responses import StopUpdateAck
from driverroute.models.display import STATUS_DISPLAY, StatusDisplay, display_for
from driverroute.models.progress import Progress
from driverroute.models.requests import StopRequest, StopStatusUpdate, VehicleRequest
from driverroute.models.route import Route, Stop, StopStatus
from driverroute.models.session import LoginState, VehicleSession

__all__ = [
    "LoginState",
    "Progress",
    "Route",
    "RouteBaseModel",
    "RouteEnum",
    "STATUS_DISPLAY",
    "StatusDisplay",
    "Stop",
    "StopRequest",
    "StopStatus",
    "StopStatusUpdate",
    "StopUpdateAck",
    "VehicleRequest",
    "VehicleSession",
    "display_for",
]
