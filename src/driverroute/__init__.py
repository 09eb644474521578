"""driverroute - Async Python client for driver delivery routes."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pydriverroute")
except PackageNotFoundError:
    __version__ = "0+local"

from driverroute.client import RouteClient
from driverroute.config import RouteConfig
from driverroute.controller import SessionController
from driverroute.exceptions import (
    InvalidTransitionError,
    RouteBackendError,
    RouteConfigError,
    RouteError,
    RouteTransportError,
    RouteValidationError,
    StopTransitionError,
    StopUpdateInProgressError,
)
from driverroute.models import (
    LoginState,
    Progress,
    Route,
    StatusDisplay,
    Stop,
    StopStatus,
    StopStatusUpdate,
    StopUpdateAck,
    VehicleSession,
    display_for,
)
from driverroute.progress import aggregate, resolve_progress
from driverroute.session_store import FileSessionStore, MemorySessionStore, SessionStore
from driverroute.transitions import StatusTransitionEngine, build_update

__all__ = [
    "__version__",
    "FileSessionStore",
    "InvalidTransitionError",
    "LoginState",
    "MemorySessionStore",
    "Progress",
    "Route",
    "RouteBackendError",
    "RouteClient",
    "RouteConfig",
    "RouteConfigError",
    "RouteError",
    "RouteTransportError",
    "RouteValidationError",
    "SessionController",
    "SessionStore",
    "StatusDisplay",
    "StatusTransitionEngine",
    "Stop",
    "StopStatus",
    "StopStatusUpdate",
    "StopTransitionError",
    "StopUpdateAck",
    "StopUpdateInProgressError",
    "VehicleSession",
    "aggregate",
    "build_update",
    "display_for",
    "resolve_progress",
]
