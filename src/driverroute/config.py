"""Client configuration for driverroute."""

from __future__ import annotations

import dataclasses
import os
from pathlib import Path
from typing import Any

from driverroute._constants import BASE_URL, DEFAULT_REQUEST_TIMEOUT
from driverroute.exceptions import RouteConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _default_session_file() -> Path:
    return Path.home() / ".driverroute" / "session.json"


@dataclasses.dataclass(frozen=True)
class RouteConfig:
    """Client configuration.

    Parameters
    ----------
    base_url : str
        Backend API base URL, without a trailing slash.
    request_timeout : float
        Total timeout in seconds for a single HTTP request.
    session_file : Path
        Location of the file that remembers the last-used vehicle id.
    api_trace_enabled : bool
        Log (redacted) request and response bodies at DEBUG level.
    progress_from_backend : bool
        Use the backend progress endpoint. When ``False`` progress is
        computed from the route's stops instead.
    """

    base_url: str = BASE_URL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    session_file: Path = dataclasses.field(default_factory=_default_session_file)
    api_trace_enabled: bool = False
    progress_from_backend: bool = True

    def __post_init__(self) -> None:
        if not self.base_url or not self.base_url.strip():
            raise RouteConfigError("base_url must be non-empty")
        if self.request_timeout <= 0:
            raise RouteConfigError(f"request_timeout must be positive, got {self.request_timeout}")
        object.__setattr__(self, "base_url", self.base_url.strip().rstrip("/"))
        object.__setattr__(self, "session_file", Path(self.session_file).expanduser())

    @classmethod
    def from_env(cls, **overrides: Any) -> RouteConfig:
        """Create configuration from environment variables.

        Reads ``DRIVERROUTE_BASE_URL``, ``DRIVERROUTE_REQUEST_TIMEOUT``,
        ``DRIVERROUTE_SESSION_FILE``, ``DRIVERROUTE_API_TRACE_ENABLED`` and
        ``DRIVERROUTE_PROGRESS_FROM_BACKEND``.
        Explicit keyword arguments override environment values.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        base_url = env.get("DRIVERROUTE_BASE_URL")
        if base_url is not None:
            config_kwargs["base_url"] = base_url

        timeout_env = env.get("DRIVERROUTE_REQUEST_TIMEOUT")
        if timeout_env is not None and "request_timeout" not in overrides:
            try:
                config_kwargs["request_timeout"] = float(timeout_env)
            except ValueError as exc:
                raise RouteConfigError(f"DRIVERROUTE_REQUEST_TIMEOUT is not a number: {timeout_env!r}") from exc

        session_file = env.get("DRIVERROUTE_SESSION_FILE")
        if session_file:
            config_kwargs["session_file"] = Path(session_file)

        if "api_trace_enabled" not in overrides:
            config_kwargs["api_trace_enabled"] = _env_bool(env.get("DRIVERROUTE_API_TRACE_ENABLED"), False)

        if "progress_from_backend" not in overrides:
            config_kwargs["progress_from_backend"] = _env_bool(env.get("DRIVERROUTE_PROGRESS_FROM_BACKEND"), True)

        config_kwargs.update(overrides)
        return cls(**config_kwargs)
