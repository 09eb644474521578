"""JSON-over-HTTP transport for the route backend."""

from __future__ import annotations

import json
import logging
from http import HTTPStatus
from typing import Any, Protocol

import aiohttp

from driverroute._constants import USER_AGENT
from driverroute._redact import redact_for_log
from driverroute.config import RouteConfig
from driverroute.exceptions import RouteBackendError, RouteTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles/mocks while
    keeping the production implementation (`HttpTransport`) concrete.
    """

    async def request_json(self, method: str, endpoint: str, *, payload: Any = None) -> Any:
        ...


def _status_text(status: int, reason: str | None) -> str:
    """HTTP status text, falling back to the standard phrase when the server sends none."""
    if reason:
        return reason
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return f"HTTP {status}"


class HttpTransport:
    """HTTP transport that sends and receives JSON bodies."""

    def __init__(
        self,
        config: RouteConfig,
        http_session: aiohttp.ClientSession,
    ) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    async def request_json(self, method: str, endpoint: str, *, payload: Any = None) -> Any:
        """Send a request and return the decoded JSON body.

        Raises
        ------
        RouteBackendError
            The backend answered with a non-2xx status.
        RouteTransportError
            The request could not be completed or the body is not JSON.
        """
        headers: dict[str, str] = {
            "accept": "application/json",
            "user-agent": USER_AGENT,
        }
        data: str | None = None
        if payload is not None:
            headers["content-type"] = "application/json"
            data = json.dumps(payload, separators=(",", ":"))

        url = f"{self._config.base_url}{endpoint}"
        _logger.debug("%s %s", method, url)
        if self._config.api_trace_enabled and payload is not None:
            _logger.debug("request body: %s", redact_for_log(payload))

        try:
            async with self._http.request(method, url, data=data, headers=headers, timeout=self._timeout) as resp:
                body = await resp.read()
                if not 200 <= resp.status < 300:
                    reason = _status_text(resp.status, resp.reason)
                    raise RouteBackendError(
                        f"HTTP {resp.status} from {endpoint}: {reason}",
                        status_code=resp.status,
                        reason=reason,
                        endpoint=endpoint,
                    )
        except RouteBackendError:
            raise
        except TimeoutError as exc:
            raise RouteTransportError(
                f"Request to {endpoint} timed out after {self._config.request_timeout}s",
                endpoint=endpoint,
            ) from exc
        except aiohttp.ClientError as exc:
            raise RouteTransportError(
                f"Request to {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc

        if not body.strip():
            return {}

        try:
            result = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise RouteTransportError(
                f"Invalid response body from {endpoint}: {body[:200]!r}",
                endpoint=endpoint,
            ) from exc

        if self._config.api_trace_enabled:
            _logger.debug("response body from %s: %s", endpoint, redact_for_log(result))
        return result
