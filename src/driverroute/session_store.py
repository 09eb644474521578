"""Persistence of the last-used vehicle id across restarts."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Protocol

from driverroute._constants import SESSION_VEHICLE_KEY

_logger = logging.getLogger(__name__)


class SessionStore(Protocol):
    """Storage capability for the persisted vehicle id.

    Written on login, cleared on logout, read once at startup.
    """

    def get(self) -> str | None:
        ...

    def set(self, vehicle_id: str) -> None:
        ...

    def clear(self) -> None:
        ...


def _normalize(vehicle_id: str | None) -> str | None:
    if vehicle_id is None:
        return None
    stripped = vehicle_id.strip()
    return stripped or None


class MemorySessionStore:
    """In-process store, used by tests and short-lived tools."""

    def __init__(self, vehicle_id: str | None = None) -> None:
        self._vehicle_id = _normalize(vehicle_id)

    def get(self) -> str | None:
        return self._vehicle_id

    def set(self, vehicle_id: str) -> None:
        normalized = _normalize(vehicle_id)
        if normalized is None:
            raise ValueError("vehicle_id must be non-empty")
        self._vehicle_id = normalized

    def clear(self) -> None:
        self._vehicle_id = None


class FileSessionStore:
    """JSON file store: ``{"vehicleId": "<id>"}``.

    A missing, unreadable or malformed file reads as "no session".
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path).expanduser()

    @property
    def path(self) -> Path:
        return self._path

    def get(self) -> str | None:
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError:
            _logger.warning("Could not read session file %s", self._path, exc_info=True)
            return None

        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            _logger.warning("Ignoring malformed session file %s", self._path)
            return None

        if not isinstance(data, dict):
            return None
        value = data.get(SESSION_VEHICLE_KEY)
        return _normalize(value) if isinstance(value, str) else None

    def set(self, vehicle_id: str) -> None:
        normalized = _normalize(vehicle_id)
        if normalized is None:
            raise ValueError("vehicle_id must be non-empty")
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_name(f"{self._path.name}.tmp")
        tmp_path.write_text(json.dumps({SESSION_VEHICLE_KEY: normalized}), encoding="utf-8")
        os.replace(tmp_path, self._path)
        _logger.debug("Persisted vehicle id to %s", self._path)

    def clear(self) -> None:
        self._path.unlink(missing_ok=True)
        _logger.debug("Cleared session file %s", self._path)
