"""Helpers for safe debug logging.

Stop payloads carry free-text driver notes and customer addresses.  This
module shortens those before request/response bodies are emitted in
DEBUG traces, and drops credentials should a deployment add any headers.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

_SENSITIVE_VALUE_KEYS: frozenset[str] = frozenset(
    {
        "authorization",
        "cookie",
        "set-cookie",
        "token",
        "api_key",
    }
)

# Free-text fields: kept, but clipped hard.
_FREE_TEXT_KEYS: frozenset[str] = frozenset({"notes", "address"})
_FREE_TEXT_MAX = 24


def redact_for_log(value: Any, *, max_string: int = 512, _depth: int = 0) -> Any:
    """Return a redacted copy of *value* suitable for debug logs."""
    if _depth > 20:
        return "<max-depth>"

    if value is None:
        return None

    if isinstance(value, str):
        if len(value) > max_string:
            return f"{value[:max_string]}…<truncated>"
        return value

    if isinstance(value, (int, float, bool)):
        return value

    if isinstance(value, Mapping):
        redacted: dict[str, Any] = {}
        for k, v in value.items():
            key = str(k)
            lowered = key.lower()
            if lowered in _SENSITIVE_VALUE_KEYS:
                redacted[key] = "<redacted>"
            elif lowered in _FREE_TEXT_KEYS and isinstance(v, str):
                redacted[key] = redact_for_log(v, max_string=min(max_string, _FREE_TEXT_MAX), _depth=_depth + 1)
            else:
                redacted[key] = redact_for_log(v, max_string=max_string, _depth=_depth + 1)
        return redacted

    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return [redact_for_log(v, max_string=max_string, _depth=_depth + 1) for v in value]

    return repr(value)
