"""Base model and enum for route backend responses.

Every response model inherits from :class:`RouteBaseModel` which
provides:

* frozen instances, so a fetched snapshot is never patched in place.
* a ``model_validator(mode="before")`` that drops ``None`` and blank
  strings so the field default is used.
* a ``raw`` dict that captures the original payload.

Status enums inherit from :class:`RouteEnum` which resolves any value
without a mapped member to ``UNKNOWN`` instead of raising ``ValueError``.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class RouteEnum(StrEnum):
    """Base for backend string enums.

    Every subclass **must** define ``UNKNOWN``.
    """

    @classmethod
    def _missing_(cls, value: object) -> RouteEnum:
        if isinstance(value, str):
            normalized = value.strip().lower()
            for member in cls:
                if member.value == normalized:
                    return member
        if hasattr(cls, "UNKNOWN"):
            unknown: RouteEnum = cls.UNKNOWN  # type: ignore[attr-defined]
            return unknown
        return next(iter(cls))


class RouteBaseModel(BaseModel):
    """Base for route backend response models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    raw: dict[str, Any] = Field(default_factory=dict)
    """Original API response dict."""

    @staticmethod
    def _clean_dict(values: dict[str, Any]) -> dict[str, Any]:
        cleaned: dict[str, Any] = {}
        for key, value in values.items():
            if value is None:
                continue
            if isinstance(value, str) and not value.strip():
                continue
            cleaned[key] = value
        return cleaned

    @model_validator(mode="before")
    @classmethod
    def _clean_values(cls, values: Any) -> Any:
        """Drop empty values and stash the raw payload."""
        if not isinstance(values, dict):
            return values
        cleaned = RouteBaseModel._clean_dict(values)
        # Keep a caller-provided raw when constructing from kwargs.
        if "raw" not in values:
            cleaned["raw"] = dict(values)
        return cleaned
