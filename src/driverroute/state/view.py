"""Per-stop transient view state.

This state is never persisted and never sent to the backend; it only
tracks what the driver is doing with a stop right now.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass


@dataclass(slots=True)
class StopViewState:
    """Transient state for one stop card."""

    updating: bool = False
    notes: str = ""
    show_notes: bool = False

    def clear_draft(self) -> None:
        self.notes = ""
        self.show_notes = False


class StopViewRegistry:
    """View state keyed by stop id."""

    def __init__(self) -> None:
        self._stops: dict[str, StopViewState] = {}

    def get(self, stop_id: str) -> StopViewState:
        state = self._stops.get(stop_id)
        if state is None:
            state = StopViewState()
            self._stops[stop_id] = state
        return state

    def is_updating(self, stop_id: str) -> bool:
        state = self._stops.get(stop_id)
        return state is not None and state.updating

    def updating_stops(self) -> frozenset[str]:
        return frozenset(stop_id for stop_id, state in self._stops.items() if state.updating)

    def prune(self, keep: Iterable[str]) -> None:
        """Drop state for stops no longer on the route.

        Entries with an in-flight update are kept until the update finishes.
        """
        wanted = set(keep)
        self._stops = {
            stop_id: state for stop_id, state in self._stops.items() if stop_id in wanted or state.updating
        }

    def clear(self) -> None:
        self._stops.clear()
