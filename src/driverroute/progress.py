"""Route progress aggregation.

The backend's progress endpoint is authoritative.  :func:`aggregate`
recomputes the same metrics from a stop list and is used when no
backend snapshot is available.
"""

from __future__ import annotations

from collections.abc import Iterable

from driverroute.models.progress import Progress
from driverroute.models.route import Route, Stop, StopStatus


def completion_percentage(completed: int, total: int) -> int:
    """``round(100 * completed / total)`` with halves rounded up, 0 for an empty route."""
    if total <= 0:
        return 0
    # Integer form of floor(100 * completed / total + 0.5).
    return (200 * completed + total) // (2 * total)


def aggregate(route: Route | Iterable[Stop]) -> Progress:
    """Compute progress from the stops' statuses.

    Only ``completed`` stops count toward completion; skipped, failed
    and delayed stops do not.
    """
    stops = route.stops if isinstance(route, Route) else list(route)
    total = len(stops)
    completed = sum(1 for stop in stops if stop.status is StopStatus.COMPLETED)
    return Progress(
        completed=completed,
        total_stops=total,
        progress_percentage=completion_percentage(completed, total),
    )


def resolve_progress(route: Route | None, backend: Progress | None = None) -> Progress:
    """Prefer the backend snapshot, falling back to :func:`aggregate`."""
    if backend is not None:
        return backend
    if route is None:
        return Progress()
    return aggregate(route)


def percentage_for_display(progress: Progress | None) -> float:
    """Width of a progress bar in percent; ``0`` when unknown."""
    if progress is None:
        return 0.0
    return progress.progress_percentage or 0.0


def describe(progress: Progress) -> str:
    return f"{progress.completed} of {progress.total_stops} completed"
