#!/usr/bin/env python3
"""Interactive driver console.

A plain-text stand-in for the driver app: log in with a vehicle id,
list stops, complete or skip them, and refresh.  A failed stop update
blocks until you acknowledge it.

Usage
-----
::

    export DRIVERROUTE_BASE_URL="http://localhost:8000/api"
    python scripts/route_console.py

Commands::

    login [ID]          Log in (uses the remembered id when omitted)
    list                Show route progress and stops
    complete N          Complete stop with sequence/id N
    skip N              Skip stop N
    notes N TEXT        Set the notes sent with the next update of stop N
    refresh             Re-fetch route and progress
    logout              Forget the route and the remembered id
    quit                Exit
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from driverroute import (  # noqa: E402
    FileSessionStore,
    RouteClient,
    RouteConfig,
    SessionController,
    Stop,
    StopStatus,
    display_for,
)
from driverroute.progress import describe, percentage_for_display  # noqa: E402


async def _ainput(prompt: str) -> str:
    return await asyncio.to_thread(input, prompt)


async def _acknowledge(message: str) -> None:
    print(f"\n!! {message}")
    await _ainput("Press Enter to acknowledge...")


def _bar(percentage: float, width: int = 30) -> str:
    filled = int(round(width * percentage / 100))
    return "[" + "#" * filled + "-" * (width - filled) + "]"


def _stop_line(controller: SessionController, stop: Stop) -> str:
    display = display_for(stop.status)
    line = f"  #{stop.sequence:<3} {stop.store_name:<28} {display.label:<11} {stop.address}"
    if controller.is_updating(stop.stop_id):
        line += "  (updating...)"
    draft = controller.notes_for(stop.stop_id)
    if draft:
        line += f"\n        notes: {draft}"
    return line


def _render(controller: SessionController) -> None:
    route = controller.route
    if route is None:
        print("Loading route...")
        return
    header = f"Vehicle: {controller.session.vehicle_id if controller.session else controller.vehicle_id}"
    if route.driver_name:
        header += f" • {route.driver_name}"
    print(header)
    progress = controller.progress
    if progress is not None:
        print(f"Route Progress {_bar(percentage_for_display(progress))} {describe(progress)}")
    if controller.error:
        print(f"! {controller.error}")
    for stop in route.ordered_stops:
        print(_stop_line(controller, stop))


def _resolve_stop(controller: SessionController, token: str) -> Stop | None:
    """Find a stop by its sequence number first, then by id."""
    route = controller.route
    if route is None:
        return None
    for stop in route.stops:
        if str(stop.sequence) == token:
            return stop
    return route.stop(token)


async def _handle(controller: SessionController, command: str, args: list[str]) -> bool:
    if command in {"quit", "exit"}:
        return False

    if command == "login":
        ok = await controller.login(args[0] if args else None)
        if ok:
            _render(controller)
        else:
            print(f"! {controller.error}")
        return True

    if not controller.is_logged_in:
        print("Log in first: login <vehicle id>")
        return True

    if command == "list":
        _render(controller)
    elif command in {"complete", "skip"}:
        if not args:
            print(f"usage: {command} N")
            return True
        stop = _resolve_stop(controller, args[0])
        if stop is None:
            print(f"No stop {args[0]} on this route")
            return True
        target = StopStatus.COMPLETED if command == "complete" else StopStatus.SKIPPED
        if not controller.engine.can_transition(stop, target):
            print(f"Stop #{stop.sequence} is {display_for(stop.status).label}; nothing to do")
            return True
        if await controller.transition_stop(stop.stop_id, target):
            _render(controller)
    elif command == "notes":
        if len(args) < 1:
            print("usage: notes N TEXT")
            return True
        stop = _resolve_stop(controller, args[0])
        if stop is None:
            print(f"No stop {args[0]} on this route")
            return True
        controller.set_notes(stop.stop_id, " ".join(args[1:]))
    elif command == "refresh":
        await controller.refresh()
        _render(controller)
    elif command == "logout":
        controller.logout()
        print("Logged out.")
    else:
        print(f"Unknown command: {command}")
    return True


async def run() -> None:
    parser = argparse.ArgumentParser(description="Interactive driver route console")
    parser.add_argument("--base-url", help="Backend base URL (default: DRIVERROUTE_BASE_URL)")
    parser.add_argument("--session-file", help="Where the last vehicle id is remembered")
    parser.add_argument("--local-progress", action="store_true", help="Compute progress from stops")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    overrides: dict[str, object] = {}
    if args.base_url:
        overrides["base_url"] = args.base_url
    if args.session_file:
        overrides["session_file"] = Path(args.session_file)
    if args.local_progress:
        overrides["progress_from_backend"] = False
    config = RouteConfig.from_env(**overrides)

    async with RouteClient(config) as client:
        controller = SessionController(
            client,
            FileSessionStore(config.session_file),
            alert=_acknowledge,
            progress_from_backend=config.progress_from_backend,
        )
        print("Driver Portal")
        if controller.vehicle_id:
            print(f"Remembered vehicle: {controller.vehicle_id} (type 'login' to view the route)")
        else:
            print("Enter your vehicle ID to view your route (e.g. login 9540_0)")

        while True:
            try:
                line = await _ainput("> ")
            except EOFError:
                break
            parts = line.split()
            if not parts:
                continue
            if not await _handle(controller, parts[0].lower(), parts[1:]):
                break


def main() -> None:
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
