"""Transient client-side state.

Per-stop view state (``updating`` flag, notes draft) lives here, kept
apart from the server-authoritative :class:`~driverroute.models.Stop`.
"""
