"""Backend endpoint helpers (internal)."""
