"""Central error types used across the application."""

from __future__ import annotations


class MonotrackError(RuntimeError):
    """Base error for tracking engine failures."""


class FixSourceError(MonotrackError):
    """Raised or reported when the position fix source fails."""


class FixPermissionError(FixSourceError):
    """Raised when the host denies access to location updates."""


class FixTimeoutError(FixSourceError):
    """Raised when the fix source gives up waiting for a position."""


class StoreError(MonotrackError):
    """Raised when the route/marker store cannot be read or written."""


class ExportError(MonotrackError):
    """Raised when an export target cannot be written."""


__all__ = [
    "MonotrackError",
    "FixSourceError",
    "FixPermissionError",
    "FixTimeoutError",
    "StoreError",
    "ExportError",
]
