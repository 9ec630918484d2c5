"""
Error taxonomy for the op client.

SessionError and QueryError are recoverable by the caller (re-authenticate,
or treat as absence). ProtocolError and SpawnError are fatal and are never
retried by the client.
"""

from __future__ import annotations


class OnePasswordError(Exception):
    """Base class for every error raised by opclient."""


class SessionError(OnePasswordError):
    """The session is expired locally or was rejected by the op tool."""

    def __init__(self, message: str = "Session invalid") -> None:
        super().__init__(message)


class QueryError(OnePasswordError):
    """The op tool rejected a well-formed request (e.g. item not found)."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ProtocolError(OnePasswordError):
    """The op tool's output matched neither the success nor the error envelope."""

    def __init__(self, message: str, output: str = "") -> None:
        super().__init__(message)
        # Truncated; payloads can hold secrets and be very large
        self.output = output[:200]


class SpawnError(OnePasswordError):
    """The op subprocess could not be started."""


class CommandTimeoutError(SpawnError):
    """The op subprocess did not exit within the configured timeout."""
