"""Custom exception hierarchy for bluetracker."""

from __future__ import annotations


class TrackerError(Exception):
    """Base exception for all bluetracker errors."""


class TrackerConfigError(TrackerError):
    """Invalid or missing configuration."""


class StatePersistenceError(TrackerError):
    """The backing state file could not be read or decoded.

    Hydration recovers from this locally (falls back to the defaults), so
    callers of :func:`bluetracker.state.hydrate` never see it.
    """


class TrackerTransportError(TrackerError):
    """HTTP-level failure talking to the forum (network, non-2xx, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        url: str = "",
    ) -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(message)


class DeliveryError(TrackerError):
    """A notification could not be delivered to any webhook.

    Raised out of the delivery step so the dedup tracker leaves the post
    unmarked; it is retried on the next poll pass.
    """

    def __init__(self, message: str, *, url: str = "") -> None:
        self.url = url
        super().__init__(message)
