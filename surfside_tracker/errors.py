"""
Error types raised by the tracker client.

ConfigurationError and ValidationError are raised synchronously to the caller.
DeliveryError is never raised past the emitter worker; it is handed to the
``on_failure`` callback and logged instead.
"""

from typing import Optional, Sequence


class TrackerError(Exception):
    """Base class for all tracker client errors."""


class ConfigurationError(TrackerError):
    """Bad or duplicate namespace, malformed endpoint, unknown tracker."""


class ValidationError(TrackerError):
    """Event rejected before it reached the queue."""


class DeliveryError(TrackerError):
    """A batch could not be delivered to the collector."""

    def __init__(
        self,
        message: str,
        event_ids: Sequence[str] = (),
        attempts: int = 0,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.event_ids = list(event_ids)
        self.attempts = attempts
        self.status_code = status_code

    @property
    def event_count(self) -> int:
        return len(self.event_ids)
