"""
Tracker session

Two-state lifecycle around a tracker: Uninitialized until ``initialize()``
succeeds, Initialized afterwards. Operations issued before initialization
return a NotReady result instead of silently doing nothing.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

from .errors import ConfigurationError
from .helper import TrackerBundle, create_tracker
from .models.events import Event
from .plugin import SurfsidePlugin
from .tracker import Tracker, TrackerRegistry

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SessionState(Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"


@dataclass(frozen=True)
class SessionResult(Generic[T]):
    """Outcome of a session operation."""
    operation: str
    ready: bool
    value: Optional[T] = None

    @classmethod
    def ok(cls, operation: str, value: Optional[T] = None) -> "SessionResult[T]":
        """Create a result for an operation that ran."""
        return cls(operation=operation, ready=True, value=value)

    @classmethod
    def not_ready(cls, operation: str) -> "SessionResult[T]":
        """Create a result for an operation refused before initialization."""
        return cls(operation=operation, ready=False)

    @property
    def is_not_ready(self) -> bool:
        return not self.ready


class TrackerSession:
    """Owns at most one tracker and the plugin it is registered with."""

    def __init__(self, registry: Optional[TrackerRegistry] = None):
        self.registry = registry if registry is not None else TrackerRegistry()
        self._bundle: Optional[TrackerBundle] = None

    @property
    def state(self) -> SessionState:
        return SessionState.INITIALIZED if self._bundle else SessionState.UNINITIALIZED

    @property
    def is_initialized(self) -> bool:
        return self._bundle is not None

    @property
    def tracker(self) -> Optional[Tracker]:
        return self._bundle.tracker if self._bundle else None

    @property
    def plugin(self) -> Optional[SurfsidePlugin]:
        return self._bundle.plugin if self._bundle else None

    def initialize(self, namespace: str, environment: Any, account_id: str, source_id: str,
                   endpoint: Optional[str] = None, **options: Any) -> TrackerBundle:
        """Move to the Initialized state.

        Raises:
            ConfigurationError: If the session is already initialized or the
                tracker configuration is invalid
        """
        if self._bundle is not None:
            raise ConfigurationError(
                f"Session already initialized with tracker '{self._bundle.tracker.namespace}'"
            )
        self._bundle = create_tracker(
            self.registry, namespace, environment, account_id, source_id,
            endpoint=endpoint, **options,
        )
        return self._bundle

    def track(self, event: Event) -> SessionResult[str]:
        if not self._bundle:
            return self._refuse("track")
        return SessionResult.ok("track", self._bundle.tracker.track(event))

    def flush(self) -> SessionResult:
        if not self._bundle:
            return self._refuse("flush")
        return SessionResult.ok("flush", self._bundle.tracker.flush())

    def set_location(self, latitude: str, longitude: str, country_code: Optional[str] = None,
                     state: Optional[str] = None, city: Optional[str] = None) -> SessionResult:
        if not self._bundle:
            return self._refuse("set_location")
        self._bundle.plugin.set_location(latitude, longitude, country_code, state, city)
        return SessionResult.ok("set_location")

    def set_source(self, account_id: str, source_id: str) -> SessionResult:
        if not self._bundle:
            return self._refuse("set_source")
        return SessionResult.ok("set_source", self._bundle.plugin.source(account_id, source_id))

    def set_segment(self, segment_id: str, segment_value: str) -> SessionResult:
        if not self._bundle:
            return self._refuse("set_segment")
        self._bundle.plugin.segment(segment_id, segment_value)
        return SessionResult.ok("set_segment")

    def add_product(self, **attributes: Any) -> SessionResult:
        if not self._bundle:
            return self._refuse("add_product")
        return SessionResult.ok("add_product", self._bundle.plugin.add_product(**attributes))

    def set_commerce_action(self, action: str) -> SessionResult:
        if not self._bundle:
            return self._refuse("set_commerce_action")
        return SessionResult.ok("set_commerce_action", self._bundle.plugin.set_commerce_action(action))

    def shutdown(self, wait: bool = True) -> None:
        """Release the tracker; the session stays Initialized."""
        self.registry.shutdown(wait=wait)

    def _refuse(self, operation: str) -> SessionResult:
        logger.warning(f"'{operation}' called before the tracker was initialized")
        return SessionResult.not_ready(operation)
