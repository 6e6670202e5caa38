"""
Tracker

Entry point for outbound activity: owns a namespace, an emitter and a context
registry. ``track()`` only enqueues; delivery happens when the emitter is
flushed.
"""

import logging
import uuid
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional
from urllib.parse import urlparse

from .context_registry import ContextRegistry
from .emitter import Emitter
from .errors import ConfigurationError
from .models.events import Event
from .models.payload import TrackedEvent

logger = logging.getLogger(__name__)

MessageCallback = Callable[[str], None]


@dataclass(frozen=True)
class Credentials:
    """Account and source identifiers supplied at initialization."""
    account_id: str
    source_id: str


class Tracker:
    """Accepts events and routes them to the emitter."""

    def __init__(
        self,
        namespace: str,
        emitter: Emitter,
        contexts: Optional[ContextRegistry] = None,
        app_id: Optional[str] = None,
        platform: str = "mob",
        on_message: Optional[MessageCallback] = None,
    ):
        self.namespace = namespace
        self.emitter = emitter
        self.contexts = contexts if contexts is not None else ContextRegistry(namespace)
        self.app_id = app_id
        self.platform = platform
        self.on_message = on_message

    def track(self, event: Event) -> str:
        """Queue *event* with a snapshot of the current contexts.

        Returns:
            The tracking id assigned to the event

        Raises:
            ValidationError: If the event is malformed; nothing is queued
        """
        event.validate()
        tracked = TrackedEvent(
            event_id=str(uuid.uuid4()),
            namespace=self.namespace,
            event=event,
            contexts=self.contexts.snapshot(),
            app_id=self.app_id,
            platform=self.platform,
        )
        self.emitter.enqueue(tracked)
        logger.debug(f"[{self.namespace}] queued {event.name} as {tracked.event_id}")
        self._message(f"Queued {event.name} event {tracked.event_id}")
        return tracked.event_id

    def track_commerce_action(self, action: str) -> str:
        """Turn the accumulated products into a commerce event and track it."""
        return self.track(self.contexts.set_commerce_action(action))

    def flush(self) -> Optional[Future]:
        """Trigger asynchronous delivery of pending events."""
        future = self.emitter.flush()
        if future is not None:
            self._message(f"Flush scheduled for {self.namespace}")
        return future

    def shutdown(self, wait: bool = True) -> None:
        self.emitter.shutdown(wait=wait)

    def _message(self, message: str) -> None:
        if self.on_message is None:
            return
        try:
            self.on_message(message)
        except Exception as e:
            logger.error(f"Message callback raised: {e}", exc_info=True)

    def __repr__(self) -> str:
        return f"Tracker(namespace={self.namespace!r}, endpoint={self.emitter.endpoint!r})"


def validate_endpoint(endpoint: str) -> str:
    """Return *endpoint* if it is an absolute http(s) URL.

    Raises:
        ConfigurationError: If the endpoint is malformed
    """
    if not isinstance(endpoint, str) or not endpoint.strip():
        raise ConfigurationError("Collector endpoint must be a non-empty URL")
    parsed = urlparse(endpoint.strip())
    if parsed.scheme not in ("http", "https"):
        raise ConfigurationError(f"Collector endpoint must use http or https: {endpoint}")
    if not parsed.netloc:
        raise ConfigurationError(f"Collector endpoint has no host: {endpoint}")
    return endpoint.strip()


class TrackerRegistry:
    """Owns the trackers of one application, keyed by namespace."""

    def __init__(self):
        self._trackers: Dict[str, Tracker] = {}

    def initialize(
        self,
        namespace: str,
        endpoint: str,
        credentials: Credentials,
        batch_size: Optional[int] = None,
        max_attempts: int = 3,
        retry_delay: float = 1.0,
        backoff_factor: float = 2.0,
        request_timeout: float = 5.0,
        app_id: Optional[str] = None,
        platform: str = "mob",
        session=None,
        on_success=None,
        on_failure=None,
        on_message: Optional[MessageCallback] = None,
    ) -> Tracker:
        """Create and register a tracker.

        No network call is made here: an unreachable collector only shows up
        when events are flushed.

        Raises:
            ConfigurationError: On an empty or duplicate namespace, malformed
                endpoint or missing credentials
        """
        if not isinstance(namespace, str) or not namespace.strip():
            raise ConfigurationError("Tracker namespace must be a non-empty string")
        if namespace in self._trackers:
            raise ConfigurationError(f"Tracker namespace '{namespace}' is already initialized")
        endpoint = validate_endpoint(endpoint)
        if credentials is None or not credentials.account_id or not credentials.source_id:
            raise ConfigurationError("Both account_id and source_id are required")

        emitter = Emitter(
            endpoint,
            batch_size=batch_size,
            max_attempts=max_attempts,
            retry_delay=retry_delay,
            backoff_factor=backoff_factor,
            request_timeout=request_timeout,
            session=session,
            on_success=on_success,
            on_failure=on_failure,
        )
        contexts = ContextRegistry(namespace)
        contexts.set_source(credentials.account_id, credentials.source_id)

        tracker = Tracker(
            namespace,
            emitter,
            contexts=contexts,
            app_id=app_id,
            platform=platform,
            on_message=on_message,
        )
        self._trackers[namespace] = tracker
        logger.info(f"Tracker '{namespace}' initialized for {endpoint}")
        return tracker

    def get(self, namespace: str) -> Optional[Tracker]:
        return self._trackers.get(namespace)

    def namespaces(self) -> List[str]:
        return list(self._trackers)

    def remove(self, namespace: str, wait: bool = True) -> None:
        """Shut down and forget the tracker registered under *namespace*."""
        tracker = self._trackers.pop(namespace, None)
        if tracker is None:
            raise ConfigurationError(f"No tracker registered for namespace '{namespace}'")
        tracker.shutdown(wait=wait)

    def shutdown(self, wait: bool = True) -> None:
        for namespace in list(self._trackers):
            self.remove(namespace, wait=wait)

    def __contains__(self, namespace: str) -> bool:
        return namespace in self._trackers

    def __len__(self) -> int:
        return len(self._trackers)
