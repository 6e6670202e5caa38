"""
Demo command executor.

Applies demo commands to a TrackerSession and records what happened as
human-readable log lines.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, List, Optional

import requests

from surfside_tracker import (
    ConfigurationError,
    DeliveryError,
    Product,
    TrackerSession,
    ValidationError,
    screen_view,
    self_describing,
)

from .commands import (
    ClearLogs,
    DebugEventFlow,
    InitializeTracker,
    PurchaseProduct,
    TrackBasicEvent,
    TrackScreenView,
    UpdateLocation,
    UpdateSegment,
    UpdateSource,
    ViewProduct,
)

logger = logging.getLogger(__name__)

# Location set right after initialization
INITIAL_LOCATION = {
    "latitude": "37.7749",
    "longitude": "-122.4194",
    "country_code": "US",
    "state": "CA",
    "city": "San Francisco",
}


def _price_line(product: Product) -> str:
    """Price and quantity as shown in the log, e.g. "($29.99 x2)"."""
    price = "no price" if product.price is None else f"${product.price:.2f}"
    quantity = "" if product.quantity is None else f" x{product.quantity}"
    return f"({price}{quantity})"


class LogBuffer:
    """In-memory, thread-safe list of timestamped log lines."""

    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        self._lines: List[str] = []
        self._lock = threading.Lock()
        self._clock = clock

    def append(self, message: str) -> None:
        stamp = self._clock().strftime("%H:%M:%S")
        with self._lock:
            self._lines.append(f"[{stamp}] {message}")

    def lines(self) -> List[str]:
        """Numbered copy of the buffered lines."""
        with self._lock:
            return [f"{i}. {line}" for i, line in enumerate(self._lines, start=1)]

    def clear(self) -> None:
        with self._lock:
            self._lines.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._lines)


class CommandStatus(Enum):
    OK = "ok"
    NOT_READY = "not_ready"
    ERROR = "error"


@dataclass
class CommandOutcome:
    """Result of executing one command."""
    status: CommandStatus
    messages: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status is CommandStatus.OK

    def to_dict(self) -> Dict:
        return {"status": self.status.value, "messages": list(self.messages)}


class CommandExecutor:
    """Runs demo commands against a tracker session."""

    def __init__(
        self,
        session: Optional[TrackerSession] = None,
        log: Optional[LogBuffer] = None,
        emitter_options: Optional[Dict] = None,
        http_session_factory: Optional[Callable[[], requests.Session]] = None,
    ):
        """Initialize the executor.

        Args:
            session: Tracker session to drive (a fresh one is created if omitted)
            log: Log buffer receiving the demo's log lines
            emitter_options: Emitter settings passed on initialization
            http_session_factory: Builds the HTTP session used by the emitter
        """
        self.session = session if session is not None else TrackerSession()
        self.log = log if log is not None else LogBuffer()
        self.emitter_options = dict(emitter_options or {})
        self.http_session_factory = http_session_factory
        # One command at a time; ContextRegistry expects a single writer
        self._lock = threading.Lock()
        self._handlers = {
            InitializeTracker: self._initialize,
            DebugEventFlow: self._debug_event_flow,
            ClearLogs: self._clear_logs,
            UpdateLocation: self._update_location,
            UpdateSource: self._update_source,
            UpdateSegment: self._update_segment,
            TrackScreenView: self._track_screen_view,
            TrackBasicEvent: self._track_basic_event,
            ViewProduct: self._view_product,
            PurchaseProduct: self._purchase_product,
        }

    def execute(self, command) -> CommandOutcome:
        """Apply *command* and return what happened."""
        handler = self._handlers.get(type(command))
        if handler is None:
            raise TypeError(f"Unsupported command: {type(command).__name__}")

        messages: List[str] = []

        def say(message: str) -> None:
            messages.append(message)
            self.log.append(message)

        with self._lock:
            try:
                status = handler(command, say)
            except (ConfigurationError, ValidationError) as e:
                logger.warning(f"{type(command).__name__} failed: {e}")
                say(f"❌ Error: {e}")
                status = CommandStatus.ERROR
        return CommandOutcome(status=status, messages=messages)

    def status(self) -> Dict:
        """Snapshot of the session for display."""
        tracker = self.session.tracker
        if tracker is None:
            return {"initialized": False}
        emitter = tracker.emitter
        return {
            "initialized": True,
            "namespace": tracker.namespace,
            "endpoint": emitter.endpoint,
            "pending": emitter.pending_count,
            "sent": emitter.sent_count,
            "dropped": emitter.dropped_count,
        }

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def _initialize(self, command: InitializeTracker, say) -> CommandStatus:
        say("Starting tracker initialization...")
        say(f"Creating tracker with namespace: {command.namespace}")
        say(f"Account ID: {command.account_id}, Source ID: {command.source_id}")

        options = dict(self.emitter_options)
        if self.http_session_factory is not None:
            options["session"] = self.http_session_factory()
        bundle = self.session.initialize(
            command.namespace,
            command.environment,
            command.account_id,
            command.source_id,
            endpoint=command.endpoint,
            on_success=self._on_delivered,
            on_failure=self._on_failed,
            **options,
        )
        say(f"🌐 Network endpoint configured: {bundle.tracker.emitter.endpoint}")
        say("✅ Tracker initialized successfully!")
        say(f"📡 Source event fired with accountId: {command.account_id}, sourceId: {command.source_id}")

        self.session.set_location(**INITIAL_LOCATION)
        say(f"📍 Location set: {INITIAL_LOCATION['city']} "
            f"({INITIAL_LOCATION['latitude']}, {INITIAL_LOCATION['longitude']})")

        say("🚀 Flushing any pending events...")
        self.session.flush()
        say("✅ Initialization complete - tracker ready for events")
        return CommandStatus.OK

    def _debug_event_flow(self, command: DebugEventFlow, say) -> CommandStatus:
        if not self.session.is_initialized:
            return self._not_ready(say)
        say("🔍 Debug: Testing event flow...")
        say(f"🔍 Debug: Tracker namespace: {self.session.tracker.namespace}")
        event = self_describing(command.schema, {"test": command.test, "timestamp": time.time()})
        say("🔍 Debug: Sending test event...")
        self.session.track(event)
        say("🔍 Debug: Forcing flush...")
        self.session.flush()
        say("🔍 Debug: Test complete - check collector logs for delivery")
        return CommandStatus.OK

    def _clear_logs(self, command: ClearLogs, say) -> CommandStatus:
        self.log.clear()
        return CommandStatus.OK

    def _update_location(self, command: UpdateLocation, say) -> CommandStatus:
        say("📍 Updating location context...")
        result = self.session.set_location(
            command.latitude, command.longitude, command.country_code, command.state, command.city
        )
        if result.is_not_ready:
            return self._not_ready(say)
        say(f"✅ Location updated: {command.city} ({command.latitude}, {command.longitude})")
        return self._flush(say, "🚀 Location update flushed to collector")

    def _update_source(self, command: UpdateSource, say) -> CommandStatus:
        say("📡 Updating source context...")
        result = self.session.set_source(command.account_id, command.source_id)
        if result.is_not_ready:
            return self._not_ready(say)
        say(f"✅ Source updated: accountId={command.account_id}, sourceId={command.source_id}")
        return self._flush(say, "🚀 Source update flushed to collector")

    def _update_segment(self, command: UpdateSegment, say) -> CommandStatus:
        say("🎯 Updating segment context...")
        result = self.session.set_segment(command.segment_id, command.segment_value)
        if result.is_not_ready:
            return self._not_ready(say)
        say(f"✅ Segment updated: {command.segment_id} = {command.segment_value}")
        return self._flush(say, "🚀 Segment update flushed to collector")

    def _track_screen_view(self, command: TrackScreenView, say) -> CommandStatus:
        say("🔥 Tracking screen view event...")
        result = self.session.track(screen_view(command.name))
        if result.is_not_ready:
            return self._not_ready(say)
        return self._flush(say, f"✅ Screen view '{command.name}' tracked and flushed")

    def _track_basic_event(self, command: TrackBasicEvent, say) -> CommandStatus:
        say("🔥 Tracking link click event...")
        event = self_describing(command.schema, {"targetUrl": command.target_url})
        result = self.session.track(event)
        if result.is_not_ready:
            return self._not_ready(say)
        say(f"Event schema: {event.name}")
        say(f"Event payload: targetUrl = {command.target_url}")
        return self._flush(say, "✅ Basic event tracked and flushed")

    def _view_product(self, command: ViewProduct, say) -> CommandStatus:
        say("🛍️ Starting commerce product view flow...")
        result = self.session.add_product(
            id=command.id, name=command.name, price=command.price, quantity=command.quantity
        )
        if result.is_not_ready:
            return self._not_ready(say)
        product = result.value[0]
        say(f"📦 Product context added: {product.id} {product.name} {_price_line(product)}")
        self.session.set_commerce_action("detail")
        say("✅ Commerce action 'detail' tracked with product context")
        return self._flush(say, "🚀 Events flushed to collector")

    def _purchase_product(self, command: PurchaseProduct, say) -> CommandStatus:
        say("🛒 Tracking purchase event...")
        result = self.session.add_product(**command.product_attributes())
        if result.is_not_ready:
            return self._not_ready(say)
        product = result.value[0]
        say(f"➕ Added purchase product: {product.name} {_price_line(product)}")
        self.session.set_commerce_action("purchase")
        say(f"🛒 Purchase event fired for {product.id} {_price_line(product)}")
        return self._flush(say, "🚀 Purchase events flushed to collector")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _flush(self, say, message: str) -> CommandStatus:
        self.session.flush()
        say(message)
        return CommandStatus.OK

    def _not_ready(self, say) -> CommandStatus:
        say("❌ Error: Tracker not initialized")
        return CommandStatus.NOT_READY

    def _on_delivered(self, count: int) -> None:
        self.log.append(f"📬 Collector accepted {count} event(s)")

    def _on_failed(self, error: DeliveryError) -> None:
        self.log.append(f"⚠️ Dropped {error.event_count} event(s) after {error.attempts} attempt(s): {error}")
