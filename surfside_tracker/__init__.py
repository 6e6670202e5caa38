"""
Surfside Tracker

A client for Surfside/Snowplow-style analytics collectors: a tracker accepts
events, a context registry decorates them and an emitter delivers them in
batches from a background worker.
"""

from .context_registry import ContextRegistry
from .emitter import Emitter
from .errors import ConfigurationError, DeliveryError, TrackerError, ValidationError
from .event_types import CommerceActionType, Environment, EventType
from .helper import TrackerBundle, create_tracker
from .models import (
    Event,
    Location,
    Product,
    Segment,
    Source,
    TrackedEvent,
    commerce_action,
    screen_view,
    self_describing,
    source_event,
)
from .plugin import SurfsidePlugin
from .session import SessionResult, SessionState, TrackerSession
from .tracker import Credentials, Tracker, TrackerRegistry

__version__ = "0.1.0"

__all__ = [
    # Core
    "Tracker",
    "TrackerRegistry",
    "Credentials",
    "Emitter",
    "ContextRegistry",
    "SurfsidePlugin",
    "TrackerSession",
    "SessionResult",
    "SessionState",
    "TrackerBundle",
    "create_tracker",

    # Events and contexts
    "Event",
    "EventType",
    "CommerceActionType",
    "Environment",
    "TrackedEvent",
    "Location",
    "Product",
    "Segment",
    "Source",
    "commerce_action",
    "screen_view",
    "self_describing",
    "source_event",

    # Errors
    "TrackerError",
    "ConfigurationError",
    "DeliveryError",
    "ValidationError",
]
