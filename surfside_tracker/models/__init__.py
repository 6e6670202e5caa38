"""
Models package for the tracker client.

This package contains the event, context and wire payload models.
"""

from .contexts import (
    ContextEntity,
    Location,
    Product,
    Segment,
    Source,
)

from .events import (
    Event,
    commerce_action,
    screen_view,
    self_describing,
    source_event,
)

from .payload import (
    TrackedEvent,
    build_batch_payload,
)

from .schemas import (
    COMMERCE_ACTION_SCHEMA,
    PAYLOAD_DATA_SCHEMA,
    SCREEN_VIEW_SCHEMA,
    SOURCE_EVENT_SCHEMA,
    schema_name,
)

__all__ = [
    # Context models
    "ContextEntity",
    "Location",
    "Product",
    "Segment",
    "Source",

    # Events
    "Event",
    "commerce_action",
    "screen_view",
    "self_describing",
    "source_event",

    # Wire payload
    "TrackedEvent",
    "build_batch_payload",

    # Schemas
    "COMMERCE_ACTION_SCHEMA",
    "PAYLOAD_DATA_SCHEMA",
    "SCREEN_VIEW_SCHEMA",
    "SOURCE_EVENT_SCHEMA",
    "schema_name",
]
