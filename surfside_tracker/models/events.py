"""
Event models.

An Event is an immutable description of something that happened: a schema
identifier, an ordered read-only payload and the time it was created.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from ..errors import ValidationError
from ..event_types import CommerceActionType, EventType
from .contexts import Product, Source
from .schemas import COMMERCE_ACTION_SCHEMA, SCREEN_VIEW_SCHEMA, SOURCE_EVENT_SCHEMA, schema_name

_SCALAR_TYPES = (str, int, float, bool, type(None))


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Event:
    """Immutable tracked event."""

    schema: str
    payload: Mapping[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=_utcnow)
    event_type: EventType = EventType.SELF_DESCRIBING
    products: Tuple[Product, ...] = ()

    def __post_init__(self):
        # Copy so later changes to the caller's dict cannot leak into the event
        object.__setattr__(self, "payload", MappingProxyType(dict(self.payload)))
        object.__setattr__(self, "products", tuple(self.products))

    @property
    def name(self) -> str:
        """Schema tag, e.g. ``screen_view``."""
        return schema_name(self.schema)

    def validate(self) -> None:
        """Raise ValidationError unless the event can be queued."""
        if not isinstance(self.schema, str) or not self.schema.strip():
            raise ValidationError("Event schema must be a non-empty string")
        for key, value in self.payload.items():
            if not isinstance(key, str) or not key:
                raise ValidationError(f"Payload keys must be non-empty strings, got {key!r}")
            if not isinstance(value, _SCALAR_TYPES):
                raise ValidationError(
                    f"Payload value for '{key}' must be a scalar, got {type(value).__name__}"
                )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "schema": self.schema,
            "data": dict(self.payload),
        }


def screen_view(name: str, timestamp: Optional[datetime] = None) -> Event:
    """Build a screen view event."""
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Screen name must be a non-empty string")
    return Event(
        schema=SCREEN_VIEW_SCHEMA,
        payload={"name": name},
        timestamp=timestamp or _utcnow(),
        event_type=EventType.SCREEN_VIEW,
    )


def self_describing(schema: str, payload: Optional[Mapping[str, Any]] = None,
                   timestamp: Optional[datetime] = None) -> Event:
    """Build a self-describing event with a caller-supplied schema."""
    event = Event(
        schema=schema,
        payload=payload or {},
        timestamp=timestamp or _utcnow(),
        event_type=EventType.SELF_DESCRIBING,
    )
    event.validate()
    return event


def commerce_action(action: str, products: Iterable[Product] = (),
                   timestamp: Optional[datetime] = None) -> Event:
    """Build a commerce action event carrying *products*."""
    if isinstance(action, CommerceActionType):
        action = action.value
    if not CommerceActionType.is_valid(action):
        allowed = ", ".join(sorted(CommerceActionType.get_allowed_actions()))
        raise ValidationError(f"Unknown commerce action '{action}' (expected one of: {allowed})")
    return Event(
        schema=COMMERCE_ACTION_SCHEMA,
        payload={"action": action},
        timestamp=timestamp or _utcnow(),
        event_type=EventType.COMMERCE_ACTION,
        products=tuple(products),
    )


def source_event(source: Source, timestamp: Optional[datetime] = None) -> Event:
    """Build the event announcing the active account/source pair."""
    return Event(
        schema=SOURCE_EVENT_SCHEMA,
        payload={"account_id": source.account_id, "source_id": source.source_id},
        timestamp=timestamp or _utcnow(),
        event_type=EventType.SOURCE,
    )
