"""
Demo commands.

Each command is pure data describing one action of the demo screen. The
executor applies them to a tracker session; nothing here has side effects.
"""

from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional, Type, get_args


@dataclass(frozen=True)
class InitializeTracker:
    namespace: str = "iosTracker"
    environment: str = "development"
    endpoint: Optional[str] = None
    account_id: str = "00000-1"
    source_id: str = "00000-2"


@dataclass(frozen=True)
class DebugEventFlow:
    schema: str = "iglu:com.example/test_event/jsonschema/1-0-0"
    test: str = "debug_flow"


@dataclass(frozen=True)
class ClearLogs:
    pass


@dataclass(frozen=True)
class UpdateLocation:
    latitude: str = "40.7128"
    longitude: str = "-74.0060"
    country_code: str = "US"
    state: str = "NY"
    city: str = "New York"


@dataclass(frozen=True)
class UpdateSource:
    account_id: str = "updated-account-123"
    source_id: str = "updated-source-456"


@dataclass(frozen=True)
class UpdateSegment:
    segment_id: str = "premium-users"
    segment_value: str = "1"


@dataclass(frozen=True)
class TrackScreenView:
    name: str = "Home"


@dataclass(frozen=True)
class TrackBasicEvent:
    schema: str = "iglu:com.snowplowanalytics.snowplow/link_click/jsonschema/1-0-1"
    target_url: str = "https://example.com"


@dataclass(frozen=True)
class ViewProduct:
    id: str = "P12345"
    name: str = "Premium Product"
    price: float = 29.99
    quantity: int = 2


@dataclass(frozen=True)
class PurchaseProduct:
    id: str = "demo-product-123"
    name: str = "Sample Product"
    list: str = "featured-products"
    brand: str = "Demo Brand"
    category: str = "Electronics"
    variant: str = "Blue"
    price: float = 29.99
    quantity: int = 1
    coupon: str = "SAVE10"
    position: int = 1
    currency: str = "USD"

    def product_attributes(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


COMMANDS: Dict[str, Type] = {
    "initialize": InitializeTracker,
    "debug": DebugEventFlow,
    "clear_logs": ClearLogs,
    "update_location": UpdateLocation,
    "update_source": UpdateSource,
    "update_segment": UpdateSegment,
    "screen_view": TrackScreenView,
    "basic_event": TrackBasicEvent,
    "view_product": ViewProduct,
    "purchase": PurchaseProduct,
}


def _accepts(field_type, value) -> bool:
    """Whether a JSON-decoded *value* fits a command field annotation."""
    if field_type is type(None):
        return value is None
    if field_type is float:
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if field_type is int:
        return isinstance(value, int) and not isinstance(value, bool)
    if field_type is str:
        return isinstance(value, str)
    return any(_accepts(arg, value) for arg in get_args(field_type))


def build_command(name: str, overrides: Optional[Dict[str, Any]] = None):
    """Build the command registered under *name* with field overrides.

    Raises:
        KeyError: If no command is registered under *name*
        ValueError: If *overrides* names a field the command does not have,
            or gives a field a value of the wrong type
    """
    command_cls = COMMANDS[name]
    command = command_cls()
    if not overrides:
        return command

    field_types = {f.name: f.type for f in fields(command_cls)}
    unknown = sorted(set(overrides) - set(field_types))
    if unknown:
        raise ValueError(f"Unknown field(s) for '{name}': {', '.join(unknown)}")
    for key, value in overrides.items():
        if not _accepts(field_types[key], value):
            raise ValueError(f"Invalid value for '{name}.{key}': {value!r}")
    return replace(command, **overrides)
