"""
Event Types for the Tracker Client

Enumerations for built-in event kinds, commerce actions and collector
environments.
"""

from enum import Enum

from .errors import ConfigurationError


class EventType(Enum):
    """Built-in event kinds, keyed by schema name."""

    SCREEN_VIEW = "screen_view"
    SELF_DESCRIBING = "self_describing"
    COMMERCE_ACTION = "commerce_action"
    SOURCE = "source"


class CommerceActionType(Enum):
    """Allowed commerce actions."""

    # Product lifecycle
    CLICK = "click"
    DETAIL = "detail"
    VIEW = "view"

    # Cart
    ADD_TO_CART = "add_to_cart"
    REMOVE_FROM_CART = "remove_from_cart"

    # Checkout
    CHECKOUT = "checkout"
    CHECKOUT_OPTION = "checkout_option"
    PURCHASE = "purchase"
    REFUND = "refund"

    # Promotions
    PROMO_CLICK = "promo_click"

    @classmethod
    def is_valid(cls, action: str) -> bool:
        """Check if a commerce action string is valid."""
        try:
            cls(action)
            return True
        except ValueError:
            return False

    @classmethod
    def get_allowed_actions(cls) -> set[str]:
        """Get all allowed commerce action strings."""
        return {a.value for a in cls}


class Environment(Enum):
    """Collector environments."""

    DEVELOPMENT = "development"
    PRODUCTION = "production"

    @property
    def endpoint(self) -> str:
        """Collector endpoint for this environment."""
        if self is Environment.DEVELOPMENT:
            return "https://c-dev.surfside.io"
        return "https://c.surfside.io"

    @classmethod
    def from_name(cls, name: str) -> "Environment":
        """Resolve an environment by name, case-insensitively."""
        try:
            return cls(str(name).strip().lower())
        except ValueError:
            allowed = ", ".join(e.value for e in cls)
            raise ConfigurationError(f"Unknown environment '{name}' (expected one of: {allowed})")
