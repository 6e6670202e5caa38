"""
Context Registry

Per-tracker mutable set of context entities. Location, source and segment
hold a single active value (last write wins); products accumulate until a
commerce action consumes them.
"""

import logging
from typing import Any, List, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError
from .models.contexts import ContextEntity, Location, Product, Segment, Source
from .models.events import Event, commerce_action

logger = logging.getLogger(__name__)


class ContextRegistry:
    """Holds the contexts attached to subsequently tracked events.

    Not thread-safe: a single writer is expected to own the registry.
    """

    def __init__(self, namespace: str):
        self.namespace = namespace
        self._location: Optional[Location] = None
        self._source: Optional[Source] = None
        self._segment: Optional[Segment] = None
        self._products: List[Product] = []

    @property
    def location(self) -> Optional[Location]:
        return self._location

    @property
    def source(self) -> Optional[Source]:
        return self._source

    @property
    def segment(self) -> Optional[Segment]:
        return self._segment

    @property
    def products(self) -> List[Product]:
        """Copy of the accumulated product list."""
        return list(self._products)

    def set_location(self, latitude: str, longitude: str, country_code: Optional[str] = None,
                     state: Optional[str] = None, city: Optional[str] = None) -> Location:
        """Replace the active location."""
        self._location = _build(Location, latitude=str(latitude), longitude=str(longitude),
                                country_code=country_code, state=state, city=city)
        logger.debug(f"[{self.namespace}] location set to {self._location.latitude},{self._location.longitude}")
        return self._location

    def set_source(self, account_id: str, source_id: str) -> Source:
        """Replace the active account/source pair."""
        self._source = _build(Source, account_id=account_id, source_id=source_id)
        logger.debug(f"[{self.namespace}] source set to {account_id}/{source_id}")
        return self._source

    def set_segment(self, segment_id: str, segment_value: str) -> Segment:
        """Replace the active segment."""
        self._segment = _build(Segment, segment_id=segment_id, segment_value=str(segment_value))
        logger.debug(f"[{self.namespace}] segment set to {segment_id}={segment_value}")
        return self._segment

    def add_product(self, **attributes: Any) -> Product:
        """Append a product to the commerce context.

        Accepts the Product fields: ``id`` and ``name`` are required; ``list``,
        ``brand``, ``category``, ``variant``, ``price``, ``quantity``,
        ``coupon``, ``position`` and ``currency`` are optional.
        """
        product = _build(Product, **attributes)
        self._products.append(product)
        logger.debug(f"[{self.namespace}] product {product.id} added ({len(self._products)} in cart)")
        return product

    def set_commerce_action(self, action: str) -> Event:
        """Consume the accumulated products into a commerce action event.

        The product list is cleared only once the event has been built, so an
        invalid action leaves the cart untouched.
        """
        event = commerce_action(action, self._products)
        self._products = []
        return event

    def snapshot(self) -> Tuple[ContextEntity, ...]:
        """Current single-valued contexts, as entities."""
        current = [self._source, self._location, self._segment]
        return tuple(c.to_entity() for c in current if c is not None)

    def clear(self) -> None:
        """Drop every context."""
        self._location = None
        self._source = None
        self._segment = None
        self._products = []


def _build(model, **values):
    try:
        return model(**values)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid {model.__name__.lower()} context: {e}") from e
