"""
Context entity models.

This module contains Pydantic models for the side-channel data attached to
tracked events: location, source, segment and products.
"""

from typing import Any, ClassVar, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from .schemas import LOCATION_SCHEMA, PRODUCT_SCHEMA, SEGMENT_SCHEMA, SOURCE_SCHEMA


class ContextEntity(BaseModel):
    """A self-describing context as attached to an event."""
    model_config = ConfigDict(frozen=True)

    schema_uri: str = Field(alias="schema", description="Iglu URI of the context")
    data: Dict[str, Any] = Field(default_factory=dict, description="Context attributes")

    def to_json(self) -> Dict[str, Any]:
        return {"schema": self.schema_uri, "data": dict(self.data)}


class _ContextModel(BaseModel):
    model_config = ConfigDict(frozen=True)

    schema_uri: ClassVar[str]

    def to_entity(self) -> ContextEntity:
        """Wrap this context into a self-describing entity."""
        return ContextEntity(schema=self.schema_uri, data=self.model_dump(exclude_none=True))


class Location(_ContextModel):
    """Device location."""
    schema_uri: ClassVar[str] = LOCATION_SCHEMA

    latitude: str = Field(description="Latitude as sent by the client, e.g. '37.7749'")
    longitude: str = Field(description="Longitude as sent by the client, e.g. '-122.4194'")
    country_code: Optional[str] = Field(default=None, description="ISO country code")
    state: Optional[str] = Field(default=None, description="State or region")
    city: Optional[str] = Field(default=None, description="City name")


class Source(_ContextModel):
    """Account and source identifiers."""
    schema_uri: ClassVar[str] = SOURCE_SCHEMA

    account_id: str = Field(min_length=1, description="Surfside account identifier")
    source_id: str = Field(min_length=1, description="Surfside source identifier")


class Segment(_ContextModel):
    """Audience segment membership."""
    schema_uri: ClassVar[str] = SEGMENT_SCHEMA

    segment_id: str = Field(min_length=1, description="Segment identifier")
    segment_value: str = Field(description="Segment value")


class Product(_ContextModel):
    """A product in the commerce context."""
    schema_uri: ClassVar[str] = PRODUCT_SCHEMA

    id: str = Field(min_length=1, description="Product identifier (SKU)")
    name: str = Field(min_length=1, description="Product name")
    list: Optional[str] = Field(default=None, description="List the product was shown in")
    brand: Optional[str] = Field(default=None, description="Brand")
    category: Optional[str] = Field(default=None, description="Category")
    variant: Optional[str] = Field(default=None, description="Variant, e.g. colour")
    price: Optional[float] = Field(default=None, ge=0, description="Unit price")
    quantity: Optional[int] = Field(default=None, ge=0, description="Quantity")
    coupon: Optional[str] = Field(default=None, description="Coupon code")
    position: Optional[int] = Field(default=None, ge=0, description="Position in the list")
    currency: Optional[str] = Field(default=None, description="ISO 4217 currency code")
