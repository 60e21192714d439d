from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from .domain.types import ListingSource, PropertyStatus, PropertyType


class PriceHistoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    old_price: Decimal
    new_price: Decimal
    change_date: datetime
    created_at: datetime


class PropertyOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int

    street: str
    city: str
    state: str
    zip: str | None = None
    county: str | None = None

    source: ListingSource
    source_id: str
    url: str
    status: PropertyStatus

    price: Decimal
    property_type: PropertyType
    beds: int | None = None
    baths: float | None = None
    sqft: int | None = None
    lot_size: float | None = None
    year_built: int | None = None

    builder: str | None = None
    agent: str | None = None
    images: list[str] = Field(default_factory=list)
    description: str | None = None

    first_seen_at: datetime
    created_at: datetime
    updated_at: datetime


class PropertyDetailOut(PropertyOut):
    price_history: list[PriceHistoryOut] = Field(default_factory=list)


class IngestResultOut(BaseModel):
    created: int = Field(..., ge=0)
    updated: int = Field(..., ge=0)
    errors: list[str]
