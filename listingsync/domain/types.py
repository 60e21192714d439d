# listingsync/domain/types.py
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal


class ListingSource(str, enum.Enum):
    zillow = "zillow"
    redfin = "redfin"
    realtor = "realtor"
    land = "land"
    # reserved: sender/url matched nothing
    unknown = "unknown"


class PropertyStatus(str, enum.Enum):
    active = "active"
    pending = "pending"
    sold = "sold"
    off_market = "off_market"


class PropertyType(str, enum.Enum):
    home = "home"
    land = "land"
    condo = "condo"
    townhouse = "townhouse"
    multi_family = "multi_family"


@dataclass(frozen=True)
class PriceChange:
    amount: Decimal
    date: date


@dataclass(frozen=True)
class ParsedAddress:
    street: str
    city: str
    state: str
    zip: str | None = None


@dataclass
class CandidateListing:
    """
    One listing card pulled out of one email. Lives only until the upsert
    engine has folded it into the catalog.
    """

    street: str
    city: str
    state: str
    source: ListingSource
    source_id: str
    url: str
    price: Decimal

    zip: str | None = None
    county: str | None = None
    status: str | None = None  # raw status text, classified on upsert
    price_change: PriceChange | None = None

    property_type: PropertyType | None = None
    beds: int | None = None
    baths: float | None = None
    sqft: int | None = None
    lot_size: float | None = None
    year_built: int | None = None

    builder: str | None = None
    agent: str | None = None
    description: str | None = None

    images: list[str] = field(default_factory=list)
