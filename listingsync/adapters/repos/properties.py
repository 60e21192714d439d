# listingsync/adapters/repos/properties.py
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ...domain.types import ListingSource, PropertyType
from ...models import PriceHistory, Property, utcnow


class PropertyRepository:
    """
    Property store seam used by the dedup resolver and the upsert engine.
    Writes only flush; the unit of work owns commit/rollback.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    # -------------------------
    # Lookups
    # -------------------------

    async def get(self, property_id: int) -> Property | None:
        return await self.session.get(Property, property_id)

    async def find_by_source_and_source_id(self, source: ListingSource, source_id: str) -> Property | None:
        q = select(Property).where(
            Property.source == source,
            Property.source_id == source_id,
        )
        return (await self.session.execute(q)).scalars().first()

    async def find_by_city_state(self, city: str, state: str) -> list[Property]:
        """
        Case-insensitive city/state match, oldest sighting first so address
        ties resolve to the earliest record.
        """
        q = (
            select(Property)
            .where(func.lower(Property.city) == (city or "").strip().lower())
            .where(func.lower(Property.state) == (state or "").strip().lower())
            .order_by(Property.first_seen_at.asc(), Property.id.asc())
        )
        return list((await self.session.execute(q)).scalars().all())

    async def list_properties(
        self,
        *,
        city: str | None = None,
        state: str | None = None,
        source: ListingSource | None = None,
        property_type: PropertyType | None = None,
        min_price: Decimal | None = None,
        max_price: Decimal | None = None,
        limit: int = 500,
    ) -> list[Property]:
        q = select(Property)
        if city:
            q = q.where(func.lower(Property.city).contains(city.strip().lower()))
        if state:
            q = q.where(func.upper(Property.state) == state.strip().upper())
        if source is not None:
            q = q.where(Property.source == source)
        if property_type is not None:
            q = q.where(Property.property_type == property_type)
        if min_price is not None:
            q = q.where(Property.price >= min_price)
        if max_price is not None:
            q = q.where(Property.price <= max_price)
        q = q.order_by(Property.created_at.desc(), Property.id.desc()).limit(limit)
        return list((await self.session.execute(q)).scalars().all())

    async def price_history_for(self, property_id: int) -> list[PriceHistory]:
        q = (
            select(PriceHistory)
            .where(PriceHistory.property_id == property_id)
            .order_by(PriceHistory.change_date.asc(), PriceHistory.id.asc())
        )
        return list((await self.session.execute(q)).scalars().all())

    # -------------------------
    # Writes
    # -------------------------

    async def create(self, fields: dict[str, Any]) -> Property:
        prop = Property(**fields)
        self.session.add(prop)
        await self.session.flush()
        return prop

    async def update(self, property_id: int, fields: dict[str, Any]) -> Property:
        prop = await self.get(property_id)
        if prop is None:
            raise LookupError(f"property {property_id} not found")
        for k, v in fields.items():
            setattr(prop, k, v)
        await self.session.flush()
        return prop

    async def append_price_history(
        self,
        property_id: int,
        *,
        old_price: Decimal,
        new_price: Decimal,
        change_date: datetime,
    ) -> PriceHistory:
        entry = PriceHistory(
            property_id=property_id,
            old_price=old_price,
            new_price=new_price,
            change_date=change_date,
            created_at=utcnow(),
        )
        self.session.add(entry)
        await self.session.flush()
        return entry
