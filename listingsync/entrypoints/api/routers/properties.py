# listingsync/entrypoints/api/routers/properties.py
from __future__ import annotations

from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ....adapters.repos.properties import PropertyRepository
from ....db import get_session
from ....domain.types import ListingSource, PropertyType
from ....schemas import PriceHistoryOut, PropertyDetailOut, PropertyOut
from ..deps import require_api_key

router = APIRouter(tags=["properties"], dependencies=[Depends(require_api_key)])


@router.get("/properties", response_model=list[PropertyOut])
async def list_properties(
    city: str | None = Query(None),
    state: str | None = Query(None, max_length=20),
    source: ListingSource | None = Query(None),
    type: PropertyType | None = Query(None),
    min_price: Decimal | None = Query(None, ge=0),
    max_price: Decimal | None = Query(None, ge=0),
    limit: int = Query(500, ge=1, le=500),
    session: AsyncSession = Depends(get_session),
) -> list[PropertyOut]:
    rows = await PropertyRepository(session).list_properties(
        city=city,
        state=state,
        source=source,
        property_type=type,
        min_price=min_price,
        max_price=max_price,
        limit=limit,
    )
    return [PropertyOut.model_validate(p) for p in rows]


@router.get("/properties/{property_id}", response_model=PropertyDetailOut)
async def get_property(
    property_id: int,
    session: AsyncSession = Depends(get_session),
) -> PropertyDetailOut:
    repo = PropertyRepository(session)
    prop = await repo.get(property_id)
    if prop is None:
        raise HTTPException(status_code=404, detail="Property not found")

    history = await repo.price_history_for(property_id)
    out = PropertyDetailOut.model_validate(prop)
    out.price_history = [PriceHistoryOut.model_validate(h) for h in history]
    return out
