# listingsync/service_layer/upsert.py
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime, time
from decimal import Decimal
from typing import Any

from ..adapters.repos.properties import PropertyRepository
from ..domain.normalize import classify_status, normalize_property_type
from ..domain.types import CandidateListing, PropertyStatus, PropertyType
from ..models import Property, utcnow

log = logging.getLogger(__name__)

# Only overwrite these when the new sighting actually carries a value
RETAIN_IF_ABSENT: tuple[str, ...] = (
    "zip",
    "county",
    "beds",
    "baths",
    "sqft",
    "lot_size",
    "year_built",
    "builder",
    "agent",
    "description",
)


class UpsertAction(str, enum.Enum):
    created = "created"
    updated = "updated"


@dataclass(frozen=True)
class PriceHistoryDraft:
    old_price: Decimal
    new_price: Decimal
    change_date: datetime


@dataclass
class UpsertPlan:
    action: UpsertAction
    fields: dict[str, Any]
    price_history: list[PriceHistoryDraft] = field(default_factory=list)


def _as_decimal(x: Any) -> Decimal:
    return x if isinstance(x, Decimal) else Decimal(str(x))


def _has_value(v: Any) -> bool:
    if v is None:
        return False
    if isinstance(v, str) and not v.strip():
        return False
    return True


def _plan_create(c: CandidateListing, now: datetime) -> UpsertPlan:
    price = _as_decimal(c.price)
    fields: dict[str, Any] = {
        "street": c.street,
        "city": c.city,
        "state": c.state,
        "zip": c.zip,
        "county": c.county,
        "source": c.source,
        "source_id": c.source_id,
        "url": c.url,
        "status": classify_status(c.status) if c.status else PropertyStatus.active,
        "price": price,
        "property_type": normalize_property_type(c.property_type) or PropertyType.home,
        "beds": c.beds,
        "baths": c.baths,
        "sqft": c.sqft,
        "lot_size": c.lot_size,
        "year_built": c.year_built,
        "builder": c.builder,
        "agent": c.agent,
        "description": c.description,
        "images": list(c.images),
        "first_seen_at": now,
        "created_at": now,
        "updated_at": now,
    }

    history: list[PriceHistoryDraft] = []
    if c.price_change is not None:
        # the cut that triggered the alert: backdate it to the email's date
        history.append(
            PriceHistoryDraft(
                old_price=price + _as_decimal(c.price_change.amount),
                new_price=price,
                change_date=datetime.combine(c.price_change.date, time()),
            )
        )
    return UpsertPlan(action=UpsertAction.created, fields=fields, price_history=history)


def _plan_update(c: CandidateListing, existing: Property, now: datetime) -> UpsertPlan:
    new_price = _as_decimal(c.price)
    old_price = _as_decimal(existing.price)

    fields: dict[str, Any] = {
        # latest observation wins for identity and location
        "street": c.street,
        "city": c.city,
        "state": c.state,
        "source": c.source,
        "source_id": c.source_id,
        "url": c.url,
        "price": new_price,
        "updated_at": now,
    }

    for name in RETAIN_IF_ABSENT:
        v = getattr(c, name)
        if _has_value(v):
            fields[name] = v

    if c.images:
        fields["images"] = list(c.images)

    ptype = normalize_property_type(c.property_type)
    if ptype is not None:
        fields["property_type"] = ptype

    if c.status:
        fields["status"] = classify_status(c.status)

    history: list[PriceHistoryDraft] = []
    if old_price != new_price:
        history.append(PriceHistoryDraft(old_price=old_price, new_price=new_price, change_date=now))

    return UpsertPlan(action=UpsertAction.updated, fields=fields, price_history=history)


def plan_upsert(
    candidate: CandidateListing,
    existing: Property | None,
    *,
    now: datetime | None = None,
) -> UpsertPlan:
    """
    Pure create-vs-update decision plus the merged field set and any price
    history rows to append. Nothing here touches the database.
    """
    now = now or utcnow()
    if existing is None:
        return _plan_create(candidate, now)
    return _plan_update(candidate, existing, now)


async def apply_upsert(
    repo: PropertyRepository,
    candidate: CandidateListing,
    existing: Property | None,
    *,
    now: datetime | None = None,
) -> tuple[UpsertAction, Property]:
    plan = plan_upsert(candidate, existing, now=now)

    if plan.action == UpsertAction.created:
        prop = await repo.create(plan.fields)
        log.info("Created property: %s, %s", prop.street, prop.city)
    else:
        assert existing is not None
        prop = await repo.update(existing.id, plan.fields)
        log.info("Updated property: %s, %s", prop.street, prop.city)

    for draft in plan.price_history:
        await repo.append_price_history(
            prop.id,
            old_price=draft.old_price,
            new_price=draft.new_price,
            change_date=draft.change_date,
        )

    return plan.action, prop
