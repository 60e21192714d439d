# listingsync/service_layer/dedup.py
from __future__ import annotations

from ..adapters.repos.properties import PropertyRepository
from ..domain.address import normalize_address
from ..domain.types import CandidateListing
from ..models import Property


async def resolve_existing(repo: PropertyRepository, candidate: CandidateListing) -> Property | None:
    """
    Find the stored record a candidate refers to, if any:
      1) (source, source_id)
      2) normalized street|city|state among records in the same city/state

    Tracking-URL sources never hit (1) across emails, so (2) is what keeps
    them from duplicating. When several records share the normalized key the
    earliest first_seen_at wins (repo returns them oldest first).
    """
    existing = await repo.find_by_source_and_source_id(candidate.source, candidate.source_id)
    if existing is not None:
        return existing

    key = normalize_address(candidate.street, candidate.city, candidate.state)
    for prop in await repo.find_by_city_state(candidate.city, candidate.state):
        if normalize_address(prop.street, prop.city, prop.state) == key:
            return prop
    return None
