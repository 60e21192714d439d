from datetime import datetime
from decimal import Decimal

from listingsync.adapters.repos.properties import PropertyRepository
from listingsync.domain.types import CandidateListing, ListingSource, PropertyStatus, PropertyType
from listingsync.service_layer.dedup import resolve_existing


def _fields(**overrides):
    data = dict(
        street="123 Main St",
        city="Anytown",
        state="CA",
        source=ListingSource.zillow,
        source_id="12345678",
        url="https://www.zillow.com/homedetails/123-Main-St/12345678_zpid/",
        status=PropertyStatus.active,
        price=Decimal("450000"),
        property_type=PropertyType.home,
        images=[],
        first_seen_at=datetime(2024, 1, 1),
        created_at=datetime(2024, 1, 1),
        updated_at=datetime(2024, 1, 1),
    )
    data.update(overrides)
    return data


def _candidate(**overrides) -> CandidateListing:
    data = dict(
        street="123 Main St",
        city="Anytown",
        state="CA",
        source=ListingSource.zillow,
        source_id="12345678",
        url="https://www.zillow.com/homedetails/123-Main-St/12345678_zpid/",
        price=Decimal("450000"),
    )
    data.update(overrides)
    return CandidateListing(**data)


async def test_identity_match_wins(async_session_maker):
    async with async_session_maker() as session:
        repo = PropertyRepository(session)
        p = await repo.create(_fields(street="1 Somewhere Else"))

        found = await resolve_existing(repo, _candidate())
        assert found is not None
        assert found.id == p.id


async def test_address_fallback_across_sources(async_session_maker):
    async with async_session_maker() as session:
        repo = PropertyRepository(session)
        p = await repo.create(_fields(street="123 North Main Street", city="ANYTOWN"))

        c = _candidate(
            source=ListingSource.realtor,
            source_id="https://click.e.realtor.com/f/a/zzz",
            url="https://click.e.realtor.com/f/a/zzz",
        )
        found = await resolve_existing(repo, c)
        assert found is not None
        assert found.id == p.id


async def test_no_match_returns_none(async_session_maker):
    async with async_session_maker() as session:
        repo = PropertyRepository(session)
        await repo.create(_fields())

        c = _candidate(street="125 Main St", source_id="555")
        assert await resolve_existing(repo, c) is None

        c = _candidate(state="NV", source_id="556")
        assert await resolve_existing(repo, c) is None


async def test_address_tie_resolves_to_earliest_first_seen(async_session_maker):
    async with async_session_maker() as session:
        repo = PropertyRepository(session)
        later = await repo.create(
            _fields(source=ListingSource.redfin, source_id="r-1", first_seen_at=datetime(2024, 6, 1))
        )
        earlier = await repo.create(
            _fields(
                street="123 Main Street",
                source=ListingSource.land,
                source_id="l-1",
                first_seen_at=datetime(2024, 2, 1),
            )
        )
        assert later.id < earlier.id

        c = _candidate(source=ListingSource.realtor, source_id="https://click.e.realtor.com/x")
        found = await resolve_existing(repo, c)
        assert found is not None
        assert found.id == earlier.id
