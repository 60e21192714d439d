# listingsync/service_layer/unit_of_work.py
from __future__ import annotations

from typing import Callable

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..adapters.repos.properties import PropertyRepository
from ..db import AsyncSessionLocal


class SqlAlchemyUnitOfWork:
    """
    One transaction. Commits on clean exit, rolls back when the block raises.
    The ingestion pipeline opens one per candidate so a property write and its
    price-history append land (or vanish) together.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None) -> None:
        self._session_factory = session_factory or AsyncSessionLocal
        self.session: AsyncSession | None = None
        self.properties: PropertyRepository | None = None

    async def __aenter__(self) -> "SqlAlchemyUnitOfWork":
        self.session = self._session_factory()
        self.properties = PropertyRepository(self.session)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            if exc:
                await self.rollback()
            else:
                await self.commit()
        finally:
            if self.session:
                await self.session.close()

    async def commit(self) -> None:
        assert self.session is not None
        await self.session.commit()

    async def rollback(self) -> None:
        assert self.session is not None
        await self.session.rollback()


UowFactory = Callable[[], SqlAlchemyUnitOfWork]
