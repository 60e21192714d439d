# tests/conftest.py
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from listingsync.adapters.mail.base import EmailMessage
from listingsync.models import Base
from listingsync.service_layer.unit_of_work import SqlAlchemyUnitOfWork

FIXTURES = Path(__file__).parent / "fixtures"


def load_fixture(name: str) -> str:
    return (FIXTURES / name).read_text(encoding="utf-8")


@dataclass
class FakeMailSource:
    """In-memory MailSource. Records what got marked processed."""

    messages: list[EmailMessage] = field(default_factory=list)
    fetch_error: Exception | None = None
    mark_error: Exception | None = None
    marked: list[str | None] = field(default_factory=list)

    def fetch(self) -> list[EmailMessage]:
        if self.fetch_error is not None:
            raise self.fetch_error
        return list(self.messages)

    def mark_processed(self, messages: Sequence[EmailMessage]) -> None:
        if self.mark_error is not None:
            raise self.mark_error
        self.marked.extend(m.uid for m in messages)


@pytest.fixture
async def engine():
    """
    Fresh in-memory DB per test. StaticPool makes all connections share the same
    in-memory database for the lifetime of this engine fixture.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def async_session_maker(engine):
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=True)


@pytest.fixture
def uow_factory(async_session_maker):
    return lambda: SqlAlchemyUnitOfWork(async_session_maker)


@pytest.fixture
def zillow_message() -> EmailMessage:
    return EmailMessage(sender="instant-updates@mail.zillow.com", html=load_fixture("zillow_alert.html"), uid="101")


@pytest.fixture
def redfin_message() -> EmailMessage:
    return EmailMessage(sender="listings@redfin.com", html=load_fixture("redfin_alert.html"), uid="102")


@pytest.fixture
def realtor_message() -> EmailMessage:
    return EmailMessage(sender="alerts@e.realtor.com", html=load_fixture("realtor_alert.html"), uid="103")


@pytest.fixture
def land_message() -> EmailMessage:
    return EmailMessage(sender="alerts@land.com", html=load_fixture("land_alert.html"), uid="104")
