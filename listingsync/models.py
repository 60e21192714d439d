# listingsync/models.py
from __future__ import annotations

import enum
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    JSON,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from .domain.types import ListingSource, PropertyStatus, PropertyType


def utcnow() -> datetime:
    # naive UTC, matching the DateTime columns below
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    pass


class JobRunStatus(str, enum.Enum):
    running = "running"
    success = "success"
    failed = "failed"


# -----------------------------
# Models
# -----------------------------
class Property(Base):
    __tablename__ = "properties"
    __table_args__ = (
        UniqueConstraint("source", "source_id", name="uq_property_source_ref"),
        Index("ix_property_city_state", "city", "state"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    street: Mapped[str] = mapped_column(String(255))
    city: Mapped[str] = mapped_column(String(80))
    state: Mapped[str] = mapped_column(String(20))
    zip: Mapped[str | None] = mapped_column(String(10), nullable=True)
    county: Mapped[str | None] = mapped_column(String(80), nullable=True)

    source: Mapped[ListingSource] = mapped_column(Enum(ListingSource), index=True)
    # stable external id for most sources, a click-tracking URL for others
    source_id: Mapped[str] = mapped_column(String(2048))
    url: Mapped[str] = mapped_column(Text)

    status: Mapped[PropertyStatus] = mapped_column(
        Enum(PropertyStatus), default=PropertyStatus.active, index=True
    )
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), index=True)
    property_type: Mapped[PropertyType] = mapped_column(
        Enum(PropertyType), default=PropertyType.home, index=True
    )

    beds: Mapped[int | None] = mapped_column(Integer, nullable=True)
    baths: Mapped[float | None] = mapped_column(Float, nullable=True)
    sqft: Mapped[int | None] = mapped_column(Integer, nullable=True)
    lot_size: Mapped[float | None] = mapped_column(Float, nullable=True)
    year_built: Mapped[int | None] = mapped_column(Integer, nullable=True)

    builder: Mapped[str | None] = mapped_column(String(255), nullable=True)
    agent: Mapped[str | None] = mapped_column(String(255), nullable=True)
    images: Mapped[list[str]] = mapped_column(JSON, default=list)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    first_seen_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)


class PriceHistory(Base):
    """
    Append-only. Rows go away only with their property (FK cascade).
    """
    __tablename__ = "price_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    property_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("properties.id", ondelete="CASCADE"), index=True
    )

    old_price: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    new_price: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    change_date: Mapped[datetime] = mapped_column(DateTime, default=utcnow, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)


class JobRun(Base):
    """
    Tracks job executions (email ingestion today).
    """
    __tablename__ = "job_runs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    job_name: Mapped[str] = mapped_column(String(80), index=True)

    status: Mapped[JobRunStatus] = mapped_column(Enum(JobRunStatus), default=JobRunStatus.running, index=True)

    started_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, index=True)
    finished_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    # store error message
    error: Mapped[str | None] = mapped_column(Text, nullable=True)

    # optional metadata: {"mail_source": "imap"}
    meta_json: Mapped[str | None] = mapped_column(Text, nullable=True)
    # {"created": n, "updated": n, "errors": [...]}
    summary_json: Mapped[str | None] = mapped_column(Text, nullable=True)
