"""SQLAlchemy database models.

Maps domain models to PostgreSQL tables.
"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, relationship


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


class RegionTable(Base):
    """Region (neighborhood) table."""

    __tablename__ = "regions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    name = Column(String(120), nullable=False, index=True)
    center_lat = Column(Float, nullable=False)
    center_lng = Column(Float, nullable=False)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    deals = relationship("DealTable", back_populates="region")

    __table_args__ = (
        CheckConstraint("center_lat >= -90 AND center_lat <= 90", name="check_region_lat_range"),
        CheckConstraint("center_lng >= -180 AND center_lng <= 180", name="check_region_lng_range"),
    )


class DealTable(Base):
    """Deal table."""

    __tablename__ = "deals"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    venue_name = Column(String(200), nullable=False)
    deal_type = Column(String(50), nullable=False)
    starts_at = Column(DateTime, nullable=False)
    expires_at = Column(DateTime, nullable=False)
    active = Column(Boolean, nullable=False, default=True)
    region_id = Column(Uuid(as_uuid=True), ForeignKey("regions.id", ondelete="SET NULL"), nullable=True)
    image_url = Column(String(500), nullable=True)
    website_url = Column(String(500), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    region = relationship("RegionTable", back_populates="deals", lazy="joined")

    __table_args__ = (
        CheckConstraint("expires_at > starts_at", name="check_deal_window"),
        Index("ix_deals_active_window", "active", "starts_at", "expires_at"),
        Index("ix_deals_region_id", "region_id"),
    )


class UserTable(Base):
    """User table."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    telegram_user_id = Column(BigInteger, nullable=False, unique=True)
    telegram_username = Column(String(100), nullable=True)
    preferences = Column(JSON, nullable=False, default=dict)
    last_location_lat = Column(Float, nullable=True)
    last_location_lng = Column(Float, nullable=True)
    last_location_updated = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    favorites = relationship("FavoriteTable", back_populates="user", cascade="all, delete-orphan")

    __table_args__ = (Index("ix_users_telegram_user_id", telegram_user_id),)


class FavoriteTable(Base):
    """Deals saved by users."""

    __tablename__ = "user_favorites"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    deal_id = Column(Uuid(as_uuid=True), ForeignKey("deals.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    user = relationship("UserTable", back_populates="favorites")

    __table_args__ = (
        UniqueConstraint("user_id", "deal_id", name="uq_user_deal_favorite"),
        Index("ix_user_favorites_user_id", "user_id"),
    )
