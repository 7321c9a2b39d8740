"""Deal and region domain models."""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator


class GeoPoint(BaseModel):
    """A latitude/longitude pair in decimal degrees."""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)


class Region(BaseModel):
    """Named geographic area (neighborhood) deals are bucketed into."""

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    name: str = Field(min_length=1, max_length=120)
    center: GeoPoint
    active: bool = True


class Deal(BaseModel):
    """Time-boxed promotional offer tied to a venue."""

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    title: str = Field(min_length=1, max_length=200)
    description: str = ""
    venue_name: str = Field(min_length=1, max_length=200)
    deal_type: str = Field(description="Raw category tag as authored, e.g. 'food' or 'Bar'")
    starts_at: datetime
    expires_at: datetime
    active: bool = True
    region_id: Optional[UUID] = None
    region: Optional[Region] = Field(
        default=None, description="Joined region; only set when the region is active"
    )
    image_url: Optional[str] = Field(default=None, max_length=500)
    website_url: Optional[str] = Field(default=None, max_length=500)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    @field_validator("expires_at")
    @classmethod
    def validate_time_window(cls, v: datetime, info) -> datetime:
        """Ensure starts_at < expires_at."""
        values = info.data
        if "starts_at" in values and v <= values["starts_at"]:
            raise ValueError("expires_at must be after starts_at")
        return v

    def is_active_at(self, now: datetime) -> bool:
        """Check whether the deal is eligible for ranking at ``now``."""
        return self.active and self.starts_at <= now <= self.expires_at

    def time_remaining_label(self, now: Optional[datetime] = None) -> str:
        """Human readable countdown, e.g. ``"2h 5m left"``."""
        now = now or datetime.utcnow()
        remaining = int((self.expires_at - now).total_seconds())
        if remaining <= 0:
            return "expired"
        hours, rest = divmod(remaining, 3600)
        minutes = rest // 60
        if hours > 0:
            return f"{hours}h {minutes}m left"
        return f"{minutes}m left"


class RankedDeal(BaseModel):
    """Deal annotated for one ranking pass. Never persisted."""

    model_config = ConfigDict(frozen=True)

    deal: Deal
    distance_km: Optional[float] = None
    category: str

    @property
    def id(self) -> UUID:
        return self.deal.id


class UserPreferences(BaseModel):
    """Preference categories picked by the user (Food, Drinks, ...)."""

    categories: list[str] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not any(c.strip() for c in self.categories)
