"""User domain model."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from src.models.deal import GeoPoint, UserPreferences


class User(BaseModel):
    """Registered chat user."""

    id: int = Field(description="Auto-increment primary key")
    telegram_user_id: int = Field(description="Telegram user ID", gt=0)
    telegram_username: Optional[str] = Field(default=None, max_length=100)
    preferences: UserPreferences = Field(default_factory=UserPreferences)
    last_location_lat: Optional[float] = Field(default=None, ge=-90, le=90)
    last_location_lng: Optional[float] = Field(default=None, ge=-180, le=180)
    last_location_updated: Optional[datetime] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def last_location(self) -> Optional[GeoPoint]:
        """Last location shared in chat, if any."""
        if self.last_location_lat is None or self.last_location_lng is None:
            return None
        return GeoPoint(lat=self.last_location_lat, lng=self.last_location_lng)


class UserInput(BaseModel):
    """Input model for user registration."""

    telegram_user_id: int = Field(gt=0)
    telegram_username: Optional[str] = None
