"""Favorite domain model."""

from datetime import datetime
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


class FavoriteRecord(BaseModel):
    """A deal saved by a user. Unique per (user_id, deal_id)."""

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    user_id: int = Field(gt=0)
    deal_id: UUID
    created_at: datetime = Field(default_factory=datetime.utcnow)
