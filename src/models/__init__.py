"""Models package - Pydantic domain models."""

from .deal import Deal, GeoPoint, RankedDeal, Region, UserPreferences
from .favorite import FavoriteRecord
from .notification import Notification, NotificationBuffer, UserSignal, build_notification
from .user import User, UserInput

__all__ = [
    "Deal",
    "GeoPoint",
    "RankedDeal",
    "Region",
    "UserPreferences",
    "FavoriteRecord",
    "Notification",
    "NotificationBuffer",
    "UserSignal",
    "build_notification",
    "User",
    "UserInput",
]
