"""PostgreSQL repository for User entities."""

from datetime import datetime
from typing import Optional

from sqlalchemy import select

from src.logging import get_logger
from src.models.deal import UserPreferences
from src.models.user import User, UserInput
from src.storage.database import Database
from src.storage.db_models import UserTable

logger = get_logger(__name__)


class PostgresUserRepository:
    """User repository using PostgreSQL. Opens one session per call."""

    def __init__(self, db: Database):
        """Initialize repository with the database manager."""
        self.db = db

    async def get_by_telegram_id(self, telegram_user_id: int) -> Optional[User]:
        """Get user by Telegram user ID."""
        stmt = select(UserTable).where(UserTable.telegram_user_id == telegram_user_id)
        async with self.db.session() as session:
            result = await session.execute(stmt)
            db_user = result.scalar_one_or_none()
            if not db_user:
                return None
            return self._to_domain_model(db_user)

    async def create(self, entity: UserInput) -> User:
        """Register a new user."""
        async with self.db.session() as session:
            db_user = UserTable(
                telegram_user_id=entity.telegram_user_id,
                telegram_username=entity.telegram_username,
                preferences={"categories": []},
            )
            session.add(db_user)
            await session.flush()
            user = self._to_domain_model(db_user)

        logger.info("user_created", user_id=user.id, telegram_user_id=entity.telegram_user_id)
        return user

    async def update_location(self, telegram_user_id: int, lat: float, lng: float) -> User:
        """Store the location the user just shared."""
        async with self.db.session() as session:
            db_user = await self._load(session, telegram_user_id)
            db_user.last_location_lat = lat
            db_user.last_location_lng = lng
            db_user.last_location_updated = datetime.utcnow()
            await session.flush()
            user = self._to_domain_model(db_user)

        logger.info("user_location_updated", user_id=user.id)
        return user

    async def update_preferences(self, telegram_user_id: int, preferences: UserPreferences) -> User:
        """Replace the user's preference categories."""
        async with self.db.session() as session:
            db_user = await self._load(session, telegram_user_id)
            db_user.preferences = preferences.model_dump()
            await session.flush()
            user = self._to_domain_model(db_user)

        logger.info("user_preferences_updated", user_id=user.id, categories=preferences.categories)
        return user

    @staticmethod
    async def _load(session, telegram_user_id: int) -> UserTable:
        stmt = select(UserTable).where(UserTable.telegram_user_id == telegram_user_id)
        result = await session.execute(stmt)
        db_user = result.scalar_one_or_none()
        if not db_user:
            raise ValueError(f"User not found: {telegram_user_id}")
        return db_user

    def _to_domain_model(self, db_user: UserTable) -> User:
        """Convert database model to domain model."""
        return User(
            id=db_user.id,
            telegram_user_id=db_user.telegram_user_id,
            telegram_username=db_user.telegram_username,
            preferences=UserPreferences.model_validate(db_user.preferences or {}),
            last_location_lat=db_user.last_location_lat,
            last_location_lng=db_user.last_location_lng,
            last_location_updated=db_user.last_location_updated,
            created_at=db_user.created_at,
            updated_at=db_user.updated_at,
        )
