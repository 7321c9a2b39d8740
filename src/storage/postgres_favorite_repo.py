"""PostgreSQL repository for favorite records."""

from uuid import UUID

from sqlalchemy import delete, select

from src.logging import get_logger
from src.models.favorite import FavoriteRecord
from src.storage.change_feed import ChangeCallback, ChangeFeed, Subscription
from src.storage.database import Database
from src.storage.db_models import FavoriteTable

logger = get_logger(__name__)


class PostgresFavoriteRepository:
    """Backend of record for user favorites.

    Every successful write is announced on the owner's favorites channel so
    other sessions of the same user can refetch.
    """

    def __init__(self, db: Database, change_feed: ChangeFeed):
        self.db = db
        self.change_feed = change_feed

    async def list_for_user(self, user_id: int) -> list[FavoriteRecord]:
        """All favorites of a user, newest first."""
        stmt = (
            select(FavoriteTable)
            .where(FavoriteTable.user_id == user_id)
            .order_by(FavoriteTable.created_at.desc())
        )
        async with self.db.session() as session:
            result = await session.execute(stmt)
            return [self._to_domain_model(row) for row in result.scalars().all()]

    async def insert(self, user_id: int, deal_id: UUID) -> FavoriteRecord:
        """Create a favorite and return the stored record.

        Raises:
            sqlalchemy.exc.IntegrityError: if the pair already exists or the
                user/deal does not exist
        """
        async with self.db.session() as session:
            db_favorite = FavoriteTable(user_id=user_id, deal_id=deal_id)
            session.add(db_favorite)
            await session.flush()
            record = self._to_domain_model(db_favorite)

        logger.info("favorite_inserted", user_id=user_id, deal_id=str(deal_id), favorite_id=str(record.id))
        await self.change_feed.publish(
            self.change_feed.favorites_channel(user_id), "INSERT", favorite_id=str(record.id)
        )
        return record

    async def delete(self, user_id: int, favorite_id: UUID) -> bool:
        """Delete a favorite by record id. Returns False if nothing was deleted."""
        stmt = (
            delete(FavoriteTable)
            .where(FavoriteTable.id == favorite_id)
            .where(FavoriteTable.user_id == user_id)
        )
        async with self.db.session() as session:
            result = await session.execute(stmt)
            deleted = result.rowcount > 0

        logger.info("favorite_deleted", user_id=user_id, favorite_id=str(favorite_id), deleted=deleted)
        if deleted:
            await self.change_feed.publish(
                self.change_feed.favorites_channel(user_id), "DELETE", favorite_id=str(favorite_id)
            )
        return deleted

    async def subscribe(self, user_id: int, callback: ChangeCallback) -> Subscription:
        """Listen for changes to one user's favorites."""
        return await self.change_feed.subscribe(self.change_feed.favorites_channel(user_id), callback)

    def _to_domain_model(self, db_favorite: FavoriteTable) -> FavoriteRecord:
        """Convert database model to domain model."""
        return FavoriteRecord(
            id=db_favorite.id,
            user_id=db_favorite.user_id,
            deal_id=db_favorite.deal_id,
            created_at=db_favorite.created_at,
        )
