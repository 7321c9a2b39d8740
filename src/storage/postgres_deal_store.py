"""PostgreSQL deal store: active deals joined with their region."""

from datetime import datetime
from typing import Optional

from sqlalchemy import select

from src.logging import get_logger
from src.models.deal import Deal, GeoPoint, Region
from src.storage.change_feed import ChangeCallback, ChangeFeed, Subscription
from src.storage.database import Database
from src.storage.db_models import DealTable, RegionTable

logger = get_logger(__name__)


class PostgresDealStore:
    """Read side of the deal collection plus its change notifications."""

    def __init__(self, db: Database, change_feed: ChangeFeed):
        self.db = db
        self.change_feed = change_feed

    async def fetch_active_deals(self, now: Optional[datetime] = None) -> list[Deal]:
        """Get deals whose active flag is set and whose window contains ``now``.

        Newest first. Inactive regions are not attached to their deals.
        """
        now = now or datetime.utcnow()
        stmt = (
            select(DealTable)
            .where(DealTable.active.is_(True))
            .where(DealTable.starts_at <= now)
            .where(DealTable.expires_at >= now)
            .order_by(DealTable.created_at.desc())
        )

        async with self.db.session() as session:
            result = await session.execute(stmt)
            db_deals = result.scalars().all()
            deals = [self._to_domain_model(db_deal) for db_deal in db_deals]

        logger.debug("active_deals_fetched", count=len(deals))
        return deals

    async def subscribe(self, callback: ChangeCallback) -> Subscription:
        """Listen for any insert/update/delete on the deal collection."""
        return await self.change_feed.subscribe(self.change_feed.deals_channel(), callback)

    async def publish_change(self, event: str, deal_id=None) -> None:
        """Announce a deal change to subscribers."""
        await self.change_feed.publish(self.change_feed.deals_channel(), event, deal_id=deal_id)

    @staticmethod
    def _region_to_domain(db_region: RegionTable) -> Region:
        return Region(
            id=db_region.id,
            name=db_region.name,
            center=GeoPoint(lat=db_region.center_lat, lng=db_region.center_lng),
            active=db_region.active,
        )

    def _to_domain_model(self, db_deal: DealTable) -> Deal:
        """Convert database model to domain model."""
        region = None
        if db_deal.region is not None and db_deal.region.active:
            region = self._region_to_domain(db_deal.region)

        return Deal(
            id=db_deal.id,
            title=db_deal.title,
            description=db_deal.description or "",
            venue_name=db_deal.venue_name,
            deal_type=db_deal.deal_type,
            starts_at=db_deal.starts_at,
            expires_at=db_deal.expires_at,
            active=db_deal.active,
            region_id=db_deal.region_id,
            region=region,
            image_url=db_deal.image_url,
            website_url=db_deal.website_url,
            created_at=db_deal.created_at,
        )
