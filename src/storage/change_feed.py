"""Redis pub/sub change notifications for deals and favorites.

Writers publish a small JSON payload after a row changes; subscribers get a
callback per message. Payloads are informational only: subscribers are
expected to re-read the authoritative state rather than patch from them.
"""

import asyncio
import json
from typing import Any, Awaitable, Callable, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from src.logging import get_logger

logger = get_logger(__name__)

ChangeCallback = Callable[[dict[str, Any]], Awaitable[None]]


class Subscription:
    """Handle for one channel listener. ``close()`` is idempotent."""

    def __init__(self, channel: str, pubsub, task: asyncio.Task):
        self.channel = channel
        self._pubsub = pubsub
        self._task = task
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.warning("change_feed_listener_failed", channel=self.channel, error=str(e))
        try:
            await self._pubsub.unsubscribe(self.channel)
            await self._pubsub.aclose()
        except (RedisError, OSError) as e:
            logger.warning("change_feed_unsubscribe_failed", channel=self.channel, error=str(e))
        logger.info("change_feed_unsubscribed", channel=self.channel)


class ChangeFeed:
    """Publishes and listens to row-change notifications over Redis."""

    def __init__(self, redis_url: str, prefix: str = "dealradar"):
        """Initialize change feed."""
        self.redis_url = redis_url
        self.prefix = prefix
        self._client: redis.Redis | None = None

    async def connect(self) -> None:
        """Establish Redis connection."""
        self._client = redis.from_url(self.redis_url, encoding="utf-8", decode_responses=True)

    async def disconnect(self) -> None:
        """Close Redis connection."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def deals_channel(self) -> str:
        return f"{self.prefix}:deals"

    def favorites_channel(self, user_id: int) -> str:
        return f"{self.prefix}:favorites:{user_id}"

    async def publish(self, channel: str, event: str, **payload: Any) -> None:
        """Publish a change event. Failures are logged, not raised."""
        if not self._client:
            raise RuntimeError("Redis client not connected")

        message = json.dumps({"event": event, **payload}, default=str)
        try:
            await self._client.publish(channel, message)
        except RedisError as e:
            # Subscribers still converge on their next refetch
            logger.warning("change_publish_failed", channel=channel, event=event, error=str(e))

    async def subscribe(self, channel: str, callback: ChangeCallback) -> Subscription:
        """Invoke ``callback`` for every message published on ``channel``."""
        if not self._client:
            raise RuntimeError("Redis client not connected")

        pubsub = self._client.pubsub(ignore_subscribe_messages=True)
        await pubsub.subscribe(channel)
        task = asyncio.create_task(self._listen(channel, pubsub, callback))
        logger.info("change_feed_subscribed", channel=channel)
        return Subscription(channel, pubsub, task)

    async def _listen(self, channel: str, pubsub, callback: ChangeCallback) -> None:
        try:
            async for message in pubsub.listen():
                if message.get("type") != "message":
                    continue
                payload = _decode(message.get("data"))
                try:
                    await callback(payload)
                except Exception as e:
                    logger.error("change_callback_failed", channel=channel, error=str(e), exc_info=True)
        except (RedisError, OSError) as e:
            # Push for this channel is gone; subscribers still converge on explicit refetches
            logger.error("change_feed_listener_died", channel=channel, error=str(e), exc_info=True)


def _decode(data: Optional[str]) -> dict[str, Any]:
    if not data:
        return {}
    try:
        decoded = json.loads(data)
    except (TypeError, ValueError):
        return {"raw": data}
    return decoded if isinstance(decoded, dict) else {"raw": decoded}
