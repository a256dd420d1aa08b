"""
Redis client wrapper with async support
Provides document and stream operations for the people worker
"""

import json
from typing import Optional, List, Dict, Any
import redis.asyncio as aioredis
from redis.asyncio import Redis
from redis.exceptions import RedisError

from ..config.settings import settings
from .logger import get_logger

logger = get_logger(__name__)


class RedisClient:
    """
    Async Redis client with helper methods for common operations
    """

    def __init__(self, redis_url: Optional[str] = None):
        """
        Initialize Redis client

        Args:
            redis_url: Redis connection URL (uses settings if not provided)
        """
        self.redis_url = redis_url or settings.get_redis_url()
        self._client: Optional[Redis] = None

    async def connect(self) -> None:
        """Establish Redis connection"""
        try:
            self._client = aioredis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
                max_connections=10
            )
            await self._client.ping()
            logger.info("redis_connected", url=self.redis_url)
        except RedisError as e:
            logger.error("redis_connect_failed", error=str(e))
            raise

    async def disconnect(self) -> None:
        """Close Redis connection"""
        if self._client:
            await self._client.aclose()
            logger.info("redis_disconnected")

    @property
    def client(self) -> Redis:
        """Get Redis client instance"""
        if not self._client:
            raise RuntimeError("Redis client not connected. Call connect() first.")
        return self._client

    # =============================================
    # DOCUMENT OPERATIONS
    # =============================================

    async def set(self, key: str, value: Any) -> bool:
        """
        Store a value, JSON serializing anything that is not a string

        Raises:
            RedisError: the write did not reach Redis
        """
        if not isinstance(value, str):
            value = json.dumps(value)
        try:
            return bool(await self.client.set(key, value))
        except RedisError as e:
            logger.error("redis_set_error", key=key, error=str(e))
            raise

    async def get(self, key: str) -> Optional[Any]:
        """
        Get a value by key, JSON deserialized when possible

        Returns:
            Value or None if the key does not exist
        """
        try:
            value = await self.client.get(key)
        except RedisError as e:
            logger.error("redis_get_error", key=key, error=str(e))
            raise
        if value is None:
            return None
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return value

    async def exists(self, key: str) -> bool:
        try:
            return bool(await self.client.exists(key))
        except RedisError as e:
            logger.error("redis_exists_error", key=key, error=str(e))
            raise

    async def delete(self, *keys: str) -> int:
        """Delete one or more keys"""
        try:
            return await self.client.delete(*keys)
        except RedisError as e:
            logger.error("redis_delete_error", keys=keys, error=str(e))
            raise

    async def incr(self, key: str) -> int:
        """Atomically increment a counter key"""
        try:
            return await self.client.incr(key)
        except RedisError as e:
            logger.error("redis_incr_error", key=key, error=str(e))
            raise

    # =============================================
    # STREAM OPERATIONS
    # =============================================

    async def xadd(
        self,
        name: str,
        fields: Dict[str, Any],
        maxlen: Optional[int] = None,
        approximate: bool = True
    ) -> str:
        """
        Add entry to stream

        Args:
            name: Stream name
            fields: Data to add
            maxlen: Maximum stream length
            approximate: Use approximate trimming

        Returns:
            Entry ID
        """
        serialized_fields = {
            k: json.dumps(v) if not isinstance(v, str) else v
            for k, v in fields.items()
        }
        try:
            return await self.client.xadd(
                name,
                serialized_fields,
                maxlen=maxlen,
                approximate=approximate
            )
        except RedisError as e:
            logger.error("redis_xadd_error", name=name, error=str(e))
            raise

    async def create_consumer_group(
        self,
        stream_name: str,
        group_name: str,
        id: str = '0',
        mkstream: bool = True
    ) -> bool:
        """
        Create a consumer group for a stream

        Args:
            stream_name: Name of the stream
            group_name: Name of the consumer group
            id: Starting ID ('0' for beginning, '$' for new messages only)
            mkstream: Create stream if it doesn't exist

        Returns:
            True if created, False if already exists
        """
        try:
            await self.client.xgroup_create(
                stream_name,
                group_name,
                id=id,
                mkstream=mkstream
            )
            return True
        except RedisError as e:
            if "BUSYGROUP" in str(e):
                return False
            logger.error("redis_xgroup_create_error", stream=stream_name, group=group_name, error=str(e))
            raise

    async def read_group(
        self,
        stream_name: str,
        consumer_group: str,
        consumer_name: str,
        last_id: str = ">",
        count: int = 1,
        block: Optional[int] = 5000
    ) -> List[tuple]:
        """
        Read from stream using consumer group

        Transport errors are not swallowed here: a worker that cannot
        read its input stream has to know about it.

        Args:
            stream_name: Name of the stream
            consumer_group: Consumer group name
            consumer_name: Consumer name
            last_id: '>' for new messages, '0' for this consumer's pending entries
            count: Max messages to read
            block: Block time in milliseconds

        Returns:
            List of (message_id, fields) tuples
        """
        response = await self.client.xreadgroup(
            consumer_group,
            consumer_name,
            {stream_name: last_id},
            count=count,
            block=block
        )
        entries: List[tuple] = []
        for _stream, messages in response or []:
            entries.extend(messages)
        return entries

    async def xack(
        self,
        stream_name: str,
        consumer_group: str,
        *message_ids: str
    ) -> int:
        """
        Acknowledge messages in a consumer group

        Args:
            stream_name: Name of the stream
            consumer_group: Consumer group name
            message_ids: Message IDs to acknowledge

        Returns:
            Number of messages acknowledged
        """
        try:
            return await self.client.xack(
                stream_name,
                consumer_group,
                *message_ids
            )
        except RedisError as e:
            logger.error(
                "redis_xack_error",
                stream=stream_name,
                group=consumer_group,
                error=str(e)
            )
            raise
