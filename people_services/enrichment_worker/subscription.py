"""
Person work subscription

Reads processPerson messages from the work stream through a consumer
group and hands them, one at a time, to the enrichment pipeline.

Delivery is at-least-once: a message is acknowledged only after it has
been handled. On start the consumer first re-reads its own pending
entries (delivered before a crash but never acknowledged) and then
switches to new messages.
"""

from enum import Enum
from typing import Optional, Dict, Any, List

from pydantic import ValidationError
from redis.exceptions import RedisError, ResponseError

from people_shared.config.settings import settings
from people_shared.models.person import WorkMessage
from people_shared.utils.redis_client import RedisClient
from people_shared.utils.logger import delivery_context, get_logger

from .errors import EnrichmentError, NoMatchError, SubscriptionFatalError
from .pipeline import EnrichmentPipeline

logger = get_logger(__name__)

PENDING_ID = "0"
NEW_MESSAGES_ID = ">"


class SubscriptionState(str, Enum):
    IDLE = "idle"
    RECEIVING = "receiving"
    DISPATCHING = "dispatching"
    FATAL = "fatal"


class PersonSubscription:
    """
    Serial consumer of the person work stream
    """

    def __init__(
        self,
        redis_client: RedisClient,
        pipeline: EnrichmentPipeline,
        stream_name: Optional[str] = None,
        consumer_group: Optional[str] = None,
        consumer_name: Optional[str] = None,
        block_ms: Optional[int] = None
    ):
        self.redis = redis_client
        self.pipeline = pipeline
        self.stream_name = stream_name or settings.stream_person_work
        self.consumer_group = consumer_group or settings.consumer_group
        self.consumer_name = consumer_name or settings.consumer_name
        self.block_ms = block_ms if block_ms is not None else settings.stream_block_ms

        self.state = SubscriptionState.IDLE
        self._pending_drained = False

        self.stats = {
            "received": 0,
            "dispatched": 0,
            "discarded": 0,
            "failed": 0,
        }

    async def run(self) -> None:
        """
        Consume forever

        Raises:
            SubscriptionFatalError: the stream transport failed
        """
        await self.ensure_group()
        logger.info(
            "subscription_started",
            stream=self.stream_name,
            group=self.consumer_group,
            consumer=self.consumer_name
        )
        while True:
            for message_id, fields in await self.receive():
                await self.handle(message_id, fields)

    async def ensure_group(self) -> None:
        try:
            created = await self.redis.create_consumer_group(
                self.stream_name, self.consumer_group, id=PENDING_ID, mkstream=True
            )
        except RedisError as e:
            raise self._fatal("consumer_group_create_failed", e) from e
        if created:
            logger.info("consumer_group_created", stream=self.stream_name, group=self.consumer_group)

    # =============================================
    # RECEIVE
    # =============================================

    async def receive(self) -> List[tuple]:
        """
        Read the next message (pending entries first, then new ones)

        Returns:
            Zero or one (message_id, fields) tuples
        """
        self.state = SubscriptionState.RECEIVING
        last_id = NEW_MESSAGES_ID if self._pending_drained else PENDING_ID

        try:
            entries = await self.redis.read_group(
                self.stream_name,
                self.consumer_group,
                self.consumer_name,
                last_id=last_id,
                count=1,
                block=self.block_ms if last_id == NEW_MESSAGES_ID else None
            )
        except ResponseError as e:
            if "NOGROUP" not in str(e):
                raise self._fatal("stream_read_failed", e) from e
            logger.warning("consumer_group_missing_recreating", group=self.consumer_group)
            await self.ensure_group()
            self.state = SubscriptionState.IDLE
            return []
        except RedisError as e:
            raise self._fatal("stream_read_failed", e) from e

        if last_id == PENDING_ID and not entries:
            self._pending_drained = True
            logger.info("pending_entries_drained", consumer=self.consumer_name)

        self.state = SubscriptionState.IDLE
        return entries

    # =============================================
    # DISPATCH
    # =============================================

    async def handle(self, message_id: str, fields: Optional[Dict[str, Any]]) -> None:
        """Dispatch one delivery and acknowledge it"""
        self.state = SubscriptionState.DISPATCHING
        self.stats["received"] += 1

        with delivery_context(message_id=message_id):
            await self._dispatch(message_id, fields)
            await self._ack(message_id)

        self.state = SubscriptionState.IDLE

    async def _dispatch(self, message_id: str, fields: Optional[Dict[str, Any]]) -> None:
        try:
            message = WorkMessage.model_validate(fields or {})
        except ValidationError as e:
            self.stats["discarded"] += 1
            logger.warning("work_message_malformed", message_id=message_id, fields=fields, error=str(e))
            return

        if not message.is_process_person:
            self.stats["discarded"] += 1
            logger.warning("work_message_unknown_action", message_id=message_id, action=message.action)
            return

        person_id = message.person_id
        logger.info("work_message_received", message_id=message_id, person_id=person_id)
        self.stats["dispatched"] += 1

        try:
            await self.pipeline.process_person(person_id)
        except NoMatchError as e:
            logger.info("person_no_match", person_id=person_id, reason=str(e))
        except EnrichmentError as e:
            self.stats["failed"] += 1
            logger.error(
                "person_enrichment_failed",
                person_id=person_id,
                error_type=type(e).__name__,
                error=str(e)
            )
        except Exception:
            self.stats["failed"] += 1
            logger.exception("person_enrichment_crashed", person_id=person_id)

    async def _ack(self, message_id: str) -> None:
        try:
            await self.redis.xack(self.stream_name, self.consumer_group, message_id)
        except RedisError as e:
            raise self._fatal("stream_ack_failed", e) from e

    def _fatal(self, event: str, error: Exception) -> SubscriptionFatalError:
        self.state = SubscriptionState.FATAL
        logger.error(event, stream=self.stream_name, group=self.consumer_group, error=str(error))
        return SubscriptionFatalError(f"{event}: {error}")

    def get_stats(self) -> Dict[str, Any]:
        return {
            **self.stats,
            "state": self.state.value,
            "stream": self.stream_name,
            "group": self.consumer_group,
            "consumer": self.consumer_name,
            "pending_drained": self._pending_drained,
        }
