"""
Work Queue Publisher

Publishes processPerson work messages to the person work stream.
Record stores call queue_person() after create, and after update when
requeue is requested; the enrichment write path always suppresses it.
"""

from typing import Optional

from people_shared.config.settings import settings
from people_shared.models.person import WorkAction, WorkMessage
from people_shared.utils.redis_client import RedisClient
from people_shared.utils.logger import get_logger

logger = get_logger(__name__)


class PersonWorkQueue:
    """
    Producer side of the person work stream
    """

    def __init__(
        self,
        redis_client: RedisClient,
        stream_name: Optional[str] = None,
        maxlen: Optional[int] = None
    ):
        self.redis = redis_client
        self.stream_name = stream_name or settings.stream_person_work
        self.maxlen = maxlen or settings.stream_maxlen

    async def queue_person(self, person_id: str) -> str:
        """
        Queue a person for enrichment

        Returns:
            Stream entry id
        """
        message = WorkMessage(action=WorkAction.PROCESS_PERSON.value, person_id=person_id)
        message_id = await self.redis.xadd(
            self.stream_name,
            message.to_stream_fields(),
            maxlen=self.maxlen,
            approximate=True
        )
        logger.info("person_queued", person_id=message.person_id, message_id=message_id)
        return message_id
