"""
Record store interface

A store persists PersonRecords and, when asked to, hands the affected
id to the work queue so the enrichment worker picks it up.
"""

from abc import ABC, abstractmethod
from typing import Optional

from people_shared.models.person import PersonRecord
from people_shared.utils.logger import get_logger

from ..work_queue import PersonWorkQueue

logger = get_logger(__name__)


class PersonStore(ABC):
    """Persistence for person records"""

    def __init__(self, work_queue: Optional[PersonWorkQueue] = None):
        self.work_queue = work_queue

    @abstractmethod
    async def read(self, person_id: str) -> PersonRecord:
        """Raises PersonNotFoundError when the id is unknown"""

    @abstractmethod
    async def _insert(self, record: PersonRecord) -> PersonRecord:
        ...

    @abstractmethod
    async def _replace(self, person_id: str, record: PersonRecord) -> PersonRecord:
        ...

    @abstractmethod
    async def delete(self, person_id: str) -> None:
        ...

    async def create(self, record: PersonRecord, queue_person: bool = True) -> PersonRecord:
        """
        Insert a new record; the store assigns the id

        Args:
            record: Data to insert (any id on it is ignored)
            queue_person: Publish a processPerson message for the new id
        """
        created = await self._insert(record)
        logger.info("person_created", person_id=created.id)
        if queue_person:
            await self._queue(created.id)
        return created

    async def update(
        self,
        person_id: str,
        record: PersonRecord,
        queue_person: bool = False
    ) -> PersonRecord:
        """
        Overwrite the record stored under person_id

        The identifier is taken from person_id, never from the record.
        With queue_person=False nothing is published, which is what the
        enrichment worker relies on to avoid re-queueing its own writes.
        """
        updated = await self._replace(person_id, record)
        logger.debug("person_updated", person_id=person_id, queued=queue_person)
        if queue_person:
            await self._queue(updated.id)
        return updated

    async def _queue(self, person_id: Optional[str]) -> None:
        if self.work_queue is None:
            logger.warning("person_not_queued_no_work_queue", person_id=person_id)
            return
        await self.work_queue.queue_person(person_id)
