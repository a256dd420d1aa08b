"""
Redis-backed document store

Each person is one JSON document (camelCase keys) under people:{id};
ids come from an INCR counter.
"""

from typing import Optional

from people_shared.models.person import PersonRecord
from people_shared.utils.redis_client import RedisClient

from ..errors import PersonNotFoundError
from ..work_queue import PersonWorkQueue
from .base import PersonStore


class RedisPersonStore(PersonStore):

    def __init__(
        self,
        redis_client: RedisClient,
        work_queue: Optional[PersonWorkQueue] = None,
        key_prefix: str = "people"
    ):
        super().__init__(work_queue)
        self.redis = redis_client
        self.key_prefix = key_prefix

    def _key(self, person_id: str) -> str:
        return f"{self.key_prefix}:{person_id}"

    async def read(self, person_id: str) -> PersonRecord:
        document = await self.redis.get(self._key(person_id))
        if not isinstance(document, dict):
            raise PersonNotFoundError(person_id)
        document["id"] = person_id
        return PersonRecord.model_validate(document)

    async def _insert(self, record: PersonRecord) -> PersonRecord:
        new_id = str(await self.redis.incr(f"{self.key_prefix}:next_id"))
        created = record.model_copy(update={"id": new_id})
        await self.redis.set(self._key(new_id), created.to_document())
        return created

    async def _replace(self, person_id: str, record: PersonRecord) -> PersonRecord:
        if not await self.redis.exists(self._key(person_id)):
            raise PersonNotFoundError(person_id)
        updated = record.model_copy(update={"id": str(person_id)})
        await self.redis.set(self._key(person_id), updated.to_document())
        return updated

    async def delete(self, person_id: str) -> None:
        await self.redis.delete(self._key(person_id))
