"""
Pytest configuration and fixtures for Person Enrichment Worker tests.
"""

import asyncio
import json
from typing import Dict, List, Optional, Sequence, Union

import pytest

from people_shared.models.person import LookupCandidate, PersonRecord
from people_services.enrichment_worker.errors import PersonNotFoundError
from people_services.enrichment_worker.metrics import ProcessedCounter
from people_services.enrichment_worker.pipeline import EnrichmentPipeline
from people_services.enrichment_worker.stores.base import PersonStore


class InMemoryPersonStore(PersonStore):
    """Dict-backed store that records every call."""

    def __init__(self, records: Optional[Dict[str, PersonRecord]] = None, work_queue=None):
        super().__init__(work_queue)
        self.records: Dict[str, PersonRecord] = dict(records or {})
        self.reads: List[str] = []
        self.writes: List[tuple] = []
        self.fail_reads: Optional[Exception] = None
        self.fail_writes: Optional[Exception] = None
        self.read_delay = 0.0
        self._next_id = 1000

    async def read(self, person_id: str) -> PersonRecord:
        self.reads.append(person_id)
        if self.read_delay:
            await asyncio.sleep(self.read_delay)
        if self.fail_reads:
            raise self.fail_reads
        if person_id not in self.records:
            raise PersonNotFoundError(person_id)
        return self.records[person_id].model_copy()

    async def _insert(self, record: PersonRecord) -> PersonRecord:
        self._next_id += 1
        created = record.model_copy(update={"id": str(self._next_id)})
        self.records[created.id] = created
        return created

    async def _replace(self, person_id: str, record: PersonRecord) -> PersonRecord:
        if self.fail_writes:
            raise self.fail_writes
        if person_id not in self.records:
            raise PersonNotFoundError(person_id)
        updated = record.model_copy(update={"id": person_id})
        self.records[person_id] = updated
        return updated

    async def update(self, person_id: str, record: PersonRecord, queue_person: bool = False) -> PersonRecord:
        self.writes.append((person_id, queue_person))
        return await super().update(person_id, record, queue_person=queue_person)

    async def delete(self, person_id: str) -> None:
        self.records.pop(person_id, None)


class StubLookupClient:
    """
    Lookup client returning canned results.

    responses is consumed one entry per call; an Exception entry is raised,
    a list entry is returned. The last entry repeats.
    """

    def __init__(self, responses: Sequence[Union[List[LookupCandidate], Exception]] = ()):
        self.responses = list(responses) or [[]]
        self.calls: List[str] = []

    async def search(self, email: str) -> List[LookupCandidate]:
        index = min(len(self.calls), len(self.responses) - 1)
        self.calls.append(email)
        response = self.responses[index]
        if isinstance(response, Exception):
            raise response
        return list(response)


class FakeRedisClient:
    """Just enough of RedisClient for the document store and work queue."""

    def __init__(self):
        self.data: Dict[str, str] = {}
        self.streams: Dict[str, List[tuple]] = {}

    async def get(self, key):
        value = self.data.get(key)
        return json.loads(value) if value is not None else None

    async def set(self, key, value):
        self.data[key] = value if isinstance(value, str) else json.dumps(value)
        return True

    async def exists(self, key):
        return key in self.data

    async def delete(self, *keys):
        return sum(1 for key in keys if self.data.pop(key, None) is not None)

    async def incr(self, key):
        value = int(self.data.get(key, "0")) + 1
        self.data[key] = str(value)
        return value

    async def xadd(self, name, fields, maxlen=None, approximate=True):
        entries = self.streams.setdefault(name, [])
        message_id = f"{len(entries) + 1}-0"
        entries.append((message_id, dict(fields)))
        return message_id


@pytest.fixture
def person_42() -> PersonRecord:
    """Stored record from the worked scenario."""
    return PersonRecord(
        id="42",
        email="a@x.com",
        first_name="A",
        image_url="https://images.example.com/42.png",
        created_by="Jane Doe",
        created_by_id="user-7",
    )


@pytest.fixture
def anna_candidate() -> LookupCandidate:
    return LookupCandidate(
        email="a@y.com",
        first_name="Anna",
        last_name="Smith",
        phone="555",
        street_address="1 Main St",
        city="Springfield",
        zipcode="12345",
        description="Found in the directory",
    )


@pytest.fixture
def counter() -> ProcessedCounter:
    return ProcessedCounter()


@pytest.fixture
def store(person_42) -> InMemoryPersonStore:
    return InMemoryPersonStore({"42": person_42})


@pytest.fixture
def lookup(anna_candidate) -> StubLookupClient:
    return StubLookupClient([[anna_candidate]])


@pytest.fixture
def pipeline(store, lookup, counter) -> EnrichmentPipeline:
    """Pipeline with three lookup attempts and no backoff delay."""
    return EnrichmentPipeline(
        store,
        lookup,
        counter=counter,
        store_timeout=1.0,
        lookup_max_attempts=3,
        lookup_backoff_max=0,
    )


@pytest.fixture
def fake_redis() -> FakeRedisClient:
    return FakeRedisClient()
