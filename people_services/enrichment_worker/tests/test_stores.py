"""
Tests for the record store variants and the work queue.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from people_shared.config.settings import DataBackend
from people_shared.models.person import PersonRecord
from people_services.enrichment_worker.errors import PersonNotFoundError
from people_services.enrichment_worker.stores import (
    PostgresPersonStore,
    RedisPersonStore,
    build_person_store,
)
from people_services.enrichment_worker.work_queue import PersonWorkQueue


@pytest.fixture
def work_queue(fake_redis) -> PersonWorkQueue:
    return PersonWorkQueue(fake_redis, stream_name="people:work", maxlen=100)


class TestPersonWorkQueue:

    def test_queue_person_publishes_process_person(self, fake_redis, work_queue):
        message_id = asyncio.run(work_queue.queue_person("42"))

        assert message_id == "1-0"
        assert fake_redis.streams["people:work"] == [
            ("1-0", {"action": "processPerson", "personId": "42"})
        ]


class TestRedisPersonStore:
    """Document store backed by Redis JSON values."""

    def test_create_assigns_id_and_queues(self, fake_redis, work_queue):
        store = RedisPersonStore(fake_redis, work_queue)

        created = asyncio.run(store.create(PersonRecord(email="a@x.com", first_name="A")))

        assert created.id == "1"
        assert fake_redis.streams["people:work"][0][1]["personId"] == "1"

    def test_create_without_queue(self, fake_redis, work_queue):
        store = RedisPersonStore(fake_redis, work_queue)

        asyncio.run(store.create(PersonRecord(email="a@x.com"), queue_person=False))

        assert "people:work" not in fake_redis.streams

    def test_documents_use_camel_case(self, fake_redis):
        store = RedisPersonStore(fake_redis)

        created = asyncio.run(store.create(PersonRecord(first_name="A"), queue_person=False))

        document = asyncio.run(fake_redis.get(f"people:{created.id}"))
        assert document["fName"] == "A"
        assert document["createdBy"] == "Anonymous"

    def test_read_returns_stored_record(self, fake_redis):
        store = RedisPersonStore(fake_redis)
        created = asyncio.run(store.create(PersonRecord(email="a@x.com"), queue_person=False))

        record = asyncio.run(store.read(created.id))

        assert record == created

    def test_read_missing_raises_not_found(self, fake_redis):
        store = RedisPersonStore(fake_redis)

        with pytest.raises(PersonNotFoundError):
            asyncio.run(store.read("99"))

    def test_update_keeps_identifier_and_suppresses_requeue(self, fake_redis, work_queue):
        store = RedisPersonStore(fake_redis, work_queue)
        created = asyncio.run(store.create(PersonRecord(email="a@x.com"), queue_person=False))

        updated = asyncio.run(store.update(
            created.id,
            PersonRecord(id="other", email="b@x.com"),
            queue_person=False,
        ))

        assert updated.id == created.id
        assert asyncio.run(store.read(created.id)).email == "b@x.com"
        assert "people:work" not in fake_redis.streams

    def test_update_with_requeue_publishes(self, fake_redis, work_queue):
        store = RedisPersonStore(fake_redis, work_queue)
        created = asyncio.run(store.create(PersonRecord(email="a@x.com"), queue_person=False))

        asyncio.run(store.update(created.id, PersonRecord(email="c@x.com"), queue_person=True))

        assert len(fake_redis.streams["people:work"]) == 1

    def test_update_missing_raises_not_found(self, fake_redis):
        store = RedisPersonStore(fake_redis)

        with pytest.raises(PersonNotFoundError):
            asyncio.run(store.update("99", PersonRecord(email="b@x.com")))

    def test_delete(self, fake_redis):
        store = RedisPersonStore(fake_redis)
        created = asyncio.run(store.create(PersonRecord(email="a@x.com"), queue_person=False))

        asyncio.run(store.delete(created.id))

        with pytest.raises(PersonNotFoundError):
            asyncio.run(store.read(created.id))


class TestPostgresPersonStore:
    """SQL store against a mocked PostgresClient."""

    ROW = {
        "id": 42,
        "email": "a@x.com",
        "first_name": "A",
        "last_name": None,
        "phone": None,
        "street_address": None,
        "city": None,
        "zipcode": None,
        "join_date": None,
        "image_url": None,
        "description": None,
        "created_by": "Jane Doe",
        "created_by_id": "user-7",
    }

    def test_read_maps_row_to_record(self):
        db = AsyncMock()
        db.fetchrow.return_value = dict(self.ROW)
        store = PostgresPersonStore(db)

        record = asyncio.run(store.read("42"))

        assert record.id == "42"
        assert record.first_name == "A"
        assert db.fetchrow.await_args.args[1] == 42

    def test_read_missing_raises_not_found(self):
        db = AsyncMock()
        db.fetchrow.return_value = None
        store = PostgresPersonStore(db)

        with pytest.raises(PersonNotFoundError):
            asyncio.run(store.read("42"))

    def test_non_numeric_id_is_not_found_without_query(self):
        db = AsyncMock()
        store = PostgresPersonStore(db)

        with pytest.raises(PersonNotFoundError):
            asyncio.run(store.read("abc"))

        assert db.fetchrow.await_count == 0

    def test_update_targets_id_and_skips_queue(self):
        db = AsyncMock()
        db.fetchrow.return_value = dict(self.ROW, email="a@y.com")
        queue = AsyncMock()
        store = PostgresPersonStore(db, queue)

        updated = asyncio.run(store.update("42", PersonRecord(id="42", email="a@y.com"), queue_person=False))

        query, *args = db.fetchrow.await_args.args
        assert query.startswith("UPDATE people SET email = $1")
        assert args[-1] == 42
        assert "a@y.com" in args
        assert updated.email == "a@y.com"
        assert queue.queue_person.await_count == 0

    def test_update_missing_raises_not_found(self):
        db = AsyncMock()
        db.fetchrow.return_value = None
        store = PostgresPersonStore(db)

        with pytest.raises(PersonNotFoundError):
            asyncio.run(store.update("42", PersonRecord(email="a@y.com")))

    def test_create_inserts_and_queues(self):
        db = AsyncMock()
        db.fetchrow.return_value = dict(self.ROW)
        queue = AsyncMock()
        store = PostgresPersonStore(db, queue)

        created = asyncio.run(store.create(PersonRecord(email="a@x.com")))

        assert db.fetchrow.await_args.args[0].startswith("INSERT INTO people")
        queue.queue_person.assert_awaited_once_with(created.id)

    def test_delete(self):
        db = AsyncMock()
        store = PostgresPersonStore(db)

        asyncio.run(store.delete("42"))

        db.execute.assert_awaited_once_with("DELETE FROM people WHERE id = $1", 42)


class TestBuildPersonStore:

    def test_selects_postgres(self):
        store = build_person_store(DataBackend.POSTGRES, postgres_client=AsyncMock())
        assert isinstance(store, PostgresPersonStore)

    def test_selects_redis(self, fake_redis):
        store = build_person_store(DataBackend.REDIS, redis_client=fake_redis)
        assert isinstance(store, RedisPersonStore)

    def test_missing_client_is_rejected(self):
        with pytest.raises(ValueError):
            build_person_store(DataBackend.POSTGRES)
