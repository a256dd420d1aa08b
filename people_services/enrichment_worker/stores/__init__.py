"""
Record store variants and the factory that picks one from configuration
"""

from typing import Optional

from people_shared.config.settings import DataBackend
from people_shared.utils.postgres_client import PostgresClient
from people_shared.utils.redis_client import RedisClient

from ..work_queue import PersonWorkQueue
from .base import PersonStore
from .postgres_store import PostgresPersonStore
from .redis_store import RedisPersonStore


def build_person_store(
    backend: DataBackend,
    work_queue: Optional[PersonWorkQueue] = None,
    redis_client: Optional[RedisClient] = None,
    postgres_client: Optional[PostgresClient] = None
) -> PersonStore:
    """
    Build the record store for the configured backend

    Raises:
        ValueError: the client required by the backend was not supplied
    """
    if backend is DataBackend.POSTGRES:
        if postgres_client is None:
            raise ValueError("postgres backend requires a PostgresClient")
        return PostgresPersonStore(postgres_client, work_queue)

    if backend is DataBackend.REDIS:
        if redis_client is None:
            raise ValueError("redis backend requires a RedisClient")
        return RedisPersonStore(redis_client, work_queue)

    raise ValueError(f"unsupported data backend: {backend}")


__all__ = [
    "PersonStore",
    "PostgresPersonStore",
    "RedisPersonStore",
    "build_person_store",
]
