"""
Utility modules
"""

from .logger import configure_logging, delivery_context, get_logger
from .redis_client import RedisClient
from .postgres_client import PostgresClient

__all__ = [
    "configure_logging",
    "delivery_context",
    "get_logger",
    "RedisClient",
    "PostgresClient",
]
